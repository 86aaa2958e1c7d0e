"""
基础解析器模块
定义抽象解析器基类：字段提取、状态过滤、时间解析、生成账本条目
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Sequence

from .classifier import classify_counterparty, resolve_account, resolve_amounts
from .errors import InvalidTimestampError, MalformedRowError
from .models import Direction, LedgerEntry, ProviderFormat, RawTransactionRecord
from .rules import RuleSet


class BaseParser(ABC):
    """
    基础解析器抽象类
    """

    # 账单格式
    PROVIDER: ProviderFormat

    # 表头行首列内容，用于跳过账单头部说明
    HEADER_MARKER: str

    # 字段名 -> 列序号
    COLUMNS: Dict[str, int] = {}

    # 收/支字段取值 -> 方向
    DIRECTIONS = {
        "支出": Direction.DEBIT,
        "其他": Direction.DEBIT,
        "收入": Direction.CREDIT,
    }

    # 交易时间格式
    TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

    def __init__(self, rule_set: RuleSet):
        """
        初始化解析器
        """
        self.rule_set = rule_set

    @property
    def min_columns(self) -> int:
        return max(self.COLUMNS.values()) + 1

    def parse_row(self, fields: Sequence[str], source: str = "", row_number: int = 0) -> RawTransactionRecord:
        """
        按列序号提取原始交易记录，不校验内容
        """
        if len(fields) < self.min_columns:
            raise MalformedRowError(
                f"字段数 {len(fields)} 少于 {self.PROVIDER.value} 格式要求的 {self.min_columns}",
                source=source, row_number=row_number, value=",".join(fields),
            )

        values = {name: fields[index] for name, index in self.COLUMNS.items()}
        core = {
            name: values.pop(name)
            for name in ("direction", "counterparty", "description",
                         "amount", "account", "status", "timestamp")
        }
        return RawTransactionRecord(
            provider=self.PROVIDER,
            source=source,
            row_number=row_number,
            extra=values,
            **core
        )

    @abstractmethod
    def is_retained(self, record: RawTransactionRecord) -> bool:
        """
        判断交易状态是否为已完成、需要入账的交易
        """
        pass

    def parse_timestamp(self, record: RawTransactionRecord) -> datetime:
        """
        解析交易时间
        """
        try:
            return datetime.strptime(record.timestamp, self.TIME_FORMAT)
        except ValueError:
            raise InvalidTimestampError(
                "交易时间格式无法解析", source=record.source,
                row_number=record.row_number, value=record.timestamp,
            )

    def direction_text(self, record: RawTransactionRecord) -> str:
        """
        收/支无法识别时用于匹配特殊交易的文本
        """
        return record.description

    def to_entry(self, record: RawTransactionRecord, timestamp: datetime) -> LedgerEntry:
        """
        生成账本条目
        分类失败为致命错误；账户映射失败抛出 UnresolvedAccountError 由调用方跳过
        """
        debit, credit = resolve_amounts(
            record, self.DIRECTIONS, self.rule_set.directions, self.direction_text(record)
        )
        description, counter_account = classify_counterparty(record, self.rule_set.classification)
        account = resolve_account(record, self.rule_set.accounts)

        return LedgerEntry(
            timestamp=timestamp,
            description=description,
            account=account,
            counter_account=counter_account,
            debit=debit,
            credit=credit,
        )
