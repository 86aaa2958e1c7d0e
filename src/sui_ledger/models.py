"""
数据模型定义模块
定义原始交易记录和统一账本条目的数据结构
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List


# 输出时间格式
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class ProviderFormat(Enum):
    """
    账单来源格式
    """
    ALIPAY = "支付宝"
    WECHAT = "微信支付"


class Direction(Enum):
    """
    金额落在借方（流出）还是贷方（流入）
    """
    DEBIT = "debit"
    CREDIT = "credit"


@dataclass
class RawTransactionRecord:
    """
    原始交易记录，每行创建一次，处理后即丢弃
    """
    provider: ProviderFormat
    direction: str
    counterparty: str
    description: str
    amount: str
    account: str
    status: str
    timestamp: str
    source: str = ""
    row_number: int = 0
    extra: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class LedgerEntry:
    """
    统一账本条目
    借方、贷方恰好一个非空
    """
    timestamp: datetime
    description: str
    account: str
    counter_account: str
    debit: str = ""
    credit: str = ""

    def __post_init__(self):
        if bool(self.debit) == bool(self.credit):
            raise ValueError(
                f"借方和贷方必须恰好一个非空: debit={self.debit!r} credit={self.credit!r}"
            )

    def to_row(self) -> List[str]:
        """
        转换为六列输出行
        """
        return [
            self.timestamp.strftime(TIMESTAMP_FORMAT),
            self.description,
            self.account,
            self.counter_account,
            self.debit,
            self.credit,
        ]
