"""
异常定义模块
ConversionError 为致命错误（中止整个运行），SkipRecord 为可恢复错误（跳过单条记录）
"""
from typing import Optional


class LedgerError(Exception):
    """
    账本转换异常基类
    携带来源文件、行号和出错字段内容，便于补充规则表
    """

    def __init__(self, message: str, source: str = "", row_number: Optional[int] = None,
                 value: Optional[str] = None):
        self.message = message
        self.source = source
        self.row_number = row_number
        self.value = value
        super().__init__(self._format())

    def _format(self) -> str:
        parts = [self.message]
        if self.value is not None:
            parts.append(f"内容: {self.value!r}")
        if self.source:
            location = self.source
            if self.row_number is not None:
                location = f"{location} 第{self.row_number}行"
            parts.append(f"位置: {location}")
        return " | ".join(parts)


class ConversionError(LedgerError):
    """致命错误，整个运行中止且不写出任何结果"""


class UnsupportedFormatError(ConversionError):
    """无法根据文件名识别账单格式"""


class MalformedRowError(ConversionError):
    """行字段数少于格式要求"""


class InvalidTimestampError(ConversionError):
    """交易时间无法解析"""


class InvalidAmountError(ConversionError):
    """金额为空，无法确定借贷金额"""


class UnrecognizedStatusError(ConversionError):
    """交易状态不在允许列表中"""


class UnknownDirectionError(ConversionError):
    """收/支方向无法识别，且描述未命中任何特殊交易规则"""


class AmbiguousCounterpartyError(ConversionError):
    """交易对方同时命中多条分类规则"""


class UnresolvedSubcategoryError(ConversionError):
    """分类规则需要按描述细分，但没有关键词命中"""


class RuleConfigError(ConversionError):
    """规则配置文件缺失或格式错误"""


class SkipRecord(LedgerError):
    """可恢复错误，记录诊断信息后跳过该条记录"""


class UnresolvedAccountError(SkipRecord):
    """账户标签未命中或命中多条账户规则"""
