"""
分类模块
收/支方向判定、交易对方分类、账户映射
"""
from typing import Dict, Optional, Tuple

from .errors import (
    AmbiguousCounterpartyError,
    InvalidAmountError,
    UnknownDirectionError,
    UnresolvedAccountError,
    UnresolvedSubcategoryError,
)
from .models import Direction, RawTransactionRecord
from .rules import AccountRule, ClassificationRule, CounterpartyRule, DirectionRule


def resolve_amounts(record: RawTransactionRecord, indicators: Dict[str, Direction],
                    table: DirectionRule, text: Optional[str] = None) -> Tuple[str, str]:
    """
    判定金额落在借方还是贷方
    返回：(借方, 贷方)，其中一个为空字符串

    Args:
        record: 原始交易记录
        indicators: 收/支字段取值到方向的映射
        table: 特殊交易方向表（收/支无法识别时按描述匹配）
        text: 用于兜底匹配的文本，默认取描述
    """
    if not record.amount:
        raise InvalidAmountError(
            "金额为空", source=record.source, row_number=record.row_number, value=record.amount,
        )

    direction = indicators.get(record.direction)

    if direction is None:
        text = record.description if text is None else text
        for keyword, candidate in table.fallback:
            if keyword in text:
                direction = candidate
                break

    if direction is None:
        raise UnknownDirectionError(
            f"无法识别收/支方向 {record.direction!r}，需要补充特殊交易规则",
            source=record.source, row_number=record.row_number, value=text,
        )

    if direction is Direction.DEBIT:
        return record.amount, ""
    return "", record.amount


def _resolve_subcategory(rule: CounterpartyRule, record: RawTransactionRecord) -> Tuple[str, str]:
    for sub in rule.subcategories:
        if sub.keyword.search(record.description):
            description = sub.description or rule.description or record.description
            return description, sub.counter_account

    raise UnresolvedSubcategoryError(
        f"交易对方命中规则 {rule.pattern.pattern!r}，但描述未命中任何子分类关键词",
        source=record.source, row_number=record.row_number, value=record.description,
    )


def classify_counterparty(record: RawTransactionRecord,
                          table: ClassificationRule) -> Tuple[str, str]:
    """
    根据交易对方匹配描述和对方账户
    返回：(描述, 对方账户)

    交易对方必须至多命中一条规则；命中多条说明规则表不互斥，直接报错。
    没有命中时按描述查兜底表，仍未命中则使用默认分类并保留原描述。
    """
    matched = [rule for rule in table.rules if rule.pattern.search(record.counterparty)]

    if len(matched) > 1:
        patterns = ", ".join(rule.pattern.pattern for rule in matched)
        raise AmbiguousCounterpartyError(
            f"交易对方同时命中多条分类规则: {patterns}",
            source=record.source, row_number=record.row_number, value=record.counterparty,
        )

    if matched:
        rule = matched[0]
        if rule.subcategories:
            return _resolve_subcategory(rule, record)
        return rule.description or record.description, rule.counter_account

    for fallback in table.description_fallback:
        if fallback.pattern.search(record.description):
            return fallback.description or record.description, fallback.counter_account

    return record.description, table.default_counter_account


def resolve_account(record: RawTransactionRecord, table: AccountRule) -> str:
    """
    将原始账户标签映射为账户路径
    未命中或命中多条都抛出可恢复的 UnresolvedAccountError
    """
    matched = [path for pattern, path in table.rules if pattern.search(record.account)]

    if len(matched) == 1:
        return matched[0]

    if matched:
        message = f"账户标签命中多条账户规则: {', '.join(matched)}"
    else:
        message = "账户标签未命中任何账户规则"
    raise UnresolvedAccountError(
        message, source=record.source, row_number=record.row_number, value=record.account,
    )
