"""
规则表模块
从 config 目录加载有序规则表：分类规则、账户规则、特殊交易方向规则
规则以数据形式维护，新增商户或账户只需修改 JSON 配置
"""
import json
import os
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Tuple

from .errors import RuleConfigError
from .models import Direction

CONFIG_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "config")

COUNTERPARTY_RULES_FILE = "counterparty_rules.json"
ACCOUNT_RULES_FILE = "account_rules.json"
DIRECTION_RULES_FILE = "direction_rules.json"


@dataclass(frozen=True)
class Subcategory:
    """
    按描述关键词细分的子分类
    """
    keyword: Pattern
    counter_account: str
    description: Optional[str] = None


@dataclass(frozen=True)
class CounterpartyRule:
    """
    单条交易对方规则
    counter_account 为空时必须提供 subcategories
    """
    pattern: Pattern
    counter_account: Optional[str] = None
    description: Optional[str] = None
    subcategories: Tuple[Subcategory, ...] = ()


@dataclass(frozen=True)
class DescriptionRule:
    """
    交易对方无命中时按描述兜底的规则
    """
    pattern: Pattern
    counter_account: str
    description: Optional[str] = None


@dataclass(frozen=True)
class ClassificationRule:
    """
    分类规则表，规则之间应互斥
    """
    rules: Tuple[CounterpartyRule, ...]
    description_fallback: Tuple[DescriptionRule, ...]
    default_counter_account: str


@dataclass(frozen=True)
class AccountRule:
    """
    账户规则表：(模式, 账户路径) 的有序列表
    """
    rules: Tuple[Tuple[Pattern, str], ...]


@dataclass(frozen=True)
class DirectionRule:
    """
    特殊交易方向表：(描述子串, 方向) 的有序列表，首个命中生效
    """
    fallback: Tuple[Tuple[str, Direction], ...]


@dataclass(frozen=True)
class RuleSet:
    """
    一次运行使用的全部规则表
    """
    classification: ClassificationRule
    accounts: AccountRule
    directions: DirectionRule


def validate_account_path(path, filename: str) -> str:
    """
    校验账户路径：冒号分隔，每段非空
    """
    if not isinstance(path, str) or not path:
        raise RuleConfigError("账户路径必须是非空字符串", source=filename, value=repr(path))
    if any(not segment for segment in path.split(":")):
        raise RuleConfigError("账户路径存在空段", source=filename, value=path)
    return path


def _compile(pattern, filename: str) -> Pattern:
    if not isinstance(pattern, str) or not pattern:
        raise RuleConfigError("规则模式必须是非空字符串", source=filename, value=repr(pattern))
    try:
        return re.compile(pattern)
    except re.error as e:
        raise RuleConfigError(f"正则表达式无效: {e}", source=filename, value=pattern)


def _load_json(config_dir: str, filename: str):
    """
    读取单个规则配置文件
    """
    config_path = os.path.join(config_dir, filename)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        raise RuleConfigError("配置文件未找到", source=config_path)
    except json.JSONDecodeError as e:
        raise RuleConfigError(f"配置文件解析失败 {e}", source=config_path)


def _parse_subcategories(items, filename: str) -> Tuple[Subcategory, ...]:
    subcategories = []
    for item in items:
        subcategories.append(Subcategory(
            keyword=_compile(item.get("keyword"), filename),
            counter_account=validate_account_path(item.get("counter_account"), filename),
            description=item.get("description"),
        ))
    return tuple(subcategories)


def parse_classification(data: dict, filename: str = COUNTERPARTY_RULES_FILE) -> ClassificationRule:
    """
    解析分类规则配置
    """
    try:
        default = validate_account_path(data["default_counter_account"], filename)
        rules = []
        for item in data.get("rules", []):
            subcategories = _parse_subcategories(item.get("subcategories", []), filename)
            counter_account = item.get("counter_account")
            if counter_account is None and not subcategories:
                raise RuleConfigError("规则缺少 counter_account 或 subcategories",
                                      source=filename, value=item.get("pattern"))
            if counter_account is not None:
                validate_account_path(counter_account, filename)
            rules.append(CounterpartyRule(
                pattern=_compile(item.get("pattern"), filename),
                counter_account=counter_account,
                description=item.get("description"),
                subcategories=subcategories,
            ))

        fallback = []
        for item in data.get("description_fallback", []):
            fallback.append(DescriptionRule(
                pattern=_compile(item.get("pattern"), filename),
                counter_account=validate_account_path(item.get("counter_account"), filename),
                description=item.get("description"),
            ))
    except (KeyError, AttributeError, TypeError) as e:
        raise RuleConfigError(f"分类规则格式错误: {e!r}", source=filename)

    return ClassificationRule(
        rules=tuple(rules),
        description_fallback=tuple(fallback),
        default_counter_account=default,
    )


def parse_accounts(data: dict, filename: str = ACCOUNT_RULES_FILE) -> AccountRule:
    """
    解析账户规则配置
    """
    try:
        rules = tuple(
            (_compile(pattern, filename), validate_account_path(path, filename))
            for pattern, path in data["rules"]
        )
    except (KeyError, TypeError, ValueError) as e:
        raise RuleConfigError(f"账户规则格式错误: {e!r}", source=filename)
    return AccountRule(rules=rules)


def parse_directions(data: dict, filename: str = DIRECTION_RULES_FILE) -> DirectionRule:
    """
    解析特殊交易方向配置
    """
    fallback: List[Tuple[str, Direction]] = []
    try:
        for keyword, direction in data["fallback"]:
            if not keyword:
                raise RuleConfigError("方向规则关键词不能为空", source=filename)
            fallback.append((keyword, Direction(direction)))
    except (KeyError, TypeError, ValueError) as e:
        raise RuleConfigError(f"方向规则格式错误: {e!r}", source=filename)
    return DirectionRule(fallback=tuple(fallback))


def load_rule_set(config_dir: Optional[str] = None) -> RuleSet:
    """
    加载全部规则表

    Args:
        config_dir: 自定义配置目录，默认使用包内 config 目录
    """
    config_dir = config_dir or CONFIG_DIR
    return RuleSet(
        classification=parse_classification(_load_json(config_dir, COUNTERPARTY_RULES_FILE)),
        accounts=parse_accounts(_load_json(config_dir, ACCOUNT_RULES_FILE)),
        directions=parse_directions(_load_json(config_dir, DIRECTION_RULES_FILE)),
    )
