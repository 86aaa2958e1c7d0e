"""
日志配置模块

- ``configure_logging(level)``: 由命令行入口调用一次，为包根日志器挂载唯一的
  ``StreamHandler``。
- ``get_logger(name)``: 获取模块日志器；尚未配置时为包根日志器挂 ``NullHandler``。

库模块不自行挂载 handler，只调用 ``get_logger("sui_ledger.<module>")``。
"""
import logging
import os
import sys
from typing import Optional, Union

_PKG_LOGGER_NAME = "sui_ledger"
_CONFIGURED = False


def _parse_level(level: Optional[Union[int, str]]) -> int:
    if level is None:
        level = os.getenv("SUI_LEDGER_LOG_LEVEL")
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        level = level.strip().upper()
        if level.isdigit():
            return int(level)
        numeric = getattr(logging, level, None)
        if isinstance(numeric, int):
            return numeric
    return logging.INFO


def configure_logging(level: Optional[Union[int, str]] = None) -> None:
    """
    配置包根日志器（仅第一次调用生效）

    Args:
        level: 日志级别，整数或级别名；为 None 时读取 SUI_LEDGER_LOG_LEVEL，默认 INFO
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(_parse_level(level))
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))

    logger.setLevel(_parse_level(level))
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """
    获取日志器，未配置时保持静默
    """
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
