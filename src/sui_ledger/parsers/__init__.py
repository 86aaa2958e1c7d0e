"""
账单解析器模块
"""
from .alipay_parser import AlipayParser
from .wechat_parser import WeChatParser

__all__ = ["AlipayParser", "WeChatParser"]
