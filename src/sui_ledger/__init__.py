"""
支付宝、微信支付账单转换为统一复式记账流水
"""
__version__ = "0.1.0"
