"""
支付宝（Alipay）解析器
解析支付宝交易明细CSV格式
"""
from ..base_parser import BaseParser
from ..models import ProviderFormat, RawTransactionRecord


class AlipayParser(BaseParser):
    """
    支付宝解析器
    列：收/支, 交易对方, 对方账号, 商品说明, 收/付款方式, 金额, 交易状态, 交易分类,
    交易订单号, 商家订单号, 交易时间
    """

    PROVIDER = ProviderFormat.ALIPAY

    HEADER_MARKER = "收/支"

    COLUMNS = {
        "direction": 0,
        "counterparty": 1,
        "description": 3,
        "account": 4,
        "amount": 5,
        "status": 6,
        "timestamp": 10,
    }

    # 需要跳过的交易状态
    SKIP_STATUS = ["交易关闭"]

    def is_retained(self, record: RawTransactionRecord) -> bool:
        return record.status not in self.SKIP_STATUS
