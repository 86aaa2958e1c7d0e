"""
微信支付（WeChat）解析器
解析微信支付账单流水CSV格式
"""
from ..base_parser import BaseParser
from ..errors import UnrecognizedStatusError
from ..models import ProviderFormat, RawTransactionRecord


class WeChatParser(BaseParser):
    """
    微信支付解析器
    列：交易时间, 交易类型, 交易对方, 商品, 收/支, 金额(元), 支付方式, 当前状态,
    交易单号, 商户单号, 备注
    """

    PROVIDER = ProviderFormat.WECHAT

    HEADER_MARKER = "交易时间"

    COLUMNS = {
        "timestamp": 0,
        "trade_type": 1,
        "counterparty": 2,
        "description": 3,
        "direction": 4,
        "amount": 5,
        "account": 6,
        "status": 7,
    }

    # 等同于交易成功的状态
    SUCCESS_STATUS = [
        "支付成功",
        "已收钱",
        "对方已收钱",
        "朋友已收钱",
        "已存入零钱",
        "已转账",
        "已到账",
        "提现已到账",
        "充值完成",
        "已全额退款",
    ]

    # 退款状态前缀，如 "已退款(￥12.00)"
    REFUND_STATUS_PREFIXES = ["已退款", "已部分退款"]

    def parse_row(self, fields, source="", row_number=0) -> RawTransactionRecord:
        record = super().parse_row(fields, source, row_number)
        # 零钱提现、转入零钱通等记录商品列为 "/"，使用交易类型作为描述
        if record.description in ("", "/"):
            record.description = record.extra["trade_type"]
        return record

    def is_retained(self, record: RawTransactionRecord) -> bool:
        if record.status in self.SUCCESS_STATUS:
            return True
        for prefix in self.REFUND_STATUS_PREFIXES:
            if record.status.startswith(prefix):
                return True

        raise UnrecognizedStatusError(
            "交易状态不在允许列表中，需要补充状态规则",
            source=record.source, row_number=record.row_number, value=record.status,
        )

    def direction_text(self, record: RawTransactionRecord) -> str:
        return f"{record.extra['trade_type']} {record.description}"
