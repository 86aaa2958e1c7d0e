"""Builders for small provider exports used across the test modules."""

import json
from pathlib import Path
from typing import List, Sequence

ALIPAY_HEADER = [
    "收/支", "交易对方", "对方账号", "商品说明", "收/付款方式", "金额",
    "交易状态", "交易分类", "交易订单号", "商家订单号", "交易时间",
]

WECHAT_HEADER = [
    "交易时间", "交易类型", "交易对方", "商品", "收/支", "金额(元)",
    "支付方式", "当前状态", "交易单号", "商户单号", "备注",
]


def alipay_row(direction="支出", counterparty="美团外卖", description="午餐",
               account="余额", amount="32.50", status="交易成功",
               timestamp="2021-05-01 12:00:00") -> List[str]:
    return [direction, counterparty, "", description, account, amount,
            status, "餐饮美食", "2021050100001", "", timestamp]


def wechat_row(timestamp="2021-05-01 12:00:00", trade_type="商户消费",
               counterparty="滴滴出行", description="快车", direction="支出",
               amount="¥25.00", account="零钱", status="支付成功") -> List[str]:
    return [timestamp, trade_type, counterparty, description, direction,
            amount, account, status, "100001", "200001", "/"]


def write_export(path: Path, header: Sequence[str], rows: Sequence[Sequence[str]],
                 preamble: Sequence[str] = (), footer: Sequence[str] = (),
                 encoding: str = "utf-8") -> Path:
    lines = list(preamble)
    lines.append(",".join(header))
    lines.extend(",".join(row) for row in rows)
    lines.extend(footer)
    path.write_text("\n".join(lines) + "\n", encoding=encoding)
    return path


def update_json(path: Path, mutate) -> None:
    data = json.loads(path.read_text(encoding="utf-8"))
    mutate(data)
    path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
