"""
账本输出模块
CSV：六列、无表头；Excel：带表头样式，便于人工核对
"""
import os
from typing import List

import openpyxl
import pandas as pd
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from .logging_setup import get_logger
from .models import LedgerEntry

logger = get_logger(__name__)

# 输出列
COLUMNS = ["timestamp", "description", "account", "counter_account", "debit", "credit"]


def _ensure_parent(output_path: str):
    parent = os.path.dirname(output_path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def write_csv(entries: List[LedgerEntry], output_path: str):
    """
    写出CSV账本
    """
    _ensure_parent(output_path)
    df = pd.DataFrame([entry.to_row() for entry in entries], columns=COLUMNS)
    df.to_csv(output_path, header=False, index=False, encoding="utf-8", lineterminator="\n")
    logger.info("成功保存文件：%s（%d 条记录）", output_path, len(entries))


class ExcelGenerator:
    """
    Excel生成器类
    """

    # 表头
    HEADERS = [
        "时间",      # A
        "摘要",      # B
        "账户",      # C
        "对方账户",  # D
        "借方",      # E
        "贷方",      # F
    ]

    COLUMN_WIDTHS = [20, 30, 30, 30, 12, 12]

    def __init__(self):
        self.workbook = None
        self.worksheet = None
        self.start_row = 2

    def _create_workbook(self):
        """
        创建新的工作簿并设置表头
        """
        self.workbook = openpyxl.Workbook()
        self.worksheet = self.workbook.active
        self.worksheet.title = "账本"

        header_font = Font(bold=True)
        header_fill = PatternFill(start_color="DAEEF3", end_color="DAEEF3", fill_type="solid")
        header_alignment = Alignment(horizontal="center", vertical="center")
        thin_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

        for col, header in enumerate(self.HEADERS, 1):
            cell = self.worksheet.cell(row=1, column=col, value=header)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = header_alignment
            cell.border = thin_border

        for col, width in enumerate(self.COLUMN_WIDTHS, 1):
            self.worksheet.column_dimensions[openpyxl.utils.get_column_letter(col)].width = width

    def add_entry(self, entry: LedgerEntry):
        """
        添加账本条目，金额保持原始文本
        """
        if self.worksheet is None:
            raise RuntimeError("请先创建工作簿")

        for col, value in enumerate(entry.to_row(), 1):
            self.worksheet.cell(row=self.start_row, column=col, value=value)
        self.start_row += 1

    def save(self, output_path: str):
        """
        保存Excel文件
        """
        if self.workbook is None:
            raise RuntimeError("没有工作簿可保存")

        _ensure_parent(output_path)
        self.workbook.save(output_path)
        logger.info("成功保存文件：%s", output_path)

    def generate(self, entries: List[LedgerEntry], output_path: str):
        """
        生成Excel账本
        """
        self._create_workbook()
        for entry in entries:
            self.add_entry(entry)
        self.save(output_path)
