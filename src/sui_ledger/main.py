"""
主程序入口
读取支付宝、微信支付账单，生成按时间排序的统一复式记账流水
"""
import os
import re
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, List, Optional

import typer

from .base_parser import BaseParser
from .errors import ConversionError, SkipRecord, UnsupportedFormatError
from .ledger import LedgerBook
from .logging_setup import configure_logging, get_logger
from .parsers import AlipayParser, WeChatParser
from .reader import read_rows
from .rules import RuleSet, load_rule_set
from .writer import ExcelGenerator, write_csv

logger = get_logger(__name__)

# 文件名匹配规则
# 格式: (正则模式, 解析器类, 描述)
FILE_PATTERNS = [
    (r'alipay|支付宝', AlipayParser, "支付宝"),
    (r'wechat|微信', WeChatParser, "微信支付"),
]

DEFAULT_START = date(1970, 1, 1)
DEFAULT_OUTPUT = os.path.join("output", "ledger.csv")

# 目录模式下扫描的文件扩展名
SCAN_EXTENSION = ".csv"


@dataclass
class FileSummary:
    """
    单个文件的处理统计
    """
    rows: int = 0
    kept: int = 0
    filtered_status: int = 0
    out_of_range: int = 0
    skipped_account: int = 0


def get_parser_class(file_path: str):
    """
    根据文件名匹配规则获取解析器类
    只匹配文件名，不匹配所在目录；同时命中多种格式时报错
    """
    filename = os.path.basename(file_path)

    matched = [
        (parser_class, desc)
        for pattern, parser_class, desc in FILE_PATTERNS
        if re.search(pattern, filename, re.IGNORECASE)
    ]

    if len(matched) > 1:
        raise UnsupportedFormatError(
            f"文件名同时包含多种账单标识: {', '.join(desc for _, desc in matched)}",
            source=file_path,
        )

    if not matched:
        raise UnsupportedFormatError(
            "无法识别文件类型，文件名需包含 alipay/支付宝 或 wechat/微信",
            source=file_path,
        )

    parser_class, desc = matched[0]
    logger.info("识别为: %s", desc)
    return parser_class


def scan_directory(input_dir: str) -> List[str]:
    """
    扫描目录中的CSV账单文件，按文件名排序
    """
    files = []
    for filename in sorted(os.listdir(input_dir)):
        file_path = os.path.join(input_dir, filename)

        if not os.path.isfile(file_path):
            continue

        # 跳过隐藏文件和临时文件
        if filename.startswith('.') or filename.startswith('~'):
            continue

        if os.path.splitext(filename)[1].lower() == SCAN_EXTENSION:
            files.append(file_path)
    return files


class LedgerConverter:
    """
    账本转换器主类
    """

    def __init__(self, rule_set: RuleSet, start: date = DEFAULT_START, end: Optional[date] = None):
        self.rule_set = rule_set
        self.start = start
        self.end = end or date.today()

    def in_range(self, timestamp: datetime) -> bool:
        return self.start <= timestamp.date() <= self.end

    def process_rows(self, parser: BaseParser, rows, source: str, book: LedgerBook) -> FileSummary:
        """
        逐行处理，结果写入账本
        """
        summary = FileSummary()

        for row_number, fields in rows:
            summary.rows += 1
            record = parser.parse_row(fields, source=source, row_number=row_number)

            if not parser.is_retained(record):
                summary.filtered_status += 1
                logger.debug("跳过交易状态 %s: %s 第%d行", record.status, source, row_number)
                continue

            timestamp = parser.parse_timestamp(record)
            if not self.in_range(timestamp):
                summary.out_of_range += 1
                logger.debug("跳过日期范围外记录: %s 第%d行", source, row_number)
                continue

            try:
                entry = parser.to_entry(record, timestamp)
            except SkipRecord as e:
                summary.skipped_account += 1
                logger.warning("跳过记录: %s", e)
                continue

            book.insert(timestamp, entry)
            summary.kept += 1

        return summary

    def process_file(self, file_path: str, book: LedgerBook) -> FileSummary:
        """
        处理单个账单文件
        """
        logger.info("处理文件: %s", os.path.basename(file_path))

        parser = get_parser_class(file_path)(self.rule_set)
        rows = read_rows(file_path, parser.HEADER_MARKER)
        summary = self.process_rows(parser, rows, file_path, book)

        logger.info(
            "解析完成：%d 行，入账 %d 条，状态过滤 %d 条，日期范围外 %d 条，账户无法识别 %d 条",
            summary.rows, summary.kept, summary.filtered_status,
            summary.out_of_range, summary.skipped_account,
        )
        return summary

    def convert(self, file_paths: Iterable[str]) -> LedgerBook:
        """
        依次处理全部文件，返回账本
        """
        book = LedgerBook()
        for file_path in file_paths:
            self.process_file(file_path, book)
        return book


def _parse_date(value: str, option: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise typer.BadParameter(f"日期格式应为 YYYY-MM-DD: {value}", param_hint=option)


app = typer.Typer(add_completion=False, help="支付宝、微信支付账单转换为统一记账流水")


@app.command()
def main(
    files: Optional[List[Path]] = typer.Option(
        None, "-f", "--file", exists=True, dir_okay=False, help="账单文件，可重复"
    ),
    dirs: Optional[List[Path]] = typer.Option(
        None, "-d", "--dir", exists=True, file_okay=False, help="账单目录（扫描 .csv 文件），可重复"
    ),
    start: str = typer.Option(DEFAULT_START.isoformat(), "--start", help="起始日期（含）"),
    end: Optional[str] = typer.Option(None, "--end", help="结束日期（含），默认今天"),
    output: Path = typer.Option(DEFAULT_OUTPUT, "-o", "--output", help="输出CSV路径"),
    excel: Optional[Path] = typer.Option(None, "--excel", help="同时输出Excel账本"),
    config_dir: Optional[Path] = typer.Option(
        None, "--config-dir", exists=True, file_okay=False, help="自定义规则配置目录"
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="输出调试信息"),
    quiet: bool = typer.Option(False, "-q", "--quiet", help="只输出警告和错误"),
):
    """
    转换账单文件并写出按时间排序的账本
    """
    configure_logging("DEBUG" if verbose else "WARNING" if quiet else None)

    if bool(files) == bool(dirs):
        raise typer.BadParameter("必须且只能指定 --file 或 --dir 其中一种")

    start_date = _parse_date(start, "--start")
    end_date = _parse_date(end, "--end") if end else date.today()

    if files:
        file_paths = [os.fspath(p) for p in files]
    else:
        file_paths = []
        for input_dir in dirs:
            file_paths.extend(scan_directory(os.fspath(input_dir)))

    try:
        rule_set = load_rule_set(os.fspath(config_dir) if config_dir else None)
        converter = LedgerConverter(rule_set, start=start_date, end=end_date)
        entries = converter.convert(file_paths).drain()
    except ConversionError as e:
        logger.error("处理失败，未写出任何结果: %s", e)
        raise typer.Exit(code=1)

    write_csv(entries, os.fspath(output))
    if excel:
        ExcelGenerator().generate(entries, os.fspath(excel))

    typer.echo(f"处理完成: {len(file_paths)} 个文件，{len(entries)} 条记录 -> {output}")


if __name__ == "__main__":
    app()
