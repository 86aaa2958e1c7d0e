"""
账单读取模块
读取CSV账单文件，跳过头部说明和尾部统计，逐行返回字段列表
"""
from typing import Iterator, List, Tuple

import pandas as pd

from .errors import MalformedRowError
from .logging_setup import get_logger

logger = get_logger(__name__)

# 账单文件可能的编码，依次尝试
ENCODINGS = ["utf-8-sig", "gbk"]

# 读取时预留的最大列数，头部说明行和数据行列数不同
MAX_COLUMNS = 64

# 数据区结束标记
FOOTER_PREFIX = "---"


def _is_missing(value) -> bool:
    return value is None or pd.isna(value) or value == ""


def _read_frame(file_path: str) -> pd.DataFrame:
    """
    读取整个文件为字符串表格
    """
    last_error = None
    for encoding in ENCODINGS:
        try:
            return pd.read_csv(
                file_path,
                header=None,
                names=range(MAX_COLUMNS),
                index_col=False,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=False,
                encoding=encoding,
                engine="python",
            )
        except UnicodeDecodeError as e:
            logger.debug("编码 %s 读取失败: %s", encoding, file_path)
            last_error = e
    raise last_error


def _to_fields(values) -> List[str]:
    """
    转换为字段列表，去除首尾空白和末尾补齐的空列
    """
    fields = list(values)
    while fields and _is_missing(fields[-1]):
        fields.pop()
    return ["" if _is_missing(v) else str(v).strip() for v in fields]


def read_rows(file_path: str, header_marker: str) -> Iterator[Tuple[int, List[str]]]:
    """
    逐行返回数据行 (行号, 字段列表)

    Args:
        file_path: 账单文件路径
        header_marker: 表头行首列内容；找到表头时从其下一行开始读取
    """
    df = _read_frame(file_path)
    rows = [_to_fields(values) for values in df.itertuples(index=False, name=None)]

    start = None
    for index, fields in enumerate(rows):
        if fields and fields[0] == header_marker:
            start = index + 1
            break

    if start is None:
        # 没有表头时分隔行无法区分头部说明和尾部统计
        for index, fields in enumerate(rows):
            if fields and fields[0].startswith(FOOTER_PREFIX):
                raise MalformedRowError(
                    f"未找到表头行 {header_marker!r}，但文件包含分隔行",
                    source=file_path, row_number=index + 1, value=",".join(fields),
                )
        start = 0

    for index in range(start, len(rows)):
        fields = rows[index]
        if not fields:
            continue
        if fields[0].startswith(FOOTER_PREFIX):
            break
        yield index + 1, fields
