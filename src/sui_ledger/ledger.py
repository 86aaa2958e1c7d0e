"""
账本模块
按交易时间累积账本条目，输出时按时间升序、同一时间按插入顺序排列
"""
from datetime import datetime
from typing import Dict, Iterator, List

from .models import LedgerEntry


class LedgerBook:
    """
    账本
    由一次运行独占：逐条插入，最后统一输出
    """

    def __init__(self):
        self._entries: Dict[datetime, List[LedgerEntry]] = {}

    def insert(self, timestamp: datetime, entry: LedgerEntry):
        """
        追加条目，不去重、不合并
        """
        self._entries.setdefault(timestamp, []).append(entry)

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries.values())

    def __iter__(self) -> Iterator[LedgerEntry]:
        for timestamp in sorted(self._entries):
            yield from self._entries[timestamp]

    def drain(self) -> List[LedgerEntry]:
        """
        按时间顺序取出全部条目并清空账本
        """
        entries = list(self)
        self._entries.clear()
        return entries
