"""
平行處理工具
Parallel Processing Utilities

以 ThreadPoolExecutor 平行解析文件，並依輸入順序輸出結果。

Usage:
    from dgt_parser.utils.parallel import ordered_parallel_map

    for result in ordered_parallel_map(parse, entries, num_workers=4):
        write(result)
"""

import logging
import os
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Dict, Iterable, Iterator, Optional, TypeVar

from ..constants.export import PENDING_DOCUMENTS_PER_WORKER

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)


def get_optimal_workers(reserve_cores: int = 1) -> int:
    """
    取得建議的 worker 數量

    Args:
        reserve_cores: 保留給寫入端的核心數

    Returns:
        worker 數量 (至少為 1，上限 32)
    """
    cpu_count = os.cpu_count() or 1
    optimal = max(1, cpu_count - reserve_cores)
    return min(32, optimal)


def ordered_parallel_map(
    func: Callable[[T], R],
    items: Iterable[T],
    num_workers: Optional[int] = None,
    max_pending: Optional[int] = None,
) -> Iterator[R]:
    """
    平行套用函式，但嚴格依輸入順序產出結果

    完成的結果先放入以輸入索引為鍵的重組緩衝區，直到前面的結果都已產出。
    執行中與緩衝中的項目總數不超過 max_pending，因此記憶體用量與輸入長度無關。
    輸入序列在呼叫端執行緒中逐一讀取；func 拋出的例外會在對應位置重新拋出。

    Args:
        func: 對每個項目執行的函式 (需為 thread-safe)
        items: 輸入序列 (可為惰性產生器)
        num_workers: worker 執行緒數；<= 1 時直接在目前執行緒依序處理
        max_pending: 同時執行或等待輸出的項目上限

    Yields:
        與輸入順序一致的結果
    """
    if num_workers is None:
        num_workers = get_optimal_workers()

    if num_workers <= 1:
        for item in items:
            yield func(item)
        return

    if max_pending is None:
        max_pending = num_workers * PENDING_DOCUMENTS_PER_WORKER
    max_pending = max(max_pending, num_workers)

    source = enumerate(items)
    pending: Dict["Future[R]", int] = {}
    reorder_buffer: Dict[int, "Future[R]"] = {}
    next_index = 0
    exhausted = False

    with ThreadPoolExecutor(max_workers=num_workers) as executor:
        while True:
            while not exhausted and len(pending) + len(reorder_buffer) < max_pending:
                try:
                    index, item = next(source)
                except StopIteration:
                    exhausted = True
                    break
                pending[executor.submit(func, item)] = index

            if next_index in reorder_buffer:
                yield reorder_buffer.pop(next_index).result()
                next_index += 1
                continue

            if not pending:
                break

            done, _ = wait(pending, return_when=FIRST_COMPLETED)
            for future in done:
                reorder_buffer[pending.pop(future)] = future

    logger.debug(f"Ordered map finished: {next_index} items")


__all__ = [
    "get_optimal_workers",
    "ordered_parallel_map",
]
