"""
Export-related constants
匯出相關常數
"""

from typing import Tuple

# 資料表名稱
DOCUMENTS_TABLE = "documents"
UNITS_TABLE = "translation_units"
FULLTEXT_TABLE = "translation_units_fts"

# 固定欄位，語言欄位不得與其同名
RESERVED_COLUMNS: Tuple[str, ...] = ("id", "document_id", "sequential_number")

# FTS5 保留的欄位名稱，不納入全文檢索索引
FTS_RESERVED_COLUMNS: Tuple[str, ...] = ("rank", "rowid")

# 每個交易最多寫入的列數
DEFAULT_BATCH_SIZE = 20_000
MIN_BATCH_SIZE = 1

# 解析佇列：每個 worker 允許的待處理文件數
PENDING_DOCUMENTS_PER_WORKER = 2

# 每處理 N 份文件記錄一次進度
PROGRESS_LOG_INTERVAL = 100
