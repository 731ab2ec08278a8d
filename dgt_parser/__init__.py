"""
DGT-TM 翻譯記憶匯出工具
DGT Translation Memory Exporter

將 DGT-TM 的 TMX 壓縮檔匯入 SQLite 資料庫
"""

__version__ = "0.1.0"
