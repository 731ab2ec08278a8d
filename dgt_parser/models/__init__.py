"""
資料模型模組
Data Models Module

本模組包含系統中所有核心資料結構的定義
"""

from .report import *
from .corpus import *

__all__ = [
    # 語料模型
    "ArchiveEntry",
    "ParsedUnit",
    "ParsedDocument",
    "Document",
    "TranslationUnit",
    "LanguageFilterConfig",

    # 報告模型
    "ErrorRecord",
    "ExportReport",

    # 枚舉類型
    "ErrorType",
]
