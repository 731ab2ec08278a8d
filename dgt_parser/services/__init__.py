"""
服務模組
Services Module

本模組包含壓縮檔掃描、TMX 解析與語言過濾服務
"""

from .archive_scanner import ArchiveError, ArchiveScanner, InputDirectoryError
from .language_filter import build_filter_config, filter_languages
from .tmx_parser import TmxParseError, TmxParser

__all__ = [
    "ArchiveError",
    "ArchiveScanner",
    "InputDirectoryError",
    "TmxParseError",
    "TmxParser",
    "build_filter_config",
    "filter_languages",
]
