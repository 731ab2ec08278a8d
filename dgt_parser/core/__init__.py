"""
核心模組
Core Module

本模組包含資料表結構推導、SQLite 匯出與匯出流程
"""

from .exporter import ExportWriteError, OutputDatabaseError, SqliteExporter
from .pipeline import ExportPipeline, ExportPipelineError
from .schema_builder import SchemaBuilder, SchemaError

__all__ = [
    "ExportPipeline",
    "ExportPipelineError",
    "ExportWriteError",
    "OutputDatabaseError",
    "SchemaBuilder",
    "SchemaError",
    "SqliteExporter",
]
