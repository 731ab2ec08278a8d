"""
匯出流程核心模組
Export Pipeline Core Module

核心邏輯：
1. 依檔名順序走訪壓縮檔，逐一取得 TMX 項目
2. 平行解析文件，依走訪順序重組結果
3. 由單一寫入端套用語言過濾並寫入 SQLite
"""

import logging
from typing import List, Optional

from tqdm import tqdm

from ..config.export_config import ExportConfig
from ..constants.export import PROGRESS_LOG_INTERVAL
from ..models.corpus import ArchiveEntry, LanguageFilterConfig, ParsedDocument, ParsedUnit
from ..models.report import ErrorRecord, ErrorType, ExportReport
from ..services.archive_scanner import ArchiveScanner, InputDirectoryError
from ..services.language_filter import filter_languages
from ..services.tmx_parser import TmxParseError, TmxParser
from ..utils.parallel import ordered_parallel_map
from .exporter import ExportWriteError, OutputDatabaseError, SqliteExporter
from .schema_builder import SchemaError

logger = logging.getLogger(__name__)


class ExportPipelineError(Exception):
    """匯出流程因致命錯誤中止"""

    def __init__(self, message: str, report: ExportReport):
        super().__init__(message)
        self.report = report


class ExportPipeline:
    """壓縮檔目錄 -> SQLite 匯出流程"""

    def __init__(self, config: ExportConfig, parser: Optional[TmxParser] = None):
        """
        初始化匯出流程

        Args:
            config: 匯出配置
            parser: TMX 解析器 (預設為新的實例)
        """
        self.logger = logging.getLogger(__name__ + ".ExportPipeline")
        self.config = config
        self.parser = parser if parser is not None else TmxParser()
        self._language_filter: LanguageFilterConfig = config.language_filter

        self.logger.info(
            f"ExportPipeline initialized: input_dir={config.input_dir}, output={config.output_path}, "
            f"languages={sorted(self._language_filter.allowed) or 'all'}, "
            f"require_each={config.require_each_language}"
        )

    def run(self) -> ExportReport:
        """
        執行完整匯出

        Returns:
            匯出報告

        Raises:
            ExportPipelineError: 輸入目錄、輸出資料庫、結構或寫入的致命錯誤；
                已提交的批次保留在輸出資料庫中
        """
        report = ExportReport()
        scanner = ArchiveScanner(self.config.input_dir, on_error=report.add_error)
        exporter = SqliteExporter(
            self.config.output_path,
            batch_size=self.config.batch_size,
            overwrite=self.config.overwrite,
        )

        try:
            # 輸入目錄無法讀取時不建立輸出資料庫
            scanner.list_archives()
            total = scanner.count_entries() if self.config.show_progress else None

            with exporter:
                results = ordered_parallel_map(
                    self._parse_entry,
                    scanner,
                    num_workers=self.config.max_workers,
                    max_pending=self.config.max_pending,
                )
                progress = tqdm(
                    results,
                    total=total,
                    desc="Parsing documents",
                    unit="doc",
                    disable=not self.config.show_progress,
                )
                with progress:
                    for document in progress:
                        self._write(document, exporter, report)

                if self.config.build_fts:
                    exporter.build_fulltext_index()

                report.language_columns = exporter.schema.columns

        except InputDirectoryError as e:
            self._fail(report, ErrorType.IO, str(self.config.input_dir), e)
        except OutputDatabaseError as e:
            self._fail(report, ErrorType.IO, str(self.config.output_path), e)
        except SchemaError as e:
            self._fail(report, ErrorType.SCHEMA, str(self.config.output_path), e)
        except ExportWriteError as e:
            self._fail(report, ErrorType.WRITE, str(self.config.output_path), e)
        finally:
            # 回滾的批次不計入
            report.archives_scanned = scanner.archives_opened
            report.documents_written = exporter.documents_written
            report.units_written = exporter.units_written
            report.units_parsed = exporter.units_parsed
            report.finish()

        self.logger.info(
            f"Export finished in {report.elapsed_time:.2f}s: "
            f"{report.documents_written}/{report.documents_seen} documents, "
            f"{report.units_written} translation units, {len(report.language_columns)} language columns, "
            f"{len(report.errors)} errors"
        )
        return report

    def _parse_entry(self, entry: ArchiveEntry) -> ParsedDocument:
        """解析單一項目；格式錯誤轉為帶有錯誤記錄的結果 (在 worker 執行緒中執行)"""
        try:
            return self.parser.parse(entry.content, entry.document_name, entry.archive_name)
        except TmxParseError as e:
            return ParsedDocument(
                name=entry.document_name,
                archive_name=entry.archive_name,
                error=ErrorRecord(
                    error_type=ErrorType.PARSE,
                    source=f"{entry.archive_name}:{entry.entry_path}",
                    error_message=str(e),
                ),
            )

    def _write(self, document: ParsedDocument, exporter: SqliteExporter, report: ExportReport) -> None:
        """過濾並寫入單一文件 (僅在寫入端執行)"""
        report.documents_seen += 1

        if document.failed:
            self.logger.warning(f"Skipping document {document.name}: {document.error.error_message}")
            report.add_error(document.error)
            report.documents_failed += 1
            return

        kept: List[ParsedUnit] = []
        for unit in document.units:
            segments = filter_languages(unit.segments, self._language_filter)
            if segments:
                kept.append(ParsedUnit(sequential_number=unit.sequential_number, segments=segments))

        exporter.write_document(document.name, kept, units_parsed=len(document.units))

        if report.documents_seen % PROGRESS_LOG_INTERVAL == 0:
            self.logger.info(
                f"Progress: {report.documents_seen} documents, "
                f"{exporter.documents_written} documents committed, {exporter.units_written} translation units"
            )

    def _fail(self, report: ExportReport, error_type: ErrorType, source: str, error: Exception) -> None:
        """記錄致命錯誤並中止"""
        self.logger.error(f"Export aborted ({error_type.value}): {error}")
        report.add_error(ErrorRecord(
            error_type=error_type,
            source=source,
            error_message=str(error) or type(error).__name__,
        ))
        report.finish()
        raise ExportPipelineError(f"Export aborted: {error}", report) from error


__all__ = [
    "ExportPipelineError",
    "ExportPipeline",
]
