"""
SQLite 匯出模組
SQLite Exporter Module

負責輸出資料庫的完整生命週期：
1. 第一次寫入時依第一份文件的語言建立資料表
2. 遇到新語言時以 ALTER TABLE ADD COLUMN 擴充欄位 (既有列讀取為 NULL)
3. 依序指派文件 ID，並以明確交易分批提交
"""

import logging
import sqlite3
from contextlib import contextmanager
from itertools import groupby
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from ..constants.export import (
    DEFAULT_BATCH_SIZE,
    DOCUMENTS_TABLE,
    FTS_RESERVED_COLUMNS,
    FULLTEXT_TABLE,
    UNITS_TABLE,
)
from ..models.corpus import Document, ParsedUnit, TranslationUnit
from .schema_builder import SchemaBuilder

logger = logging.getLogger(__name__)


class OutputDatabaseError(Exception):
    """輸出資料庫無法建立或寫入 (致命錯誤)"""
    pass


class ExportWriteError(Exception):
    """資料庫約束違反，代表內部不變量遭破壞 (致命錯誤)"""
    pass


def _quote(identifier: str) -> str:
    """引用 SQL 識別碼"""
    return '"' + identifier.replace('"', '""') + '"'


class SqliteExporter:
    """SQLite 匯出器"""

    def __init__(
        self,
        output_path: Union[str, Path],
        batch_size: int = DEFAULT_BATCH_SIZE,
        overwrite: bool = False,
        schema: Optional[SchemaBuilder] = None,
    ) -> None:
        """
        初始化匯出器

        Args:
            output_path: 輸出資料庫路徑
            batch_size: 每個交易寫入的列數上限
            overwrite: 輸出檔案已存在時是否覆蓋
            schema: 語言欄位建構器 (預設為新的實例)
        """
        if batch_size < 1:
            raise ValueError(f"Batch size must be positive: {batch_size}")

        self.logger = logging.getLogger(__name__ + ".SqliteExporter")
        self.output_path = Path(output_path)
        self.batch_size = batch_size
        self.overwrite = overwrite
        self.schema = schema if schema is not None else SchemaBuilder()

        self._connection: Optional[sqlite3.Connection] = None
        self._tables_created = False
        self._next_document_id = 1
        self._rows_in_batch = 0
        self._pending_documents = 0
        self._pending_units = 0
        self._pending_parsed = 0

        # 僅計入已提交的資料
        self.documents_written = 0
        self.units_written = 0
        self.units_parsed = 0
        self.batches_committed = 0

    # ------------------------------------------------------------------
    # 生命週期
    # ------------------------------------------------------------------

    def open(self) -> None:
        """
        開啟輸出資料庫

        Raises:
            OutputDatabaseError: 檔案已存在 (且未允許覆蓋) 或無法建立
        """
        if self._connection is not None:
            return

        try:
            if self.output_path.exists():
                if not self.overwrite:
                    raise OutputDatabaseError(f"Output database already exists: {self.output_path}")
                self.logger.warning(f"Overwriting existing database: {self.output_path}")
                self.output_path.unlink()

            # 交易由匯出器自行管理
            self._connection = sqlite3.connect(str(self.output_path), isolation_level=None)
            self._connection.execute("PRAGMA foreign_keys = ON")
        except (OSError, sqlite3.Error) as e:
            raise OutputDatabaseError(f"Cannot open output database {self.output_path}: {e}") from e

        self.logger.info(f"Opened output database: {self.output_path}")

    def close(self) -> None:
        """提交剩餘資料並關閉資料庫；沒有任何文件時仍建立空資料表"""
        if self._connection is None:
            return

        try:
            if not self._tables_created:
                with self._translate_errors():
                    self._begin()
                    self._create_tables([])
            self.commit()
        finally:
            self._connection.close()
            self._connection = None

        self.logger.info(
            f"Closed output database: {self.documents_written} documents, "
            f"{self.units_written} translation units, columns={self.schema.columns}"
        )

    def abort(self) -> None:
        """放棄尚未提交的批次並關閉資料庫"""
        if self._connection is None:
            return

        try:
            if self._connection.in_transaction:
                self._connection.rollback()
                self.logger.warning(
                    f"Rolled back uncommitted batch: {self._pending_documents} documents, "
                    f"{self._pending_units} translation units"
                )
        except sqlite3.Error as e:
            self.logger.error(f"Rollback failed: {e}")
        finally:
            self._reset_batch()
            self._connection.close()
            self._connection = None

    def __enter__(self) -> "SqliteExporter":
        self.open()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if exc_type is None:
            self.close()
        else:
            self.abort()

    @property
    def connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise OutputDatabaseError("Output database is not open")
        return self._connection

    # ------------------------------------------------------------------
    # 寫入
    # ------------------------------------------------------------------

    def write_document(
        self,
        name: str,
        units: Sequence[ParsedUnit],
        units_parsed: Optional[int] = None,
    ) -> Tuple[Document, int]:
        """
        寫入一份文件及其翻譯單元

        沒有任何語言內容的翻譯單元不會寫入。

        Args:
            name: 文件名稱
            units: 已過濾的翻譯單元 (序號為過濾前的原始位置)
            units_parsed: 過濾前的翻譯單元數 (預設為 len(units))

        Returns:
            (已指派 ID 的文件, 寫入的翻譯單元數)

        Raises:
            SchemaError: 語言代碼衝突
            ExportWriteError: 約束違反
            OutputDatabaseError: 資料庫 I/O 失敗
        """
        retained = [unit for unit in units if unit.segments]
        new_columns = self.schema.observe(lang for unit in retained for lang in unit.segments)

        document = Document(id=self._next_document_id, name=name)
        rows = [
            TranslationUnit(
                document_id=document.id,
                sequential_number=unit.sequential_number,
                segments=self._to_columns(unit.segments),
            )
            for unit in retained
        ]

        with self._translate_errors():
            self._begin()
            if not self._tables_created:
                self._create_tables(self.schema.columns)
            else:
                for column in new_columns:
                    self._add_language_column(column)

            self.connection.execute(
                f"INSERT INTO {DOCUMENTS_TABLE} (id, name) VALUES (?, ?)",
                (document.id, document.name),
            )
            self._insert_units(rows)

        self._next_document_id += 1
        self._pending_documents += 1
        self._pending_units += len(rows)
        self._pending_parsed += len(units) if units_parsed is None else units_parsed
        self._rows_in_batch += len(rows) + 1

        if self._rows_in_batch >= self.batch_size:
            self.commit()

        return document, len(rows)

    def commit(self) -> None:
        """提交目前的批次"""
        with self._translate_errors():
            if self.connection.in_transaction:
                self.connection.execute("COMMIT")
                self.batches_committed += 1
                self.logger.debug(f"Committed batch of {self._rows_in_batch} rows")
        self.documents_written += self._pending_documents
        self.units_written += self._pending_units
        self.units_parsed += self._pending_parsed
        self._reset_batch()

    def build_fulltext_index(self) -> bool:
        """
        以 FTS5 建立全文檢索索引 (external content 指向 translation_units)

        Returns:
            是否建立索引 (沒有可索引的語言欄位時略過)
        """
        columns = [column for column in self.schema.columns if column not in FTS_RESERVED_COLUMNS]
        for column in self.schema.columns:
            if column in FTS_RESERVED_COLUMNS:
                self.logger.warning(f"Language column {column} is reserved by FTS5, leaving it out of the index")
        if not columns:
            self.logger.warning("No language columns, skipping full-text index")
            return False

        self.commit()
        column_list = ", ".join(_quote(column) for column in columns)
        with self._translate_errors():
            self._begin()
            self.connection.execute(f"DROP TABLE IF EXISTS {FULLTEXT_TABLE}")
            self.connection.execute(
                f"CREATE VIRTUAL TABLE {FULLTEXT_TABLE} USING fts5("
                f"{column_list}, content='{UNITS_TABLE}', content_rowid='id')"
            )
            self.connection.execute(f"INSERT INTO {FULLTEXT_TABLE}({FULLTEXT_TABLE}) VALUES ('rebuild')")
        self.commit()

        self.logger.info(f"Built full-text index over {len(columns)} language columns")
        return True

    # ------------------------------------------------------------------
    # 內部方法
    # ------------------------------------------------------------------

    @contextmanager
    def _translate_errors(self) -> Iterator[None]:
        """將 sqlite3 例外轉換為匯出錯誤類型"""
        try:
            yield
        except sqlite3.IntegrityError as e:
            raise ExportWriteError(f"Constraint violation in {self.output_path}: {e}") from e
        except sqlite3.Error as e:
            raise OutputDatabaseError(f"Database error in {self.output_path}: {e}") from e

    def _reset_batch(self) -> None:
        self._rows_in_batch = 0
        self._pending_documents = 0
        self._pending_units = 0
        self._pending_parsed = 0

    def _begin(self) -> None:
        if not self.connection.in_transaction:
            self.connection.execute("BEGIN")

    def _create_tables(self, language_columns: List[str]) -> None:
        """建立 documents 與 translation_units 資料表"""
        language_definitions = "".join(f",\n    {_quote(column)} TEXT" for column in language_columns)

        self.connection.execute(
            f"""
            CREATE TABLE {DOCUMENTS_TABLE} (
                id INTEGER PRIMARY KEY,
                name TEXT
            )
            """
        )
        self.connection.execute(
            f"""
            CREATE TABLE {UNITS_TABLE} (
                id INTEGER PRIMARY KEY,
                document_id INTEGER REFERENCES {DOCUMENTS_TABLE}(id),
                sequential_number INTEGER{language_definitions},
                UNIQUE(document_id, sequential_number)
            )
            """
        )
        self._tables_created = True
        self.logger.info(f"Created tables with language columns: {language_columns}")

    def _to_columns(self, segments: Dict[str, str]) -> Dict[str, str]:
        """原始語言代碼 -> 欄位名稱；僅大小寫不同的代碼以第一個為準"""
        row: Dict[str, str] = {}
        for lang, text in segments.items():
            row.setdefault(self.schema.column_for(lang), text)
        return row

    def _add_language_column(self, column: str) -> None:
        self.connection.execute(f"ALTER TABLE {UNITS_TABLE} ADD COLUMN {_quote(column)} TEXT")
        self.logger.info(f"Added language column: {column}")

    def _insert_units(self, rows: List[TranslationUnit]) -> None:
        """將欄位組合相同的連續列合併為一次 executemany，保持原始順序"""
        for columns, group in groupby(rows, key=lambda row: tuple(row.segments)):
            values = [
                (row.document_id, row.sequential_number, *(row.segments[column] for column in columns))
                for row in group
            ]
            column_list = ", ".join(("document_id", "sequential_number", *(_quote(c) for c in columns)))
            placeholders = ", ".join("?" for _ in range(len(columns) + 2))
            self.connection.executemany(
                f"INSERT INTO {UNITS_TABLE} ({column_list}) VALUES ({placeholders})",
                values,
            )


__all__ = [
    "OutputDatabaseError",
    "ExportWriteError",
    "SqliteExporter",
]
