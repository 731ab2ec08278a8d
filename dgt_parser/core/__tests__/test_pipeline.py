"""
匯出流程測試模組
Test module for Export Pipeline

以 zipfile 與 UTF-16 TMX 建立測試語料，驗證完整匯出結果
"""

import sqlite3
import sys
from pathlib import Path
from typing import Callable, List, Tuple
from unittest.mock import patch

import pytest

sys.path.append(str(Path(__file__).parent.parent.parent.parent))

from dgt_parser.config.export_config import ExportConfig
from dgt_parser.core.pipeline import ExportPipeline, ExportPipelineError
from dgt_parser.models.report import ErrorType


def query(db_path: Path, sql: str) -> List[Tuple]:
    """執行查詢"""
    connection = sqlite3.connect(str(db_path))
    try:
        return connection.execute(sql).fetchall()
    finally:
        connection.close()


def unit_columns(db_path: Path) -> List[str]:
    """translation_units 的欄位名稱"""
    return [row[1] for row in query(db_path, "PRAGMA table_info(translation_units)")]


class TestExportPipeline:
    """測試匯出流程"""

    @pytest.fixture
    def make_config(self, corpus_dir: Path, tmp_path: Path) -> Callable[..., ExportConfig]:
        """建立匯出配置的函式"""
        def _make(output: str = "out.sqlite", **kwargs) -> ExportConfig:
            kwargs.setdefault("show_progress", False)
            return ExportConfig(input_dir=corpus_dir, output_path=tmp_path / output, **kwargs)
        return _make

    @pytest.fixture
    def basic_corpus(self, archive_writer, tmx_builder) -> None:
        """兩個壓縮檔、三份文件"""
        archive_writer("vol_b.zip", {
            "32014R0003.tmx": tmx_builder([
                [("EN-GB", "third one"), ("PL-01", "trzeci jeden")],
            ]),
        })
        archive_writer("vol_a.zip", {
            "32014R0001.tmx": tmx_builder([
                [("EN-GB", "first one"), ("PL-01", "pierwszy jeden")],
                [("EN-GB", "first two"), ("PL-01", "pierwszy dwa")],
                [("EN-GB", "first three"), ("PL-01", "pierwszy trzy")],
            ]),
            "32014R0002.tmx": tmx_builder([
                [("EN-GB", "second one"), ("PL-01", "drugi jeden")],
                [("EN-GB", "second two"), ("PL-01", "drugi dwa")],
            ]),
        })

    @pytest.mark.usefixtures("basic_corpus")
    def test_documents_in_scan_order(self, make_config) -> None:
        """測試文件依壓縮檔名稱與內部順序編號"""
        config = make_config()
        report = ExportPipeline(config).run()

        assert query(config.output_path, "SELECT id, name FROM documents ORDER BY id") == [
            (1, "32014R0001"),
            (2, "32014R0002"),
            (3, "32014R0003"),
        ]
        assert report.archives_scanned == 2
        assert report.documents_seen == 3
        assert report.documents_written == 3
        assert report.units_parsed == 6
        assert report.units_written == 6
        assert report.language_columns == ["en_gb", "pl_01"]
        assert report.succeeded
        assert report.end_time is not None

    @pytest.mark.usefixtures("basic_corpus")
    def test_sequence_numbers_reset_per_document(self, make_config) -> None:
        """測試序號在每份文件從 1 開始"""
        config = make_config()
        ExportPipeline(config).run()

        rows = query(
            config.output_path,
            "SELECT document_id, sequential_number, en_gb FROM translation_units ORDER BY id",
        )
        assert rows == [
            (1, 1, "first one"),
            (1, 2, "first two"),
            (1, 3, "first three"),
            (2, 1, "second one"),
            (2, 2, "second two"),
            (3, 1, "third one"),
        ]

    def test_sequence_numbers_assigned_before_filtering(self, make_config, archive_writer, tmx_builder) -> None:
        """測試序號保留過濾前的原始位置"""
        archive_writer("a.zip", {"doc.tmx": tmx_builder([
            [("EN-GB", "one"), ("PL-01", "jeden")],
            [("EN-GB", "two")],
            [("DE-DE", "drei")],
            [("EN-GB", "four"), ("PL-01", "cztery")],
        ])})
        config = make_config(allowed_languages=["EN-GB", "PL-01"], require_each_language=True)

        report = ExportPipeline(config).run()

        assert query(config.output_path, "SELECT sequential_number FROM translation_units ORDER BY id") == [(1,), (4,)]
        assert report.units_parsed == 4
        assert report.units_written == 2
        assert report.units_excluded == 2

    def test_filter_keeps_allowed_languages(self, make_config, archive_writer, tmx_builder) -> None:
        """測試只保留允許的語言欄位"""
        archive_writer("a.zip", {"doc.tmx": tmx_builder([
            [("EN-GB", "Hello"), ("PL-01", "Cześć"), ("FR-FR", "Bonjour")],
        ])})
        config = make_config(allowed_languages=["pl-01", "en-gb"])

        ExportPipeline(config).run()

        assert unit_columns(config.output_path)[3:] == ["en_gb", "pl_01"]
        assert query(config.output_path, "SELECT en_gb, pl_01 FROM translation_units") == [("Hello", "Cześć")]

    def test_require_each_language(self, make_config, archive_writer, tmx_builder) -> None:
        """測試要求所有語言時排除缺少語言的單元"""
        archive_writer("a.zip", {"doc.tmx": tmx_builder([
            [("EN-GB", "missing pl"), ("FR-FR", "manque pl")],
            [("EN-GB", "complete"), ("PL-01", "kompletny")],
        ])})
        config = make_config(allowed_languages=["PL-01", "EN-GB"], require_each_language=True)

        ExportPipeline(config).run()

        assert query(config.output_path, "SELECT sequential_number, en_gb, pl_01 FROM translation_units") == [
            (2, "complete", "kompletny"),
        ]

    def test_document_with_all_units_excluded_is_recorded(self, make_config, archive_writer, tmx_builder) -> None:
        """測試所有單元都被排除的文件仍記錄"""
        archive_writer("a.zip", {"doc.tmx": tmx_builder([[("FR-FR", "seul")]])})
        config = make_config(allowed_languages=["EN-GB"])

        report = ExportPipeline(config).run()

        assert query(config.output_path, "SELECT name FROM documents") == [("doc",)]
        assert query(config.output_path, "SELECT COUNT(*) FROM translation_units") == [(0,)]
        assert report.documents_written == 1

    def test_schema_growth_with_nulls(self, make_config, archive_writer, tmx_builder) -> None:
        """測試後續文件的新語言擴充欄位，先前的列為 NULL"""
        archive_writer("a.zip", {
            "A.tmx": tmx_builder([[("EN-GB", "a1"), ("PL-01", "a1 pl")], [("EN-GB", "a2"), ("PL-01", "a2 pl")]]),
            "B.tmx": tmx_builder([[("EN-GB", "b1"), ("DA-01", "b1 da")]]),
        })
        config = make_config()

        report = ExportPipeline(config).run()

        assert unit_columns(config.output_path)[3:] == ["en_gb", "pl_01", "da_01"]
        assert report.language_columns == ["en_gb", "pl_01", "da_01"]
        assert query(config.output_path, "SELECT da_01 FROM translation_units WHERE document_id = 1") == [(None,), (None,)]
        assert query(config.output_path, "SELECT pl_01, da_01 FROM translation_units WHERE document_id = 2") == [
            (None, "b1 da"),
        ]

    @pytest.mark.parametrize("workers", [1, 4])
    def test_deterministic_across_runs(self, make_config, archive_writer, tmx_builder, workers: int) -> None:
        """測試相同輸入重複執行結果一致"""
        for archive_index in range(3):
            archive_writer(f"vol_{archive_index}.zip", {
                f"doc_{archive_index}_{doc_index}.tmx": tmx_builder([
                    [("EN-GB", f"{archive_index}-{doc_index}-{unit_index}"), ("SV-SE", f"sv {unit_index}")]
                    for unit_index in range(doc_index + 1)
                ])
                for doc_index in range(5)
            })

        first = make_config("first.sqlite", max_workers=workers, max_pending=3)
        second = make_config("second.sqlite", max_workers=workers, max_pending=3)
        ExportPipeline(first).run()
        ExportPipeline(second).run()

        sql = "SELECT d.name, t.document_id, t.sequential_number, t.en_gb, t.sv_se FROM translation_units t JOIN documents d ON d.id = t.document_id ORDER BY t.id"
        assert query(first.output_path, sql) == query(second.output_path, sql)
        assert len(query(first.output_path, sql)) == 3 * (1 + 2 + 3 + 4 + 5)

    def test_parallel_matches_sequential(self, make_config, archive_writer, tmx_builder) -> None:
        """測試平行解析與循序解析結果相同"""
        archive_writer("a.zip", {
            f"{index:03d}.tmx": tmx_builder([[("EN-GB", f"text {index}")]] * (index % 4 + 1))
            for index in range(20)
        })
        sequential = make_config("seq.sqlite", max_workers=1)
        parallel = make_config("par.sqlite", max_workers=4, max_pending=4)
        ExportPipeline(sequential).run()
        ExportPipeline(parallel).run()

        sql = "SELECT document_id, sequential_number, en_gb FROM translation_units ORDER BY id"
        assert query(sequential.output_path, sql) == query(parallel.output_path, sql)
        assert query(parallel.output_path, "SELECT name FROM documents ORDER BY id") == [
            (f"{index:03d}",) for index in range(20)
        ]

    @pytest.mark.parametrize("workers", [1, 3])
    def test_malformed_document_isolated(self, make_config, archive_writer, tmx_builder, workers: int) -> None:
        """測試一份格式錯誤的文件不影響其餘四份"""
        archive_writer("a.zip", {
            "good1.tmx": tmx_builder([[("EN-GB", "g1")]]),
            "good2.tmx": tmx_builder([[("EN-GB", "g2")]]),
            "broken.tmx": "<tmx><body><tu>".encode("utf-16"),
            "good3.tmx": tmx_builder([[("EN-GB", "g3")]]),
        })
        archive_writer("b.zip", {"good4.tmx": tmx_builder([[("EN-GB", "g4")]])})
        config = make_config(max_workers=workers)

        report = ExportPipeline(config).run()

        assert query(config.output_path, "SELECT id, name FROM documents ORDER BY id") == [
            (1, "good1"), (2, "good2"), (3, "good3"), (4, "good4"),
        ]
        assert query(config.output_path, "SELECT en_gb FROM translation_units ORDER BY id") == [
            ("g1",), ("g2",), ("g3",), ("g4",),
        ]
        assert report.documents_seen == 5
        assert report.documents_written == 4
        assert report.documents_failed == 1
        assert report.count_errors(ErrorType.PARSE) == 1
        assert report.errors[0].source == "a.zip:broken.tmx"
        assert report.succeeded

    def test_corrupt_archive_reported(self, make_config, corpus_dir: Path, archive_writer, tmx_builder) -> None:
        """測試損毀的壓縮檔被回報，其餘照常匯出"""
        archive_writer("a.zip", {"doc.tmx": tmx_builder([[("EN-GB", "x")]])})
        (corpus_dir / "b.zip").write_bytes(b"not a zip")
        config = make_config()

        report = ExportPipeline(config).run()

        assert report.count_errors(ErrorType.ARCHIVE) == 1
        assert report.archives_scanned == 1
        assert report.documents_written == 1
        assert report.succeeded

    def test_empty_input_directory(self, make_config) -> None:
        """測試空的輸入目錄仍建立空資料表"""
        config = make_config()

        report = ExportPipeline(config).run()

        assert query(config.output_path, "SELECT COUNT(*) FROM documents") == [(0,)]
        assert report.documents_seen == 0
        assert report.language_columns == []

    def test_missing_input_directory(self, tmp_path: Path) -> None:
        """測試輸入目錄不存在時中止且不建立輸出"""
        config = ExportConfig(input_dir=tmp_path / "missing", output_path=tmp_path / "out.sqlite")

        with pytest.raises(ExportPipelineError) as exc_info:
            ExportPipeline(config).run()

        assert exc_info.value.report.count_errors(ErrorType.IO) == 1
        assert not exc_info.value.report.succeeded
        assert not config.output_path.exists()

    @pytest.mark.usefixtures("basic_corpus")
    def test_existing_output_refused(self, make_config) -> None:
        """測試輸出檔案已存在時中止"""
        config = make_config()
        config.output_path.write_text("keep me")

        with pytest.raises(ExportPipelineError) as exc_info:
            ExportPipeline(config).run()

        assert exc_info.value.report.count_errors(ErrorType.IO) == 1
        assert config.output_path.read_text() == "keep me"

    @pytest.mark.usefixtures("basic_corpus")
    def test_existing_output_overwritten(self, make_config) -> None:
        """測試允許覆蓋既有輸出"""
        config = make_config(overwrite=True)
        config.output_path.write_text("replace me")

        report = ExportPipeline(config).run()

        assert report.documents_written == 3

    def test_schema_conflict_aborts(self, make_config, archive_writer, tmx_builder) -> None:
        """測試語言代碼衝突時中止並保留已提交批次"""
        archive_writer("a.zip", {
            "first.tmx": tmx_builder([[("EN-GB", "x")]]),
            "second.tmx": tmx_builder([[("EN_GB", "y")]]),
        })
        config = make_config(batch_size=1)

        with pytest.raises(ExportPipelineError) as exc_info:
            ExportPipeline(config).run()

        report = exc_info.value.report
        assert report.count_errors(ErrorType.SCHEMA) == 1
        assert report.documents_written == 1
        assert query(config.output_path, "SELECT name FROM documents") == [("first",)]

    def test_rolled_back_batch_not_reported(self, make_config, archive_writer, tmx_builder) -> None:
        """測試致命錯誤回滾的批次不計入報告"""
        archive_writer("a.zip", {
            "first.tmx": tmx_builder([[("EN-GB", "x")], [("EN-GB", "z")]]),
            "second.tmx": tmx_builder([[("EN_GB", "y")]]),
        })
        config = make_config(batch_size=1000)

        with pytest.raises(ExportPipelineError) as exc_info:
            ExportPipeline(config).run()

        report = exc_info.value.report
        assert report.count_errors(ErrorType.SCHEMA) == 1
        assert report.documents_seen == 2
        assert report.documents_written == 0
        assert report.units_written == 0
        assert report.units_parsed == 0
        assert report.units_excluded == 0
        assert query(config.output_path, "SELECT name FROM sqlite_master WHERE type = 'table'") == []

    def test_report_matches_committed_rows(self, make_config, archive_writer, tmx_builder) -> None:
        """測試中止時報告的寫入數等於資料庫中的列數"""
        archive_writer("a.zip", {
            "first.tmx": tmx_builder([[("EN-GB", "1")], [("EN-GB", "2")]]),
            "second.tmx": tmx_builder([[("EN-GB", "3")]]),
            "third.tmx": tmx_builder([[("EN-GB", "4")]]),
            "fourth.tmx": tmx_builder([[("EN_GB", "5")]]),
        })
        config = make_config(batch_size=5)

        with pytest.raises(ExportPipelineError) as exc_info:
            ExportPipeline(config).run()

        report = exc_info.value.report
        assert report.documents_written == query(config.output_path, "SELECT COUNT(*) FROM documents")[0][0] == 2
        assert report.units_written == query(config.output_path, "SELECT COUNT(*) FROM translation_units")[0][0] == 3

    def test_progress_total_counted(self, make_config, archive_writer, tmx_builder) -> None:
        """測試顯示進度時預先計算文件數"""
        archive_writer("a.zip", {"one.tmx": tmx_builder([]), "two.tmx": tmx_builder([])})
        config = make_config(show_progress=True)

        with patch("dgt_parser.core.pipeline.tqdm") as mock_tqdm:
            mock_tqdm.side_effect = lambda iterable, **kwargs: _PassThrough(iterable)
            ExportPipeline(config).run()

        assert mock_tqdm.call_args.kwargs["total"] == 2
        assert mock_tqdm.call_args.kwargs["disable"] is False

    def test_fulltext_index_requested(self, make_config, archive_writer, tmx_builder) -> None:
        """測試要求時建立全文檢索索引"""
        archive_writer("a.zip", {"doc.tmx": tmx_builder([[("EN-GB", "x")]])})
        config = make_config(build_fts=True)

        with patch("dgt_parser.core.pipeline.SqliteExporter.build_fulltext_index") as mock_build:
            ExportPipeline(config).run()

        mock_build.assert_called_once()


class _PassThrough:
    """不顯示進度的 tqdm 替身"""

    def __init__(self, iterable):
        self.iterable = iterable

    def __iter__(self):
        return iter(self.iterable)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False
