"""
壓縮檔掃描服務模組
Archive Scanning Service Module

依檔名排序走訪輸入目錄中的 ZIP 壓縮檔，逐一產出其中的 TMX 項目
"""

import logging
import zipfile
import zlib
from pathlib import Path, PurePosixPath
from typing import Callable, Iterator, List, Optional, Union

from ..constants.tmx import ARCHIVE_SUFFIX, TMX_SUFFIX
from ..models.corpus import ArchiveEntry
from ..models.report import ErrorRecord, ErrorType


logger = logging.getLogger(__name__)

# zipfile 在讀取損毀或不支援的項目時可能拋出的例外
_ENTRY_READ_ERRORS = (zipfile.BadZipFile, zlib.error, OSError, EOFError, NotImplementedError, RuntimeError)


class InputDirectoryError(Exception):
    """輸入目錄無法讀取 (致命錯誤)"""
    pass


class ArchiveError(Exception):
    """單一壓縮檔損毀或無法讀取"""
    pass


class ArchiveScanner:
    """
    壓縮檔掃描器

    每次迭代都會重新掃描目錄，因此序列可重複走訪。
    損毀的壓縮檔或項目會透過 on_error 回報並略過。
    """

    def __init__(
        self,
        input_dir: Union[str, Path],
        on_error: Optional[Callable[[ErrorRecord], None]] = None,
    ) -> None:
        self.logger = logging.getLogger(__name__ + ".ArchiveScanner")
        self.input_dir = Path(input_dir)
        self.on_error = on_error
        self.archives_opened = 0

    def list_archives(self) -> List[Path]:
        """
        列出輸入目錄中的壓縮檔 (依檔名排序)

        Raises:
            InputDirectoryError: 目錄不存在或無法讀取
        """
        try:
            archives = [
                path for path in self.input_dir.iterdir()
                if path.suffix.lower() == ARCHIVE_SUFFIX and path.is_file()
            ]
        except OSError as e:
            raise InputDirectoryError(f"Cannot read input directory {self.input_dir}: {e}") from e

        return sorted(archives, key=lambda path: path.name)

    def __iter__(self) -> Iterator[ArchiveEntry]:
        self.archives_opened = 0
        archives = self.list_archives()
        self.logger.info(f"Found {len(archives)} archives in {self.input_dir}")

        for archive_path in archives:
            yield from self._iter_archive(archive_path)

    def _iter_archive(self, archive_path: Path) -> Iterator[ArchiveEntry]:
        """走訪單一壓縮檔中的 TMX 項目"""
        try:
            archive = zipfile.ZipFile(archive_path)
        except (zipfile.BadZipFile, OSError) as e:
            self._report(archive_path.name, ArchiveError(f"Cannot open archive: {e}"))
            return

        self.archives_opened += 1
        with archive:
            for info in archive.infolist():
                if info.is_dir() or not info.filename.lower().endswith(TMX_SUFFIX):
                    continue

                try:
                    content = archive.read(info)
                except _ENTRY_READ_ERRORS as e:
                    self._report(
                        f"{archive_path.name}:{info.filename}",
                        ArchiveError(f"Cannot read entry: {e}"),
                    )
                    continue

                yield ArchiveEntry(
                    archive_name=archive_path.name,
                    entry_path=info.filename,
                    document_name=document_name_for(info.filename),
                    content=content,
                )

    def count_entries(self) -> int:
        """
        計算所有壓縮檔中的 TMX 項目數 (只讀取目錄，不解壓縮)

        損毀的壓縮檔不計入，也不在此回報；實際走訪時才回報。
        """
        total = 0
        for archive_path in self.list_archives():
            try:
                with zipfile.ZipFile(archive_path) as archive:
                    total += sum(
                        1 for info in archive.infolist()
                        if not info.is_dir() and info.filename.lower().endswith(TMX_SUFFIX)
                    )
            except (zipfile.BadZipFile, OSError):
                continue
        return total

    def _report(self, source: str, error: ArchiveError) -> None:
        """記錄並回報壓縮檔錯誤"""
        self.logger.warning(f"Skipping {source}: {error}")
        if self.on_error is not None:
            self.on_error(ErrorRecord(
                error_type=ErrorType.ARCHIVE,
                source=source,
                error_message=str(error),
            ))


def document_name_for(entry_path: str) -> str:
    """由壓縮檔內的路徑推導文件名稱 (檔名主幹)"""
    return PurePosixPath(entry_path.replace("\\", "/")).stem


__all__ = [
    "InputDirectoryError",
    "ArchiveError",
    "ArchiveScanner",
    "document_name_for",
]
