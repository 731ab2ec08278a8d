"""
共用測試 fixture
Shared test fixtures

以 zipfile 與 UTF-16 編碼的 TMX 字串在測試中建立語料
"""

import zipfile
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union
from xml.sax.saxutils import escape, quoteattr

import pytest

# 一個翻譯單元：(語言代碼, 文字) 列表；文字為 None 代表沒有 <seg> 的 tuv
Unit = Sequence[Tuple[str, Optional[str]]]


def build_tmx(
    units: Sequence[Unit],
    header: Optional[Dict[str, str]] = None,
    encoding: str = "utf-16",
    lang_attribute: str = "xml:lang",
) -> bytes:
    """
    建立 TMX 文件位元組

    預設編碼為帶 BOM 的 UTF-16 (與 DGT-TM 相同)

    Args:
        units: 翻譯單元列表
        header: header 屬性
        encoding: 輸出編碼
        lang_attribute: 語言屬性名稱 (TMX 1.1 為 lang)

    Returns:
        TMX 原始位元組
    """
    header = header if header is not None else {"srclang": "EN-GB", "creationtool": "pytest"}
    header_attributes = "".join(f" {key}={quoteattr(value)}" for key, value in header.items())

    lines: List[str] = [
        f'<?xml version="1.0" encoding="{encoding.upper()}"?>',
        '<tmx version="1.4">',
        f"<header{header_attributes}/>",
        "<body>",
    ]
    for unit in units:
        lines.append("<tu>")
        for lang, text in unit:
            lines.append(f"<tuv {lang_attribute}={quoteattr(lang)}>")
            if text is not None:
                lines.append(f"<seg>{escape(text)}</seg>")
            lines.append("</tuv>")
        lines.append("</tu>")
    lines.extend(["</body>", "</tmx>"])

    return "\n".join(lines).encode(encoding)


def write_archive(path: Path, entries: Dict[str, Union[bytes, str]]) -> Path:
    """將項目寫入 ZIP 壓縮檔"""
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for entry_name, content in entries.items():
            archive.writestr(entry_name, content)
    return path


@pytest.fixture
def tmx_builder() -> Callable[..., bytes]:
    """TMX 文件建立函式"""
    return build_tmx


@pytest.fixture
def corpus_dir(tmp_path: Path) -> Path:
    """空的輸入目錄"""
    directory = tmp_path / "corpus"
    directory.mkdir()
    return directory


@pytest.fixture
def archive_writer(corpus_dir: Path) -> Callable[[str, Dict[str, Union[bytes, str]]], Path]:
    """在輸入目錄中建立壓縮檔的函式"""
    def _write(name: str, entries: Dict[str, Union[bytes, str]]) -> Path:
        return write_archive(corpus_dir / name, entries)
    return _write
