"""
語料相關模型定義
Corpus Related Models

定義壓縮檔項目、TMX 解析結果、文件與翻譯單元等資料結構
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional

from .report import ErrorRecord


@dataclass(frozen=True)
class ArchiveEntry:
    """壓縮檔中的一個 TMX 項目"""
    archive_name: str       # 壓縮檔名稱
    entry_path: str         # 壓縮檔內的路徑
    document_name: str      # 由路徑推導出的文件名稱 (檔名主幹)
    content: bytes = field(repr=False)


@dataclass(frozen=True)
class ParsedUnit:
    """
    解析後的翻譯單元

    sequential_number 在語言過濾之前依原始順序指派 (從 1 開始)，
    segments 的鍵為 TMX 中的原始語言代碼
    """
    sequential_number: int
    segments: Dict[str, str] = field(default_factory=dict)


@dataclass
class ParsedDocument:
    """單一 TMX 文件的解析結果 (失敗時 error 不為 None)"""
    name: str
    archive_name: str = ""
    units: List[ParsedUnit] = field(default_factory=list)
    header: Dict[str, str] = field(default_factory=dict)
    error: Optional[ErrorRecord] = None

    @property
    def failed(self) -> bool:
        """是否解析失敗"""
        return self.error is not None

    @property
    def languages(self) -> List[str]:
        """文件中出現的原始語言代碼 (依首次出現順序)"""
        seen: Dict[str, None] = {}
        for unit in self.units:
            for lang in unit.segments:
                seen.setdefault(lang, None)
        return list(seen)


@dataclass(frozen=True)
class Document:
    """已寫入資料庫的來源文件"""
    id: int
    name: str


@dataclass(frozen=True)
class TranslationUnit:
    """已寫入資料庫的翻譯單元，segments 的鍵為欄位名稱"""
    document_id: int
    sequential_number: int
    segments: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class LanguageFilterConfig:
    """
    語言過濾配置

    allowed 為正規化後的語言代碼；空集合代表不限制
    """
    allowed: FrozenSet[str] = frozenset()
    require_each: bool = False


__all__ = [
    "ArchiveEntry",
    "ParsedUnit",
    "ParsedDocument",
    "Document",
    "TranslationUnit",
    "LanguageFilterConfig",
]
