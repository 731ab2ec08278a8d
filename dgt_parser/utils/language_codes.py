"""
語言代碼工具
Language Code Utilities

TMX 的 xml:lang 屬性同時作為過濾鍵與資料庫欄位名稱，需先正規化：
1. Unicode case folding
2. 連續的非 ASCII 英數字元替換為單一底線
3. 去除首尾底線

例如 `EN-GB` -> `en_gb`，`pt--PT` -> `pt_pt`
"""

import re
from typing import Dict, Iterable, List, Optional

from ..constants.tmx import DGT_LANGUAGE_ALIASES

_SEPARATOR = "_"
_NON_ALPHANUMERIC = re.compile(r"[^0-9a-z]+")


def normalize_language_code(raw_code: str) -> str:
    """
    將原始語言屬性轉換為欄位識別碼

    Args:
        raw_code: TMX 中的原始語言代碼

    Returns:
        正規化後的代碼；無法產生識別碼時回傳空字串
    """
    folded = raw_code.casefold()
    return _NON_ALPHANUMERIC.sub(_SEPARATOR, folded).strip(_SEPARATOR)


def resolve_language_alias(name: str, aliases: Optional[Dict[str, str]] = None) -> str:
    """將簡寫語言名稱 (如 `en`) 轉換為 DGT 代碼 (如 `EN-GB`)，未知名稱原樣返回"""
    table = DGT_LANGUAGE_ALIASES if aliases is None else aliases
    return table.get(name.strip().lower(), name)


def resolve_language_aliases(names: Iterable[str], aliases: Optional[Dict[str, str]] = None) -> List[str]:
    """批次轉換語言名稱"""
    return [resolve_language_alias(name, aliases) for name in names]


__all__ = [
    "normalize_language_code",
    "resolve_language_alias",
    "resolve_language_aliases",
]
