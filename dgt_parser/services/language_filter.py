"""
語言過濾服務模組
Language Filtering Service Module
"""

from typing import Dict, Iterable, Mapping, Optional

from ..models.corpus import LanguageFilterConfig
from ..utils.language_codes import normalize_language_code


def build_filter_config(languages: Iterable[str] = (), require_each: bool = False) -> LanguageFilterConfig:
    """由原始語言代碼建立過濾配置 (代碼會先正規化，空代碼忽略)"""
    allowed = frozenset(
        code for code in (normalize_language_code(lang) for lang in languages) if code
    )
    return LanguageFilterConfig(allowed=allowed, require_each=require_each)


def filter_languages(
    segments: Mapping[str, str],
    config: LanguageFilterConfig,
) -> Optional[Dict[str, str]]:
    """
    依配置過濾翻譯單元的語言

    Args:
        segments: 原始語言代碼 -> 文字
        config: 過濾配置

    Returns:
        保留的語言對應表 (可能為空)；require_each 且缺少任一允許語言時回傳 None
    """
    if config.allowed:
        kept = {
            lang: text for lang, text in segments.items()
            if normalize_language_code(lang) in config.allowed
        }
    else:
        kept = dict(segments)

    if config.require_each:
        present = {normalize_language_code(lang) for lang, text in kept.items() if text}
        if not config.allowed <= present:
            return None

    return kept


__all__ = [
    "build_filter_config",
    "filter_languages",
]
