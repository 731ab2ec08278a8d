"""
Utils package initialization
工具套件初始化
"""

from .language_codes import normalize_language_code, resolve_language_alias, resolve_language_aliases
from .parallel import get_optimal_workers, ordered_parallel_map

__all__ = [
    "normalize_language_code",
    "resolve_language_alias",
    "resolve_language_aliases",
    "get_optimal_workers",
    "ordered_parallel_map",
]
