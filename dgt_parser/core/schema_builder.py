"""
資料表結構建構模組
Schema Builder Module

追蹤執行過程中出現過的語言代碼，推導 translation_units 的語言欄位。
語言集合只增不減，由 Exporter 獨佔持有。
"""

import logging
from typing import Dict, Iterable, List, Sequence

from ..constants.export import RESERVED_COLUMNS
from ..utils.language_codes import normalize_language_code

logger = logging.getLogger(__name__)


class SchemaError(Exception):
    """無法安全推導資料表結構 (致命錯誤)"""
    pass


class SchemaBuilder:
    """
    語言欄位建構器

    兩個原始代碼在 case folding 後不同、正規化後卻相同 (如 `EN-GB` 與 `EN_GB`)
    視為衝突；僅大小寫不同的代碼視為同一語言。
    """

    def __init__(self, reserved_columns: Sequence[str] = RESERVED_COLUMNS) -> None:
        self.logger = logging.getLogger(__name__ + ".SchemaBuilder")
        self._reserved = frozenset(reserved_columns)
        # 欄位名稱 -> case folding 後的原始代碼 (保持插入順序)
        self._columns: Dict[str, str] = {}
        self._raw_to_column: Dict[str, str] = {}

    @property
    def columns(self) -> List[str]:
        """目前的語言欄位 (依首次出現順序)"""
        return list(self._columns)

    def __contains__(self, column: object) -> bool:
        return column in self._columns

    def __len__(self) -> int:
        return len(self._columns)

    def observe(self, raw_codes: Iterable[str]) -> List[str]:
        """
        將語言代碼併入結構狀態

        Args:
            raw_codes: TMX 中的原始語言代碼

        Returns:
            本次新增的欄位 (依首次出現順序)

        Raises:
            SchemaError: 正規化衝突或與固定欄位同名
        """
        new_columns: List[str] = []

        for raw in raw_codes:
            if raw in self._raw_to_column:
                continue

            column = normalize_language_code(raw)
            if not column:
                raise SchemaError(f"Language code {raw!r} does not produce a column name")
            if column in self._reserved:
                raise SchemaError(f"Language code {raw!r} collides with reserved column {column!r}")

            folded = raw.casefold()
            existing = self._columns.get(column)
            if existing is None:
                self._columns[column] = folded
                new_columns.append(column)
                self.logger.debug(f"New language column {column!r} from {raw!r}")
            elif existing != folded:
                raise SchemaError(
                    f"Language codes {existing!r} and {raw!r} both normalize to column {column!r}"
                )

            self._raw_to_column[raw] = column

        return new_columns

    def column_for(self, raw_code: str) -> str:
        """取得已觀察過的原始代碼對應的欄位"""
        try:
            return self._raw_to_column[raw_code]
        except KeyError:
            raise SchemaError(f"Language code {raw_code!r} has not been observed") from None


__all__ = [
    "SchemaError",
    "SchemaBuilder",
]
