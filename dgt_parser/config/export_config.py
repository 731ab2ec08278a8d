"""
Export pipeline configuration
匯出流程配置

由命令列層建立，整個執行期間固定不變
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Iterable, Optional, Union

from ..constants.export import DEFAULT_BATCH_SIZE, MIN_BATCH_SIZE
from ..models.corpus import LanguageFilterConfig
from ..services.language_filter import build_filter_config
from .settings import get_config_for_environment


@dataclass(frozen=True)
class ExportConfig:
    """
    匯出配置

    Attributes:
        input_dir: ZIP 壓縮檔所在目錄
        output_path: 輸出 SQLite 資料庫路徑
        allowed_languages: 允許的語言代碼，建立時正規化 (空 = 不限制)
        require_each_language: 是否要求每個允許語言都存在
        batch_size: 每個交易寫入的列數上限
        max_workers: 解析 worker 數 (<= 1 代表不使用執行緒池)
        max_pending: 同時解析或等待寫入的文件上限
        overwrite: 輸出檔案已存在時是否覆蓋
        build_fts: 是否建立 FTS5 全文檢索索引
        show_progress: 是否顯示進度條
    """
    input_dir: Path
    output_path: Path
    allowed_languages: FrozenSet[str] = field(default_factory=frozenset)
    require_each_language: bool = False
    batch_size: int = DEFAULT_BATCH_SIZE
    max_workers: int = 1
    max_pending: Optional[int] = None
    overwrite: bool = False
    build_fts: bool = False
    show_progress: bool = False

    def __post_init__(self) -> None:
        """型別轉換與驗證"""
        object.__setattr__(self, "input_dir", Path(self.input_dir))
        object.__setattr__(self, "output_path", Path(self.output_path))
        object.__setattr__(
            self, "allowed_languages", build_filter_config(self.allowed_languages).allowed
        )

        if self.batch_size < MIN_BATCH_SIZE:
            raise ValueError(f"Batch size must be positive: {self.batch_size}")
        if self.max_workers < 0:
            raise ValueError(f"Max workers cannot be negative: {self.max_workers}")
        if self.max_pending is not None and self.max_pending < 1:
            raise ValueError(f"Max pending must be positive: {self.max_pending}")

    @property
    def language_filter(self) -> LanguageFilterConfig:
        """語言過濾配置 (代碼已正規化)"""
        return LanguageFilterConfig(allowed=self.allowed_languages, require_each=self.require_each_language)

    @classmethod
    def from_environment(
        cls,
        input_dir: Union[str, Path],
        output_path: Union[str, Path],
        languages: Iterable[str] = (),
        require_each_language: bool = False,
        environment: Optional[str] = None,
        **overrides: object,
    ) -> "ExportConfig":
        """
        以環境配置為預設值建立匯出配置

        Args:
            input_dir: 輸入目錄
            output_path: 輸出資料庫路徑
            languages: 允許的語言代碼
            require_each_language: 是否要求每個允許語言都存在
            environment: 環境名稱 (預設為當前環境)
            **overrides: 覆蓋個別欄位，值為 None 時沿用環境配置

        Returns:
            匯出配置
        """
        env_config = get_config_for_environment(environment)
        values = {
            "batch_size": env_config["batch_size"],
            "max_workers": env_config["max_workers"],
            "max_pending": env_config["max_pending"],
            "show_progress": env_config["show_progress"],
        }
        values.update({key: value for key, value in overrides.items() if value is not None})

        return cls(
            input_dir=Path(input_dir),
            output_path=Path(output_path),
            allowed_languages=frozenset(languages),
            require_each_language=require_each_language,
            **values,
        )


__all__ = [
    "ExportConfig",
]
