"""
匯出報告相關模型定義
Export Report Related Models

定義匯出過程中的錯誤記錄與執行結果統計
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union


class ErrorType(Enum):
    """錯誤類型枚舉"""
    IO = "io"                 # 輸入目錄或輸出資料庫無法存取 (致命)
    ARCHIVE = "archive"       # 壓縮檔損毀或無法讀取 (略過)
    PARSE = "parse"           # TMX 文件格式錯誤 (略過)
    SCHEMA = "schema"         # 語言代碼正規化衝突 (致命)
    WRITE = "write"           # 資料庫約束違反 (致命)


# 不中斷執行的錯誤類型
RECOVERABLE_ERROR_TYPES = frozenset({ErrorType.ARCHIVE, ErrorType.PARSE})


@dataclass
class ErrorRecord:
    """錯誤記錄"""
    error_type: ErrorType
    source: str               # 發生錯誤的壓縮檔、文件或資料庫路徑
    error_message: str
    timestamp: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        """驗證錯誤記錄"""
        if not self.error_message:
            raise ValueError("Error message cannot be empty")

    @property
    def is_fatal(self) -> bool:
        """是否為致命錯誤"""
        return self.error_type not in RECOVERABLE_ERROR_TYPES

    def to_dict(self) -> Dict[str, Union[str, float]]:
        """轉換為字典"""
        return {
            "error_type": self.error_type.value,
            "source": self.source,
            "error_message": self.error_message,
            "timestamp": self.timestamp,
        }


@dataclass
class ExportReport:
    """匯出執行報告"""
    # 掃描統計
    archives_scanned: int = 0
    documents_seen: int = 0
    documents_written: int = 0
    documents_failed: int = 0

    # 翻譯單元統計
    units_parsed: int = 0
    units_written: int = 0

    # 最終的語言欄位
    language_columns: List[str] = field(default_factory=list)

    # 錯誤記錄
    errors: List[ErrorRecord] = field(default_factory=list)

    # 元資料
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None

    def add_error(self, error: ErrorRecord) -> None:
        """添加錯誤記錄"""
        self.errors.append(error)

    def finish(self) -> None:
        """標記執行結束"""
        self.end_time = time.time()

    @property
    def units_excluded(self) -> int:
        """被語言過濾排除或無內容而未寫入的翻譯單元數"""
        return self.units_parsed - self.units_written

    @property
    def elapsed_time(self) -> float:
        """執行時間 (秒)"""
        end = self.end_time if self.end_time is not None else time.time()
        return end - self.start_time

    @property
    def succeeded(self) -> bool:
        """是否沒有致命錯誤"""
        return not any(error.is_fatal for error in self.errors)

    def count_errors(self, error_type: ErrorType) -> int:
        """計算特定類型的錯誤數"""
        return sum(1 for error in self.errors if error.error_type == error_type)

    def get_success_rate(self) -> float:
        """獲取文件解析成功率"""
        if self.documents_seen == 0:
            return 0.0
        return self.documents_written / self.documents_seen

    def get_failure_rate(self) -> float:
        """獲取文件解析失敗率"""
        if self.documents_seen == 0:
            return 0.0
        return self.documents_failed / self.documents_seen

    def get_error_summary(self) -> Dict[str, int]:
        """依錯誤類型彙總錯誤數"""
        summary: Dict[str, int] = {}
        for error in self.errors:
            summary[error.error_type.value] = summary.get(error.error_type.value, 0) + 1
        return summary


__all__ = [
    "ErrorType",
    "RECOVERABLE_ERROR_TYPES",
    "ErrorRecord",
    "ExportReport",
]
