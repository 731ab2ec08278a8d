"""
System settings and configurations
系統設定與配置
"""

from enum import Enum
from typing import Dict, Optional

from typing_extensions import TypedDict

from ..constants.export import DEFAULT_BATCH_SIZE


class Environment(Enum):
    """環境類型"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(Enum):
    """日誌級別"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# 類型定義
class EnvironmentConfig(TypedDict):
    """環境配置類型"""
    debug: bool
    log_level: str
    max_workers: int
    max_pending: int
    batch_size: int
    show_progress: bool


class SystemSettings(TypedDict):
    """系統設定類型"""
    environment: str
    debug: bool
    log_level: str
    max_workers: int
    max_pending: int
    batch_size: int
    show_progress: bool
    logs_dir: str


# 預設系統設定
DEFAULT_SETTINGS: SystemSettings = {
    "environment": Environment.DEVELOPMENT.value,
    "debug": True,
    "log_level": LogLevel.INFO.value,
    "max_workers": 4,
    "max_pending": 8,
    "batch_size": DEFAULT_BATCH_SIZE,
    "show_progress": True,
    "logs_dir": "logs",
}

# 環境配置
ENVIRONMENT_CONFIGS: Dict[str, EnvironmentConfig] = {
    "development": {
        "debug": True,
        "log_level": LogLevel.DEBUG.value,
        "max_workers": 2,
        "max_pending": 4,
        "batch_size": 1_000,
        "show_progress": True,
    },
    "testing": {
        "debug": True,
        "log_level": LogLevel.WARNING.value,
        "max_workers": 1,
        "max_pending": 1,
        "batch_size": 100,
        "show_progress": False,
    },
    "staging": {
        "debug": False,
        "log_level": LogLevel.INFO.value,
        "max_workers": 4,
        "max_pending": 8,
        "batch_size": DEFAULT_BATCH_SIZE,
        "show_progress": True,
    },
    "production": {
        "debug": False,
        "log_level": LogLevel.WARNING.value,
        "max_workers": 8,
        "max_pending": 16,
        "batch_size": DEFAULT_BATCH_SIZE,
        "show_progress": True,
    },
}

# 當前環境設定 (透過命令列設定，而非環境變數)
CURRENT_ENVIRONMENT = Environment.DEVELOPMENT.value

def get_environment() -> str:
    """取得當前環境"""
    return CURRENT_ENVIRONMENT

def set_environment(env: str) -> None:
    """設定當前環境"""
    global CURRENT_ENVIRONMENT
    if env in [e.value for e in Environment]:
        CURRENT_ENVIRONMENT = env
    else:
        raise ValueError(f"Invalid environment: {env}. Must be one of {[e.value for e in Environment]}")

def get_config_for_environment(env: Optional[str] = None) -> EnvironmentConfig:
    """取得指定環境的配置"""
    if env is None:
        env = get_environment()

    if env in ENVIRONMENT_CONFIGS:
        return ENVIRONMENT_CONFIGS[env]

    return {
        "debug": DEFAULT_SETTINGS["debug"],
        "log_level": DEFAULT_SETTINGS["log_level"],
        "max_workers": DEFAULT_SETTINGS["max_workers"],
        "max_pending": DEFAULT_SETTINGS["max_pending"],
        "batch_size": DEFAULT_SETTINGS["batch_size"],
        "show_progress": DEFAULT_SETTINGS["show_progress"],
    }


__all__ = [
    # Enums
    "Environment",
    "LogLevel",

    # TypedDict classes
    "EnvironmentConfig",
    "SystemSettings",

    # Configuration dictionaries
    "DEFAULT_SETTINGS",
    "ENVIRONMENT_CONFIGS",
    "CURRENT_ENVIRONMENT",

    # Functions
    "get_environment",
    "set_environment",
    "get_config_for_environment",
]
