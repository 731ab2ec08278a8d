"""
Logging configuration for the system
日誌配置
"""

import copy
import logging
import logging.config
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from typing_extensions import TypedDict


class LogLevel(Enum):
    """日誌級別"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(Enum):
    """日誌格式類型"""
    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"
    STRUCTURED = "structured"


class HandlerConfig(TypedDict):
    """日誌處理器配置類型"""
    handler_type: str
    level: str
    format_type: str
    filename: Optional[str]
    max_bytes: Optional[int]
    backup_count: Optional[int]
    encoding: Optional[str]


class FormatterConfig(TypedDict):
    """日誌格式器配置類型"""
    format_string: str
    date_format: str
    style: str


class LoggerConfig(TypedDict):
    """日誌器配置類型"""
    level: str
    handlers: List[str]
    propagate: bool


class LoggingSystemConfig(TypedDict):
    """完整日誌系統配置類型 (logging.config.dictConfig 格式)"""
    version: int
    disable_existing_loggers: bool
    formatters: Dict[str, Dict[str, str]]
    handlers: Dict[str, Dict[str, Any]]
    loggers: Dict[str, LoggerConfig]
    root: LoggerConfig


# 日誌格式定義
LOG_FORMATS: Dict[str, FormatterConfig] = {
    "simple": {
        "format_string": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        "date_format": "%Y-%m-%d %H:%M:%S",
        "style": "%"
    },
    "detailed": {
        "format_string": "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(funcName)s() - %(message)s",
        "date_format": "%Y-%m-%d %H:%M:%S",
        "style": "%"
    },
    "json": {
        "format_string": '{"timestamp":"%(asctime)s","logger":"%(name)s","level":"%(levelname)s","file":"%(filename)s","line":%(lineno)d,"function":"%(funcName)s","message":"%(message)s"}',
        "date_format": "%Y-%m-%dT%H:%M:%S",
        "style": "%"
    },
    "structured": {
        "format_string": "[%(asctime)s] %(levelname)-8s [%(name)s.%(funcName)s:%(lineno)d] %(message)s",
        "date_format": "%Y-%m-%d %H:%M:%S",
        "style": "%"
    }
}

# 預設日誌目錄
DEFAULT_LOG_DIR = Path("logs")

# 處理器類型 -> logging 類別路徑
HANDLER_CLASSES: Dict[str, str] = {
    "StreamHandler": "logging.StreamHandler",
    "RotatingFileHandler": "logging.handlers.RotatingFileHandler",
}

# 確保日誌目錄存在
def ensure_log_directory(log_dir: Union[str, Path] = DEFAULT_LOG_DIR) -> Path:
    """確保日誌目錄存在"""
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    return log_path

# 日誌處理器配置
def get_handler_configs(log_dir: Union[str, Path] = DEFAULT_LOG_DIR) -> Dict[str, HandlerConfig]:
    """獲取日誌處理器配置"""
    log_path = ensure_log_directory(log_dir)

    return {
        "console": {
            "handler_type": "StreamHandler",
            "level": LogLevel.INFO.value,
            "format_type": "simple",
            "filename": None,
            "max_bytes": None,
            "backup_count": None,
            "encoding": None
        },
        "file_info": {
            "handler_type": "RotatingFileHandler",
            "level": LogLevel.INFO.value,
            "format_type": "detailed",
            "filename": str(log_path / "application.log"),
            "max_bytes": 10485760,  # 10MB
            "backup_count": 5,
            "encoding": "utf-8"
        },
        "file_error": {
            "handler_type": "RotatingFileHandler",
            "level": LogLevel.ERROR.value,
            "format_type": "detailed",
            "filename": str(log_path / "error.log"),
            "max_bytes": 10485760,  # 10MB
            "backup_count": 3,
            "encoding": "utf-8"
        },
        "file_debug": {
            "handler_type": "RotatingFileHandler",
            "level": LogLevel.DEBUG.value,
            "format_type": "structured",
            "filename": str(log_path / "debug.log"),
            "max_bytes": 20971520,  # 20MB
            "backup_count": 2,
            "encoding": "utf-8"
        },
    }

# 日誌器配置
LOGGER_CONFIGS: Dict[str, LoggerConfig] = {
    "dgt_parser.services": {
        "level": LogLevel.INFO.value,
        "handlers": ["console", "file_info", "file_error"],
        "propagate": False
    },
    "dgt_parser.core": {
        "level": LogLevel.INFO.value,
        "handlers": ["console", "file_info", "file_error"],
        "propagate": False
    },
    "dgt_parser.utils": {
        "level": LogLevel.INFO.value,
        "handlers": ["console", "file_info"],
        "propagate": False
    },
    "dgt_parser.config": {
        "level": LogLevel.WARNING.value,
        "handlers": ["console", "file_info"],
        "propagate": False
    },
}


def _to_formatter(config: FormatterConfig) -> Dict[str, str]:
    return {
        "format": config["format_string"],
        "datefmt": config["date_format"],
        "style": config["style"],
    }


def _to_handler(config: HandlerConfig) -> Dict[str, Any]:
    handler: Dict[str, Any] = {
        "class": HANDLER_CLASSES[config["handler_type"]],
        "level": config["level"],
        "formatter": config["format_type"],
    }
    if config["filename"] is not None:
        handler["filename"] = config["filename"]
        handler["maxBytes"] = config["max_bytes"]
        handler["backupCount"] = config["backup_count"]
        handler["encoding"] = config["encoding"]
    return handler


# 獲取完整的日誌配置
def get_logging_config(
    log_dir: Union[str, Path] = DEFAULT_LOG_DIR,
    console_level: LogLevel = LogLevel.INFO,
    file_level: LogLevel = LogLevel.DEBUG,
    debug_mode: bool = False
) -> LoggingSystemConfig:
    """
    獲取完整的日誌系統配置

    Args:
        log_dir: 日誌目錄路徑
        console_level: 控制台日誌級別
        file_level: 文件日誌級別
        debug_mode: 是否啟用調試模式

    Returns:
        可直接交給 logging.config.dictConfig 的配置
    """
    handlers = get_handler_configs(log_dir)
    loggers = copy.deepcopy(LOGGER_CONFIGS)

    # 如果是調試模式，調整日誌級別並加入 debug 檔案
    if debug_mode:
        handlers["console"]["level"] = LogLevel.DEBUG.value
        for logger_config in loggers.values():
            if logger_config["level"] == LogLevel.INFO.value:
                logger_config["level"] = LogLevel.DEBUG.value
            logger_config["handlers"].append("file_debug")
    else:
        handlers["console"]["level"] = console_level.value

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {name: _to_formatter(fmt) for name, fmt in LOG_FORMATS.items()},
        "handlers": {name: _to_handler(handler) for name, handler in handlers.items()},
        "loggers": loggers,
        "root": {
            "level": file_level.value,
            "handlers": ["console", "file_info", "file_error"],
            "propagate": False
        }
    }

# 開發環境配置
def get_development_logging_config(log_dir: Union[str, Path] = DEFAULT_LOG_DIR) -> LoggingSystemConfig:
    """獲取開發環境的日誌配置"""
    return get_logging_config(
        log_dir=log_dir,
        console_level=LogLevel.DEBUG,
        file_level=LogLevel.DEBUG,
        debug_mode=True
    )

# 生產環境配置
def get_production_logging_config(log_dir: Union[str, Path] = DEFAULT_LOG_DIR) -> LoggingSystemConfig:
    """獲取生產環境的日誌配置"""
    return get_logging_config(
        log_dir=log_dir,
        console_level=LogLevel.INFO,
        file_level=LogLevel.INFO,
        debug_mode=False
    )

# 測試環境配置
def get_testing_logging_config(log_dir: Union[str, Path] = DEFAULT_LOG_DIR / "test") -> LoggingSystemConfig:
    """獲取測試環境的日誌配置"""
    return get_logging_config(
        log_dir=log_dir,
        console_level=LogLevel.WARNING,
        file_level=LogLevel.DEBUG,
        debug_mode=False
    )


def setup_logging(
    log_level: str = "INFO",
    verbose: bool = False,
    log_dir: Optional[Union[str, Path]] = None,
) -> None:
    """
    設定日誌系統

    Args:
        log_level: 日誌級別 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        verbose: 是否啟用詳細模式
        log_dir: 日誌目錄 (預設依環境決定)
    """
    try:
        # 轉換字符串到LogLevel枚舉
        level_enum = LogLevel(log_level.upper())
    except ValueError:
        level_enum = LogLevel.INFO

    # 根據verbose設定決定console級別
    console_level = LogLevel.DEBUG if verbose else level_enum

    # 獲取當前環境的日誌配置
    from .settings import get_environment
    environment = get_environment()

    if environment == "production":
        config = get_production_logging_config(log_dir or DEFAULT_LOG_DIR)
    elif environment == "testing":
        config = get_testing_logging_config(log_dir or DEFAULT_LOG_DIR / "test")
    else:  # development or others
        config = get_development_logging_config(log_dir or DEFAULT_LOG_DIR)

    # 覆蓋console級別
    config["handlers"]["console"]["level"] = console_level.value
    config["root"]["level"] = level_enum.value
    if not verbose and level_enum != LogLevel.DEBUG:
        for logger_config in config["loggers"].values():
            if logger_config["level"] == LogLevel.DEBUG.value:
                logger_config["level"] = level_enum.value

    # 應用配置
    logging.config.dictConfig(config)


# 特殊用途的日誌器名稱常數
class LoggerNames:
    """日誌器名稱常數"""
    SERVICES = "dgt_parser.services"
    ARCHIVE_SCANNER = "dgt_parser.services.archive_scanner"
    TMX_PARSER = "dgt_parser.services.tmx_parser"
    CORE = "dgt_parser.core"
    EXPORTER = "dgt_parser.core.exporter"
    PIPELINE = "dgt_parser.core.pipeline"
    SCHEMA_BUILDER = "dgt_parser.core.schema_builder"
    UTILS = "dgt_parser.utils"


# 導出列表
__all__ = [
    # Enums and TypedDict classes
    "LogLevel",
    "LogFormat",
    "HandlerConfig",
    "FormatterConfig",
    "LoggerConfig",
    "LoggingSystemConfig",

    # Configuration dictionaries and constants
    "LOG_FORMATS",
    "LOGGER_CONFIGS",
    "DEFAULT_LOG_DIR",

    # Functions
    "ensure_log_directory",
    "get_handler_configs",
    "get_logging_config",
    "get_development_logging_config",
    "get_production_logging_config",
    "get_testing_logging_config",
    "setup_logging",

    # Constants class
    "LoggerNames",
]
