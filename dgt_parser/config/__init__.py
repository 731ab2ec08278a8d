"""
配置模組
Configuration Module

本模組包含系統設定、日誌配置與匯出配置
"""

from .export_config import ExportConfig
from .logging_config import LoggerNames, setup_logging
from .settings import (
    Environment,
    get_config_for_environment,
    get_environment,
    set_environment,
)

__all__ = [
    # 匯出配置
    "ExportConfig",

    # 日誌
    "LoggerNames",
    "setup_logging",

    # 環境設定
    "Environment",
    "get_config_for_environment",
    "get_environment",
    "set_environment",
]
