"""
Constants module initialization
"""

from .tmx import *
from .export import *

__all__ = [
    # TMX constants
    "ARCHIVE_SUFFIX",
    "TMX_SUFFIX",
    "XML_LANG_ATTRIBUTE",
    "LEGACY_LANG_ATTRIBUTE",
    "DGT_LANGUAGE_ALIASES",

    # Export constants
    "DOCUMENTS_TABLE",
    "UNITS_TABLE",
    "FULLTEXT_TABLE",
    "RESERVED_COLUMNS",
    "FTS_RESERVED_COLUMNS",
    "DEFAULT_BATCH_SIZE",
    "PENDING_DOCUMENTS_PER_WORKER",
    "PROGRESS_LOG_INTERVAL",
]
