"""
TMX format constants
TMX 格式常數
"""

from typing import Dict

# 檔案副檔名
ARCHIVE_SUFFIX = ".zip"
TMX_SUFFIX = ".tmx"

# TMX 元素名稱 (local name，不含 namespace)
TMX_ROOT_TAG = "tmx"
TMX_HEADER_TAG = "header"
TMX_BODY_TAG = "body"
TMX_UNIT_TAG = "tu"
TMX_VARIANT_TAG = "tuv"
TMX_SEGMENT_TAG = "seg"

# 語言屬性：TMX 1.4 使用 xml:lang，TMX 1.1 使用 lang
XML_LANG_ATTRIBUTE = "{http://www.w3.org/XML/1998/namespace}lang"
LEGACY_LANG_ATTRIBUTE = "lang"

# DGT-TM 使用的語言代碼 (簡寫 -> DGT 代碼)
DGT_LANGUAGE_ALIASES: Dict[str, str] = {
    "en": "EN-GB",
    "pl": "PL-01",
    "de": "DE-DE",
    "da": "DA-01",
    "el": "EL-01",
    "es": "ES-ES",
    "fi": "FI-01",
    "fr": "FR-FR",
    "it": "IT-IT",
    "nl": "NL-NL",
    "pt": "PT-PT",
    "sv": "SV-SE",
    "lv": "LV-01",
    "cs": "CS-01",
    "et": "ET-01",
    "hu": "HU-01",
    "sl": "SL-01",
    "lt": "LT-01",
    "mt": "MT-01",
    "sk": "SK-01",
    "ro": "RO-RO",
    "bg": "BG-01",
    "hr": "HR-HR",
    "ga": "GA-IE",
}


__all__ = [
    "ARCHIVE_SUFFIX",
    "TMX_SUFFIX",
    "TMX_ROOT_TAG",
    "TMX_HEADER_TAG",
    "TMX_BODY_TAG",
    "TMX_UNIT_TAG",
    "TMX_VARIANT_TAG",
    "TMX_SEGMENT_TAG",
    "XML_LANG_ATTRIBUTE",
    "LEGACY_LANG_ATTRIBUTE",
    "DGT_LANGUAGE_ALIASES",
]
