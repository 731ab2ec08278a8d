"""
TMX 解析服務模組
TMX Parsing Service Module

將單一 TMX 文件的原始位元組解析為有序的翻譯單元列表。
編碼由 XML 解析器依 BOM 與 XML 宣告判斷 (DGT-TM 為帶 BOM 的 UTF-16LE)。
"""

import logging
from typing import Dict, List, Optional

from lxml import etree

from ..constants.tmx import (
    LEGACY_LANG_ATTRIBUTE,
    TMX_BODY_TAG,
    TMX_HEADER_TAG,
    TMX_ROOT_TAG,
    TMX_SEGMENT_TAG,
    TMX_UNIT_TAG,
    TMX_VARIANT_TAG,
    XML_LANG_ATTRIBUTE,
)
from ..models.corpus import ParsedDocument, ParsedUnit
from ..utils.language_codes import normalize_language_code


logger = logging.getLogger(__name__)


class TmxParseError(Exception):
    """TMX 文件格式錯誤"""
    pass


def _local_name(element: etree._Element) -> Optional[str]:
    """取得元素的 local name；註解與處理指令回傳 None"""
    if not isinstance(element.tag, str):
        return None
    return etree.QName(element).localname


def _find_child(element: etree._Element, name: str) -> Optional[etree._Element]:
    """尋找第一個指定名稱的子元素 (忽略 namespace)"""
    for child in element:
        if _local_name(child) == name:
            return child
    return None


class TmxParser:
    """
    TMX 解析器

    容錯規則：
    - 缺少或空白語言屬性的 tuv 會被略過
    - 沒有 seg 的 tuv 會被略過
    - 沒有可用 tuv 的 tu 仍佔用一個序號，產生空的對應表
    - 同一 tu 中重複的語言以第一個為準
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger(__name__ + ".TmxParser")

    def _create_xml_parser(self) -> etree.XMLParser:
        """建立 XML 解析器 (lxml 解析器不可跨執行緒共用，每次解析各自建立)"""
        return etree.XMLParser(
            resolve_entities=False,
            no_network=True,
            huge_tree=True,
            remove_comments=True,
        )

    def parse(self, content: bytes, name: str, archive_name: str = "") -> ParsedDocument:
        """
        解析單一 TMX 文件

        Args:
            content: TMX 原始位元組
            name: 文件名稱
            archive_name: 來源壓縮檔名稱

        Returns:
            解析結果，翻譯單元依原始順序編號 (從 1 開始)

        Raises:
            TmxParseError: XML 格式錯誤、不是 TMX 文件或含有 DTD 實體參照
        """
        try:
            root = etree.fromstring(content, parser=self._create_xml_parser())
        except (etree.XMLSyntaxError, ValueError) as e:
            raise TmxParseError(f"Malformed XML in {name}: {e}") from e

        if root is None or _local_name(root) != TMX_ROOT_TAG:
            raise TmxParseError(f"{name} is not a TMX document (root element: {getattr(root, 'tag', None)})")

        # 實體不展開，未展開的參照不得當作文字寫入
        entity = next(root.iter(etree.Entity), None)
        if entity is not None:
            raise TmxParseError(f"{name} uses unsupported entity reference {entity.text}")

        body = _find_child(root, TMX_BODY_TAG)
        if body is None:
            raise TmxParseError(f"{name} has no <{TMX_BODY_TAG}> element")

        header = _find_child(root, TMX_HEADER_TAG)
        header_attributes = {str(key): str(value) for key, value in header.attrib.items()} if header is not None else {}

        units: List[ParsedUnit] = []
        for element in body:
            if _local_name(element) != TMX_UNIT_TAG:
                continue
            units.append(ParsedUnit(
                sequential_number=len(units) + 1,
                segments=self._parse_unit(element, name),
            ))

        self.logger.debug(f"Parsed {name}: {len(units)} translation units, header={header_attributes}")

        return ParsedDocument(
            name=name,
            archive_name=archive_name,
            units=units,
            header=header_attributes,
        )

    def _parse_unit(self, unit: etree._Element, document_name: str) -> Dict[str, str]:
        """解析單一 tu，回傳 原始語言代碼 -> 文字"""
        segments: Dict[str, str] = {}

        for variant in unit:
            if _local_name(variant) != TMX_VARIANT_TAG:
                continue

            lang = (variant.get(XML_LANG_ATTRIBUTE) or variant.get(LEGACY_LANG_ATTRIBUTE) or "").strip()
            if not normalize_language_code(lang):
                self.logger.debug(f"Dropping variant without usable language in {document_name}")
                continue

            segment = _find_child(variant, TMX_SEGMENT_TAG)
            if segment is None:
                self.logger.debug(f"Dropping {lang} variant without <seg> in {document_name}")
                continue

            if lang in segments:
                continue

            segments[lang] = "".join(segment.itertext())

        return segments


__all__ = [
    "TmxParseError",
    "TmxParser",
]
