# File: index_ping/parser/sitemap_parser.py
"""index_ping.parser.sitemap_parser: Извлечение <loc> из sitemap и определение типа документа.

Документ разбирается регулярными выражениями, а не XML-парсером: схема sitemap
простая, а живые sitemap часто слегка битые (незакрытые теги, мусор до пролога).
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence
from urllib.parse import urljoin

from index_ping.utils import canonicalize_url

__all__ = [
    "SITEMAP_INDEX",
    "URLSET",
    "decode_xml_entities",
    "extract_loc_values",
    "classify_sitemap",
    "resolve_loc",
]

SITEMAP_INDEX = "sitemapindex"
URLSET = "urlset"

_LOC_RE = re.compile(r"<loc\b[^>]*>(.*?)</loc>", re.IGNORECASE | re.DOTALL)
_INDEX_TAG_RE = re.compile(r"<sitemapindex[\s>]|<sitemap[\s>]", re.IGNORECASE)
_URLSET_TAG_RE = re.compile(r"<urlset[\s>]|<url[\s>]", re.IGNORECASE)
_XML_LINK_RE = re.compile(r"\.xml(?:$|[?#])", re.IGNORECASE)

_ENTITIES = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&apos;": "'",
    "&#39;": "'",
    "&#x27;": "'",
}
_ENTITY_RE = re.compile("|".join(re.escape(e) for e in _ENTITIES), re.IGNORECASE)


def decode_xml_entities(value: str) -> str:
    """Decode the predefined XML entities in one pass (``&amp;lt;`` stays ``&lt;``)."""
    if not value:
        return ""
    return _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(0).lower()], value)


def extract_loc_values(xml_text: str) -> List[str]:
    """Возвращает непустые значения всех тегов <loc> в порядке появления.

    Пример:
    ```python
    extract_loc_values("<urlset><url><loc>https://a.com/x?a=1&amp;b=2</loc></url></urlset>")
    # ['https://a.com/x?a=1&b=2']
    ```
    """
    values: List[str] = []
    for match in _LOC_RE.finditer(xml_text):
        decoded = decode_xml_entities(match.group(1)).strip()
        if decoded:
            values.append(decoded)
    return values


def classify_sitemap(xml_text: str, loc_values: Sequence[str]) -> str:
    """Определяет тип документа: ``sitemapindex`` или ``urlset``.

    Явные теги имеют приоритет. Без тегов документ считается индексом, если
    каждый <loc> оканчивается на ``.xml`` (допускается query/fragment). Это
    эвристика: urlset, ссылающийся только на .xml-ресурсы, будет принят
    за индекс.
    """
    if _INDEX_TAG_RE.search(xml_text):
        return SITEMAP_INDEX
    if _URLSET_TAG_RE.search(xml_text):
        return URLSET
    if loc_values and all(_XML_LINK_RE.search(loc) for loc in loc_values):
        return SITEMAP_INDEX
    return URLSET


def resolve_loc(loc: str, document_url: str) -> Optional[str]:
    """Resolve *loc* against the sitemap URL it came from; ``None`` if unusable."""
    try:
        joined = urljoin(document_url, loc.strip())
    except ValueError:
        return None
    return canonicalize_url(joined)
