"""
Text utilities shared by parsers and generators.

Header normalization, URL slugs, field sanitizing and list splitting.
"""

import re
from typing import Iterable, Optional

_WHITESPACE_RE = re.compile(r"\s+")
_SLUG_STRIP_RE = re.compile(r"[^a-z0-9\s-]")
_HYPHENS_RE = re.compile(r"-+")
_HTML_TAG_RE = re.compile(r"</?[^>]+(>|$)")
_SANITIZE_STRIP_RE = re.compile(r"[^a-zA-Z0-9\s.,'()\-&€$£%]")


def normalize_header(key: Optional[str]) -> str:
    """
    Canonical form of a column header.

    Applied once at parse time so every later lookup is an exact match:
    - "  Custom label (SKU) " → "custom label (sku)"
    - "Image   URL 1" → "image url 1"
    - "CategoryName" → "categoryname"

    Args:
        key: Raw header cell

    Returns:
        Trimmed, lower-cased header with inner whitespace collapsed
    """
    if key is None:
        return ""
    return _WHITESPACE_RE.sub(" ", str(key)).strip().lower()


def slugify(name: Optional[str]) -> str:
    """
    URL path slug for a product name.

    - "Men's Clothing & Shoes" → "mens-clothing-and-shoes"
    - "  Blue   Denim -- Jacket " → "blue-denim-jacket"

    Deterministic and locale independent: non-ASCII letters are dropped,
    not transliterated.
    """
    if not name:
        return ""
    slug = name.lower().replace("&", "and")
    slug = _SLUG_STRIP_RE.sub("", slug).strip()
    slug = _WHITESPACE_RE.sub("-", slug)
    return _HYPHENS_RE.sub("-", slug)


def sanitize_field(text: Optional[str]) -> str:
    """
    Plain-text version of a marketplace description.

    Strips HTML tags, repairs common mojibake, and drops characters the
    Ecokart importer rejects:
    - "<p>Soft <b>cotton</b> tee</p>" → "Soft cotton tee"
    - "Kids â€™ shoes | size 3" → "Kids ' shoes - size 3"
    """
    if not text:
        return ""

    cleaned = _HTML_TAG_RE.sub(" ", text)
    cleaned = (
        cleaned.replace("â€™", "'")
        .replace("â€“", "-")
        .replace("|", "-")
        .replace("\u2013", "-")
        .replace("\u2014", "-")
    )
    cleaned = _SANITIZE_STRIP_RE.sub("", cleaned)
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def truncate(text: Optional[str], max_length: int) -> str:
    """Cut text to at most max_length characters."""
    if not text:
        return ""
    return text[:max_length]


def split_list(value: Optional[str], delimiter: str = ",") -> list[str]:
    """
    Split a delimiter-joined cell into trimmed, non-empty parts.

    - "a.jpg, b.jpg" → ["a.jpg", "b.jpg"]
    - "a.jpg||b.jpg" with "|" → ["a.jpg", "b.jpg"]
    """
    if not value:
        return []
    return [part.strip() for part in str(value).split(delimiter) if part.strip()]


def unique(values: Iterable[str]) -> list[str]:
    """Drop empty and repeated values, keeping first occurrence order."""
    seen: set[str] = set()
    result = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result
