"""CSV cell and header normalization for spreadsheet exports."""

from __future__ import annotations

import re

_WHITESPACE = re.compile(r"[\s\u00a0]+")
_TAG_JOINERS = re.compile(r"[\s\u00a0\-]+")
_LIST_SEPARATORS = re.compile(r"[,;|]+")


def normalize_column_name(name: str) -> str:
    """Turn a header such as '\\ufeff Base  Price ' into 'base_price'.

    BOM is dropped, runs of (non-breaking) whitespace become one underscore,
    and anything that is not a word character is removed.
    """
    name = name.replace("\ufeff", "").strip()
    name = _WHITESPACE.sub("_", name).lower()
    return re.sub(r"[^\w]", "", name)


def clean_string(value: str | None) -> str | None:
    """Strip whitespace and return None for empty strings."""
    if value is None:
        return None
    value = value.strip()
    return value if value else None


def normalize_tag(value: str | None) -> str:
    """Slug for enum-like cells: 'Cuci Mobil' and 'cuci-mobil' both give 'cuci_mobil'."""
    if not value:
        return ""
    return _TAG_JOINERS.sub("_", value.strip()).lower()


def parse_specializations(raw: str | None) -> set[str]:
    """Parse 'Cuci Mobil; detailing | gardening' into {'cuci_mobil', 'detailing', 'gardening'}.

    Items are separated by comma, semicolon or pipe.
    """
    if not raw:
        return set()
    tags = (normalize_tag(part) for part in _LIST_SEPARATORS.split(raw))
    return {tag for tag in tags if tag}
