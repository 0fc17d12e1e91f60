"""
Signature Engine - URL normalization and field escaping

Everything interpolated into signature markup goes through one of these:
- normalize_url: user-entered links -> absolute URL or ""
- escape_html: text nodes and attribute values
- href / src: normalize + escape for attribute contexts
"""

import html
import re
from typing import Optional, List, Dict

SCHEME_PATTERN = re.compile(r'^https?://', re.IGNORECASE)


def normalize_url(url: Optional[str]) -> str:
    """
    Turn a possibly bare link into an absolute URL.

    "" / whitespace -> ""
    "http://x" / "https://x" -> unchanged
    "example.com" -> "https://example.com"
    """
    if not url:
        return ""
    trimmed = url.strip()
    if not trimmed:
        return ""
    if SCHEME_PATTERN.match(trimmed):
        return trimmed
    return f"https://{trimmed}"


def escape_html(text: Optional[str]) -> str:
    """Escape &, <, >, " and ' for text nodes and quoted attributes."""
    if not text:
        return ""
    return html.escape(str(text), quote=True)


def attr_url(url: Optional[str]) -> str:
    """Escape an already-built URL for an href/src attribute."""
    return escape_html(url)


def display_url(url: str) -> str:
    """Strip the scheme for display ("https://acme.com" -> "acme.com")."""
    return SCHEME_PATTERN.sub("", url, count=1)


# ==================== FONTS ====================

FONT_OPTIONS: List[Dict[str, str]] = [
    {"label": "Arial", "value": "Arial, sans-serif"},
    {"label": "Verdana", "value": "Verdana, Geneva, sans-serif"},
    {"label": "Tahoma", "value": "Tahoma, Geneva, sans-serif"},
    {"label": "Trebuchet MS", "value": "Trebuchet MS, sans-serif"},
    {"label": "Georgia", "value": "Georgia, serif"},
    {"label": "Times New Roman", "value": "Times New Roman, Times, serif"},
    {"label": "Courier New", "value": "Courier New, monospace"},
]

ALLOWED_FONT_FAMILIES = frozenset(option["value"] for option in FONT_OPTIONS)


def is_allowed_font(font_family: Optional[str]) -> bool:
    return font_family in ALLOWED_FONT_FAMILIES
