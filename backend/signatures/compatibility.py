"""
Compatibility Checker - static lint of generated signature HTML

Rules run independently and in a fixed order:
1. Image URL validity
2. Size against Gmail's limits
3. Embedded data URLs
4. <div> elements (Outlook)
5. CSS classes mixed with inline styles
6. Modern CSS (flexbox, grid, media queries, viewport units)
7. All clear -> a single info entry

The rules assume renderers only emit tables, inline styles and explicit
image sizes. A template that needs something else would need its own rule
set.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .models import CompatibilityIssue, IssueSeverity
from .size_validator import estimate_size

MODERN_CSS_PATTERN = re.compile(
    r'display\s*:\s*(?:-webkit-|-ms-)?(?:inline-)?(?:flex|grid|box|flexbox)\b'
    r'|\bflexbox\b'
    r'|\bgrid-template'
    r'|@media\b'
    r'|\b\d+(?:\.\d+)?(?:vh|vw|vmin|vmax)\b',
    re.IGNORECASE,
)

EMAIL_CLIENTS = [
    "Gmail (Web/Mobile)",
    "Outlook Desktop",
    "Outlook Web",
    "Apple Mail",
    "Mobile Clients",
]


class UrlType(str, Enum):
    PUBLIC = "public"
    DATA = "data"
    RELATIVE = "relative"
    UNKNOWN = "unknown"


@dataclass
class UrlValidationResult:
    """Classification of an image URL for email use"""
    valid: bool = False
    type: UrlType = UrlType.UNKNOWN
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "type": self.type.value,
            "warnings": self.warnings,
            "errors": self.errors,
        }


def is_data_url(url: str) -> bool:
    return url.strip().lower().startswith("data:")


def validate_image_url(url: Optional[str]) -> UrlValidationResult:
    result = UrlValidationResult()

    if not url or not url.strip():
        result.errors.append("No image URL provided")
        return result

    url = url.strip()

    if is_data_url(url):
        result.type = UrlType.DATA
        result.errors.append(
            "Data URLs are not recommended for email signatures. "
            "They may be blocked by Gmail and cause large file sizes."
        )
        return result

    if url.startswith(("/", "./", "../")):
        result.type = UrlType.RELATIVE
        result.errors.append(
            "Relative URLs will not work in email signatures. Use absolute URLs (https://...)"
        )
        return result

    lowered = url.lower()
    if lowered.startswith(("http://", "https://")):
        result.type = UrlType.PUBLIC
        result.valid = True
        if lowered.startswith("http://"):
            result.warnings.append(
                "Using HTTP instead of HTTPS. Some email clients may block insecure images."
            )
        return result

    result.errors.append("Invalid URL format. Must be an absolute URL starting with https://")
    return result


def check_compatibility(html: str, image_url: Optional[str]) -> List[CompatibilityIssue]:
    """Lint a rendered signature. Pure and deterministic."""
    html = html or ""
    found: List[CompatibilityIssue] = []

    # 1. Image URL
    if image_url:
        url_check = validate_image_url(image_url)
        if not url_check.valid:
            found.append(CompatibilityIssue(
                IssueSeverity.ERROR,
                "Image URL Issue",
                url_check.errors[0] if url_check.errors else "Invalid image URL",
                "Upload your avatar to get a public URL",
            ))
        if url_check.warnings:
            found.append(CompatibilityIssue(
                IssueSeverity.WARNING,
                "Image URL Warning",
                url_check.warnings[0],
            ))

    # 2. Size
    size = estimate_size(html)
    if not size.within_limit:
        found.append(CompatibilityIssue(
            IssueSeverity.ERROR,
            "Signature Too Large",
            f"Your signature is {size.kilobytes}KB, which exceeds Gmail's ~10KB limit",
            "Reduce image size, remove unnecessary content, or simplify styling",
        ))
    elif size.warnings:
        found.append(CompatibilityIssue(
            IssueSeverity.WARNING,
            "Size Warning",
            size.warnings[0],
        ))

    # 3. Embedded images
    if "data:image" in html.lower():
        found.append(CompatibilityIssue(
            IssueSeverity.ERROR,
            "Data URL Detected",
            "Your signature contains embedded images (data URLs) which may be blocked by Gmail",
            "Upload your images to get public URLs",
        ))

    # 4. Non-table layout
    if "<div" in html.lower():
        found.append(CompatibilityIssue(
            IssueSeverity.WARNING,
            "DIV Elements Detected",
            "Outlook may not render <div> elements correctly",
            "Templates should use table-based layouts for maximum compatibility",
        ))

    # 5. Classes
    if "style=" in html and "class=" in html:
        found.append(CompatibilityIssue(
            IssueSeverity.WARNING,
            "CSS Classes Detected",
            "CSS classes may not work in email signatures",
            "Use inline styles only",
        ))

    # 6. Modern CSS
    if MODERN_CSS_PATTERN.search(html):
        found.append(CompatibilityIssue(
            IssueSeverity.ERROR,
            "Modern CSS Detected",
            "Modern CSS (flexbox, grid, media queries) is not supported in email",
            "Use table-based layouts with fixed widths",
        ))

    # 7. All clear
    if not found:
        found.append(CompatibilityIssue(
            IssueSeverity.INFO,
            "All Good!",
            f"Your signature is {size.kilobytes}KB and should work in all major email clients",
        ))

    return found


def summarize(issues: List[CompatibilityIssue]) -> Dict[str, Any]:
    """Group issues by severity; list supported clients when nothing is fatal."""
    errors = [i.to_dict() for i in issues if i.severity == IssueSeverity.ERROR]
    warnings = [i.to_dict() for i in issues if i.severity == IssueSeverity.WARNING]
    infos = [i.to_dict() for i in issues if i.severity == IssueSeverity.INFO]
    return {
        "errors": errors,
        "warnings": warnings,
        "info": infos,
        "compatible_clients": [] if errors else list(EMAIL_CLIENTS),
    }
