"""
Signature Engine

Renders email signatures as self-contained, table-based HTML fragments that
survive Gmail, Outlook and Apple Mail.

Features:
- Six templates dispatched through a single registry
- URL normalization and escaping of every interpolated field
- Runtime-configurable icon set, resolved from an asset host
- Static compatibility and size checks on generated HTML
- Avatar validation/optimization with Pillow and S3-compatible storage
- Clipboard export with writer fallbacks

Persistence and uploads live in signatures.service, signatures.storage and
signatures.uploads; they are not imported here so the rendering engine has
no database or network dependencies.
"""

from .models import (
    TemplateId,
    IssueSeverity,
    ContactData,
    BrandColors,
    ImageStatus,
    ImageState,
    RenderParams,
    CompatibilityIssue,
    Signature,
    DEFAULT_FONT_FAMILY,
)
from .sanitize import normalize_url, escape_html, FONT_OPTIONS, is_allowed_font
from .icons import IconRegistry, get_icon_registry, ICON_NAMES, DEFAULT_ICON_URLS
from .templates import (
    TemplateRegistry,
    get_template_registry,
    render_signature_html,
    TEMPLATE_NOT_FOUND_HTML,
)
from .compatibility import check_compatibility, validate_image_url
from .size_validator import estimate_size, SizeEstimate
from .export import build_export, copy_with_fallback, ExportPayload, ExportError, can_copy, can_save

__all__ = [
    # Types
    'TemplateId',
    'IssueSeverity',
    'ContactData',
    'BrandColors',
    'ImageStatus',
    'ImageState',
    'RenderParams',
    'CompatibilityIssue',
    'Signature',
    'DEFAULT_FONT_FAMILY',
    # Sanitizing
    'normalize_url',
    'escape_html',
    'FONT_OPTIONS',
    'is_allowed_font',
    # Icons
    'IconRegistry',
    'get_icon_registry',
    'ICON_NAMES',
    'DEFAULT_ICON_URLS',
    # Templates
    'TemplateRegistry',
    'get_template_registry',
    'render_signature_html',
    'TEMPLATE_NOT_FOUND_HTML',
    # Checks
    'check_compatibility',
    'validate_image_url',
    'estimate_size',
    'SizeEstimate',
    # Export
    'build_export',
    'copy_with_fallback',
    'ExportPayload',
    'ExportError',
    'can_copy',
    'can_save',
]
