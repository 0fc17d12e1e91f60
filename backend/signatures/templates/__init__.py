"""
Signature templates

One module per layout plus the registry that dispatches to them.
"""

from .registry import (
    TEMPLATES,
    TEMPLATE_NOT_FOUND_HTML,
    SignatureTemplate,
    TemplateRegistry,
    coerce_template_id,
    get_template_registry,
    render_signature_html,
)

__all__ = [
    'TEMPLATES',
    'TEMPLATE_NOT_FOUND_HTML',
    'SignatureTemplate',
    'TemplateRegistry',
    'coerce_template_id',
    'get_template_registry',
    'render_signature_html',
]
