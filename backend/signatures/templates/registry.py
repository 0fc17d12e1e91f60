"""
Template Registry - single dispatch point from TemplateId to renderer

Nothing else in the code base branches on TemplateId. Adding a template
means adding the enum member, a renderer module, a preview, and one entry
in TEMPLATES below.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Union

from ..icons import IconRegistry, get_icon_registry
from ..models import BrandColors, RenderParams, TemplateId
from . import classic, compact, minimalist, modern, previews, social_focus, vertical

logger = logging.getLogger(__name__)

TEMPLATE_NOT_FOUND_HTML = '<p style="color: #b91c1c;">Error: Template not found.</p>'


@dataclass(frozen=True)
class SignatureTemplate:
    """A registered template: renderer plus picker thumbnail"""
    id: TemplateId
    name: str
    render: Callable[[RenderParams, Dict[str, str]], str]
    preview: Callable[[BrandColors], str]
    selectable_font: bool = True


TEMPLATES: List[SignatureTemplate] = [
    SignatureTemplate(TemplateId.MODERN, "Modern", modern.render, previews.modern_preview),
    SignatureTemplate(TemplateId.MINIMALIST, "Minimalist", minimalist.render, previews.minimalist_preview),
    SignatureTemplate(TemplateId.VERTICAL, "Vertical", vertical.render, previews.vertical_preview),
    SignatureTemplate(TemplateId.SOCIAL_FOCUS, "Social Focus", social_focus.render, previews.social_focus_preview),
    SignatureTemplate(TemplateId.CLASSIC, "Classic", classic.render, previews.classic_preview,
                      selectable_font=False),
    SignatureTemplate(TemplateId.COMPACT, "Compact", compact.render, previews.compact_preview),
]


def coerce_template_id(template_id: Union[TemplateId, str, None]) -> Optional[TemplateId]:
    """Map a raw id to TemplateId, or None when it is not a known template."""
    if isinstance(template_id, TemplateId):
        return template_id
    try:
        return TemplateId(template_id)
    except ValueError:
        return None


class TemplateRegistry:
    """
    Looks up templates and renders signatures with the current icon set.

    Usage:
        registry = TemplateRegistry(icon_registry)
        html = registry.render("modern", params)
    """

    def __init__(self, icon_registry: Optional[IconRegistry] = None):
        self.icon_registry = icon_registry or get_icon_registry()
        self._templates: Dict[TemplateId, SignatureTemplate] = {t.id: t for t in TEMPLATES}

    def get(self, template_id: Union[TemplateId, str, None]) -> Optional[SignatureTemplate]:
        key = coerce_template_id(template_id)
        if key is None:
            return None
        return self._templates.get(key)

    def render(self, template_id: Union[TemplateId, str, None], params: RenderParams) -> str:
        """
        Render a signature HTML fragment.

        Unknown ids return TEMPLATE_NOT_FOUND_HTML instead of raising, so a
        live preview never breaks mid-edit.
        """
        template = self.get(template_id)
        if template is None:
            logger.warning(f"Unknown signature template requested: {template_id!r}")
            return TEMPLATE_NOT_FOUND_HTML

        # Icons are read on every call so runtime overrides show up immediately
        icons = self.icon_registry.get_icon_urls()
        try:
            return template.render(params, icons)
        except Exception as e:
            logger.exception(f"Template {template.id.value} failed to render: {e}")
            return TEMPLATE_NOT_FOUND_HTML

    def get_preview(self, template_id: Union[TemplateId, str, None],
                    colors: Optional[BrandColors] = None) -> Optional[str]:
        template = self.get(template_id)
        if template is None:
            return None
        return template.preview(colors or BrandColors())

    def list_templates(self, colors: Optional[BrandColors] = None) -> List[Dict[str, object]]:
        colors = colors or BrandColors()
        return [
            {
                "id": t.id.value,
                "name": t.name,
                "selectable_font": t.selectable_font,
                "preview_svg": t.preview(colors),
            }
            for t in TEMPLATES
        ]


# Global registry instance
_template_registry: Optional[TemplateRegistry] = None


def get_template_registry() -> TemplateRegistry:
    """Get or create the template registry singleton."""
    global _template_registry
    if _template_registry is None:
        _template_registry = TemplateRegistry()
    return _template_registry


# Convenience function
def render_signature_html(template_id: Union[TemplateId, str, None], params: RenderParams) -> str:
    """Render with the process-wide registry and icon set."""
    return get_template_registry().render(template_id, params)
