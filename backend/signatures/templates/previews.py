"""
Template thumbnails for the template picker.

Each preview is a small inline SVG sketch of the layout drawn in the brand
colors, so the picker can show it without rendering real contact data.
"""

from typing import List, Tuple

from ..models import BrandColors
from ..sanitize import escape_html

WIDTH = 120
HEIGHT = 60

# (x, y, width, height, rx, color key)
Shape = Tuple[int, int, int, int, int, str]


def _svg(shapes: List[Shape], colors: BrandColors, title: str) -> str:
    palette = {
        "primary": colors.primary,
        "secondary": colors.secondary,
        "text": colors.text,
        "background": colors.background,
        "white": "#ffffff",
        "rule": "#d1d5db",
    }
    parts = [
        f'<rect x="{x}" y="{y}" width="{w}" height="{h}" rx="{rx}" fill="{escape_html(palette[key])}" />'
        for x, y, w, h, rx, key in shapes
    ]
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{WIDTH}" height="{HEIGHT}" '
        f'viewBox="0 0 {WIDTH} {HEIGHT}" role="img" aria-label="{escape_html(title)}">'
        f'<rect x="0.5" y="0.5" width="{WIDTH - 1}" height="{HEIGHT - 1}" rx="4" '
        f'fill="#ffffff" stroke="#e5e7eb" />'
        f'{"".join(parts)}'
        f'</svg>'
    )


def modern_preview(colors: BrandColors) -> str:
    return _svg([
        (8, 18, 22, 22, 11, "primary"),
        (38, 18, 52, 6, 2, "primary"),
        (38, 28, 68, 5, 2, "secondary"),
        (38, 36, 60, 4, 2, "text"),
    ], colors, "Modern")


def minimalist_preview(colors: BrandColors) -> str:
    return _svg([
        (10, 12, 3, 36, 1, "primary"),
        (20, 18, 44, 6, 2, "primary"),
        (20, 28, 60, 5, 2, "secondary"),
        (20, 36, 68, 4, 2, "text"),
    ], colors, "Minimalist")


def classic_preview(colors: BrandColors) -> str:
    return _svg([
        (8, 18, 22, 22, 0, "secondary"),
        (36, 14, 1, 30, 0, "rule"),
        (44, 20, 52, 6, 2, "text"),
        (44, 30, 38, 5, 2, "secondary"),
    ], colors, "Classic")


def vertical_preview(colors: BrandColors) -> str:
    return _svg([
        (1, 1, 40, 58, 3, "primary"),
        (13, 12, 16, 16, 8, "white"),
        (10, 34, 22, 4, 2, "white"),
        (48, 16, 40, 5, 2, "secondary"),
        (48, 28, 62, 4, 2, "text"),
        (48, 36, 56, 4, 2, "text"),
    ], colors, "Vertical")


def compact_preview(colors: BrandColors) -> str:
    return _svg([
        (10, 22, 84, 6, 2, "primary"),
        (10, 32, 96, 4, 2, "secondary"),
    ], colors, "Compact")


def social_focus_preview(colors: BrandColors) -> str:
    return _svg([
        (8, 10, 16, 16, 3, "secondary"),
        (30, 14, 60, 6, 2, "primary"),
        (8, 32, 104, 2, 0, "primary"),
        (8, 42, 44, 4, 2, "text"),
        (80, 40, 8, 8, 2, "secondary"),
        (92, 40, 8, 8, 2, "secondary"),
        (104, 40, 8, 8, 2, "secondary"),
    ], colors, "Social Focus")
