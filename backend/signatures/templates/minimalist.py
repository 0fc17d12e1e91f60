"""Minimalist: thin colored rule, stacked text lines, text calendar link."""

from typing import Dict

from ..models import RenderParams
from ..sanitize import escape_html
from .shared import TABLE_ATTRS, avatar_img, calendar_button, contact_rows


def render(params: RenderParams, icons: Dict[str, str]) -> str:
    data, colors = params.data, params.colors

    avatar = ""
    if params.image_url:
        avatar = (
            f'<td valign="top" width="80" style="padding-right: 12px;">'
            f'{avatar_img(params.image_url, data.full_name, 60, colors.primary)}'
            f'</td>'
        )

    rows = contact_rows(
        data, icons, colors.text,
        order=("email", "phone", "website"),
        website_color=colors.primary,
    )
    calendar = calendar_button(data, colors, icons, variant="link", padding_top=6)
    if calendar:
        rows.append(f'<tr><td>{calendar}</td></tr>')

    return (
        f'<table {TABLE_ATTRS} style="font-family: {params.font_family}; font-size: 13px; '
        f'color: {colors.text}; line-height: 1.5; table-layout: fixed;">'
        f'<tr>{avatar}'
        f'<td valign="top" style="border-left: 2px solid {colors.primary}; padding-left: 15px;">'
        f'<table {TABLE_ATTRS}>'
        f'<tr><td style="font-weight: bold; color: {colors.primary}; font-size: 16px;">'
        f'{escape_html(data.full_name)}</td></tr>'
        f'<tr><td style="padding-top: 2px; color: {colors.secondary};">{escape_html(data.job_title)}</td></tr>'
        f'<tr><td style="padding: 2px 0 8px 0; color: {colors.secondary}; font-weight: bold;">'
        f'{escape_html(data.company)}</td></tr>'
        f'{"".join(rows)}'
        f'</table>'
        f'</td></tr>'
        f'</table>'
    )
