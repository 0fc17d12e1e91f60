"""Modern: left accent bar, round avatar, tagline and icon contact rows."""

from typing import Dict

from ..models import RenderParams
from ..sanitize import escape_html
from .shared import (
    TABLE_ATTRS, avatar_img, calendar_button, contact_rows,
    social_icons_row, wrap_rows,
)


def render(params: RenderParams, icons: Dict[str, str]) -> str:
    data, colors = params.data, params.colors
    name = escape_html(data.full_name)

    avatar = ""
    if params.image_url:
        avatar = (
            f'<td valign="top" width="110" style="padding: 16px 20px;">'
            f'{avatar_img(params.image_url, data.full_name, 90, colors.primary)}'
            f'</td>'
        )

    tagline = ""
    if data.tagline.strip():
        tagline = (
            f'<tr><td style="padding: 6px 0 2px 0; font-style: italic; '
            f'color: {colors.secondary}; font-size: 12px;">'
            f'&ldquo;{escape_html(data.tagline.strip())}&rdquo;</td></tr>'
        )

    contacts = wrap_rows(
        contact_rows(data, icons, colors.text),
        style="border-top: 1px solid #eeeeee; margin-top: 8px; padding-top: 8px;",
    )
    calendar = calendar_button(data, colors, icons)
    social = social_icons_row(data, icons)
    extras = "".join(
        f'<tr><td style="padding-top: {pad}px;">{block}</td></tr>'
        for pad, block in ((8, contacts), (0, calendar), (12, social)) if block
    )

    return (
        f'<table {TABLE_ATTRS} style="font-family: {params.font_family}; font-size: 14px; '
        f'color: {colors.text}; background-color: {colors.background}; '
        f'border-left: 5px solid {colors.primary}; table-layout: fixed;">'
        f'<tr>{avatar}'
        f'<td valign="top" style="padding: 16px 20px;">'
        f'<table {TABLE_ATTRS}>'
        f'<tr><td style="font-size: 18px; font-weight: bold; color: {colors.primary};">{name}</td></tr>'
        f'<tr><td style="padding-top: 2px; color: {colors.secondary};">'
        f'{escape_html(data.job_title)} | {escape_html(data.company)}</td></tr>'
        f'{tagline}{extras}'
        f'</table>'
        f'</td></tr>'
        f'</table>'
    )
