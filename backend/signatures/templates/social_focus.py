"""Social focus: header block, colored rule, contacts left and social icons right."""

from typing import Dict

from ..models import RenderParams
from ..sanitize import escape_html
from .shared import (
    TABLE_ATTRS, avatar_img, calendar_button, contact_rows,
    social_icons_row, wrap_rows,
)


def render(params: RenderParams, icons: Dict[str, str]) -> str:
    data, colors = params.data, params.colors

    avatar = ""
    if params.image_url:
        avatar = (
            f'<td valign="top" width="80" style="padding-right: 15px;">'
            f'{avatar_img(params.image_url, data.full_name, 60, colors.primary)}'
            f'</td>'
        )

    contacts = wrap_rows(contact_rows(data, icons, colors.text, order=("email", "phone", "website")))
    calendar = calendar_button(data, colors, icons)
    social = social_icons_row(data, icons)

    footer = ""
    if contacts or calendar or social:
        footer = (
            f'<tr><td colspan="2" style="padding-top: 15px; border-top: 2px solid {colors.primary};">'
            f'<table {TABLE_ATTRS} width="100%"><tr>'
            f'<td valign="top" width="50%">{contacts}{calendar}</td>'
            f'<td valign="top" align="right">{social}</td>'
            f'</tr></table>'
            f'</td></tr>'
        )

    return (
        f'<table {TABLE_ATTRS} width="450" style="font-family: {params.font_family}; '
        f'color: {colors.text}; font-size: 14px; table-layout: fixed;">'
        f'<tr>{avatar}'
        f'<td valign="top" style="padding-bottom: 8px;">'
        f'<table {TABLE_ATTRS}>'
        f'<tr><td style="font-weight: bold; color: {colors.primary}; font-size: 18px;">'
        f'{escape_html(data.full_name)}</td></tr>'
        f'<tr><td style="padding-top: 2px; color: {colors.secondary};">'
        f'{escape_html(data.job_title)} at {escape_html(data.company)}</td></tr>'
        f'</table>'
        f'</td></tr>'
        f'{footer}'
        f'</table>'
    )
