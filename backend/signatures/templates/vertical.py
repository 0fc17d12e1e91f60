"""Vertical: colored sidebar with avatar, name and title next to a contact column."""

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
            f'<table {TABLE_ATTRS} align="center" style="padding-bottom: 10px;"><tr>'
            f'<td style="background-color: #ffffff; border-radius: 50%; padding: 2px;">'
            f'{avatar_img(params.image_url, data.full_name, 72, colors.primary)}'
            f'</td></tr></table>'
        )

    contacts = wrap_rows(contact_rows(data, icons, colors.text, order=("email", "phone", "address")))
    calendar = calendar_button(data, colors, icons, variant="link", padding_top=10)
    social = social_icons_row(data, icons)
    if social:
        social = f'<table {TABLE_ATTRS} style="padding-top: 10px;"><tr><td>{social}</td></tr></table>'

    return (
        f'<table {TABLE_ATTRS} style="font-family: {params.font_family}; font-size: 14px; '
        f'color: {colors.text}; table-layout: fixed;">'
        f'<tr>'
        f'<td valign="top" width="140" style="background-color: {colors.primary}; padding: 20px; '
        f'border-radius: 8px 0 0 8px; text-align: center;">'
        f'{avatar}'
        f'<table {TABLE_ATTRS} width="100%">'
        f'<tr><td align="center" style="font-size: 16px; font-weight: bold; color: #ffffff;">'
        f'{escape_html(data.full_name)}</td></tr>'
        f'<tr><td align="center" style="padding-top: 2px; font-size: 12px; color: #ffffff;">'
        f'{escape_html(data.job_title)}</td></tr>'
        f'</table>'
        f'</td>'
        f'<td valign="top" style="background-color: {colors.background}; padding: 20px; '
        f'border-radius: 0 8px 8px 0;">'
        f'<table {TABLE_ATTRS}><tr><td style="padding-bottom: 5px; font-weight: bold; color: {colors.primary};">'
        f'{escape_html(data.company)}</td></tr></table>'
        f'{contacts}{calendar}{social}'
        f'</td>'
        f'</tr>'
        f'</table>'
    )
