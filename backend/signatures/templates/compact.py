"""Compact: name | title on one line, contacts inline underneath."""

from typing import Dict

from ..models import RenderParams
from ..sanitize import attr_url, escape_html, normalize_url
from .shared import TABLE_ATTRS, calendar_button, icon_img, social_icons_row

ICON_STYLE = "vertical-align: middle; margin-right: 4px; border: 0;"


def _inline_item(icon_src: str, alt: str, content: str, first: bool) -> str:
    spacing = "" if first else "padding-left: 8px;"
    return f'<td style="{spacing}">{icon_img(icon_src, alt, 12, ICON_STYLE)}{content}</td>'


def render(params: RenderParams, icons: Dict[str, str]) -> str:
    data, colors = params.data, params.colors
    link_style = "text-decoration: none;"

    items = []
    email = data.email.strip()
    if email:
        items.append(("email", "Email",
                      f'<a href="{attr_url("mailto:" + email)}" '
                      f'style="color: {colors.secondary}; {link_style}">{escape_html(email)}</a>'))
    phone = data.phone.strip()
    if phone:
        items.append(("phone", "Phone",
                      f'<a href="{attr_url("tel:" + phone)}" '
                      f'style="color: {colors.secondary}; {link_style}">{escape_html(phone)}</a>'))
    website = normalize_url(data.website)
    if website:
        items.append(("website", "Website",
                      f'<a href="{attr_url(website)}" target="_blank" '
                      f'style="color: {colors.primary}; {link_style}">Website</a>'))

    contact_row = ""
    if items:
        cells = "".join(
            _inline_item(icons[name], alt, content, index == 0)
            for index, (name, alt, content) in enumerate(items)
        )
        contact_row = (
            f'<tr><td colspan="3" style="font-size: 11px; color: {colors.secondary};">'
            f'<table {TABLE_ATTRS}><tr>{cells}</tr></table>'
            f'</td></tr>'
        )

    extra_rows = ""
    calendar = calendar_button(data, colors, icons, variant="link", padding_top=5)
    if calendar:
        extra_rows += f'<tr><td colspan="3">{calendar}</td></tr>'
    social = social_icons_row(data, icons, icon_size=16)
    if social:
        extra_rows += f'<tr><td colspan="3" style="padding-top: 5px;">{social}</td></tr>'

    return (
        f'<table {TABLE_ATTRS} style="font-family: {params.font_family}; font-size: 12px; '
        f'color: {colors.text}; table-layout: fixed;">'
        f'<tr>'
        f'<td style="font-weight: bold; color: {colors.primary};">{escape_html(data.full_name)}</td>'
        f'<td style="padding: 0 5px; color: #cccccc;">|</td>'
        f'<td>{escape_html(data.job_title)}</td>'
        f'</tr>'
        f'{contact_row}{extra_rows}'
        f'</table>'
    )
