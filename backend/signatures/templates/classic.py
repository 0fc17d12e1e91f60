"""Classic: serif type, grey divider and labelled contact lines."""

from typing import Dict

from ..models import RenderParams
from ..sanitize import attr_url, escape_html, normalize_url
from .shared import TABLE_ATTRS, avatar_img, calendar_button, social_icons_row

CLASSIC_FONT = "'Times New Roman', Times, serif"


def _labelled(label: str, value: str) -> str:
    return f'<tr><td style="padding: 3px 0;"><strong>{label}</strong> {value}</td></tr>'


def render(params: RenderParams, icons: Dict[str, str]) -> str:
    data, colors = params.data, params.colors

    avatar = ""
    if params.image_url:
        avatar = (
            f'<td valign="top" style="padding-right: 15px;">'
            f'{avatar_img(params.image_url, data.full_name, 70, colors.primary)}'
            f'</td>'
        )

    lines = []
    phone = data.phone.strip()
    if phone:
        lines.append(_labelled("Tel:", escape_html(phone)))
    email = data.email.strip()
    if email:
        lines.append(_labelled(
            "Email:",
            f'<a href="{attr_url("mailto:" + email)}" '
            f'style="color: {colors.primary}; text-decoration: none;">{escape_html(email)}</a>',
        ))
    website = normalize_url(data.website)
    if website:
        lines.append(_labelled(
            "Web:",
            f'<a href="{attr_url(website)}" target="_blank" '
            f'style="color: {colors.primary}; text-decoration: none;">{escape_html(data.website.strip())}</a>',
        ))
    if data.address.strip():
        lines.append(_labelled("Address:", escape_html(data.address.strip())))

    calendar = calendar_button(data, colors, icons)
    if calendar:
        lines.append(f'<tr><td>{calendar}</td></tr>')
    social = social_icons_row(data, icons, icon_size=20)
    if social:
        lines.append(f'<tr><td style="padding-top: 10px;">{social}</td></tr>')

    return (
        f'<table {TABLE_ATTRS} style="font-family: {CLASSIC_FONT}; font-size: 14px; color: {colors.text};">'
        f'<tr>{avatar}'
        f'<td valign="top" style="border-left: 1px solid #cccccc; padding-left: 15px;">'
        f'<table {TABLE_ATTRS}>'
        f'<tr><td style="font-weight: bold; font-size: 16px; color: #000000;">{escape_html(data.full_name)}</td></tr>'
        f'<tr><td style="padding-top: 2px; font-style: italic; color: {colors.secondary};">'
        f'{escape_html(data.job_title)}</td></tr>'
        f'<tr><td style="padding: 2px 0 8px 0; color: {colors.secondary};">{escape_html(data.company)}</td></tr>'
        f'{"".join(lines)}'
        f'</table>'
        f'</td></tr>'
        f'</table>'
    )
