"""
Building blocks shared by every signature template.

All markup is table based with inline styles only. Every <img> carries
explicit width/height attributes because Outlook ignores CSS sizes.
"""

from typing import Dict, List, Optional

from ..models import BrandColors, ContactData
from ..sanitize import attr_url, display_url, escape_html, normalize_url

DEFAULT_CALENDAR_TEXT = "Schedule a meeting"

TABLE_ATTRS = 'cellpadding="0" cellspacing="0" border="0" role="presentation"'

SOCIAL_NETWORKS = (
    ("linkedin", "LinkedIn"),
    ("twitter", "X (Twitter)"),
    ("instagram", "Instagram"),
    ("facebook", "Facebook"),
)


def icon_img(src: str, alt: str, size: int, style: str = "") -> str:
    style = style or "vertical-align: middle; border: 0;"
    return (
        f'<img src="{attr_url(src)}" alt="{escape_html(alt)}" '
        f'width="{size}" height="{size}" border="0" style="{style}" />'
    )


def avatar_img(src: str, alt: str, size: int, border_color: str, extra_style: str = "") -> str:
    style = f"display: block; border: 2px solid {border_color}; border-radius: 50%;{extra_style}"
    return (
        f'<img src="{attr_url(src)}" alt="{escape_html(alt)}" '
        f'width="{size}" height="{size}" border="0" style="{style}" />'
    )


def social_links(data: ContactData) -> List[tuple]:
    """(icon name, alt text, normalized href) for every filled social field."""
    links = []
    for name, alt in SOCIAL_NETWORKS:
        href = normalize_url(getattr(data, name))
        if href:
            links.append((name, alt, href))
    return links


def social_icons_row(data: ContactData, icons: Dict[str, str], icon_size: int = 24) -> str:
    """Row of linked social icons, or "" when no social link is set."""
    cells = []
    for name, alt, href in social_links(data):
        cells.append(
            f'<td valign="middle" width="{icon_size + 4}" style="padding-right: 8px;">'
            f'<a href="{attr_url(href)}" target="_blank" style="text-decoration: none;">'
            f'{icon_img(icons[name], alt, icon_size, "display: block; border: 0;")}'
            f'</a></td>'
        )
    if not cells:
        return ""
    return (
        f'<table {TABLE_ATTRS} style="table-layout: fixed;">'
        f'<tr>{"".join(cells)}</tr>'
        f'</table>'
    )


def calendar_text(data: ContactData) -> str:
    return escape_html(data.calendar_text.strip() or DEFAULT_CALENDAR_TEXT)


def calendar_button(
    data: ContactData,
    colors: BrandColors,
    icons: Dict[str, str],
    variant: str = "button",
    padding_top: int = 12,
) -> str:
    """
    Calendar call-to-action, or "" when no calendar URL is set.

    variant="button" renders a filled button with the calendar icon,
    variant="link" renders a bold text link (prefixed with an arrow).
    """
    href = normalize_url(data.calendar_url)
    if not href:
        return ""

    label = calendar_text(data)
    if variant == "link":
        return (
            f'<table {TABLE_ATTRS} style="padding-top: {padding_top}px;"><tr><td>'
            f'<a href="{attr_url(href)}" target="_blank" '
            f'style="color: {colors.primary}; text-decoration: none; font-weight: bold;">'
            f'&rarr; {label}</a>'
            f'</td></tr></table>'
        )

    return (
        f'<table {TABLE_ATTRS} style="padding-top: {padding_top}px;"><tr>'
        f'<td style="background-color: {colors.primary}; padding: 8px 12px; border-radius: 5px;">'
        f'<a href="{attr_url(href)}" target="_blank" '
        f'style="color: #ffffff; font-family: Arial, sans-serif; font-size: 13px; '
        f'font-weight: bold; text-decoration: none;">'
        f'{icon_img(icons["calendar"], "calendar", 16, "vertical-align: middle; border: 0; margin-right: 8px;")}'
        f'{label}</a>'
        f'</td></tr></table>'
    )


def contact_line(
    icon_src: Optional[str],
    icon_alt: str,
    text: str,
    href: Optional[str],
    color: str,
    icon_size: int = 14,
    padding: str = "3px 0",
) -> str:
    """
    One <tr> holding an icon and a (linked) contact value.

    text is escaped here; href must already be normalized.
    """
    icon = ""
    if icon_src:
        icon = icon_img(
            icon_src, icon_alt, icon_size,
            "vertical-align: middle; margin-right: 6px; border: 0;",
        ) + " "
    value = escape_html(text)
    if href:
        value = (
            f'<a href="{attr_url(href)}" target="_blank" '
            f'style="color: {color}; text-decoration: none;">{value}</a>'
        )
    return f'<tr><td style="padding: {padding}; color: {color};">{icon}{value}</td></tr>'


def contact_rows(
    data: ContactData,
    icons: Dict[str, str],
    color: str,
    order: tuple = ("phone", "email", "website"),
    website_color: Optional[str] = None,
    icon_size: int = 14,
) -> List[str]:
    """Contact lines for the filled phone/email/website/address fields, in order."""
    rows = []
    for name in order:
        if name == "phone" and data.phone.strip():
            rows.append(contact_line(icons["phone"], "Phone", data.phone.strip(),
                                     f"tel:{data.phone.strip()}", color, icon_size))
        elif name == "email" and data.email.strip():
            rows.append(contact_line(icons["email"], "Email", data.email.strip(),
                                     f"mailto:{data.email.strip()}", color, icon_size))
        elif name == "website":
            href = normalize_url(data.website)
            if href:
                rows.append(contact_line(icons["website"], "Website", display_url(href),
                                         href, website_color or color, icon_size))
        elif name == "address" and data.address.strip():
            rows.append(contact_line(None, "", data.address.strip(), None, color, icon_size))
    return rows


def wrap_rows(rows: List[str], style: str = "") -> str:
    """Put contact rows in their own table, or "" when there are none."""
    if not rows:
        return ""
    style_attr = f' style="{style}"' if style else ""
    return f'<table {TABLE_ATTRS}{style_attr}>{"".join(rows)}</table>'
