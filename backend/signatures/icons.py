"""
Signature Engine - Icon Registry

Maps the eight semantic icon names to image URLs. Starts from public fallback
URLs and is merge-updated at runtime once an asset host resolves. Writers
build a new dict and swap it in under a lock, so readers always get a
complete snapshot.
"""

import logging
import threading
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)


ICON_NAMES = (
    "linkedin",
    "twitter",
    "instagram",
    "facebook",
    "calendar",
    "phone",
    "email",
    "website",
)

_FALLBACK_BASE = "https://contractorcommander.com/wp-content/uploads/2025/09"

DEFAULT_ICON_URLS: Dict[str, str] = {
    name: f"{_FALLBACK_BASE}/{name}.png" for name in ICON_NAMES
}


class IconRegistry:
    """
    Process-wide icon URL set with copy-on-write updates.

    Usage:
        registry = IconRegistry()
        registry.set_icon_urls({"linkedin": "https://cdn.example/li.png"})
        icons = registry.get_icon_urls()
    """

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._lock = threading.Lock()
        self._urls: Dict[str, str] = dict(DEFAULT_ICON_URLS)
        if initial:
            self.set_icon_urls(initial)

    def get_icon_urls(self) -> Dict[str, str]:
        """Return a copy of the current icon set."""
        return dict(self._urls)

    def set_icon_urls(self, urls: Mapping[str, str]) -> Dict[str, str]:
        """
        Merge the given icons into the set. Unknown names and empty values
        are ignored; names not given keep their previous URL.

        Returns the merged snapshot.
        """
        updates = {
            name: url for name, url in urls.items()
            if name in ICON_NAMES and url
        }
        ignored = set(urls) - set(updates)
        if ignored:
            logger.debug(f"Ignoring icon overrides: {sorted(ignored)}")

        with self._lock:
            merged = {**self._urls, **updates}
            self._urls = merged

        if updates:
            logger.info(f"Icon URLs updated: {sorted(updates)}")
        return dict(merged)

    def reset(self) -> None:
        """Restore the fallback URLs."""
        with self._lock:
            self._urls = dict(DEFAULT_ICON_URLS)


# Global registry instance
_icon_registry: Optional[IconRegistry] = None


def get_icon_registry() -> IconRegistry:
    """Get or create the icon registry singleton."""
    global _icon_registry
    if _icon_registry is None:
        _icon_registry = IconRegistry()
    return _icon_registry
