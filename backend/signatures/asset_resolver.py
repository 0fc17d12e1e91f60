"""
Asset Host Resolver - points the icon registry at self-hosted icons

Each icon is probed on its own: the first bucket that serves it wins and is
merged into the registry immediately. Icons no bucket serves keep their
fallback URL, so a partially populated asset host is fine.
"""

import asyncio
import logging
from typing import Dict, List, Optional

import httpx

from .icons import ICON_NAMES, IconRegistry, get_icon_registry

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 5.0


def candidate_buckets(preferred: str) -> List[str]:
    """Preferred bucket first, then the singular/plural spelling of "icons"."""
    preferred = (preferred or "icons").strip("/")
    fallback = "icon" if preferred == "icons" else "icons"
    buckets = [preferred]
    if fallback not in buckets:
        buckets.append(fallback)
    return buckets


def icon_url(base: str, bucket: str, name: str) -> str:
    return f"{base.rstrip('/')}/{bucket}/{name}.png"


class AssetResolver:
    """
    Probes an asset host for icon images and updates the registry.

    Usage:
        resolver = AssetResolver("https://cdn.example.com/storage/v1/object/public")
        resolved = await resolver.resolve()
    """

    def __init__(
        self,
        base_url: str,
        preferred_bucket: str = "icons",
        registry: Optional[IconRegistry] = None,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url
        self.buckets = candidate_buckets(preferred_bucket)
        self.registry = registry or get_icon_registry()
        self.timeout = timeout
        self._client = client

    async def _is_available(self, client: httpx.AsyncClient, url: str) -> bool:
        """HEAD first; some hosts reject HEAD so fall back to GET."""
        try:
            response = await client.head(url)
            if response.status_code == 200:
                return True
            if response.status_code in (403, 405, 501):
                response = await client.get(url)
                return response.status_code == 200
            return False
        except httpx.TimeoutException:
            logger.debug(f"Icon probe timed out: {url}")
            return False
        except httpx.HTTPError as e:
            logger.debug(f"Icon probe failed for {url}: {e}")
            return False

    async def _resolve_icon(self, client: httpx.AsyncClient, name: str) -> Optional[str]:
        for bucket in self.buckets:
            url = icon_url(self.base_url, bucket, name)
            if await self._is_available(client, url):
                self.registry.set_icon_urls({name: url})
                return url
        logger.info(f"Icon '{name}' not found on asset host, keeping fallback")
        return None

    async def resolve(self) -> Dict[str, str]:
        """
        Probe every icon concurrently.

        Returns the icons that resolved, name -> URL.
        """
        if not self.base_url:
            logger.info("No icon asset host configured, using fallback icons")
            return {}

        if self._client is not None:
            results = await asyncio.gather(
                *(self._resolve_icon(self._client, name) for name in ICON_NAMES)
            )
        else:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                results = await asyncio.gather(
                    *(self._resolve_icon(client, name) for name in ICON_NAMES)
                )

        resolved = {name: url for name, url in zip(ICON_NAMES, results) if url}
        logger.info(f"Resolved {len(resolved)}/{len(ICON_NAMES)} icons from asset host")
        return resolved

