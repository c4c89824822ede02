"""
Sprite URL helpers and an in-memory sprite prefetch cache.

Artwork lives on the PokeAPI sprites repository rather than the catalog
API, so URLs are derived from the Pokemon id. `SpriteCache` lets the UI
warm images for records it has just ensured; a failed prefetch is only
logged since the image can always be loaded later.
"""

import logging
from typing import Dict, Optional

import aiohttp

from utils.api_client import CatalogAPIClient
from utils.constants import SPRITES_BASE_URL

logger = logging.getLogger("pokedex.media")


def get_official_artwork_url(pokemon_id: int) -> str:
    return f"{SPRITES_BASE_URL}/other/official-artwork/{pokemon_id}.png"


def get_fallback_sprite_url(pokemon_id: int) -> str:
    return f"{SPRITES_BASE_URL}/{pokemon_id}.png"


class SpriteCache:
    """Holds sprite bytes by URL for the lifetime of the session."""

    def __init__(self, client: CatalogAPIClient):
        self._client = client
        self._sprites: Dict[str, bytes] = {}

    def get(self, url: str) -> Optional[bytes]:
        return self._sprites.get(url)

    def __contains__(self, url: object) -> bool:
        return url in self._sprites

    def __len__(self) -> int:
        return len(self._sprites)

    async def cache_sprite(self, url: Optional[str]) -> bool:
        """
        Download and keep a sprite unless it is already cached.

        Args:
            url: Sprite URL; None (records without art) is ignored.

        Returns:
            True if the sprite is cached after the call, False otherwise.
        """
        if not url:
            return False
        if url in self._sprites:
            return True

        try:
            session = await self._client.get_session()
            async with session.get(url) as resp:
                if resp.status != 200:
                    logger.warning(f"Sprite request returned {resp.status}: {url}")
                    return False
                self._sprites[url] = await resp.read()
                logger.debug("Sprite cached", extra={"url": url})
                return True
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.warning(f"Failed to cache sprite {url}: {e}")
            return False
