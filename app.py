"""
Main entry point for the Pokedex data layer.

This module wires one session's worth of objects together and provides a
small lookup command for trying the layer from a terminal. It includes:
- Logging setup.
- `AppContext`, which owns the API client, local storage and every store.
- Graceful startup/shutdown of storage and the HTTP session.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import aiohttp

from config.settings import (
    COALESCE_REQUESTS,
    LOG_FILE,
    LOG_LEVEL,
    STORAGE_CONNECTION_STRING,
    validate_settings,
)
from stores.catalog import CatalogStore
from stores.favorites import FavoritesStore
from stores.filters import FiltersStore
from stores.pokemon import PokemonStore
from stores.ui import UiStore
from utils.api_client import ApiError, CatalogAPIClient
from utils.api_models import Pokemon
from utils.database import LocalStorage
from utils.media import SpriteCache, get_official_artwork_url

logger = logging.getLogger("pokedex")


def setup_logging(level: str = LOG_LEVEL, log_file: Optional[str] = LOG_FILE) -> None:
    """
    Configure root logging once for the process.

    Args:
        level: Level name such as 'INFO' or 'DEBUG'.
        log_file: Optional path of an extra UTF-8 log file.
    """
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


class AppContext:
    """
    Session-scoped container for the client, storage and stores.

    Build one per application session and pass it (or individual stores)
    to consumers; nothing here is a module-level singleton.

    Usage:
        async with AppContext() as ctx:
            pokemon = await ctx.pokemon.ensure_pokemon("pikachu")
    """

    def __init__(
        self,
        client: Optional[CatalogAPIClient] = None,
        storage: Optional[LocalStorage] = None,
        coalesce: bool = COALESCE_REQUESTS,
        system_prefers_dark: bool = False,
    ):
        self.client = client or CatalogAPIClient()
        self.storage = storage or LocalStorage(STORAGE_CONNECTION_STRING)

        self.pokemon = PokemonStore(self.client, coalesce=coalesce)
        self.catalog = CatalogStore(self.client, coalesce=coalesce)
        self.favorites = FavoritesStore(self.storage)
        self.filters = FiltersStore()
        self.ui = UiStore(self.storage, system_prefers_dark=system_prefers_dark)
        self.sprites = SpriteCache(self.client)

    async def start(self) -> None:
        """Connect storage and load persisted client state."""
        try:
            await self.storage.connect()
        except Exception as e:
            # Persisted state is optional; stores fall back to defaults.
            logger.error(f"Local storage unavailable: {e}", exc_info=True)

        await self.favorites.hydrate()
        await self.ui.hydrate()
        logger.info("Application context started")

    async def close(self) -> None:
        """Let in-flight fetches finish, then close the HTTP session and storage."""
        await self.pokemon.runner.wait_idle()
        await self.catalog.runner.wait_idle()
        await self.client.close()
        await self.storage.close()
        logger.info(
            "Application context closed",
            extra={"requests": self.client.get_request_stats()},
        )

    async def __aenter__(self) -> "AppContext":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


async def lookup(ctx: AppContext, identifier: str) -> Optional[Pokemon]:
    """
    Print a short summary of one Pokemon.

    Returns:
        The Pokemon record, or None if the lookup failed.
    """
    try:
        status_key = ctx.pokemon.pokemon.status_key(identifier)
    except (TypeError, ValueError) as e:
        print(f"Lookup failed for {identifier!r}: {e}")
        return None

    try:
        pokemon = await ctx.pokemon.ensure_pokemon(identifier)
    except (ApiError, aiohttp.ClientError, asyncio.TimeoutError, KeyError, TypeError) as e:
        # KeyError/TypeError come from a malformed record body
        status = ctx.pokemon.get_status(status_key)
        print(f"Lookup failed for {identifier!r}: {status.error_message or e}")
        return None

    types = ", ".join(slot["type"]["name"] for slot in pokemon.get("types", []))
    stats = ", ".join(
        f"{stat['stat']['name']}={stat['base_stat']}" for stat in pokemon.get("stats", [])
    )
    favorite = " ★" if ctx.favorites.is_favorite(pokemon["id"]) else ""

    print(f"#{pokemon['id']} {pokemon['name']}{favorite}")
    print(f"  types: {types or '-'}")
    print(f"  stats: {stats or '-'}")
    print(f"  artwork: {get_official_artwork_url(pokemon['id'])}")
    return pokemon


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Look up Pokemon in the catalog.")
    parser.add_argument("identifiers", nargs="+", help="Pokemon ids or names")
    parser.add_argument(
        "--favorite",
        action="store_true",
        help="Toggle each looked-up Pokemon in favorites",
    )
    return parser


async def run(identifiers: List[str], toggle_favorite: bool = False) -> int:
    exit_code = 0
    async with AppContext() as ctx:
        for identifier in identifiers:
            pokemon = await lookup(ctx, identifier)
            if pokemon is None:
                exit_code = 1
            elif toggle_favorite:
                is_favorite = await ctx.favorites.toggle(pokemon["id"])
                print(f"  favorite: {'yes' if is_favorite else 'no'}")
    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging()

    # Validate configuration
    try:
        validate_settings()
    except ValueError as e:
        logger.critical(f"❌ Configuration validation failed: {e}")
        return 1

    return asyncio.run(run(args.identifiers, toggle_favorite=args.favorite))


if __name__ == "__main__":
    sys.exit(main())
