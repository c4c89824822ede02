"""
Catalog store.

Caches the reference records that are not Pokemon-centric: abilities,
moves, items, locations and location areas, plus the move and location
listing pages. Every lookup follows the same ensure/cache/status flow as
the Pokemon store.
"""

import logging
from typing import Dict, Optional, Union

from config.settings import (
    COALESCE_REQUESTS,
    LOCATION_LIST_DEFAULT_LIMIT,
    MOVE_LIST_DEFAULT_LIMIT,
)
from utils.api_client import CatalogAPIClient
from utils.api_models import Ability, CacheStats, Item, Location, LocationArea, Move
from utils.cache import EntityCache, ListCache, ListResult
from utils.constants import (
    ERROR_ABILITY,
    ERROR_ITEM,
    ERROR_LOCATION,
    ERROR_LOCATION_AREA,
    ERROR_LOCATION_LIST,
    ERROR_MOVE,
    ERROR_MOVE_LIST,
    RESOURCE_ABILITY,
    RESOURCE_ITEM,
    RESOURCE_LOCATION,
    RESOURCE_LOCATION_AREA,
    RESOURCE_LOCATION_LIST,
    RESOURCE_MOVE,
    RESOURCE_MOVE_LIST,
)
from utils.events import Observable
from utils.inflight import RequestRunner
from utils.status import FetchStatus, StatusTracker

logger = logging.getLogger("pokedex.stores.catalog")


class CatalogStore(Observable):
    """Session cache for abilities, moves, items and locations."""

    store_name = "catalog"

    def __init__(
        self,
        client: CatalogAPIClient,
        coalesce: bool = COALESCE_REQUESTS,
        status: Optional[StatusTracker] = None,
    ):
        self._init_observable()
        self.client = client
        self.status = status or StatusTracker()
        self.runner = RequestRunner(coalesce=coalesce)

        self.abilities: EntityCache[Ability] = self._entity_cache(
            RESOURCE_ABILITY, client.fetch_ability, ERROR_ABILITY
        )
        self.moves: EntityCache[Move] = self._entity_cache(
            RESOURCE_MOVE, client.fetch_move, ERROR_MOVE
        )
        self.items: EntityCache[Item] = self._entity_cache(
            RESOURCE_ITEM, client.fetch_item, ERROR_ITEM
        )
        self.locations: EntityCache[Location] = self._entity_cache(
            RESOURCE_LOCATION, client.fetch_location, ERROR_LOCATION
        )
        self.location_areas: EntityCache[LocationArea] = self._entity_cache(
            RESOURCE_LOCATION_AREA, client.fetch_location_area, ERROR_LOCATION_AREA
        )

        self.move_lists = ListCache(
            RESOURCE_MOVE_LIST,
            client.fetch_move_list,
            self.status,
            self.runner,
            defaults={"limit": MOVE_LIST_DEFAULT_LIMIT, "offset": 0},
            error_message=ERROR_MOVE_LIST,
            on_change=self._notify,
        )
        self.location_lists = ListCache(
            RESOURCE_LOCATION_LIST,
            client.fetch_location_list,
            self.status,
            self.runner,
            defaults={"limit": LOCATION_LIST_DEFAULT_LIMIT, "offset": 0},
            error_message=ERROR_LOCATION_LIST,
            on_change=self._notify,
        )

    def _entity_cache(self, resource, fetcher, error_message) -> EntityCache:
        return EntityCache(
            resource,
            fetcher,
            self.status,
            self.runner,
            error_message=error_message,
            on_change=self._notify,
        )

    # ==================== READS ====================

    def get_ability(self, identifier: Union[int, str]) -> Optional[Ability]:
        return self.abilities.get(identifier)

    def get_move(self, identifier: Union[int, str]) -> Optional[Move]:
        return self.moves.get(identifier)

    def get_item(self, identifier: Union[int, str]) -> Optional[Item]:
        return self.items.get(identifier)

    def get_location(self, identifier: Union[int, str]) -> Optional[Location]:
        return self.locations.get(identifier)

    def get_location_area(self, identifier: Union[int, str]) -> Optional[LocationArea]:
        return self.location_areas.get(identifier)

    def get_move_list(self, params_key: str) -> Optional[ListResult]:
        return self.move_lists.get(params_key)

    def get_location_list(self, params_key: str) -> Optional[ListResult]:
        return self.location_lists.get(params_key)

    def get_status(self, key: str) -> FetchStatus:
        return self.status.get(key)

    # ==================== ENSURE ====================

    async def ensure_ability(self, identifier: Union[int, str]) -> Ability:
        return await self.abilities.ensure(identifier)

    async def ensure_move(self, identifier: Union[int, str]) -> Move:
        return await self.moves.ensure(identifier)

    async def ensure_item(self, identifier: Union[int, str]) -> Item:
        return await self.items.ensure(identifier)

    async def ensure_location(self, identifier: Union[int, str]) -> Location:
        return await self.locations.ensure(identifier)

    async def ensure_location_area(self, identifier: Union[int, str]) -> LocationArea:
        return await self.location_areas.ensure(identifier)

    # ==================== LISTS ====================

    async def fetch_move_list(
        self, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> ListResult:
        """Return a move listing page (defaults: limit=50, offset=0)."""
        return await self.move_lists.fetch(limit=limit, offset=offset)

    async def fetch_location_list(
        self, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> ListResult:
        """Return a location listing page (defaults: limit=20, offset=0)."""
        return await self.location_lists.fetch(limit=limit, offset=offset)

    def get_cache_stats(self) -> Dict[str, CacheStats]:
        return {
            cache.resource: cache.get_cache_stats()
            for cache in (
                self.abilities,
                self.moves,
                self.items,
                self.locations,
                self.location_areas,
                self.move_lists,
                self.location_lists,
            )
        }
