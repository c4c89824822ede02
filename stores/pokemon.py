"""
Pokemon store.

Caches Pokemon, species, types, evolution chains, encounter lists and
Pokemon listing pages for one session, and tracks the fetch status of
every key it has been asked for. It implements:
- Idempotent `ensure_*` lookups by id, numeric string or name.
- Encounter lookups cached per numeric Pokemon id.
- Listing pages cached per canonical (limit, offset) key.
- Name suggestions drawn from everything already cached.
"""

import logging
from typing import Dict, List, Optional, Union

from config.settings import COALESCE_REQUESTS, POKEMON_LIST_DEFAULT_LIMIT
from utils.api_client import CatalogAPIClient
from utils.api_models import (
    CacheStats,
    EvolutionChain,
    Pokemon,
    PokemonEncounterArea,
    PokemonSpecies,
    PokemonType,
)
from utils.cache import EntityCache, ListCache, ListResult, error_message_for
from utils.constants import (
    ERROR_ENCOUNTERS,
    ERROR_EVOLUTION_CHAIN,
    ERROR_POKEMON,
    ERROR_POKEMON_LIST,
    ERROR_SPECIES,
    ERROR_TYPE,
    ERROR_UNRESOLVED_POKEMON_ID,
    RESOURCE_ENCOUNTERS,
    RESOURCE_EVOLUTION_CHAIN,
    RESOURCE_POKEMON,
    RESOURCE_POKEMON_LIST,
    RESOURCE_SPECIES,
    RESOURCE_TYPE,
)
from utils.events import Observable
from utils.identifiers import build_status_key, normalize_identifier
from utils.inflight import RequestRunner
from utils.matching import rank_name_matches
from utils.status import FetchStatus, StatusTracker

logger = logging.getLogger("pokedex.stores.pokemon")


class IdentifierResolutionError(LookupError):
    """Raised when an encounter lookup cannot resolve a numeric Pokemon id."""


class PokemonStore(Observable):
    """
    Session cache for Pokemon-centric catalog records.

    Args:
        client: Transport used for every network call.
        coalesce: Share one in-flight request between concurrent cold
            lookups of the same key.
        status: Status tracker (a fresh one by default).
    """

    store_name = "pokemon"

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

        self.pokemon: EntityCache[Pokemon] = EntityCache(
            RESOURCE_POKEMON,
            client.fetch_pokemon,
            self.status,
            self.runner,
            error_message=ERROR_POKEMON,
            on_change=self._notify,
        )
        self.species: EntityCache[PokemonSpecies] = EntityCache(
            RESOURCE_SPECIES,
            client.fetch_pokemon_species,
            self.status,
            self.runner,
            error_message=ERROR_SPECIES,
            on_change=self._notify,
        )
        self.types: EntityCache[PokemonType] = EntityCache(
            RESOURCE_TYPE,
            client.fetch_pokemon_type,
            self.status,
            self.runner,
            error_message=ERROR_TYPE,
            on_change=self._notify,
        )
        self.evolution_chains: EntityCache[EvolutionChain] = EntityCache(
            RESOURCE_EVOLUTION_CHAIN,
            client.fetch_evolution_chain,
            self.status,
            self.runner,
            error_message=ERROR_EVOLUTION_CHAIN,
            name_field=None,
            on_change=self._notify,
        )
        self.lists = ListCache(
            RESOURCE_POKEMON_LIST,
            client.fetch_pokemon_list,
            self.status,
            self.runner,
            defaults={"limit": POKEMON_LIST_DEFAULT_LIMIT, "offset": 0},
            error_message=ERROR_POKEMON_LIST,
            on_change=self._notify,
        )

        # Encounter lists have no id or name of their own; keyed by Pokemon id.
        self._encounters_by_pokemon_id: Dict[int, List[PokemonEncounterArea]] = {}

    # ==================== READS ====================

    def get_pokemon_by_id(self, pokemon_id: int) -> Optional[Pokemon]:
        return self.pokemon.get(pokemon_id)

    def get_pokemon_by_name(self, name: str) -> Optional[Pokemon]:
        return self.pokemon.get(name)

    def get_species(self, identifier: Union[int, str]) -> Optional[PokemonSpecies]:
        return self.species.get(identifier)

    def get_type(self, identifier: Union[int, str]) -> Optional[PokemonType]:
        return self.types.get(identifier)

    def get_evolution_chain(self, chain_id: int) -> Optional[EvolutionChain]:
        return self.evolution_chains.get(chain_id)

    def get_encounters(self, pokemon_id: int) -> Optional[List[PokemonEncounterArea]]:
        return self._encounters_by_pokemon_id.get(pokemon_id)

    def get_list(self, params_key: str) -> Optional[ListResult]:
        return self.lists.get(params_key)

    def get_status(self, key: str) -> FetchStatus:
        return self.status.get(key)

    # ==================== ENSURE ====================

    async def ensure_pokemon(self, identifier: Union[int, str]) -> Pokemon:
        return await self.pokemon.ensure(identifier)

    async def ensure_species(self, identifier: Union[int, str]) -> PokemonSpecies:
        return await self.species.ensure(identifier)

    async def ensure_type(self, identifier: Union[int, str]) -> PokemonType:
        return await self.types.ensure(identifier)

    async def ensure_evolution_chain(self, identifier: Union[int, str]) -> EvolutionChain:
        return await self.evolution_chains.ensure(identifier)

    async def ensure_pokemon_encounters(
        self, identifier: Union[int, str], endpoint: Optional[str] = None
    ) -> List[PokemonEncounterArea]:
        """
        Return the encounter list for a Pokemon, fetching it on a cache miss.

        Encounters are cached per numeric Pokemon id, so a name is first
        resolved through the Pokemon cache (fetching the Pokemon if needed).

        Args:
            identifier: Pokemon id, numeric string or name.
            endpoint: Absolute encounters URL taken from an already fetched
                record (`location_area_encounters`); used instead of the id.

        Returns:
            List of encounter areas.

        Raises:
            IdentifierResolutionError: If no integer id can be resolved.
            ApiError: If the catalog answers with a non-success status.
        """
        normalized = normalize_identifier(identifier)

        if isinstance(normalized, int):
            resolved_id = normalized
        else:
            cached = self.pokemon.get(identifier)
            pokemon = cached if cached is not None else await self.ensure_pokemon(identifier)
            resolved_id = pokemon.get("id")

        if not isinstance(resolved_id, int) or isinstance(resolved_id, bool):
            raise IdentifierResolutionError(ERROR_UNRESOLVED_POKEMON_ID)

        cached_encounters = self._encounters_by_pokemon_id.get(resolved_id)
        if cached_encounters is not None:
            return cached_encounters

        status_key = build_status_key(RESOURCE_ENCOUNTERS, resolved_id)
        self.status.mark_loading(status_key)
        self._notify(status_key)

        target: Union[int, str] = endpoint if endpoint else resolved_id
        return await self.runner.run(
            status_key, self._load_encounters, resolved_id, target, status_key
        )

    async def _load_encounters(
        self, pokemon_id: int, target: Union[int, str], status_key: str
    ) -> List[PokemonEncounterArea]:
        try:
            encounters = await self.client.fetch_pokemon_encounters(target)
        except Exception as e:
            self.status.mark_error(status_key, error_message_for(e, ERROR_ENCOUNTERS))
            logger.warning(f"Failed to load {status_key}: {e!r}")
            self._notify(status_key)
            raise

        self._encounters_by_pokemon_id[pokemon_id] = encounters
        self.status.mark_success(status_key)
        self._notify(status_key)
        return encounters

    # ==================== LISTS ====================

    async def fetch_pokemon_list(
        self, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> ListResult:
        """Return a Pokemon listing page (defaults: limit=20, offset=0)."""
        return await self.lists.fetch(limit=limit, offset=offset)

    async def fetch_next_page(self, page: ListResult) -> Optional[ListResult]:
        return await self.lists.next_page(page)

    async def fetch_previous_page(self, page: ListResult) -> Optional[ListResult]:
        return await self.lists.previous_page(page)

    # ==================== SEARCH ====================

    def known_pokemon_names(self) -> List[str]:
        """Every Pokemon name seen in cached records or cached listing pages."""
        names = {record["name"] for record in self.pokemon.values() if record.get("name")}
        for page in self.lists.values():
            names.update(item["name"] for item in page.items)
        return sorted(names)

    async def suggest_names(self, query: str, n: int = 5) -> List[str]:
        """Rank known Pokemon names against a search query."""
        return await rank_name_matches(query, self.known_pokemon_names(), n=n)

    # ==================== STATS ====================

    def get_cache_stats(self) -> Dict[str, CacheStats]:
        """
        Get cache statistics for every cache in this store.

        Returns:
            Dictionary mapping resource kind to its CacheStats.
        """
        return {
            cache.resource: cache.get_cache_stats()
            for cache in (
                self.pokemon,
                self.species,
                self.types,
                self.evolution_chains,
                self.lists,
            )
        }
