import os
import sys
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

# Add project root to python path so we can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from utils.api_client import ApiError, CatalogAPIClient  # noqa: E402
from utils.database import LocalStorage  # noqa: E402

BULBASAUR = {
    "id": 1,
    "name": "bulbasaur",
    "types": [{"slot": 1, "type": {"name": "grass", "url": ""}}],
    "stats": [{"base_stat": 45, "stat": {"name": "hp", "url": ""}}],
    "location_area_encounters": "https://pokeapi.co/api/v2/pokemon/1/encounters",
}
PIKACHU = {"id": 25, "name": "pikachu", "types": [], "stats": []}
EMBER = {"id": 52, "name": "ember", "power": 40}


def not_found(path: str) -> ApiError:
    return ApiError("Not Found", status=404, status_text="Not Found", url=path)


def page(names, count=None, next_url=None, previous_url=None):
    """Build a listing page the way the catalog shapes them."""
    return {
        "count": len(names) if count is None else count,
        "next": next_url,
        "previous": previous_url,
        "results": [{"name": name, "url": ""} for name in names],
    }


@pytest.fixture
def fake_client():
    """
    A CatalogAPIClient stand-in whose fetch methods are AsyncMocks.

    Single-record fetchers answer from a small table keyed by the normalized
    identifier and raise a 404 ApiError for anything else.
    """
    client = MagicMock(spec=CatalogAPIClient)

    pokemon = {1: BULBASAUR, "bulbasaur": BULBASAUR, 25: PIKACHU, "pikachu": PIKACHU}
    moves = {52: EMBER, "ember": EMBER}

    def table_lookup(table, kind):
        async def lookup(identifier):
            if identifier in table:
                return table[identifier]
            raise not_found(f"/{kind}/{identifier}")

        return lookup

    client.fetch_pokemon = AsyncMock(side_effect=table_lookup(pokemon, "pokemon"))
    client.fetch_move = AsyncMock(side_effect=table_lookup(moves, "move"))
    for name in (
        "fetch_pokemon_species",
        "fetch_pokemon_type",
        "fetch_evolution_chain",
        "fetch_ability",
        "fetch_item",
        "fetch_location",
        "fetch_location_area",
        "fetch_pokemon_encounters",
        "fetch_pokemon_list",
        "fetch_move_list",
        "fetch_location_list",
    ):
        setattr(client, name, AsyncMock())

    client.close = AsyncMock()
    client.get_request_stats = MagicMock(
        return_value={"requests_made": 0, "requests_failed": 0}
    )
    return client


@pytest_asyncio.fixture
async def storage():
    """In-memory SQLite storage, connected and closed around each test."""
    store = LocalStorage("sqlite:///:memory:")
    await store.connect()
    yield store
    await store.close()
