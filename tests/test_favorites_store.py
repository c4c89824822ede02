import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from stores.favorites import FavoritesStore
from utils.constants import STORAGE_KEY_FAVORITES, STORAGE_KEY_TEAM
from utils.database import LocalStorage


@pytest.mark.asyncio
class TestFavorites:
    async def test_toggle_is_an_involution(self, storage):
        store = FavoritesStore(storage)

        assert await store.toggle(25) is True
        assert store.is_favorite(25)
        assert await store.toggle(25) is False
        assert not store.is_favorite(25)
        assert store.ids == []

    async def test_order_and_persistence(self, storage):
        store = FavoritesStore(storage)
        await store.toggle(4)
        await store.toggle(1)
        await store.toggle(7)
        await store.remove(1)

        assert store.ids == [4, 7]
        assert store.total == 2
        assert json.loads(await storage.get_item(STORAGE_KEY_FAVORITES)) == [4, 7]

        reloaded = FavoritesStore(storage)
        await reloaded.hydrate()
        assert reloaded.ids == [4, 7]

    async def test_clear(self, storage):
        store = FavoritesStore(storage)
        await store.toggle(1)
        await store.clear()
        assert store.ids == []
        assert await storage.get_item(STORAGE_KEY_FAVORITES) == "[]"

    @pytest.mark.parametrize(
        "raw", ["{not json", '{"ids": [1]}', '[1, "two"]', "[true]", "null"]
    )
    async def test_bad_stored_favorites_fall_back_to_empty(self, storage, raw):
        await storage.set_item(STORAGE_KEY_FAVORITES, raw)

        store = FavoritesStore(storage)
        await store.hydrate()

        assert store.ids == []
        assert store.hydrated

    async def test_stored_duplicates_are_dropped(self, storage):
        await storage.set_item(STORAGE_KEY_FAVORITES, "[3, 1, 3]")
        store = FavoritesStore(storage)
        await store.hydrate()
        assert store.ids == [3, 1]

    async def test_unavailable_storage_keeps_working(self):
        # Never connected, so every storage call fails and is logged
        store = FavoritesStore(LocalStorage("sqlite:///:memory:"))

        assert await store.toggle(25) is True
        assert store.ids == [25]

    async def test_in_memory_store(self):
        store = FavoritesStore()
        await store.toggle(1)
        assert store.ids == [1]

    async def test_hydrate_reads_storage_once(self):
        storage = MagicMock(spec=LocalStorage)
        storage.get_item = AsyncMock(return_value=None)
        storage.set_item = AsyncMock(return_value=True)
        store = FavoritesStore(storage)

        await store.hydrate()
        await store.hydrate()
        await store.toggle(1)

        assert storage.get_item.await_count == 2  # favorites + team, once each

    async def test_notifies_with_storage_key(self, storage):
        store = FavoritesStore(storage)
        await store.hydrate()
        seen = []
        store.subscribe(lambda name, key: seen.append((name, key)))

        await store.toggle(1)
        await store.add_to_team(1)

        assert seen == [("favorites", STORAGE_KEY_FAVORITES), ("favorites", STORAGE_KEY_TEAM)]


@pytest.mark.asyncio
class TestTeam:
    async def test_add_fills_first_empty_slot(self, storage):
        store = FavoritesStore(storage)
        await store.add_to_team(1)
        await store.add_to_team(4)
        await store.set_team_slot(0, None)
        await store.add_to_team(7)

        assert store.team_slots == [7, 4, None, None, None, None]
        assert store.team_members == [7, 4]
        assert store.team_size == 2

    async def test_add_is_noop_when_present(self, storage):
        store = FavoritesStore(storage)
        await store.add_to_team(1)
        await store.add_to_team(1)
        assert store.team_members == [1]

    async def test_full_team_replaces_last_slot(self, storage):
        store = FavoritesStore(storage)
        for pokemon_id in (1, 2, 3, 4, 5, 6):
            await store.add_to_team(pokemon_id)

        await store.add_to_team(150)

        assert store.team_slots == [1, 2, 3, 4, 5, 150]
        assert len(store.team_slots) == 6

    async def test_set_slot_moves_existing_member(self, storage):
        store = FavoritesStore(storage)
        await store.add_to_team(1)
        await store.add_to_team(4)

        await store.set_team_slot(5, 1)

        assert store.team_slots == [None, 4, None, None, None, 1]

    async def test_out_of_range_slots_are_ignored(self, storage):
        store = FavoritesStore(storage)
        await store.add_to_team(1)

        await store.set_team_slot(6, 25)
        await store.swap_team_slots(0, -1)

        assert store.team_slots == [1, None, None, None, None, None]

    async def test_swap_and_remove(self, storage):
        store = FavoritesStore(storage)
        await store.add_to_team(1)
        await store.add_to_team(4)

        await store.swap_team_slots(0, 1)
        assert store.team_members == [4, 1]

        await store.remove_from_team(4)
        assert store.team_slots == [None, 1, None, None, None, None]
        assert not store.is_on_team(4)

    async def test_team_persists(self, storage):
        store = FavoritesStore(storage)
        await store.add_to_team(25)
        await store.set_team_slot(3, 6)

        reloaded = FavoritesStore(storage)
        await reloaded.hydrate()
        assert reloaded.team_slots == [25, None, None, 6, None, None]

        await reloaded.clear_team()
        assert json.loads(await storage.get_item(STORAGE_KEY_TEAM)) == [None] * 6

    @pytest.mark.parametrize(
        "raw",
        [
            "[1, 2, 3]",
            "[1, 1, null, null, null, null]",
            '["a", null, null, null, null, null]',
            "oops",
        ],
    )
    async def test_bad_stored_team_falls_back_to_empty(self, storage, raw):
        await storage.set_item(STORAGE_KEY_TEAM, raw)

        store = FavoritesStore(storage)
        await store.hydrate()

        assert store.team_slots == [None] * 6
