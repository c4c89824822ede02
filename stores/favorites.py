"""
Favorites and team store.

Holds the user's favorite Pokemon ids and a fixed six-slot team roster,
both persisted to local storage after every change. Storage problems
(unavailable database, corrupt or wrongly shaped JSON) are logged and the
store carries on with an empty favorites list or an empty team.
"""

import asyncio
import json
import logging
from typing import Any, List, Optional

from config.settings import TEAM_SIZE
from utils.constants import STORAGE_KEY_FAVORITES, STORAGE_KEY_TEAM
from utils.database import LocalStorage
from utils.events import Observable

logger = logging.getLogger("pokedex.stores.favorites")

TeamSlots = List[Optional[int]]


def _is_pokemon_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _empty_team() -> TeamSlots:
    return [None] * TEAM_SIZE


class FavoritesStore(Observable):
    """
    Favorites set plus team roster.

    Args:
        storage: Durable storage; None keeps everything in memory only.
    """

    store_name = "favorites"

    def __init__(self, storage: Optional[LocalStorage] = None):
        self._init_observable()
        self._storage = storage
        self.ids: List[int] = []
        self.team_slots: TeamSlots = _empty_team()
        self.hydrated = False
        self._hydrate_lock = asyncio.Lock()

    # ==================== PERSISTENCE ====================

    async def _safe_read(self, storage_key: str) -> Optional[Any]:
        """Read and decode a JSON value; None if missing or unreadable."""
        if self._storage is None:
            return None

        raw = await self._storage.get_item(storage_key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"Failed to parse {storage_key} from storage: {e}")
            return None

    async def _safe_write(self, storage_key: str, value: Any) -> None:
        if self._storage is None:
            return
        if not await self._storage.set_item(storage_key, json.dumps(value)):
            logger.warning(f"Failed to persist {storage_key} to storage")

    def _parse_favorites(self, data: Any) -> List[int]:
        if data is None:
            return []
        if not isinstance(data, list) or not all(_is_pokemon_id(v) for v in data):
            logger.warning("Stored favorites are not a list of ids, starting empty")
            return []
        # dict.fromkeys keeps the first occurrence in insertion order
        return list(dict.fromkeys(data))

    def _parse_team(self, data: Any) -> TeamSlots:
        if data is None:
            return _empty_team()
        if (
            not isinstance(data, list)
            or len(data) != TEAM_SIZE
            or not all(v is None or _is_pokemon_id(v) for v in data)
        ):
            logger.warning("Stored team has an invalid shape, starting empty")
            return _empty_team()

        members = [v for v in data if v is not None]
        if len(members) != len(set(members)):
            logger.warning("Stored team has duplicate members, starting empty")
            return _empty_team()
        return list(data)

    async def hydrate(self) -> None:
        """
        Load persisted favorites and team into memory, once per store lifetime.

        Uses double-checked locking so concurrent callers read storage only once.
        """
        if self.hydrated:
            return

        async with self._hydrate_lock:
            if self.hydrated:
                return
            self.ids = self._parse_favorites(await self._safe_read(STORAGE_KEY_FAVORITES))
            self.team_slots = self._parse_team(await self._safe_read(STORAGE_KEY_TEAM))
            self.hydrated = True
            logger.debug(
                "Favorites hydrated",
                extra={"favorites": len(self.ids), "team_members": self.team_size},
            )

        self._notify("hydrate")

    # ==================== FAVORITES ====================

    @property
    def total(self) -> int:
        return len(self.ids)

    def is_favorite(self, pokemon_id: int) -> bool:
        return pokemon_id in self.ids

    async def _set_ids(self, ids: List[int]) -> None:
        self.ids = ids
        await self._safe_write(STORAGE_KEY_FAVORITES, self.ids)
        self._notify(STORAGE_KEY_FAVORITES)

    async def toggle(self, pokemon_id: int) -> bool:
        """
        Add the id if absent, remove it if present.

        Returns:
            True if the id is a favorite after the call.
        """
        await self.hydrate()
        if pokemon_id in self.ids:
            await self._set_ids([value for value in self.ids if value != pokemon_id])
            return False
        await self._set_ids([*self.ids, pokemon_id])
        return True

    async def remove(self, pokemon_id: int) -> None:
        await self.hydrate()
        await self._set_ids([value for value in self.ids if value != pokemon_id])

    async def clear(self) -> None:
        await self.hydrate()
        await self._set_ids([])

    # ==================== TEAM ====================

    @property
    def team_members(self) -> List[int]:
        """Ids on the team, in slot order."""
        return [slot for slot in self.team_slots if slot is not None]

    @property
    def team_size(self) -> int:
        return len(self.team_members)

    def is_on_team(self, pokemon_id: int) -> bool:
        return pokemon_id in self.team_slots

    async def _set_team(self, slots: TeamSlots) -> None:
        self.team_slots = slots
        await self._safe_write(STORAGE_KEY_TEAM, self.team_slots)
        self._notify(STORAGE_KEY_TEAM)

    def _valid_slot(self, index: int) -> bool:
        if 0 <= index < TEAM_SIZE:
            return True
        logger.warning(f"Ignoring team slot index {index} (team has {TEAM_SIZE} slots)")
        return False

    async def add_to_team(self, pokemon_id: int) -> None:
        """
        Put a Pokemon on the team.

        No-op if already on the team. Otherwise fills the first empty slot,
        or replaces the last slot when the team is full.
        """
        await self.hydrate()
        if pokemon_id in self.team_slots:
            return

        slots = list(self.team_slots)
        if None in slots:
            slots[slots.index(None)] = pokemon_id
        else:
            slots[-1] = pokemon_id
        await self._set_team(slots)

    async def set_team_slot(self, index: int, pokemon_id: Optional[int]) -> None:
        """
        Assign a slot (None empties it).

        If the Pokemon already sits in another slot it moves here and its
        old slot is emptied.
        """
        await self.hydrate()
        if not self._valid_slot(index):
            return

        slots = list(self.team_slots)
        if pokemon_id is not None:
            slots = [None if slot == pokemon_id else slot for slot in slots]
        slots[index] = pokemon_id
        await self._set_team(slots)

    async def swap_team_slots(self, first: int, second: int) -> None:
        await self.hydrate()
        if not (self._valid_slot(first) and self._valid_slot(second)):
            return

        slots = list(self.team_slots)
        slots[first], slots[second] = slots[second], slots[first]
        await self._set_team(slots)

    async def remove_from_team(self, pokemon_id: int) -> None:
        await self.hydrate()
        await self._set_team(
            [None if slot == pokemon_id else slot for slot in self.team_slots]
        )

    async def clear_team(self) -> None:
        await self.hydrate()
        await self._set_team(_empty_team())
