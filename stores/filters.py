"""
Filter state store.

Holds the Pokemon browser's search/sort/pagination criteria. Changing any
search, selection or sort criterion jumps back to the first page; changing
pagination directly does not. `is_dirty` compares the live criteria with
the snapshot taken by the last `mark_applied()` call.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from config.settings import FILTERS_DEFAULT_PAGE_SIZE
from utils.constants import SORT_DIRECTIONS, SORT_FIELDS
from utils.events import Observable

logger = logging.getLogger("pokedex.stores.filters")


@dataclass
class Pagination:
    limit: int = FILTERS_DEFAULT_PAGE_SIZE
    offset: int = 0


def _lowered(values: Iterable[str]) -> List[str]:
    return [value.lower() for value in values]


class FiltersStore(Observable):
    """Mutable filter criteria with a dirty flag."""

    store_name = "filters"

    def __init__(self):
        self._init_observable()
        self._set_defaults()
        self.last_applied_snapshot = self.snapshot()

    def _set_defaults(self) -> None:
        self.search_query = ""
        self.selected_types: List[str] = []
        self.selected_generations: List[str] = []
        self.selected_habitats: List[str] = []
        self.sort_field = "id"
        self.sort_direction = "asc"
        self.pagination = Pagination()

    def snapshot(self) -> str:
        """
        Serialize the criteria for dirty checks.

        Selections are sorted and the query trimmed and lower-cased, so the
        order in which values were picked never makes the state dirty.
        """
        payload = {
            "search_query": self.search_query.strip().lower(),
            "types": sorted(self.selected_types),
            "generations": sorted(self.selected_generations),
            "habitats": sorted(self.selected_habitats),
            "sort_field": self.sort_field,
            "sort_direction": self.sort_direction,
            "limit": self.pagination.limit,
            "offset": self.pagination.offset,
        }
        return json.dumps(payload, sort_keys=True)

    @property
    def is_dirty(self) -> bool:
        return self.last_applied_snapshot != self.snapshot()

    @property
    def active_filters_count(self) -> int:
        return (
            int(bool(self.search_query.strip()))
            + len(self.selected_types)
            + len(self.selected_generations)
            + len(self.selected_habitats)
        )

    @property
    def query_params(self) -> Dict[str, Any]:
        return {
            "search": self.search_query.strip() or None,
            "types": list(self.selected_types),
            "generations": list(self.selected_generations),
            "habitats": list(self.selected_habitats),
            "sort_field": self.sort_field,
            "sort_direction": self.sort_direction,
            "limit": self.pagination.limit,
            "offset": self.pagination.offset,
        }

    def _changed(self, key: str, reset_offset: bool = True) -> None:
        if reset_offset:
            self.pagination = Pagination(limit=self.pagination.limit, offset=0)
        self._notify(key)

    def set_search_query(self, query: str) -> None:
        self.search_query = query
        self._changed("search_query")

    def set_types(self, types: Iterable[str]) -> None:
        self.selected_types = _lowered(types)
        self._changed("types")

    def toggle_type(self, type_name: str) -> None:
        normalized = type_name.lower()
        if normalized in self.selected_types:
            self.selected_types = [t for t in self.selected_types if t != normalized]
        else:
            self.selected_types = [*self.selected_types, normalized]
        self._changed("types")

    def set_generations(self, generations: Iterable[str]) -> None:
        self.selected_generations = _lowered(generations)
        self._changed("generations")

    def set_habitats(self, habitats: Iterable[str]) -> None:
        self.selected_habitats = _lowered(habitats)
        self._changed("habitats")

    def set_sort(self, field: str, direction: str = "asc") -> None:
        """
        Change the sort order.

        Raises:
            ValueError: On an unknown field or direction.
        """
        if field not in SORT_FIELDS:
            raise ValueError(f"Unknown sort field {field!r}; expected one of {SORT_FIELDS}")
        if direction not in SORT_DIRECTIONS:
            raise ValueError(
                f"Unknown sort direction {direction!r}; expected one of {SORT_DIRECTIONS}"
            )
        self.sort_field = field
        self.sort_direction = direction
        self._changed("sort")

    def set_pagination(
        self, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> None:
        """Update page size and/or offset; omitted values are kept."""
        self.pagination = Pagination(
            limit=self.pagination.limit if limit is None else limit,
            offset=self.pagination.offset if offset is None else offset,
        )
        self._changed("pagination", reset_offset=False)

    def reset_offset(self) -> None:
        self._changed("pagination")

    def reset_filters(self) -> None:
        self._set_defaults()
        self._changed("reset", reset_offset=False)

    def mark_applied(self) -> None:
        self.last_applied_snapshot = self.snapshot()
        self._notify("applied")
