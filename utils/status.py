"""
Per-key fetch status bookkeeping.

Each store owns one `StatusTracker`. Keys look like `"pokemon:1"` or
`"move-list:limit:50|offset:0"`. Reading a key that was never written
returns the all-clear default, so callers never need an existence check.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional

logger = logging.getLogger("pokedex.status")


@dataclass(frozen=True)
class FetchStatus:
    """
    Load/error/freshness state for one cache key.

    Attributes:
        is_loading: A fetch for this key is in flight.
        has_error: The most recent fetch failed.
        error_message: Message of the most recent failure, if any.
        updated_at: Epoch seconds when the last fetch finished, or None if
            no fetch has finished yet.
    """

    is_loading: bool = False
    has_error: bool = False
    error_message: Optional[str] = None
    updated_at: Optional[float] = None


DEFAULT_STATUS = FetchStatus()


class StatusTracker:
    """Mapping of status key to `FetchStatus`; records are replaced, never deleted."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._records: Dict[str, FetchStatus] = {}

    def get(self, key: str) -> FetchStatus:
        return self._records.get(key, DEFAULT_STATUS)

    def mark_loading(self, key: str) -> FetchStatus:
        record = FetchStatus(is_loading=True)
        self._records[key] = record
        return record

    def mark_success(self, key: str) -> FetchStatus:
        record = FetchStatus(updated_at=self._clock())
        self._records[key] = record
        return record

    def mark_error(self, key: str, message: str) -> FetchStatus:
        record = FetchStatus(
            has_error=True, error_message=message, updated_at=self._clock()
        )
        self._records[key] = record
        logger.debug("Status marked errored", extra={"status_key": key})
        return record

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)
