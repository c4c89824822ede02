"""
In-memory entity and list caches with status bookkeeping.

`EntityCache` wraps one single-record endpoint (pokemon, move, ...) and
`ListCache` wraps one paginated listing endpoint. Both follow the same
flow:

1. Compute the cache key (normalized identifier, or canonical params key).
2. On a hit, return the stored value without touching the network.
3. On a miss, mark the status key loading, call the fetcher, then either
   store the value and mark success, or mark the error and re-raise.

Entries are never evicted or refreshed during a session. Nothing here
retries; a failed key stays absent, so the next call simply tries again.
"""

import logging
from dataclasses import dataclass
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Generic,
    Mapping,
    Optional,
    TypeVar,
    Union,
)
from urllib.parse import parse_qs, urlsplit

from utils.api_client import ApiError
from utils.api_models import CacheStats, NamedAPIResource, PaginatedResult
from utils.identifiers import (
    NormalizedIdentifier,
    build_status_key,
    cache_key,
    normalize_identifier,
    stable_params_key,
)
from utils.inflight import RequestRunner
from utils.status import StatusTracker

logger = logging.getLogger("pokedex.cache")

RecordT = TypeVar("RecordT")


def error_message_for(error: BaseException, fallback: str) -> str:
    """Return the catalog's message for an `ApiError`, else `fallback`."""
    if isinstance(error, ApiError):
        return error.message
    return fallback


def _build_stats(size: int, hits: int, misses: int) -> CacheStats:
    total_requests = hits + misses
    hit_rate = (hits / total_requests * 100) if total_requests > 0 else 0
    return {
        "size": size,
        "hits": hits,
        "misses": misses,
        "hit_rate": f"{hit_rate:.1f}%",
    }


class EntityCache(Generic[RecordT]):
    """
    Idempotent fetch-or-return-cached access to one kind of catalog record.

    A fetched record is stored under its `str(id)` key, under its lower-cased
    name (when the kind has names) and under the key it was requested by, so
    any of those finds it afterwards without a network call.

    Args:
        resource: Resource kind used as the status key prefix.
        fetcher: Async function taking the normalized identifier.
        status: Status tracker shared with the owning store.
        runner: Request runner shared with the owning store.
        error_message: Status message for failures that are not `ApiError`.
        name_field: Record field holding the name, or None for id-only kinds.
        on_change: Called with the status key after every status change.
    """

    def __init__(
        self,
        resource: str,
        fetcher: Callable[[NormalizedIdentifier], Awaitable[RecordT]],
        status: StatusTracker,
        runner: RequestRunner,
        *,
        error_message: str,
        name_field: Optional[str] = "name",
        on_change: Optional[Callable[[str], None]] = None,
    ):
        self.resource = resource
        self.error_message = error_message
        self.name_field = name_field
        self._fetcher = fetcher
        self._status = status
        self._runner = runner
        self._on_change = on_change
        self._records: Dict[str, RecordT] = {}

        self.cache_hits = 0
        self.cache_misses = 0

    def get(self, identifier: Union[int, str]) -> Optional[RecordT]:
        """Return the cached record for `identifier`, or None."""
        return self._records.get(cache_key(normalize_identifier(identifier)))

    def __contains__(self, identifier: object) -> bool:
        if not isinstance(identifier, (int, str)):
            return False
        try:
            return self.get(identifier) is not None
        except (TypeError, ValueError):
            return False

    def __len__(self) -> int:
        return len(self._records)

    def values(self):
        """Distinct cached records (a record held under several keys appears once)."""
        seen = {}
        for record in self._records.values():
            seen.setdefault(id(record), record)
        return list(seen.values())

    def status_key(self, identifier: Union[int, str]) -> str:
        return build_status_key(self.resource, normalize_identifier(identifier))

    def put(self, record: RecordT, *extra_keys: str) -> None:
        """
        Store `record` under its id key, its name key and any `extra_keys`.

        Raises:
            TypeError: If the record is not an object.
            KeyError: If the record has no id.
        """
        if not isinstance(record, dict):
            raise TypeError(
                f"Expected a {self.resource} record object, got {type(record).__name__}"
            )
        keys = [cache_key(record["id"])]
        if self.name_field:
            name = record.get(self.name_field)
            if isinstance(name, str) and name:
                keys.append(name.lower())
        keys.extend(extra_keys)

        for key in keys:
            self._records[key] = record

    async def ensure(self, identifier: Union[int, str]) -> RecordT:
        """
        Return the record for `identifier`, fetching it on a cache miss.

        Args:
            identifier: Numeric id, numeric string, or name (any case).

        Returns:
            The cached or freshly fetched record.

        Raises:
            ApiError: If the catalog answers with a non-success status.
            Exception: Any other transport failure, unchanged.
        """
        normalized = normalize_identifier(identifier)
        key = cache_key(normalized)

        cached = self._records.get(key)
        if cached is not None:
            self.cache_hits += 1
            logger.debug(
                "Cache hit", extra={"resource": self.resource, "cache_key": key[:50]}
            )
            return cached

        self.cache_misses += 1
        status_key = build_status_key(self.resource, normalized)
        self._status.mark_loading(status_key)
        self._changed(status_key)

        return await self._runner.run(
            status_key, self._load, normalized, key, status_key
        )

    async def _load(
        self, normalized: NormalizedIdentifier, key: str, status_key: str
    ) -> RecordT:
        try:
            record = await self._fetcher(normalized)
            # A malformed 2xx body (not an object, or no id) fails here
            self.put(record, key)
        except Exception as e:
            self._status.mark_error(status_key, error_message_for(e, self.error_message))
            logger.warning(
                f"Failed to load {status_key}: {e!r}",
                extra={"resource": self.resource, "status_key": status_key},
            )
            self._changed(status_key)
            raise

        self._status.mark_success(status_key)
        logger.debug(
            "Record cached", extra={"resource": self.resource, "cache_key": key[:50]}
        )
        self._changed(status_key)
        return record

    def _changed(self, status_key: str) -> None:
        if self._on_change is not None:
            self._on_change(status_key)

    def get_cache_stats(self) -> CacheStats:
        """
        Get cache statistics.

        Returns:
            CacheStats object containing hit rates and counts. `size` counts
            distinct records, not the keys they are stored under.
        """
        return _build_stats(len(self.values()), self.cache_hits, self.cache_misses)


@dataclass(frozen=True)
class ListResult:
    """
    One cached page of a listing endpoint.

    Attributes:
        params_key: Canonical key of the parameters the page was fetched with.
        results: The page exactly as the catalog returned it.
    """

    params_key: str
    results: PaginatedResult

    @property
    def items(self) -> list[NamedAPIResource]:
        return self.results.get("results", [])

    @property
    def count(self) -> int:
        return self.results.get("count", 0)


class ListCache:
    """
    Cache of listing pages keyed by their canonical parameter key.

    Each distinct parameter set is cached on its own; pages are never merged
    and fetching one page never touches another page's entry.

    Args:
        resource: Resource kind used as the status key prefix (e.g. 'move-list').
        fetcher: Async function taking the filled parameters as keywords.
        status: Status tracker shared with the owning store.
        runner: Request runner shared with the owning store.
        defaults: Every accepted parameter and its default value.
        error_message: Status message for failures that are not `ApiError`.
        on_change: Called with the status key after every status change.
    """

    def __init__(
        self,
        resource: str,
        fetcher: Callable[..., Awaitable[PaginatedResult]],
        status: StatusTracker,
        runner: RequestRunner,
        *,
        defaults: Mapping[str, Any],
        error_message: str,
        on_change: Optional[Callable[[str], None]] = None,
    ):
        self.resource = resource
        self.defaults = dict(defaults)
        self.error_message = error_message
        self._fetcher = fetcher
        self._status = status
        self._runner = runner
        self._on_change = on_change
        self._lists: Dict[str, ListResult] = {}

        self.cache_hits = 0
        self.cache_misses = 0

    def fill_params(self, **params: Any) -> Dict[str, Any]:
        """
        Apply defaults to omitted or None parameters.

        Values must be whole numbers: ints, integral floats, or strings of
        digits (as parsed from page links).

        Raises:
            TypeError: On an unknown parameter name or a non-integer value.
            ValueError: On a negative value.
        """
        unknown = set(params) - set(self.defaults)
        if unknown:
            raise TypeError(
                f"Unexpected {self.resource} parameter(s): {', '.join(sorted(unknown))}"
            )

        filled = {}
        for name, default in self.defaults.items():
            value = params.get(name)
            filled[name] = default if value is None else self._coerce_param(name, value)
        return filled

    def _coerce_param(self, name: str, value: Any) -> int:
        if isinstance(value, bool):
            number = None
        elif isinstance(value, int):
            number = value
        elif isinstance(value, float) and value.is_integer():
            number = int(value)
        elif isinstance(value, str) and value.strip().isdigit():
            number = int(value)
        else:
            number = None

        if number is None:
            raise TypeError(
                f"Invalid value for {self.resource} parameter {name!r}: {value!r}"
            )
        if number < 0:
            raise ValueError(
                f"{self.resource} parameter {name!r} must not be negative (got {value!r})"
            )
        return number

    def params_key(self, **params: Any) -> str:
        """Return the canonical key for `params` after defaults are applied."""
        return stable_params_key(self.fill_params(**params))

    def status_key(self, **params: Any) -> str:
        return build_status_key(self.resource, self.params_key(**params))

    def get(self, params_key: str) -> Optional[ListResult]:
        return self._lists.get(params_key)

    def __len__(self) -> int:
        return len(self._lists)

    def values(self) -> list[ListResult]:
        return list(self._lists.values())

    async def fetch(self, **params: Any) -> ListResult:
        """
        Return the page for `params`, fetching it on a cache miss.

        Raises:
            TypeError: On unknown parameters or non-integer values.
            ValueError: On negative values.
            ApiError: If the catalog answers with a non-success status.
        """
        filled = self.fill_params(**params)
        key = stable_params_key(filled)

        cached = self._lists.get(key)
        if cached is not None:
            self.cache_hits += 1
            return cached

        self.cache_misses += 1
        status_key = build_status_key(self.resource, key)
        self._status.mark_loading(status_key)
        self._changed(status_key)

        return await self._runner.run(status_key, self._load, filled, key, status_key)

    async def _load(
        self, filled: Dict[str, Any], key: str, status_key: str
    ) -> ListResult:
        try:
            results = await self._fetcher(**filled)
            if not isinstance(results, dict):
                raise TypeError(
                    f"Expected a {self.resource} page object, got {type(results).__name__}"
                )
            entry = ListResult(params_key=key, results=results)
        except Exception as e:
            self._status.mark_error(status_key, error_message_for(e, self.error_message))
            logger.warning(
                f"Failed to load {status_key}: {e!r}",
                extra={"resource": self.resource, "status_key": status_key},
            )
            self._changed(status_key)
            raise

        self._lists[key] = entry
        self._status.mark_success(status_key)
        logger.debug(
            "List page cached",
            extra={"resource": self.resource, "params_key": key},
        )
        self._changed(status_key)
        return entry

    def _params_from_link(self, link: str) -> Dict[str, Any]:
        query = parse_qs(urlsplit(link).query)
        return {
            name: values[0]
            for name, values in query.items()
            if name in self.defaults and values
        }

    async def next_page(self, result: ListResult) -> Optional[ListResult]:
        """Fetch the page after `result` through the cache, or None on the last page."""
        link = result.results.get("next")
        if not link:
            return None
        return await self.fetch(**self._params_from_link(link))

    async def previous_page(self, result: ListResult) -> Optional[ListResult]:
        """Fetch the page before `result` through the cache, or None on the first page."""
        link = result.results.get("previous")
        if not link:
            return None
        return await self.fetch(**self._params_from_link(link))

    def _changed(self, status_key: str) -> None:
        if self._on_change is not None:
            self._on_change(status_key)

    def get_cache_stats(self) -> CacheStats:
        return _build_stats(len(self._lists), self.cache_hits, self.cache_misses)
