"""
API Client module for fetching reference records from the Pokemon catalog.

This module handles interactions with PokeAPI. It owns the aiohttp session
(with connection pooling and a request concurrency limit) and turns every
non-success response into an `ApiError` carrying the status code, reason
phrase, URL and the best human-readable message the catalog offered.

Nothing is cached here; the stores in `stores/` decide what
to keep.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Union
from urllib.parse import urlencode

import aiohttp

from config.settings import (
    API_REQUEST_TIMEOUT,
    MAX_CONCURRENT_API_REQUESTS,
    POKEAPI_URL,
    USER_AGENT,
)
from utils.api_models import (
    Ability,
    EvolutionChain,
    Item,
    Location,
    LocationArea,
    Move,
    PaginatedResult,
    Pokemon,
    PokemonEncounterArea,
    PokemonSpecies,
    PokemonType,
)
from utils.constants import API_STARTUP_VALIDATION_TIMEOUT

logger = logging.getLogger("pokedex.api")

# Connection pool settings
CONNECTION_POOL_LIMIT = 100  # Total connections across all hosts
CONNECTION_POOL_LIMIT_PER_HOST = 30  # Max connections per host
CONNECTION_KEEPALIVE_TIMEOUT = 30  # Seconds to keep idle connections

Identifier = Union[int, float, str]


class ApiError(Exception):
    """
    Raised when the catalog answers with a non-success HTTP status.

    Attributes:
        message: `detail` from the JSON error body if present, else the
            HTTP status text.
        status: HTTP status code.
        status_text: HTTP reason phrase.
        url: The requested URL.
    """

    def __init__(self, message: str, status: int, status_text: str, url: str):
        super().__init__(message)
        self.message = message
        self.status = status
        self.status_text = status_text
        self.url = url

    def __repr__(self) -> str:
        return (
            f"ApiError(status={self.status}, message={self.message!r}, "
            f"url={self.url!r})"
        )


class CatalogAPIClient:
    """
    Client for fetching reference records from PokeAPI.

    Key Features:
    - **Connection Pooling**: Uses `aiohttp.TCPConnector` to reuse connections.
    - **Rate Limiting**: Caps simultaneous requests with a semaphore.
    - **Typed Errors**: Non-success responses raise `ApiError`.
    - **Absolute URLs**: Links embedded in records (pagination, encounters)
      are requested as-is.
    """

    def __init__(
        self,
        base_url: str = POKEAPI_URL,
        timeout: float = API_REQUEST_TIMEOUT,
        max_concurrent_requests: int = MAX_CONCURRENT_API_REQUESTS,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = None

        # Session creation lock to prevent race conditions during lazy loading
        self._session_lock = asyncio.Lock()

        self._rate_limiter = asyncio.Semaphore(max_concurrent_requests)

        # Request statistics (in-memory)
        self.requests_made = 0
        self.requests_failed = 0

    async def __aenter__(self) -> "CatalogAPIClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def build_url(self, path: str, params: Optional[Dict[str, Any]] = None) -> str:
        """
        Build the request URL for a catalog path.

        Absolute URLs are passed through unmodified; relative paths are
        joined onto the base URL with exactly one slash.

        Args:
            path: Relative catalog path (e.g. 'pokemon/1') or absolute URL.
            params: Optional query parameters; None values are skipped.

        Returns:
            The full URL.
        """
        if path.startswith(("http://", "https://")):
            url = path
        else:
            normalized = path if path.startswith("/") else f"/{path}"
            url = f"{self.base_url}{normalized}"

        if params:
            query = urlencode({k: v for k, v in params.items() if v is not None})
            if query:
                url = f"{url}{'&' if '?' in url else '?'}{query}"

        return url

    async def get_session(self) -> aiohttp.ClientSession:
        """
        Get or create aiohttp session with connection pooling configuration.

        Returns:
            Active aiohttp ClientSession.
        """
        async with self._session_lock:
            if self.session is None or self.session.closed:
                timeout = aiohttp.ClientTimeout(total=self.timeout)

                connector = aiohttp.TCPConnector(
                    limit=CONNECTION_POOL_LIMIT,
                    limit_per_host=CONNECTION_POOL_LIMIT_PER_HOST,
                    ttl_dns_cache=300,  # DNS cache TTL (5 minutes)
                    keepalive_timeout=CONNECTION_KEEPALIVE_TIMEOUT,
                    force_close=False,
                )

                self.session = aiohttp.ClientSession(
                    timeout=timeout,
                    connector=connector,
                    headers={
                        "Accept": "application/json",
                        "User-Agent": USER_AGENT,
                    },
                )

                logger.info(
                    "Created aiohttp session with connection pooling",
                    extra={
                        "total_limit": CONNECTION_POOL_LIMIT,
                        "per_host_limit": CONNECTION_POOL_LIMIT_PER_HOST,
                        "keepalive": CONNECTION_KEEPALIVE_TIMEOUT,
                    },
                )

        return self.session

    async def request(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Issue a GET against the catalog and return the parsed JSON body.

        Args:
            path: Relative catalog path or absolute URL.
            params: Optional query parameters.

        Returns:
            Parsed JSON body.

        Raises:
            ApiError: If the response status is outside the 2xx range.
            aiohttp.ClientError: On connection-level failures.
            asyncio.TimeoutError: If the session timeout elapses.
        """
        session = await self.get_session()
        url = self.build_url(path, params)

        logger.debug(f"Fetching {url}")

        async with self._rate_limiter:
            self.requests_made += 1
            async with session.get(url) as resp:
                if 200 <= resp.status < 300:
                    return await resp.json(content_type=None)

                self.requests_failed += 1
                status_text = resp.reason or ""
                body = await self._safe_parse_body(resp)
                if isinstance(body, dict) and "detail" in body:
                    message = str(body["detail"])
                else:
                    message = status_text

                logger.warning(
                    f"Catalog API error {resp.status} for {url}",
                    extra={"status_code": resp.status, "url": url},
                )
                raise ApiError(
                    message, status=resp.status, status_text=status_text, url=url
                )

    async def _safe_parse_body(self, resp: aiohttp.ClientResponse) -> Optional[Any]:
        """Parse an error body as JSON, returning None if it is not JSON."""
        try:
            return await resp.json(content_type=None)
        except (ValueError, aiohttp.ContentTypeError) as e:
            logger.warning(f"Failed to parse error response body: {e}")
            return None

    async def fetch_pokemon(self, identifier: Identifier) -> Pokemon:
        return await self.request(f"/pokemon/{identifier}")

    async def fetch_pokemon_species(self, identifier: Identifier) -> PokemonSpecies:
        return await self.request(f"/pokemon-species/{identifier}")

    async def fetch_pokemon_type(self, identifier: Identifier) -> PokemonType:
        return await self.request(f"/type/{identifier}")

    async def fetch_evolution_chain(self, identifier: Identifier) -> EvolutionChain:
        return await self.request(f"/evolution-chain/{identifier}")

    async def fetch_ability(self, identifier: Identifier) -> Ability:
        return await self.request(f"/ability/{identifier}")

    async def fetch_move(self, identifier: Identifier) -> Move:
        return await self.request(f"/move/{identifier}")

    async def fetch_item(self, identifier: Identifier) -> Item:
        return await self.request(f"/item/{identifier}")

    async def fetch_location(self, identifier: Identifier) -> Location:
        return await self.request(f"/location/{identifier}")

    async def fetch_location_area(self, identifier: Identifier) -> LocationArea:
        return await self.request(f"/location-area/{identifier}")

    async def fetch_pokemon_encounters(
        self, identifier: Identifier
    ) -> List[PokemonEncounterArea]:
        """
        Fetch the encounter list for a Pokemon.

        Args:
            identifier: Pokemon id, or the absolute encounters URL embedded
                in a Pokemon record (`location_area_encounters`).

        Returns:
            List of encounter areas.
        """
        if isinstance(identifier, str) and identifier.startswith("http"):
            return await self.request(identifier)
        return await self.request(f"/pokemon/{identifier}/encounters")

    async def fetch_pokemon_list(
        self, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> PaginatedResult:
        return await self.request("/pokemon", {"limit": limit, "offset": offset})

    async def fetch_move_list(
        self, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> PaginatedResult:
        return await self.request("/move", {"limit": limit, "offset": offset})

    async def fetch_location_list(
        self, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> PaginatedResult:
        return await self.request("/location", {"limit": limit, "offset": offset})

    async def validate_api_connectivity(self) -> bool:
        """
        Validate connectivity to the catalog on startup.

        Returns:
            True if `/pokemon/1` answered with 200, False otherwise.
        """
        logger.info("Validating API connectivity", extra={"api": "pokeapi"})

        try:
            session = await self.get_session()
            test_url = self.build_url("/pokemon/1")

            async with asyncio.timeout(API_STARTUP_VALIDATION_TIMEOUT):
                async with session.get(test_url) as resp:
                    if resp.status == 200:
                        logger.info("✅ PokeAPI is reachable")
                        return True
                    logger.warning(f"⚠️ PokeAPI returned status {resp.status}")
        except asyncio.TimeoutError:
            logger.error(
                "API connection timed out",
                extra={
                    "api": "pokeapi",
                    "timeout_seconds": API_STARTUP_VALIDATION_TIMEOUT,
                },
            )
        except aiohttp.ClientError as e:
            logger.error(
                "API validation failed",
                extra={"api": "pokeapi", "error": str(e)},
                exc_info=True,
            )

        return False

    def get_request_stats(self) -> Dict[str, int]:
        """
        Get transport statistics.

        Returns:
            Dictionary with 'requests_made' and 'requests_failed'.
        """
        return {
            "requests_made": self.requests_made,
            "requests_failed": self.requests_failed,
        }

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self.session and not self.session.closed:
            await self.session.close()
            logger.info(
                f"API client session closed (Requests: {self.requests_made}, "
                f"Failed: {self.requests_failed})"
            )
