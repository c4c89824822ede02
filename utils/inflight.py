"""
Detached execution of cache fills, with optional request coalescing.

Every fetch the stores start runs as its own task and callers await it
through `asyncio.shield`, so a caller that gets cancelled walks away while
the fetch still finishes and records its status.

Coalescing is off by default. When it is on, concurrent fetches for the
same key join the task that is already in flight instead of starting a
second network call.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Set

from utils.api_models import InflightStats

logger = logging.getLogger("pokedex.inflight")


class RequestRunner:
    """
    Runs fetch coroutines as detached tasks.

    Args:
        coalesce: Share one in-flight task between concurrent callers that
            use the same key.
    """

    def __init__(self, coalesce: bool = False):
        self.coalesce = coalesce
        self._pending_requests: Dict[str, asyncio.Task] = {}
        self._tasks: Set[asyncio.Task] = set()

    async def run(
        self, key: str, fetch_func: Callable[..., Awaitable[Any]], *args, **kwargs
    ) -> Any:
        """
        Run `fetch_func(*args, **kwargs)` to completion and return its result.

        The lookup and insertion below happen with no await in between, so
        no lock is needed on the single event loop thread.

        Args:
            key: Unique key identifying the requested resource.
            fetch_func: Async function performing the fetch.
            *args: Arguments for fetch_func.
            **kwargs: Keyword arguments for fetch_func.

        Returns:
            Result of the (possibly shared) fetch.
        """
        task = self._pending_requests.get(key) if self.coalesce else None

        if task is not None:
            logger.debug(
                "Request coalescing: Joining existing request",
                extra={"key": key[:50]},
            )
        else:
            task = asyncio.create_task(fetch_func(*args, **kwargs))
            self._tasks.add(task)
            task.add_done_callback(self._on_task_done)
            if self.coalesce:
                self._pending_requests[key] = task
                task.add_done_callback(
                    lambda finished: self._forget_pending(key, finished)
                )

        return await asyncio.shield(task)

    def _forget_pending(self, key: str, task: asyncio.Task) -> None:
        # Verify we are cleaning up the correct task
        if self._pending_requests.get(key) is task:
            del self._pending_requests[key]

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        # Callers that were cancelled never see the outcome; retrieve it here
        # so asyncio does not report an unretrieved exception.
        if not task.cancelled() and task.exception() is not None:
            logger.debug(
                "Background fetch finished with error",
                extra={"error": repr(task.exception())},
            )

    async def wait_idle(self) -> None:
        """Wait until every fetch started so far has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def get_stats(self) -> InflightStats:
        """
        Get request runner statistics.

        Returns:
            InflightStats object.
        """
        return {
            "pending_requests": len(self._tasks),
            "coalescing": self.coalesce,
        }
