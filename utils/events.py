"""
Change notification for stores.

Stores hold plain state; a UI layer that needs to redraw subscribes a
callback and is told which store changed and which key inside it.
"""

import logging
from typing import Callable, List

logger = logging.getLogger("pokedex.events")

Listener = Callable[[str, str], None]


class Observable:
    """
    Mixin giving a store `subscribe()` and an internal `_notify()`.

    Subclasses set `store_name` and call `_init_observable()` from their
    constructor.
    """

    store_name = "store"

    def _init_observable(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a change listener.

        Args:
            listener: Called as `listener(store_name, key)` after each change.

        Returns:
            A function that removes the listener when called.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, key: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(self.store_name, key)
            except Exception as e:
                # A broken listener must not leave the store half-updated
                logger.error(
                    f"Change listener failed for {self.store_name}:{key}: {e}",
                    exc_info=True,
                )
