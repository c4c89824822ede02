"""
UI state store.

Theme and layout density are user preferences and persist to local
storage; the command palette flag, loading overlay flag and toast queue
live for the session only.
"""

import asyncio
import json
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from utils.constants import (
    LAYOUT_DENSITY_CHOICES,
    STORAGE_KEY_UI_PREFERENCES,
    THEME_CHOICES,
    TOAST_VARIANTS,
)
from utils.database import LocalStorage
from utils.events import Observable

logger = logging.getLogger("pokedex.stores.ui")


@dataclass
class ToastMessage:
    """
    A transient notification.

    Attributes:
        id: Unique toast id, used to dismiss it.
        title: Headline text.
        variant: One of 'info', 'success', 'warning', 'error'.
        description: Optional body text.
        auto_close_ms: Optional lifetime hint for the UI.
        created_at: Epoch seconds when the toast was queued.
    """

    id: str
    title: str
    variant: str = "info"
    description: Optional[str] = None
    auto_close_ms: Optional[int] = None
    created_at: float = field(default_factory=time.time)


class UiStore(Observable):
    """
    Preferences and transient UI flags.

    Args:
        storage: Durable storage for theme/density; None keeps them in memory.
        system_prefers_dark: What the host reports for the 'system' theme.
    """

    store_name = "ui"

    def __init__(
        self, storage: Optional[LocalStorage] = None, system_prefers_dark: bool = False
    ):
        self._init_observable()
        self._storage = storage
        self.system_prefers_dark = system_prefers_dark

        self.theme = "system"
        self.layout_density = "comfortable"
        self.is_command_palette_open = False
        self.is_loading_overlay_visible = False
        self.toasts: List[ToastMessage] = []

        self.hydrated = False
        self._hydrate_lock = asyncio.Lock()

    @property
    def is_dark(self) -> bool:
        if self.theme == "dark":
            return True
        if self.theme == "light":
            return False
        return self.system_prefers_dark

    # ==================== PREFERENCES ====================

    async def hydrate(self) -> None:
        """Load persisted preferences once; invalid stored values are ignored."""
        if self.hydrated:
            return

        async with self._hydrate_lock:
            if self.hydrated:
                return
            if self._storage is not None:
                raw = await self._storage.get_item(STORAGE_KEY_UI_PREFERENCES)
                if raw is not None:
                    self._apply_stored_preferences(raw)
            self.hydrated = True

        self._notify("hydrate")

    def _apply_stored_preferences(self, raw: str) -> None:
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"Failed to parse UI preferences from storage: {e}")
            return

        if not isinstance(data, dict):
            logger.warning("Stored UI preferences are not an object, using defaults")
            return

        if data.get("theme") in THEME_CHOICES:
            self.theme = data["theme"]
        if data.get("layout_density") in LAYOUT_DENSITY_CHOICES:
            self.layout_density = data["layout_density"]

    async def _persist(self) -> None:
        if self._storage is None:
            return
        payload = json.dumps(
            {"theme": self.theme, "layout_density": self.layout_density}
        )
        if not await self._storage.set_item(STORAGE_KEY_UI_PREFERENCES, payload):
            logger.warning("Failed to persist UI preferences to storage")

    async def set_theme(self, theme: str) -> None:
        """
        Raises:
            ValueError: If theme is not 'system', 'light' or 'dark'.
        """
        if theme not in THEME_CHOICES:
            raise ValueError(f"Unknown theme {theme!r}; expected one of {THEME_CHOICES}")
        await self.hydrate()
        self.theme = theme
        await self._persist()
        self._notify("theme")

    async def set_layout_density(self, density: str) -> None:
        """
        Raises:
            ValueError: If density is not 'comfortable' or 'compact'.
        """
        if density not in LAYOUT_DENSITY_CHOICES:
            raise ValueError(
                f"Unknown layout density {density!r}; expected one of {LAYOUT_DENSITY_CHOICES}"
            )
        await self.hydrate()
        self.layout_density = density
        await self._persist()
        self._notify("layout_density")

    # ==================== TRANSIENT STATE ====================

    def toggle_command_palette(self, force: Optional[bool] = None) -> None:
        self.is_command_palette_open = (
            force if isinstance(force, bool) else not self.is_command_palette_open
        )
        self._notify("command_palette")

    def set_loading_overlay(self, visible: bool) -> None:
        self.is_loading_overlay_visible = visible
        self._notify("loading_overlay")

    def show_toast(
        self,
        title: str,
        variant: str = "info",
        description: Optional[str] = None,
        auto_close_ms: Optional[int] = None,
        toast_id: Optional[str] = None,
    ) -> str:
        """
        Queue a toast.

        Returns:
            The toast id.

        Raises:
            ValueError: On an unknown variant.
        """
        if variant not in TOAST_VARIANTS:
            raise ValueError(f"Unknown toast variant {variant!r}; expected one of {TOAST_VARIANTS}")

        toast = ToastMessage(
            id=toast_id or uuid.uuid4().hex[:12],
            title=title,
            variant=variant,
            description=description,
            auto_close_ms=auto_close_ms,
        )
        self.toasts = [*self.toasts, toast]
        self._notify("toasts")
        return toast.id

    def dismiss_toast(self, toast_id: str) -> None:
        self.toasts = [toast for toast in self.toasts if toast.id != toast_id]
        self._notify("toasts")

    def clear_toasts(self) -> None:
        self.toasts = []
        self._notify("toasts")
