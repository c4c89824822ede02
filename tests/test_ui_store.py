import json

import pytest

from stores.ui import UiStore
from utils.constants import STORAGE_KEY_UI_PREFERENCES


@pytest.mark.asyncio
class TestUiPreferences:
    async def test_defaults(self, storage):
        store = UiStore(storage)
        await store.hydrate()
        assert store.theme == "system"
        assert store.layout_density == "comfortable"
        assert store.is_dark is False

    async def test_system_theme_follows_host(self):
        store = UiStore(system_prefers_dark=True)
        assert store.is_dark
        await store.set_theme("light")
        assert not store.is_dark

    async def test_preferences_persist(self, storage):
        store = UiStore(storage)
        await store.set_theme("dark")
        await store.set_layout_density("compact")

        assert json.loads(await storage.get_item(STORAGE_KEY_UI_PREFERENCES)) == {
            "theme": "dark",
            "layout_density": "compact",
        }

        reloaded = UiStore(storage)
        await reloaded.hydrate()
        assert reloaded.theme == "dark"
        assert reloaded.layout_density == "compact"
        assert reloaded.is_dark

    async def test_invalid_values_are_rejected(self, storage):
        store = UiStore(storage)
        with pytest.raises(ValueError):
            await store.set_theme("sepia")
        with pytest.raises(ValueError):
            await store.set_layout_density("cozy")
        assert store.theme == "system"

    @pytest.mark.parametrize(
        "raw",
        ["not json", "[1, 2]", '{"theme": "sepia", "layout_density": "cozy"}'],
    )
    async def test_bad_stored_preferences_are_ignored(self, storage, raw):
        await storage.set_item(STORAGE_KEY_UI_PREFERENCES, raw)

        store = UiStore(storage)
        await store.hydrate()

        assert store.theme == "system"
        assert store.layout_density == "comfortable"


class TestUiTransientState:
    def test_command_palette(self):
        store = UiStore()
        store.toggle_command_palette()
        assert store.is_command_palette_open
        store.toggle_command_palette(force=True)
        assert store.is_command_palette_open
        store.toggle_command_palette()
        assert not store.is_command_palette_open

    def test_loading_overlay(self):
        store = UiStore()
        store.set_loading_overlay(True)
        assert store.is_loading_overlay_visible

    def test_toasts(self):
        store = UiStore()
        first = store.show_toast("Saved", variant="success")
        second = store.show_toast("Oops", variant="error", description="Try again")

        assert first != second
        assert [toast.title for toast in store.toasts] == ["Saved", "Oops"]

        store.dismiss_toast(first)
        assert [toast.id for toast in store.toasts] == [second]

        store.clear_toasts()
        assert store.toasts == []

    def test_toast_id_and_variant(self):
        store = UiStore()
        assert store.show_toast("Hi", toast_id="welcome") == "welcome"
        with pytest.raises(ValueError):
            store.show_toast("Hi", variant="fatal")

    def test_notifications(self):
        store = UiStore()
        seen = []
        store.subscribe(lambda name, key: seen.append((name, key)))

        store.toggle_command_palette()
        store.show_toast("Hello")

        assert seen == [("ui", "command_palette"), ("ui", "toasts")]
