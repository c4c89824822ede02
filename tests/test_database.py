import pytest

from utils.database import LocalStorage


@pytest.mark.asyncio
class TestLocalStorage:
    async def test_set_get_overwrite(self, storage):
        assert await storage.get_item("pokedex:favorites") is None

        assert await storage.set_item("pokedex:favorites", "[1]")
        assert await storage.set_item("pokedex:favorites", "[1, 4]")

        assert await storage.get_item("pokedex:favorites") == "[1, 4]"

    async def test_remove_items_and_clear(self, storage):
        await storage.set_item("a", "1")
        await storage.set_item("b", "2")

        assert await storage.remove_item("a")
        assert await storage.items() == {"b": "2"}

        assert await storage.clear()
        assert await storage.items() == {}

    async def test_file_database_survives_reconnect(self, tmp_path):
        path = tmp_path / "nested" / "pokedex.db"
        first = LocalStorage(f"sqlite:///{path}")
        await first.connect()
        await first.set_item("pokedex:team", "[25, null, null, null, null, null]")
        await first.close()

        second = LocalStorage(f"sqlite:///{path}")
        await second.connect()
        try:
            assert await second.get_item("pokedex:team") == "[25, null, null, null, null, null]"
        finally:
            await second.close()

    async def test_unconnected_storage_reports_failure(self):
        storage = LocalStorage("sqlite:///:memory:")
        assert not storage.is_connected
        assert await storage.get_item("x") is None
        assert await storage.set_item("x", "1") is False
        assert await storage.remove_item("x") is False
        assert await storage.items() == {}

    async def test_unsupported_scheme(self):
        storage = LocalStorage("postgresql://localhost/pokedex")
        assert storage.db_type == "postgresql"
        with pytest.raises(ValueError):
            await storage.connect()

    async def test_connect_twice_keeps_connection(self, storage):
        await storage.set_item("a", "1")
        await storage.connect()
        assert await storage.get_item("a") == "1"
