"""
Database module for durable client-side storage using SQLite.

Provides a small string-keyed, string-valued store (the shape of browser
local storage) used to persist favorites, the team roster and UI
preferences across sessions.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Dict, Optional, Tuple
from urllib.parse import urlparse

import aiosqlite

from config.settings import STORAGE_CONNECTION_STRING

logger = logging.getLogger("pokedex.database")


class LocalStorage:
    """
    Async key/value storage for persisted client state.
    Currently supports SQLite via aiosqlite.

    Schema:
    - **local_storage**: One row per storage key.
      Columns: storage_key (PK), value (JSON text), updated_at.

    Every public method catches and logs its own failures and reports them
    through its return value (None or False), so callers can fall back to a
    default without a try/except of their own.
    """

    def __init__(self, connection_string: str = STORAGE_CONNECTION_STRING):
        """
        Initialize the storage instance.

        Args:
            connection_string: The connection URI (e.g., 'sqlite:///data/pokedex.db'
                or 'sqlite:///:memory:').
        """
        self.connection_string = connection_string
        self._conn: Optional[aiosqlite.Connection] = None
        self._lock = asyncio.Lock()

        # Parse connection details
        self.db_type, self.db_path = self._parse_connection_string(connection_string)

    def _parse_connection_string(self, conn_str: str) -> Tuple[str, str]:
        """
        Parse connection string to determine database type and path.

        Args:
            conn_str: Connection string in format 'scheme:///path'.

        Returns:
            Tuple containing (scheme, path).
        """
        # Handle simple sqlite paths manually to avoid os-specific parsing issues
        if conn_str.startswith("sqlite:///"):
            return "sqlite", conn_str.replace("sqlite:///", "", 1)

        parsed = urlparse(conn_str)
        return parsed.scheme, parsed.path

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    async def connect(self) -> None:
        """
        Open the database connection and create tables. No-op if already open.

        Raises:
            ValueError: If the database type is not supported (currently only 'sqlite').
        """
        if self._conn is not None:
            return

        if self.db_type == "sqlite":
            await self._connect_sqlite()
        else:
            raise ValueError(
                f"Unsupported storage type: {self.db_type}. Only 'sqlite' is currently supported."
            )

    async def _connect_sqlite(self) -> None:
        """Internal method to establish connection to SQLite file."""
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._conn = await aiosqlite.connect(self.db_path)
        self._conn.row_factory = aiosqlite.Row
        await self._create_tables()
        logger.info(f"Storage connected ({self.db_type}): {self.db_path}")

    async def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None
            logger.info("Storage connection closed")

    async def _create_tables(self) -> None:
        """Create storage tables if they don't exist."""
        async with self._lock:
            await self._conn.execute(  # type: ignore
                """
                CREATE TABLE IF NOT EXISTS local_storage (
                    storage_key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
            """
            )
            await self._conn.commit()  # type: ignore
            logger.info("Storage tables initialized")

    async def get_item(self, storage_key: str) -> Optional[str]:
        """
        Read the raw string stored under a key.

        Args:
            storage_key: The storage key (e.g. 'pokedex:favorites').

        Returns:
            The stored string, or None if missing or on error.
        """
        try:
            async with self._lock:
                cursor = await self._conn.execute(  # type: ignore
                    "SELECT value FROM local_storage WHERE storage_key = ?",
                    (storage_key,),
                )
                row = await cursor.fetchone()
                return row["value"] if row else None

        except Exception as e:
            logger.error(f"Error reading storage key {storage_key}: {e}", exc_info=True)
            return None

    async def set_item(self, storage_key: str, value: str) -> bool:
        """
        Store a string under a key, replacing any previous value.

        Args:
            storage_key: The storage key.
            value: String to store (callers store JSON text).

        Returns:
            True if the write was committed, False otherwise.
        """
        try:
            async with self._lock:
                await self._conn.execute(  # type: ignore
                    """
                    INSERT INTO local_storage (storage_key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(storage_key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (storage_key, value, time.time()),
                )
                await self._conn.commit()  # type: ignore

                logger.debug(f"Stored {storage_key}")
                return True

        except Exception as e:
            logger.error(f"Error writing storage key {storage_key}: {e}", exc_info=True)
            return False

    async def remove_item(self, storage_key: str) -> bool:
        """
        Delete a key.

        Returns:
            True if successful, False otherwise.
        """
        try:
            async with self._lock:
                await self._conn.execute(  # type: ignore
                    "DELETE FROM local_storage WHERE storage_key = ?", (storage_key,)
                )
                await self._conn.commit()  # type: ignore
                return True

        except Exception as e:
            logger.error(f"Error deleting storage key {storage_key}: {e}", exc_info=True)
            return False

    async def items(self) -> Dict[str, str]:
        """
        Load every stored key.

        Returns:
            Dictionary mapping storage_key to value (empty on error).
        """
        try:
            async with self._lock:
                cursor = await self._conn.execute(  # type: ignore
                    "SELECT storage_key, value FROM local_storage"
                )
                rows = await cursor.fetchall()
                return {row["storage_key"]: row["value"] for row in rows}

        except Exception as e:
            logger.error(f"Error listing storage keys: {e}", exc_info=True)
            return {}

    async def clear(self) -> bool:
        """
        Remove every stored key.

        Returns:
            True if successful, False otherwise.
        """
        try:
            async with self._lock:
                await self._conn.execute("DELETE FROM local_storage")  # type: ignore
                await self._conn.commit()  # type: ignore
                logger.info("Storage cleared")
                return True

        except Exception as e:
            logger.error(f"Error clearing storage: {e}", exc_info=True)
            return False
