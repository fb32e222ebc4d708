"""SQLite database operations for occurrence caching and sync status."""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

import aiosqlite

from ..sources.models import SyncStatus, SyncStatusRecord
from .models import CachedEvent

logger = logging.getLogger(__name__)

_EVENT_COLUMNS = (
    "event_id",
    "source",
    "position",
    "title",
    "description",
    "location",
    "url",
    "start_date",
    "end_date",
    "all_day",
    "color",
    "category_id",
    "category_name",
    "cached_at",
)


class DatabaseManager:
    """Manages SQLite database operations for the occurrence cache."""

    def __init__(self, database_path: Union[Path, str]):
        """Initialize database manager.

        Args:
            database_path: Path to SQLite database file
        """
        self.database_path = Path(database_path)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialized = False
        self._initialization_lock: Optional[asyncio.Lock] = None

        logger.debug(f"Database manager initialized (lazy): {database_path}")

    async def _ensure_initialized(self) -> None:
        """Ensure the schema exists before operations."""
        if self._initialized:
            return

        # Use a lock to prevent concurrent initialization
        if self._initialization_lock is None:
            self._initialization_lock = asyncio.Lock()

        async with self._initialization_lock:
            if self._initialized:
                return
            await self._initialize_database()
            self._initialized = True

    async def _initialize_database(self) -> None:
        async with aiosqlite.connect(str(self.database_path)) as db:
            # WAL keeps readers unblocked while a refresh rewrites the cache
            await db.execute("PRAGMA journal_mode=WAL")
            await db.execute("PRAGMA synchronous=NORMAL")

            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS event_cache (
                    event_id TEXT NOT NULL,
                    source TEXT NOT NULL,
                    position INTEGER NOT NULL DEFAULT 0,
                    title TEXT NOT NULL,
                    description TEXT,
                    location TEXT,
                    url TEXT,
                    start_date TEXT NOT NULL,
                    end_date TEXT NOT NULL,
                    all_day INTEGER NOT NULL DEFAULT 0,
                    color TEXT NOT NULL,
                    category_id TEXT NOT NULL,
                    category_name TEXT NOT NULL,
                    cached_at TEXT NOT NULL,
                    PRIMARY KEY (source, event_id)
                )
            """
            )

            await db.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_event_cache_start
                ON event_cache(start_date)
            """
            )

            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS calendar_syncs (
                    source_name TEXT PRIMARY KEY,
                    source_url TEXT NOT NULL,
                    last_sync TEXT NOT NULL,
                    occurrence_count INTEGER NOT NULL DEFAULT 0,
                    status TEXT NOT NULL,
                    error_message TEXT
                )
            """
            )

            await db.commit()

        logger.debug(f"Database schema ready at {self.database_path}")

    async def replace_events(self, events: list[CachedEvent]) -> int:
        """Replace the whole cache with ``events`` in one transaction.

        Returns:
            Number of rows stored
        """
        await self._ensure_initialized()

        async with aiosqlite.connect(str(self.database_path)) as db:
            await db.execute("DELETE FROM event_cache")
            await db.executemany(
                f"""
                INSERT OR REPLACE INTO event_cache ({", ".join(_EVENT_COLUMNS)})
                VALUES ({", ".join("?" for _ in _EVENT_COLUMNS)})
            """,
                [
                    (
                        event.event_id,
                        event.source,
                        event.position,
                        event.title,
                        event.description,
                        event.location,
                        event.url,
                        event.start_date,
                        event.end_date,
                        event.all_day,
                        event.color,
                        event.category_id,
                        event.category_name,
                        event.cached_at,
                    )
                    for event in events
                ],
            )
            await db.commit()

        logger.debug(f"Stored {len(events)} events in cache")
        return len(events)

    async def get_events(self) -> list[CachedEvent]:
        """Get every cached row in the order it was written."""
        await self._ensure_initialized()

        async with aiosqlite.connect(str(self.database_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM event_cache ORDER BY position ASC, start_date ASC"
            )
            rows = await cursor.fetchall()

        events = []
        for row in rows:
            event_data = dict(row)
            event_data["all_day"] = bool(event_data["all_day"])
            events.append(CachedEvent(**event_data))

        logger.debug(f"Retrieved {len(events)} events from cache")
        return events

    async def clear_events(self) -> int:
        """Clear all cached events.

        Returns:
            Number of events removed
        """
        await self._ensure_initialized()

        async with aiosqlite.connect(str(self.database_path)) as db:
            cursor = await db.execute("DELETE FROM event_cache")
            deleted_count = cursor.rowcount
            await db.commit()

        logger.debug(f"Cleared all {deleted_count} events from cache")
        return deleted_count

    async def upsert_sync_status(self, record: SyncStatusRecord) -> None:
        """Insert or update the sync status row of one feed."""
        await self._ensure_initialized()

        async with aiosqlite.connect(str(self.database_path)) as db:
            await db.execute(
                """
                INSERT INTO calendar_syncs (
                    source_name, source_url, last_sync, occurrence_count, status, error_message
                ) VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(source_name) DO UPDATE SET
                    source_url = excluded.source_url,
                    last_sync = excluded.last_sync,
                    occurrence_count = excluded.occurrence_count,
                    status = excluded.status,
                    error_message = excluded.error_message
            """,
                (
                    record.source_name,
                    record.source_url,
                    record.timestamp.isoformat(),
                    record.occurrence_count,
                    SyncStatus(record.status).value,
                    record.error_message,
                ),
            )
            await db.commit()

    async def get_sync_statuses(self) -> list[SyncStatusRecord]:
        """Get the stored sync status of every feed, ordered by name."""
        await self._ensure_initialized()

        async with aiosqlite.connect(str(self.database_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM calendar_syncs ORDER BY source_name ASC")
            rows = await cursor.fetchall()

        return [
            SyncStatusRecord(
                source_name=row["source_name"],
                source_url=row["source_url"],
                timestamp=row["last_sync"],
                occurrence_count=row["occurrence_count"],
                status=row["status"],
                error_message=row["error_message"],
            )
            for row in rows
        ]
