"""Cache manager persisting occurrences and feed sync status."""

import logging
from datetime import datetime
from typing import Any

from ..ics.models import EventOccurrence
from ..sources.models import SyncStatusRecord
from .database import DatabaseManager
from .models import CachedEvent

logger = logging.getLogger(__name__)


class CacheManager:
    """Stores the last aggregated occurrence list and per-feed sync status.

    Every public method logs and swallows database errors so callers never
    fail because of the cache.
    """

    def __init__(self, settings: Any) -> None:
        """Initialize cache manager.

        Args:
            settings: Application settings
        """
        self.settings = settings
        self.db = DatabaseManager(settings.database_file)

        logger.debug("Cache manager initialized")

    async def cache_events(self, occurrences: list[EventOccurrence]) -> bool:
        """Replace the cached list with ``occurrences``.

        Args:
            occurrences: Aggregated occurrences, in display order

        Returns:
            True if the cache was written, False otherwise
        """
        cached_at = datetime.now().isoformat()
        try:
            rows = [
                CachedEvent.from_occurrence(occurrence, position=index, cached_at=cached_at)
                for index, occurrence in enumerate(occurrences)
            ]
            stored = await self.db.replace_events(rows)
        except Exception:
            logger.exception("Failed to cache events")
            return False

        logger.info(f"Cached {stored} occurrences")
        return True

    async def get_cached_events(self) -> list[EventOccurrence]:
        """Get the cached list as occurrences.

        Returns:
            Cached occurrences in the order they were written, or an empty list
        """
        try:
            rows = await self.db.get_events()
        except Exception:
            logger.exception("Failed to read cached events")
            return []

        occurrences = []
        for row in rows:
            try:
                occurrences.append(row.to_occurrence())
            except ValueError as e:
                logger.warning(f"Skipping unreadable cached event {row.event_id}: {e}")
        return occurrences

    async def clear_cache(self) -> bool:
        """Remove every cached occurrence."""
        try:
            removed = await self.db.clear_events()
        except Exception:
            logger.exception("Failed to clear cache")
            return False

        logger.info(f"Cleared {removed} cached occurrences")
        return True

    async def report(self, record: SyncStatusRecord) -> bool:
        """Store the sync status of one feed.

        Returns:
            True if the status was stored, False otherwise
        """
        try:
            await self.db.upsert_sync_status(record)
        except Exception:
            logger.exception(f"Failed to store sync status for {record.source_name}")
            return False

        logger.debug(f"Stored sync status {record.status} for {record.source_name}")
        return True

    async def get_sync_statuses(self) -> list[SyncStatusRecord]:
        """Get the last stored sync status of every feed."""
        try:
            return await self.db.get_sync_statuses()
        except Exception:
            logger.exception("Failed to read sync statuses")
            return []
