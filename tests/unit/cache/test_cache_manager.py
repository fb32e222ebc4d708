"""Unit tests for CacheManager and CachedEvent."""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock, patch
from zoneinfo import ZoneInfo

import pytest

from calendarhub.cache.manager import CacheManager
from calendarhub.cache.models import CachedEvent
from calendarhub.ics.models import EventCategory, SourceKind
from calendarhub.sources.models import SyncStatus, SyncStatusRecord

BRUSSELS = ZoneInfo("Europe/Brussels")


@pytest.fixture
def cache_manager(test_settings):
    return CacheManager(test_settings)


class TestCachedEvent:
    """Test suite for CachedEvent conversion."""

    def test_round_trip_keeps_display_fields(self, occurrence_factory):
        occurrence = occurrence_factory(
            "E2_2025-03-10T14:00:00",
            title="Cours [TP1]",
            start=datetime(2025, 3, 10, 14, 0, tzinfo=BRUSSELS),
            location="Auditoire B",
            category=EventCategory(
                id="cours", name="Cours", color="#e74c3c", source_kind=SourceKind.OUTLOOK
            ),
            color="#e74c3c",
        )

        row = CachedEvent.from_occurrence(occurrence, position=3, cached_at="2025-03-10T08:00:00")
        restored = row.to_occurrence()

        assert row.source == "outlook"
        assert row.position == 3
        assert restored.id == occurrence.id
        assert restored.start == occurrence.start
        assert restored.start.utcoffset() == timedelta(hours=1)
        assert restored.category.id == "cours"
        assert restored.category.color == "#e74c3c"
        assert restored.location == "Auditoire B"

    def test_unknown_category_takes_row_source(self, occurrence_factory):
        row = CachedEvent.from_occurrence(occurrence_factory("X", source_kind=SourceKind.ICLOUD))
        row = row.model_copy(update={"category_id": "legacy"})

        assert row.to_occurrence().category.source_kind == "icloud"


class TestCacheManager:
    """Test suite for CacheManager."""

    def test_database_in_data_dir(self, cache_manager, test_settings):
        assert cache_manager.db.database_path == test_settings.data_dir / "calendarhub_cache.db"

    @pytest.mark.asyncio
    async def test_cache_and_read_back_in_order(self, cache_manager, occurrence_factory):
        occurrences = [
            occurrence_factory("P1", source_kind=SourceKind.ICLOUD),
            occurrence_factory("C1", start=datetime(2025, 1, 5, 8, 0, tzinfo=BRUSSELS)),
        ]

        assert await cache_manager.cache_events(occurrences) is True
        cached = await cache_manager.get_cached_events()

        assert [occurrence.id for occurrence in cached] == ["P1", "C1"]
        assert cached[0].source_kind == "icloud"

    @pytest.mark.asyncio
    async def test_cache_failure_returns_false(self, cache_manager, occurrence_factory):
        with patch.object(
            cache_manager.db, "replace_events", AsyncMock(side_effect=OSError("disk full"))
        ):
            assert await cache_manager.cache_events([occurrence_factory("C1")]) is False

    @pytest.mark.asyncio
    async def test_read_failure_returns_empty_list(self, cache_manager):
        with patch.object(cache_manager.db, "get_events", AsyncMock(side_effect=OSError("locked"))):
            assert await cache_manager.get_cached_events() == []

    @pytest.mark.asyncio
    async def test_clear_cache(self, cache_manager, occurrence_factory):
        await cache_manager.cache_events([occurrence_factory("C1")])

        assert await cache_manager.clear_cache() is True
        assert await cache_manager.get_cached_events() == []

    @pytest.mark.asyncio
    async def test_report_and_list_statuses(self, cache_manager):
        record = SyncStatusRecord(
            source_name="Personnel",
            source_url="https://icloud.example/cal",
            occurrence_count=4,
            status=SyncStatus.SUCCESS,
        )

        assert await cache_manager.report(record) is True
        statuses = await cache_manager.get_sync_statuses()

        assert [status.source_name for status in statuses] == ["Personnel"]
        assert statuses[0].is_success is True
        assert statuses[0].occurrence_count == 4

    @pytest.mark.asyncio
    async def test_report_failure_swallowed(self, cache_manager):
        record = SyncStatusRecord(
            source_name="Personnel", source_url="https://icloud.example/cal", status=SyncStatus.ERROR
        )
        with patch.object(
            cache_manager.db, "upsert_sync_status", AsyncMock(side_effect=RuntimeError("boom"))
        ):
            assert await cache_manager.report(record) is False
