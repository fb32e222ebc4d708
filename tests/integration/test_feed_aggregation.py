"""End-to-end aggregation over mocked HTTP feeds."""

from datetime import datetime
from unittest.mock import patch
from zoneinfo import ZoneInfo

import httpx
import pytest

from calendarhub.cache.manager import CacheManager
from calendarhub.sources.manager import SourceManager
from calendarhub.sources.models import SyncStatus

BRUSSELS = ZoneInfo("Europe/Brussels")
NOW = datetime(2025, 3, 15, 12, 0, tzinfo=BRUSSELS)

OUTLOOK_URL = "https://outlook.example/owa/calendar/calendar.ics"
ICLOUD_URL = "https://icloud.example/published/2/abc"


@pytest.fixture
def aggregation_settings(test_settings):
    test_settings.sources = [
        {"name": "Calendrier iCloud", "url": ICLOUD_URL, "source_kind": "icloud", "color": "#ff6b6b"},
        {"name": "Calendrier Outlook UCLouvain", "url": OUTLOOK_URL, "source_kind": "outlook"},
    ]
    return test_settings


def serve(routes):
    """Patch httpx so each URL answers with the configured status and body."""

    def handler(request: httpx.Request) -> httpx.Response:
        status, body = routes.get(str(request.url), (404, ""))
        return httpx.Response(status, text=body, headers={"content-type": "text/calendar"})

    transport = httpx.MockTransport(handler)
    original = httpx.AsyncClient.__init__

    def init(self, *args, **kwargs):
        kwargs["transport"] = transport
        original(self, *args, **kwargs)

    return patch.object(httpx.AsyncClient, "__init__", init)


class TestFeedAggregation:
    """Refresh real pipelines against in-memory HTTP responses."""

    @pytest.mark.asyncio
    async def test_outlook_feed_expanded_categorized_and_cached(self, aggregation_settings, sample_ics):
        cache = CacheManager(aggregation_settings)
        manager = SourceManager(aggregation_settings, cache_manager=cache, time_provider=lambda: NOW)

        with serve({OUTLOOK_URL: (200, sample_ics), ICLOUD_URL: (500, "")}):
            events = await manager.refresh()

        assert len(events) == 4
        meeting = events[0]
        assert meeting.id == "E1"
        assert meeting.category.id == "reunions"

        series = [event for event in events if event.id.startswith("E2_")]
        assert len(series) == 3
        assert len({event.color for event in series}) == 1
        assert len({event.id for event in events}) == 4

        statuses = {status.source_name: status for status in await cache.get_sync_statuses()}
        assert statuses["Calendrier iCloud"].status == SyncStatus.ERROR
        assert statuses["Calendrier Outlook UCLouvain"].occurrence_count == 4

        cached = await cache.get_cached_events()
        assert [event.id for event in cached] == [event.id for event in events]

    @pytest.mark.asyncio
    async def test_both_feeds_merged_in_configuration_order(self, aggregation_settings, sample_ics):
        manager = SourceManager(aggregation_settings, time_provider=lambda: NOW)

        with serve({OUTLOOK_URL: (200, sample_ics), ICLOUD_URL: (200, sample_ics)}):
            events = await manager.refresh()

        assert [event.source_kind for event in events] == ["icloud"] * 4 + ["outlook"] * 4
        assert {event.category.id for event in events[:4]} == {"icloud"}
