"""Shared test configuration and lightweight fixtures."""

import os
from datetime import datetime
from pathlib import Path
from typing import Any, Optional
from zoneinfo import ZoneInfo

import pytest

from calendarhub.config.settings import CalendarHubSettings
from calendarhub.ics.models import EventCategory, EventOccurrence, SourceKind, TimeWindow
from calendarhub.sources.models import FeedSource

BRUSSELS = ZoneInfo("Europe/Brussels")

# ============================================================================
# Sample ICS content
# ============================================================================

MEETING_EVENT = """BEGIN:VEVENT
UID:E1
DTSTART:20250310T090000Z
DTEND:20250310T100000Z
SUMMARY:Réunion budget
DESCRIPTION:Revue du budget annuel
LOCATION:Salle A
URL:https://outlook.example/event/E1
END:VEVENT"""

DAILY_COURSE_EVENT = """BEGIN:VEVENT
UID:E2
DTSTART;TZID=Europe/Brussels:20250310T140000
DTEND;TZID=Europe/Brussels:20250310T160000
RRULE:FREQ=DAILY;COUNT=3
SUMMARY:Cours [TP1]
LOCATION:Auditoire B
END:VEVENT"""


def wrap_calendar(*events: str, name: str = "Test Calendar", timezone: Optional[str] = None) -> str:
    """Wrap VEVENT blocks into a VCALENDAR document."""
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//CalendarHub//Tests//EN",
        f"X-WR-CALNAME:{name}",
    ]
    if timezone:
        lines.append(f"X-WR-TIMEZONE:{timezone}")
    lines.extend(events)
    lines.append("END:VCALENDAR")
    return "\r\n".join(lines) + "\r\n"


@pytest.fixture
def sample_ics() -> str:
    """Calendar with one single event and one daily series of three."""
    return wrap_calendar(MEETING_EVENT, DAILY_COURSE_EVENT)


# ============================================================================
# Settings and model fixtures
# ============================================================================


@pytest.fixture
def test_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> CalendarHubSettings:
    """Real settings isolated from the user's environment and config files."""
    for key in list(os.environ):
        if key.upper().startswith("CALENDARHUB_"):
            monkeypatch.delenv(key)

    config_file = tmp_path / "config.yaml"
    config_file.write_text("", encoding="utf-8")

    return CalendarHubSettings(
        config_path=config_file,
        data_dir=tmp_path / "data",
        timezone="Europe/Brussels",
        max_retries=0,
        retry_backoff_factor=1.0,
        request_timeout=5,
    )


@pytest.fixture
def window() -> TimeWindow:
    """Calendar year 2025 in Brussels time."""
    return TimeWindow(
        window_start=datetime(2025, 1, 1, tzinfo=BRUSSELS),
        window_end=datetime(2025, 12, 31, 23, 59, 59, tzinfo=BRUSSELS),
    )


@pytest.fixture
def outlook_source() -> FeedSource:
    return FeedSource(
        name="Outlook",
        url="https://outlook.example/calendar.ics",
        source_kind=SourceKind.OUTLOOK,
    )


@pytest.fixture
def icloud_source() -> FeedSource:
    return FeedSource(
        name="iCloud",
        url="https://icloud.example/published/2/abc",
        source_kind=SourceKind.ICLOUD,
        color="#ff6b6b",
    )


def make_occurrence(
    occurrence_id: str,
    title: str = "Event",
    start: Optional[datetime] = None,
    source_kind: SourceKind = SourceKind.OUTLOOK,
    **kwargs: Any,
) -> EventOccurrence:
    """Build a categorized occurrence with sensible defaults."""
    start = start or datetime(2025, 3, 10, 9, 0, tzinfo=BRUSSELS)
    end = kwargs.pop("end", start.replace(hour=start.hour + 1))
    color = kwargs.pop("color", "#3498db")
    category = kwargs.pop(
        "category",
        EventCategory(id="outlook", name="Calendrier UCLouvain", color=color, source_kind=source_kind),
    )
    return EventOccurrence(
        id=occurrence_id,
        title=title,
        start=start,
        end=end,
        source_kind=source_kind,
        category=category,
        color=color,
        **kwargs,
    )


@pytest.fixture
def occurrence_factory():
    """Factory building categorized occurrences."""
    return make_occurrence


@pytest.fixture
def calendar_builder():
    """Builder wrapping VEVENT blocks into a VCALENDAR document."""
    return wrap_calendar
