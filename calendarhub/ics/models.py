"""Data models for ICS calendar processing."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class SourceKind(str, Enum):
    """Calendar providers a feed can come from."""

    ICLOUD = "icloud"
    OUTLOOK = "outlook"


class ICSResponse(BaseModel):
    """Response from ICS fetch operation."""

    success: bool
    content: Optional[str] = None
    status_code: Optional[int] = None
    error_message: Optional[str] = None
    strategy: Optional[str] = Field(
        default=None, description="Transport strategy template that produced the content"
    )
    fetch_time: datetime = Field(default_factory=datetime.now)

    @property
    def content_length(self) -> Optional[int]:
        """Get content length if available."""
        if self.content:
            return len(self.content.encode("utf-8"))
        return None


@dataclass
class RawEventComponent:
    """One parsed VEVENT before expansion.

    ``recurrence`` is a :class:`~calendarhub.ics.rrule_expander.RecurrenceIterator`
    for recurring components and ``None`` otherwise.
    """

    uid: str
    summary: str
    start: datetime
    end: datetime
    description: str = ""
    location: str = ""
    url: Optional[str] = None
    all_day: bool = False
    recurrence: Optional[Any] = field(default=None, repr=False)

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not None


class ICSParseResult(BaseModel):
    """Result of ICS parsing operation."""

    success: bool
    components: List[Any] = Field(default_factory=list, description="Parsed VEVENT components")
    calendar_name: Optional[str] = None
    timezone: Optional[str] = None

    # Parse statistics
    total_components: int = 0
    event_count: int = 0
    recurring_event_count: int = 0

    # Error information
    error_message: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)

    parse_time: datetime = Field(default_factory=datetime.now)


class TimeWindow(BaseModel):
    """Rolling window that bounds recurrence expansion."""

    window_start: datetime
    window_end: datetime

    model_config = ConfigDict(frozen=True)

    def contains(self, start: datetime, end: datetime) -> bool:
        """Check whether an event spanning ``start``..``end`` overlaps the window."""
        return end >= self.window_start and start <= self.window_end


class EventCategory(BaseModel):
    """Category label and color attached to an occurrence."""

    id: str
    name: str
    color: str
    source_kind: SourceKind

    model_config = ConfigDict(frozen=True, use_enum_values=True)


class EventOccurrence(BaseModel):
    """A concrete calendar event occurrence, ready for display and caching."""

    id: str = Field(..., description="Unique per occurrence within one feed")
    title: str
    start: datetime
    end: datetime
    description: Optional[str] = None
    location: Optional[str] = None
    url: Optional[str] = Field(default=None, description="Link to the event in its source")
    source_kind: SourceKind
    all_day: bool = False
    category: EventCategory
    color: str

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    @field_serializer("start", "end")
    def serialize_datetime(self, dt: datetime) -> str:
        """Serialize datetime fields to ISO format."""
        return dt.isoformat()

    @property
    def duration_minutes(self) -> int:
        """Get event duration in minutes (negative when the feed says end < start)."""
        delta = self.end - self.start
        return int(delta.total_seconds() / 60)
