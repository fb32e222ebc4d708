"""Database models for caching calendar occurrences."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..categories import get_category_by_id
from ..ics.models import EventCategory, EventOccurrence, SourceKind


class CachedEvent(BaseModel):
    """Cached occurrence row for local storage."""

    # Primary key is (source, event_id); ids are only unique within a feed
    event_id: str
    source: str
    position: int = Field(default=0, description="Index in the aggregated list")

    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    url: Optional[str] = None

    # Time information (stored as ISO strings for SQLite compatibility)
    start_date: str
    end_date: str
    all_day: bool = False

    # Presentation
    color: str
    category_id: str
    category_name: str

    cached_at: str

    model_config = {"populate_by_name": True}

    @property
    def start_dt(self) -> datetime:
        """Get start datetime as datetime object."""
        return datetime.fromisoformat(self.start_date.replace("Z", "+00:00"))

    @property
    def end_dt(self) -> datetime:
        """Get end datetime as datetime object."""
        return datetime.fromisoformat(self.end_date.replace("Z", "+00:00"))

    @property
    def cached_dt(self) -> datetime:
        """Get cached datetime as datetime object."""
        return datetime.fromisoformat(self.cached_at.replace("Z", "+00:00"))

    @classmethod
    def from_occurrence(
        cls, occurrence: EventOccurrence, position: int = 0, cached_at: Optional[str] = None
    ) -> "CachedEvent":
        """Flatten an occurrence into a cache row."""
        return cls(
            event_id=occurrence.id,
            source=SourceKind(occurrence.source_kind).value,
            position=position,
            title=occurrence.title,
            description=occurrence.description,
            location=occurrence.location,
            url=occurrence.url,
            start_date=occurrence.start.isoformat(),
            end_date=occurrence.end.isoformat(),
            all_day=occurrence.all_day,
            color=occurrence.color,
            category_id=occurrence.category.id,
            category_name=occurrence.category.name,
            cached_at=cached_at or datetime.now().isoformat(),
        )

    def to_occurrence(self) -> EventOccurrence:
        """Rebuild the occurrence this row was flattened from."""
        source_kind = SourceKind(self.source)
        known = get_category_by_id(self.category_id)
        category = EventCategory(
            id=self.category_id,
            name=self.category_name,
            color=self.color,
            source_kind=known.source_kind if known else source_kind,
        )
        return EventOccurrence(
            id=self.event_id,
            title=self.title,
            start=self.start_dt,
            end=self.end_dt,
            description=self.description,
            location=self.location,
            url=self.url,
            source_kind=source_kind,
            all_day=self.all_day,
            category=category,
            color=self.color,
        )

