"""Data models for calendar feed management."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..ics.models import EventOccurrence, SourceKind


class SyncStatus(str, Enum):
    """Outcome of one feed's refresh."""

    SUCCESS = "success"
    ERROR = "error"


class FeedSourceConfig(BaseModel):
    """Configuration entry for one feed, as written in the config file."""

    name: str = Field(..., description="Human-readable feed name")
    url: str = Field(..., description="ICS feed URL")
    source_kind: SourceKind = Field(..., description="Provider the feed comes from")
    color: str = Field(default="#4ecdc4", description="Legacy tint for the feed")
    enabled: bool = Field(default=True, description="Whether the feed is refreshed")

    model_config = ConfigDict(use_enum_values=True)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("Feed URL must start with http:// or https://")
        return v


class FeedSource(FeedSourceConfig):
    """Immutable feed description used at runtime."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    @classmethod
    def from_config(cls, config: FeedSourceConfig) -> "FeedSource":
        return cls(**config.model_dump())


class SyncStatusRecord(BaseModel):
    """Sync status of one feed after a refresh."""

    source_name: str
    source_url: str
    timestamp: datetime = Field(default_factory=datetime.now)
    occurrence_count: int = 0
    status: SyncStatus
    error_message: Optional[str] = None

    model_config = ConfigDict(use_enum_values=True)

    @property
    def is_success(self) -> bool:
        return self.status == SyncStatus.SUCCESS


class FeedResult(BaseModel):
    """Occurrences and status produced by one feed's pipeline."""

    source: FeedSource
    occurrences: List[EventOccurrence] = Field(default_factory=list)
    status_record: SyncStatusRecord

    @property
    def success(self) -> bool:
        return self.status_record.is_success


__all__ = [
    "FeedResult",
    "FeedSource",
    "FeedSourceConfig",
    "SourceKind",
    "SyncStatus",
    "SyncStatusRecord",
]
