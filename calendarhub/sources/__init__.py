"""Calendar feed management."""

from .exceptions import SourceConfigError, SourceConnectionError, SourceDataError, SourceError
from .feed import FeedPipeline
from .manager import SourceManager
from .models import FeedResult, FeedSource, FeedSourceConfig, SourceKind, SyncStatus, SyncStatusRecord

__all__ = [
    "FeedPipeline",
    "FeedResult",
    "FeedSource",
    "FeedSourceConfig",
    "SourceConfigError",
    "SourceConnectionError",
    "SourceDataError",
    "SourceError",
    "SourceKind",
    "SourceManager",
    "SyncStatus",
    "SyncStatusRecord",
]
