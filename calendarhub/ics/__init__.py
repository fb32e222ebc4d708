"""ICS calendar downloading, parsing and recurrence expansion."""

from .exceptions import (
    ICSError,
    ICSFetchError,
    ICSParseError,
    RecurrenceExpansionError,
)
from .fetcher import ICSFetcher
from .models import (
    EventCategory,
    EventOccurrence,
    ICSParseResult,
    ICSResponse,
    RawEventComponent,
    SourceKind,
    TimeWindow,
)
from .parser import ICSParser
from .rrule_expander import ExpandedOccurrence, OccurrenceExpander, RecurrenceIterator
from .window import compute_time_window, resolve_timezone

__all__ = [
    "EventCategory",
    "EventOccurrence",
    "ExpandedOccurrence",
    "ICSError",
    "ICSFetchError",
    "ICSFetcher",
    "ICSParseError",
    "ICSParseResult",
    "ICSParser",
    "ICSResponse",
    "OccurrenceExpander",
    "RawEventComponent",
    "RecurrenceExpansionError",
    "RecurrenceIterator",
    "SourceKind",
    "TimeWindow",
    "compute_time_window",
    "resolve_timezone",
]
