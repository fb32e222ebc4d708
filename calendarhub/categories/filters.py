"""Filtering of placeholder and non-informative calendar events."""

import logging
import re
from collections.abc import Iterable, Sequence
from typing import Optional

from ..ics.rrule_expander import ExpandedOccurrence

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDE_PATTERNS: tuple[str, ...] = (
    # Free/busy placeholders
    r"^(busy|occupé|indisponible)$",
    r"^(free|libre|disponible)$",
    r"^(tentative|provisoire)$",
    # Recurring filler
    r"^(pause|break|lunch|déjeuner)$",
    r"^(meeting|réunion)\s*$",
    # Maintenance
    r"maintenance",
    r"test\s*$",
    # Generic private slots
    r"^(privé|private|personnel|personal)$",
    # Time blocking
    r"^(blocked|bloqué|block)$",
    r"^(no meeting|pas de réunion)$",
)


def _is_anchored(pattern: str) -> bool:
    return pattern.startswith("^") or pattern.endswith("$")


class EventFilter:
    """Drops occurrences whose title marks them as placeholders.

    Anchored patterns (``^...`` or ``...$``) are matched against the stripped
    title alone; the others are searched in the title and description.
    """

    def __init__(self, patterns: Optional[Sequence[str]] = None, enabled: bool = True):
        """Initialize filter.

        Args:
            patterns: Case-insensitive regular expressions, defaults to
                ``DEFAULT_EXCLUDE_PATTERNS``
            enabled: When False nothing is excluded

        Raises:
            re.error: If a pattern does not compile
        """
        self.enabled = enabled
        self._title_patterns: list[re.Pattern[str]] = []
        self._content_patterns: list[re.Pattern[str]] = []

        for pattern in DEFAULT_EXCLUDE_PATTERNS if patterns is None else patterns:
            compiled = re.compile(pattern, re.IGNORECASE)
            if _is_anchored(pattern):
                self._title_patterns.append(compiled)
            else:
                self._content_patterns.append(compiled)

    @classmethod
    def from_settings(cls, settings: object) -> "EventFilter":
        return cls(
            patterns=getattr(settings, "exclude_patterns", None),
            enabled=getattr(settings, "filter_excluded_events", True),
        )

    def should_exclude(self, title: str, description: str = "") -> bool:
        """Check whether an event with this title/description is noise."""
        if not self.enabled:
            return False

        title_clean = title.strip().lower()
        if any(pattern.search(title_clean) for pattern in self._title_patterns):
            return True

        content = f"{title_clean} {(description or '').lower()}"
        return any(pattern.search(content) for pattern in self._content_patterns)

    def apply(self, occurrences: Iterable[ExpandedOccurrence]) -> list[ExpandedOccurrence]:
        """Return the occurrences that are kept, in their original order."""
        kept = []
        dropped = 0
        for occurrence in occurrences:
            if self.should_exclude(occurrence.title, occurrence.description):
                dropped += 1
                continue
            kept.append(occurrence)

        if dropped:
            logger.debug(f"Excluded {dropped} placeholder occurrences")
        return kept
