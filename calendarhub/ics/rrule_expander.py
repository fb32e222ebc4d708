"""Recurrence expansion for parsed ICS components."""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone, tzinfo
from typing import Any, Iterable, Iterator, Optional

from dateutil.rrule import rrulestr, rruleset

from .exceptions import RecurrenceExpansionError
from .models import RawEventComponent, TimeWindow

UTC = timezone.utc

logger = logging.getLogger(__name__)

DEFAULT_MAX_OCCURRENCES = 500
DEFAULT_MAX_ITERATIONS = 50_000

_UNTIL_RE = re.compile(r"UNTIL=([0-9]{8}(?:T[0-9]{6}Z?)?)", re.IGNORECASE)
_COUNT_RE = re.compile(r"COUNT=([0-9]+)", re.IGNORECASE)


def attach_timezone(wall: datetime, tz: tzinfo) -> datetime:
    """Attach ``tz`` to a naive wall-clock datetime."""
    localize = getattr(tz, "localize", None)
    if localize is not None:
        return localize(wall)
    return wall.replace(tzinfo=tz)


def to_wall_clock(value: Any, tz: tzinfo) -> datetime:
    """Convert a date, naive or aware datetime to naive wall-clock time in ``tz``."""
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    if value.tzinfo is None:
        return value
    return value.astimezone(tz).replace(tzinfo=None)


def localize_until(rule_text: str, tz: tzinfo) -> str:
    """Rewrite the UNTIL part of an RRULE into naive wall-clock time in ``tz``.

    dateutil refuses to mix naive and aware values, and the series is expanded
    in naive wall-clock time so that occurrences keep their local hour across
    DST transitions.
    """
    match = _UNTIL_RE.search(rule_text)
    if not match:
        return rule_text

    raw = match.group(1).upper()
    if raw.endswith("Z"):
        instant = datetime.strptime(raw, "%Y%m%dT%H%M%SZ").replace(tzinfo=UTC)
        replacement = to_wall_clock(instant, tz).strftime("%Y%m%dT%H%M%S")
    elif "T" not in raw:
        # Date-only UNTIL is inclusive of the whole day
        replacement = f"{raw}T235959"
    else:
        replacement = raw

    return rule_text[: match.start(1)] + replacement + rule_text[match.end(1) :]


@dataclass(frozen=True)
class OccurrenceDetails:
    """Resolved start/end of one occurrence and the component describing it."""

    start: datetime
    end: datetime
    component: Optional[RawEventComponent] = None


@dataclass(frozen=True)
class ExpandedOccurrence:
    """An occurrence produced by the expander, before categorization."""

    id: str
    title: str
    start: datetime
    end: datetime
    description: str = ""
    location: str = ""
    url: Optional[str] = None
    all_day: bool = False


class RecurrenceIterator:
    """Iterates the occurrences of one recurring series.

    The series is expanded in naive wall-clock time of the master's timezone;
    occurrences are handed out as aware datetimes in that timezone.
    """

    def __init__(
        self,
        dtstart: datetime,
        duration: timedelta,
        rules: Iterable[str],
        rdates: Iterable[Any] = (),
        exdates: Iterable[Any] = (),
        all_day: bool = False,
    ):
        if dtstart.tzinfo is None:
            raise RecurrenceExpansionError("Recurring series needs a timezone-aware DTSTART")

        self.tz = dtstart.tzinfo
        self.dtstart = dtstart
        self.duration = duration
        self.all_day = all_day
        self._overrides: dict[datetime, RawEventComponent] = {}

        rdates = list(rdates)
        wall_start = to_wall_clock(dtstart, self.tz)
        rule_set = rruleset()
        rule_count = 0
        for rule_text in rules:
            try:
                parsed = rrulestr(localize_until(rule_text, self.tz), dtstart=wall_start)
            except (ValueError, TypeError) as e:
                raise RecurrenceExpansionError(f"Invalid RRULE {rule_text!r}: {e}") from e
            if isinstance(parsed, rruleset):
                raise RecurrenceExpansionError(f"Unexpected rule set in RRULE {rule_text!r}")
            rule_count += 1

            # An off-pattern DTSTART still counts as the first of COUNT instances
            count_match = _COUNT_RE.search(rule_text)
            if count_match and next(iter(parsed), None) != wall_start:
                remaining = int(count_match.group(1)) - 1
                if remaining <= 0:
                    continue
                parsed = parsed.replace(count=remaining)
            rule_set.rrule(parsed)

        # DTSTART always counts as the first instance of the series
        rule_set.rdate(wall_start)
        for rdate in rdates:
            rule_set.rdate(to_wall_clock(rdate, self.tz))
        for exdate in exdates:
            rule_set.exdate(to_wall_clock(exdate, self.tz))

        if rule_count == 0 and not rdates:
            logger.debug("Recurrence built without RRULE or RDATE, only DTSTART will occur")

        self._rule_set = rule_set

    def add_override(self, recurrence_id: Any, component: RawEventComponent) -> None:
        """Register a RECURRENCE-ID override for one occurrence."""
        self._overrides[to_wall_clock(recurrence_id, self.tz)] = component

    @property
    def override_count(self) -> int:
        return len(self._overrides)

    def __iter__(self) -> Iterator[datetime]:
        for wall in self._rule_set:
            yield attach_timezone(wall, self.tz)

    def occurrence_details(self, start: datetime) -> OccurrenceDetails:
        """Resolve the concrete start and end of the occurrence at ``start``."""
        override = self._overrides.get(to_wall_clock(start, self.tz))
        if override is not None:
            return OccurrenceDetails(start=override.start, end=override.end, component=override)
        return OccurrenceDetails(start=start, end=start + self.duration)

    def token(self, start: datetime) -> str:
        """Stable serialization of an occurrence's position in the series."""
        wall = to_wall_clock(start, self.tz)
        if self.all_day:
            return wall.date().isoformat()
        return wall.isoformat()


class OccurrenceExpander:
    """Turns parsed components into concrete occurrences inside a time window."""

    def __init__(self, settings: Any):
        """Initialize the expander.

        Args:
            settings: Application settings (reads ``max_occurrences_per_rule``
                and ``max_rule_iterations``)
        """
        self.settings = settings
        self.max_occurrences = int(
            getattr(settings, "max_occurrences_per_rule", DEFAULT_MAX_OCCURRENCES)
        )
        self.max_iterations = int(getattr(settings, "max_rule_iterations", DEFAULT_MAX_ITERATIONS))

    def expand_components(
        self, components: Iterable[RawEventComponent], window: TimeWindow
    ) -> list[ExpandedOccurrence]:
        """Expand every component, skipping the ones that fail.

        Returns:
            Occurrences of all components, sorted ascending by start
        """
        occurrences: list[ExpandedOccurrence] = []
        skipped = 0

        for component in components:
            try:
                occurrences.extend(self.expand_component(component, window))
            except Exception as e:
                skipped += 1
                logger.warning("Skipping event %r that failed to expand: %s", component.uid, e)

        occurrences.sort(key=lambda occ: occ.start)

        if skipped:
            logger.info("Expanded %d occurrences, skipped %d components", len(occurrences), skipped)
        else:
            logger.debug("Expanded %d occurrences", len(occurrences))
        return occurrences

    def expand_component(
        self, component: RawEventComponent, window: TimeWindow
    ) -> list[ExpandedOccurrence]:
        """Expand a single component into the occurrences that fall in ``window``."""
        if not component.is_recurring:
            if not window.contains(component.start, component.end):
                return []
            return [self._build(component, component.uid, component.start, component.end)]

        return self._expand_recurring(component, window)

    def _expand_recurring(
        self, component: RawEventComponent, window: TimeWindow
    ) -> list[ExpandedOccurrence]:
        recurrence: RecurrenceIterator = component.recurrence
        occurrences: list[ExpandedOccurrence] = []
        scanned = 0

        # Every start from DTSTART on counts against the iteration budget
        for occurrence_start in recurrence:
            if occurrence_start > window.window_end:
                break
            scanned += 1
            if scanned > self.max_iterations:
                logger.debug(
                    "Iteration budget of %d exhausted for %r, truncating",
                    self.max_iterations,
                    component.uid,
                )
                break
            if occurrence_start < window.window_start:
                continue
            if len(occurrences) >= self.max_occurrences:
                logger.debug(
                    "Occurrence cap of %d reached for %r, truncating",
                    self.max_occurrences,
                    component.uid,
                )
                break

            details = recurrence.occurrence_details(occurrence_start)
            if not window.contains(details.start, details.end):
                continue
            occurrence_id = f"{component.uid}_{recurrence.token(occurrence_start)}"
            source = details.component or component
            occurrences.append(
                self._build(source, occurrence_id, details.start, details.end, component.all_day)
            )

        return occurrences

    def _build(
        self,
        component: RawEventComponent,
        occurrence_id: str,
        start: datetime,
        end: datetime,
        all_day: Optional[bool] = None,
    ) -> ExpandedOccurrence:
        return ExpandedOccurrence(
            id=occurrence_id,
            title=component.summary,
            start=start,
            end=end,
            description=component.description,
            location=component.location,
            url=component.url,
            all_day=component.all_day if all_day is None else all_day,
        )
