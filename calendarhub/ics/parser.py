"""iCalendar parser producing raw, unexpanded event components."""

import logging
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any, Optional, cast

from icalendar import Calendar, Event as ICalEvent

from .exceptions import ICSParseError
from .models import ICSParseResult, RawEventComponent
from .rrule_expander import RecurrenceIterator, attach_timezone
from .window import resolve_timezone

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY = "Sans titre"


def _as_list(value: Any) -> list[Any]:
    """Normalize an icalendar property that may appear once or many times."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


class ICSParser:
    """Parser for ICS calendar feeds."""

    def __init__(self, settings: Any) -> None:
        """Initialize ICS parser.

        Args:
            settings: Application settings (reads ``timezone``)
        """
        self.settings = settings
        self.display_timezone = resolve_timezone(getattr(settings, "timezone", None))

        logger.debug("ICS parser initialized")

    def parse_ics_content(self, ics_content: str) -> ICSParseResult:
        """Parse ICS content into raw event components.

        Malformed VEVENTs are skipped with a warning; only a failure to read
        the calendar as a whole produces an unsuccessful result.

        Args:
            ics_content: Raw ICS file content

        Returns:
            Parse result with components and metadata
        """
        if not ics_content or not ics_content.strip():
            logger.warning("Empty ICS content provided")
            return ICSParseResult(success=False, error_message="Empty ICS content")

        try:
            calendar = Calendar.from_ical(ics_content)
        except Exception as e:
            logger.exception("Failed to parse ICS content")
            return ICSParseResult(success=False, error_message=str(e))

        calendar = cast("Calendar", calendar)
        calendar_name = self._get_calendar_property(calendar, "X-WR-CALNAME")
        timezone_str = self._get_calendar_property(calendar, "X-WR-TIMEZONE")
        floating_tz = self._floating_timezone(timezone_str)

        masters: list[RawEventComponent] = []
        overrides: list[tuple[Any, RawEventComponent]] = []
        total_components = 0
        warnings: list[str] = []

        for component in calendar.walk():
            total_components += 1
            if component.name != "VEVENT":
                continue

            try:
                raw, recurrence_id = self._parse_event_component(
                    cast("ICalEvent", component), floating_tz
                )
            except Exception as e:
                warning = f"Failed to parse event {component.get('UID', '<no uid>')}: {e}"
                warnings.append(warning)
                logger.warning(warning)
                continue

            if recurrence_id is None:
                masters.append(raw)
            else:
                overrides.append((recurrence_id, raw))

        components = masters + self._attach_overrides(masters, overrides)
        recurring_event_count = sum(1 for raw in components if raw.is_recurring)

        logger.debug(
            f"Parsed {len(components)} components from ICS content "
            f"({recurring_event_count} recurring, {len(warnings)} skipped)"
        )

        return ICSParseResult(
            success=True,
            components=components,
            calendar_name=calendar_name,
            timezone=timezone_str,
            total_components=total_components,
            event_count=len(masters) + len(overrides),
            recurring_event_count=recurring_event_count,
            warnings=warnings,
        )

    def _attach_overrides(
        self,
        masters: list[RawEventComponent],
        overrides: list[tuple[Any, RawEventComponent]],
    ) -> list[RawEventComponent]:
        """Attach RECURRENCE-ID overrides to their series.

        Returns:
            Overrides without a recurring master, to be treated as single events
        """
        series = {raw.uid: raw for raw in masters if raw.is_recurring}
        orphans = []

        for recurrence_id, raw in overrides:
            master = series.get(raw.uid)
            if master is None:
                logger.debug(f"Override of {raw.uid} has no recurring master, keeping as single event")
                orphans.append(raw)
                continue
            master.recurrence.add_override(recurrence_id, raw)

        return orphans

    def _parse_event_component(
        self,
        component: ICalEvent,
        floating_tz: tzinfo,
    ) -> tuple[RawEventComponent, Optional[Any]]:
        """Parse a single VEVENT component.

        Args:
            component: iCalendar VEVENT component
            floating_tz: Timezone applied to floating times and all-day dates

        Returns:
            The raw component and its RECURRENCE-ID value (``None`` for masters)

        Raises:
            ICSParseError: If DTSTART is missing or unusable
        """
        uid = str(component.get("UID", "")).strip()
        if not uid:
            raise ICSParseError("Event has no UID")

        dtstart = component.get("DTSTART")
        if dtstart is None:
            raise ICSParseError(f"Event {uid} missing DTSTART")

        start, all_day = self._parse_datetime(dtstart, floating_tz)

        dtend = component.get("DTEND")
        duration = component.get("DURATION")
        if dtend is not None:
            end, _ = self._parse_datetime(dtend, floating_tz)
        elif duration is not None and isinstance(getattr(duration, "dt", None), timedelta):
            end = start + duration.dt
        else:
            end = start

        summary = str(component.get("SUMMARY", "")).strip() or DEFAULT_SUMMARY
        url = str(component.get("URL", "")).strip()

        raw = RawEventComponent(
            uid=uid,
            summary=summary,
            start=start,
            end=end,
            description=str(component.get("DESCRIPTION", "")),
            location=str(component.get("LOCATION", "")),
            url=url if url.lower().startswith("http") else None,
            all_day=all_day,
        )

        recurrence_id_prop = component.get("RECURRENCE-ID")
        if recurrence_id_prop is not None:
            recurrence_id, _ = self._parse_datetime(recurrence_id_prop, floating_tz)
            return raw, recurrence_id

        rules = [
            rule.to_ical().decode("utf-8") if hasattr(rule, "to_ical") else str(rule)
            for rule in _as_list(component.get("RRULE"))
        ]
        rdates = self._collect_dates(component.get("RDATE"), floating_tz)
        if rules or rdates:
            raw.recurrence = RecurrenceIterator(
                dtstart=start,
                duration=end - start,
                rules=rules,
                rdates=rdates,
                exdates=self._collect_dates(component.get("EXDATE"), floating_tz),
                all_day=all_day,
            )

        return raw, None

    def _parse_datetime(self, dt_prop: Any, floating_tz: tzinfo) -> tuple[datetime, bool]:
        """Parse an iCalendar date or datetime property.

        Returns:
            Timezone-aware datetime and whether the value was date-only
        """
        value = getattr(dt_prop, "dt", None)

        if isinstance(value, datetime):
            if value.tzinfo is None:
                return attach_timezone(value, floating_tz), False
            return value, False
        if isinstance(value, date):
            return attach_timezone(datetime.combine(value, time.min), self.display_timezone), True

        raise ICSParseError(f"Unparseable date value: {dt_prop!r}")

    def _collect_dates(self, prop: Any, floating_tz: tzinfo) -> list[datetime]:
        """Flatten EXDATE/RDATE properties into aware datetimes."""
        values = []
        for entry in _as_list(prop):
            for item in getattr(entry, "dts", []):
                try:
                    values.append(self._parse_datetime(item, floating_tz)[0])
                except ICSParseError as e:
                    logger.debug(f"Ignoring date list entry: {e}")
        return values

    def _floating_timezone(self, timezone_str: Optional[str]) -> tzinfo:
        if timezone_str:
            return resolve_timezone(timezone_str, fallback=str(self.display_timezone))
        return self.display_timezone

    def _get_calendar_property(self, calendar: Calendar, prop_name: str) -> Optional[str]:
        """Get calendar-level property.

        Args:
            calendar: iCalendar Calendar object
            prop_name: Property name to get

        Returns:
            Property value as string or None
        """
        prop = calendar.get(prop_name)
        return str(prop) if prop else None
