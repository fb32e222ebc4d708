"""Rolling expansion window computation."""

import logging
from datetime import datetime, time, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil.relativedelta import relativedelta

from .models import TimeWindow

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Europe/Brussels"


def resolve_timezone(name: Optional[str], fallback: str = DEFAULT_TIMEZONE) -> tzinfo:
    """Return a ZoneInfo for ``name``, falling back when it is unknown or empty."""
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown timezone %r, using %s", name, fallback)
    return ZoneInfo(fallback)


def compute_time_window(
    now: datetime,
    tz: tzinfo,
    months_back: int = 6,
    months_ahead: int = 12,
) -> TimeWindow:
    """Compute the rolling window around ``now``.

    The window opens at midnight on the first day of the month ``months_back``
    months before ``now`` and closes at the end of the last day of the month
    preceding the month ``months_ahead`` months after ``now``.

    Args:
        now: Reference instant; naive values are taken to be in ``tz``
        tz: Timezone the month boundaries are computed in
        months_back: Months of history to keep
        months_ahead: Months of future to expand

    Returns:
        TimeWindow with timezone-aware bounds
    """
    local_now = now.replace(tzinfo=tz) if now.tzinfo is None else now.astimezone(tz)
    first_of_month = local_now.date().replace(day=1)

    start_day = first_of_month - relativedelta(months=months_back)
    end_day = first_of_month + relativedelta(months=months_ahead) - relativedelta(days=1)

    window = TimeWindow(
        window_start=datetime.combine(start_day, time.min, tzinfo=tz),
        window_end=datetime.combine(end_day, time.max, tzinfo=tz),
    )
    logger.debug(
        "Time window computed: %s -> %s",
        window.window_start.isoformat(),
        window.window_end.isoformat(),
    )
    return window
