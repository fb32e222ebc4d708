"""Command handlers for the CalendarHub CLI."""

import json
import logging
from typing import Any

from ..cache.manager import CacheManager
from ..ics.models import EventOccurrence
from ..sources.exceptions import SourceConfigError
from ..sources.manager import SourceManager

logger = logging.getLogger(__name__)


def format_occurrence(occurrence: EventOccurrence) -> str:
    """Render one occurrence as a single console line."""
    if occurrence.all_day:
        when = occurrence.start.strftime("%Y-%m-%d") + " (all day)"
    else:
        when = f"{occurrence.start:%Y-%m-%d %H:%M}-{occurrence.end:%H:%M}"
    line = f"{when}  [{occurrence.category.name}] {occurrence.title}  {occurrence.color}"
    if occurrence.location:
        line += f"  @ {occurrence.location}"
    return line


def print_occurrences(occurrences: list[EventOccurrence], as_json: bool) -> None:
    if as_json:
        payload = [occurrence.model_dump(mode="json") for occurrence in occurrences]
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    if not occurrences:
        print("No events")
        return
    for occurrence in occurrences:
        print(format_occurrence(occurrence))


async def run_refresh(settings: Any, args: Any) -> int:
    """Refresh every feed and print the merged occurrences.

    Returns:
        0 when at least one feed succeeded, 1 otherwise
    """
    use_cache = settings.cache_enabled and not getattr(args, "no_cache", False)
    cache_manager = CacheManager(settings) if use_cache else None

    try:
        manager = SourceManager(settings, cache_manager=cache_manager)
    except SourceConfigError as e:
        logger.error(f"Invalid feed configuration: {e.message}")
        return 1

    if not manager.enabled_sources:
        logger.error("No enabled feeds configured")
        return 1

    occurrences = await manager.refresh()
    print_occurrences(occurrences, getattr(args, "json", False))

    for result in manager.last_results:
        if not result.success:
            logger.warning(f"Feed {result.source.name} failed: {result.status_record.error_message}")

    if any(result.success for result in manager.last_results):
        return 0
    logger.error("Every feed failed to refresh")
    return 1


async def run_cached(settings: Any, args: Any) -> int:
    """Print the occurrences stored by the last refresh."""
    cache_manager = CacheManager(settings)
    occurrences = await cache_manager.get_cached_events()
    print_occurrences(occurrences, getattr(args, "json", False))
    return 0


async def run_status(settings: Any, args: Any) -> int:
    """Print the last recorded sync status of every feed."""
    cache_manager = CacheManager(settings)
    records = await cache_manager.get_sync_statuses()
    if not records:
        print("No sync recorded yet")
        return 0

    for record in records:
        line = f"{record.source_name}: {record.status} at {record.timestamp:%Y-%m-%d %H:%M:%S}"
        if record.is_success:
            line += f" ({record.occurrence_count} events)"
        elif record.error_message:
            line += f" - {record.error_message}"
        print(line)
    return 0
