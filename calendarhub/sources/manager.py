"""Source manager aggregating all configured feeds."""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Optional

from pydantic import ValidationError

from ..ics.models import EventOccurrence, TimeWindow
from ..ics.window import compute_time_window, resolve_timezone
from .exceptions import SourceConfigError, SourceError
from .feed import FeedPipeline
from .models import FeedResult, FeedSource, FeedSourceConfig, SyncStatus, SyncStatusRecord

logger = logging.getLogger(__name__)


class SourceManager:
    """Manages calendar feeds and coordinates refreshes.

    A refresh runs every enabled feed concurrently, merges the successful
    ones in configuration order and replaces ``events`` wholesale. Starting
    a refresh while another is running cancels the older one, so only the
    newest completed refresh writes ``events`` and the cache.
    """

    def __init__(
        self,
        settings: Any,
        cache_manager: Optional[Any] = None,
        status_reporter: Optional[Any] = None,
        time_provider: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize source manager.

        Args:
            settings: Application settings
            cache_manager: Optional cache manager for write-through of occurrences
            status_reporter: Object with an async ``report(record)``; defaults
                to ``cache_manager`` when that is given
            time_provider: Returns "now"; defaults to the wall clock
        """
        self.settings = settings
        self.cache_manager = cache_manager
        self.status_reporter = status_reporter if status_reporter is not None else cache_manager
        self.timezone = resolve_timezone(getattr(settings, "timezone", None))
        self._time_provider = time_provider or (lambda: datetime.now(self.timezone))

        self.sources = self._build_sources(getattr(settings, "sources", None) or [])

        self.events: list[EventOccurrence] = []
        self.last_results: list[FeedResult] = []
        self.last_window: Optional[TimeWindow] = None
        self._last_successful_update: Optional[datetime] = None

        self._lock = asyncio.Lock()
        self._inflight: Optional[asyncio.Task] = None
        self._superseded: set[asyncio.Task] = set()

        logger.info(f"Source manager initialized with {len(self.sources)} feeds")

    def _build_sources(self, configs: list[Any]) -> list[FeedSource]:
        """Freeze configured feeds.

        Raises:
            SourceConfigError: If an entry is invalid or a name is repeated
        """
        sources: list[FeedSource] = []
        seen: set[str] = set()
        for config in configs:
            try:
                if isinstance(config, FeedSourceConfig):
                    source = FeedSource.from_config(config)
                else:
                    source = FeedSource.model_validate(config)
            except ValidationError as e:
                raise SourceConfigError(f"Invalid feed configuration: {e}") from e

            if source.name in seen:
                raise SourceConfigError(f"Duplicate feed name: {source.name}", source.name)
            seen.add(source.name)
            sources.append(source)
        return sources

    @property
    def enabled_sources(self) -> list[FeedSource]:
        return [source for source in self.sources if source.enabled]

    @property
    def last_successful_update(self) -> Optional[datetime]:
        return self._last_successful_update

    async def refresh(self) -> list[EventOccurrence]:
        """Refresh every enabled feed.

        Never raises for feed, cache or reporting failures. A caller whose
        refresh is superseded by a newer one receives the newer result.

        Returns:
            Occurrences of all successful feeds, each feed sorted by start,
            concatenated in configuration order
        """
        previous = self._inflight
        if previous is not None and not previous.done():
            logger.info("Cancelling in-flight refresh in favour of a new one")
            self._superseded.add(previous)
            previous.cancel()

        task = asyncio.ensure_future(self._run_refresh())
        self._inflight = task

        while True:
            try:
                return await asyncio.shield(task)
            except asyncio.CancelledError:
                if task not in self._superseded:
                    raise
                self._superseded.discard(task)
                newer = self._inflight
                if newer is None or newer is task:
                    return list(self.events)
                task = newer

    async def _run_refresh(self) -> list[EventOccurrence]:
        window = compute_time_window(
            self._time_provider(),
            self.timezone,
            months_back=getattr(self.settings, "window_months_back", 6),
            months_ahead=getattr(self.settings, "window_months_ahead", 12),
        )
        sources = self.enabled_sources
        logger.debug(f"Refreshing {len(sources)} feeds")

        outcomes = await asyncio.gather(
            *(self._run_feed(source, window) for source in sources),
            return_exceptions=True,
        )

        results: list[FeedResult] = []
        for source, outcome in zip(sources, outcomes):
            if isinstance(outcome, FeedResult):
                results.append(outcome)
            else:
                logger.error(f"Unexpected failure refreshing {source.name}: {outcome!r}")
                results.append(self._error_result(source, str(outcome)))

        merged = [occurrence for result in results for occurrence in result.occurrences]

        async with self._lock:
            self.events = merged
            self.last_results = results
            self.last_window = window
            if any(result.success for result in results):
                self._last_successful_update = self._time_provider()

        for result in results:
            await self._report_status(result.status_record)

        if merged and self.cache_manager is not None:
            await self._write_cache(merged)

        succeeded = sum(1 for result in results if result.success)
        logger.info(
            f"Refresh complete: {len(merged)} occurrences from {succeeded}/{len(results)} feeds"
        )
        return merged

    async def _run_feed(self, source: FeedSource, window: TimeWindow) -> FeedResult:
        """Run one feed, converting its failure into an error status."""
        try:
            occurrences = await FeedPipeline(source, self.settings).run(window)
        except SourceError as e:
            return self._error_result(source, e.message)
        except Exception as e:
            logger.exception(f"Unexpected error refreshing feed {source.name}")
            return self._error_result(source, f"Unexpected error: {e!s}")

        return FeedResult(
            source=source,
            occurrences=occurrences,
            status_record=SyncStatusRecord(
                source_name=source.name,
                source_url=source.url,
                occurrence_count=len(occurrences),
                status=SyncStatus.SUCCESS,
            ),
        )

    def _error_result(self, source: FeedSource, message: str) -> FeedResult:
        return FeedResult(
            source=source,
            occurrences=[],
            status_record=SyncStatusRecord(
                source_name=source.name,
                source_url=source.url,
                occurrence_count=0,
                status=SyncStatus.ERROR,
                error_message=message,
            ),
        )

    async def _report_status(self, record: SyncStatusRecord) -> None:
        if self.status_reporter is None:
            return
        try:
            await self.status_reporter.report(record)
        except Exception as e:
            logger.warning(f"Failed to report sync status for {record.source_name}: {e}")

    async def _write_cache(self, occurrences: list[EventOccurrence]) -> None:
        try:
            cached = await self.cache_manager.cache_events(occurrences)
        except Exception as e:
            logger.warning(f"Failed to cache occurrences: {e}")
            return
        if not cached:
            logger.warning("Cache manager did not store the refreshed occurrences")

    async def load_cached_events(self) -> list[EventOccurrence]:
        """Load the most recently cached occurrences.

        Returns:
            Cached occurrences, or an empty list when there is no cache or it fails
        """
        if self.cache_manager is None:
            return []
        try:
            return await self.cache_manager.get_cached_events()
        except Exception as e:
            logger.warning(f"Failed to load cached occurrences: {e}")
            return []

    def get_status(self) -> dict[str, Any]:
        """Summarize the last refresh for display."""
        return {
            "feeds": len(self.sources),
            "enabled_feeds": len(self.enabled_sources),
            "occurrences": len(self.events),
            "last_successful_update": (
                self._last_successful_update.isoformat() if self._last_successful_update else None
            ),
            "results": [result.status_record.model_dump(mode="json") for result in self.last_results],
        }
