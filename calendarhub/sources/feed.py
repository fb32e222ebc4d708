"""Fetch, parse, expand and categorize pipeline for a single feed."""

import logging
import time
from typing import Any, NoReturn, Optional

from ..categories import EventCategorizer, EventFilter
from ..ics import ICSFetcher, ICSParser, OccurrenceExpander
from ..ics.exceptions import ICSError, ICSFetchError
from ..ics.models import EventOccurrence, TimeWindow
from .exceptions import SourceConnectionError, SourceDataError, SourceError
from .models import FeedSource

logger = logging.getLogger(__name__)


class FeedPipeline:
    """Runs one feed from its URL to categorized occurrences."""

    def __init__(
        self,
        source: FeedSource,
        settings: Any,
        fetcher: Optional[ICSFetcher] = None,
        parser: Optional[ICSParser] = None,
        expander: Optional[OccurrenceExpander] = None,
        categorizer: Optional[EventCategorizer] = None,
        event_filter: Optional[EventFilter] = None,
    ):
        """Initialize feed pipeline.

        Args:
            source: Feed to process
            settings: Application settings
            fetcher: ICS fetcher, built from settings when omitted
            parser: ICS parser, built from settings when omitted
            expander: Occurrence expander, built from settings when omitted
            categorizer: Categorizer, built from settings when omitted
            event_filter: Placeholder filter, built from settings when omitted
        """
        self.source = source
        self.settings = settings
        self.fetcher = fetcher or ICSFetcher(settings)
        self.parser = parser or ICSParser(settings)
        self.expander = expander or OccurrenceExpander(settings)
        self.categorizer = categorizer or EventCategorizer.from_settings(settings)
        self.event_filter = event_filter or EventFilter.from_settings(settings)

    async def run(self, window: TimeWindow) -> list[EventOccurrence]:
        """Produce the feed's occurrences inside ``window``.

        Args:
            window: Expansion window for this refresh cycle

        Returns:
            Categorized occurrences sorted by start

        Raises:
            SourceConnectionError: If the feed cannot be downloaded
            SourceDataError: If the content cannot be read as a calendar
        """
        start_time = time.time()
        logger.debug(f"Refreshing feed {self.source.name}")

        content = await self._fetch()

        parse_result = self.parser.parse_ics_content(content)
        if not parse_result.success:
            self._raise_data_error(parse_result.error_message or "Failed to parse ICS content")

        for warning in parse_result.warnings:
            logger.debug(f"{self.source.name}: {warning}")

        expanded = self.expander.expand_components(parse_result.components, window)
        kept = self.event_filter.apply(expanded)
        occurrences = self.categorizer.categorize_all(kept, self.source.source_kind)

        elapsed_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Feed {self.source.name}: {len(occurrences)} occurrences from "
            f"{parse_result.event_count} events in {elapsed_ms:.0f}ms"
        )
        return occurrences

    async def _fetch(self) -> str:
        try:
            async with self.fetcher as fetcher:
                response = await fetcher.fetch_ics(self.source.url)
        except ICSFetchError as e:
            self._raise_connection_error(f"Fetch error: {e.message}", e)
        except ICSError as e:
            self._raise_source_error(f"ICS error: {e.message}", e)

        if not response.success:
            self._raise_connection_error(response.error_message or "Unknown fetch error")
        if response.content is None:
            self._raise_data_error("Empty ICS content received")

        return response.content

    def _raise_connection_error(self, message: str, cause: Optional[Exception] = None) -> NoReturn:
        logger.error(f"Feed {self.source.name} unavailable: {message}")
        raise SourceConnectionError(message, self.source.name) from cause

    def _raise_data_error(self, message: str, cause: Optional[Exception] = None) -> NoReturn:
        logger.error(f"Feed {self.source.name} unreadable: {message}")
        raise SourceDataError(message, self.source.name) from cause

    def _raise_source_error(self, message: str, cause: Optional[Exception] = None) -> NoReturn:
        logger.error(f"Feed {self.source.name} failed: {message}")
        raise SourceError(message, self.source.name) from cause
