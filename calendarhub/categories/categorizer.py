"""Keyword based categorization of calendar occurrences."""

import logging
from collections.abc import Iterable, Mapping
from typing import NamedTuple, Optional

from ..ics.models import EventCategory, EventOccurrence, SourceKind
from ..ics.rrule_expander import ExpandedOccurrence
from .colors import EVENT_COLORS, ColorResolver

logger = logging.getLogger(__name__)


class CategoryDefinition(NamedTuple):
    """Static description of one category."""

    id: str
    name: str
    color: str
    source_kind: SourceKind
    keywords: tuple[str, ...] = ()

    def to_category(self, color: Optional[str] = None) -> EventCategory:
        return EventCategory(
            id=self.id,
            name=self.name,
            color=color or self.color,
            source_kind=self.source_kind,
        )


PERSONAL = CategoryDefinition("icloud", "Calendrier Personnel", EVENT_COLORS[0], SourceKind.ICLOUD)
GENERAL = CategoryDefinition("outlook", "Calendrier UCLouvain", EVENT_COLORS[1], SourceKind.OUTLOOK)

# Checked in order; the first set with a substring hit wins
KEYWORD_CATEGORIES: tuple[CategoryDefinition, ...] = (
    CategoryDefinition(
        "cours",
        "Cours",
        EVENT_COLORS[2],
        SourceKind.OUTLOOK,
        ("cours", "lecture", "séminaire", "tp", "td", "labo"),
    ),
    CategoryDefinition(
        "examens",
        "Examens",
        EVENT_COLORS[3],
        SourceKind.OUTLOOK,
        ("examen", "test", "évaluation", "contrôle", "partiel"),
    ),
    CategoryDefinition(
        "reunions",
        "Réunions",
        EVENT_COLORS[4],
        SourceKind.OUTLOOK,
        ("réunion", "meeting", "rendez-vous", "entretien", "rdv"),
    ),
    CategoryDefinition(
        "evenements",
        "Événements",
        EVENT_COLORS[5],
        SourceKind.OUTLOOK,
        ("événement", "conférence", "colloque", "symposium", "workshop", "atelier"),
    ),
)

ALL_CATEGORIES: tuple[CategoryDefinition, ...] = (PERSONAL, GENERAL, *KEYWORD_CATEGORIES)


def get_all_categories() -> list[EventCategory]:
    """Get every known category with its base color."""
    return [definition.to_category() for definition in ALL_CATEGORIES]


def get_categories_for_source(source_kind: SourceKind) -> list[EventCategory]:
    """Get the categories a source kind can produce."""
    return [
        definition.to_category()
        for definition in ALL_CATEGORIES
        if definition.source_kind == source_kind
    ]


def get_category_by_id(category_id: str) -> Optional[EventCategory]:
    for definition in ALL_CATEGORIES:
        if definition.id == category_id:
            return definition.to_category()
    return None


class EventCategorizer:
    """Assigns a category and display color to expanded occurrences."""

    def __init__(
        self,
        person_colors: Optional[Mapping[str, str]] = None,
        resolver: Optional[ColorResolver] = None,
    ):
        """Initialize categorizer.

        Args:
            person_colors: Person name to color table; see :class:`ColorResolver`
            resolver: Prebuilt resolver, takes precedence over ``person_colors``
        """
        self.colors = resolver or ColorResolver(person_colors)

    @classmethod
    def from_settings(cls, settings: object) -> "EventCategorizer":
        return cls(getattr(settings, "person_colors", None))

    def with_person_colors(self, extra: Mapping[str, str]) -> "EventCategorizer":
        """Return a categorizer whose person table is extended with ``extra``."""
        return EventCategorizer(resolver=self.colors.with_person_colors(extra))

    def determine_category(
        self, title: str, description: str, source_kind: SourceKind
    ) -> CategoryDefinition:
        """Pick the category definition for an event."""
        if SourceKind(source_kind) == SourceKind.ICLOUD:
            return PERSONAL

        content = f"{title.lower()} {(description or '').lower()}"
        for definition in KEYWORD_CATEGORIES:
            if any(keyword in content for keyword in definition.keywords):
                return definition

        return GENERAL

    def categorize(self, occurrence: ExpandedOccurrence, source_kind: SourceKind) -> EventOccurrence:
        """Decorate one expanded occurrence with its category and color."""
        definition = self.determine_category(occurrence.title, occurrence.description, source_kind)
        color = self.colors.resolve(occurrence.title)

        return EventOccurrence(
            id=occurrence.id,
            title=occurrence.title,
            start=occurrence.start,
            end=occurrence.end,
            description=occurrence.description,
            location=occurrence.location,
            url=occurrence.url,
            source_kind=source_kind,
            all_day=occurrence.all_day,
            category=definition.to_category(color),
            color=color,
        )

    def categorize_all(
        self, occurrences: Iterable[ExpandedOccurrence], source_kind: SourceKind
    ) -> list[EventOccurrence]:
        """Categorize occurrences, preserving their order."""
        return [self.categorize(occurrence, source_kind) for occurrence in occurrences]
