"""Event categorization, coloring and filtering."""

from .categorizer import (
    CategoryDefinition,
    EventCategorizer,
    get_all_categories,
    get_categories_for_source,
    get_category_by_id,
)
from .colors import BRACKET_COLORS, EVENT_COLORS, ColorResolver, string_hash
from .filters import DEFAULT_EXCLUDE_PATTERNS, EventFilter

__all__ = [
    "BRACKET_COLORS",
    "DEFAULT_EXCLUDE_PATTERNS",
    "EVENT_COLORS",
    "CategoryDefinition",
    "ColorResolver",
    "EventCategorizer",
    "EventFilter",
    "get_all_categories",
    "get_categories_for_source",
    "get_category_by_id",
    "string_hash",
]
