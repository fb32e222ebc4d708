"""CalendarHub - ICS calendar feed aggregation.

Fetches published ICS feeds, expands recurring events inside a rolling
window, categorizes and colors every occurrence and merges the feeds into
one list.
"""

__version__ = "1.0.0"
__author__ = "CalendarHub Team"

__all__ = ["__version__"]
