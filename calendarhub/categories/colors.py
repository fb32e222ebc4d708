"""Deterministic display colors for calendar events."""

import logging
import re
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Optional

logger = logging.getLogger(__name__)

EVENT_COLORS: tuple[str, ...] = (
    "#ff6b6b",
    "#4ecdc4",
    "#45b7d1",
    "#f39c12",
    "#9b59b6",
    "#e74c3c",
    "#2ecc71",
    "#f1c40f",
    "#e67e22",
    "#1abc9c",
    "#3498db",
    "#e91e63",
    "#795548",
    "#607d8b",
    "#ff9800",
)

BRACKET_COLORS: tuple[str, ...] = (
    "#e74c3c",
    "#3498db",
    "#2ecc71",
    "#f39c12",
    "#9b59b6",
    "#1abc9c",
    "#e67e22",
    "#f1c40f",
    "#e91e63",
    "#795548",
    "#607d8b",
    "#ff9800",
    "#673ab7",
    "#009688",
    "#ff5722",
)

DEFAULT_PERSON_COLORS: Mapping[str, str] = MappingProxyType({"de duve": "#8e44ad"})

_BRACKET_RE = re.compile(r"\[([^\]]+)\]")
_HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


def string_hash(value: str) -> int:
    """Hash a string the way browsers' ``(h << 5) - h + charCode`` idiom does.

    Iterates UTF-16 code units and keeps ``h`` a signed 32-bit integer, so
    the same title maps to the same palette slot everywhere.
    """
    h = 0
    data = value.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def pick_color(value: str, palette: Sequence[str]) -> str:
    """Pick a palette entry for ``value`` by hash."""
    return palette[abs(string_hash(value)) % len(palette)]


def extract_bracket_content(title: str) -> Optional[str]:
    """Return the first ``[...]`` group of ``title``, lower-cased and stripped."""
    match = _BRACKET_RE.search(title)
    return match.group(1).lower().strip() if match else None


def is_hex_color(value: str) -> bool:
    return bool(_HEX_COLOR_RE.match(value))


class ColorResolver:
    """Resolves the display color of an event from its title.

    Resolution order: a configured person name found in the title, then the
    first bracketed group hashed into the bracket palette, then the full
    title hashed into the event palette.
    """

    def __init__(self, person_colors: Optional[Mapping[str, str]] = None):
        """Initialize resolver.

        Args:
            person_colors: Name to hex color; names are matched case-insensitively.
                Defaults to ``DEFAULT_PERSON_COLORS``.
        """
        source = DEFAULT_PERSON_COLORS if person_colors is None else person_colors
        table: dict[str, str] = {}
        for name, color in source.items():
            if not is_hex_color(color):
                logger.warning(f"Ignoring invalid color {color!r} for {name!r}")
                continue
            table[name.lower()] = color
        self._person_colors: Mapping[str, str] = MappingProxyType(table)

    @property
    def person_colors(self) -> Mapping[str, str]:
        return self._person_colors

    def with_person_colors(self, extra: Mapping[str, str]) -> "ColorResolver":
        """Return a resolver whose person table also holds ``extra``."""
        merged = dict(self._person_colors)
        merged.update({name.lower(): color for name, color in extra.items()})
        return ColorResolver(merged)

    def resolve(self, title: str) -> str:
        """Resolve the display color for ``title``."""
        title_lower = title.lower()
        for name, color in self._person_colors.items():
            if name in title_lower:
                return color

        bracket = extract_bracket_content(title)
        if bracket:
            return pick_color(bracket, BRACKET_COLORS)

        return pick_color(title, EVENT_COLORS)
