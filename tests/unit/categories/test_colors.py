"""Unit tests for event color resolution."""

import pytest

from calendarhub.categories.colors import (
    BRACKET_COLORS,
    EVENT_COLORS,
    ColorResolver,
    extract_bracket_content,
    is_hex_color,
    pick_color,
    string_hash,
)


class TestStringHash:
    """Test suite for string_hash."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("", 0),
            ("a", 97),
            ("ab", 3105),
            ("hello", 99162322),
            # Wraps to the smallest signed 32-bit value
            ("polygenelubricants", -2147483648),
        ],
    )
    def test_known_values(self, value, expected):
        assert string_hash(value) == expected

    def test_non_ascii_uses_utf16_units(self):
        assert string_hash("é") == 0xE9

    def test_pick_color_handles_negative_hash(self):
        assert pick_color("polygenelubricants", EVENT_COLORS) == EVENT_COLORS[2147483648 % 15]


class TestBrackets:
    def test_first_group_lowered(self):
        assert extract_bracket_content("Cours [ TP1 ] et [TD2]") == "tp1"

    def test_no_brackets(self):
        assert extract_bracket_content("Cours magistral") is None

    def test_empty_brackets_ignored(self):
        assert extract_bracket_content("Cours []") is None


class TestColorResolver:
    """Test suite for ColorResolver."""

    @pytest.fixture
    def resolver(self):
        return ColorResolver()

    def test_person_color_wins(self, resolver):
        assert resolver.resolve("Rendez-vous avec De Duve [TP1]") == "#8e44ad"

    def test_same_bracket_same_color(self, resolver):
        first = resolver.resolve("Cours [TP1]")
        second = resolver.resolve("Labo de chimie [tp1]")

        assert first == second
        assert first == pick_color("tp1", BRACKET_COLORS)

    def test_bracket_color_ignores_rest_of_title(self, resolver):
        assert resolver.resolve("Lecture [Group A]") == resolver.resolve("Seminar [Group A]")

    def test_different_brackets_different_colors(self, resolver):
        group_a = resolver.resolve("Lecture [Group A]")
        group_b = resolver.resolve("Lecture [Group B]")

        assert group_a != group_b
        assert group_a == pick_color("group a", BRACKET_COLORS)
        assert group_b == pick_color("group b", BRACKET_COLORS)

    def test_title_hash_fallback(self, resolver):
        assert resolver.resolve("Réunion budget") == pick_color("Réunion budget", EVENT_COLORS)

    def test_resolution_is_deterministic(self):
        assert ColorResolver().resolve("Séminaire") == ColorResolver().resolve("Séminaire")

    def test_invalid_person_color_ignored(self):
        resolver = ColorResolver({"Alice": "red", "Bob": "#00FF00"})

        assert dict(resolver.person_colors) == {"bob": "#00FF00"}

    def test_empty_table_disables_defaults(self):
        resolver = ColorResolver({})

        assert resolver.resolve("De Duve") == pick_color("De Duve", EVENT_COLORS)

    def test_with_person_colors_extends_table(self, resolver):
        extended = resolver.with_person_colors({"Martin": "#123456"})

        assert extended.resolve("Appel martin") == "#123456"
        assert extended.resolve("De Duve") == "#8e44ad"
        assert "martin" not in resolver.person_colors

    @pytest.mark.parametrize(("value", "expected"), [("#a1b2c3", True), ("a1b2c3", False), ("#abc", False)])
    def test_is_hex_color(self, value, expected):
        assert is_hex_color(value) is expected
