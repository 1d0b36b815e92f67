"""Tests for printf-style template formatting."""

import pytest

from lettering.errors import FormatArgumentMismatch, FormatError
from lettering.formatting import (
    bind_arguments,
    format_template,
    numeric_argument_indexes,
    parse_placeholders,
    required_arguments,
)


class TestFormatTemplate:
    """Tests for format_template."""

    @pytest.mark.parametrize(
        ("template", "arguments", "expected"),
        [
            ("Hello %@", ["World"], "Hello World"),
            ("Hello %s", ["World"], "Hello World"),
            ("%d items", [3], "3 items"),
            ("%ld items", [3], "3 items"),
            ("%u left", [5], "5 left"),
            ("%.2f kg", [3.14159], "3.14 kg"),
            ("[%5d]", [42], "[   42]"),
            ("[%-4@]", ["ab"], "[ab  ]"),
            ("%x", [255], "ff"),
            ("100%% done", [], "100% done"),
            ("%@ has %d apples", ["Ana", 2], "Ana has 2 apples"),
            ("No placeholders", [], "No placeholders"),
        ],
    )
    def test_substitution(self, template, arguments, expected):
        assert format_template(template, arguments) == expected

    def test_non_string_objects_render_with_str(self):
        assert format_template("Count: %@", [7]) == "Count: 7"

    def test_explicit_positions(self):
        """Numbered placeholders select arguments by one-based index."""
        assert format_template("%2$@ before %1$@", ["a", "b"]) == "b before a"

    def test_surplus_arguments_are_ignored(self):
        assert format_template("Hi %@", ["there", "extra"]) == "Hi there"

    def test_too_few_arguments_raise_mismatch(self):
        with pytest.raises(FormatArgumentMismatch) as excinfo:
            format_template("Hello %@", [])
        assert excinfo.value.expected == 1
        assert excinfo.value.supplied == 0

    def test_position_beyond_arguments_raises_mismatch(self):
        with pytest.raises(FormatArgumentMismatch):
            format_template("%3$@", ["a", "b"])

    def test_mismatch_is_a_format_error(self):
        assert issubclass(FormatArgumentMismatch, FormatError)

    def test_wrong_argument_type_raises_format_error(self):
        with pytest.raises(FormatError, match="cannot be formatted"):
            format_template("%d items", ["many"])

    @pytest.mark.parametrize("template", ["100%", "%y", "%*d"])
    def test_invalid_specifier_raises(self, template):
        with pytest.raises(FormatError, match="Invalid format specifier"):
            format_template(template, [1, 2])


class TestPlaceholders:
    """Tests for placeholder parsing helpers."""

    def test_parse_placeholders(self):
        placeholders = parse_placeholders("%1$@ and %05.1f%%")
        assert [p.conversion for p in placeholders] == ["@", "f", "%"]
        assert placeholders[0].position == 1
        assert placeholders[1].flags == "0"
        assert placeholders[1].width == "5"
        assert placeholders[1].precision == "1"

    def test_required_arguments(self):
        assert required_arguments(parse_placeholders("%@ %@ %%")) == 2
        assert required_arguments(parse_placeholders("%3$@ %1$@")) == 3

    def test_bind_arguments(self):
        placeholders = parse_placeholders("%@ %% %2$d %@")
        assert [index for _, index in bind_arguments(placeholders)] == [0, None, 1, 1]

    def test_numeric_argument_indexes(self):
        """Only numeric conversions claim an argument for number coercion."""
        assert numeric_argument_indexes(parse_placeholders("Code %@ %s %c")) == set()
        assert numeric_argument_indexes(parse_placeholders("%@ has %d, %.1f%%")) == {1, 2}
        assert numeric_argument_indexes(parse_placeholders("%2$@ %1$x")) == {0}
