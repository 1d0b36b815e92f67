"""Positional printf-style substitution for localized templates."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Sequence, Set, Tuple

from .errors import FormatArgumentMismatch, FormatError

PLACEHOLDER_PATTERN = re.compile(
    r"%(?:(?P<position>[1-9]\d*)\$)?"
    r"(?P<flags>[-+ #0']*)"
    r"(?P<width>\d+)?"
    r"(?:\.(?P<precision>\d+))?"
    r"(?:hh|h|ll|l|q|z|t|j|L)?"
    r"(?P<conversion>[@sdiufFeEgGxXoc%])"
)

# Conversions handed to Python's %-formatting as-is; the rest are remapped.
_CONVERSIONS = {"@": "s", "u": "d", "i": "d"}
NUMERIC_CONVERSIONS = frozenset("diufFeEgGxXo")


@dataclass(frozen=True)
class Placeholder:
    """A single conversion specifier found in a template."""

    start: int
    end: int
    position: Optional[int]
    flags: str
    width: Optional[str]
    precision: Optional[str]
    conversion: str

    @property
    def is_literal_percent(self) -> bool:
        return self.conversion == "%"

    def python_format(self) -> str:
        flags = self.flags.replace("'", "")
        specifier = "%" + flags
        if self.width:
            specifier += self.width
        if self.precision is not None:
            specifier += "." + self.precision
        return specifier + _CONVERSIONS.get(self.conversion, self.conversion)


def parse_placeholders(template: str) -> List[Placeholder]:
    """Return every conversion specifier in ``template`` in order."""

    placeholders: List[Placeholder] = []
    index = template.find("%")
    while index != -1:
        match = PLACEHOLDER_PATTERN.match(template, index)
        if not match:
            raise FormatError(
                f"Invalid format specifier at position {index} in '{template}'."
            )
        position = match.group("position")
        placeholders.append(
            Placeholder(
                start=match.start(),
                end=match.end(),
                position=int(position) if position else None,
                flags=match.group("flags"),
                width=match.group("width"),
                precision=match.group("precision"),
                conversion=match.group("conversion"),
            )
        )
        index = template.find("%", match.end())
    return placeholders


def required_arguments(placeholders: Sequence[Placeholder]) -> int:
    """Number of arguments needed to satisfy every placeholder."""

    sequential = 0
    highest = 0
    for placeholder in placeholders:
        if placeholder.is_literal_percent:
            continue
        if placeholder.position is None:
            sequential += 1
        else:
            highest = max(highest, placeholder.position)
    return max(sequential, highest)


def bind_arguments(
    placeholders: Sequence[Placeholder],
) -> Iterator[Tuple[Placeholder, Optional[int]]]:
    """Pair each placeholder with the zero-based argument index it consumes.

    Literal ``%%`` placeholders consume nothing and are paired with ``None``.
    """

    sequential = 0
    for placeholder in placeholders:
        if placeholder.is_literal_percent:
            yield placeholder, None
        elif placeholder.position is None:
            yield placeholder, sequential
            sequential += 1
        else:
            yield placeholder, placeholder.position - 1


def numeric_argument_indexes(placeholders: Sequence[Placeholder]) -> Set[int]:
    """Argument indexes consumed by at least one numeric conversion."""

    return {
        index
        for placeholder, index in bind_arguments(placeholders)
        if index is not None and placeholder.conversion in NUMERIC_CONVERSIONS
    }


def _render(placeholder: Placeholder, argument: Any) -> str:
    if placeholder.conversion in {"@", "s"}:
        argument = str(argument)
    try:
        return placeholder.python_format() % (argument,)
    except (TypeError, ValueError, OverflowError) as exc:
        raise FormatError(
            f"Argument {argument!r} cannot be formatted with "
            f"'%{placeholder.conversion}': {exc}"
        ) from exc


def format_template(template: str, arguments: Sequence[Any]) -> str:
    """Substitute ``arguments`` into ``template`` by position.

    ``%@`` and ``%s`` render ``str(argument)``; numeric conversions follow
    C printf semantics. ``%2$@`` selects the second argument explicitly.
    Too few arguments raise :class:`FormatArgumentMismatch`; surplus
    arguments are ignored.

    Usage::

        format_template("Hello %@", ["World"])  # "Hello World"
    """

    placeholders = parse_placeholders(template)
    expected = required_arguments(placeholders)
    if expected > len(arguments):
        raise FormatArgumentMismatch(
            f"Template '{template}' expects {expected} argument(s) "
            f"but {len(arguments)} were supplied.",
            expected=expected,
            supplied=len(arguments),
        )

    pieces: List[str] = []
    cursor = 0
    for placeholder, index in bind_arguments(placeholders):
        pieces.append(template[cursor:placeholder.start])
        cursor = placeholder.end
        if index is None:
            pieces.append("%")
        else:
            pieces.append(_render(placeholder, arguments[index]))
    pieces.append(template[cursor:])
    return "".join(pieces)
