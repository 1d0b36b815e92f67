"""Builders that attach style overlays to substrings of a base string."""

from __future__ import annotations

import numbers
from typing import Sequence, Tuple

from .structures import FontStyle, StyledRun, StyledText

StyleOverride = Tuple[str, FontStyle]


def build_styled_text(
    full_string: str,
    overrides: Sequence[StyleOverride],
) -> StyledText:
    """Style the first occurrence of each substring in ``full_string``.

    Matching is ordinal (``str.find``). Substrings that do not occur, and
    empty substrings, are skipped without error. Overrides are applied in
    the order given, so a later override wins where occurrences overlap.
    """

    runs = []
    for substring, style in overrides:
        if not substring:
            continue
        start = full_string.find(substring)
        if start == -1:
            continue
        runs.append(StyledRun(start=start, length=len(substring), style=style))
    return StyledText(full_string, tuple(runs))


def build_bold_text(
    full_string: str,
    bold_substrings: Sequence[str],
    font_size: float,
) -> StyledText:
    """Render the first occurrence of each of ``bold_substrings`` in bold.

    Usage::

        styled = build_bold_text("Hello World", ["World"], 14)
    """

    if (
        isinstance(font_size, bool)
        or not isinstance(font_size, numbers.Real)
        or not font_size > 0
    ):
        raise ValueError(f"Font size must be a positive number (got {font_size!r}).")
    if isinstance(bold_substrings, str):
        raise TypeError("bold_substrings must be a sequence of strings, not a string.")

    bold = FontStyle(bold=True, size=font_size)
    return build_styled_text(
        full_string,
        [(substring, bold) for substring in bold_substrings],
    )
