"""Core data structures for styled text and localization entries."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class FontStyle:
    """Style attributes attached to a range of text.

    Every attribute is optional; ``None`` means the attribute is not set and
    an earlier style (or the presentation layer default) applies.
    """

    bold: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[bool] = None
    size: Optional[float] = None

    def merged(self, other: "FontStyle") -> "FontStyle":
        """Return a style where attributes set on ``other`` win."""

        values = {}
        for item in fields(self):
            override = getattr(other, item.name)
            values[item.name] = (
                override if override is not None else getattr(self, item.name)
            )
        return FontStyle(**values)

    @property
    def is_plain(self) -> bool:
        return all(getattr(self, item.name) is None for item in fields(self))


PLAIN = FontStyle()


@dataclass(frozen=True)
class StyledRun:
    """A style overlay covering ``length`` characters from ``start``."""

    start: int
    length: int
    style: FontStyle

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"Run start must not be negative (got {self.start}).")
        if self.length < 0:
            raise ValueError(f"Run length must not be negative (got {self.length}).")

    @property
    def end(self) -> int:
        return self.start + self.length

    def covers(self, index: int) -> bool:
        return self.start <= index < self.end


@dataclass(frozen=True)
class StyledSegment:
    """A maximal slice of text sharing one effective style."""

    text: str
    style: FontStyle


@dataclass(frozen=True)
class StyledText:
    """A base string paired with an ordered set of style overlays.

    Runs may overlap. When they do, runs added later win for every attribute
    they set.
    """

    text: str
    runs: Tuple[StyledRun, ...] = ()

    def __post_init__(self) -> None:
        runs = tuple(self.runs)
        for run in runs:
            if run.end > len(self.text):
                raise ValueError(
                    f"Run [{run.start}, {run.end}) exceeds text length {len(self.text)}."
                )
        object.__setattr__(self, "runs", runs)

    @property
    def plain_text(self) -> str:
        return self.text

    def with_run(self, run: StyledRun) -> "StyledText":
        """Return a copy with ``run`` appended after the existing runs."""

        return StyledText(self.text, self.runs + (run,))

    def runs_for(self, index: int) -> List[StyledRun]:
        return [run for run in self.runs if run.covers(index)]

    def style_at(self, index: int) -> FontStyle:
        """Return the effective style of the character at ``index``."""

        if not 0 <= index < len(self.text):
            raise IndexError(f"Index {index} outside text of length {len(self.text)}.")
        style = PLAIN
        for run in self.runs_for(index):
            style = style.merged(run.style)
        return style

    def segments(self) -> List[StyledSegment]:
        """Flatten the overlays into consecutive uniformly styled segments."""

        segments: List[StyledSegment] = []
        for start, end in self._intervals():
            style = self.style_at(start)
            piece = self.text[start:end]
            if segments and segments[-1].style == style:
                segments[-1] = StyledSegment(segments[-1].text + piece, style)
            else:
                segments.append(StyledSegment(piece, style))
        return segments

    def _intervals(self) -> Iterator[Tuple[int, int]]:
        boundaries = {0, len(self.text)}
        for run in self.runs:
            boundaries.add(run.start)
            boundaries.add(run.end)
        ordered = sorted(boundaries)
        for start, end in zip(ordered, ordered[1:]):
            if start < end:
                yield start, end


@dataclass(frozen=True)
class LocalizationEntry:
    """A resolved localization value and the table it came from."""

    key: str
    table: str
    value: str
