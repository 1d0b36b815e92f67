"""Conversion between restricted HTML markup and styled text."""

from __future__ import annotations

import html
import html.parser
import re
from typing import Dict, List, Optional, Tuple, Union

from .errors import ParseError
from .structures import FontStyle, StyledRun, StyledText

STYLE_TAGS: Dict[str, FontStyle] = {
    "b": FontStyle(bold=True),
    "strong": FontStyle(bold=True),
    "i": FontStyle(italic=True),
    "em": FontStyle(italic=True),
    "u": FontStyle(underline=True),
    "ins": FontStyle(underline=True),
}
NEUTRAL_TAGS = frozenset(
    {
        "span", "font", "html", "body", "a", "sup", "sub", "s", "strike",
        "del", "small", "code", "mark", "abbr", "cite", "q",
    }
)
BLOCK_TAGS = frozenset(
    {"p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "li", "ul", "ol", "blockquote"}
)
SKIPPED_TAGS = frozenset({"head", "script", "style", "title"})
LINE_BREAK_TAGS = frozenset({"br"})
IGNORED_VOID_TAGS = frozenset({"meta", "link"})

# Legacy <font size="1..7"> scale, in points. Signed values are relative to 3.
FONT_SIZE_SCALE = {1: 10.0, 2: 13.0, 3: 16.0, 4: 18.0, 5: 24.0, 6: 32.0, 7: 48.0}
BASE_FONT_LEVEL = 3

FONT_SIZE_PATTERN = re.compile(
    r"font-size\s*:\s*(?P<value>\d+(?:\.\d+)?)\s*(?:px|pt)?",
    re.IGNORECASE,
)
# HTML whitespace only; U+00A0 and other Unicode spaces are content.
HTML_WHITESPACE = " \t\n\r\f"
WHITESPACE_PATTERN = re.compile(r"[ \t\n\r\f]+")


def _legacy_font_size(value: str) -> float:
    raw = value.strip()
    try:
        level = int(raw)
    except ValueError as exc:
        raise ParseError(f"Invalid font size '{value}'.") from exc
    if raw.startswith(("+", "-")):
        level += BASE_FONT_LEVEL
    return FONT_SIZE_SCALE[min(max(level, 1), 7)]


def _size_from_attrs(tag: str, attrs: List[Tuple[str, Optional[str]]]) -> Optional[float]:
    size: Optional[float] = None
    for name, value in attrs:
        if value is None:
            continue
        if name == "style":
            match = FONT_SIZE_PATTERN.search(value)
            if match:
                size = float(match.group("value"))
        elif name == "size" and tag == "font":
            size = _legacy_font_size(value)
    return size


class _OpenElement:
    __slots__ = ("tag", "style", "start", "slot", "skip")

    def __init__(
        self,
        tag: str,
        style: Optional[FontStyle],
        start: int,
        slot: Optional[int],
        skip: bool,
    ) -> None:
        self.tag = tag
        self.style = style
        self.start = start
        self.slot = slot
        self.skip = skip


class _StyledTextBuilder(html.parser.HTMLParser):
    """Collects rendered text and one run per styled element."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._parts: List[str] = []
        self._length = 0
        self._last_char = ""
        self._stack: List[_OpenElement] = []
        self._slots: List[Optional[StyledRun]] = []
        self._skip = 0

    # --- HTMLParser callbacks ----------------------------------------------

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        tag = tag.lower()
        if tag in LINE_BREAK_TAGS:
            if not self._skip:
                self._append("\n")
            return
        if tag in IGNORED_VOID_TAGS:
            return

        style: Optional[FontStyle] = None
        skip = False
        if tag in STYLE_TAGS:
            style = STYLE_TAGS[tag]
        elif tag in BLOCK_TAGS:
            self._break_block()
        elif tag in SKIPPED_TAGS:
            skip = True
        elif tag not in NEUTRAL_TAGS:
            raise ParseError(f"Unsupported tag <{tag}>.")

        size = _size_from_attrs(tag, attrs)
        if size is not None:
            style = (style or FontStyle()).merged(FontStyle(size=size))

        slot: Optional[int] = None
        if style is not None and not self._skip:
            slot = len(self._slots)
            self._slots.append(None)
        self._stack.append(_OpenElement(tag, style, self._length, slot, skip))
        if skip:
            self._skip += 1

    def handle_startendtag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        tag = tag.lower()
        self.handle_starttag(tag, attrs)
        if tag not in LINE_BREAK_TAGS and tag not in IGNORED_VOID_TAGS:
            self.handle_endtag(tag)

    def handle_endtag(self, tag: str) -> None:
        tag = tag.lower()
        if tag in LINE_BREAK_TAGS or tag in IGNORED_VOID_TAGS:
            return
        if not self._stack:
            raise ParseError(f"Unexpected closing tag </{tag}>.")
        element = self._stack[-1]
        if element.tag != tag:
            raise ParseError(
                f"Closing tag </{tag}> does not match open tag <{element.tag}>."
            )
        self._stack.pop()
        if element.skip:
            self._skip -= 1
        if element.tag in BLOCK_TAGS:
            self._break_block()
        if element.slot is not None and self._length > element.start:
            self._slots[element.slot] = StyledRun(
                start=element.start,
                length=self._length - element.start,
                style=element.style,  # type: ignore[arg-type]
            )

    def handle_data(self, data: str) -> None:
        if self._skip:
            return
        collapsed = WHITESPACE_PATTERN.sub(" ", data)
        if self._last_char in {"", " ", "\n"}:
            collapsed = collapsed.lstrip(" ")
        if collapsed:
            self._append(collapsed)

    # --- Internal helpers -------------------------------------------------

    def _append(self, text: str) -> None:
        self._parts.append(text)
        self._length += len(text)
        self._last_char = text[-1]

    def _break_block(self) -> None:
        if self._length and self._last_char != "\n":
            self._append("\n")

    def result(self) -> StyledText:
        if self._stack:
            unclosed = ", ".join(f"<{element.tag}>" for element in self._stack)
            raise ParseError(f"Markup ended with unclosed tags: {unclosed}.")
        text = "".join(self._parts).rstrip(HTML_WHITESPACE)
        runs = []
        for run in self._slots:
            if run is None or run.start >= len(text):
                continue
            end = min(run.end, len(text))
            runs.append(StyledRun(start=run.start, length=end - run.start, style=run.style))
        return StyledText(text, tuple(runs))


def parse_markup(markup: Union[str, bytes]) -> StyledText:
    """Parse restricted HTML markup into styled text.

    Supports ``b``/``strong``, ``i``/``em``, ``u``/``ins``, ``span`` and
    ``font`` sizes, ``p``/``div``/``h1``-``h6``/``li`` blocks, ``br`` breaks and
    unstyled inline tags such as ``a``, ``sup`` and ``s``. Raises
    :class:`ParseError` for undecodable bytes, unsupported tags or badly
    nested markup; no partial result is returned.

    Usage::

        styled = parse_markup("<b>Hello</b> World")
    """

    if isinstance(markup, (bytes, bytearray)):
        try:
            markup = bytes(markup).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"Markup is not valid UTF-8: {exc}") from exc

    builder = _StyledTextBuilder()
    builder.feed(markup)
    if "<" in builder.rawdata:
        raise ParseError("Markup ended inside an unterminated tag or comment.")
    builder.close()
    return builder.result()


def _format_size(size: float) -> str:
    return f"{size:g}pt"


def render_markup(styled: StyledText) -> str:
    """Render styled text back into markup understood by :func:`parse_markup`."""

    parts: List[str] = []
    for segment in styled.segments():
        content = html.escape(segment.text, quote=False).replace("\n", "<br>")
        style = segment.style
        if style.underline:
            content = f"<u>{content}</u>"
        if style.italic:
            content = f"<i>{content}</i>"
        if style.bold:
            content = f"<b>{content}</b>"
        if style.size is not None:
            content = f'<span style="font-size: {_format_size(style.size)}">{content}</span>'
        parts.append(content)
    return "".join(parts)
