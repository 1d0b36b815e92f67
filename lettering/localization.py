"""Localized string lookup with visible fallbacks for missing keys."""

from __future__ import annotations

import codecs
import json
import pathlib
import re
import sys
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Sequence

from .errors import StringsFileError
from .formatting import format_template
from .structures import LocalizationEntry

DEFAULT_TABLE = "Localizable"
DEFAULT_MISSING_MARKER = "**"
STRINGS_SUFFIX = ".strings"

ENTRY_PATTERN = re.compile(
    r"\"(?P<key>(?:[^\"\\]|\\.)*)\"\s*=\s*\"(?P<value>(?:[^\"\\]|\\.)*)\"\s*;",
    re.DOTALL,
)
COMMENT_PATTERN = re.compile(r"/\*.*?\*/|//[^\n]*", re.DOTALL)
WHITESPACE_PATTERN = re.compile(r"\s+")
ESCAPE_PATTERN = re.compile(r"\\(?:[uU](?P<hex>[0-9a-fA-F]{4})|(?P<char>.))", re.DOTALL)
ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0"}


def _unescape(raw: str) -> str:
    def replace(match: re.Match[str]) -> str:
        if match.group("hex"):
            return chr(int(match.group("hex"), 16))
        char = match.group("char")
        return ESCAPES.get(char, char)

    return ESCAPE_PATTERN.sub(replace, raw)


def load_strings(text: str) -> Dict[str, str]:
    """Parse a ``.strings`` document into a key to template mapping.

    Accepts ``"key" = "value";`` entries separated by whitespace and
    ``/* */`` or ``//`` comments. Later duplicates win.
    """

    entries: Dict[str, str] = {}
    cursor = 0
    length = len(text)
    while cursor < length:
        for pattern in (WHITESPACE_PATTERN, COMMENT_PATTERN):
            match = pattern.match(text, cursor)
            if match:
                cursor = match.end()
                break
        else:
            match = ENTRY_PATTERN.match(text, cursor)
            if not match:
                raise StringsFileError(
                    "expected '\"key\" = \"value\";'",
                    line=text.count("\n", 0, cursor) + 1,
                )
            entries[_unescape(match.group("key"))] = _unescape(match.group("value"))
            cursor = match.end()
    return entries


def _decode_strings_file(data: bytes, path: pathlib.Path) -> str:
    try:
        if data.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
            return data.decode("utf-16")
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise StringsFileError(f"{path} is not valid UTF-8 or UTF-16: {exc}") from exc


class LocalizationStore(ABC):
    """Read-only source of localized templates, partitioned by table.

    Implementations must be safe for concurrent reads.
    """

    @abstractmethod
    def lookup(self, key: str, table: str) -> Optional[str]:
        """Return the template for ``key`` in ``table``, or None if absent."""


class MappingLocalizationStore(LocalizationStore):
    """In-memory store built from a mapping of table name to entries."""

    def __init__(self, tables: Optional[Mapping[str, Mapping[str, str]]] = None) -> None:
        self._tables: Dict[str, Dict[str, str]] = {
            table: dict(entries) for table, entries in (tables or {}).items()
        }

    def lookup(self, key: str, table: str) -> Optional[str]:
        return self._tables.get(table, {}).get(key)


class StringsDirectoryStore(LocalizationStore):
    """Loads ``<table>.strings`` files from a directory on first use.

    When ``locale`` is given, ``<locale>.lproj/<table>.strings`` is
    consulted before the file at the directory root.
    """

    def __init__(self, directory: pathlib.Path, *, locale: Optional[str] = None) -> None:
        self.directory = pathlib.Path(directory)
        self.locale = locale
        self._cache: Dict[str, Dict[str, str]] = {}
        self._lock = threading.Lock()

    def lookup(self, key: str, table: str) -> Optional[str]:
        return self._table(table).get(key)

    def _candidate_paths(self, table: str) -> list[pathlib.Path]:
        filename = f"{table}{STRINGS_SUFFIX}"
        candidates = []
        if self.locale:
            candidates.append(self.directory / f"{self.locale}.lproj" / filename)
        candidates.append(self.directory / filename)
        return candidates

    def _table(self, table: str) -> Dict[str, str]:
        with self._lock:
            cached = self._cache.get(table)
            if cached is not None:
                return cached
            entries: Dict[str, str] = {}
            if pathlib.PurePath(table).name == table and table not in {".", ".."}:
                for path in reversed(self._candidate_paths(table)):
                    if path.is_file():
                        text = _decode_strings_file(path.read_bytes(), path)
                        try:
                            entries.update(load_strings(text))
                        except StringsFileError as exc:
                            raise StringsFileError(f"{path}: {exc}") from exc
            self._cache[table] = entries
            return entries


class Localizer:
    """Resolves keys against a store, falling back to a visible marker.

    A missing key yields ``**key**`` (with the default marker) so that an
    untranslated string stays visible instead of silently disappearing.
    """

    def __init__(
        self,
        store: LocalizationStore,
        *,
        default_table: str = DEFAULT_TABLE,
        missing_marker: str = DEFAULT_MISSING_MARKER,
        debug: bool = False,
    ) -> None:
        self.store = store
        self.default_table = default_table
        self.missing_marker = missing_marker
        self.debug = debug

    def entry(self, key: str, table: Optional[str] = None) -> Optional[LocalizationEntry]:
        """Return the stored entry for ``key``, or None when it is missing."""

        table_name = table or self.default_table
        value = self.store.lookup(key, table_name)
        if value is None:
            return None
        return LocalizationEntry(key=key, table=table_name, value=value)

    def fallback(self, key: str) -> str:
        return f"{self.missing_marker}{key}{self.missing_marker}"

    def localize(self, key: str, table: Optional[str] = None) -> str:
        """Return the template for ``key`` from ``table`` or the default table.

        Usage::

            localizer.localize("hello_world")
        """

        found = self.entry(key, table)
        if found is None:
            self._log_debug(
                "localization.missing",
                {"key": key, "table": table or self.default_table},
            )
            return self.fallback(key)
        return found.value

    def localize_formatted(self, key: str, arguments: Sequence[Any]) -> str:
        """Resolve ``key`` from the default table and substitute ``arguments``.

        Usage::

            localizer.localize_formatted("Hello %@", ["Name"])
        """

        template = self.localize(key)
        self._log_debug(
            "localization.format",
            {"key": key, "template": template, "arguments": [str(a) for a in arguments]},
        )
        return format_template(template, arguments)

    def _log_debug(self, label: str, payload: Any) -> None:
        """Emit structured debug information when enabled."""

        if not self.debug:
            return
        try:
            message = json.dumps(payload, ensure_ascii=False, indent=2)
        except (TypeError, ValueError):
            message = repr(payload)
        print(f"[lettering][debug] {label}:\n{message}", file=sys.stderr)


_EMPTY_STORE = MappingLocalizationStore()


def localize(
    key: str,
    table: str = DEFAULT_TABLE,
    *,
    store: Optional[LocalizationStore] = None,
) -> str:
    """Module-level shortcut for :meth:`Localizer.localize`."""

    return Localizer(store or _EMPTY_STORE).localize(key, table)


def localize_formatted(
    key: str,
    arguments: Sequence[Any],
    *,
    store: Optional[LocalizationStore] = None,
) -> str:
    """Module-level shortcut for :meth:`Localizer.localize_formatted`."""

    return Localizer(store or _EMPTY_STORE).localize_formatted(key, arguments)
