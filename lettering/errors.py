"""Error definitions for the Lettering string helpers."""

from __future__ import annotations


class LetteringError(Exception):
    """Base exception for all custom errors."""


class ParseError(LetteringError):
    """Raised when markup cannot be decoded or violates the tag grammar."""


class FormatError(LetteringError):
    """Raised when a template cannot be formatted with the given arguments."""


class FormatArgumentMismatch(FormatError):
    """Raised when a template has more placeholders than supplied arguments."""

    def __init__(self, message: str, *, expected: int, supplied: int) -> None:
        super().__init__(message)
        self.expected = expected
        self.supplied = supplied


class StringsFileError(LetteringError):
    """Raised when a .strings localization table is malformed."""

    def __init__(self, message: str, *, line: int | None = None) -> None:
        super().__init__(message if line is None else f"line {line}: {message}")
        self.line = line


class UnsupportedFileTypeError(LetteringError):
    """Raised when a given file extension is not supported."""


class ConfigurationError(LetteringError):
    """Raised when the configuration is missing or invalid."""
