"""Command line interface for the Lettering string helpers."""

from __future__ import annotations

import argparse
import pathlib
import sys
from typing import Iterable, List, Optional, Sequence, Union

from .configuration import LetteringConfig, get_settings
from .documents import detect_writer
from .errors import (
    ConfigurationError,
    FormatError,
    LetteringError,
    ParseError,
    StringsFileError,
    UnsupportedFileTypeError,
)
from .formatting import numeric_argument_indexes, parse_placeholders
from .localization import (
    LocalizationStore,
    Localizer,
    MappingLocalizationStore,
    StringsDirectoryStore,
)
from .markup import parse_markup
from .structures import FontStyle, StyledText
from .styling import build_bold_text
from .validation import is_valid_email


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lettering",
        description=(
            "Validate emails, look up localized strings, and build styled text."
        ),
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log lookups and formatting details to stderr.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    email = commands.add_parser("email", help="Check email address syntax.")
    email.add_argument("addresses", nargs="+", help="Addresses to check.")

    localize = commands.add_parser("localize", help="Resolve a localized string.")
    localize.add_argument("key", help="Localization key.")
    localize.add_argument(
        "arguments",
        nargs="*",
        help="Positional values substituted into the resolved template.",
    )
    localize.add_argument(
        "--table",
        help="Table name (default: configured table, normally Localizable).",
    )
    localize.add_argument(
        "--locale-dir",
        help="Directory holding <table>.strings files.",
    )
    localize.add_argument(
        "--locale",
        help="Prefer <locale>.lproj inside the locale directory.",
    )

    markup = commands.add_parser("markup", help="Parse HTML markup to styled text.")
    source = markup.add_mutually_exclusive_group(required=True)
    source.add_argument("text", nargs="?", help="Markup to parse.")
    source.add_argument("--file", help="Read markup from a UTF-8 file.")
    _add_output_argument(markup)

    bold = commands.add_parser("bold", help="Render parts of a string in bold.")
    bold.add_argument("text", help="The whole string.")
    bold.add_argument("substrings", nargs="*", help="Parts to render in bold.")
    bold.add_argument(
        "-s",
        "--size",
        type=float,
        help="Font size in points (default: configured size, normally 14).",
    )
    _add_output_argument(bold)
    return parser


def _add_output_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-o",
        "--output",
        help="Also write the styled text to a .docx or .pptx file.",
    )


def describe_style(style: FontStyle) -> str:
    parts = []
    if style.bold:
        parts.append("bold")
    if style.italic:
        parts.append("italic")
    if style.underline:
        parts.append("underline")
    if style.size is not None:
        parts.append(f"size={style.size:g}")
    return " ".join(parts) or "plain"


def describe_styled_text(styled: StyledText) -> List[str]:
    """Render a styled text as human-readable report lines."""

    lines = [f"Text: {styled.plain_text}"]
    if not styled.runs:
        lines.append("Runs: none")
        return lines
    lines.append("Runs:")
    for run in styled.runs:
        excerpt = styled.plain_text[run.start:run.end]
        lines.append(
            f"  [{run.start}, {run.end}) {describe_style(run.style)}: {excerpt!r}"
        )
    return lines


def build_store(
    locale_dir: Optional[str],
    *,
    locale: Optional[str] = None,
) -> LocalizationStore:
    if locale_dir:
        return StringsDirectoryStore(pathlib.Path(locale_dir).expanduser(), locale=locale)
    return MappingLocalizationStore()


def run_email(addresses: Iterable[str]) -> int:
    exit_code = 0
    for address in addresses:
        valid = is_valid_email(address)
        print(f"{address}: {'valid' if valid else 'invalid'}")
        if not valid:
            exit_code = 1
    return exit_code


def coerce_argument(value: str) -> Union[int, float, str]:
    """Turn a numeric command line value into a number."""

    for convert in (int, float):
        try:
            return convert(value)
        except ValueError:
            continue
    return value


def coerce_arguments(template: str, values: Sequence[str]) -> List[Union[int, float, str]]:
    """Convert only the values that feed a numeric conversion in ``template``.

    ``%@`` and ``%s`` arguments keep their text, so ``007`` stays ``007``.
    """

    try:
        numeric = numeric_argument_indexes(parse_placeholders(template))
    except FormatError:
        # format_template reports the bad specifier.
        numeric = set()
    return [
        coerce_argument(value) if index in numeric else value
        for index, value in enumerate(values)
    ]


def run_localize(args: argparse.Namespace, settings: LetteringConfig, debug: bool) -> int:
    store = build_store(
        args.locale_dir or settings.LETTERING_LOCALE_DIR,
        locale=args.locale or settings.LETTERING_LOCALE,
    )
    localizer = Localizer(
        store,
        default_table=args.table or settings.LETTERING_DEFAULT_TABLE,
        missing_marker=settings.LETTERING_MISSING_MARKER,
        debug=debug,
    )
    try:
        if args.arguments:
            template = localizer.localize(args.key)
            arguments = coerce_arguments(template, args.arguments)
            print(localizer.localize_formatted(args.key, arguments))
        else:
            print(localizer.localize(args.key))
    except (FormatError, StringsFileError) as exc:
        print(exc)
        return 1
    return 0


def write_output(output: str, styled: StyledText) -> None:
    destination = pathlib.Path(output).expanduser().resolve()
    _, writer = detect_writer(destination)
    writer.add_paragraph(styled)
    destination.parent.mkdir(parents=True, exist_ok=True)
    writer.save(destination)
    print(f"Wrote {destination}")


def run_styled(args: argparse.Namespace, settings: LetteringConfig) -> int:
    try:
        if args.command == "markup":
            if args.file:
                markup: str | bytes = pathlib.Path(args.file).expanduser().read_bytes()
            else:
                markup = args.text
            styled = parse_markup(markup)
        else:
            size = args.size if args.size is not None else settings.LETTERING_DEFAULT_FONT_SIZE
            styled = build_bold_text(args.text, args.substrings, size)
    except (ParseError, ValueError, OSError) as exc:
        print(exc)
        return 1

    for line in describe_styled_text(styled):
        print(line)

    if args.output:
        try:
            write_output(args.output, styled)
        except UnsupportedFileTypeError as exc:
            print(exc)
            return 1
        except (LetteringError, OSError) as exc:
            print(f"Could not write {args.output}: {exc}")
            return 1
    return 0


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        settings = get_settings()
    except ConfigurationError as exc:
        print(exc)
        return 1
    debug = bool(args.debug or settings.LETTERING_DEBUG)

    if args.command == "email":
        return run_email(args.addresses)
    if args.command == "localize":
        return run_localize(args, settings, debug)
    return run_styled(args, settings)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
