"""Shared test fixtures for Lettering."""

from pathlib import Path
from types import SimpleNamespace

import pytest

LOCALIZABLE = """\
/* Greetings */
"greeting" = "Hello there";
"Hello %s" = "Hello %s";
"welcome_user" = "Welcome, %@! You have %d new messages.";

// Escapes
"quote" = "She said \\"hi\\"";
"multiline" = "one\\ntwo";
"""


@pytest.fixture
def strings_dir(tmp_path: Path) -> Path:
    """Create a directory with a Localizable table and a Spanish override."""
    (tmp_path / "Localizable.strings").write_text(LOCALIZABLE, encoding="utf-8")
    (tmp_path / "Errors.strings").write_text(
        '"not_found" = "Nothing here";\n', encoding="utf-8"
    )
    lproj = tmp_path / "es.lproj"
    lproj.mkdir()
    (lproj / "Localizable.strings").write_text(
        '"greeting" = "Hola";\n', encoding="utf-8"
    )
    return tmp_path


@pytest.fixture
def cli_settings(monkeypatch):
    """Replace configuration loading in the CLI with fixed defaults."""
    settings = SimpleNamespace(
        LETTERING_LOCALE_DIR=None,
        LETTERING_LOCALE=None,
        LETTERING_DEFAULT_TABLE="Localizable",
        LETTERING_MISSING_MARKER="**",
        LETTERING_DEFAULT_FONT_SIZE=14.0,
        LETTERING_DEBUG=False,
    )
    monkeypatch.setattr("lettering.cli.get_settings", lambda: settings)
    return settings
