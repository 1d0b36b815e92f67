"""Tests for localized string lookup."""

import codecs

import pytest

from lettering.errors import FormatArgumentMismatch, StringsFileError
from lettering.localization import (
    Localizer,
    MappingLocalizationStore,
    StringsDirectoryStore,
    load_strings,
    localize,
    localize_formatted,
)
from lettering.structures import LocalizationEntry


@pytest.fixture
def store():
    return MappingLocalizationStore(
        {
            "Localizable": {
                "greeting": "Hello there",
                "Hello %s": "Hello %s",
            },
            "Errors": {"not_found": "Nothing here"},
        }
    )


class TestLoadStrings:
    """Tests for the .strings document parser."""

    def test_entries_comments_and_escapes(self):
        entries = load_strings(
            '/* block\n comment */\n"a" = "one";\n// line comment\n'
            '"quote" = "say \\"hi\\"";\n"nl"="x\\ny"; "uni" = "\\U00E9";'
        )
        assert entries == {
            "a": "one",
            "quote": 'say "hi"',
            "nl": "x\ny",
            "uni": "é",
        }

    def test_later_duplicates_win(self):
        assert load_strings('"a" = "1";\n"a" = "2";') == {"a": "2"}

    def test_empty_document(self):
        assert load_strings("  \n/* nothing */\n") == {}

    def test_malformed_entry_reports_line(self):
        with pytest.raises(StringsFileError, match="line 2") as excinfo:
            load_strings('"a" = "1";\n"b" = "2"\n')
        assert excinfo.value.line == 2


class TestLocalizer:
    """Tests for Localizer lookups."""

    def test_found_key(self, store):
        assert Localizer(store).localize("greeting") == "Hello there"

    def test_missing_key_returns_visible_fallback(self, store):
        """Missing translations stay visible rather than silent."""
        result = Localizer(store).localize("farewell")
        assert result == "**farewell**"

    def test_explicit_table(self, store):
        localizer = Localizer(store)
        assert localizer.localize("not_found", "Errors") == "Nothing here"
        assert localizer.localize("greeting", "Errors") == "**greeting**"

    def test_custom_default_table_and_marker(self, store):
        localizer = Localizer(store, default_table="Errors", missing_marker="!!")
        assert localizer.localize("not_found") == "Nothing here"
        assert localizer.localize("greeting") == "!!greeting!!"

    def test_entry(self, store):
        localizer = Localizer(store)
        assert localizer.entry("greeting") == LocalizationEntry(
            key="greeting", table="Localizable", value="Hello there"
        )
        assert localizer.entry("missing") is None

    def test_localize_formatted(self, store):
        assert Localizer(store).localize_formatted("Hello %s", ["World"]) == "Hello World"

    def test_localize_formatted_with_too_few_arguments(self, store):
        with pytest.raises(FormatArgumentMismatch):
            Localizer(store).localize_formatted("Hello %s", [])

    def test_localize_formatted_missing_key_formats_fallback(self, store):
        result = Localizer(store).localize_formatted("Bye %@", ["Ana"])
        assert result == "**Bye Ana**"

    def test_debug_reports_missing_keys(self, store, capsys):
        Localizer(store, debug=True).localize("farewell")
        captured = capsys.readouterr()
        assert "[lettering][debug] localization.missing" in captured.err
        assert "farewell" in captured.err

    def test_no_debug_output_by_default(self, store, capsys):
        Localizer(store).localize("farewell")
        assert capsys.readouterr().err == ""


class TestModuleShortcuts:
    """Tests for module-level localize helpers."""

    def test_localize_with_empty_store(self):
        result = localize("greeting")
        assert "greeting" in result
        assert result != "greeting"

    def test_localize_with_store(self, store):
        assert localize("greeting", store=store) == "Hello there"

    def test_localize_formatted_with_store(self, store):
        assert localize_formatted("Hello %s", ["World"], store=store) == "Hello World"


class TestStringsDirectoryStore:
    """Tests for loading tables from .strings files."""

    def test_lookup_from_files(self, strings_dir):
        localizer = Localizer(StringsDirectoryStore(strings_dir))
        assert localizer.localize("greeting") == "Hello there"
        assert localizer.localize("quote") == 'She said "hi"'
        assert localizer.localize("multiline") == "one\ntwo"
        assert localizer.localize("not_found", "Errors") == "Nothing here"

    def test_formatted_lookup_from_files(self, strings_dir):
        localizer = Localizer(StringsDirectoryStore(strings_dir))
        result = localizer.localize_formatted("welcome_user", ["Ana", 3])
        assert result == "Welcome, Ana! You have 3 new messages."

    def test_locale_directory_takes_precedence(self, strings_dir):
        localizer = Localizer(StringsDirectoryStore(strings_dir, locale="es"))
        assert localizer.localize("greeting") == "Hola"
        assert localizer.localize("Hello %s") == "Hello %s"

    def test_missing_table_means_missing_keys(self, strings_dir):
        store = StringsDirectoryStore(strings_dir)
        assert store.lookup("greeting", "Nope") is None

    def test_path_like_table_names_are_not_resolved(self, strings_dir):
        store = StringsDirectoryStore(strings_dir / "es.lproj")
        assert store.lookup("greeting", "../Localizable") is None

    def test_utf16_file(self, tmp_path):
        data = codecs.BOM_UTF16_LE + '"café" = "Café";'.encode("utf-16-le")
        (tmp_path / "Localizable.strings").write_bytes(data)
        assert StringsDirectoryStore(tmp_path).lookup("café", "Localizable") == "Café"

    def test_malformed_file_raises(self, tmp_path):
        (tmp_path / "Localizable.strings").write_text('"a" = ;', encoding="utf-8")
        with pytest.raises(StringsFileError, match="Localizable.strings"):
            StringsDirectoryStore(tmp_path).lookup("a", "Localizable")

    def test_tables_are_cached(self, strings_dir):
        store = StringsDirectoryStore(strings_dir)
        assert store.lookup("greeting", "Localizable") == "Hello there"
        (strings_dir / "Localizable.strings").write_text(
            '"greeting" = "Changed";', encoding="utf-8"
        )
        assert store.lookup("greeting", "Localizable") == "Hello there"
