"""
Tests for locale tables loading and merging
"""

from datetime import datetime, timezone

import pytest

from feedscrape_core.locales import LocaleError, alternation, load_locale_tables, whole_word
from feedscrape_core.numerals import normalize_count
from feedscrape_core.temporal import normalize_date


class TestDefaultTables:
    """Bundled Arabic/English tables"""

    def test_lookup(self, tables):
        assert tables.lookup("months", "September") == "9"
        assert tables.lookup("months", "أيلول") == "9"
        assert tables.lookup("period_markers", "PM") == "pm"
        assert tables.lookup("months", "Smarch") is None

    def test_digit_map(self, tables):
        assert tables.digit_map["٣"] == "3"
        assert len(tables.digit_map) == 10

    def test_forms(self, tables):
        assert "See more" in tables.forms("expand_labels")
        assert tables.forms("profile_words", ["following"]) == ["يتابعون", "يتابع", "following"]


class TestAlternation:

    def test_longest_first(self):
        assert alternation(["m", "min", "minutes"]) == "minutes|min|m"

    def test_empty_matches_nothing(self):
        assert alternation([]) == "(?!)"

    def test_whole_word(self):
        assert whole_word("a|b") == r"(?<!\w)(?:a|b)(?!\w)"


class TestExtraLocaleFile:
    """Extra YAML merged on top of the defaults"""

    def test_merge_adds_forms(self, tmp_path):
        extra = tmp_path / "it.yaml"
        extra.write_text(
            "months:\n"
            "  '9': [settembre]\n"
            "at_markers:\n"
            "  at: [alle]\n"
            "magnitude_words:\n"
            "  thousand: [mila]\n",
            encoding="utf-8",
        )
        tables = load_locale_tables(str(extra))
        assert tables.lookup("months", "settembre") == "9"
        assert tables.lookup("months", "september") == "9"

        now = datetime(2024, 1, 10, 12, tzinfo=timezone.utc)
        assert normalize_date("14 settembre alle 18:30", now=now, tables=tables) == "2024-09-14T18:30:00Z"
        assert normalize_count("3 mila", tables=tables) == 3000

    def test_unknown_table(self, tmp_path):
        extra = tmp_path / "bad.yaml"
        extra.write_text("weekdays:\n  mon: [lunedi]\n", encoding="utf-8")
        with pytest.raises(LocaleError):
            load_locale_tables(str(extra))

    def test_bad_shape(self, tmp_path):
        extra = tmp_path / "bad.yaml"
        extra.write_text("months:\n  '9': 12\n", encoding="utf-8")
        with pytest.raises(LocaleError):
            load_locale_tables(str(extra))

    def test_not_a_mapping(self, tmp_path):
        extra = tmp_path / "bad.yaml"
        extra.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(LocaleError):
            load_locale_tables(str(extra))

    def test_invalid_yaml(self, tmp_path):
        extra = tmp_path / "bad.yaml"
        extra.write_text("months: [unclosed\n", encoding="utf-8")
        with pytest.raises(LocaleError):
            load_locale_tables(str(extra))

    def test_missing_file(self, tmp_path):
        with pytest.raises(LocaleError):
            load_locale_tables(str(tmp_path / "nope.yaml"))

    def test_locale_error_is_value_error(self):
        assert issubclass(LocaleError, ValueError)
