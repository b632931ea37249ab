"""
Tests for primary text cleaning
"""

from feedscrape_core.content_item import element
from feedscrape_core.extraction import clean_text, extract_text, sanitize_text


class TestSanitize:

    def test_collapses_whitespace_and_zero_width(self):
        assert sanitize_text("a\u200b b\n\n\t c ") == "a b c"
        assert sanitize_text(None) == ""


class TestCleanText:
    """UI noise removal"""

    def test_drops_expand_label_and_action_bar(self):
        assert clean_text("Great news today See more Like Comment Share") == "Great news today"

    def test_arabic_labels(self):
        assert clean_text("خبر مهم عرض المزيد أعجبني تعليق مشاركة") == "خبر مهم"

    def test_action_label_must_be_a_whole_word(self):
        assert clean_text("Likewise, the city shared plans") == "Likewise, the city shared plans"

    def test_only_ui_text_is_empty(self):
        assert clean_text("Like Comment Share") == ""
        assert clean_text("See more") == ""
        assert clean_text(None) == ""

    def test_extract_text_reads_item(self):
        item = element("div", text="Hello   there See more", role="article")
        assert extract_text(item) == "Hello there"
