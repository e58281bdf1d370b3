"""Unit tests for identifier and literal helpers."""

import pytest

from ktpoet import helper


class TestKeywords:
    @pytest.mark.parametrize("name", ["object", "in", "fun", "is", "val"])
    def test_keywords_are_escaped(self, name):
        assert helper.escape_if_keyword(name) == f"`{name}`"

    def test_plain_names_are_kept(self):
        assert helper.escape_if_keyword("greet") == "greet"

    def test_keyword_is_identifier_but_not_name(self):
        assert helper.is_identifier("object")
        assert not helper.is_name("object")
        assert helper.is_name("greeting")

    def test_invalid_identifier(self):
        assert not helper.is_identifier("1st")
        assert not helper.is_identifier("")
        assert not helper.is_identifier("a-b")

    def test_escape_segments(self):
        assert helper.escape_segments("com.example.in.Reader") == "com.example.`in`.Reader"


class TestStringLiterals:
    def test_plain(self):
        assert helper.string_literal_with_quotes("hello") == '"hello"'

    def test_empty(self):
        assert helper.string_literal_with_quotes("") == '""'

    def test_escapes(self):
        assert helper.string_literal_with_quotes('a"b\\c\n$d\té') == '"a\\"b\\\\c\\n\\$d\\t\\u00e9"'

    def test_single_quote_is_not_escaped(self):
        assert helper.string_literal_with_quotes("it's") == '"it\'s"'

    def test_control_characters(self):
        assert helper.string_literal_with_quotes("\x00\x1f\x7f") == '"\\u0000\\u001f\\u007f"'

    def test_carriage_return_and_backspace(self):
        assert helper.string_literal_with_quotes("\r\b") == '"\\r\\b"'

    def test_surrogate_pair(self):
        assert helper.string_literal_with_quotes("\U0001f600") == '"\\ud83d\\ude00"'
