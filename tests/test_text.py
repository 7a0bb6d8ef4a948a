"""
Tests for the text formatting helpers.
"""

import os

import pytest

from linepp.options import LineEnding
from linepp.text import expand_tabs, indent_line, join_lines


# =============================================================================
# TAB Expansion
# =============================================================================

class TestExpandTabs:
    """Tests for expand_tabs()."""

    @pytest.mark.parametrize("text", ["", "text", "\ttext", "a\tb\n"])
    def test_zero_tab_stop(self, text):
        """A zero tab stop leaves the text alone."""
        assert expand_tabs(text, 0) == text

    def test_no_tabs(self):
        assert expand_tabs("no tabs here", 4) == "no tabs here"

    @pytest.mark.parametrize("text, expected", [
        ("\ttext", "    text"),
        ("\t\ttext", "        text"),
        ("-\ttext", "-   text"),
        ("---\ttext", "--- text"),
        ("----\ttext", "----    text"),
        ("1\t2\t3", "1   2   3"),
        ("-    \tline", "-       line"),
    ])
    def test_tab_stop_4(self, text, expected):
        assert expand_tabs(text, 4) == expected

    @pytest.mark.parametrize("text, expected", [
        ("\ttext", "        text"),
        ("-\ttext", "-       text"),
        ("1234567\tx", "1234567 x"),
        ("12345678\tx", "12345678        x"),
    ])
    def test_tab_stop_8(self, text, expected):
        assert expand_tabs(text, 8) == expected

    def test_columns_reset_per_line(self):
        assert expand_tabs("ab\tc\n\td", 4) == "ab  c\n    d"
        assert expand_tabs("ab\tc\r\n\td", 4) == "ab  c\r\n    d"

    @pytest.mark.parametrize("text, expected", [
        ("    text", "\ttext"),
        ("        text", "\t\ttext"),
        ("      text", "\t  text"),
        ("  text", "  text"),
        ("a    b", "a    b"),
        ("    a\n    b\n", "\ta\n\tb\n"),
    ])
    def test_negative_tab_stop(self, text, expected):
        """Negative tab stops turn leading spaces into TABs."""
        assert expand_tabs(text, -4) == expected


# =============================================================================
# Indentation and Joining
# =============================================================================

class TestIndentAndJoin:
    """Tests for indent_line() and join_lines()."""

    def test_indent(self):
        assert indent_line("x", 3) == "   x"
        assert indent_line("x", 0) == "x"

    def test_indent_skips_blank(self):
        assert indent_line("", 4) == ""
        assert indent_line(" \t", 4) == " \t"

    def test_join_lf(self):
        assert join_lines(["a", "", "b"], LineEnding.LF) == "a\n\nb\n"

    def test_join_crlf(self):
        assert join_lines(["a"], LineEnding.CRLF) == "a\r\n"

    def test_join_platform(self):
        assert join_lines(["a"]) == "a" + os.linesep

    def test_join_empty(self):
        assert join_lines([], LineEnding.LF) == ""
