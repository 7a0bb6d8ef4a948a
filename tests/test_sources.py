"""
Tests for line sources, options, profile clients and error formatting.
"""

import io
import json
from pathlib import Path

import pytest

from linepp.errors import (
    InvalidArgumentError,
    PreprocessError,
    ProfileNotFoundError,
    ProfileStatus,
    ProfileUnavailableError,
    SourceLocation,
    UnclosedConditionalError,
)
from linepp.options import LineEnding, PreprocessOptions
from linepp.profile import DictProfileClient
from linepp.sources import (
    IterableLineSource,
    LineSource,
    StringLineSource,
    TextIOLineSource,
    open_source,
    strip_terminator,
)
from linepp.variables import CURLY


def drain(source) -> list[str]:
    lines = []
    while True:
        line = source.read_line()
        if line is None:
            return lines
        lines.append(line)


# =============================================================================
# Line Sources
# =============================================================================

class TestLineSources:
    """Tests for the line source adapters."""

    @pytest.mark.parametrize("line, expected", [
        ("a\n", "a"),
        ("a\r\n", "a"),
        ("a\r", "a"),
        ("a", "a"),
        ("a\n\n", "a\n"),
    ])
    def test_strip_terminator(self, line, expected):
        assert strip_terminator(line) == expected

    def test_string_source(self):
        assert drain(StringLineSource("a\r\nb\n\nc")) == ["a", "b", "", "c"]

    def test_string_source_empty(self):
        assert drain(StringLineSource("")) == []

    def test_bytes_source(self):
        assert drain(StringLineSource.from_bytes("é\nü".encode("utf-8"))) == ["é", "ü"]

    def test_stream_source(self):
        assert drain(TextIOLineSource(io.StringIO("x\ny\n"))) == ["x", "y"]

    def test_iterable_source(self):
        assert drain(IterableLineSource(iter(["x\n", "y"]))) == ["x", "y"]

    def test_open_source_dispatch(self):
        assert isinstance(open_source("text"), StringLineSource)
        assert isinstance(open_source(b"text"), StringLineSource)
        assert isinstance(open_source(io.StringIO("text")), TextIOLineSource)
        assert isinstance(open_source(["text"]), IterableLineSource)

    def test_open_source_passes_line_sources_through(self):
        source = StringLineSource("x")
        assert open_source(source) is source
        assert isinstance(source, LineSource)

    def test_open_source_rejects_other_objects(self):
        with pytest.raises(TypeError):
            open_source(42)

    def test_file_source(self, tmp_path: Path):
        path = tmp_path / "input.txt"
        path.write_text("one\ntwo\n", encoding="utf-8")
        with open(path, encoding="utf-8") as f:
            assert drain(open_source(f)) == ["one", "two"]


# =============================================================================
# Options
# =============================================================================

class TestPreprocessOptions:
    """Tests for PreprocessOptions defaults and validation."""

    def test_defaults(self):
        options = PreprocessOptions()
        assert options.statement_marker == "#"
        assert options.comment_markers == ["//"]
        assert options.expand_variables
        assert options.strip_comments
        assert not options.remove_comments
        assert not options.remove_blank
        assert options.process_statements
        assert options.tab_stop == 0
        assert options.indent == 0
        assert options.default_variable is None
        assert options.default_environment_variable is None
        assert options.line_ending is LineEnding.PLATFORM

    def test_defaults_not_shared(self):
        first = PreprocessOptions()
        first.add_comment_marker(";")
        assert PreprocessOptions().comment_markers == ["//"]

    def test_duplicate_markers_collapsed(self):
        options = PreprocessOptions(comment_markers=["//", ";", "//"])
        assert options.comment_markers == ["//", ";"]
        options.add_comment_marker(";")
        assert options.comment_markers == ["//", ";"]

    def test_names_converted(self):
        options = PreprocessOptions(variable_syntax="curly", line_ending="CRLF")
        assert options.variable_syntax is CURLY
        assert options.line_ending is LineEnding.CRLF

    @pytest.mark.parametrize("kwargs", [
        {"statement_marker": ""},
        {"statement_marker": " "},
        {"statement_marker": "##"},
        {"comment_markers": ["rem"]},
        {"tab_stop": -1},
        {"indent": True},
        {"variable_syntax": "square"},
        {"variable_syntax": 42},
        {"line_ending": "cr"},
        {"line_ending": 3},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(InvalidArgumentError):
            PreprocessOptions(**kwargs)

    def test_yaml_mode(self):
        options = PreprocessOptions(comment_markers=["//", ";"])
        options.yaml_mode()
        assert options.statement_marker == "@"
        assert options.comment_markers == ["#"]


# =============================================================================
# Profile Client
# =============================================================================

class TestDictProfileClient:
    """Tests for DictProfileClient."""

    def test_secret_properties(self):
        client = DictProfileClient(secrets={"db": {"password": "pw", "port": 5432}})
        assert client.get_secret_value("db") == "pw"
        assert client.get_secret_value("db", "port") == "5432"

    def test_string_secret(self):
        client = DictProfileClient(secrets={"token": "abc"})
        assert client.get_secret_value("token") == "abc"
        with pytest.raises(ProfileNotFoundError):
            client.get_secret_value("token", "username")

    def test_sources(self):
        client = DictProfileClient(sources={"vault": {"db": {"password": "v"}}})
        assert client.get_secret_value("db", source="vault") == "v"
        with pytest.raises(ProfileNotFoundError):
            client.get_secret_value("db")
        with pytest.raises(ProfileNotFoundError):
            client.get_secret_value("db", source="other")

    def test_missing_values(self):
        client = DictProfileClient()
        with pytest.raises(ProfileNotFoundError) as exc_info:
            client.get_profile_value("region")
        assert exc_info.value.status is ProfileStatus.NOT_FOUND

    def test_from_file(self, tmp_path: Path):
        path = tmp_path / "profile.json"
        path.write_text(json.dumps({
            "profile": {"region": "west"},
            "secrets": {"db": {"password": "pw"}},
        }))
        client = DictProfileClient.from_file(path)
        assert client.get_profile_value("region") == "west"
        assert client.get_secret_value("db") == "pw"

    def test_from_file_missing(self, tmp_path: Path):
        with pytest.raises(ProfileUnavailableError) as exc_info:
            DictProfileClient.from_file(tmp_path / "missing.json")
        assert exc_info.value.status is ProfileStatus.UNAVAILABLE

    @pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
    def test_from_file_invalid(self, tmp_path: Path, content):
        path = tmp_path / "profile.json"
        path.write_text(content)
        with pytest.raises(ProfileUnavailableError):
            DictProfileClient.from_file(path)


# =============================================================================
# Error Formatting
# =============================================================================

class TestErrorFormatting:
    """Tests for PreprocessError messages."""

    def test_full_message(self):
        error = PreprocessError(
            "something failed",
            location=SourceLocation("deploy.yaml", 12),
            hint="try again",
            source_line="region: $<region>",
        )
        assert str(error) == (
            "deploy.yaml:12: error: something failed\n"
            "    region: $<region>\n"
            "hint: try again"
        )
        assert error.line == 12

    def test_message_without_location(self):
        error = PreprocessError("bad")
        assert str(error) == "error: bad"
        assert error.line is None

    def test_unclosed_hint_names_opening_line(self):
        error = UnclosedConditionalError("switch", SourceLocation("f", 9), opened_at=4)
        assert "line 4" in str(error)
        assert "#endswitch" in str(error)

    def test_invalid_argument_is_value_error(self):
        assert issubclass(InvalidArgumentError, ValueError)
        assert issubclass(InvalidArgumentError, PreprocessError)
