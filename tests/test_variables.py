"""
Tests for the variable table, reference syntaxes and reference parsing.
"""

import re

import pytest

from linepp.errors import InvalidArgumentError, ProfileResolutionError, ProfileStatus
from linepp.variables import (
    ANGLE,
    CURLY,
    PAREN,
    ReferenceKind,
    VariableReference,
    VariableSyntax,
    VariableTable,
    is_valid_name,
    parse_reference,
    to_variable_value,
)


# =============================================================================
# Names and Values
# =============================================================================

class TestNames:
    """Tests for variable name validation and value conversion."""

    @pytest.mark.parametrize("name", ["a", "A1", "my-var", "my.var", "my_var", "0"])
    def test_valid_names(self, name):
        assert is_valid_name(name)

    @pytest.mark.parametrize("name", ["", " a", "a b", "a:b", "a$", "ä", None])
    def test_invalid_names(self, name):
        assert not is_valid_name(name)

    @pytest.mark.parametrize("value, expected", [
        (None, ""),
        (True, "true"),
        (False, "false"),
        (0, "0"),
        (1.5, "1.5"),
        ("text", "text"),
    ])
    def test_to_variable_value(self, value, expected):
        assert to_variable_value(value) == expected


# =============================================================================
# Variable Table
# =============================================================================

class TestVariableTable:
    """Tests for VariableTable."""

    def test_initial_values_converted(self):
        table = VariableTable({"a": 1, "b": None})
        assert table["a"] == "1"
        assert table["b"] == ""
        assert len(table) == 2

    def test_get_default(self):
        table = VariableTable()
        assert table.get("missing") is None
        assert table.get("missing", "x") == "x"

    def test_case_sensitive(self):
        table = VariableTable({"Name": "1"})
        assert "Name" in table
        assert "name" not in table

    def test_remove(self):
        table = VariableTable({"a": "1"})
        assert table.remove("a")
        assert not table.remove("a")
        assert "a" not in table

    def test_as_dict_is_copy(self):
        table = VariableTable({"a": "1"})
        snapshot = table.as_dict()
        snapshot["b"] = "2"
        assert list(table) == ["a"]

    def test_invalid_name(self):
        with pytest.raises(InvalidArgumentError):
            VariableTable().set("bad name", "x")


# =============================================================================
# Reference Syntaxes
# =============================================================================

class TestVariableSyntax:
    """Tests for the built-in and custom syntaxes."""

    def test_builtin_syntaxes(self):
        text = "x ${b} $(c) $<a>"
        assert ANGLE.search(text).group("name") == "a"
        assert CURLY.search(text).group("name") == "b"
        assert PAREN.search(text).group("name") == "c"

    def test_prefixed_names(self):
        assert ANGLE.search("$<env:HOME>").group("name") == "env:HOME"
        match = ANGLE.search("pw=$<secret:db[user]:vault>;")
        assert match.group("name") == "secret:db[user]:vault"
        assert match.group(0) == "$<secret:db[user]:vault>"

    def test_no_match_for_invalid_characters(self):
        assert ANGLE.search("$<has space>") is None
        assert ANGLE.search("$<>") is None

    def test_from_name(self):
        assert VariableSyntax.from_name("CURLY") is CURLY
        with pytest.raises(InvalidArgumentError):
            VariableSyntax.from_name("square")

    def test_custom_syntax(self):
        syntax = VariableSyntax("percent", r"%(?P<name>[a-z]+)%")
        assert syntax.search("x %B% and %a%").group("name") == "B"

    def test_precompiled_pattern(self):
        syntax = VariableSyntax("at", re.compile(r"@(?P<name>\w+)@"))
        assert syntax.search("x @y@").group("name") == "y"

    def test_missing_name_group(self):
        with pytest.raises(InvalidArgumentError):
            VariableSyntax("broken", r"\$<([a-z]+)>")


# =============================================================================
# Reference Parsing
# =============================================================================

class TestParseReference:
    """Tests for parse_reference()."""

    def test_local(self):
        assert parse_reference("name") == VariableReference(ReferenceKind.LOCAL, "name")

    def test_env(self):
        assert parse_reference("env:HOME") == VariableReference(ReferenceKind.ENV, "HOME")

    def test_profile(self):
        assert parse_reference("profile:region") == VariableReference(ReferenceKind.PROFILE, "region")

    @pytest.mark.parametrize("text, name, prop, source", [
        ("secret:db", "db", "password", None),
        ("secret:db[username]", "db", "username", None),
        ("secret:db:vault", "db", "password", "vault"),
        ("secret:db[username]:vault", "db", "username", "vault"),
    ])
    def test_secret(self, text, name, prop, source):
        ref = parse_reference(text)
        assert ref.kind is ReferenceKind.SECRET
        assert ref.name == name
        assert ref.property == prop
        assert ref.source == source

    @pytest.mark.parametrize("text", [
        "secret:",
        "profile:",
        "secret:a:b:c",
        "secret:db[]",
        "secret:db[a][b]",
    ])
    def test_bad_references(self, text):
        with pytest.raises(ProfileResolutionError) as exc_info:
            parse_reference(text)
        assert exc_info.value.status is ProfileStatus.BAD_REFERENCE
