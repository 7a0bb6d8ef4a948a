"""
Preprocessing Options
=====================

Configuration for a preprocessing run. Readers expose each option as a
validated property, so options can also be changed between reads.

Example
-------
>>> from linepp.options import PreprocessOptions
>>> options = PreprocessOptions(remove_blank=True, tab_stop=4)
>>> options.yaml_mode()
>>> options.statement_marker, options.comment_markers
('@', ['#'])
"""

import os
import string
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from linepp.errors import InvalidArgumentError
from linepp.variables import VariableSyntax, ANGLE


class LineEnding(Enum):
    """Line terminator appended by read_to_end()."""
    PLATFORM = "platform"
    CRLF = "crlf"
    LF = "lf"

    @property
    def terminator(self) -> str:
        """The characters written after each line."""
        if self is LineEnding.CRLF:
            return "\r\n"
        if self is LineEnding.LF:
            return "\n"
        return os.linesep


def validate_statement_marker(marker: str) -> str:
    """Return `marker` if it is a single non-whitespace character."""
    if not isinstance(marker, str) or len(marker) != 1 or marker.isspace():
        raise InvalidArgumentError(
            f"[marker={marker!r}]: statement marker must be a single non-whitespace character"
        )
    return marker


def validate_comment_marker(marker: str) -> str:
    """Return `marker` if it is non-empty and made only of punctuation."""
    if not marker:
        raise InvalidArgumentError("comment marker cannot be empty")
    if any(ch.isspace() for ch in marker):
        raise InvalidArgumentError(f"[marker={marker}]: cannot include whitespace")
    if any(ch not in string.punctuation for ch in marker):
        raise InvalidArgumentError(f"[marker={marker}]: includes a non-punctuation character")
    return marker


def validate_variable_syntax(value) -> VariableSyntax:
    """Return a VariableSyntax for `value` (a syntax or a built-in name)."""
    if isinstance(value, str):
        return VariableSyntax.from_name(value)
    if not isinstance(value, VariableSyntax):
        raise InvalidArgumentError(f"variable syntax must be a VariableSyntax, got {value!r}")
    return value


def validate_line_ending(value) -> LineEnding:
    """Return a LineEnding for `value` (a member or its name)."""
    if isinstance(value, LineEnding):
        return value
    if isinstance(value, str):
        try:
            return LineEnding(value.lower())
        except ValueError:
            pass
    valid = ", ".join(e.value for e in LineEnding)
    raise InvalidArgumentError(f"unknown line ending {value!r} (valid: {valid})")


def validate_width(name: str, value: int) -> int:
    """Return `value` if it is a non-negative integer."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidArgumentError(f"{name} must be a non-negative integer, got {value!r}")
    return value


@dataclass
class PreprocessOptions:
    """
    Preprocessor configuration.

    Attributes:
        statement_marker: Leading character of statements (default '#')
        comment_markers: Prefixes identifying comment lines (default ['//'])
        variable_syntax: Variable reference style ($<x>, ${x} or $(x))
        expand_variables: Expand variable references in text lines
        strip_comments: Return comment lines as empty strings
        remove_comments: Drop comment lines entirely
        remove_blank: Drop empty and whitespace-only lines
        process_statements: Interpret statements (otherwise pass them through)
        tab_stop: Expand TABs to this width after expansion (0 = off)
        indent: Spaces prefixed to non-blank expanded lines
        default_variable: Value for undefined variables (None = error)
        default_environment_variable: Value for undefined environment
                     variables (None = error)
        line_ending: Terminator used by read_to_end()
    """
    statement_marker: str = "#"
    comment_markers: list[str] = field(default_factory=lambda: ["//"])
    variable_syntax: VariableSyntax = ANGLE
    expand_variables: bool = True
    strip_comments: bool = True
    remove_comments: bool = False
    remove_blank: bool = False
    process_statements: bool = True
    tab_stop: int = 0
    indent: int = 0
    default_variable: Optional[str] = None
    default_environment_variable: Optional[str] = None
    line_ending: LineEnding = LineEnding.PLATFORM

    def __post_init__(self):
        validate_statement_marker(self.statement_marker)
        validate_width("tab_stop", self.tab_stop)
        validate_width("indent", self.indent)

        markers = []
        for marker in self.comment_markers:
            validate_comment_marker(marker)
            if marker not in markers:
                markers.append(marker)
        self.comment_markers = markers

        self.variable_syntax = validate_variable_syntax(self.variable_syntax)
        self.line_ending = validate_line_ending(self.line_ending)

    def add_comment_marker(self, marker: str) -> None:
        """Append a comment marker if it is not already registered."""
        validate_comment_marker(marker)
        if marker not in self.comment_markers:
            self.comment_markers.append(marker)

    def clear_comment_markers(self) -> None:
        """Remove all comment markers, disabling comment detection."""
        self.comment_markers.clear()

    def yaml_mode(self) -> None:
        """Use '@' for statements and '#' for comments, for YAML-like input."""
        self.statement_marker = "@"
        self.clear_comment_markers()
        self.add_comment_marker("#")
