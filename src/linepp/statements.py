"""
Preprocessing Statements
========================

Parsing and execution of statement lines. A statement is a line whose
first non-whitespace character is the statement marker ('#' by default)
followed by at least one more character.

Supported Statements
--------------------
#define NAME[=VALUE]   - Set a variable (value trimmed, not expanded)
#if EXPRESSION         - Conditional block
#else                  - Alternate branch of #if
#endif                 - End of #if
#switch VALUE          - Multi-way conditional block
#case VALUE            - Branch taken when VALUE equals the switch value
#default               - Branch taken when no #case matched
#endswitch             - End of #switch

Expressions
-----------
#if supports exactly one of:

    VALUE1 == VALUE2
    VALUE1 != VALUE2
    defined(NAME)
    undefined(NAME)

Variables are expanded in #if, #switch and #case arguments before they
are evaluated. Values are trimmed and compared case-sensitively.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from linepp.errors import (
    CaseAfterDefaultError,
    CaseWithoutSwitchError,
    DefaultWithoutSwitchError,
    DuplicateCaseError,
    ElseWithoutIfError,
    EndifWithoutIfError,
    EndswitchWithoutSwitchError,
    MalformedStatementError,
    SourceLocation,
    UnknownStatementError,
)
from linepp.frames import ConditionalKind, FrameStack
from linepp.variables import VariableTable

logger = logging.getLogger(__name__)


KEYWORDS = frozenset({
    "define", "if", "else", "endif", "switch", "case", "default", "endswitch",
})

# Statements that take no arguments
BARE_KEYWORDS = frozenset({"else", "endif", "default", "endswitch"})

# Keyword followed by the remaining statement text
STATEMENT_PATTERN = re.compile(r'^(?P<keyword>[A-Za-z]*)(?P<rest>.*)$', re.DOTALL)

# NAME[=VALUE] after '#define '
DEFINE_PATTERN = re.compile(r'^(?P<name>[A-Za-z0-9_.\-]+)\s*(?:=(?P<value>.*))?$', re.DOTALL)

# defined(NAME) / undefined(NAME)
DEFINED_PATTERN = re.compile(r'^(?P<op>defined|undefined)\((?P<name>[A-Za-z0-9_.\-]+)\)$')

# VALUE1==VALUE2 / VALUE1!=VALUE2 (left side greedy)
COMPARISON_PATTERN = re.compile(r'^(?P<left>.*)(?P<op>==|!=)(?P<right>.*)$', re.DOTALL)


@dataclass(frozen=True)
class Statement:
    """
    A statement split into keyword and argument text.

    Attributes:
        keyword: Leading letters after the marker (may be empty)
        argument: Text after the keyword and its separating whitespace
        separated: True if whitespace followed the keyword
    """
    keyword: str
    argument: str
    separated: bool


@dataclass(frozen=True)
class Condition:
    """
    A parsed #if expression.

    Attributes:
        op: '==', '!=', 'defined' or 'undefined'
        left: Left comparison operand (comparisons only)
        right: Right comparison operand (comparisons only)
        name: Variable name (defined/undefined only)
    """
    op: str
    left: Optional[str] = None
    right: Optional[str] = None
    name: Optional[str] = None

    def evaluate(self, variables: VariableTable) -> bool:
        """Evaluate the condition against the current variables."""
        if self.op == "==":
            return self.left == self.right
        if self.op == "!=":
            return self.left != self.right
        if self.op == "defined":
            return self.name in variables
        return self.name not in variables


def split_statement(text: str) -> Statement:
    """
    Split statement text (everything after the marker) into its parts.

    >>> split_statement("define FOO=1")
    Statement(keyword='define', argument='FOO=1', separated=True)
    """
    text = text.rstrip()
    match = STATEMENT_PATTERN.match(text)
    keyword = match.group("keyword")
    rest = match.group("rest")
    argument = rest.lstrip()
    return Statement(keyword, argument, separated=len(argument) != len(rest))


def parse_define(argument: str) -> Optional[tuple[str, str]]:
    """Parse 'NAME[=VALUE]'. Returns (name, value) or None if malformed."""
    match = DEFINE_PATTERN.match(argument)
    if not match:
        return None
    value = match.group("value")
    return match.group("name"), (value.strip() if value is not None else "")


def parse_condition(expression: str) -> Optional[Condition]:
    """
    Parse an already expanded #if expression.

    >>> parse_condition("a == b")
    Condition(op='==', left='a', right='b', name=None)
    >>> parse_condition("defined(FOO)")
    Condition(op='defined', left=None, right=None, name='FOO')

    Returns:
        The condition, or None if the expression is not recognized
    """
    match = DEFINED_PATTERN.match(expression.strip())
    if match:
        return Condition(match.group("op"), name=match.group("name"))

    match = COMPARISON_PATTERN.match(expression)
    if match:
        return Condition(
            match.group("op"),
            left=match.group("left").strip(),
            right=match.group("right").strip(),
        )

    return None


class StatementProcessor:
    """
    Executes statements against the frame stack and variable table.

    The processor does not read input itself. The owning reader passes
    each statement line in, along with callables that expand variables
    and report the current location.

    Attributes:
        frames: Conditional frame stack shared with the reader
        variables: Variable table shared with the reader
    """

    def __init__(
        self,
        frames: FrameStack,
        variables: VariableTable,
        expand: Callable[[str], str],
        location: Callable[[], SourceLocation],
    ):
        self.frames = frames
        self.variables = variables
        self._expand = expand
        self._location = location

    def process(self, line: str, marker: str) -> None:
        """
        Execute one statement line.

        Args:
            line: The raw input line (leading whitespace allowed)
            marker: The statement marker character

        Raises:
            StatementError: For unknown or malformed statements
            NestingError: For block structure violations
            ExpansionError: If argument expansion fails
        """
        text = line[line.index(marker) + 1:]
        statement = split_statement(text)
        keyword = statement.keyword

        if keyword not in KEYWORDS:
            raise UnknownStatementError(
                keyword or text.strip(),
                location=self._location(),
                source_line=line,
            )

        if keyword in BARE_KEYWORDS:
            if statement.argument:
                self._malformed(keyword, line, hint=f"[#{keyword}] does not take arguments")
        elif not statement.separated:
            self._malformed(keyword, line)

        handler = getattr(self, f"_do_{keyword}")
        handler(statement.argument, line)

        logger.debug(
            f"{self._location()}: #{keyword} -> depth {self.frames.depth}, "
            f"output {'on' if self.frames.output_enabled else 'off'}"
        )

    # -------------------------------------------------------------------------
    # Statement Handlers
    # -------------------------------------------------------------------------

    def _do_define(self, argument: str, line: str) -> None:
        parsed = parse_define(argument)
        if parsed is None:
            self._malformed("define", line, hint="use '#define NAME' or '#define NAME=VALUE'")

        # Values are stored unexpanded and expanded when referenced
        if self.frames.output_enabled:
            name, value = parsed
            self.variables.set(name, value)

    def _do_if(self, argument: str, line: str) -> None:
        condition = parse_condition(self._expand(argument))
        if condition is None:
            self._malformed(
                "if",
                line,
                hint="use A==B, A!=B, defined(NAME) or undefined(NAME)",
            )
        self.frames.push_if(condition.evaluate(self.variables), line=self._location().line)

    def _do_else(self, argument: str, line: str) -> None:
        if self.frames.current.kind is not ConditionalKind.IF:
            raise ElseWithoutIfError(self._location(), line)
        self.frames.current.flip()

    def _do_endif(self, argument: str, line: str) -> None:
        if self.frames.current.kind is not ConditionalKind.IF:
            raise EndifWithoutIfError(self._location(), line)
        self.frames.pop()

    def _do_switch(self, argument: str, line: str) -> None:
        value = self._expand(argument).strip()
        if not value:
            self._malformed("switch", line)
        self.frames.push_switch(value, line=self._location().line)

    def _do_case(self, argument: str, line: str) -> None:
        frame = self.frames.current
        if frame.kind is not ConditionalKind.SWITCH:
            raise CaseWithoutSwitchError(self._location(), line)
        if frame.switch_default_seen:
            raise CaseAfterDefaultError(self._location(), line)

        value = self._expand(argument).strip()
        if not value:
            self._malformed("case", line)

        matches = value == frame.switch_value
        if matches and frame.switch_matched:
            raise DuplicateCaseError(value, self._location(), line)
        frame.enter_case(matches)

    def _do_default(self, argument: str, line: str) -> None:
        frame = self.frames.current
        if frame.kind is not ConditionalKind.SWITCH:
            raise DefaultWithoutSwitchError(self._location(), line)
        frame.enter_default()

    def _do_endswitch(self, argument: str, line: str) -> None:
        if self.frames.current.kind is not ConditionalKind.SWITCH:
            raise EndswitchWithoutSwitchError(self._location(), line)
        self.frames.pop()

    def _malformed(self, keyword: str, line: str, hint: Optional[str] = None) -> None:
        raise MalformedStatementError(
            keyword,
            location=self._location(),
            source_line=line,
            hint=hint,
        )
