"""
linepp Error Hierarchy
======================

This module defines the exception hierarchy for the line preprocessor.
All exceptions inherit from PreprocessError, allowing callers to catch
every preprocessing failure with a single except clause.

Exception Hierarchy
-------------------
PreprocessError (base)
├── StatementError (statement syntax)
│   ├── MalformedStatementError - known keyword, invalid arguments
│   └── UnknownStatementError - statement marker with unknown keyword
├── NestingError (block structure)
│   ├── ElseWithoutIfError
│   ├── EndifWithoutIfError
│   ├── CaseWithoutSwitchError
│   ├── DefaultWithoutSwitchError
│   ├── EndswitchWithoutSwitchError
│   ├── CaseAfterDefaultError
│   ├── DuplicateCaseError
│   └── UnclosedConditionalError - input ended inside #if/#switch
├── ExpansionError (variable expansion)
│   ├── UndefinedVariableError
│   ├── ExpansionLimitExceededError - recursion guard
│   └── ProfileResolutionError - secret/profile lookups
│       ├── ProfileNotFoundError
│       └── ProfileUnavailableError
├── ReaderStateError - reader used after a failure or re-entered
└── InvalidArgumentError (also a ValueError) - bad caller arguments

Every error raised while reading is fatal: the reader refuses further
reads once one has escaped to the caller.

Error messages follow this format:
    filename:line: error: description
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Location of a raw input line, used for error reporting.

    Attributes:
        filename: Name of the source (or "<input>" for string input)
        line: Line number (1-indexed, counts every raw line pulled)
    """
    filename: str
    line: int

    def __str__(self) -> str:
        """Format as 'filename:line' for error messages."""
        return f"{self.filename}:{self.line}"


# =============================================================================
# Base Exception Class
# =============================================================================

class PreprocessError(Exception):
    """
    Base exception for all preprocessing errors.

    Attributes:
        message: The error description
        location: Where in the input the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The raw input line that triggered the error (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    @property
    def line(self) -> Optional[int]:
        """Line number of the failure, or None when not tied to input."""
        return self.location.line if self.location else None

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            deploy.yaml:12: error: undefined variable reference '$<region>'
                region: $<region>
            hint: define it with '#define region=...' or set a default variable
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None:
            parts.append(f"    {self.source_line}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


# =============================================================================
# Statement Errors
# =============================================================================

class StatementError(PreprocessError):
    """Base class for errors in the syntax of a preprocessing statement."""
    pass


class MalformedStatementError(StatementError):
    """
    A recognized statement keyword with invalid arguments.

    Examples:
        #define 9 bad name
        #if nothing-to-compare
        #endif trailing
    """

    def __init__(
        self,
        keyword: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.keyword = keyword
        super().__init__(
            f"invalid [#{keyword}] statement",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UnknownStatementError(StatementError):
    """The statement marker is followed by an unrecognized keyword."""

    def __init__(
        self,
        keyword: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.keyword = keyword
        super().__init__(
            f"unknown preprocessing statement '{keyword}'",
            location=location,
            hint="supported: define, if, else, endif, switch, case, default, endswitch",
            source_line=source_line,
        )


# =============================================================================
# Nesting Errors
# =============================================================================

class NestingError(PreprocessError):
    """Base class for #if/#switch block structure violations."""
    pass


class ElseWithoutIfError(NestingError):
    """#else appeared while the innermost block is not an #if."""

    def __init__(self, location=None, source_line=None):
        super().__init__(
            "[#else] statement is not within an [#if]",
            location=location,
            source_line=source_line,
        )


class EndifWithoutIfError(NestingError):
    """#endif appeared while the innermost block is not an #if."""

    def __init__(self, location=None, source_line=None):
        super().__init__(
            "[#endif] statement has no matching [#if]",
            location=location,
            source_line=source_line,
        )


class CaseWithoutSwitchError(NestingError):
    """#case appeared while the innermost block is not a #switch."""

    def __init__(self, location=None, source_line=None):
        super().__init__(
            "[#case] statement is not within a [#switch] block",
            location=location,
            source_line=source_line,
        )


class DefaultWithoutSwitchError(NestingError):
    """#default appeared while the innermost block is not a #switch."""

    def __init__(self, location=None, source_line=None):
        super().__init__(
            "[#default] statement is not within a [#switch] block",
            location=location,
            source_line=source_line,
        )


class EndswitchWithoutSwitchError(NestingError):
    """#endswitch appeared while the innermost block is not a #switch."""

    def __init__(self, location=None, source_line=None):
        super().__init__(
            "[#endswitch] statement has no matching [#switch]",
            location=location,
            source_line=source_line,
        )


class CaseAfterDefaultError(NestingError):
    """#case appeared after the #default of the same #switch."""

    def __init__(self, location=None, source_line=None):
        super().__init__(
            "[#case] statement cannot appear after [#default] in a [#switch] block",
            location=location,
            hint="move [#default] after the last [#case]",
            source_line=source_line,
        )


class DuplicateCaseError(NestingError):
    """A second #case matched the value of a #switch that already matched."""

    def __init__(self, value: str, location=None, source_line=None):
        self.value = value
        super().__init__(
            f"[#case] value '{value}' is repeated in a [#switch] block",
            location=location,
            source_line=source_line,
        )


class UnclosedConditionalError(NestingError):
    """
    Input ended while an #if or #switch block was still open.

    Attributes:
        kind: "if" or "switch"
        opened_at: Line number of the unclosed statement, when known
    """

    def __init__(
        self,
        kind: str,
        location: Optional[SourceLocation] = None,
        opened_at: Optional[int] = None,
    ):
        self.kind = kind
        self.opened_at = opened_at

        closer = "endif" if kind == "if" else "endswitch"
        hint = f"add [#{closer}]"
        if opened_at is not None:
            hint = f"the [#{kind}] opened on line {opened_at} needs a matching [#{closer}]"

        super().__init__(
            f"unclosed [#{kind}] statement",
            location=location,
            hint=hint,
        )


# =============================================================================
# Expansion Errors
# =============================================================================

class ExpansionError(PreprocessError):
    """Base class for failures while expanding variable references."""
    pass


class UndefinedVariableError(ExpansionError):
    """
    Reference to a variable that is not defined and has no fallback.

    Attributes:
        reference: The full matched reference text (e.g. '$<name>')
        environment: True for an 'env:' reference
    """

    def __init__(
        self,
        reference: str,
        environment: bool = False,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.reference = reference
        self.environment = environment

        if environment:
            message = f"undefined environment variable reference '{reference}'"
            hint = "export the variable or set a default environment variable"
        else:
            message = f"undefined variable reference '{reference}'"
            hint = "define the variable or set a default variable"

        super().__init__(message, location=location, hint=hint, source_line=source_line)


class ExpansionLimitExceededError(ExpansionError):
    """More variable substitutions were needed on one line than allowed."""

    def __init__(
        self,
        limit: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.limit = limit
        super().__init__(
            f"more than {limit} variable expansions are required",
            location=location,
            hint="verify that there are no recursively defined variables",
            source_line=source_line,
        )


class ProfileStatus(Enum):
    """Why a secret or profile reference could not be resolved."""
    BAD_REFERENCE = "bad-reference"
    NOT_FOUND = "not-found"
    UNAVAILABLE = "unavailable"


class ProfileResolutionError(ExpansionError):
    """
    A secret or profile reference could not be resolved.

    Raised for malformed references, when no profile client was
    supplied, or when the client fails the lookup.
    """

    def __init__(
        self,
        message: str,
        status: ProfileStatus = ProfileStatus.BAD_REFERENCE,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.status = status
        super().__init__(message, location=location, hint=hint, source_line=source_line)


class ProfileNotFoundError(ProfileResolutionError):
    """The profile client has no secret or profile value with that name."""

    def __init__(self, message: str, location=None, source_line=None):
        super().__init__(
            message,
            status=ProfileStatus.NOT_FOUND,
            location=location,
            source_line=source_line,
        )


class ProfileUnavailableError(ProfileResolutionError):
    """The profile client cannot reach its backing store."""

    def __init__(self, message: str, location=None, source_line=None):
        super().__init__(
            message,
            status=ProfileStatus.UNAVAILABLE,
            location=location,
            source_line=source_line,
        )


# =============================================================================
# Caller Errors
# =============================================================================

class ReaderStateError(PreprocessError):
    """
    The reader cannot service the request in its current state.

    Raised when reading continues after a fatal error, or when an async
    read is started while another is still pending on the same reader.
    """
    pass


class InvalidArgumentError(PreprocessError, ValueError):
    """
    Invalid argument supplied by the caller.

    Examples:
        - Variable name with characters outside [A-Za-z0-9_.-]
        - Comment marker containing whitespace or letters
        - Negative tab stop or indent
    """
    pass
