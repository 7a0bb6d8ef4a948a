"""
Preprocessing Reader
====================

This module implements the line preprocessor: a streaming reader that
pulls raw lines from a line source and returns processed lines.

For each raw line the reader, in order:

1. Detects comment lines (first non-whitespace text is a comment marker)
   and strips them to "" or removes them entirely
2. Optionally removes blank lines
3. Executes statement lines (#define, #if, #switch, ...) and returns ""
   in their place
4. Returns "" for text suppressed by a conditional block
5. Expands variable references, TABs and indentation in all other lines

Statements and suppressed lines still produce an empty line so that line
numbers in the output match the input, unless blank lines are removed.

Example
-------
>>> from linepp.reader import PreprocessReader
>>> source = '''
... #define target=prod
... // comment
... #if $<target>==prod
... replicas: 3
... #else
... replicas: 1
... #endif
... '''
>>> reader = PreprocessReader(source)
>>> reader.remove_blank = True
>>> reader.remove_comments = True
>>> [line for line in reader if line]
['replicas: 3']

Thread Safety
-------------
Readers are not thread-safe. The async reader additionally refuses to
start a read while another read on the same instance is pending.
"""

import logging
import os
from typing import Any, AsyncIterator, Callable, Iterator, Optional

from linepp.errors import (
    ExpansionLimitExceededError,
    InvalidArgumentError,
    PreprocessError,
    ProfileResolutionError,
    ProfileStatus,
    ReaderStateError,
    SourceLocation,
    UnclosedConditionalError,
    UndefinedVariableError,
)
from linepp.frames import ConditionalKind, FrameStack
from linepp.options import (
    PreprocessOptions,
    validate_line_ending,
    validate_statement_marker,
    validate_variable_syntax,
    validate_width,
)
from linepp.profile import ProfileClient
from linepp.sources import open_async_source, open_source
from linepp.statements import StatementProcessor
from linepp.text import expand_tabs, indent_line, join_lines
from linepp.variables import (
    ReferenceKind,
    VariableTable,
    parse_reference,
)

logger = logging.getLogger(__name__)


# Maximum variable substitutions on a single line
MAX_EXPANSIONS = 128

# Marks a raw line that produces no output line
_SKIP = object()


class _OptionProperty:
    """Reader property backed by a PreprocessOptions field."""

    def __init__(self, field: str, validate: Optional[Callable[[Any], Any]] = None):
        self.field = field
        self.validate = validate

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return getattr(instance.options, self.field)

    def __set__(self, instance, value) -> None:
        if self.validate is not None:
            value = self.validate(value)
        setattr(instance.options, self.field, value)


class _ReaderBase:
    """
    State and line handling shared by the sync and async readers.

    Attributes:
        options: Processing configuration (also exposed as properties)
        filename: Name used in error locations
        profile_client: Optional secret/profile resolver
    """

    statement_marker = _OptionProperty("statement_marker", validate_statement_marker)
    variable_syntax = _OptionProperty("variable_syntax", validate_variable_syntax)
    expand_variables = _OptionProperty("expand_variables", bool)
    strip_comments = _OptionProperty("strip_comments", bool)
    remove_comments = _OptionProperty("remove_comments", bool)
    remove_blank = _OptionProperty("remove_blank", bool)
    process_statements = _OptionProperty("process_statements", bool)
    tab_stop = _OptionProperty("tab_stop", lambda v: validate_width("tab_stop", v))
    indent = _OptionProperty("indent", lambda v: validate_width("indent", v))
    default_variable = _OptionProperty("default_variable")
    default_environment_variable = _OptionProperty("default_environment_variable")
    line_ending = _OptionProperty("line_ending", validate_line_ending)

    def __init__(
        self,
        variables: Optional[dict] = None,
        *,
        options: Optional[PreprocessOptions] = None,
        profile_client: Optional[ProfileClient] = None,
        filename: str = "<input>",
    ):
        self.options = options if options is not None else PreprocessOptions()
        self.filename = filename
        self.profile_client = profile_client

        self._variables = VariableTable(variables)
        self._frames = FrameStack()
        self._line_number = 0
        self._current_line: Optional[str] = None
        self._failure: Optional[PreprocessError] = None
        self._finished = False

        self._statements = StatementProcessor(
            self._frames,
            self._variables,
            expand=self._expand_references,
            location=self._location,
        )

    # -------------------------------------------------------------------------
    # Variables and Configuration
    # -------------------------------------------------------------------------

    @property
    def variables(self) -> VariableTable:
        """The variable table."""
        return self._variables

    @property
    def comment_markers(self) -> tuple[str, ...]:
        """Registered comment markers."""
        return tuple(self.options.comment_markers)

    @property
    def line_number(self) -> int:
        """Number of raw lines pulled from the source so far."""
        return self._line_number

    @property
    def depth(self) -> int:
        """Number of currently open #if/#switch blocks."""
        return self._frames.depth

    @property
    def failed(self) -> bool:
        """True once a read has raised an error."""
        return self._failure is not None

    def set(self, name: str, value: Any = "") -> None:
        """
        Set a variable.

        Booleans are stored as 'true'/'false', None as '' and other
        objects through str().

        Raises:
            InvalidArgumentError: If the name has invalid characters
        """
        self._variables.set(name, value)

    def get(self, name: str) -> Optional[str]:
        """Return a variable value, or None if it is not defined."""
        return self._variables.get(name)

    def is_defined(self, name: str) -> bool:
        """Return True if the variable is defined."""
        return name in self._variables

    def add_comment_marker(self, marker: str) -> None:
        """Register an additional comment marker (punctuation only)."""
        self.options.add_comment_marker(marker)

    def clear_comment_markers(self) -> None:
        """Remove all comment markers, disabling comment detection."""
        self.options.clear_comment_markers()

    def set_yaml_mode(self) -> None:
        """Use '@' as the statement marker and '#' as the only comment marker."""
        self.options.yaml_mode()

    # -------------------------------------------------------------------------
    # Line Handling
    # -------------------------------------------------------------------------

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self._line_number)

    def _check_usable(self) -> None:
        if self._failure is not None:
            raise ReaderStateError(
                f"reader is unusable after an earlier error: {self._failure.message}",
                location=self._failure.location,
            )

    def _accept(self, raw: Optional[str]):
        """
        Process one raw line.

        Returns:
            The output line, _SKIP if the line produces no output, or
            None at end of input.
        """
        if raw is None:
            self._finish()
            return None

        self._line_number += 1
        self._current_line = raw
        options = self.options

        if self._is_comment(raw):
            if options.remove_comments or (options.strip_comments and options.remove_blank):
                return _SKIP
            return "" if options.strip_comments else raw

        if options.remove_blank and not raw.strip():
            return _SKIP

        if self._is_statement(raw):
            if not options.process_statements:
                return raw
            self._statements.process(raw, options.statement_marker)
            return ""

        if not self._frames.output_enabled:
            return ""

        return self._format(raw)

    def _finish(self) -> None:
        """Verify that every block was closed once input is exhausted."""
        if self._finished:
            return

        frame = self._frames.current
        if frame.kind is not ConditionalKind.NONE:
            raise UnclosedConditionalError(
                frame.kind.value,
                location=self._location(),
                opened_at=frame.opened_at,
            )

        self._finished = True
        logger.debug(f"{self.filename}: end of input after {self._line_number} lines")

    def _fail(self, error: PreprocessError) -> None:
        self._failure = error
        logger.debug(f"Preprocessing failed: {error.message}")

    def _is_comment(self, line: str) -> bool:
        markers = self.options.comment_markers
        if not markers:
            return False
        stripped = line.lstrip()
        return any(stripped.startswith(marker) for marker in markers)

    def _is_statement(self, line: str) -> bool:
        stripped = line.lstrip()
        return len(stripped) > 1 and stripped[0] == self.options.statement_marker

    # -------------------------------------------------------------------------
    # Variable Expansion
    # -------------------------------------------------------------------------

    def _format(self, line: str) -> str:
        """Expand variables, then TABs, then indent. Gated by expand_variables."""
        if not self.options.expand_variables:
            return line

        output = self._expand_references(line)

        if self.options.tab_stop > 0:
            output = expand_tabs(output, self.options.tab_stop)

        return indent_line(output, self.options.indent)

    def _expand_references(self, text: str) -> str:
        """
        Replace variable references until none remain.

        Each substitution restarts the search on the new text, so values
        may contain further references.

        Raises:
            ExpansionLimitExceededError: After MAX_EXPANSIONS substitutions
            UndefinedVariableError: For undefined variables without fallback
            ProfileResolutionError: For failed secret/profile lookups
        """
        syntax = self.options.variable_syntax
        output = text
        count = 0

        while True:
            match = syntax.search(output)
            if match is None:
                return output

            count += 1
            if count > MAX_EXPANSIONS:
                raise ExpansionLimitExceededError(
                    MAX_EXPANSIONS,
                    location=self._location(),
                    source_line=self._current_line,
                )

            value = self._resolve(match.group("name"), match.group(0))
            output = output[:match.start()] + value + output[match.end():]

    def _resolve(self, name: Optional[str], reference: str) -> str:
        """Return the value for one matched reference."""
        if name is None:
            raise InvalidArgumentError(
                f"variable syntax '{self.options.variable_syntax.name}' matched "
                f"'{reference}' without capturing a name",
                location=self._location(),
            )

        try:
            ref = parse_reference(name)

            if ref.kind is ReferenceKind.LOCAL:
                value = self._variables.get(ref.name)
                if value is None:
                    if self.options.default_variable is None:
                        raise UndefinedVariableError(
                            reference,
                            location=self._location(),
                            source_line=self._current_line,
                        )
                    value = self.options.default_variable
                return value

            if ref.kind is ReferenceKind.ENV:
                value = os.environ.get(ref.name)
                if value is None:
                    if self.options.default_environment_variable is None:
                        raise UndefinedVariableError(
                            reference,
                            environment=True,
                            location=self._location(),
                            source_line=self._current_line,
                        )
                    value = self.options.default_environment_variable
                return value

            client = self.profile_client
            if client is None:
                raise ProfileResolutionError(
                    f"cannot look up {ref.kind.value} [{ref.name}] because no profile client is available",
                    ProfileStatus.UNAVAILABLE,
                    hint="pass profile_client= to the reader",
                )

            if ref.kind is ReferenceKind.SECRET:
                logger.debug(
                    f"{self._location()}: resolving secret [{ref.name}] property "
                    f"[{ref.property}] source [{ref.source or 'default'}]"
                )
                return client.get_secret_value(ref.name, ref.property, ref.source)

            logger.debug(f"{self._location()}: resolving profile value [{ref.name}]")
            return client.get_profile_value(ref.name)

        except ProfileResolutionError as e:
            if e.location is not None:
                raise
            raise ProfileResolutionError(
                e.message,
                e.status,
                location=self._location(),
                hint=e.hint,
                source_line=self._current_line,
            ) from e


# =============================================================================
# Synchronous Reader
# =============================================================================

class PreprocessReader(_ReaderBase):
    """
    Streaming preprocessor over a synchronous line source.

    Args:
        source: Text, bytes, a text stream, an iterable of lines or any
                object with read_line()
        variables: Initial variables
        options: Processing configuration
        profile_client: Resolver for secret/profile references
        filename: Name used in error messages
    """

    def __init__(
        self,
        source,
        variables: Optional[dict] = None,
        *,
        options: Optional[PreprocessOptions] = None,
        profile_client: Optional[ProfileClient] = None,
        filename: str = "<input>",
    ):
        super().__init__(
            variables,
            options=options,
            profile_client=profile_client,
            filename=filename,
        )
        self._source = open_source(source)

    def read_line(self) -> Optional[str]:
        """
        Return the next processed line, or None at end of input.

        Raises:
            PreprocessError: Any preprocessing failure. The reader cannot
                be used afterwards.
        """
        self._check_usable()
        if self._finished:
            return None

        try:
            while True:
                result = self._accept(self._source.read_line())
                if result is not _SKIP:
                    return result
        except PreprocessError as e:
            self._fail(e)
            raise

    def next_line(self) -> tuple[str, bool]:
        """Return (line, has_more); has_more is False at end of input."""
        line = self.read_line()
        if line is None:
            return "", False
        return line, True

    def read_to_end(self) -> str:
        """Read every remaining line, each followed by the line ending."""
        return join_lines(self, self.options.line_ending)

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.read_line()
            if line is None:
                return
            yield line


# =============================================================================
# Asynchronous Reader
# =============================================================================

class AsyncPreprocessReader(_ReaderBase):
    """
    Streaming preprocessor over an asynchronous line source.

    Same behavior as PreprocessReader, but raw lines are awaited. Only one
    read may be in progress at a time.
    """

    def __init__(
        self,
        source,
        variables: Optional[dict] = None,
        *,
        options: Optional[PreprocessOptions] = None,
        profile_client: Optional[ProfileClient] = None,
        filename: str = "<input>",
    ):
        super().__init__(
            variables,
            options=options,
            profile_client=profile_client,
            filename=filename,
        )
        self._source = open_async_source(source)
        self._pending = False

    async def read_line(self) -> Optional[str]:
        """Return the next processed line, or None at end of input."""
        if self._pending:
            raise ReaderStateError("another read is already in progress on this reader")
        self._check_usable()
        if self._finished:
            return None

        self._pending = True
        try:
            while True:
                raw = await self._source.read_line()
                result = self._accept(raw)
                if result is not _SKIP:
                    return result
        except PreprocessError as e:
            self._fail(e)
            raise
        finally:
            self._pending = False

    async def next_line(self) -> tuple[str, bool]:
        """Return (line, has_more); has_more is False at end of input."""
        line = await self.read_line()
        if line is None:
            return "", False
        return line, True

    async def read_to_end(self) -> str:
        """Read every remaining line, each followed by the line ending."""
        return join_lines([line async for line in self], self.options.line_ending)

    def __aiter__(self) -> AsyncIterator[str]:
        return self

    async def __anext__(self) -> str:
        line = await self.read_line()
        if line is None:
            raise StopAsyncIteration
        return line


# =============================================================================
# Convenience Function
# =============================================================================

def preprocess(
    text: str,
    variables: Optional[dict] = None,
    profile_client: Optional[ProfileClient] = None,
    filename: str = "<input>",
    **options,
) -> str:
    """
    Preprocess text in one call.

    Args:
        text: Input text
        variables: Initial variables
        profile_client: Resolver for secret/profile references
        filename: Name used in error messages
        **options: PreprocessOptions fields (e.g. remove_blank=True)

    Returns:
        The processed text, every line followed by the configured ending
    """
    reader = PreprocessReader(
        text,
        variables,
        options=PreprocessOptions(**options),
        profile_client=profile_client,
        filename=filename,
    )
    return reader.read_to_end()
