"""
linepp - Line-Oriented Text Preprocessor
========================================

This package preprocesses text line by line while it is being read:
comment lines are stripped, variables are expanded and simple
conditional blocks decide which lines are kept.

Main Components
---------------
- **reader**: PreprocessReader / AsyncPreprocessReader
    Streaming readers that wrap a line source and return processed lines

- **statements**: #define, #if/#else/#endif, #switch/#case/#default/#endswitch

- **variables**: Variable table and the $<name>, ${name}, $(name) syntaxes

- **profile**: Optional resolver for $<secret:...> and $<profile:...> references

Quick Start
-----------
    >>> from linepp import PreprocessReader
    >>> reader = PreprocessReader("#define who=world\\nhello $<who>\\n")
    >>> reader.read_line(), reader.read_line()
    ('', 'hello world')

Or from the command line:
    $ lpp -D env=prod deploy.yaml.in -o deploy.yaml
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from linepp.reader import (
    MAX_EXPANSIONS,
    AsyncPreprocessReader,
    PreprocessReader,
    preprocess,
)
from linepp.options import LineEnding, PreprocessOptions
from linepp.variables import (
    ANGLE,
    CURLY,
    PAREN,
    VariableSyntax,
    VariableTable,
)
from linepp.profile import DictProfileClient, ProfileClient
from linepp.errors import (
    PreprocessError,
    SourceLocation,
    StatementError,
    MalformedStatementError,
    UnknownStatementError,
    NestingError,
    ElseWithoutIfError,
    EndifWithoutIfError,
    CaseWithoutSwitchError,
    DefaultWithoutSwitchError,
    EndswitchWithoutSwitchError,
    CaseAfterDefaultError,
    DuplicateCaseError,
    UnclosedConditionalError,
    ExpansionError,
    UndefinedVariableError,
    ExpansionLimitExceededError,
    ProfileStatus,
    ProfileResolutionError,
    ProfileNotFoundError,
    ProfileUnavailableError,
    ReaderStateError,
    InvalidArgumentError,
)

__all__ = [
    "__version__",
    # Readers
    "PreprocessReader",
    "AsyncPreprocessReader",
    "preprocess",
    "MAX_EXPANSIONS",
    # Configuration
    "PreprocessOptions",
    "LineEnding",
    # Variables
    "VariableTable",
    "VariableSyntax",
    "ANGLE",
    "CURLY",
    "PAREN",
    # Secrets and profile values
    "ProfileClient",
    "DictProfileClient",
    # Exception hierarchy
    "PreprocessError",
    "SourceLocation",
    "StatementError",
    "MalformedStatementError",
    "UnknownStatementError",
    "NestingError",
    "ElseWithoutIfError",
    "EndifWithoutIfError",
    "CaseWithoutSwitchError",
    "DefaultWithoutSwitchError",
    "EndswitchWithoutSwitchError",
    "CaseAfterDefaultError",
    "DuplicateCaseError",
    "UnclosedConditionalError",
    "ExpansionError",
    "UndefinedVariableError",
    "ExpansionLimitExceededError",
    "ProfileStatus",
    "ProfileResolutionError",
    "ProfileNotFoundError",
    "ProfileUnavailableError",
    "ReaderStateError",
    "InvalidArgumentError",
]
