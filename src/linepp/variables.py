"""
Variables and Variable References
=================================

This module holds the variable table used by the preprocessor and the
pluggable syntax used to find variable references in text.

Reference Syntax
----------------
Three reference styles are available, one active at a time:

    ANGLE   $<name>     (default)
    CURLY   ${name}
    PAREN   $(name)

The referenced name may carry a namespace prefix:

    $<name>                          variable table
    $<env:NAME>                      process environment
    $<profile:NAME>                  profile value
    $<secret:NAME>                   'password' property of a secret
    $<secret:NAME[PROPERTY]>         specific secret property
    $<secret:NAME[PROPERTY]:SOURCE>  secret from a specific source

Variable names are case sensitive and limited to letters, digits, dash,
period and underscore.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Optional

from linepp.errors import InvalidArgumentError, ProfileResolutionError, ProfileStatus


# Valid variable names for #define and set()
VARIABLE_NAME_PATTERN = re.compile(r'^[A-Za-z0-9_.\-]+$')

# Characters allowed inside a reference, after the optional prefix
_REFERENCE_BODY = r'(?:env:|secret:|profile:)?[a-z0-9_:.\-\[\]]+'

# Default secret property returned when none is selected
DEFAULT_SECRET_PROPERTY = "password"

_SECRET_NAME_PATTERN = re.compile(r'^(?P<name>[^\[\]]+)(?:\[(?P<property>[^\[\]]+)\])?$')


def is_valid_name(name: str) -> bool:
    """Return True if `name` is a legal variable name."""
    return isinstance(name, str) and VARIABLE_NAME_PATTERN.match(name) is not None


def to_variable_value(value: Any) -> str:
    """
    Convert a Python value into its variable string form.

    None becomes the empty string and booleans become lowercase
    'true'/'false'; everything else goes through str().
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# =============================================================================
# Variable Reference Syntax
# =============================================================================

class VariableSyntax:
    """
    Strategy for locating variable references in a line.

    A syntax wraps a compiled regular expression that must define a
    named group called 'name' capturing the referenced name.

    Attributes:
        name: Short identifier ('angle', 'curly', 'paren' or custom)
        pattern: Compiled regular expression
    """

    def __init__(self, name: str, pattern):
        if isinstance(pattern, str):
            pattern = re.compile(pattern, re.IGNORECASE)
        if "name" not in pattern.groupindex:
            raise InvalidArgumentError(
                f"variable syntax '{name}' does not define the [name] pattern group: {pattern.pattern}"
            )
        self.name = name
        self.pattern = pattern

    def search(self, text: str) -> Optional[re.Match]:
        """Return the first reference in `text`, or None."""
        return self.pattern.search(text)

    @classmethod
    def from_name(cls, name: str) -> "VariableSyntax":
        """Look up a built-in syntax by name ('angle', 'curly' or 'paren')."""
        try:
            return BUILTIN_SYNTAXES[name.lower()]
        except KeyError:
            valid = ", ".join(BUILTIN_SYNTAXES)
            raise InvalidArgumentError(f"unknown variable syntax '{name}' (valid: {valid})") from None

    def __repr__(self) -> str:
        return f"VariableSyntax({self.name!r}, {self.pattern.pattern!r})"


ANGLE = VariableSyntax("angle", rf'\$<(?P<name>{_REFERENCE_BODY})>')
CURLY = VariableSyntax("curly", rf'\$\{{(?P<name>{_REFERENCE_BODY})\}}')
PAREN = VariableSyntax("paren", rf'\$\((?P<name>{_REFERENCE_BODY})\)')

BUILTIN_SYNTAXES = {
    "angle": ANGLE,
    "curly": CURLY,
    "paren": PAREN,
}


# =============================================================================
# Reference Classification
# =============================================================================

class ReferenceKind(Enum):
    """Namespace a variable reference resolves against."""
    LOCAL = "local"
    ENV = "env"
    SECRET = "secret"
    PROFILE = "profile"


@dataclass(frozen=True)
class VariableReference:
    """
    A parsed variable reference.

    Attributes:
        kind: Namespace to resolve against
        name: Variable, environment, secret or profile name
        property: Secret property (secrets only)
        source: Secret source such as a vault (secrets only, optional)
    """
    kind: ReferenceKind
    name: str
    property: Optional[str] = None
    source: Optional[str] = None


def parse_reference(text: str) -> VariableReference:
    """
    Classify the name captured by a VariableSyntax match.

    Args:
        text: The captured name, e.g. 'env:HOME' or 'secret:db[username]'

    Returns:
        The parsed reference

    Raises:
        ProfileResolutionError: For a malformed secret/profile reference
    """
    if text.startswith("profile:") or text.startswith("secret:"):
        fields = [f for f in text.split(":") if f]

        if len(fields) < 2:
            raise ProfileResolutionError(
                f"[{text}] is not a valid profile reference: both [type] and [name] are required",
                ProfileStatus.BAD_REFERENCE,
            )
        if len(fields) > 3:
            raise ProfileResolutionError(
                f"[{text}] is not a valid profile reference: too many fields",
                ProfileStatus.BAD_REFERENCE,
            )

        source = fields[2] if len(fields) == 3 else None

        if fields[0] == "profile":
            return VariableReference(ReferenceKind.PROFILE, fields[1])

        match = _SECRET_NAME_PATTERN.match(fields[1])
        if not match:
            raise ProfileResolutionError(
                f"[{text}] is not a valid secret reference",
                ProfileStatus.BAD_REFERENCE,
                hint="use NAME, NAME[PROPERTY] or NAME[PROPERTY]:SOURCE",
            )

        return VariableReference(
            ReferenceKind.SECRET,
            match.group("name"),
            property=match.group("property") or DEFAULT_SECRET_PROPERTY,
            source=source,
        )

    if text.startswith("env:"):
        return VariableReference(ReferenceKind.ENV, text[len("env:"):])

    return VariableReference(ReferenceKind.LOCAL, text)


# =============================================================================
# Variable Table
# =============================================================================

class VariableTable:
    """
    Case-sensitive mapping of variable names to string values.

    Values are always stored as strings (see to_variable_value). The
    table is seeded by the caller, updated by #define statements and
    set(), and never cleared implicitly.

    Example:
        >>> table = VariableTable({"region": "west"})
        >>> table.set("debug", True)
        >>> table.get("debug")
        'true'
    """

    def __init__(self, initial: Optional[dict] = None):
        self._values: dict[str, str] = {}
        if initial:
            for name, value in initial.items():
                self.set(name, value)

    def set(self, name: str, value: Any = "") -> None:
        """
        Set a variable, replacing any previous value.

        Raises:
            InvalidArgumentError: If the name has invalid characters
        """
        if not is_valid_name(name):
            raise InvalidArgumentError(
                f"invalid variable name {name!r}: only letters, digits, '-', '.' and '_' are allowed"
            )
        self._values[name] = to_variable_value(value)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return the value of `name`, or `default` when undefined."""
        return self._values.get(name, default)

    def remove(self, name: str) -> bool:
        """Remove a variable. Returns True if it was defined."""
        return self._values.pop(name, None) is not None

    def as_dict(self) -> dict[str, str]:
        """Return a copy of the table contents."""
        return dict(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __getitem__(self, name: str) -> str:
        return self._values[name]

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)
