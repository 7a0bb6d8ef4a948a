"""
Conditional Frames
==================

Nested #if and #switch blocks are tracked with an explicit stack of
frames rather than recursion, so nesting depth is unbounded and the
current state is easy to inspect.

The stack always holds a base frame (kind NONE, output enabled) that is
never popped. Each #if/#switch pushes one frame and each matching
#endif/#endswitch pops it again.

A frame's output is always scoped by the frame that encloses it: once a
block is suppressed, nothing inside it (including #else, #case and
#default branches) can turn output back on.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional


class ConditionalKind(Enum):
    """Kind of block a frame represents."""
    NONE = "none"
    IF = "if"
    SWITCH = "switch"


@dataclass
class ConditionalFrame:
    """
    One level of #if/#switch nesting.

    Attributes:
        kind: Block kind (NONE only for the base frame)
        output_enabled: Whether lines at this level are emitted
        parent_enabled: Output state of the enclosing frame when pushed
        switch_value: Expanded #switch subject (switch frames only)
        switch_matched: A #case has matched the switch value
        switch_default_seen: A #default branch was taken
        opened_at: Line number of the opening statement
    """
    kind: ConditionalKind
    output_enabled: bool
    parent_enabled: bool = True
    switch_value: Optional[str] = None
    switch_matched: bool = False
    switch_default_seen: bool = False
    opened_at: Optional[int] = None

    def flip(self) -> None:
        """Switch to the #else branch of an #if."""
        self.output_enabled = self.parent_enabled and not self.output_enabled

    def enter_case(self, matches: bool) -> None:
        """Start a #case branch; `matches` is the comparison result."""
        if matches:
            self.switch_matched = True
        self.output_enabled = self.parent_enabled and matches

    def enter_default(self) -> None:
        """
        Start the #default branch, taken only when no #case matched.

        Only a taken #default closes the switch to further #case lines.
        """
        if not self.switch_matched:
            self.switch_default_seen = True
        self.output_enabled = self.parent_enabled and not self.switch_matched


class FrameStack:
    """
    Stack of conditional frames with a permanent base frame.

    Example:
        >>> stack = FrameStack()
        >>> stack.push_if(False, line=3)
        >>> stack.output_enabled
        False
        >>> stack.pop().kind
        <ConditionalKind.IF: 'if'>
        >>> stack.output_enabled
        True
    """

    def __init__(self):
        self._frames: list[ConditionalFrame] = [
            ConditionalFrame(ConditionalKind.NONE, output_enabled=True)
        ]

    @property
    def current(self) -> ConditionalFrame:
        """The innermost frame."""
        return self._frames[-1]

    @property
    def output_enabled(self) -> bool:
        """Whether lines at the current nesting level are emitted."""
        return self._frames[-1].output_enabled

    @property
    def depth(self) -> int:
        """Number of open blocks (the base frame is not counted)."""
        return len(self._frames) - 1

    def push_if(self, condition: bool, line: Optional[int] = None) -> None:
        """Open an #if block."""
        parent = self.output_enabled
        self._frames.append(
            ConditionalFrame(
                ConditionalKind.IF,
                output_enabled=parent and condition,
                parent_enabled=parent,
                opened_at=line,
            )
        )

    def push_switch(self, value: str, line: Optional[int] = None) -> None:
        """Open a #switch block; output stays off until a branch is taken."""
        self._frames.append(
            ConditionalFrame(
                ConditionalKind.SWITCH,
                output_enabled=False,
                parent_enabled=self.output_enabled,
                switch_value=value,
                opened_at=line,
            )
        )

    def pop(self) -> ConditionalFrame:
        """Close the innermost block and return its frame."""
        if len(self._frames) == 1:
            raise RuntimeError("the base conditional frame cannot be popped")
        return self._frames.pop()

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[ConditionalFrame]:
        return iter(self._frames)
