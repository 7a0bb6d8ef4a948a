"""
Text Formatting Helpers
=======================

Small helpers applied to lines after variable expansion:

- expand_tabs: TAB to space conversion on column stops (and the reverse)
- indent_line: left padding that leaves blank lines alone
- join_lines: assemble processed lines with a chosen line ending

Tab Expansion
-------------
Columns count the characters already emitted on the current line, so a
leading marker such as a list bullet keeps its width and the TAB after it
only pads up to the next stop:

    >>> expand_tabs("-\\ttext")
    '-   text'
    >>> expand_tabs("---\\ttext")
    '--- text'
    >>> expand_tabs("1\\t2\\t3")
    '1   2   3'
"""

from typing import Iterable

from linepp.options import LineEnding


def expand_tabs(text: str, tab_stop: int = 4) -> str:
    """
    Convert TAB characters into spaces aligned on tab stops.

    Args:
        text: Input text, possibly spanning several lines
        tab_stop: Positive: expand TABs to this column width.
                  Zero: return the text unchanged.
                  Negative: convert leading runs of abs(tab_stop) spaces
                  into TABs.

    Returns:
        The converted text. Line terminators are preserved.
    """
    if tab_stop == 0 or not text:
        return text

    if tab_stop < 0:
        return _compress_leading_spaces(text, -tab_stop)

    if "\t" not in text:
        return text

    out = []
    column = 0

    for ch in text:
        if ch == "\t":
            pad = tab_stop - (column % tab_stop)
            out.append(" " * pad)
            column += pad
        elif ch in "\r\n":
            out.append(ch)
            column = 0
        else:
            out.append(ch)
            column += 1

    return "".join(out)


def _compress_leading_spaces(text: str, width: int) -> str:
    """Replace each leading run of `width` spaces with a TAB, line by line."""
    result = []

    for line in text.splitlines(keepends=True):
        stripped = line.lstrip(" ")
        leading = len(line) - len(stripped)
        tabs, spaces = divmod(leading, width)
        result.append("\t" * tabs + " " * spaces + stripped)

    return "".join(result)


def indent_line(text: str, width: int) -> str:
    """Prefix `width` spaces unless the line is empty or whitespace only."""
    if width <= 0 or not text.strip():
        return text
    return " " * width + text


def join_lines(lines: Iterable[str], line_ending: LineEnding = LineEnding.PLATFORM) -> str:
    """Join lines, terminating every one of them with the chosen ending."""
    terminator = line_ending.terminator
    return "".join(f"{line}{terminator}" for line in lines)
