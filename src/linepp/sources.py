"""
Line Sources
============

The preprocessor pulls raw lines one at a time from a line source and
never buffers the whole input. A line source is any object with a
`read_line()` method returning the next line without its terminator, or
None at end of input. Async readers use `async read_line()` instead.

open_source() adapts the common inputs:

    str                  text held in memory
    bytes                UTF-8 encoded text
    text stream          anything with readline() (open files, io.StringIO)
    iterable of str      lists, generators, ...
    line source          returned unchanged
"""

import inspect
import io
from typing import AsyncIterable, Iterable, Iterator, Optional, Protocol, runtime_checkable


@runtime_checkable
class LineSource(Protocol):
    """Synchronous line source contract."""

    def read_line(self) -> Optional[str]:
        """Return the next line without its terminator, or None at end."""
        ...


@runtime_checkable
class AsyncLineSource(Protocol):
    """Asynchronous line source contract."""

    async def read_line(self) -> Optional[str]:
        """Return the next line without its terminator, or None at end."""
        ...


def strip_terminator(line: str) -> str:
    """Remove one trailing '\\n', '\\r\\n' or '\\r'."""
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n") or line.endswith("\r"):
        return line[:-1]
    return line


class TextIOLineSource:
    """Line source over a text stream with a readline() method."""

    def __init__(self, stream):
        self.stream = stream

    def read_line(self) -> Optional[str]:
        line = self.stream.readline()
        if not line:
            return None
        return strip_terminator(line)


class StringLineSource(TextIOLineSource):
    """Line source over an in-memory string."""

    def __init__(self, text: str):
        super().__init__(io.StringIO(text, newline=""))

    @classmethod
    def from_bytes(cls, data: bytes, encoding: str = "utf-8") -> "StringLineSource":
        """Decode `data` and read lines from the result."""
        return cls(data.decode(encoding))


class IterableLineSource:
    """Line source over an iterable of strings (terminators are optional)."""

    def __init__(self, lines: Iterable[str]):
        self._lines: Iterator[str] = iter(lines)

    def read_line(self) -> Optional[str]:
        line = next(self._lines, None)
        if line is None:
            return None
        return strip_terminator(line)


class AsyncIterableLineSource:
    """Async line source over an async iterable of strings."""

    def __init__(self, lines: AsyncIterable[str]):
        self._lines = lines.__aiter__()

    async def read_line(self) -> Optional[str]:
        try:
            line = await self._lines.__anext__()
        except StopAsyncIteration:
            return None
        return strip_terminator(line)


class SyncToAsyncLineSource:
    """Present a synchronous line source through the async contract."""

    def __init__(self, source: LineSource):
        self.source = source

    async def read_line(self) -> Optional[str]:
        return self.source.read_line()


def open_source(source) -> LineSource:
    """
    Adapt `source` to the LineSource contract.

    Raises:
        TypeError: If the object cannot supply lines
    """
    if isinstance(source, str):
        return StringLineSource(source)
    if isinstance(source, (bytes, bytearray)):
        return StringLineSource.from_bytes(bytes(source))
    if isinstance(source, LineSource):
        return source
    if hasattr(source, "readline"):
        return TextIOLineSource(source)
    if isinstance(source, Iterable):
        return IterableLineSource(source)
    raise TypeError(f"cannot read lines from {type(source).__name__}")


def open_async_source(source) -> AsyncLineSource:
    """
    Adapt `source` to the AsyncLineSource contract.

    Async iterables and async line sources are used directly; anything
    open_source() accepts is wrapped.
    """
    read_line = getattr(source, "read_line", None)
    if read_line is not None and inspect.iscoroutinefunction(read_line):
        return source
    if hasattr(source, "__aiter__"):
        return AsyncIterableLineSource(source)
    return SyncToAsyncLineSource(open_source(source))
