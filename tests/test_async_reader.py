"""
Tests for AsyncPreprocessReader.

The async reader shares its line handling with PreprocessReader, so these
tests focus on the async sources, the async read API and the guard
against overlapping reads.
"""

import asyncio

import pytest

from linepp import AsyncPreprocessReader, LineEnding, PreprocessOptions
from linepp.errors import (
    ReaderStateError,
    UnclosedConditionalError,
    UndefinedVariableError,
)


async def agen(*lines):
    for line in lines:
        await asyncio.sleep(0)
        yield line


class GatedSource:
    """Async line source whose reads block until the gate opens."""

    def __init__(self, lines):
        self.lines = list(lines)
        self.gate = asyncio.Event()

    async def read_line(self):
        await self.gate.wait()
        if not self.lines:
            return None
        return self.lines.pop(0)


# =============================================================================
# Sources
# =============================================================================

class TestAsyncSources:
    """Tests for the inputs the async reader accepts."""

    @pytest.mark.asyncio
    async def test_string_source(self):
        """Plain strings are wrapped as async sources."""
        reader = AsyncPreprocessReader("#define x=1\n$<x>\n")
        assert await reader.read_line() == ""
        assert await reader.read_line() == "1"
        assert await reader.read_line() is None

    @pytest.mark.asyncio
    async def test_async_iterable_source(self):
        """Async generators can supply lines."""
        reader = AsyncPreprocessReader(agen("a\n", "// c\n", "b\r\n"))
        assert [line async for line in reader] == ["a", "", "b"]

    @pytest.mark.asyncio
    async def test_async_line_source(self):
        """Objects with an async read_line() are used directly."""
        source = GatedSource(["x", "y"])
        source.gate.set()
        reader = AsyncPreprocessReader(source)
        assert [line async for line in reader] == ["x", "y"]


# =============================================================================
# Read API
# =============================================================================

class TestAsyncReadApi:
    """Tests for the async read entry points."""

    @pytest.mark.asyncio
    async def test_conditionals(self):
        """Conditional blocks behave as in the sync reader."""
        text = "#define X=A\n#if $<X>==A\nline1\n#else\nline2\n#endif"
        lines = [line async for line in AsyncPreprocessReader(text)]
        assert "line1" in lines
        assert "line2" not in lines

    @pytest.mark.asyncio
    async def test_next_line(self):
        """next_line returns (line, has_more)."""
        reader = AsyncPreprocessReader("only")
        assert await reader.next_line() == ("only", True)
        assert await reader.next_line() == ("", False)

    @pytest.mark.asyncio
    async def test_read_to_end(self):
        """read_to_end joins the remaining lines."""
        options = PreprocessOptions(line_ending=LineEnding.LF, remove_blank=True)
        reader = AsyncPreprocessReader(agen("a", "", "$<v>"), {"v": "b"}, options=options)
        assert await reader.read_to_end() == "a\nb\n"

    @pytest.mark.asyncio
    async def test_unclosed_block(self):
        """Unclosed blocks are reported at the end of input."""
        reader = AsyncPreprocessReader("#switch a\n#case a")
        with pytest.raises(UnclosedConditionalError):
            await reader.read_to_end()


# =============================================================================
# Reader State
# =============================================================================

class TestAsyncReaderState:
    """Tests for failure and re-entrancy handling."""

    @pytest.mark.asyncio
    async def test_overlapping_read_rejected(self):
        """A second read while one is pending raises ReaderStateError."""
        source = GatedSource(["a"])
        reader = AsyncPreprocessReader(source)

        first = asyncio.create_task(reader.read_line())
        await asyncio.sleep(0)

        with pytest.raises(ReaderStateError):
            await reader.read_line()

        source.gate.set()
        assert await first == "a"
        assert not reader.failed
        assert await reader.read_line() is None

    @pytest.mark.asyncio
    async def test_unusable_after_error(self):
        """After an error every read raises ReaderStateError."""
        reader = AsyncPreprocessReader("$<missing>\nnext")
        with pytest.raises(UndefinedVariableError):
            await reader.read_line()
        with pytest.raises(ReaderStateError):
            await reader.read_line()
