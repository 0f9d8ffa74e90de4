"""Sequential line source for UP documents."""

from __future__ import annotations

import io
from pathlib import Path
from types import TracebackType
from typing import Iterable, Iterator, Optional, Type

LINE_END = "\n"


class LineScanner:
    """Hand out lines one at a time and count how many were consumed.

    Only ``\\n`` ends a line; a ``\\r`` right before it is dropped as well.
    Other characters Python treats as line boundaries (form feed, ``\\u2028``
    and friends) stay part of the line. Reaching the end of input is not an
    error: :meth:`next_line` simply returns ``None``.
    """

    def __init__(self, stream: Iterable[str]) -> None:
        self._stream = stream
        self._lines = iter(stream)
        self.line_number = 0
        self.current_line: Optional[str] = None

    @classmethod
    def from_text(cls, text: str) -> "LineScanner":
        return cls(io.StringIO(text, newline=LINE_END))

    @classmethod
    def open(cls, path: Path, *, encoding: str = "utf-8") -> "LineScanner":
        """Open ``path`` for reading; close it with :meth:`close` or ``with``."""

        return cls(path.open("r", encoding=encoding, newline=LINE_END))

    def next_line(self) -> Optional[str]:
        """Return the next line, or ``None`` once the input is exhausted."""

        raw = next(self._lines, None)
        if raw is None:
            self.current_line = None
            return None
        self.line_number += 1
        self.current_line = _strip_terminator(raw)
        return self.current_line

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.next_line()
            if line is None:
                return
            yield line

    def close(self) -> None:
        close = getattr(self._stream, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> "LineScanner":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()


def _strip_terminator(line: str) -> str:
    if line.endswith(LINE_END):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


__all__ = ["LineScanner"]
