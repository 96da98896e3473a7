"""Character scanner with a single character of lookahead.

All grammar layers consume input through a Scanner. It reads one character
at a time from a string or text stream and buffers at most one peeked
character, so no parser above it can rewind further than that.
"""

from __future__ import annotations

import io
from typing import TextIO

from geoffload.geoff.errors import UnexpectedCharacterError, UnexpectedEndOfInputError


class Scanner:
    """Streaming reader over Geoff text.

    Attributes:
        line: Line number of the next unread character (1-based).
        column: Column number of the next unread character (1-based).
    """

    def __init__(self, source: str | TextIO) -> None:
        self._stream: TextIO = io.StringIO(source) if isinstance(source, str) else source
        self._peeked: str | None = None
        self._exhausted = False
        self.line = 1
        self.column = 1

    def _pull(self) -> None:
        if self._peeked is None and not self._exhausted:
            ch = self._stream.read(1)
            if ch:
                self._peeked = ch
            else:
                self._exhausted = True

    def peek(self) -> str | None:
        """Return the next character without consuming it, or None at end."""
        self._pull()
        return self._peeked

    def has_more(self) -> bool:
        return self.peek() is not None

    def next_is(self, *chars: str) -> bool:
        """Check whether the next character is one of *chars*."""
        ch = self.peek()
        return ch is not None and ch in chars

    def read(self) -> str:
        """Consume and return the next character.

        Raises:
            UnexpectedEndOfInputError: If no characters remain.
        """
        ch = self.peek()
        if ch is None:
            raise self.end_of_input()
        self._peeked = None
        if ch == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def read_exact(self, expected: str) -> str:
        """Consume *expected*, failing if the next character differs."""
        ch = self.peek()
        if ch is None:
            raise self.end_of_input(f"Expected {expected!r} but input ended")
        if ch != expected:
            raise self.unexpected(f"Expected {expected!r}")
        return self.read()

    def read_until(self, terminator: str) -> str:
        """Consume characters up to and including *terminator*.

        Stops quietly at end of input if the terminator never appears, so
        callers that need the terminator must check the result themselves.
        """
        chars: list[str] = []
        while self.has_more():
            ch = self.read()
            chars.append(ch)
            if ch == terminator:
                break
        return "".join(chars)

    def read_until_text(self, terminator: str) -> str:
        """Consume characters until the accumulated text ends with *terminator*."""
        buffer = ""
        last = terminator[-1]
        while self.has_more() and not buffer.endswith(terminator):
            buffer += self.read_until(last)
        return buffer

    def read_whitespace(self) -> str:
        chars: list[str] = []
        while self.has_more() and self.peek().isspace():  # type: ignore[union-attr]
            chars.append(self.read())
        return "".join(chars)

    # -- Error helpers ---------------------------------------------------------

    def unexpected(self, message: str = "") -> UnexpectedCharacterError:
        """Build an UnexpectedCharacterError for the current lookahead."""
        ch = self.peek()
        found = "end of input" if ch is None else repr(ch)
        text = f"{message}, found {found}" if message else f"Unexpected character {found}"
        return UnexpectedCharacterError(text, self.line, self.column)

    def end_of_input(self, message: str = "Unexpected end of input") -> UnexpectedEndOfInputError:
        return UnexpectedEndOfInputError(message, self.line, self.column)
