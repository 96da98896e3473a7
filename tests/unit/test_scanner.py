"""Tests for the character scanner."""

from __future__ import annotations

import io

import pytest

from geoffload.geoff.errors import UnexpectedCharacterError, UnexpectedEndOfInputError
from geoffload.geoff.scanner import Scanner


class TestScannerBasics:
    """Peek, read and end-of-input behaviour."""

    def test_peek_does_not_consume(self) -> None:
        """Repeated peeks return the same character."""
        scanner = Scanner("ab")
        assert scanner.peek() == "a"
        assert scanner.peek() == "a"
        assert scanner.read() == "a"
        assert scanner.peek() == "b"

    def test_peek_at_end_returns_none(self) -> None:
        """peek() returns None once input is exhausted."""
        scanner = Scanner("x")
        scanner.read()
        assert scanner.peek() is None
        assert not scanner.has_more()

    def test_read_at_end_raises(self) -> None:
        """read() past the end raises UnexpectedEndOfInputError."""
        scanner = Scanner("")
        with pytest.raises(UnexpectedEndOfInputError):
            scanner.read()

    def test_reads_from_stream(self) -> None:
        """A text stream works the same as a string."""
        scanner = Scanner(io.StringIO("hi"))
        assert scanner.read() + scanner.read() == "hi"
        assert not scanner.has_more()

    def test_next_is(self) -> None:
        """next_is checks the lookahead against several characters."""
        scanner = Scanner("-")
        assert scanner.next_is("<", "-")
        assert not scanner.next_is("(")


class TestScannerReadExact:
    """read_exact success and failure."""

    def test_matching_character(self) -> None:
        scanner = Scanner("(")
        assert scanner.read_exact("(") == "("

    def test_mismatch_raises_unexpected_character(self) -> None:
        """A different character raises and is not consumed."""
        scanner = Scanner("[")
        with pytest.raises(UnexpectedCharacterError):
            scanner.read_exact("(")
        assert scanner.peek() == "["

    def test_end_of_input_raises(self) -> None:
        scanner = Scanner("")
        with pytest.raises(UnexpectedEndOfInputError):
            scanner.read_exact("(")


class TestScannerReadUntil:
    """read_until and read_until_text."""

    def test_read_until_includes_terminator(self) -> None:
        scanner = Scanner('abc"rest')
        assert scanner.read_until('"') == 'abc"'
        assert scanner.peek() == "r"

    def test_read_until_stops_at_end(self) -> None:
        """Without a terminator the rest of the input is returned."""
        scanner = Scanner("abc")
        assert scanner.read_until('"') == "abc"
        assert not scanner.has_more()

    def test_read_until_text(self) -> None:
        """Stops right after the multi-character terminator."""
        scanner = Scanner("a * b */ tail")
        assert scanner.read_until_text("*/") == "a * b */"
        assert scanner.peek() == " "

    def test_read_whitespace(self) -> None:
        scanner = Scanner(" \n\t x")
        assert scanner.read_whitespace() == " \n\t "
        assert scanner.peek() == "x"


class TestScannerPosition:
    """Line and column tracking used in error messages."""

    def test_tracks_lines_and_columns(self) -> None:
        scanner = Scanner("ab\ncd")
        for _ in range(4):
            scanner.read()
        assert scanner.line == 2
        assert scanner.column == 2

    def test_error_reports_position(self) -> None:
        """Errors carry the position of the offending character."""
        scanner = Scanner("\n  x")
        scanner.read_whitespace()
        with pytest.raises(UnexpectedCharacterError) as exc_info:
            scanner.read_exact("(")
        assert exc_info.value.line == 2
        assert exc_info.value.column == 3
        assert "line 2, column 3" in str(exc_info.value)
