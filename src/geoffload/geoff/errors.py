"""Geoff reader error types.

Every error carries the scanner position (1-based line and column) at which
the problem was detected. Parse errors are fatal to the current read: the
reader never resynchronises, and the partially built subgraph is discarded.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class GeoffReaderError(Exception):
    """Base class for all Geoff parse failures.

    Attributes:
        message: Human-readable description of the failure.
        line: Line of the offending character (1-based).
        column: Column of the offending character (1-based).
    """

    message: str
    line: int = 0
    column: int = 0

    def __post_init__(self) -> None:
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.line:
            return f"{self.message} at line {self.line}, column {self.column}"
        return self.message

    def __str__(self) -> str:
        return self._format_message()


class UnexpectedEndOfInputError(GeoffReaderError):
    """Raised when input runs out in the middle of a construct."""


class UnexpectedCharacterError(GeoffReaderError):
    """Raised when the next character does not fit the grammar."""


class InvalidStringLiteralError(GeoffReaderError):
    """Raised when a quoted string cannot be unescaped."""


class InvalidNumberLiteralError(GeoffReaderError):
    """Raised for malformed or out-of-range numbers."""


class InvalidBooleanLiteralError(GeoffReaderError):
    """Raised when a literal starting with ``t`` or ``f`` is not a boolean."""


class MixedArrayTypeError(GeoffReaderError):
    """Raised when array elements are of incompatible kinds."""


class UndirectedRelationshipError(GeoffReaderError):
    """Raised for a relationship box with no arrow head on either side."""
