"""Geoff notation reader.

Turns Geoff text into a Subgraph: a scanner with one character of lookahead,
a JSON-like literal parser, and the entity grammar on top of both.
"""

from geoffload.geoff.errors import (
    GeoffReaderError,
    InvalidBooleanLiteralError,
    InvalidNumberLiteralError,
    InvalidStringLiteralError,
    MixedArrayTypeError,
    UndirectedRelationshipError,
    UnexpectedCharacterError,
    UnexpectedEndOfInputError,
)
from geoffload.geoff.reader import GeoffReader, parse_geoff
from geoffload.geoff.scanner import Scanner

__all__ = [
    "GeoffReader",
    "GeoffReaderError",
    "InvalidBooleanLiteralError",
    "InvalidNumberLiteralError",
    "InvalidStringLiteralError",
    "MixedArrayTypeError",
    "Scanner",
    "UndirectedRelationshipError",
    "UnexpectedCharacterError",
    "UnexpectedEndOfInputError",
    "parse_geoff",
]
