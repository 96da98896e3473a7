"""JSON-like literal parsing over a Scanner.

Handles strings, integers, reals, booleans, null and homogeneous arrays, plus
the bare-or-quoted names used for labels, keys and node identifiers.
"""

from __future__ import annotations

import json
import math
from typing import TYPE_CHECKING

from geoffload.geoff.errors import (
    InvalidBooleanLiteralError,
    InvalidNumberLiteralError,
    InvalidStringLiteralError,
    MixedArrayTypeError,
)
from geoffload.graph.values import INT64_MAX, INT64_MIN, PropertyValue

if TYPE_CHECKING:
    from collections.abc import Callable

    from geoffload.geoff.scanner import Scanner

DIGITS = "0123456789"
NUMBER_START = "-" + DIGITS
BOOLEAN_START = "tf"

# Lookahead characters that begin some value, used to tell a mixed array
# from plain garbage.
VALUE_START = '"[n' + NUMBER_START + BOOLEAN_START


def _is_name_char(ch: str | None) -> bool:
    return ch is not None and (ch.isalnum() or ch == "_")


def read_name(scanner: Scanner) -> str:
    """Read a bare identifier or a quoted string.

    Returns the empty string when the lookahead starts neither form; callers
    that require a name use :func:`read_required_name`.
    """
    if scanner.next_is('"'):
        return read_string(scanner)
    chars: list[str] = []
    while _is_name_char(scanner.peek()):
        chars.append(scanner.read())
    return "".join(chars)


def read_required_name(scanner: Scanner, what: str = "name") -> str:
    """Read a name, failing if the lookahead starts neither form.

    A quoted empty string ``""`` is a valid name.
    """
    if not scanner.has_more():
        raise scanner.end_of_input(f"Expected {what} but input ended")
    if scanner.next_is('"'):
        return read_string(scanner)
    name = read_name(scanner)
    if not name:
        raise scanner.unexpected(f"Expected {what}")
    return name


def _string_closed(text: str) -> bool:
    """Check whether *text* (starting with a quote) ends in an unescaped quote."""
    if len(text) < 2 or not text.endswith('"'):
        return False
    backslashes = len(text) - 1 - len(text[:-1].rstrip("\\"))
    return backslashes % 2 == 0


def read_string(scanner: Scanner) -> str:
    """Read a double-quoted JSON string and return its unescaped text."""
    line, column = scanner.line, scanner.column
    raw = scanner.read_exact('"')
    while not _string_closed(raw):
        if not scanner.has_more():
            raise scanner.end_of_input("Unterminated string literal")
        raw += scanner.read_until('"')
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidStringLiteralError(
            f"Invalid string literal {raw!r}: {e.msg}", line, column
        ) from e
    return str(value)


def _read_digits(scanner: Scanner) -> str:
    chars: list[str] = []
    while scanner.next_is(*DIGITS):
        chars.append(scanner.read())
    return "".join(chars)


def read_number(scanner: Scanner) -> int | float:
    """Read an integer or real number.

    A fractional part or exponent makes the value a float.
    """
    line, column = scanner.line, scanner.column
    text = ""
    is_real = False
    if scanner.next_is("-"):
        text += scanner.read()
    digits = _read_digits(scanner)
    if not digits:
        raise InvalidNumberLiteralError(f"Expected digits in number {text!r}", line, column)
    text += digits
    if scanner.next_is("."):
        is_real = True
        text += scanner.read()
        digits = _read_digits(scanner)
        if not digits:
            raise InvalidNumberLiteralError(f"Missing fraction digits in {text!r}", line, column)
        text += digits
    if scanner.next_is("e", "E"):
        is_real = True
        text += scanner.read()
        if scanner.next_is("+", "-"):
            text += scanner.read()
        digits = _read_digits(scanner)
        if not digits:
            raise InvalidNumberLiteralError(f"Missing exponent digits in {text!r}", line, column)
        text += digits
    if is_real:
        real = float(text)
        if math.isinf(real):
            raise InvalidNumberLiteralError(f"Real {text} does not fit in 64 bits", line, column)
        return real
    value = int(text)
    if not INT64_MIN <= value <= INT64_MAX:
        raise InvalidNumberLiteralError(f"Integer {text} does not fit in 64 bits", line, column)
    return value


def read_boolean(scanner: Scanner) -> bool:
    line, column = scanner.line, scanner.column
    if scanner.next_is("t"):
        word, value = "true", True
    elif scanner.next_is("f"):
        word, value = "false", False
    else:
        raise InvalidBooleanLiteralError("Expected 'true' or 'false'", line, column)
    for expected in word:
        if not scanner.next_is(expected):
            raise InvalidBooleanLiteralError(
                f"Invalid boolean literal, expected {word!r}", line, column
            )
        scanner.read()
    return value


def read_null(scanner: Scanner) -> None:
    for expected in "null":
        scanner.read_exact(expected)


def _array_reader(scanner: Scanner) -> tuple[Callable[[Scanner], PropertyValue], str]:
    """Pick the element reader and its start characters from the lookahead."""
    if scanner.next_is('"'):
        return read_string, '"'
    if scanner.next_is(*NUMBER_START):
        return read_number, NUMBER_START
    if scanner.next_is(*BOOLEAN_START):
        return read_boolean, BOOLEAN_START
    raise scanner.unexpected("Expected string, number or boolean array element")


def read_array(scanner: Scanner) -> PropertyValue:
    """Read a homogeneous array.

    Numeric arrays stay integer only if every element is an integer;
    otherwise all elements are promoted to float. ``[]`` yields None since
    no element type can be inferred.
    """
    scanner.read_exact("[")
    scanner.read_whitespace()
    if scanner.next_is("]"):
        scanner.read()
        return None
    reader, starts = _array_reader(scanner)
    items: list = []
    while True:
        if not scanner.next_is(*starts):
            if scanner.next_is(*VALUE_START):
                raise MixedArrayTypeError(
                    "Array elements must all be of the same type", scanner.line, scanner.column
                )
            raise scanner.unexpected("Expected array element")
        items.append(reader(scanner))
        scanner.read_whitespace()
        if not scanner.next_is(","):
            break
        scanner.read()
        scanner.read_whitespace()
    scanner.read_exact("]")
    if reader is read_number and not all(isinstance(item, int) for item in items):
        return [float(item) for item in items]
    return items


def read_value(scanner: Scanner) -> PropertyValue:
    """Read any property value, dispatching on the lookahead character."""
    if not scanner.has_more():
        raise scanner.end_of_input("Expected a value but input ended")
    if scanner.next_is("["):
        return read_array(scanner)
    if scanner.next_is('"'):
        return read_string(scanner)
    if scanner.next_is(*NUMBER_START):
        return read_number(scanner)
    if scanner.next_is(*BOOLEAN_START):
        return read_boolean(scanner)
    if scanner.next_is("n"):
        read_null(scanner)
        return None
    raise scanner.unexpected("Expected a value")
