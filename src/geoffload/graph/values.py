"""Property value domain shared by nodes and relationships.

A property value is a string, 64-bit integer, float, boolean, null, or a
homogeneous list of one of the non-null scalar kinds. Python's ``bool`` is a
subclass of ``int``, so every consumer classifies values through
:func:`kind_of` rather than with ad-hoc ``isinstance`` checks.
"""

from __future__ import annotations

import json
import math
from enum import StrEnum

PropertyValue = str | int | float | bool | list[str] | list[int] | list[float] | list[bool] | None

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class ValueKind(StrEnum):
    """Classification of a property value."""

    NULL = "null"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    STRING_ARRAY = "string[]"
    INTEGER_ARRAY = "integer[]"
    FLOAT_ARRAY = "float[]"
    BOOLEAN_ARRAY = "boolean[]"

    @property
    def is_array(self) -> bool:
        return self.value.endswith("[]")


_ARRAY_KINDS = {
    ValueKind.STRING: ValueKind.STRING_ARRAY,
    ValueKind.INTEGER: ValueKind.INTEGER_ARRAY,
    ValueKind.FLOAT: ValueKind.FLOAT_ARRAY,
    ValueKind.BOOLEAN: ValueKind.BOOLEAN_ARRAY,
}


def _scalar_kind(value: object) -> ValueKind:
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        if not INT64_MIN <= value <= INT64_MAX:
            raise TypeError(f"Integer {value} does not fit in 64 bits")
        return ValueKind.INTEGER
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    raise TypeError(f"Unsupported property value type: {type(value).__name__}")


def kind_of(value: object) -> ValueKind:
    """Classify *value*.

    Raises:
        TypeError: If the value lies outside the property value domain,
            including empty or mixed-kind lists.
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, list):
        if not value:
            raise TypeError("Empty arrays have no inferable element type")
        kinds = {_scalar_kind(item) for item in value}
        if len(kinds) != 1:
            raise TypeError(f"Mixed array element kinds: {sorted(kinds)}")
        return _ARRAY_KINDS[kinds.pop()]
    return _scalar_kind(value)


def _scalars_equal(a: object, b: object) -> bool:
    kind_a, kind_b = _scalar_kind(a), _scalar_kind(b)
    numeric = (ValueKind.INTEGER, ValueKind.FLOAT)
    if kind_a in numeric and kind_b in numeric:
        return a == b
    return kind_a == kind_b and a == b


def values_equal(a: PropertyValue, b: PropertyValue) -> bool:
    """Compare two property values the way a store index would.

    Integers and floats compare numerically; booleans only ever equal
    booleans. Arrays are equal when they are element-wise equal.
    """
    kind_a, kind_b = kind_of(a), kind_of(b)
    if kind_a == ValueKind.NULL or kind_b == ValueKind.NULL:
        return kind_a == kind_b
    if kind_a.is_array != kind_b.is_array:
        return False
    if kind_a.is_array:
        assert isinstance(a, list) and isinstance(b, list)
        return len(a) == len(b) and all(_scalars_equal(x, y) for x, y in zip(a, b, strict=True))
    return _scalars_equal(a, b)


def _format_scalar(value: object) -> str:
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Cannot represent {value} in Geoff notation")
    return json.dumps(value)


def format_value(value: PropertyValue) -> str:
    """Render *value* as Geoff literal text."""
    kind = kind_of(value)
    if kind.is_array:
        assert isinstance(value, list)
        return "[" + ",".join(_format_scalar(item) for item in value) + "]"
    return _format_scalar(value)
