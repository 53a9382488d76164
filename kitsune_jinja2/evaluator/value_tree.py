"""Type tags and scalar coercion for the data context tree.

The context is the plain Python form of decoded JSON: dicts, lists, str,
int, float, bool and None.
"""
from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional


class ValueType(str, Enum):
    NULL = "null"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    ARRAY = "array"
    MAP = "map"


def value_type(value: Any) -> Optional[ValueType]:
    """
    Classify a context value.

    Returns None for objects that are not part of a JSON-like tree.
    """
    if value is None:
        return ValueType.NULL
    # bool before int: True is an int subclass but a Bool here
    if isinstance(value, bool):
        return ValueType.BOOL
    if isinstance(value, int):
        return ValueType.INT
    if isinstance(value, float):
        return ValueType.FLOAT
    if isinstance(value, str):
        return ValueType.STRING
    if isinstance(value, (list, tuple)):
        return ValueType.ARRAY
    if isinstance(value, Mapping):
        return ValueType.MAP
    return None


def coerce_to_text(value: Any) -> Optional[str]:
    """
    Text form of a substitutable scalar.

    Only strings (verbatim) and integers (base 10) are substitutable.
    Bool, Float, Null, Array and Map give None; callers turn that into a
    type mismatch rather than guessing a representation. So do integers
    too long for the interpreter's int-to-str digit limit.
    """
    kind = value_type(value)
    if kind is ValueType.STRING:
        return value
    if kind is ValueType.INT:
        try:
            return str(value)
        except ValueError:
            return None
    return None


def literal_text(literal: Any) -> str:
    """Textual form of an If right-hand-side literal."""
    if isinstance(literal, bool):
        return "true" if literal else "false"
    if isinstance(literal, float):
        return repr(literal)
    return str(literal)
