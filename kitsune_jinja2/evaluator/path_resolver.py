"""
Resolves key paths against a data context.

Every key addresses one level of map lookup. Arrays are never indexed here;
they only show up as the value a path ends at.
"""

import logging
from collections.abc import Mapping
from typing import Any, Sequence, Union

from kitsune_jinja2.evaluator.error_reporter import describe
from kitsune_jinja2.evaluator.scope import RenderScope
from kitsune_jinja2.evaluator.value_tree import coerce_to_text, value_type
from kitsune_jinja2.system.errors import PathNotFoundError, TypeMismatchError

logger = logging.getLogger(__name__)

Context = Union[RenderScope, Mapping]


def resolve(context: Context, path: Sequence[str]) -> Any:
    """
    Walk `path` from `context`, one map lookup per key.

    Args:
        context: Root scope or context map.
        path: Non-empty sequence of keys.

    Returns:
        The value found at the end of the path (any type).

    Raises:
        PathNotFoundError: If a key is absent or an intermediate value is not
            a map. The error carries the full path, not just the failing key.
    """
    current: Any = context
    for index, key in enumerate(path):
        if isinstance(current, RenderScope):
            try:
                current = current.lookup(key)
                continue
            except KeyError:
                pass
        elif isinstance(current, Mapping) and key in current:
            current = current[key]
            continue

        logger.debug(f"Path {list(path)} failed at key '{key}' (index {index}); value there is {type(current).__name__}")
        raise PathNotFoundError(describe(path), path)
    return current


def resolve_string(context: Context, path: Sequence[str]) -> str:
    """
    Resolve `path` and coerce the value to text.

    Only String (verbatim) and Int (base 10) values are accepted.

    Raises:
        PathNotFoundError: If the path does not resolve.
        TypeMismatchError: If the value is Bool, Float, Null, Array or Map.
    """
    value = resolve(context, path)
    text = coerce_to_text(value)
    if text is None:
        kind = value_type(value)
        actual_type = kind.value if kind is not None else type(value).__name__
        logger.debug(f"Path {list(path)} resolved to non-substitutable {actual_type}")
        raise TypeMismatchError(describe(path), path, actual_type=actual_type)
    return text
