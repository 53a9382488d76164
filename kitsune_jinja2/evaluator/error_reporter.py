"""Builds the user-facing diagnostic for paths that cannot be used."""
from typing import Sequence

HEADER = "error while converting jinja2-template"
NOT_FOUND_LINE = "can not find item in path in json-input: "
HINT_LINE = "or maybe the item does not have a valid format or the place where it should be used"


def join_path(path: Sequence[str]) -> str:
    """Render a key path as `a.b.c`."""
    return ".".join(str(key) for key in path)


def describe(path: Sequence[str]) -> str:
    """
    Diagnostic for a path that could not be resolved or has an unusable value.

    Example for ("user", "name"):

        error while converting jinja2-template
            can not find item in path in json-input: user.name
            or maybe the item does not have a valid format or the place where it should be used
    """
    return (
        f"{HEADER}\n"
        f"    {NOT_FOUND_LINE}{join_path(path)}\n"
        f"    {HINT_LINE}\n"
    )
