"""
Render scopes: the top-level lookup table a template path starts from.

A root scope wraps the caller's context map directly, so defining a name in
it mutates that map. Child scopes hold only their own bindings and fall back
to their parent for everything else.
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class RenderScope:
    """
    Lexical scope for template evaluation.

    The root scope's bindings *are* the context map passed by the caller
    (not a copy).
    """

    def __init__(self, bindings: Optional[Dict[str, Any]] = None, parent: Optional['RenderScope'] = None):
        """
        Initializes a new RenderScope.

        Args:
            bindings: Mapping used as this scope's own bindings. Used as-is, not copied.
            parent: Optional enclosing scope.
        """
        if bindings is not None and not isinstance(bindings, Mapping):
            raise TypeError(f"Scope bindings must be a mapping, got {type(bindings).__name__}")
        self._bindings: Dict[str, Any] = bindings if bindings is not None else {}
        self._parent = parent

    @property
    def parent(self) -> Optional['RenderScope']:
        return self._parent

    def __contains__(self, name: object) -> bool:
        scope: Optional[RenderScope] = self
        while scope is not None:
            if name in scope._bindings:
                return True
            scope = scope._parent
        return False

    def lookup(self, name: str) -> Any:
        """
        Looks up a name in this scope and its ancestors.

        Raises:
            KeyError: If no scope in the chain binds the name.
        """
        scope: Optional[RenderScope] = self
        while scope is not None:
            if name in scope._bindings:
                return scope._bindings[name]
            scope = scope._parent
        raise KeyError(name)

    def define(self, name: str, value: Any) -> None:
        """
        Binds (or rebinds) a name in *this* scope. Parent scopes are untouched.
        For a root scope this writes into the caller's context map.
        """
        logger.debug(f"Defining '{name}' = {type(value).__name__} in scope {id(self)}")
        self._bindings[name] = value

    def extend(self, bindings: Dict[str, Any]) -> 'RenderScope':
        """Creates a child scope holding `bindings` on top of this one."""
        return RenderScope(bindings=dict(bindings), parent=self)

    def get_local_bindings(self) -> Dict[str, Any]:
        """Returns a copy of the bindings defined directly in this scope."""
        return dict(self._bindings)

    def __repr__(self) -> str:
        parent_id = id(self._parent) if self._parent else None
        return f"<RenderScope id={id(self)} parent={parent_id} bindings={list(self._bindings.keys())}>"
