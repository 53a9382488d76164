"""AST node implementations for parsed templates.

A parsed template is a forward chain of nodes linked through `next`.
If branches and loop bodies point at the first node of a nested chain.
Every node carries a `type` tag ("text", "replace", "if", "for") which the
evaluator dispatches on.
"""
from typing import Any, Iterator, List, Optional, Sequence, Tuple, Union

Path = Tuple[str, ...]
Literal = Union[str, int, float, bool]


def make_path(keys: Sequence[str]) -> Path:
    """
    Validate and freeze a key path.

    Raises:
        ValueError: If the path is empty or contains a non-string key.
    """
    if isinstance(keys, str):
        raise ValueError(f"Path must be a sequence of keys, got the string {keys!r}")
    path = tuple(keys)
    if not path:
        raise ValueError("Path must contain at least one key")
    for key in path:
        if not isinstance(key, str):
            raise ValueError(f"Path keys must be strings, got {type(key).__name__}: {key!r}")
    return path


class TemplateNode:
    """
    Base for all template nodes.

    Attributes:
        type: Node type identifier
        next: Following sibling at the same nesting level, or None
    """
    type = "node"

    def __init__(self):
        self.next: Optional["TemplateNode"] = None

    def _fields(self) -> List[Tuple[str, Any]]:
        return []

    def __repr__(self) -> str:
        fields = ", ".join(f"{name}={value!r}" for name, value in self._fields())
        return f"{self.__class__.__name__}({fields})"

    def __eq__(self, other: object) -> bool:
        """Structural equality of this node and the rest of its chain."""
        if not isinstance(other, TemplateNode):
            return NotImplemented
        left: Optional[TemplateNode] = self
        right: Optional[TemplateNode] = other
        while left is not None and right is not None:
            if left.type != right.type or left._fields() != right._fields():
                return False
            left, right = left.next, right.next
        return left is None and right is None

    __hash__ = None  # type: ignore[assignment]


class TextNode(TemplateNode):
    """Literal text, emitted verbatim."""
    type = "text"

    def __init__(self, text: str):
        super().__init__()
        self.text = text

    def _fields(self):
        return [("text", self.text)]


class ReplaceNode(TemplateNode):
    """Substitution of the scalar found at `path`."""
    type = "replace"

    def __init__(self, path: Sequence[str]):
        super().__init__()
        self.path = make_path(path)

    def _fields(self):
        return [("path", self.path)]

    def __str__(self) -> str:
        return "{{ " + ".".join(self.path) + " }}"


class IfNode(TemplateNode):
    """
    Conditional on the scalar at `condition_path`.

    Attributes:
        condition_path: Path whose value is compared
        literal: Right-hand-side literal the value is compared against
        then_branch: First node rendered when the condition holds
        else_branch: First node rendered otherwise
    """
    type = "if"

    def __init__(self, condition_path: Sequence[str], literal: Literal = True,
                 then_branch: Optional[TemplateNode] = None,
                 else_branch: Optional[TemplateNode] = None):
        super().__init__()
        if literal is None or not isinstance(literal, (str, int, float, bool)):
            raise ValueError(f"If literal must be a string, number or boolean, got {literal!r}")
        self.condition_path = make_path(condition_path)
        self.literal = literal
        self.then_branch = then_branch
        self.else_branch = else_branch

    def _fields(self):
        return [
            ("condition_path", self.condition_path),
            ("literal", self.literal),
            ("then_branch", self.then_branch),
            ("else_branch", self.else_branch),
        ]


class ForLoopNode(TemplateNode):
    """
    Loop over the array at `source_path`, binding each element to `binding_name`.
    """
    type = "for"

    def __init__(self, source_path: Sequence[str], binding_name: str,
                 body: Optional[TemplateNode] = None):
        super().__init__()
        if not isinstance(binding_name, str) or not binding_name:
            raise ValueError(f"Loop binding name must be a non-empty string, got {binding_name!r}")
        self.source_path = make_path(source_path)
        self.binding_name = binding_name
        self.body = body

    def _fields(self):
        return [
            ("source_path", self.source_path),
            ("binding_name", self.binding_name),
            ("body", self.body),
        ]


def link_nodes(nodes: Sequence[TemplateNode]) -> Optional[TemplateNode]:
    """
    Link nodes into a chain through their `next` attribute.

    Args:
        nodes: Nodes in rendering order. Existing `next` links are overwritten.

    Returns:
        The first node of the chain, or None for an empty sequence.
    """
    for current, following in zip(nodes, list(nodes)[1:]):
        current.next = following
    if nodes:
        nodes[-1].next = None
        return nodes[0]
    return None


def iter_chain(node: Optional[TemplateNode]) -> Iterator[TemplateNode]:
    """Yields the nodes of one chain level, following `next`."""
    while node is not None:
        yield node
        node = node.next
