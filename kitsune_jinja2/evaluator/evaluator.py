"""
Template evaluator.

Walks a TemplateNode chain against a data context and produces the rendered
text. Rendering is fail-fast: the first unresolved path or unusable value
aborts the whole render with an exception.
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional, Union

from kitsune_jinja2.evaluator.error_reporter import describe
from kitsune_jinja2.evaluator.path_resolver import resolve, resolve_string
from kitsune_jinja2.evaluator.scope import RenderScope
from kitsune_jinja2.evaluator.value_tree import ValueType, literal_text, value_type
from kitsune_jinja2.system.errors import TemplateEvaluationError, TypeMismatchError
from kitsune_jinja2.template.ast_nodes import (
    ForLoopNode,
    IfNode,
    ReplaceNode,
    TemplateNode,
    TextNode,
)

logger = logging.getLogger(__name__)

# Resolved values that make an If true regardless of its literal.
TRUTHY_TOKENS = ("True", "true")

LOOP_BINDING_MODES = ("shared", "scoped")


class TemplateEvaluator:
    """
    Renders template ASTs.

    Holds no per-render state, so one instance may be used for any number of
    renders, including concurrent ones on different contexts.

    Loop variables are bound according to `loop_binding`:
      - "shared": into the scope the loop runs in. For a top-level loop this
        is the caller's context map, and the binding stays there after the
        loop ends.
      - "scoped": into a child scope per iteration; the caller's map is never
        written to.
    """

    def __init__(self, loop_binding: str = "shared"):
        if loop_binding not in LOOP_BINDING_MODES:
            raise ValueError(f"loop_binding must be one of {LOOP_BINDING_MODES}, got {loop_binding!r}")
        self.loop_binding = loop_binding

        self.NODE_HANDLERS: Dict[str, Callable[[RenderScope, Any, List[str]], None]] = {
            "text": self._render_text,
            "replace": self._render_replace,
            "if": self._render_if,
            "for": self._render_for,
        }

    def render(self, context: Union[Mapping, RenderScope], node: Optional[TemplateNode]) -> str:
        """
        Render the chain starting at `node` against `context`.

        Args:
            context: Context map (or an existing scope).
            node: First node of the top-level chain; None renders to "".

        Returns:
            The rendered text.

        Raises:
            TemplateEvaluationError: PathNotFoundError or TypeMismatchError on
                the first failure. No partial text is returned.
        """
        scope = context if isinstance(context, RenderScope) else RenderScope(bindings=context)
        output: List[str] = []
        self._render_chain(scope, node, output)
        return "".join(output)

    def _render_chain(self, scope: RenderScope, node: Optional[TemplateNode], output: List[str]) -> None:
        # Siblings are walked in a loop; only branches and loop bodies recurse.
        while node is not None:
            handler = self.NODE_HANDLERS.get(node.type)
            if handler is None:
                raise TemplateEvaluationError(f"Unknown template node type: {node.type}")
            handler(scope, node, output)
            node = node.next

    def _render_text(self, scope: RenderScope, node: TextNode, output: List[str]) -> None:
        output.append(node.text)

    def _render_replace(self, scope: RenderScope, node: ReplaceNode, output: List[str]) -> None:
        output.append(resolve_string(scope, node.path))

    def _render_if(self, scope: RenderScope, node: IfNode, output: List[str]) -> None:
        value = resolve_string(scope, node.condition_path)
        condition = value == literal_text(node.literal) or value in TRUTHY_TOKENS
        logger.debug(f"If {'.'.join(node.condition_path)}: '{value}' vs '{literal_text(node.literal)}' -> {condition}")

        # Branch failures propagate like any other render failure.
        if condition:
            self._render_chain(scope, node.then_branch, output)
        elif node.else_branch is not None:
            self._render_chain(scope, node.else_branch, output)

    def _render_for(self, scope: RenderScope, node: ForLoopNode, output: List[str]) -> None:
        source = resolve(scope, node.source_path)
        kind = value_type(source)
        if kind is not ValueType.ARRAY:
            actual_type = kind.value if kind is not None else type(source).__name__
            logger.debug(f"Loop source {'.'.join(node.source_path)} is {actual_type}, not an array")
            raise TypeMismatchError(describe(node.source_path), node.source_path, actual_type=actual_type)

        for index, element in enumerate(source):
            if self.loop_binding == "scoped":
                iteration_scope = scope.extend({node.binding_name: element})
            else:
                scope.define(node.binding_name, element)
                iteration_scope = scope
            try:
                self._render_chain(iteration_scope, node.body, output)
            except TemplateEvaluationError as e:
                logger.debug(f"Loop over {'.'.join(node.source_path)} failed in iteration {index}: {e.message.splitlines()[0]}")
                if not e.partial_output:
                    e.partial_output = "".join(output)
                raise
