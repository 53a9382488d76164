"""
S-expression interchange format for template ASTs.

Lets an external producer hand over an already-parsed template:

    (template
      (text "Hello ")
      (replace "user" "name")
      (if ("user" "admin") true (then (text "!")) (else (text ".")))
      (for "item" ("items") (replace "item")))

Uses the 'sexpdata' library for reading and writing.
"""

import logging
from typing import Any, List, Optional

from sexpdata import Symbol, dumps, loads

from kitsune_jinja2.system.errors import TemplateSyntaxError
from kitsune_jinja2.template.ast_nodes import (
    ForLoopNode,
    IfNode,
    ReplaceNode,
    TemplateNode,
    TextNode,
    iter_chain,
    link_nodes,
)

logger = logging.getLogger(__name__)

SexpNode = Any


def _symbol_name(node: SexpNode) -> Optional[str]:
    return node.value() if isinstance(node, Symbol) else None


def _key(node: SexpNode, form: SexpNode) -> str:
    # keys may be written as strings or bare symbols
    if isinstance(node, Symbol):
        return node.value()
    if isinstance(node, str):
        return node
    raise TemplateSyntaxError("Path keys must be strings or symbols", error_details=f"Form: {dumps(form)}")


def _path(node: SexpNode, form: SexpNode):
    if not isinstance(node, list) or not node:
        raise TemplateSyntaxError("Expected a non-empty key list", error_details=f"Form: {dumps(form)}")
    return [_key(item, form) for item in node]


def ast_from_sexp(sexp_string: str) -> Optional[TemplateNode]:
    """
    Build a TemplateNode chain from its S-expression form.

    Args:
        sexp_string: Text of a single `(template ...)` form.

    Returns:
        The first node of the chain, or None for `(template)`.

    Raises:
        TemplateSyntaxError: If the text is not a well-formed template form.
    """
    try:
        parsed = loads(sexp_string, nil="nil", true="true", false="false")
    except Exception as e:
        logger.debug(f"sexpdata failed to read AST text: {e}")
        raise TemplateSyntaxError("S-expression AST is malformed", error_details=str(e)) from e

    if not isinstance(parsed, list) or not parsed or _symbol_name(parsed[0]) != "template":
        raise TemplateSyntaxError("S-expression AST must be a (template ...) form", error_details=f"Input: '{sexp_string}'")
    return _chain(parsed[1:])


def _chain(forms: List[SexpNode]) -> Optional[TemplateNode]:
    return link_nodes([_node(form) for form in forms])


def _node(form: SexpNode) -> TemplateNode:
    if not isinstance(form, list) or not form:
        raise TemplateSyntaxError("Expected a node form", error_details=f"Form: {form!r}")
    head = _symbol_name(form[0])
    args = form[1:]

    try:
        if head == "text":
            if len(args) != 1 or not isinstance(args[0], str) or isinstance(args[0], Symbol):
                raise TemplateSyntaxError("'text' requires exactly one string", error_details=f"Form: {dumps(form)}")
            return TextNode(args[0])

        if head == "replace":
            return ReplaceNode([_key(arg, form) for arg in args])

        if head == "if":
            if len(args) < 2:
                raise TemplateSyntaxError("'if' requires a path and a literal", error_details=f"Form: {dumps(form)}")
            literal = args[1].value() if isinstance(args[1], Symbol) else args[1]
            node = IfNode(_path(args[0], form), literal)
            for clause in args[2:]:
                clause_name = _symbol_name(clause[0]) if isinstance(clause, list) and clause else None
                if clause_name == "then":
                    node.then_branch = _chain(clause[1:])
                elif clause_name == "else":
                    node.else_branch = _chain(clause[1:])
                else:
                    raise TemplateSyntaxError("'if' clauses must be (then ...) or (else ...)", error_details=f"Form: {dumps(form)}")
            return node

        if head == "for":
            if len(args) < 2:
                raise TemplateSyntaxError("'for' requires a binding name and a path", error_details=f"Form: {dumps(form)}")
            return ForLoopNode(_path(args[1], form), _key(args[0], form), _chain(args[2:]))
    except ValueError as e:
        raise TemplateSyntaxError(f"Invalid '{head}' node", error_details=str(e)) from e

    raise TemplateSyntaxError(f"Unknown node form '{head}'", error_details=f"Form: {form!r}")


def ast_to_sexp(node: Optional[TemplateNode]) -> str:
    """Serialize a TemplateNode chain to its `(template ...)` S-expression."""
    return dumps([Symbol("template")] + _forms(node), true_as="true", false_as="false")


def _forms(node: Optional[TemplateNode]) -> List[SexpNode]:
    forms: List[SexpNode] = []
    for item in iter_chain(node):
        if item.type == "text":
            forms.append([Symbol("text"), item.text])
        elif item.type == "replace":
            forms.append([Symbol("replace")] + list(item.path))
        elif item.type == "if":
            form = [Symbol("if"), list(item.condition_path), item.literal]
            if item.then_branch is not None:
                form.append([Symbol("then")] + _forms(item.then_branch))
            if item.else_branch is not None:
                form.append([Symbol("else")] + _forms(item.else_branch))
            forms.append(form)
        elif item.type == "for":
            forms.append([Symbol("for"), item.binding_name, list(item.source_path)] + _forms(item.body))
        else:
            raise ValueError(f"Unknown node type: {item.type}")
    return forms


class SexpAstParser:
    """
    Parser adapter reading ASTs in S-expression form.

    Implements TemplateParserInterface, so a converter can be driven by
    ASTs produced elsewhere.
    """

    def __init__(self):
        self._output: Optional[TemplateNode] = None
        self._error: str = ""

    def parse(self, template_text: str) -> bool:
        self._output = None
        self._error = ""
        if not template_text.strip():
            return True
        try:
            self._output = ast_from_sexp(template_text)
        except TemplateSyntaxError as e:
            self._error = str(e)
            return False
        return True

    def take_output(self) -> Optional[TemplateNode]:
        output, self._output = self._output, None
        return output

    def error_message(self) -> str:
        return self._error
