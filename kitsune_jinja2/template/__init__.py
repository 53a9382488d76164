"""Template AST model and the parsers that produce it."""

from kitsune_jinja2.template.ast_nodes import (
    ForLoopNode,
    IfNode,
    ReplaceNode,
    TemplateNode,
    TextNode,
    link_nodes,
)
from kitsune_jinja2.template.interfaces import TemplateParserInterface
from kitsune_jinja2.template.parser import Jinja2Parser

__all__ = [
    "TemplateNode",
    "TextNode",
    "ReplaceNode",
    "IfNode",
    "ForLoopNode",
    "link_nodes",
    "TemplateParserInterface",
    "Jinja2Parser",
]
