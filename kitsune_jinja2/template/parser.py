"""
Parser for the Jinja2 subset understood by the converter.

Supported surface:
    text                      emitted verbatim
    {{ a.b.c }}               substitution
    {% if a.b %}              conditional on a truthy token
    {% if a.b == "x" %}       conditional on equality with a literal
    {% else %} {% endif %}
    {% for x in a.b %}        loop over an array
    {% endfor %}
    {# comment #}             dropped
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from kitsune_jinja2.system.errors import TemplateSyntaxError
from kitsune_jinja2.template.ast_nodes import (
    ForLoopNode,
    IfNode,
    Literal,
    Path,
    ReplaceNode,
    TemplateNode,
    TextNode,
    link_nodes,
)

logger = logging.getLogger(__name__)

_TAG_PATTERN = re.compile(r"(\{\{.*?\}\}|\{%.*?%\}|\{#.*?#\})", re.DOTALL)
_OPENERS = ("{{", "{%", "{#")

_PATH_PATTERN = re.compile(r"^[^\W\d][\w-]*(\.[\w-]+)*$")
_IF_PATTERN = re.compile(r"^if\s+(?P<path>[\w.-]+)\s*(?:==\s*(?P<literal>.+?))?$", re.DOTALL)
_FOR_PATTERN = re.compile(r"^for\s+(?P<name>[^\W\d]\w*)\s+in\s+(?P<path>[\w.-]+)$", re.DOTALL)
_INT_PATTERN = re.compile(r"^-?\d+$")
_FLOAT_PATTERN = re.compile(r"^-?\d+\.\d+$")

_BOOL_LITERALS = {"true": True, "True": True, "false": False, "False": False}


@dataclass
class Token:
    """
    Lexical token of a template.

    Attributes:
        type: TEXT, VARIABLE, BLOCK or COMMENT
        value: Raw text for TEXT, stripped tag content otherwise
        line: 1-based line of the token start
        column: 1-based column of the token start
    """
    type: str
    value: str
    line: int
    column: int


class _Frame:
    """One open block while building the AST."""

    def __init__(self, kind: str, node: Optional[TemplateNode] = None, token: Optional[Token] = None):
        self.kind = kind
        self.node = node
        self.token = token
        self.nodes: List[TemplateNode] = []


class Jinja2Parser:
    """
    Turns template source text into a TemplateNode chain.

    Implements TemplateParserInterface. Keeps per-parse state, so one
    instance must not be used by two threads at once.
    """

    def __init__(self, trace_parsing: bool = False):
        self.trace_parsing = trace_parsing
        self._output: Optional[TemplateNode] = None
        self._error: str = ""

    def parse(self, template_text: str) -> bool:
        self._output = None
        self._error = ""
        try:
            tokens = self.tokenize(template_text)
            self._output = self._build(tokens)
        except TemplateSyntaxError as e:
            logger.debug(f"Template parsing failed: {e}")
            self._error = str(e)
            return False
        return True

    def take_output(self) -> Optional[TemplateNode]:
        output, self._output = self._output, None
        return output

    def error_message(self) -> str:
        return self._error

    def tokenize(self, template_text: str) -> List[Token]:
        """
        Split template text into tokens.

        Raises:
            TemplateSyntaxError: If a tag is opened but never closed.
        """
        if not isinstance(template_text, str):
            raise TypeError("Template text must be a string.")

        tokens: List[Token] = []
        position = 0
        for match in _TAG_PATTERN.finditer(template_text):
            if match.start() > position:
                tokens.append(self._text_token(template_text, position, match.start()))
            raw = match.group(0)
            line, column = _line_column(template_text, match.start())
            token_type = {"{{": "VARIABLE", "{%": "BLOCK", "{#": "COMMENT"}[raw[:2]]
            tokens.append(Token(token_type, raw[2:-2].strip(), line, column))
            position = match.end()
        if position < len(template_text):
            tokens.append(self._text_token(template_text, position, len(template_text)))

        if self.trace_parsing:
            for token in tokens:
                logger.debug(f"Template token: {token}")
        return tokens

    def _text_token(self, source: str, start: int, end: int) -> Token:
        text = source[start:end]
        for opener in _OPENERS:
            offset = text.find(opener)
            if offset != -1:
                line, column = _line_column(source, start + offset)
                raise TemplateSyntaxError(f"Unterminated tag '{opener}'", line, column)
        line, column = _line_column(source, start)
        return Token("TEXT", text, line, column)

    def _build(self, tokens: List[Token]) -> Optional[TemplateNode]:
        stack = [_Frame("root")]
        for token in tokens:
            frame = stack[-1]
            if token.type == "TEXT":
                frame.nodes.append(TextNode(token.value))
            elif token.type == "VARIABLE":
                frame.nodes.append(ReplaceNode(_parse_path(token.value, token)))
            elif token.type == "BLOCK":
                self._handle_block(token, stack)
            # comments produce no node

        if len(stack) > 1:
            unclosed = stack[-1]
            closer = "endfor" if unclosed.kind == "for" else "endif"
            raise TemplateSyntaxError(
                f"Unclosed '{unclosed.kind}' block, expected '{{% {closer} %}}'",
                unclosed.token.line, unclosed.token.column,
            )
        return link_nodes(stack[0].nodes)

    def _handle_block(self, token: Token, stack: List[_Frame]) -> None:
        content = token.value
        keyword = content.split(None, 1)[0] if content else ""
        frame = stack[-1]

        if keyword == "if":
            match = _IF_PATTERN.match(content)
            if not match:
                raise TemplateSyntaxError(f"Malformed if statement '{content}'", token.line, token.column)
            path = _parse_path(match.group("path"), token)
            literal_text = match.group("literal")
            literal = _parse_literal(literal_text, token) if literal_text is not None else True
            stack.append(_Frame("if", IfNode(path, literal), token))

        elif keyword == "for":
            match = _FOR_PATTERN.match(content)
            if not match:
                raise TemplateSyntaxError(f"Malformed for statement '{content}'", token.line, token.column)
            path = _parse_path(match.group("path"), token)
            stack.append(_Frame("for", ForLoopNode(path, match.group("name")), token))

        elif content == "else":
            if frame.kind != "if":
                raise TemplateSyntaxError("'else' without matching 'if'", token.line, token.column)
            frame.node.then_branch = link_nodes(frame.nodes)
            frame.kind = "else"
            frame.nodes = []

        elif content == "endif":
            if frame.kind == "if":
                frame.node.then_branch = link_nodes(frame.nodes)
            elif frame.kind == "else":
                frame.node.else_branch = link_nodes(frame.nodes)
            else:
                raise TemplateSyntaxError("'endif' without matching 'if'", token.line, token.column)
            stack.pop()
            stack[-1].nodes.append(frame.node)

        elif content == "endfor":
            if frame.kind != "for":
                raise TemplateSyntaxError("'endfor' without matching 'for'", token.line, token.column)
            frame.node.body = link_nodes(frame.nodes)
            stack.pop()
            stack[-1].nodes.append(frame.node)

        else:
            raise TemplateSyntaxError(f"Unknown block tag '{content}'", token.line, token.column)


def _line_column(source: str, offset: int):
    line = source.count("\n", 0, offset) + 1
    column = offset - (source.rfind("\n", 0, offset) + 1) + 1
    return line, column


def _parse_path(text: str, token: Token) -> Path:
    if not _PATH_PATTERN.match(text):
        raise TemplateSyntaxError(f"Invalid path '{text}'", token.line, token.column)
    return tuple(text.split("."))


def _parse_literal(text: str, token: Token) -> Literal:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        inner = text[1:-1]
        if text[0] not in inner:
            return inner
    if text in _BOOL_LITERALS:
        return _BOOL_LITERALS[text]
    if _INT_PATTERN.match(text):
        return int(text)
    if _FLOAT_PATTERN.match(text):
        return float(text)
    raise TemplateSyntaxError(f"Invalid literal '{text}'", token.line, token.column)
