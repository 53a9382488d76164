"""Interface definitions for template parsers.

The converter only talks to parsers through this protocol, so any producer of
a TemplateNode chain can be plugged in.
"""
from typing import Optional, Protocol, runtime_checkable

from kitsune_jinja2.template.ast_nodes import TemplateNode


@runtime_checkable
class TemplateParserInterface(Protocol):
    """
    Interface for template parsers.

    A parser is stateful: `parse` stores either an AST or an error message,
    which the caller then collects. Instances are not safe to share between
    threads.
    """

    def parse(self, template_text: str) -> bool:
        """
        Parse template source text.

        Args:
            template_text: Template source

        Returns:
            True on success, False if the source is malformed
        """
        ...

    def take_output(self) -> Optional[TemplateNode]:
        """
        Hand over the AST of the last successful parse.

        Ownership moves to the caller; the parser keeps no reference.
        Returns None for an empty template.
        """
        ...

    def error_message(self) -> str:
        """Message describing why the last parse failed."""
        ...
