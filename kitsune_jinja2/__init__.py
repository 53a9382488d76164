"""Jinja2-style template conversion against JSON-like data trees.

Parses a template, renders it against a hierarchical data context and
returns either the rendered text or a path-qualified error message.
"""

from kitsune_jinja2.converter import Jinja2Converter, convert, convert_json
from kitsune_jinja2.config.settings import ConverterSettings
from kitsune_jinja2.system.errors import (
    ContextDecodeError,
    PathNotFoundError,
    TemplateConversionError,
    TemplateEvaluationError,
    TemplateSyntaxError,
    TypeMismatchError,
)
from kitsune_jinja2.system.models import ConversionResult

__all__ = [
    "Jinja2Converter",
    "ConverterSettings",
    "ConversionResult",
    "convert",
    "convert_json",
    "TemplateConversionError",
    "TemplateSyntaxError",
    "TemplateEvaluationError",
    "PathNotFoundError",
    "TypeMismatchError",
    "ContextDecodeError",
]
