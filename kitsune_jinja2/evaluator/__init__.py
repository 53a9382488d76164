"""Evaluator component: path resolution, scoping and rendering of template ASTs."""

from kitsune_jinja2.evaluator.evaluator import TemplateEvaluator
from kitsune_jinja2.evaluator.path_resolver import resolve, resolve_string
from kitsune_jinja2.evaluator.scope import RenderScope

__all__ = ["TemplateEvaluator", "RenderScope", "resolve", "resolve_string"]
