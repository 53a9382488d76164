import pytest

from kitsune_jinja2.config.settings import ConverterSettings
from kitsune_jinja2.converter import Jinja2Converter
from kitsune_jinja2.evaluator.evaluator import TemplateEvaluator
from kitsune_jinja2.template.parser import Jinja2Parser


@pytest.fixture
def parser():
    """Provides a fresh Jinja2Parser."""
    return Jinja2Parser()


@pytest.fixture
def evaluator():
    """Provides an evaluator with the default (shared) loop binding."""
    return TemplateEvaluator()


@pytest.fixture
def converter():
    """Provides a converter with explicit default settings, independent of the environment."""
    return Jinja2Converter(settings=ConverterSettings())


@pytest.fixture
def user_context():
    """A small nested context used across tests."""
    return {
        "user": {"name": "Ada", "age": 36, "admin": "true", "role": "editor"},
        "items": [1, 2, 3],
        "title": "Report",
    }


@pytest.fixture(autouse=True)
def clean_shared_converter(monkeypatch):
    """Keeps the process-wide converter and KITSUNE_JINJA2_* variables from leaking between tests."""
    for name in ("PARSER_POOL_SIZE", "LOOP_BINDING", "TRACE_PARSING", "LOG_LEVEL"):
        monkeypatch.delenv(f"KITSUNE_JINJA2_{name}", raising=False)
    Jinja2Converter.reset_instance()
    yield
    Jinja2Converter.reset_instance()
