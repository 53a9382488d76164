"""
Conversion facade: parse a template, render it against a context, report the
outcome as a ConversionResult.

Parsers keep mutable per-parse state, so they live in a fixed-size pool and a
parser is only held while parsing and handing over its AST. Rendering runs on
a fresh TemplateEvaluator per call and needs no lock.
"""

import json
import logging
import queue
import threading
from collections.abc import Mapping, MutableMapping
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, Union

from kitsune_jinja2.config.settings import ConverterSettings
from kitsune_jinja2.evaluator.evaluator import TemplateEvaluator
from kitsune_jinja2.evaluator.error_reporter import join_path
from kitsune_jinja2.system.errors import (
    ContextDecodeError,
    TemplateConversionError,
    TemplateEvaluationError,
    TemplateSyntaxError,
)
from kitsune_jinja2.system.models import ConversionResult
from kitsune_jinja2.template.interfaces import TemplateParserInterface
from kitsune_jinja2.template.parser import Jinja2Parser

logger = logging.getLogger(__name__)

ParserFactory = Callable[[], TemplateParserInterface]


class ParserPool:
    """
    Fixed set of parser instances handed out one caller at a time.

    With a size of 1 every parse in the process is serialized.
    """

    def __init__(self, factory: ParserFactory, size: int = 1):
        if size < 1:
            raise ValueError(f"Parser pool size must be positive, got {size}")
        self.size = size
        self._parsers: "queue.LifoQueue[TemplateParserInterface]" = queue.LifoQueue(maxsize=size)
        for _ in range(size):
            self._parsers.put(factory())
        logger.debug(f"ParserPool created with {size} parser(s)")

    @contextmanager
    def acquire(self) -> Iterator[TemplateParserInterface]:
        """Check out a parser, blocking until one is free."""
        parser = self._parsers.get()
        try:
            yield parser
        finally:
            self._parsers.put(parser)


class Jinja2Converter:
    """
    Converts templates plus data contexts into rendered text.

    A process-wide shared instance is available via get_instance(); separate
    instances with their own settings and parsers can be created freely.
    """

    _instance: Optional["Jinja2Converter"] = None
    _instance_lock = threading.Lock()

    def __init__(self, settings: Optional[ConverterSettings] = None,
                 parser_factory: Optional[ParserFactory] = None):
        """
        Initializes the converter.

        Args:
            settings: Converter settings. Defaults to ConverterSettings.from_env().
            parser_factory: Zero-argument callable creating parser instances.
                Defaults to Jinja2Parser honoring settings.trace_parsing.
        """
        self.settings = settings if settings is not None else ConverterSettings.from_env()
        if parser_factory is None:
            trace_parsing = self.settings.trace_parsing
            parser_factory = lambda: Jinja2Parser(trace_parsing=trace_parsing)
        self._pool = ParserPool(parser_factory, self.settings.parser_pool_size)
        logger.info(f"Jinja2Converter initialized (parser_pool_size={self.settings.parser_pool_size}, "
                    f"loop_binding={self.settings.loop_binding})")

    @classmethod
    def get_instance(cls) -> "Jinja2Converter":
        """Returns the process-wide shared converter, creating it on first use."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drops the shared converter; the next get_instance() builds a new one."""
        with cls._instance_lock:
            cls._instance = None

    def convert(self, template_text: str, context: Union[Mapping, str, bytes]) -> ConversionResult:
        """
        Render `template_text` against `context`.

        Args:
            template_text: Template source.
            context: Context map, or raw JSON text decoding to an object.

        Returns:
            ConversionResult with the rendered text, or with the error text
            on failure.

        Raises:
            TypeError: If `context` is neither a mapping nor JSON text, or is
                read-only while loop_binding is "shared".
        """
        if isinstance(context, (str, bytes, bytearray)):
            return self.convert_json(template_text, context)
        if not isinstance(context, Mapping):
            raise TypeError(f"Context must be a mapping or JSON text, got {type(context).__name__}")
        # shared loop bindings are written into the caller's map
        if self.settings.loop_binding == "shared" and not isinstance(context, MutableMapping):
            raise TypeError(f"Context must be a mutable mapping when loop_binding is 'shared', "
                            f"got {type(context).__name__}")

        try:
            with self._pool.acquire() as parser:
                if not parser.parse(template_text):
                    raise TemplateSyntaxError(parser.error_message())
                root = parser.take_output()

            try:
                output = TemplateEvaluator(loop_binding=self.settings.loop_binding).render(context, root)
            finally:
                del root
        except TemplateConversionError as e:
            return self._failure(e)

        logger.debug(f"Template converted successfully ({len(output)} characters)")
        return ConversionResult(success=True, content=output)

    def convert_json(self, template_text: str, json_input: Union[str, bytes]) -> ConversionResult:
        """
        Decode `json_input` into a context map, then convert.

        Decode failures are reported as failed results, like render failures.
        """
        try:
            context = decode_context(json_input)
        except ContextDecodeError as e:
            return self._failure(e)
        return self.convert(template_text, context)

    def _failure(self, error: TemplateConversionError) -> ConversionResult:
        notes: dict = {"error_type": type(error).__name__}
        if isinstance(error, TemplateEvaluationError):
            notes["path"] = join_path(error.path)
            if error.partial_output:
                notes["partial_output"] = error.partial_output
        logger.error(f"Template conversion failed ({notes['error_type']}): {error.message.splitlines()[0] if error.message else ''}")
        return ConversionResult(success=False, content=str(error), notes=notes)


def decode_context(json_input: Union[str, bytes]) -> Any:
    """
    Decode raw JSON context text.

    Raises:
        ContextDecodeError: If the text is not valid JSON or is not an object.
    """
    try:
        context = json.loads(json_input)
    except (ValueError, TypeError) as e:
        raise ContextDecodeError("error while parsing json-input", raw_input=str(json_input)[:200], error_details=str(e)) from e
    if not isinstance(context, dict):
        raise ContextDecodeError("json-input must be an object", raw_input=str(json_input)[:200],
                                 error_details=f"decoded a {type(context).__name__}")
    return context


def convert(template_text: str, context: Union[Mapping, str, bytes]) -> ConversionResult:
    """Converts with the process-wide shared converter."""
    return Jinja2Converter.get_instance().convert(template_text, context)


def convert_json(template_text: str, json_input: Union[str, bytes]) -> ConversionResult:
    """Converts raw JSON context text with the process-wide shared converter."""
    return Jinja2Converter.get_instance().convert_json(template_text, json_input)
