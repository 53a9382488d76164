"""
System-wide custom error types for template conversion.
"""
from typing import Optional, Sequence, Tuple


class TemplateConversionError(Exception):
    """
    Base class for every failure a conversion can report back to the caller.
    The string form of the error is what ends up in a failed ConversionResult.
    """
    def __init__(self, message: str, error_details: str = ""):
        """
        Initializes the TemplateConversionError.

        Args:
            message: A high-level error message.
            error_details: Specific details about the error, if available.
        """
        full_message = f"{message}"
        if error_details:
            full_message += f"\nDetails: {error_details}"
        super().__init__(full_message)
        self.message = message
        self.error_details = error_details


class TemplateSyntaxError(TemplateConversionError):
    """
    Raised when template source text (or an S-expression AST) cannot be parsed.
    """
    def __init__(self, message: str, line: int = 0, column: int = 0, error_details: str = ""):
        """
        Initializes the TemplateSyntaxError.

        Args:
            message: A high-level error message.
            line: 1-based line of the offending token (0 if unknown).
            column: 1-based column of the offending token (0 if unknown).
            error_details: Specific details from the underlying parser, if available.
        """
        if line:
            message = f"{message} at {line}:{column}"
        super().__init__(message, error_details)
        self.line = line
        self.column = column


class TemplateEvaluationError(TemplateConversionError):
    """
    Raised while rendering a parsed template against a data context.
    Carries the path that failed and any output that was rendered before the failure.
    """
    def __init__(self, message: str, path: Optional[Sequence[str]] = None, error_details: str = ""):
        super().__init__(message, error_details)
        self.path: Tuple[str, ...] = tuple(path) if path is not None else ()
        self.partial_output: str = ""


class PathNotFoundError(TemplateEvaluationError):
    """A path's key sequence does not resolve against the context."""


class TypeMismatchError(TemplateEvaluationError):
    """
    A value was found but has the wrong shape for where it is used: a loop
    source that is not an array, or a substitution of a non-coercible scalar.
    """
    def __init__(self, message: str, path: Optional[Sequence[str]] = None,
                 actual_type: Optional[str] = None, error_details: str = ""):
        super().__init__(message, path, error_details)
        self.actual_type = actual_type


class ContextDecodeError(TemplateConversionError):
    """
    Raised when raw context text is not valid JSON or does not decode to an object.
    """
    def __init__(self, message: str, raw_input: str = "", error_details: str = ""):
        super().__init__(message, error_details)
        self.raw_input = raw_input
