"""Converter settings, loaded from code or from the environment."""
import logging
import os
from typing import Any, Dict, Literal

from pydantic import BaseModel, Field, PositiveInt

logger = logging.getLogger(__name__)

ENV_PREFIX = "KITSUNE_JINJA2_"

LoopBinding = Literal["shared", "scoped"]


class ConverterSettings(BaseModel):
    """
    Runtime settings for a Jinja2Converter.
    """
    parser_pool_size: PositiveInt = Field(1, description="Number of independent parser instances; 1 serializes all parsing")
    loop_binding: LoopBinding = Field("shared", description="'shared' binds loop variables into the caller's map, 'scoped' into a per-iteration child scope")
    trace_parsing: bool = Field(False, description="Log every template token at DEBUG level")
    log_level: str = Field("WARNING", description="Suggested level for setup_logging")

    @classmethod
    def from_env(cls) -> "ConverterSettings":
        """
        Builds settings from KITSUNE_JINJA2_* environment variables.
        Unset variables keep their defaults; invalid values raise pydantic.ValidationError.
        """
        values: Dict[str, Any] = {}

        pool_size = os.environ.get(f"{ENV_PREFIX}PARSER_POOL_SIZE")
        if pool_size is not None:
            values["parser_pool_size"] = pool_size

        loop_binding = os.environ.get(f"{ENV_PREFIX}LOOP_BINDING")
        if loop_binding is not None:
            values["loop_binding"] = loop_binding.strip().lower()

        trace_parsing = os.environ.get(f"{ENV_PREFIX}TRACE_PARSING")
        if trace_parsing is not None:
            values["trace_parsing"] = trace_parsing.lower() == "true"

        log_level = os.environ.get(f"{ENV_PREFIX}LOG_LEVEL")
        if log_level is not None:
            values["log_level"] = log_level.upper()

        logger.debug(f"Loaded converter settings from environment: {values}")
        return cls(**values)
