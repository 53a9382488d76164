"""
Pydantic models shared across the converter.
"""
import logging
from typing import Any, Dict, Tuple

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ConversionResult(BaseModel):
    """
    Result of one template conversion.

    On success `content` holds the rendered text; on failure it holds the
    error text and never any partially rendered output.
    """
    success: bool
    content: str = Field(default="", description="Rendered text on success, error text on failure")
    notes: Dict[str, Any] = Field(default_factory=dict, description="Additional metadata about the conversion")

    def as_tuple(self) -> Tuple[bool, str]:
        """Returns the (success, output_or_error) pair."""
        return self.success, self.content
