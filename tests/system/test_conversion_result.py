"""
Unit tests for the ConversionResult model.
"""
import pytest
from pydantic import ValidationError

from kitsune_jinja2.system.models import ConversionResult


def test_defaults():
    result = ConversionResult(success=True)
    assert result.content == ""
    assert result.notes == {}


def test_as_tuple():
    assert ConversionResult(success=False, content="boom").as_tuple() == (False, "boom")


def test_notes_are_independent():
    first = ConversionResult(success=True)
    second = ConversionResult(success=True)
    first.notes["x"] = 1
    assert second.notes == {}


def test_success_is_required():
    with pytest.raises(ValidationError):
        ConversionResult(content="x")


def test_serializes():
    result = ConversionResult(success=False, content="e", notes={"path": "a.b"})
    assert result.model_dump() == {"success": False, "content": "e", "notes": {"path": "a.b"}}
