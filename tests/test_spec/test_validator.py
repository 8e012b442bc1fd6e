"""Tests for swaggen.spec.validator."""

from __future__ import annotations

from pathlib import Path

import pytest

from swaggen.exceptions import SpecParseError, SpecValidationError
from swaggen.spec.loader import load_spec, new_document
from swaggen.spec.validator import validate_document

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


class TestValidateDocument:
    """Test meta-schema validation of loaded documents."""

    @pytest.mark.parametrize(
        "fixture",
        ["petstore.json", "simplesearch.yml", "tags.yml", "multipart.yml", "trailing_slash.yml"],
    )
    def test_valid_fixtures_pass(self, fixture: str) -> None:
        validate_document(load_spec(FIXTURES_DIR / fixture))

    def test_invalid_document_lists_errors(self) -> None:
        doc = load_spec(FIXTURES_DIR / "invalid.yml")
        with pytest.raises(SpecValidationError) as exc_info:
            validate_document(doc)
        assert exc_info.value.errors
        assert "invalid against the Swagger 2.0 schema" in str(exc_info.value)

    def test_validation_error_is_a_parse_error(self) -> None:
        doc = new_document(b'{"swagger": "2.0", "info": {"title": "x", "version": "1"}}')
        with pytest.raises(SpecParseError):
            validate_document(doc)
