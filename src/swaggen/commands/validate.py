"""Validate command -- check a document against the Swagger 2.0 schema."""

from __future__ import annotations

import typer

from swaggen.commands import reporting_errors
from swaggen.output import success
from swaggen.spec import load_spec, validate_document


def validate_command(
    spec: str = typer.Argument(..., help="Path or URL of the Swagger 2.0 document."),
) -> None:
    """Validate SPEC against the Swagger 2.0 schema.

    Exits with code 7 when the document cannot be loaded or is invalid.

    Example::

        swaggen validate swagger.yml
    """
    with reporting_errors():
        doc = load_spec(spec)
        validate_document(doc)
    success(f"{spec} is a valid Swagger {doc.version} document")
