"""Inspect commands -- examine what a document would generate.

Provides the ``swaggen inspect`` sub-command group with read-only commands
that list the operations and the models of a Swagger 2.0 document, in
table or structured output format.
"""

from __future__ import annotations

import typer

from swaggen.commands import reporting_errors
from swaggen.generator.builder import definition_kind, model_class_names, py_type
from swaggen.output import get_output, info
from swaggen.spec import load_spec

inspect_app = typer.Typer(no_args_is_help=True)


@inspect_app.command("operations")
def inspect_operations(
    spec: str = typer.Argument(..., help="Path or URL of the Swagger 2.0 document."),
    tag: list[str] = typer.Option([], "--tag", help="Only operations with this tag."),
) -> None:
    """List the operations of SPEC.

    Example::

        swaggen inspect operations swagger.yml --tag search
    """
    with reporting_errors():
        doc = load_spec(spec)
        operations = doc.analyzer.all_operations()

    if tag:
        operations = [op for op in operations if set(tag).intersection(op.tags)]
    if not operations:
        info("No operations found.")
        return

    rows = [
        [
            op.method.value.upper(),
            op.path,
            op.operation_id or "-",
            ", ".join(op.tags) or "-",
            ", ".join(op.consumes) or "-",
        ]
        for op in operations
    ]
    get_output().print_table(
        ["Method", "Path", "Operation ID", "Tags", "Consumes"],
        rows,
        title=f"{doc.info.title or spec} -- Operations ({len(rows)})",
    )


@inspect_app.command("models")
def inspect_models(
    spec: str = typer.Argument(..., help="Path or URL of the Swagger 2.0 document."),
) -> None:
    """List the definitions of SPEC and the class each one becomes.

    Example::

        swaggen inspect models swagger.yml
    """
    with reporting_errors():
        doc = load_spec(spec)
        definitions = doc.analyzer.definitions

    if not definitions:
        info("No definitions in this document.")
        return

    class_names = model_class_names(definitions)
    rows: list[list[str]] = []
    for name, schema in sorted(definitions.items()):
        if not isinstance(schema, dict):
            continue
        kind = definition_kind(schema)
        props = list((schema.get("properties") or {}).keys())
        detail = py_type(schema, names=class_names) if kind == "alias" else ", ".join(props[:5])
        if kind != "alias" and len(props) > 5:
            detail += "..."
        rows.append([name, class_names[name], kind, detail or "-"])

    get_output().print_table(
        ["Definition", "Class", "Kind", "Properties"], rows, title=f"Models ({len(rows)})"
    )
