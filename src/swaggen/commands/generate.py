"""Generate commands -- write server or client code for a document.

Every flag maps onto a :class:`~swaggen.models.GenOpts` field. Flags that
are not given leave the value from the config file, the environment or the
defaults in place (see :mod:`swaggen.config`).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer

from swaggen.commands import reporting_errors
from swaggen.config import resolve_gen_opts
from swaggen.generator import generate_client, generate_server
from swaggen.output import print_data, success, suggest, warning

generate_app = typer.Typer(no_args_is_help=True)

_SPEC_ARG = typer.Argument(None, help="Path or URL of the Swagger 2.0 document.")
_TARGET = typer.Option(None, "--target", "-t", help="Output directory.")
_NAME = typer.Option(None, "--name", "-A", help="Application name (defaults to info.title).")
_CONFIG = typer.Option(None, "--config", "-c", help="Config file (YAML or JSON).")
_TAGS = typer.Option([], "--tag", help="Only operations with this tag (repeatable).")
_OPERATIONS = typer.Option([], "--operation", "-O", help="Only this operation id (repeatable).")
_MODELS = typer.Option([], "--model", "-M", help="Only this definition (repeatable).")
_MODEL_PACKAGE = typer.Option(None, "--model-package", "-m", help="Package for models.")
_SKIP_MODELS = typer.Option(False, "--skip-models", help="Do not generate models.")
_SKIP_VALIDATION = typer.Option(False, "--skip-validation", help="Do not validate the document.")
_DUMP_DATA = typer.Option(None, "--dump-data/--no-dump-data", help="Print the codegen model as JSON and exit.")


def _overrides(**flags: Any) -> dict[str, Any]:
    """Turn CLI flags into ``GenOpts`` overrides, dropping the ones not given.

    Boolean flags default to ``None`` so an explicit ``--no-...`` (``False``)
    still overrides the config file.
    """
    result: dict[str, Any] = {}
    for key, value in flags.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)) and not value:
            continue
        result[key] = value
    return result


def _report(paths: list[Path], target: str) -> None:
    if not paths:
        return
    for path in paths:
        print_data(str(path))
    success(f"Generated {len(paths)} files in {target}")


@generate_app.command("server")
def generate_server_command(
    spec: Optional[str] = _SPEC_ARG,
    target: Optional[str] = _TARGET,
    name: Optional[str] = _NAME,
    config: Optional[Path] = _CONFIG,
    tags: list[str] = _TAGS,
    operation_ids: list[str] = _OPERATIONS,
    model_names: list[str] = _MODELS,
    api_package: Optional[str] = typer.Option(None, "--api-package", "-a", help="Package for operations."),
    model_package: Optional[str] = _MODEL_PACKAGE,
    server_package: Optional[str] = typer.Option(None, "--server-package", "-s", help="Package for the server."),
    principal: Optional[str] = typer.Option(None, "--principal", "-P", help="Type of the authenticated principal."),
    default_scheme: Optional[str] = typer.Option(None, "--default-scheme", help="Scheme when the document declares none."),
    skip_models: bool = _SKIP_MODELS,
    skip_operations: bool = typer.Option(False, "--skip-operations", help="Do not generate operation modules."),
    skip_support: bool = typer.Option(False, "--skip-support", help="Do not generate builder, configure and runtime files."),
    include_main: Optional[bool] = typer.Option(None, "--include-main/--no-include-main", help="Also generate cmd/<name>_server/main.py."),
    exclude_spec: Optional[bool] = typer.Option(None, "--exclude-spec/--no-exclude-spec", help="Do not embed the document."),
    skip_validation: bool = _SKIP_VALIDATION,
    dump_data: Optional[bool] = _DUMP_DATA,
) -> None:
    """Generate a server for SPEC.

    Example::

        swaggen generate server swagger.yml --target ./out --tag search
    """
    overrides = _overrides(
        spec=spec,
        target=target,
        name=name,
        tags=tags,
        operation_ids=operation_ids,
        model_names=model_names,
        api_package=api_package,
        model_package=model_package,
        server_package=server_package,
        principal=principal,
        default_scheme=default_scheme,
        include_main=include_main,
        exclude_spec=exclude_spec,
        dump_data=dump_data,
    )
    if skip_models:
        overrides["include_model"] = False
    if skip_operations:
        overrides.update(include_handler=False, include_parameters=False, include_responses=False)
    if skip_support:
        overrides["include_support"] = False
    if skip_validation:
        overrides["validate_spec"] = False
        warning("Skipping validation; invalid documents may produce broken code")

    with reporting_errors():
        opts = resolve_gen_opts(config, overrides)
        paths = generate_server(opts)
    _report(paths, opts.target)
    if paths and not opts.include_main:
        suggest("Add --include-main to also generate a server entry point")


@generate_app.command("client")
def generate_client_command(
    spec: Optional[str] = _SPEC_ARG,
    target: Optional[str] = _TARGET,
    name: Optional[str] = _NAME,
    config: Optional[Path] = _CONFIG,
    tags: list[str] = _TAGS,
    operation_ids: list[str] = _OPERATIONS,
    model_names: list[str] = _MODELS,
    client_package: Optional[str] = typer.Option(None, "--client-package", "-C", help="Package for the client."),
    model_package: Optional[str] = _MODEL_PACKAGE,
    default_scheme: Optional[str] = typer.Option(None, "--default-scheme", help="Scheme when the document declares none."),
    skip_models: bool = _SKIP_MODELS,
    skip_validation: bool = _SKIP_VALIDATION,
    dump_data: Optional[bool] = _DUMP_DATA,
) -> None:
    """Generate a client for SPEC.

    Example::

        swaggen generate client swagger.yml --target ./out
    """
    overrides = _overrides(
        spec=spec,
        target=target,
        name=name,
        tags=tags,
        operation_ids=operation_ids,
        model_names=model_names,
        client_package=client_package,
        model_package=model_package,
        default_scheme=default_scheme,
        dump_data=dump_data,
    )
    if skip_models:
        overrides["include_model"] = False
    if skip_validation:
        overrides["validate_spec"] = False
        warning("Skipping validation; invalid documents may produce broken code")

    with reporting_errors():
        opts = resolve_gen_opts(config, overrides)
        paths = generate_client(opts)
    _report(paths, opts.target)
