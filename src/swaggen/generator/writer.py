"""Run a whole generation: load, validate, build, render, format and write.

:func:`generate_server` and :func:`generate_client` are the library entry
points behind ``swaggen generate server`` and ``swaggen generate client``.
Both return the paths they wrote, in writing order.

Server layout under ``opts.target`` (package names after mangling)::

    restapi/
        <name>_api.py           server_builder
        configure_<name>.py     server_configure_api (only if missing)
        runtime.py              server_runtime
        embedded_spec.py        server_embedded_spec
        operations/<tag>/<op>.py  server_operation
    models/models.py            models
    cmd/<name>_server/main.py   server_main

Every package directory gets an empty ``__init__.py`` when it has none.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from swaggen.exceptions import InvalidUsageError
from swaggen.generator.builder import AppGenerator
from swaggen.generator.formatter import format_content
from swaggen.generator.templates import TemplateRegistry, load_builtin_templates
from swaggen.models import CodegenApp, GenOpts
from swaggen.output import print_json
from swaggen.spec.document import Document
from swaggen.spec.loader import load_spec
from swaggen.spec.validator import validate_document

logger = logging.getLogger(__name__)


def build_app(opts: GenOpts) -> CodegenApp:
    """Load (and optionally validate) ``opts.spec`` and build its codegen model.

    Raises:
        InvalidUsageError: If no spec is configured.
        SpecParseError: If the document cannot be loaded or is invalid.
        ReferenceResolutionError: If references cannot be resolved.
        NoOperationsError: If the filters leave no operation.
    """
    doc = _load(opts)
    return AppGenerator(doc, opts).make_codegen_app()


def generate_server(opts: GenOpts, templates: Optional[TemplateRegistry] = None) -> list[Path]:
    """Generate the server packages for ``opts.spec`` into ``opts.target``.

    With ``opts.dump_data`` the codegen model is printed as JSON instead and
    nothing is written.

    Args:
        opts: Generation options.
        templates: Registry to render with; the built-in templates by default.

    Returns:
        The paths written.
    """
    app = build_app(opts)
    if opts.dump_data:
        print_json(app.model_dump(mode="json"))
        return []

    templates = templates or load_builtin_templates()
    writer = _Writer(Path(opts.target), templates)
    server = Path(app.server_package)

    if opts.include_model:
        writer.render("models", app, Path(app.models_package) / "models.py")

    if opts.include_handler or opts.include_parameters or opts.include_responses:
        for op in app.operations:
            package = Path(app.server_package, app.api_package, *filter(None, [op.package]))
            writer.render(
                "server_operation", {"app": app, "op": op}, package / f"{op.func_name}.py"
            )

    if opts.include_support:
        writer.render("server_runtime", app, server / "runtime.py")
        writer.render("server_builder", app, server / f"{app.name}_api.py")
        writer.render(
            "server_configure_api", app, server / f"configure_{app.name}.py", overwrite=False
        )
        if not opts.exclude_spec:
            writer.render("server_embedded_spec", app, server / "embedded_spec.py")

    if opts.include_main:
        writer.render("server_main", app, Path("cmd", f"{app.name}_server", "main.py"), package=False)

    logger.debug("Generated %d files for server '%s'", len(writer.written), app.name)
    return writer.written


def generate_client(opts: GenOpts, templates: Optional[TemplateRegistry] = None) -> list[Path]:
    """Generate the client facade (and models) for ``opts.spec``.

    Returns:
        The paths written.
    """
    app = build_app(opts)
    if opts.dump_data:
        print_json(app.model_dump(mode="json"))
        return []

    templates = templates or load_builtin_templates()
    writer = _Writer(Path(opts.target), templates)
    if opts.include_model:
        writer.render("models", app, Path(app.models_package) / "models.py")
    writer.render("client_facade", app, Path(app.client_package) / f"{app.name}_client.py")

    logger.debug("Generated %d files for client '%s'", len(writer.written), app.name)
    return writer.written


def _load(opts: GenOpts) -> Document:
    if not opts.spec:
        raise InvalidUsageError("No spec given: pass a path or set SWAGGEN_SPEC")
    doc = load_spec(opts.spec)
    if opts.validate_spec:
        validate_document(doc)
    return doc


class _Writer:
    """Renders templates to files below *target*, recording what it wrote."""

    def __init__(self, target: Path, templates: TemplateRegistry) -> None:
        self._target = target
        self._templates = templates
        self.written: list[Path] = []

    def render(
        self,
        template: str,
        model: object,
        relative: Path,
        overwrite: bool = True,
        package: bool = True,
    ) -> Optional[Path]:
        path = self._target / relative
        if not overwrite and path.exists():
            logger.debug("Keeping existing %s", path)
            return None

        content = format_content(path.name, self._templates.render(template, model))
        path.parent.mkdir(parents=True, exist_ok=True)
        if package:
            self._ensure_packages(relative.parent)
        path.write_text(content, encoding="utf-8")
        logger.debug("Wrote %s", path)
        self.written.append(path)
        return path

    def _ensure_packages(self, relative_dir: Path) -> None:
        current = self._target
        for part in relative_dir.parts:
            current = current / part
            init = current / "__init__.py"
            if not init.exists():
                init.write_text("", encoding="utf-8")
                self.written.append(init)
