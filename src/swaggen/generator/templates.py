"""Named, pre-parsed Jinja2 templates for code generation.

A :class:`TemplateRegistry` owns one :class:`~jinja2.Environment` and the
source of every template registered with it. Templates are parsed when they
are added, so a broken template is reported at registration time instead
of half-way through writing a project.

The built-in templates live in ``swaggen/templates/`` as ``<name>.py.j2``
files and are loaded by :func:`load_builtin_templates`::

    registry = load_builtin_templates()
    registry.execute("server_builder", app, sink)

Besides the Jinja2 built-ins, templates can use these filters:

* ``pystr`` -- a double-quoted Python string literal.
* ``pyrepr`` -- ``repr()`` of a literal value (defaults, enum values).
* ``docstring`` -- text made safe to place inside ``\"\"\"...\"\"\"``.
* ``field_default`` -- a dataclass field default, using a factory for
  mutable values.
* ``snake`` / ``classname`` -- the identifier manglers from
  :mod:`swaggen.generator.naming`.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, TextIO

from jinja2 import (
    DictLoader,
    Environment,
    StrictUndefined,
    Template,
    TemplateError,
    TemplateNotFound,
    TemplateSyntaxError,
)
from pydantic import BaseModel

from swaggen.exceptions import TemplateDefect, TemplateRenderError
from swaggen.generator.naming import to_class_name, to_snake_name

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"
"""Path to the built-in template directory (``swaggen/templates/``)."""

TEMPLATE_SUFFIX = ".py.j2"


def _pystr(value: Any) -> str:
    # A JSON string literal is also a valid Python string literal.
    return json.dumps(str(value), ensure_ascii=False)


def _field_default(value: Any) -> str:
    # Mutable dataclass defaults must go through a factory.
    if isinstance(value, (list, dict, set)):
        return f"field(default_factory=lambda: {value!r})"
    return repr(value)


def _docstring(value: Any) -> str:
    text = str(value or "").strip().replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text += " "
    return text


class TemplateRegistry:
    """Registry of named templates sharing one Jinja2 environment.

    Registries are explicit objects: create one per generation run (or
    share one that is fully loaded) instead of relying on a module-level
    default. Rendering does not mutate the registry, so a loaded registry
    can be used by several threads at once.
    """

    def __init__(self) -> None:
        self._sources: dict[str, str] = {}
        self._templates: dict[str, Template] = {}
        self._env = Environment(
            loader=DictLoader(self._sources),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            autoescape=False,
        )
        self._env.filters["pystr"] = _pystr
        self._env.filters["pyrepr"] = repr
        self._env.filters["docstring"] = _docstring
        self._env.filters["field_default"] = _field_default
        self._env.filters["snake"] = to_snake_name
        self._env.filters["classname"] = to_class_name

    def add_file(self, name: str, source: str) -> None:
        """Parse *source* and register it under *name*.

        Registering an existing name replaces it.

        Raises:
            TemplateDefect: If *source* is not a valid template.
        """
        previous = self._sources.get(name)
        self._sources[name] = source
        try:
            template = self._env.get_template(name)
        except TemplateSyntaxError as exc:
            if previous is None:
                del self._sources[name]
            else:
                self._sources[name] = previous
            raise TemplateDefect(name, f"line {exc.lineno}: {exc.message}") from exc
        self._templates[name] = template
        logger.debug("Registered template '%s'", name)

    def add_directory(self, directory: str | Path, suffix: str = TEMPLATE_SUFFIX) -> list[str]:
        """Register every ``*<suffix>`` file in *directory*; return the names added."""
        added: list[str] = []
        for path in sorted(Path(directory).glob(f"*{suffix}")):
            name = path.name[: -len(suffix)]
            self.add_file(name, path.read_text(encoding="utf-8"))
            added.append(name)
        return added

    def must_get(self, name: str) -> Template:
        """Return the template registered as *name*.

        Raises:
            TemplateDefect: If no such template is registered.
        """
        try:
            return self._templates[name]
        except KeyError:
            raise TemplateDefect(name, "is not registered") from None

    def names(self) -> list[str]:
        return sorted(self._templates)

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def render(self, name: str, model: Any) -> str:
        """Render template *name* with *model* and return the text.

        A pydantic *model* exposes each of its fields as a top-level
        variable, plus the model itself as ``app``; a dict is used as the
        context directly.

        Raises:
            TemplateDefect: If *name* (or a template it includes) is not
                registered.
            TemplateRenderError: If rendering fails for this model.
        """
        template = self.must_get(name)
        try:
            return template.render(_context(model))
        except TemplateNotFound as exc:
            raise TemplateDefect(name, f"includes unknown template '{exc.name}'") from exc
        except (TemplateError, TypeError, ValueError, AttributeError) as exc:
            raise TemplateRenderError(name, str(exc)) from exc

    def execute(self, name: str, model: Any, sink: TextIO) -> None:
        """Render template *name* with *model* into *sink*.

        Nothing is written to *sink* when rendering fails.
        """
        sink.write(self.render(name, model))


def _context(model: Any) -> dict[str, Any]:
    if isinstance(model, BaseModel):
        context = {field: getattr(model, field) for field in type(model).model_fields}
        context["app"] = model
        return context
    if isinstance(model, dict):
        return dict(model)
    return {"app": model}


def load_builtin_templates(directory: str | Path | None = None) -> TemplateRegistry:
    """Return a registry holding every built-in template.

    Args:
        directory: Override the template directory, mainly for tests.

    Raises:
        TemplateDefect: If a built-in template does not parse.
    """
    registry = TemplateRegistry()
    names = registry.add_directory(directory or TEMPLATE_DIR)
    logger.debug("Loaded %d built-in templates", len(names))
    return registry
