"""Code generation: codegen model, templates and file output.

This sub-package is the second half of the swaggen pipeline. It takes a
loaded :class:`~swaggen.spec.document.Document` and produces source files::

    from swaggen.generator import generate_server
    from swaggen.models import GenOpts

    paths = generate_server(GenOpts(spec="swagger.yml", target="out"))

Sub-modules:

* :mod:`~swaggen.generator.naming` -- Identifier mangling.
* :mod:`~swaggen.generator.builder` -- :class:`AppGenerator`, the
  codegen model builder.
* :mod:`~swaggen.generator.templates` -- :class:`TemplateRegistry`.
* :mod:`~swaggen.generator.formatter` -- Output normalization and syntax
  check.
* :mod:`~swaggen.generator.writer` -- The end-to-end entry points.
"""

from swaggen.generator.builder import AppGenerator, app_name_or_default
from swaggen.generator.formatter import format_content
from swaggen.generator.templates import TemplateRegistry, load_builtin_templates
from swaggen.generator.writer import build_app, generate_client, generate_server

__all__ = [
    "AppGenerator",
    "TemplateRegistry",
    "app_name_or_default",
    "build_app",
    "format_content",
    "generate_client",
    "generate_server",
    "load_builtin_templates",
]
