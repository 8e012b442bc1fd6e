"""Built-in CLI sub-commands for swaggen.

* :mod:`~swaggen.commands.generate` -- ``generate server`` and
  ``generate client``.
* :mod:`~swaggen.commands.inspect` -- list the operations and models of a
  document.
* :mod:`~swaggen.commands.validate` -- check a document against the
  Swagger 2.0 schema.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``generate``) or a plain callback function
registered directly on the root app (for single commands like
``validate``).
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import typer

from swaggen.exceptions import SpecValidationError, SwaggenError
from swaggen.output import error, info


@contextmanager
def reporting_errors() -> Iterator[None]:
    """Report a :class:`SwaggenError` on stderr and exit with its code.

    Anything else, :class:`~swaggen.exceptions.TemplateDefect` included,
    propagates to :func:`swaggen.app.main`.
    """
    try:
        yield
    except SwaggenError as exc:
        error(str(exc))
        if isinstance(exc, SpecValidationError):
            for message in exc.errors[1:]:
                info(f"  {message}")
        raise typer.Exit(code=exc.exit_code) from None
