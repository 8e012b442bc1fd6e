"""Typer application and CLI entry point for swaggen.

This module wires together the top-level Typer application and registers
the built-in sub-commands (``generate``, ``inspect``, ``validate``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Unhandled :class:`~swaggen.exceptions.SwaggenError`
instances exit with their ``exit_code``. A
:class:`~swaggen.exceptions.TemplateDefect` or any other unexpected
exception is written to a crash log first.

See Also:
    :mod:`swaggen.config`: Generation option resolution.
    :mod:`swaggen.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import tempfile
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any

import typer

from swaggen import __version__
from swaggen.commands.generate import generate_app
from swaggen.commands.inspect import inspect_app
from swaggen.commands.validate import validate_command
from swaggen.exceptions import SwaggenError, TemplateDefect
from swaggen.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERNAL_DEFECT
from swaggen.output import OutputFormat, OutputManager, error, set_output

app = typer.Typer(
    name="swaggen",
    help="Generate Python servers and clients from Swagger 2.0 documents.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.add_typer(generate_app, name="generate", help="Generate server or client code.")
app.add_typer(inspect_app, name="inspect", help="Inspect a Swagger 2.0 document.")
app.command("validate")(validate_command)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"swaggen {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~swaggen.output.OutputManager` and, with
    ``--verbose``, routes library debug logging to stderr.
    """
    output = OutputManager(
        format=OutputFormat.JSON if json_output else OutputFormat.AUTO,
        no_color=no_color,
        quiet=quiet,
    )
    set_output(output)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="[debug] %(name)s: %(message)s",
            stream=sys.stderr,
        )


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: BaseException) -> str:
    """Write the current traceback to a crash log and return its path."""
    logs_dir = Path(tempfile.gettempdir()) / "swaggen" / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        encoding="utf-8",
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``swaggen`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except SwaggenError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except TemplateDefect as exc:
        log_path = _write_crash_log(exc)
        error(f"Internal error: {exc}. Debug log: {log_path}")
        sys.exit(EXIT_INTERNAL_DEFECT)
    except Exception as exc:
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
