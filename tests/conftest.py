"""Shared test fixtures for swaggen.

Provides reusable fixtures for loading the fixture documents, building
generation options, managing output state, and running CLI commands.
These fixtures are automatically discovered by pytest and available to
all test modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from swaggen.generator.templates import TemplateRegistry, load_builtin_templates
from swaggen.models import GenOpts
from swaggen.output import OutputFormat, OutputManager, reset_output, set_output
from swaggen.spec.document import Document
from swaggen.spec.loader import load_spec


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Loaded documents
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_doc() -> Document:
    """The petstore document: refs, security, allOf and an enum."""
    return load_spec(FIXTURES_DIR / "petstore.json")


@pytest.fixture
def simplesearch_doc() -> Document:
    """A small YAML document with a form-encoded and a body operation."""
    return load_spec(FIXTURES_DIR / "simplesearch.yml")


@pytest.fixture
def tags_doc() -> Document:
    return load_spec(FIXTURES_DIR / "tags.yml")


# ---------------------------------------------------------------------------
# Generation options
# ---------------------------------------------------------------------------


@pytest.fixture
def opts_for(tmp_path: Path):
    """Return a factory building GenOpts for a fixture file, targeting tmp_path."""

    def _make(fixture: str, **overrides) -> GenOpts:
        return GenOpts(spec=str(FIXTURES_DIR / fixture), target=str(tmp_path / "out"), **overrides)

    return _make


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def builtin_templates() -> TemplateRegistry:
    """The built-in registry, loaded once; rendering does not mutate it."""
    return load_builtin_templates()


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, plain-text OutputManager as the global instance."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    return output


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-mode OutputManager as the global instance."""
    output = OutputManager(format=OutputFormat.JSON, no_color=True)
    set_output(output)
    return output


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()
