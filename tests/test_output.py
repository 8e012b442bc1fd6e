"""Tests for swaggen.output.

Covers format resolution, colour disabling, the stdout/stderr split,
the quiet mode, JSON dumps of the codegen model, tables, and the
global instance.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from swaggen import output as output_module
from swaggen.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("swaggen.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("swaggen.output._is_tty", lambda: True)


# ------------------------------------------------------------------ #
# Format and colour
# ------------------------------------------------------------------ #


class TestFormatResolution:
    def test_auto_is_plain_when_piped(self, non_tty):
        assert OutputManager().format == OutputFormat.PLAIN

    def test_auto_is_rich_on_a_terminal(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert OutputManager().format == OutputFormat.RICH

    def test_no_color_flag_forces_plain(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        assert OutputManager(no_color=True).format == OutputFormat.PLAIN

    def test_explicit_format_is_kept(self, non_tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    def test_no_color_env(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# Streams
# ------------------------------------------------------------------ #


class TestStreams:
    """Generated file lists and dumps go to stdout, diagnostics to stderr."""

    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).print_data("out/models.py")
        captured = capfd.readouterr()
        assert captured.out == "out/models.py\n"
        assert captured.err == ""

    @pytest.mark.parametrize("method", ["info", "success", "warning", "error"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        getattr(mgr, method)("message text")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "message text" in captured.err

    def test_prefixes_without_color(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.warning("careful")
        mgr.error("broken")
        mgr.suggest("try --include-main")
        err = capfd.readouterr().err.splitlines()
        assert err == ["Warning: careful", "Error: broken", "→ try --include-main"]


class TestQuiet:
    def test_quiet_keeps_warnings_and_errors(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.info("hidden")
        mgr.success("hidden")
        mgr.suggest("hidden")
        mgr.warning("shown")
        mgr.error("shown")
        err = capfd.readouterr().err
        assert "hidden" not in err
        assert err.count("shown") == 2


# ------------------------------------------------------------------ #
# Structured data
# ------------------------------------------------------------------ #


class TestPrintJson:
    def test_plain_json_is_parseable(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_json({"name": "petstore", "operations": [{"name": "ListPets"}]})
        parsed = json.loads(capfd.readouterr().out)
        assert parsed["operations"][0]["name"] == "ListPets"

    def test_non_json_values_use_str(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.print_json({"path": Path("out") / "models.py"})
        assert json.loads(capfd.readouterr().out) == {"path": "out/models.py"}


class TestPrintTable:
    def test_json_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.print_table(["Method", "Path"], [["GET", "/pets"]])
        assert json.loads(capfd.readouterr().out) == [{"Method": "GET", "Path": "/pets"}]

    def test_plain_mode_ignores_title(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_table(["Method", "Path"], [["GET", "/pets"]], title="Operations")
        assert capfd.readouterr().out.splitlines() == ["Method\tPath", "GET\t/pets"]

    def test_rich_mode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.print_table(["Definition"], [["Pet"]], title="Models")
        out = capfd.readouterr().out
        assert "Definition" in out
        assert "Pet" in out
        assert "Models" in out


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self):
        assert isinstance(get_output(), OutputManager)

    def test_set_then_reset(self):
        custom = OutputManager(format=OutputFormat.JSON, no_color=True)
        set_output(custom)
        assert get_output() is custom
        reset_output()
        assert get_output() is not custom

    def test_convenience_functions_use_global(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        output_module.print_data("data")
        output_module.info("note")
        captured = capfd.readouterr()
        assert captured.out == "data\n"
        assert captured.err == "note\n"

    def test_warning_uses_global(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True))
        output_module.warning("careful")
        assert capfd.readouterr().err == "Warning: careful\n"
