"""Normalize rendered files and check generated Python sources."""

from __future__ import annotations

import ast
import re

from swaggen.exceptions import FormatError

_BLANK_RUNS = re.compile(r"\n{4,}")


def format_content(file_name: str, content: str) -> str:
    """Return *content* tidied for writing to *file_name*.

    Trailing whitespace is stripped from every line, runs of blank lines are
    capped at two and the file ends with exactly one newline. ``.py`` files
    must also parse as Python.

    Raises:
        FormatError: If a ``.py`` file does not parse.
    """
    lines = [line.rstrip() for line in content.splitlines()]
    text = _BLANK_RUNS.sub("\n\n\n", "\n".join(lines)).strip("\n")
    text = f"{text}\n" if text else ""

    if file_name.endswith(".py"):
        try:
            ast.parse(text, filename=file_name)
        except SyntaxError as exc:
            raise FormatError(file_name, f"line {exc.lineno}: {exc.msg}") from exc
    return text
