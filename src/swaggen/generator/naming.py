"""Turn spec names into Python identifiers.

Spec names come in every shape (``getPetById``, ``pet-store``, ``200``,
``Not Found``). They are split into words first, then joined back in the
style each kind of identifier needs:

  - ``to_snake_name("getPetById")``  -> ``get_pet_by_id``
  - ``to_class_name("search OK")``   -> ``SearchOK``
  - ``to_constant_name("in-stock")`` -> ``IN_STOCK``

Python keywords get a trailing underscore, and names that would start with
a digit get a prefix.
"""

from __future__ import annotations

import keyword
import re
from http import HTTPStatus

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")
_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+")


def split_words(text: str) -> list[str]:
    """Split camelCase, PascalCase, and punctuated text into words."""
    s1 = _ACRONYM_BOUNDARY.sub(r"\1_\2", str(text))
    s2 = _CAMEL_BOUNDARY.sub(r"\1_\2", s1)
    return [w for w in _NON_ALNUM.split(s2) if w]


def to_snake_name(text: str, default: str = "unnamed") -> str:
    """Return a snake_case identifier for *text*."""
    words = split_words(text)
    if not words:
        return default
    name = "_".join(w.lower() for w in words)
    if name[0].isdigit():
        name = f"n{name}"
    if keyword.iskeyword(name):
        name += "_"
    return name


def to_class_name(text: str, default: str = "Unnamed") -> str:
    """Return a PascalCase identifier, keeping acronyms (``OK``, ``ID``) intact."""
    words = split_words(text)
    if not words:
        return default
    name = "".join(w[0].upper() + w[1:] for w in words)
    if name[0].isdigit():
        name = f"N{name}"
    if keyword.iskeyword(name):
        name += "_"
    return name


def to_constant_name(value: object) -> str:
    """Return an UPPER_SNAKE identifier for an enum value."""
    words = split_words(str(value))
    if not words:
        return "EMPTY"
    name = "_".join(w.upper() for w in words)
    if name[0].isdigit():
        name = f"VALUE_{name}"
    return name


def to_file_name(text: str) -> str:
    """Return a module file stem (without ``.py``) for *text*."""
    return to_snake_name(text)


def mangle_package(name: str, default: str) -> str:
    """Return *name* as a valid package identifier, or *default* when empty."""
    return to_snake_name(name, default=default)


def status_text(code: str) -> str:
    """Return the reason phrase for an HTTP status code string.

    ``"default"`` and unknown codes are returned unchanged, so they can still
    be used to build a name.
    """
    try:
        return HTTPStatus(int(code)).phrase
    except ValueError:
        return code
