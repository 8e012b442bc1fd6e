"""Exception hierarchy for swaggen.

Input errors inherit from :class:`SwaggenError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`swaggen.exit_codes`.
The top-level error handler in :func:`swaggen.app.main` catches
``SwaggenError`` and exits with the appropriate code.

Packaging defects (a built-in template that is missing or does not parse)
are raised as :class:`TemplateDefect`, which deliberately does **not**
inherit from ``SwaggenError``: code that handles recoverable input errors
never swallows it, and the entry point treats it as a crash.

Subclass hierarchy::

    SwaggenError (exit 1)
    +-- InvalidUsageError              (exit 2)
    +-- SpecParseError                 (exit 7)
    |   +-- UnsupportedVersionError
    |   +-- SpecValidationError
    +-- ReferenceResolutionError       (exit 8)
    |   +-- UnresolvedReferenceError
    |   +-- CircularReferenceError
    +-- GenerationError                (exit 9)
    |   +-- NoOperationsError
    |   +-- TemplateRenderError
    |   +-- FormatError
    +-- ConfigError                    (exit 1)

    TemplateDefect (RuntimeError, exit 70)
"""

from __future__ import annotations

from swaggen.exit_codes import (
    EXIT_GENERATION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INTERNAL_DEFECT,
    EXIT_INVALID_USAGE,
    EXIT_REFERENCE_ERROR,
    EXIT_SPEC_PARSE_ERROR,
)


class SwaggenError(Exception):
    """Base exception for all recoverable swaggen errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`swaggen.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SwaggenError):
    """Raised for invalid CLI arguments or missing required options."""

    exit_code = EXIT_INVALID_USAGE


class SpecParseError(SwaggenError):
    """Raised when the spec document cannot be read or parsed."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class UnsupportedVersionError(SpecParseError):
    """Raised when a document declares a version other than Swagger ``2.0``."""

    def __init__(self, version: str):
        super().__init__(f"spec version {version!r} is not supported")
        self.version = version


class SpecValidationError(SpecParseError):
    """Raised when a document fails validation against the Swagger 2.0 schema.

    Args:
        message: Summary line.
        errors: Every individual validation message, in reporting order.
    """

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = list(errors or [])


class ReferenceResolutionError(SwaggenError):
    """Base class for ``$ref`` resolution failures."""

    exit_code = EXIT_REFERENCE_ERROR


class UnresolvedReferenceError(ReferenceResolutionError):
    """Raised when a ``$ref`` points at a target that does not exist."""

    def __init__(self, ref: str, reason: str = ""):
        message = f"Cannot resolve $ref '{ref}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.ref = ref
        self.reason = reason


class CircularReferenceError(ReferenceResolutionError):
    """Raised when a ``$ref`` is reached again while it is still being expanded.

    ``chain`` holds the locators on the active path, ending with the one
    that closed the cycle. ``hint`` is appended to the message when set.
    """

    def __init__(self, chain: list[str], hint: str = ""):
        message = "Circular $ref detected: " + " -> ".join(chain)
        if hint:
            message += f" ({hint})"
        super().__init__(message)
        self.chain = list(chain)
        self.hint = hint



class GenerationError(SwaggenError):
    """Base class for failures while building or rendering the codegen model."""

    exit_code = EXIT_GENERATION_ERROR


class NoOperationsError(GenerationError):
    """Raised when filtering leaves no operation to generate."""


class TemplateRenderError(GenerationError):
    """Raised when a registered template fails against a specific model."""

    def __init__(self, template: str, reason: str):
        super().__init__(f"Template '{template}' failed to render: {reason}")
        self.template = template


class FormatError(GenerationError):
    """Raised when rendered output is not valid source for its file type."""

    def __init__(self, file_name: str, reason: str):
        super().__init__(f"Generated file '{file_name}' is invalid: {reason}")
        self.file_name = file_name


class ConfigError(SwaggenError):
    """Raised for configuration problems (unreadable or invalid config files)."""

    exit_code = EXIT_GENERIC_FAILURE


class TemplateDefect(RuntimeError):
    """A built-in template is unregistered or its source does not parse.

    This signals a packaging bug in swaggen itself, not a problem with the
    user's spec, so it is kept outside the :class:`SwaggenError` hierarchy
    and is never handled as an ordinary failure.
    """

    exit_code = EXIT_INTERNAL_DEFECT

    def __init__(self, template: str, reason: str):
        super().__init__(f"Template '{template}': {reason}")
        self.template = template
