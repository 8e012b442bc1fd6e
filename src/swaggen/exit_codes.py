"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~swaggen.exceptions.SwaggenError` subclass.
Build scripts and CI jobs can inspect the exit code to tell a broken spec
from a broken generator without parsing stderr.

Example::

    $ swaggen generate server --spec swagger.yml
    $ echo $?
    8   # EXIT_REFERENCE_ERROR -- a $ref could not be resolved
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required options."""

EXIT_SPEC_PARSE_ERROR = 7
"""The specification could not be parsed, has an unsupported version, or failed validation."""

EXIT_REFERENCE_ERROR = 8
"""A ``$ref`` pointer is dangling or part of a reference cycle."""

EXIT_GENERATION_ERROR = 9
"""The codegen model could not be built or a template failed to render."""

EXIT_INTERNAL_DEFECT = 70
"""A built-in template is missing or malformed (EX_SOFTWARE). Not user-fixable."""
