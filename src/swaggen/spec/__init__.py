"""Swagger 2.0 document loading, ``$ref`` expansion and analysis.

This sub-package is responsible for the first half of the swaggen pipeline:
turning a spec file (JSON or YAML) into a
:class:`~swaggen.spec.document.Document` whose
:class:`~swaggen.spec.analyzer.Analyzer` the generator can consume.

Typical usage::

    from swaggen.spec import load_spec, validate_document

    doc = load_spec("swagger.yml")
    validate_document(doc)
    flat = doc.expanded()
    for op in doc.analyzer.all_operations():
        print(op.method.value.upper(), op.path)

Sub-modules:

* :mod:`~swaggen.spec.loader` -- I/O layer (file, URL) plus format
  detection and the version gate.
* :mod:`~swaggen.spec.document` -- The :class:`Document` value.
* :mod:`~swaggen.spec.expander` -- Recursive ``$ref`` expansion with cycle
  detection.
* :mod:`~swaggen.spec.analyzer` -- Operation, media type, security and
  definition indices.
* :mod:`~swaggen.spec.validator` -- Optional meta-schema validation.
"""

from swaggen.spec.analyzer import Analyzer
from swaggen.spec.document import SUPPORTED_VERSION, Document
from swaggen.spec.expander import RefResolver, expand_spec
from swaggen.spec.loader import fetch_document, load_spec, new_document
from swaggen.spec.validator import validate_document

__all__ = [
    "Analyzer",
    "Document",
    "RefResolver",
    "SUPPORTED_VERSION",
    "expand_spec",
    "fetch_document",
    "load_spec",
    "new_document",
    "validate_document",
]
