"""Expand ``$ref`` JSON Reference pointers in Swagger 2.0 documents.

Swagger documents use ``$ref`` pointers (e.g.
``{"$ref": "#/definitions/Pet"}``) to share definitions, parameters and
responses. :func:`expand_spec` walks the document and replaces every
reference with an inlined copy of its target, following references inside
the targets in turn until none are left.

Two references to the same target produce equal but independent copies,
so the expanded graph is a tree and contains no shared nodes.

Cycle detection uses the set of locators on the active resolution path.
Reaching a locator that is already on that path raises
:class:`~swaggen.exceptions.CircularReferenceError`; a sibling branch that
references the same target again is not a cycle. Targets that do not exist
raise :class:`~swaggen.exceptions.UnresolvedReferenceError`. There is no
partial expansion: the first failure aborts the walk.

External references (``common.yaml#/definitions/Error``) are only followed
when a document loader is supplied, typically
:func:`~swaggen.spec.loader.fetch_document`. Relative locations are
resolved against the referring document.
"""

from __future__ import annotations

import logging
import posixpath
from typing import Any, Callable, Optional
from urllib.parse import unquote, urljoin

from swaggen.exceptions import (
    CircularReferenceError,
    SwaggenError,
    UnresolvedReferenceError,
)

logger = logging.getLogger(__name__)

DocLoader = Callable[[str], dict[str, Any]]
"""Signature of an external document loader: locator in, parsed dict out."""


def expand_spec(
    spec: dict[str, Any],
    loader: Optional[DocLoader] = None,
    base: str = "",
) -> dict[str, Any]:
    """Return a copy of *spec* with every ``$ref`` expanded.

    The input is never mutated.

    Args:
        spec: The parsed document.
        loader: Optional hook that loads external documents by locator.
        base: Location of *spec* itself, used to resolve relative external
            references.

    Returns:
        A new dict containing no reference nodes.

    Raises:
        UnresolvedReferenceError: If a target cannot be found, or an
            external reference is met without a loader.
        CircularReferenceError: If a reference is reached again while it
            is still being expanded.

    Example::

        flat = expand_spec(doc.spec)
        flat["paths"]["/pets"]["get"]["responses"]["200"]["schema"]
        # -> the inlined Pet schema instead of {"$ref": ...}
    """
    return RefResolver(spec, loader, base).expand()


def resolve_pointer(root: Any, ref: str) -> Any:
    """Resolve an in-document pointer such as ``#/definitions/Pet``.

    Handles RFC 6901 escaping (``~0`` for ``~``, ``~1`` for ``/``) and
    percent-encoding. Only a single hop is followed: a target that is itself
    a reference is returned as-is.

    Raises:
        UnresolvedReferenceError: If the pointer is not an in-document
            pointer or any segment does not exist.
    """
    if ref in ("", "#"):
        return root
    if not ref.startswith("#/"):
        raise UnresolvedReferenceError(ref, "not an in-document pointer")

    current: Any = root
    for segment in ref[2:].split("/"):
        segment = unquote(segment).replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                raise UnresolvedReferenceError(ref, f"key '{segment}' not found")
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise UnresolvedReferenceError(
                    ref, f"invalid array index '{segment}'"
                ) from exc
        else:
            raise UnresolvedReferenceError(
                ref, f"cannot navigate into {type(current).__name__}"
            )

    return current


class RefResolver:
    """Resolves references against one root document and the documents it pulls in.

    External documents are fetched through *loader* at most once per
    resolver. :meth:`expand` inlines every reference; :meth:`follow` only
    walks a reference chain to its first concrete node.

    Args:
        root: The parsed root document.
        loader: Optional hook that loads external documents by locator.
        base: Location of *root*, used to resolve relative external references.
    """

    def __init__(self, root: dict[str, Any], loader: Optional[DocLoader], base: str) -> None:
        if base and not base.startswith(("http://", "https://")):
            base = posixpath.normpath(base)
        self._root = root
        self._loader = loader
        self._base = base
        self._documents: dict[str, dict[str, Any]] = {base: root}

    def expand(self) -> dict[str, Any]:
        return self._walk(self._root, self._base, ())

    def follow(self, node: Any, doc_url: Optional[str] = None) -> tuple[str, Any]:
        """Follow *node* while it is a reference.

        References nested inside the target are left as they are.

        Args:
            node: Any node; non-reference nodes are returned unchanged.
            doc_url: Location of the document *node* belongs to, the root by
                default.

        Returns:
            The location of the document holding the target, and the target.

        Raises:
            UnresolvedReferenceError: If a target cannot be found.
            CircularReferenceError: If the chain comes back to a reference.
        """
        doc_url = self._base if doc_url is None else doc_url
        active: tuple[str, ...] = ()
        while isinstance(node, dict) and isinstance(node.get("$ref"), str):
            locator = self._absolute(node["$ref"], doc_url)
            if locator in active:
                raise CircularReferenceError([*active, locator])
            active = (*active, locator)
            doc_url, node = self._lookup(locator)
        return doc_url, node

    def _walk(self, node: Any, doc_url: str, active: tuple[str, ...]) -> Any:
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str):
                locator = self._absolute(ref, doc_url)
                if locator in active:
                    raise CircularReferenceError([*active, locator])
                target_url, target = self._lookup(locator)
                logger.debug("Expanding %s", locator)
                return self._walk(target, target_url, (*active, locator))
            return {key: self._walk(value, doc_url, active) for key, value in node.items()}

        if isinstance(node, list):
            return [self._walk(item, doc_url, active) for item in node]

        return node

    def _absolute(self, ref: str, doc_url: str) -> str:
        """Turn *ref* into a ``<document>#<pointer>`` locator."""
        location, _, fragment = ref.partition("#")
        if not location:
            return f"{doc_url}#{fragment}"

        if location.startswith(("http://", "https://")) or posixpath.isabs(location):
            url = location
        elif doc_url.startswith(("http://", "https://")):
            url = urljoin(doc_url, location)
        else:
            url = posixpath.normpath(posixpath.join(posixpath.dirname(doc_url), location))
        return f"{url}#{fragment}"

    def _lookup(self, locator: str) -> tuple[str, Any]:
        url, _, fragment = locator.partition("#")
        document = self._document(url, locator)
        try:
            target = resolve_pointer(document, "#" + fragment)
        except UnresolvedReferenceError as exc:
            raise UnresolvedReferenceError(locator, exc.reason) from exc
        return url, target

    def _document(self, url: str, locator: str) -> dict[str, Any]:
        if url in self._documents:
            return self._documents[url]
        if self._loader is None:
            raise UnresolvedReferenceError(
                locator, "external references require a document loader"
            )
        try:
            document = self._loader(url)
        except SwaggenError as exc:
            raise UnresolvedReferenceError(locator, str(exc)) from exc
        logger.debug("Loaded external document %s", url)
        self._documents[url] = document
        return document
