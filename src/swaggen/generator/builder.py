"""Build the codegen model for one document.

:class:`AppGenerator` turns an analysed :class:`~swaggen.spec.document.Document`
and a :class:`~swaggen.models.GenOpts` into a frozen
:class:`~swaggen.models.CodegenApp`. The steps are:

1. Select operations (operation-id filter, then tag filter).
2. Name them: ``operationId`` when present, otherwise method plus path.
   Duplicate names fall back to method plus path.
3. Collapse the media types they consume and produce into
   :class:`~swaggen.models.SerializerGroup` entries.
4. Build the route table, the models and the security schemes.
5. Embed the raw and the expanded document when support files are wanted.

Schema references stay model names (``#/definitions/Pet`` becomes ``Pet``)
so the generated code can refer to the generated classes.
"""

from __future__ import annotations

import json
import logging
from collections import Counter, defaultdict
from typing import Any, Iterable, Mapping, Optional

from swaggen.exceptions import CircularReferenceError, NoOperationsError
from swaggen.generator.naming import (
    mangle_package,
    status_text,
    to_class_name,
    to_constant_name,
    to_snake_name,
)
from swaggen.models import (
    CodegenApp,
    GenDefinition,
    GenEnumMember,
    GenOperation,
    GenOperationGroup,
    GenOpts,
    GenParameter,
    GenProperty,
    GenResponse,
    GenRoute,
    GenSecurityScheme,
    Operation,
    Parameter,
    ParameterLocation,
    SerializerGroup,
)
from swaggen.spec.document import Document
from swaggen.spec.expander import DocLoader
from swaggen.spec.loader import fetch_document

logger = logging.getLogger(__name__)

DEFAULT_APP_NAME = "swagger"

MODELS_QUALIFIER = "models."
"""Prefix for model class names used outside the generated models module."""

# --- Media types ---

_KNOWN_MEDIA_TYPES: dict[str, str] = {
    "application/json": "JSON",
    "text/json": "JSON",
    "application/xml": "XML",
    "text/xml": "XML",
    "text/plain": "Txt",
    "text/html": "HTML",
    "text/csv": "CSV",
    "application/x-yaml": "YAML",
    "application/yaml": "YAML",
    "text/yaml": "YAML",
    "text/x-yaml": "YAML",
    "application/octet-stream": "Bin",
    "application/x-www-form-urlencoded": "Urlform",
    "multipart/form-data": "Multipartform",
}

_SUFFIXES: dict[str, str] = {"+json": "JSON", "+xml": "XML", "+yaml": "YAML"}

_BYTE_STREAM = ("runtime.byte_stream_consumer()", "runtime.byte_stream_producer()")
_DISCARD = ("runtime.discard_consumer", "runtime.discard_producer")
_TEXT = ("runtime.text_consumer()", "runtime.text_producer()")

_IMPLEMENTATIONS: dict[str, tuple[str, str]] = {
    "JSON": ("runtime.json_consumer()", "runtime.json_producer()"),
    "XML": ("runtime.xml_consumer()", "runtime.xml_producer()"),
    "Txt": _TEXT,
    "HTML": _TEXT,
    "YAML": _TEXT,
    "CSV": ("runtime.csv_consumer()", "runtime.csv_producer()"),
    "Bin": _BYTE_STREAM,
    # Form bodies are decoded parameter by parameter, never as a whole.
    "Urlform": _DISCARD,
    "Multipartform": _DISCARD,
}

_PRIMITIVES: dict[str, str] = {
    "string": "str",
    "integer": "int",
    "number": "float",
    "boolean": "bool",
    "file": "bytes",
    "null": "None",
}

_RESERVED_PARAM_NAMES = frozenset({"self"})
_RESERVED_FIELD_NAMES = frozenset({"model_config", "model_fields", "model_computed_fields"})


def normalize_media_type(media_type: str) -> str:
    """Lower-case *media_type* and drop its parameters (``; charset=...``)."""
    return media_type.split(";", 1)[0].strip().lower()


def serializer_name(media_type: str) -> str:
    """Return the canonical serializer name for *media_type*.

    Known types map to fixed names (``JSON``, ``XML``, ``Urlform``...).
    Structured-syntax suffixes (``+json``, ``+xml``, ``+yaml``) map to their
    base format. Anything else gets a name derived from the subtype and is
    handled as a byte stream.
    """
    normalized = normalize_media_type(media_type)
    known = _KNOWN_MEDIA_TYPES.get(normalized)
    if known:
        return known
    subtype = normalized.partition("/")[2]
    for suffix, name in _SUFFIXES.items():
        if subtype.endswith(suffix):
            return name
    return to_class_name(subtype or normalized, default="Bin")


def build_serializers(media_types: Iterable[str], kind: str) -> list[SerializerGroup]:
    """Group *media_types* by serializer name.

    Args:
        media_types: Media types as declared; duplicates are fine.
        kind: ``"consumer"`` or ``"producer"``.

    Returns:
        One group per serializer name, sorted by name, each listing its
        normalized media types in sorted order.
    """
    index = 0 if kind == "consumer" else 1
    grouped: dict[str, set[str]] = defaultdict(set)
    for media_type in media_types:
        normalized = normalize_media_type(media_type)
        if normalized:
            grouped[serializer_name(normalized)].add(normalized)

    return [
        SerializerGroup(
            name=name,
            attribute=f"{to_snake_name(name)}_{kind}",
            implementation=_IMPLEMENTATIONS.get(name, _BYTE_STREAM)[index],
            media_types=sorted(grouped[name]),
        )
        for name in sorted(grouped)
    ]


# --- Schemas ---


def model_class_names(definitions: Iterable[str]) -> dict[str, str]:
    """Map each definition name to a unique model class name.

    Names that already are valid class names keep them; the others are
    mangled with :func:`~swaggen.generator.naming.to_class_name` and get a
    numeric suffix when that class name is taken, so ``pet`` next to ``Pet``
    becomes ``Pet2``.
    """
    result: dict[str, str] = {}
    taken: set[str] = set()
    for name in sorted(definitions, key=lambda n: (to_class_name(n) != n, n)):
        base = to_class_name(name)
        unique, suffix = base, 2
        while unique in taken:
            unique = f"{base}{suffix}"
            suffix += 1
        if unique != base:
            logger.warning(
                "Definition '%s' is generated as '%s': class '%s' is already taken",
                name,
                unique,
                base,
            )
        taken.add(unique)
        result[name] = unique
    return result


def definition_name(ref: str, names: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Return the model class name for a ``#/definitions/<name>`` pointer.

    *names* is the mapping built by :func:`model_class_names`; without it the
    definition name is mangled on its own.
    """
    prefix = "#/definitions/"
    if not ref.startswith(prefix):
        return None
    raw = ref[len(prefix):].replace("~1", "/").replace("~0", "~")
    if names and raw in names:
        return names[raw]
    return to_class_name(raw)


def py_type(
    schema: Any, qualifier: str = "", names: Optional[Mapping[str, str]] = None
) -> str:
    """Return a Python type expression for a schema (or non-body parameter).

    Args:
        schema: The schema dict; anything else maps to ``Any``.
        qualifier: Prefix for model class names, e.g. ``"models."``.
        names: Definition name to class name, from :func:`model_class_names`.
    """
    if not isinstance(schema, dict) or not schema:
        return "Any"

    ref = schema.get("$ref")
    if isinstance(ref, str):
        name = definition_name(ref, names)
        return f"{qualifier}{name}" if name else "Any"

    all_of = schema.get("allOf")
    if isinstance(all_of, list) and len(all_of) == 1:
        return py_type(all_of[0], qualifier, names)

    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        schema_type = next((t for t in schema_type if t != "null"), None)

    if schema_type == "array":
        items = schema.get("items")
        if isinstance(items, list):
            items = items[0] if items else None
        return f"list[{py_type(items, qualifier, names)}]"

    if schema_type == "object" or "properties" in schema or "additionalProperties" in schema:
        extra = schema.get("additionalProperties")
        if isinstance(extra, dict) and extra and not schema.get("properties"):
            return f"dict[str, {py_type(extra, qualifier, names)}]"
        return "dict[str, Any]"

    if schema_type == "string" and schema.get("format") == "binary":
        return "bytes"
    return _PRIMITIVES.get(str(schema_type), "Any")


def definition_kind(schema: dict[str, Any]) -> str:
    if schema.get("enum") and schema.get("type") not in ("object", "array"):
        return "enum"
    if "properties" in schema or "allOf" in schema:
        return "object"
    if schema.get("type") == "object" and not schema.get("additionalProperties"):
        return "object"
    return "alias"


def app_name_or_default(doc: Document, name: Optional[str] = None) -> str:
    """Return *name*, else the document title, else ``"swagger"``."""
    if name and name.strip():
        return name.strip()
    title = doc.info.title.strip()
    return title or DEFAULT_APP_NAME


class AppGenerator:
    """Builds a :class:`~swaggen.models.CodegenApp` from a document.

    Args:
        doc: The loaded document. It is not modified.
        opts: Generation options.
        receiver: Name of the instance parameter in generated methods.
        loader: Loader for external ``$ref`` targets, used when the
            expanded document is embedded.
    """

    def __init__(
        self,
        doc: Document,
        opts: GenOpts,
        receiver: str = "self",
        loader: Optional[DocLoader] = fetch_document,
    ) -> None:
        self._doc = doc
        self._opts = opts
        self._receiver = receiver
        self._loader = loader
        self._class_names: Optional[dict[str, str]] = None

    @property
    def class_names(self) -> dict[str, str]:
        """Definition name to generated class name, for every definition."""
        if self._class_names is None:
            self._class_names = model_class_names(self._doc.analyzer.definitions)
        return self._class_names

    def make_codegen_app(self) -> CodegenApp:
        """Build the codegen model.

        Raises:
            NoOperationsError: If the filters leave no operation.
            ReferenceResolutionError: If the embedded expanded document
                cannot be produced.
        """
        opts = self._opts
        doc = self._doc
        analyzer = doc.analyzer

        selected = self.gather_operations()
        if not selected:
            raise NoOperationsError("no operations were selected")

        operations = self._build_operations(selected)
        consumes = build_serializers(
            (mt for op in operations for mt in op.consumes), "consumer"
        )
        produces = build_serializers(
            (mt for op in operations for mt in op.produces), "producer"
        )

        security_names = {name for op in operations for name in op.security_names}
        security_definitions = [
            GenSecurityScheme(py_name=to_snake_name(scheme.name), **scheme.model_dump())
            for scheme in analyzer.security_definitions_for(security_names)
        ]

        swagger_json = flat_swagger_json = None
        if opts.include_support and not opts.exclude_spec:
            swagger_json = doc.raw.decode("utf-8")
            try:
                flat = doc.expanded(loader=self._loader)
            except CircularReferenceError as exc:
                raise CircularReferenceError(
                    exc.chain, hint="rerun with --exclude-spec to skip the embedded flat document"
                ) from exc
            flat_swagger_json = _dump_json(flat.spec)

        raw_name = app_name_or_default(doc, opts.name)
        app = CodegenApp(
            name=to_snake_name(raw_name, default=DEFAULT_APP_NAME),
            class_name=to_class_name(raw_name, default="Swagger"),
            receiver=self._receiver,
            package=to_snake_name(raw_name, default=DEFAULT_APP_NAME),
            api_package=mangle_package(opts.api_package, "operations"),
            models_package=mangle_package(opts.model_package, "models"),
            server_package=mangle_package(opts.server_package, "restapi"),
            client_package=mangle_package(opts.client_package, "client"),
            principal=opts.principal or "Any",
            default_scheme=opts.default_scheme,
            default_consumes=opts.default_consumes,
            default_produces=opts.default_produces,
            base_path=doc.base_path,
            host=doc.host,
            schemes=doc.schemes,
            info=doc.info,
            operations=operations,
            operation_groups=self._group(operations),
            models=self.build_models() if opts.include_model else [],
            consumes=consumes,
            produces=produces,
            security_definitions=security_definitions,
            routes=_routes(operations),
            swagger_json=swagger_json,
            flat_swagger_json=flat_swagger_json,
            gen_opts=opts,
        )
        logger.debug(
            "Built codegen model '%s': %d operations, %d models, %d consumers, %d producers",
            app.name,
            len(app.operations),
            len(app.models),
            len(app.consumes),
            len(app.produces),
        )
        return app

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    def gather_operations(self) -> list[Operation]:
        """Return the operations that pass the id and tag filters."""
        operations = self._doc.analyzer.all_operations()

        wanted_ids = set(self._opts.operation_ids)
        if wanted_ids:
            found = {op.operation_id for op in operations if op.operation_id}
            for missing in sorted(wanted_ids - found):
                logger.warning("Operation '%s' not found in the document", missing)
            operations = [op for op in operations if op.operation_id in wanted_ids]

        wanted_tags = set(self._opts.tags)
        if wanted_tags:
            operations = [op for op in operations if wanted_tags.intersection(op.tags)]

        logger.debug("Selected %d operations", len(operations))
        return operations

    def _build_operations(self, operations: list[Operation]) -> list[GenOperation]:
        opts = self._opts
        result: list[GenOperation] = []
        for op, name in zip(operations, _operation_names(operations)):
            consumes = [normalize_media_type(mt) for mt in op.consumes] or [
                normalize_media_type(opts.default_consumes)
            ]
            produces = [normalize_media_type(mt) for mt in op.produces] or [
                normalize_media_type(opts.default_produces)
            ]
            security_names = sorted({key for requirement in op.security for key in requirement})
            result.append(
                GenOperation(
                    name=name,
                    func_name=to_snake_name(name),
                    package=to_snake_name(op.tags[0], default="") if op.tags else "",
                    path=op.path,
                    method=op.method.value.upper(),
                    operation_id=op.operation_id,
                    summary=op.summary,
                    description=op.description,
                    tags=op.tags,
                    consumes=list(dict.fromkeys(consumes)),
                    produces=list(dict.fromkeys(produces)),
                    params=_parameters(op.parameters, self.class_names),
                    responses=_responses(name, op, self.class_names),
                    security=op.security,
                    security_names=security_names,
                    deprecated=op.deprecated,
                )
            )
        return result

    def _group(self, operations: list[GenOperation]) -> list[GenOperationGroup]:
        grouped: dict[str, list[GenOperation]] = defaultdict(list)
        for op in operations:
            grouped[op.package].append(op)
        api_package = mangle_package(self._opts.api_package, "operations")
        return [
            GenOperationGroup(name=package or api_package, package=package, operations=ops)
            for package, ops in sorted(grouped.items())
        ]

    # ------------------------------------------------------------------ #
    # Models
    # ------------------------------------------------------------------ #

    def build_models(self) -> list[GenDefinition]:
        """Return the generated definitions: enums, then objects, then aliases.

        Objects are ordered so that base classes come before the classes
        extending them, and aliases so that an alias is defined before
        another alias uses it.
        """
        definitions = self._doc.analyzer.definitions
        class_names = self.class_names
        names = sorted(definitions)

        wanted = set(self._opts.model_names)
        if wanted:
            for missing in sorted(wanted - set(names) - set(class_names.values())):
                logger.warning("Model '%s' not found in the document", missing)
            names = [n for n in names if n in wanted or class_names[n] in wanted]

        kinds = {
            class_names[n]: definition_kind(definitions[n])
            for n in names
            if isinstance(definitions[n], dict)
        }
        models = [
            _definition(n, definitions[n], kinds, class_names)
            for n in names
            if isinstance(definitions[n], dict)
        ]

        enums = [m for m in models if m.kind == "enum"]
        objects = _dependency_order(
            [m for m in models if m.kind == "object"], lambda m: set(m.bases)
        )
        aliases = [m for m in models if m.kind == "alias"]
        alias_names = {m.name for m in aliases}
        aliases = _dependency_order(
            aliases,
            lambda m: {n for n in alias_names if n != m.name and _mentions(m.alias_type or "", n)},
        )
        return enums + objects + aliases


def _operation_names(operations: list[Operation]) -> list[str]:
    """Name each operation; duplicates are disambiguated by method and path."""
    names = [
        to_class_name(op.operation_id) if op.operation_id else _route_name(op)
        for op in operations
    ]
    counts = Counter(names)
    result: list[str] = []
    seen: set[str] = set()
    for op, name in zip(operations, names):
        if counts[name] > 1:
            logger.warning(
                "Operation name '%s' is not unique, using method and path for %s %s",
                name,
                op.method.value.upper(),
                op.path,
            )
            name = _route_name(op)
        unique, suffix = name, 2
        while unique in seen:
            unique = f"{name}{suffix}"
            suffix += 1
        seen.add(unique)
        result.append(unique)
    return result


def _route_name(op: Operation) -> str:
    return to_class_name(f"{op.method.value} {op.path}")


def _parameters(params: list[Parameter], names: Mapping[str, str]) -> list[GenParameter]:
    result: list[GenParameter] = []
    seen: set[str] = set()
    for param in params:
        if param.location == ParameterLocation.BODY:
            type_expr = py_type(param.schema_, MODELS_QUALIFIER, names)
        else:
            type_expr = py_type(
                {"type": param.type, "format": param.format, "items": param.items}
            )

        py_name = to_snake_name(param.name, default="param")
        if py_name in _RESERVED_PARAM_NAMES:
            py_name += "_"
        if py_name in seen:
            py_name = f"{py_name}_{to_snake_name(param.location.value)}"
        seen.add(py_name)

        result.append(
            GenParameter(
                name=param.name,
                py_name=py_name,
                location=param.location,
                py_type=type_expr,
                required=param.required,
                description=param.description,
                default=param.default,
                enum=param.enum,
                collection_format=param.collection_format,
            )
        )
    return result


def _responses(op_name: str, op: Operation, names: Mapping[str, str]) -> list[GenResponse]:
    result: list[GenResponse] = []
    for response in op.responses:
        code = response.status
        is_default = code == "default"
        if not is_default and not code.isdigit():
            logger.warning(
                "Skipping response '%s' of %s %s: not a status code",
                code,
                op.method.value.upper(),
                op.path,
            )
            continue

        if is_default:
            suffix = "Default"
        else:
            text = status_text(code)
            suffix = to_class_name(text) if text != code else f"Status{code}"

        result.append(
            GenResponse(
                name=f"{op_name}{suffix}",
                code=code,
                description=response.description,
                py_type=(
                    py_type(response.schema_, MODELS_QUALIFIER, names) if response.schema_ else None
                ),
                is_default=is_default,
                is_success=code.startswith("2"),
            )
        )
    result.sort(key=lambda r: (r.is_default, r.code))
    return result


def _routes(operations: list[GenOperation]) -> dict[str, dict[str, GenRoute]]:
    routes: dict[str, dict[str, GenRoute]] = defaultdict(dict)
    for op in operations:
        path = op.path if op.path.startswith("/") else f"/{op.path}"
        routes[op.method][path] = GenRoute(name=op.name, func_name=op.func_name, package=op.package)
    return {method: dict(sorted(paths.items())) for method, paths in sorted(routes.items())}


def _definition(
    name: str, schema: dict[str, Any], kinds: dict[str, str], names: Mapping[str, str]
) -> GenDefinition:
    class_name = names[name]
    kind = definition_kind(schema)
    description = schema.get("description") or schema.get("title")

    if kind == "enum":
        values = list(schema["enum"])
        if all(isinstance(v, str) for v in values):
            enum_base: Optional[str] = "str"
        elif all(isinstance(v, int) and not isinstance(v, bool) for v in values):
            enum_base = "int"
        else:
            enum_base = None
        return GenDefinition(
            name=class_name,
            original_name=name,
            kind=kind,
            description=description,
            enum=_enum_members(values),
            enum_base=enum_base,
        )

    if kind == "alias":
        return GenDefinition(
            name=class_name,
            original_name=name,
            kind=kind,
            description=description,
            alias_type=py_type(schema, names=names),
        )

    bases: list[str] = []
    properties: dict[str, Any] = {}
    required: set[str] = set(schema.get("required") or [])
    for part in schema.get("allOf") or []:
        if not isinstance(part, dict):
            continue
        ref = part.get("$ref")
        base = definition_name(ref, names) if isinstance(ref, str) else None
        if base:
            if kinds.get(base) == "object":
                bases.append(base)
            else:
                logger.warning("Model '%s' extends '%s', which is not generated as a class", name, base)
            continue
        properties.update(part.get("properties") or {})
        required.update(part.get("required") or [])
    properties.update(schema.get("properties") or {})

    fields: list[GenProperty] = []
    seen: set[str] = set()
    for prop_name, prop_schema in properties.items():
        py_name = to_snake_name(prop_name, default="field")
        if py_name in _RESERVED_FIELD_NAMES:
            py_name += "_"
        unique, suffix = py_name, 2
        while unique in seen:
            unique = f"{py_name}_{suffix}"
            suffix += 1
        seen.add(unique)
        fields.append(
            GenProperty(
                name=prop_name,
                py_name=unique,
                py_type=py_type(prop_schema, names=names),
                required=prop_name in required,
                description=prop_schema.get("description") if isinstance(prop_schema, dict) else None,
            )
        )

    discriminator = schema.get("discriminator")
    return GenDefinition(
        name=class_name,
        original_name=name,
        kind=kind,
        description=description,
        properties=fields,
        bases=bases,
        discriminator=discriminator if isinstance(discriminator, str) else None,
    )


def _enum_members(values: list[Any]) -> list[GenEnumMember]:
    members: list[GenEnumMember] = []
    seen: set[str] = set()
    for value in values:
        name = to_constant_name(value)
        unique, suffix = name, 2
        while unique in seen:
            unique = f"{name}_{suffix}"
            suffix += 1
        seen.add(unique)
        members.append(GenEnumMember(name=unique, value=value))
    return members


def _mentions(type_expr: str, name: str) -> bool:
    return name in type_expr.replace("[", " ").replace("]", " ").replace(",", " ").split()


def _dependency_order(models: list[GenDefinition], depends_on: Any) -> list[GenDefinition]:
    """Order *models* so each one follows the models it depends on."""
    by_name = {m.name: m for m in models}
    ordered: list[GenDefinition] = []
    visiting: set[str] = set()
    done: set[str] = set()

    def visit(model: GenDefinition) -> None:
        if model.name in done or model.name in visiting:
            return
        visiting.add(model.name)
        for dep in sorted(depends_on(model)):
            if dep in by_name:
                visit(by_name[dep])
        visiting.discard(model.name)
        done.add(model.name)
        ordered.append(model)

    for model in models:
        visit(model)
    return ordered


def _dump_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)
