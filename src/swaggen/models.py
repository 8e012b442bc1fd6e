"""Canonical Pydantic models shared across all swaggen modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- loaded from ``swaggen.yml`` and CLI flags:
    :class:`GenOpts`.

**Analyzer output models** -- produced by :mod:`swaggen.spec.analyzer` from a
loaded Swagger 2.0 document:
    :class:`HTTPMethod`, :class:`ParameterLocation`, :class:`Parameter`,
    :class:`Response`, :class:`SecurityScheme`, :class:`Operation` and
    :class:`APIInfo`.

**Codegen models** -- produced by :mod:`swaggen.generator.builder` and handed
to templates:
    :class:`SerializerGroup`, :class:`GenParameter`, :class:`GenResponse`,
    :class:`GenOperation`, :class:`GenOperationGroup`, :class:`GenProperty`,
    :class:`GenEnumMember`, :class:`GenDefinition`,
    :class:`GenSecurityScheme` and :class:`CodegenApp`.

Codegen models are frozen all the way down: sequences are tuples and mappings
are read-only views, so once :meth:`AppGenerator.make_codegen_app
<swaggen.generator.builder.AppGenerator.make_codegen_app>` returns, several
template runs may share the same :class:`CodegenApp`.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from types import MappingProxyType
from typing import Annotated, Any, Optional, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer


# --- Generation options ---


class GenOpts(BaseModel):
    """Options controlling one generation run.

    Loaded and merged by :func:`~swaggen.config.resolve_gen_opts`. Package
    names are mangled into valid Python identifiers by the builder, so
    ``"my-api"`` is accepted here.

    Example::

        GenOpts(spec="swagger.yml", target="./out", tags=["search"])
    """

    model_config = ConfigDict(frozen=True)

    spec: Optional[str] = Field(default=None, description="Path to the Swagger 2.0 document")
    target: str = Field(default=".", description="Output directory")
    name: Optional[str] = Field(
        default=None, description="Application name (defaults to info.title)"
    )
    api_package: str = "operations"
    model_package: str = "models"
    server_package: str = "restapi"
    client_package: str = "client"
    principal: Optional[str] = Field(
        default=None, description="Type name of the authenticated principal"
    )
    default_scheme: str = "http"
    default_consumes: str = "application/json"
    default_produces: str = "application/json"
    include_model: bool = True
    include_validator: bool = True
    include_handler: bool = True
    include_parameters: bool = True
    include_responses: bool = True
    include_support: bool = True
    include_main: bool = False
    exclude_spec: bool = False
    validate_spec: bool = True
    dump_data: bool = False
    tags: tuple[str, ...] = Field(
        default=(), description="Only generate operations carrying one of these tags"
    )
    operation_ids: tuple[str, ...] = Field(
        default=(), description="Only generate these operations"
    )
    model_names: tuple[str, ...] = Field(
        default=(), description="Only generate these definitions"
    )


# --- Analyzer Output Models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by Swagger 2.0 path-item objects."""

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"


class ParameterLocation(str, enum.Enum):
    """Locations where a parameter can appear, per the Swagger 2.0 ``in`` field."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    FORM_DATA = "formData"
    BODY = "body"


class Parameter(BaseModel):
    """A single parameter of an operation, with any ``$ref`` already followed.

    Body parameters carry a ``schema``; all other locations carry
    ``type`` / ``format`` / ``items`` directly.
    """

    name: str
    location: ParameterLocation
    required: bool = False
    description: Optional[str] = None
    type: Optional[str] = None
    format: Optional[str] = None
    items: Optional[dict[str, Any]] = None
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")
    default: Any = None
    enum: Optional[list[Any]] = None
    collection_format: Optional[str] = None

    model_config = {"populate_by_name": True}


class Response(BaseModel):
    """A declared response for one status code (or ``default``)."""

    status: str
    description: Optional[str] = None
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")
    headers: dict[str, Any] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}


class SecurityScheme(BaseModel):
    """A Swagger 2.0 *Security Definitions* entry.

    ``type`` is one of ``basic``, ``apiKey`` or ``oauth2``; only the fields
    relevant to that type are populated.
    """

    name: str
    type: str
    description: Optional[str] = None
    param_name: Optional[str] = None
    location: Optional[str] = None
    flow: Optional[str] = None
    authorization_url: Optional[str] = None
    token_url: Optional[str] = None
    scopes: dict[str, str] = Field(default_factory=dict)


class Operation(BaseModel):
    """One (path, HTTP method) pair of the analysed document.

    ``consumes`` and ``produces`` are the effective media types: the
    operation's own declaration, or the document defaults when it declares
    none. ``security`` follows the same override rule, and an explicit
    empty list means the operation allows anonymous access.
    """

    path: str
    method: HTTPMethod
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    consumes: list[str] = Field(default_factory=list)
    produces: list[str] = Field(default_factory=list)
    parameters: list[Parameter] = Field(default_factory=list)
    responses: list[Response] = Field(default_factory=list)
    security: list[dict[str, list[str]]] = Field(default_factory=list)
    deprecated: bool = False


class APIInfo(BaseModel):
    """API metadata from the document's *Info Object*."""

    model_config = ConfigDict(frozen=True)

    title: str
    version: str
    description: Optional[str] = None


# --- Codegen Models ---

_FROZEN = ConfigDict(frozen=True)

_T = TypeVar("_T")


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


Frozen = Annotated[_T, AfterValidator(_freeze), PlainSerializer(_thaw)]
"""Read-only view of a mapping field: dicts become ``MappingProxyType``, lists tuples."""


class SerializerGroup(BaseModel):
    """One deduplicated consumer or producer entry.

    All media types that map to the same canonical ``name`` share a single
    group, e.g. ``application/json`` and ``application/vnd.api+json`` both
    land in the ``JSON`` group.
    """

    model_config = _FROZEN

    name: str
    attribute: str
    implementation: str
    media_types: tuple[str, ...] = ()


class GenParameter(BaseModel):
    model_config = _FROZEN

    name: str
    py_name: str
    location: ParameterLocation
    py_type: str
    required: bool = False
    description: Optional[str] = None
    default: Any = None
    enum: Optional[tuple[Any, ...]] = None
    collection_format: Optional[str] = None

    @property
    def is_body(self) -> bool:
        return self.location == ParameterLocation.BODY


class GenResponse(BaseModel):
    model_config = _FROZEN

    name: str
    code: str
    description: Optional[str] = None
    py_type: Optional[str] = None
    is_default: bool = False
    is_success: bool = False


class GenOperation(BaseModel):
    """A generation-ready operation: mangled names plus typed parameters."""

    model_config = _FROZEN

    name: str
    func_name: str
    package: str
    path: str
    method: str
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: tuple[str, ...] = ()
    consumes: tuple[str, ...] = ()
    produces: tuple[str, ...] = ()
    params: tuple[GenParameter, ...] = ()
    responses: tuple[GenResponse, ...] = ()
    security: Frozen[list[dict[str, list[str]]]] = Field(
        default_factory=list, validate_default=True
    )
    security_names: tuple[str, ...] = ()
    deprecated: bool = False

    @property
    def authorized(self) -> bool:
        return bool(self.security_names)

    @property
    def body_param(self) -> Optional[GenParameter]:
        for param in self.params:
            if param.is_body:
                return param
        return None


class GenRoute(BaseModel):
    """One route-table entry: the operation serving a (method, path) pair."""

    model_config = _FROZEN

    name: str
    func_name: str
    package: str


class GenOperationGroup(BaseModel):
    """Operations sharing a first tag, emitted into one sub-package."""

    model_config = _FROZEN

    name: str
    package: str
    operations: tuple[GenOperation, ...] = ()


class GenProperty(BaseModel):
    model_config = _FROZEN

    name: str
    py_name: str
    py_type: str
    required: bool = False
    description: Optional[str] = None


class GenEnumMember(BaseModel):
    model_config = _FROZEN

    name: str
    value: Any


class GenDefinition(BaseModel):
    """A named model from ``definitions``, ready for the models template.

    ``kind`` is one of ``object``, ``enum`` or ``alias``. Objects may list
    ``bases`` (from ``allOf``) and a ``discriminator`` property name.
    """

    model_config = _FROZEN

    name: str
    original_name: str
    kind: str
    description: Optional[str] = None
    properties: tuple[GenProperty, ...] = ()
    bases: tuple[str, ...] = ()
    discriminator: Optional[str] = None
    enum: tuple[GenEnumMember, ...] = ()
    enum_base: Optional[str] = None
    alias_type: Optional[str] = None


class GenSecurityScheme(BaseModel):
    model_config = _FROZEN

    name: str
    py_name: str
    type: str
    description: Optional[str] = None
    param_name: Optional[str] = None
    location: Optional[str] = None
    flow: Optional[str] = None
    authorization_url: Optional[str] = None
    token_url: Optional[str] = None
    scopes: Frozen[dict[str, str]] = Field(default_factory=dict, validate_default=True)


class CodegenApp(BaseModel):
    """The aggregate, filtered and deduplicated model handed to templates.

    ``routes`` maps an upper-case HTTP method to the exact spec path and the
    :class:`GenRoute` serving it; ``/items`` and ``/items/`` are two
    separate keys.

    See Also:
        :class:`~swaggen.generator.builder.AppGenerator`: Builds this model.
    """

    model_config = _FROZEN

    name: str
    class_name: str
    receiver: str
    package: str
    api_package: str
    models_package: str
    server_package: str
    client_package: str
    principal: str
    default_scheme: str
    default_consumes: str
    default_produces: str
    base_path: str = "/"
    host: Optional[str] = None
    schemes: tuple[str, ...] = ()
    info: APIInfo
    operations: tuple[GenOperation, ...] = ()
    operation_groups: tuple[GenOperationGroup, ...] = ()
    models: tuple[GenDefinition, ...] = ()
    consumes: tuple[SerializerGroup, ...] = ()
    produces: tuple[SerializerGroup, ...] = ()
    security_definitions: tuple[GenSecurityScheme, ...] = ()
    routes: Frozen[dict[str, dict[str, GenRoute]]] = Field(
        default_factory=dict, validate_default=True
    )
    swagger_json: Optional[str] = None
    flat_swagger_json: Optional[str] = None
    gen_opts: GenOpts
