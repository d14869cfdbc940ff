"""Document assembler: builds the OpenAPI document from a normalized catalog."""

import logging

from pydantic import BaseModel

from lcu_schema.catalog.base import Endpoint, EventDescriptor, NamedType, NormalizedCatalog
from lcu_schema.diagnostics import Diagnostics
from lcu_schema.generator.operations import Operation, classify
from lcu_schema.generator.tags import build_tags

logger = logging.getLogger(__name__)

OPENAPI_VERSION = "3.0.0"
DEFAULT_TITLE = "LCU SCHEMA"
DEFAULT_VERSION = "0.0.0"

DESCRIPTION_HEADER = "Auto-generated using the service's /Help endpoint."
OVERRIDES_HEADER = (
    "The following endpoints are not entirely auto-generated because their "
    "/Help response is missing necessary fields:"
)
DIAGNOSTICS_HEADER = "### Notices"


class DocumentInfo(BaseModel):
    title: str = DEFAULT_TITLE
    description: str = ""
    version: str = DEFAULT_VERSION


class Document(BaseModel):
    """The assembled interface document.

    Keeps the typed catalog records so the declaration emitter can walk them;
    ``to_openapi`` produces the JSON-serializable form.
    """

    openapi: str = OPENAPI_VERSION
    info: DocumentInfo
    components: list[NamedType] = []
    operations: list[Operation] = []
    events: list[EventDescriptor] = []
    tags: list[str] = []
    overridden: list[str] = []
    diagnostics: list[str] = []

    @property
    def paths(self) -> dict[str, dict[str, Operation]]:
        paths: dict[str, dict[str, Operation]] = {}
        for op in self.operations:
            paths.setdefault(op.path, {})[op.method] = op
        return paths

    def component(self, name: str) -> NamedType | None:
        """Look a component up by name; dangling references give ``None``."""
        return next((t for t in self.components if t.name == name), None)

    def to_openapi(self) -> dict:
        return {
            "openapi": self.openapi,
            "info": self.info.model_dump(),
            "components": {"schemas": {t.name: named_type_schema(t) for t in self.components}},
            "paths": {
                path: {method: op.to_openapi() for method, op in methods.items()}
                for path, methods in self.paths.items()
            },
            "tags": [{"name": tag} for tag in self.tags],
        }


def named_type_schema(named_type: NamedType) -> dict:
    """Component schema for a catalog type: object, string enum or open map."""
    schema: dict = {"type": "string" if named_type.is_enum else "object"}
    if named_type.description:
        schema["description"] = named_type.description

    if named_type.is_enum:
        schema["enum"] = [v.name for v in named_type.values]
    elif named_type.is_struct:
        properties = {}
        for field in named_type.fields:
            prop = field.field_schema.to_openapi() or {}
            if field.description and "$ref" not in prop:
                prop = {**prop, "description": field.description}
            properties[field.name] = prop
        schema["properties"] = properties
        required = [f.name for f in named_type.fields if not f.optional]
        if required:
            schema["required"] = required
    else:
        schema["additionalProperties"] = True
    return schema


def describe(overridden: list[str], diagnostics: list[str]) -> str:
    """Text of ``info.description``: overridden endpoints, then notices."""
    lines = [DESCRIPTION_HEADER]
    if overridden:
        lines += [OVERRIDES_HEADER, ""]
        lines += [f"{i}.\t{name}" for i, name in enumerate(overridden, start=1)]
    if diagnostics:
        lines += ["", DIAGNOSTICS_HEADER, ""]
        lines += [f"- {message}" for message in diagnostics]
    return "\n".join(lines)


def assemble(
    types: list[NamedType],
    operations: list[Operation],
    events: list[EventDescriptor],
    *,
    tags: list[str] | None = None,
    title: str = DEFAULT_TITLE,
    version: str | None = None,
    overridden: list[str] | None = None,
    diagnostics: list[str] | None = None,
) -> Document:
    """Put the translated pieces together into a ``Document``.

    References are not checked against ``types``; a dangling name stays in
    the document for consumers to resolve (or not).
    """
    overridden = list(overridden or [])
    diagnostics = list(diagnostics or [])
    return Document(
        info=DocumentInfo(
            title=title,
            description=describe(overridden, diagnostics),
            version=version or DEFAULT_VERSION,
        ),
        components=types,
        operations=operations,
        events=events,
        tags=list(tags or []),
        overridden=overridden,
        diagnostics=diagnostics,
    )


def route_operations(
    endpoints: list[Endpoint],
    components: dict[str, NamedType],
    diagnostics: Diagnostics,
) -> list[Operation]:
    """Classify every routable endpoint, one operation per path and method."""
    routes: dict[tuple[str, str], Operation] = {}
    for endpoint in endpoints:
        if not endpoint.routable:
            diagnostics.add(f"Function '{endpoint.name}' does not have a http method or path.")
            continue
        operation = classify(endpoint, components, diagnostics)
        key = (operation.path, operation.method)
        if key in routes:
            diagnostics.add(
                f"Function '{endpoint.name}' replaces '{routes[key].operation_id}' "
                f"at {operation.method.upper()} {operation.path}"
            )
        routes[key] = operation
    return list(routes.values())


def build_document(
    catalog: NormalizedCatalog,
    diagnostics: Diagnostics | None = None,
    title: str = DEFAULT_TITLE,
) -> Document:
    """Classify, tag and assemble a normalized catalog."""
    if diagnostics is None:
        diagnostics = Diagnostics()

    components = {t.name: t for t in catalog.types}
    operations = route_operations(catalog.functions, components, diagnostics)
    operations, tags = build_tags(operations)
    overridden = [f.name for f in catalog.functions if f.overridden]
    logger.debug(
        "Assembled %d components, %d operations, %d tags",
        len(components), len(operations), len(tags),
    )

    return assemble(
        catalog.types,
        operations,
        catalog.events,
        tags=tags,
        title=title,
        version=catalog.version,
        overridden=overridden,
        diagnostics=list(diagnostics),
    )
