"""Declaration emitter: TypeScript typings generated from a ``Document``.

Three files are produced:

* ``lcu-types``: one exported declaration per component;
* ``lcu-endpoints``: an ``LCUEndpoints`` lookup table keyed by path and
  method, plus helper types that pick parameters/body/response out of it;
* ``lcu-events``: the event-name to payload map.
"""

import json
import re

from pydantic import BaseModel

from lcu_schema.catalog.base import NamedType
from lcu_schema.catalog.types import (
    ArrayOf,
    MapOf,
    OpaqueObject,
    Primitive,
    Reference,
    ResolvedSchema,
    Void,
)
from lcu_schema.generator.document import Document
from lcu_schema.generator.operations import Operation

DEFAULT_IMPORT_NAMESPACE = "LCUTypes"
TYPES_MODULE = "./lcu-types"
EMITTED_METHODS = ("get", "post", "put", "patch", "head", "delete")

SCALARS = {
    "string": "string",
    "integer": "number",
    "number": "number",
    "boolean": "boolean",
}

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
INVALID_IDENTIFIER_CHARS = re.compile(r"[^A-Za-z0-9_$]")

# Catalog type names that would shadow TypeScript built-ins.
TYPE_RENAMES = {
    "Array": "LCUArray",
    "Boolean": "LCUBoolean",
    "Function": "LCUFunction",
    "Number": "LCUNumber",
    "Object": "LCUObject",
    "Promise": "LCUPromise",
    "Record": "LCURecord",
    "String": "LCUString",
    "Symbol": "LCUSymbol",
}

RESERVED_WORDS = frozenset({
    "break", "case", "catch", "class", "const", "continue", "debugger", "default",
    "delete", "do", "else", "enum", "export", "extends", "false", "finally", "for",
    "function", "if", "import", "in", "instanceof", "new", "null", "return", "super",
    "switch", "this", "throw", "true", "try", "typeof", "var", "void", "while", "with",
})

# Hand-written declarations that replace the generated one for a component.
DECLARATION_OVERRIDES = {
    "PluginResourceEvent": """\
interface PluginResourceEvent<DataType = unknown> {
\turi: string
\teventType: {{namespace}}PluginResourceEventType
\tdata: DataType
}""",
}

# Payload shapes every websocket subscriber may receive, whatever the catalog says.
BUILTIN_EVENT_TYPES = (
    "PluginResourceEvent",
    "BindingCallbackEvent",
    "PluginLcdsEvent",
    "PluginRegionLocaleChangedEvent",
    "LogEvent",
    "PluginServiceProxyResponse",
)

ENDPOINT_HELPERS = """\
export type HttpMethod = "delete" | "get" | "head" | "patch" | "post" | "put";

export type EndpointsWithMethod<Method extends HttpMethod> = { [K in keyof LCUEndpoints]: LCUEndpoints[K] extends { [key in Method]: {} } ? K : never }[keyof LCUEndpoints]

// @ts-expect-error
export type LCUEndpointParameters<Method extends HttpMethod, Path extends EndpointsWithMethod<Method>> = LCUEndpoints[Path][Method]["Parameters"]
// @ts-expect-error
export type LCUEndpointBodyType<Method extends HttpMethod, Path extends EndpointsWithMethod<Method>> = LCUEndpoints[Path][Method]["Body"]
// @ts-expect-error
export type LCUEndpointResponseType<Method extends HttpMethod, Path extends EndpointsWithMethod<Method>> = LCUEndpoints[Path][Method]["Response"]

export type LCUEndpoint<Method extends HttpMethod, Path extends EndpointsWithMethod<Method>> = LCUEndpointBodyType<Method, Path> extends never ? (...args: [...LCUEndpointParameters<Method, Path>]) => Promise<LCUEndpointResponseType<Method, Path>> : (...args: [...LCUEndpointParameters<Method, Path>, body: LCUEndpointBodyType<Method, Path>]) => Promise<LCUEndpointResponseType<Method, Path>>"""


class Declarations(BaseModel):
    type_declarations: str
    endpoint_declarations: str
    event_declarations: str


def emit(document: Document, namespace: str | None = None) -> Declarations:
    """Render all three declaration files for a document."""
    return Declarations(
        type_declarations=emit_types(document, namespace),
        endpoint_declarations=emit_endpoints(document, namespace),
        event_declarations=emit_events(document, namespace),
    )


# -- names --------------------------------------------------------------------


def type_name(name: str) -> str:
    """TypeScript identifier for a catalog type name."""
    return INVALID_IDENTIFIER_CHARS.sub("_", TYPE_RENAMES.get(name, name))


def qualified_name(name: str, namespace: str | None) -> str:
    return f"{namespace}.{type_name(name)}" if namespace else type_name(name)


def field_name(name: str) -> str:
    """Quote property names that are not plain identifiers."""
    return name if IDENTIFIER_PATTERN.match(name) else json.dumps(name)


def label_name(name: str) -> str:
    """Tuple label for a path parameter."""
    label = INVALID_IDENTIFIER_CHARS.sub("_", name.replace("+", ""))
    return f"{label}_" if label in RESERVED_WORDS else label


def indent(text: str, prefix: str = "\t") -> str:
    return text.replace("\n", "\n" + prefix)


# -- schemas ------------------------------------------------------------------


def ts_type(schema: ResolvedSchema | None, namespace: str | None = None) -> str:
    """TypeScript type expression for a schema node."""
    if schema is None or isinstance(schema, Void):
        return "void"
    if isinstance(schema, Primitive):
        return SCALARS.get(schema.type, "unknown")
    if isinstance(schema, ArrayOf):
        if isinstance(schema.element_schema, Void):
            return "unknown[]"
        return f"{ts_type(schema.element_schema, namespace)}[]"
    if isinstance(schema, MapOf):
        if isinstance(schema.value_schema, Void):
            return "Record<string | number, unknown>"
        return f"Record<string | number, {ts_type(schema.value_schema, namespace)}>"
    if isinstance(schema, OpaqueObject):
        return "Record<string, unknown>"
    if isinstance(schema, Reference):
        return qualified_name(schema.target_name, namespace)
    raise TypeError(f"Unsupported schema node {schema!r}")


def jsdoc(description: str = "", fmt: str | None = None) -> str | None:
    entries = [f"@format {fmt}"] if fmt else []
    if not description and not entries:
        return None
    if description and not entries:
        return f"/** {description} */"
    if not description:
        return f"/** {entries[0]} */"
    body = "\n".join(f" * {line}" for line in [description, *entries])
    return f"/**\n{body}\n */"


def _with_doc(doc: str | None, declaration: str) -> str:
    return f"{doc}\n{declaration}" if doc else declaration


def declare_type(named_type: NamedType, namespace: str | None = None) -> str:
    """One exported declaration: a literal union for enums, an interface otherwise."""
    override = DECLARATION_OVERRIDES.get(named_type.name)
    if override is not None:
        prefix = f"{namespace}." if namespace else ""
        return "export " + override.replace("{{namespace}}", prefix)

    name = type_name(named_type.name)
    doc = jsdoc(named_type.description)
    if named_type.is_enum:
        literals = " | ".join(json.dumps(v.name) for v in named_type.values)
        return _with_doc(doc, f"export type {name} = {literals}")

    lines = [f"export interface {name} {{"]
    if named_type.is_struct:
        for field in named_type.fields:
            fmt = field.field_schema.format if isinstance(field.field_schema, Primitive) else None
            field_doc = jsdoc(field.description, fmt)
            if field_doc:
                lines.append("\t" + indent(field_doc))
            optional = "?" if field.optional else ""
            lines.append(f"\t{field_name(field.name)}{optional}: {ts_type(field.field_schema, namespace)}")
    else:
        lines.append("\t[key: string | number]: any")
    lines.append("}")
    return _with_doc(doc, "\n".join(lines))


def emit_types(document: Document, namespace: str | None = None) -> str:
    """Declarations for every component, wrapped in ``namespace`` when given."""
    body = "\n\n".join(declare_type(t, namespace) for t in document.components)
    if namespace:
        return f"export namespace {namespace} {{\n\t{indent(body)}\n}}\n"
    return body + "\n"


# -- endpoints ----------------------------------------------------------------


def _import_line(namespace: str | None) -> str:
    if namespace:
        return f'import {{ {namespace} }} from "{TYPES_MODULE}";'
    return f'import * as {DEFAULT_IMPORT_NAMESPACE} from "{TYPES_MODULE}";'


def method_signature(operation: Operation, namespace: str) -> str:
    """``{ PathParameters, QueryParameters, Parameters, Body, Response }`` record."""
    path_params = ", ".join(
        f"{label_name(p.name)}: {ts_type(p.param_schema, namespace)}"
        for p in operation.path_parameters
    )
    query = operation.query_parameters
    query_record = "{}"
    if query:
        entries = ", ".join(
            f"{json.dumps(p.name)}{'' if p.required else '?'}: {ts_type(p.param_schema, namespace)}"
            for p in query
        )
        query_record = f"{{ {entries} }}"

    parameters = path_params
    if query:
        optional = "" if any(p.required for p in query) else "?"
        parameters += (", " if path_params else "") + f"params{optional}: {query_record}"

    body = "never" if operation.request_body is None else ts_type(operation.request_body, namespace)
    return (
        f"{{ PathParameters: [{path_params}], QueryParameters: {query_record}, "
        f"Parameters: [{parameters}], Body: {body}, "
        f"Response: {ts_type(operation.response, namespace)} }}"
    )


def emit_endpoints(document: Document, namespace: str | None = None) -> str:
    """The ``LCUEndpoints`` table plus its helper types."""
    import_namespace = namespace or DEFAULT_IMPORT_NAMESPACE
    lines = ["export interface LCUEndpoints {"]
    for path, methods in document.paths.items():
        lines.append(f"\t{json.dumps(path)}: {{")
        for method in EMITTED_METHODS:
            if method in methods:
                lines.append(f"\t\t{method}: {method_signature(methods[method], import_namespace)}")
        lines.append("\t},")
    lines.append("}")
    return f"{_import_line(namespace)}\n\n" + "\n".join(lines) + f"\n\n{ENDPOINT_HELPERS}\n"


# -- events -------------------------------------------------------------------


def emit_events(document: Document, namespace: str | None = None) -> str:
    """The ``LCUWebSocketEvents`` map, one entry per event name."""
    import_namespace = namespace or DEFAULT_IMPORT_NAMESPACE
    builtin = " | ".join(qualified_name(name, import_namespace) for name in BUILTIN_EVENT_TYPES)
    lines = ["export interface LCUWebSocketEvents {", f"\t[key: string]: {builtin}"]

    seen: set[str] = set()
    for event in document.events:
        if event.name in seen:
            continue
        seen.add(event.name)
        lines.append(f"\t{json.dumps(event.name)}: {ts_type(event.payload_schema, import_namespace)}")
    lines.append("}")
    return f"{_import_line(namespace)}\n\n" + "\n".join(lines) + "\n"
