"""Operation classifier: reconstructs path/query/body parameters.

The catalog lists an endpoint's arguments positionally with no hint of where
each one travels. This module rebuilds that from the URL template and the
HTTP verb:

* the first N arguments fill the N ``{...}`` placeholders of the template;
* more than one leftover argument: each becomes a query parameter, whatever
  the verb;
* one leftover on a read-only verb: a query parameter, or one query parameter
  per property when it references a struct;
* one leftover on a mutating verb: the request body, as is.
"""

from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, Field

from lcu_schema.catalog.base import Argument, Endpoint, NamedType
from lcu_schema.catalog.types import Primitive, Reference, ResolvedSchema, Void
from lcu_schema.diagnostics import Diagnostics
from lcu_schema.generator.tags import initial_tags

READ_ONLY_METHODS = frozenset({"GET", "DELETE", "HEAD", "OPTIONS", "TRACE"})
JSON_CONTENT_TYPE = "application/json"
SUCCESS_STATUS = "2XX"
SUCCESS_DESCRIPTION = "Success response"


class Parameter(BaseModel):
    """A single path or query parameter."""

    name: str
    location: Literal["path", "query"]
    required: bool
    param_schema: ResolvedSchema
    description: str = ""

    def to_openapi(self) -> dict:
        param = {
            "in": self.location,
            "name": self.name,
            "required": self.required,
            "schema": self.param_schema.to_openapi() or {"type": "string"},
        }
        if self.description:
            param["description"] = self.description
        return param


class Operation(BaseModel):
    """A routable endpoint with its parameters classified."""

    operation_id: str
    description: str = ""
    method: str  # lower-case
    path: str
    tags: list[str] = []
    parameters: list[Parameter] = []
    request_body: ResolvedSchema | None = None
    response: ResolvedSchema = Field(default_factory=Void)
    overridden: bool = False

    @property
    def path_parameters(self) -> list[Parameter]:
        return [p for p in self.parameters if p.location == "path"]

    @property
    def query_parameters(self) -> list[Parameter]:
        return [p for p in self.parameters if p.location == "query"]

    def to_openapi(self) -> dict:
        operation: dict = {
            "operationId": self.operation_id,
            "description": self.description,
            "tags": list(self.tags),
            "parameters": [p.to_openapi() for p in self.parameters],
        }
        if self.request_body is not None:
            operation["requestBody"] = {
                "content": {JSON_CONTENT_TYPE: {"schema": self.request_body.to_openapi() or {}}}
            }

        response: dict = {"description": SUCCESS_DESCRIPTION}
        response_schema = self.response.to_openapi()
        if response_schema is not None:
            response["content"] = {JSON_CONTENT_TYPE: {"schema": response_schema}}
        operation["responses"] = {SUCCESS_STATUS: response}
        return operation


def strip_marker(name: str) -> str:
    """Drop the trailing ``+`` the catalog puts on greedy path arguments."""
    return name[:-1] if name.endswith("+") else name


def classify(
    endpoint: Endpoint,
    components: Mapping[str, NamedType],
    diagnostics: Diagnostics | None = None,
) -> Operation:
    """Classify one routable endpoint into an ``Operation``.

    ``components`` is only consulted to flatten a struct argument into query
    parameters; a reference to a missing type is kept as a single parameter.
    """
    if not endpoint.routable:
        raise ValueError(f"Function '{endpoint.name}' does not have a http method or path")

    method = endpoint.method.upper()
    parameters = [_path_parameter(endpoint, placeholder) for placeholder in endpoint.path_params]
    leftover = endpoint.arguments[len(endpoint.path_params):]
    request_body = None

    if len(leftover) > 1:
        parameters.extend(_query_parameter(arg) for arg in leftover)
    elif method in READ_ONLY_METHODS:
        for arg in leftover:
            parameters.extend(_read_only_parameters(endpoint, arg, components, diagnostics))
    elif leftover:
        request_body = leftover[0].arg_schema

    return Operation(
        operation_id=endpoint.name,
        description=endpoint.description,
        method=method.lower(),
        path=endpoint.path,
        tags=initial_tags(endpoint.path, endpoint.tags),
        parameters=parameters,
        request_body=request_body,
        response=endpoint.return_schema,
        overridden=endpoint.overridden,
    )


def _path_parameter(endpoint: Endpoint, placeholder: str) -> Parameter:
    wanted = strip_marker(placeholder)
    match = next((arg for arg in endpoint.arguments if strip_marker(arg.name) == wanted), None)
    if match is None or isinstance(match.arg_schema, Void):
        schema = Primitive(type="string")
    else:
        schema = match.arg_schema
    return Parameter(
        name=placeholder,
        location="path",
        required=True,
        param_schema=schema,
        description=match.description if match else "",
    )


def _query_parameter(arg: Argument) -> Parameter:
    return Parameter(
        name=arg.name,
        location="query",
        required=not arg.optional,
        param_schema=arg.arg_schema,
        description=arg.description,
    )


def _read_only_parameters(
    endpoint: Endpoint,
    arg: Argument,
    components: Mapping[str, NamedType],
    diagnostics: Diagnostics | None,
) -> list[Parameter]:
    if not isinstance(arg.arg_schema, Reference):
        return [_query_parameter(arg)]

    target = components.get(arg.arg_schema.target_name)
    if target is None:
        if diagnostics is not None:
            diagnostics.add(
                f"Function '{endpoint.name}' argument '{arg.name}' references "
                f"unknown type '{arg.arg_schema.target_name}'"
            )
        return [_query_parameter(arg)]
    if not target.is_struct:
        return [_query_parameter(arg)]

    # Flattened struct properties are always optional query parameters.
    return [
        Parameter(
            name=field.name,
            location="query",
            required=False,
            param_schema=field.field_schema,
            description=field.description,
        )
        for field in target.fields
    ]
