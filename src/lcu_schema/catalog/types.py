"""Type algebra of the reflection catalog.

The service describes every field, argument, return value and event payload
with a loosely typed descriptor: a primitive tag such as ``"uint64"``, a
container tag (``"vector"`` / ``"map"``) plus an element tag, the catch-all
``"object"``, an empty string for "nothing", or the name of another catalog
type. ``resolve`` turns such a descriptor into a ``ResolvedSchema`` node.

Named types are only ever referenced by name (``Reference``). Nothing here
looks the name up, so forward references and cycles between catalog types
need no special handling.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

UNSIGNED_TAGS = ("uint8", "uint16", "uint32", "uint64")
SIGNED_TAGS = ("int8", "int16", "int32", "int64")
FLOAT_TAGS = ("double", "float")

SCHEMA_REF_PREFIX = "#/components/schemas/"


class RawTypeDescriptor(BaseModel):
    """A type descriptor exactly as the reflection catalog reports it."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = ""
    # Upstream sends a bare tag string; a nested descriptor is accepted too.
    element_type: Union["RawTypeDescriptor", str, None] = Field(default=None, alias="elementType")


class Primitive(BaseModel):
    kind: Literal["primitive"] = "primitive"
    type: str  # string / integer / number / boolean
    format: str | None = None
    minimum: int | None = None

    def to_openapi(self) -> dict:
        schema: dict = {"type": self.type}
        if self.format is not None:
            schema["format"] = self.format
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        return schema


class ArrayOf(BaseModel):
    kind: Literal["array"] = "array"
    element_schema: "ResolvedSchema"

    def to_openapi(self) -> dict:
        schema: dict = {"type": "array"}
        items = self.element_schema.to_openapi()
        if items is not None:
            schema["items"] = items
        return schema


class MapOf(BaseModel):
    kind: Literal["map"] = "map"
    value_schema: "ResolvedSchema"

    def to_openapi(self) -> dict:
        values = self.value_schema.to_openapi()
        return {"type": "object", "additionalProperties": values if values is not None else True}


class OpaqueObject(BaseModel):
    kind: Literal["object"] = "object"

    def to_openapi(self) -> dict:
        return {"type": "object", "additionalProperties": True}


class Reference(BaseModel):
    """Weak, by-name link to a component schema."""

    kind: Literal["ref"] = "ref"
    target_name: str

    def to_openapi(self) -> dict:
        return {"$ref": f"{SCHEMA_REF_PREFIX}{self.target_name}"}


class Void(BaseModel):
    kind: Literal["void"] = "void"

    def to_openapi(self) -> None:
        return None


ResolvedSchema = Annotated[
    Union[Primitive, ArrayOf, MapOf, OpaqueObject, Reference, Void],
    Field(discriminator="kind"),
]

RawTypeDescriptor.model_rebuild()
ArrayOf.model_rebuild()
MapOf.model_rebuild()


def resolve(descriptor: RawTypeDescriptor | str | None) -> ResolvedSchema:
    """Resolve a raw descriptor (or a bare tag) into a schema node.

    Unknown tags are never an error: they are assumed to name a catalog type
    and become a ``Reference``.
    """
    if descriptor is None:
        return Void()
    if isinstance(descriptor, str):
        tag, element = descriptor, None
    else:
        tag, element = descriptor.type, descriptor.element_type

    if tag == "string":
        return Primitive(type="string")
    if tag in UNSIGNED_TAGS:
        return Primitive(type="integer", format=tag, minimum=0)
    if tag in SIGNED_TAGS:
        return Primitive(type="integer", format=tag)
    if tag == "bool":
        return Primitive(type="boolean")
    if tag in FLOAT_TAGS:
        return Primitive(type="number", format=tag)
    if tag == "vector":
        return ArrayOf(element_schema=resolve(element))
    if tag == "map":
        return MapOf(value_schema=resolve(element))
    if tag == "object":
        return OpaqueObject()
    if tag == "":
        return Void()
    return Reference(target_name=tag)
