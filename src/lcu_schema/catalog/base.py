"""Data models for the reflection catalog.

``Raw*`` models mirror the records the service returns from its ``/Help``
call. The remaining models are the normalized form every later stage of the
pipeline works with.
"""

from pydantic import BaseModel, Field, field_validator

from .types import RawTypeDescriptor, ResolvedSchema, Void

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS", "TRACE")


class RawField(BaseModel):
    name: str
    description: str = ""
    optional: bool = False
    type: RawTypeDescriptor = Field(default_factory=RawTypeDescriptor)


class RawEnumValue(BaseModel):
    name: str
    description: str = ""
    value: int = 0


class RawType(BaseModel):
    name: str
    description: str = ""
    tags: list[str] = []
    fields: list[RawField] = []
    values: list[RawEnumValue] = []


class RawArgument(BaseModel):
    name: str
    description: str = ""
    optional: bool = False
    type: RawTypeDescriptor = Field(default_factory=RawTypeDescriptor)


class RawEndpoint(BaseModel):
    name: str
    description: str = ""
    tags: list[str] = []
    arguments: list[RawArgument] = []
    returns: RawTypeDescriptor = Field(default_factory=RawTypeDescriptor)
    method: str | None = None  # from the Console record's http_method
    path: str | None = None  # from the Console record's url
    overridden: bool = False


class RawEvent(BaseModel):
    name: str
    description: str = ""
    tags: list[str] = []
    type: RawTypeDescriptor = Field(default_factory=RawTypeDescriptor)


class RawCatalog(BaseModel):
    """The whole catalog, each section keyed by item name in service order."""

    version: str | None = None
    types: dict[str, RawType] = {}
    functions: dict[str, RawEndpoint] = {}
    events: dict[str, RawEvent] = {}

    @field_validator("types", "functions", "events", mode="before")
    @classmethod
    def _key_by_name(cls, value):
        # Dumps written as plain lists of records are keyed on the way in.
        if not isinstance(value, list):
            return value
        keyed = {}
        for item in value:
            name = item.get("name") if isinstance(item, dict) else getattr(item, "name", None)
            if not name:
                raise ValueError(f"catalog record without a name: {item!r}")
            keyed[name] = item
        return keyed


class StructField(BaseModel):
    name: str
    description: str = ""
    field_schema: ResolvedSchema
    optional: bool = False


class EnumValue(BaseModel):
    name: str
    description: str = ""
    value: int


class NamedType(BaseModel):
    """A catalog type: a struct, an enum, or (with neither) an open map."""

    name: str
    description: str = ""
    tags: list[str] = []
    fields: list[StructField] = []
    values: list[EnumValue] = []

    @property
    def is_enum(self) -> bool:
        return bool(self.values)

    @property
    def is_struct(self) -> bool:
        return bool(self.fields) and not self.values


class Argument(BaseModel):
    name: str
    description: str = ""
    arg_schema: ResolvedSchema
    optional: bool = False


class Endpoint(BaseModel):
    name: str
    description: str = ""
    tags: list[str] = []
    arguments: list[Argument] = []
    return_schema: ResolvedSchema = Field(default_factory=Void)
    method: str | None = None
    path: str | None = None
    path_params: list[str] = []
    overridden: bool = False

    @property
    def routable(self) -> bool:
        """Whether the endpoint can be reached over HTTP at all."""
        return bool(self.method) and bool(self.path)


class EventDescriptor(BaseModel):
    name: str
    description: str = ""
    tags: list[str] = []
    payload_schema: ResolvedSchema = Field(default_factory=Void)


class NormalizedCatalog(BaseModel):
    version: str | None = None
    types: list[NamedType] = []
    functions: list[Endpoint] = []
    events: list[EventDescriptor] = []
