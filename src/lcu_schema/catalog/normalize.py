"""Catalog normalizer.

Converts a ``RawCatalog`` into ``NamedType``/``Endpoint``/``EventDescriptor``
records with every type descriptor resolved. Item order follows the raw
catalog; only enum values are reordered.
"""

import re

from lcu_schema.diagnostics import Diagnostics

from .base import (
    HTTP_METHODS,
    Argument,
    Endpoint,
    EnumValue,
    EventDescriptor,
    NamedType,
    NormalizedCatalog,
    RawCatalog,
    RawEndpoint,
    RawEvent,
    RawType,
    StructField,
)
from .overrides import apply_overrides
from .types import resolve

PLACEHOLDER_PATTERN = re.compile(r"{(.*?)}")


def extract_path_params(path: str | None) -> list[str]:
    """Return the ``{...}`` placeholder names of a URL template, braces stripped."""
    if not path:
        return []
    return PLACEHOLDER_PATTERN.findall(path)


def normalize(raw: RawCatalog, diagnostics: Diagnostics | None = None) -> NormalizedCatalog:
    """Normalize a raw catalog. Problems are recorded, never raised."""
    if diagnostics is None:
        diagnostics = Diagnostics()

    return NormalizedCatalog(
        version=raw.version,
        types=[normalize_type(t, diagnostics) for t in raw.types.values()],
        functions=[normalize_endpoint(f, diagnostics) for f in raw.functions.values()],
        events=[normalize_event(e) for e in raw.events.values()],
    )


def normalize_type(raw: RawType, diagnostics: Diagnostics) -> NamedType:
    """Resolve field types, drop repeated field names and order enum values."""
    fields: list[StructField] = []
    seen: set[str] = set()
    for f in raw.fields:
        if f.name in seen:
            diagnostics.add(f"Duplicate field '{f.name}' in type '{raw.name}'")
            continue
        seen.add(f.name)
        fields.append(
            StructField(
                name=f.name,
                description=f.description,
                field_schema=resolve(f.type),
                optional=f.optional,
            )
        )

    # sorted() is stable, so equal values keep their catalog order
    values = sorted(raw.values, key=lambda v: v.value, reverse=True)

    return NamedType(
        name=raw.name,
        description=raw.description,
        tags=raw.tags,
        fields=fields,
        values=[EnumValue(name=v.name, description=v.description, value=v.value) for v in values],
    )


def normalize_endpoint(raw: RawEndpoint, diagnostics: Diagnostics) -> Endpoint:
    """Apply overrides, resolve argument and return types, extract placeholders."""
    merged = apply_overrides(raw)

    method = merged.method
    if method and method.upper() not in HTTP_METHODS:
        diagnostics.add(f"Function '{merged.name}' has unknown http method '{method}'")
        method = None

    return Endpoint(
        name=merged.name,
        description=merged.description,
        tags=merged.tags,
        arguments=[
            Argument(
                name=arg.name,
                description=arg.description,
                arg_schema=resolve(arg.type),
                optional=arg.optional,
            )
            for arg in merged.arguments
        ],
        return_schema=resolve(merged.returns),
        method=method,
        path=merged.path,
        path_params=extract_path_params(merged.path),
        overridden=merged.overridden,
    )


def normalize_event(raw: RawEvent) -> EventDescriptor:
    """Resolve the payload type of an event."""
    return EventDescriptor(
        name=raw.name,
        description=raw.description,
        tags=raw.tags,
        payload_schema=resolve(raw.type),
    )
