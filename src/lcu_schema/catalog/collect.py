"""Catalog collection and raw catalog dumps.

The service's bare ``/Help`` call only lists item names. Each item then has a
"Full" detail record (fields, arguments, return types) and a "Console" record,
the only one carrying a function's ``http_method`` and ``url``.
``collect_catalog`` fetches both for every item and merges them into a
``RawCatalog``.
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

import yaml

from .base import RawCatalog, RawEndpoint, RawEvent, RawType

logger = logging.getLogger(__name__)

KINDS = ("types", "functions", "events")
DEFAULT_MAX_WORKERS = 8


class DetailFormat(str, Enum):
    FULL = "Full"
    CONSOLE = "Console"


class CatalogFormatError(ValueError):
    """A catalog dump that does not look like a catalog."""


class CatalogSource(Protocol):
    def fetch_catalog(self) -> dict[str, Any]:
        """Return ``{"types": ..., "functions": ..., "events": ...}`` keyed by name."""

    def fetch_detail(self, kind: str, name: str, fmt: DetailFormat) -> Any:
        """Return the detail record of one catalog item."""

    def fetch_version(self) -> str | None:
        """Return the service build version, if known."""


def collect_catalog(source: CatalogSource, max_workers: int = DEFAULT_MAX_WORKERS) -> RawCatalog:
    """Fetch the listing and every detail record, then merge them.

    Detail requests run concurrently; the result keeps listing order. Any
    exception raised by the source propagates.
    """
    listing = source.fetch_catalog()
    names = {kind: list(listing.get(kind) or []) for kind in KINDS}
    jobs = [(kind, name, fmt) for kind in KINDS for name in names[kind] for fmt in DetailFormat]
    logger.info("Fetching %d detail records", len(jobs))

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {job: pool.submit(source.fetch_detail, *job) for job in jobs}
        details = {job: future.result() for job, future in futures.items()}

    def record(kind: str, name: str, fmt: DetailFormat) -> dict:
        return unwrap_record(details[(kind, name, fmt)], name)

    types = {}
    for name in names["types"]:
        full = record("types", name, DetailFormat.FULL)
        types[name] = RawType.model_validate({**full, "name": full.get("name") or name})

    functions = {}
    for name in names["functions"]:
        full = record("functions", name, DetailFormat.FULL)
        console = record("functions", name, DetailFormat.CONSOLE)
        functions[name] = RawEndpoint.model_validate({
            **full,
            "name": full.get("name") or name,
            "method": console.get("http_method"),
            "path": normalize_url(console.get("url")),
        })

    events = {}
    for name in names["events"]:
        data = record("events", name, DetailFormat.FULL) or record("events", name, DetailFormat.CONSOLE)
        events[name] = RawEvent.model_validate({**data, "name": data.get("name") or name})

    return RawCatalog(
        version=source.fetch_version(),
        types=types,
        functions=functions,
        events=events,
    )


def unwrap_record(payload: Any, name: str) -> dict:
    """Detail records come back as ``[record]`` or ``{name: record}``."""
    if isinstance(payload, list):
        payload = payload[0] if payload else {}
    if isinstance(payload, dict) and isinstance(payload.get(name), dict):
        payload = payload[name]
    return payload if isinstance(payload, dict) else {}


def normalize_url(url: str | None) -> str | None:
    """Console URLs sometimes lack the leading slash."""
    if not url:
        return None
    return url if url.startswith("/") else "/" + url


def load_raw_catalog(path: Path) -> RawCatalog:
    """Load a raw catalog dump (JSON or YAML)."""
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict) or not any(kind in data for kind in KINDS):
        raise CatalogFormatError(f"{path} is not a catalog dump (expected {', '.join(KINDS)})")
    return RawCatalog.model_validate(data)


def dump_raw_catalog(catalog: RawCatalog, path: Path) -> None:
    """Write a raw catalog dump, YAML for ``.yaml``/``.yml`` paths and JSON otherwise."""
    data = catalog.model_dump(mode="json", by_alias=True, exclude_none=True)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix in (".yaml", ".yml"):
        path.write_text(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), encoding="utf-8")
    else:
        path.write_text(json.dumps(data, indent=4), encoding="utf-8")
