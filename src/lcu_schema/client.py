"""HTTP client for the service's reflection calls.

Only the three requests the catalog collector needs are implemented. The
client does not discover the service or its credentials; both are passed in.
"""

import logging
from typing import Any

import httpx

from lcu_schema.catalog.collect import DetailFormat

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://127.0.0.1:2999"
DEFAULT_TIMEOUT = 30.0
DEFAULT_USERNAME = "riot"
HELP_PATH = "/Help"
BUILDS_PATH = "/system/v1/builds"


class CatalogFetchError(Exception):
    """A reflection call failed at the transport level."""


class HelpClient:
    """Catalog source backed by the live service."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        password: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        verify: bool = False,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        auth = (DEFAULT_USERNAME, password) if password else None
        self._session = httpx.Client(
            base_url=base_url,
            auth=auth,
            timeout=timeout,
            verify=verify,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def __enter__(self) -> "HelpClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def _request(self, method: str, path: str, params: dict[str, str] | None = None) -> Any:
        logger.debug("%s %s %s", method, path, params or "")
        try:
            response = self._session.request(method, path, params=params)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise CatalogFetchError(f"{method} {path} failed: {exc}") from exc
        try:
            return response.json()
        except ValueError as exc:
            raise CatalogFetchError(f"{method} {path} returned invalid JSON") from exc

    def fetch_catalog(self) -> dict[str, Any]:
        payload = self._request("POST", HELP_PATH)
        if not isinstance(payload, dict):
            raise CatalogFetchError(f"POST {HELP_PATH} returned {type(payload).__name__}, expected an object")
        return payload

    def fetch_detail(self, kind: str, name: str, fmt: DetailFormat) -> Any:
        return self._request("POST", HELP_PATH, params={"target": name, "format": fmt.value})

    def fetch_version(self) -> str | None:
        payload = self._request("GET", BUILDS_PATH)
        return payload.get("version") if isinstance(payload, dict) else None
