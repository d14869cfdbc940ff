"""Static corrections for catalog functions with incomplete routing data.

A handful of control-plane functions (subscriptions, async job management,
logging) report no HTTP method or URL in their ``/Help`` record even though
they are reachable. The table in ``overrides.yaml`` supplies the missing
fields.
"""

from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

import yaml

from .base import RawEndpoint

OVERRIDES_FILE = Path(__file__).parent / "overrides.yaml"


@lru_cache(maxsize=None)
def load_overrides(path: Path = OVERRIDES_FILE) -> dict[str, dict]:
    """Load the override table. Cached, so the file is read once per process."""
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Override table {path} must be a mapping of function names")
    return data


def apply_overrides(
    endpoint: RawEndpoint, overrides: Mapping[str, Mapping] | None = None
) -> RawEndpoint:
    """Merge the override for ``endpoint.name`` (if any) over the raw record.

    Override values win. The result is flagged ``overridden`` unless the entry
    is marked ``silent``. Endpoints without an entry are returned unchanged.
    """
    table = load_overrides() if overrides is None else overrides
    patch = table.get(endpoint.name)
    if not patch:
        return endpoint

    update = {key: value for key, value in patch.items() if key in RawEndpoint.model_fields}
    update.pop("name", None)
    if not patch.get("silent", False):
        update["overridden"] = True
    # Validated, so patched arguments/returns become models like the rest.
    return RawEndpoint.model_validate({**endpoint.model_dump(by_alias=True), **update})
