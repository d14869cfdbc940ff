"""Tag taxonomy for the generated document.

Every operation starts with a tag derived from its URL (plus whatever tags the
catalog itself reported). Two filtering passes then drop tags carried by a
single operation, except the protected ``"Plugin ..."`` tags, so the final
tag list only groups operations that actually share something.
"""

from collections import Counter
from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lcu_schema.generator.operations import Operation

PLUGIN_PREFIX = "Plugin "
PRIMARY_PLUGIN_PREFIX = "Plugin lol"
PRIVATE_PLUGIN_PATH_PREFIX = "/lol-"
ASSET_SERVING_PATH_PREFIX = "/{plugin}"
ASSET_SERVING_TAG = "Plugin Asset Serving"
OTHER_TAG = "other"
CONVERGENCE_PASSES = 2

# Bookkeeping tags the catalog attaches to nearly everything.
IGNORED_CATALOG_TAGS = frozenset({"Plugins", "$remoting-binding-module"})


def first_segment(path: str) -> str:
    """First component of a URL template, ``""`` for the root."""
    parts = path.split("/")
    return parts[1] if len(parts) > 1 else ""


def is_protected(tag: str) -> bool:
    """Plugin tags survive every pass whatever their frequency."""
    return tag.startswith(PLUGIN_PREFIX)


def path_tag(path: str) -> str:
    """Tag derived from the URL template alone."""
    if path.startswith(PRIVATE_PLUGIN_PATH_PREFIX):
        return PLUGIN_PREFIX + first_segment(path)
    if path.startswith(ASSET_SERVING_PATH_PREFIX):
        return ASSET_SERVING_TAG
    return first_segment(path)


def initial_tags(path: str, catalog_tags: Iterable[str] = ()) -> list[str]:
    """Tags an operation starts with: its path tag, then the catalog's own."""
    tags = [path_tag(path)]
    tags.extend(tag for tag in catalog_tags if tag not in IGNORED_CATALOG_TAGS)
    return _dedupe(tag for tag in tags if tag)


def converge_pass(operations: list["Operation"], collapse: bool = False) -> list["Operation"]:
    """Run one filtering pass and return new operations; inputs are untouched.

    An operation left without tags gets its first path segment back, or
    ``"other"`` when ``collapse`` is set (every pass after the first).
    """
    counts = Counter(tag for op in operations for tag in op.tags)
    result = []
    for op in operations:
        tags = [tag for tag in op.tags if counts[tag] > 1 or is_protected(tag)]
        if not tags:
            tags = [OTHER_TAG if collapse else first_segment(op.path) or OTHER_TAG]
        result.append(op.model_copy(update={"tags": _dedupe(_clean(tag) for tag in tags)}))
    return result


def converge(operations: list["Operation"], passes: int = CONVERGENCE_PASSES) -> list["Operation"]:
    """Apply ``passes`` filtering passes. Deliberately not a fixed-point loop."""
    for i in range(passes):
        operations = converge_pass(operations, collapse=i > 0)
    return operations


def sort_tags(tags: Iterable[str]) -> list[str]:
    """Order tags: plain tags, primary plugin tags, other plugin tags, "other"."""
    return sorted(_dedupe(tags), key=_tag_sort_key)


def build_tags(operations: list["Operation"]) -> tuple[list["Operation"], list[str]]:
    """Converge the operations' tags and collect the ordered tag list."""
    converged = converge(operations)
    return converged, sort_tags(tag for op in converged for tag in op.tags)


def _clean(tag: str) -> str:
    if not is_protected(tag):
        tag = tag.lower()
    return tag.replace("$", "")


def _tag_sort_key(tag: str) -> tuple:
    plugin = is_protected(tag)
    secondary = plugin and not tag.startswith(PRIMARY_PLUGIN_PREFIX)
    return (tag == OTHER_TAG, plugin, secondary, tag)


def _dedupe(tags: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(tags))
