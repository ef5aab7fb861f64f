"""
Resource options.

Resource options are the serialized metadata of every resource (pivot,
mounts, computed fields), keyed by resource name. They come from route
annotations (`x-nova-resource`), from a dedicated `/resources.json`
endpoint, or from the resource markers themselves.

The registry is an explicit context object: each generation run creates
its own, and callers that share one across runs own its lifecycle.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from ...utils import sanitize_name

logger = logging.getLogger(__name__)

ROUTE_EXTENSION = "x-nova-resource"

# Keys copied from a direct resource info object
_INFO_KEYS = ("name", "description", "pivot_key", "pivot_type", "pivot_description", "display_name")

_MOUNT_FIELD_TYPES = {
    "is_resource": bool,
    "is_foreign": bool,
    "is_array": bool,
    "pivot_type": str,
    "relation_type": str,
    "relation_name": str,
    "relation_model": str,
}


class ResourceOptionsRegistry:
    """Named table of resource options."""

    def __init__(self):
        self._options: dict[str, dict[str, Any]] = {}

    def set(self, name: str, options: dict[str, Any]) -> None:
        self._options[name] = options

    def get(self, name: str) -> dict[str, Any] | None:
        return self._options.get(name)

    def get_info(self, name: str) -> dict[str, Any] | None:
        options = self.get(name)
        info = options.get("info") if options else None
        return info if isinstance(info, dict) else None

    def get_mounts(self, name: str) -> dict[str, Any] | None:
        info = self.get_info(name)
        return info.get("mounts") if info else None

    def get_mount(self, name: str, mount_name: str) -> dict[str, Any] | None:
        mounts = self.get_mounts(name)
        return mounts.get(mount_name) if isinstance(mounts, dict) else None

    def names(self) -> list[str]:
        return list(self._options)

    def all(self) -> dict[str, dict[str, Any]]:
        return dict(self._options)

    def has(self, name: str) -> bool:
        return name in self._options

    def update(self, options: dict[str, dict[str, Any]]) -> None:
        self._options.update(options)

    def clear(self) -> None:
        self._options.clear()

    def __len__(self) -> int:
        return len(self._options)

    def validate(self, options: dict[str, Any]) -> list[str]:
        """
        Check a complete options entry.

        Returns:
            A list of problems, empty when the entry is valid
        """
        info = options.get("info") if isinstance(options, dict) else None
        if not isinstance(info, dict):
            return ["missing info"]

        problems = [f"missing {key}" for key in ("name", "pivot_key", "pivot_type") if not info.get(key)]
        for key in ("mounts", "computed"):
            if not isinstance(info.get(key), dict):
                problems.append(f"{key} must be an object")

        for mount_name, mount in (info.get("mounts") or {}).items() if isinstance(info.get("mounts"), dict) else ():
            if not isinstance(mount, dict):
                problems.append(f"mount {mount_name} must be an object")
                continue
            for key, expected in _MOUNT_FIELD_TYPES.items():
                if not isinstance(mount.get(key), expected):
                    problems.append(f"mount {mount_name}: {key} must be {expected.__name__}")

        return problems

    def is_valid(self, options: dict[str, Any]) -> bool:
        return not self.validate(options)


def options_from_info(info: dict[str, Any], fallback_name: str = "") -> dict[str, Any]:
    """Build an options entry from a direct resource info object."""
    result: dict[str, Any] = {key: info[key] for key in _INFO_KEYS if info.get(key) is not None}
    result.setdefault("name", fallback_name)
    result["mounts"] = info.get("mounts") or {}
    result["computed"] = info.get("computed") or {}
    return {"info": result}


def extract_options_from_route(operation: Any) -> list[dict[str, Any]]:
    """
    Extract options from one path operation.

    Accepts an array of info objects, an `{info: {...}}` wrapper, or a
    direct info object.
    """
    if not isinstance(operation, dict):
        return []
    annotation = operation.get(ROUTE_EXTENSION)
    if not annotation:
        return []

    if isinstance(annotation, list):
        return [options_from_info(item) for item in annotation if isinstance(item, dict) and item.get("name")]

    if isinstance(annotation, dict):
        wrapped = annotation.get("info")
        if isinstance(wrapped, dict) and wrapped.get("name"):
            return [annotation]
        if annotation.get("name"):
            return [options_from_info(annotation)]

    return []


def options_from_routes(document: Any) -> dict[str, dict[str, Any]]:
    """Collect resource options from every path operation of a document."""
    options: dict[str, dict[str, Any]] = {}
    paths = document.get("paths") if isinstance(document, dict) else None
    if not isinstance(paths, dict):
        return options

    for path_item in paths.values():
        if not isinstance(path_item, dict):
            continue
        for operation in path_item.values():
            for entry in extract_options_from_route(operation):
                options[entry["info"]["name"]] = entry

    logger.debug("Found %d resource option set(s) in routes", len(options))
    return options


def options_from_resources_endpoint(data: Any) -> dict[str, dict[str, Any]]:
    """Build resource options from a `/resources.json` payload."""
    options: dict[str, dict[str, Any]] = {}
    if not isinstance(data, dict):
        return options
    for name, info in data.items():
        if isinstance(info, dict):
            options[name] = options_from_info(info, fallback_name=name)
            options[name]["info"]["name"] = info.get("name") or name
    return options


def clean_options(value: Any) -> Any:
    """
    Recursively drop null and empty values.

    Entries that name a resource with a pivot always keep `mounts` and
    `computed`, even when empty.
    """
    if value is None:
        return None

    if isinstance(value, list):
        return [item for item in (clean_options(v) for v in value) if item is not None]

    if isinstance(value, dict):
        cleaned = {}
        for key, item in value.items():
            item = clean_options(item)
            if item is not None:
                cleaned[key] = item
        if cleaned.get("name") and cleaned.get("pivot_key") and cleaned.get("pivot_type"):
            cleaned.setdefault("mounts", {})
            cleaned.setdefault("computed", {})
        return cleaned or None

    return value


def render_options_json(options: dict[str, dict[str, Any]]) -> str:
    """Serialize the options table as JSON keyed by resource name."""
    table = {name: clean_options(entry) or {} for name, entry in options.items()}
    return json.dumps(table, indent=2) + "\n"


def render_options(options: dict[str, dict[str, Any]], backend: Any) -> str:
    """
    Render the options module.

    Args:
        options: Options keyed by resource name
        backend: TypeScript backend providing the template

    Returns:
        The options module source
    """
    entries = []
    for name, entry in options.items():
        entries.append(
            {
                "name": sanitize_name(name),
                "json": json.dumps(clean_options(entry) or {}, indent=2),
            }
        )

    parts = []
    comment = backend.generation_comment()
    if comment:
        parts.append(comment)
    parts.append(backend.get_template("options").render(runtime_module=backend.config.runtime_module, entries=entries))
    return "\n\n".join(parts) + "\n"
