"""
Schema loader.

Obtains a parsed, JSON-compatible value tree from an in-memory value, an
inline JSON string, an http(s) URL or a file path. This is the only stage of
the pipeline that touches the network or the filesystem for input.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import httpx

from ..errors import SchemaLoadError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def is_url(source: str) -> bool:
    """Check whether a source string is an http(s) URL."""
    parsed = urlparse(source)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def is_json_string(source: str) -> bool:
    """Check whether a source string is inline JSON (object or array)."""
    trimmed = source.strip()
    if not trimmed.startswith(("{", "[")):
        return False
    try:
        json.loads(trimmed)
    except ValueError:
        return False
    return True


def is_resources_endpoint(source: Any) -> bool:
    return isinstance(source, str) and "/resources.json" in source


def is_nodes_endpoint(source: Any) -> bool:
    return isinstance(source, str) and "/nodes.json" in source


def is_nova_server(source: Any) -> bool:
    """Check whether a source looks like a server base URL exposing Nova endpoints.

    The URL must not already point at a specific document.
    """
    if not isinstance(source, str) or not is_url(source):
        return False
    return ".json" not in source and "/openapi" not in source


def _fetch(url: str, timeout: float) -> Any:
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
    except httpx.HTTPError as e:
        raise SchemaLoadError(f"Failed to fetch schema: {e}", url, e) from e

    if response.is_error:
        raise SchemaLoadError(
            f"Failed to fetch schema: {response.status_code} {response.reason_phrase}",
            url,
        )

    try:
        return response.json()
    except ValueError as e:
        raise SchemaLoadError(f"Failed to parse schema: {e}", url, e) from e


def load_schema(source: Any, timeout: float = DEFAULT_TIMEOUT) -> Any:
    """
    Load a schema document.

    Args:
        source: A dict/list (returned unchanged), an inline JSON string,
            an http(s) URL or a file path
        timeout: Network timeout in seconds for URL sources

    Returns:
        The parsed value tree

    Raises:
        SchemaLoadError: If the source cannot be read or parsed
    """
    if isinstance(source, (dict, list)):
        return source

    if isinstance(source, Path):
        source = str(source)

    if not isinstance(source, str):
        raise SchemaLoadError("Schema source must be a string, path or object", repr(source))

    trimmed = source.strip()

    if is_json_string(trimmed):
        logger.debug("Loading inline JSON schema")
        return json.loads(trimmed)

    if is_url(trimmed):
        logger.info("Fetching schema from %s", trimmed)
        return _fetch(trimmed, timeout)

    logger.info("Reading schema from %s", trimmed)
    try:
        with open(trimmed, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        raise SchemaLoadError(f"Failed to load schema: {e}", trimmed, e) from e


@dataclass
class NovaEndpoints:
    """Availability of the dedicated resources/nodes endpoints of a server."""

    has_resources: bool = False
    has_nodes: bool = False
    resources_url: str = ""
    nodes_url: str = ""


def _endpoint_available(url: str, timeout: float) -> bool:
    try:
        load_schema(url, timeout)
    except SchemaLoadError:
        return False
    return True


def detect_nova_endpoints(base_url: str, timeout: float = DEFAULT_TIMEOUT) -> NovaEndpoints:
    """
    Probe a server base URL for `/resources.json` and `/nodes.json`.

    Args:
        base_url: Server base URL
        timeout: Network timeout per probe

    Returns:
        NovaEndpoints describing which endpoints answered
    """
    clean = base_url.rstrip("/")
    resources_url = f"{clean}/resources.json"
    nodes_url = f"{clean}/nodes.json"

    return NovaEndpoints(
        has_resources=_endpoint_available(resources_url, timeout),
        has_nodes=_endpoint_available(nodes_url, timeout),
        resources_url=resources_url,
        nodes_url=nodes_url,
    )


def nodes_endpoint_to_document(nodes_data: dict[str, Any]) -> dict[str, Any]:
    """Wrap a `/nodes.json` payload into an OpenAPI-like document."""
    schemas = {name: schema for name, schema in nodes_data.items() if isinstance(schema, dict)}
    return {"components": {"schemas": schemas}}
