"""
Flatten GraphQL connections into plain record lists

A connection may come back as `{"nodes": [...]}` or as
`{"edges": [{"node": {...}}]}`. Both flatten to the same list, for the
top-level collection and for every sub-collection one level down.
"""

from typing import Any, Dict, List

from shopwoo.shared.constants.importer import RESOURCE_PRODUCTS


def _is_connection(value: Any) -> bool:
    return isinstance(value, dict) and (
        isinstance(value.get("nodes"), list) or isinstance(value.get("edges"), list)
    )


def flatten_connection(data: Any) -> List[Dict[str, Any]]:
    """Return the records of a connection in either shape, or [] if neither"""
    if isinstance(data, list):
        return list(data)
    if not isinstance(data, dict):
        return []

    if isinstance(data.get("nodes"), list):
        return list(data["nodes"])

    if isinstance(data.get("edges"), list):
        return [
            edge["node"]
            for edge in data["edges"]
            if isinstance(edge, dict) and edge.get("node") is not None
        ]

    return []


def _primary_image(images: List[Dict[str, Any]]) -> Dict[str, Any]:
    first = images[0]
    url = first.get("url") or first.get("src")
    if not url:
        return dict(first)
    return {
        "url": url,
        "altText": first.get("altText") or "",
        "width": first.get("width"),
        "height": first.get("height"),
    }


def normalize_record(resource_type: str, record: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of `record` with every nested connection flattened"""
    normalized: Dict[str, Any] = {}
    for key, value in record.items():
        normalized[key] = flatten_connection(value) if _is_connection(value) else value

    if resource_type == RESOURCE_PRODUCTS:
        for key in ("variants", "images", "collections"):
            normalized.setdefault(key, [])
            if normalized[key] is None:
                normalized[key] = []
        if normalized["images"]:
            normalized["image"] = _primary_image(normalized["images"])

    return normalized


def normalize_records(resource_type: str, connection: Any) -> List[Dict[str, Any]]:
    """Flatten a top-level connection and normalize each record"""
    return [
        normalize_record(resource_type, record)
        for record in flatten_connection(connection)
        if isinstance(record, dict)
    ]
