from datetime import date, datetime
from typing import Any


def build_cache_key(prefix: str, *parts: Any):
    """
    Build a Redis cache key with a prefix and optional segments.

    Args:
        prefix (str): Root part of the key.
        *parts: Additional segments.

    Returns:
        str: Colon-separated cache key.
    """
    normalized = [prefix]
    for part in parts:
        normalized.append(str(part) if part is not None else "")
    return ":".join(normalized)


def parse_boolean(value: Any, default: bool = False):
    """
    Parse a value into a boolean.

    Args:
        value (Any): Candidate value.
        default (bool): Fallback when the value is empty.

    Returns:
        bool: Parsed boolean.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        normalized = value.strip().lower()
        if not normalized:
            return default
        return normalized in {"1", "true", "yes", "on"}
    return default if value is None else bool(value)


def serialize_value(value: Any):
    """
    Convert a single stored value into something ``json.dumps`` accepts.

    Args:
        value (Any): Value read from the store.

    Returns:
        Any: JSON-friendly value.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: serialize_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_value(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    # ObjectId and anything else the driver hands back
    return str(value)


def serialize_document(document: dict | None):
    """
    Convert a stored document into a dict for JSON output.

    Args:
        document (dict | None): Document from the collection.

    Returns:
        dict: Copy with ``_id`` stored as a string.
    """
    if not document:
        return {}
    return {key: serialize_value(value) for key, value in document.items()}
