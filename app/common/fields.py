"""
Common field helpers for content payloads
"""
from typing import Any, Dict, List, Union
import json


def handle_json_value(value: Any) -> Union[Dict, List, str, None]:
    """
    Handle values that may arrive either decoded or as a JSON string.

    PostgreSQL's asyncpg adapter returns JSONB columns as Python dicts/lists,
    while form submissions and other databases hand over strings:
    - When value is already a dict/list -> return as-is
    - When value is a string -> try to parse it, return it unchanged otherwise

    Args:
        value: The raw value (could be dict, list, str, or None)

    Returns:
        Parsed JSON value (dict, list), the original string, or None
    """
    if value is None:
        return value

    if isinstance(value, (dict, list)):
        return value

    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return value


def normalize_tags(value: Any) -> List[str]:
    """
    Normalize a tag collection into a list of unique, trimmed strings.

    Tags behave as a set: blanks and duplicates are dropped while the
    first-seen order is kept for stable responses. A plain string that
    is not JSON is treated as a comma separated list.
    """
    value = handle_json_value(value)
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple, set)):
        raise ValueError("tags must be a list of strings")

    tags: List[str] = []
    for tag in value:
        if not isinstance(tag, str):
            raise ValueError("tags must be a list of strings")
        tag = tag.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def normalize_slug(value: str) -> str:
    """Slugs are stored trimmed and lower-cased"""
    return value.strip().lower()
