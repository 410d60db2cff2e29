from __future__ import annotations

from typing import Any

from .config import WIKIDATA_ENTITY_PREFIX


def safe_get_nested(obj: Any, *keys: str, default=None) -> Any:
    """
    Safely get a nested dictionary value with null-safety, traversing multiple keys
    and returning a default if any key is missing.
    """
    current = obj
    for key in keys:
        if not isinstance(current, dict):
            return default
        current = current.get(key)
        if current is None:
            return default
    return current if current is not None else default


def sparql_literal(value: str) -> str:
    """
    Quote a string as a SPARQL literal, escaping backslashes and double quotes.
    """
    escaped = value.replace("\\", "\\\\").replace("\"", "\\\"")
    return f"\"{escaped}\""


def entity_id_from_uri(uri: str) -> str:
    """
    Reduce a Wikidata entity URI ("http://www.wikidata.org/entity/Q42") to its
    item id ("Q42"). Values that are not entity URIs are returned unchanged.
    """
    if uri.startswith(WIKIDATA_ENTITY_PREFIX):
        return uri[len(WIKIDATA_ENTITY_PREFIX):]
    return uri
