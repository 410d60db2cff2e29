from __future__ import annotations

import json
from typing import Dict, Any, Optional

import requests

from .config import HTTP_TIMEOUT_DEFAULT

# Standard HTTP headers for API requests
DEFAULT_JSON_HEADERS = {
    "User-Agent": "OAReport/0.1 (open access literature report)",
    "Accept": "application/json",
}

DEFAULT_XML_HEADERS = {
    "User-Agent": "OAReport/0.1 (open access literature report)",
    "Accept": "application/xml,text/xml;q=0.9,*/*;q=0.8",
}

SPARQL_JSON_HEADERS = {
    "User-Agent": "OAReport/0.1 (open access literature report)",
    "Accept": "application/sparql-results+json",
}

# Global session for connection pooling. No retry adapter is mounted: a failed
# request fails the run
_SESSION = requests.Session()


def http_fetch_bytes(
        url: str,
        headers: Dict[str, str],
        timeout: float,
        params: Optional[Dict[str, Any]] = None,
) -> bytes:
    """
    Perform a single HTTP GET request and return the response body as raw
    bytes, raising for any non-2xx status.
    """
    resp = _SESSION.get(url, headers=headers, params=params, timeout=timeout)
    resp.raise_for_status()
    return resp.content


def http_post_bytes(
        url: str,
        headers: Dict[str, str],
        timeout: float,
        data: Dict[str, Any],
) -> bytes:
    """
    Perform a single form-encoded HTTP POST and return the response body as
    raw bytes, raising for any non-2xx status.
    """
    resp = _SESSION.post(url, headers=headers, data=data, timeout=timeout)
    resp.raise_for_status()
    return resp.content


def _decode_json_bytes(raw: bytes, url: str) -> Dict[str, Any]:
    """
    Decode a UTF-8 JSON response and parse it into a Python object, including a
    short preview of invalid data in error messages.
    """
    try:
        return json.loads(raw.decode("utf-8"))
    except json.JSONDecodeError as ex:
        # include a preview for debugging
        preview = raw[:256].decode("utf-8", errors="replace")
        raise ValueError(f"Invalid JSON from {url!r}: {ex.msg} at pos {ex.pos}; preview={preview!r}") from ex


def http_get_json(url: str, params: Optional[Dict[str, Any]] = None,
                  timeout: float = HTTP_TIMEOUT_DEFAULT) -> Dict[str, Any]:
    """
    Fetch JSON from a URL with a JSON Accept header, returning the parsed
    response as a dictionary.
    """
    raw = http_fetch_bytes(url, DEFAULT_JSON_HEADERS.copy(), timeout, params=params)
    return _decode_json_bytes(raw, url)


def http_get_text(url: str, params: Optional[Dict[str, Any]] = None,
                  timeout: float = HTTP_TIMEOUT_DEFAULT) -> str:
    """
    Download an XML or text document, honoring a UTF-8 byte order mark and
    falling back to Latin-1 when the body is not valid UTF-8.
    """
    raw = http_fetch_bytes(url, DEFAULT_XML_HEADERS.copy(), timeout, params=params)
    if raw.startswith(b"\xef\xbb\xbf"):
        return raw.decode("utf-8-sig")
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1", errors="replace")


def sparql_post_json(url: str, query: str, timeout: float = HTTP_TIMEOUT_DEFAULT) -> Dict[str, Any]:
    """
    Run a SPARQL query via POST so long VALUES lists do not hit URL length
    limits, returning the parsed JSON result document.
    """
    raw = http_post_bytes(url, SPARQL_JSON_HEADERS.copy(), timeout, data={"query": query, "format": "json"})
    return _decode_json_bytes(raw, url)
