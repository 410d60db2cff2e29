from __future__ import annotations

import json
import socket
import xml.etree.ElementTree as ElementTree
import requests

__all__ = [
    "HTTP_ERRORS",
    "TIMEOUT_ERRORS",
    "NETWORK_ERRORS",
    "DECODE_ERRORS",
    "PARSE_ERRORS",
    "ALL_API_ERRORS",
    "SEARCH_ERRORS",
    "FETCH_ERRORS",
    "RESOLUTION_ERRORS",
    "FILE_IO_ERRORS",
    "NUMERIC_ERRORS",
    "JSON_ERRORS",
    "FILE_READ_ERRORS",
    "XML_PARSE_ERRORS",
    "FILE_WRITE_ERRORS",
]

# errors raised by requests when an HTTP request fails, a URL cannot be reached,
# or the server answers with an error status
HTTP_ERRORS = (requests.exceptions.RequestException,)

# errors that signal an operation has taken too long and hit a timeout at the OS or socket level
TIMEOUT_ERRORS = (TimeoutError, socket.timeout)

# umbrella group for network-related failures, combining HTTP issues and timeouts
NETWORK_ERRORS = HTTP_ERRORS + TIMEOUT_ERRORS

# errors that occur when converting response bytes into text using a specific encoding
DECODE_ERRORS = (UnicodeDecodeError, UnicodeError)

# errors raised while interpreting structured data such as JSON, XML, or response fields
PARSE_ERRORS = (ValueError, TypeError, KeyError)

# common API-facing errors focused on connectivity and decoding, usually raised before any parsing logic runs
ALL_API_ERRORS = NETWORK_ERRORS + DECODE_ERRORS

# JSON parsing errors when processing ESearch or SPARQL responses
JSON_ERRORS = (json.JSONDecodeError, ValueError, TypeError)

# XML parsing errors when decoding an EFetch PubmedArticleSet
XML_PARSE_ERRORS = (ElementTree.ParseError, ValueError, TypeError)

# everything the ESearch step can raise: connectivity, a missing key, or an unexpected payload
SEARCH_ERRORS = ALL_API_ERRORS + JSON_ERRORS + PARSE_ERRORS

# everything the EFetch step can raise, including malformed XML
FETCH_ERRORS = ALL_API_ERRORS + XML_PARSE_ERRORS

# everything a Wikidata batch lookup can raise
RESOLUTION_ERRORS = ALL_API_ERRORS + JSON_ERRORS + PARSE_ERRORS

# file system operation errors when reading the license list or API keys
# Note: FileNotFoundError is a subclass of OSError, so both are included for clarity
FILE_IO_ERRORS = (FileNotFoundError, OSError)

# numeric conversion errors raised while reading year, month, or day fields
NUMERIC_ERRORS = (TypeError, ValueError, OverflowError)

# combined file read errors including I/O failures and encoding issues
FILE_READ_ERRORS = FILE_IO_ERRORS + DECODE_ERRORS

# file write operation errors including permissions, disk full, and encoding issues
FILE_WRITE_ERRORS = (OSError, TypeError, UnicodeEncodeError)
