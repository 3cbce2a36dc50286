"""OData v2 envelope, URL and error helpers for the SAP vendor portal service."""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote

JSON_FORMAT = "json"


def unwrap(body: Any) -> List[Any]:
    """
    Extract the row list from an OData v2 response body.

    Handles ``{"d": {"results": [...]}}`` (collection), ``{"d": {...}}``
    (single entity), a bare list, and a bare object. Anything else yields [].
    """
    if isinstance(body, list):
        return body
    if not isinstance(body, dict):
        return []
    envelope = body.get("d")
    if isinstance(envelope, dict):
        results = envelope.get("results")
        if isinstance(results, list):
            return results
        return [envelope]
    return [body]


def quote_literal(value: Any) -> str:
    """
    Render a value as an OData string literal for use inside a URL.

    Embedded quotes are doubled (OData escaping) and the content is
    percent-encoded so it cannot break out of the query string.
    """
    text = "" if value is None else str(value)
    return "'" + quote(text.replace("'", "''"), safe="") + "'"


def build_filter_query(entity_set: str, field: str, value: Any, fmt: str = JSON_FORMAT) -> str:
    return f"{entity_set}?$filter={field} eq {quote_literal(value)}&$format={fmt}"


def build_key_path(entity_set: str, keys: Mapping[str, Any], fmt: Optional[str] = JSON_FORMAT) -> str:
    """``EntitySet(Key1='a',Key2='b')`` with an optional ``$format`` suffix."""
    predicate = ",".join(f"{name}={quote_literal(value)}" for name, value in keys.items())
    path = f"{entity_set}({predicate})"
    if fmt:
        path = f"{path}?$format={fmt}"
    return path


def extract_error_message(body: Any, fallback: str = "SAP returned an error.") -> str:
    """
    Pull ``error.message.value`` out of an SAP error body.

    ``body`` may be parsed JSON or raw text; raw text that is not an OData
    error document is returned as-is.
    """
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8", errors="replace")
    parsed = body
    if isinstance(body, str):
        try:
            parsed = json.loads(body)
        except ValueError:
            return body.strip() or fallback
    if isinstance(parsed, dict):
        error = parsed.get("error")
        if isinstance(error, dict):
            message = error.get("message")
            if isinstance(message, dict) and message.get("value"):
                return str(message["value"])
            if isinstance(message, str) and message:
                return message
        return json.dumps(parsed)
    if parsed is None or parsed == "":
        return fallback
    return str(parsed)


def decode_base64_payload(value: Any) -> bytes:
    """Decode a base64 Edm.Binary field; returns b'' when it cannot be decoded."""
    if not isinstance(value, str) or not value.strip():
        return b""
    try:
        return base64.b64decode("".join(value.split()), validate=True)
    except (binascii.Error, ValueError):
        return b""


def first_row(body: Any) -> Dict[str, Any]:
    for row in unwrap(body):
        if isinstance(row, dict):
            return row
    return {}
