"""
Decoding helpers for the structured platform variables.

The platform publishes relationships, variables, routes and application
metadata as base64-encoded JSON. Each ``extract_*`` helper runs the same
pipeline (base64, then JSON, then a shape check) and reports any failure as a
``DecodeError`` naming the variable and the stage that failed.
"""

import base64
import binascii
import json
from dataclasses import replace
from types import MappingProxyType
from typing import Any, Dict, Mapping

from platform_env.environment.errors import DecodeError
from platform_env.environment.models import Credential, Credentials, Route, Routes, Variables


def decode_payload(key: str, raw: str) -> Any:
    """
    Base64-decode then JSON-decode ``raw``.
    """
    # Line breaks are tolerated inside the encoded value.
    cleaned = raw.replace("\r", "").replace("\n", "")
    try:
        decoded = base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(key, "base64", str(exc)) from exc
    try:
        return json.loads(decoded)
    except (ValueError, RecursionError) as exc:
        raise DecodeError(key, "json", str(exc)) from exc


def _require_object(key: str, payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise DecodeError(key, "shape", "expected a JSON object")
    return payload


def validate_relationships(payload: dict) -> Credentials:
    """
    Build the relationship name -> credentials mapping, preserving order.
    """
    credentials: Dict[str, tuple] = {}
    for name, endpoints in payload.items():
        if not isinstance(endpoints, list):
            raise ValueError(f"relationship {name} must be an array")
        entries = []
        for endpoint in endpoints:
            if not isinstance(endpoint, dict):
                raise ValueError(f"relationship {name} must only contain objects")
            try:
                entries.append(Credential.from_json(endpoint))
            except ValueError as exc:
                raise ValueError(f"relationship {name}: {exc}") from exc
        credentials[name] = tuple(entries)
    return MappingProxyType(credentials)


def validate_variables(payload: dict) -> Variables:
    for name, value in payload.items():
        if not isinstance(value, str):
            raise ValueError(f"variable {name} must be a string")
    return MappingProxyType(dict(payload))


def validate_routes(payload: dict) -> Routes:
    """
    Build the URL -> route mapping with every route's ``url`` backfilled.
    """
    parsed: Dict[str, Route] = {}
    for url, definition in payload.items():
        if not isinstance(definition, dict):
            raise ValueError(f"route {url} must be an object")
        try:
            parsed[url] = Route.from_json(definition)
        except ValueError as exc:
            raise ValueError(f"route {url}: {exc}") from exc
    # Copy each map key into its route.
    return MappingProxyType({url: replace(route, url=url) for url, route in parsed.items()})


def _extract(key: str, raw: str, validator) -> Mapping:
    payload = _require_object(key, decode_payload(key, raw))
    try:
        return validator(payload)
    except (ValueError, RecursionError) as exc:
        raise DecodeError(key, "shape", str(exc)) from exc


def extract_credentials(key: str, raw: str) -> Credentials:
    return _extract(key, raw, validate_relationships)


def extract_variables(key: str, raw: str) -> Variables:
    return _extract(key, raw, validate_variables)


def extract_routes(key: str, raw: str) -> Routes:
    return _extract(key, raw, validate_routes)


def freeze(value: Any) -> Any:
    """
    Read-only copy of a decoded JSON tree: objects become mapping proxies and
    arrays become tuples.
    """
    if isinstance(value, dict):
        return MappingProxyType({name: freeze(item) for name, item in value.items()})
    if isinstance(value, list):
        return tuple(freeze(item) for item in value)
    return value


def extract_application(key: str, raw: str) -> Mapping[str, Any]:
    """
    Decode the application metadata. Its content is not validated, only frozen.
    """
    return _extract(key, raw, freeze)
