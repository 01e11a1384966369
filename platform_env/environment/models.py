"""
Typed views over the JSON blobs the platform publishes.

Every ``from_json`` builder takes an already decoded JSON object and returns a
frozen value. Missing or ``null`` fields fall back to their zero value and
unknown fields are ignored; a field holding the wrong JSON type raises
``ValueError`` naming the offending field.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Tuple

_LABELS = {str: "a string", bool: "a boolean", int: "an integer", dict: "an object", list: "an array"}


def _empty_map() -> Mapping[str, str]:
    return MappingProxyType({})


def _get(data: dict, name: str, kind: type, default: Any) -> Any:
    value = data.get(name)
    if value is None:
        return default
    # bool is an int subclass; JSON keeps them apart.
    if kind is int and isinstance(value, bool):
        raise ValueError(f"{name} must be {_LABELS[kind]}")
    if not isinstance(value, kind):
        raise ValueError(f"{name} must be {_LABELS[kind]}")
    return value


def _object(data: dict, name: str) -> dict:
    return _get(data, name, dict, {})


def _str_list(data: dict, name: str) -> Tuple[str, ...]:
    items = _get(data, name, list, [])
    for item in items:
        if not isinstance(item, str):
            raise ValueError(f"{name} must only contain strings")
    return tuple(items)


def _str_map(data: dict, name: str) -> Mapping[str, str]:
    items = _object(data, name)
    for key, value in items.items():
        if not isinstance(value, str):
            raise ValueError(f"{name}.{key} must be a string")
    return MappingProxyType(dict(items))


@dataclass(frozen=True)
class Credential:
    """Access information for one instance of a backing service."""

    scheme: str = ""
    cluster: str = ""
    service: str = ""
    username: str = ""
    password: str = ""
    host: str = ""
    path: str = ""
    public: bool = False
    fragment: str = ""
    ip: str = ""
    rel: str = ""
    type: str = ""
    port: int = 0
    hostname: str = ""
    is_master: bool = False

    @classmethod
    def from_json(cls, data: dict) -> "Credential":
        query = _object(data, "query")
        return cls(
            scheme=_get(data, "scheme", str, ""),
            cluster=_get(data, "cluster", str, ""),
            service=_get(data, "service", str, ""),
            username=_get(data, "username", str, ""),
            password=_get(data, "password", str, ""),
            host=_get(data, "host", str, ""),
            path=_get(data, "path", str, ""),
            public=_get(data, "public", bool, False),
            fragment=_get(data, "fragment", str, ""),
            ip=_get(data, "ip", str, ""),
            rel=_get(data, "rel", str, ""),
            type=_get(data, "type", str, ""),
            port=_get(data, "port", int, 0),
            hostname=_get(data, "hostname", str, ""),
            is_master=_get(query, "is_master", bool, False),
        )


@dataclass(frozen=True)
class StrictTransportSecurity:
    include_subdomains: bool = False
    enabled: bool = False
    preload: bool = False


@dataclass(frozen=True)
class RouteTls:
    client_authentication: str = ""
    min_version: int = 0
    client_certificate_authorities: Tuple[str, ...] = ()
    strict_transport_security: StrictTransportSecurity = field(default_factory=StrictTransportSecurity)

    @classmethod
    def from_json(cls, data: dict) -> "RouteTls":
        hsts = _object(data, "strict_transport_security")
        return cls(
            client_authentication=_get(data, "client_authentication", str, ""),
            min_version=_get(data, "min_version", int, 0),
            client_certificate_authorities=_str_list(data, "client_certificate_authorities"),
            strict_transport_security=StrictTransportSecurity(
                include_subdomains=_get(hsts, "include_subdomains", bool, False),
                enabled=_get(hsts, "enabled", bool, False),
                preload=_get(hsts, "preload", bool, False),
            ),
        )


@dataclass(frozen=True)
class RouteCache:
    enabled: bool = False
    headers: Tuple[str, ...] = ()
    cookies: Tuple[str, ...] = ()
    default_ttl: int = 0

    @classmethod
    def from_json(cls, data: dict) -> "RouteCache":
        return cls(
            enabled=_get(data, "enabled", bool, False),
            headers=_str_list(data, "headers"),
            cookies=_str_list(data, "cookies"),
            default_ttl=_get(data, "default_ttl", int, 0),
        )


@dataclass(frozen=True)
class HttpAccess:
    addresses: Tuple[str, ...] = ()
    basic_auth: Mapping[str, str] = field(default_factory=_empty_map)

    @classmethod
    def from_json(cls, data: dict) -> "HttpAccess":
        return cls(
            addresses=_str_list(data, "addresses"),
            basic_auth=_str_map(data, "basic_auth"),
        )


@dataclass(frozen=True)
class Route:
    """
    One entry of the routing table.

    ``url`` is not part of the route's JSON: the platform publishes routes as
    ``{url: route}`` and the loader copies the key into the value.
    """

    original_url: str = ""
    attributes: Mapping[str, str] = field(default_factory=_empty_map)
    type: str = ""
    restrict_robots: bool = False
    tls: RouteTls = field(default_factory=RouteTls)
    upstream: str = ""
    cache: RouteCache = field(default_factory=RouteCache)
    http_access: HttpAccess = field(default_factory=HttpAccess)
    primary: bool = False
    id: str = ""
    ssi_enabled: bool = False
    url: str = ""

    @classmethod
    def from_json(cls, data: dict) -> "Route":
        ssi = _object(data, "ssi")
        return cls(
            original_url=_get(data, "original_url", str, ""),
            attributes=_str_map(data, "attributes"),
            type=_get(data, "type", str, ""),
            restrict_robots=_get(data, "restrict_robots", bool, False),
            tls=RouteTls.from_json(_object(data, "tls")),
            upstream=_get(data, "upstream", str, ""),
            cache=RouteCache.from_json(_object(data, "cache")),
            http_access=HttpAccess.from_json(_object(data, "http_access")),
            primary=_get(data, "primary", bool, False),
            id=_get(data, "id", str, ""),
            ssi_enabled=_get(ssi, "enabled", bool, False),
        )


Credentials = Mapping[str, Tuple[Credential, ...]]
Routes = Mapping[str, Route]
Variables = Mapping[str, str]
