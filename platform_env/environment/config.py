"""
Platform environment loader.

Reads the platform's environment variables into an immutable value object so
the rest of the application can consume strongly named settings instead of
hitting os.getenv throughout the codebase. See the platform documentation on
variables for the meaning of each property.
"""

import logging
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from platform_env.environment import utils
from platform_env.environment.errors import (
    NotAValidPlatformEnvironment,
    RelationshipNotFound,
    RoutesUnavailableDuringBuild,
)
from platform_env.environment.models import Credential, Credentials, Route, Routes, Variables

DEFAULT_PREFIX = "PLATFORM_"

KeyGetter = Callable[[str], Optional[str]]

logger = logging.getLogger("platform_env.environment")


def _empty() -> Mapping:
    return MappingProxyType({})


@dataclass(frozen=True)
class PlatformConfig:
    # Prefixed simple values, build or deploy.
    application_name: str = ""
    tree_id: str = ""
    app_dir: str = ""
    project: str = ""
    project_entropy: str = ""

    # Prefixed simple values, runtime only.
    branch: str = ""
    environment: str = ""
    document_root: str = ""
    smtp_host: str = ""
    mode: str = ""

    # Unprefixed simple values.
    socket: str = ""
    port: str = ""

    # Prefixed complex values.
    relationships: Credentials = field(default_factory=_empty)
    variables: Variables = field(default_factory=_empty)
    route_map: Routes = field(default_factory=_empty)
    application: Mapping[str, Any] = field(default_factory=_empty)

    prefix: str = DEFAULT_PREFIX

    @classmethod
    def from_env(
        cls,
        prefix: str = DEFAULT_PREFIX,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "PlatformConfig":
        """
        Load the configuration from the process environment (or ``environ``).

        Raises NotAValidPlatformEnvironment when not running on the platform,
        e.g. on a local computer.
        """
        source = os.environ if environ is None else environ
        try:
            config = load_config(source.get, prefix)
        except NotAValidPlatformEnvironment:
            logger.info("No platform environment detected (prefix=%s)", prefix)
            raise
        logger.info(
            "Loaded platform config for application '%s' (phase=%s, branch=%s)",
            config.application_name,
            "build" if config.in_build() else "runtime",
            config.branch or "-",
        )
        return config

    def in_build(self) -> bool:
        """Whether the code is running in a build environment."""
        return self.environment == ""

    def in_runtime(self) -> bool:
        """Whether the code is running in a runtime environment."""
        return not self.in_build()

    def on_enterprise(self) -> bool:
        return self.mode == "enterprise"

    def on_production(self) -> bool:
        """
        Whether the current environment is a production environment.

        On Enterprise this assumes the production branch is named
        ``production``; projects using another name need their own check.
        """
        if self.in_build():
            return False
        production_branch = "production" if self.on_enterprise() else "master"
        return self.branch == production_branch

    def variable(self, name: str, default: str = "") -> str:
        """
        Return a variable from the VARIABLES mapping, or ``default``.

        Variables prefixed with ``env:`` are also exposed as plain environment
        variables; here they keep the prefix in their name.
        """
        return self.variables.get(name, default)

    def credentials(self, relationship: str) -> Credential:
        """
        Return the credentials for accessing a relationship.

        Only the first endpoint of a relationship is returned.
        """
        endpoints = self.relationships.get(relationship)
        if not endpoints:
            raise RelationshipNotFound(relationship)
        return endpoints[0]

    def routes(self) -> Routes:
        if self.in_build():
            raise RoutesUnavailableDuringBuild()
        return self.route_map

    def route(self, route_id: str) -> Optional[Route]:
        """
        Return the route declared with ``route_id``, or None.

        Routes without an id in their definition cannot be looked up this way.
        """
        for route in self.route_map.values():
            if route.id == route_id:
                return route
        return None

    def sql_dsn(self, relationship: str) -> str:
        """
        Format an SQL connection string for ``relationship``.

        Fields are substituted as-is; callers needing escaping must do it
        themselves.
        """
        creds = self.credentials(relationship)
        return f"{creds.username}:{creds.password}@tcp({creds.host}:{creds.port})/{creds.path}?charset=utf8"


def load_config(get: KeyGetter, prefix: str = DEFAULT_PREFIX) -> PlatformConfig:
    """
    Build a PlatformConfig from the values returned by ``get``.

    Absent and empty values are treated alike. Raises NotAValidPlatformEnvironment
    when the application name is not set and DecodeError when a structured
    variable is malformed (or when APPLICATION is missing).
    """

    def read(key: str) -> str:
        return get(key) or ""

    application_name = read(prefix + "APPLICATION_NAME")
    if not application_name:
        raise NotAValidPlatformEnvironment(prefix + "APPLICATION_NAME")

    relationships: Credentials = _empty()
    raw = read(prefix + "RELATIONSHIPS")
    if raw:
        relationships = utils.extract_credentials(prefix + "RELATIONSHIPS", raw)

    variables: Variables = _empty()
    raw = read(prefix + "VARIABLES")
    if raw:
        variables = utils.extract_variables(prefix + "VARIABLES", raw)

    routes: Routes = _empty()
    raw = read(prefix + "ROUTES")
    if raw:
        routes = utils.extract_routes(prefix + "ROUTES", raw)

    application = utils.extract_application(prefix + "APPLICATION", read(prefix + "APPLICATION"))

    return PlatformConfig(
        application_name=application_name,
        tree_id=read(prefix + "TREE_ID"),
        app_dir=read(prefix + "APP_DIR"),
        project=read(prefix + "PROJECT"),
        project_entropy=read(prefix + "PROJECT_ENTROPY"),
        branch=read(prefix + "BRANCH"),
        environment=read(prefix + "ENVIRONMENT"),
        document_root=read(prefix + "DOCUMENT_ROOT"),
        smtp_host=read(prefix + "SMTP_HOST"),
        mode=read(prefix + "MODE"),
        socket=read("SOCKET"),
        port=read("PORT"),
        relationships=relationships,
        variables=variables,
        route_map=routes,
        application=application,
        prefix=prefix,
    )
