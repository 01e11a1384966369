"""
Platform environment package: loader, data model and errors.
"""

from platform_env.environment import utils  # re-export for convenience
from platform_env.environment.config import DEFAULT_PREFIX, PlatformConfig, load_config
from platform_env.environment.errors import (
    DecodeError,
    NotAValidPlatformEnvironment,
    PlatformEnvError,
    RelationshipNotFound,
    RoutesUnavailableDuringBuild,
)
from platform_env.environment.models import Credential, Route

__all__ = [
    "utils",
    "DEFAULT_PREFIX",
    "PlatformConfig",
    "load_config",
    "Credential",
    "Route",
    "DecodeError",
    "NotAValidPlatformEnvironment",
    "PlatformEnvError",
    "RelationshipNotFound",
    "RoutesUnavailableDuringBuild",
]
