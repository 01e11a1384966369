"""
Errors raised while loading or querying the platform environment.
"""


class PlatformEnvError(Exception):
    """Base class for every platform environment error."""


class NotAValidPlatformEnvironment(PlatformEnvError):
    """Raised when the process does not look like it runs on the platform."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"No valid platform found: {key} is not set")


class DecodeError(PlatformEnvError, ValueError):
    """A structured variable could not be decoded (base64, JSON or shape)."""

    def __init__(self, key: str, stage: str, message: str):
        self.key = key
        self.stage = stage
        super().__init__(f"Cannot decode {key} ({stage}): {message}")


class RelationshipNotFound(PlatformEnvError, LookupError):
    def __init__(self, relationship: str):
        self.relationship = relationship
        super().__init__(f"No such relationship: {relationship}")


class RoutesUnavailableDuringBuild(PlatformEnvError, RuntimeError):
    def __init__(self):
        super().__init__("Routes are not available during the build phase")
