"""Exception hierarchy for clickbeat."""


class ClickbeatError(Exception):
    """Base exception for all clickbeat failures."""


class ConfigError(ClickbeatError):
    """Raised when the configuration file is unreadable or invalid."""


class EventShapeError(ClickbeatError):
    """Raised when a request body does not have the canonical event shape."""
