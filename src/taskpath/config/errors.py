"""Errors raised while loading and overriding configuration."""

from typing import Tuple


class ConfigError(Exception):
    """Base class for configuration errors."""

    pass


class ConfigLoadError(ConfigError):
    """Error loading or validating a configuration document."""

    pass


class ConfigOverrideError(ConfigError):
    """The configuration could not be built from file and CLI sources."""

    pass


class OverrideError(ConfigError):
    """A single ``path=value`` override could not be applied."""

    pass


class InvalidOverrideValueError(OverrideError):
    """The value part of an override is not a valid YAML literal."""

    def __init__(self, path: str, value: str, reason: str):
        self.path = path
        self.value = value
        super().__init__(f"`{path}': `{value}' is not valid yaml: {reason}")


class OverridePathError(OverrideError):
    """The path part of an override does not fit the document.

    Attributes:
        path: The full dotted path given on the command line.
        remainder: Segments that could not be followed.
    """

    def __init__(self, path: str, remainder: Tuple[str, ...], message: str):
        self.path = path
        self.remainder = tuple(remainder)
        super().__init__(message)


class MalformedPathError(OverridePathError):
    """The override goes through a value that is not a mapping."""

    def __init__(self, path: str, remainder: Tuple[str, ...] = ()):
        super().__init__(path, remainder, f"Path `{path}' malformed.")


class PathNotFoundError(OverridePathError):
    """A non-terminal segment of the override is missing."""

    def __init__(self, path: str, remainder: Tuple[str, ...]):
        super().__init__(
            path,
            remainder,
            f"Path `{path}' contains unknown nested field(s): {list(remainder)}",
        )


__all__ = [
    "ConfigError",
    "ConfigLoadError",
    "ConfigOverrideError",
    "OverrideError",
    "InvalidOverrideValueError",
    "OverridePathError",
    "MalformedPathError",
    "PathNotFoundError",
]
