from __future__ import annotations


class LoadError(ValueError):
    """The world document could not be read or is structurally invalid."""


class WorldReferenceError(LoadError):
    """The world document refers to a room or item id that does not exist."""


class SessionCorruptedError(RuntimeError):
    """The session no longer points at a room in its world."""


class ConfigError(ValueError):
    """The config file is not valid YAML or has the wrong shape."""
