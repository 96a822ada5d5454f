from __future__ import annotations


class HueError(Exception):
    """Base class for errors reported by the hue command."""


class UsageError(HueError):
    pass


class ConfigError(HueError):
    pass


class ColorError(HueError, ValueError):
    pass


class BridgeError(HueError):
    """An error entry returned by the bridge (``{"error": {...}}``)."""

    UNAUTHORIZED = 1
    LINK_BUTTON = 101

    def __init__(self, type: int, description: str, address: str = "") -> None:
        super().__init__(description)
        self.type = type
        self.description = description
        self.address = address

    @property
    def unauthorized(self) -> bool:
        return self.type == self.UNAUTHORIZED

    def to_dict(self) -> dict:
        return {"type": self.type, "address": self.address, "description": self.description}
