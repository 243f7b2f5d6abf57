"""Exceptions raised by huebridge."""

from __future__ import annotations


class HueError(Exception):
    """Base class for huebridge exceptions."""


class TransportError(HueError):
    """The bridge could not be reached or its response could not be read."""


class EncodeError(HueError):
    """Request parameters could not be serialised to JSON."""


class DecodeError(HueError):
    """A JSON or XML payload could not be decoded."""


class BridgeError(HueError):
    """The bridge answered with an error envelope."""

    def __init__(self, type: int, description: str, address: str = "") -> None:
        self.type = type
        self.description = description
        self.address = address
        super().__init__(
            f"failed to handle response: error type {type}: {description}"
        )


class NoBridgesFoundError(HueError):
    def __init__(self) -> None:
        super().__init__("no bridges found")


class IndexOutOfBoundsError(HueError):
    def __init__(self, kind: str, index: int) -> None:
        self.kind = kind
        self.index = index
        super().__init__(f"{kind} selection index {index} out of bounds")


class NotFoundError(HueError):
    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} named '{name}' not found")


class NotAuthenticatedError(HueError):
    def __init__(self) -> None:
        super().__init__(
            "bridge has no active username; call login() or create_user() first"
        )
