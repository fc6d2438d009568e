"""Data-source failure taxonomy."""

from __future__ import annotations


class PlayerError(Exception):
    """Base class for failures raised by a data source."""

    def __init__(self, message: str = "", node_id: str | None = None):
        super().__init__(message or self.__class__.__name__)
        self.node_id = node_id


class NotFound(PlayerError):
    """The requested node does not exist."""


class AccessDenied(PlayerError):
    """The viewer lacks permission on the node. Expected, never user-facing."""


class NetworkError(PlayerError):
    """Transport failure or unexpected response from the item store."""


UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."
