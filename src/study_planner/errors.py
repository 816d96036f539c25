from __future__ import annotations


class PlannerError(Exception):
    """Base error carrying a human readable message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RemoteFailure(PlannerError):
    """The remote record store failed: transport, permission, validation or a missing row."""


class NotFound(PlannerError):
    """A record id exists neither in the remote store nor in any local bucket."""


class StorageUnavailable(PlannerError):
    """The local key/value storage cannot be read or written."""
