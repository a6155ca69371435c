"""Domain exceptions for the DB2 health checks.

All domain-specific exceptions inherit from ``Db2HealthError`` so callers
can catch the full family with a single ``except`` clause when needed.
Checks translate every member of the family into an unknown status; the
message becomes the plugin summary.
"""

from __future__ import annotations

from typing import Any


class Db2HealthError(Exception):
    """Base exception for all DB2 health-check errors."""

    def __init__(self, message: str = "", details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details or {}


class UsageError(Db2HealthError):
    """Raised for missing or invalid invocation parameters."""


class LockContentionError(Db2HealthError):
    """Raised when a live process already holds the execution lock.

    The run must stop before touching any snapshot.
    """

    def __init__(
        self,
        message: str = "Another check with the same parameters is already running.",
        signature: str = "",
        owner_pid: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.signature = signature
        self.owner_pid = owner_pid


class TargetInvalidError(Db2HealthError):
    """Raised when the instance path or database name cannot be monitored."""


class ConnectivityError(Db2HealthError):
    """Raised when the monitored instance or database cannot be reached.

    Distinct from :class:`RetrievalError`: a connectivity failure makes the
    whole snapshot inconsistent, so the drift run is aborted.
    """

    def __init__(
        self,
        message: str = "Cannot connect to the database.",
        sqlcode: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.sqlcode = sqlcode


class RetrievalError(Db2HealthError):
    """Raised when one configuration domain could not be retrieved."""

    def __init__(
        self,
        message: str = "Retrieval failed",
        domain: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.domain = domain


class StaleSnapshotError(RetrievalError):
    """Raised when an asynchronously produced policy file is not fresh."""


class StoreWriteError(Db2HealthError):
    """Raised when a snapshot cannot be committed to the revision history."""

    def __init__(
        self,
        message: str = "Cannot write snapshot",
        domain: str = "",
        path: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.domain = domain
        self.path = path
