"""Domain layer for the DB2 health checks.

Re-exports the value objects, enums, exceptions and the domain catalogue::

    from db2_health.domain import DOMAINS, Target, RunResult, Severity
"""

from db2_health.domain.catalog import DOMAINS, POLICY_DOMAINS, get_domain
from db2_health.domain.enums import DriftVerdict, FatalKind, RetrievalKind, Severity
from db2_health.domain.exceptions import (
    ConnectivityError,
    Db2HealthError,
    LockContentionError,
    RetrievalError,
    StaleSnapshotError,
    StoreWriteError,
    TargetInvalidError,
    UsageError,
)
from db2_health.domain.values import (
    AlertResult,
    ConfigurationDomain,
    DomainOutcome,
    Revision,
    RunResult,
    Target,
)

__all__ = [
    # Catalogue
    "DOMAINS",
    "POLICY_DOMAINS",
    "get_domain",
    # Enums
    "DriftVerdict",
    "FatalKind",
    "RetrievalKind",
    "Severity",
    # Exceptions
    "Db2HealthError",
    "UsageError",
    "LockContentionError",
    "TargetInvalidError",
    "ConnectivityError",
    "RetrievalError",
    "StaleSnapshotError",
    "StoreWriteError",
    # Values
    "AlertResult",
    "ConfigurationDomain",
    "DomainOutcome",
    "Revision",
    "RunResult",
    "Target",
]
