"""Infrastructure layer for the DB2 health checks.

Re-exports the public API surface for convenience::

    from db2_health.infrastructure import (
        CheckConfig, Db2Client, ExecutionLock, SnapshotStore,
    )
"""

from db2_health.infrastructure.config import (
    CheckConfig,
    DiagLogConfig,
    load_config_file,
)
from db2_health.infrastructure.db2_client import (
    CommandResult,
    CommandRunner,
    Db2Client,
    ShellCommandRunner,
)
from db2_health.infrastructure.lock import (
    ExecutionLock,
    LockHandle,
    ProcessProbe,
    PsutilProcessProbe,
    compute_signature,
)
from db2_health.infrastructure.logging_setup import setup_logging
from db2_health.infrastructure.policy_handoff import PolicyFileHandoff
from db2_health.infrastructure.snapshot_store import RevisionHistory, SnapshotStore

__all__ = [
    # Configuration
    "CheckConfig",
    "DiagLogConfig",
    "load_config_file",
    # DB2 client
    "CommandResult",
    "CommandRunner",
    "Db2Client",
    "ShellCommandRunner",
    # Locking
    "ExecutionLock",
    "LockHandle",
    "ProcessProbe",
    "PsutilProcessProbe",
    "compute_signature",
    # Logging
    "setup_logging",
    # Snapshots
    "PolicyFileHandoff",
    "RevisionHistory",
    "SnapshotStore",
]
