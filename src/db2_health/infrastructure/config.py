"""Configuration dataclasses for the DB2 health checks.

Each config is a plain ``dataclass`` with a ``validate()`` method that raises
``ValueError`` on invalid combinations.  Values come from command-line
options, optionally layered over a YAML file read by
:func:`load_config_file`.

Configs are **frozen** (``frozen=True``) so a run cannot change its own
parameters half-way; the lock signature is derived from them.
"""

from __future__ import annotations

import tempfile
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

DEFAULT_FRESHNESS_WINDOW = 300.0


def _default_directory() -> str:
    return str(Path(tempfile.gettempdir()) / "db2_health_snapshots")


def _default_lock_dir() -> str:
    return tempfile.gettempdir()


# ===================================================================== #
#  Check Configuration                                                   #
# ===================================================================== #

@dataclass(frozen=True)
class CheckConfig:
    """Parameters shared by every check in the family.

    Attributes
    ----------
    instance:
        Instance home directory (the one holding ``sqllib``).
    database:
        Database name.  Required by the configuration check only.
    directory:
        Root of the snapshot store.
    lock_dir:
        Directory holding execution lock files.
    mk:
        Emit the single-line check_mk local-check format.
    trace:
        Append a full DEBUG trace of the run to ``trace_file``.
    trace_file:
        Trace destination.  Empty means ``<lock_dir>/<check-name>.log``.
    verbose:
        Number of ``-v`` flags given.
    freshness_window:
        Maximum age, in seconds, of an exported policy file.
    poll_timeout:
        How long to wait for a fresh policy file before calling it stale.
    poll_interval:
        Delay between two freshness probes.
    """

    instance: str = ""
    database: str = ""
    directory: str = field(default_factory=_default_directory)
    lock_dir: str = field(default_factory=_default_lock_dir)
    mk: bool = False
    trace: bool = False
    trace_file: str = ""
    verbose: int = 0
    freshness_window: float = DEFAULT_FRESHNESS_WINDOW
    poll_timeout: float = 10.0
    poll_interval: float = 1.0

    def validate(self, require_database: bool = False) -> None:
        """Raise ``ValueError`` if any field is out of valid range."""
        if not self.instance:
            raise ValueError("instance directory is required")
        if require_database and not self.database:
            raise ValueError("database name is required")
        if not self.directory:
            raise ValueError("snapshot directory must not be empty")
        if self.verbose < 0:
            raise ValueError(f"verbose must be >= 0, got {self.verbose}")
        if self.freshness_window <= 0:
            raise ValueError(
                f"freshness_window must be > 0, got {self.freshness_window}"
            )
        if self.poll_timeout < 0:
            raise ValueError(f"poll_timeout must be >= 0, got {self.poll_timeout}")
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be > 0, got {self.poll_interval}")

    def resolved_trace_file(self, check_name: str) -> Path:
        if self.trace_file:
            return Path(self.trace_file)
        return Path(self.lock_dir) / f"{check_name}.log"

    def invocation_parameters(self) -> dict[str, Any]:
        """Every parameter of the run; the lock signature is built from these."""
        return self.to_dict()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CheckConfig:
        valid_keys = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_keys and v is not None}
        return cls(**filtered)


# ===================================================================== #
#  Diagnostic log Configuration                                          #
# ===================================================================== #

@dataclass(frozen=True)
class DiagLogConfig(CheckConfig):
    """Thresholds for the diagnostic-log volume check, in megabytes."""

    warning_mb: float = 50.0
    critical_mb: float = 100.0

    def validate(self, require_database: bool = False) -> None:
        super().validate(require_database)
        if self.warning_mb <= 0:
            raise ValueError(f"warning_mb must be > 0, got {self.warning_mb}")
        if self.critical_mb < self.warning_mb:
            raise ValueError(
                f"critical_mb ({self.critical_mb}) must be >= "
                f"warning_mb ({self.warning_mb})"
            )


# ===================================================================== #
#  File loader                                                           #
# ===================================================================== #

def load_config_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML mapping of config values.

    Keys use the dataclass field names (``directory``, ``lock_dir``,
    ``freshness_window`` ...).  Unknown keys are kept and later ignored by
    ``from_dict``.
    """
    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"Top-level YAML in {path} must be a mapping")
    return raw
