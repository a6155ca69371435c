"""Value objects for the DB2 health checks.

All types here are frozen dataclasses -- immutable, compared by value.
They describe what is monitored (``Target``, ``ConfigurationDomain``),
what was stored (``Revision``) and what a run concluded (``DomainOutcome``,
``RunResult``, ``AlertResult``).
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from pathlib import Path

from .enums import DriftVerdict, FatalKind, RetrievalKind, Severity

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


# ---------------------------------------------------------------------------
# Target
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Target:
    """The (instance, database) pair under test."""

    instance: Path
    database: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "instance", Path(self.instance))
        object.__setattr__(self, "database", self.database.upper())

    @property
    def instance_name(self) -> str:
        """Instance owner name, taken from the last component of the path."""
        return self.instance.name or str(self.instance)

    @property
    def profile(self) -> Path:
        """The instance profile that marks a valid instance directory."""
        return self.instance / "sqllib" / "db2profile"

    @property
    def key(self) -> str:
        """Sanitized ``instance_database`` identifier, safe as a directory name."""
        raw = f"{self.instance_name}_{self.database}" if self.database else self.instance_name
        return _UNSAFE_KEY_CHARS.sub("_", raw)


# ---------------------------------------------------------------------------
# ConfigurationDomain
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConfigurationDomain:
    """One statically enumerated configuration facet.

    ``source`` is interpreted according to ``kind``: a CLP command, a
    catalog query, or an automaint policy name.  ``ignore_prefixes`` lists
    line prefixes that change on every run and carry no configuration.
    """

    domain_id: str
    label: str
    kind: RetrievalKind
    source: str
    history_file: str
    policy_file: str = ""
    ignore_prefixes: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.kind is RetrievalKind.POLICY and not self.policy_file:
            raise ValueError(f"policy domain '{self.domain_id}' needs a policy_file")

    @property
    def is_policy(self) -> bool:
        return self.kind is RetrievalKind.POLICY


# ---------------------------------------------------------------------------
# Revision
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Revision:
    """One committed snapshot of a domain."""

    number: int
    text: str
    timestamp: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        if self.number < 1:
            raise ValueError(f"revision number must be >= 1, got {self.number}")


# ---------------------------------------------------------------------------
# Run outcome
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DomainOutcome:
    """Per-domain result of one drift run."""

    domain: ConfigurationDomain
    verdict: DriftVerdict
    notes: tuple[str, ...] = ()
    diff: tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        return self.verdict is DriftVerdict.CHANGED

    @property
    def added_lines(self) -> int:
        return sum(
            1 for line in self.diff
            if line.startswith("+") and not line.startswith("+++")
        )

    @property
    def removed_lines(self) -> int:
        return sum(
            1 for line in self.diff
            if line.startswith("-") and not line.startswith("---")
        )


@dataclass(frozen=True)
class RunResult:
    """Everything a drift run observed, returned once by the engine.

    Attributes
    ----------
    first_execution:
        ``True`` when the target's store was created by this run.
    outcomes:
        Per-domain outcomes in fixed domain order.  Domains skipped after a
        fatal failure are absent.
    fatal:
        Message of the failure that aborted the run, if any.
    fatal_kind:
        Classification of ``fatal``.
    elapsed_seconds:
        Wall-clock time of the run.
    """

    first_execution: bool = False
    outcomes: tuple[DomainOutcome, ...] = ()
    fatal: str | None = None
    fatal_kind: FatalKind | None = None
    elapsed_seconds: float = 0.0

    @property
    def changed_domains(self) -> tuple[ConfigurationDomain, ...]:
        return tuple(o.domain for o in self.outcomes if o.changed)

    @property
    def notes(self) -> tuple[str, ...]:
        return tuple(note for o in self.outcomes for note in o.notes)

    def verdict_for(self, domain_id: str) -> DriftVerdict | None:
        for outcome in self.outcomes:
            if outcome.domain.domain_id == domain_id:
                return outcome.verdict
        return None


@dataclass(frozen=True)
class AlertResult:
    """The single status a plugin reports: severity, text and counter."""

    severity: Severity
    summary: str
    performance: int | float | None = None
    long_text: tuple[str, ...] = ()
    perf_label: str = "changes"
    perf_suffix: str = ""

    @property
    def exit_code(self) -> int:
        return int(self.severity)

    @property
    def perfdata(self) -> str:
        """Nagios performance string, empty when there is no counter."""
        if self.performance is None:
            return ""
        return f"{self.perf_label}={self.performance}{self.perf_suffix}"

    @classmethod
    def unknown(cls, summary: str) -> AlertResult:
        return cls(severity=Severity.UNKNOWN, summary=summary)
