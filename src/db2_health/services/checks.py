"""The plugins of the family, each reduced to ``run() -> AlertResult``.

Classes
-------
BaseCheck
    Shared target validation and error translation.
ConfigurationCheck
    Configuration drift detector guarded by the execution lock.
InstanceUpCheck
    Instance liveness through ``db2gcf``.
DiagLogCheck
    ``db2diag.log`` volume against size thresholds.
"""

from __future__ import annotations

import logging
import re
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable

from db2_health.domain.enums import Severity
from db2_health.domain.exceptions import Db2HealthError, TargetInvalidError
from db2_health.domain.values import AlertResult, RunResult, Target
from db2_health.infrastructure.config import CheckConfig, DiagLogConfig
from db2_health.infrastructure.db2_client import Db2Client, ShellCommandRunner
from db2_health.infrastructure.lock import ExecutionLock, ProcessProbe, compute_signature
from db2_health.infrastructure.policy_handoff import PolicyFileHandoff
from db2_health.infrastructure.snapshot_store import SnapshotStore
from db2_health.services.alerting import AlertAggregator
from db2_health.services.drift_engine import DriftEngine
from db2_health.services.retriever import SnapshotRetriever

logger = logging.getLogger(__name__)

INVALID_INSTANCE_SUMMARY = "Instance directory is invalid."

_PARTITION_STATE = re.compile(r"Partition\s+\d+\s*:\s*(.+)")


# ===================================================================== #
#  Base Check                                                            #
# ===================================================================== #

class BaseCheck(ABC):
    """Template for a single plugin run.

    Parameters
    ----------
    config:
        Validated check configuration.
    client:
        DB2 client.  Built from the instance profile when omitted.
    """

    name: str = "check-db2"

    def __init__(self, config: CheckConfig, client: Db2Client | None = None) -> None:
        self._config = config
        self._target = Target(instance=Path(config.instance), database=config.database)
        self._client = client

    @property
    def config(self) -> CheckConfig:
        return self._config

    @property
    def target(self) -> Target:
        return self._target

    @property
    def client(self) -> Db2Client:
        if self._client is None:
            runner = ShellCommandRunner(self._target.profile)
            self._client = Db2Client(runner, self._target.database)
        return self._client

    def run(self) -> AlertResult:
        """Run the check; every domain error becomes an unknown status."""
        logger.debug("Running %s for %s", self.name, self._target.key)
        try:
            return self._execute()
        except Db2HealthError as exc:
            logger.error("%s: %s", self.name, exc.message)
            return AlertResult.unknown(exc.message)

    def validate_instance(self) -> None:
        if not self._target.profile.is_file():
            raise TargetInvalidError(
                INVALID_INSTANCE_SUMMARY,
                details={"instance": str(self._target.instance)},
            )

    @abstractmethod
    def _execute(self) -> AlertResult:
        """Check-specific body."""


# ===================================================================== #
#  Configuration drift                                                   #
# ===================================================================== #

class ConfigurationCheck(BaseCheck):
    """Snapshot, compare and report the eleven configuration domains.

    Parameters
    ----------
    config:
        Check configuration; ``database`` is required.
    client:
        DB2 client.  Built from the instance profile when omitted.
    probe:
        Lock liveness probe.  Defaults to the psutil probe.
    clock, sleep:
        Time source and sleeper for the policy-file poll.
    """

    name = "check-db2-configuration"

    def __init__(
        self,
        config: CheckConfig,
        client: Db2Client | None = None,
        probe: ProcessProbe | None = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(config, client)
        self._probe = probe
        self._clock = clock
        self._sleep = sleep
        self.last_run: RunResult | None = None

    @property
    def signature(self) -> str:
        return compute_signature(self._config.invocation_parameters())

    def _execute(self) -> AlertResult:
        lock = ExecutionLock(Path(self._config.lock_dir), self.name, probe=self._probe)
        with lock.acquire(self.signature):
            self.validate_instance()
            self.validate_database()

            store = SnapshotStore(Path(self._config.directory), self._target)
            handoff = PolicyFileHandoff(
                self._target.instance / "sqllib" / "tmp",
                freshness_window=self._config.freshness_window,
                timeout=self._config.poll_timeout,
                interval=self._config.poll_interval,
                clock=self._clock,
                sleep=self._sleep,
            )
            retriever = SnapshotRetriever(self.client, store, handoff)
            self.last_run = DriftEngine(retriever, store).run()
            logger.info(
                "Drift run for %s finished in %.2fs",
                self._target.key, self.last_run.elapsed_seconds,
            )
            return AlertAggregator().aggregate(self.last_run)

    def validate_database(self) -> None:
        if self._target.database not in self.client.cataloged_databases():
            raise TargetInvalidError(
                f"Database {self._target.database} is not cataloged.",
                details={"database": self._target.database},
            )


# ===================================================================== #
#  Instance liveness                                                     #
# ===================================================================== #

class InstanceUpCheck(BaseCheck):
    """Critical when any partition of the instance is not available."""

    name = "check-db2-instance-up"

    def _execute(self) -> AlertResult:
        self.validate_instance()
        report = self.client.instance_status()
        states = [s.strip() for s in _PARTITION_STATE.findall(report)]
        instance = self._target.instance_name
        if not states:
            return AlertResult.unknown(f"Cannot determine the state of instance {instance}.")

        if all(state == "Available" for state in states):
            return AlertResult(
                severity=Severity.OK,
                summary=f"Instance {instance} is up.",
                performance=1,
                perf_label="up",
            )
        down = ", ".join(states)
        return AlertResult(
            severity=Severity.CRITICAL,
            summary=f"Instance {instance} is down ({down}).",
            performance=0,
            perf_label="up",
        )


# ===================================================================== #
#  Diagnostic log volume                                                 #
# ===================================================================== #

class DiagLogCheck(BaseCheck):
    """Warning/critical when ``db2diag.log`` grows past the thresholds."""

    name = "check-db2-diag-log"

    def __init__(self, config: DiagLogConfig, client: Db2Client | None = None) -> None:
        super().__init__(config, client)
        self._diag_config = config

    @property
    def log_path(self) -> Path:
        return self._target.instance / "sqllib" / "db2dump" / "db2diag.log"

    def _execute(self) -> AlertResult:
        self.validate_instance()
        warning = self._diag_config.warning_mb
        critical = self._diag_config.critical_mb
        suffix = f"MB;{warning:g};{critical:g};0"

        if not self.log_path.exists():
            return AlertResult(
                severity=Severity.OK,
                summary="Diagnostic log does not exist.",
                performance=0,
                perf_label="size",
                perf_suffix=suffix,
            )

        size_mb = round(self.log_path.stat().st_size / (1024 ** 2), 2)
        if size_mb >= critical:
            severity = Severity.CRITICAL
        elif size_mb >= warning:
            severity = Severity.WARNING
        else:
            severity = Severity.OK
        return AlertResult(
            severity=severity,
            summary=f"Diagnostic log size is {size_mb} MB.",
            performance=size_mb,
            perf_label="size",
            perf_suffix=suffix,
        )
