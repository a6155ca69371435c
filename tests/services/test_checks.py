"""Tests for the three checks of the family."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from db2_health.domain.enums import DriftVerdict, Severity
from db2_health.domain.exceptions import ConnectivityError
from db2_health.infrastructure.config import CheckConfig, DiagLogConfig
from db2_health.infrastructure.lock import ExecutionLock
from db2_health.services.checks import (
    ConfigurationCheck,
    DiagLogCheck,
    InstanceUpCheck,
)
from db2_health.testing import FakeDb2Client, FakeProcessProbe


def _configuration_check(
    config: CheckConfig, client: FakeDb2Client, probe: FakeProcessProbe
) -> ConfigurationCheck:
    return ConfigurationCheck(config, client=client, probe=probe)


# ===================================================================== #
#  ConfigurationCheck                                                     #
# ===================================================================== #


class TestConfigurationCheck:
    def test_first_run_takes_baseline(
        self, config: CheckConfig, fake_client: FakeDb2Client, probe: FakeProcessProbe
    ) -> None:
        alert = _configuration_check(config, fake_client, probe).run()
        assert alert.severity is Severity.OK
        assert alert.summary == "First execution, configuration snapshot taken."
        assert alert.perfdata == "changes=0"

    def test_second_run_without_changes(
        self, config: CheckConfig, fake_client: FakeDb2Client, probe: FakeProcessProbe
    ) -> None:
        _configuration_check(config, fake_client, probe).run()
        alert = _configuration_check(config, fake_client, probe).run()
        assert alert.severity is Severity.OK
        assert alert.summary == "Configuration has not changed."
        assert alert.perfdata == "changes=1"

    def test_drift_is_a_warning_naming_domains(
        self, config: CheckConfig, fake_client: FakeDb2Client, probe: FakeProcessProbe
    ) -> None:
        _configuration_check(config, fake_client, probe).run()
        fake_client.change("registry", "[i] DB2COMM=SSL\n")
        fake_client.change("auto_reorg", "<DB2AutoReorgPolicy><ReorgOptions dictionaryOption=\"Keep\"/></DB2AutoReorgPolicy>\n")
        check = _configuration_check(config, fake_client, probe)
        alert = check.run()
        assert alert.severity is Severity.WARNING
        assert alert.exit_code == 1
        assert alert.summary == (
            "Configuration has changed: Registry variables, Automatic reorg policy."
        )
        assert alert.perfdata == "changes=3"
        assert check.last_run is not None
        assert check.last_run.verdict_for("auto_reorg") is DriftVerdict.CHANGED

    def test_long_paths_do_not_break_the_lock(
        self,
        config: CheckConfig,
        fake_client: FakeDb2Client,
        probe: FakeProcessProbe,
        tmp_path: Path,
    ) -> None:
        deep = tmp_path / "var" / "lib" / "nagios" / "db2" / "configuration_snapshots"
        long_config = dataclasses.replace(
            config,
            directory=str(deep / "production"),
            trace_file=str(tmp_path / "var" / "log" / "nagios" / ("trace-" * 30 + ".log")),
        )
        assert len(long_config.directory + long_config.trace_file) > 255
        alert = _configuration_check(long_config, fake_client, probe).run()
        assert alert.severity is Severity.OK
        assert alert.summary == "First execution, configuration snapshot taken."

    def test_lock_is_released_after_run(
        self, config: CheckConfig, fake_client: FakeDb2Client, probe: FakeProcessProbe
    ) -> None:
        check = _configuration_check(config, fake_client, probe)
        check.run()
        assert list(Path(config.lock_dir).glob("*.lock")) == []

    def test_invalid_instance(
        self, config: CheckConfig, fake_client: FakeDb2Client, probe: FakeProcessProbe, tmp_path: Path
    ) -> None:
        bad = dataclasses.replace(config, instance=str(tmp_path / "nowhere"))
        alert = _configuration_check(bad, fake_client, probe).run()
        assert alert.severity is Severity.UNKNOWN
        assert alert.summary == "Instance directory is invalid."
        assert not Path(bad.directory).exists()

    def test_database_not_cataloged(
        self, config: CheckConfig, instance_dir: Path, probe: FakeProcessProbe
    ) -> None:
        client = FakeDb2Client(instance_dir / "sqllib" / "tmp", cataloged=("TOOLSDB",))
        alert = _configuration_check(config, client, probe).run()
        assert alert.severity is Severity.UNKNOWN
        assert alert.summary == "Database SAMPLE is not cataloged."
        assert client.calls == ["list db directory"]

    def test_busy_lock_touches_nothing(
        self, config: CheckConfig, fake_client: FakeDb2Client
    ) -> None:
        probe = FakeProcessProbe(alive={4242})
        check = _configuration_check(config, fake_client, probe)
        lock_path = ExecutionLock(Path(config.lock_dir), check.name).path_for(check.signature)
        lock_path.parent.mkdir(parents=True)
        lock_path.write_text("4242\n")

        alert = check.run()
        assert alert.severity is Severity.UNKNOWN
        assert alert.summary == "Another check with the same parameters is already running."
        assert fake_client.calls == []
        assert not Path(config.directory).exists()
        assert lock_path.read_text().strip() == "4242"

    def test_stale_lock_is_reclaimed(
        self, config: CheckConfig, fake_client: FakeDb2Client, probe: FakeProcessProbe
    ) -> None:
        check = _configuration_check(config, fake_client, probe)
        lock_path = ExecutionLock(Path(config.lock_dir), check.name).path_for(check.signature)
        lock_path.parent.mkdir(parents=True)
        lock_path.write_text("4242\n")

        alert = check.run()
        assert alert.severity is Severity.OK
        assert not lock_path.exists()

    def test_different_databases_do_not_contend(
        self, config: CheckConfig, fake_client: FakeDb2Client
    ) -> None:
        other = dataclasses.replace(config, database="TOOLSDB")
        a = _configuration_check(config, fake_client, FakeProcessProbe())
        b = _configuration_check(other, fake_client, FakeProcessProbe())
        assert a.signature != b.signature

    def test_connectivity_failure_is_unknown(
        self, config: CheckConfig, fake_client: FakeDb2Client, probe: FakeProcessProbe
    ) -> None:
        _configuration_check(config, fake_client, probe).run()
        fake_client.fail(
            "registry",
            ConnectivityError("Cannot connect to the database (SQL1032N).", "SQL1032N"),
        )
        alert = _configuration_check(config, fake_client, probe).run()
        assert alert.severity is Severity.UNKNOWN
        assert alert.perfdata == ""
        assert alert.summary == "Cannot connect to the database (SQL1032N)."

    def test_stale_policy_is_ok_with_note(
        self, config: CheckConfig, fake_client: FakeDb2Client, probe: FakeProcessProbe
    ) -> None:
        _configuration_check(config, fake_client, probe).run()
        fake_client.stale_policies.add("maintenance_window")
        alert = _configuration_check(config, fake_client, probe).run()
        assert alert.severity is Severity.OK
        assert alert.summary == (
            "Configuration has not changed. "
            "Maintenance window policy: maintWindow.xml is too old."
        )


# ===================================================================== #
#  InstanceUpCheck                                                        #
# ===================================================================== #


class TestInstanceUpCheck:
    def test_available(self, config: CheckConfig, fake_client: FakeDb2Client) -> None:
        alert = InstanceUpCheck(config, client=fake_client).run()
        assert alert.severity is Severity.OK
        assert alert.summary == "Instance db2inst1 is up."
        assert alert.perfdata == "up=1"

    def test_not_operable(self, config: CheckConfig, fake_client: FakeDb2Client) -> None:
        fake_client.status_report = "Partition 0 : Available\nPartition 1 : Not Operable\n"
        alert = InstanceUpCheck(config, client=fake_client).run()
        assert alert.severity is Severity.CRITICAL
        assert alert.summary == "Instance db2inst1 is down (Available, Not Operable)."
        assert alert.perfdata == "up=0"

    def test_unparseable_report(self, config: CheckConfig, fake_client: FakeDb2Client) -> None:
        fake_client.status_report = "garbage"
        alert = InstanceUpCheck(config, client=fake_client).run()
        assert alert.severity is Severity.UNKNOWN

    def test_invalid_instance(
        self, config: CheckConfig, fake_client: FakeDb2Client, tmp_path: Path
    ) -> None:
        bad = dataclasses.replace(config, instance=str(tmp_path / "nowhere"))
        alert = InstanceUpCheck(bad, client=fake_client).run()
        assert alert.summary == "Instance directory is invalid."
        assert fake_client.calls == []


# ===================================================================== #
#  DiagLogCheck                                                           #
# ===================================================================== #


@pytest.fixture
def diag_config(instance_dir: Path, tmp_path: Path) -> DiagLogConfig:
    return DiagLogConfig(
        instance=str(instance_dir),
        directory=str(tmp_path / "snapshots"),
        lock_dir=str(tmp_path / "locks"),
        warning_mb=1,
        critical_mb=3,
    )


def _write_diag_log(instance_dir: Path, megabytes: float) -> None:
    dump = instance_dir / "sqllib" / "db2dump"
    dump.mkdir(parents=True, exist_ok=True)
    (dump / "db2diag.log").write_bytes(b"x" * int(megabytes * 1024 * 1024))


class TestDiagLogCheck:
    def test_missing_log(self, diag_config: DiagLogConfig) -> None:
        alert = DiagLogCheck(diag_config).run()
        assert alert.severity is Severity.OK
        assert alert.summary == "Diagnostic log does not exist."
        assert alert.perfdata == "size=0MB;1;3;0"

    @pytest.mark.parametrize(
        "megabytes, severity",
        [(0.5, Severity.OK), (2, Severity.WARNING), (3, Severity.CRITICAL)],
    )
    def test_thresholds(
        self,
        diag_config: DiagLogConfig,
        instance_dir: Path,
        megabytes: float,
        severity: Severity,
    ) -> None:
        _write_diag_log(instance_dir, megabytes)
        assert DiagLogCheck(diag_config).run().severity is severity

    def test_summary_and_perfdata(self, diag_config: DiagLogConfig, instance_dir: Path) -> None:
        _write_diag_log(instance_dir, 2)
        alert = DiagLogCheck(diag_config).run()
        assert alert.summary == "Diagnostic log size is 2.0 MB."
        assert alert.perfdata == "size=2.0MB;1;3;0"
