"""Shared fixtures for the DB2 health-check test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from db2_health.domain.values import Target
from db2_health.infrastructure.config import CheckConfig
from db2_health.infrastructure.policy_handoff import PolicyFileHandoff
from db2_health.infrastructure.snapshot_store import SnapshotStore
from db2_health.services.retriever import SnapshotRetriever
from db2_health.testing import FakeDb2Client, FakeProcessProbe

# ---------------------------------------------------------------------------
# Instance fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def instance_dir(tmp_path: Path) -> Path:
    """A fake instance home with ``sqllib/db2profile`` and ``sqllib/tmp``."""
    home = tmp_path / "db2inst1"
    sqllib = home / "sqllib"
    (sqllib / "tmp").mkdir(parents=True)
    (sqllib / "db2profile").write_text("# db2 profile\n", encoding="utf-8")
    return home


@pytest.fixture
def policy_dir(instance_dir: Path) -> Path:
    return instance_dir / "sqllib" / "tmp"


@pytest.fixture
def target(instance_dir: Path) -> Target:
    return Target(instance=instance_dir, database="SAMPLE")


@pytest.fixture
def config(instance_dir: Path, tmp_path: Path) -> CheckConfig:
    """Configuration pointing every directory into ``tmp_path``."""
    return CheckConfig(
        instance=str(instance_dir),
        database="SAMPLE",
        directory=str(tmp_path / "snapshots"),
        lock_dir=str(tmp_path / "locks"),
        poll_timeout=0.0,
    )


# ---------------------------------------------------------------------------
# Collaborator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_client(policy_dir: Path) -> FakeDb2Client:
    return FakeDb2Client(policy_dir=policy_dir)


@pytest.fixture
def probe() -> FakeProcessProbe:
    return FakeProcessProbe()


@pytest.fixture
def store(tmp_path: Path, target: Target) -> SnapshotStore:
    return SnapshotStore(tmp_path / "snapshots", target)


@pytest.fixture
def handoff(policy_dir: Path) -> PolicyFileHandoff:
    return PolicyFileHandoff(policy_dir, timeout=0.0)


@pytest.fixture
def retriever(
    fake_client: FakeDb2Client,
    store: SnapshotStore,
    handoff: PolicyFileHandoff,
) -> SnapshotRetriever:
    return SnapshotRetriever(fake_client, store, handoff)
