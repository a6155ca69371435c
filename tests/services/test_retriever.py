"""Tests for SnapshotRetriever and text normalisation."""

from __future__ import annotations

import pytest

from db2_health.domain.catalog import AUTO_RUNSTATS, DB_CFG, REGISTRY, TABLES
from db2_health.domain.exceptions import RetrievalError, StaleSnapshotError
from db2_health.infrastructure.snapshot_store import SnapshotStore
from db2_health.services.retriever import SnapshotRetriever, normalize
from db2_health.testing import FakeDb2Client


class TestNormalize:
    def test_strips_trailing_whitespace_and_blank_tail(self) -> None:
        assert normalize("a  \nb\t\n\n\n") == "a\nb\n"

    def test_empty_text(self) -> None:
        assert normalize("") == ""
        assert normalize("\n\n") == ""

    def test_drops_ignored_prefixes(self) -> None:
        text = (
            " Log file size (4KB) (LOGFILSIZ) = 1024\n"
            " First active log file = S0000042.LOG\n"
            " Database is consistent = NO\n"
        )
        result = normalize(text, ("First active log file", "Database is consistent"))
        assert result == " Log file size (4KB) (LOGFILSIZ) = 1024\n"


class TestSnapshotRetriever:
    def test_command_domain(self, retriever: SnapshotRetriever) -> None:
        assert retriever.retrieve(REGISTRY) == "[i] DB2COMM=TCPIP\n[i] DB2AUTOSTART=YES\n"

    def test_db_cfg_ignores_volatile_lines(
        self, retriever: SnapshotRetriever, fake_client: FakeDb2Client
    ) -> None:
        fake_client.change(
            "db_cfg",
            " LOGFILSIZ = 1024\n First active log file = S0000007.LOG\n",
        )
        assert retriever.retrieve(DB_CFG) == " LOGFILSIZ = 1024\n"

    def test_query_domain(self, retriever: SnapshotRetriever, fake_client: FakeDb2Client) -> None:
        assert retriever.retrieve(TABLES) == "DB2INST1 EMPLOYEE T USERSPACE1\n"
        assert fake_client.calls == ["tables"]

    def test_policy_domain_is_copied_into_store(
        self, retriever: SnapshotRetriever, store: SnapshotStore
    ) -> None:
        store.bootstrap()
        text = retriever.retrieve(AUTO_RUNSTATS)
        assert text.startswith("<DB2AutoRunstatsPolicy>")
        assert (store.path / AUTO_RUNSTATS.policy_file).exists()

    def test_stale_policy(
        self,
        retriever: SnapshotRetriever,
        fake_client: FakeDb2Client,
        store: SnapshotStore,
    ) -> None:
        store.bootstrap()
        fake_client.stale_policies.add("auto_runstats")
        with pytest.raises(StaleSnapshotError, match="too old"):
            retriever.retrieve(AUTO_RUNSTATS)

    def test_missing_policy(
        self,
        retriever: SnapshotRetriever,
        fake_client: FakeDb2Client,
        store: SnapshotStore,
    ) -> None:
        store.bootstrap()
        fake_client.missing_policies.add("auto_runstats")
        with pytest.raises(StaleSnapshotError, match="not produced"):
            retriever.retrieve(AUTO_RUNSTATS)

    def test_failure_propagates(
        self, retriever: SnapshotRetriever, fake_client: FakeDb2Client
    ) -> None:
        fake_client.fail("registry", RetrievalError("boom", "registry"))
        with pytest.raises(RetrievalError, match="boom"):
            retriever.retrieve(REGISTRY)
