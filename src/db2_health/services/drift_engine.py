"""Drift engine: one diff-then-commit pass over every configuration domain.

For each domain, in fixed order:

1. **Retrieve** the current text.
2. **Diff** it against the latest committed revision.
3. **Commit** it, whether or not it differs, so the history always ends
   with the most recent observation.
4. **Record** a :class:`DomainOutcome`.

A domain whose retrieval fails is recorded as ``retrieval-failed`` and the
pass continues.  A connectivity failure or an uncommittable snapshot stops
the pass; domains already committed stay committed.
"""

from __future__ import annotations

import logging
import time
from typing import Sequence

from db2_health.domain.catalog import DOMAINS
from db2_health.domain.enums import DriftVerdict, FatalKind
from db2_health.domain.exceptions import (
    ConnectivityError,
    RetrievalError,
    StaleSnapshotError,
    StoreWriteError,
)
from db2_health.domain.values import ConfigurationDomain, DomainOutcome, RunResult
from db2_health.infrastructure.snapshot_store import SnapshotStore
from db2_health.services.retriever import SnapshotRetriever

logger = logging.getLogger(__name__)


class DriftEngine:
    """Orchestrates retrieval, diffing and committing for one run.

    Parameters
    ----------
    retriever:
        Source of current domain texts.
    store:
        The target's snapshot store.
    domains:
        Domains to process, in order.  Defaults to the full catalogue.
    """

    def __init__(
        self,
        retriever: SnapshotRetriever,
        store: SnapshotStore,
        domains: Sequence[ConfigurationDomain] = DOMAINS,
    ) -> None:
        self._retriever = retriever
        self._store = store
        self._domains = tuple(domains)

    def run(self) -> RunResult:
        """Execute the pass and return its immutable result."""
        start_time = time.time()
        first_execution = self._store.bootstrap()
        if first_execution:
            logger.info("First execution for %s, taking baseline", self._store.target.key)

        outcomes: list[DomainOutcome] = []
        for domain in self._domains:
            try:
                outcome = self._process(domain, first_execution)
            except ConnectivityError as exc:
                logger.error("Aborting run at %s: %s", domain.domain_id, exc.message)
                return self._result(
                    first_execution, outcomes, start_time,
                    fatal=exc.message, fatal_kind=FatalKind.CONNECTIVITY,
                )
            except StoreWriteError as exc:
                logger.error("Aborting run at %s: %s", domain.domain_id, exc.message)
                return self._result(
                    first_execution, outcomes, start_time,
                    fatal=exc.message, fatal_kind=FatalKind.STORE_WRITE,
                )
            outcomes.append(outcome)

        return self._result(first_execution, outcomes, start_time)

    def _process(self, domain: ConfigurationDomain, first_execution: bool) -> DomainOutcome:
        try:
            text = self._retriever.retrieve(domain)
        except StaleSnapshotError as exc:
            return DomainOutcome(
                domain=domain,
                verdict=DriftVerdict.RETRIEVAL_FAILED,
                notes=(f"{domain.label}: {exc.message}",),
            )
        except RetrievalError as exc:
            logger.warning("Could not retrieve %s: %s", domain.domain_id, exc.message)
            return DomainOutcome(
                domain=domain,
                verdict=DriftVerdict.RETRIEVAL_FAILED,
                notes=(f"Could not retrieve {domain.label}.",),
            )

        if first_execution:
            self._store.commit(domain, text)
            return DomainOutcome(domain=domain, verdict=DriftVerdict.UNCHANGED)

        if self._store.latest(domain) is None:
            # Baseline missed by an earlier run (retrieval failed back then).
            self._store.commit(domain, text)
            return DomainOutcome(
                domain=domain,
                verdict=DriftVerdict.UNCHANGED,
                notes=(f"{domain.label} snapshot taken for the first time.",),
            )

        diff = self._store.diff(domain, text)
        self._store.commit(domain, text)
        if diff:
            logger.info("%s changed (%d diff lines)", domain.domain_id, len(diff))
            return DomainOutcome(
                domain=domain, verdict=DriftVerdict.CHANGED, diff=tuple(diff)
            )
        logger.debug("%s unchanged", domain.domain_id)
        return DomainOutcome(domain=domain, verdict=DriftVerdict.UNCHANGED)

    @staticmethod
    def _result(
        first_execution: bool,
        outcomes: list[DomainOutcome],
        start_time: float,
        fatal: str | None = None,
        fatal_kind: FatalKind | None = None,
    ) -> RunResult:
        return RunResult(
            first_execution=first_execution,
            outcomes=tuple(outcomes),
            fatal=fatal,
            fatal_kind=fatal_kind,
            elapsed_seconds=time.time() - start_time,
        )
