"""Snapshot retriever: the current text of one configuration domain."""

from __future__ import annotations

import logging

from db2_health.domain.enums import RetrievalKind
from db2_health.domain.exceptions import RetrievalError
from db2_health.domain.values import ConfigurationDomain
from db2_health.infrastructure.db2_client import Db2Client
from db2_health.infrastructure.policy_handoff import PolicyFileHandoff
from db2_health.infrastructure.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


class SnapshotRetriever:
    """Runs the retrieval operation of each domain for one target.

    Parameters
    ----------
    client:
        DB2 client bound to the target's database.
    store:
        Target store; policy files are copied into its directory.
    handoff:
        Poller for the asynchronously produced policy files.
    """

    def __init__(
        self,
        client: Db2Client,
        store: SnapshotStore,
        handoff: PolicyFileHandoff,
    ) -> None:
        self._client = client
        self._store = store
        self._handoff = handoff

    def retrieve(self, domain: ConfigurationDomain) -> str:
        """Return the current text of *domain*.

        Raises
        ------
        RetrievalError
            The domain could not be read (``StaleSnapshotError`` for an old
            policy file).
        ConnectivityError
            The database could not be reached.
        """
        logger.debug("Retrieving %s", domain.domain_id)
        if domain.kind is RetrievalKind.COMMAND:
            command = domain.source.format(database=self._client.database)
            text = self._client.run_command(command, domain.domain_id)
        elif domain.kind is RetrievalKind.QUERY:
            text = self._client.query(domain.source, domain.domain_id)
        elif domain.kind is RetrievalKind.POLICY:
            text = self._retrieve_policy(domain)
        else:
            raise RetrievalError(f"Unsupported retrieval kind {domain.kind}", domain.domain_id)
        return normalize(text, domain.ignore_prefixes)

    def _retrieve_policy(self, domain: ConfigurationDomain) -> str:
        self._client.export_policy(domain.source, domain.policy_file, domain.domain_id)
        copied = self._handoff.collect(domain.policy_file, self._store.path)
        try:
            return copied.read_text(encoding="utf-8")
        except OSError as exc:
            raise RetrievalError(
                f"Cannot read {copied}: {exc}", domain=domain.domain_id
            ) from exc


def normalize(text: str, ignore_prefixes: tuple[str, ...] = ()) -> str:
    """Strip trailing blanks and drop volatile lines before comparison."""
    lines = []
    for line in text.splitlines():
        stripped = line.rstrip()
        if ignore_prefixes and stripped.lstrip().startswith(ignore_prefixes):
            continue
        lines.append(stripped)
    while lines and not lines[-1]:
        lines.pop()
    return "\n".join(lines) + "\n" if lines else ""
