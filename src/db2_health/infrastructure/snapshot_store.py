"""Append-only snapshot store for the configuration drift detector.

Each target owns one directory under the store root, named after
:attr:`Target.key`.  Inside it every configuration domain has a history
file holding one JSON object per committed revision::

    {"number": 3, "timestamp": 1760000000.0, "text": "..."}

Revisions are only ever appended; nothing rewrites or truncates a
history.  Comparisons are done against the last line.
"""

from __future__ import annotations

import difflib
import json
import logging
import os
import time
from pathlib import Path

from db2_health.domain.exceptions import StoreWriteError
from db2_health.domain.values import ConfigurationDomain, Revision, Target

logger = logging.getLogger(__name__)


class RevisionHistory:
    """Ordered, append-only list of revisions for one domain.

    Parameters
    ----------
    path:
        The history file.  It need not exist yet.
    name:
        Label used in diff headers and error messages.
    """

    def __init__(self, path: Path, name: str = "") -> None:
        self._path = Path(path)
        self._name = name or self._path.stem

    @property
    def path(self) -> Path:
        return self._path

    def revisions(self) -> list[Revision]:
        """Return every committed revision, oldest first.

        A record torn by an interrupted :meth:`append` cannot be decoded;
        it is skipped with a warning and the revisions around it are kept.
        An unreadable file cannot be appended to either, so I/O failures
        raise :class:`StoreWriteError`.
        """
        if not self._path.exists():
            return []
        try:
            with open(self._path, "r", encoding="utf-8") as fh:
                lines = fh.readlines()
        except (OSError, ValueError) as exc:
            raise StoreWriteError(
                f"Cannot read the {self._name} history: {exc}",
                domain=self._name,
                path=str(self._path),
            ) from exc

        revisions: list[Revision] = []
        for line_number, line in enumerate(lines, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
                revisions.append(
                    Revision(
                        number=int(data["number"]),
                        text=str(data["text"]),
                        timestamp=float(data.get("timestamp", 0.0)),
                    )
                )
            except (ValueError, KeyError, TypeError) as exc:
                logger.warning(
                    "Skipping torn record at %s:%d: %s", self._path, line_number, exc
                )
        return revisions

    def __len__(self) -> int:
        return len(self.revisions())

    def latest(self) -> Revision | None:
        """The last committed revision, or ``None`` for an empty history."""
        revisions = self.revisions()
        return revisions[-1] if revisions else None

    def append(self, text: str) -> Revision:
        """Commit *text* as the new latest revision.

        Raises
        ------
        StoreWriteError
            The history file could not be written.
        """
        try:
            latest = self.latest()
            revision = Revision(
                number=(latest.number + 1) if latest else 1,
                text=text,
                timestamp=time.time(),
            )
            record = {
                "number": revision.number,
                "timestamp": revision.timestamp,
                "text": revision.text,
            }
            prefix = "" if self._ends_with_newline() else "\n"
            with open(self._path, "a", encoding="utf-8") as fh:
                fh.write(prefix + json.dumps(record) + "\n")
                fh.flush()
                os.fsync(fh.fileno())
        except (OSError, ValueError) as exc:
            raise StoreWriteError(
                f"Cannot write the {self._name} snapshot: {exc}",
                domain=self._name,
                path=str(self._path),
            ) from exc
        logger.debug("Committed %s revision %d", self._name, revision.number)
        return revision

    def _ends_with_newline(self) -> bool:
        """False when the file ends in a partial record."""
        try:
            with open(self._path, "rb") as fh:
                fh.seek(0, os.SEEK_END)
                if fh.tell() == 0:
                    return True
                fh.seek(-1, os.SEEK_END)
                return fh.read(1) == b"\n"
        except FileNotFoundError:
            return True

    def diff(self, text: str) -> list[str]:
        """Unified diff from the latest revision to *text*.

        Empty when *text* is identical to the latest revision.  Differences
        invisible to a line diff (trailing newline only) still yield a
        non-empty result.
        """
        latest = self.latest()
        previous = latest.text if latest else ""
        if latest is not None and previous == text:
            return []
        from_label = f"{self._name}@{latest.number}" if latest else f"{self._name}@empty"
        lines = list(
            difflib.unified_diff(
                previous.splitlines(),
                text.splitlines(),
                fromfile=from_label,
                tofile=f"{self._name}@current",
                lineterm="",
            )
        )
        if not lines:
            lines = [f"{self._name}: whitespace-only change"]
        return lines


class SnapshotStore:
    """Revision histories of every domain for one target.

    Parameters
    ----------
    root:
        Store root directory shared by all targets.
    target:
        The monitored (instance, database) pair.
    """

    def __init__(self, root: Path, target: Target) -> None:
        self._root = Path(root)
        self._target = target
        self._path = self._root / target.key

    @property
    def path(self) -> Path:
        """Directory holding this target's histories and policy files."""
        return self._path

    @property
    def target(self) -> Target:
        return self._target

    def bootstrap(self) -> bool:
        """Create the target directory if needed.

        Returns ``True`` when the directory did not exist, which marks the
        first execution against this target.
        """
        if self._path.is_dir():
            return False
        try:
            self._path.mkdir(parents=True, exist_ok=False)
        except FileExistsError:
            return False
        except OSError as exc:
            raise StoreWriteError(
                f"Cannot create snapshot directory {self._path}: {exc}",
                path=str(self._path),
            ) from exc
        logger.info("Created snapshot store %s (first execution)", self._path)
        return True

    def history(self, domain: ConfigurationDomain) -> RevisionHistory:
        return RevisionHistory(self._path / domain.history_file, name=domain.domain_id)

    def latest(self, domain: ConfigurationDomain) -> Revision | None:
        return self.history(domain).latest()

    def commit(self, domain: ConfigurationDomain, text: str) -> Revision:
        return self.history(domain).append(text)

    def diff(self, domain: ConfigurationDomain, text: str) -> list[str]:
        """Compare *text* with the latest revision; call before :meth:`commit`."""
        return self.history(domain).diff(text)
