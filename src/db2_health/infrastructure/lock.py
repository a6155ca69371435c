"""Advisory execution lock keyed by the invocation signature.

Two runs with identical parameters must never overlap: they would diff and
commit against the same histories.  Runs with different parameters get
different signatures and therefore independent locks.

The lock is a file ``<lock_dir>/<program>_<digest>.lock`` holding the
owner's pid, where ``<digest>`` is the SHA-256 of the signature so the
name stays short whatever the parameters.  The pid is written to a private
temporary file which is then hard-linked into place, so the lock never
becomes visible without its owner.  When the file already exists, a
:class:`ProcessProbe` decides whether its owner is still alive; a lock
left behind by a dead owner is removed and taken over.
"""

from __future__ import annotations

import hashlib
import logging
import os
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Mapping

import psutil

from db2_health.domain.exceptions import LockContentionError

logger = logging.getLogger(__name__)

_SIGNATURE_HAZARDS = re.compile(r"[\s/\\:*|]")


def compute_signature(parameters: Mapping[str, Any]) -> str:
    """Deterministic, file-name safe signature of all invocation parameters.

    Parameters are concatenated as sorted ``name=value`` pairs; whitespace
    and the characters ``/ \\ : * |`` are removed.
    """
    joined = "".join(f"{name}={parameters[name]}" for name in sorted(parameters))
    return _SIGNATURE_HAZARDS.sub("", joined)


# ===================================================================== #
#  Liveness probes                                                       #
# ===================================================================== #

class ProcessProbe(ABC):
    """Answers whether a recorded lock owner is still running."""

    @abstractmethod
    def is_alive(self, pid: int, program_name: str) -> bool:
        """True when *pid* exists and is running *program_name*."""


class PsutilProcessProbe(ProcessProbe):
    """Process-table lookup through ``psutil``.

    A pid only counts as the owner when the process name or one of its
    command-line arguments mentions the program name, so a recycled pid
    running something else does not keep a lock alive.
    """

    def is_alive(self, pid: int, program_name: str) -> bool:
        if pid <= 0 or not psutil.pid_exists(pid):
            return False
        try:
            process = psutil.Process(pid)
            if program_name in process.name():
                return True
            return any(program_name in Path(arg).name for arg in process.cmdline())
        except psutil.NoSuchProcess:
            return False
        except psutil.AccessDenied:
            # Cannot inspect it; treat as alive rather than steal a live lock.
            return True


# ===================================================================== #
#  Lock                                                                  #
# ===================================================================== #

class LockHandle:
    """Ownership of one lock file; release it exactly once."""

    def __init__(self, path: Path, signature: str, pid: int) -> None:
        self.path = path
        self.signature = signature
        self.pid = pid
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Delete the lock file if it still records this owner.

        Failures are logged and swallowed: a leftover lock is reclaimed by
        the next run once this process is gone.
        """
        if self._released:
            return
        self._released = True
        if not self.path.exists():
            logger.warning("Lock %s disappeared before release", self.path)
            return
        recorded = _read_pid(self.path)
        if recorded != self.pid:
            logger.warning(
                "Lock %s now belongs to pid %s, not removing it", self.path, recorded
            )
            return
        try:
            self.path.unlink()
            logger.debug("Released lock %s", self.path)
        except OSError as exc:
            logger.warning("Cannot remove lock %s: %s", self.path, exc)

    def __enter__(self) -> LockHandle:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.release()


class ExecutionLock:
    """Creates :class:`LockHandle` objects for invocation signatures.

    Parameters
    ----------
    lock_dir:
        Directory for lock files.
    program_name:
        Name of the check; part of the file name and of the liveness test.
    probe:
        Liveness probe.  Defaults to :class:`PsutilProcessProbe`.
    pid:
        Identity recorded as owner.  Defaults to the current process.
    """

    def __init__(
        self,
        lock_dir: Path,
        program_name: str,
        probe: ProcessProbe | None = None,
        pid: int | None = None,
    ) -> None:
        self._lock_dir = Path(lock_dir)
        self._program_name = program_name
        self._probe = probe or PsutilProcessProbe()
        self._pid = pid if pid is not None else os.getpid()

    def path_for(self, signature: str) -> Path:
        digest = hashlib.sha256(signature.encode("utf-8")).hexdigest()
        return self._lock_dir / f"{self._program_name}_{digest}.lock"

    def acquire(self, signature: str) -> LockHandle:
        """Take the lock for *signature*.

        Raises
        ------
        LockContentionError
            A live process already owns the lock.
        """
        path = self.path_for(signature)
        self._lock_dir.mkdir(parents=True, exist_ok=True)

        if self._try_create(path):
            logger.debug("Acquired lock %s for signature %s", path, signature)
            return LockHandle(path, signature, self._pid)

        owner = _read_pid(path)
        if owner is not None and self._probe.is_alive(owner, self._program_name):
            logger.info("Lock %s is held by running pid %d", path, owner)
            raise LockContentionError(signature=signature, owner_pid=owner)

        logger.warning("Removing stale lock %s (owner pid %s is gone)", path, owner)
        try:
            path.unlink()
        except FileNotFoundError:
            pass

        if not self._try_create(path):
            # Somebody else reclaimed it between our unlink and create.
            raise LockContentionError(signature=signature, owner_pid=_read_pid(path))
        logger.debug("Reclaimed lock %s", path)
        return LockHandle(path, signature, self._pid)

    def _try_create(self, path: Path) -> bool:
        """Publish a complete record at *path*; ``False`` if one already exists."""
        staging = path.with_name(f".{path.name}.{self._pid}.tmp")
        fd = os.open(staging, os.O_CREAT | os.O_TRUNC | os.O_WRONLY, 0o644)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(f"{self._pid}\n")
            os.link(staging, path)
        except FileExistsError:
            return False
        finally:
            staging.unlink(missing_ok=True)
        return True


def _read_pid(path: Path) -> int | None:
    """Pid recorded in a lock file; ``None`` when missing, unreadable or garbled."""
    try:
        content = path.read_text(encoding="utf-8").strip()
    except OSError:
        return None
    try:
        return int(content.split()[0])
    except (IndexError, ValueError):
        return None
