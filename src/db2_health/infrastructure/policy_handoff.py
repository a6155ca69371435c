"""Handoff of automatic-maintenance policy files produced by DB2.

``SYSPROC.AUTOMAINT_GET_POLICYFILE`` writes its XML into the instance's
shared ``sqllib/tmp`` directory some time after the call returns.  The
consumer polls that directory until the file's modification time falls
inside a freshness window, then copies it into the target's store.  A
file that never becomes fresh is reported as stale rather than failing
the whole run.
"""

from __future__ import annotations

import logging
import shutil
import time
from pathlib import Path
from typing import Callable

from db2_health.domain.exceptions import RetrievalError, StaleSnapshotError
from db2_health.infrastructure.config import DEFAULT_FRESHNESS_WINDOW

logger = logging.getLogger(__name__)


class PolicyFileHandoff:
    """Poll-with-timeout contract over a shared producer directory.

    Parameters
    ----------
    source_dir:
        Directory the producer writes into (``<instance>/sqllib/tmp``).
    freshness_window:
        Maximum accepted age of a file, in seconds.
    timeout:
        How long :meth:`await_fresh` keeps polling.  ``0`` probes once.
    interval:
        Delay between probes.
    clock, sleep:
        Time source and sleeper, injectable for tests.
    """

    def __init__(
        self,
        source_dir: Path,
        freshness_window: float = DEFAULT_FRESHNESS_WINDOW,
        timeout: float = 10.0,
        interval: float = 1.0,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._source_dir = Path(source_dir)
        self._freshness_window = freshness_window
        self._timeout = timeout
        self._interval = interval
        self._clock = clock
        self._sleep = sleep

    @property
    def source_dir(self) -> Path:
        return self._source_dir

    def is_fresh(self, path: Path) -> bool:
        """True when *path* exists and was modified within the window."""
        try:
            mtime = path.stat().st_mtime
        except FileNotFoundError:
            return False
        return self._clock() - mtime <= self._freshness_window

    def await_fresh(self, file_name: str) -> Path:
        """Wait for a fresh *file_name* in the source directory.

        Raises
        ------
        StaleSnapshotError
            The file is missing or older than the window when the timeout
            expires.
        """
        path = self._source_dir / file_name
        deadline = self._clock() + self._timeout
        while True:
            if self.is_fresh(path):
                logger.debug("Policy file %s is fresh", path)
                return path
            if self._clock() >= deadline:
                break
            self._sleep(self._interval)

        if path.exists():
            logger.warning("Policy file %s is older than %.0fs", path, self._freshness_window)
            raise StaleSnapshotError(f"{file_name} is too old.", details={"path": str(path)})
        logger.warning("Policy file %s was not produced", path)
        raise StaleSnapshotError(f"{file_name} was not produced.", details={"path": str(path)})

    def collect(self, file_name: str, destination_dir: Path) -> Path:
        """Wait for a fresh *file_name* and copy it into *destination_dir*."""
        source = self.await_fresh(file_name)
        destination = Path(destination_dir) / file_name
        try:
            shutil.copy2(source, destination)
        except OSError as exc:
            raise RetrievalError(
                f"Cannot copy {file_name}: {exc}",
                details={"source": str(source), "destination": str(destination)},
            ) from exc
        return destination
