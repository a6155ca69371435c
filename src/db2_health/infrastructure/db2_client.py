"""DB2 command-line client used by every check.

Commands run through a POSIX shell that first sources the instance
profile, the same way an operator would from a terminal.  Each call is a
separate shell, so statements that need a database connection open it in
the same script; the connection banner is sent to stderr to keep the
captured text clean.

Failures are classified by the SQL message identifiers found in the
output: connection-class messages raise :class:`ConnectivityError`,
anything else raises :class:`RetrievalError`.
"""

from __future__ import annotations

import logging
import re
import shlex
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from db2_health.domain.exceptions import ConnectivityError, RetrievalError

logger = logging.getLogger(__name__)

# Messages meaning the instance or database cannot be reached at all.
CONNECTIVITY_MESSAGES = frozenset({
    "SQL1013N",  # database alias not found
    "SQL1024N",  # no database connection exists
    "SQL1031N",  # database directory cannot be found
    "SQL1032N",  # no start database manager command was issued
    "SQL1224N",  # database agent could not be started / was terminated
    "SQL30081N",  # communication error
    "SQL30082N",  # security processing failed
})

# CLP return codes: 0 success, 1 no rows, 2 warning, 4 DB2 error, 8 CLP error
CLP_OK = (0,)
CLP_OK_OR_NO_ROWS = (0, 1)
CLP_OK_OR_WARNING = (0, 1, 2)

_MESSAGE_ID = re.compile(r"\b(SQL\d{4,5}[NWC])\b")
_DB_ALIAS = re.compile(r"Database alias\s*=\s*(\S+)")


@dataclass(frozen=True)
class CommandResult:
    """Exit status and captured streams of one shell script."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def output(self) -> str:
        return f"{self.stdout}\n{self.stderr}"

    @property
    def message_ids(self) -> tuple[str, ...]:
        return tuple(_MESSAGE_ID.findall(self.output))


# ===================================================================== #
#  Runners                                                               #
# ===================================================================== #

class CommandRunner(ABC):
    """Executes a shell script in the instance environment."""

    @abstractmethod
    def run(self, script: str) -> CommandResult:
        """Run *script* and return its result.  Never raises on non-zero exit."""


class ShellCommandRunner(CommandRunner):
    """Runs scripts with ``sh -c`` after sourcing the instance profile.

    Parameters
    ----------
    profile:
        Path to ``<instance>/sqllib/db2profile``.
    shell:
        Shell executable.  Defaults to ``/bin/sh``.
    """

    def __init__(self, profile: Path, shell: str = "/bin/sh") -> None:
        self._profile = Path(profile)
        self._shell = shell

    def run(self, script: str) -> CommandResult:
        full_script = f". {shlex.quote(str(self._profile))} && {script}"
        logger.debug("Running: %s", script)
        try:
            completed = subprocess.run(
                [self._shell, "-c", full_script],
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise ConnectivityError(
                f"Cannot execute DB2 commands: {exc}",
                details={"script": script},
            ) from exc
        logger.debug("Exit status %d for: %s", completed.returncode, script)
        return CommandResult(
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )


# ===================================================================== #
#  Client                                                                #
# ===================================================================== #

class Db2Client:
    """Named retrieval operations against one instance and database.

    Parameters
    ----------
    runner:
        The :class:`CommandRunner` that executes CLP scripts.
    database:
        Database name used by connection-bound operations.
    """

    def __init__(self, runner: CommandRunner, database: str = "") -> None:
        self._runner = runner
        self._database = database

    @property
    def database(self) -> str:
        return self._database

    # -- retrieval operations ---------------------------------------------

    def run_command(self, command: str, domain_id: str = "") -> str:
        """Run a CLP command that needs no connection and return its text."""
        result = self._runner.run(command)
        return self._checked(result, command, domain_id, CLP_OK_OR_WARNING)

    def query(self, sql: str, domain_id: str = "") -> str:
        """Connect to the database and return the rows of *sql*, headers stripped."""
        script = f"{self._connect_script()} && db2 -x {shlex.quote(sql)}"
        result = self._runner.run(script)
        return self._checked(result, sql, domain_id, CLP_OK_OR_NO_ROWS)

    def export_policy(self, policy_name: str, file_name: str, domain_id: str = "") -> None:
        """Ask DB2 to write an automatic-maintenance policy into ``sqllib/tmp``.

        DB2 produces the file itself; callers wait for it with a
        :class:`~db2_health.infrastructure.policy_handoff.PolicyFileHandoff`.
        """
        call = f"CALL SYSPROC.AUTOMAINT_GET_POLICYFILE('{policy_name}', '{file_name}')"
        script = f"{self._connect_script()} && db2 {shlex.quote(call)}"
        result = self._runner.run(script)
        self._checked(result, call, domain_id, CLP_OK_OR_WARNING)

    def cataloged_databases(self) -> list[str]:
        """Return the upper-cased aliases listed in the system database directory."""
        command = "db2 list db directory"
        result = self._runner.run(command)
        text = self._checked(result, command, "", CLP_OK_OR_WARNING)
        return [alias.upper() for alias in _DB_ALIAS.findall(text)]

    def instance_status(self) -> str:
        """Return the raw ``db2gcf -s`` report for the instance."""
        command = "db2gcf -s"
        result = self._runner.run(command)
        return self._checked(result, command, "", CLP_OK_OR_NO_ROWS)

    # -- helpers ------------------------------------------------------------

    def _connect_script(self) -> str:
        if not self._database:
            raise RetrievalError("No database given for a connection-bound operation")
        return f"db2 connect to {shlex.quote(self._database)} 1>&2"

    @staticmethod
    def _checked(
        result: CommandResult,
        what: str,
        domain_id: str,
        ok_codes: tuple[int, ...],
    ) -> str:
        if result.returncode in ok_codes:
            return result.stdout

        messages = result.message_ids
        for message in messages:
            if message in CONNECTIVITY_MESSAGES:
                logger.error("Connectivity failure (%s) running: %s", message, what)
                raise ConnectivityError(
                    f"Cannot connect to the database ({message}).",
                    sqlcode=message,
                    details={"command": what, "returncode": result.returncode},
                )

        first = messages[0] if messages else f"exit status {result.returncode}"
        logger.warning("Retrieval failed (%s) running: %s", first, what)
        raise RetrievalError(
            f"Command failed ({first}): {what}",
            domain=domain_id,
            details={"returncode": result.returncode, "output": result.output.strip()},
        )
