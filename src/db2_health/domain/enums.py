"""Domain enumerations for the DB2 health checks.

These enums capture the fixed vocabularies used across the domain layer:
Nagios severities, per-domain drift verdicts, and the way a configuration
domain is retrieved from the instance.
"""

from enum import Enum, IntEnum


class Severity(IntEnum):
    """Nagios plugin status; the integer value is the process exit code."""

    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3


class DriftVerdict(Enum):
    """Outcome of comparing one domain against its latest revision."""

    UNCHANGED = "unchanged"
    CHANGED = "changed"
    RETRIEVAL_FAILED = "retrieval-failed"


class RetrievalKind(Enum):
    """How the text of a configuration domain is obtained."""

    COMMAND = "command"  # plain CLP command, no connection needed
    QUERY = "query"  # catalog SELECT, needs a database connection
    POLICY = "policy"  # automaint policy exported to a shared directory


class FatalKind(Enum):
    """Failures that abort a drift run and force an unknown status."""

    CONNECTIVITY = "connectivity"
    STORE_WRITE = "store_write"
