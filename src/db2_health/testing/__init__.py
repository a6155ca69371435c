"""Public testing utilities for the DB2 health checks.

Provides fake DB2 clients, command runners and process probes for writing
self-contained tests without a DB2 installation.
"""

from db2_health.testing.fakes import (
    DEFAULT_TEXTS,
    FakeCommandRunner,
    FakeDb2Client,
    FakeProcessProbe,
    all_domain_ids,
)

__all__ = [
    "DEFAULT_TEXTS",
    "FakeCommandRunner",
    "FakeDb2Client",
    "FakeProcessProbe",
    "all_domain_ids",
]
