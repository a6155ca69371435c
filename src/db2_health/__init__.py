"""DB2 health checks.

Nagios-style plugins for a DB2 instance: configuration drift detection
with an append-only snapshot history, instance liveness, and diagnostic
log volume.
"""

__version__ = "0.1.0"

from db2_health.domain import AlertResult, RunResult, Severity, Target
from db2_health.services import ConfigurationCheck, DiagLogCheck, InstanceUpCheck

__all__ = [
    "AlertResult",
    "ConfigurationCheck",
    "DiagLogCheck",
    "InstanceUpCheck",
    "RunResult",
    "Severity",
    "Target",
]
