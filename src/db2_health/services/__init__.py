"""Services layer: retrieval, drift detection, alerting and the checks."""

from db2_health.services.alerting import AlertAggregator
from db2_health.services.checks import (
    BaseCheck,
    ConfigurationCheck,
    DiagLogCheck,
    InstanceUpCheck,
)
from db2_health.services.drift_engine import DriftEngine
from db2_health.services.retriever import SnapshotRetriever, normalize

__all__ = [
    "AlertAggregator",
    "BaseCheck",
    "ConfigurationCheck",
    "DiagLogCheck",
    "DriftEngine",
    "InstanceUpCheck",
    "SnapshotRetriever",
    "normalize",
]
