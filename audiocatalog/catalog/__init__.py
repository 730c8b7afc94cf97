"""Local recording catalog: probing, reconciliation and scanning."""

from .probe import (
    AbstractMediaProbe,
    ProbeHandle,
    MutagenMediaProbe,
    opened_probe,
    probe_duration_millis,
)
from .reconciler import ReconciliationEngine
from .scanner import CatalogScanner

__all__ = [
    "AbstractMediaProbe",
    "ProbeHandle",
    "MutagenMediaProbe",
    "opened_probe",
    "probe_duration_millis",
    "ReconciliationEngine",
    "CatalogScanner",
]
