"""Orchestrator package for oci-deploy."""

from .orchestrator import DeployReport, Orchestrator
from .state import UnitState, UnitStatus

__all__ = [
    "Orchestrator",
    "DeployReport",
    "UnitState",
    "UnitStatus",
]
