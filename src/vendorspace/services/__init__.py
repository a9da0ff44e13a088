"""
Service layer orchestrators for vendor-space.
"""
from .orchestrator import (
    OrchestratorCallbacks,
    RepositoryReport,
    VendorSpaceOrchestrator,
    VendorSpaceReport,
)

__all__ = [
    "OrchestratorCallbacks",
    "RepositoryReport",
    "VendorSpaceOrchestrator",
    "VendorSpaceReport",
]
