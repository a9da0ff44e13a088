"""
Repository handling: acquiring clones and vendoring their branches.
"""
from .acquisition import (
    AcquisitionOutcome,
    RepositoryState,
    acquire_repository,
    inspect_repository,
)
from .vendoring import BranchVendoringSequencer, VendorResult

__all__ = [
    "AcquisitionOutcome",
    "BranchVendoringSequencer",
    "RepositoryState",
    "VendorResult",
    "acquire_repository",
    "inspect_repository",
]
