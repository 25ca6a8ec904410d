"""Local persistence for deployed contracts."""

from ricknad.storage.contracts import (
    DeployedContract,
    DeployedContractStore,
    DeploymentStatus,
    VerificationStatus,
    VerificationStore,
)
from ricknad.storage.local_store import LocalStorage

__all__ = [
    "DeployedContract",
    "DeployedContractStore",
    "DeploymentStatus",
    "LocalStorage",
    "VerificationStatus",
    "VerificationStore",
]
