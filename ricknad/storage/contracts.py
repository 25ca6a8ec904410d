"""Deployed-contract history and verification status, kept in LocalStorage."""

import json
import logging
import time
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ricknad.errors import StorageError
from ricknad.storage.local_store import LocalStorage

logger = logging.getLogger(__name__)

DEPLOYED_CONTRACTS_KEY = "ricknad_deployed_contracts"
VERIFIED_CONTRACTS_KEY = "ricknad_verified_contracts"


def now_ms() -> int:
    return int(time.time() * 1000)


class DeploymentStatus(str, Enum):
    """Outcome of a deployment."""
    SUCCESS = "success"
    PENDING = "pending"
    FAILED = "failed"


class VerificationStatus(str, Enum):
    """Explorer verification state."""
    UNVERIFIED = "unverified"
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


class DeployedContract(BaseModel):
    """A contract deployed from Ricknad."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    address: str
    abi: list[dict[str, Any]] = Field(default_factory=list)
    bytecode: str = ""
    deployment_tx: str | None = Field(default=None, alias="deploymentTx")
    timestamp: int = Field(default_factory=now_ms)  # milliseconds
    status: DeploymentStatus = DeploymentStatus.SUCCESS
    type: str = "custom"
    source_code: str | None = Field(default=None, alias="sourceCode")
    verification_status: VerificationStatus | None = Field(default=None, alias="verificationStatus")

    @property
    def deployed_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp / 1000)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DeployedContractStore:
    """List of deployed contracts under a single storage key.

    Every mutation reads, modifies and rewrites the whole list.
    """

    def __init__(self, storage: LocalStorage, key: str = DEPLOYED_CONTRACTS_KEY):
        self.storage = storage
        self.key = key

    def _read(self) -> list[DeployedContract]:
        raw = self.storage.get_item(self.key)
        if not raw:
            return []
        try:
            items = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Corrupt JSON under %s, treating as empty", self.key)
            return []
        if not isinstance(items, list):
            logger.warning("Expected a list under %s, treating as empty", self.key)
            return []

        contracts = []
        for item in items:
            try:
                contracts.append(DeployedContract.model_validate(item))
            except ValidationError as e:
                logger.warning("Skipping invalid contract entry: %s", e)
        return contracts

    def _write(self, contracts: list[DeployedContract]) -> None:
        self.storage.set_item(self.key, json.dumps([c.to_json() for c in contracts]))

    def get(self, address: str) -> DeployedContract | None:
        target = address.lower()
        return next((c for c in self._read() if c.address.lower() == target), None)

    def add(self, contract: DeployedContract) -> None:
        """Prepend `contract`, replacing any entry with the same address."""
        target = contract.address.lower()
        rest = [c for c in self._read() if c.address.lower() != target]
        self._write([contract] + rest)

    def remove(self, address: str) -> bool:
        """Remove a contract. Returns whether anything was removed."""
        target = address.lower()
        contracts = self._read()
        kept = [c for c in contracts if c.address.lower() != target]
        if len(kept) == len(contracts):
            return False
        self._write(kept)
        return True

    def search(self, term: str) -> list[DeployedContract]:
        """Contracts whose address, name or deployment date contains `term`."""
        term = term.strip().lower()
        if not term:
            return self._read()
        return [
            c for c in self._read()
            if term in c.address.lower()
            or term in c.name.lower()
            or term in c.deployed_at.strftime("%Y-%m-%d %H:%M")
        ]

    def export_json(self, path: str | Path) -> int:
        """Write all contracts to a JSON file. Returns count."""
        contracts = self._read()
        Path(path).write_text(json.dumps([c.to_json() for c in contracts], indent=2))
        return len(contracts)

    def import_json(self, path: str | Path) -> int:
        """Replace the list with the contents of a JSON file. Returns count."""
        try:
            items = json.loads(Path(path).read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read contracts from {path}: {e}") from e
        if not isinstance(items, list):
            raise StorageError("Invalid format: expected a JSON array of contracts")

        try:
            contracts = [DeployedContract.model_validate(item) for item in items]
        except ValidationError as e:
            raise StorageError(f"Invalid contract entry: {e}") from e

        self._write(contracts)
        return len(contracts)

    # Defined last: the name shadows the builtin in the class body.
    def list(self) -> list[DeployedContract]:
        """All contracts, newest first."""
        return self._read()


class VerificationStore:
    """Per-address verification status."""

    def __init__(self, storage: LocalStorage, key: str = VERIFIED_CONTRACTS_KEY):
        self.storage = storage
        self.key = key

    def all(self) -> dict[str, dict[str, Any]]:
        raw = self.storage.get_item(self.key)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Corrupt JSON under %s, treating as empty", self.key)
            return {}
        if not isinstance(data, dict):
            logger.warning("Expected an object under %s, treating as empty", self.key)
            return {}
        return data

    def get_status(self, address: str) -> VerificationStatus:
        entry = self.all().get(address.lower())
        if not entry:
            return VerificationStatus.UNVERIFIED
        try:
            return VerificationStatus(entry.get("status"))
        except ValueError:
            return VerificationStatus.UNVERIFIED

    def set_status(self, address: str, status: VerificationStatus) -> None:
        data = self.all()
        data[address.lower()] = {"status": VerificationStatus(status).value, "timestamp": now_ms()}
        self.storage.set_item(self.key, json.dumps(data))
