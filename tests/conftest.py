"""Shared pytest fixtures for ricknad tests."""

from pathlib import Path

import pytest

from ricknad.config import settings
from ricknad.storage import DeployedContract, DeployedContractStore, LocalStorage, VerificationStore

SEED = 1234
TIMESTAMP = "2024-01-01T00:00:00+00:00"

SAMPLE_ADDRESS = "0x1234567890abcdef1234567890abcdef12345678"


@pytest.fixture
def seed() -> int:
    return SEED


@pytest.fixture
def timestamp() -> str:
    return TIMESTAMP


@pytest.fixture
def storage_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point settings.storage_dir at a temporary directory."""
    path = tmp_path / ".ricknad"
    monkeypatch.setattr(settings, "storage_dir", str(path))
    return path


@pytest.fixture
def storage(storage_dir: Path) -> LocalStorage:
    return LocalStorage(storage_dir)


@pytest.fixture
def contract_store(storage: LocalStorage) -> DeployedContractStore:
    return DeployedContractStore(storage)


@pytest.fixture
def verification_store(storage: LocalStorage) -> VerificationStore:
    return VerificationStore(storage)


@pytest.fixture
def sample_contract() -> DeployedContract:
    return DeployedContract(
        name="MonadCoin",
        address=SAMPLE_ADDRESS,
        abi=[{"type": "function", "name": "mint", "inputs": [], "outputs": [], "stateMutability": "nonpayable"}],
        bytecode="0x6080",
        deployment_tx="0xabc",
        timestamp=1_700_000_000_000,
        type="erc20",
        source_code="pragma solidity ^0.8.20; contract MonadCoin {}",
    )
