"""Unit tests for local persistence."""

import json
from pathlib import Path

import pytest

from ricknad.errors import StorageError
from ricknad.storage import (
    DeployedContract,
    DeployedContractStore,
    LocalStorage,
    VerificationStatus,
    VerificationStore,
)
from ricknad.storage.contracts import DEPLOYED_CONTRACTS_KEY, VERIFIED_CONTRACTS_KEY

OTHER_ADDRESS = "0xabcdefabcdefabcdefabcdefabcdefabcdefabcd"


class TestLocalStorage:
    """Test key/value semantics."""

    def test_creates_database(self, storage_dir: Path):
        LocalStorage(storage_dir)
        assert (storage_dir / "storage.db").exists()

    def test_missing_key(self, storage: LocalStorage):
        assert storage.get_item("nope") is None

    def test_set_get_overwrite(self, storage: LocalStorage):
        storage.set_item("k", "one")
        storage.set_item("k", "two")
        assert storage.get_item("k") == "two"

    def test_values_are_strings(self, storage: LocalStorage):
        storage.set_item("n", 5)
        assert storage.get_item("n") == "5"

    def test_remove_and_clear(self, storage: LocalStorage):
        storage.set_item("a", "1")
        storage.set_item("b", "2")
        storage.remove_item("a")
        assert storage.keys() == ["b"]
        storage.clear()
        assert storage.keys() == []

    def test_persists_across_instances(self, storage_dir: Path):
        LocalStorage(storage_dir).set_item("k", "v")
        assert LocalStorage(storage_dir).get_item("k") == "v"

    def test_default_dir_from_settings(self, storage_dir: Path):
        assert LocalStorage().storage_dir == storage_dir


class TestDeployedContract:
    def test_camel_case_aliases(self, sample_contract: DeployedContract):
        data = sample_contract.to_json()
        assert data["deploymentTx"] == "0xabc"
        assert "sourceCode" in data
        assert "verificationStatus" not in data
        assert data["status"] == "success"

    def test_round_trip_from_aliases(self, sample_contract: DeployedContract):
        restored = DeployedContract.model_validate(sample_contract.to_json())
        assert restored == sample_contract

    def test_populate_by_name(self):
        contract = DeployedContract(name="A", address=OTHER_ADDRESS, deployment_tx="0x1")
        assert contract.deployment_tx == "0x1"


class TestDeployedContractStore:
    """Test the deployed-contract list."""

    def test_empty(self, contract_store: DeployedContractStore):
        assert contract_store.list() == []

    def test_add_prepends(self, contract_store: DeployedContractStore, sample_contract: DeployedContract):
        contract_store.add(sample_contract)
        newer = DeployedContract(name="Vault", address=OTHER_ADDRESS, type="erc4626")
        contract_store.add(newer)
        assert [c.name for c in contract_store.list()] == ["Vault", "MonadCoin"]

    def test_add_replaces_same_address(self, contract_store: DeployedContractStore, sample_contract: DeployedContract):
        contract_store.add(sample_contract)
        contract_store.add(sample_contract.model_copy(update={"name": "Renamed", "address": sample_contract.address.upper()}))
        assert [c.name for c in contract_store.list()] == ["Renamed"]

    def test_get(self, contract_store: DeployedContractStore, sample_contract: DeployedContract):
        contract_store.add(sample_contract)
        assert contract_store.get(sample_contract.address.upper()) == sample_contract
        assert contract_store.get(OTHER_ADDRESS) is None

    def test_remove(self, contract_store: DeployedContractStore, sample_contract: DeployedContract):
        contract_store.add(sample_contract)
        assert contract_store.remove(sample_contract.address) is True
        assert contract_store.remove(sample_contract.address) is False
        assert contract_store.list() == []

    def test_search(self, contract_store: DeployedContractStore, sample_contract: DeployedContract):
        contract_store.add(sample_contract)
        contract_store.add(DeployedContract(name="Vault", address=OTHER_ADDRESS))
        assert [c.name for c in contract_store.search("monad")] == ["MonadCoin"]
        assert [c.name for c in contract_store.search("0xabcdef")] == ["Vault"]
        assert len(contract_store.search("  ")) == 2

    def test_search_by_date(self, contract_store: DeployedContractStore, sample_contract: DeployedContract):
        contract_store.add(sample_contract)
        date = sample_contract.deployed_at.strftime("%Y-%m-%d")
        assert contract_store.search(date) == [sample_contract]

    def test_stored_as_json_array(self, storage: LocalStorage, contract_store: DeployedContractStore, sample_contract: DeployedContract):
        contract_store.add(sample_contract)
        data = json.loads(storage.get_item(DEPLOYED_CONTRACTS_KEY))
        assert isinstance(data, list)
        assert data[0]["address"] == sample_contract.address

    def test_corrupt_json_is_empty(self, storage: LocalStorage, contract_store: DeployedContractStore):
        storage.set_item(DEPLOYED_CONTRACTS_KEY, "{not json")
        assert contract_store.list() == []

    def test_invalid_entries_skipped(self, storage: LocalStorage, contract_store: DeployedContractStore):
        storage.set_item(DEPLOYED_CONTRACTS_KEY, json.dumps([{"name": "NoAddress"}, {"name": "A", "address": OTHER_ADDRESS}]))
        assert [c.name for c in contract_store.list()] == ["A"]

    def test_export_import(self, tmp_path: Path, contract_store: DeployedContractStore, sample_contract: DeployedContract):
        contract_store.add(sample_contract)
        path = tmp_path / "contracts.json"
        assert contract_store.export_json(path) == 1

        contract_store.remove(sample_contract.address)
        assert contract_store.import_json(path) == 1
        assert contract_store.list() == [sample_contract]

    def test_import_replaces(self, tmp_path: Path, contract_store: DeployedContractStore, sample_contract: DeployedContract):
        contract_store.add(sample_contract)
        path = tmp_path / "contracts.json"
        path.write_text(json.dumps([{"name": "Vault", "address": OTHER_ADDRESS}]))
        contract_store.import_json(path)
        assert [c.name for c in contract_store.list()] == ["Vault"]

    def test_import_rejects_non_array(self, tmp_path: Path, contract_store: DeployedContractStore):
        path = tmp_path / "contracts.json"
        path.write_text(json.dumps({"name": "Vault"}))
        with pytest.raises(StorageError, match="expected a JSON array"):
            contract_store.import_json(path)

    def test_import_rejects_invalid_entry(self, tmp_path: Path, contract_store: DeployedContractStore):
        path = tmp_path / "contracts.json"
        path.write_text(json.dumps([{"name": "Vault"}]))
        with pytest.raises(StorageError):
            contract_store.import_json(path)

    def test_import_missing_file(self, tmp_path: Path, contract_store: DeployedContractStore):
        with pytest.raises(StorageError):
            contract_store.import_json(tmp_path / "missing.json")


class TestVerificationStore:
    """Test per-address verification status."""

    def test_default_unverified(self, verification_store: VerificationStore):
        assert verification_store.get_status(OTHER_ADDRESS) == VerificationStatus.UNVERIFIED

    def test_set_and_get_case_insensitive(self, verification_store: VerificationStore):
        verification_store.set_status(OTHER_ADDRESS.upper(), VerificationStatus.SUCCESS)
        assert verification_store.get_status(OTHER_ADDRESS) == VerificationStatus.SUCCESS

    def test_stored_shape(self, storage: LocalStorage, verification_store: VerificationStore):
        verification_store.set_status(OTHER_ADDRESS, "pending")
        data = json.loads(storage.get_item(VERIFIED_CONTRACTS_KEY))
        assert data[OTHER_ADDRESS]["status"] == "pending"
        assert isinstance(data[OTHER_ADDRESS]["timestamp"], int)

    def test_unknown_status_is_unverified(self, storage: LocalStorage, verification_store: VerificationStore):
        storage.set_item(VERIFIED_CONTRACTS_KEY, json.dumps({OTHER_ADDRESS: {"status": "weird"}}))
        assert verification_store.get_status(OTHER_ADDRESS) == VerificationStatus.UNVERIFIED

    def test_corrupt_json_is_empty(self, storage: LocalStorage, verification_store: VerificationStore):
        storage.set_item(VERIFIED_CONTRACTS_KEY, "[]")
        assert verification_store.all() == {}
