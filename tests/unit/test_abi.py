"""Unit tests for regex ABI extraction."""

import json
from pathlib import Path

import pytest

from ricknad.chain.abi import (
    ADDER_BYTECODE,
    STORAGE_BYTECODE,
    PseudoCompiler,
    canonical_type,
    function_selector,
    parse_params,
    strip_comments,
)
from ricknad.config import DEFAULT_CONTRACT_TEMPLATE
from ricknad.errors import CompileError
from ricknad.generator import ContractType, generate_contract

SOURCE = """
// SPDX-License-Identifier: MIT
pragma solidity ^0.8.20;

/** @dev function ignored(uint256 a) public {} */
contract Sample is ERC20 {
    event Moved(address indexed from, address to, uint256);

    constructor(uint256 initialSupply, IERC20 asset_) ERC20("Sample", "SMP") {}

    function transfer(address to, uint256 amount) public returns (bool) {
        return true;
    }

    function balance() external view returns (uint256 value, string memory) {
        return (1, "");
    }

    function send(bytes calldata data, uint[] memory ids) external payable {}

    function _hidden(uint256 x) internal {}

    function _secret() private view returns (uint256) {
        return 0;
    }

    receive() external payable {}
}
"""


@pytest.fixture
def compiler() -> PseudoCompiler:
    return PseudoCompiler()


def _entry(abi: list, name: str) -> dict:
    return next(e for e in abi if e.get("name") == name)


class TestHelpers:
    @pytest.mark.parametrize(
        "solidity_type,abi_type",
        [
            ("uint", "uint256"),
            ("uint[]", "uint256[]"),
            ("address", "address"),
            ("bytes32", "bytes32"),
            ("IERC20", "address"),
            ("IVotes[2]", "address[2]"),
            ("string", "string"),
        ],
    )
    def test_canonical_type(self, solidity_type: str, abi_type: str):
        assert canonical_type(solidity_type) == abi_type

    def test_parse_params(self):
        params = parse_params("address to, uint256 memory, bytes calldata data")
        assert [p["name"] for p in params] == ["to", "param1", "data"]
        assert [p["type"] for p in params] == ["address", "uint256", "bytes"]

    def test_parse_outputs_stay_anonymous(self):
        assert parse_params("uint256", outputs=True)[0]["name"] == ""

    def test_parse_event_params(self):
        params = parse_params("address indexed from, uint256 value", events=True)
        assert [p["indexed"] for p in params] == [True, False]

    def test_strip_comments_keeps_urls(self):
        source = 'string uri = "https://example.com"; // note\n/* block */ uint x;'
        assert strip_comments(source) == 'string uri = "https://example.com"; \n uint x;'

    def test_function_selector(self):
        assert function_selector("transfer(address,uint256)") == "0xa9059cbb"


class TestPseudoCompiler:
    """Test artifact extraction."""

    def test_contract_name_and_flags(self, compiler: PseudoCompiler):
        artifact = compiler.compile(SOURCE)
        assert artifact.contract_name == "Sample"
        assert artifact.simulated is True

    def test_constructor(self, compiler: PseudoCompiler):
        abi = compiler.compile(SOURCE).abi
        constructor = next(e for e in abi if e["type"] == "constructor")
        assert [i["type"] for i in constructor["inputs"]] == ["uint256", "address"]
        assert constructor["stateMutability"] == "nonpayable"

    def test_event(self, compiler: PseudoCompiler):
        event = _entry(compiler.compile(SOURCE).abi, "Moved")
        assert event["type"] == "event"
        assert event["anonymous"] is False
        assert [i["indexed"] for i in event["inputs"]] == [True, False, False]
        assert event["inputs"][2]["name"] == "param2"

    def test_functions(self, compiler: PseudoCompiler):
        abi = compiler.compile(SOURCE).abi
        names = [e["name"] for e in abi if e["type"] == "function"]
        assert names == ["transfer", "balance", "send"]

        balance = _entry(abi, "balance")
        assert balance["stateMutability"] == "view"
        assert [(o["name"], o["type"]) for o in balance["outputs"]] == [("value", "uint256"), ("", "string")]

        send = _entry(abi, "send")
        assert send["stateMutability"] == "payable"
        assert [i["type"] for i in send["inputs"]] == ["bytes", "uint256[]"]

    def test_comments_ignored(self, compiler: PseudoCompiler):
        abi = compiler.compile(SOURCE).abi
        assert all(e.get("name") != "ignored" for e in abi)

    def test_receive(self, compiler: PseudoCompiler):
        abi = compiler.compile(SOURCE).abi
        assert {"stateMutability": "payable", "type": "receive"} in abi

    def test_method_identifiers(self, compiler: PseudoCompiler):
        artifact = compiler.compile(SOURCE)
        assert artifact.method_identifiers["transfer(address,uint256)"] == "0xa9059cbb"
        assert "send(bytes,uint256[])" in artifact.method_identifiers

    def test_missing_pragma(self, compiler: PseudoCompiler):
        with pytest.raises(CompileError):
            compiler.compile("contract A {}")

    def test_missing_contract(self, compiler: PseudoCompiler):
        with pytest.raises(CompileError, match="no contract"):
            compiler.compile("pragma solidity ^0.8.20;\ninterface I {}")

    def test_compile_error_is_value_error(self, compiler: PseudoCompiler):
        with pytest.raises(ValueError):
            compiler.compile("")

    def test_default_template(self, compiler: PseudoCompiler):
        artifact = compiler.compile(DEFAULT_CONTRACT_TEMPLATE)
        assert artifact.contract_name == "SimpleStorage"
        assert set(artifact.method_identifiers) == {"setValue(uint256)", "getValue()"}
        assert artifact.bytecode == STORAGE_BYTECODE

    def test_save(self, compiler: PseudoCompiler, tmp_path: Path):
        path = tmp_path / "artifact.json"
        compiler.compile(SOURCE).save(path)
        data = json.loads(path.read_text())
        assert data["contract_name"] == "Sample"
        assert data["simulated"] is True


class TestSampleBytecode:
    def test_token_types(self):
        assert PseudoCompiler.sample_bytecode(ContractType.ERC20) == ADDER_BYTECODE
        assert PseudoCompiler.sample_bytecode(ContractType.ERC721) == ADDER_BYTECODE

    def test_other_types(self):
        assert PseudoCompiler.sample_bytecode(ContractType.MULTISIG) == STORAGE_BYTECODE

    def test_inferred_from_bases(self):
        assert PseudoCompiler.sample_bytecode(None, "ERC20, Ownable") == ADDER_BYTECODE
        assert PseudoCompiler.sample_bytecode(None, "Ownable") == STORAGE_BYTECODE

    def test_samples_are_hex(self):
        for bytecode in (ADDER_BYTECODE, STORAGE_BYTECODE):
            assert bytecode.startswith("0x")
            int(bytecode[2:], 16)


class TestGeneratedContracts:
    """Every archetype's output goes through the extractor."""

    @pytest.mark.parametrize("contract_type", list(ContractType))
    def test_archetypes_compile(self, compiler: PseudoCompiler, contract_type: ContractType):
        from ricknad.generator.templates import assemble

        code = assemble(contract_type, "Sample", frozenset(), "", 0, "now")
        artifact = compiler.compile(code, contract_type)
        assert artifact.contract_name == "Sample"
        assert all(e["type"] in ("constructor", "event", "function", "receive") for e in artifact.abi)

    def test_monad_coin_abi(self, compiler: PseudoCompiler):
        contract, _ = generate_contract("create an ERC20 token called MonadCoin with mint and burn")
        artifact = compiler.compile(contract.code, contract.type)
        assert artifact.method_identifiers["mint(address,uint256)"] == "0x40c10f19"
        assert artifact.bytecode == ADDER_BYTECODE

    def test_multisig_abi(self, compiler: PseudoCompiler):
        contract, _ = generate_contract("make a 3 of 5 multisig wallet")
        abi = compiler.compile(contract.code, contract.type).abi
        assert {"stateMutability": "payable", "type": "receive"} in abi
        constructor = next(e for e in abi if e["type"] == "constructor")
        assert [i["type"] for i in constructor["inputs"]] == ["address[]", "uint256"]
