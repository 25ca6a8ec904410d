"""Regex-based ABI extraction for generated contracts.

There is no Solidity compiler in the loop: the ABI is read off the source
text and the bytecode is one of two fixed samples. Artifacts are always
marked `simulated`.
"""

import json
import logging
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from eth_abi import is_encodable_type
from web3 import Web3

from ricknad.errors import CompileError
from ricknad.generator.types import ContractType

logger = logging.getLogger(__name__)

# Two-argument adder, used for the token archetypes.
ADDER_BYTECODE = "0x" + (
    "608060405234801561001057600080fd5b50610150806100206000396000f3fe608060405234801561001057600080fd5b50"
    "6004361061002b5760003560e01c8063771602f714610030575b600080fd5b61004a6004803603810190610045919061009d"
    "565b610060565b60405161005791906100d9565b60405180910390f35b6000818361006e91906100f4565b90509291505056"
    "5b600080fd5b6000819050919050565b61008a8161007d565b811461009557600080fd5b50565b6000813590506100a78161"
    "0081565b92915050565b600080604083850312156100b4576100b3610079565b5b60006100c285828601610098565b925050"
    "60206100d385828601610098565b9150509250929050565b6100e38161007d565b82525050565b60006020820190506100fe"
    "60008301846100dc565b92915050565b7f4e487b710000000000000000000000000000000000000000000000000000000060"
    "e052604160045260246000fd5b600061013f8261007d565b915061014a8361007d565b9250827fffffffffffffffffffffff"
    "ffffffffffffffffffffffffffffffffffffffffff0382111561017f5761017e610105565b5b82820190509291505056fea2"
    "64697066735822122024d33be7c73c099cedba7e11787e893151b39c977d9712cce3a0db7f94ba066764736f6c634300080d"
    "0033"
)

# Owner-address storage contract, used for everything else.
STORAGE_BYTECODE = "0x" + (
    "608060405234801561001057600080fd5b50336000806101000a81548173ffffffffffffffffffffffffffffffffffffffff"
    "021916908373ffffffffffffffffffffffffffffffffffffffff16021790555060408051808201909152601d815260008051"
    "60206102c1833981519152602082015260019080519060200190610089929190610090565b50610190565b8280546100a090"
    "6101c9565b90600052602060002090601f0160209004810192826100c25760008555610109565b82601f106100db57805160"
    "ff1916838001178555610109565b82800160010185558215610109579182015b828111156101085782518255916020019190"
    "600101906100ed565b5b509050610116919061011a565b5090565b5b8082111561013357600081600090555060010161011b"
    "565b5090565b7f4e487b71000000000000000000000000000000000000000000000000000000006000526022600452602460"
    "00fd5b600060028204905060018216806101c157607f821691505b6020821081036101d4576101d3610137565b5b50919050"
    "565b6101a4806101fe6000396000f3fe608060405260043610610042576000357c0100000000000000000000000000000000"
    "000000000000000000000000900463ffffffff1680636d4ce63c14610054575b600080fd5b34801561006057600080fd5b50"
    "610069610089565b604051808273ffffffffffffffffffffffffffffffffffffffff1673ffffffffffffffffffffffffffff"
    "ffffffffffff16815260200191505060405180910390f35b6000809054906101000a900473ffffffffffffffffffffffffff"
    "ffffffffffffff168156fea2646970667358221220d78deecf583683c03d77fb1279d1d03b5b1b7fb0c2a693f41c9a294334"
    "a7c64164736f6c634300080a0033"
)


TOKEN_TYPES = frozenset({
    ContractType.ERC20,
    ContractType.ERC20_UPGRADEABLE,
    ContractType.ERC721,
    ContractType.ERC1155,
    ContractType.ERC4626,
})

PRAGMA_PATTERN = re.compile(r"pragma\s+solidity\b")
CONTRACT_PATTERN = re.compile(r"\bcontract\s+(\w+)(?:\s+is\s+([^{]*))?\s*\{")
FUNCTION_PATTERN = re.compile(r"\bfunction\s+(\w+)\s*\(([^)]*)\)([^{;]*)")
EVENT_PATTERN = re.compile(r"\bevent\s+(\w+)\s*\(([^)]*)\)\s*(anonymous)?\s*;")
CONSTRUCTOR_PATTERN = re.compile(r"\bconstructor\s*\(([^)]*)\)([^{]*)")
RECEIVE_PATTERN = re.compile(r"\breceive\s*\(\s*\)\s*external\s+payable")
RETURNS_PATTERN = re.compile(r"\breturns\s*\(([^)]*)\)")
TYPE_PATTERN = re.compile(r"^([A-Za-z_]\w*)((?:\[\d*\])*)$")
TOKEN_BASE_PATTERN = re.compile(r"\bERC(?:20|721|1155|4626)")
BLOCK_COMMENT_PATTERN = re.compile(r"/\*.*?\*/", re.DOTALL)
# `(?<!:)` keeps URLs in string literals intact
LINE_COMMENT_PATTERN = re.compile(r"(?<!:)//[^\n]*")

DATA_LOCATIONS = {"memory", "calldata", "storage"}
PARAM_KEYWORDS = DATA_LOCATIONS | {"indexed", "payable"}
MUTABILITIES = ("pure", "view", "payable")
TYPE_ALIASES = {"uint": "uint256", "int": "int256", "byte": "bytes1"}


@dataclass
class CompilationArtifact:
    """ABI and bytecode produced for one contract."""
    contract_name: str
    abi: list[dict[str, Any]]
    bytecode: str
    method_identifiers: dict[str, str] = field(default_factory=dict)
    simulated: bool = True

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def save(self, path: str | Path) -> None:
        Path(path).write_text(json.dumps(self.to_dict(), indent=2))


def canonical_type(solidity_type: str) -> str:
    """ABI type for a Solidity parameter type.

    Contract and interface types (`IERC20`, `IVotes`) are addresses.
    """
    match = TYPE_PATTERN.match(solidity_type)
    if not match:
        return solidity_type
    base, dims = match.groups()
    base = TYPE_ALIASES.get(base, base)
    if not is_encodable_type(base) and base[0].isupper():
        base = "address"
    return base + dims


def parse_params(text: str, *, events: bool = False, outputs: bool = False) -> list[dict[str, Any]]:
    """Parse a comma-separated Solidity parameter list into ABI entries.

    Unnamed inputs get `param{i}`; unnamed outputs stay anonymous.
    """
    params = []
    for i, raw in enumerate(p for p in text.split(",") if p.strip()):
        tokens = raw.split()
        solidity_type = tokens[0]
        rest = tokens[1:]
        names = [t for t in rest if t not in PARAM_KEYWORDS]
        entry: dict[str, Any] = {
            "internalType": solidity_type,
            "name": names[-1] if names else ("" if outputs else f"param{i}"),
            "type": canonical_type(solidity_type),
        }
        if events:
            entry["indexed"] = "indexed" in rest
        params.append(entry)
    return params


def strip_comments(source: str) -> str:
    return LINE_COMMENT_PATTERN.sub("", BLOCK_COMMENT_PATTERN.sub("", source))


def function_signature(entry: dict[str, Any]) -> str:
    """Canonical signature, e.g. `transfer(address,uint256)`."""
    types = ",".join(inp["type"] for inp in entry.get("inputs", []))
    return f"{entry['name']}({types})"


def function_selector(signature: str) -> str:
    """4-byte selector of a canonical signature, 0x-prefixed."""
    return Web3.to_hex(Web3.keccak(text=signature)[:4])


class PseudoCompiler:
    """Extracts an ABI from Solidity text without compiling it."""

    def compile(self, source: str, contract_type: ContractType | None = None) -> CompilationArtifact:
        source = strip_comments(source or "")
        if not PRAGMA_PATTERN.search(source):
            raise CompileError("Source has no 'pragma solidity' directive")
        contracts = CONTRACT_PATTERN.findall(source)
        if not contracts:
            raise CompileError("Source has no contract declaration")
        contract_name, bases = contracts[-1]

        abi = self.extract_abi(source)
        method_identifiers = {
            function_signature(entry): function_selector(function_signature(entry))
            for entry in abi
            if entry["type"] == "function"
        }
        bytecode = self.sample_bytecode(contract_type, bases)
        logger.debug("Extracted %d ABI entries from %s", len(abi), contract_name)

        return CompilationArtifact(
            contract_name=contract_name,
            abi=abi,
            bytecode=bytecode,
            method_identifiers=method_identifiers,
        )

    def extract_abi(self, source: str) -> list[dict[str, Any]]:
        abi: list[dict[str, Any]] = []

        if match := CONSTRUCTOR_PATTERN.search(source):
            abi.append({
                "inputs": parse_params(match.group(1)),
                "stateMutability": "payable" if "payable" in match.group(2).split() else "nonpayable",
                "type": "constructor",
            })

        for name, params, anonymous in EVENT_PATTERN.findall(source):
            abi.append({
                "anonymous": bool(anonymous),
                "inputs": parse_params(params, events=True),
                "name": name,
                "type": "event",
            })

        seen: set[str] = set()
        for name, params, tail in FUNCTION_PATTERN.findall(source):
            words = re.sub(r"\([^)]*\)", " ", tail).split()
            if "internal" in words or "private" in words:
                continue
            mutability = next((m for m in MUTABILITIES if m in words), "nonpayable")
            returns = RETURNS_PATTERN.search(tail)
            entry = {
                "inputs": parse_params(params),
                "name": name,
                "outputs": parse_params(returns.group(1), outputs=True) if returns else [],
                "stateMutability": mutability,
                "type": "function",
            }
            signature = function_signature(entry)
            if signature in seen:
                continue
            seen.add(signature)
            abi.append(entry)

        if RECEIVE_PATTERN.search(source):
            abi.append({"stateMutability": "payable", "type": "receive"})

        return abi

    @staticmethod
    def sample_bytecode(contract_type: ContractType | None, bases: str = "") -> str:
        """Token archetypes get the adder sample, everything else the storage one."""
        if contract_type is None:
            is_token = bool(TOKEN_BASE_PATTERN.search(bases or ""))
        else:
            is_token = contract_type in TOKEN_TYPES
        return ADDER_BYTECODE if is_token else STORAGE_BYTECODE
