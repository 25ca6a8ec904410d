"""Prompt to Solidity: the public generation entry points."""

import logging
import random
from datetime import datetime, timezone
from typing import Iterable

from ricknad.generator.classifier import classify
from ricknad.generator.context import ConversationState
from ricknad.generator.templates import assemble, get_archetype
from ricknad.generator.types import ContractType, Feature, GeneratedContract, ordered_features

logger = logging.getLogger(__name__)

SEED_RANGE = 10_000

ARCHETYPE_LABELS: dict[ContractType, str] = {
    ContractType.ERC20: "ERC-20 Token",
    ContractType.ERC20_UPGRADEABLE: "Upgradeable ERC-20 Token",
    ContractType.ERC721: "ERC-721 NFT",
    ContractType.ERC1155: "ERC-1155 Multi-Token",
    ContractType.ERC4626: "ERC-4626 Vault",
    ContractType.STAKING: "Staking Pool",
    ContractType.GOVERNANCE: "DAO Governor",
    ContractType.PROXY: "Upgradeable Contract",
    ContractType.ESCROW: "Escrow",
    ContractType.MULTISIG: "Multi-Signature Wallet",
    ContractType.TIMELOCK: "Timelock Controller",
    ContractType.VESTING: "Token Vesting",
    ContractType.CUSTOM: "Custom Contract",
}

PROXY_PATTERNS = (Feature.UUPS, Feature.TRANSPARENT_UPGRADEABLE, Feature.DIAMOND)


def compatibility_warnings(contract_type: ContractType, features: Iterable[Feature]) -> list[str]:
    """Flag feature combinations that are likely to need manual attention."""
    features = frozenset(features)
    warnings = []

    if contract_type in (ContractType.ERC20, ContractType.ERC20_UPGRADEABLE) and {
        Feature.CAPPED,
        Feature.PERMIT,
    } <= features:
        warnings.append("capped + permit: check the constructor argument order of ERC20Capped and ERC20Permit")

    if {Feature.ROLES, Feature.OWNABLE} <= features:
        warnings.append("roles + ownable: AccessControl is used and Ownable is dropped")

    patterns = [f.value for f in PROXY_PATTERNS if f in features]
    if len(patterns) > 1:
        warnings.append(f"multiple proxy patterns requested ({', '.join(patterns)}): pick one")

    if {Feature.SOULBOUND, Feature.BATCHABLE} <= features:
        warnings.append("soulbound + batchable: batch transfers of soulbound tokens always revert")

    ignored = get_archetype(contract_type).ignored_features(features)
    if ignored:
        names = ", ".join(f.value for f in ignored)
        warnings.append(f"not supported for {contract_type.value} and ignored: {names}")

    return warnings


def generate_contract(
    prompt: str,
    state: ConversationState | None = None,
    *,
    seed: int | None = None,
    timestamp: str | None = None,
) -> tuple[GeneratedContract, ConversationState]:
    """Generate a contract for `prompt`.

    Returns the contract and the updated conversation state; `state` itself
    is left untouched. Never raises for any prompt.
    """
    state = state or ConversationState()
    fallback = state.current_contract.type if state.current_contract else None
    classification = classify(prompt, fallback_type=fallback)
    parameters = state.merge_parameters(classification.parameters)

    if seed is None:
        seed = random.randrange(SEED_RANGE)
    if timestamp is None:
        timestamp = datetime.now(timezone.utc).isoformat()

    code = assemble(
        classification.type,
        classification.name,
        classification.features,
        prompt or "",
        seed,
        timestamp,
        parameters,
    )
    warnings = compatibility_warnings(classification.type, classification.features)
    for warning in warnings:
        logger.debug("%s: %s", classification.name, warning)

    contract = GeneratedContract(
        code=code,
        name=classification.name,
        type=classification.type,
        features=classification.features,
        parameters=parameters,
        warnings=tuple(warnings),
    )
    return contract, state.with_contract(contract, prompt or "")


def describe_contract(contract: GeneratedContract) -> str:
    """Chat reply summarising a generated contract."""
    label = ARCHETYPE_LABELS.get(contract.type, contract.type.value)
    lines = [f"I've generated a {label} contract named {contract.name}."]

    features = ordered_features(contract.features)
    if features:
        lines.append(f"Features: {', '.join(f.value for f in features)}.")
    else:
        lines.append("No optional features were requested, so this is the base template.")

    if contract.warnings:
        lines.append("")
        lines.append("Heads up:")
        lines.extend(f"- {warning}" for warning in contract.warnings)

    lines.append("")
    lines.append("Compile it to get the ABI, then deploy it to the Monad testnet.")
    return "\n".join(lines)
