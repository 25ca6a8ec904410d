"""Prompt classification and Solidity template assembly."""

from ricknad.generator.classifier import classify
from ricknad.generator.context import ConversationState
from ricknad.generator.generator import (
    ARCHETYPE_LABELS,
    compatibility_warnings,
    describe_contract,
    generate_contract,
)
from ricknad.generator.types import (
    Classification,
    ContractParameters,
    ContractType,
    Feature,
    GeneratedContract,
)

__all__ = [
    "ARCHETYPE_LABELS",
    "Classification",
    "ContractParameters",
    "ContractType",
    "ConversationState",
    "Feature",
    "GeneratedContract",
    "classify",
    "compatibility_warnings",
    "describe_contract",
    "generate_contract",
]
