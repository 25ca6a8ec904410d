"""Per-archetype contract builders."""

from typing import Iterable

from ricknad.generator.templates.base import Archetype
from ricknad.generator.templates.custom import CUSTOM
from ricknad.generator.templates.erc20 import ERC20, ERC20_UPGRADEABLE
from ricknad.generator.templates.erc721 import ERC721
from ricknad.generator.templates.erc1155 import ERC1155
from ricknad.generator.templates.erc4626 import ERC4626
from ricknad.generator.templates.escrow import ESCROW
from ricknad.generator.templates.governance import GOVERNANCE, TIMELOCK
from ricknad.generator.templates.multisig import MULTISIG
from ricknad.generator.templates.proxy import PROXY
from ricknad.generator.templates.staking import STAKING
from ricknad.generator.templates.vesting import VESTING
from ricknad.generator.types import ContractParameters, ContractType, Feature

ARCHETYPES: dict[ContractType, Archetype] = {
    archetype.type: archetype
    for archetype in (
        ERC20,
        ERC20_UPGRADEABLE,
        ERC721,
        ERC1155,
        ERC4626,
        STAKING,
        GOVERNANCE,
        PROXY,
        ESCROW,
        MULTISIG,
        TIMELOCK,
        VESTING,
        CUSTOM,
    )
}


def get_archetype(contract_type: ContractType) -> Archetype:
    return ARCHETYPES.get(contract_type, CUSTOM)


def assemble(
    contract_type: ContractType,
    name: str,
    features: Iterable[Feature],
    prompt: str,
    seed: int,
    timestamp: str,
    parameters: ContractParameters | None = None,
) -> str:
    """Solidity source for `contract_type` with `features` applied."""
    return get_archetype(contract_type).assemble(name, features, prompt, seed, timestamp, parameters)


__all__ = ["ARCHETYPES", "Archetype", "assemble", "get_archetype"]
