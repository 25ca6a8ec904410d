"""Value types shared by the classifier and the assemblers."""

from dataclasses import dataclass, field
from enum import Enum


class ContractType(str, Enum):
    """Contract archetype."""
    ERC20 = "erc20"
    ERC20_UPGRADEABLE = "erc20Upgradeable"
    ERC721 = "erc721"
    ERC1155 = "erc1155"
    ERC4626 = "erc4626"
    STAKING = "staking"
    GOVERNANCE = "governance"
    PROXY = "proxy"
    ESCROW = "escrow"
    MULTISIG = "multisig"
    TIMELOCK = "timelock"
    VESTING = "vesting"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: str) -> "ContractType":
        """Parse a type name, accepting the `dao` and `upgradeable` aliases."""
        aliases = {"dao": cls.GOVERNANCE, "upgradeable": cls.PROXY}
        if value in aliases:
            return aliases[value]
        return cls(value)


class Feature(str, Enum):
    """Optional capability flag. Declaration order is the display order."""
    PAUSABLE = "pausable"
    OWNABLE = "ownable"
    MINTABLE = "mintable"
    BURNABLE = "burnable"
    CAPPED = "capped"
    ROLES = "roles"
    TIMELOCK = "timelock"
    BATCHABLE = "batchable"
    UUPS = "uups"
    TRANSPARENT_UPGRADEABLE = "transparentUpgradeable"
    DIAMOND = "diamond"
    MERKLE_PROOF = "merkleProof"
    ROYALTIES = "royalties"
    PERMIT = "permit"
    METADATA = "metadata"
    REVEAL = "reveal"
    SOULBOUND = "soulbound"
    VOTING_DELAY = "votingDelay"
    QUORUM = "quorum"
    CLIFF_VESTING = "cliffVesting"
    ENUMERABLE = "enumerable"


FeatureSet = frozenset[Feature]


def ordered_features(features: FeatureSet) -> list[Feature]:
    """Features in declaration order."""
    return [f for f in Feature if f in features]


@dataclass(frozen=True)
class ContractParameters:
    """Numeric and naming parameters parsed from a prompt."""
    symbol: str | None = None
    supply: int | None = None  # whole tokens
    staking_period_days: int = 30
    reward_rate: float = 10.0  # percent per year
    quorum_percent: int = 4
    voting_period_days: int = 7
    voting_delay_days: int = 0  # 0 means one block
    vesting_months: int = 12
    cliff_months: int = 3
    timelock_delay_days: int = 2
    multisig_threshold: int = 2
    multisig_owners: int = 3


@dataclass(frozen=True)
class Classification:
    """Result of classifying a prompt."""
    type: ContractType
    features: FeatureSet
    name: str
    parameters: ContractParameters = field(default_factory=ContractParameters)


@dataclass(frozen=True)
class GeneratedContract:
    """Solidity source produced for one prompt."""
    code: str
    name: str
    type: ContractType
    features: FeatureSet = frozenset()
    parameters: ContractParameters = field(default_factory=ContractParameters)
    warnings: tuple[str, ...] = ()
