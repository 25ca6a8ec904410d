"""Keyword-based prompt classification."""

import logging
import re
from dataclasses import replace

from ricknad.generator.types import (
    Classification,
    ContractParameters,
    ContractType,
    Feature,
    FeatureSet,
)

logger = logging.getLogger(__name__)


# Ordered: the first group with a matching keyword wins. Keywords are regexes.
TYPE_KEYWORDS: list[tuple[ContractType, tuple[str, ...]]] = [
    (ContractType.ERC4626, ("erc4626", "erc-4626", "vault")),
    (ContractType.ERC1155, ("erc1155", "erc-1155", "multi-token", "multi token", "multitoken", "semi-fungible")),
    (ContractType.ERC721, ("erc721", "erc-721", "nft", "collectible")),
    (ContractType.ERC20, ("erc20", "erc-20", "token", "fungible", "coin")),
    (ContractType.STAKING, ("staking", "stake", "yield farm")),
    (ContractType.VESTING, ("vesting", "vested", r"\bvest\b", "unlock")),
    (ContractType.ESCROW, ("escrow",)),
    (ContractType.MULTISIG, ("multisig", "multi-sig", "multi sig", "multisignature", "multi-signature")),
    (ContractType.GOVERNANCE, ("governance", "governor", "dao", "voting", r"\bvotes?\b", "proposal")),
    (ContractType.TIMELOCK, ("timelock controller", "timelock", "time-lock", "time lock")),
    (ContractType.PROXY, ("proxy", "upgradeable", "upgradable", "upgrade")),
]

TYPE_PATTERNS: list[tuple[ContractType, re.Pattern[str]]] = [
    (contract_type, re.compile("|".join(keywords))) for contract_type, keywords in TYPE_KEYWORDS
]

UPGRADEABLE_KEYWORDS = ("upgrad", "proxy", "uups")

FEATURE_KEYWORDS: dict[Feature, tuple[str, ...]] = {
    Feature.PAUSABLE: ("pausable", "pause"),
    Feature.OWNABLE: ("ownable", "owner", "admin"),
    Feature.MINTABLE: ("mintable", "mint"),
    Feature.BURNABLE: ("burnable", "burn"),
    Feature.CAPPED: ("capped", "max supply", "maximum supply", "supply cap", "supply limit", "hard cap"),
    Feature.ROLES: ("role", "access control", "permission"),
    Feature.TIMELOCK: ("timelock", "time lock", "time-lock", "lock period", "lockup", "locked"),
    Feature.BATCHABLE: ("batch",),
    Feature.UUPS: ("uups",),
    Feature.TRANSPARENT_UPGRADEABLE: ("transparent",),
    Feature.DIAMOND: ("diamond", "eip-2535", "eip2535"),
    Feature.MERKLE_PROOF: ("merkle", "whitelist", "allowlist"),
    Feature.ROYALTIES: ("royalt", "erc2981", "eip-2981", "fee"),
    Feature.PERMIT: ("permit", "gasless", "eip-2612", "erc2612"),
    Feature.METADATA: ("metadata", "token uri", "tokenuri", "base uri", "baseuri"),
    Feature.REVEAL: ("reveal",),
    Feature.SOULBOUND: ("soulbound", "soul-bound", "non-transferable", "non transferable"),
    Feature.VOTING_DELAY: ("voting delay", "vote delay"),
    Feature.QUORUM: ("quorum",),
    Feature.CLIFF_VESTING: ("cliff",),
    Feature.ENUMERABLE: ("enumerable", "enumeration"),
}

DEFAULT_NAMES: dict[ContractType, str] = {
    ContractType.ERC20: "RickToken",
    ContractType.ERC20_UPGRADEABLE: "RickUpgradeableToken",
    ContractType.ERC721: "RickNFT",
    ContractType.ERC1155: "RickMultiToken",
    ContractType.ERC4626: "RickVault",
    ContractType.STAKING: "RickStaking",
    ContractType.GOVERNANCE: "RickGovernance",
    ContractType.PROXY: "RickUpgradeable",
    ContractType.ESCROW: "RickEscrow",
    ContractType.MULTISIG: "RickMultiSig",
    ContractType.TIMELOCK: "RickTimelock",
    ContractType.VESTING: "RickVesting",
    ContractType.CUSTOM: "GeneratedContract",
}

NAME_PATTERN = re.compile(
    r"\b(?:named|called|name)\b(?:\s*[:=]\s*|\s+)(?:\"([^\"]+)\"|'([^']+)'|([A-Za-z0-9_]+))",
    re.IGNORECASE,
)

# Words that follow "name"/"called" without being a name
NAME_STOPWORDS = {"it", "the", "a", "an", "of", "is", "my", "and", "with", "for", "to"}

SYMBOL_PATTERN = re.compile(r"\bsymbol\b(?:\s*[:=]\s*|\s+)[\"']?([A-Za-z0-9]{1,10})[\"']?", re.IGNORECASE)
SUPPLY_PATTERN = re.compile(
    r"\b(?:supply|cap)\s*(?:of)?\s*[:=]?\s*([0-9][0-9,._]*)\s*(million|billion|m|b)?\b",
    re.IGNORECASE,
)
PERIOD_PATTERN = re.compile(
    r"\b(?:period|duration|lock)\s*(?:of)?\s*[:=]?\s*([0-9]+)\s*(days?|weeks?|months?)",
    re.IGNORECASE,
)
REWARD_PATTERN = re.compile(r"\b(?:reward|apy|apr|interest)\s*(?:rate)?\s*(?:of)?\s*[:=]?\s*([0-9]+(?:\.[0-9]+)?)\s*%?", re.IGNORECASE)
QUORUM_PATTERN = re.compile(r"\bquorum\s*(?:of)?\s*[:=]?\s*([0-9]+)\s*%?", re.IGNORECASE)
VOTING_PERIOD_PATTERN = re.compile(
    r"\bvot(?:ing|e)\s*period\s*(?:of)?\s*[:=]?\s*([0-9]+)\s*(days?|weeks?)",
    re.IGNORECASE,
)
VOTING_DELAY_PATTERN = re.compile(r"\bvot(?:ing|e)\s*delay\s*(?:of)?\s*[:=]?\s*([0-9]+)\s*days?", re.IGNORECASE)
VESTING_PATTERN = re.compile(r"\b(?:vesting|vest|vested)\s*(?:over|for|of|period)?\s*[:=]?\s*([0-9]+)\s*months?", re.IGNORECASE)
CLIFF_PATTERN = re.compile(r"\bcliff\s*(?:of)?\s*[:=]?\s*([0-9]+)\s*months?", re.IGNORECASE)
DELAY_PATTERN = re.compile(r"\b(?:min(?:imum)?\s*)?delay\s*(?:of)?\s*[:=]?\s*([0-9]+)\s*days?", re.IGNORECASE)
M_OF_N_PATTERN = re.compile(r"\b([0-9]+)\s*(?:of|/|out of)\s*([0-9]+)\b", re.IGNORECASE)


def detect_type(prompt_lc: str, fallback: ContractType | None = None) -> ContractType:
    """Pick the archetype from a lowercased prompt."""
    for contract_type, pattern in TYPE_PATTERNS:
        if pattern.search(prompt_lc):
            if contract_type == ContractType.ERC20 and any(kw in prompt_lc for kw in UPGRADEABLE_KEYWORDS):
                return ContractType.ERC20_UPGRADEABLE
            return contract_type
    return fallback or ContractType.CUSTOM


def detect_features(prompt_lc: str) -> FeatureSet:
    """Collect every feature whose keywords appear in a lowercased prompt."""
    return frozenset(
        feature
        for feature, keywords in FEATURE_KEYWORDS.items()
        if any(kw in prompt_lc for kw in keywords)
    )


def to_identifier(raw: str) -> str | None:
    """Reduce free text to a CamelCase Solidity identifier."""
    words = re.findall(r"[A-Za-z0-9]+", raw)
    if not words:
        return None
    if len(words) == 1:
        ident = words[0]
    else:
        ident = "".join(w[:1].upper() + w[1:] for w in words)
    if ident[0].isdigit():
        ident = "C" + ident
    return ident


def extract_name(prompt: str) -> str | None:
    """Find a custom contract name (`named X`, `called "X"`, ...)."""
    for match in NAME_PATTERN.finditer(prompt):
        raw = match.group(1) or match.group(2) or match.group(3)
        if not raw or raw.lower() in NAME_STOPWORDS:
            continue
        ident = to_identifier(raw)
        if ident:
            return ident
    return None


def default_symbol(name: str) -> str:
    """Derive a ticker symbol from a contract name."""
    capitals = "".join(c for c in name if c.isupper())[:5]
    if len(capitals) >= 2:
        return capitals
    return name[:4].upper()


def _to_int(text: str) -> int:
    return int(float(text.replace(",", "").replace("_", "")))


def extract_parameters(prompt: str) -> ContractParameters:
    """Parse numeric parameters mentioned in a prompt."""
    params = ContractParameters()
    changes: dict = {}

    if match := SYMBOL_PATTERN.search(prompt):
        changes["symbol"] = match.group(1).upper()

    if match := SUPPLY_PATTERN.search(prompt):
        try:
            supply = float(match.group(1).replace(",", "").replace("_", ""))
        except ValueError:
            supply = None
        if supply is not None:
            unit = (match.group(2) or "").lower()
            if unit in ("million", "m"):
                supply *= 1_000_000
            elif unit in ("billion", "b"):
                supply *= 1_000_000_000
            changes["supply"] = int(supply)

    if match := PERIOD_PATTERN.search(prompt):
        days = int(match.group(1))
        unit = match.group(2).lower()
        if unit.startswith("week"):
            days *= 7
        elif unit.startswith("month"):
            days *= 30
        changes["staking_period_days"] = days

    if match := REWARD_PATTERN.search(prompt):
        changes["reward_rate"] = float(match.group(1))

    if match := QUORUM_PATTERN.search(prompt):
        changes["quorum_percent"] = min(_to_int(match.group(1)), 100)

    if match := VOTING_PERIOD_PATTERN.search(prompt):
        days = int(match.group(1))
        if match.group(2).lower().startswith("week"):
            days *= 7
        changes["voting_period_days"] = days

    if match := VOTING_DELAY_PATTERN.search(prompt):
        changes["voting_delay_days"] = int(match.group(1))

    if match := VESTING_PATTERN.search(prompt):
        changes["vesting_months"] = max(int(match.group(1)), 1)

    if match := CLIFF_PATTERN.search(prompt):
        changes["cliff_months"] = int(match.group(1))

    if match := DELAY_PATTERN.search(prompt):
        changes["timelock_delay_days"] = int(match.group(1))

    if match := M_OF_N_PATTERN.search(prompt):
        threshold, owners = int(match.group(1)), int(match.group(2))
        if 0 < threshold <= owners:
            changes["multisig_threshold"] = threshold
            changes["multisig_owners"] = owners

    return replace(params, **changes)


def classify(prompt: str, fallback_type: ContractType | None = None) -> Classification:
    """Classify a free-text prompt.

    Never raises. `fallback_type` is used when no archetype keyword matches
    (typically the type of the previous contract in the conversation).
    """
    prompt = prompt or ""
    prompt_lc = prompt.lower()

    contract_type = detect_type(prompt_lc, fallback_type)
    features = detect_features(prompt_lc)
    name = extract_name(prompt) or DEFAULT_NAMES[contract_type]
    parameters = extract_parameters(prompt)

    if parameters.symbol is None:
        parameters = replace(parameters, symbol=default_symbol(name))

    logger.debug(
        "Classified prompt as %s (name=%s, features=%s)",
        contract_type.value,
        name,
        sorted(f.value for f in features),
    )

    return Classification(
        type=contract_type,
        features=features,
        name=name,
        parameters=parameters,
    )
