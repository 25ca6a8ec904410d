"""ERC4626 tokenized vaults."""

from ricknad.generator.rules import ContractParts, FeatureRule, RuleContext
from ricknad.generator.templates.base import Archetype
from ricknad.generator.templates.common import (
    IERC20,
    OWNABLE,
    OZ,
    pausable_rule,
    roles_rule,
)
from ricknad.generator.types import ContractType, Feature

DEFAULT_DEPOSIT_CAP = 1_000_000


def _base(ctx: RuleContext) -> ContractParts:
    return ContractParts(
        imports=[
            IERC20,
            f"{OZ}/token/ERC20/ERC20.sol",
            f"{OZ}/token/ERC20/extensions/ERC4626.sol",
        ],
        inheritance=["ERC20", "ERC4626"],
        constructor_params=["IERC20 asset_"],
        constructor_calls={
            "ERC20": f'"{ctx.name}", "{ctx.parameters.symbol}"',
            "ERC4626": "asset_",
        },
        functions=["""
        function decimals() public view override(ERC20, ERC4626) returns (uint8) {
            return super.decimals();
        }
        """],
    )


def _capped_rule(ctx: RuleContext) -> FeatureRule:
    cap = ctx.parameters.supply or DEFAULT_DEPOSIT_CAP
    return FeatureRule(
        add_variables=("uint256 public depositCap;",),
        add_events=("event DepositCapUpdated(uint256 cap);",),
        add_constructor_body=(f"depositCap = {cap} * 10 ** 18;",),
        add_functions=(f"""
        function setDepositCap(uint256 cap) public {ctx.admin_guard} {{
            depositCap = cap;
            emit DepositCapUpdated(cap);
        }}
        """,),
        requires_admin=True,
    )


def _permit_rule(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(
        add_imports=(f"{OZ}/token/ERC20/extensions/ERC20Permit.sol",),
        add_inheritance=("ERC20Permit",),
        add_constructor_calls=(("ERC20Permit", f'"{ctx.name}"'),),
    )


RULES = (
    (Feature.PAUSABLE, pausable_rule),
    (Feature.CAPPED, _capped_rule),
    (Feature.OWNABLE, OWNABLE),
    (Feature.ROLES, roles_rule("PAUSER_ROLE")),
    (Feature.PERMIT, _permit_rule),
)


def _finalize(parts: ContractParts, ctx: RuleContext) -> None:
    if not ctx.has_any(Feature.PAUSABLE, Feature.CAPPED):
        return
    lines = [
        "function maxDeposit(address receiver) public view override returns (uint256) {",
    ]
    if ctx.has(Feature.PAUSABLE):
        lines.append("    if (paused()) return 0;")
    if ctx.has(Feature.CAPPED):
        lines.extend([
            "    uint256 assets = totalAssets();",
            "    if (assets >= depositCap) return 0;",
            "    return depositCap - assets;",
        ])
    else:
        lines.append("    return super.maxDeposit(receiver);")
    lines.append("}")
    parts.functions.append("\n".join(lines))


ERC4626 = Archetype(
    type=ContractType.ERC4626,
    description="ERC4626 Tokenized Vault Contract",
    base_parts=_base,
    rules=RULES,
    finalize=_finalize,
)
