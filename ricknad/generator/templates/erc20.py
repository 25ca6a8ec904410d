"""ERC20 fungible tokens, plain and UUPS-upgradeable."""

from ricknad.generator.rules import ContractParts, FeatureRule, RuleContext
from ricknad.generator.templates.base import Archetype
from ricknad.generator.templates.common import (
    OWNABLE,
    OZ,
    OZU,
    direct_bases,
    guard,
    override_clause,
    pausable_rule,
    pause_functions,
    roles_rule,
    roles_upgradeable_rule,
)
from ricknad.generator.types import ContractType, Feature

DEFAULT_CAP = 1_000_000


def _cap(ctx: RuleContext) -> int:
    return ctx.parameters.supply or DEFAULT_CAP


def _mint_rule(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(
        add_functions=(f"""
        function mint(address to, uint256 amount) public {guard(ctx, "MINTER_ROLE")} {{
            _mint(to, amount);
        }}
        """,),
        requires_admin=True,
    )


BATCH_TRANSFER = """
function batchTransfer(address[] calldata recipients, uint256[] calldata amounts) external returns (bool) {
    require(recipients.length == amounts.length, "Length mismatch");
    for (uint256 i = 0; i < recipients.length; i++) {
        _transfer(msg.sender, recipients[i], amounts[i]);
    }
    return true;
}
"""

TIME_LOCK = FeatureRule(
    add_variables=("mapping(address => uint256) public lockedUntil;",),
    add_events=("event TokensLocked(address indexed account, uint256 until);",),
    add_functions=("""
    function lockTokens(uint256 duration) external {
        lockedUntil[msg.sender] = block.timestamp + duration;
        emit TokensLocked(msg.sender, lockedUntil[msg.sender]);
    }
    """,),
)


def _transfer_checks(ctx: RuleContext) -> list[str]:
    checks = []
    if ctx.has(Feature.SOULBOUND):
        checks.append('require(from == address(0) || to == address(0), "Soulbound: transfers disabled");')
    if ctx.has(Feature.TIMELOCK):
        checks.append('require(from == address(0) || block.timestamp >= lockedUntil[from], "Tokens are time-locked");')
    return checks


def _update_override(bases: list[str], modifiers: str, checks: list[str]) -> str:
    lines = [
        "function _update(address from, address to, uint256 value)",
        "    internal",
        f"    {override_clause(bases)}",
    ]
    if modifiers:
        lines.append(f"    {modifiers}")
    lines.append("{")
    lines.extend(f"    {check}" for check in checks)
    lines.append("    super._update(from, to, value);")
    lines.append("}")
    return "\n".join(lines)


# ---------------------------------------------------------------- ERC20

def _erc20_base(ctx: RuleContext) -> ContractParts:
    return ContractParts(
        imports=[f"{OZ}/token/ERC20/ERC20.sol"],
        inheritance=["ERC20"],
        constructor_params=["uint256 initialSupply"],
        constructor_calls={"ERC20": f'"{ctx.name}", "{ctx.parameters.symbol}"'},
        constructor_body=["_mint(msg.sender, initialSupply * 10 ** decimals());"],
    )


def _capped_rule(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(
        add_imports=(f"{OZ}/token/ERC20/extensions/ERC20Capped.sol",),
        replace_inheritance=(("ERC20", "ERC20Capped"),),
        add_constructor_calls=(("ERC20Capped", f"{_cap(ctx)} * 10 ** 18"),),
    )


def _permit_rule(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(
        add_imports=(f"{OZ}/token/ERC20/extensions/ERC20Permit.sol",),
        add_inheritance=("ERC20Permit",),
        add_constructor_calls=(("ERC20Permit", f'"{ctx.name}"'),),
    )


ERC20_RULES = (
    (Feature.CAPPED, _capped_rule),
    (Feature.BURNABLE, FeatureRule(
        add_imports=(f"{OZ}/token/ERC20/extensions/ERC20Burnable.sol",),
        add_inheritance=("ERC20Burnable",),
    )),
    (Feature.PAUSABLE, pausable_rule),
    (Feature.OWNABLE, OWNABLE),
    (Feature.ROLES, roles_rule("MINTER_ROLE", "PAUSER_ROLE")),
    (Feature.MINTABLE, _mint_rule),
    (Feature.PERMIT, _permit_rule),
    (Feature.BATCHABLE, FeatureRule(add_functions=(BATCH_TRANSFER,))),
    (Feature.TIMELOCK, TIME_LOCK),
    (Feature.SOULBOUND, FeatureRule()),
)


def _erc20_finalize(parts: ContractParts, ctx: RuleContext) -> None:
    checks = _transfer_checks(ctx)
    paused = ctx.has(Feature.PAUSABLE)
    if not (checks or paused):
        return
    bases = direct_bases(parts, ("ERC20", "ERC20Capped"))
    parts.functions.append(_update_override(bases, "whenNotPaused" if paused else "", checks))


ERC20 = Archetype(
    type=ContractType.ERC20,
    description="ERC20 Token Contract",
    base_parts=_erc20_base,
    rules=ERC20_RULES,
    finalize=_erc20_finalize,
)


# ---------------------------------------------------------- upgradeable

UPGRADEABLE_UPDATE_BASES = ("ERC20Upgradeable", "ERC20CappedUpgradeable", "ERC20PausableUpgradeable")


def _upgradeable_base(ctx: RuleContext) -> ContractParts:
    return ContractParts(
        imports=[
            f"{OZU}/proxy/utils/Initializable.sol",
            f"{OZU}/token/ERC20/ERC20Upgradeable.sol",
            f"{OZU}/access/OwnableUpgradeable.sol",
            f"{OZU}/proxy/utils/UUPSUpgradeable.sol",
        ],
        inheritance=["Initializable", "ERC20Upgradeable", "OwnableUpgradeable", "UUPSUpgradeable"],
        constructor_annotations=["/// @custom:oz-upgrades-unsafe-allow constructor"],
        constructor_body=["_disableInitializers();"],
        initializer_calls={
            "ERC20Upgradeable": f'__ERC20_init("{ctx.name}", "{ctx.parameters.symbol}");',
            "OwnableUpgradeable": "__Ownable_init(msg.sender);",
            "UUPSUpgradeable": "__UUPSUpgradeable_init();",
        },
    )


def _upgradeable_capped(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(
        add_imports=(f"{OZU}/token/ERC20/extensions/ERC20CappedUpgradeable.sol",),
        replace_inheritance=(("ERC20Upgradeable", "ERC20CappedUpgradeable"),),
        add_initializer_calls=(("ERC20CappedUpgradeable", f"__ERC20Capped_init({_cap(ctx)} * 10 ** 18);"),),
    )


def _upgradeable_pausable(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(
        add_imports=(f"{OZU}/token/ERC20/extensions/ERC20PausableUpgradeable.sol",),
        add_inheritance=("ERC20PausableUpgradeable",),
        add_initializer_calls=(("ERC20PausableUpgradeable", "__ERC20Pausable_init();"),),
        add_functions=(pause_functions(ctx),),
        requires_admin=True,
    )


def _upgradeable_permit(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(
        add_imports=(f"{OZU}/token/ERC20/extensions/ERC20PermitUpgradeable.sol",),
        add_inheritance=("ERC20PermitUpgradeable",),
        add_initializer_calls=(("ERC20PermitUpgradeable", f'__ERC20Permit_init("{ctx.name}");'),),
    )


UPGRADEABLE_RULES = (
    (Feature.CAPPED, _upgradeable_capped),
    (Feature.BURNABLE, FeatureRule(
        add_imports=(f"{OZU}/token/ERC20/extensions/ERC20BurnableUpgradeable.sol",),
        add_inheritance=("ERC20BurnableUpgradeable",),
        add_initializer_calls=(("ERC20BurnableUpgradeable", "__ERC20Burnable_init();"),),
    )),
    (Feature.PAUSABLE, _upgradeable_pausable),
    (Feature.OWNABLE, FeatureRule()),
    (Feature.ROLES, roles_upgradeable_rule("MINTER_ROLE", "PAUSER_ROLE", "UPGRADER_ROLE")),
    (Feature.MINTABLE, _mint_rule),
    (Feature.PERMIT, _upgradeable_permit),
    (Feature.BATCHABLE, FeatureRule(add_functions=(BATCH_TRANSFER,))),
    (Feature.UUPS, FeatureRule()),
    (Feature.TRANSPARENT_UPGRADEABLE, FeatureRule(
        remove_imports=(f"{OZU}/proxy/utils/UUPSUpgradeable.sol",),
        remove_inheritance=("UUPSUpgradeable",),
    )),
)


def _upgradeable_finalize(parts: ContractParts, ctx: RuleContext) -> None:
    bases = direct_bases(parts, UPGRADEABLE_UPDATE_BASES)
    if len(bases) > 1:
        parts.functions.append(_update_override(bases, "", []))

    if "UUPSUpgradeable" in parts.inheritance:
        parts.functions.append(f"""
        function _authorizeUpgrade(address newImplementation)
            internal
            override
            {guard(ctx, "UPGRADER_ROLE")}
        {{}}
        """)


ERC20_UPGRADEABLE = Archetype(
    type=ContractType.ERC20_UPGRADEABLE,
    description="Upgradeable ERC20 Token Contract",
    base_parts=_upgradeable_base,
    rules=UPGRADEABLE_RULES,
    finalize=_upgradeable_finalize,
    admin_rule=None,
)
