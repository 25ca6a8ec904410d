"""Rules and helpers shared by several archetypes."""

from ricknad.generator.rules import ContractParts, FeatureRule, RuleContext
from ricknad.generator.types import Feature

OZ = "@openzeppelin/contracts"
OZU = "@openzeppelin/contracts-upgradeable"

OWNABLE = FeatureRule(
    add_imports=(f"{OZ}/access/Ownable.sol",),
    add_inheritance=("Ownable",),
    add_constructor_calls=(("Ownable", "msg.sender"),),
)

OWNABLE_UPGRADEABLE = FeatureRule(
    add_imports=(f"{OZU}/access/OwnableUpgradeable.sol",),
    add_inheritance=("OwnableUpgradeable",),
    add_initializer_calls=(("OwnableUpgradeable", "__Ownable_init(msg.sender);"),),
)

REENTRANCY_GUARD = f"{OZ}/utils/ReentrancyGuard.sol"
IERC20 = f"{OZ}/token/ERC20/IERC20.sol"
SAFE_ERC20 = f"{OZ}/token/ERC20/utils/SafeERC20.sol"


def role_constant(role: str) -> str:
    return f'bytes32 public constant {role} = keccak256("{role}");'


def roles_rule(*roles: str) -> FeatureRule:
    """AccessControl in place of Ownable, granting every role to the deployer."""
    return FeatureRule(
        add_imports=(f"{OZ}/access/AccessControl.sol",),
        replace_inheritance=(("Ownable", "AccessControl"),),
        add_variables=tuple(role_constant(role) for role in roles),
        add_constructor_body=("_grantRole(DEFAULT_ADMIN_ROLE, msg.sender);",)
        + tuple(f"_grantRole({role}, msg.sender);" for role in roles),
    )


def roles_upgradeable_rule(*roles: str) -> FeatureRule:
    return FeatureRule(
        add_imports=(f"{OZU}/access/AccessControlUpgradeable.sol",),
        replace_inheritance=(("OwnableUpgradeable", "AccessControlUpgradeable"),),
        add_variables=tuple(role_constant(role) for role in roles),
        add_initializer_calls=(("AccessControlUpgradeable", "__AccessControl_init();"),),
        add_initializer_body=("_grantRole(DEFAULT_ADMIN_ROLE, msg.sender);",)
        + tuple(f"_grantRole({role}, msg.sender);" for role in roles),
    )


def guard(ctx: RuleContext, role: str | None = None) -> str:
    """Modifier for a privileged function, role-specific under `roles`."""
    if role and ctx.has(Feature.ROLES):
        return f"onlyRole({role})"
    return ctx.admin_guard


def pause_functions(ctx: RuleContext, role: str | None = "PAUSER_ROLE") -> str:
    g = guard(ctx, role)
    return f"""
    function pause() public {g} {{
        _pause();
    }}

    function unpause() public {g} {{
        _unpause();
    }}
    """


def pausable_rule(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(
        add_imports=(f"{OZ}/utils/Pausable.sol",),
        add_inheritance=("Pausable",),
        add_functions=(pause_functions(ctx),),
        requires_admin=True,
    )


def override_clause(bases: list[str]) -> str:
    """`override` or `override(A, B)` for the bases defining a function."""
    if len(bases) <= 1:
        return "override"
    return f"override({', '.join(bases)})"


def direct_bases(parts: ContractParts, candidates: tuple[str, ...]) -> list[str]:
    """Direct parents that define a function, in inheritance order."""
    return [parent for parent in parts.inheritance if parent in candidates]
