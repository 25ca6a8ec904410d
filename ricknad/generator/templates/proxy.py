"""Upgradeable implementation contracts (UUPS, transparent or diamond facet)."""

from ricknad.generator.rules import ContractParts, FeatureRule, RuleContext
from ricknad.generator.templates.base import Archetype
from ricknad.generator.templates.common import OZU, guard, pause_functions, roles_upgradeable_rule
from ricknad.generator.types import ContractType, Feature

UUPS_IMPORT = f"{OZU}/proxy/utils/UUPSUpgradeable.sol"

WITHOUT_UUPS = FeatureRule(remove_imports=(UUPS_IMPORT,), remove_inheritance=("UUPSUpgradeable",))


def _base(ctx: RuleContext) -> ContractParts:
    paused = " whenNotPaused" if ctx.has(Feature.PAUSABLE) else ""
    return ContractParts(
        imports=[
            f"{OZU}/proxy/utils/Initializable.sol",
            f"{OZU}/access/OwnableUpgradeable.sol",
            UUPS_IMPORT,
        ],
        inheritance=["Initializable", "OwnableUpgradeable", "UUPSUpgradeable"],
        variables=["uint256 public value;"],
        events=["event ValueChanged(uint256 newValue);"],
        constructor_annotations=["/// @custom:oz-upgrades-unsafe-allow constructor"],
        constructor_body=["_disableInitializers();"],
        initializer_calls={
            "OwnableUpgradeable": "__Ownable_init(msg.sender);",
            "UUPSUpgradeable": "__UUPSUpgradeable_init();",
        },
        functions=[
            f"""
            function setValue(uint256 newValue) public {guard(ctx)}{paused} {{
                value = newValue;
                emit ValueChanged(newValue);
            }}
            """,
            """
            function getValue() public view returns (uint256) {
                return value;
            }
            """,
        ],
    )


def _pausable_rule(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(
        add_imports=(f"{OZU}/utils/PausableUpgradeable.sol",),
        add_inheritance=("PausableUpgradeable",),
        add_initializer_calls=(("PausableUpgradeable", "__Pausable_init();"),),
        add_functions=(pause_functions(ctx),),
    )


def _diamond_rule(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(
        remove_imports=(UUPS_IMPORT,),
        remove_inheritance=("UUPSUpgradeable",),
        add_variables=(
            f'bytes32 internal constant DIAMOND_STORAGE_POSITION = keccak256("ricknad.diamond.storage.{ctx.name}");',
        ),
    )


RULES = (
    (Feature.UUPS, FeatureRule()),
    (Feature.TRANSPARENT_UPGRADEABLE, WITHOUT_UUPS),
    (Feature.DIAMOND, _diamond_rule),
    (Feature.PAUSABLE, _pausable_rule),
    (Feature.OWNABLE, FeatureRule()),
    (Feature.ROLES, roles_upgradeable_rule("UPGRADER_ROLE")),
)


def _finalize(parts: ContractParts, ctx: RuleContext) -> None:
    if "UUPSUpgradeable" in parts.inheritance:
        parts.functions.append(f"""
        function _authorizeUpgrade(address newImplementation) internal override {guard(ctx, "UPGRADER_ROLE")} {{}}
        """)


def _notes(ctx: RuleContext) -> list[str]:
    if ctx.has(Feature.DIAMOND):
        return ["Register this contract as a facet of an EIP-2535 diamond"]
    if ctx.has(Feature.TRANSPARENT_UPGRADEABLE):
        return ["Deploy behind a TransparentUpgradeableProxy"]
    return ["Deploy behind an ERC1967Proxy and call initialize()"]


PROXY = Archetype(
    type=ContractType.PROXY,
    description="Upgradeable Contract",
    base_parts=_base,
    rules=RULES,
    finalize=_finalize,
    admin_rule=None,
    notes=_notes,
)
