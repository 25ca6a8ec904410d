"""ERC1155 multi-token contracts."""

from ricknad.generator.rules import ContractParts, FeatureRule, RuleContext
from ricknad.generator.templates.base import Archetype
from ricknad.generator.templates.common import (
    OZ,
    direct_bases,
    guard,
    override_clause,
    pausable_rule,
    roles_rule,
)
from ricknad.generator.types import ContractType, Feature

DEFAULT_URI = "https://api.ricknad.xyz/metadata/{id}.json"
DEFAULT_ROYALTY_BPS = 500

UPDATE_BASES = ("ERC1155", "ERC1155Supply")
INTERFACE_BASES = ("ERC1155", "ERC2981", "AccessControl")


def _base(ctx: RuleContext) -> ContractParts:
    g = guard(ctx, "MINTER_ROLE")
    return ContractParts(
        imports=[f"{OZ}/token/ERC1155/ERC1155.sol", f"{OZ}/access/Ownable.sol"],
        inheritance=["ERC1155", "Ownable"],
        constructor_calls={"ERC1155": f'"{DEFAULT_URI}"', "Ownable": "msg.sender"},
        functions=[f"""
        function mint(address account, uint256 id, uint256 amount, bytes memory data) public {g} {{
            _mint(account, id, amount, data);
        }}

        function mintBatch(address to, uint256[] memory ids, uint256[] memory amounts, bytes memory data)
            public
            {g}
        {{
            _mintBatch(to, ids, amounts, data);
        }}
        """],
    )


def _metadata_rule(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(add_functions=(f"""
    function setURI(string memory newuri) public {ctx.admin_guard} {{
        _setURI(newuri);
    }}
    """,))


def _capped_rule(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(
        add_imports=(f"{OZ}/token/ERC1155/extensions/ERC1155Supply.sol",),
        add_inheritance=("ERC1155Supply",),
        add_variables=("mapping(uint256 => uint256) public maxSupply;",),
        add_functions=(f"""
        function setMaxSupply(uint256 id, uint256 cap) public {ctx.admin_guard} {{
            require(cap >= totalSupply(id), "Cap below current supply");
            maxSupply[id] = cap;
        }}
        """,),
    )


def _royalties_rule(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(
        add_imports=(f"{OZ}/token/common/ERC2981.sol",),
        add_inheritance=("ERC2981",),
        add_constructor_body=(f"_setDefaultRoyalty(msg.sender, {DEFAULT_ROYALTY_BPS});",),
        add_functions=(f"""
        function setDefaultRoyalty(address receiver, uint96 feeNumerator) public {ctx.admin_guard} {{
            _setDefaultRoyalty(receiver, feeNumerator);
        }}
        """,),
    )


def _batch_rule(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(add_functions=(f"""
    function airdrop(address[] calldata recipients, uint256 id, uint256 amount) public {guard(ctx, "MINTER_ROLE")} {{
        for (uint256 i = 0; i < recipients.length; i++) {{
            _mint(recipients[i], id, amount, "");
        }}
    }}
    """,))


RULES = (
    (Feature.METADATA, _metadata_rule),
    (Feature.BURNABLE, FeatureRule(
        add_imports=(f"{OZ}/token/ERC1155/extensions/ERC1155Burnable.sol",),
        add_inheritance=("ERC1155Burnable",),
    )),
    (Feature.PAUSABLE, pausable_rule),
    (Feature.CAPPED, _capped_rule),
    (Feature.ROYALTIES, _royalties_rule),
    (Feature.OWNABLE, FeatureRule()),
    (Feature.ROLES, roles_rule("MINTER_ROLE", "PAUSER_ROLE")),
    (Feature.MINTABLE, FeatureRule()),
    (Feature.BATCHABLE, _batch_rule),
    (Feature.SOULBOUND, FeatureRule()),
)


def _finalize(parts: ContractParts, ctx: RuleContext) -> None:
    update_bases = direct_bases(parts, UPDATE_BASES)
    if ctx.has_any(Feature.PAUSABLE, Feature.SOULBOUND, Feature.CAPPED):
        lines = [
            "function _update(address from, address to, uint256[] memory ids, uint256[] memory values)",
            "    internal",
            f"    {override_clause(update_bases)}",
        ]
        if ctx.has(Feature.PAUSABLE):
            lines.append("    whenNotPaused")
        lines.append("{")
        if ctx.has(Feature.SOULBOUND):
            lines.append('    require(from == address(0) || to == address(0), "Soulbound: transfers disabled");')
        if ctx.has(Feature.CAPPED):
            lines.extend([
                "    if (from == address(0)) {",
                "        for (uint256 i = 0; i < ids.length; i++) {",
                "            uint256 cap = maxSupply[ids[i]];",
                '            require(cap == 0 || totalSupply(ids[i]) + values[i] <= cap, "Max supply exceeded");',
                "        }",
                "    }",
            ])
        lines.extend(["    super._update(from, to, ids, values);", "}"])
        parts.functions.append("\n".join(lines))

    interface_bases = direct_bases(parts, INTERFACE_BASES)
    if len(interface_bases) > 1:
        parts.functions.append(f"""
        function supportsInterface(bytes4 interfaceId)
            public
            view
            {override_clause(interface_bases)}
            returns (bool)
        {{
            return super.supportsInterface(interfaceId);
        }}
        """)


ERC1155 = Archetype(
    type=ContractType.ERC1155,
    description="ERC1155 Multi-Token Contract",
    base_parts=_base,
    rules=RULES,
    finalize=_finalize,
)
