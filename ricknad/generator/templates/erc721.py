"""ERC721 collections."""

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

DEFAULT_MAX_SUPPLY = 10_000
MINT_PRICE = "0.01 ether"
DEFAULT_ROYALTY_BPS = 500

UPDATE_BASES = ("ERC721", "ERC721Enumerable")
TOKEN_URI_BASES = ("ERC721", "ERC721URIStorage")
INTERFACE_BASES = ("ERC721", "ERC721Enumerable", "ERC721URIStorage", "ERC2981", "AccessControl")


def _base(ctx: RuleContext) -> ContractParts:
    cap_check = (
        '\n                require(tokenId < MAX_SUPPLY, "Max supply reached");'
        if ctx.has(Feature.CAPPED) else ""
    )
    return ContractParts(
        imports=[f"{OZ}/token/ERC721/ERC721.sol", f"{OZ}/access/Ownable.sol"],
        inheritance=["ERC721", "Ownable"],
        variables=["uint256 private _nextTokenId;"],
        constructor_calls={
            "ERC721": f'"{ctx.name}", "{ctx.parameters.symbol}"',
            "Ownable": "msg.sender",
        },
        functions=[
            f"""
            function safeMint(address to) public {guard(ctx, "MINTER_ROLE")} returns (uint256) {{
                return _mintNext(to);
            }}
            """,
            f"""
            function _mintNext(address to) internal returns (uint256) {{
                uint256 tokenId = _nextTokenId++;{cap_check}
                _safeMint(to, tokenId);
                return tokenId;
            }}
            """,
        ],
    )


def _capped_rule(ctx: RuleContext) -> FeatureRule:
    cap = ctx.parameters.supply or DEFAULT_MAX_SUPPLY
    return FeatureRule(add_variables=(f"uint256 public constant MAX_SUPPLY = {cap};",))


def _mint_rule(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(
        add_variables=(f"uint256 public constant MINT_PRICE = {MINT_PRICE};",),
        add_functions=(f"""
        function mint() public payable returns (uint256) {{
            require(msg.value >= MINT_PRICE, "Insufficient payment");
            return _mintNext(msg.sender);
        }}

        function withdraw() public {ctx.admin_guard} {{
            payable(msg.sender).transfer(address(this).balance);
        }}
        """,),
    )


def _merkle_rule(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(
        add_imports=(f"{OZ}/utils/cryptography/MerkleProof.sol",),
        add_variables=(
            "bytes32 public merkleRoot;",
            "mapping(address => bool) public whitelistClaimed;",
        ),
        add_functions=(f"""
        function setMerkleRoot(bytes32 root) public {ctx.admin_guard} {{
            merkleRoot = root;
        }}

        function whitelistMint(bytes32[] calldata proof) public returns (uint256) {{
            require(!whitelistClaimed[msg.sender], "Already claimed");
            bytes32 leaf = keccak256(abi.encodePacked(msg.sender));
            require(MerkleProof.verify(proof, merkleRoot, leaf), "Invalid proof");
            whitelistClaimed[msg.sender] = true;
            return _mintNext(msg.sender);
        }}
        """,),
    )


def _metadata_rule(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(
        add_imports=(f"{OZ}/token/ERC721/extensions/ERC721URIStorage.sol",),
        add_inheritance=("ERC721URIStorage",),
        add_functions=(f"""
        function setBaseURI(string memory baseURI_) public {ctx.admin_guard} {{
            _baseTokenURI = baseURI_;
        }}

        function setTokenURI(uint256 tokenId, string memory uri) public {ctx.admin_guard} {{
            _setTokenURI(tokenId, uri);
        }}
        """,),
    )


def _reveal_rule(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(
        add_variables=(
            "bool public revealed;",
            'string private _hiddenURI = "ipfs://hidden/";',
        ),
        add_events=("event Revealed(string baseURI);",),
        add_functions=(f"""
        function reveal(string memory baseURI_) public {ctx.admin_guard} {{
            _baseTokenURI = baseURI_;
            revealed = true;
            emit Revealed(baseURI_);
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
    function batchMint(address to, uint256 amount) public {guard(ctx, "MINTER_ROLE")} {{
        for (uint256 i = 0; i < amount; i++) {{
            _mintNext(to);
        }}
    }}
    """,))


RULES = (
    (Feature.ENUMERABLE, FeatureRule(
        add_imports=(f"{OZ}/token/ERC721/extensions/ERC721Enumerable.sol",),
        add_inheritance=("ERC721Enumerable",),
    )),
    (Feature.METADATA, _metadata_rule),
    (Feature.BURNABLE, FeatureRule(
        add_imports=(f"{OZ}/token/ERC721/extensions/ERC721Burnable.sol",),
        add_inheritance=("ERC721Burnable",),
    )),
    (Feature.PAUSABLE, pausable_rule),
    (Feature.ROYALTIES, _royalties_rule),
    (Feature.OWNABLE, FeatureRule()),
    (Feature.ROLES, roles_rule("MINTER_ROLE", "PAUSER_ROLE")),
    (Feature.CAPPED, _capped_rule),
    (Feature.MINTABLE, _mint_rule),
    (Feature.MERKLE_PROOF, _merkle_rule),
    (Feature.REVEAL, _reveal_rule),
    (Feature.BATCHABLE, _batch_rule),
    (Feature.SOULBOUND, FeatureRule()),
)


def _finalize(parts: ContractParts, ctx: RuleContext) -> None:
    if ctx.has_any(Feature.METADATA, Feature.REVEAL):
        parts.variables.insert(0, "string private _baseTokenURI;")
        value = "revealed ? _baseTokenURI : _hiddenURI" if ctx.has(Feature.REVEAL) else "_baseTokenURI"
        parts.functions.append(f"""
        function _baseURI() internal view override returns (string memory) {{
            return {value};
        }}
        """)

    update_bases = direct_bases(parts, UPDATE_BASES)
    if len(update_bases) > 1 or ctx.has_any(Feature.PAUSABLE, Feature.SOULBOUND):
        lines = [
            "function _update(address to, uint256 tokenId, address auth)",
            "    internal",
            f"    {override_clause(update_bases)}",
        ]
        if ctx.has(Feature.PAUSABLE):
            lines.append("    whenNotPaused")
        lines.extend(["    returns (address)", "{"])
        if ctx.has(Feature.SOULBOUND):
            lines.append("    address from = _ownerOf(tokenId);")
            lines.append('    require(from == address(0) || to == address(0), "Soulbound: transfers disabled");')
        lines.extend(["    return super._update(to, tokenId, auth);", "}"])
        parts.functions.append("\n".join(lines))

    if len(update_bases) > 1:
        parts.functions.append(f"""
        function _increaseBalance(address account, uint128 value)
            internal
            {override_clause(update_bases)}
        {{
            super._increaseBalance(account, value);
        }}
        """)

    uri_bases = direct_bases(parts, TOKEN_URI_BASES)
    if len(uri_bases) > 1:
        parts.functions.append(f"""
        function tokenURI(uint256 tokenId)
            public
            view
            {override_clause(uri_bases)}
            returns (string memory)
        {{
            return super.tokenURI(tokenId);
        }}
        """)

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


ERC721 = Archetype(
    type=ContractType.ERC721,
    description="ERC721 NFT Contract",
    base_parts=_base,
    rules=RULES,
    finalize=_finalize,
)
