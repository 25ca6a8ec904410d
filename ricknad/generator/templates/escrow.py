"""Three-party native-currency escrow."""

from ricknad.generator.rules import ContractParts, FeatureRule, RuleContext
from ricknad.generator.templates.base import Archetype
from ricknad.generator.templates.common import (
    OWNABLE,
    REENTRANCY_GUARD,
    pausable_rule,
    roles_rule,
)
from ricknad.generator.types import ContractType, Feature

DEFAULT_FEE_BPS = 100


def _base(ctx: RuleContext) -> ContractParts:
    timed = ctx.has(Feature.TIMELOCK)
    deadline_field = "\n                uint256 deadline;" if timed else ""
    deadline_init = ",\n                    deadline: block.timestamp + duration" if timed else ""
    create_params = "address seller, address arbiter, uint256 duration" if timed else "address seller, address arbiter"
    create_modifiers = " whenNotPaused" if ctx.has(Feature.PAUSABLE) else ""
    fee_lines = (
        "\n                uint256 fee = (amount * feeBps) / 10_000;"
        "\n                accruedFees += fee;"
        "\n                amount -= fee;"
    ) if ctx.has(Feature.ROYALTIES) else ""

    return ContractParts(
        imports=[REENTRANCY_GUARD],
        inheritance=["ReentrancyGuard"],
        variables=[
            "enum DealState { Funded, Released, Refunded }",
            f"""
            struct Deal {{
                address buyer;
                address seller;
                address arbiter;
                uint256 amount;{deadline_field}
                DealState state;
            }}
            """,
            "uint256 public dealCount;",
            "mapping(uint256 => Deal) public deals;",
        ],
        events=[
            "event DealCreated(uint256 indexed dealId, address indexed buyer, address indexed seller, uint256 amount);",
            "event DealReleased(uint256 indexed dealId, uint256 amount);",
            "event DealRefunded(uint256 indexed dealId, uint256 amount);",
        ],
        modifiers=["""
        modifier inState(uint256 dealId, DealState state) {
            require(dealId < dealCount, "Deal does not exist");
            require(deals[dealId].state == state, "Invalid deal state");
            _;
        }
        """],
        functions=[
            f"""
            function createDeal({create_params}) external payable{create_modifiers} returns (uint256) {{
                require(msg.value > 0, "Deposit required");
                require(seller != address(0) && arbiter != address(0), "Invalid party");
                uint256 dealId = dealCount++;
                deals[dealId] = Deal({{
                    buyer: msg.sender,
                    seller: seller,
                    arbiter: arbiter,
                    amount: msg.value{deadline_init},
                    state: DealState.Funded
                }});
                emit DealCreated(dealId, msg.sender, seller, msg.value);
                return dealId;
            }}
            """,
            f"""
            function release(uint256 dealId) external nonReentrant inState(dealId, DealState.Funded) {{
                Deal storage deal = deals[dealId];
                require(msg.sender == deal.buyer || msg.sender == deal.arbiter, "Not authorized");
                deal.state = DealState.Released;
                uint256 amount = deal.amount;{fee_lines}
                _payout(deal.seller, amount);
                emit DealReleased(dealId, amount);
            }}
            """,
            """
            function refund(uint256 dealId) external nonReentrant inState(dealId, DealState.Funded) {
                Deal storage deal = deals[dealId];
                require(msg.sender == deal.seller || msg.sender == deal.arbiter, "Not authorized");
                deal.state = DealState.Refunded;
                _payout(deal.buyer, deal.amount);
                emit DealRefunded(dealId, deal.amount);
            }
            """,
            """
            function _payout(address to, uint256 amount) internal {
                (bool ok, ) = payable(to).call{value: amount}("");
                require(ok, "Transfer failed");
            }
            """,
        ],
    )


def _fee_rule(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(
        add_variables=(
            f"uint256 public feeBps = {DEFAULT_FEE_BPS};",
            "uint256 public accruedFees;",
        ),
        add_functions=(f"""
        function setFee(uint256 newFeeBps) external {ctx.admin_guard} {{
            require(newFeeBps <= 1_000, "Fee too high");
            feeBps = newFeeBps;
        }}

        function withdrawFees(address to) external {ctx.admin_guard} nonReentrant {{
            uint256 amount = accruedFees;
            accruedFees = 0;
            _payout(to, amount);
        }}
        """,),
        requires_admin=True,
    )


DEADLINE_REFUND = FeatureRule(add_functions=("""
function claimExpired(uint256 dealId) external nonReentrant inState(dealId, DealState.Funded) {
    Deal storage deal = deals[dealId];
    require(msg.sender == deal.buyer, "Not the buyer");
    require(block.timestamp > deal.deadline, "Deadline not reached");
    deal.state = DealState.Refunded;
    _payout(deal.buyer, deal.amount);
    emit DealRefunded(dealId, deal.amount);
}
""",))


RULES = (
    (Feature.OWNABLE, OWNABLE),
    (Feature.PAUSABLE, pausable_rule),
    (Feature.ROLES, roles_rule("PAUSER_ROLE")),
    (Feature.ROYALTIES, _fee_rule),
    (Feature.TIMELOCK, DEADLINE_REFUND),
)


ESCROW = Archetype(
    type=ContractType.ESCROW,
    description="Escrow Contract",
    base_parts=_base,
    rules=RULES,
)
