"""Linear token vesting with optional cliff."""

from ricknad.generator.rules import ContractParts, FeatureRule, RuleContext
from ricknad.generator.templates.base import Archetype
from ricknad.generator.templates.common import (
    IERC20,
    OZ,
    SAFE_ERC20,
    pausable_rule,
    roles_rule,
)
from ricknad.generator.types import ContractType, Feature


def _base(ctx: RuleContext) -> ContractParts:
    g = ctx.admin_guard
    cliff_check = (
        "\n                if (block.timestamp < schedule.startTime + CLIFF_DURATION) {"
        "\n                    return 0;"
        "\n                }"
    ) if ctx.has(Feature.CLIFF_VESTING) else ""
    release_modifiers = " whenNotPaused" if ctx.has(Feature.PAUSABLE) else ""
    return ContractParts(
        imports=[IERC20, SAFE_ERC20, f"{OZ}/access/Ownable.sol"],
        inheritance=["Ownable"],
        using=["using SafeERC20 for IERC20;"],
        variables=[
            """
            struct VestingSchedule {
                uint256 totalAmount;
                uint256 startTime;
                uint256 releasedAmount;
                bool revocable;
                bool revoked;
            }
            """,
            "IERC20 public immutable token;",
            f"uint256 public constant VESTING_DURATION = {ctx.parameters.vesting_months} * 30 days;",
            "mapping(address => VestingSchedule) public vestingSchedules;",
        ],
        events=[
            "event VestingScheduleCreated(address indexed beneficiary, uint256 amount, uint256 startTime);",
            "event TokensReleased(address indexed beneficiary, uint256 amount);",
            "event VestingRevoked(address indexed beneficiary);",
        ],
        constructor_params=["address _token"],
        constructor_calls={"Ownable": "msg.sender"},
        constructor_body=[
            'require(_token != address(0), "Token cannot be zero address");',
            "token = IERC20(_token);",
        ],
        functions=[
            f"""
            function createVestingSchedule(address beneficiary, uint256 amount, bool revocable) external {g} {{
                require(beneficiary != address(0), "Beneficiary cannot be zero address");
                require(amount > 0, "Amount must be greater than zero");
                require(vestingSchedules[beneficiary].totalAmount == 0, "Vesting schedule already exists");
                token.safeTransferFrom(msg.sender, address(this), amount);
                vestingSchedules[beneficiary] = VestingSchedule({{
                    totalAmount: amount,
                    startTime: block.timestamp,
                    releasedAmount: 0,
                    revocable: revocable,
                    revoked: false
                }});
                emit VestingScheduleCreated(beneficiary, amount, block.timestamp);
            }}
            """,
            f"""
            function release() external{release_modifiers} {{
                VestingSchedule storage schedule = vestingSchedules[msg.sender];
                require(schedule.totalAmount > 0, "No vesting schedule found");
                require(!schedule.revoked, "Vesting has been revoked");
                uint256 amount = _releasable(schedule);
                require(amount > 0, "No tokens are due for release");
                schedule.releasedAmount += amount;
                token.safeTransfer(msg.sender, amount);
                emit TokensReleased(msg.sender, amount);
            }}
            """,
            f"""
            function revoke(address beneficiary) external {g} {{
                VestingSchedule storage schedule = vestingSchedules[beneficiary];
                require(schedule.revocable, "Vesting is not revocable");
                require(!schedule.revoked, "Vesting already revoked");
                uint256 vested = _releasable(schedule);
                if (vested > 0) {{
                    schedule.releasedAmount += vested;
                    token.safeTransfer(beneficiary, vested);
                    emit TokensReleased(beneficiary, vested);
                }}
                uint256 unreleased = schedule.totalAmount - schedule.releasedAmount;
                schedule.revoked = true;
                if (unreleased > 0) {{
                    token.safeTransfer(msg.sender, unreleased);
                }}
                emit VestingRevoked(beneficiary);
            }}
            """,
            """
            function releasableAmount(address beneficiary) public view returns (uint256) {
                VestingSchedule storage schedule = vestingSchedules[beneficiary];
                if (schedule.revoked) {
                    return 0;
                }
                return _releasable(schedule);
            }
            """,
            f"""
            function _releasable(VestingSchedule memory schedule) internal view returns (uint256) {{{cliff_check}
                uint256 elapsed = block.timestamp - schedule.startTime;
                if (elapsed >= VESTING_DURATION) {{
                    return schedule.totalAmount - schedule.releasedAmount;
                }}
                return (schedule.totalAmount * elapsed) / VESTING_DURATION - schedule.releasedAmount;
            }}
            """,
        ],
    )


def _cliff_rule(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(add_variables=(
        f"uint256 public constant CLIFF_DURATION = {ctx.parameters.cliff_months} * 30 days;",
    ))


RULES = (
    (Feature.CLIFF_VESTING, _cliff_rule),
    (Feature.OWNABLE, FeatureRule()),
    (Feature.PAUSABLE, pausable_rule),
    (Feature.ROLES, roles_rule("PAUSER_ROLE")),
)


VESTING = Archetype(
    type=ContractType.VESTING,
    description="Token Vesting Contract",
    base_parts=_base,
    rules=RULES,
)
