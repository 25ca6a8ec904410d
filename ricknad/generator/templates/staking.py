"""Staking pool paying a reward token through a reward-per-token accumulator."""

from ricknad.generator.rules import ContractParts, FeatureRule, RuleContext
from ricknad.generator.templates.base import Archetype
from ricknad.generator.templates.common import (
    IERC20,
    OWNABLE,
    REENTRANCY_GUARD,
    SAFE_ERC20,
    pausable_rule,
    roles_rule,
)
from ricknad.generator.types import ContractType, Feature


def _base(ctx: RuleContext) -> ContractParts:
    stake_modifiers = "whenNotPaused nonReentrant" if ctx.has(Feature.PAUSABLE) else "nonReentrant"
    record_stake = "\n                stakedAt[msg.sender] = block.timestamp;" if ctx.has(Feature.TIMELOCK) else ""
    lock_check = (
        '\n                require(block.timestamp >= stakedAt[msg.sender] + LOCK_PERIOD, "Stake is locked");'
        if ctx.has(Feature.TIMELOCK) else ""
    )
    return ContractParts(
        imports=[IERC20, SAFE_ERC20, REENTRANCY_GUARD],
        inheritance=["ReentrancyGuard"],
        using=["using SafeERC20 for IERC20;"],
        variables=[
            "IERC20 public immutable stakingToken;",
            "IERC20 public immutable rewardToken;",
            "uint256 public rewardRate;",
            "uint256 public lastUpdateTime;",
            "uint256 public rewardPerTokenStored;",
            "uint256 public totalStaked;",
            "mapping(address => uint256) public userRewardPerTokenPaid;",
            "mapping(address => uint256) public rewards;",
            "mapping(address => uint256) public balanceOf;",
        ],
        events=[
            "event Staked(address indexed user, uint256 amount);",
            "event Withdrawn(address indexed user, uint256 amount);",
            "event RewardPaid(address indexed user, uint256 reward);",
        ],
        constructor_params=["address _stakingToken", "address _rewardToken", "uint256 _rewardRate"],
        constructor_body=[
            "stakingToken = IERC20(_stakingToken);",
            "rewardToken = IERC20(_rewardToken);",
            "rewardRate = _rewardRate;",
            "lastUpdateTime = block.timestamp;",
        ],
        modifiers=["""
        modifier updateReward(address account) {
            rewardPerTokenStored = rewardPerToken();
            lastUpdateTime = block.timestamp;
            if (account != address(0)) {
                rewards[account] = earned(account);
                userRewardPerTokenPaid[account] = rewardPerTokenStored;
            }
            _;
        }
        """],
        functions=[
            """
            function rewardPerToken() public view returns (uint256) {
                if (totalStaked == 0) {
                    return rewardPerTokenStored;
                }
                return rewardPerTokenStored + ((block.timestamp - lastUpdateTime) * rewardRate * 1e18) / totalStaked;
            }
            """,
            """
            function earned(address account) public view returns (uint256) {
                return (balanceOf[account] * (rewardPerToken() - userRewardPerTokenPaid[account])) / 1e18 + rewards[account];
            }
            """,
            f"""
            function stake(uint256 amount) external {stake_modifiers} updateReward(msg.sender) {{
                require(amount > 0, "Cannot stake 0");
                totalStaked += amount;
                balanceOf[msg.sender] += amount;{record_stake}
                stakingToken.safeTransferFrom(msg.sender, address(this), amount);
                emit Staked(msg.sender, amount);
            }}
            """,
            f"""
            function withdraw(uint256 amount) public nonReentrant updateReward(msg.sender) {{
                require(amount > 0, "Cannot withdraw 0");
                require(balanceOf[msg.sender] >= amount, "Not enough staked");{lock_check}
                totalStaked -= amount;
                balanceOf[msg.sender] -= amount;
                stakingToken.safeTransfer(msg.sender, amount);
                emit Withdrawn(msg.sender, amount);
            }}
            """,
            """
            function getReward() public nonReentrant updateReward(msg.sender) {
                uint256 reward = rewards[msg.sender];
                if (reward > 0) {
                    rewards[msg.sender] = 0;
                    rewardToken.safeTransfer(msg.sender, reward);
                    emit RewardPaid(msg.sender, reward);
                }
            }
            """,
            """
            function exit() external {
                withdraw(balanceOf[msg.sender]);
                getReward();
            }
            """,
        ],
    )


def _timelock_rule(ctx: RuleContext) -> FeatureRule:
    return FeatureRule(add_variables=(
        f"uint256 public constant LOCK_PERIOD = {ctx.parameters.staking_period_days} days;",
        "mapping(address => uint256) public stakedAt;",
    ))


def _finalize(parts: ContractParts, ctx: RuleContext) -> None:
    if ctx.has_any(Feature.OWNABLE, Feature.ROLES):
        parts.functions.append(f"""
        function setRewardRate(uint256 _rewardRate) external {ctx.admin_guard} updateReward(address(0)) {{
            rewardRate = _rewardRate;
        }}
        """)


RULES = (
    (Feature.OWNABLE, OWNABLE),
    (Feature.PAUSABLE, pausable_rule),
    (Feature.ROLES, roles_rule("PAUSER_ROLE")),
    (Feature.TIMELOCK, _timelock_rule),
)


STAKING = Archetype(
    type=ContractType.STAKING,
    description="Staking Contract",
    base_parts=_base,
    rules=RULES,
    finalize=_finalize,
)
