"""OpenZeppelin Governor and TimelockController archetypes."""

from ricknad.generator.rules import ContractParts, FeatureRule, RuleContext
from ricknad.generator.templates.base import Archetype
from ricknad.generator.templates.common import OZ
from ricknad.generator.types import ContractType, Feature

# 12 second blocks
BLOCKS_PER_DAY = 7200

GOV = f"{OZ}/governance"
TIMELOCK_CONTROL_BASES = ["Governor", "GovernorTimelockControl"]


def days_to_blocks(days: int) -> int:
    """Voting windows are counted in blocks; zero days means one block."""
    return max(days * BLOCKS_PER_DAY, 1)


def _governor_base(ctx: RuleContext) -> ContractParts:
    params = ctx.parameters
    delay = days_to_blocks(params.voting_delay_days if ctx.has(Feature.VOTING_DELAY) else 0)
    return ContractParts(
        imports=[
            f"{GOV}/Governor.sol",
            f"{GOV}/extensions/GovernorSettings.sol",
            f"{GOV}/extensions/GovernorCountingSimple.sol",
            f"{GOV}/extensions/GovernorVotes.sol",
            f"{GOV}/extensions/GovernorVotesQuorumFraction.sol",
            f"{GOV}/utils/IVotes.sol",
        ],
        inheritance=[
            "Governor",
            "GovernorSettings",
            "GovernorCountingSimple",
            "GovernorVotes",
            "GovernorVotesQuorumFraction",
        ],
        constructor_params=["IVotes _token"],
        constructor_calls={
            "Governor": f'"{ctx.name}"',
            "GovernorSettings": f"{delay}, {days_to_blocks(params.voting_period_days)}, 0",
            "GovernorVotes": "_token",
            "GovernorVotesQuorumFraction": str(params.quorum_percent),
        },
    )


GOVERNOR_RULES = (
    (Feature.VOTING_DELAY, FeatureRule()),
    (Feature.QUORUM, FeatureRule()),
    (Feature.TIMELOCK, FeatureRule(
        add_imports=(f"{GOV}/extensions/GovernorTimelockControl.sol", f"{GOV}/TimelockController.sol"),
        add_inheritance=("GovernorTimelockControl",),
        add_constructor_params=("TimelockController _timelock",),
        add_constructor_calls=(("GovernorTimelockControl", "_timelock"),),
    )),
)


def _view_override(signature: str, bases: str, returns: str, call: str) -> str:
    return (
        f"function {signature}\n"
        "    public\n"
        "    view\n"
        f"    override({bases})\n"
        f"    returns ({returns})\n"
        "{\n"
        f"    return super.{call};\n"
        "}"
    )


OPERATION_PARAMS = (
    "address[] memory targets, uint256[] memory values, bytes[] memory calldatas, bytes32 descriptionHash"
)
OPERATION_ARGS = "targets, values, calldatas, descriptionHash"


def _governor_finalize(parts: ContractParts, ctx: RuleContext) -> None:
    settings = "Governor, GovernorSettings"
    parts.functions.extend([
        _view_override("votingDelay()", settings, "uint256", "votingDelay()"),
        _view_override("votingPeriod()", settings, "uint256", "votingPeriod()"),
        _view_override(
            "quorum(uint256 blockNumber)",
            "Governor, GovernorVotesQuorumFraction",
            "uint256",
            "quorum(blockNumber)",
        ),
    ])

    if "GovernorTimelockControl" in parts.inheritance:
        timelock = ", ".join(TIMELOCK_CONTROL_BASES)
        parts.functions.extend([
            _view_override("state(uint256 proposalId)", timelock, "ProposalState", "state(proposalId)"),
            _view_override(
                "proposalNeedsQueuing(uint256 proposalId)",
                timelock,
                "bool",
                "proposalNeedsQueuing(proposalId)",
            ),
        ])

    parts.functions.append(_view_override("proposalThreshold()", settings, "uint256", "proposalThreshold()"))

    if "GovernorTimelockControl" in parts.inheritance:
        timelock = ", ".join(TIMELOCK_CONTROL_BASES)
        parts.functions.extend([
            f"""
            function _queueOperations(uint256 proposalId, {OPERATION_PARAMS})
                internal
                override({timelock})
                returns (uint48)
            {{
                return super._queueOperations(proposalId, {OPERATION_ARGS});
            }}
            """,
            f"""
            function _executeOperations(uint256 proposalId, {OPERATION_PARAMS})
                internal
                override({timelock})
            {{
                super._executeOperations(proposalId, {OPERATION_ARGS});
            }}
            """,
            f"""
            function _cancel({OPERATION_PARAMS})
                internal
                override({timelock})
                returns (uint256)
            {{
                return super._cancel({OPERATION_ARGS});
            }}
            """,
            f"""
            function _executor()
                internal
                view
                override({timelock})
                returns (address)
            {{
                return super._executor();
            }}
            """,
        ])


def _governor_notes(ctx: RuleContext) -> list[str]:
    params = ctx.parameters
    notes = [f"Voting period {params.voting_period_days} days, quorum {params.quorum_percent}% of supply"]
    if ctx.has(Feature.TIMELOCK):
        notes.append(f"Deploy a TimelockController with a {params.timelock_delay_days} day minimum delay first")
    return notes


GOVERNANCE = Archetype(
    type=ContractType.GOVERNANCE,
    description="Governance Contract",
    base_parts=_governor_base,
    rules=GOVERNOR_RULES,
    finalize=_governor_finalize,
    admin_rule=None,
    notes=_governor_notes,
)


def _timelock_base(ctx: RuleContext) -> ContractParts:
    return ContractParts(
        imports=[f"{GOV}/TimelockController.sol"],
        inheritance=["TimelockController"],
        variables=[f"uint256 public constant MIN_DELAY = {ctx.parameters.timelock_delay_days} days;"],
        constructor_params=["address[] memory proposers", "address[] memory executors", "address admin"],
        constructor_calls={"TimelockController": "MIN_DELAY, proposers, executors, admin"},
    )


TIMELOCK_RULES = (
    # scheduleBatch and executeBatch come with TimelockController
    (Feature.BATCHABLE, FeatureRule()),
    (Feature.ROLES, FeatureRule()),
    (Feature.TIMELOCK, FeatureRule()),
)


TIMELOCK = Archetype(
    type=ContractType.TIMELOCK,
    description="Timelock Controller Contract",
    base_parts=_timelock_base,
    rules=TIMELOCK_RULES,
    admin_rule=None,
)
