"""Fallback contract whose state is named after words from the prompt."""

import re

from ricknad.generator.rules import ContractParts, FeatureRule, RuleContext
from ricknad.generator.templates.base import Archetype
from ricknad.generator.templates.common import OZ, pausable_rule, roles_rule
from ricknad.generator.types import ContractType, Feature

WORD_PATTERN = re.compile(r"[A-Za-z]{4,}")


def prompt_words(prompt: str) -> tuple[str, str, str]:
    """First three words of four or more letters, with fallbacks."""
    words = [w.lower() for w in WORD_PATTERN.findall(prompt or "")]
    words += ["data", "value", "data"][len(words):]
    return words[0], words[1], words[2]


def _base(ctx: RuleContext) -> ContractParts:
    counter, text, event_word = prompt_words(ctx.prompt)
    count_var = f"{counter}Count"
    text_var = f"{text}Text"
    event = f"{event_word.capitalize()}Updated"
    g = ctx.admin_guard
    paused = " whenNotPaused" if ctx.has(Feature.PAUSABLE) else ""

    return ContractParts(
        imports=[f"{OZ}/access/Ownable.sol"],
        inheritance=["Ownable"],
        variables=[
            f"uint256 public {count_var};",
            f"string public {text_var};",
            "bool public isActive;",
        ],
        events=[f"event {event}(address indexed user, uint256 {count_var}, string {text_var});"],
        constructor_calls={"Ownable": "msg.sender"},
        constructor_body=[
            f'{text_var} = "Initial value from Ricknad Generator";',
            "isActive = true;",
        ],
        modifiers=["""
        modifier whenActive() {
            require(isActive, "Contract is not active");
            _;
        }
        """],
        functions=[
            f"""
            function update{counter.capitalize()}(uint256 newValue) public{paused} whenActive {{
                {count_var} = newValue;
                emit {event}(msg.sender, {count_var}, {text_var});
            }}
            """,
            f"""
            function set{text.capitalize()}(string memory newText) public {g} whenActive {{
                {text_var} = newText;
                emit {event}(msg.sender, {count_var}, {text_var});
            }}
            """,
            f"""
            function getContractData() public view returns (uint256, string memory, bool) {{
                return ({count_var}, {text_var}, isActive);
            }}
            """,
            f"""
            function toggleActive() public {g} {{
                isActive = !isActive;
            }}
            """,
        ],
    )


RULES = (
    (Feature.OWNABLE, FeatureRule()),
    (Feature.PAUSABLE, pausable_rule),
    (Feature.ROLES, roles_rule()),
)


CUSTOM = Archetype(
    type=ContractType.CUSTOM,
    description="Custom Contract",
    base_parts=_base,
    rules=RULES,
)
