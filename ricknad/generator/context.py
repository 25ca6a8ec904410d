"""Conversation memory threaded through successive generations."""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping

from ricknad.config import settings
from ricknad.generator.types import ContractParameters, GeneratedContract

# Derived from the contract name, so never carried to the next contract.
NON_PERSISTENT_PARAMETERS = frozenset({"symbol"})


def explicit_parameters(parameters: ContractParameters) -> dict[str, Any]:
    """Fields that differ from their defaults."""
    defaults = ContractParameters()
    return {
        f.name: getattr(parameters, f.name)
        for f in fields(ContractParameters)
        if f.name not in NON_PERSISTENT_PARAMETERS
        and getattr(parameters, f.name) != getattr(defaults, f.name)
    }


@dataclass(frozen=True)
class ConversationState:
    """Immutable history of a conversation.

    Every update returns a new state; the caps drop the oldest entries first.
    """

    previous_contracts: tuple[GeneratedContract, ...] = ()
    current_contract: GeneratedContract | None = None
    user_intents: tuple[str, ...] = ()
    parameters: Mapping[str, Any] = field(default_factory=dict)

    def merge_parameters(self, parameters: ContractParameters) -> ContractParameters:
        """Apply remembered parameters under the ones set by the new prompt."""
        merged = {**self.parameters, **explicit_parameters(parameters)}
        return replace(parameters, **merged)

    def with_contract(
        self,
        contract: GeneratedContract,
        prompt: str,
        max_previous: int | None = None,
        max_intents: int | None = None,
    ) -> "ConversationState":
        max_previous = settings.max_previous_contracts if max_previous is None else max_previous
        max_intents = settings.max_user_intents if max_intents is None else max_intents

        previous = self.previous_contracts
        if self.current_contract is not None:
            previous = previous + (self.current_contract,)
        intents = self.user_intents + (prompt,)

        return ConversationState(
            previous_contracts=previous[-max_previous:] if max_previous > 0 else (),
            current_contract=contract,
            user_intents=intents[-max_intents:] if max_intents > 0 else (),
            parameters={**self.parameters, **explicit_parameters(contract.parameters)},
        )
