"""Archetype definition: base parts, ordered rule table, finalizer."""

from dataclasses import dataclass, replace
from typing import Callable, Iterable

from ricknad.generator.classifier import default_symbol
from ricknad.generator.render import render_contract
from ricknad.generator.rules import (
    ContractParts,
    FeatureRule,
    RuleContext,
    RuleFactory,
    RuleTable,
    apply_rules,
    handled_features,
)
from ricknad.generator.templates.common import OWNABLE
from ricknad.generator.types import ContractParameters, ContractType, Feature


@dataclass(frozen=True)
class Archetype:
    """Everything needed to assemble one kind of contract."""

    type: ContractType
    description: str
    base_parts: Callable[[RuleContext], ContractParts]
    rules: RuleTable = ()
    finalize: Callable[[ContractParts, RuleContext], None] | None = None
    admin_rule: FeatureRule | RuleFactory | None = OWNABLE
    notes: Callable[[RuleContext], list[str]] | None = None

    def context(
        self,
        name: str,
        features: Iterable[Feature],
        prompt: str = "",
        parameters: ContractParameters | None = None,
    ) -> RuleContext:
        parameters = parameters or ContractParameters()
        if not parameters.symbol:
            parameters = replace(parameters, symbol=default_symbol(name))
        return RuleContext(
            name=name,
            features=frozenset(features),
            parameters=parameters,
            prompt=prompt,
        )

    def build_parts(self, ctx: RuleContext) -> ContractParts:
        """Base parts with every applicable rule and the finalizer applied."""
        parts = self.base_parts(ctx)
        apply_rules(parts, self.rules, ctx, self.admin_rule)
        if self.finalize is not None:
            self.finalize(parts, ctx)
        return parts

    def assemble(
        self,
        name: str,
        features: Iterable[Feature],
        prompt: str,
        seed: int,
        timestamp: str,
        parameters: ContractParameters | None = None,
    ) -> str:
        """Produce Solidity source for this archetype."""
        ctx = self.context(name, features, prompt, parameters)
        parts = self.build_parts(ctx)
        return render_contract(
            name=name,
            parts=parts,
            description=self.description,
            prompt=prompt,
            seed=seed,
            timestamp=timestamp,
            notes=self.notes(ctx) if self.notes else None,
        )

    def ignored_features(self, features: Iterable[Feature]) -> list[Feature]:
        """Requested features this archetype has no rule for."""
        known = handled_features(self.rules)
        return [f for f in Feature if f in set(features) and f not in known]
