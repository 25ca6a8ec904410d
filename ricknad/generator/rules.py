"""Declarative feature rules and the reducer that applies them.

Each archetype describes itself as a set of base parts plus an ordered table
of `(Feature, rule)` pairs. A rule is either a static `FeatureRule` or a
factory taking a `RuleContext`, for fragments whose text depends on other
features (e.g. the guard on `mint` under `roles`).
"""

from dataclasses import dataclass, field
from typing import Callable, Sequence

from ricknad.generator.types import ContractParameters, Feature, FeatureSet

ADMIN_ROLE_GUARD = "onlyRole(DEFAULT_ADMIN_ROLE)"
OWNER_GUARD = "onlyOwner"


@dataclass
class ContractParts:
    """Mutable fragment lists a Solidity contract is assembled from."""
    imports: list[str] = field(default_factory=list)
    inheritance: list[str] = field(default_factory=list)
    using: list[str] = field(default_factory=list)
    variables: list[str] = field(default_factory=list)
    events: list[str] = field(default_factory=list)
    constructor_params: list[str] = field(default_factory=list)
    constructor_calls: dict[str, str] = field(default_factory=dict)  # parent -> args
    constructor_body: list[str] = field(default_factory=list)
    initializer_calls: dict[str, str] = field(default_factory=dict)  # parent -> init statement
    initializer_body: list[str] = field(default_factory=list)
    modifiers: list[str] = field(default_factory=list)
    functions: list[str] = field(default_factory=list)
    removed_parents: set[str] = field(default_factory=set)
    constructor_annotations: list[str] = field(default_factory=list)

    def add_import(self, path: str) -> None:
        if path not in self.imports:
            self.imports.append(path)

    def add_parent(self, parent: str) -> None:
        if parent not in self.inheritance:
            self.inheritance.append(parent)
        self.removed_parents.discard(parent)

    def remove_parent(self, parent: str) -> None:
        if parent in self.inheritance:
            self.inheritance.remove(parent)
            self.removed_parents.add(parent)

    def replace_parent(self, old: str, new: str) -> None:
        """Substitute `old` in place, or append `new` when `old` is absent."""
        if new in self.inheritance:
            self.remove_parent(old)
            return
        if old in self.inheritance:
            self.inheritance[self.inheritance.index(old)] = new
            self.removed_parents.add(old)
        else:
            self.inheritance.append(new)
        self.removed_parents.discard(new)

    def keeps_parent(self, parent: str) -> bool:
        """Whether a base constructor/initializer for `parent` still applies.

        A parent survives removal when a remaining entry extends it by name
        (`ERC20Capped` still needs `ERC20(...)`, `ERC20CappedUpgradeable`
        still needs `__ERC20_init`).
        """
        if parent not in self.removed_parents:
            return True
        stem = parent.removesuffix("Upgradeable")
        suffix = parent[len(stem):]
        return any(
            entry != parent and entry.startswith(stem) and entry.endswith(suffix)
            for entry in self.inheritance
        )


@dataclass(frozen=True)
class FeatureRule:
    """What one feature contributes to a contract."""
    add_imports: tuple[str, ...] = ()
    remove_imports: tuple[str, ...] = ()
    add_inheritance: tuple[str, ...] = ()
    remove_inheritance: tuple[str, ...] = ()
    replace_inheritance: tuple[tuple[str, str], ...] = ()
    add_using: tuple[str, ...] = ()
    add_variables: tuple[str, ...] = ()
    add_events: tuple[str, ...] = ()
    add_constructor_params: tuple[str, ...] = ()
    add_constructor_calls: tuple[tuple[str, str], ...] = ()
    add_constructor_body: tuple[str, ...] = ()
    add_initializer_calls: tuple[tuple[str, str], ...] = ()
    add_initializer_body: tuple[str, ...] = ()
    add_modifiers: tuple[str, ...] = ()
    add_functions: tuple[str, ...] = ()
    requires_admin: bool = False


@dataclass(frozen=True)
class RuleContext:
    """Inputs available to rule factories and finalizers."""
    name: str
    features: FeatureSet
    parameters: ContractParameters = field(default_factory=ContractParameters)
    prompt: str = ""

    def has(self, *features: Feature) -> bool:
        return all(f in self.features for f in features)

    def has_any(self, *features: Feature) -> bool:
        return any(f in self.features for f in features)

    @property
    def admin_guard(self) -> str:
        """Modifier protecting administrative functions."""
        return ADMIN_ROLE_GUARD if Feature.ROLES in self.features else OWNER_GUARD


RuleFactory = Callable[[RuleContext], FeatureRule]
RuleTable = Sequence[tuple[Feature, "FeatureRule | RuleFactory"]]


def resolve(rule: "FeatureRule | RuleFactory", ctx: RuleContext) -> FeatureRule:
    return rule(ctx) if callable(rule) else rule


def apply_rule(parts: ContractParts, rule: FeatureRule) -> None:
    """Fold a single rule into `parts`."""
    for path in rule.add_imports:
        parts.add_import(path)
    for path in rule.remove_imports:
        if path in parts.imports:
            parts.imports.remove(path)
    for parent in rule.remove_inheritance:
        parts.remove_parent(parent)
    for old, new in rule.replace_inheritance:
        parts.replace_parent(old, new)
    for parent in rule.add_inheritance:
        parts.add_parent(parent)
    for stmt in rule.add_using:
        if stmt not in parts.using:
            parts.using.append(stmt)
    parts.variables.extend(rule.add_variables)
    parts.events.extend(rule.add_events)
    parts.constructor_params.extend(rule.add_constructor_params)
    for parent, args in rule.add_constructor_calls:
        parts.constructor_calls[parent] = args
    parts.constructor_body.extend(rule.add_constructor_body)
    for parent, stmt in rule.add_initializer_calls:
        parts.initializer_calls[parent] = stmt
    parts.initializer_body.extend(rule.add_initializer_body)
    parts.modifiers.extend(rule.add_modifiers)
    parts.functions.extend(rule.add_functions)


def apply_rules(
    parts: ContractParts,
    rules: RuleTable,
    ctx: RuleContext,
    admin_rule: "FeatureRule | RuleFactory | None" = None,
) -> tuple[ContractParts, list[Feature]]:
    """Apply every rule whose feature is present, in table order.

    Returns the parts and the features that were applied. When a rule needs
    an admin guard and neither `ownable` nor `roles` is requested,
    `admin_rule` is applied once at the end.
    """
    applied: list[Feature] = []
    needs_admin = False

    for feature, rule in rules:
        if feature not in ctx.features:
            continue
        resolved = resolve(rule, ctx)
        apply_rule(parts, resolved)
        applied.append(feature)
        needs_admin = needs_admin or resolved.requires_admin

    if needs_admin and admin_rule is not None and not ctx.has_any(Feature.OWNABLE, Feature.ROLES):
        apply_rule(parts, resolve(admin_rule, ctx))

    return parts, applied


def handled_features(rules: RuleTable) -> set[Feature]:
    """Features a rule table knows about."""
    return {feature for feature, _ in rules}
