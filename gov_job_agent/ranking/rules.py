"""Weighted rule lists: each rule is a named condition with a weight, scored uniformly."""

from dataclasses import dataclass
from typing import Any, Callable, List, Sequence, Tuple


@dataclass(frozen=True)
class ScoringRule:
    """A named predicate over a subject contributing `weight` when it holds."""

    name: str
    condition: Callable[[Any], bool]
    weight: float


def fired_rules(rules: Sequence[ScoringRule], subject: Any) -> List[ScoringRule]:
    """Rules whose condition holds for subject, in rule order."""
    return [rule for rule in rules if rule.condition(subject)]


def score(rules: Sequence[ScoringRule], subject: Any) -> float:
    """Sum of weights of the rules that fire. Pure function of (rules, subject)."""
    return sum(rule.weight for rule in fired_rules(rules, subject))


def explain(rules: Sequence[ScoringRule], subject: Any) -> List[Tuple[str, float]]:
    """(name, weight) for each rule that fired; used for debug traces."""
    return [(rule.name, rule.weight) for rule in fired_rules(rules, subject)]
