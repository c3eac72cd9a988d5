"""
Confidence scoring as data.

A tier's policy is an ordered tuple of ScoreRule entries. `fold_rules` walks
them left to right, adding the weight and recording the triggers of every
rule whose predicate holds. Bounds are applied once afterwards by the caller.
"""
from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

S = TypeVar("S")

Triggers = Union[tuple[str, ...], Callable[[S], Sequence[str]]]


@dataclass(frozen=True)
class ScoreRule(Generic[S]):
    when: Callable[[S], bool]
    weight: int
    triggers: Triggers = ()

    def labels(self, signals: S) -> list[str]:
        if callable(self.triggers):
            return list(self.triggers(signals))
        return list(self.triggers)


def fold_rules(rules: Sequence[ScoreRule[S]], signals: S, base: int) -> tuple[int, list[str]]:
    score = base
    triggers: list[str] = []
    for rule in rules:
        if rule.when(signals):
            score += rule.weight
            triggers.extend(rule.labels(signals))
    return score, triggers
