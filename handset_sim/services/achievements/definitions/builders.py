"""Small constructors that keep the definition tables readable."""

from ..types import (
    AchievementDefinition,
    Category,
    Metric,
    Operator,
    RelativeRank,
    Requirement,
    Tier,
)


def at_least(metric: Metric, target, **options) -> Requirement:
    return Requirement(metric, Operator.GE, target, **options)


def above(metric: Metric, target, **options) -> Requirement:
    return Requirement(metric, Operator.GT, target, **options)


def at_most(metric: Metric, target, **options) -> Requirement:
    return Requirement(metric, Operator.LE, target, **options)


def below(metric: Metric, target, **options) -> Requirement:
    return Requirement(metric, Operator.LT, target, **options)


def equals(metric: Metric, target, **options) -> Requirement:
    return Requirement(metric, Operator.EQ, target, **options)


def between(metric: Metric, low: float, high: float, **options) -> Requirement:
    return Requirement(metric, Operator.BETWEEN, (low, high), **options)


def flag(metric: Metric, **options) -> Requirement:
    """Met when the metric is truthy."""
    return Requirement(metric, Operator.ANY, None, **options)


def best(metric: Metric, **options) -> Requirement:
    """Met when the team alone ranks first on the metric."""
    return Requirement(metric, Operator.EQ, RelativeRank.BEST, **options)


def worst(metric: Metric, **options) -> Requirement:
    return Requirement(metric, Operator.EQ, RelativeRank.WORST, **options)


def define(category: Category, id: str, name: str, description: str, tier: Tier,
           *requirements: Requirement, **options) -> AchievementDefinition:
    if not requirements:
        raise ValueError(f"Achievement '{id}' has no requirements")
    if tier == Tier.SECRET:
        options.setdefault("hidden", True)
    return AchievementDefinition(
        id=id,
        name=name,
        description=description,
        category=category,
        tier=tier,
        requirements=tuple(requirements),
        **options,
    )
