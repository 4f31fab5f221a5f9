"""Achievement ledger: ~220 rules scored against each settled round."""

from .definitions import ACHIEVEMENTS_BY_ID, ALL_ACHIEVEMENTS, get_achievement
from .ledger import AchievementLedger, competition_ranks, round_half_up
from .metrics import AchievementContext, resolve_metric
from .tracker import AchievementTracker, RoundObservation, TrackerState
from .types import (
    AchievementDefinition,
    AchievementState,
    Category,
    EarnedAchievement,
    LedgerRoundResult,
    Metric,
    Operator,
    ProgressRecord,
    RelativeRank,
    Requirement,
    Tier,
)

__all__ = [
    "ACHIEVEMENTS_BY_ID",
    "ALL_ACHIEVEMENTS",
    "get_achievement",
    "AchievementLedger",
    "competition_ranks",
    "round_half_up",
    "AchievementContext",
    "resolve_metric",
    "AchievementTracker",
    "RoundObservation",
    "TrackerState",
    "AchievementDefinition",
    "AchievementState",
    "Category",
    "EarnedAchievement",
    "LedgerRoundResult",
    "Metric",
    "Operator",
    "ProgressRecord",
    "RelativeRank",
    "Requirement",
    "Tier",
]
