"""Balance Adjuster (rubber-banding).

Runs after demand allocation. Compares each team's average segment share
with the field average and hands back a revenue multiplier: a boost for
teams far behind, a penalty for teams far ahead. Segment shares themselves
are never modified, so they keep summing to 1 within a segment.
"""

import logging
from dataclasses import dataclass
from typing import Dict

from .game_profile import RubberBandConfig

logger = logging.getLogger(__name__)


@dataclass
class BalanceAdjustment:
    team_id: str
    average_share: float
    field_average: float
    multiplier: float = 1.0
    status: str = "neutral"     # trailing | leading | neutral


class BalanceAdjuster:

    @classmethod
    def average_share(cls, shares: Dict[str, float]) -> float:
        return sum(shares.values()) / len(shares) if shares else 0.0

    @classmethod
    def compute(
        cls,
        shares_by_team: Dict[str, Dict[str, float]],
        round_number: int,
        config: RubberBandConfig,
    ) -> Dict[str, BalanceAdjustment]:
        """Per-team revenue multipliers for this round.

        Args:
            shares_by_team: team id -> segment -> allocated share
            round_number: Round being settled
            config: Rubber-banding settings from the game profile

        Returns:
            team id -> BalanceAdjustment (multiplier exactly 1.0 when disabled)
        """
        averages = {team_id: cls.average_share(shares) for team_id, shares in sorted(shares_by_team.items())}
        field_average = sum(averages.values()) / len(averages) if averages else 0.0
        adjustments = {
            team_id: BalanceAdjustment(team_id, avg, field_average)
            for team_id, avg in averages.items()
        }

        if not config.enabled or round_number < config.start_round or field_average <= 0:
            return adjustments

        for team_id, adjustment in adjustments.items():
            if adjustment.average_share < field_average * config.threshold:
                adjustment.multiplier = config.trailing_boost
                adjustment.status = "trailing"
            elif adjustment.average_share > field_average * config.leading_multiple:
                adjustment.multiplier = config.leading_penalty
                adjustment.status = "leading"

        adjusted = [a for a in adjustments.values() if a.status != "neutral"]
        if adjusted:
            logger.debug(
                f"Round {round_number} rubber-banding: "
                + ", ".join(f"{a.team_id}={a.status}" for a in adjusted)
            )
        return adjustments
