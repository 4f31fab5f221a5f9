"""Segment Demand Allocator.

For every segment, each team's competing product is turned into one
desirability score (price, quality, brand, ESG, feature match weighted by
the segment's preference profile). Segment demand is then split across the
teams with a temperature-controlled softmax of those scores.

Scoring is a pure function of its inputs. Demand jitter comes from the
Economic Cycle Engine and is passed in.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from .game_profile import FEATURE_AXES, MarketTuning
from .team_state import MarketState, Product, SegmentMarket, TeamState

logger = logging.getLogger(__name__)


@dataclass
class SegmentOffer:
    """What one team brings to one segment this round."""
    team_id: str
    product_id: Optional[str]
    price: float
    quality: float
    features: Dict[str, float]
    brand_value: float
    esg_score: float

    @property
    def qualifies(self) -> bool:
        return self.product_id is not None

    @classmethod
    def from_team(cls, team: TeamState, segment: str) -> "SegmentOffer":
        product: Optional[Product] = team.best_product_for(segment)
        if product is None:
            return cls(team.team_id, None, 0.0, 0.0, {}, team.brand_value, team.esg_score)
        return cls(
            team_id=team.team_id,
            product_id=product.id,
            price=product.price,
            quality=product.quality,
            features=dict(product.features),
            brand_value=team.brand_value,
            esg_score=team.esg_score,
        )


@dataclass
class ScoreBreakdown:
    price: float = 0.0
    quality: float = 0.0
    brand: float = 0.0
    esg: float = 0.0
    features: float = 0.0
    floor_penalty: float = 1.0

    @property
    def total(self) -> float:
        return (self.price + self.quality + self.brand + self.esg + self.features) * self.floor_penalty


@dataclass
class SegmentAllocation:
    segment: str
    demand: float
    scores: Dict[str, float] = field(default_factory=dict)
    shares: Dict[str, float] = field(default_factory=dict)
    units: Dict[str, int] = field(default_factory=dict)
    breakdowns: Dict[str, ScoreBreakdown] = field(default_factory=dict)


@dataclass
class AllocationResult:
    segments: Dict[str, SegmentAllocation] = field(default_factory=dict)

    def shares_for(self, team_id: str) -> Dict[str, float]:
        return {name: alloc.shares.get(team_id, 0.0) for name, alloc in self.segments.items()}

    def units_for(self, team_id: str) -> Dict[str, int]:
        return {name: alloc.units.get(team_id, 0) for name, alloc in self.segments.items()}


class MarketAllocator:
    """Scores offers and splits segment demand with a softmax."""

    @classmethod
    def diminishing(cls, ratio: float, cap: float) -> float:
        """Linear up to 1, square-root returns above it, hard cap."""
        if ratio <= 1:
            return max(0.0, ratio)
        return min(cap, 1 + math.sqrt(ratio - 1) * 0.5)

    @classmethod
    def price_position(cls, offer: SegmentOffer, segment: SegmentMarket, tuning: MarketTuning) -> float:
        """0-1, higher when cheaper. Quality stretches the acceptable ceiling."""
        adjusted_max = segment.price_max * (1 + offer.quality * tuning.quality_tolerance_per_point)
        span = adjusted_max - segment.price_min
        if span <= 0:
            return 0.5
        position = max(0.0, (adjusted_max - offer.price) / span)
        return min(1.0, position)

    @classmethod
    def floor_penalty(cls, offer: SegmentOffer, segment: SegmentMarket, tuning: MarketTuning) -> float:
        """Multiplier < 1 when priced suspiciously far below the segment floor."""
        allowance = segment.price_min * tuning.price_floor_penalty_threshold
        shortfall = segment.price_min - offer.price
        if allowance <= 0 or shortfall <= allowance:
            return 1.0
        excess = shortfall - allowance
        return 1 - min(1.0, excess / allowance) * tuning.price_floor_penalty_max

    @classmethod
    def brand_factor(cls, brand_value: float, tuning: MarketTuning) -> float:
        factor = math.sqrt(max(0.0, brand_value))
        if brand_value > tuning.brand_critical_mass_high:
            factor *= tuning.brand_high_multiplier
        elif brand_value < tuning.brand_critical_mass_low:
            factor *= tuning.brand_low_multiplier
        return factor

    @classmethod
    def feature_match(cls, features: Dict[str, float], preferences: Dict[str, float]) -> float:
        return sum(features.get(axis, 0.0) / 100 * preferences.get(axis, 0.0) for axis in FEATURE_AXES)

    @classmethod
    def score_offer(cls, offer: SegmentOffer, segment: SegmentMarket, tuning: MarketTuning) -> ScoreBreakdown:
        """Desirability of one offer in one segment. Non-qualifying offers score 0."""
        if not offer.qualifies:
            return ScoreBreakdown(floor_penalty=0.0)

        w = segment.weights
        cap = tuning.quality_feature_bonus_cap
        quality_ratio = offer.quality / segment.quality_expectation if segment.quality_expectation > 0 else 0.0
        match = cls.feature_match(offer.features, segment.feature_preferences)

        return ScoreBreakdown(
            price=cls.price_position(offer, segment, tuning) * w["price"],
            quality=cls.diminishing(quality_ratio, cap) * w["quality"],
            brand=cls.brand_factor(offer.brand_value, tuning) * w["brand"],
            esg=offer.esg_score / 1000 * tuning.sustainability_premium * w["esg"],
            features=cls.diminishing(match, cap) * w["features"],
            floor_penalty=cls.floor_penalty(offer, segment, tuning),
        )

    @classmethod
    def softmax_shares(cls, scores: Dict[str, float], temperature: float) -> Dict[str, float]:
        """Split 1.0 across teams with a positive score.

        Teams scoring 0 get 0; if no team scores above 0 every share is 0.
        """
        team_ids = sorted(scores)
        active = [t for t in team_ids if scores[t] > 0]
        shares = {t: 0.0 for t in team_ids}
        if not active:
            return shares

        values = np.array([scores[t] for t in active], dtype=float)
        exp = np.exp((values - values.max()) / temperature)
        weights = exp / exp.sum()
        for team_id, weight in zip(active, weights):
            shares[team_id] = float(weight)
        return shares

    @classmethod
    def segment_demand(cls, segment: SegmentMarket, demand_multiplier: float, jitter: float) -> float:
        return segment.base_demand * (1 + segment.growth_rate) * demand_multiplier * jitter

    @classmethod
    def allocate_segment(
        cls,
        segment: SegmentMarket,
        offers: List[SegmentOffer],
        tuning: MarketTuning,
        demand: float,
    ) -> SegmentAllocation:
        breakdowns = {o.team_id: cls.score_offer(o, segment, tuning) for o in offers}
        scores = {team_id: b.total for team_id, b in breakdowns.items()}
        shares = cls.softmax_shares(scores, tuning.softmax_temperature)
        units = {team_id: int(math.floor(demand * share)) for team_id, share in shares.items()}
        return SegmentAllocation(
            segment=segment.name,
            demand=demand,
            scores=scores,
            shares=shares,
            units=units,
            breakdowns=breakdowns,
        )

    @classmethod
    def allocate(
        cls,
        market: MarketState,
        teams: List[TeamState],
        tuning: MarketTuning,
        demand_multiplier: float = 1.0,
        demand_jitter: Optional[Dict[str, float]] = None,
    ) -> AllocationResult:
        """Allocate every segment across every team.

        Args:
            market: This round's market snapshot
            teams: All teams, after their product decisions were applied
            tuning: Scoring constants from the game profile
            demand_multiplier: Economic demand multiplier for the round
            demand_jitter: Per-segment jitter drawn by the economic cycle

        Returns:
            AllocationResult keyed by segment name
        """
        jitter = demand_jitter or {}
        result = AllocationResult()
        for name, segment in market.segments.items():
            offers = [SegmentOffer.from_team(team, name) for team in sorted(teams, key=lambda t: t.team_id)]
            demand = cls.segment_demand(segment, demand_multiplier, jitter.get(name, 1.0))
            result.segments[name] = cls.allocate_segment(segment, offers, tuning, demand)
        return result

    @staticmethod
    def rank(values: Dict[str, float], descending: bool = True) -> Dict[str, int]:
        """1-based rank per team; ties broken by team id."""
        if descending:
            ordered = sorted(values, key=lambda t: (-values[t], t))
        else:
            ordered = sorted(values, key=lambda t: (values[t], t))
        return {team_id: i + 1 for i, team_id in enumerate(ordered)}
