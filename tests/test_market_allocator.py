"""Tests for market_allocator.py and balance_adjuster.py"""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from handset_sim.services.market_allocator import MarketAllocator, SegmentOffer
from handset_sim.services.balance_adjuster import BalanceAdjuster
from handset_sim.services.game_profile import MarketTuning, RubberBandConfig, SEGMENTS, load_profile
from handset_sim.services.team_state import create_initial_market_state, create_initial_team_state


@pytest.fixture
def budget():
    return create_initial_market_state(load_profile("normal")).segments["Budget"]


def offer(team_id, price, quality, product_id="p1", brand=0.25, esg=100):
    return SegmentOffer(team_id, product_id, price, quality, {}, brand, esg)


class TestScoring:
    """Tests for offer desirability."""

    def test_cheaper_and_better_wins(self, budget):
        """A cheaper, higher-quality offer takes most of the segment."""
        allocation = MarketAllocator.allocate_segment(
            budget, [offer("alpha", 100, 80), offer("beta", 120, 40)], MarketTuning(), 100_000
        )

        assert allocation.shares["alpha"] > allocation.shares["beta"]
        assert allocation.shares["alpha"] == pytest.approx(0.79, abs=0.01)
        assert sum(allocation.shares.values()) == pytest.approx(1.0)

    def test_quality_bonus_capped(self, budget):
        """Quality far above expectation earns at most the bonus cap."""
        tuning = MarketTuning()
        very_high = MarketAllocator.score_offer(offer("a", 200, 100), budget, tuning)
        high = MarketAllocator.score_offer(offer("a", 200, 80), budget, tuning)

        assert very_high.quality == pytest.approx(1.2 * 22)
        assert high.quality == pytest.approx(1.2 * 22)

    def test_price_floor_penalty(self, budget):
        """Pricing far below the segment minimum is penalised."""
        tuning = MarketTuning()
        assert MarketAllocator.floor_penalty(offer("a", 90, 50), budget, tuning) == 1.0
        assert MarketAllocator.floor_penalty(offer("a", 50, 50), budget, tuning) == pytest.approx(0.7)

    def test_brand_critical_mass(self):
        """Strong brands get a bonus, weak brands a discount."""
        tuning = MarketTuning()
        assert MarketAllocator.brand_factor(0.64, tuning) == pytest.approx(0.8 * 1.1)
        assert MarketAllocator.brand_factor(0.25, tuning) == pytest.approx(0.5 * 0.9)
        assert MarketAllocator.brand_factor(0.4, tuning) == pytest.approx(0.4 ** 0.5)

    def test_no_product_scores_zero(self, budget):
        """A team without a product in the segment gets no share."""
        allocation = MarketAllocator.allocate_segment(
            budget, [offer("alpha", 200, 50), offer("beta", 200, 50, product_id=None)], MarketTuning(), 1_000
        )

        assert allocation.shares == {"alpha": 1.0, "beta": 0.0}
        assert allocation.units["beta"] == 0


class TestSoftmax:
    """Tests for the share split."""

    def test_equal_scores_split_evenly(self):
        shares = MarketAllocator.softmax_shares({"a": 40.0, "b": 40.0, "c": 40.0}, 10.0)
        assert all(s == pytest.approx(1 / 3) for s in shares.values())

    def test_all_zero(self):
        """If nobody qualifies, nobody sells."""
        assert MarketAllocator.softmax_shares({"a": 0.0, "b": 0.0}, 10.0) == {"a": 0.0, "b": 0.0}

    def test_temperature_flattens(self):
        """A higher temperature narrows the gap between leader and follower."""
        scores = {"a": 60.0, "b": 40.0}
        sharp = MarketAllocator.softmax_shares(scores, 5.0)
        flat = MarketAllocator.softmax_shares(scores, 50.0)

        assert sharp["a"] > flat["a"] > 0.5

    def test_raising_a_score_is_monotone(self):
        """A better score never loses share, and never hands share to a rival."""
        scores = {"a": 30.0, "b": 45.0, "c": 60.0, "d": 0.0}
        before = MarketAllocator.softmax_shares(scores, 10.0)
        for bump in (0.5, 5.0, 25.0):
            after = MarketAllocator.softmax_shares(dict(scores, a=scores["a"] + bump), 10.0)

            assert after["a"] >= before["a"]
            for team_id in ("b", "c", "d"):
                assert after[team_id] <= before[team_id]
            assert sum(after.values()) == pytest.approx(1.0)
            before = after
            scores["a"] += bump

    def test_units_never_exceed_demand(self, budget):
        """Units are floored so their sum stays within demand."""
        offers = [offer(t, 150 + i * 10, 50 + i) for i, t in enumerate(["a", "b", "c"])]
        allocation = MarketAllocator.allocate_segment(budget, offers, MarketTuning(), 100_001)

        assert sum(allocation.units.values()) <= 100_001


class TestAllocate:
    """Tests for full-market allocation."""

    def test_identical_teams_share_equally(self):
        """Two identical companies split every segment down the middle."""
        profile = load_profile("normal")
        market = create_initial_market_state(profile)
        teams = [create_initial_team_state(t, profile) for t in ("beta", "alpha")]
        result = MarketAllocator.allocate(market, teams, profile.market)

        assert set(result.segments) == set(SEGMENTS)
        for segment in SEGMENTS:
            assert result.segments[segment].shares["alpha"] == pytest.approx(0.5)
            assert result.shares_for("beta")[segment] == pytest.approx(0.5)

    def test_segment_demand(self, budget):
        """Demand grows by the segment growth rate and economic multipliers."""
        assert MarketAllocator.segment_demand(budget, 1.0, 1.0) == pytest.approx(510_000)
        assert MarketAllocator.segment_demand(budget, 1.1, 0.95) == pytest.approx(510_000 * 1.1 * 0.95)

    def test_rank_ties_broken_by_id(self):
        ranks = MarketAllocator.rank({"b": 10, "a": 10, "c": 5})
        assert ranks == {"a": 1, "b": 2, "c": 3}
        assert MarketAllocator.rank({"b": 10, "a": 5}, descending=False) == {"a": 1, "b": 2}


class TestBalanceAdjuster:
    """Tests for rubber-banding."""

    SHARES = {
        "leader": {"Budget": 0.8, "General": 0.8},
        "middle": {"Budget": 0.25, "General": 0.25},
        "laggard": {"Budget": 0.05, "General": 0.05},
    }

    def test_trailing_and_leading(self):
        """Far-behind teams get a boost, far-ahead teams a penalty."""
        adjustments = BalanceAdjuster.compute(self.SHARES, 3, RubberBandConfig())

        assert adjustments["leader"].multiplier == 0.92
        assert adjustments["leader"].status == "leading"
        assert adjustments["laggard"].multiplier == 1.15
        assert adjustments["laggard"].status == "trailing"
        assert adjustments["middle"].multiplier == 1.0

    def test_inactive_before_start_round(self):
        """Nothing happens before the start round."""
        adjustments = BalanceAdjuster.compute(self.SHARES, 2, RubberBandConfig())
        assert all(a.multiplier == 1.0 for a in adjustments.values())

    def test_disabled(self):
        """A disabled adjuster always returns 1.0."""
        adjustments = BalanceAdjuster.compute(self.SHARES, 10, RubberBandConfig(enabled=False))
        assert all(a.multiplier == 1.0 for a in adjustments.values())
        assert all(a.status == "neutral" for a in adjustments.values())


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
