"""Tests for the achievement ledger"""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from handset_sim.services.achievements import (
    ACHIEVEMENTS_BY_ID, ALL_ACHIEVEMENTS, AchievementContext, AchievementLedger,
    AchievementState, AchievementTracker, Category, Metric, RoundObservation,
    Tier, TrackerState, competition_ranks, get_achievement, round_half_up
)
from handset_sim.services.achievements.definitions.builders import at_least, best, define, worst
from handset_sim.services.achievements.metrics import RESOLVERS, resolve_metric
from handset_sim.services.departments import RoundFacts
from handset_sim.services.game_profile import load_profile
from handset_sim.services.team_state import create_initial_team_state


@pytest.fixture
def profile():
    return load_profile("normal")


def context(team, round_number, facts=None, team_count=1, ranks=None, difficulty="normal"):
    ctx = AchievementContext(
        team=team,
        previous=team,
        round_number=round_number,
        difficulty=difficulty,
        team_count=team_count,
        facts=facts or RoundFacts(),
        tracker=TrackerState(),
    )
    if ranks:
        ctx.ranks = ranks
    return ctx


class TestCatalog:
    """Tests for the definition tables."""

    def test_catalog_size(self):
        assert len(ALL_ACHIEVEMENTS) == 221
        assert len(ACHIEVEMENTS_BY_ID) == 221

    def test_every_category_populated(self):
        categories = {d.category for d in ALL_ACHIEVEMENTS}
        assert categories == set(Category)

    def test_secret_achievements_hidden(self):
        secret = [d for d in ALL_ACHIEVEMENTS if d.category == Category.SECRET]
        assert secret
        assert all(d.hidden for d in secret)

    def test_names_unique(self):
        names = [d.name for d in ALL_ACHIEVEMENTS]
        assert len(set(names)) == len(names)

    def test_segment_name_matches(self):
        definition = get_achievement("professional_grade")
        assert definition.name == "Professional Grade"
        assert "Professional segment" in definition.description

    def test_every_metric_resolves(self):
        assert set(RESOLVERS) == set(Metric)

    def test_define_requires_requirements(self):
        with pytest.raises(ValueError):
            define(Category.OVERVIEW, "empty", "Empty", "Nothing to do.", Tier.BRONZE)

    def test_lookup(self):
        assert get_achievement("esg_champion").tier == Tier.GOLD
        with pytest.raises(KeyError):
            get_achievement("missing")


class TestPoints:
    """Tests for point awards."""

    def test_difficulty_multiplier(self):
        platinum = get_achievement("triple_crown")
        assert AchievementLedger.award_points(platinum, load_profile("nightmare")) == 200
        assert AchievementLedger.award_points(platinum, load_profile("normal")) == 100

    def test_infamy_rounds_half_up(self):
        """Sandbox halves infamy to -12.5, which rounds up to -12."""
        infamy = get_achievement("sinking_ship")
        assert AchievementLedger.award_points(infamy, load_profile("sandbox")) == -12
        assert AchievementLedger.award_points(infamy, load_profile("nightmare")) == -25

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(-12.5) == -12
        assert round_half_up(7.4) == 7


class TestSustained:
    """Tests for streak requirements."""

    def test_esg_champion_after_three_rounds(self, profile):
        """ESG 800+ for three straight rounds earns the achievement in round three."""
        definition = get_achievement("esg_champion")
        team = create_initial_team_state("alpha", profile)
        team.esg_score = 850
        state = AchievementState(team_id="alpha")

        for round_number in (1, 2):
            result = AchievementLedger.evaluate(state, context(team, round_number), profile, [definition])
            assert result.newly_earned == []
            assert state.progress["esg_champion"].streaks == [round_number]

        result = AchievementLedger.evaluate(state, context(team, 3), profile, [definition])
        assert [e.achievement_id for e in result.newly_earned] == ["esg_champion"]
        assert result.points == 50
        assert "ESG Champion" in state.titles
        assert "esg_champion" not in state.progress

    def test_streak_resets(self, profile):
        definition = get_achievement("esg_champion")
        team = create_initial_team_state("alpha", profile)
        state = AchievementState(team_id="alpha")

        for round_number, esg in ((1, 850), (2, 700), (3, 850)):
            team.esg_score = esg
            AchievementLedger.evaluate(state, context(team, round_number), profile, [definition])
        assert state.progress["esg_champion"].streaks == [1]
        assert not state.has_earned("esg_champion")

    def test_reevaluation_is_idempotent(self, profile):
        """Evaluating the same round twice does not advance the streak."""
        definition = get_achievement("esg_champion")
        team = create_initial_team_state("alpha", profile)
        team.esg_score = 900
        state = AchievementState(team_id="alpha")

        AchievementLedger.evaluate(state, context(team, 1), profile, [definition])
        AchievementLedger.evaluate(state, context(team, 2), profile, [definition])
        AchievementLedger.evaluate(state, context(team, 2), profile, [definition])
        assert state.progress["esg_champion"].streaks == [2]

        AchievementLedger.evaluate(state, context(team, 3), profile, [definition])
        AchievementLedger.evaluate(state, context(team, 3), profile, [definition])
        assert [e.achievement_id for e in state.earned] == ["esg_champion"]
        assert state.total_points == 50

    def test_progress_percent(self, profile):
        definition = get_achievement("esg_champion")
        team = create_initial_team_state("alpha", profile)
        team.esg_score = 900
        state = AchievementState(team_id="alpha")
        AchievementLedger.evaluate(state, context(team, 1), profile, [definition])

        record = state.progress["esg_champion"]
        assert (record.current, record.target) == (1.0, 3.0)
        assert record.percent == pytest.approx(33.3)


class TestCumulativeAndRepeatable:
    """Tests for running sums and repeatable rules."""

    def test_cumulative_sum(self, profile):
        definition = define(Category.MARKETING, "big_spender_test", "Big Spender", "Spend $10M on ads.",
                            Tier.BRONZE, at_least(Metric.ADVERTISING_SPEND, 10_000_000, cumulative=True))
        team = create_initial_team_state("alpha", profile)
        state = AchievementState(team_id="alpha")
        facts = RoundFacts(advertising_spend=4_000_000)

        AchievementLedger.evaluate(state, context(team, 1, facts), profile, [definition])
        AchievementLedger.evaluate(state, context(team, 2, facts), profile, [definition])
        AchievementLedger.evaluate(state, context(team, 2, facts), profile, [definition])
        assert state.progress["big_spender_test"].sums == [8_000_000]

        result = AchievementLedger.evaluate(state, context(team, 3, facts), profile, [definition])
        assert len(result.newly_earned) == 1

    def test_repeatable_once_per_round(self, profile):
        definition = define(Category.FINANCE, "rich_test", "Rich", "Hold cash.", Tier.BRONZE,
                            at_least(Metric.CASH, 1), repeatable=True)
        team = create_initial_team_state("alpha", profile)
        state = AchievementState(team_id="alpha")

        AchievementLedger.evaluate(state, context(team, 1), profile, [definition])
        AchievementLedger.evaluate(state, context(team, 1), profile, [definition])
        AchievementLedger.evaluate(state, context(team, 2), profile, [definition])

        assert [e.round_number for e in state.earned] == [1, 2]
        assert state.tier_counts["bronze"] == 2

    def test_infamy_message_and_points(self, profile):
        definition = get_achievement("esg_pretender")
        team = create_initial_team_state("alpha", profile)
        team.esg_score = 50
        state = AchievementState(team_id="alpha")
        result = AchievementLedger.evaluate(state, context(team, 1), profile, [definition])

        assert result.points == -25
        assert state.negative_points == -25
        assert result.messages[0].startswith("Infamy earned")


class TestRelativeRanks:
    """Tests for BEST and WORST targets."""

    def test_competition_ranks(self):
        assert competition_ranks({"a": 5, "b": 5, "c": 1}) == {"a": 1, "b": 1, "c": 3}
        assert competition_ranks({"a": 5, "b": 1}, lower_is_better=True) == {"a": 2, "b": 1}

    def test_single_team_never_ranked(self, profile):
        """Relative rules need at least two teams."""
        team = create_initial_team_state("alpha", profile)
        ctx = context(team, 1, team_count=1, ranks={Metric.REVENUE: {"alpha": 1}})
        assert not AchievementLedger.check_relative(best(Metric.REVENUE), ctx)

    def test_tied_leaders_are_not_best(self, profile):
        """Sharing first place is not leading."""
        team = create_initial_team_state("alpha", profile)
        ranks = {Metric.REVENUE: competition_ranks({"alpha": 10, "beta": 10})}
        ctx = context(team, 1, team_count=2, ranks=ranks)

        assert not AchievementLedger.check_relative(best(Metric.REVENUE), ctx)
        assert not AchievementLedger.check_relative(worst(Metric.REVENUE), ctx)

    def test_fully_tied_field(self, profile):
        """Nobody is best or worst when every team has the same value."""
        ranks = {Metric.REVENUE: competition_ranks({"alpha": 0, "beta": 0, "gamma": 0})}
        for team_id in ("alpha", "beta", "gamma"):
            ctx = context(create_initial_team_state(team_id, profile), 1, team_count=3, ranks=ranks)
            assert not AchievementLedger.check_relative(best(Metric.REVENUE), ctx)
            assert not AchievementLedger.check_relative(worst(Metric.REVENUE), ctx)

    def test_sole_leader_over_tied_trailers(self, profile):
        """Teams tied below the leader all share last place."""
        ranks = {Metric.REVENUE: competition_ranks({"alpha": 10, "beta": 5, "gamma": 5})}
        alpha = context(create_initial_team_state("alpha", profile), 1, team_count=3, ranks=ranks)
        gamma = context(create_initial_team_state("gamma", profile), 1, team_count=3, ranks=ranks)

        assert AchievementLedger.check_relative(best(Metric.REVENUE), alpha)
        assert AchievementLedger.check_relative(worst(Metric.REVENUE), gamma)
        assert not AchievementLedger.check_relative(best(Metric.REVENUE), gamma)

    def test_tied_field_earns_no_leader_achievements(self, profile):
        """Identical teams do not all collect the rank-one rules."""
        tied = competition_ranks({"alpha": 0, "beta": 0})
        ranks = {metric: tied for metric in (Metric.REVENUE, Metric.EPS, Metric.TOTAL_MARKET_SHARE,
                                             Metric.BRAND_VALUE)}
        team = create_initial_team_state("alpha", profile)
        rules = [get_achievement(a) for a in ("loyalty_empire", "market_monarch", "triple_crown")]
        result = AchievementLedger.evaluate(AchievementState(team_id="alpha"),
                                            context(team, 1, team_count=2, ranks=ranks), profile, rules)
        assert result.newly_earned == []

        ranks[Metric.BRAND_VALUE] = competition_ranks({"alpha": 2, "beta": 1})
        result = AchievementLedger.evaluate(AchievementState(team_id="alpha"),
                                            context(team, 1, team_count=2, ranks=ranks), profile, rules)
        assert [e.achievement_id for e in result.newly_earned] == ["loyalty_empire"]

    def test_worst(self, profile):
        team = create_initial_team_state("alpha", profile)
        ranks = {Metric.REVENUE: competition_ranks({"alpha": 1, "beta": 10, "gamma": 5})}
        ctx = context(team, 1, team_count=3, ranks=ranks)

        assert AchievementLedger.check_relative(worst(Metric.REVENUE), ctx)
        assert not AchievementLedger.check_relative(best(Metric.REVENUE), ctx)


class TestTracker:
    """Tests for cross-round counters."""

    def observation(self, round_number, net_income=1.0, revenue=100.0, previous_revenue=0.0,
                    leader=True, last=False):
        return RoundObservation(
            round_number=round_number, revenue=revenue, previous_revenue=previous_revenue,
            net_income=net_income, cash=1_000.0, is_bankrupt=False, phase="expansion",
            in_recession=False, balance_status="neutral", revenue_leader=leader, share_leader=False,
            revenue_last=last,
        )

    def test_counts_rounds(self):
        state = TrackerState()
        AchievementTracker.update(state, self.observation(1))
        AchievementTracker.update(state, self.observation(2, net_income=-5.0))

        assert state.rounds_completed == 2
        assert state.profitable_rounds == 1
        assert state.consecutive_loss == 1
        assert state.rounds_as_revenue_leader == 2

    def test_same_round_not_double_counted(self):
        state = TrackerState()
        AchievementTracker.update(state, self.observation(1))
        AchievementTracker.update(state, self.observation(1))

        assert state.rounds_completed == 1
        assert state.consecutive_profit == 1

    def test_growth_streak(self):
        state = TrackerState()
        AchievementTracker.update(state, self.observation(1, revenue=100, previous_revenue=0))
        AchievementTracker.update(state, self.observation(2, revenue=120, previous_revenue=100))
        AchievementTracker.update(state, self.observation(3, revenue=130, previous_revenue=120))

        assert state.consecutive_growth == 2

    def test_last_place_counts_only_earlier_rounds(self, profile):
        """Finishing last this round is not yet a past last place."""
        state = TrackerState()
        AchievementTracker.update(state, self.observation(1, leader=False, last=True))
        team = create_initial_team_state("alpha", profile)

        current = context(team, 1)
        current.tracker = state
        assert resolve_metric(Metric.WAS_LAST_PLACE, current) is False

        AchievementTracker.update(state, self.observation(2))
        later = context(team, 2)
        later.tracker = state
        assert resolve_metric(Metric.WAS_LAST_PLACE, later) is True
        assert state.first_last_place_round == 1

    def test_repeated_round_clears_last_place(self):
        """Re-running a round restores the last-place marker from before it."""
        state = TrackerState()
        AchievementTracker.update(state, self.observation(1, leader=False, last=True))
        AchievementTracker.update(state, self.observation(1))

        assert state.first_last_place_round == 0
        assert state.rounds_as_revenue_leader == 1

    def test_comeback_needs_earlier_last_place(self, profile):
        """A past last place turned into sole leadership earns Comeback Trail."""
        definition = get_achievement("comeback_trail")
        ranks = {Metric.REVENUE: competition_ranks({"alpha": 10, "beta": 5})}
        team = create_initial_team_state("alpha", profile)

        tracker = TrackerState()
        AchievementTracker.update(tracker, self.observation(1, leader=False, last=True))
        same_round = context(team, 1, team_count=2, ranks=ranks)
        same_round.tracker = tracker
        assert AchievementLedger.evaluate(AchievementState(team_id="alpha"), same_round, profile,
                                          [definition]).newly_earned == []

        AchievementTracker.update(tracker, self.observation(2))
        comeback = context(team, 2, team_count=2, ranks=ranks)
        comeback.tracker = tracker
        result = AchievementLedger.evaluate(AchievementState(team_id="alpha"), comeback, profile, [definition])
        assert [e.achievement_id for e in result.newly_earned] == ["comeback_trail"]


class TestSummary:
    """Tests for the ledger summary."""

    def test_summary_counts(self, profile):
        team = create_initial_team_state("alpha", profile)
        team.esg_score = 50
        state = AchievementState(team_id="alpha")
        AchievementLedger.evaluate(state, context(team, 1), profile, [get_achievement("esg_pretender")])
        summary = AchievementLedger.summary(state)

        assert summary["available"] == 221
        assert summary["earned"] == 1
        assert summary["negative_points"] == -25
        assert summary["categories"]["overview"]["earned"] == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
