"""Tests for economic_cycle.py"""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from handset_sim.services.economic_cycle import EconomicCycleEngine, EconomicPhase
from handset_sim.services.game_profile import SEGMENTS, load_profile
from handset_sim.services.rng import make_rng


def run_cycle(profile, seed: str, rounds: int):
    state = EconomicCycleEngine.initialize_state(profile.economic_cycle)
    impacts = []
    for round_number in range(1, rounds + 1):
        state, impact = EconomicCycleEngine.advance(
            state, profile.economic_cycle, make_rng(seed, round_number, "economy")
        )
        impacts.append(impact)
    return state, impacts


class TestPhaseTransitions:
    """Tests for the Markov chain."""

    def test_initial_state(self):
        """A new game starts in the configured phase with its baseline conditions."""
        profile = load_profile("normal")
        state = EconomicCycleEngine.initialize_state(profile.economic_cycle)

        assert state.phase == EconomicPhase.EXPANSION
        assert state.rounds_in_phase == 0
        assert state.conditions.gdp_growth == 3.0
        assert state.phase_history == ["expansion"]

    def test_minimum_stay_in_first_phase(self):
        """Expansion lasts at least four rounds whatever the seed."""
        profile = load_profile("nightmare")
        for i in range(25):
            state, _ = run_cycle(profile, f"seed-{i}", 3)
            assert state.phase == EconomicPhase.EXPANSION

    def test_minimum_duration_every_phase(self):
        """No completed phase run is shorter than its minimum stay."""
        profile = load_profile("nightmare")
        minimums = profile.economic_cycle.min_rounds_in_phase
        for i in range(10):
            state, _ = run_cycle(profile, f"cycle-{i}", 40)
            history = state.phase_history

            runs = []
            current, length = history[0], 0
            for phase in history:
                if phase == current:
                    length += 1
                else:
                    runs.append((current, length))
                    current, length = phase, 1
            for phase, length in runs:
                assert length >= minimums[phase], f"{phase} lasted {length} rounds"

    def test_deterministic(self):
        """Same seed, same economy."""
        profile = load_profile("hard")
        a, impacts_a = run_cycle(profile, "same", 12)
        b, impacts_b = run_cycle(profile, "same", 12)

        assert a.phase_history == b.phase_history
        assert [i.demand_multiplier for i in impacts_a] == [i.demand_multiplier for i in impacts_b]

    def test_input_not_modified(self):
        """advance returns a new state."""
        profile = load_profile("normal")
        state = EconomicCycleEngine.initialize_state(profile.economic_cycle)
        EconomicCycleEngine.advance(state, profile.economic_cycle, make_rng("x", 1, "economy"))

        assert state.rounds_in_phase == 0
        assert state.phase_history == ["expansion"]

    def test_recession_boost(self):
        """Recession probability moves weight from staying to contracting."""
        profile = load_profile("nightmare")
        row = EconomicCycleEngine.transition_probabilities(EconomicPhase.PEAK, profile.economic_cycle)

        assert row["contraction"] == pytest.approx(0.6 + 0.3)
        assert row["peak"] == pytest.approx(0.0)
        assert sum(row.values()) == pytest.approx(1.0)


class TestEconomicImpact:
    """Tests for the multipliers handed to settlement."""

    def test_demand_formula(self):
        """Demand multiplier follows confidence and GDP."""
        profile = load_profile("normal")
        state = EconomicCycleEngine.initialize_state(profile.economic_cycle)
        impact = EconomicCycleEngine.calculate_impact(state, profile.economic_cycle)

        expected = 1 + (75 - 50) / 100 * 0.3 + 3.0 / 100 * 0.2
        assert impact.demand_multiplier == pytest.approx(expected)
        assert impact.financing_cost_multiplier == pytest.approx(7.0 / 4.5)
        assert impact.labor_cost_multiplier == 1.1  # unemployment 4.5 < 5
        assert impact.investor_sentiment == 10

    def test_jitter_range(self):
        """Each segment gets jitter within +/-5%."""
        profile = load_profile("normal")
        _, impacts = run_cycle(profile, "jitter", 8)
        for impact in impacts:
            assert set(impact.demand_jitter) == set(SEGMENTS)
            for value in impact.demand_jitter.values():
                assert 0.95 <= value <= 1.05

    def test_disabled_cycle_is_neutral(self):
        """A disabled cycle holds conditions and returns unit multipliers."""
        profile = load_profile("normal", {"economic_cycle": {"enabled": False}})
        state, impacts = run_cycle(profile, "off", 6)

        assert state.phase == EconomicPhase.EXPANSION
        for impact in impacts:
            assert impact.demand_multiplier == 1.0
            assert impact.cost_multiplier == 1.0
            assert all(v == 1.0 for v in impact.demand_jitter.values())

    def test_conditions_stay_bounded(self):
        """Confidence, commodities and currency stay inside their clamps."""
        profile = load_profile("nightmare")
        state = EconomicCycleEngine.initialize_state(profile.economic_cycle)
        for round_number in range(1, 30):
            state, _ = EconomicCycleEngine.advance(
                state, profile.economic_cycle, make_rng("bounds", round_number, "economy")
            )
            c = state.conditions
            assert 10 <= c.consumer_confidence <= 100
            assert 0.7 <= c.currency_strength <= 1.3
            assert all(0.5 <= p <= 2.0 for p in c.commodity_prices.values())


class TestForecast:
    """Tests for the advisory forecast."""

    def test_most_likely_phase(self):
        """From expansion the most likely next phase is expansion."""
        profile = load_profile("normal")
        state = EconomicCycleEngine.initialize_state(profile.economic_cycle)
        forecast = EconomicCycleEngine.forecast(state, profile.economic_cycle)

        assert forecast.next_phase == EconomicPhase.EXPANSION
        assert forecast.transition_probability == pytest.approx(0.6)
        assert forecast.gdp_range["low"] < forecast.gdp_range["mid"] < forecast.gdp_range["high"]

    def test_recession_risk_flagged(self):
        """Heavy recession odds show up as a risk factor."""
        profile = load_profile("nightmare")
        state = EconomicCycleEngine.initialize_state(profile.economic_cycle)
        forecast = EconomicCycleEngine.forecast(state, profile.economic_cycle)

        assert "Elevated recession risk" in forecast.risk_factors


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
