"""Tests for tariff_engine.py"""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from handset_sim.services.tariff_engine import TariffEngine, TeamSignals
from handset_sim.services.tariff_tables import TradeAgreement
from handset_sim.services.game_profile import TariffConfig
from handset_sim.services.rng import make_rng


class AlwaysFires:
    """Generator stub whose every roll succeeds."""

    def random(self):
        return 0.0


def only_events(*event_ids):
    return TariffConfig(event_ids=list(event_ids), geopolitical_event_ids=[], scenario_ids=[])


class TestCalculateTariff:
    """Tests for rate lookup and agreement reductions."""

    def test_baseline_rate(self):
        """Asian processors into North America carry the 25% trade war duty."""
        state = TariffEngine.initialize_state()
        calc = TariffEngine.calculate_tariff(state, "Asia", "North America", "processor", 1_000, 1)

        assert calc.base_rate == pytest.approx(0.25)
        assert calc.adjusted_rate == pytest.approx(0.25)
        assert calc.amount == 250
        assert calc.applicable_tariffs == ["us_china_electronics"]
        assert any("volatile" in w for w in calc.warnings)

    def test_material_filter(self):
        """Tariffs scoped to some materials skip the others."""
        state = TariffEngine.initialize_state()
        calc = TariffEngine.calculate_tariff(state, "Asia", "North America", "battery", 1_000, 1)

        assert calc.adjusted_rate == 0.0
        assert calc.amount == 0

    def test_unscoped_tariff(self):
        """A tariff without a material list covers everything on its route."""
        state = TariffEngine.initialize_state()
        for material in ("processor", "chassis", "battery"):
            calc = TariffEngine.calculate_tariff(state, "Asia", "Europe", material, 100, 1)
            assert calc.adjusted_rate == pytest.approx(0.10)

    def test_agreement_reduction(self):
        """Agreements covering both ends cut the rate by their reduction."""
        state = TariffEngine.initialize_state()
        state.agreements.append(TradeAgreement("test_pact", "Test Pact", "free_trade", ["Asia", "Europe"], 0.5))
        calc = TariffEngine.calculate_tariff(state, "Asia", "Europe", "display", 1_000, 1)

        assert calc.base_rate == pytest.approx(0.10)
        assert calc.adjusted_rate == pytest.approx(0.05)
        assert calc.amount == 50
        assert calc.applied_agreements == ["test_pact"]

    def test_stacked_agreements_never_raise_rate(self):
        """Each extra agreement lowers the rate further and never below zero."""
        state = TariffEngine.initialize_state()
        rates = [TariffEngine.calculate_tariff(state, "Asia", "Europe", "display", 1_000, 1).adjusted_rate]
        for i in range(3):
            state.agreements.append(TradeAgreement(f"pact_{i}", f"Pact {i}", "free_trade", ["Asia", "Europe"], 0.3))
            rates.append(TariffEngine.calculate_tariff(state, "Asia", "Europe", "display", 1_000, 1).adjusted_rate)

        assert all(later <= earlier for earlier, later in zip(rates, rates[1:]))
        assert all(rate >= 0 for rate in rates)
        assert rates[-1] == pytest.approx(0.10 * 0.7 ** 3)

    def test_total_burden(self):
        """Duty is aggregated per route."""
        state = TariffEngine.initialize_state()
        burden = TariffEngine.total_burden(state, [
            ("Asia", "North America", "processor", 1_000),
            ("Asia", "Europe", "display", 1_000),
        ], 1)

        assert burden["total_cost"] == 2_000
        assert burden["total_tariff"] == 350
        assert burden["effective_rate"] == pytest.approx(0.175)
        assert burden["by_route"]["Asia->Europe"] == 100

    def test_route_multiplier_empty(self):
        """No sourcing volume means no landed-cost uplift."""
        state = TariffEngine.initialize_state()
        assert TariffEngine.route_multiplier(state, {}, "North America", 1) == 1.0


class TestProcessRound:
    """Tests for scripted and geopolitical events."""

    def test_escalation_installs_tariff(self):
        """A fired escalation stacks a time-boxed tariff on the route."""
        state = TariffEngine.initialize_state()
        result = TariffEngine.process_round(state, 1, AlwaysFires(), config=only_events("trade_war_escalation"))
        calc = TariffEngine.calculate_tariff(result.state, "Asia", "North America", "processor", 1_000, 1)

        assert result.triggered_events == ["trade_war_escalation"]
        assert len(result.new_tariffs) == 2
        assert calc.adjusted_rate == pytest.approx(0.5)
        assert any("raising duties" in w for w in calc.warnings)
        assert result.state.is_active("trade_war_escalation")

    def test_event_tariffs_expire(self):
        """An eight-round event fired in round 1 is in force for rounds 1 to 8."""
        state = TariffEngine.initialize_state()
        state = TariffEngine.process_round(state, 1, AlwaysFires(), config=only_events("trade_war_escalation")).state
        assert all(t.expiry_round == 8 for t in state.tariffs if t.id.startswith("event_"))

        still = TariffEngine.process_round(state, 8, AlwaysFires(), config=only_events())
        assert still.expired_tariffs == []
        assert still.state.is_active("trade_war_escalation")
        assert TariffEngine.calculate_tariff(still.state, "Asia", "North America", "processor", 1, 8).adjusted_rate \
            == pytest.approx(0.5)

        gone = TariffEngine.process_round(still.state, 9, AlwaysFires(), config=only_events())
        assert len(gone.expired_tariffs) == 2
        assert not gone.state.is_active("trade_war_escalation")
        assert TariffEngine.calculate_tariff(gone.state, "Asia", "North America", "processor", 1, 9).adjusted_rate \
            == pytest.approx(0.25)

    def test_geopolitical_event_duration(self):
        """Geopolitical events also count the round they fire in."""
        state = TariffEngine.initialize_state()
        config = TariffConfig(event_ids=[], geopolitical_event_ids=["commodity_crisis"], scenario_ids=[],
                              geopolitical_event_chance=1.0)
        fired = TariffEngine.process_round(state, 1, AlwaysFires(), config=config)
        assert fired.state.geopolitical_events[0].expiry_round == 8

        quiet = TariffConfig(event_ids=[], geopolitical_event_ids=[], scenario_ids=[])
        eighth = TariffEngine.process_round(fired.state, 8, AlwaysFires(), config=quiet)
        assert [e.id for e in eighth.state.geopolitical_events] == ["commodity_crisis"]
        ninth = TariffEngine.process_round(eighth.state, 9, AlwaysFires(), config=quiet)
        assert ninth.state.geopolitical_events == []

    def test_active_event_not_refired(self):
        """An event already in force is skipped."""
        state = TariffEngine.initialize_state()
        first = TariffEngine.process_round(state, 1, AlwaysFires(), config=only_events("trade_war_escalation"))
        second = TariffEngine.process_round(first.state, 2, AlwaysFires(), config=only_events("trade_war_escalation"))

        assert second.triggered_events == []

    def test_trigger_requires_signal(self):
        """Anti-dumping only fires when a team dominates the market."""
        state = TariffEngine.initialize_state()
        config = only_events("anti_dumping_investigation")

        quiet = TariffEngine.process_round(state, 2, AlwaysFires(), signals=TeamSignals(max_market_share=0.2),
                                           config=config)
        assert quiet.triggered_events == []

        loud = TariffEngine.process_round(state, 2, AlwaysFires(), signals=TeamSignals(max_market_share=0.5),
                                          config=config)
        assert loud.triggered_events == ["anti_dumping_investigation"]
        calc = TariffEngine.calculate_tariff(loud.state, "Asia", "North America", "display", 1, 2)
        assert calc.adjusted_rate == pytest.approx(0.65)

    def test_earliest_round(self):
        """Events with an earliest round wait for it."""
        state = TariffEngine.initialize_state()
        config = only_events("supply_chain_security_act")

        assert TariffEngine.process_round(state, 2, AlwaysFires(), config=config).triggered_events == []
        assert TariffEngine.process_round(state, 3, AlwaysFires(), config=config).triggered_events == \
            ["supply_chain_security_act"]

    def test_relief_event(self):
        """Relief events scale down existing tariffs on their routes."""
        state = TariffEngine.initialize_state()
        result = TariffEngine.process_round(state, 1, AlwaysFires(), config=only_events("free_trade_breakthrough"))
        calc = TariffEngine.calculate_tariff(result.state, "Asia", "Europe", "processor", 1, 1)

        assert calc.adjusted_rate == pytest.approx(0.10 * 0.85)
        assert result.new_tariffs == []
        assert result.messages[0].startswith("Trade relief")

    def test_geopolitical_surcharge(self):
        """Geopolitical events add their surcharge to the landed multiplier."""
        state = TariffEngine.initialize_state()
        config = TariffConfig(event_ids=[], geopolitical_event_ids=["strait_closure"], scenario_ids=[],
                              geopolitical_event_chance=1.0)
        result = TariffEngine.process_round(state, 1, AlwaysFires(), config=config)

        assert result.triggered_events == ["strait_closure"]
        multiplier = TariffEngine.landed_multiplier(result.state, "Asia", "Europe", 1)
        assert multiplier == pytest.approx(1.0 + 0.10 + 0.40)

    def test_disabled(self):
        """A disabled regime never changes."""
        state = TariffEngine.initialize_state()
        result = TariffEngine.process_round(state, 1, AlwaysFires(), config=TariffConfig(enabled=False))

        assert result.triggered_events == []
        assert len(result.state.tariffs) == len(state.tariffs)

    def test_input_not_modified(self):
        """process_round leaves the previous state untouched."""
        state = TariffEngine.initialize_state()
        TariffEngine.process_round(state, 1, AlwaysFires(), config=only_events("trade_war_escalation"))

        assert len(state.tariffs) == 4
        assert state.active_events == []

    def test_deterministic(self):
        """The same seed yields the same regime."""
        def run(seed):
            state = TariffEngine.initialize_state()
            fired = []
            for round_number in range(1, 13):
                result = TariffEngine.process_round(state, round_number, make_rng(seed, round_number, "tariffs"))
                fired.extend(result.triggered_events)
                state = result.state
            return fired

        assert run("trade") == run("trade")


class TestMitigation:
    """Tests for sourcing advice on a route."""

    def test_trade_war_route(self):
        state = TariffEngine.initialize_state()
        strategies = TariffEngine.mitigation_strategies(state, "Asia", "North America", 1)

        assert strategies == [
            "Relocate sourcing away from Asia for high-duty components",
            "Source from USMCA (North American Trade Agreement) members to reduce duties",
            "Lock in forward contracts before volatile tariffs change",
        ]

    def test_protectionist_destination(self):
        state = TariffEngine.initialize_state()
        strategies = TariffEngine.mitigation_strategies(state, "Asia", "South America", 1)
        assert "Consider local assembly in South America to avoid protectionist duties" in strategies


class TestForecast:
    """Tests for the advisory projection."""

    def test_confidence_decays(self):
        """Confidence falls linearly to one half at the horizon."""
        state = TariffEngine.initialize_state()
        forecast = TariffEngine.forecast(state, "Asia", "North America", "processor", 4, 1,
                                         make_rng("f", 2, "forecast"))

        assert [p.round_number for p in forecast.projections] == [2, 3, 4, 5]
        assert [p.confidence for p in forecast.projections] == pytest.approx([0.875, 0.75, 0.625, 0.5])

    def test_probabilities_and_recommendations(self):
        """Volatile, high duties raise the increase odds and prompt a sourcing review."""
        state = TariffEngine.initialize_state()
        forecast = TariffEngine.forecast(state, "Asia", "North America", "processor", 4, 1,
                                         make_rng("f", 2, "forecast"))

        assert forecast.current_rate == pytest.approx(0.25)
        assert forecast.increase_probability == pytest.approx(0.3)
        assert forecast.decrease_probability == pytest.approx(0.1)
        assert "Current duty is high; evaluate alternative sourcing regions" in forecast.recommendations

    def test_stable_route(self):
        """An untaxed route into a free-trade region is reported stable or relieving."""
        state = TariffEngine.initialize_state()
        forecast = TariffEngine.forecast(state, "North America", "Europe", "battery", 2, 1,
                                         make_rng("f", 2, "forecast"))

        assert forecast.current_rate == 0.0
        assert forecast.decrease_probability == pytest.approx(0.3)
        assert all(p.rate == 0.0 for p in forecast.projections)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
