"""Tests for supply_chain_engine.py"""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from handset_sim.services.supply_chain_engine import (
    SupplyChainEngine, SourcingPlan, Disruption, DisruptionType,
    DisruptionMultipliers, Severity, VulnerabilityType
)
from handset_sim.services.rng import make_rng

QUIET = DisruptionMultipliers(frequency_multiplier=0.0)


def asia_disruption(duration: int = 2, severity: float = 0.5) -> Disruption:
    return Disruption(
        id="logistics_1_1",
        type=DisruptionType.LOGISTICS,
        affected_regions=["Asia"],
        severity=severity,
        duration=duration,
        rounds_remaining=duration,
        started_round=1,
    )


class TestInitialRoster:
    """Tests for the starting supply chain."""

    def test_default_metrics(self):
        """The default roster is moderately concentrated across two regions."""
        state = SupplyChainEngine.initialize_state()

        assert len(state.suppliers) == 3
        assert state.concentration == pytest.approx(0.5)
        assert state.geographic_diversity == pytest.approx(2 / 6)
        assert state.effective_capacity == 180_000
        assert state.cost_multiplier == pytest.approx(1.0)
        assert state.vulnerabilities == []

    def test_regions_sourced(self):
        """Regions with contracted volume are recorded."""
        state = SupplyChainEngine.initialize_state()
        assert set(state.regions_sourced) == {"Asia", "Europe"}


class TestDisruptions:
    """Tests for disruption lifecycle and impact."""

    def test_no_disruptions_when_frequency_zero(self):
        """A zero frequency multiplier never rolls an event."""
        state = SupplyChainEngine.initialize_state()
        for round_number in range(1, 20):
            result = SupplyChainEngine.process_round(
                state, None, round_number, make_rng("quiet", round_number, "supply_chain"), QUIET
            )
            assert result.new_disruptions == []
            state = result.state

    def test_disruption_resolves_after_duration(self):
        """A disruption of duration 2 is gone after two rounds and counts as weathered."""
        state = SupplyChainEngine.initialize_state()
        state.disruptions.append(asia_disruption(duration=2))

        first = SupplyChainEngine.process_round(state, None, 2, make_rng("d", 2, "sc"), QUIET)
        assert len(first.state.disruptions) == 1
        assert first.state.disruptions[0].rounds_remaining == 1

        second = SupplyChainEngine.process_round(first.state, None, 3, make_rng("d", 3, "sc"), QUIET)
        assert second.state.disruptions == []
        assert second.state.events_weathered == 1
        assert len(second.resolved_disruptions) == 1
        assert "resolved" in second.messages[0]

    def test_capacity_and_cost_impact(self):
        """An Asia disruption cuts Asian capacity and raises cost by its volume share."""
        state = SupplyChainEngine.initialize_state()
        state.disruptions.append(asia_disruption(severity=0.5))
        SupplyChainEngine.recompute(state)

        assert state.effective_capacity == pytest.approx(180_000 - 150_000 * 0.5)
        assert state.cost_multiplier == pytest.approx(1 + 0.25 * 0.8)
        assert state.quality_impact < SupplyChainEngine.initialize_state().quality_impact

    def test_seeded_rolls_reproducible(self):
        """The same seed rolls the same disruptions."""
        heavy = DisruptionMultipliers(frequency_multiplier=20.0)
        a = SupplyChainEngine.roll_disruptions(4, make_rng("roll", 4, "sc"), heavy)
        b = SupplyChainEngine.roll_disruptions(4, make_rng("roll", 4, "sc"), heavy)

        assert [(d.id, d.affected_regions, d.severity) for d in a] == \
               [(d.id, d.affected_regions, d.severity) for d in b]

    def test_pandemic_hits_every_region(self):
        """Pandemics affect all six regions."""
        regions = SupplyChainEngine.sample_regions(DisruptionType.PANDEMIC, make_rng("p", 1, "sc"))
        assert len(regions) == 6

    def test_input_not_modified(self):
        """process_round leaves the previous state untouched."""
        state = SupplyChainEngine.initialize_state()
        state.disruptions.append(asia_disruption())
        SupplyChainEngine.process_round(state, None, 2, make_rng("x", 2, "sc"), QUIET)

        assert state.disruptions[0].rounds_remaining == 2
        assert state.suppliers[0].relationship == 50


class TestSourcing:
    """Tests for sourcing decisions and relationships."""

    def test_relationships_grow_and_decay(self):
        """Active suppliers gain 5, dropped suppliers lose 2."""
        state = SupplyChainEngine.initialize_state()
        plan = SourcingPlan(drop_suppliers=["sup_backup"])
        result = SupplyChainEngine.process_round(state, plan, 1, make_rng("r", 1, "sc"), QUIET)

        assert result.state.supplier("sup_primary").relationship == 55
        assert result.state.supplier("sup_secondary").relationship == 35
        assert result.state.supplier("sup_backup").relationship == 18
        assert not result.state.supplier("sup_backup").active

    def test_relationship_capped(self):
        """Relationships never exceed 100."""
        state = SupplyChainEngine.initialize_state()
        for round_number in range(1, 15):
            state = SupplyChainEngine.process_round(
                state, None, round_number, make_rng("cap", round_number, "sc"), QUIET
            ).state
        assert max(s.relationship for s in state.suppliers) == 100

    def test_add_catalog_supplier(self):
        """New suppliers start at relationship 10 with half their capacity contracted."""
        state = SupplyChainEngine.initialize_state()
        plan = SourcingPlan(add_suppliers=["sup_na_precision"])
        result = SupplyChainEngine.process_round(state, plan, 1, make_rng("add", 1, "sc"), QUIET)
        supplier = result.state.supplier("sup_na_precision")

        assert supplier.relationship == 15
        assert supplier.contract_volume == 30_000
        assert result.state.geographic_diversity == pytest.approx(3 / 6)
        assert "North America" in result.state.regions_sourced

    def test_unknown_supplier_ignored(self):
        """Unknown catalog ids produce a message, not an error."""
        state = SupplyChainEngine.initialize_state()
        plan = SourcingPlan(add_suppliers=["sup_missing"])
        result = SupplyChainEngine.process_round(state, plan, 1, make_rng("u", 1, "sc"), QUIET)

        assert any("Unknown supplier" in m for m in result.messages)
        assert len(result.state.suppliers) == 3

    def test_empty_roster(self):
        """Dropping every supplier zeroes capacity and pins cost at the ceiling."""
        state = SupplyChainEngine.initialize_state()
        plan = SourcingPlan(drop_suppliers=["sup_primary", "sup_secondary", "sup_backup"])
        result = SupplyChainEngine.process_round(state, plan, 1, make_rng("e", 1, "sc"), QUIET)

        assert result.state.effective_capacity == 0
        assert result.state.cost_multiplier == SupplyChainEngine.COST_MULTIPLIER_CEILING
        assert result.state.quality_impact == SupplyChainEngine.DEFAULT_QUALITY

    def test_critical_concentration(self):
        """Leaning on one supplier is flagged critical and costs a premium."""
        state = SupplyChainEngine.initialize_state()
        plan = SourcingPlan(contract_volumes={"sup_primary": 100_000, "sup_secondary": 10_000})
        result = SupplyChainEngine.process_round(state, plan, 1, make_rng("c", 1, "sc"), QUIET)
        new_state = result.state

        assert new_state.concentration == pytest.approx(100 / 130)
        assert new_state.vulnerabilities[0].type == VulnerabilityType.CONCENTRATION
        assert new_state.vulnerabilities[0].severity == Severity.CRITICAL
        assert new_state.cost_multiplier == pytest.approx(1.05)
        assert any("Critical vulnerability" in w for w in result.warnings)
        assert SupplyChainEngine.total_mitigation_cost(new_state) >= 10_000_000
        assert any(m.startswith("Mitigating all vulnerabilities") for m in result.messages)

    def test_contract_volume_clamped(self):
        """Contract volume never exceeds supplier capacity."""
        state = SupplyChainEngine.initialize_state()
        plan = SourcingPlan(contract_volumes={"sup_backup": 1_000_000})
        result = SupplyChainEngine.process_round(state, plan, 1, make_rng("v", 1, "sc"), QUIET)

        assert result.state.supplier("sup_backup").contract_volume == 30_000

    def test_safety_stock_boosts_capacity(self):
        """Each safety stock level adds 10% effective capacity."""
        state = SupplyChainEngine.initialize_state()
        plan = SourcingPlan(safety_stock_buffer=2)
        result = SupplyChainEngine.process_round(state, plan, 1, make_rng("s", 1, "sc"), QUIET)

        assert result.state.effective_capacity == pytest.approx(180_000 * 1.2)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
