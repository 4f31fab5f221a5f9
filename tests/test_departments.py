"""Tests for departments.py and decisions.py"""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from handset_sim.schemas.decisions import (
    DecisionBundle, FactoryDecision, FinanceDecision, HRDecision,
    MarketingDecision, NewProductSpec, RDDecision
)
from handset_sim.services.decisions import DecisionSanitizer
from handset_sim.services.departments import DepartmentProcessor, RoundFacts
from handset_sim.services.game_profile import load_profile
from handset_sim.services.team_state import ProductStatus, create_initial_team_state


@pytest.fixture
def profile():
    return load_profile("normal")


@pytest.fixture
def team(profile):
    return create_initial_team_state("alpha", profile)


class TestResearch:
    """Tests for R&D processing."""

    def test_development_cost(self):
        """Cost scales with target quality above 50."""
        assert DepartmentProcessor.development_cost("Budget", 70) == 7_000_000
        assert DepartmentProcessor.development_cost("Professional", 50) == 35_000_000

    def test_new_product_launches_after_development(self, team, profile):
        """A quality-70 Budget phone takes two rounds and then launches at target quality."""
        decision = RDDecision(new_products=[NewProductSpec(name="Value X", segment="Budget", target_quality=70)])
        facts = RoundFacts()
        DepartmentProcessor.process_rd(team, decision, 1, profile, facts)

        product = team.products[-1]
        assert product.status == ProductStatus.IN_DEVELOPMENT
        assert product.rounds_remaining == 2
        assert facts.development_cost == 7_000_000
        assert facts.products_started == 1

        DepartmentProcessor.process_rd(team, RDDecision(), 2, profile, RoundFacts())
        assert product.status == ProductStatus.IN_DEVELOPMENT

        launch_facts = RoundFacts()
        DepartmentProcessor.process_rd(team, RDDecision(), 3, profile, launch_facts)
        assert product.status == ProductStatus.LAUNCHED
        assert product.quality == 70
        assert product.launched_round == 3
        assert launch_facts.products_launched == 1

    def test_insufficient_funds(self, team, profile):
        """Development that the team cannot afford is skipped with a warning."""
        team.cash = 1_000_000
        decision = RDDecision(new_products=[NewProductSpec(name="Flagship", segment="Professional",
                                                           target_quality=90)])
        facts = RoundFacts()
        DepartmentProcessor.process_rd(team, decision, 1, profile, facts)

        assert facts.products_started == 0
        assert any("Insufficient funds" in w for w in facts.warnings)

    def test_patents(self, team, profile):
        """Every 500 R&D points files a patent."""
        facts = RoundFacts()
        DepartmentProcessor.process_rd(team, RDDecision(rd_budget=60_000_000), 1, profile, facts)

        assert team.patents == 1
        assert facts.patents_earned == 1
        assert team.rd_progress == pytest.approx(100)

    def test_discontinue(self, team, profile):
        facts = RoundFacts()
        DepartmentProcessor.process_rd(team, RDDecision(discontinue=["alpha-p2", "missing"]), 1, profile, facts)

        assert team.product("alpha-p2").status == ProductStatus.DISCONTINUED
        assert facts.products_discontinued == 1
        assert len(facts.warnings) == 1


class TestMarketing:
    """Tests for brand and pricing."""

    def test_brand_growth_capped(self, team, profile):
        """Brand growth is capped at 2% before decay."""
        facts = RoundFacts()
        decision = MarketingDecision(branding_investment=50_000_000, advertising={"Budget": 20_000_000})
        DepartmentProcessor.process_marketing(team, decision, profile, facts)

        assert team.brand_value == pytest.approx((0.25 + 0.02) * 0.975)
        assert any("capped" in m for m in facts.messages)
        assert facts.marketing_spend == 70_000_000

    def test_brand_decays_without_spend(self, team, profile):
        DepartmentProcessor.process_marketing(team, MarketingDecision(), profile, RoundFacts())
        assert team.brand_value == pytest.approx(0.25 * 0.975)

    def test_advertising_segment_multiplier(self):
        """Budget buyers respond more to advertising than professionals."""
        assert DepartmentProcessor.advertising_impact(3_000_000, "Budget") == pytest.approx(3 * 0.0015 * 1.1)
        assert DepartmentProcessor.advertising_impact(3_000_000, "Professional") == pytest.approx(3 * 0.0015 * 0.5)

    def test_advertising_diminishing_returns(self):
        """Spend beyond the first chunk is worth less."""
        first = DepartmentProcessor.advertising_impact(3_000_000, "General")
        double = DepartmentProcessor.advertising_impact(6_000_000, "General")
        assert double == pytest.approx(first * 1.4)

    def test_price_changes(self, team, profile):
        facts = RoundFacts()
        decision = MarketingDecision(prices={"alpha-p1": 399, "ghost": 100})
        DepartmentProcessor.process_marketing(team, decision, profile, facts)

        assert team.product("alpha-p1").price == 399
        assert facts.price_changes == 1
        assert any("ghost" in w for w in facts.warnings)


class TestHumanResources:
    """Tests for workforce changes."""

    def test_hiring(self, team, profile):
        facts = RoundFacts()
        DepartmentProcessor.process_hr(team, HRDecision(hires=10), profile, 1.0, facts)

        assert team.workforce.headcount == 73
        assert facts.hires == 10
        assert facts.hiring_cost >= 10 * 75_000 * 0.15

    def test_layoffs_capped_and_hurt_morale(self, team, profile):
        facts = RoundFacts()
        DepartmentProcessor.process_hr(team, HRDecision(fires=1_000), profile, 1.0, facts)

        assert facts.fires == 63
        assert team.workforce.headcount == 0
        assert team.workforce.average_morale < 70

    def test_training(self, team, profile):
        facts = RoundFacts()
        DepartmentProcessor.process_hr(team, HRDecision(training_program="advanced"), profile, 1.0, facts)

        assert team.workforce.average_efficiency == 74
        assert facts.training_cost == 1_500 * 63

    def test_morale_stays_bounded(self, team, profile):
        for _ in range(10):
            DepartmentProcessor.process_hr(team, HRDecision(salary_multiplier=2.0, benefits_budget=10_000_000),
                                           profile, 1.0, RoundFacts())
        assert 0 <= team.workforce.average_morale <= 100


class TestFactory:
    """Tests for factory and ESG decisions."""

    def test_esg_program(self, team):
        """Adopting a program adds its ESG points and recurring cost."""
        facts = RoundFacts()
        DepartmentProcessor.process_factory(team, FactoryDecision(esg_programs=["workplace_health_safety"]), facts)

        assert team.esg_score == 300
        assert facts.esg_program_cost == 2_000_000
        assert team.esg_programs == ["workplace_health_safety"]

    def test_dropping_program(self, team):
        """Dropping a program loses half its points."""
        DepartmentProcessor.process_factory(team, FactoryDecision(esg_programs=["code_of_ethics"]), RoundFacts())
        facts = RoundFacts()
        DepartmentProcessor.process_factory(team, FactoryDecision(drop_esg_programs=["code_of_ethics"]), facts)

        assert team.esg_score == 200
        assert team.esg_programs == []

    def test_efficiency_wear(self, team):
        """Without investment, factories lose a point of efficiency."""
        DepartmentProcessor.process_factory(team, FactoryDecision(), RoundFacts())
        assert team.factories[0].efficiency == pytest.approx(0.69)

    def test_efficiency_ceiling(self, team):
        for _ in range(20):
            DepartmentProcessor.process_factory(team, FactoryDecision(efficiency_investment=100_000_000),
                                                RoundFacts())
        assert team.factories[0].efficiency <= DepartmentProcessor.EFFICIENCY_CEILING

    def test_capacity_expansion(self, team):
        facts = RoundFacts()
        DepartmentProcessor.process_factory(team, FactoryDecision(capacity_expansion=10_000), facts)

        assert team.factories[0].capacity == 260_000
        assert facts.capacity_cost == 400_000

    def test_esg_clamped(self, team):
        team.esg_score = 950
        DepartmentProcessor.process_factory(
            team, FactoryDecision(esg_programs=["workplace_health_safety", "fair_wage_program"]), RoundFacts()
        )
        assert team.esg_score == 1000


class TestFinance:
    """Tests for financing flows."""

    def test_loan(self, team):
        facts = RoundFacts()
        DepartmentProcessor.process_finance(team, FinanceDecision(loan_request=10_000_000), facts)

        assert team.debt == 10_000_000
        assert team.cash == 210_000_000
        assert facts.loan_taken == 10_000_000

    def test_repayment_limited_to_debt(self, team):
        team.debt = 5_000_000
        facts = RoundFacts()
        DepartmentProcessor.process_finance(team, FinanceDecision(debt_repayment=8_000_000), facts)

        assert team.debt == 0
        assert facts.debt_repaid == 5_000_000
        assert facts.warnings

    def test_stock_issuance_discount(self, team):
        facts = RoundFacts()
        DepartmentProcessor.process_finance(team, FinanceDecision(stock_issuance=1_000), facts)

        assert facts.equity_raised == pytest.approx(1_000 * 50 * 0.95)
        assert team.shares_issued == 10_001_000

    def test_buyback_needs_cash(self, team):
        team.cash = 1_000
        facts = RoundFacts()
        DepartmentProcessor.process_finance(team, FinanceDecision(share_buyback=1_000), facts)

        assert facts.shares_bought_back == 0
        assert any("buyback skipped" in w for w in facts.warnings)

    def test_staffing_factor(self, team):
        """The starting headcount can run the starting factory."""
        assert DepartmentProcessor.staffing_factor(team) == pytest.approx(0.8 + 0.2 * 0.7)


class TestDecisionSanitizer:
    """Tests for per-department validation."""

    def test_missing_decisions(self):
        result = DecisionSanitizer.sanitize("alpha", None)

        assert len(result.substituted) == 6
        assert result.warnings == ["No decisions submitted; defaults used for every department"]

    def test_invalid_department_replaced(self):
        """A bad department falls back to defaults while the others survive."""
        raw = {
            "hr": {"salary_multiplier": 5},
            "finance": {"loan_request": 1_000_000},
            "legal": {},
        }
        result = DecisionSanitizer.sanitize("alpha", raw)

        assert "hr" in result.substituted
        assert "finance" not in result.substituted
        assert result.bundle.finance.loan_request == 1_000_000
        assert result.bundle.hr.salary_multiplier == 1.0
        assert "Ignored unknown department 'legal'" in result.warnings
        assert any(w.startswith("Invalid hr decisions") for w in result.warnings)

    def test_bundle_passes_through(self):
        bundle = DecisionBundle(finance=FinanceDecision(loan_request=5))
        result = DecisionSanitizer.sanitize("alpha", bundle)

        assert result.bundle is bundle
        assert result.substituted == []

    def test_non_object_payload(self):
        result = DecisionSanitizer.sanitize("alpha", ["not", "a", "dict"])
        assert "not an object" in result.warnings[0]

    def test_unknown_esg_program_rejected(self):
        result = DecisionSanitizer.sanitize("alpha", {"factory": {"esg_programs": ["moon_base"]}})
        assert "factory" in result.substituted


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
