"""Department processing for one team in one round.

Applies validated R&D, HR, marketing, factory and finance decisions to a
copy of the team's state before demand allocation. Spending is recorded in
RoundFacts and expensed later by the financial statement; financing flows
(loans, equity, dividends) move cash directly.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

from ..schemas.decisions import (
    ESG_PROGRAMS,
    FactoryDecision,
    FinanceDecision,
    HRDecision,
    MarketingDecision,
    RDDecision,
)
from .game_profile import FEATURE_AXES, GameProfile
from .team_state import Product, ProductStatus, TeamState, unit_cost_for

logger = logging.getLogger(__name__)


@dataclass
class RoundFacts:
    """Everything a team did and suffered in one round."""
    # R&D
    rd_budget: float = 0.0
    development_cost: float = 0.0
    improvement_cost: float = 0.0
    products_started: int = 0
    products_launched: int = 0
    products_discontinued: int = 0
    improvements_made: int = 0
    patents_earned: int = 0
    # Marketing
    advertising_spend: float = 0.0
    branding_spend: float = 0.0
    advertised_segments: int = 0
    brand_growth: float = 0.0
    price_changes: int = 0
    # HR
    hires: int = 0
    fires: int = 0
    turnover_losses: int = 0
    training_program: Optional[str] = None
    hiring_cost: float = 0.0
    severance_cost: float = 0.0
    training_cost: float = 0.0
    benefits_cost: float = 0.0
    salary_multiplier: float = 1.0
    # Factory / ESG
    efficiency_investment: float = 0.0
    green_investment: float = 0.0
    capacity_added: int = 0
    capacity_cost: float = 0.0
    esg_program_cost: float = 0.0
    donations: float = 0.0
    esg_programs_adopted: int = 0
    esg_gain: float = 0.0
    # Finance
    loan_taken: float = 0.0
    debt_repaid: float = 0.0
    shares_issued: int = 0
    equity_raised: float = 0.0
    shares_bought_back: int = 0
    buyback_cost: float = 0.0
    dividends_paid: float = 0.0
    # Supply chain
    suppliers_added: int = 0
    suppliers_dropped: int = 0
    new_disruptions: int = 0
    safety_stock_cost: float = 0.0
    # Sales and statement, filled by settlement
    units_demanded: int = 0
    units_sold: int = 0
    capacity: float = 0.0
    cogs: float = 0.0
    labor_cost: float = 0.0
    interest: float = 0.0
    tax: float = 0.0
    tariff_multiplier: float = 1.0
    tariff_cost: float = 0.0
    esg_penalty: float = 0.0
    balance_multiplier: float = 1.0
    balance_status: str = "neutral"
    substituted_departments: List[str] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def marketing_spend(self) -> float:
        return self.advertising_spend + self.branding_spend

    @property
    def rd_spend(self) -> float:
        return self.rd_budget + self.development_cost + self.improvement_cost

    @property
    def hr_spend(self) -> float:
        return self.hiring_cost + self.severance_cost + self.training_cost + self.benefits_cost

    @property
    def factory_spend(self) -> float:
        return (self.efficiency_investment + self.green_investment + self.capacity_cost
                + self.esg_program_cost + self.donations)

    @property
    def operating_spend(self) -> float:
        return (self.marketing_spend + self.rd_spend + self.hr_spend + self.factory_spend
                + self.safety_stock_cost)

    @property
    def utilization(self) -> float:
        return self.units_sold / self.capacity if self.capacity > 0 else 0.0


class DepartmentProcessor:
    """Per-department state changes. Every method mutates the given copy."""

    # R&D
    RD_POINTS_PER_DOLLAR = 1 / 100_000
    PATENT_THRESHOLD = 500
    DEVELOPMENT_BASE_COST = {
        "Budget": 5_000_000,
        "General": 10_000_000,
        "Enthusiast": 20_000_000,
        "Professional": 35_000_000,
        "Active Lifestyle": 15_000_000,
    }
    DEVELOPMENT_BASE_ROUNDS = 2
    DEVELOPMENT_QUALITY_FACTOR = 0.02   # extra rounds per quality point above 50
    QUALITY_POINT_COST = 1_000_000
    FEATURE_POINT_COST = 500_000

    # Marketing
    ADVERTISING_IMPACT_PER_MILLION = 0.0015
    ADVERTISING_CHUNK = 3               # millions per diminishing-returns step
    ADVERTISING_DECAY = 0.4
    SEGMENT_AD_MULTIPLIER = {
        "Budget": 1.1,
        "General": 1.0,
        "Enthusiast": 0.75,
        "Professional": 0.5,
        "Active Lifestyle": 0.85,
    }
    BRANDING_IMPACT_PER_MILLION = 0.0025

    # HR
    HIRING_COST_RATE = 0.15             # of annual salary
    SEVERANCE_RATE = 0.25
    TRAINING = {
        # cost per employee, efficiency gain, morale gain
        "basic": (500, 2.0, 0.0),
        "advanced": (1_500, 4.0, 1.0),
        "leadership": (3_000, 2.0, 4.0),
    }
    MORALE_ANCHOR = 60.0
    BASE_TURNOVER = 0.03

    # Factory
    EFFICIENCY_CEILING = 0.95
    EFFICIENCY_WEAR = 0.01              # per round without investment
    CAPACITY_COST_PER_UNIT = 40
    ESG_PER_GREEN_MILLION = 10

    @classmethod
    def process_rd(cls, team: TeamState, decision: RDDecision, round_number: int,
                   profile: GameProfile, facts: RoundFacts) -> None:
        facts.rd_budget = decision.rd_budget
        team.rd_progress += decision.rd_budget * cls.RD_POINTS_PER_DOLLAR

        for product in team.products:
            if product.status != ProductStatus.IN_DEVELOPMENT:
                continue
            product.rounds_remaining = max(0, product.rounds_remaining - 1)
            if product.rounds_remaining == 0:
                product.status = ProductStatus.LAUNCHED
                product.quality = product.target_quality or product.quality
                product.features = dict(product.target_features) or product.features
                product.unit_cost = unit_cost_for(product.segment, product.quality, profile)
                product.launched_round = round_number
                facts.products_launched += 1
                facts.messages.append(f"{product.name} finished development and launched in {product.segment}")

        speedup = min(0.5, decision.rd_budget / 20_000_000)
        available = team.cash
        for spec in decision.new_products:
            cost = cls.development_cost(spec.segment, spec.target_quality)
            if cost > available:
                facts.warnings.append(f"Insufficient funds to develop {spec.name}")
                continue
            available -= cost
            rounds = cls.development_rounds(spec.target_quality, speedup)
            target_features = {axis: float(spec.target_features.get(axis, 60.0)) for axis in FEATURE_AXES}
            product = Product(
                id=f"{team.team_id}-p{len(team.products) + 1}",
                name=spec.name,
                segment=spec.segment,
                price=cls.suggest_price(profile, spec.segment, spec.target_quality),
                quality=round(spec.target_quality * 0.5),
                features={axis: round(v * 0.5) for axis, v in target_features.items()},
                status=ProductStatus.IN_DEVELOPMENT,
                unit_cost=unit_cost_for(spec.segment, spec.target_quality, profile),
                rounds_remaining=rounds,
                target_quality=spec.target_quality,
                target_features=target_features,
            )
            team.products.append(product)
            facts.development_cost += cost
            facts.products_started += 1
            facts.messages.append(
                f"Started development of {spec.name} for {spec.segment} ({rounds} rounds to complete)"
            )

        for improvement in decision.improvements:
            product = team.product(improvement.product_id)
            if product is None or product.status == ProductStatus.DISCONTINUED:
                facts.warnings.append(f"Cannot improve unknown product '{improvement.product_id}'")
                continue
            points_needed = improvement.quality_increase * 10
            cost = (improvement.quality_increase * cls.QUALITY_POINT_COST
                    + improvement.feature_increase * cls.FEATURE_POINT_COST)
            if team.rd_progress < points_needed or cost > available:
                facts.warnings.append(f"Cannot improve {product.name}: insufficient funds or R&D points")
                continue
            available -= cost
            team.rd_progress -= points_needed
            product.quality = min(100.0, product.quality + improvement.quality_increase)
            product.features = {
                axis: min(100.0, product.features.get(axis, 0.0) + improvement.feature_increase)
                for axis in FEATURE_AXES
            }
            product.unit_cost = unit_cost_for(product.segment, product.quality, profile)
            facts.improvement_cost += cost
            facts.improvements_made += 1

        for product_id in decision.discontinue:
            product = team.product(product_id)
            if product is None or product.status == ProductStatus.DISCONTINUED:
                facts.warnings.append(f"Cannot discontinue unknown product '{product_id}'")
                continue
            product.status = ProductStatus.DISCONTINUED
            facts.products_discontinued += 1

        while team.rd_progress >= cls.PATENT_THRESHOLD:
            team.rd_progress -= cls.PATENT_THRESHOLD
            team.patents += 1
            facts.patents_earned += 1
        if facts.patents_earned:
            facts.messages.append(f"Filed {facts.patents_earned} new patent(s), {team.patents} total")

    @classmethod
    def development_cost(cls, segment: str, target_quality: float) -> float:
        return round(cls.DEVELOPMENT_BASE_COST[segment] * (1 + (target_quality - 50) / 50))

    @classmethod
    def development_rounds(cls, target_quality: float, speedup: float) -> int:
        base = cls.DEVELOPMENT_BASE_ROUNDS + max(0.0, target_quality - 50) * cls.DEVELOPMENT_QUALITY_FACTOR
        return max(1, round(base * (1 - speedup)))

    @staticmethod
    def suggest_price(profile: GameProfile, segment: str, quality: float) -> float:
        seg = profile.segments[segment]
        return round(seg.price_min + (seg.price_max - seg.price_min) * quality / 100)

    @classmethod
    def advertising_impact(cls, spend: float, segment: str) -> float:
        remaining = spend / 1_000_000
        effectiveness = 1.0
        impact = 0.0
        while remaining > 0:
            chunk = min(remaining, cls.ADVERTISING_CHUNK)
            impact += chunk * cls.ADVERTISING_IMPACT_PER_MILLION * effectiveness
            remaining -= chunk
            effectiveness *= cls.ADVERTISING_DECAY
        return impact * cls.SEGMENT_AD_MULTIPLIER.get(segment, 1.0)

    @classmethod
    def branding_impact(cls, investment: float) -> float:
        millions = investment / 1_000_000
        if millions <= 5:
            return millions * cls.BRANDING_IMPACT_PER_MILLION
        base = 5 * cls.BRANDING_IMPACT_PER_MILLION
        return base + cls.BRANDING_IMPACT_PER_MILLION * 2.5 * math.log2(1 + (millions - 5) / 5)

    @classmethod
    def process_marketing(cls, team: TeamState, decision: MarketingDecision, profile: GameProfile,
                          facts: RoundFacts) -> None:
        tuning = profile.market
        growth = 0.0
        for segment in sorted(decision.advertising):
            spend = decision.advertising[segment]
            if spend <= 0:
                continue
            growth += cls.advertising_impact(spend, segment)
            facts.advertising_spend += spend
            facts.advertised_segments += 1
        if decision.branding_investment > 0:
            growth += cls.branding_impact(decision.branding_investment)
            facts.branding_spend = decision.branding_investment

        capped = min(growth, tuning.brand_max_growth)
        if growth > capped:
            facts.messages.append(f"Brand growth capped at {tuning.brand_max_growth:.0%} this round")
        brand = min(1.0, team.brand_value + capped)
        brand -= brand * tuning.brand_decay_rate
        facts.brand_growth = brand - team.brand_value
        team.brand_value = max(0.0, brand)

        for product_id in sorted(decision.prices):
            product = team.product(product_id)
            if product is None or product.status == ProductStatus.DISCONTINUED:
                facts.warnings.append(f"Price change ignored for unknown product '{product_id}'")
                continue
            product.price = decision.prices[product_id]
            facts.price_changes += 1

    @classmethod
    def process_hr(cls, team: TeamState, decision: HRDecision, profile: GameProfile,
                   labor_multiplier: float, facts: RoundFacts) -> None:
        wf = team.workforce
        base_salary = profile.starting.average_salary

        if decision.hires:
            facts.hires = decision.hires
            facts.hiring_cost = decision.hires * wf.average_salary * cls.HIRING_COST_RATE * labor_multiplier
            wf.headcount += decision.hires

        fires = min(decision.fires, wf.headcount)
        if fires:
            before = wf.headcount
            facts.fires = fires
            facts.severance_cost = fires * wf.average_salary * cls.SEVERANCE_RATE
            wf.headcount -= fires
            wf.average_morale -= fires / before * 20
            facts.messages.append(f"Laid off {fires} employees")

        previous_salary = wf.average_salary
        wf.average_salary = base_salary * decision.salary_multiplier
        facts.salary_multiplier = decision.salary_multiplier
        if previous_salary > 0:
            wf.average_morale += (wf.average_salary / previous_salary - 1) * 20

        if decision.training_program and wf.headcount > 0:
            cost, efficiency_gain, morale_gain = cls.TRAINING[decision.training_program]
            facts.training_program = decision.training_program
            facts.training_cost = cost * wf.headcount
            wf.average_efficiency = min(100.0, wf.average_efficiency + efficiency_gain)
            wf.average_morale += morale_gain

        if decision.benefits_budget > 0 and wf.headcount > 0:
            facts.benefits_cost = decision.benefits_budget
            wf.average_morale += min(10.0, decision.benefits_budget / wf.headcount / 500)

        wf.average_morale += (cls.MORALE_ANCHOR - wf.average_morale) * 0.1
        wf.average_morale = max(0.0, min(100.0, wf.average_morale))

        # voluntary leavers are backfilled; turnover shows up as replacement cost
        wf.turnover_rate = max(0.005, min(0.3, cls.BASE_TURNOVER * (1 + (cls.MORALE_ANCHOR - wf.average_morale) / 50)))
        leavers = int(wf.headcount * wf.turnover_rate)
        facts.turnover_losses = leavers
        facts.hiring_cost += leavers * wf.average_salary * cls.HIRING_COST_RATE * labor_multiplier

    @classmethod
    def process_factory(cls, team: TeamState, decision: FactoryDecision, facts: RoundFacts) -> None:
        facts.efficiency_investment = decision.efficiency_investment
        for factory in team.factories:
            if decision.efficiency_investment > 0:
                gain = 0.05 * (1 - math.exp(-decision.efficiency_investment / len(team.factories) / 10_000_000))
                factory.efficiency = min(cls.EFFICIENCY_CEILING, factory.efficiency + gain)
            else:
                factory.efficiency = max(0.1, factory.efficiency - cls.EFFICIENCY_WEAR)
            factory.defect_rate = max(0.01, 0.15 - factory.efficiency * 0.12)

        if decision.green_investment > 0 and team.factories:
            facts.green_investment = decision.green_investment
            team.factories[0].green_investment += decision.green_investment
            facts.esg_gain += decision.green_investment / 1_000_000 * cls.ESG_PER_GREEN_MILLION

        if decision.capacity_expansion > 0 and team.factories:
            facts.capacity_added = decision.capacity_expansion
            facts.capacity_cost = decision.capacity_expansion * cls.CAPACITY_COST_PER_UNIT
            team.factories[0].capacity += decision.capacity_expansion
            facts.messages.append(f"Expanded capacity by {decision.capacity_expansion:,} units")

        for program in decision.drop_esg_programs:
            if program in team.esg_programs:
                team.esg_programs.remove(program)
                facts.esg_gain -= ESG_PROGRAMS[program][1] / 2
        for program in decision.esg_programs:
            if program not in team.esg_programs:
                team.esg_programs.append(program)
                facts.esg_gain += ESG_PROGRAMS[program][1]
                facts.esg_programs_adopted += 1
        team.esg_programs.sort()
        facts.esg_program_cost = sum(ESG_PROGRAMS[p][0] for p in team.esg_programs)

        if decision.charitable_donation > 0:
            facts.donations += decision.charitable_donation
            if team.net_income > 0:
                facts.esg_gain += round(decision.charitable_donation / team.net_income * 100 * 6.28)
        if decision.community_investment > 0:
            facts.donations += decision.community_investment
            if team.revenue > 0:
                facts.esg_gain += round(decision.community_investment / team.revenue * 100 * 9.5)

        team.esg_score = max(0.0, min(1000.0, team.esg_score + facts.esg_gain))

    @classmethod
    def process_finance(cls, team: TeamState, decision: FinanceDecision, facts: RoundFacts) -> None:
        if decision.loan_request > 0:
            team.debt += decision.loan_request
            team.cash += decision.loan_request
            facts.loan_taken = decision.loan_request
            facts.messages.append(f"Borrowed ${decision.loan_request / 1_000_000:.1f}M")

        if decision.debt_repayment > 0:
            amount = min(decision.debt_repayment, team.debt, max(0.0, team.cash))
            team.debt -= amount
            team.cash -= amount
            facts.debt_repaid = amount
            if amount < decision.debt_repayment:
                facts.warnings.append("Debt repayment reduced to what cash and debt allow")

        if decision.stock_issuance > 0:
            proceeds = decision.stock_issuance * team.share_price * 0.95
            team.shares_issued += decision.stock_issuance
            team.cash += proceeds
            facts.shares_issued = decision.stock_issuance
            facts.equity_raised = proceeds

        if decision.share_buyback > 0:
            shares = min(decision.share_buyback, int(team.shares_issued * 0.5))
            cost = shares * team.share_price
            if cost > team.cash:
                facts.warnings.append("Share buyback skipped: insufficient cash")
            else:
                team.shares_issued -= shares
                team.cash -= cost
                facts.shares_bought_back = shares
                facts.buyback_cost = cost

        if decision.dividend_per_share > 0:
            payout = decision.dividend_per_share * team.shares_issued
            team.cash -= payout
            facts.dividends_paid = payout
            if payout > 0 and team.cash < 0:
                facts.warnings.append("Dividend payment pushed cash negative")

    @classmethod
    def staffing_factor(cls, team: TeamState) -> float:
        """Share of nameplate capacity the current headcount can run."""
        required = sum(f.capacity for f in team.factories) / 4_000
        if required <= 0:
            return 0.0
        return min(1.0, team.workforce.headcount / required) * (0.8 + 0.2 * team.workforce.average_efficiency / 100)
