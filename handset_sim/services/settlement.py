"""Round Settlement Orchestrator.

Sequences one round for every team:

    sanitize decisions
    -> advance economy and trade regime (global, once)
    -> per team: finance, R&D, HR, marketing, factory, sourcing + supply chain
    -> allocate every segment (barrier: needs every team's products)
    -> rubber-banding multipliers
    -> financial statements, share price
    -> rankings, next market snapshot, achievements

Inputs are never modified. The same (seed, round, world, teams, decisions,
profile) always produces the same SettlementResult.
"""

import copy
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .balance_adjuster import BalanceAdjuster
from .decisions import DecisionSanitizer, SanitizedDecisions
from .departments import DepartmentProcessor, RoundFacts
from .economic_cycle import EconomicCycleEngine, EconomicCycleState, EconomicImpact
from .game_profile import GameProfile
from .market_allocator import AllocationResult, MarketAllocator
from .rng import SeedBundle
from .snapshots import state_hash, to_plain
from .supply_chain_engine import DisruptionMultipliers, SupplyChainEngine
from .tariff_engine import TariffEngine, TariffState, TeamSignals
from .team_state import MarketState, TeamState, create_initial_market_state

logger = logging.getLogger(__name__)


@dataclass
class WorldSnapshot:
    """Shared state every team is scored against. One per round."""
    round_number: int
    market: MarketState
    economy: EconomicCycleState
    tariffs: TariffState


@dataclass
class TeamRoundResult:
    team_id: str
    round_number: int
    revenue: float = 0.0
    cogs: float = 0.0
    labor_cost: float = 0.0
    operating_costs: float = 0.0
    interest: float = 0.0
    esg_penalty: float = 0.0
    tax: float = 0.0
    net_income: float = 0.0
    cash_before: float = 0.0
    cash_after: float = 0.0
    market_share: Dict[str, float] = field(default_factory=dict)
    market_share_delta: float = 0.0
    units_sold: int = 0
    units_demanded: int = 0
    rank: int = 0
    ranks: Dict[str, int] = field(default_factory=dict)
    balance_multiplier: float = 1.0
    balance_status: str = "neutral"
    facts: RoundFacts = field(default_factory=RoundFacts)
    messages: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def cash_delta(self) -> float:
        return self.cash_after - self.cash_before

    @property
    def total_costs(self) -> float:
        return self.cogs + self.labor_cost + self.operating_costs + self.interest + self.esg_penalty + self.tax


@dataclass
class SettlementResult:
    round_number: int
    world: WorldSnapshot
    teams: Dict[str, TeamState]
    results: Dict[str, TeamRoundResult]
    rankings: Dict[str, Dict[str, int]]
    summary: List[str] = field(default_factory=list)
    audit: Dict[str, Any] = field(default_factory=dict)
    achievements: Dict[str, Any] = field(default_factory=dict)
    achievement_states: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = to_plain(self)
        for team_id, result in self.results.items():
            data["results"][team_id]["cash_delta"] = result.cash_delta
        return data


def create_world(profile: GameProfile) -> WorldSnapshot:
    """Round-0 world for a new game."""
    return WorldSnapshot(
        round_number=0,
        market=create_initial_market_state(profile),
        economy=EconomicCycleEngine.initialize_state(profile.economic_cycle),
        tariffs=TariffEngine.initialize_state(),
    )


class RoundSettlement:
    """Deterministic round settlement."""

    INTEREST_RATE = 0.045           # annual, scaled by the economy's financing multiplier
    TAX_RATE = 0.25
    ROUNDS_PER_YEAR = 4
    PE_RATIO = 15
    RANKED_METRICS = ("revenue", "eps", "market_share", "net_income", "brand_value", "esg_score")

    @classmethod
    def settle(
        cls,
        world: WorldSnapshot,
        teams: Dict[str, TeamState],
        decisions: Dict[str, Any],
        profile: GameProfile,
        seed: str,
        round_number: Optional[int] = None,
        achievements: Optional[Dict[str, Any]] = None,
    ) -> SettlementResult:
        """Settle one round.

        Args:
            world: Snapshot produced by the previous settlement (or create_world)
            teams: team id -> state after the previous round
            decisions: team id -> raw decisions (dict, DecisionBundle or None)
            profile: Validated game profile
            seed: Root seed of the game
            round_number: Round to settle; defaults to world.round_number + 1
            achievements: team id -> AchievementState; evaluated when given

        Returns:
            SettlementResult with the next world, team states and rankings

        Raises:
            ValueError: if the round does not come after the world's round
                or there are no teams
        """
        round_number = world.round_number + 1 if round_number is None else round_number
        if round_number <= world.round_number:
            raise ValueError(f"Round {round_number} already settled (world is at round {world.round_number})")
        if not teams:
            raise ValueError("Cannot settle a round without teams")

        team_ids = sorted(teams)
        bundle = SeedBundle.for_round(seed, round_number)
        input_hash = state_hash({"world": world, "teams": teams})

        sanitized: Dict[str, SanitizedDecisions] = {
            team_id: DecisionSanitizer.sanitize(team_id, decisions.get(team_id)) for team_id in team_ids
        }
        for team_id in sorted(set(decisions) - set(teams)):
            logger.warning(f"Round {round_number}: decisions for unknown team {team_id} ignored")

        economy, impact = EconomicCycleEngine.advance(world.economy, profile.economic_cycle, bundle.economy)
        tariff_round = TariffEngine.process_round(
            world.tariffs, round_number, bundle.tariffs,
            signals=cls.team_signals(teams), config=profile.tariffs,
        )
        tariffs = tariff_round.state

        new_teams: Dict[str, TeamState] = {}
        facts: Dict[str, RoundFacts] = {}
        for team_id in team_ids:
            team, team_facts = cls.run_departments(
                teams[team_id], sanitized[team_id], round_number, profile, impact, bundle
            )
            new_teams[team_id] = team
            facts[team_id] = team_facts

        market = copy.deepcopy(world.market)
        market.round_number = round_number
        market.phase = economy.phase.value
        allocation = MarketAllocator.allocate(
            market, [new_teams[t] for t in team_ids], profile.market,
            demand_multiplier=impact.demand_multiplier, demand_jitter=impact.demand_jitter,
        )
        adjustments = BalanceAdjuster.compute(
            {t: allocation.shares_for(t) for t in team_ids}, round_number, profile.rubber_banding
        )

        results: Dict[str, TeamRoundResult] = {}
        for team_id in team_ids:
            adjustment = adjustments[team_id]
            team_facts = facts[team_id]
            team_facts.balance_multiplier = adjustment.multiplier
            team_facts.balance_status = adjustment.status
            results[team_id] = cls.close_books(
                teams[team_id], new_teams[team_id], team_facts, allocation,
                tariffs, impact, profile, round_number,
            )

        rankings = cls.rank_teams(new_teams)
        for team_id, result in results.items():
            result.ranks = {metric: ranks[team_id] for metric, ranks in rankings.items()}
            result.rank = result.ranks["revenue"]

        next_world = WorldSnapshot(
            round_number=round_number,
            market=cls.next_market(market, allocation, profile),
            economy=economy,
            tariffs=tariffs,
        )

        summary = list(impact.messages) + list(tariff_round.messages)
        headline = cls.revenue_headline(round_number, results)
        if headline:
            summary.append(headline)

        settlement = SettlementResult(
            round_number=round_number,
            world=next_world,
            teams=new_teams,
            results=results,
            rankings=rankings,
            summary=summary,
        )

        if achievements is not None:
            # imported here: the ledger depends on settlement facts, not the reverse
            from .achievements.ledger import AchievementLedger
            states, deltas = AchievementLedger.evaluate_round(
                achievements, teams, settlement, profile
            )
            settlement.achievement_states = states
            settlement.achievements = deltas
            for team_id, delta in deltas.items():
                results[team_id].messages.extend(delta.messages)

        settlement.audit = {
            "seeds": bundle.to_dict(),
            "input_hash": input_hash,
            "decision_hash": state_hash({t: sanitized[t].bundle.model_dump() for t in team_ids}),
            "output_hash": state_hash({"world": next_world, "teams": new_teams}),
        }
        logger.info(
            f"Settled round {round_number} for {len(team_ids)} teams "
            f"(phase={economy.phase.value}, output={settlement.audit['output_hash'][:12]})"
        )
        return settlement

    @classmethod
    def team_signals(cls, teams: Dict[str, TeamState]) -> TeamSignals:
        """Cross-team maxima from the previous round that can trigger trade events."""
        signals = TeamSignals()
        for team in teams.values():
            top_share = max(team.market_share.values()) if team.market_share else 0.0
            signals.max_market_share = max(signals.max_market_share, top_share)
            signals.max_revenue = max(signals.max_revenue, team.revenue)
            signals.max_production_volume = max(signals.max_production_volume, float(sum(team.units_sold.values())))
        return signals

    @classmethod
    def run_departments(
        cls,
        previous: TeamState,
        decisions: SanitizedDecisions,
        round_number: int,
        profile: GameProfile,
        impact: EconomicImpact,
        bundle: SeedBundle,
    ) -> Tuple[TeamState, RoundFacts]:
        """Apply one team's decisions. Returns (new team state, round facts)."""
        team = copy.deepcopy(previous)
        team.round_number = round_number
        decision = decisions.bundle
        facts = RoundFacts(
            substituted_departments=list(decisions.substituted),
            warnings=list(decisions.warnings),
        )

        # financing first so loans and equity can fund this round's spending
        DepartmentProcessor.process_finance(team, decision.finance, facts)
        DepartmentProcessor.process_rd(team, decision.rd, round_number, profile, facts)
        DepartmentProcessor.process_hr(team, decision.hr, profile, impact.labor_cost_multiplier, facts)
        DepartmentProcessor.process_marketing(team, decision.marketing, profile, facts)
        DepartmentProcessor.process_factory(team, decision.factory, facts)

        active_before = {s.id for s in team.supply_chain.active_suppliers}
        supply = SupplyChainEngine.process_round(
            team.supply_chain,
            DecisionSanitizer.sourcing_plan(decision.sourcing),
            round_number,
            bundle.for_team("supply_chain", team.team_id),
            tuning=DisruptionMultipliers(**profile.disruptions.model_dump()),
        )
        team.supply_chain = supply.state
        active_after = {s.id for s in team.supply_chain.active_suppliers}
        facts.suppliers_added = len(active_after - active_before)
        facts.suppliers_dropped = len(active_before - active_after)
        facts.new_disruptions = len(supply.new_disruptions)
        facts.safety_stock_cost = team.supply_chain.safety_stock_buffer * SupplyChainEngine.SAFETY_STOCK_COST_PER_LEVEL
        facts.messages.extend(supply.messages)
        facts.warnings.extend(supply.warnings)
        return team, facts

    @classmethod
    def production_capacity(cls, team: TeamState) -> float:
        """Units the team can actually ship: factory output limited by staffing, defects and supply."""
        factory_output = sum(f.effective_capacity * (1 - f.defect_rate) for f in team.factories)
        factory_output *= DepartmentProcessor.staffing_factor(team)
        return max(0.0, min(factory_output, team.supply_chain.effective_capacity))

    @classmethod
    def esg_penalty_rate(cls, esg_score: float, profile: GameProfile) -> float:
        """Revenue penalty for an ESG crisis; max at 0, min just below the threshold."""
        tuning = profile.market
        threshold = tuning.esg_penalty_threshold
        if esg_score >= threshold:
            return 0.0
        span = tuning.esg_max_penalty - tuning.esg_min_penalty
        return tuning.esg_max_penalty - span * max(0.0, esg_score) / max(1.0, threshold - 1)

    @classmethod
    def close_books(
        cls,
        previous: TeamState,
        team: TeamState,
        facts: RoundFacts,
        allocation: AllocationResult,
        tariffs: TariffState,
        impact: EconomicImpact,
        profile: GameProfile,
        round_number: int,
    ) -> TeamRoundResult:
        """Sales, costs and the income statement for one team."""
        result = TeamRoundResult(team_id=team.team_id, round_number=round_number, cash_before=previous.cash)
        shares = allocation.shares_for(team.team_id)
        demanded = allocation.units_for(team.team_id)
        total_demanded = sum(demanded.values())

        capacity = cls.production_capacity(team)
        sold = dict(demanded)
        if total_demanded > capacity:
            scale = capacity / total_demanded if total_demanded > 0 else 0.0
            sold = {segment: int(math.floor(units * scale)) for segment, units in demanded.items()}
            facts.warnings.append(
                f"Demand of {total_demanded:,} units exceeded capacity of {int(capacity):,}; "
                f"sold {sum(sold.values()):,}"
            )

        supply = team.supply_chain
        destination = team.factories[0].region if team.factories else "North America"
        tariff_multiplier = TariffEngine.route_multiplier(
            tariffs, SupplyChainEngine.volume_by_region(supply), destination, round_number
        )
        material_multiplier = (
            supply.cost_multiplier * SupplyChainEngine.sourcing_cost_index(supply) * impact.cost_multiplier
        )

        gross_revenue = 0.0
        base_cogs = 0.0
        for segment, units in sorted(sold.items()):
            if units <= 0:
                continue
            product = team.best_product_for(segment)
            if product is None:
                continue
            gross_revenue += units * product.price
            base_cogs += units * product.unit_cost

        revenue = gross_revenue * facts.balance_multiplier
        esg_penalty = revenue * cls.esg_penalty_rate(team.esg_score, profile)
        cogs = base_cogs * material_multiplier * tariff_multiplier
        tariff_cost = base_cogs * material_multiplier * (tariff_multiplier - 1)
        labor = team.workforce.headcount * team.workforce.average_salary / cls.ROUNDS_PER_YEAR
        labor *= impact.labor_cost_multiplier
        interest = team.debt * cls.INTEREST_RATE / cls.ROUNDS_PER_YEAR * impact.financing_cost_multiplier
        operating = facts.operating_spend

        pre_tax = revenue - esg_penalty - cogs - labor - operating - interest
        tax = pre_tax * cls.TAX_RATE if pre_tax > 0 else 0.0
        net_income = pre_tax - tax

        # financing flows were already booked to cash by the finance department
        team.cash += net_income
        team.revenue = revenue
        team.net_income = net_income
        team.cumulative_revenue += revenue
        team.cumulative_net_income += net_income
        team.cumulative_marketing += facts.marketing_spend
        team.cumulative_rd += facts.rd_spend
        team.market_share = shares
        team.units_sold = sold
        team.eps = net_income / team.shares_issued if team.shares_issued > 0 else 0.0
        target_price = max(1.0, team.eps * cls.ROUNDS_PER_YEAR * cls.PE_RATIO * (1 + impact.investor_sentiment / 100))
        team.share_price += (target_price - team.share_price) / 2

        facts.units_demanded = total_demanded
        facts.units_sold = sum(sold.values())
        facts.capacity = capacity
        facts.cogs = cogs
        facts.labor_cost = labor
        facts.interest = interest
        facts.tax = tax
        facts.tariff_multiplier = tariff_multiplier
        facts.tariff_cost = tariff_cost
        facts.esg_penalty = esg_penalty

        if esg_penalty > 0:
            facts.warnings.append(
                f"ESG crisis: score {team.esg_score:.0f} cost ${esg_penalty / 1_000_000:.2f}M in lost revenue"
            )
        if facts.balance_status == "trailing":
            facts.messages.append(f"Market support boosted revenue by {facts.balance_multiplier - 1:.0%}")
        elif facts.balance_status == "leading":
            facts.messages.append(f"Market leader scrutiny reduced revenue by {1 - facts.balance_multiplier:.0%}")
        if team.cash < 0:
            facts.warnings.append(f"Cash is negative: ${team.cash / 1_000_000:.1f}M")

        result.revenue = revenue
        result.cogs = cogs
        result.labor_cost = labor
        result.operating_costs = operating
        result.interest = interest
        result.esg_penalty = esg_penalty
        result.tax = tax
        result.net_income = net_income
        result.cash_after = team.cash
        result.market_share = dict(shares)
        result.market_share_delta = team.total_market_share - previous.total_market_share
        result.units_sold = facts.units_sold
        result.units_demanded = total_demanded
        result.balance_multiplier = facts.balance_multiplier
        result.balance_status = facts.balance_status
        result.facts = facts
        result.messages = list(facts.messages)
        result.warnings = list(facts.warnings)
        return result

    @classmethod
    def rank_teams(cls, teams: Dict[str, TeamState]) -> Dict[str, Dict[str, int]]:
        values = {
            "revenue": {t: s.revenue for t, s in teams.items()},
            "eps": {t: s.eps for t, s in teams.items()},
            "market_share": {t: s.total_market_share for t, s in teams.items()},
            "net_income": {t: s.net_income for t, s in teams.items()},
            "brand_value": {t: s.brand_value for t, s in teams.items()},
            "esg_score": {t: s.esg_score for t, s in teams.items()},
        }
        return {metric: MarketAllocator.rank(values[metric]) for metric in cls.RANKED_METRICS}

    @classmethod
    def revenue_headline(cls, round_number: int, results: Dict[str, Any]) -> Optional[str]:
        """Summary line for the revenue leader, if one team sold strictly the most."""
        if not results:
            return None
        top = max(r.revenue for r in results.values())
        leaders = sorted(t for t, r in results.items() if r.revenue == top)
        if top <= 0 or len(leaders) > 1:
            return None
        return f"Round {round_number}: {leaders[0]} leads revenue with ${top / 1_000_000:.1f}M"

    @classmethod
    def next_market(cls, market: MarketState, allocation: AllocationResult, profile: GameProfile) -> MarketState:
        """Market snapshot teams see next round: realized demand recorded, base demand grown."""
        nxt = copy.deepcopy(market)
        multiplier = profile.economic_cycle.demand_growth_multiplier
        for name, segment in nxt.segments.items():
            segment.demand = allocation.segments[name].demand if name in allocation.segments else segment.demand
            segment.base_demand = segment.base_demand * (1 + segment.growth_rate * multiplier)
        return nxt
