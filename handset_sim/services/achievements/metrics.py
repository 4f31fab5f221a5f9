"""Metric resolution for achievement requirements.

Every Metric maps to exactly one resolver in RESOLVERS; the table is checked
against the enum when this module is imported.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..departments import RoundFacts
from ..supply_chain_engine import Severity
from ..team_state import ProductStatus, TeamState
from .tracker import TrackerState
from .types import Metric


@dataclass
class AchievementContext:
    """Everything a requirement may look at for one team in one round."""
    team: TeamState
    previous: TeamState
    round_number: int
    difficulty: str
    team_count: int
    facts: RoundFacts
    tracker: TrackerState
    ranks: Dict[Metric, Dict[str, int]] = field(default_factory=dict)
    phase: str = "expansion"
    in_recession: bool = False
    active_tariff_events: int = 0
    active_geopolitical_events: int = 0
    market_share_delta: float = 0.0
    # tallies of achievements earned before this round
    achievements_earned: int = 0
    achievement_points: int = 0
    infamy_earned: int = 0
    categories_touched: int = 0
    platinum_earned: int = 0

    def rank_of(self, metric: Metric) -> Optional[int]:
        table = self.ranks.get(metric)
        if table is None:
            return None
        return table.get(self.team.team_id)

    def is_best(self, metric: Metric) -> bool:
        return sole_leader(self.ranks.get(metric) or {}, self.team.team_id)

    def is_worst(self, metric: Metric) -> bool:
        return last_place(self.ranks.get(metric) or {}, self.team.team_id)


def sole_leader(ranks: Dict[str, int], team_id: str) -> bool:
    """Ranked first and strictly ahead of every other team."""
    if ranks.get(team_id) != 1:
        return False
    return sum(1 for rank in ranks.values() if rank == 1) == 1


def last_place(ranks: Dict[str, int], team_id: str) -> bool:
    """Holds the worst rank. A field tied at the top has no last place."""
    if not ranks:
        return False
    worst = max(ranks.values())
    return worst > 1 and ranks.get(team_id) == worst


def _quality(ctx: AchievementContext, fn: Callable[[List[float]], float]) -> float:
    qualities = [p.quality for p in ctx.team.launched_products]
    return fn(qualities) if qualities else 0.0


def _profit_margin(ctx: AchievementContext) -> float:
    return ctx.team.net_income / ctx.team.revenue if ctx.team.revenue > 0 else 0.0


def _revenue_growth(ctx: AchievementContext) -> float:
    before = ctx.previous.revenue
    return (ctx.team.revenue - before) / before if before > 0 else 0.0


def _segments_led(ctx: AchievementContext) -> int:
    return sum(1 for s, share in ctx.team.market_share.items() if share >= 0.5)


def _max_feature(ctx: AchievementContext) -> float:
    values = [v for p in ctx.team.launched_products for v in p.features.values()]
    return max(values) if values else 0.0


def _factory_efficiency(ctx: AchievementContext) -> float:
    factories = ctx.team.factories
    return sum(f.efficiency for f in factories) / len(factories) if factories else 0.0


def _defect_rate(ctx: AchievementContext) -> float:
    factories = ctx.team.factories
    return sum(f.defect_rate for f in factories) / len(factories) if factories else 0.0


RESOLVERS: Dict[Metric, Callable[[AchievementContext], Any]] = {
    Metric.CASH: lambda c: c.team.cash,
    Metric.DEBT: lambda c: c.team.debt,
    Metric.REVENUE: lambda c: c.team.revenue,
    Metric.NET_INCOME: lambda c: c.team.net_income,
    Metric.PROFIT_MARGIN: _profit_margin,
    Metric.EPS: lambda c: c.team.eps,
    Metric.SHARE_PRICE: lambda c: c.team.share_price,
    Metric.MARKET_CAP: lambda c: c.team.share_price * c.team.shares_issued,
    Metric.CUMULATIVE_REVENUE: lambda c: c.team.cumulative_revenue,
    Metric.CUMULATIVE_NET_INCOME: lambda c: c.team.cumulative_net_income,
    Metric.CASH_DELTA: lambda c: c.team.cash - c.previous.cash,
    Metric.REVENUE_GROWTH: _revenue_growth,
    Metric.DEBT_TO_REVENUE: lambda c: c.team.debt / c.team.revenue if c.team.revenue > 0 else 0.0,
    Metric.LOAN_TAKEN: lambda c: c.facts.loan_taken,
    Metric.DEBT_REPAID: lambda c: c.facts.debt_repaid,
    Metric.EQUITY_RAISED: lambda c: c.facts.equity_raised,
    Metric.SHARES_BOUGHT_BACK: lambda c: c.facts.shares_bought_back,
    Metric.DIVIDENDS_PAID: lambda c: c.facts.dividends_paid,
    Metric.INTEREST_PAID: lambda c: c.facts.interest,
    Metric.TAX_PAID: lambda c: c.facts.tax,

    Metric.BRAND_VALUE: lambda c: c.team.brand_value,
    Metric.BRAND_GROWTH: lambda c: c.team.brand_value - c.previous.brand_value,
    Metric.ESG_SCORE: lambda c: c.team.esg_score,
    Metric.ESG_GAIN: lambda c: c.team.esg_score - c.previous.esg_score,
    Metric.ESG_PENALTY: lambda c: c.facts.esg_penalty,
    Metric.TOTAL_MARKET_SHARE: lambda c: c.team.total_market_share,
    Metric.SEGMENT_SHARE: lambda c: c.team.market_share,
    Metric.MARKET_SHARE_DELTA: lambda c: c.market_share_delta,
    Metric.SEGMENTS_LED: _segments_led,
    Metric.SEGMENTS_PRESENT: lambda c: sum(1 for share in c.team.market_share.values() if share > 0),
    Metric.UNITS_SOLD: lambda c: c.facts.units_sold,
    Metric.UNITS_DEMANDED: lambda c: c.facts.units_demanded,
    Metric.FILL_RATE: lambda c: c.facts.units_sold / c.facts.units_demanded if c.facts.units_demanded > 0 else 1.0,
    Metric.MARKETING_SPEND: lambda c: c.facts.marketing_spend,
    Metric.ADVERTISING_SPEND: lambda c: c.facts.advertising_spend,
    Metric.BRANDING_SPEND: lambda c: c.facts.branding_spend,
    Metric.ADVERTISED_SEGMENTS: lambda c: c.facts.advertised_segments,
    Metric.CUMULATIVE_MARKETING: lambda c: c.team.cumulative_marketing,
    Metric.PRICE_CHANGES: lambda c: c.facts.price_changes,

    Metric.HEADCOUNT: lambda c: c.team.workforce.headcount,
    Metric.MORALE: lambda c: c.team.workforce.average_morale,
    Metric.WORKFORCE_EFFICIENCY: lambda c: c.team.workforce.average_efficiency,
    Metric.TURNOVER_RATE: lambda c: c.team.workforce.turnover_rate,
    Metric.AVERAGE_SALARY: lambda c: c.team.workforce.average_salary,
    Metric.HIRES: lambda c: c.facts.hires,
    Metric.FIRES: lambda c: c.facts.fires,
    Metric.TRAINING_SPEND: lambda c: c.facts.training_cost,
    Metric.BENEFITS_SPEND: lambda c: c.facts.benefits_cost,
    Metric.SALARY_MULTIPLIER: lambda c: c.facts.salary_multiplier,

    Metric.FACTORY_COUNT: lambda c: len(c.team.factories),
    Metric.FACTORY_CAPACITY: lambda c: sum(f.capacity for f in c.team.factories),
    Metric.FACTORY_EFFICIENCY: _factory_efficiency,
    Metric.DEFECT_RATE: _defect_rate,
    Metric.CAPACITY_UTILIZATION: lambda c: c.facts.utilization,
    Metric.CAPACITY_ADDED: lambda c: c.facts.capacity_added,
    Metric.EFFICIENCY_INVESTMENT: lambda c: c.facts.efficiency_investment,
    Metric.GREEN_INVESTMENT: lambda c: c.facts.green_investment,
    Metric.ESG_PROGRAM_COUNT: lambda c: len(c.team.esg_programs),
    Metric.DONATIONS: lambda c: c.facts.donations,

    Metric.RD_SPEND: lambda c: c.facts.rd_spend,
    Metric.CUMULATIVE_RD: lambda c: c.team.cumulative_rd,
    Metric.RD_PROGRESS: lambda c: c.team.rd_progress,
    Metric.PATENTS: lambda c: c.team.patents,
    Metric.PATENTS_EARNED: lambda c: c.facts.patents_earned,
    Metric.LAUNCHED_PRODUCTS: lambda c: len(c.team.launched_products),
    Metric.PRODUCTS_IN_DEVELOPMENT: lambda c: sum(
        1 for p in c.team.products if p.status == ProductStatus.IN_DEVELOPMENT
    ),
    Metric.PRODUCTS_STARTED: lambda c: c.facts.products_started,
    Metric.PRODUCTS_LAUNCHED: lambda c: c.facts.products_launched,
    Metric.PRODUCTS_DISCONTINUED: lambda c: c.facts.products_discontinued,
    Metric.IMPROVEMENTS_MADE: lambda c: c.facts.improvements_made,
    Metric.AVERAGE_QUALITY: lambda c: _quality(c, lambda q: sum(q) / len(q)),
    Metric.MAX_QUALITY: lambda c: _quality(c, max),
    Metric.MIN_QUALITY: lambda c: _quality(c, min),
    Metric.MAX_FEATURE: _max_feature,

    Metric.SUPPLIER_COUNT: lambda c: len(c.team.supply_chain.active_suppliers),
    Metric.SUPPLIER_CONCENTRATION: lambda c: c.team.supply_chain.concentration,
    Metric.GEOGRAPHIC_DIVERSITY: lambda c: c.team.supply_chain.geographic_diversity,
    Metric.SUPPLY_CAPACITY: lambda c: c.team.supply_chain.effective_capacity,
    Metric.SUPPLY_COST_MULTIPLIER: lambda c: c.team.supply_chain.cost_multiplier,
    Metric.SUPPLY_QUALITY: lambda c: c.team.supply_chain.quality_impact,
    Metric.ACTIVE_DISRUPTIONS: lambda c: len(c.team.supply_chain.disruptions),
    Metric.NEW_DISRUPTIONS: lambda c: c.facts.new_disruptions,
    Metric.VULNERABILITY_COUNT: lambda c: len(c.team.supply_chain.vulnerabilities),
    Metric.CRITICAL_VULNERABILITIES: lambda c: sum(
        1 for v in c.team.supply_chain.vulnerabilities if v.severity == Severity.CRITICAL
    ),
    Metric.SAFETY_STOCK: lambda c: c.team.supply_chain.safety_stock_buffer,
    Metric.REGIONS_SOURCED: lambda c: len(c.team.supply_chain.regions_sourced),
    Metric.AVERAGE_RELATIONSHIP: lambda c: c.team.supply_chain.average_relationship,
    Metric.SUPPLIERS_ADDED: lambda c: c.facts.suppliers_added,
    Metric.TARIFF_MULTIPLIER: lambda c: c.facts.tariff_multiplier,
    Metric.TARIFF_COST: lambda c: c.facts.tariff_cost,

    Metric.ROUND: lambda c: c.round_number,
    Metric.DIFFICULTY: lambda c: c.difficulty,
    Metric.ECONOMIC_PHASE: lambda c: c.phase,
    Metric.IN_RECESSION: lambda c: c.in_recession,
    Metric.ACTIVE_TARIFF_EVENTS: lambda c: c.active_tariff_events,
    Metric.ACTIVE_GEOPOLITICAL_EVENTS: lambda c: c.active_geopolitical_events,
    Metric.TEAM_COUNT: lambda c: c.team_count,
    Metric.BALANCE_MULTIPLIER: lambda c: c.facts.balance_multiplier,
    Metric.DEFAULTS_SUBSTITUTED: lambda c: len(c.facts.substituted_departments),

    Metric.REVENUE_RANK: lambda c: c.rank_of(Metric.REVENUE),
    Metric.EPS_RANK: lambda c: c.rank_of(Metric.EPS),
    Metric.MARKET_SHARE_RANK: lambda c: c.rank_of(Metric.TOTAL_MARKET_SHARE),

    Metric.ROUNDS_COMPLETED: lambda c: c.tracker.rounds_completed,
    Metric.PROFITABLE_ROUNDS: lambda c: c.tracker.profitable_rounds,
    Metric.CONSECUTIVE_PROFIT: lambda c: c.tracker.consecutive_profit,
    Metric.CONSECUTIVE_LOSS: lambda c: c.tracker.consecutive_loss,
    Metric.CONSECUTIVE_GROWTH: lambda c: c.tracker.consecutive_growth,
    Metric.CONSECUTIVE_DECLINE: lambda c: c.tracker.consecutive_decline,
    Metric.TOTAL_PRODUCTS_LAUNCHED: lambda c: c.tracker.products_launched,
    Metric.TOTAL_PRODUCTS_STARTED: lambda c: c.tracker.products_started,
    Metric.TOTAL_PRODUCTS_DISCONTINUED: lambda c: c.tracker.products_discontinued,
    Metric.DISRUPTIONS_WEATHERED: lambda c: c.tracker.disruptions_weathered,
    Metric.TOTAL_DEFAULTS: lambda c: c.tracker.defaults_substituted,
    Metric.RUBBER_BAND_BOOSTS: lambda c: c.tracker.rubber_band_boosts,
    Metric.RUBBER_BAND_PENALTIES: lambda c: c.tracker.rubber_band_penalties,
    Metric.NEVER_BANKRUPT: lambda c: c.tracker.never_bankrupt,
    Metric.ROUNDS_WITHOUT_MARKETING: lambda c: c.tracker.rounds_without_marketing,
    Metric.ROUNDS_WITHOUT_RD: lambda c: c.tracker.rounds_without_rd,
    Metric.TOTAL_DIVIDENDS: lambda c: c.tracker.total_dividends,
    Metric.PEAK_CASH: lambda c: c.tracker.peak_cash,
    Metric.ROUNDS_AS_REVENUE_LEADER: lambda c: c.tracker.rounds_as_revenue_leader,
    Metric.ROUNDS_AS_SHARE_LEADER: lambda c: c.tracker.rounds_as_share_leader,
    Metric.PHASES_SEEN: lambda c: len(c.tracker.phases_seen),
    Metric.RECESSION_ROUNDS: lambda c: c.tracker.recession_rounds,
    Metric.RECESSION_PROFITABLE_ROUNDS: lambda c: c.tracker.recession_profitable_rounds,
    Metric.TOTAL_LOANS: lambda c: c.tracker.loans,
    Metric.TOTAL_STOCK_ISSUES: lambda c: c.tracker.stock_issues,
    Metric.TOTAL_BUYBACKS: lambda c: c.tracker.buybacks,
    Metric.TOTAL_HIRES: lambda c: c.tracker.hires,
    Metric.TOTAL_FIRES: lambda c: c.tracker.fires,
    Metric.TOTAL_TRAININGS: lambda c: c.tracker.trainings,
    Metric.TARIFF_EVENTS_SEEN: lambda c: len(c.tracker.tariff_events_seen),
    Metric.GEOPOLITICAL_EVENTS_SEEN: lambda c: len(c.tracker.geopolitical_events_seen),
    Metric.WAS_LAST_PLACE: lambda c: 0 < c.tracker.first_last_place_round < c.round_number,
    Metric.CONSECUTIVE_NEGATIVE_CASH: lambda c: c.tracker.consecutive_negative_cash,

    Metric.ACHIEVEMENTS_EARNED: lambda c: c.achievements_earned,
    Metric.ACHIEVEMENT_POINTS: lambda c: c.achievement_points,
    Metric.INFAMY_EARNED: lambda c: c.infamy_earned,
    Metric.CATEGORIES_TOUCHED: lambda c: c.categories_touched,
    Metric.PLATINUM_EARNED: lambda c: c.platinum_earned,
}

# Metrics whose best value is the smallest one
LOWER_IS_BETTER = {
    Metric.DEBT,
    Metric.DEFECT_RATE,
    Metric.TURNOVER_RATE,
    Metric.SUPPLIER_CONCENTRATION,
    Metric.SUPPLY_COST_MULTIPLIER,
    Metric.TARIFF_MULTIPLIER,
    Metric.TARIFF_COST,
    Metric.ESG_PENALTY,
    Metric.VULNERABILITY_COUNT,
    Metric.REVENUE_RANK,
    Metric.EPS_RANK,
    Metric.MARKET_SHARE_RANK,
}

_missing = [m.name for m in Metric if m not in RESOLVERS]
if _missing:
    raise RuntimeError(f"Metrics without a resolver: {', '.join(_missing)}")


def resolve_metric(metric: Metric, ctx: AchievementContext, segment: Optional[str] = None) -> Any:
    value = RESOLVERS[metric](ctx)
    if metric == Metric.SEGMENT_SHARE:
        return value.get(segment, 0.0) if segment else max(value.values(), default=0.0)
    return value
