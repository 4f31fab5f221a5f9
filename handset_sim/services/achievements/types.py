"""Achievement vocabulary: tiers, categories, metrics, requirements, state."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from .tracker import TrackerState


class Tier(Enum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"
    SECRET = "secret"
    INFAMY = "infamy"

    @property
    def points(self) -> int:
        return TIER_POINTS[self]


TIER_POINTS = {
    Tier.BRONZE: 10,
    Tier.SILVER: 25,
    Tier.GOLD: 50,
    Tier.PLATINUM: 100,
    Tier.SECRET: 75,
    Tier.INFAMY: -25,
}


class Category(Enum):
    OVERVIEW = "overview"
    FACTORY = "factory"
    FINANCE = "finance"
    HR = "hr"
    MARKETING = "marketing"
    RD = "rd"
    SUPPLY_CHAIN = "supply_chain"
    LOGISTICS = "logistics"
    NEWS = "news"
    RESULTS = "results"
    SECRET = "secret"
    MEGA = "mega"


class Metric(Enum):
    # Finance
    CASH = "cash"
    DEBT = "debt"
    REVENUE = "revenue"
    NET_INCOME = "net_income"
    PROFIT_MARGIN = "profit_margin"
    EPS = "eps"
    SHARE_PRICE = "share_price"
    MARKET_CAP = "market_cap"
    CUMULATIVE_REVENUE = "cumulative_revenue"
    CUMULATIVE_NET_INCOME = "cumulative_net_income"
    CASH_DELTA = "cash_delta"
    REVENUE_GROWTH = "revenue_growth"
    DEBT_TO_REVENUE = "debt_to_revenue"
    LOAN_TAKEN = "loan_taken"
    DEBT_REPAID = "debt_repaid"
    EQUITY_RAISED = "equity_raised"
    SHARES_BOUGHT_BACK = "shares_bought_back"
    DIVIDENDS_PAID = "dividends_paid"
    INTEREST_PAID = "interest_paid"
    TAX_PAID = "tax_paid"
    # Market
    BRAND_VALUE = "brand_value"
    BRAND_GROWTH = "brand_growth"
    ESG_SCORE = "esg_score"
    ESG_GAIN = "esg_gain"
    ESG_PENALTY = "esg_penalty"
    TOTAL_MARKET_SHARE = "total_market_share"
    SEGMENT_SHARE = "segment_share"
    MARKET_SHARE_DELTA = "market_share_delta"
    SEGMENTS_LED = "segments_led"
    SEGMENTS_PRESENT = "segments_present"
    UNITS_SOLD = "units_sold"
    UNITS_DEMANDED = "units_demanded"
    FILL_RATE = "fill_rate"
    MARKETING_SPEND = "marketing_spend"
    ADVERTISING_SPEND = "advertising_spend"
    BRANDING_SPEND = "branding_spend"
    ADVERTISED_SEGMENTS = "advertised_segments"
    CUMULATIVE_MARKETING = "cumulative_marketing"
    PRICE_CHANGES = "price_changes"
    # HR
    HEADCOUNT = "headcount"
    MORALE = "morale"
    WORKFORCE_EFFICIENCY = "workforce_efficiency"
    TURNOVER_RATE = "turnover_rate"
    AVERAGE_SALARY = "average_salary"
    HIRES = "hires"
    FIRES = "fires"
    TRAINING_SPEND = "training_spend"
    BENEFITS_SPEND = "benefits_spend"
    SALARY_MULTIPLIER = "salary_multiplier"
    # Factory
    FACTORY_COUNT = "factory_count"
    FACTORY_CAPACITY = "factory_capacity"
    FACTORY_EFFICIENCY = "factory_efficiency"
    DEFECT_RATE = "defect_rate"
    CAPACITY_UTILIZATION = "capacity_utilization"
    CAPACITY_ADDED = "capacity_added"
    EFFICIENCY_INVESTMENT = "efficiency_investment"
    GREEN_INVESTMENT = "green_investment"
    ESG_PROGRAM_COUNT = "esg_program_count"
    DONATIONS = "donations"
    # R&D
    RD_SPEND = "rd_spend"
    CUMULATIVE_RD = "cumulative_rd"
    RD_PROGRESS = "rd_progress"
    PATENTS = "patents"
    PATENTS_EARNED = "patents_earned"
    LAUNCHED_PRODUCTS = "launched_products"
    PRODUCTS_IN_DEVELOPMENT = "products_in_development"
    PRODUCTS_STARTED = "products_started"
    PRODUCTS_LAUNCHED = "products_launched"
    PRODUCTS_DISCONTINUED = "products_discontinued"
    IMPROVEMENTS_MADE = "improvements_made"
    AVERAGE_QUALITY = "average_quality"
    MAX_QUALITY = "max_quality"
    MIN_QUALITY = "min_quality"
    MAX_FEATURE = "max_feature"
    # Supply chain
    SUPPLIER_COUNT = "supplier_count"
    SUPPLIER_CONCENTRATION = "supplier_concentration"
    GEOGRAPHIC_DIVERSITY = "geographic_diversity"
    SUPPLY_CAPACITY = "supply_capacity"
    SUPPLY_COST_MULTIPLIER = "supply_cost_multiplier"
    SUPPLY_QUALITY = "supply_quality"
    ACTIVE_DISRUPTIONS = "active_disruptions"
    NEW_DISRUPTIONS = "new_disruptions"
    VULNERABILITY_COUNT = "vulnerability_count"
    CRITICAL_VULNERABILITIES = "critical_vulnerabilities"
    SAFETY_STOCK = "safety_stock"
    REGIONS_SOURCED = "regions_sourced"
    AVERAGE_RELATIONSHIP = "average_relationship"
    SUPPLIERS_ADDED = "suppliers_added"
    TARIFF_MULTIPLIER = "tariff_multiplier"
    TARIFF_COST = "tariff_cost"
    # Round / world
    ROUND = "round"
    DIFFICULTY = "difficulty"
    ECONOMIC_PHASE = "economic_phase"
    IN_RECESSION = "in_recession"
    ACTIVE_TARIFF_EVENTS = "active_tariff_events"
    ACTIVE_GEOPOLITICAL_EVENTS = "active_geopolitical_events"
    TEAM_COUNT = "team_count"
    BALANCE_MULTIPLIER = "balance_multiplier"
    DEFAULTS_SUBSTITUTED = "defaults_substituted"
    # Ranks
    REVENUE_RANK = "revenue_rank"
    EPS_RANK = "eps_rank"
    MARKET_SHARE_RANK = "market_share_rank"
    # Tracker counters
    ROUNDS_COMPLETED = "rounds_completed"
    PROFITABLE_ROUNDS = "profitable_rounds"
    CONSECUTIVE_PROFIT = "consecutive_profit"
    CONSECUTIVE_LOSS = "consecutive_loss"
    CONSECUTIVE_GROWTH = "consecutive_growth"
    CONSECUTIVE_DECLINE = "consecutive_decline"
    TOTAL_PRODUCTS_LAUNCHED = "total_products_launched"
    TOTAL_PRODUCTS_STARTED = "total_products_started"
    TOTAL_PRODUCTS_DISCONTINUED = "total_products_discontinued"
    DISRUPTIONS_WEATHERED = "disruptions_weathered"
    TOTAL_DEFAULTS = "total_defaults"
    RUBBER_BAND_BOOSTS = "rubber_band_boosts"
    RUBBER_BAND_PENALTIES = "rubber_band_penalties"
    NEVER_BANKRUPT = "never_bankrupt"
    ROUNDS_WITHOUT_MARKETING = "rounds_without_marketing"
    ROUNDS_WITHOUT_RD = "rounds_without_rd"
    TOTAL_DIVIDENDS = "total_dividends"
    PEAK_CASH = "peak_cash"
    ROUNDS_AS_REVENUE_LEADER = "rounds_as_revenue_leader"
    ROUNDS_AS_SHARE_LEADER = "rounds_as_share_leader"
    PHASES_SEEN = "phases_seen"
    RECESSION_ROUNDS = "recession_rounds"
    RECESSION_PROFITABLE_ROUNDS = "recession_profitable_rounds"
    TOTAL_LOANS = "total_loans"
    TOTAL_STOCK_ISSUES = "total_stock_issues"
    TOTAL_BUYBACKS = "total_buybacks"
    TOTAL_HIRES = "total_hires"
    TOTAL_FIRES = "total_fires"
    TOTAL_TRAININGS = "total_trainings"
    TARIFF_EVENTS_SEEN = "tariff_events_seen"
    GEOPOLITICAL_EVENTS_SEEN = "geopolitical_events_seen"
    WAS_LAST_PLACE = "was_last_place"
    CONSECUTIVE_NEGATIVE_CASH = "consecutive_negative_cash"
    # Achievement tallies (earned before this round)
    ACHIEVEMENTS_EARNED = "achievements_earned"
    ACHIEVEMENT_POINTS = "achievement_points"
    INFAMY_EARNED = "infamy_earned"
    CATEGORIES_TOUCHED = "categories_touched"
    PLATINUM_EARNED = "platinum_earned"


class Operator(Enum):
    GE = ">="
    GT = ">"
    LE = "<="
    LT = "<"
    EQ = "=="
    NE = "!="
    ANY = "any"
    BETWEEN = "between"


class RelativeRank(Enum):
    """Target resolved against every team this round instead of a fixed value."""
    BEST = "best"
    WORST = "worst"


Target = Union[float, int, str, bool, RelativeRank, Tuple[float, float], None]


@dataclass(frozen=True)
class Requirement:
    metric: Metric
    operator: Operator = Operator.GE
    target: Target = None
    segment: Optional[str] = None       # for SEGMENT_SHARE
    sustained: int = 0                  # consecutive rounds the condition must hold
    cumulative: bool = False            # compare the running sum of the metric
    percentage: bool = False            # 0-1 ratios compared as 0-100
    invert: bool = False                # met when the condition does NOT hold


@dataclass(frozen=True)
class AchievementDefinition:
    id: str
    name: str
    description: str
    category: Category
    tier: Tier
    requirements: Tuple[Requirement, ...]
    hidden: bool = False
    repeatable: bool = False
    title: Optional[str] = None
    difficulty_multiplier: float = 1.0

    @property
    def points(self) -> int:
        return self.tier.points


@dataclass
class ProgressRecord:
    current: float = 0.0
    target: float = 0.0
    percent: float = 0.0
    streaks: List[int] = field(default_factory=list)
    sums: List[float] = field(default_factory=list)
    prior_streaks: List[int] = field(default_factory=list)
    prior_sums: List[float] = field(default_factory=list)
    last_evaluated_round: int = 0


@dataclass
class EarnedAchievement:
    achievement_id: str
    round_number: int
    points: int
    tier: Tier
    category: Category
    difficulty: str
    hidden: bool = False


@dataclass
class AchievementState:
    """Per-team ledger. Earned entries are only ever appended."""
    team_id: str
    earned: List[EarnedAchievement] = field(default_factory=list)
    progress: Dict[str, ProgressRecord] = field(default_factory=dict)
    total_points: int = 0
    positive_points: int = 0
    negative_points: int = 0
    tier_counts: Dict[str, int] = field(default_factory=dict)
    titles: List[str] = field(default_factory=list)
    category_progress: Dict[str, int] = field(default_factory=dict)
    tracker: TrackerState = field(default_factory=TrackerState)

    def has_earned(self, achievement_id: str) -> bool:
        return any(e.achievement_id == achievement_id for e in self.earned)

    def earned_in_round(self, achievement_id: str, round_number: int) -> bool:
        return any(e.achievement_id == achievement_id and e.round_number == round_number for e in self.earned)


@dataclass
class LedgerRoundResult:
    """What one team gained from one round of evaluation."""
    team_id: str
    round_number: int
    newly_earned: List[EarnedAchievement] = field(default_factory=list)
    points: int = 0
    messages: List[str] = field(default_factory=list)
