"""Team and market state model.

TeamState is owned by one team and only changed by round settlement.
MarketState is the shared, read-only view of the five customer segments
that every team is scored against in a round.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .game_profile import SEGMENTS, GameProfile
from .supply_chain_engine import SupplyChainEngine, SupplyChainState

# Per-unit assembly costs added on top of the segment's raw materials
LABOR_COST_PER_UNIT = 20
OVERHEAD_COST_PER_UNIT = 15

# Price, quality and features of the five products every team starts with
STARTER_PRODUCTS = [
    ("Standard Phone", "General", 450, 65,
     {"battery": 60, "camera": 60, "ai": 50, "durability": 55, "display": 60, "connectivity": 60}),
    ("Budget Phone", "Budget", 200, 50,
     {"battery": 55, "camera": 35, "ai": 25, "durability": 50, "display": 40, "connectivity": 40}),
    ("Pro Phone", "Enthusiast", 800, 80,
     {"battery": 65, "camera": 80, "ai": 70, "durability": 55, "display": 80, "connectivity": 70}),
    ("Enterprise Phone", "Professional", 1250, 90,
     {"battery": 75, "camera": 70, "ai": 85, "durability": 70, "display": 80, "connectivity": 85}),
    ("Active Phone", "Active Lifestyle", 600, 70,
     {"battery": 75, "camera": 55, "ai": 40, "durability": 80, "display": 55, "connectivity": 60}),
]


class ProductStatus(Enum):
    IN_DEVELOPMENT = "in_development"
    LAUNCHED = "launched"
    DISCONTINUED = "discontinued"


@dataclass
class Product:
    id: str
    name: str
    segment: str
    price: float
    quality: float
    features: Dict[str, float]
    status: ProductStatus = ProductStatus.LAUNCHED
    unit_cost: float = 0.0
    rounds_remaining: int = 0
    target_quality: Optional[float] = None
    target_features: Dict[str, float] = field(default_factory=dict)
    launched_round: Optional[int] = None


@dataclass
class Factory:
    id: str
    name: str
    region: str
    capacity: int
    efficiency: float       # 0-1
    defect_rate: float      # 0-1
    green_investment: float = 0.0

    @property
    def effective_capacity(self) -> float:
        return self.capacity * self.efficiency


@dataclass
class Workforce:
    headcount: int
    average_morale: float       # 0-100
    average_efficiency: float   # 0-100
    turnover_rate: float        # per round, 0-1
    average_salary: float

    @property
    def payroll(self) -> float:
        """Annual payroll."""
        return self.headcount * self.average_salary


@dataclass
class TeamState:
    team_id: str
    cash: float
    brand_value: float
    esg_score: float
    workforce: Workforce
    products: List[Product] = field(default_factory=list)
    factories: List[Factory] = field(default_factory=list)
    supply_chain: SupplyChainState = field(default_factory=SupplyChainState)
    debt: float = 0.0
    shares_issued: float = 10_000_000
    share_price: float = 50.0
    eps: float = 0.0
    revenue: float = 0.0
    net_income: float = 0.0
    cumulative_revenue: float = 0.0
    cumulative_net_income: float = 0.0
    cumulative_marketing: float = 0.0
    cumulative_rd: float = 0.0
    rd_progress: float = 0.0
    patents: int = 0
    esg_programs: List[str] = field(default_factory=list)
    market_share: Dict[str, float] = field(default_factory=lambda: {s: 0.0 for s in SEGMENTS})
    units_sold: Dict[str, int] = field(default_factory=lambda: {s: 0 for s in SEGMENTS})
    round_number: int = 0

    @property
    def launched_products(self) -> List[Product]:
        return [p for p in self.products if p.status == ProductStatus.LAUNCHED]

    @property
    def production_capacity(self) -> float:
        return sum(f.effective_capacity for f in self.factories)

    @property
    def total_market_share(self) -> float:
        """Average share across segments."""
        if not self.market_share:
            return 0.0
        return sum(self.market_share.values()) / len(self.market_share)

    @property
    def is_bankrupt(self) -> bool:
        return self.cash < 0 and self.debt > 0

    def product(self, product_id: str) -> Optional[Product]:
        for p in self.products:
            if p.id == product_id:
                return p
        return None

    def best_product_for(self, segment: str) -> Optional[Product]:
        """Launched product a team competes with in a segment.

        Highest quality wins, product id breaks ties.
        """
        candidates = [p for p in self.launched_products if p.segment == segment]
        if not candidates:
            return None
        return sorted(candidates, key=lambda p: (-p.quality, p.id))[0]


@dataclass
class SegmentMarket:
    name: str
    base_demand: float
    price_min: float
    price_max: float
    growth_rate: float
    quality_expectation: float
    weights: Dict[str, float]
    feature_preferences: Dict[str, float]
    raw_material_cost: float
    demand: float = 0.0


@dataclass
class MarketState:
    round_number: int
    segments: Dict[str, SegmentMarket]
    phase: str = "expansion"
    sustainability_premium: float = 0.3

    def segment(self, name: str) -> SegmentMarket:
        return self.segments[name]


def unit_cost_for(segment: str, quality: float, profile: GameProfile) -> float:
    material = profile.segments[segment].raw_material_cost
    quality_premium = max(0.0, quality - 50) * 0.5
    return material + LABOR_COST_PER_UNIT + OVERHEAD_COST_PER_UNIT + quality_premium


def create_initial_team_state(team_id: str, profile: GameProfile) -> TeamState:
    """Fresh company with the starter product line, one factory and the default suppliers."""
    start = profile.starting
    products = []
    for i, (name, segment, price, quality, features) in enumerate(STARTER_PRODUCTS, start=1):
        products.append(Product(
            id=f"{team_id}-p{i}",
            name=name,
            segment=segment,
            price=price,
            quality=quality,
            features=dict(features),
            status=ProductStatus.LAUNCHED,
            unit_cost=unit_cost_for(segment, quality, profile),
            launched_round=0,
        ))

    return TeamState(
        team_id=team_id,
        cash=start.cash,
        brand_value=start.brand_value,
        esg_score=start.esg_score,
        shares_issued=start.shares_issued,
        workforce=Workforce(
            headcount=start.headcount,
            average_morale=70.0,
            average_efficiency=70.0,
            turnover_rate=0.05,
            average_salary=start.average_salary,
        ),
        products=products,
        factories=[Factory(
            id=f"{team_id}-f1",
            name="Main Factory",
            region="North America",
            capacity=start.factory_capacity,
            efficiency=start.factory_efficiency,
            defect_rate=0.06,
        )],
        supply_chain=SupplyChainEngine.initialize_state(),
    )


def create_initial_market_state(profile: GameProfile) -> MarketState:
    segments = {}
    for name in SEGMENTS:
        seg = profile.segments[name]
        segments[name] = SegmentMarket(
            name=name,
            base_demand=seg.base_demand,
            price_min=seg.price_min,
            price_max=seg.price_max,
            growth_rate=seg.growth_rate,
            quality_expectation=seg.quality_expectation,
            weights=seg.weights.model_dump(),
            feature_preferences=dict(seg.feature_preferences),
            raw_material_cost=seg.raw_material_cost,
            demand=seg.base_demand,
        )
    return MarketState(
        round_number=0,
        segments=segments,
        phase=profile.economic_cycle.starting_phase,
        sustainability_premium=profile.market.sustainability_premium,
    )
