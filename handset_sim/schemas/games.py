from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any


class GameCreate(BaseModel):
    team_ids: List[str] = Field(min_length=1)
    difficulty: Optional[str] = None  # falls back to Settings.default_difficulty
    seed: Optional[str] = None
    max_rounds: Optional[int] = Field(None, ge=1)
    profile_overrides: Dict[str, Any] = {}

    @field_validator("team_ids")
    @classmethod
    def unique_team_ids(cls, v: List[str]) -> List[str]:
        if len(set(v)) != len(v):
            raise ValueError("team ids must be unique")
        if any(not t.strip() for t in v):
            raise ValueError("team ids must not be blank")
        return v


class TeamSummary(BaseModel):
    team_id: str
    cash: float
    debt: float
    revenue: float
    net_income: float
    eps: float
    share_price: float
    brand_value: float
    esg_score: float
    market_share: Dict[str, float] = {}
    products: int = 0
    rank: Optional[int] = None


class GameResponse(BaseModel):
    id: str
    seed: str
    difficulty: str
    status: str  # 'created', 'running', 'finished'
    current_round: int
    max_rounds: int
    phase: str
    team_ids: List[str]
    pending_decisions: List[str] = []
    teams: List[TeamSummary] = []
    last_summary: List[str] = []


class TeamResultResponse(BaseModel):
    team_id: str
    revenue: float
    net_income: float
    total_costs: float
    cash_delta: float
    market_share: Dict[str, float]
    market_share_delta: float
    units_sold: int
    rank: int
    ranks: Dict[str, int]
    balance_multiplier: float
    balance_status: str
    achievement_points: int = 0
    new_achievements: List[str] = []
    messages: List[str] = []
    warnings: List[str] = []


class SettleResponse(BaseModel):
    game_id: str
    round_number: int
    status: str
    phase: str
    rankings: Dict[str, Dict[str, int]]
    results: List[TeamResultResponse]
    summary: List[str] = []
    audit: Dict[str, Any] = {}


class DecisionAccepted(BaseModel):
    game_id: str
    team_id: str
    round_number: int
    departments: List[str]


class EarnedAchievementResponse(BaseModel):
    id: str
    name: str
    description: str
    category: str
    tier: str
    points: int
    round_number: int


class AchievementResponse(BaseModel):
    team_id: str
    total_points: int
    positive_points: int
    negative_points: int
    earned: List[EarnedAchievementResponse] = []
    titles: List[str] = []
    tier_counts: Dict[str, int] = {}
    categories: Dict[str, Dict[str, int]] = {}
    available: int = 0


class TariffProjectionResponse(BaseModel):
    round_number: int
    rate: float
    confidence: float


class TariffForecastResponse(BaseModel):
    from_region: str
    to_region: str
    material: str
    current_rate: float
    increase_probability: float
    decrease_probability: float
    projections: List[TariffProjectionResponse]
    recommendations: List[str] = []
    mitigation_strategies: List[str] = []


class EconomyForecastResponse(BaseModel):
    current_phase: str
    rounds_in_phase: int
    next_phase: str
    transition_probability: float
    transition_odds: Dict[str, float]
    gdp_range: Dict[str, float]
    inflation_range: Dict[str, float]
    risk_factors: List[str] = []


class ProfileSummary(BaseModel):
    difficulty: str
    starting_cash: float
    starting_brand_value: float
    rubber_banding: bool
    disruption_frequency: float
    economic_volatility: float
