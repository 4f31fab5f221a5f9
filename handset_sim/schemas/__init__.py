from .decisions import (
    DecisionBundle, DecisionSubmission, FactoryDecision, HRDecision,
    MarketingDecision, FinanceDecision, RDDecision, SourcingDecision,
    NewProductSpec, ProductImprovement
)
from .games import (
    GameCreate, GameResponse, TeamSummary, SettleResponse, TeamResultResponse,
    DecisionAccepted, AchievementResponse, EarnedAchievementResponse,
    TariffForecastResponse, TariffProjectionResponse, EconomyForecastResponse,
    ProfileSummary
)

__all__ = [
    "DecisionBundle", "DecisionSubmission", "FactoryDecision", "HRDecision",
    "MarketingDecision", "FinanceDecision", "RDDecision", "SourcingDecision",
    "NewProductSpec", "ProductImprovement",
    "GameCreate", "GameResponse", "TeamSummary", "SettleResponse", "TeamResultResponse",
    "DecisionAccepted", "AchievementResponse", "EarnedAchievementResponse",
    "TariffForecastResponse", "TariffProjectionResponse", "EconomyForecastResponse",
    "ProfileSummary",
]
