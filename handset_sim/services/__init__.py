# Core modules (no database dependencies)
from .rng import SeedBundle, derive_seed, make_rng
from .game_profile import GameProfile, Difficulty, ConfigurationError, load_profile, load_profile_file
from .team_state import TeamState, MarketState, Product, Factory, Workforce
from .economic_cycle import EconomicCycleEngine, EconomicCycleState, EconomicPhase, EconomicImpact
from .supply_chain_engine import SupplyChainEngine, SupplyChainState, Disruption, Supplier
from .tariff_engine import TariffEngine, TariffState
from .market_allocator import MarketAllocator, AllocationResult
from .balance_adjuster import BalanceAdjuster, BalanceAdjustment
from .decisions import DecisionSanitizer, SanitizedDecisions
from .settlement import RoundSettlement, SettlementResult, TeamRoundResult, WorldSnapshot, create_world

__all__ = [
    "SeedBundle",
    "derive_seed",
    "make_rng",
    "GameProfile",
    "Difficulty",
    "ConfigurationError",
    "load_profile",
    "load_profile_file",
    "TeamState",
    "MarketState",
    "Product",
    "Factory",
    "Workforce",
    "EconomicCycleEngine",
    "EconomicCycleState",
    "EconomicPhase",
    "EconomicImpact",
    "SupplyChainEngine",
    "SupplyChainState",
    "Disruption",
    "Supplier",
    "TariffEngine",
    "TariffState",
    "MarketAllocator",
    "AllocationResult",
    "BalanceAdjuster",
    "BalanceAdjustment",
    "DecisionSanitizer",
    "SanitizedDecisions",
    "RoundSettlement",
    "SettlementResult",
    "TeamRoundResult",
    "WorldSnapshot",
    "create_world",
]
