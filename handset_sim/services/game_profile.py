"""Game profile: the configuration surface of the settlement kernel.

A profile bundles everything a round needs that is not a team decision:
segment preference weights and price bands, market scoring constants,
disruption difficulty multipliers, economic-cycle transition tables, tariff
event tables, rubber-banding strengths, starting values, and achievement
point multipliers.

Profiles are built from a difficulty preset plus optional overrides and are
validated once at load time. An invalid profile raises ConfigurationError;
the kernel never runs on a profile that failed validation.
"""

import copy
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

logger = logging.getLogger(__name__)

SEGMENTS = ("Budget", "General", "Enthusiast", "Professional", "Active Lifestyle")
FEATURE_AXES = ("battery", "camera", "ai", "durability", "display", "connectivity")
PHASES = ("expansion", "peak", "contraction", "trough")


class ConfigurationError(ValueError):
    """Raised when a game profile cannot be used to run a game."""


class Difficulty(str, Enum):
    SANDBOX = "sandbox"
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"
    EXPERT = "expert"
    NIGHTMARE = "nightmare"

    @property
    def order(self) -> int:
        return DIFFICULTY_ORDER.index(self.value)


DIFFICULTY_ORDER = [d.value for d in Difficulty]


class SegmentWeights(BaseModel):
    """How a segment trades off the five desirability factors (sum 100)."""
    price: float = Field(ge=0)
    quality: float = Field(ge=0)
    brand: float = Field(ge=0)
    esg: float = Field(ge=0)
    features: float = Field(ge=0)

    @property
    def total(self) -> float:
        return self.price + self.quality + self.brand + self.esg + self.features


class SegmentProfile(BaseModel):
    weights: SegmentWeights
    quality_expectation: float = Field(gt=0)
    price_min: float = Field(gt=0)
    price_max: float = Field(gt=0)
    base_demand: float = Field(ge=0)
    growth_rate: float = 0.0
    feature_preferences: Dict[str, float]
    raw_material_cost: float = Field(ge=0)


class MarketTuning(BaseModel):
    softmax_temperature: float = Field(10.0, gt=0)
    price_floor_penalty_threshold: float = 0.15  # fraction of segment min
    price_floor_penalty_max: float = 0.30
    quality_tolerance_per_point: float = 0.002
    quality_feature_bonus_cap: float = 1.2
    brand_critical_mass_high: float = 0.55
    brand_critical_mass_low: float = 0.30
    brand_high_multiplier: float = 1.1
    brand_low_multiplier: float = 0.9
    brand_decay_rate: float = 0.025
    brand_max_growth: float = 0.02
    sustainability_premium: float = 0.3
    esg_high_threshold: float = 700
    esg_mid_threshold: float = 400
    esg_penalty_threshold: float = 300
    esg_max_penalty: float = 0.08
    esg_min_penalty: float = 0.01


class DisruptionTuning(BaseModel):
    frequency_multiplier: float = Field(1.0, ge=0)
    severity_multiplier: float = Field(1.0, ge=0)
    recovery_multiplier: float = Field(1.0, ge=0)


class EconomicCycleConfig(BaseModel):
    enabled: bool = True
    starting_phase: str = "expansion"
    volatility: float = Field(0.5, ge=0)
    recession_probability: float = Field(0.0, ge=0, le=1)
    demand_growth_multiplier: float = Field(1.0, gt=0)
    inflation_min: float = 1.0
    inflation_max: float = 5.0
    transitions: Dict[str, Dict[str, float]] = Field(default_factory=lambda: copy.deepcopy(DEFAULT_TRANSITIONS))
    min_rounds_in_phase: Dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_MIN_ROUNDS))


class TariffConfig(BaseModel):
    enabled: bool = True
    geopolitical_event_chance: float = Field(0.01, ge=0, le=1)
    # None means "every entry of the built-in table"
    event_ids: Optional[List[str]] = None
    geopolitical_event_ids: Optional[List[str]] = None
    scenario_ids: Optional[List[str]] = None


class RubberBandConfig(BaseModel):
    enabled: bool = True
    start_round: int = Field(3, ge=1)
    threshold: float = 0.5          # trailing when share < avg * threshold
    leading_multiple: float = 2.0   # leading when share > avg * leading_multiple
    trailing_boost: float = 1.15
    leading_penalty: float = 0.92


class StartingValues(BaseModel):
    cash: float = 200_000_000
    brand_value: float = 0.25
    esg_score: float = 100
    shares_issued: float = 10_000_000
    headcount: int = 63
    average_salary: float = 75_000
    factory_capacity: int = 250_000
    factory_efficiency: float = 0.7


class AchievementConfig(BaseModel):
    point_multipliers: Dict[str, float] = Field(default_factory=dict)


class GameProfile(BaseModel):
    """Complete, validated configuration for one game."""
    version: str = "1.0"
    difficulty: Difficulty = Difficulty.NORMAL
    segments: Dict[str, SegmentProfile]
    market: MarketTuning = Field(default_factory=MarketTuning)
    disruptions: DisruptionTuning = Field(default_factory=DisruptionTuning)
    economic_cycle: EconomicCycleConfig = Field(default_factory=EconomicCycleConfig)
    tariffs: TariffConfig = Field(default_factory=TariffConfig)
    rubber_banding: RubberBandConfig = Field(default_factory=RubberBandConfig)
    starting: StartingValues = Field(default_factory=StartingValues)
    achievements: AchievementConfig = Field(default_factory=AchievementConfig)

    @model_validator(mode="after")
    def check_invariants(self) -> "GameProfile":
        errors = []
        if not self.version or not self.version.strip():
            errors.append("version is required")

        missing = [s for s in SEGMENTS if s not in self.segments]
        if missing:
            errors.append(f"missing segments: {', '.join(missing)}")
        for name, segment in self.segments.items():
            if abs(segment.weights.total - 100.0) > 1e-6:
                errors.append(f"segment '{name}' weights sum to {segment.weights.total:g}, expected 100")
            if segment.price_min >= segment.price_max:
                errors.append(f"segment '{name}' price_min must be below price_max")
            unknown_axes = set(segment.feature_preferences) - set(FEATURE_AXES)
            if unknown_axes:
                errors.append(f"segment '{name}' has unknown feature axes: {sorted(unknown_axes)}")
            pref_total = sum(segment.feature_preferences.values())
            if abs(pref_total - 1.0) > 0.01:
                errors.append(f"segment '{name}' feature preferences sum to {pref_total:.3f}, expected 1")

        market = self.market
        if market.esg_high_threshold <= market.esg_mid_threshold:
            errors.append("ESG high threshold must be greater than the mid threshold")
        if market.brand_critical_mass_high <= market.brand_critical_mass_low:
            errors.append("brand critical mass high must be greater than low")
        if not 0 <= market.price_floor_penalty_max <= 1:
            errors.append("price floor penalty max must be within [0, 1]")

        if self.starting.cash <= 0:
            errors.append("starting cash must be positive")
        if not 0 <= self.starting.brand_value <= 1:
            errors.append("starting brand value must be within [0, 1]")

        rb = self.rubber_banding
        if not 0 < rb.threshold < 1:
            errors.append("rubber-banding threshold must be within (0, 1)")
        if rb.leading_multiple <= 1:
            errors.append("rubber-banding leading multiple must be greater than 1")
        if rb.trailing_boost < 1 or not 0 < rb.leading_penalty <= 1:
            errors.append("rubber-banding boost must be >= 1 and penalty within (0, 1]")

        cycle = self.economic_cycle
        if cycle.starting_phase not in PHASES:
            errors.append(f"unknown starting phase '{cycle.starting_phase}'")
        for phase, row in cycle.transitions.items():
            if phase not in PHASES or any(p not in PHASES for p in row):
                errors.append(f"transition table references unknown phase in row '{phase}'")
                continue
            if abs(sum(row.values()) - 1.0) > 1e-6:
                errors.append(f"transition probabilities from '{phase}' sum to {sum(row.values()):.3f}")
        if cycle.inflation_min > cycle.inflation_max:
            errors.append("inflation range is inverted")

        if errors:
            raise ValueError("; ".join(errors))
        return self

    def point_multiplier(self, tier: str) -> float:
        return self.achievements.point_multipliers.get(tier, 1.0)


# ============================================
# Built-in tables
# ============================================

DEFAULT_SEGMENTS: Dict[str, Dict[str, Any]] = {
    "Budget": {
        "weights": {"price": 50, "quality": 22, "brand": 8, "esg": 8, "features": 12},
        "quality_expectation": 50,
        "price_min": 100, "price_max": 300,
        "base_demand": 500_000, "growth_rate": 0.02,
        "raw_material_cost": 60,
        "feature_preferences": {"battery": 0.35, "camera": 0.08, "ai": 0.05,
                                "durability": 0.25, "display": 0.15, "connectivity": 0.12},
    },
    "General": {
        "weights": {"price": 28, "quality": 23, "brand": 17, "esg": 10, "features": 22},
        "quality_expectation": 65,
        "price_min": 300, "price_max": 600,
        "base_demand": 400_000, "growth_rate": 0.03,
        "raw_material_cost": 150,
        "feature_preferences": {"battery": 0.18, "camera": 0.20, "ai": 0.15,
                                "durability": 0.12, "display": 0.20, "connectivity": 0.15},
    },
    "Enthusiast": {
        "weights": {"price": 12, "quality": 30, "brand": 8, "esg": 5, "features": 45},
        "quality_expectation": 80,
        "price_min": 600, "price_max": 1000,
        "base_demand": 200_000, "growth_rate": 0.04,
        "raw_material_cost": 320,
        "feature_preferences": {"battery": 0.08, "camera": 0.30, "ai": 0.12,
                                "durability": 0.05, "display": 0.30, "connectivity": 0.15},
    },
    "Professional": {
        "weights": {"price": 8, "quality": 48, "brand": 7, "esg": 20, "features": 17},
        "quality_expectation": 90,
        "price_min": 1000, "price_max": 1500,
        "base_demand": 100_000, "growth_rate": 0.02,
        "raw_material_cost": 500,
        "feature_preferences": {"battery": 0.10, "camera": 0.12, "ai": 0.30,
                                "durability": 0.08, "display": 0.15, "connectivity": 0.25},
    },
    "Active Lifestyle": {
        "weights": {"price": 20, "quality": 34, "brand": 10, "esg": 10, "features": 26},
        "quality_expectation": 70,
        "price_min": 400, "price_max": 800,
        "base_demand": 150_000, "growth_rate": 0.05,
        "raw_material_cost": 220,
        "feature_preferences": {"battery": 0.20, "camera": 0.08, "ai": 0.05,
                                "durability": 0.40, "display": 0.10, "connectivity": 0.17},
    },
}

DEFAULT_TRANSITIONS: Dict[str, Dict[str, float]] = {
    "expansion": {"expansion": 0.7, "peak": 0.3},
    "peak": {"expansion": 0.1, "peak": 0.3, "contraction": 0.6},
    "contraction": {"contraction": 0.5, "trough": 0.5},
    "trough": {"expansion": 0.6, "contraction": 0.2, "trough": 0.2},
}

DEFAULT_MIN_ROUNDS: Dict[str, int] = {
    "expansion": 4,
    "peak": 2,
    "contraction": 3,
    "trough": 2,
}

# frequency, severity, recovery multipliers per difficulty
DIFFICULTY_DISRUPTIONS = {
    "sandbox": (0.0, 0.0, 0.5),
    "easy": (0.5, 0.5, 0.7),
    "normal": (1.0, 1.0, 1.0),
    "hard": (1.5, 1.3, 1.2),
    "expert": (2.0, 1.5, 1.5),
    "nightmare": (3.0, 2.0, 2.0),
}

DIFFICULTY_PRESETS: Dict[str, Dict[str, Any]] = {
    "sandbox": {
        "starting": {"cash": 500_000_000, "brand_value": 0.5},
        "economic_cycle": {"volatility": 0.2, "recession_probability": 0.0},
        "rubber_banding": {"enabled": True},
        "tariffs": {"geopolitical_event_chance": 0.0},
    },
    "easy": {
        "starting": {"cash": 300_000_000, "brand_value": 0.35},
        "economic_cycle": {"volatility": 0.3, "recession_probability": 0.05},
        "rubber_banding": {"enabled": True, "trailing_boost": 1.2},
    },
    "normal": {
        "starting": {"cash": 200_000_000, "brand_value": 0.25},
        "economic_cycle": {"volatility": 0.5, "recession_probability": 0.1},
        "rubber_banding": {"enabled": True},
    },
    "hard": {
        "starting": {"cash": 150_000_000, "brand_value": 0.2},
        "economic_cycle": {"volatility": 0.7, "recession_probability": 0.15},
        "rubber_banding": {"enabled": True, "trailing_boost": 1.1, "leading_penalty": 0.95},
    },
    "expert": {
        "starting": {"cash": 100_000_000, "brand_value": 0.15},
        "economic_cycle": {"volatility": 0.85, "recession_probability": 0.2},
        "rubber_banding": {"enabled": False},
        "tariffs": {"geopolitical_event_chance": 0.02},
    },
    "nightmare": {
        "starting": {"cash": 75_000_000, "brand_value": 0.1},
        "economic_cycle": {"volatility": 1.0, "recession_probability": 0.3},
        "rubber_banding": {"enabled": False},
        "tariffs": {"geopolitical_event_chance": 0.03},
    },
}

# Achievement point multipliers per difficulty; infamy penalties never grow
POSITIVE_TIER_MULTIPLIERS = {
    "sandbox": 0.5, "easy": 0.75, "normal": 1.0, "hard": 1.25, "expert": 1.5, "nightmare": 2.0,
}
INFAMY_TIER_MULTIPLIERS = {
    "sandbox": 0.5, "easy": 0.75, "normal": 1.0, "hard": 1.0, "expert": 1.0, "nightmare": 1.0,
}


def _deep_merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def preset_dict(difficulty: str = "normal") -> Dict[str, Any]:
    """Raw (unvalidated) profile dictionary for a difficulty preset."""
    if difficulty not in DIFFICULTY_PRESETS:
        raise ConfigurationError(f"Unknown difficulty '{difficulty}'")

    frequency, severity, recovery = DIFFICULTY_DISRUPTIONS[difficulty]
    multipliers = {tier: POSITIVE_TIER_MULTIPLIERS[difficulty]
                   for tier in ("bronze", "silver", "gold", "platinum", "secret")}
    multipliers["infamy"] = INFAMY_TIER_MULTIPLIERS[difficulty]

    base = {
        "version": "1.0",
        "difficulty": difficulty,
        "segments": copy.deepcopy(DEFAULT_SEGMENTS),
        "disruptions": {
            "frequency_multiplier": frequency,
            "severity_multiplier": severity,
            "recovery_multiplier": recovery,
        },
        "achievements": {"point_multipliers": multipliers},
    }
    return _deep_merge(base, DIFFICULTY_PRESETS[difficulty])


def load_profile(difficulty: str = "normal", overrides: Optional[Dict[str, Any]] = None) -> GameProfile:
    """Build and validate a profile from a difficulty preset plus overrides.

    Raises:
        ConfigurationError: if the merged profile violates any invariant.
    """
    raw = preset_dict(difficulty)
    if overrides:
        raw = _deep_merge(raw, overrides)
    try:
        profile = GameProfile.model_validate(raw)
    except ValidationError as e:
        messages = [err.get("msg", "") for err in e.errors()]
        logger.error(f"Rejected game profile ({difficulty}): {messages}")
        raise ConfigurationError("; ".join(messages)) from e
    logger.info(f"Loaded game profile: difficulty={profile.difficulty.value}, version={profile.version}")
    return profile


def load_profile_file(path: Path) -> GameProfile:
    """Load a profile from a JSON file of overrides on top of its difficulty preset."""
    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not read profile {path}: {e}") from e
    difficulty = data.pop("difficulty", "normal")
    return load_profile(difficulty, data)
