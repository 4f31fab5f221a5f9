"""Economic Cycle Engine.

Macroeconomic backdrop for every round. The economy moves through four
phases (expansion -> peak -> contraction -> trough) as a Markov chain with a
minimum stay per phase. Each round the engine:

1. advances the phase (seeded roll once the minimum stay is served)
2. resets conditions to the phase baseline and applies volatility noise
3. derives the multipliers the rest of settlement consumes
   (demand, material cost, financing, labor, investor sentiment)
4. draws the per-segment demand jitter used by the allocator

No team action influences the cycle.
"""

import copy
import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .game_profile import EconomicCycleConfig, SEGMENTS

logger = logging.getLogger(__name__)


class EconomicPhase(Enum):
    EXPANSION = "expansion"
    PEAK = "peak"
    CONTRACTION = "contraction"
    TROUGH = "trough"


@dataclass
class InterestRates:
    federal: float
    ten_year: float
    corporate: float


@dataclass
class EconomicConditions:
    gdp_growth: float
    inflation: float
    unemployment: float
    consumer_confidence: float
    interest_rates: InterestRates
    commodity_prices: Dict[str, float] = field(default_factory=lambda: {
        "electronics": 1.0, "metals": 1.0, "energy": 1.0, "logistics": 1.0,
    })
    currency_strength: float = 1.0

    @property
    def average_commodity_price(self) -> float:
        prices = self.commodity_prices
        return sum(prices.values()) / len(prices) if prices else 1.0


@dataclass
class EconomicCycleState:
    phase: EconomicPhase
    rounds_in_phase: int
    conditions: EconomicConditions
    phase_history: List[str] = field(default_factory=list)

    @property
    def in_recession(self) -> bool:
        return self.phase in (EconomicPhase.CONTRACTION, EconomicPhase.TROUGH)


@dataclass
class EconomicImpact:
    """Multipliers handed to the allocator and the financial statement."""
    demand_multiplier: float = 1.0
    cost_multiplier: float = 1.0
    financing_cost_multiplier: float = 1.0
    labor_cost_multiplier: float = 1.0
    investor_sentiment: float = 0.0
    demand_jitter: Dict[str, float] = field(default_factory=dict)
    messages: List[str] = field(default_factory=list)


@dataclass
class EconomicForecast:
    next_phase: EconomicPhase
    transition_probability: float
    transition_odds: Dict[str, float]
    gdp_range: Dict[str, float]
    inflation_range: Dict[str, float]
    risk_factors: List[str]


class EconomicCycleEngine:
    """Markov-chain business cycle with seeded volatility."""

    BASE_CONDITIONS = {
        EconomicPhase.EXPANSION: dict(gdp_growth=3.0, inflation=2.5, unemployment=4.5,
                                      consumer_confidence=75, rates=(2.5, 4.5, 7.0)),
        EconomicPhase.PEAK: dict(gdp_growth=2.0, inflation=4.0, unemployment=3.5,
                                 consumer_confidence=80, rates=(4.0, 6.0, 9.0)),
        EconomicPhase.CONTRACTION: dict(gdp_growth=-1.0, inflation=1.5, unemployment=6.5,
                                        consumer_confidence=45, rates=(2.0, 5.0, 8.0)),
        EconomicPhase.TROUGH: dict(gdp_growth=-2.0, inflation=0.5, unemployment=8.0,
                                   consumer_confidence=35, rates=(0.5, 3.5, 6.0)),
    }

    # Baseline corporate rate that maps to a financing multiplier of 1.0
    BASELINE_CORPORATE_RATE = 4.5

    SENTIMENT_BY_PHASE = {
        EconomicPhase.EXPANSION: 10,
        EconomicPhase.PEAK: 5,
        EconomicPhase.CONTRACTION: -15,
        EconomicPhase.TROUGH: -10,
    }

    JITTER_RANGE = (0.95, 1.05)

    @classmethod
    def baseline_conditions(cls, phase: EconomicPhase) -> EconomicConditions:
        base = cls.BASE_CONDITIONS[phase]
        federal, ten_year, corporate = base["rates"]
        return EconomicConditions(
            gdp_growth=base["gdp_growth"],
            inflation=base["inflation"],
            unemployment=base["unemployment"],
            consumer_confidence=base["consumer_confidence"],
            interest_rates=InterestRates(federal, ten_year, corporate),
        )

    @classmethod
    def initialize_state(cls, config: Optional[EconomicCycleConfig] = None) -> EconomicCycleState:
        phase = EconomicPhase(config.starting_phase if config else "expansion")
        return EconomicCycleState(
            phase=phase,
            rounds_in_phase=0,
            conditions=cls.baseline_conditions(phase),
            phase_history=[phase.value],
        )

    @classmethod
    def advance(
        cls,
        state: EconomicCycleState,
        config: EconomicCycleConfig,
        rng: random.Random,
    ) -> Tuple[EconomicCycleState, EconomicImpact]:
        """Move the economy forward one round.

        Returns:
            (new state, impact for the round being settled)
        """
        if not config.enabled:
            stable = copy.deepcopy(state)
            stable.rounds_in_phase += 1
            return stable, EconomicImpact(demand_jitter={s: 1.0 for s in SEGMENTS})

        new_state = cls._transition(state, config, rng)
        cls._apply_volatility(new_state, config, rng)
        impact = cls.calculate_impact(new_state, config)
        low, high = cls.JITTER_RANGE
        impact.demand_jitter = {segment: rng.uniform(low, high) for segment in SEGMENTS}

        if new_state.phase != state.phase:
            logger.info(f"Economic phase change: {state.phase.value} -> {new_state.phase.value}")
        return new_state, impact

    @classmethod
    def _transition(cls, previous: EconomicCycleState, config: EconomicCycleConfig,
                    rng: random.Random) -> EconomicCycleState:
        state = copy.deepcopy(previous)
        state.rounds_in_phase += 1

        min_rounds = config.min_rounds_in_phase.get(state.phase.value, 1)
        if state.rounds_in_phase >= min_rounds:
            probabilities = cls.transition_probabilities(state.phase, config)
            roll = rng.random()
            cumulative = 0.0
            for phase_name, probability in probabilities.items():
                cumulative += probability
                if roll < cumulative:
                    if phase_name != state.phase.value:
                        state.phase = EconomicPhase(phase_name)
                        state.rounds_in_phase = 0
                    break

        state.conditions = cls.baseline_conditions(state.phase)
        # commodity and currency levels drift; they are not reset to baseline
        state.conditions.commodity_prices = dict(previous.conditions.commodity_prices)
        state.conditions.currency_strength = previous.conditions.currency_strength
        state.phase_history.append(state.phase.value)
        return state

    @classmethod
    def transition_probabilities(cls, phase: EconomicPhase, config: EconomicCycleConfig) -> Dict[str, float]:
        """Transition row for a phase, with the difficulty recession boost applied."""
        row = dict(config.transitions.get(phase.value, {phase.value: 1.0}))
        if phase in (EconomicPhase.EXPANSION, EconomicPhase.PEAK) and config.recession_probability > 0:
            boost = min(config.recession_probability, row.get(phase.value, 0.0))
            row["contraction"] = row.get("contraction", 0.0) + boost
            row[phase.value] = row.get(phase.value, 0.0) - boost
        return row

    @classmethod
    def _apply_volatility(cls, state: EconomicCycleState, config: EconomicCycleConfig,
                          rng: random.Random) -> None:
        volatility = config.volatility
        c = state.conditions

        c.gdp_growth += rng.gauss(0, volatility * 0.5)
        c.inflation = rng.uniform(config.inflation_min, config.inflation_max)
        c.consumer_confidence += rng.gauss(0, volatility * 5)
        c.consumer_confidence = max(10.0, min(100.0, c.consumer_confidence))

        commodity_volatility = volatility * 0.1
        for key in sorted(c.commodity_prices):
            c.commodity_prices[key] *= 1 + rng.gauss(0, commodity_volatility)
            c.commodity_prices[key] = max(0.5, min(2.0, c.commodity_prices[key]))

        c.currency_strength += rng.gauss(0, volatility * 0.05)
        c.currency_strength = max(0.7, min(1.3, c.currency_strength))

    @classmethod
    def calculate_impact(cls, state: EconomicCycleState, config: EconomicCycleConfig) -> EconomicImpact:
        c = state.conditions
        messages = []

        confidence_effect = (c.consumer_confidence - 50) / 100
        gdp_effect = c.gdp_growth / 100
        demand = (1 + confidence_effect * 0.3 + gdp_effect * 0.2) * config.demand_growth_multiplier

        cost = (1 + c.inflation / 100) * c.average_commodity_price
        financing = c.interest_rates.corporate / cls.BASELINE_CORPORATE_RATE

        if c.unemployment < 5:
            labor = 1.1
        elif c.unemployment > 7:
            labor = 0.95
        else:
            labor = 1.0

        if state.phase == EconomicPhase.EXPANSION:
            messages.append(f"Economy expanding: GDP growth at {c.gdp_growth:.1f}%")
        elif state.phase == EconomicPhase.CONTRACTION:
            messages.append(f"Economic contraction: GDP at {c.gdp_growth:.1f}%")
        elif state.phase == EconomicPhase.TROUGH:
            messages.append(f"Economy in recession: GDP at {c.gdp_growth:.1f}%")

        if c.inflation > 5:
            messages.append(f"High inflation at {c.inflation:.1f}% impacting costs")
        if c.consumer_confidence < 40:
            messages.append(f"Consumer confidence low at {c.consumer_confidence:.0f}, demand weakening")
        elif c.consumer_confidence > 80:
            messages.append(f"Strong consumer confidence at {c.consumer_confidence:.0f} boosting demand")

        return EconomicImpact(
            demand_multiplier=demand,
            cost_multiplier=cost,
            financing_cost_multiplier=financing,
            labor_cost_multiplier=labor,
            investor_sentiment=cls.SENTIMENT_BY_PHASE[state.phase],
            messages=messages,
        )

    @classmethod
    def forecast(cls, state: EconomicCycleState, config: EconomicCycleConfig) -> EconomicForecast:
        """Most likely next phase plus ranges and risk factors. Advisory only."""
        probabilities = cls.transition_probabilities(state.phase, config)
        next_phase, max_probability = state.phase, 0.0
        for phase_name, probability in probabilities.items():
            if probability > max_probability:
                max_probability = probability
                next_phase = EconomicPhase(phase_name)

        gdp_base = cls.BASE_CONDITIONS[next_phase]["gdp_growth"]
        volatility = config.volatility

        risk_factors = []
        if probabilities.get("contraction", 0.0) > 0.2:
            risk_factors.append("Elevated recession risk")
        if state.conditions.inflation > 4:
            risk_factors.append("Inflationary pressure")
        if state.conditions.interest_rates.federal > 3.5:
            risk_factors.append("Tight monetary policy")
        if state.conditions.unemployment > 6:
            risk_factors.append("Weak labor market")

        return EconomicForecast(
            next_phase=next_phase,
            transition_probability=max_probability,
            transition_odds=probabilities,
            gdp_range={"low": gdp_base - volatility, "mid": gdp_base, "high": gdp_base + volatility},
            inflation_range={
                "low": config.inflation_min,
                "mid": (config.inflation_min + config.inflation_max) / 2,
                "high": config.inflation_max,
            },
            risk_factors=risk_factors,
        )
