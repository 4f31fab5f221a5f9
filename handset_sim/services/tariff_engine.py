"""Tariff Engine.

Global trade regime shared by every team. Once per round, before any team
calculation, the engine:

1. expires tariffs and events whose window has closed
2. rolls the scripted tariff event table (probability, time window and
   optional player-state triggers)
3. installs time-boxed tariffs for escalation events, or scales down the
   route's tariffs for relief events
4. rolls the unscripted geopolitical templates and multi-event scenarios

Teams then price their inbound materials through ``calculate_tariff`` /
``landed_multiplier``. ``forecast`` is advisory and uses its own generator.
"""

import copy
import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .game_profile import TariffConfig
from .tariff_tables import (
    BASELINE_TARIFFS,
    EVENTS_BY_ID,
    GEOPOLITICAL_BY_ID,
    GEOPOLITICAL_EVENTS,
    MATERIAL_SHARES,
    TARIFF_EVENTS,
    TARIFF_SCENARIOS,
    TRADE_AGREEMENTS,
    TRADE_POLICIES,
    GeopoliticalTemplate,
    Tariff,
    TariffEventTemplate,
    TradeAgreement,
)

logger = logging.getLogger(__name__)


@dataclass
class ActiveEvent:
    id: str
    name: str
    kind: str                   # "tariff" | "geopolitical"
    event_type: str
    started_round: int
    expiry_round: int
    affected_regions: List[str] = field(default_factory=list)
    cost_increase: Dict[str, float] = field(default_factory=dict)
    severity: str = ""


@dataclass
class TariffState:
    tariffs: List[Tariff] = field(default_factory=list)
    agreements: List[TradeAgreement] = field(default_factory=list)
    active_events: List[ActiveEvent] = field(default_factory=list)
    geopolitical_events: List[ActiveEvent] = field(default_factory=list)
    fired_event_ids: List[str] = field(default_factory=list)
    round_number: int = 0

    def is_active(self, event_id: str) -> bool:
        return any(e.id == event_id for e in self.active_events + self.geopolitical_events)


@dataclass
class TeamSignals:
    """Cross-team maxima that scripted events can react to."""
    max_market_share: float = 0.0
    max_revenue: float = 0.0
    max_production_volume: float = 0.0


@dataclass
class TariffCalculation:
    from_region: str
    to_region: str
    material: str
    base_rate: float
    adjusted_rate: float
    amount: int
    applicable_tariffs: List[str] = field(default_factory=list)
    applied_agreements: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class TariffRoundResult:
    state: TariffState
    triggered_events: List[str] = field(default_factory=list)
    new_tariffs: List[str] = field(default_factory=list)
    expired_tariffs: List[str] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)


@dataclass
class TariffProjection:
    round_number: int
    rate: float
    confidence: float


@dataclass
class TariffForecast:
    from_region: str
    to_region: str
    material: str
    current_rate: float
    increase_probability: float
    decrease_probability: float
    projections: List[TariffProjection]
    recommendations: List[str]


class TariffEngine:
    """Stateless operations over a TariffState snapshot."""

    HIGH_VOLATILITY = 0.7
    FORECAST_STEP_UP = 1.05
    FORECAST_STEP_DOWN = 0.95

    @classmethod
    def initialize_state(cls) -> TariffState:
        return TariffState(
            tariffs=copy.deepcopy(BASELINE_TARIFFS),
            agreements=copy.deepcopy(TRADE_AGREEMENTS),
        )

    # ============================================
    # Rate calculation
    # ============================================

    @classmethod
    def calculate_tariff(
        cls,
        state: TariffState,
        from_region: str,
        to_region: str,
        material: str,
        material_cost: float,
        round_number: int,
    ) -> TariffCalculation:
        """Adjusted tariff for one material on one route.

        Args:
            state: Current trade regime
            from_region: Origin region
            to_region: Destination region
            material: Bill-of-materials line (processor, display, ...)
            material_cost: Cost of the shipment before duty
            round_number: Round being priced

        Returns:
            TariffCalculation with the adjusted rate (>= 0) and duty amount
        """
        matching = [t for t in state.tariffs if t.applies(from_region, to_region, material, round_number)]
        base_rate = max(0.0, sum(t.rate for t in matching))

        adjusted = base_rate
        applied = []
        for agreement in state.agreements:
            if agreement.covers(from_region, to_region, round_number):
                adjusted *= 1 - max(0.0, min(1.0, agreement.reduction))
                applied.append(agreement.id)

        warnings = []
        for t in matching:
            if t.volatility > cls.HIGH_VOLATILITY:
                warnings.append(f"{t.name} is highly volatile and may change")
        for event in state.active_events:
            template = EVENTS_BY_ID.get(event.id)
            if template and template.is_escalation and any(
                r.from_region == from_region and r.to_region == to_region for r in template.routes
            ):
                warnings.append(f"{event.name} is raising duties on this route")

        return TariffCalculation(
            from_region=from_region,
            to_region=to_region,
            material=material,
            base_rate=base_rate,
            adjusted_rate=adjusted,
            amount=round(material_cost * adjusted),
            applicable_tariffs=[t.id for t in matching],
            applied_agreements=applied,
            warnings=warnings,
        )

    @classmethod
    def landed_multiplier(cls, state: TariffState, from_region: str, to_region: str,
                          round_number: int) -> float:
        """Cost multiplier for a full bill of materials shipped on one route.

        Per-material adjusted rates are weighted by their BOM share, then the
        surcharges of active geopolitical events touching the origin are added.
        """
        duty = 0.0
        for material, share in MATERIAL_SHARES.items():
            calc = cls.calculate_tariff(state, from_region, to_region, material, 1.0, round_number)
            duty += calc.adjusted_rate * share
        surcharge = sum(e.cost_increase.get(from_region, 0.0) for e in state.geopolitical_events)
        return 1.0 + duty + surcharge

    @classmethod
    def route_multiplier(cls, state: TariffState, volumes_by_region: Dict[str, float],
                         destination: str, round_number: int) -> float:
        """Volume-weighted landed multiplier for a team's sourcing mix."""
        total = sum(volumes_by_region.values())
        if total <= 0:
            return 1.0
        weighted = 0.0
        for region in sorted(volumes_by_region):
            weight = volumes_by_region[region] / total
            weighted += weight * cls.landed_multiplier(state, region, destination, round_number)
        return weighted

    @classmethod
    def total_burden(
        cls,
        state: TariffState,
        shipments: List[Tuple[str, str, str, float]],
        round_number: int,
    ) -> Dict[str, float]:
        """Aggregate duty over (from, to, material, cost) shipments."""
        total_cost = 0.0
        total_duty = 0
        by_route: Dict[str, int] = {}
        for from_region, to_region, material, cost in shipments:
            calc = cls.calculate_tariff(state, from_region, to_region, material, cost, round_number)
            total_cost += cost
            total_duty += calc.amount
            key = f"{from_region}->{to_region}"
            by_route[key] = by_route.get(key, 0) + calc.amount
        return {
            "total_cost": total_cost,
            "total_tariff": total_duty,
            "effective_rate": total_duty / total_cost if total_cost > 0 else 0.0,
            "by_route": by_route,
        }

    @classmethod
    def mitigation_strategies(cls, state: TariffState, from_region: str, to_region: str,
                              round_number: int) -> List[str]:
        strategies = []
        rates = {
            material: cls.calculate_tariff(state, from_region, to_region, material, 1.0, round_number).adjusted_rate
            for material in MATERIAL_SHARES
        }
        worst = max(rates.values()) if rates else 0.0

        if worst > 0.2:
            strategies.append(f"Relocate sourcing away from {from_region} for high-duty components")
        if worst > 0.1:
            for agreement in state.agreements:
                if to_region in agreement.regions and from_region not in agreement.regions:
                    strategies.append(f"Source from {agreement.name} members to reduce duties")
                    break
        if any(t.volatility > cls.HIGH_VOLATILITY and t.from_region == from_region and t.to_region == to_region
               for t in state.tariffs):
            strategies.append("Lock in forward contracts before volatile tariffs change")
        if any(e.cost_increase.get(from_region, 0.0) > 0 for e in state.geopolitical_events):
            strategies.append(f"Build safety stock while geopolitical events affect {from_region}")
        if TRADE_POLICIES.get(to_region) == "protectionist":
            strategies.append(f"Consider local assembly in {to_region} to avoid protectionist duties")
        return strategies

    # ============================================
    # Round processing
    # ============================================

    @classmethod
    def process_round(
        cls,
        state: TariffState,
        round_number: int,
        rng: random.Random,
        signals: Optional[TeamSignals] = None,
        config: Optional[TariffConfig] = None,
    ) -> TariffRoundResult:
        """Advance the trade regime by one round.

        Args:
            state: Previous trade regime (not modified)
            round_number: Round being settled
            rng: The round's tariff generator
            signals: Cross-team maxima from the previous round, for triggers
            config: Which tables are live and the geopolitical event chance

        Returns:
            TariffRoundResult with the new state and round messages
        """
        config = config or TariffConfig()
        new_state = copy.deepcopy(state)
        new_state.round_number = round_number
        result = TariffRoundResult(state=new_state)

        if not config.enabled:
            return result

        kept = []
        for tariff in new_state.tariffs:
            if tariff.expiry_round is not None and tariff.expiry_round < round_number:
                result.expired_tariffs.append(tariff.id)
            else:
                kept.append(tariff)
        new_state.tariffs = kept
        new_state.active_events = [e for e in new_state.active_events if e.expiry_round >= round_number]
        new_state.geopolitical_events = [e for e in new_state.geopolitical_events if e.expiry_round >= round_number]
        new_state.agreements = [
            a for a in new_state.agreements if a.expiry_round is None or a.expiry_round >= round_number
        ]

        for template in cls._enabled(TARIFF_EVENTS, config.event_ids):
            roll = rng.random()
            if new_state.is_active(template.id):
                continue
            if cls._should_trigger(template, round_number, roll, signals):
                cls._apply_event(new_state, template, round_number, template.duration, result)

        for template in cls._enabled(GEOPOLITICAL_EVENTS, config.geopolitical_event_ids):
            roll = rng.random()
            if roll < config.geopolitical_event_chance and not new_state.is_active(template.id):
                cls._apply_geopolitical(new_state, template, round_number, template.duration, result)

        for scenario in cls._enabled(TARIFF_SCENARIOS, config.scenario_ids):
            roll = rng.random()
            if roll >= scenario.probability:
                continue
            result.messages.append(f"Scenario unfolding: {scenario.name}. {scenario.description}")
            logger.info(f"Tariff scenario triggered in round {round_number}: {scenario.id}")
            for event_id in scenario.event_ids:
                template = EVENTS_BY_ID.get(event_id)
                if template and not new_state.is_active(event_id):
                    cls._apply_event(new_state, template, round_number, scenario.duration, result)
            for event_id in scenario.geopolitical_ids:
                geo = GEOPOLITICAL_BY_ID.get(event_id)
                if geo and not new_state.is_active(event_id):
                    cls._apply_geopolitical(new_state, geo, round_number, scenario.duration, result)

        return result

    @staticmethod
    def _enabled(table: list, ids: Optional[List[str]]) -> list:
        if ids is None:
            return list(table)
        wanted = set(ids)
        return [entry for entry in table if entry.id in wanted]

    @classmethod
    def _should_trigger(cls, template: TariffEventTemplate, round_number: int, roll: float,
                        signals: Optional[TeamSignals]) -> bool:
        if round_number < template.earliest_round:
            return False
        if template.latest_round is not None and round_number > template.latest_round:
            return False
        if roll >= template.probability:
            return False
        if not template.triggers:
            return True
        if signals is None:
            return False
        observed = {
            "market_share": signals.max_market_share,
            "revenue": signals.max_revenue,
            "production_volume": signals.max_production_volume,
        }
        return any(observed.get(t.type, 0.0) >= t.threshold for t in template.triggers)

    @classmethod
    def _apply_event(cls, state: TariffState, template: TariffEventTemplate, round_number: int,
                     duration: int, result: TariffRoundResult) -> None:
        # expiry is the last round in force, so duration counts the firing round
        expiry = round_number + duration - 1
        regions = sorted({r.from_region for r in template.routes} | {r.to_region for r in template.routes})

        for route in template.routes:
            if route.increase > 0:
                tariff_id = f"event_{template.id}_{route.from_region}_{route.to_region}_{round_number}"
                state.tariffs.append(Tariff(
                    id=tariff_id,
                    name=template.name,
                    from_region=route.from_region,
                    to_region=route.to_region,
                    rate=route.increase,
                    effective_round=round_number,
                    expiry_round=expiry,
                    materials=list(template.materials) if template.materials else None,
                    reason=template.type,
                    volatility=template.severity,
                    description=template.description,
                ))
                result.new_tariffs.append(tariff_id)
            if route.decrease > 0:
                for tariff in state.tariffs:
                    if tariff.from_region == route.from_region and tariff.to_region == route.to_region:
                        tariff.rate *= 1 - route.decrease

        if template.type in ("sanctions", "embargo"):
            result.messages.append(f"Sanctions imposed: {template.name} affecting {', '.join(regions)}")
        elif template.is_escalation:
            result.messages.append(f"New tariffs: {template.name}. {template.description}")
        else:
            result.messages.append(f"Trade relief: {template.name}. {template.description}")

        state.active_events.append(ActiveEvent(
            id=template.id,
            name=template.name,
            kind="tariff",
            event_type=template.type,
            started_round=round_number,
            expiry_round=expiry,
            affected_regions=regions,
            severity=f"{template.severity:.1f}",
        ))
        state.fired_event_ids.append(template.id)
        result.triggered_events.append(template.id)
        logger.info(f"Tariff event {template.id} fired in round {round_number}, expires round {expiry}")

    @classmethod
    def _apply_geopolitical(cls, state: TariffState, template: GeopoliticalTemplate, round_number: int,
                            duration: int, result: TariffRoundResult) -> None:
        state.geopolitical_events.append(ActiveEvent(
            id=template.id,
            name=template.name,
            kind="geopolitical",
            event_type=template.type,
            started_round=round_number,
            expiry_round=round_number + duration - 1,
            affected_regions=list(template.affected_regions),
            cost_increase=dict(template.cost_increase),
            severity=template.severity,
        ))
        state.fired_event_ids.append(template.id)
        result.triggered_events.append(template.id)
        result.messages.append(f"Geopolitical event: {template.name}. {template.description}")
        logger.info(f"Geopolitical event {template.id} started in round {round_number}")

    # ============================================
    # Forecast
    # ============================================

    @classmethod
    def forecast(
        cls,
        state: TariffState,
        from_region: str,
        to_region: str,
        material: str,
        rounds: int,
        round_number: int,
        rng: random.Random,
    ) -> TariffForecast:
        """Project the adjusted rate forward for ``rounds`` rounds.

        Advisory only. ``rng`` must be a dedicated forecast generator so the
        projection never shifts settlement draws.
        """
        current = cls.calculate_tariff(state, from_region, to_region, material, 1.0, round_number)
        increase, decrease = cls.change_probabilities(state, from_region, to_region, material, round_number)

        projections = []
        rate = current.adjusted_rate
        for k in range(1, max(0, rounds) + 1):
            roll = rng.random()
            if roll < increase / 10:
                rate *= cls.FORECAST_STEP_UP
            elif roll < (increase + decrease) / 10:
                rate *= cls.FORECAST_STEP_DOWN
            projections.append(TariffProjection(
                round_number=round_number + k,
                rate=rate,
                confidence=1 - (k / rounds) * 0.5,
            ))

        recommendations = []
        if increase > 0.5:
            recommendations.append("High probability of tariff increases; diversify suppliers now")
        if decrease > 0.3:
            recommendations.append("Tariff relief likely; defer long-term contracts on this route")
        if current.adjusted_rate > 0.2:
            recommendations.append("Current duty is high; evaluate alternative sourcing regions")
        if not recommendations:
            recommendations.append("Trade conditions stable on this route")

        return TariffForecast(
            from_region=from_region,
            to_region=to_region,
            material=material,
            current_rate=current.adjusted_rate,
            increase_probability=increase,
            decrease_probability=decrease,
            projections=projections,
            recommendations=recommendations,
        )

    @classmethod
    def change_probabilities(cls, state: TariffState, from_region: str, to_region: str, material: str,
                             round_number: int) -> Tuple[float, float]:
        increase, decrease = 0.1, 0.1

        for tariff in state.tariffs:
            if tariff.applies(from_region, to_region, material, round_number) and tariff.volatility > cls.HIGH_VOLATILITY:
                increase += 0.2
                break

        for event in state.active_events:
            if event.event_type == "tariff_increase" and from_region in event.affected_regions \
                    and to_region in event.affected_regions:
                increase += 0.3
                break

        stance = TRADE_POLICIES.get(to_region, "mixed")
        if stance == "free_trade":
            decrease += 0.2
        elif stance == "protectionist":
            increase += 0.2

        return min(1.0, increase), min(1.0, decrease)
