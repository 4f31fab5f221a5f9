"""Supply Chain Engine for round settlement.

Evolves each team's supplier roster, rolls seeded disruption events, and
derives the numbers the rest of the round consumes:

- effective capacity (units the supply base can feed this round)
- cost multiplier applied to material costs
- quality impact (relationship-weighted supplier quality minus disruption penalty)
- a ranked list of structural vulnerabilities

Disruption lifecycle: a disruption is created with rounds_remaining equal to
its duration, is decremented once per subsequent round, and is removed in the
round it reaches zero. The engine never raises for an empty roster; capacity
falls to zero and the cost multiplier sits at COST_MULTIPLIER_CEILING instead.
"""

import copy
import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .rng import sample_subset

logger = logging.getLogger(__name__)

REGIONS = ["North America", "Europe", "Asia", "MENA", "South America", "Africa"]


class DisruptionType(Enum):
    NATURAL_DISASTER = "natural_disaster"
    SUPPLIER_FAILURE = "supplier_failure"
    LOGISTICS = "logistics"
    TRADE_WAR = "trade_war"
    PANDEMIC = "pandemic"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").capitalize()


class VulnerabilityType(Enum):
    CONCENTRATION = "concentration"
    GEOGRAPHIC = "geographic"
    QUALITY = "quality"
    ETHICAL = "ethical"
    CAPACITY = "capacity"


class Severity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return ["low", "medium", "high", "critical"].index(self.value)


@dataclass
class Supplier:
    """A contracted (or catalogued) component supplier."""
    id: str
    name: str
    region: str
    tier: int
    capacity: int               # units per round
    quality: float              # 0-100
    ethics: float               # 0-100
    reliability: float          # 0-1
    relationship: float = 0.0   # 0-100, the only smoothly persisted field
    contract_volume: int = 0
    cost_index: float = 1.0     # relative unit price
    active: bool = True


@dataclass
class Disruption:
    id: str
    type: DisruptionType
    affected_regions: List[str]
    severity: float             # 0-1
    duration: int
    rounds_remaining: int
    started_round: int

    @property
    def cost_impact(self) -> float:
        return 1.0 + self.severity * 0.5

    @property
    def supply_impact(self) -> float:
        return self.severity

    @property
    def severity_label(self) -> str:
        if self.severity > 0.6:
            return "severe"
        if self.severity > 0.3:
            return "moderate"
        return "minor"


@dataclass
class Vulnerability:
    type: VulnerabilityType
    severity: Severity
    description: str
    mitigation_cost: float
    mitigation_action: str
    affected_suppliers: List[str] = field(default_factory=list)


@dataclass
class SupplyChainState:
    """Per-team supply chain. Everything except relationships is recomputed each round."""
    suppliers: List[Supplier] = field(default_factory=list)
    disruptions: List[Disruption] = field(default_factory=list)
    vulnerabilities: List[Vulnerability] = field(default_factory=list)
    safety_stock_buffer: int = 0
    concentration: float = 0.0
    geographic_diversity: float = 0.0
    effective_capacity: float = 0.0
    cost_multiplier: float = 1.0
    quality_impact: float = 70.0
    events_weathered: int = 0
    regions_sourced: List[str] = field(default_factory=list)

    @property
    def active_suppliers(self) -> List[Supplier]:
        return [s for s in self.suppliers if s.active]

    @property
    def total_volume(self) -> int:
        return sum(s.contract_volume for s in self.active_suppliers)

    @property
    def average_relationship(self) -> float:
        active = self.active_suppliers
        if not active:
            return 0.0
        return sum(s.relationship for s in active) / len(active)

    def supplier(self, supplier_id: str) -> Optional[Supplier]:
        for s in self.suppliers:
            if s.id == supplier_id:
                return s
        return None


@dataclass
class SourcingPlan:
    """A team's sourcing decisions for the round."""
    add_suppliers: List[str] = field(default_factory=list)
    drop_suppliers: List[str] = field(default_factory=list)
    contract_volumes: Dict[str, int] = field(default_factory=dict)
    safety_stock_buffer: Optional[int] = None


@dataclass
class DisruptionMultipliers:
    """Difficulty scaling for disruption rolls (defaults are the normal preset)."""
    frequency_multiplier: float = 1.0
    severity_multiplier: float = 1.0
    recovery_multiplier: float = 1.0


@dataclass
class SupplyChainRoundResult:
    state: SupplyChainState
    new_disruptions: List[Disruption] = field(default_factory=list)
    resolved_disruptions: List[Disruption] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class SupplyChainEngine:
    """Disruption rolls and supply metrics, one team at a time."""

    # Base event table: probability, severity range, duration range (rounds)
    DISRUPTION_TABLE = {
        DisruptionType.NATURAL_DISASTER: (0.02, (0.3, 0.8), (1, 3)),
        DisruptionType.SUPPLIER_FAILURE: (0.03, (0.2, 0.5), (2, 4)),
        DisruptionType.LOGISTICS: (0.05, (0.1, 0.4), (1, 2)),
        DisruptionType.TRADE_WAR: (0.01, (0.2, 0.6), (4, 8)),
        DisruptionType.PANDEMIC: (0.005, (0.4, 0.9), (4, 12)),
    }

    # Vulnerability thresholds
    CONCENTRATION_HIGH = 0.5
    CONCENTRATION_CRITICAL = 0.7
    DIVERSITY_FLOOR = 0.3
    QUALITY_FLOOR = 60
    ETHICS_FLOOR = 50
    CAPACITY_FLOOR = 150_000

    # Cost premiums
    CONCENTRATION_PREMIUM = 1.05  # concentration > 0.7
    LOW_DIVERSITY_PREMIUM = 1.03  # diversity < 0.2
    COST_MULTIPLIER_CEILING = 10.0

    RELATIONSHIP_GAIN = 5
    RELATIONSHIP_DECAY = 2
    NEW_SUPPLIER_RELATIONSHIP = 10
    DEFAULT_QUALITY = 70.0
    DISRUPTION_QUALITY_PENALTY = 5.0
    SAFETY_STOCK_BOOST = 0.1            # capacity boost per buffer level
    SAFETY_STOCK_COST_PER_LEVEL = 250_000
    MAX_SAFETY_STOCK = 10

    DEFAULT_ROSTER = [
        Supplier("sup_primary", "Shenzhen Components Co.", "Asia", 1, 100_000, 80, 70, 0.92,
                 relationship=50, contract_volume=50_000, cost_index=1.0),
        Supplier("sup_secondary", "Pacific Assembly Partners", "Asia", 2, 50_000, 75, 65, 0.88,
                 relationship=30, contract_volume=30_000, cost_index=0.95),
        Supplier("sup_backup", "EuroTech Parts GmbH", "Europe", 1, 30_000, 85, 90, 0.95,
                 relationship=20, contract_volume=20_000, cost_index=1.2),
    ]

    # Suppliers a team may add through sourcing decisions
    SUPPLIER_CATALOG = {
        "sup_na_precision": Supplier("sup_na_precision", "Great Lakes Precision", "North America", 1,
                                     60_000, 88, 85, 0.96, cost_index=1.25),
        "sup_na_volume": Supplier("sup_na_volume", "Sonora Electronics", "North America", 2,
                                  80_000, 74, 72, 0.9, cost_index=1.05),
        "sup_eu_green": Supplier("sup_eu_green", "Nordic Circuit Works", "Europe", 1,
                                 45_000, 86, 95, 0.95, cost_index=1.3),
        "sup_asia_bulk": Supplier("sup_asia_bulk", "Delta River Manufacturing", "Asia", 3,
                                  150_000, 66, 45, 0.85, cost_index=0.8),
        "sup_asia_premium": Supplier("sup_asia_premium", "Hsinchu Semiconductor", "Asia", 1,
                                     90_000, 92, 78, 0.97, cost_index=1.15),
        "sup_mena_hub": Supplier("sup_mena_hub", "Gulf Logistics Assembly", "MENA", 2,
                                 40_000, 72, 60, 0.9, cost_index=0.95),
        "sup_sa_mining": Supplier("sup_sa_mining", "Andes Materials", "South America", 2,
                                  45_000, 68, 58, 0.86, cost_index=0.9),
        "sup_africa_minerals": Supplier("sup_africa_minerals", "Copperbelt Minerals", "Africa", 3,
                                        35_000, 58, 48, 0.82, cost_index=0.85),
    }

    @classmethod
    def initialize_state(cls) -> SupplyChainState:
        """Create the starting roster and compute its derived metrics."""
        state = SupplyChainState(suppliers=copy.deepcopy(cls.DEFAULT_ROSTER))
        cls.recompute(state)
        return state

    @classmethod
    def process_round(
        cls,
        state: SupplyChainState,
        plan: Optional[SourcingPlan],
        round_number: int,
        rng: random.Random,
        tuning=None,
    ) -> SupplyChainRoundResult:
        """Advance one team's supply chain by one round.

        Args:
            state: Previous supply chain state (not modified)
            plan: Sourcing decisions, or None to keep the current roster
            round_number: Round being settled
            rng: The team's seeded supply-chain generator
            tuning: Difficulty multipliers (frequency/severity/recovery)

        Returns:
            SupplyChainRoundResult with the new state and advisories
        """
        tuning = tuning or DisruptionMultipliers()
        new_state = copy.deepcopy(state)
        result = SupplyChainRoundResult(state=new_state)

        remaining, resolved = cls.advance_disruptions(new_state.disruptions)
        new_state.disruptions = remaining
        new_state.events_weathered += len(resolved)
        result.resolved_disruptions = resolved
        for d in resolved:
            result.messages.append(
                f"{d.type.label} disruption in {', '.join(d.affected_regions)} has been resolved"
            )

        new_disruptions = cls.roll_disruptions(round_number, rng, tuning)
        for d in new_disruptions:
            new_state.disruptions.append(d)
            result.warnings.append(
                f"{d.type.label} affecting {', '.join(d.affected_regions)} - "
                f"{d.severity_label} impact expected for {d.duration} rounds"
            )
        result.new_disruptions = new_disruptions

        if plan is not None:
            result.messages.extend(cls.apply_sourcing(new_state, plan))

        cls.update_relationships(new_state)
        cls.recompute(new_state)

        for vuln in new_state.vulnerabilities:
            if vuln.severity == Severity.CRITICAL:
                result.warnings.append(f"Critical vulnerability: {vuln.description}")
            elif vuln.severity == Severity.HIGH:
                result.messages.append(f"High-risk vulnerability: {vuln.description}")
        mitigation = cls.total_mitigation_cost(new_state)
        if mitigation > 0:
            result.messages.append(f"Mitigating all vulnerabilities would cost ${mitigation:,.0f}")

        if new_disruptions:
            logger.debug(f"Round {round_number}: {len(new_disruptions)} new disruption(s)")
        return result

    @classmethod
    def advance_disruptions(cls, disruptions: List[Disruption]) -> Tuple[List[Disruption], List[Disruption]]:
        """Decrement every disruption; split into (still active, resolved)."""
        remaining = []
        resolved = []
        for d in disruptions:
            d.rounds_remaining -= 1
            if d.rounds_remaining <= 0:
                d.rounds_remaining = 0
                resolved.append(d)
            else:
                remaining.append(d)
        return remaining, resolved

    @classmethod
    def roll_disruptions(cls, round_number: int, rng: random.Random, tuning) -> List[Disruption]:
        """Roll each disruption type once. Draw order is fixed for reproducibility."""
        created = []
        for dtype, (base_p, (sev_lo, sev_hi), (dur_lo, dur_hi)) in cls.DISRUPTION_TABLE.items():
            probability = base_p * tuning.frequency_multiplier
            if rng.random() >= probability:
                continue

            severity = min(1.0, rng.uniform(sev_lo, sev_hi) * tuning.severity_multiplier)
            duration = max(1, int(round(rng.randint(dur_lo, dur_hi) * tuning.recovery_multiplier)))
            regions = cls.sample_regions(dtype, rng)
            created.append(Disruption(
                id=f"{dtype.value}_{round_number}_{len(created) + 1}",
                type=dtype,
                affected_regions=regions,
                severity=severity,
                duration=duration,
                rounds_remaining=duration,
                started_round=round_number,
            ))
        return created

    @classmethod
    def sample_regions(cls, dtype: DisruptionType, rng: random.Random) -> List[str]:
        """Pandemics hit every region, supplier failures exactly one, others 1-3."""
        if dtype == DisruptionType.PANDEMIC:
            return list(REGIONS)
        if dtype == DisruptionType.SUPPLIER_FAILURE:
            return [rng.choice(REGIONS)]
        return sample_subset(rng, REGIONS, 1, 3)

    @classmethod
    def apply_sourcing(cls, state: SupplyChainState, plan: SourcingPlan) -> List[str]:
        messages = []
        for supplier_id in plan.add_suppliers:
            existing = state.supplier(supplier_id)
            if existing is not None:
                if not existing.active:
                    existing.active = True
                    messages.append(f"Reactivated supplier {existing.name}")
                continue
            template = cls.SUPPLIER_CATALOG.get(supplier_id)
            if template is None:
                messages.append(f"Unknown supplier '{supplier_id}' ignored")
                continue
            supplier = copy.deepcopy(template)
            supplier.relationship = cls.NEW_SUPPLIER_RELATIONSHIP
            supplier.contract_volume = supplier.capacity // 2
            state.suppliers.append(supplier)
            messages.append(f"Signed new supplier {supplier.name} ({supplier.region})")

        for supplier_id in plan.drop_suppliers:
            supplier = state.supplier(supplier_id)
            if supplier is not None and supplier.active:
                supplier.active = False
                supplier.contract_volume = 0
                messages.append(f"Ended contract with {supplier.name}")

        for supplier_id, volume in sorted(plan.contract_volumes.items()):
            supplier = state.supplier(supplier_id)
            if supplier is None or not supplier.active:
                messages.append(f"Cannot set volume for inactive or unknown supplier '{supplier_id}'")
                continue
            supplier.contract_volume = max(0, min(int(volume), supplier.capacity))

        if plan.safety_stock_buffer is not None:
            state.safety_stock_buffer = max(0, min(cls.MAX_SAFETY_STOCK, plan.safety_stock_buffer))

        for supplier in state.active_suppliers:
            if supplier.contract_volume > 0 and supplier.region not in state.regions_sourced:
                state.regions_sourced.append(supplier.region)
        return messages

    @classmethod
    def update_relationships(cls, state: SupplyChainState) -> None:
        for supplier in state.suppliers:
            if supplier.active:
                supplier.relationship = min(100.0, supplier.relationship + cls.RELATIONSHIP_GAIN)
            else:
                supplier.relationship = max(0.0, supplier.relationship - cls.RELATIONSHIP_DECAY)

    @classmethod
    def recompute(cls, state: SupplyChainState) -> None:
        """Refresh every derived metric from the roster and active disruptions."""
        state.concentration = cls.calculate_concentration(state)
        state.geographic_diversity = cls.calculate_geographic_diversity(state)
        state.vulnerabilities = cls.assess_vulnerabilities(state)
        state.effective_capacity = cls.calculate_effective_capacity(state)
        state.cost_multiplier = cls.calculate_cost_multiplier(state)
        state.quality_impact = cls.calculate_quality_impact(state)
        for supplier in state.active_suppliers:
            if supplier.contract_volume > 0 and supplier.region not in state.regions_sourced:
                state.regions_sourced.append(supplier.region)

    @classmethod
    def calculate_concentration(cls, state: SupplyChainState) -> float:
        """Share of contracted volume coming from the largest supplier."""
        total = state.total_volume
        if total <= 0:
            return 0.0
        return max(s.contract_volume for s in state.active_suppliers) / total

    @classmethod
    def calculate_geographic_diversity(cls, state: SupplyChainState) -> float:
        regions = {s.region for s in state.active_suppliers if s.contract_volume > 0}
        return len(regions) / len(REGIONS)

    @classmethod
    def assess_vulnerabilities(cls, state: SupplyChainState) -> List[Vulnerability]:
        """Flag structural weaknesses, most severe first."""
        active = state.active_suppliers
        vulnerabilities = []

        if state.concentration > cls.CONCENTRATION_HIGH:
            top = max(active, key=lambda s: s.contract_volume)
            vulnerabilities.append(Vulnerability(
                type=VulnerabilityType.CONCENTRATION,
                severity=Severity.CRITICAL if state.concentration > cls.CONCENTRATION_CRITICAL else Severity.HIGH,
                description=f"{state.concentration * 100:.0f}% of supply from single source",
                mitigation_cost=10_000_000,
                mitigation_action="Diversify supplier base with additional contracts",
                affected_suppliers=[top.id],
            ))

        if state.geographic_diversity < cls.DIVERSITY_FLOOR:
            vulnerabilities.append(Vulnerability(
                type=VulnerabilityType.GEOGRAPHIC,
                severity=Severity.MEDIUM,
                description="Supply concentrated in a single region",
                mitigation_cost=5_000_000,
                mitigation_action="Establish suppliers in additional regions",
                affected_suppliers=[s.id for s in active],
            ))

        low_quality = [s.id for s in active if s.quality < cls.QUALITY_FLOOR]
        if low_quality:
            vulnerabilities.append(Vulnerability(
                type=VulnerabilityType.QUALITY,
                severity=Severity.MEDIUM,
                description=f"{len(low_quality)} supplier(s) with quality concerns",
                mitigation_cost=2_000_000,
                mitigation_action="Implement supplier quality improvement programs",
                affected_suppliers=low_quality,
            ))

        low_ethics = [s.id for s in active if s.ethics < cls.ETHICS_FLOOR]
        if low_ethics:
            vulnerabilities.append(Vulnerability(
                type=VulnerabilityType.ETHICAL,
                severity=Severity.HIGH,
                description=f"{len(low_ethics)} supplier(s) with ethical concerns",
                mitigation_cost=3_000_000,
                mitigation_action="Conduct ethical audits and require compliance improvements",
                affected_suppliers=low_ethics,
            ))

        if sum(s.capacity for s in active) < cls.CAPACITY_FLOOR:
            vulnerabilities.append(Vulnerability(
                type=VulnerabilityType.CAPACITY,
                severity=Severity.MEDIUM,
                description="Limited supplier capacity may constrain growth",
                mitigation_cost=8_000_000,
                mitigation_action="Negotiate capacity expansion or add new suppliers",
                affected_suppliers=[s.id for s in active],
            ))

        # stable sort keeps detection order within a severity
        vulnerabilities.sort(key=lambda v: -v.severity.rank)
        return vulnerabilities

    @classmethod
    def calculate_effective_capacity(cls, state: SupplyChainState) -> float:
        active = state.active_suppliers
        capacity = float(sum(s.capacity for s in active))
        for disruption in state.disruptions:
            for supplier in active:
                if supplier.region in disruption.affected_regions:
                    capacity -= supplier.capacity * disruption.supply_impact
        capacity *= 1 + state.safety_stock_buffer * cls.SAFETY_STOCK_BOOST
        return max(0.0, capacity)

    @classmethod
    def calculate_cost_multiplier(cls, state: SupplyChainState) -> float:
        total = state.total_volume
        if total <= 0:
            return cls.COST_MULTIPLIER_CEILING

        multiplier = 1.0
        for disruption in state.disruptions:
            affected = sum(
                s.contract_volume for s in state.active_suppliers
                if s.region in disruption.affected_regions
            )
            multiplier += (disruption.cost_impact - 1) * (affected / total)

        if state.concentration > cls.CONCENTRATION_CRITICAL:
            multiplier *= cls.CONCENTRATION_PREMIUM
        if state.geographic_diversity < 0.2:
            multiplier *= cls.LOW_DIVERSITY_PREMIUM
        return min(cls.COST_MULTIPLIER_CEILING, multiplier)

    @classmethod
    def calculate_quality_impact(cls, state: SupplyChainState) -> float:
        total_weight = 0.0
        weighted = 0.0
        for supplier in state.active_suppliers:
            weight = supplier.relationship / 100
            weighted += supplier.quality * weight
            total_weight += weight
        average = weighted / total_weight if total_weight > 0 else cls.DEFAULT_QUALITY

        penalty = sum(d.severity * cls.DISRUPTION_QUALITY_PENALTY for d in state.disruptions)
        return max(0.0, average - penalty)

    @classmethod
    def sourcing_cost_index(cls, state: SupplyChainState) -> float:
        """Volume-weighted supplier price index (1.0 when nothing is contracted)."""
        total = state.total_volume
        if total <= 0:
            return 1.0
        return sum(s.cost_index * s.contract_volume for s in state.active_suppliers) / total

    @classmethod
    def volume_by_region(cls, state: SupplyChainState) -> Dict[str, float]:
        """Fraction of contracted volume shipped from each region."""
        total = state.total_volume
        shares: Dict[str, float] = {}
        if total <= 0:
            return shares
        for supplier in state.active_suppliers:
            if supplier.contract_volume > 0:
                shares[supplier.region] = shares.get(supplier.region, 0.0) + supplier.contract_volume / total
        return shares

    @classmethod
    def total_mitigation_cost(cls, state: SupplyChainState) -> float:
        return sum(v.mitigation_cost for v in state.vulnerabilities)
