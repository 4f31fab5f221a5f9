"""Trade-regime reference tables.

Baseline tariffs, standing trade agreements, scripted tariff events,
geopolitical event templates, multi-event scenarios, and regional trade
policy stances. All regions use the supply-chain region list.

Sources:
- Baseline duties modelled on the 2018-2019 US-China Section 301 schedule
- Agreements: USMCA, EU single market, ASEAN FTA, GCC customs union
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class Tariff:
    id: str
    name: str
    from_region: str
    to_region: str
    rate: float                                  # 0.25 = 25%
    effective_round: int = 1
    expiry_round: Optional[int] = None
    materials: Optional[List[str]] = None        # None = every material
    reason: str = "revenue"
    volatility: float = 0.2                      # 0-1, likelihood of change
    description: str = ""

    def applies(self, from_region: str, to_region: str, material: str, round_number: int) -> bool:
        if self.from_region != from_region or self.to_region != to_region:
            return False
        if self.materials is not None and material not in self.materials:
            return False
        if round_number < self.effective_round:
            return False
        return self.expiry_round is None or round_number <= self.expiry_round


@dataclass
class TradeAgreement:
    id: str
    name: str
    type: str
    regions: List[str]
    reduction: float                             # 0.95 = 95% off matching tariffs
    effective_round: int = 1
    expiry_round: Optional[int] = None

    def covers(self, from_region: str, to_region: str, round_number: int) -> bool:
        if from_region not in self.regions or to_region not in self.regions:
            return False
        if round_number < self.effective_round:
            return False
        return self.expiry_round is None or round_number <= self.expiry_round


@dataclass
class RouteChange:
    from_region: str
    to_region: str
    increase: float = 0.0
    decrease: float = 0.0


@dataclass
class EventTrigger:
    """Optional player-state condition; any satisfied trigger fires the event."""
    type: str           # market_share | revenue | production_volume
    threshold: float


@dataclass
class TariffEventTemplate:
    id: str
    name: str
    type: str           # tariff_increase | new_tariff | tariff_decrease | trade_agreement | sanctions | embargo
    routes: List[RouteChange]
    duration: int
    probability: float
    severity: float
    description: str
    materials: Optional[List[str]] = None
    triggers: List[EventTrigger] = field(default_factory=list)
    earliest_round: int = 1
    latest_round: Optional[int] = None

    @property
    def is_escalation(self) -> bool:
        return self.type in ("tariff_increase", "new_tariff", "sanctions", "embargo")


@dataclass
class GeopoliticalTemplate:
    id: str
    name: str
    type: str           # conflict | alliance | dispute
    affected_regions: List[str]
    duration: int
    severity: str
    cost_increase: Dict[str, float]     # region -> landed cost surcharge
    description: str


@dataclass
class TariffScenario:
    id: str
    name: str
    description: str
    probability: float
    event_ids: List[str]
    geopolitical_ids: List[str]
    duration: int


# Bill of materials shares used to turn per-material rates into a landed multiplier
MATERIAL_SHARES = {
    "processor": 0.25,
    "display": 0.20,
    "memory": 0.15,
    "battery": 0.12,
    "camera": 0.10,
    "storage": 0.08,
    "chassis": 0.05,
    "other": 0.05,
}

BASELINE_TARIFFS = [
    Tariff("us_china_electronics", "US-China Electronics Tariff", "Asia", "North America", 0.25,
           materials=["processor", "display", "memory"], reason="trade_war", volatility=0.8,
           description="Trade war tariffs on Chinese electronics"),
    Tariff("china_us_retaliatory", "China-US Retaliatory Tariff", "North America", "Asia", 0.20,
           materials=["processor"], reason="retaliatory", volatility=0.8,
           description="Retaliatory tariffs on US semiconductors"),
    Tariff("standard_electronics", "Standard Electronics Import Duty", "Asia", "Europe", 0.10,
           reason="revenue", volatility=0.2,
           description="Standard import duty on electronics"),
    Tariff("africa_development", "African Development Protection", "Asia", "Africa", 0.15,
           reason="protectionism", volatility=0.4,
           description="Protective tariffs to support local industry"),
]

TRADE_AGREEMENTS = [
    TradeAgreement("usmca", "USMCA (North American Trade Agreement)", "free_trade",
                   ["North America"], 0.95),
    TradeAgreement("eu_single_market", "EU Single Market", "customs_union", ["Europe"], 1.0),
    TradeAgreement("asean", "ASEAN Free Trade Area", "free_trade", ["Asia"], 0.85),
    TradeAgreement("gcc", "Gulf Cooperation Council", "customs_union", ["MENA"], 1.0),
]

TARIFF_EVENTS = [
    TariffEventTemplate(
        "trade_war_escalation", "US-China Trade War Escalation", "tariff_increase",
        [RouteChange("North America", "Asia", increase=0.25), RouteChange("Asia", "North America", increase=0.25)],
        duration=8, probability=0.05, severity=0.8,
        materials=["processor", "display", "memory", "storage"],
        description="Escalating trade tensions result in additional tariffs on technology products"),
    TariffEventTemplate(
        "eu_digital_tax", "EU Digital Services Tax", "new_tariff",
        [RouteChange("North America", "Europe", increase=0.15), RouteChange("Asia", "Europe", increase=0.15)],
        duration=12, probability=0.03, severity=0.5,
        materials=["processor", "display"],
        description="EU implements digital services tax affecting tech imports"),
    TariffEventTemplate(
        "usmca_expansion", "USMCA Benefits Expansion", "trade_agreement",
        [RouteChange("North America", "South America", decrease=0.20),
         RouteChange("South America", "North America", decrease=0.20)],
        duration=20, probability=0.04, severity=0.3,
        description="USMCA expands to include South American partners"),
    TariffEventTemplate(
        "rare_earth_export_restriction", "Rare Earth Export Restrictions", "sanctions",
        [RouteChange("Africa", "Asia", increase=0.30), RouteChange("Africa", "North America", increase=0.30)],
        duration=6, probability=0.06, severity=0.7, materials=["battery"],
        description="African nations restrict rare earth mineral exports"),
    TariffEventTemplate(
        "green_technology_incentive", "Green Technology Trade Incentive", "tariff_decrease",
        [RouteChange("Europe", "Asia", decrease=0.10), RouteChange("Europe", "North America", decrease=0.10)],
        duration=15, probability=0.04, severity=0.2, materials=["battery"],
        description="Incentives for green battery technology imports"),
    TariffEventTemplate(
        "regional_conflict_sanctions", "Regional Conflict Sanctions", "sanctions",
        [RouteChange("MENA", "North America", increase=0.35), RouteChange("MENA", "Europe", increase=0.35),
         RouteChange("North America", "MENA", increase=0.25), RouteChange("Europe", "MENA", increase=0.25)],
        duration=10, probability=0.03, severity=0.9,
        description="Regional conflict triggers international sanctions"),
    TariffEventTemplate(
        "anti_dumping_investigation", "Anti-Dumping Investigation", "new_tariff",
        [RouteChange("Asia", "North America", increase=0.40), RouteChange("Asia", "Europe", increase=0.35)],
        duration=12, probability=0.04, severity=0.6, materials=["display", "memory"],
        triggers=[EventTrigger("market_share", 0.4)],
        description="Anti-dumping investigation results in punitive tariffs"),
    TariffEventTemplate(
        "free_trade_breakthrough", "Global Free Trade Breakthrough", "trade_agreement",
        [RouteChange("Asia", "Europe", decrease=0.15), RouteChange("Asia", "MENA", decrease=0.20),
         RouteChange("Europe", "MENA", decrease=0.18)],
        duration=25, probability=0.02, severity=0.3,
        description="Major breakthrough in global trade negotiations"),
    TariffEventTemplate(
        "supply_chain_security_act", "Supply Chain Security Act", "new_tariff",
        [RouteChange("Asia", "North America", increase=0.20)],
        duration=16, probability=0.05, severity=0.7, materials=["processor", "memory"],
        earliest_round=3,
        description="National security concerns trigger semiconductor tariffs"),
    TariffEventTemplate(
        "climate_carbon_border_tax", "Carbon Border Adjustment", "new_tariff",
        [RouteChange("Asia", "Europe", increase=0.12), RouteChange("Africa", "Europe", increase=0.10)],
        duration=18, probability=0.06, severity=0.4,
        triggers=[EventTrigger("production_volume", 400_000)],
        description="EU implements carbon border adjustment mechanism"),
]

ALL_REGIONS = ["North America", "Europe", "Asia", "MENA", "South America", "Africa"]

GEOPOLITICAL_EVENTS = [
    GeopoliticalTemplate(
        "pandemic_disruption", "Global Pandemic", "conflict", list(ALL_REGIONS),
        duration=12, severity="critical",
        cost_increase={region: 0.15 for region in ALL_REGIONS},
        description="Global pandemic causes widespread supply chain disruptions"),
    GeopoliticalTemplate(
        "strait_closure", "Strategic Strait Closure", "conflict", ["Asia", "Europe", "MENA"],
        duration=6, severity="high",
        cost_increase={"Asia": 0.40, "Europe": 0.40},
        description="Conflict closes strategic shipping strait"),
    GeopoliticalTemplate(
        "regional_alliance", "New Regional Alliance Formation", "alliance", ["Asia", "MENA"],
        duration=20, severity="low",
        cost_increase={"North America": 0.08, "Europe": 0.08},
        description="New trade alliance forms between Asia and the Gulf"),
    GeopoliticalTemplate(
        "commodity_crisis", "Rare Materials Crisis", "dispute", ["Africa", "Asia"],
        duration=8, severity="high",
        cost_increase={"Africa": 0.50, "Asia": 0.50},
        description="Dispute over rare earth materials causes price surge"),
]

TARIFF_SCENARIOS = [
    TariffScenario(
        "protectionist_wave", "Global Protectionist Wave",
        "Multiple countries adopt protectionist policies simultaneously",
        probability=0.02,
        event_ids=["trade_war_escalation", "anti_dumping_investigation", "supply_chain_security_act"],
        geopolitical_ids=[], duration=12),
    TariffScenario(
        "trade_liberalization", "Trade Liberalization Period",
        "Multiple trade agreements reduce global tariffs",
        probability=0.03,
        event_ids=["usmca_expansion", "free_trade_breakthrough", "green_technology_incentive"],
        geopolitical_ids=["regional_alliance"], duration=20),
    TariffScenario(
        "supply_chain_crisis", "Global Supply Chain Crisis",
        "Multiple disruptions cause widespread supply chain chaos",
        probability=0.015,
        event_ids=["rare_earth_export_restriction", "regional_conflict_sanctions"],
        geopolitical_ids=["pandemic_disruption", "commodity_crisis"], duration=10),
]

# Regional trade stance: free_trade | mixed | protectionist
TRADE_POLICIES = {
    "North America": "mixed",
    "Europe": "free_trade",
    "Asia": "mixed",
    "MENA": "free_trade",
    "South America": "protectionist",
    "Africa": "protectionist",
}

EVENTS_BY_ID = {e.id: e for e in TARIFF_EVENTS}
GEOPOLITICAL_BY_ID = {e.id: e for e in GEOPOLITICAL_EVENTS}
