"""Supply chain achievements: suppliers, concentration and resilience."""

from ..types import Category, Metric as M, Tier
from .builders import above, at_least, at_most, below, best, define, equals, worst


def _a(id, name, description, tier, *requirements, **options):
    return define(Category.SUPPLY_CHAIN, id, name, description, tier, *requirements, **options)


SUPPLY_CHAIN_ACHIEVEMENTS = [
    _a("procurement_rookie", "Procurement Rookie", "Sign a new supplier.",
       Tier.BRONZE, at_least(M.SUPPLIERS_ADDED, 1)),
    _a("supplier_rolodex", "Supplier Rolodex", "Work with five active suppliers.",
       Tier.SILVER, at_least(M.SUPPLIER_COUNT, 5)),
    _a("globe_trotter", "Globe Trotter", "Source from four regions over the game.",
       Tier.SILVER, at_least(M.REGIONS_SOURCED, 4)),
    _a("silk_road", "Silk Road", "Source from all six regions over the game.",
       Tier.GOLD, at_least(M.REGIONS_SOURCED, 6)),
    _a("the_captain", "The Captain", "Push geographic diversity to 0.6.",
       Tier.SILVER, at_least(M.GEOGRAPHIC_DIVERSITY, 0.6)),
    _a("savvy_shopper", "Savvy Shopper", "Keep the supply cost multiplier at 1.0 or lower.",
       Tier.BRONZE, at_most(M.SUPPLY_COST_MULTIPLIER, 1.0), at_least(M.ROUND, 2)),
    _a("just_in_time", "Just In Time", "Hold a safety stock buffer of 3.",
       Tier.BRONZE, at_least(M.SAFETY_STOCK, 3)),
    _a("deep_roots", "Need for Speed", "Reach an average supplier relationship of 80.",
       Tier.GOLD, at_least(M.AVERAGE_RELATIONSHIP, 80)),
    _a("supply_chain_ninja", "Supply Chain Ninja", "Have no vulnerabilities at all.",
       Tier.GOLD, equals(M.VULNERABILITY_COUNT, 0)),
    _a("zero_stockouts", "Zero Stockouts", "Sell every unit demanded for three rounds.",
       Tier.PLATINUM, at_least(M.FILL_RATE, 1.0, sustained=3), title="Supply Maestro"),
    _a("premium_parts", "Multimodal Maestro", "Reach supply quality of 85.",
       Tier.SILVER, at_least(M.SUPPLY_QUALITY, 85)),
    _a("diversified_best", "Supply Chain Strategist", "Run the least concentrated supply chain of all teams.",
       Tier.GOLD, best(M.SUPPLIER_CONCENTRATION)),
    _a("empty_shelves", "Empty Shelves", "Let supply capacity drop below 100,000 units.",
       Tier.INFAMY, below(M.SUPPLY_CAPACITY, 100_000)),
    _a("single_point_of_failure", "Single Point of Failure", "Push supplier concentration above 0.7.",
       Tier.INFAMY, above(M.SUPPLIER_CONCENTRATION, 0.7)),
    _a("hoarder", "Hoarder", "Max out the safety stock buffer.",
       Tier.INFAMY, at_least(M.SAFETY_STOCK, 10)),
    _a("the_bottleneck", "The Bottleneck", "Carry two critical vulnerabilities.",
       Tier.INFAMY, at_least(M.CRITICAL_VULNERABILITIES, 2)),
    _a("forgot_to_order", "Forgot to Order", "End a round with a single active supplier.",
       Tier.INFAMY, at_most(M.SUPPLIER_COUNT, 1)),
    _a("wrong_everything", "Wrong Everything", "Pay the highest supply costs of all teams.",
       Tier.INFAMY, worst(M.SUPPLY_COST_MULTIPLIER)),
    _a("disruption_magnet", "Spoilage King", "Suffer three active disruptions at once.",
       Tier.INFAMY, at_least(M.ACTIVE_DISRUPTIONS, 3)),
]
