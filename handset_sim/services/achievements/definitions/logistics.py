"""Logistics achievements: tariffs, routes and landed cost."""

from ..types import Category, Metric as M, Tier
from .builders import above, at_least, at_most, best, define, equals, worst


def _a(id, name, description, tier, *requirements, **options):
    return define(Category.LOGISTICS, id, name, description, tier, *requirements, **options)


LOGISTICS_ACHIEVEMENTS = [
    _a("map_nerd", "Map Nerd", "Source from three regions.",
       Tier.BRONZE, at_least(M.REGIONS_SOURCED, 3)),
    _a("duty_free", "Calculator Curious", "Pay no tariffs at all in a round.",
       Tier.BRONZE, at_most(M.TARIFF_COST, 0), above(M.UNITS_SOLD, 0)),
    _a("reliable_shipper", "Reliable Shipper", "Keep the tariff multiplier under 1.05 for three rounds.",
       Tier.SILVER, at_most(M.TARIFF_MULTIPLIER, 1.05, sustained=3)),
    _a("route_scholar", "Route Scholar", "Trade through three different tariff events.",
       Tier.SILVER, at_least(M.TARIFF_EVENTS_SEEN, 3)),
    _a("cost_whisperer", "Cost Whisperer", "Land goods cheaper than every other team.",
       Tier.GOLD, best(M.TARIFF_MULTIPLIER)),
    _a("port_collector", "Port Collector", "Source from five regions.",
       Tier.GOLD, at_least(M.REGIONS_SOURCED, 5)),
    _a("clockwork_deliveries", "Clockwork Deliveries", "Sell every unit demanded while a tariff event is active.",
       Tier.GOLD, at_least(M.FILL_RATE, 1.0), at_least(M.ACTIVE_TARIFF_EVENTS, 1)),
    _a("logistics_savant", "Logistics Savant", "Keep tariffs under 2% of cost through a trade war.",
       Tier.PLATINUM, at_most(M.TARIFF_MULTIPLIER, 1.02), at_least(M.ACTIVE_TARIFF_EVENTS, 2),
       title="Logistics Savant"),
    _a("the_long_way_around", "The Long Way Around", "Pay a tariff multiplier above 1.15.",
       Tier.INFAMY, above(M.TARIFF_MULTIPLIER, 1.15)),
    _a("lost_in_transit", "Lost in Transit", "Pay $10M in tariffs in a single round.",
       Tier.INFAMY, at_least(M.TARIFF_COST, 10_000_000)),
    _a("logistics_what_logistics", "Logistics? What Logistics?", "Pay the most tariffs of all teams.",
       Tier.INFAMY, worst(M.TARIFF_COST)),
    _a("port_loyalty", "Port Loyalty", "Source from a single region by round five.",
       Tier.INFAMY, equals(M.REGIONS_SOURCED, 1), at_least(M.ROUND, 5)),
    _a("tariff_tourist", "Tariff Tourist", "Pay over $25M in tariffs across the game.",
       Tier.INFAMY, at_least(M.TARIFF_COST, 25_000_000, cumulative=True)),
]
