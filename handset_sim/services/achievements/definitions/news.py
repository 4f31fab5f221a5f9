"""News achievements: reacting to the economy and world events."""

from ..types import Category, Metric as M, Tier
from .builders import above, at_least, below, define, equals, flag


def _a(id, name, description, tier, *requirements, **options):
    return define(Category.NEWS, id, name, description, tier, *requirements, **options)


NEWS_ACHIEVEMENTS = [
    _a("informed_citizen", "Informed Citizen", "Play through an active tariff event.",
       Tier.BRONZE, at_least(M.ACTIVE_TARIFF_EVENTS, 1)),
    _a("storm_chaser", "Storm Chaser", "Stay profitable during a geopolitical event.",
       Tier.SILVER, at_least(M.ACTIVE_GEOPOLITICAL_EVENTS, 1), above(M.NET_INCOME, 0)),
    _a("riding_the_wave", "Riding the Wave", "Grow revenue 15% during an expansion.",
       Tier.SILVER, equals(M.ECONOMIC_PHASE, "expansion"), at_least(M.REVENUE_GROWTH, 15, percentage=True)),
    _a("quick_pivot", "Quick Pivot", "Weather a supply disruption.",
       Tier.BRONZE, at_least(M.DISRUPTIONS_WEATHERED, 1)),
    _a("recession_proof", "Recession-Proof", "Turn a profit during a recession.",
       Tier.GOLD, flag(M.IN_RECESSION), above(M.NET_INCOME, 0)),
    _a("weathered_veteran", "Weathered Veteran", "Weather five supply disruptions.",
       Tier.GOLD, at_least(M.DISRUPTIONS_WEATHERED, 5)),
    _a("antifragile", "Antifragile", "Stay profitable for three recession rounds.",
       Tier.PLATINUM, at_least(M.RECESSION_PROFITABLE_ROUNDS, 3), title="Antifragile"),
    _a("full_cycle", "Event Alchemist", "Live through all four economic phases.",
       Tier.GOLD, at_least(M.PHASES_SEEN, 4)),
    _a("ostrich_strategy", "Ostrich Strategy", "Lose money while three disruptions are active.",
       Tier.INFAMY, at_least(M.ACTIVE_DISRUPTIONS, 3), below(M.NET_INCOME, 0)),
    _a("crisis_magnet", "Crisis Magnet", "Get hit by two new disruptions in one round.",
       Tier.INFAMY, at_least(M.NEW_DISRUPTIONS, 2)),
    _a("boom_bust", "Boom Bust", "Lose money during an expansion.",
       Tier.INFAMY, equals(M.ECONOMIC_PHASE, "expansion"), below(M.NET_INCOME, 0)),
    _a("panic_seller", "Panic Seller", "Lay off staff during a recession.",
       Tier.INFAMY, flag(M.IN_RECESSION), above(M.FIRES, 0)),
    _a("headline_blind", "Headline Blind", "Keep sourcing unchanged through three geopolitical events.",
       Tier.INFAMY, at_least(M.GEOPOLITICAL_EVENTS_SEEN, 3), equals(M.SUPPLIERS_ADDED, 0)),
]
