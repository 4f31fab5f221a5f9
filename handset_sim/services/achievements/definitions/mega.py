"""Mega achievements: combinations across departments."""

from ..types import Category, Metric as M, Tier
from .builders import above, at_least, at_most, below, best, define, equals, flag


def _a(id, name, description, tier, *requirements, **options):
    return define(Category.MEGA, id, name, description, tier, *requirements, **options)


MEGA_ACHIEVEMENTS = [
    _a("vertical_integration", "Vertical Integration", "Five suppliers, 90% factory efficiency and a profit.",
       Tier.PLATINUM, at_least(M.SUPPLIER_COUNT, 5), at_least(M.FACTORY_EFFICIENCY, 90, percentage=True),
       above(M.NET_INCOME, 0)),
    _a("people_and_profit", "People & Profit", "Morale above 80 with a 10% net margin.",
       Tier.GOLD, at_least(M.MORALE, 80), at_least(M.PROFIT_MARGIN, 10, percentage=True)),
    _a("innovators_dream", "The Innovator's Dream", "Five patents, a product at quality 95 and a profit.",
       Tier.PLATINUM, at_least(M.PATENTS, 5), at_least(M.MAX_QUALITY, 95), above(M.NET_INCOME, 0)),
    _a("the_conglomerate", "The Conglomerate", "Sell in every segment with $2B cumulative revenue.",
       Tier.PLATINUM, at_least(M.SEGMENTS_PRESENT, 5), at_least(M.CUMULATIVE_REVENUE, 2_000_000_000),
       title="Conglomerate"),
    _a("sustainable_titan", "Sustainable Titan", "ESG 900 while leading revenue.",
       Tier.PLATINUM, at_least(M.ESG_SCORE, 900), best(M.REVENUE)),
    _a("efficiency_paradox", "Efficiency Paradox", "90% factory efficiency with under 50% utilization.",
       Tier.GOLD, at_least(M.FACTORY_EFFICIENCY, 90, percentage=True),
       below(M.CAPACITY_UTILIZATION, 50, percentage=True)),
    _a("flawless_victory", "Flawless Victory", "Earn 25 achievements without a single infamy.",
       Tier.PLATINUM, at_least(M.ACHIEVEMENTS_EARNED, 25), equals(M.INFAMY_EARNED, 0), title="Flawless"),
    _a("the_polymath", "The Polymath", "Earn achievements in eight categories.",
       Tier.GOLD, at_least(M.CATEGORIES_TOUCHED, 8)),
    _a("trophy_room", "Trophy Room", "Earn three platinum achievements.",
       Tier.PLATINUM, at_least(M.PLATINUM_EARNED, 3)),
    _a("hard_mode_hero", "Hard Mode Hero", "Stay profitable for five rounds on hard or above.",
       Tier.PLATINUM, at_least(M.DIFFICULTY, "hard"), at_least(M.CONSECUTIVE_PROFIT, 5),
       difficulty_multiplier=1.5),
    _a("corporate_villain", "Corporate Villain", "ESG under 100, morale under 40 and a profit.",
       Tier.INFAMY, below(M.ESG_SCORE, 100), below(M.MORALE, 40), above(M.NET_INCOME, 0)),
    _a("total_collapse", "Total Collapse", "Negative cash, debt over $200M and losing money.",
       Tier.INFAMY, below(M.CASH, 0), above(M.DEBT, 200_000_000), below(M.NET_INCOME, 0)),
    _a("the_enron", "The Enron", "Buy back shares while losing money and carrying debt.",
       Tier.INFAMY, above(M.SHARES_BOUGHT_BACK, 0), below(M.NET_INCOME, 0), above(M.DEBT, 0)),
    _a("beautiful_disaster", "Beautiful Disaster", "Brand above 0.6 while losing money.",
       Tier.INFAMY, above(M.BRAND_VALUE, 0.6), below(M.NET_INCOME, 0), flag(M.NEVER_BANKRUPT, invert=True)),
    _a("trophy_collector_of_shame", "Trophy Collector of Shame", "Earn ten infamy achievements.",
       Tier.INFAMY, at_least(M.INFAMY_EARNED, 10), at_most(M.ACHIEVEMENT_POINTS, 0)),
]
