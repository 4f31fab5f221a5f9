"""Results achievements: round-over-round performance and rank."""

from ..types import Category, Metric as M, Tier
from .builders import above, at_least, at_most, below, best, between, define, flag, worst


def _a(id, name, description, tier, *requirements, **options):
    return define(Category.RESULTS, id, name, description, tier, *requirements, **options)


RESULTS_ACHIEVEMENTS = [
    _a("report_card", "Report Card", "See your first round of results.",
       Tier.BRONZE, at_least(M.ROUNDS_COMPLETED, 1)),
    _a("growth_streak", "Growth Streak", "Grow revenue three rounds in a row.",
       Tier.SILVER, at_least(M.CONSECUTIVE_GROWTH, 3)),
    _a("profit_machine", "Profit Machine", "Reach a 15% net profit margin.",
       Tier.SILVER, at_least(M.PROFIT_MARGIN, 15, percentage=True)),
    _a("mover_and_shaker", "Mover and Shaker", "Gain five points of average market share in a round.",
       Tier.SILVER, at_least(M.MARKET_SHARE_DELTA, 5, percentage=True)),
    _a("thirty_percent_club", "30% Club", "Hold 30% average market share.",
       Tier.GOLD, at_least(M.TOTAL_MARKET_SHARE, 30, percentage=True)),
    _a("beat_the_street", "Beat the Street", "Lead EPS for four rounds running.",
       Tier.GOLD, best(M.EPS, sustained=4)),
    _a("comeback_trail", "Comeback Trail", "Lead revenue after finishing last in an earlier round.",
       Tier.GOLD, flag(M.WAS_LAST_PLACE), best(M.REVENUE)),
    _a("perfect_quarter", "Perfect Quarter", "Sell out, profit and grow share in one round.",
       Tier.PLATINUM, at_least(M.FILL_RATE, 1.0), above(M.NET_INCOME, 0), above(M.MARKET_SHARE_DELTA, 0)),
    _a("hall_of_fame", "Hall of Fame", "Be profitable in ten rounds.",
       Tier.PLATINUM, at_least(M.PROFITABLE_ROUNDS, 10), title="Hall of Famer"),
    _a("undefeated", "Undefeated", "Lead revenue in every round through round six.",
       Tier.PLATINUM, at_least(M.ROUND, 6), best(M.REVENUE, sustained=6)),
    _a("participation_trophy", "Participation Trophy", "Finish last in revenue.",
       Tier.INFAMY, worst(M.REVENUE)),
    _a("death_spiral", "Death Spiral", "Lose share three rounds in a row.",
       Tier.INFAMY, below(M.MARKET_SHARE_DELTA, 0, sustained=3)),
    _a("comparison_thief_of_joy", "Comparison is the Thief of Joy", "Finish last in EPS and market share.",
       Tier.INFAMY, worst(M.EPS), worst(M.TOTAL_MARKET_SHARE)),
    _a("consistently_terrible", "Consistently Terrible", "Lose money five rounds in a row.",
       Tier.INFAMY, at_least(M.CONSECUTIVE_LOSS, 5)),
    _a("the_flatline", "The Flatline", "Keep revenue growth within one percent for three rounds.",
       Tier.INFAMY, between(M.REVENUE_GROWTH, -1, 1, percentage=True, sustained=3), at_least(M.ROUND, 4)),
    _a("margin_call", "Margin Call", "Post a net margin of -20% or worse.",
       Tier.INFAMY, at_most(M.PROFIT_MARGIN, -20, percentage=True), above(M.REVENUE, 0)),
]
