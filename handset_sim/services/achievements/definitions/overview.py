"""Overview achievements: company-wide standing and ESG."""

from ..types import Category, Metric as M, Tier
from .builders import at_least, at_most, below, best, define, worst


def _a(id, name, description, tier, *requirements, **options):
    return define(Category.OVERVIEW, id, name, description, tier, *requirements, **options)


OVERVIEW_ACHIEVEMENTS = [
    _a("first_quarter", "Baby's First Quarter", "Complete your first round.",
       Tier.BRONZE, at_least(M.ROUNDS_COMPLETED, 1)),
    _a("in_the_black", "In the Black", "Post a positive net income.",
       Tier.BRONZE, at_least(M.NET_INCOME, 0.01)),
    _a("balanced_diet", "Balanced Diet", "Sell in all five segments in one round.",
       Tier.BRONZE, at_least(M.SEGMENTS_PRESENT, 5)),
    _a("sophomore_surge", "Sophomore Surge", "Grow revenue by 10% or more in a single round.",
       Tier.SILVER, at_least(M.REVENUE_GROWTH, 10, percentage=True)),
    _a("the_podium", "The Podium", "Finish in the top three for revenue.",
       Tier.SILVER, at_most(M.REVENUE_RANK, 3), at_least(M.TEAM_COUNT, 4)),
    _a("market_monarch", "Market Monarch", "Hold the highest average market share.",
       Tier.GOLD, best(M.TOTAL_MARKET_SHARE)),
    _a("steady_hand", "Steady Hand", "Stay profitable for four rounds in a row.",
       Tier.SILVER, at_least(M.CONSECUTIVE_PROFIT, 4)),
    _a("triple_crown", "Triple Crown", "Lead revenue, EPS and market share in the same round.",
       Tier.PLATINUM, best(M.REVENUE), best(M.EPS), best(M.TOTAL_MARKET_SHARE), title="Triple Crown"),
    _a("dynasty", "Dynasty", "Lead revenue for five rounds.",
       Tier.PLATINUM, at_least(M.ROUNDS_AS_REVENUE_LEADER, 5), title="Dynasty Founder"),
    _a("centurion", "Centurion", "Reach $100M net income in a single round.",
       Tier.GOLD, at_least(M.NET_INCOME, 100_000_000)),
    _a("esg_beginner", "ESG Beginner", "Reach an ESG score of 300.",
       Tier.BRONZE, at_least(M.ESG_SCORE, 300)),
    _a("esg_champion", "ESG Champion", "Keep an ESG score of 800 or more for three rounds.",
       Tier.GOLD, at_least(M.ESG_SCORE, 800, sustained=3), title="ESG Champion"),
    _a("triple_bottom_line", "Triple Bottom Line", "Be profitable with ESG above 600 and morale above 70.",
       Tier.GOLD, at_least(M.NET_INCOME, 0.01), at_least(M.ESG_SCORE, 600), at_least(M.MORALE, 70)),
    _a("full_esg_commitment", "Full ESG Commitment", "Run eight ESG programs at once.",
       Tier.SILVER, at_least(M.ESG_PROGRAM_COUNT, 8)),
    _a("sinking_ship", "Sinking Ship", "Lose money three rounds in a row.",
       Tier.INFAMY, at_least(M.CONSECUTIVE_LOSS, 3)),
    _a("red_wedding", "Red Wedding", "Lose more than $50M in a single round.",
       Tier.INFAMY, below(M.NET_INCOME, -50_000_000)),
    _a("freefall_specialist", "Freefall Specialist", "Lose revenue four rounds in a row.",
       Tier.INFAMY, at_least(M.CONSECUTIVE_DECLINE, 4)),
    _a("esg_pretender", "ESG Pretender", "Let your ESG score fall below 100.",
       Tier.INFAMY, below(M.ESG_SCORE, 100)),
    _a("speed_run_to_the_bottom", "Speed Run to the Bottom", "Finish last in revenue by round two.",
       Tier.INFAMY, worst(M.REVENUE), at_most(M.ROUND, 2)),
]
