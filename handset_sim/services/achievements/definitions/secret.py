"""Secret achievements. Hidden until earned."""

from ..types import Category, Metric as M, Tier
from .builders import above, at_least, at_most, below, best, between, define, equals, flag


def _a(id, name, description, tier, *requirements, **options):
    return define(Category.SECRET, id, name, description, tier, *requirements, hidden=True, **options)


SECRET_ACHIEVEMENTS = [
    _a("zen_ceo", "Zen CEO", "Submit no changes at all and still turn a profit.",
       Tier.SECRET, equals(M.DEFAULTS_SUBSTITUTED, 6), above(M.NET_INCOME, 0)),
    _a("all_in", "ALL IN", "Spend until cash is within $1M of zero.",
       Tier.SECRET, between(M.CASH, 0, 1_000_000)),
    _a("robbing_peter", "Robbing Peter to Pay Paul", "Borrow and pay a dividend in the same round.",
       Tier.SECRET, above(M.LOAN_TAKEN, 0), above(M.DIVIDENDS_PAID, 0)),
    _a("greenwash_king", "Greenwash King", "Run five ESG programs with the ESG crisis penalty still active.",
       Tier.SECRET, at_least(M.ESG_PROGRAM_COUNT, 5), above(M.ESG_PENALTY, 0)),
    _a("shelf_scientist", "Shelf Scientist", "Have five products in development at once.",
       Tier.SECRET, at_least(M.PRODUCTS_IN_DEVELOPMENT, 5)),
    _a("icarus", "Icarus", "Lead revenue one round and lose money the next.",
       Tier.SECRET, at_least(M.ROUNDS_AS_REVENUE_LEADER, 1), below(M.NET_INCOME, 0), below(M.REVENUE_GROWTH, 0)),
    _a("comeback_kid", "The Comeback Kid", "Recover from negative cash to $100M.",
       Tier.SECRET, at_least(M.CASH, 100_000_000), equals(M.NEVER_BANKRUPT, False)),
    _a("party_of_one", "Party of One", "Play a game alone.",
       Tier.SECRET, equals(M.TEAM_COUNT, 1), at_least(M.ROUND, 3)),
    _a("famous_for_nothing", "Famous for Nothing", "Reach brand value 0.5 with under 10% market share.",
       Tier.SECRET, at_least(M.BRAND_VALUE, 0.5), below(M.TOTAL_MARKET_SHARE, 10, percentage=True)),
    _a("build_it_and_they_wont_come", "Build It and They Won't Come", "Use under 25% of capacity after expanding it.",
       Tier.SECRET, above(M.CAPACITY_ADDED, 0), below(M.CAPACITY_UTILIZATION, 25, percentage=True)),
    _a("all_sizzle_no_steak", "All Sizzle, No Steak", "Outspend R&D on marketing tenfold.",
       Tier.SECRET, at_least(M.MARKETING_SPEND, 10_000_000), at_most(M.RD_SPEND, 1_000_000)),
    _a("seen_it_all", "Seen It All", "See four tariff events and two geopolitical events.",
       Tier.SECRET, at_least(M.TARIFF_EVENTS_SEEN, 4), at_least(M.GEOPOLITICAL_EVENTS_SEEN, 2)),
    _a("razors_edge", "Razor's Edge", "Finish a round with net income within $100K of zero.",
       Tier.SECRET, between(M.NET_INCOME, -100_000, 100_000), above(M.REVENUE, 0)),
    _a("robots_before_people", "Robots Before People", "Invest $20M in efficiency while laying people off.",
       Tier.SECRET, at_least(M.EFFICIENCY_INVESTMENT, 20_000_000), above(M.FIRES, 0)),
    _a("the_minimalist", "The Minimalist", "Win revenue with two or fewer products.",
       Tier.SECRET, best(M.REVENUE), at_most(M.LAUNCHED_PRODUCTS, 2), at_least(M.TEAM_COUNT, 2)),
    _a("office_space", "Office Space", "Pay double the market salary.",
       Tier.SECRET, at_least(M.SALARY_MULTIPLIER, 2.0)),
    _a("gut_feeling", "Gut Feeling", "Change every product price in one round.",
       Tier.SECRET, at_least(M.PRICE_CHANGES, 5)),
    _a("living_on_the_edge", "Living on the Edge", "Carry three critical vulnerabilities and profit anyway.",
       Tier.SECRET, at_least(M.CRITICAL_VULNERABILITIES, 3), above(M.NET_INCOME, 0)),
    _a("currency_casualty", "Currency Casualty", "Lose money to tariffs during a geopolitical event.",
       Tier.SECRET, at_least(M.ACTIVE_GEOPOLITICAL_EVENTS, 1), above(M.TARIFF_COST, 0), below(M.NET_INCOME, 0)),
    _a("perfectly_terrible", "Perfectly Terrible", "Earn five infamy achievements.",
       Tier.SECRET, at_least(M.INFAMY_EARNED, 5)),
    _a("underdog_engine", "Underdog Engine", "Receive the trailing-team boost three times.",
       Tier.SECRET, at_least(M.RUBBER_BAND_BOOSTS, 3), flag(M.NEVER_BANKRUPT)),
]
