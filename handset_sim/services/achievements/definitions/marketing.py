"""Marketing achievements: brand, advertising and segment share."""

from ..types import Category, Metric as M, Tier
from .builders import above, at_least, below, best, define, equals, worst


def _a(id, name, description, tier, *requirements, **options):
    return define(Category.MARKETING, id, name, description, tier, *requirements, **options)


MARKETING_ACHIEVEMENTS = [
    _a("first_impression", "First Impression", "Spend on advertising.",
       Tier.BRONZE, above(M.ADVERTISING_SPEND, 0)),
    _a("digital_native", "Digital Native", "Invest in branding.",
       Tier.BRONZE, above(M.BRANDING_SPEND, 0)),
    _a("full_spectrum", "Full Spectrum", "Advertise in all five segments in one round.",
       Tier.SILVER, at_least(M.ADVERTISED_SEGMENTS, 5)),
    _a("segment_sniper", "Segment Sniper", "Take 40% of the Budget segment.",
       Tier.SILVER, at_least(M.SEGMENT_SHARE, 40, segment="Budget", percentage=True)),
    _a("professional_grade", "Professional Grade", "Take 40% of the Professional segment.",
       Tier.SILVER, at_least(M.SEGMENT_SHARE, 40, segment="Professional", percentage=True)),
    _a("brand_builder", "Brand Builder", "Raise brand value to 0.4.",
       Tier.SILVER, at_least(M.BRAND_VALUE, 0.4)),
    _a("brand_titan", "Brand Titan", "Raise brand value to 0.6.",
       Tier.GOLD, at_least(M.BRAND_VALUE, 0.6)),
    _a("iconic", "Iconic", "Raise brand value to 0.8.",
       Tier.PLATINUM, at_least(M.BRAND_VALUE, 0.8), title="Icon"),
    _a("loyalty_empire", "Loyalty Empire", "Have the strongest brand of all teams.",
       Tier.GOLD, best(M.BRAND_VALUE)),
    _a("viral_moment", "Viral Moment", "Grow brand value by 1.5 points in a round.",
       Tier.SILVER, at_least(M.BRAND_GROWTH, 1.5, percentage=True)),
    _a("segment_sweep", "Segment Sweep", "Lead two segments with 50% share or more.",
       Tier.GOLD, at_least(M.SEGMENTS_LED, 2)),
    _a("total_market_domination", "Total Market Domination", "Lead every segment with 50% share or more.",
       Tier.PLATINUM, at_least(M.SEGMENTS_LED, 5), title="Market Dominator"),
    _a("big_spender", "Big Spender", "Spend $100M on marketing over the game.",
       Tier.GOLD, at_least(M.CUMULATIVE_MARKETING, 100_000_000)),
    _a("who_are_you_again", "Who Are You Again?", "Let brand value fall below 0.1.",
       Tier.INFAMY, below(M.BRAND_VALUE, 0.1)),
    _a("money_bonfire", "Money Bonfire", "Spend $30M on marketing in a round and still lose share.",
       Tier.INFAMY, at_least(M.MARKETING_SPEND, 30_000_000), below(M.MARKET_SHARE_DELTA, 0)),
    _a("one_trick_pony", "One-Trick Pony", "Sell in only one segment.",
       Tier.INFAMY, equals(M.SEGMENTS_PRESENT, 1)),
    _a("discount_desperado", "Discount Desperado", "Change prices in three rounds running.",
       Tier.INFAMY, above(M.PRICE_CHANGES, 0, sustained=3)),
    _a("the_invisible_man", "The Invisible Man", "Go four rounds without any marketing.",
       Tier.INFAMY, at_least(M.ROUNDS_WITHOUT_MARKETING, 4)),
    _a("loyalty_to_nobody", "Loyalty to Nobody", "Have the weakest brand of all teams.",
       Tier.INFAMY, worst(M.BRAND_VALUE)),
    _a("brand_erosion", "Brand Erosion", "Lose brand value three rounds in a row.",
       Tier.INFAMY, below(M.BRAND_GROWTH, 0, sustained=3)),
]
