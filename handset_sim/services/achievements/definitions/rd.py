"""R&D achievements: patents, product development and quality."""

from ..types import Category, Metric as M, Tier
from .builders import above, at_least, at_most, below, best, define, equals, worst


def _a(id, name, description, tier, *requirements, **options):
    return define(Category.RD, id, name, description, tier, *requirements, **options)


RD_ACHIEVEMENTS = [
    _a("eureka", "Eureka!", "Fund R&D for the first time.",
       Tier.BRONZE, above(M.RD_SPEND, 0)),
    _a("patent_pending", "Patent Pending", "Earn your first patent.",
       Tier.BRONZE, at_least(M.PATENTS, 1)),
    _a("new_blueprint", "New Blueprint", "Start developing a new product.",
       Tier.BRONZE, at_least(M.PRODUCTS_STARTED, 1)),
    _a("speed_to_market", "Speed to Market", "Launch a product you developed.",
       Tier.SILVER, at_least(M.TOTAL_PRODUCTS_LAUNCHED, 1)),
    _a("polish_pass", "Pixel Perfect", "Improve three products in one round.",
       Tier.SILVER, at_least(M.IMPROVEMENTS_MADE, 3)),
    _a("battery_breakthrough", "Battery Breakthrough", "Push any feature to 95.",
       Tier.SILVER, at_least(M.MAX_FEATURE, 95)),
    _a("product_empire", "Product Empire", "Have eight launched products on the market.",
       Tier.GOLD, at_least(M.LAUNCHED_PRODUCTS, 8)),
    _a("patent_fortress", "Patent Fortress", "Hold ten patents.",
       Tier.GOLD, at_least(M.PATENTS, 10)),
    _a("masterpiece", "Masterpiece", "Launch a product with quality 98 or more.",
       Tier.GOLD, at_least(M.MAX_QUALITY, 98)),
    _a("segment_specialist", "Segment Specialist", "Keep average product quality at 80.",
       Tier.SILVER, at_least(M.AVERAGE_QUALITY, 80)),
    _a("the_full_package", "The Full Package", "Keep every product at quality 75 or higher.",
       Tier.GOLD, at_least(M.MIN_QUALITY, 75)),
    _a("innovation_engine", "Innovation Engine", "Spend $200M on R&D over the game.",
       Tier.GOLD, at_least(M.CUMULATIVE_RD, 200_000_000)),
    _a("tech_singularity", "Tech Singularity", "Hold the most patents of all teams.",
       Tier.PLATINUM, best(M.PATENTS), at_least(M.PATENTS, 5), title="Visionary"),
    _a("pipeline_pro", "Sentient Products", "Have three products in development at once.",
       Tier.SILVER, at_least(M.PRODUCTS_IN_DEVELOPMENT, 3)),
    _a("intellectual_desert", "Intellectual Desert", "Go five rounds without R&D spending.",
       Tier.INFAMY, at_least(M.ROUNDS_WITHOUT_RD, 5)),
    _a("copycat_inc", "Copycat Inc.", "Have the fewest patents of all teams after round six.",
       Tier.INFAMY, worst(M.PATENTS), at_least(M.ROUND, 6)),
    _a("stone_age_tech", "Stone Age Tech", "Let average product quality fall below 50.",
       Tier.INFAMY, below(M.AVERAGE_QUALITY, 50)),
    _a("one_hit_blunder", "One-Hit Blunder", "Discontinue a product launched this game.",
       Tier.INFAMY, at_least(M.TOTAL_PRODUCTS_DISCONTINUED, 1), at_least(M.TOTAL_PRODUCTS_LAUNCHED, 1)),
    _a("rd_budget_went_where", "The R&D Budget Went Where?", "Spend $50M on R&D without a single patent.",
       Tier.INFAMY, at_least(M.CUMULATIVE_RD, 50_000_000), equals(M.PATENTS, 0)),
    _a("vaporware", "Vaporware", "Start three products without launching any.",
       Tier.INFAMY, at_least(M.TOTAL_PRODUCTS_STARTED, 3), equals(M.TOTAL_PRODUCTS_LAUNCHED, 0)),
    _a("abandoned_lab", "Abandoned Lab", "Have no launched products at all.",
       Tier.INFAMY, at_most(M.LAUNCHED_PRODUCTS, 0)),
]
