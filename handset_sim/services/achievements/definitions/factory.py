"""Factory achievements: capacity, efficiency, defects and green investment."""

from ..types import Category, Metric as M, Tier
from .builders import above, at_least, at_most, below, best, define, equals, worst


def _a(id, name, description, tier, *requirements, **options):
    return define(Category.FACTORY, id, name, description, tier, *requirements, **options)


FACTORY_ACHIEVEMENTS = [
    _a("assembly_required", "Assembly Required", "Invest in factory efficiency for the first time.",
       Tier.BRONZE, above(M.EFFICIENCY_INVESTMENT, 0)),
    _a("grease_monkey", "Grease Monkey", "Invest $10M in efficiency in a single round.",
       Tier.BRONZE, at_least(M.EFFICIENCY_INVESTMENT, 10_000_000)),
    _a("efficiency_climb", "Efficiency Climb", "Raise average factory efficiency to 80%.",
       Tier.SILVER, at_least(M.FACTORY_EFFICIENCY, 80, percentage=True)),
    _a("peak_performance", "Peak Performance", "Reach 90% factory efficiency.",
       Tier.GOLD, at_least(M.FACTORY_EFFICIENCY, 90, percentage=True)),
    _a("six_sigma_sensei", "Six Sigma Sensei", "Bring the defect rate down to 3%.",
       Tier.SILVER, at_most(M.DEFECT_RATE, 3, percentage=True)),
    _a("clean_room_champion", "Clean Room Champion", "Hold the defect rate at 2% or less for three rounds.",
       Tier.GOLD, at_most(M.DEFECT_RATE, 2, percentage=True, sustained=3)),
    _a("captain_planet", "Captain Planet", "Spend $5M on green investment in one round.",
       Tier.SILVER, at_least(M.GREEN_INVESTMENT, 5_000_000)),
    _a("carbon_cutter", "Carbon Cutter", "Spend $25M on green investment over the game.",
       Tier.GOLD, at_least(M.GREEN_INVESTMENT, 25_000_000, cumulative=True)),
    _a("full_metal_factory", "Full Metal Factory", "Grow nameplate capacity to 400,000 units.",
       Tier.SILVER, at_least(M.FACTORY_CAPACITY, 400_000)),
    _a("machine_mogul", "Machine Mogul", "Add 100,000 units of capacity in one round.",
       Tier.GOLD, at_least(M.CAPACITY_ADDED, 100_000)),
    _a("redline", "Redline", "Run at 95% capacity utilization or more.",
       Tier.SILVER, at_least(M.CAPACITY_UTILIZATION, 95, percentage=True)),
    _a("factory_floor_master", "Factory Floor Master", "Have the most efficient factories of all teams.",
       Tier.GOLD, best(M.FACTORY_EFFICIENCY)),
    _a("esg_darling", "ESG Darling", "Raise your ESG score by 200 in a single round.",
       Tier.GOLD, at_least(M.ESG_GAIN, 200)),
    _a("lean_and_mean", "Lean and Mean", "Keep defects at 4% or less while utilization stays above 90%.",
       Tier.PLATINUM, at_most(M.DEFECT_RATE, 4, percentage=True),
       at_least(M.CAPACITY_UTILIZATION, 90, percentage=True), title="Lean Operator"),
    _a("rust_bucket", "Rust Bucket", "Let factory efficiency drop below 50%.",
       Tier.INFAMY, below(M.FACTORY_EFFICIENCY, 50, percentage=True)),
    _a("maintenance_what_maintenance", "Maintenance? What Maintenance?",
       "Skip efficiency investment for four rounds running.",
       Tier.INFAMY, equals(M.EFFICIENCY_INVESTMENT, 0, sustained=4)),
    _a("captain_pollution", "Captain Pollution", "Have the lowest ESG score of all teams.",
       Tier.INFAMY, worst(M.ESG_SCORE)),
    _a("assembly_catastrophe", "Assembly Catastrophe", "Let the defect rate climb above 10%.",
       Tier.INFAMY, above(M.DEFECT_RATE, 10, percentage=True)),
    _a("overproduction_overlord", "Overproduction Overlord", "Use less than 40% of your capacity.",
       Tier.INFAMY, below(M.CAPACITY_UTILIZATION, 40, percentage=True), at_least(M.ROUND, 2)),
    _a("green_in_name_only", "Green in Name Only", "Run three ESG programs while ESG stays below 300.",
       Tier.INFAMY, at_least(M.ESG_PROGRAM_COUNT, 3), below(M.ESG_SCORE, 300)),
    _a("the_luddite", "The Luddite", "Never invest in efficiency through round six.",
       Tier.INFAMY, at_least(M.ROUND, 6), equals(M.EFFICIENCY_INVESTMENT, 0, cumulative=True)),
]
