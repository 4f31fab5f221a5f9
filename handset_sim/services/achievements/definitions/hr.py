"""HR achievements: hiring, training, morale and pay."""

from ..types import Category, Metric as M, Tier
from .builders import above, at_least, at_most, below, best, define, equals, worst


def _a(id, name, description, tier, *requirements, **options):
    return define(Category.HR, id, name, description, tier, *requirements, **options)


HR_ACHIEVEMENTS = [
    _a("first_handshake", "First Handshake", "Hire your first new employees.",
       Tier.BRONZE, above(M.HIRES, 0)),
    _a("training_montage", "Training Montage", "Run a training program.",
       Tier.BRONZE, above(M.TRAINING_SPEND, 0)),
    _a("benefits_buffet", "Benefits Buffet", "Spend on employee benefits.",
       Tier.BRONZE, above(M.BENEFITS_SPEND, 0)),
    _a("above_average", "Above Average", "Pay 20% above the market salary.",
       Tier.BRONZE, at_least(M.SALARY_MULTIPLIER, 1.2)),
    _a("headhunter", "Headhunter", "Hire 50 people over the game.",
       Tier.SILVER, at_least(M.TOTAL_HIRES, 50)),
    _a("talent_magnet", "Talent Magnet", "Grow headcount to 100.",
       Tier.SILVER, at_least(M.HEADCOUNT, 100)),
    _a("alma_mater", "Alma Mater", "Train your workforce in five different rounds.",
       Tier.SILVER, at_least(M.TOTAL_TRAININGS, 5)),
    _a("retention_king", "Retention King", "Keep turnover at 2% or less.",
       Tier.SILVER, at_most(M.TURNOVER_RATE, 2, percentage=True)),
    _a("culture_club", "Culture Club", "Reach average morale of 80.",
       Tier.GOLD, at_least(M.MORALE, 80)),
    _a("skill_ceiling", "Skill Ceiling", "Reach workforce efficiency of 90.",
       Tier.GOLD, at_least(M.WORKFORCE_EFFICIENCY, 90)),
    _a("best_place_to_work", "Best Place to Work", "Have the happiest workforce of all teams.",
       Tier.GOLD, best(M.MORALE)),
    _a("dream_factory", "Dream Factory", "Keep morale at 85 or higher for three rounds.",
       Tier.PLATINUM, at_least(M.MORALE, 85, sustained=3), title="Employer of Choice"),
    _a("the_tyrant", "The Tyrant", "Let morale fall below 30.",
       Tier.INFAMY, below(M.MORALE, 30)),
    _a("revolving_door", "Revolving Door", "Let turnover exceed 10%.",
       Tier.INFAMY, above(M.TURNOVER_RATE, 10, percentage=True)),
    _a("sweatshop_chic", "Sweatshop Chic", "Pay 30% below market with morale under 50.",
       Tier.INFAMY, at_most(M.SALARY_MULTIPLIER, 0.7), below(M.MORALE, 50)),
    _a("training_never_heard_of_it", "Training? Never Heard of It", "Reach round eight without training anyone.",
       Tier.INFAMY, at_least(M.ROUND, 8), equals(M.TOTAL_TRAININGS, 0)),
    _a("the_scrooge", "The Scrooge", "Pay the lowest salaries of all teams.",
       Tier.INFAMY, worst(M.AVERAGE_SALARY)),
    _a("skeleton_crew", "Skeleton Crew", "Run the company with fewer than 40 employees.",
       Tier.INFAMY, below(M.HEADCOUNT, 40)),
    _a("motivational_massacre", "The Motivational Massacre", "Lay off 25 people in a single round.",
       Tier.INFAMY, at_least(M.FIRES, 25)),
    _a("hire_and_fire", "Stockholm Syndrome Inc.", "Hire and lay off people in the same round.",
       Tier.INFAMY, above(M.HIRES, 0), above(M.FIRES, 0)),
    _a("all_chiefs", "All Chiefs, No Indians", "Spend on leadership training with fewer than 50 staff.",
       Tier.INFAMY, above(M.TRAINING_SPEND, 0), below(M.HEADCOUNT, 50), below(M.WORKFORCE_EFFICIENCY, 60)),
]
