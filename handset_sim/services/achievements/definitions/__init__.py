"""Achievement catalog, one module per category."""

from collections import Counter
from typing import Dict, List, Set

from ..types import AchievementDefinition, Category, Metric, RelativeRank
from .factory import FACTORY_ACHIEVEMENTS
from .finance import FINANCE_ACHIEVEMENTS
from .hr import HR_ACHIEVEMENTS
from .logistics import LOGISTICS_ACHIEVEMENTS
from .marketing import MARKETING_ACHIEVEMENTS
from .mega import MEGA_ACHIEVEMENTS
from .news import NEWS_ACHIEVEMENTS
from .overview import OVERVIEW_ACHIEVEMENTS
from .rd import RD_ACHIEVEMENTS
from .results import RESULTS_ACHIEVEMENTS
from .secret import SECRET_ACHIEVEMENTS
from .supply_chain import SUPPLY_CHAIN_ACHIEVEMENTS

ACHIEVEMENTS_BY_CATEGORY: Dict[Category, List[AchievementDefinition]] = {
    Category.OVERVIEW: OVERVIEW_ACHIEVEMENTS,
    Category.FACTORY: FACTORY_ACHIEVEMENTS,
    Category.FINANCE: FINANCE_ACHIEVEMENTS,
    Category.HR: HR_ACHIEVEMENTS,
    Category.MARKETING: MARKETING_ACHIEVEMENTS,
    Category.RD: RD_ACHIEVEMENTS,
    Category.SUPPLY_CHAIN: SUPPLY_CHAIN_ACHIEVEMENTS,
    Category.LOGISTICS: LOGISTICS_ACHIEVEMENTS,
    Category.NEWS: NEWS_ACHIEVEMENTS,
    Category.RESULTS: RESULTS_ACHIEVEMENTS,
    Category.SECRET: SECRET_ACHIEVEMENTS,
    Category.MEGA: MEGA_ACHIEVEMENTS,
}

ALL_ACHIEVEMENTS: List[AchievementDefinition] = [
    definition for group in ACHIEVEMENTS_BY_CATEGORY.values() for definition in group
]

_duplicates = sorted(i for i, n in Counter(d.id for d in ALL_ACHIEVEMENTS).items() if n > 1)
if _duplicates:
    raise RuntimeError(f"Duplicate achievement ids: {', '.join(_duplicates)}")

for _category, _group in ACHIEVEMENTS_BY_CATEGORY.items():
    for _definition in _group:
        if _definition.category != _category:
            raise RuntimeError(f"Achievement '{_definition.id}' is filed under the wrong category")

ACHIEVEMENTS_BY_ID: Dict[str, AchievementDefinition] = {d.id: d for d in ALL_ACHIEVEMENTS}

# Metrics that some rule compares against every other team
RELATIVE_METRICS: Set[Metric] = {
    r.metric for d in ALL_ACHIEVEMENTS for r in d.requirements if isinstance(r.target, RelativeRank)
}


def get_achievement(achievement_id: str) -> AchievementDefinition:
    return ACHIEVEMENTS_BY_ID[achievement_id]
