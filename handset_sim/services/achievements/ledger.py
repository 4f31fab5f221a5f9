"""Achievement Ledger.

Evaluates every definition in the catalog against a team's settled round and
appends newly earned achievements. Each rule reads only its own progress
record, so evaluation order never changes the outcome.

Re-evaluating a round that was already evaluated is idempotent: streaks and
running sums rebuild from the snapshot taken before that round, and earned
achievements are never awarded twice.
"""

import copy
import logging
import math
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..game_profile import DIFFICULTY_ORDER, GameProfile
from .definitions import ALL_ACHIEVEMENTS, RELATIVE_METRICS
from .metrics import LOWER_IS_BETTER, AchievementContext, last_place, resolve_metric, sole_leader
from .tracker import AchievementTracker, RoundObservation
from .types import (
    AchievementDefinition,
    AchievementState,
    EarnedAchievement,
    LedgerRoundResult,
    Metric,
    Operator,
    ProgressRecord,
    RelativeRank,
    Requirement,
    Tier,
)

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def competition_ranks(values: Dict[str, float], lower_is_better: bool = False) -> Dict[str, int]:
    """1 + number of teams strictly better. Tied teams share a rank."""
    ranks = {}
    for team_id, value in values.items():
        if lower_is_better:
            better = sum(1 for other in values.values() if other < value)
        else:
            better = sum(1 for other in values.values() if other > value)
        ranks[team_id] = better + 1
    return ranks


class AchievementLedger:

    @classmethod
    def award_points(cls, definition: AchievementDefinition, profile: GameProfile) -> int:
        raw = definition.tier.points * profile.point_multiplier(definition.tier.value)
        return round_half_up(raw * definition.difficulty_multiplier)

    @classmethod
    def compare(cls, metric: Metric, operator: Operator, value: Any, target: Any) -> bool:
        if operator == Operator.ANY:
            return bool(value)
        if value is None:
            return False
        if operator == Operator.BETWEEN:
            low, high = target
            return low <= value <= high
        if metric == Metric.DIFFICULTY and isinstance(target, str):
            value = DIFFICULTY_ORDER.index(value) if value in DIFFICULTY_ORDER else -1
            target = DIFFICULTY_ORDER.index(target)
        if operator == Operator.EQ:
            return value == target
        if operator == Operator.NE:
            return value != target
        if operator == Operator.GE:
            return value >= target
        if operator == Operator.GT:
            return value > target
        if operator == Operator.LE:
            return value <= target
        if operator == Operator.LT:
            return value < target
        raise ValueError(f"Unsupported operator {operator}")

    @classmethod
    def check_relative(cls, requirement: Requirement, ctx: AchievementContext) -> bool:
        if ctx.team_count < 2:
            return False
        if requirement.target == RelativeRank.BEST:
            return ctx.is_best(requirement.metric)
        return ctx.is_worst(requirement.metric)

    @classmethod
    def evaluate_requirement(
        cls,
        requirement: Requirement,
        index: int,
        ctx: AchievementContext,
        record: ProgressRecord,
    ) -> Tuple[bool, float, float]:
        """Evaluate one requirement and update its streak and running sum.

        Returns:
            (met, current value, target value) for progress reporting
        """
        if isinstance(requirement.target, RelativeRank):
            condition = cls.check_relative(requirement, ctx)
            current, target = (1.0 if condition else 0.0), 1.0
        else:
            value = resolve_metric(requirement.metric, ctx, requirement.segment)
            if requirement.cumulative:
                value = record.prior_sums[index] + (value or 0.0)
                record.sums[index] = value
            if requirement.percentage and isinstance(value, (int, float)) and not isinstance(value, bool):
                value = value * 100
            condition = cls.compare(requirement.metric, requirement.operator, value, requirement.target)
            current = float(value) if isinstance(value, (int, float)) else (1.0 if condition else 0.0)
            target = float(requirement.target) if isinstance(requirement.target, (int, float)) else 1.0

        if requirement.invert:
            condition = not condition

        if requirement.sustained:
            streak = record.prior_streaks[index] + 1 if condition else 0
            record.streaks[index] = streak
            return streak >= requirement.sustained, float(streak), float(requirement.sustained)
        return condition, current, target

    @classmethod
    def _prepare_record(cls, record: ProgressRecord, definition: AchievementDefinition, round_number: int) -> None:
        size = len(definition.requirements)
        for name in ("streaks", "sums", "prior_streaks", "prior_sums"):
            values = getattr(record, name)
            if len(values) < size:
                values.extend([0] * (size - len(values)))
        if record.last_evaluated_round != round_number:
            record.prior_streaks = list(record.streaks)
            record.prior_sums = list(record.sums)
        else:
            record.streaks = list(record.prior_streaks)
            record.sums = list(record.prior_sums)
        record.last_evaluated_round = round_number

    @classmethod
    def evaluate(
        cls,
        state: AchievementState,
        ctx: AchievementContext,
        profile: GameProfile,
        definitions: Optional[Iterable[AchievementDefinition]] = None,
    ) -> LedgerRoundResult:
        """Evaluate every definition for one team (state is updated in place).

        Args:
            state: The team's ledger
            ctx: Metrics and cross-team ranks for this round
            profile: Supplies the per-tier, per-difficulty point multipliers
            definitions: Rules to evaluate; defaults to the full catalog

        Returns:
            LedgerRoundResult with only what was earned in this call
        """
        result = LedgerRoundResult(team_id=state.team_id, round_number=ctx.round_number)
        for definition in (definitions if definitions is not None else ALL_ACHIEVEMENTS):
            if state.has_earned(definition.id):
                if not definition.repeatable or state.earned_in_round(definition.id, ctx.round_number):
                    continue

            record = state.progress.setdefault(definition.id, ProgressRecord())
            cls._prepare_record(record, definition, ctx.round_number)

            met_all = True
            ratios = []
            first: Optional[Tuple[float, float]] = None
            for index, requirement in enumerate(definition.requirements):
                met, current, target = cls.evaluate_requirement(requirement, index, ctx, record)
                met_all = met_all and met
                if first is None:
                    first = (current, target)
                if met:
                    ratios.append(1.0)
                elif target > 0 and not requirement.invert:
                    ratios.append(max(0.0, min(1.0, current / target)))
                else:
                    ratios.append(0.0)

            if first is not None:
                record.current, record.target = first
            record.percent = 100.0 if met_all else round(100 * sum(ratios) / len(ratios), 1) if ratios else 0.0

            if met_all:
                earned = cls._award(state, definition, ctx, profile)
                result.newly_earned.append(earned)
                result.points += earned.points
                result.messages.append(cls.message_for(definition, earned.points))

        if result.newly_earned:
            logger.info(
                f"Team {state.team_id} round {ctx.round_number}: "
                f"{len(result.newly_earned)} achievement(s), {result.points:+d} points"
            )
        return result

    @classmethod
    def _award(cls, state: AchievementState, definition: AchievementDefinition,
               ctx: AchievementContext, profile: GameProfile) -> EarnedAchievement:
        points = cls.award_points(definition, profile)
        earned = EarnedAchievement(
            achievement_id=definition.id,
            round_number=ctx.round_number,
            points=points,
            tier=definition.tier,
            category=definition.category,
            difficulty=ctx.difficulty,
            hidden=definition.hidden,
        )
        state.earned.append(earned)
        state.total_points += points
        if points >= 0:
            state.positive_points += points
        else:
            state.negative_points += points
        tier = definition.tier.value
        state.tier_counts[tier] = state.tier_counts.get(tier, 0) + 1
        category = definition.category.value
        state.category_progress[category] = state.category_progress.get(category, 0) + 1
        if definition.title and definition.title not in state.titles:
            state.titles.append(definition.title)
        if not definition.repeatable:
            state.progress.pop(definition.id, None)
        return earned

    @staticmethod
    def message_for(definition: AchievementDefinition, points: int) -> str:
        if definition.tier == Tier.INFAMY:
            return f"Infamy earned: {definition.name} ({points} points)"
        if definition.tier == Tier.SECRET or definition.hidden:
            return f"Secret achievement discovered: {definition.name} (+{points} points)"
        return f"Achievement unlocked: {definition.name} (+{points} points)"

    @classmethod
    def prior_tallies(cls, state: AchievementState, round_number: int) -> Dict[str, int]:
        before = [e for e in state.earned if e.round_number < round_number]
        return {
            "achievements_earned": len(before),
            "achievement_points": sum(e.points for e in before),
            "infamy_earned": sum(1 for e in before if e.tier == Tier.INFAMY),
            "categories_touched": len({e.category for e in before}),
            "platinum_earned": sum(1 for e in before if e.tier == Tier.PLATINUM),
        }

    @classmethod
    def rank_tables(cls, contexts: Dict[str, AchievementContext], metrics: Iterable[Metric]) -> Dict[Metric, Dict[str, int]]:
        tables = {}
        for metric in metrics:
            values = {team_id: resolve_metric(metric, ctx) for team_id, ctx in contexts.items()}
            if any(not isinstance(v, (int, float)) or isinstance(v, bool) for v in values.values()):
                continue
            tables[metric] = competition_ranks(values, lower_is_better=metric in LOWER_IS_BETTER)
        return tables

    @classmethod
    def evaluate_round(
        cls,
        achievements: Dict[str, AchievementState],
        previous_teams: Dict[str, Any],
        settlement: Any,
        profile: GameProfile,
    ) -> Tuple[Dict[str, AchievementState], Dict[str, LedgerRoundResult]]:
        """Update every team's ledger from a settled round.

        Inputs are not modified; new states are returned alongside per-team deltas.
        """
        round_number = settlement.round_number
        world = settlement.world
        tariff_ids = sorted(e.id for e in world.tariffs.active_events)
        geo_ids = sorted(e.id for e in world.tariffs.geopolitical_events)
        team_ids = sorted(settlement.teams)

        states: Dict[str, AchievementState] = {}
        contexts: Dict[str, AchievementContext] = {}
        for team_id in team_ids:
            state = copy.deepcopy(achievements.get(team_id)) or AchievementState(team_id=team_id)
            team = settlement.teams[team_id]
            previous = previous_teams.get(team_id, team)
            result = settlement.results[team_id]
            facts = result.facts

            states[team_id] = state
            contexts[team_id] = AchievementContext(
                team=team,
                previous=previous,
                round_number=round_number,
                difficulty=profile.difficulty.value,
                team_count=len(team_ids),
                facts=facts,
                tracker=state.tracker,
                phase=world.economy.phase.value,
                in_recession=world.economy.in_recession,
                active_tariff_events=len(tariff_ids),
                active_geopolitical_events=len(geo_ids),
                market_share_delta=result.market_share_delta,
                **cls.prior_tallies(state, round_number),
            )

        ranked = set(RELATIVE_METRICS) | {Metric.REVENUE, Metric.EPS, Metric.TOTAL_MARKET_SHARE}
        tables = cls.rank_tables(contexts, sorted(ranked, key=lambda m: m.value))
        revenue_ranks = tables.get(Metric.REVENUE, {})
        share_ranks = tables.get(Metric.TOTAL_MARKET_SHARE, {})
        for team_id in team_ids:
            team = settlement.teams[team_id]
            previous = contexts[team_id].previous
            facts = settlement.results[team_id].facts
            AchievementTracker.update(states[team_id].tracker, RoundObservation(
                round_number=round_number,
                revenue=team.revenue,
                previous_revenue=previous.revenue,
                net_income=team.net_income,
                cash=team.cash,
                is_bankrupt=team.is_bankrupt,
                phase=world.economy.phase.value,
                in_recession=world.economy.in_recession,
                balance_status=facts.balance_status,
                revenue_leader=len(team_ids) > 1 and sole_leader(revenue_ranks, team_id),
                share_leader=len(team_ids) > 1 and sole_leader(share_ranks, team_id),
                revenue_last=last_place(revenue_ranks, team_id),
                products_launched=facts.products_launched,
                products_started=facts.products_started,
                products_discontinued=facts.products_discontinued,
                disruptions_resolved=team.supply_chain.events_weathered - previous.supply_chain.events_weathered,
                substituted_departments=len(facts.substituted_departments),
                marketing_spend=facts.marketing_spend,
                rd_spend=facts.rd_spend,
                dividends_paid=facts.dividends_paid,
                loan_taken=facts.loan_taken,
                shares_issued=facts.shares_issued,
                shares_bought_back=facts.shares_bought_back,
                hires=facts.hires,
                fires=facts.fires,
                trained=facts.training_program is not None,
                tariff_event_ids=tariff_ids,
                geopolitical_event_ids=geo_ids,
            ))

        deltas: Dict[str, LedgerRoundResult] = {}
        for team_id in team_ids:
            contexts[team_id].ranks = tables
            deltas[team_id] = cls.evaluate(states[team_id], contexts[team_id], profile)
        return states, deltas

    @staticmethod
    def summary(state: AchievementState, definitions: Optional[List[AchievementDefinition]] = None) -> Dict[str, Any]:
        """Completion per category, hiding unearned hidden achievements."""
        catalog = definitions if definitions is not None else ALL_ACHIEVEMENTS
        earned_ids = {e.achievement_id for e in state.earned}
        categories: Dict[str, Dict[str, int]] = {}
        for definition in catalog:
            entry = categories.setdefault(definition.category.value, {"earned": 0, "total": 0})
            entry["total"] += 1
            if definition.id in earned_ids:
                entry["earned"] += 1
        return {
            "team_id": state.team_id,
            "total_points": state.total_points,
            "positive_points": state.positive_points,
            "negative_points": state.negative_points,
            "earned": len(earned_ids),
            "available": len(catalog),
            "tier_counts": dict(state.tier_counts),
            "titles": list(state.titles),
            "categories": categories,
        }
