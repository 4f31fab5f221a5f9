"""Cross-round counters the achievement rules read.

Counters are folded forward once per settled round. Updating the same round
twice restores the pre-round baseline first, so re-evaluation never
double-counts.
"""

import copy
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Optional


@dataclass
class TrackerState:
    rounds_completed: int = 0
    profitable_rounds: int = 0
    consecutive_profit: int = 0
    consecutive_loss: int = 0
    consecutive_growth: int = 0
    consecutive_decline: int = 0
    products_launched: int = 0
    products_started: int = 0
    products_discontinued: int = 0
    disruptions_weathered: int = 0
    defaults_substituted: int = 0
    rubber_band_boosts: int = 0
    rubber_band_penalties: int = 0
    never_bankrupt: bool = True
    rounds_without_marketing: int = 0
    rounds_without_rd: int = 0
    total_dividends: float = 0.0
    peak_cash: float = 0.0
    rounds_as_revenue_leader: int = 0
    rounds_as_share_leader: int = 0
    phases_seen: List[str] = field(default_factory=list)
    recession_rounds: int = 0
    recession_profitable_rounds: int = 0
    loans: int = 0
    stock_issues: int = 0
    buybacks: int = 0
    hires: int = 0
    fires: int = 0
    trainings: int = 0
    tariff_events_seen: List[str] = field(default_factory=list)
    geopolitical_events_seen: List[str] = field(default_factory=list)
    first_last_place_round: int = 0
    consecutive_negative_cash: int = 0
    last_round: int = 0
    baseline: Optional[Dict[str, Any]] = None

    def counters(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("baseline")
        return data

    def restore(self, counters: Dict[str, Any]) -> None:
        for f in fields(self):
            if f.name in counters:
                setattr(self, f.name, copy.deepcopy(counters[f.name]))


@dataclass
class RoundObservation:
    """Everything the tracker needs from one settled round for one team."""
    round_number: int
    revenue: float
    previous_revenue: float
    net_income: float
    cash: float
    is_bankrupt: bool
    phase: str
    in_recession: bool
    balance_status: str
    revenue_leader: bool
    share_leader: bool
    revenue_last: bool
    products_launched: int = 0
    products_started: int = 0
    products_discontinued: int = 0
    disruptions_resolved: int = 0
    substituted_departments: int = 0
    marketing_spend: float = 0.0
    rd_spend: float = 0.0
    dividends_paid: float = 0.0
    loan_taken: float = 0.0
    shares_issued: int = 0
    shares_bought_back: int = 0
    hires: int = 0
    fires: int = 0
    trained: bool = False
    tariff_event_ids: List[str] = field(default_factory=list)
    geopolitical_event_ids: List[str] = field(default_factory=list)


class AchievementTracker:

    @classmethod
    def update(cls, state: TrackerState, obs: RoundObservation) -> TrackerState:
        """Fold one round into the counters (in place) and return the state."""
        if obs.round_number == state.last_round and state.baseline is not None:
            state.restore(state.baseline)
        elif obs.round_number < state.last_round:
            return state
        state.baseline = state.counters()

        state.rounds_completed += 1
        if obs.net_income > 0:
            state.profitable_rounds += 1
            state.consecutive_profit += 1
            state.consecutive_loss = 0
        else:
            state.consecutive_profit = 0
            state.consecutive_loss += 1 if obs.net_income < 0 else 0

        if obs.revenue > obs.previous_revenue and obs.previous_revenue > 0:
            state.consecutive_growth += 1
            state.consecutive_decline = 0
        elif obs.revenue < obs.previous_revenue:
            state.consecutive_decline += 1
            state.consecutive_growth = 0

        state.products_launched += obs.products_launched
        state.products_started += obs.products_started
        state.products_discontinued += obs.products_discontinued
        state.disruptions_weathered += obs.disruptions_resolved
        state.defaults_substituted += obs.substituted_departments

        if obs.balance_status == "trailing":
            state.rubber_band_boosts += 1
        elif obs.balance_status == "leading":
            state.rubber_band_penalties += 1

        if obs.is_bankrupt:
            state.never_bankrupt = False
        state.rounds_without_marketing += 1 if obs.marketing_spend <= 0 else 0
        state.rounds_without_rd += 1 if obs.rd_spend <= 0 else 0
        state.total_dividends += obs.dividends_paid
        state.peak_cash = max(state.peak_cash, obs.cash)

        if obs.revenue_leader:
            state.rounds_as_revenue_leader += 1
        if obs.share_leader:
            state.rounds_as_share_leader += 1
        if obs.revenue_last and not state.first_last_place_round:
            state.first_last_place_round = obs.round_number

        if obs.phase not in state.phases_seen:
            state.phases_seen.append(obs.phase)
        if obs.in_recession:
            state.recession_rounds += 1
            if obs.net_income > 0:
                state.recession_profitable_rounds += 1

        state.loans += 1 if obs.loan_taken > 0 else 0
        state.stock_issues += 1 if obs.shares_issued > 0 else 0
        state.buybacks += 1 if obs.shares_bought_back > 0 else 0
        state.hires += obs.hires
        state.fires += obs.fires
        state.trainings += 1 if obs.trained else 0

        for event_id in obs.tariff_event_ids:
            if event_id not in state.tariff_events_seen:
                state.tariff_events_seen.append(event_id)
        for event_id in obs.geopolitical_event_ids:
            if event_id not in state.geopolitical_events_seen:
                state.geopolitical_events_seen.append(event_id)

        state.consecutive_negative_cash = state.consecutive_negative_cash + 1 if obs.cash < 0 else 0
        state.last_round = obs.round_number
        return state
