import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from fastapi import APIRouter, HTTPException, Query, Request

from ...config import get_settings
from ...models import GameRecord, RoundSnapshot
from ...schemas.decisions import DecisionSubmission
from ...schemas.games import (
    GameCreate, GameResponse, TeamSummary, SettleResponse, TeamResultResponse,
    DecisionAccepted, AchievementResponse, EarnedAchievementResponse,
    TariffForecastResponse, TariffProjectionResponse, EconomyForecastResponse
)
from ...services.achievements import ACHIEVEMENTS_BY_ID, AchievementLedger, AchievementState
from ...services.economic_cycle import EconomicCycleEngine
from ...services.game_profile import GameProfile, load_profile
from ...services.rng import make_rng
from ...services.settlement import RoundSettlement, SettlementResult, WorldSnapshot, create_world
from ...services.snapshots import to_plain
from ...services.tariff_engine import TariffEngine
from ...services.team_state import TeamState, create_initial_team_state

logger = logging.getLogger(__name__)

router = APIRouter()


@dataclass
class GameSession:
    """In-memory game. The database only ever receives copies."""
    id: str
    seed: str
    profile: GameProfile
    world: WorldSnapshot
    teams: Dict[str, TeamState]
    achievements: Dict[str, AchievementState]
    max_rounds: int
    status: str = "created"
    pending: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    last_result: Optional[SettlementResult] = None


_games: Dict[str, GameSession] = {}


def _get_game(game_id: str) -> GameSession:
    game = _games.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="Game not found")
    return game


def _check_team(game: GameSession, team_id: str):
    if team_id not in game.teams:
        raise HTTPException(status_code=404, detail=f"Team {team_id} not found in game")


def _game_response(game: GameSession) -> GameResponse:
    ranks = game.last_result.rankings.get("revenue", {}) if game.last_result else {}
    teams = [
        TeamSummary(
            team_id=team.team_id,
            cash=team.cash,
            debt=team.debt,
            revenue=team.revenue,
            net_income=team.net_income,
            eps=team.eps,
            share_price=team.share_price,
            brand_value=team.brand_value,
            esg_score=team.esg_score,
            market_share=dict(team.market_share),
            products=len(team.launched_products),
            rank=ranks.get(team.team_id),
        )
        for team in (game.teams[t] for t in sorted(game.teams))
    ]
    return GameResponse(
        id=game.id,
        seed=game.seed,
        difficulty=game.profile.difficulty.value,
        status=game.status,
        current_round=game.world.round_number,
        max_rounds=game.max_rounds,
        phase=game.world.economy.phase.value,
        team_ids=sorted(game.teams),
        pending_decisions=sorted(game.pending),
        teams=teams,
        last_summary=list(game.last_result.summary) if game.last_result else [],
    )


async def _persist_game(request: Request, game: GameSession):
    if not getattr(request.app.state, "db_available", False):
        return
    try:
        from ...database import session_scope
        async with session_scope() as db:
            record = await db.get(GameRecord, UUID(game.id))
            if record is None:
                record = GameRecord(
                    id=UUID(game.id),
                    seed=game.seed,
                    difficulty=game.profile.difficulty.value,
                    team_ids=sorted(game.teams),
                    profile=game.profile.model_dump(mode="json"),
                    max_rounds=game.max_rounds,
                )
                db.add(record)
            record.current_round = game.world.round_number
            record.status = game.status
    except Exception as e:
        logger.warning(f"Could not persist game {game.id}, keeping it in memory: {e}")


async def _persist_round(request: Request, game: GameSession, settlement: SettlementResult):
    if not getattr(request.app.state, "db_available", False):
        return
    try:
        from ...database import session_scope
        data = settlement.to_dict()
        async with session_scope() as db:
            db.add(RoundSnapshot(
                game_id=UUID(game.id),
                round_number=settlement.round_number,
                world=data["world"],
                teams=data["teams"],
                results=data["results"],
                rankings=data["rankings"],
                achievements=data["achievements"],
                audit=data["audit"],
            ))
    except Exception as e:
        logger.warning(f"Could not persist round {settlement.round_number} of game {game.id}: {e}")


@router.post("/", response_model=GameResponse, status_code=201)
async def create_game(config: GameCreate, request: Request):
    """Create a new game with fresh team states."""
    settings = get_settings()
    if len(config.team_ids) > settings.max_teams:
        raise HTTPException(status_code=422, detail=f"At most {settings.max_teams} teams per game")

    default_profile = getattr(request.app.state, "default_profile", None)
    if default_profile is not None and config.difficulty is None and not config.profile_overrides:
        profile = default_profile
    else:
        # ConfigurationError becomes a 422 in main.configuration_error_handler
        profile = load_profile(config.difficulty or settings.default_difficulty, config.profile_overrides)

    game_id = str(uuid4())
    game = GameSession(
        id=game_id,
        seed=config.seed or uuid4().hex,
        profile=profile,
        world=create_world(profile),
        teams={t: create_initial_team_state(t, profile) for t in config.team_ids},
        achievements={t: AchievementState(team_id=t) for t in config.team_ids},
        max_rounds=config.max_rounds or settings.max_rounds,
    )
    _games[game_id] = game
    logger.info(f"Created game {game_id} ({profile.difficulty.value}, {len(game.teams)} teams)")

    await _persist_game(request, game)
    return _game_response(game)


@router.get("/{game_id}", response_model=GameResponse)
async def get_game(game_id: str):
    """Get the current state of a game."""
    return _game_response(_get_game(game_id))


@router.post("/{game_id}/decisions/{team_id}", response_model=DecisionAccepted)
async def submit_decisions(game_id: str, team_id: str, submission: DecisionSubmission):
    """Store a team's decisions for the round being played.

    Departments are validated at settlement; a bad department falls back to
    its default there instead of rejecting the whole submission.
    """
    game = _get_game(game_id)
    _check_team(game, team_id)
    if game.status == "finished":
        raise HTTPException(status_code=409, detail="Game is finished")

    payload = submission.model_dump(exclude_none=True)
    game.pending[team_id] = payload
    return DecisionAccepted(
        game_id=game_id,
        team_id=team_id,
        round_number=game.world.round_number + 1,
        departments=sorted(payload),
    )


@router.post("/{game_id}/settle", response_model=SettleResponse)
async def settle_round(game_id: str, request: Request):
    """Settle the current round. Teams without decisions play defaults."""
    game = _get_game(game_id)
    if game.status == "finished":
        raise HTTPException(status_code=409, detail="Game is finished")

    settlement = RoundSettlement.settle(
        game.world, game.teams, game.pending, game.profile, game.seed,
        achievements=game.achievements,
    )

    game.world = settlement.world
    game.teams = settlement.teams
    game.achievements = settlement.achievement_states
    game.pending = {}
    game.last_result = settlement
    game.status = "finished" if settlement.round_number >= game.max_rounds else "running"

    await _persist_round(request, game, settlement)
    await _persist_game(request, game)

    results = []
    for team_id in sorted(settlement.results):
        result = settlement.results[team_id]
        delta = settlement.achievements.get(team_id)
        results.append(TeamResultResponse(
            team_id=team_id,
            revenue=result.revenue,
            net_income=result.net_income,
            total_costs=result.total_costs,
            cash_delta=result.cash_delta,
            market_share=dict(result.market_share),
            market_share_delta=result.market_share_delta,
            units_sold=result.units_sold,
            rank=result.rank,
            ranks=dict(result.ranks),
            balance_multiplier=result.balance_multiplier,
            balance_status=result.balance_status,
            achievement_points=delta.points if delta else 0,
            new_achievements=[e.achievement_id for e in delta.newly_earned] if delta else [],
            messages=list(result.messages),
            warnings=list(result.warnings),
        ))

    return SettleResponse(
        game_id=game_id,
        round_number=settlement.round_number,
        status=game.status,
        phase=settlement.world.economy.phase.value,
        rankings=settlement.rankings,
        results=results,
        summary=list(settlement.summary),
        audit=to_plain(settlement.audit),
    )


@router.get("/{game_id}/achievements/{team_id}", response_model=AchievementResponse)
async def get_achievements(game_id: str, team_id: str):
    """Earned achievements and per-category completion for one team."""
    game = _get_game(game_id)
    _check_team(game, team_id)
    state = game.achievements.get(team_id) or AchievementState(team_id=team_id)
    summary = AchievementLedger.summary(state)

    earned: List[EarnedAchievementResponse] = []
    for entry in state.earned:
        definition = ACHIEVEMENTS_BY_ID.get(entry.achievement_id)
        if definition is None:
            continue
        earned.append(EarnedAchievementResponse(
            id=definition.id,
            name=definition.name,
            description=definition.description,
            category=definition.category.value,
            tier=definition.tier.value,
            points=entry.points,
            round_number=entry.round_number,
        ))

    return AchievementResponse(
        team_id=team_id,
        total_points=summary["total_points"],
        positive_points=summary["positive_points"],
        negative_points=summary["negative_points"],
        earned=earned,
        titles=summary["titles"],
        tier_counts=summary["tier_counts"],
        categories=summary["categories"],
        available=summary["available"],
    )


@router.get("/{game_id}/forecast/tariffs", response_model=TariffForecastResponse)
async def forecast_tariffs(
    game_id: str,
    from_region: str = Query("Asia"),
    to_region: str = Query("North America"),
    material: str = Query("processor"),
    rounds: Optional[int] = Query(None, ge=1, le=20),
):
    """Project the duty on one route over the next few rounds."""
    game = _get_game(game_id)
    horizon = rounds or get_settings().forecast_rounds
    round_number = game.world.round_number + 1
    forecast = TariffEngine.forecast(
        game.world.tariffs, from_region, to_region, material, horizon, round_number,
        rng=make_rng(game.seed, round_number, "forecast"),
    )
    return TariffForecastResponse(
        from_region=forecast.from_region,
        to_region=forecast.to_region,
        material=forecast.material,
        current_rate=forecast.current_rate,
        increase_probability=forecast.increase_probability,
        decrease_probability=forecast.decrease_probability,
        projections=[
            TariffProjectionResponse(round_number=p.round_number, rate=p.rate, confidence=p.confidence)
            for p in forecast.projections
        ],
        recommendations=forecast.recommendations,
        mitigation_strategies=TariffEngine.mitigation_strategies(
            game.world.tariffs, from_region, to_region, round_number
        ),
    )


@router.get("/{game_id}/forecast/economy", response_model=EconomyForecastResponse)
async def forecast_economy(game_id: str):
    """Most likely next economic phase and the current risk factors."""
    game = _get_game(game_id)
    economy = game.world.economy
    forecast = EconomicCycleEngine.forecast(economy, game.profile.economic_cycle)
    return EconomyForecastResponse(
        current_phase=economy.phase.value,
        rounds_in_phase=economy.rounds_in_phase,
        next_phase=forecast.next_phase.value,
        transition_probability=forecast.transition_probability,
        transition_odds=forecast.transition_odds,
        gdp_range=forecast.gdp_range,
        inflation_range=forecast.inflation_range,
        risk_factors=forecast.risk_factors,
    )
