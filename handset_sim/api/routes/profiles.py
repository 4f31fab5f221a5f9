from fastapi import APIRouter, HTTPException
from typing import Any, Dict, List

from ...schemas.games import ProfileSummary
from ...services.game_profile import DIFFICULTY_ORDER, ConfigurationError, GameProfile, load_profile

router = APIRouter()


def _summary(profile: GameProfile) -> ProfileSummary:
    return ProfileSummary(
        difficulty=profile.difficulty.value,
        starting_cash=profile.starting.cash,
        starting_brand_value=profile.starting.brand_value,
        rubber_banding=profile.rubber_banding.enabled,
        disruption_frequency=profile.disruptions.frequency_multiplier,
        economic_volatility=profile.economic_cycle.volatility,
    )


@router.get("/", response_model=List[ProfileSummary])
async def list_profiles():
    """List the difficulty presets, easiest first."""
    return [_summary(load_profile(difficulty)) for difficulty in DIFFICULTY_ORDER]


@router.get("/{difficulty}")
async def get_profile(difficulty: str) -> Dict[str, Any]:
    """Full validated profile for one difficulty preset."""
    try:
        profile = load_profile(difficulty)
    except ConfigurationError:
        raise HTTPException(status_code=404, detail=f"Unknown difficulty '{difficulty}'")
    return profile.model_dump(mode="json")
