from fastapi import APIRouter
from .routes import games, profiles

api_router = APIRouter()

api_router.include_router(games.router, prefix="/games", tags=["games"])
api_router.include_router(profiles.router, prefix="/profiles", tags=["profiles"])
