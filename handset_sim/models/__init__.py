from .games import GameRecord, RoundSnapshot

__all__ = [
    "GameRecord",
    "RoundSnapshot",
]
