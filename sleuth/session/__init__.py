"""
Session Module - Games, the driver loop and the session registry.

A session represents one game:
- Created with players, catalog, leftovers and the viewpoint hand
- Records observed turns
- Re-evaluates the full turn log on demand
- Dropped when the game ends

Sessions are EPHEMERAL: nothing is persisted.
"""

from .game import GameSession
from .driver import (
    DEFAULT_MAX_ROUNDS,
    GameOutcome,
    BatchStats,
    run_game,
    create_simulated_game,
    run_simulated_game,
    run_batch,
)
from .manager import SessionManager, Session, SessionState

__all__ = [
    "GameSession",
    "DEFAULT_MAX_ROUNDS",
    "GameOutcome",
    "BatchStats",
    "run_game",
    "create_simulated_game",
    "run_simulated_game",
    "run_batch",
    "SessionManager",
    "Session",
    "SessionState",
]
