"""
Session Manager - Creates and tracks game sessions.

Sessions are EPHEMERAL:
- Held in memory only
- Removed when ended or when stale
- Nothing is persisted

A session is either tracked (turns are reported by the caller) or
simulated (backed by a generated data set and a simulator).
"""

from __future__ import annotations
import logging
import random
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Sequence

from ..engine_core.cards import Card
from ..engine_core.evaluator import EvaluationResult
from ..engine_core.players import Player
from ..simulator import GameSimulator, QuestionStrategy
from .game import GameSession
from .driver import create_simulated_game

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a game session."""
    ACTIVE = "active"  # Turns being recorded
    SOLVED = "solved"  # All three solution cards known
    ENDED = "ended"  # Ended by the user
    ABANDONED = "abandoned"  # Cleaned up as stale


@dataclass
class Session:
    """
    An ephemeral game session.

    Contains the game (players, cards, turn log) and, for simulated
    sessions, the simulator holding the ground truth.
    """
    session_id: str
    game: GameSession
    created_at: float
    state: SessionState = SessionState.ACTIVE
    simulator: GameSimulator | None = None
    strategy: QuestionStrategy = QuestionStrategy.EVALUATION_BASED
    last_result: EvaluationResult | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_simulated(self) -> bool:
        return self.simulator is not None

    def is_active(self) -> bool:
        return self.state in {SessionState.ACTIVE, SessionState.SOLVED}

    def evaluate(self) -> EvaluationResult:
        """Evaluate the game and update the session state."""
        result = self.game.evaluate()
        self.last_result = result
        if result.solution_found:
            self.state = SessionState.SOLVED
        return result

    def simulate_round(self) -> EvaluationResult:
        """Play one simulated turn and return the new evaluation."""
        if self.simulator is None:
            raise ValueError(f"Session {self.session_id} is not simulated")
        result = self.last_result or self.evaluate()
        question, answer = self.simulator.next_turn(
            previous_turns=self.game.turns,
            strategy=self.strategy,
            evaluation_result=result,
        )
        self.game.add_turn(question, answer)
        return self.evaluate()


class SessionManager:
    """
    Manages game sessions.

    No persistence - sessions are in-memory only.
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        players: Sequence[Player],
        all_cards: Iterable[Card],
        leftover_cards: Iterable[Card],
        own_cards: Iterable[Card],
        name: str = "Tracked Game",
    ) -> Session:
        """Create a session whose turns are reported by the caller."""
        game = GameSession(
            players=players,
            all_cards=all_cards,
            leftover_cards=leftover_cards,
            own_cards=own_cards,
            name=name,
        )
        return self._register(Session(
            session_id=str(uuid.uuid4()),
            game=game,
            created_at=time.time(),
        ))

    def create_simulated_session(
        self,
        cards: Iterable[Card],
        players: Sequence[Player],
        strategy: QuestionStrategy = QuestionStrategy.EVALUATION_BASED,
        seed: int | None = None,
        name: str = "Simulated Game",
    ) -> Session:
        """Create a session backed by a freshly dealt data set."""
        game, simulator = create_simulated_game(
            cards, players, rng=random.Random(seed), name=name
        )
        return self._register(Session(
            session_id=str(uuid.uuid4()),
            game=game,
            created_at=time.time(),
            simulator=simulator,
            strategy=strategy,
            metadata={"seed": seed},
        ))

    def _register(self, session: Session) -> Session:
        self._sessions[session.session_id] = session
        logger.info("Created session %s (%s)", session.session_id, session.game.name)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and remove it from memory.

        Returns False if the session does not exist.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.state = SessionState.ENDED if reason == "completed" else SessionState.ABANDONED
        session.last_result = None
        logger.info("Ended session %s (%s)", session_id, reason)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        Remove sessions older than max_age_seconds.

        Returns the number of removed sessions.
        """
        now = time.time()
        stale = [
            sid for sid, session in self._sessions.items()
            if now - session.created_at > max_age_seconds
        ]
        for session_id in stale:
            self.end_session(session_id, reason="stale")
        return len(stale)
