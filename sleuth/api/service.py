"""
API Service - Business logic layer between API and engine.

The service:
1. Resolves catalogs and card ids
2. Manages sessions
3. Records turns and drives simulated rounds
4. Formats evaluations for clients

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
Lookups that miss return an ErrorResponse; invalid input raises the
engine's own exceptions, which the HTTP layer maps to error codes.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .schemas import (
    # Requests
    CreateSessionRequest,
    CreateSimulatedSessionRequest,
    TurnRequest,
    SimulateRequest,
    # Responses
    SessionResponse,
    EvaluationResponse,
    TurnResponse,
    SimulateResponse,
    CatalogResponse,
    ErrorResponse,
    # Shared
    CardInfo,
    PlayerInfo,
    TurnInfo,
    MatrixRow,
    # Enums
    ErrorCode,
    KnowledgeValue,
    SessionStatus,
)
from ..catalog import resolve_catalog
from ..engine_core import (
    Answer,
    Card,
    EvaluationResult,
    HasCard,
    Player,
    Question,
    Turn,
    render_matrix,
    sort_cards,
)
from ..session import DEFAULT_MAX_ROUNDS, Session, SessionManager, SessionState
from ..simulator import QuestionStrategy


_KNOWLEDGE_VALUES = {
    HasCard.YES: KnowledgeValue.YES,
    HasCard.NO: KnowledgeValue.NO,
    HasCard.NOT_CLEAR: KnowledgeValue.NOT_CLEAR,
}


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        # Track a real game
        session = service.create_session(request)
        service.add_turn(session.session_id, turn_request)
        evaluation = service.get_evaluation(session.session_id)

        # Let the simulator play
        session = service.create_simulated_session(request)
        result = service.simulate(session.session_id, SimulateRequest(rounds=10))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    default_catalog: str = "standard"
    max_rounds: int = DEFAULT_MAX_ROUNDS

    # Loaded catalogs by name or path
    _catalogs: dict[str, frozenset[Card]] = field(default_factory=dict)

    def get_catalog(self, name: str | None = None) -> frozenset[Card]:
        """Load a catalog once and keep it."""
        name = name or self.default_catalog
        if name not in self._catalogs:
            self._catalogs[name] = resolve_catalog(name)
        return self._catalogs[name]

    def describe_catalog(self, name: str | None = None) -> CatalogResponse:
        cards = sort_cards(self.get_catalog(name))
        return CatalogResponse(
            name=name or self.default_catalog,
            count=len(cards),
            cards=[_card_info(card) for card in cards],
        )

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """
        Create a tracked session.

        Raises KeyError for unknown card ids and GameConfigurationError for
        an invalid table.
        """
        catalog = self.get_catalog(request.catalog)
        players = _build_players(request.players, request.viewpoint_position)
        session = self.session_manager.create_session(
            players=players,
            all_cards=catalog,
            leftover_cards=_lookup_cards(catalog, request.leftover_cards),
            own_cards=_lookup_cards(catalog, request.own_cards),
            name=request.name or "Tracked Game",
        )
        return self._session_to_response(session)

    def create_simulated_session(self, request: CreateSimulatedSessionRequest) -> SessionResponse:
        """Create a session backed by a freshly dealt data set."""
        session = self.session_manager.create_simulated_session(
            cards=self.get_catalog(request.catalog),
            players=_build_players(request.players, request.viewpoint_position),
            strategy=QuestionStrategy(request.strategy.value),
            seed=request.seed,
            name=request.name or "Simulated Game",
        )
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)
        return self._session_to_response(session)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        return self.session_manager.end_session(session_id, reason)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    # =========================================================================
    # Turns and evaluation
    # =========================================================================

    def add_turn(self, session_id: str, request: TurnRequest) -> TurnResponse | ErrorResponse:
        """
        Record an observed turn.

        Raises KeyError for unknown positions or card ids and ValueError for
        a malformed question or answer.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)

        game = session.game
        asking = game.player_by_position(request.asking_position)
        question = Question(
            asking_player=asking,
            cards=frozenset(game.card_by_id(card_id) for card_id in request.cards),
        )

        answer = None
        if request.answering_position is not None:
            answering = game.player_by_position(request.answering_position)
            if answering == asking:
                raise ValueError("A player cannot answer their own question")
            answer = Answer(
                answering_player=answering,
                cards=frozenset(game.card_by_id(card_id) for card_id in request.answer_cards),
            )
        elif request.answer_cards:
            raise ValueError("Answer cards given without an answering player")

        turn = game.add_turn(question, answer)
        # Turns change the picture; the next evaluation recomputes it
        session.last_result = None
        return TurnResponse(session_id=session_id, turn=_turn_info(turn))

    def get_evaluation(
        self,
        session_id: str,
        render: bool = False,
    ) -> EvaluationResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)
        result = session.evaluate()
        return self._evaluation_to_response(session, result, render=render)

    def simulate(
        self,
        session_id: str,
        request: SimulateRequest,
    ) -> SimulateResponse | ErrorResponse:
        """
        Play simulated rounds.

        Stops early once the solution is known unless told otherwise.
        The ground truth is only revealed once the deduction is complete.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)
        if not session.is_simulated:
            return ErrorResponse(
                error=f"Session {session_id} is not simulated",
                error_code=ErrorCode.NOT_SIMULATED,
            )

        rounds = min(request.rounds, self.max_rounds)
        first_new = len(session.game.turns)
        result = session.last_result or session.evaluate()
        played = 0
        while played < rounds:
            if request.stop_when_solved and result.solution_found:
                break
            result = session.simulate_round()
            played += 1

        new_turns = session.game.turns[first_new:]
        expected = None
        if result.solution_found:
            expected = [
                _card_info(card)
                for card in sort_cards(session.simulator.data_set.solution_cards)
            ]
        return SimulateResponse(
            session_id=session_id,
            rounds_played=played,
            turns=[_turn_info(turn) for turn in new_turns],
            evaluation=self._evaluation_to_response(session, result),
            expected_solution=expected,
        )

    # =========================================================================
    # Conversion helpers
    # =========================================================================

    def _session_to_response(self, session: Session) -> SessionResponse:
        return SessionResponse(
            session_id=session.session_id,
            status=_status(session),
            game_name=session.game.name,
            simulated=session.is_simulated,
            players=[_player_info(player) for player in session.game.players],
            turn_count=len(session.game.turns),
            created_at=session.created_at,
        )

    def _evaluation_to_response(
        self,
        session: Session,
        result: EvaluationResult,
        render: bool = False,
    ) -> EvaluationResponse:
        matrix = result.matrix
        rows = [
            MatrixRow(
                card_id=card.id,
                category=card.category.value,
                values=[_KNOWLEDGE_VALUES[value] for _, value in matrix.column(card)],
            )
            for card in matrix.cards
        ]
        return EvaluationResponse(
            session_id=session.session_id,
            status=_status(session),
            turn_count=len(session.game.turns),
            players=[_player_info(player) for player in matrix.players],
            matrix=rows,
            solution_cards=[_card_info(card) for card in sort_cards(result.solution_cards)],
            solution_found=result.solution_found,
            not_clear_count=result.not_clear_count,
            rendered=render_matrix(matrix, caption=session.game.name) if render else None,
        )


def _build_players(names: list[str], viewpoint_position: int) -> list[Player]:
    return [
        Player(position=idx, name=name, is_viewpoint=idx == viewpoint_position)
        for idx, name in enumerate(names)
    ]


def _lookup_cards(catalog: frozenset[Card], card_ids: list[str]) -> frozenset[Card]:
    by_id = {card.id: card for card in catalog}
    return frozenset(by_id[card_id] for card_id in card_ids)


def _status(session: Session) -> SessionStatus:
    if session.state == SessionState.SOLVED:
        return SessionStatus.SOLVED
    return SessionStatus.ACTIVE


def _session_not_found(session_id: str) -> ErrorResponse:
    return ErrorResponse(
        error=f"Session {session_id} not found",
        error_code=ErrorCode.SESSION_NOT_FOUND,
    )


def _card_info(card: Card) -> CardInfo:
    return CardInfo(card_id=card.id, category=card.category.value, name=card.display_name())


def _player_info(player: Player) -> PlayerInfo:
    return PlayerInfo.model_validate(player)


def _turn_info(turn: Turn) -> TurnInfo:
    answer = turn.answer
    return TurnInfo(
        sequence_number=turn.sequence_number,
        asking_player=turn.question.asking_player.name,
        cards=[card.id for card in turn.question.ordered_cards],
        answering_player=answer.answering_player.name if answer else None,
        answer_cards=[card.id for card in sort_cards(answer.cards)] if answer else [],
    )
