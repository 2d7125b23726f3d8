"""
Game Session - Binds catalog, players and the turn log to the engine.

The session keeps no deduction state of its own. Every evaluate() call
builds a fresh DeductionEngine and replays the whole turn log, so the
result depends only on the configuration and the turns recorded so far.
"""

from __future__ import annotations
import logging
from typing import Iterable, Sequence

from ..engine_core.cards import Card
from ..engine_core.evaluator import DeductionEngine, EvaluationResult
from ..engine_core.errors import GameConfigurationError
from ..engine_core.players import Player, sort_by_position, validate_players, viewpoint_player
from ..engine_core.turns import Answer, Question, Turn, TurnLog


class GameSession:
    """
    One tracked game.

    Usage:
        game = GameSession(players, all_cards, leftover_cards, own_cards)
        game.add_turn(question, answer)
        result = game.evaluate()
    """

    def __init__(
        self,
        players: Sequence[Player],
        all_cards: Iterable[Card],
        leftover_cards: Iterable[Card],
        own_cards: Iterable[Card],
        name: str = "Default Game",
        diagnostics: logging.Logger | None = None,
    ):
        validate_players(players)
        self.name = name
        self.players: tuple[Player, ...] = tuple(sort_by_position(players))
        self.viewpoint: Player = viewpoint_player(self.players)
        self.all_cards: frozenset[Card] = frozenset(all_cards)
        self.leftover_cards: frozenset[Card] = frozenset(leftover_cards)
        self.own_cards: frozenset[Card] = frozenset(own_cards)
        self.diagnostics = diagnostics
        self._turns = TurnLog()

        if not self.own_cards:
            raise GameConfigurationError("The viewpoint player's hand is missing")
        unknown = (self.own_cards | self.leftover_cards) - self.all_cards
        if unknown:
            raise GameConfigurationError(
                f"Cards not in catalog: {sorted(card.id for card in unknown)}"
            )
        if self.own_cards & self.leftover_cards:
            raise GameConfigurationError("Own cards and leftover cards overlap")

    @property
    def turns(self) -> list[Turn]:
        return self._turns.as_list()

    @property
    def hand_size(self) -> int:
        return len(self.own_cards)

    def add_turn(self, question: Question, answer: Answer | None) -> Turn:
        """Append an observed turn with the next sequence number."""
        if question.asking_player not in self.players:
            raise GameConfigurationError(f"Unknown asking player: {question.asking_player.name}")
        if answer is not None and answer.answering_player not in self.players:
            raise GameConfigurationError(f"Unknown answering player: {answer.answering_player.name}")
        if answer is not None and answer.answering_player == question.asking_player:
            raise GameConfigurationError("A player cannot answer their own question")
        if not question.cards <= self.all_cards:
            raise GameConfigurationError("Question names cards outside the catalog")
        return self._turns.append(question, answer)

    def evaluate(self) -> EvaluationResult:
        """Replay all turns through a fresh engine."""
        return (
            DeductionEngine
            .create(
                players=self.players,
                all_cards=self.all_cards,
                leftover_cards=self.leftover_cards,
                own_cards=self.own_cards,
                diagnostics=self.diagnostics,
            )
            .update_matrix_from_turns(self.turns)
            .results()
        )

    def player_by_position(self, position: int) -> Player:
        for player in self.players:
            if player.position == position:
                return player
        raise KeyError(position)

    def card_by_id(self, card_id: str) -> Card:
        for card in self.all_cards:
            if card.id == card_id:
                return card
        raise KeyError(card_id)
