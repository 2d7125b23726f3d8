"""
Deduction Engine - Fixpoint constraint propagation over the turn history.

The engine owns the knowledge matrix and the solution set. Every call to
update_matrix_from_turns() starts again from the initial matrix and replays
the full history, so evaluating the same turns twice gives the same result.

Each iteration runs four passes:
1. Direct observation: skipped players hold none of the asked cards,
   an exact answer assigns its card to the answering player.
2. Solution inference: empty-answer rule, full-exclusion rule,
   last-in-category rule.
3. Closure: full-hand rule, complement rule.
4. Turn refinement: ambiguous answers lose cards the answering player
   cannot hold.

The loop repeats while the NOT_CLEAR count drops or a candidate set
shrinks. Both are bounded, so the loop always terminates.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from .cards import Card, CardCategory, cards_by_category, sort_cards
from .errors import DeductionError, GameConfigurationError, InconsistentKnowledgeError
from .knowledge import (
    HasCard,
    KnowledgeMatrix,
    complete_excluded_cards,
    non_player_cards,
    player_card_set,
    player_cards,
)
from .players import Player, players_between, validate_players, viewpoint_player
from .turns import Turn


@dataclass(frozen=True)
class EvaluationResult:
    """
    Snapshot of an evaluation: the frozen matrix and the solution cards.
    """
    matrix: KnowledgeMatrix
    solution_cards: frozenset[Card]

    @property
    def solution_found(self) -> bool:
        """All three solution cards are known."""
        return len(self.solution_cards) == len(CardCategory)

    @property
    def solution_by_category(self) -> dict[CardCategory, Card]:
        return {card.category: card for card in self.solution_cards}

    @property
    def not_clear_count(self) -> int:
        return self.matrix.count(HasCard.NOT_CLEAR)


@dataclass
class _TurnState:
    """A turn as the engine sees it: the answer's candidates may shrink."""
    turn: Turn
    candidates: frozenset[Card] | None

    @property
    def answering_player(self) -> Player | None:
        return self.turn.answer.answering_player if self.turn.answer else None

    @property
    def unanswered(self) -> bool:
        return not self.candidates


class DeductionEngine:
    """
    Knowledge matrix plus the propagation algorithm.

    Usage:
        engine = DeductionEngine.create(players, all_cards, leftover_cards, own_cards)
        result = engine.update_matrix_from_turns(turns).results()
    """

    def __init__(
        self,
        initial_matrix: KnowledgeMatrix,
        all_cards: Iterable[Card],
        leftover_cards: Iterable[Card],
        players: Sequence[Player],
        max_player_cards: int,
        diagnostics: logging.Logger | None = None,
    ):
        self._initial_matrix = initial_matrix.freeze()
        self.matrix = initial_matrix.copy()
        self.solution_cards: set[Card] = set()
        self.all_cards: frozenset[Card] = frozenset(all_cards)
        self.leftover_cards: frozenset[Card] = frozenset(leftover_cards)
        self.players: list[Player] = list(initial_matrix.players)
        self.max_player_cards = max_player_cards
        self.diagnostics = diagnostics
        self.iterations = 0

    @classmethod
    def create(
        cls,
        players: Sequence[Player],
        all_cards: Iterable[Card],
        leftover_cards: Iterable[Card],
        own_cards: Iterable[Card],
        diagnostics: logging.Logger | None = None,
    ) -> DeductionEngine:
        """
        Build the initial matrix.

        Leftover cards are NO for everybody. The viewpoint player's own cards
        are YES for them and NO for everybody else.
        """
        validate_players(players)
        me = viewpoint_player(players)
        all_cards = frozenset(all_cards)
        leftover_cards = frozenset(leftover_cards)
        own_cards = frozenset(own_cards)

        if not own_cards:
            raise GameConfigurationError("The viewpoint player's hand is missing")
        if not own_cards <= all_cards:
            raise GameConfigurationError("Own cards must be part of the card catalog")
        if not leftover_cards <= all_cards:
            raise GameConfigurationError("Leftover cards must be part of the card catalog")
        if own_cards & leftover_cards:
            raise GameConfigurationError("Own cards and leftover cards overlap")

        matrix = KnowledgeMatrix(players, all_cards)
        for card in leftover_cards:
            matrix.mark_nobody(card)
        for card in own_cards:
            matrix.mark_holder(me, card)

        return cls(
            initial_matrix=matrix,
            all_cards=all_cards,
            leftover_cards=leftover_cards,
            players=players,
            max_player_cards=len(own_cards),
            diagnostics=diagnostics,
        )

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------

    def update_matrix_from_turns(self, turns: Iterable[Turn]) -> DeductionEngine:
        """
        Derive everything the turn history implies.

        Starts from the initial matrix and an empty solution set, then
        repeats all passes until one iteration changes nothing.
        """
        self.matrix = self._initial_matrix.copy()
        self.solution_cards = set()
        turn_states = [
            _TurnState(turn=turn, candidates=turn.answer.cards if turn.answer else None)
            for turn in turns
        ]

        # Every looping iteration removes at least one NOT_CLEAR cell or one
        # candidate card, so this many iterations always suffice.
        max_iterations = self.matrix.size + sum(
            len(state.candidates) for state in turn_states if state.candidates
        ) + 1

        self.iterations = 0
        while True:
            if self.iterations >= max_iterations:
                raise DeductionError(
                    f"No fixpoint after {self.iterations} iterations over {len(turn_states)} turns"
                )
            self.iterations += 1
            not_clear_before = self.matrix.count(HasCard.NOT_CLEAR)

            self._apply_observations(turn_states)
            self._infer_solution_cards(turn_states)
            self._apply_closure_rules()
            turns_changed = self._refine_turns(turn_states)

            if not turns_changed and self.matrix.count(HasCard.NOT_CLEAR) == not_clear_before:
                break

        if self.diagnostics:
            self.diagnostics.debug(
                "Evaluated %d turns in %d iteration(s): %d undetermined cells, solution %s",
                len(turn_states),
                self.iterations,
                self.matrix.count(HasCard.NOT_CLEAR),
                [card.id for card in sort_cards(self.solution_cards)],
            )
        return self

    def results(self) -> EvaluationResult:
        return EvaluationResult(
            matrix=self.matrix.freeze(),
            solution_cards=frozenset(self.solution_cards),
        )

    # ------------------------------------------------------------------
    # Pass 1: direct observation
    # ------------------------------------------------------------------

    def _apply_observations(self, turn_states: list[_TurnState]):
        for state in turn_states:
            answer = state.turn.answer
            if answer is None:
                continue
            asker = state.turn.question.asking_player
            # skipped players hold none of the asked cards
            for player in players_between(self.players, asker, answer.answering_player):
                for card in state.turn.question.cards:
                    self.matrix.set(player, card, HasCard.NO)

        for state in turn_states:
            if state.candidates is not None and len(state.candidates) == 1:
                (card,) = state.candidates
                self.matrix.mark_holder(state.answering_player, card)

    # ------------------------------------------------------------------
    # Pass 2: solution inference
    # ------------------------------------------------------------------

    def _infer_solution_cards(self, turn_states: list[_TurnState]):
        # (a) nobody answered and the asker's hand is fully known
        for state in turn_states:
            if not state.unanswered:
                continue
            asker = state.turn.question.asking_player
            asker_cards = set(player_cards(self.matrix, asker))
            if len(asker_cards) != self.max_player_cards:
                continue
            for card in state.turn.question.cards:
                if card in self.leftover_cards or card in asker_cards:
                    continue
                self._add_solution_card(card)

        # (b) nobody can hold it and it is not a leftover
        for card in complete_excluded_cards(self.matrix):
            if card not in self.leftover_cards:
                self.solution_cards.add(card)

        # (c) last unassigned card of a category
        held = player_card_set(self.matrix)
        remaining = self.all_cards - self.leftover_cards - held
        for cards in cards_by_category(remaining).values():
            if len(cards) == 1:
                self._add_solution_card(cards[0])

    def _add_solution_card(self, card: Card):
        self.solution_cards.add(card)
        self.matrix.mark_nobody(card)

    # ------------------------------------------------------------------
    # Pass 3: closure
    # ------------------------------------------------------------------

    def _apply_closure_rules(self):
        # (a) full hand known: nothing else fits
        for player in self.players:
            if self.matrix.count(HasCard.YES, player) == self.max_player_cards:
                for card, value in list(self.matrix.row(player)):
                    if value == HasCard.NOT_CLEAR:
                        self.matrix.set(player, card, HasCard.NO)

        # (b) exactly as many candidates left as open slots; a card has one holder
        total = len(self.matrix.cards)
        for player in self.players:
            if total - self.matrix.count(HasCard.NO, player) == self.max_player_cards:
                for card, value in list(self.matrix.row(player)):
                    if value == HasCard.NOT_CLEAR:
                        self.matrix.mark_holder(player, card)

    # ------------------------------------------------------------------
    # Pass 4: turn refinement
    # ------------------------------------------------------------------

    def _refine_turns(self, turn_states: list[_TurnState]) -> bool:
        changed = False
        for state in turn_states:
            if not state.candidates:
                continue
            excluded = set(non_player_cards(self.matrix, state.answering_player))
            refined = state.candidates - excluded
            if refined == state.candidates:
                continue
            if not refined:
                raise InconsistentKnowledgeError(
                    f"Turn {state.turn.sequence_number}: "
                    f"{state.answering_player.name} cannot hold any of the answered cards",
                    player=state.answering_player,
                )
            state.candidates = refined
            changed = True
        return changed
