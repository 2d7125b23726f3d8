"""
Question Strategies - How a simulated player picks the next question.

A strategy builds a priority-ordered list of card groups and takes the
first room, subject and tool found when walking the groups in order.

Strategies:
- BASIC: the asking player's own lightweight view of the turns so far
- EVALUATION_BASED: the full deduction result (the viewpoint player's)
"""

from __future__ import annotations
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from itertools import chain
from typing import Iterable, Sequence

from ..engine_core.cards import Card, first_card_per_category, sort_cards
from ..engine_core.errors import StrategyUsageError
from ..engine_core.evaluator import EvaluationResult
from ..engine_core.knowledge import (
    not_clear_cards,
    other_player_cards_in_reverse_order,
    player_cards,
)
from ..engine_core.players import Player
from ..engine_core.turns import Question, Turn


class QuestionStrategy(Enum):
    """Which question policy a simulated player uses."""
    BASIC = "basic"
    EVALUATION_BASED = "evaluation_based"


@dataclass(frozen=True)
class TableInfo:
    """What every player at the table knows."""
    players: tuple[Player, ...]
    all_cards: frozenset[Card]
    leftover_cards: frozenset[Card]
    hand_size: int


@dataclass
class PlayerEvaluationResult:
    """One player's private view: known hands and suspected solution cards."""
    player_cards: dict[Player, set[Card]]
    solution_cards: set[Card]

    def known_cards(self, player: Player) -> set[Card]:
        return self.player_cards.get(player, set())

    def cards_of_others(self, player: Player) -> set[Card]:
        return set(chain.from_iterable(
            cards for other, cards in self.player_cards.items() if other != player
        ))


@dataclass
class QuestionDecision:
    """
    A question chosen by a policy.

    Keeps the priority groups it was picked from, for diagnostics.
    """
    question: Question
    explanation: str = ""
    priority_groups: list[list[Card]] = field(default_factory=list)


def perform_basic_player_evaluation(
    player: Player,
    own_cards: Iterable[Card],
    table: TableInfo,
    turns: Sequence[Turn],
) -> PlayerEvaluationResult:
    """
    Lightweight private evaluation for `player`.

    Only two rules apply: exact answers reveal a card of the answering
    player, and an unanswered question from a player whose hand is fully
    known points at solution cards.
    """
    known: dict[Player, set[Card]] = {p: set() for p in table.players}
    known.setdefault(player, set()).update(own_cards)
    solution: set[Card] = set()

    for turn in turns:
        if turn.answer is not None and turn.answer.is_exact:
            known.setdefault(turn.answer.answering_player, set()).update(turn.answer.cards)

    for turn in turns:
        if not turn.unanswered:
            continue
        asker_cards = known.get(turn.question.asking_player, set())
        if len(asker_cards) == table.hand_size:
            solution.update(
                card for card in turn.question.cards
                if card not in table.leftover_cards and card not in asker_cards
            )

    return PlayerEvaluationResult(player_cards=known, solution_cards=solution)


def build_question(player: Player, priority_groups: Sequence[Iterable[Card]]) -> Question:
    """First room, subject and tool found in the flattened priority groups."""
    picked = first_card_per_category(chain.from_iterable(priority_groups))
    return Question(asking_player=player, cards=frozenset(picked.values()))


class QuestionPolicy(ABC):
    """
    Abstract base class for question policies.
    """

    @abstractmethod
    def select_question(
        self,
        player: Player,
        own_cards: frozenset[Card],
        table: TableInfo,
        turns: Sequence[Turn],
        evaluation_result: EvaluationResult | None = None,
    ) -> QuestionDecision:
        """
        Pick the next question for `player`.

        Args:
            player: The asking player
            own_cards: The asking player's hand
            table: Public game information
            turns: Turns played so far
            evaluation_result: Full deduction result, if the policy needs one
        """
        pass

    def get_name(self) -> str:
        return self.__class__.__name__


class BasicQuestionPolicy(QuestionPolicy):
    """
    Ask about cards nobody has been seen with yet.

    Priority: open cards (shuffled), own cards, suspected solution cards,
    leftover cards, the full catalog.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def select_question(
        self,
        player: Player,
        own_cards: frozenset[Card],
        table: TableInfo,
        turns: Sequence[Turn],
        evaluation_result: EvaluationResult | None = None,
    ) -> QuestionDecision:
        view = perform_basic_player_evaluation(player, own_cards, table, turns)

        known_elsewhere = (
            set(table.leftover_cards)
            | view.solution_cards
            | view.known_cards(player)
            | view.cards_of_others(player)
        )
        open_cards = sort_cards(table.all_cards - known_elsewhere)
        self.rng.shuffle(open_cards)

        groups = [
            open_cards,
            sort_cards(view.known_cards(player)),
            sort_cards(view.solution_cards),
            sort_cards(table.leftover_cards),
            sort_cards(table.all_cards),
        ]
        return QuestionDecision(
            question=build_question(player, groups),
            explanation=f"{len(open_cards)} open card(s) in private view",
            priority_groups=groups,
        )


class EvaluationQuestionPolicy(QuestionPolicy):
    """
    Ask about undetermined cards using the full deduction result.

    Priority: not-clear cards (shuffled), own known cards, solution
    candidates, leftover cards, other players' known cards in reverse turn
    order, the full catalog.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def select_question(
        self,
        player: Player,
        own_cards: frozenset[Card],
        table: TableInfo,
        turns: Sequence[Turn],
        evaluation_result: EvaluationResult | None = None,
    ) -> QuestionDecision:
        if evaluation_result is None:
            raise StrategyUsageError(
                "Missing evaluation result for EVALUATION_BASED question strategy"
            )
        matrix = evaluation_result.matrix

        undetermined = not_clear_cards(matrix)
        self.rng.shuffle(undetermined)

        groups = [
            undetermined,
            player_cards(matrix, player),
            sort_cards(evaluation_result.solution_cards),
            sort_cards(table.leftover_cards),
            other_player_cards_in_reverse_order(matrix, table.players, player),
            sort_cards(table.all_cards),
        ]
        return QuestionDecision(
            question=build_question(player, groups),
            explanation=f"{len(undetermined)} undetermined card(s) in evaluation",
            priority_groups=groups,
        )
