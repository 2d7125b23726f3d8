"""
Game Simulator - Plays rounds against a known ground truth.

One round:
1. Pick the active player (round index mod player count)
2. Let that player's policy choose a question
3. Resolve the answer from the data set
4. Hand back (question, answer) to be appended to the turn log

Answer resolution hides information the way the real table does: the
viewpoint player sees which card was shown to them, everybody else only
sees that some card of the question was shown.
"""

from __future__ import annotations
import logging
import random
from typing import Sequence

from ..engine_core.evaluator import EvaluationResult
from ..engine_core.players import next_player, sort_by_position
from ..engine_core.turns import Answer, Question, Turn
from .dataset import GameDataSet
from .strategy import (
    BasicQuestionPolicy,
    EvaluationQuestionPolicy,
    QuestionDecision,
    QuestionStrategy,
    TableInfo,
)


class GameSimulator:
    """
    Simulates turns for one game.

    Not shared between games: each game gets its own simulator and its
    own random source.
    """

    def __init__(
        self,
        data_set: GameDataSet,
        rng: random.Random | None = None,
        diagnostics: logging.Logger | None = None,
    ):
        self.data_set = data_set
        self.rng = rng or random.Random()
        self.diagnostics = diagnostics
        self.players = tuple(sort_by_position(data_set.players))
        self.table = TableInfo(
            players=self.players,
            all_cards=data_set.all_cards,
            leftover_cards=data_set.leftover_cards,
            hand_size=data_set.hand_size,
        )
        self._basic_policy = BasicQuestionPolicy(rng=self.rng)
        self._evaluation_policy = EvaluationQuestionPolicy(rng=self.rng)
        data_set.log(diagnostics)

    def next_turn(
        self,
        previous_turns: Sequence[Turn],
        strategy: QuestionStrategy = QuestionStrategy.BASIC,
        evaluation_result: EvaluationResult | None = None,
    ) -> tuple[Question, Answer | None]:
        """
        Generate and resolve the next question.

        EVALUATION_BASED only applies to the viewpoint player's turns, and
        then requires `evaluation_result`. Everybody else asks with the
        basic policy.
        """
        round_index = len(previous_turns)
        active_player = self.players[round_index % len(self.players)]
        own_cards = self.data_set.player_cards.get(active_player, frozenset())

        if active_player.is_viewpoint and strategy == QuestionStrategy.EVALUATION_BASED:
            policy = self._evaluation_policy
        else:
            policy = self._basic_policy

        decision = policy.select_question(
            active_player,
            own_cards,
            self.table,
            previous_turns,
            evaluation_result=evaluation_result,
        )
        answer = self.resolve_answer(decision.question)

        if active_player.is_viewpoint:
            self._log_turn(round_index, decision, answer)

        return decision.question, answer

    def resolve_answer(self, question: Question) -> Answer | None:
        """
        Ask around the table, starting after the asker.

        The first other player holding any asked card answers. The viewpoint
        player learns the exact card; for everybody else the answer is the
        whole question.
        """
        asker = question.asking_player
        start = next_player(self.players, asker)
        for player in sort_by_position(self.players, start):
            if player == asker:
                continue
            hand = self.data_set.player_cards.get(player, frozenset())
            shown = next((card for card in question.ordered_cards if card in hand), None)
            if shown is None:
                continue
            if asker.is_viewpoint:
                return Answer(answering_player=player, cards=frozenset({shown}))
            return Answer(answering_player=player, cards=question.cards)
        return None

    def _log_turn(self, round_index: int, decision: QuestionDecision, answer: Answer | None):
        if self.diagnostics is None:
            return
        for idx, group in enumerate(decision.priority_groups):
            self.diagnostics.debug("[P%d](%d): %s", idx, len(group), [c.id for c in group])
        question = decision.question
        self.diagnostics.debug(
            "[Question](%d): %s -> %s",
            round_index,
            question.asking_player.name.ljust(10),
            [c.id for c in question.ordered_cards],
        )
        self.diagnostics.debug(
            "[Answer](%d)  : %s -> %s",
            round_index,
            (answer.answering_player.name if answer else "-").ljust(10),
            sorted(c.id for c in answer.cards) if answer else [],
        )
