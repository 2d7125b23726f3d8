"""
Game Driver - The round-robin loop around session and simulator.

Each round:
1. Evaluate the session
2. Stop if all three solution cards are known
3. Otherwise simulate the next turn and append it

The round cap is a safety limit, not part of the deduction.
Batches run many independent games, optionally on a thread pool; every
game owns its session, simulator and random source.
"""

from __future__ import annotations
import logging
import random
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from ..engine_core.cards import Card, sort_cards
from ..engine_core.evaluator import EvaluationResult
from ..engine_core.players import Player
from ..engine_core.render import log_matrix
from ..simulator import GameDataSet, GameSimulator, QuestionStrategy
from .game import GameSession

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROUNDS = 100


@dataclass
class GameOutcome:
    """
    Result of driving one game.

    `rounds` is the number of turns played before the solution was known
    (or the round cap, if it never was).
    """
    found: bool
    rounds: int
    result: EvaluationResult
    expected_solution: frozenset[Card] | None = None
    strategy: QuestionStrategy = QuestionStrategy.BASIC

    @property
    def solution_cards(self) -> frozenset[Card]:
        return self.result.solution_cards

    @property
    def correct(self) -> bool | None:
        """Whether a found solution matches the ground truth (None if unknown)."""
        if self.expected_solution is None or not self.found:
            return None
        return self.solution_cards == self.expected_solution


@dataclass
class BatchStats:
    """Round statistics over many simulated games."""
    strategy: QuestionStrategy
    games: int
    rounds: list[int] = field(default_factory=list)
    unsolved: int = 0
    mismatches: int = 0

    @property
    def average(self) -> float:
        return sum(self.rounds) / len(self.rounds) if self.rounds else 0.0

    @property
    def median(self) -> int:
        return sorted(self.rounds)[len(self.rounds) // 2] if self.rounds else 0

    @property
    def minimum(self) -> int:
        return min(self.rounds) if self.rounds else 0

    @property
    def maximum(self) -> int:
        return max(self.rounds) if self.rounds else 0

    def summary(self) -> str:
        return (
            f"[{self.strategy.value}] Executed {self.games} games with "
            f"AVG({self.average:.2f}) / MED({self.median}) / "
            f"MIN({self.minimum}) / MAX({self.maximum}); "
            f"unsolved={self.unsolved}, mismatches={self.mismatches}"
        )


def run_game(
    game: GameSession,
    simulator: GameSimulator,
    strategy: QuestionStrategy = QuestionStrategy.EVALUATION_BASED,
    max_rounds: int = DEFAULT_MAX_ROUNDS,
) -> GameOutcome:
    """
    Play rounds until the solution is known or the round cap is hit.

    With diagnostics on the session, the matrix is logged after every round
    and its tallies once more when the solution is known.
    """
    result = game.evaluate()
    for round_index in range(max_rounds):
        if result.solution_found:
            log_matrix(
                game.diagnostics, result.matrix, only_stats=True, caption=f"Solved({round_index})"
            )
            return GameOutcome(
                found=True,
                rounds=round_index,
                result=result,
                expected_solution=simulator.data_set.solution_cards,
                strategy=strategy,
            )
        question, answer = simulator.next_turn(
            previous_turns=game.turns,
            strategy=strategy,
            evaluation_result=result,
        )
        game.add_turn(question, answer)
        result = game.evaluate()
        log_matrix(game.diagnostics, result.matrix, caption=f"Round({round_index})")

    return GameOutcome(
        found=result.solution_found,
        rounds=max_rounds,
        result=result,
        expected_solution=simulator.data_set.solution_cards,
        strategy=strategy,
    )


def create_simulated_game(
    cards: Iterable[Card],
    players: Sequence[Player],
    rng: random.Random | None = None,
    name: str = "Simulated Game",
    diagnostics: logging.Logger | None = None,
) -> tuple[GameSession, GameSimulator]:
    """Deal a data set and build the matching session and simulator."""
    rng = rng or random.Random()
    data_set = GameDataSet.generate_default(cards, players, shuffled=True, rng=rng)
    simulator = GameSimulator(data_set, rng=rng, diagnostics=diagnostics)
    game = GameSession(
        players=data_set.players,
        all_cards=data_set.all_cards,
        leftover_cards=data_set.leftover_cards,
        own_cards=data_set.own_cards(),
        name=name,
        diagnostics=diagnostics,
    )
    return game, simulator


def run_simulated_game(
    cards: Iterable[Card],
    players: Sequence[Player],
    strategy: QuestionStrategy = QuestionStrategy.EVALUATION_BASED,
    max_rounds: int = DEFAULT_MAX_ROUNDS,
    seed: int | None = None,
    diagnostics: logging.Logger | None = None,
) -> GameOutcome:
    """Deal and play one simulated game."""
    game, simulator = create_simulated_game(
        cards, players, rng=random.Random(seed), diagnostics=diagnostics
    )
    outcome = run_game(game, simulator, strategy=strategy, max_rounds=max_rounds)
    if outcome.found:
        logger.debug(
            "Solution found in turn(%d): %s",
            outcome.rounds,
            [card.id for card in sort_cards(outcome.solution_cards)],
        )
    return outcome


def run_batch(
    cards: Iterable[Card],
    players: Sequence[Player],
    games: int,
    strategy: QuestionStrategy = QuestionStrategy.EVALUATION_BASED,
    max_rounds: int = DEFAULT_MAX_ROUNDS,
    seed: int | None = None,
    workers: int = 1,
) -> BatchStats:
    """
    Play `games` independent games and collect round statistics.

    With a seed, game i uses seed + i, so batches are reproducible
    regardless of the worker count.
    """
    cards = frozenset(cards)
    players = tuple(players)
    seeds = [None if seed is None else seed + idx for idx in range(games)]

    def play(game_seed: int | None) -> GameOutcome:
        return run_simulated_game(
            cards, players, strategy=strategy, max_rounds=max_rounds, seed=game_seed
        )

    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            outcomes = list(executor.map(play, seeds))
    else:
        outcomes = [play(game_seed) for game_seed in seeds]

    stats = BatchStats(strategy=strategy, games=games)
    for outcome in outcomes:
        if not outcome.found:
            stats.unsolved += 1
            continue
        stats.rounds.append(outcome.rounds)
        if outcome.correct is False:
            stats.mismatches += 1

    logger.info(stats.summary())
    return stats
