"""
Engine Core - Deduction over a hidden-information card game.

The engine:
1. Takes the players, the card catalog, the leftover cards and the
   viewpoint player's own hand
2. Builds the initial knowledge matrix
3. Replays the turn history through fixpoint propagation
4. Reports the matrix and the deduced solution cards
"""

from .cards import Card, CardCategory, cards_by_category, first_card_per_category, sort_cards
from .players import Player, next_player, players_between, sort_by_position, viewpoint_player
from .turns import Question, Answer, Turn, TurnLog
from .knowledge import (
    HasCard,
    KnowledgeMatrix,
    player_cards,
    player_card_set,
    player_card_map,
    non_player_cards,
    not_clear_cards,
    complete_excluded_cards,
    other_player_cards_in_reverse_order,
    count_state,
)
from .evaluator import DeductionEngine, EvaluationResult
from .render import render_matrix, log_matrix
from .errors import (
    SleuthError,
    GameConfigurationError,
    DataSetError,
    StrategyUsageError,
    InconsistentKnowledgeError,
    DeductionError,
)

__all__ = [
    "Card",
    "CardCategory",
    "cards_by_category",
    "first_card_per_category",
    "sort_cards",
    "Player",
    "next_player",
    "players_between",
    "sort_by_position",
    "viewpoint_player",
    "Question",
    "Answer",
    "Turn",
    "TurnLog",
    "HasCard",
    "KnowledgeMatrix",
    "player_cards",
    "player_card_set",
    "player_card_map",
    "non_player_cards",
    "not_clear_cards",
    "complete_excluded_cards",
    "other_player_cards_in_reverse_order",
    "count_state",
    "DeductionEngine",
    "EvaluationResult",
    "render_matrix",
    "log_matrix",
    "SleuthError",
    "GameConfigurationError",
    "DataSetError",
    "StrategyUsageError",
    "InconsistentKnowledgeError",
    "DeductionError",
]
