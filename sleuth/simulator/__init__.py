"""
Simulator module - Simulated play against a generated ground truth.

Provides:
- GameDataSet: solution, leftovers and hands for one simulated game
- Question policies: basic (private view) and evaluation based
- GameSimulator: next question plus answer resolution
"""

from .dataset import GameDataSet
from .strategy import (
    QuestionStrategy,
    QuestionPolicy,
    QuestionDecision,
    BasicQuestionPolicy,
    EvaluationQuestionPolicy,
    PlayerEvaluationResult,
    TableInfo,
    perform_basic_player_evaluation,
    build_question,
)
from .simulator import GameSimulator

__all__ = [
    "GameDataSet",
    "QuestionStrategy",
    "QuestionPolicy",
    "QuestionDecision",
    "BasicQuestionPolicy",
    "EvaluationQuestionPolicy",
    "PlayerEvaluationResult",
    "TableInfo",
    "perform_basic_player_evaluation",
    "build_question",
    "GameSimulator",
]
