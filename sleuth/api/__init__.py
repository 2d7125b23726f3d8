"""
API Module - HTTP interface to the deduction engine.

Clients:
1. Create a tracked or simulated session
2. Record observed turns (or let the simulator play)
3. Fetch the evaluation: knowledge matrix and deduced solution

All state is session-scoped and in memory.
"""

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
    SessionStatus,
    StrategyName,
    KnowledgeValue,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "CreateSimulatedSessionRequest",
    "TurnRequest",
    "SimulateRequest",
    # Responses
    "SessionResponse",
    "EvaluationResponse",
    "TurnResponse",
    "SimulateResponse",
    "CatalogResponse",
    "ErrorResponse",
    # Shared
    "CardInfo",
    "PlayerInfo",
    "TurnInfo",
    "MatrixRow",
    # Enums
    "ErrorCode",
    "SessionStatus",
    "StrategyName",
    "KnowledgeValue",
    # Service
    "APIService",
    "create_app",
]
