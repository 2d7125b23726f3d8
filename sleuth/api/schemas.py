"""
Pydantic Schemas for API - Request/response models for OpenAPI.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has ended
- INVALID_CONFIGURATION: Players or cards do not form a valid game
- INVALID_TURN: A reported turn names unknown players or cards
- CATALOG_ERROR: The card catalog is missing or malformed
- NOT_SIMULATED: Simulation requested on a tracked session
- INCONSISTENT_KNOWLEDGE: The recorded turns contradict each other
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


API_VERSION = "v1"


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    ACTIVE = "active"
    SOLVED = "solved"


class StrategyName(str, Enum):
    """Question strategies for simulated sessions."""
    BASIC = "basic"
    EVALUATION_BASED = "evaluation_based"


class KnowledgeValue(str, Enum):
    """Matrix cell values."""
    YES = "yes"
    NO = "no"
    NOT_CLEAR = "not_clear"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"
    INVALID_TURN = "INVALID_TURN"
    CATALOG_ERROR = "CATALOG_ERROR"
    NOT_SIMULATED = "NOT_SIMULATED"
    INCONSISTENT_KNOWLEDGE = "INCONSISTENT_KNOWLEDGE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """Card information for display."""
    card_id: str
    category: str
    name: str

    model_config = {"from_attributes": True}


class PlayerInfo(BaseModel):
    """Player information for display."""
    position: int
    name: str
    is_viewpoint: bool = False

    model_config = {"from_attributes": True}


class TurnInfo(BaseModel):
    """A recorded turn."""
    sequence_number: int
    asking_player: str
    cards: list[str]
    answering_player: Optional[str] = None
    answer_cards: list[str] = Field(default_factory=list)


class MatrixRow(BaseModel):
    """One card's row of the knowledge matrix, values in player order."""
    card_id: str
    category: str
    values: list[KnowledgeValue]


# =============================================================================
# Requests
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Start tracking a real game."""
    catalog: Optional[str] = Field(default=None, description="Built-in catalog name or file path")
    players: list[str] = Field(min_length=2, description="Player names in turn order")
    viewpoint_position: int = Field(default=0, ge=0, description="Position of the deducing player")
    own_cards: list[str] = Field(min_length=1, description="Card ids in the viewpoint player's hand")
    leftover_cards: list[str] = Field(default_factory=list, description="Card ids dealt to nobody")
    name: Optional[str] = None


class CreateSimulatedSessionRequest(BaseModel):
    """Start a simulated game with a generated ground truth."""
    catalog: Optional[str] = None
    players: list[str] = Field(
        default_factory=lambda: ["Anna", "Ben", "Chris", "Daniel", "Emil"],
        min_length=2,
    )
    viewpoint_position: int = Field(default=0, ge=0)
    strategy: StrategyName = StrategyName.EVALUATION_BASED
    seed: Optional[int] = None
    name: Optional[str] = None


class TurnRequest(BaseModel):
    """An observed turn."""
    asking_position: int = Field(ge=0)
    cards: list[str] = Field(min_length=3, max_length=3)
    answering_position: Optional[int] = Field(default=None, ge=0, description="Omit if nobody answered")
    answer_cards: list[str] = Field(
        default_factory=list,
        description="The shown card, or all asked cards if it is unknown which one was shown",
    )


class SimulateRequest(BaseModel):
    """Advance a simulated session."""
    rounds: int = Field(default=1, ge=1, le=500)
    stop_when_solved: bool = True


# =============================================================================
# Responses
# =============================================================================

class ErrorResponse(BaseModel):
    """Error response for any 4xx or 5xx status."""
    error: str
    error_code: ErrorCode
    details: Optional[dict[str, Any]] = None
    api_version: str = API_VERSION


class SessionResponse(BaseModel):
    """Session information."""
    session_id: str
    status: SessionStatus
    game_name: str
    simulated: bool = False
    players: list[PlayerInfo] = Field(default_factory=list)
    turn_count: int = 0
    created_at: float = 0.0
    api_version: str = API_VERSION


class EvaluationResponse(BaseModel):
    """Knowledge matrix and deduced solution."""
    session_id: str
    status: SessionStatus
    turn_count: int
    players: list[PlayerInfo]
    matrix: list[MatrixRow]
    solution_cards: list[CardInfo] = Field(default_factory=list)
    solution_found: bool = False
    not_clear_count: int = 0
    rendered: Optional[str] = None
    api_version: str = API_VERSION


class TurnResponse(BaseModel):
    """A turn was recorded."""
    session_id: str
    turn: TurnInfo
    api_version: str = API_VERSION


class SimulateResponse(BaseModel):
    """Turns played by the simulator and the evaluation afterwards."""
    session_id: str
    rounds_played: int
    turns: list[TurnInfo] = Field(default_factory=list)
    evaluation: EvaluationResponse
    expected_solution: Optional[list[CardInfo]] = None
    api_version: str = API_VERSION


class CatalogResponse(BaseModel):
    """Cards of a catalog."""
    name: str
    count: int
    cards: list[CardInfo]
    api_version: str = API_VERSION


class SessionListResponse(BaseModel):
    """Active session ids."""
    sessions: list[str]
    count: int
    api_version: str = API_VERSION


class EndSessionResponse(BaseModel):
    """Result of ending a session."""
    success: bool
    session_id: str
    api_version: str = API_VERSION


class HealthResponse(BaseModel):
    """Health check."""
    status: str
    service: str
    version: str
