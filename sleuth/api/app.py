"""
FastAPI Application - REST API for deduction sessions.

Endpoints:
    POST   /api/v1/sessions                    Track a real game
    POST   /api/v1/sessions/simulated          Start a simulated game
    GET    /api/v1/sessions                    List active sessions
    GET    /api/v1/sessions/{id}               Get session status
    DELETE /api/v1/sessions/{id}               End session
    POST   /api/v1/sessions/{id}/turns         Record an observed turn
    POST   /api/v1/sessions/{id}/simulate      Play simulated rounds
    GET    /api/v1/sessions/{id}/evaluation    Knowledge matrix and solution
    GET    /api/v1/catalogs/{name}             Cards of a built-in catalog

Evaluation is recomputed from the full turn log on every request.
All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Union
import os

# Environment configuration
SLEUTH_ENV = os.getenv("SLEUTH_ENV", "development")
SLEUTH_CATALOG = os.getenv("SLEUTH_CATALOG", "standard")
SLEUTH_MAX_ROUNDS = int(os.getenv("SLEUTH_MAX_ROUNDS", "100"))
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    from fastapi import FastAPI, Query
    from fastapi.middleware.cors import CORSMiddleware
    from fastapi.responses import JSONResponse

    from .. import __version__
    from ..catalog import BUILTIN_CATALOGS, CatalogError, CatalogNotFoundError
    from ..engine_core import (
        DeductionError,
        GameConfigurationError,
        InconsistentKnowledgeError,
        SleuthError,
    )
    from .service import APIService
    from .schemas import (
        # Request models
        CreateSessionRequest,
        CreateSimulatedSessionRequest,
        TurnRequest,
        SimulateRequest,
        # Response models
        SessionResponse,
        EvaluationResponse,
        TurnResponse,
        SimulateResponse,
        CatalogResponse,
        ErrorResponse,
        SessionListResponse,
        EndSessionResponse,
        HealthResponse,
        # Enums
        ErrorCode,
    )

    app = FastAPI(
        title="Sleuth Deduction API",
        description="""
Deduction engine for Cluedo-style games.

## Tracked and simulated sessions

- **Tracked**: report every observed question and answer via `POST /turns`.
  An answer with a single card means that card was shown; an answer with all
  three asked cards means some card was shown but not which one.
- **Simulated**: the server deals a hidden game and plays it via `POST /simulate`.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `INVALID_CONFIGURATION` | Players or cards do not form a valid game |
| `INVALID_TURN` | Turn names unknown players or cards |
| `CATALOG_ERROR` | Catalog missing or malformed |
| `NOT_SIMULATED` | Session has no simulator |
| `INCONSISTENT_KNOWLEDGE` | Recorded turns contradict each other |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService(
        default_catalog=SLEUTH_CATALOG,
        max_rounds=SLEUTH_MAX_ROUNDS,
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: dict | None = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def not_found_response(response: ErrorResponse) -> JSONResponse:
        status_code = 404 if response.error_code == ErrorCode.SESSION_NOT_FOUND else 400
        return make_error_response(response.error_code, response.error, status_code=status_code)

    def engine_error_response(error: SleuthError) -> JSONResponse:
        """Map engine exceptions to error codes."""
        if isinstance(error, CatalogNotFoundError):
            return make_error_response(ErrorCode.CATALOG_ERROR, str(error), status_code=404)
        if isinstance(error, CatalogError):
            return make_error_response(
                ErrorCode.CATALOG_ERROR,
                str(error),
                details={"errors": getattr(error, "errors", [])},
            )
        if isinstance(error, InconsistentKnowledgeError):
            details = {}
            if error.player is not None:
                details["player"] = error.player.name
            if error.card is not None:
                details["card"] = error.card.id
            return make_error_response(
                ErrorCode.INCONSISTENT_KNOWLEDGE,
                str(error),
                status_code=409,
                details=details or None,
            )
        if isinstance(error, GameConfigurationError):
            return make_error_response(ErrorCode.INVALID_CONFIGURATION, str(error))
        if isinstance(error, DeductionError):
            return make_error_response(ErrorCode.INTERNAL_ERROR, str(error), status_code=500)
        return make_error_response(ErrorCode.VALIDATION_ERROR, str(error))

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={400: {"model": ErrorResponse, "description": "Invalid players or cards"}},
        tags=["Sessions"],
        summary="Track a real game",
    )
    async def create_session(body: CreateSessionRequest) -> Union[SessionResponse, JSONResponse]:
        """
        Start tracking a game from the viewpoint player's seat.

        Players are listed in turn order; positions are their list indices.
        """
        try:
            return api_service.create_session(body)
        except SleuthError as e:
            return engine_error_response(e)
        except KeyError as e:
            return make_error_response(
                ErrorCode.INVALID_CONFIGURATION,
                f"Unknown card: {e.args[0]}",
            )

    @app.post(
        "/api/v1/sessions/simulated",
        response_model=SessionResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Start a simulated game",
    )
    async def create_simulated_session(
        body: CreateSimulatedSessionRequest,
    ) -> Union[SessionResponse, JSONResponse]:
        """Deal a hidden game (reproducible with `seed`) and track it."""
        try:
            return api_service.create_simulated_session(body)
        except SleuthError as e:
            return engine_error_response(e)

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        """List all active session IDs."""
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Get the current status of a session."""
        response = api_service.get_session(session_id)
        if isinstance(response, ErrorResponse):
            return not_found_response(response)
        return response

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a session",
    )
    async def end_session(
        session_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "completed",
    ) -> EndSessionResponse:
        """End a session and release it."""
        success = api_service.end_session(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Turn and Evaluation Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/turns",
        response_model=TurnResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Invalid turn"},
            404: {"model": ErrorResponse, "description": "Session not found"},
        },
        tags=["Game"],
        summary="Record an observed turn",
    )
    async def add_turn(session_id: str, body: TurnRequest) -> Union[TurnResponse, JSONResponse]:
        """
        Record a question and its answer.

        Omit `answering_position` when nobody could answer.
        """
        try:
            response = api_service.add_turn(session_id, body)
        except SleuthError as e:
            return engine_error_response(e)
        except KeyError as e:
            return make_error_response(
                ErrorCode.INVALID_TURN,
                f"Unknown player or card: {e.args[0]}",
            )
        except ValueError as e:
            return make_error_response(ErrorCode.INVALID_TURN, str(e))

        if isinstance(response, ErrorResponse):
            return not_found_response(response)
        return response

    @app.get(
        "/api/v1/sessions/{session_id}/evaluation",
        response_model=EvaluationResponse,
        responses={
            404: {"model": ErrorResponse, "description": "Session not found"},
            409: {"model": ErrorResponse, "description": "Turns contradict each other"},
        },
        tags=["Game"],
        summary="Evaluate all recorded turns",
    )
    async def get_evaluation(
        session_id: str,
        render: Annotated[bool, Query(description="Include a text rendering of the matrix")] = False,
    ) -> Union[EvaluationResponse, JSONResponse]:
        """Knowledge matrix (values in player order per card) and deduced solution."""
        try:
            response = api_service.get_evaluation(session_id, render=render)
        except SleuthError as e:
            return engine_error_response(e)

        if isinstance(response, ErrorResponse):
            return not_found_response(response)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/simulate",
        response_model=SimulateResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Session is not simulated"},
            404: {"model": ErrorResponse, "description": "Session not found"},
        },
        tags=["Game"],
        summary="Play simulated rounds",
    )
    async def simulate(
        session_id: str,
        body: SimulateRequest | None = None,
    ) -> Union[SimulateResponse, JSONResponse]:
        """
        Let the simulator play up to `rounds` turns.

        The ground truth is included once the solution has been deduced.
        """
        try:
            response = api_service.simulate(session_id, body or SimulateRequest())
        except SleuthError as e:
            return engine_error_response(e)

        if isinstance(response, ErrorResponse):
            return not_found_response(response)
        return response

    # =========================================================================
    # Catalog Endpoint
    # =========================================================================

    @app.get(
        "/api/v1/catalogs/{name}",
        response_model=CatalogResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Catalogs"],
        summary="List the cards of a built-in catalog",
    )
    async def get_catalog(name: str) -> Union[CatalogResponse, JSONResponse]:
        if name not in BUILTIN_CATALOGS:
            return make_error_response(
                ErrorCode.CATALOG_ERROR,
                f"Unknown catalog: {name}",
                status_code=404,
                details={"available": sorted(BUILTIN_CATALOGS)},
            )
        try:
            return api_service.describe_catalog(name)
        except SleuthError as e:
            return engine_error_response(e)

    # =========================================================================
    # System Endpoints
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="sleuth-engine",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Sleuth Deduction API",
            "version": __version__,
            "environment": SLEUTH_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn sleuth.api.app:app
app = create_app()
