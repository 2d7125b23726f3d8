"""
Errors - Exception taxonomy for the engine.

Every failure is a programming or configuration error, never a transient
fault. Nothing is retried; errors propagate to the caller.
"""


class SleuthError(Exception):
    """Base class for all engine errors."""


class GameConfigurationError(SleuthError):
    """Raised when a game is set up with invalid players or cards."""


class DataSetError(GameConfigurationError):
    """Raised when a simulated data set cannot be built or is incomplete."""


class StrategyUsageError(SleuthError):
    """Raised when a question strategy is used without its prerequisites."""


class InconsistentKnowledgeError(SleuthError):
    """
    Raised when a matrix cell would have to be both YES and NO.

    Signals a propagation bug or corrupted turn input.
    """

    def __init__(self, message: str, player=None, card=None):
        self.player = player
        self.card = card
        super().__init__(message)


class DeductionError(SleuthError):
    """Raised when propagation does not reach a fixpoint within its bound."""
