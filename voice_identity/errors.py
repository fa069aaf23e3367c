"""Exceptions raised by the voice identity engine."""


class VoiceEngineError(Exception):
    """Base exception for engine errors."""
    pass


class GenerationError(VoiceEngineError):
    """Raised when a candidate could not be generated.

    Nothing is persisted for a refinement that fails this way.
    """

    def __init__(self, message: str, variation_key: str = ""):
        super().__init__(message)
        self.variation_key = variation_key


class RunNotFoundError(VoiceEngineError):
    """Raised when a run id doesn't exist."""
    pass


class RunAccessError(VoiceEngineError):
    """Raised when a user asks for a run that belongs to someone else."""
    pass


class RunSupersededError(VoiceEngineError):
    """Raised when try-again targets a run replaced by a newer refinement."""
    pass


class TryAgainLimitError(VoiceEngineError):
    """Raised when a run chain has used up its fresh generations."""
    pass
