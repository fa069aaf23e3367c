"""Voice identity engine for AI-assisted editing.

Extracts deterministic style fingerprints, evolves author voice profiles,
scores rewrites for meaning, style and scope, and enforces the author's
voice over multi-candidate refinements.
"""

from .engine import VoiceEngine
from .errors import (
    VoiceEngineError,
    GenerationError,
    RunNotFoundError,
    RunAccessError,
    RunSupersededError,
    TryAgainLimitError,
)
from .models import (
    EditorialMode,
    EnforcementClass,
    EnforcementOutcome,
    PreferenceSource,
    SourceType,
    TenantContext,
    VoiceScores,
)
from .generation.orchestrator import RefinementResult, CandidateMetadata

__version__ = "0.1.0"

__all__ = [
    "VoiceEngine",
    "VoiceEngineError",
    "GenerationError",
    "RunNotFoundError",
    "RunAccessError",
    "RunSupersededError",
    "TryAgainLimitError",
    "EditorialMode",
    "EnforcementClass",
    "EnforcementOutcome",
    "PreferenceSource",
    "SourceType",
    "TenantContext",
    "VoiceScores",
    "RefinementResult",
    "CandidateMetadata",
]
