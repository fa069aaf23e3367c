"""Candidate generation, selection and the refinement orchestrator."""

from .modes import EDITORIAL_MODES, EditorialModeConfig, get_mode_config, prompt_version
from .nudges import NUDGE_DIRECTIONS, Nudge, apply_nudge, validate_nudge
from .preferences import (
    AggregatedPreferences,
    aggregate_signals,
    augment_prompt,
    build_preference_suffix,
    extract_preference_signals,
)
from .variations import Variation, get_variation_pair, get_variation_cycle_count
from .selection import SELECTION_WEIGHTS, selection_score, select_best, select_final
from .orchestrator import (
    CandidateMetadata,
    RefinementOrchestrator,
    RefinementResult,
    ScoredCandidate,
)

__all__ = [
    "EDITORIAL_MODES",
    "EditorialModeConfig",
    "get_mode_config",
    "prompt_version",
    "NUDGE_DIRECTIONS",
    "Nudge",
    "apply_nudge",
    "validate_nudge",
    "AggregatedPreferences",
    "aggregate_signals",
    "augment_prompt",
    "build_preference_suffix",
    "extract_preference_signals",
    "Variation",
    "get_variation_pair",
    "get_variation_cycle_count",
    "SELECTION_WEIGHTS",
    "selection_score",
    "select_best",
    "select_final",
    "CandidateMetadata",
    "RefinementOrchestrator",
    "RefinementResult",
    "ScoredCandidate",
]
