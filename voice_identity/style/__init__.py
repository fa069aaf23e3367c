"""Fingerprint extraction, blending and profile confidence."""

from .fingerprint import Fingerprint, PunctuationFrequencies, LexicalEntry
from .extractor import extract_fingerprint, MIN_WORDS_FOR_FINGERPRINT
from .blender import blend_fingerprints, AlphaDetails, BlendResult, ALPHA_MIN, ALPHA_MAX
from .confidence import (
    compute_confidence,
    classify_band,
    threshold_modulation,
    scoring_modulation,
    feature_sensitivity,
    DiversityInputs,
    ProfileConfidence,
    ThresholdModulation,
    ScoringModulation,
)

__all__ = [
    "Fingerprint",
    "PunctuationFrequencies",
    "LexicalEntry",
    "extract_fingerprint",
    "MIN_WORDS_FOR_FINGERPRINT",
    "blend_fingerprints",
    "AlphaDetails",
    "BlendResult",
    "ALPHA_MIN",
    "ALPHA_MAX",
    "compute_confidence",
    "classify_band",
    "threshold_modulation",
    "scoring_modulation",
    "feature_sensitivity",
    "DiversityInputs",
    "ProfileConfidence",
    "ThresholdModulation",
    "ScoringModulation",
]
