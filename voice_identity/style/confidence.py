"""Profile confidence model.

Scores how much a voice profile can be trusted from the volume, repetition,
diversity and temporal spread of the samples behind it, and derives the
modulation multipliers that the scorer and the classifier apply.

Every modulation interpolates linearly through the medium band, so there is
no discontinuity at either band boundary.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Optional

from ..models import ConfidenceBand, SourceType

WORD_HALF_LIFE = 2000
SAMPLE_HALF_LIFE = 5

TEMPORAL_MINIMUM_SECONDS = 60 * 60
TEMPORAL_FULL_CREDIT_SECONDS = 14 * 24 * 60 * 60

LOW_CEILING = 0.4
HIGH_FLOOR = 0.7

MAX_SOURCE_TYPES = len(SourceType)
DISTINCT_DOCUMENTS_FOR_FULL_CREDIT = 5


@dataclass
class DiversityInputs:
    """Sample bookkeeping that feeds the diversity score."""
    sample_count: int = 0
    unique_source_ids: int = 0
    source_type_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def unique_source_types(self) -> int:
        return sum(1 for count in self.source_type_counts.values() if count > 0)


@dataclass
class ConfidenceComponents:
    word_confidence: float
    sample_confidence: float
    diversity_score: float
    temporal_spread: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "word_confidence": self.word_confidence,
            "sample_confidence": self.sample_confidence,
            "diversity_score": self.diversity_score,
            "temporal_spread": self.temporal_spread,
        }


@dataclass
class ProfileConfidence:
    overall: float
    band: ConfidenceBand
    components: ConfidenceComponents

    def to_dict(self) -> Dict:
        return {
            "overall": self.overall,
            "band": self.band.value,
            "components": self.components.to_dict(),
        }


@dataclass(frozen=True)
class ThresholdModulation:
    """Multipliers for the enforcement floors. All converge to 1.0."""
    stylistic_relaxation: float
    semantic_tightening: float
    stylistic_warning_relaxation: float
    drift_sensitivity: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "stylistic_relaxation": self.stylistic_relaxation,
            "semantic_tightening": self.semantic_tightening,
            "stylistic_warning_relaxation": self.stylistic_warning_relaxation,
            "drift_sensitivity": self.drift_sensitivity,
        }


@dataclass(frozen=True)
class ScoringModulation:
    """Multipliers for the combined-score weights."""
    semantic: float
    stylistic: float
    scope: float


def classify_band(confidence: float) -> ConfidenceBand:
    if confidence < LOW_CEILING:
        return ConfidenceBand.LOW
    if confidence >= HIGH_FLOOR:
        return ConfidenceBand.HIGH
    return ConfidenceBand.MEDIUM


def _saturating(value: float, half_life: float) -> float:
    if value <= 0:
        return 0.0
    return 1.0 - math.exp(-value / half_life)


def diversity_score(inputs: DiversityInputs) -> float:
    """Source variety plus Shannon evenness of the source-type mix."""
    if inputs.sample_count <= 1:
        return 0.0

    type_variety = min(1.0, inputs.unique_source_types / MAX_SOURCE_TYPES)
    document_variety = min(1.0, inputs.unique_source_ids / DISTINCT_DOCUMENTS_FOR_FULL_CREDIT)

    counts = [c for c in inputs.source_type_counts.values() if c > 0]
    evenness = 0.0
    if len(counts) > 1:
        total = sum(counts)
        entropy = -sum((c / total) * math.log2(c / total) for c in counts)
        evenness = entropy / math.log2(len(counts))

    return type_variety * 0.3 + document_variety * 0.4 + evenness * 0.3


def temporal_spread(oldest_at: Optional[float], newest_at: Optional[float]) -> float:
    """Zero below an hour of spread, full credit at two weeks."""
    if oldest_at is None or newest_at is None:
        return 0.0
    span = newest_at - oldest_at
    if span < TEMPORAL_MINIMUM_SECONDS:
        return 0.0
    return min(1.0, span / TEMPORAL_FULL_CREDIT_SECONDS)


def compute_confidence(
    total_word_count: int,
    sample_count: int,
    diversity: DiversityInputs,
    oldest_sample_at: Optional[float],
    newest_sample_at: Optional[float],
) -> ProfileConfidence:
    """Compute the overall profile confidence and its components.

    Both volume and repetition are required: the floor term is the smaller
    of word and sample confidence. Diversity and temporal spread only scale
    that floor.
    """
    word_confidence = _saturating(total_word_count, WORD_HALF_LIFE)
    sample_confidence = _saturating(sample_count, SAMPLE_HALF_LIFE)
    diversity_value = diversity_score(diversity)
    spread = temporal_spread(oldest_sample_at, newest_sample_at)

    floor = min(word_confidence, sample_confidence)
    overall = min(1.0, floor * (0.6 + 0.4 * diversity_value) * (0.8 + 0.2 * spread))

    return ProfileConfidence(
        overall=overall,
        band=classify_band(overall),
        components=ConfidenceComponents(
            word_confidence=word_confidence,
            sample_confidence=sample_confidence,
            diversity_score=diversity_value,
            temporal_spread=spread,
        ),
    )


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def _band_position(confidence: float) -> float:
    """0 in the low band, 1 in the high band, linear in between."""
    if confidence < LOW_CEILING:
        return 0.0
    return max(0.0, min(1.0, (confidence - LOW_CEILING) / (HIGH_FLOOR - LOW_CEILING)))


def threshold_modulation(confidence: float) -> ThresholdModulation:
    t = _band_position(confidence)
    return ThresholdModulation(
        stylistic_relaxation=_lerp(0.75, 1.0, t),
        semantic_tightening=_lerp(1.08, 1.0, t),
        stylistic_warning_relaxation=_lerp(0.80, 1.0, t),
        drift_sensitivity=_lerp(1.06, 1.0, t),
    )


def scoring_modulation(confidence: float) -> ScoringModulation:
    t = _band_position(confidence)
    return ScoringModulation(
        semantic=_lerp(1.25, 1.0, t),
        stylistic=_lerp(0.70, 1.0, t),
        scope=_lerp(1.05, 1.0, t),
    )


def feature_sensitivity(confidence: float) -> float:
    """Stylistic feature sensitivity in [0.6, 1.0]."""
    return _lerp(0.60, 1.0, _band_position(confidence))
