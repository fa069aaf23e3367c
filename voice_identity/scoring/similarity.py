"""Similarity sub-scores between an original text and a suggestion.

Each sub-score lies in [0, 1] where 1 means perfect preservation:

- semantic: embedding cosine similarity times a length-ratio penalty
- stylistic: weighted feature comparison against the target fingerprint
- scope: structural change measured against per-mode ratio bands

The combined score weighs the three per editorial mode, optionally shifted
toward meaning when the profile confidence is low.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .embeddings import Embedder, EmbeddingError, cosine_similarity
from ..models import EditorialMode
from ..style.confidence import feature_sensitivity, scoring_modulation
from ..style.fingerprint import Fingerprint
from ..utils.logging import get_logger
from ..utils.text import count_words

logger = get_logger(__name__)

# Relative feature weights. They are normalized by their total when scoring.
STYLISTIC_WEIGHTS: Dict[str, float] = {
    "avg_sentence_length": 0.12,
    "sentence_length_std_dev": 0.08,
    "avg_paragraph_length": 0.05,
    "punctuation": 0.14,
    "adjective_adverb_density": 0.06,
    "hedging_frequency": 0.08,
    "stopword_density": 0.04,
    "contraction_frequency": 0.10,
    "question_ratio": 0.05,
    "exclamation_ratio": 0.04,
    "vocabulary_richness": 0.06,
    "avg_word_length": 0.04,
    "readability_score": 0.06,
    "complexity_score": 0.04,
    "lexical_signature": 0.12,
}

# Absolute difference at which a scalar feature scores 0.
FEATURE_RANGES: Dict[str, float] = {
    "avg_sentence_length": 20,
    "sentence_length_std_dev": 15,
    "avg_paragraph_length": 8,
    "adjective_adverb_density": 0.15,
    "hedging_frequency": 0.5,
    "stopword_density": 0.2,
    "contraction_frequency": 0.08,
    "question_ratio": 0.3,
    "exclamation_ratio": 0.2,
    "vocabulary_richness": 0.3,
    "avg_word_length": 2.0,
    "readability_score": 10,
    "complexity_score": 1.0,
}

# (min, max) suggestion/original ratios for paragraphs, sentences, words.
SCOPE_BANDS: Dict[EditorialMode, Dict[str, Tuple[float, float]]] = {
    EditorialMode.COPY: {
        "paragraph_count": (0.95, 1.05),
        "sentence_count": (0.9, 1.1),
        "word_count": (0.9, 1.1),
    },
    EditorialMode.LINE: {
        "paragraph_count": (0.85, 1.15),
        "sentence_count": (0.75, 1.25),
        "word_count": (0.7, 1.15),
    },
    EditorialMode.DEVELOPMENTAL: {
        "paragraph_count": (0.6, 1.6),
        "sentence_count": (0.6, 1.6),
        "word_count": (0.6, 1.4),
    },
}

# Base (semantic, stylistic, scope) weights for the combined score.
MODE_WEIGHTS: Dict[EditorialMode, Tuple[float, float, float]] = {
    EditorialMode.COPY: (0.3, 0.4, 0.3),
    EditorialMode.LINE: (0.2, 0.65, 0.15),
    EditorialMode.DEVELOPMENTAL: (0.2, 0.65, 0.15),
}

EMBEDDING_FALLBACK_DISCOUNT = 0.85


@dataclass
class FeatureComparison:
    """One row of the stylistic breakdown."""
    feature: str
    raw: float
    dampened: float
    weight: float

    @property
    def weighted_loss(self) -> float:
        return (1.0 - self.dampened) * self.weight

    def to_dict(self) -> Dict:
        return {
            "feature": self.feature,
            "raw": self.raw,
            "dampened": self.dampened,
            "weight": self.weight,
            "weighted_loss": self.weighted_loss,
        }


def scalar_similarity(a: float, b: float, value_range: float) -> float:
    return max(0.0, 1.0 - abs(a - b) / value_range)


def lexical_signature_similarity(a: Dict[str, float], b: Dict[str, float]) -> float:
    """Frequency-weighted overlap of two word -> frequency maps."""
    words = set(a) | set(b)
    if not words:
        return 1.0

    total_sim = 0.0
    total_weight = 0.0
    for word in words:
        fa = a.get(word, 0.0)
        fb = b.get(word, 0.0)
        weight = max(fa, fb)
        if weight == 0:
            continue
        total_sim += (1.0 - abs(fa - fb) / weight) * weight
        total_weight += weight
    return total_sim / total_weight if total_weight > 0 else 1.0


def dampen(raw: float, sensitivity: float) -> float:
    """Push a similarity toward 1 as sensitivity drops."""
    return raw + (1.0 - raw) * (1.0 - sensitivity)


def explain_stylistic(
    suggestion: Fingerprint,
    target: Fingerprint,
    profile_confidence: Optional[float] = None,
) -> List[FeatureComparison]:
    """Per-feature stylistic comparison, largest weighted loss first."""
    sensitivity = feature_sensitivity(profile_confidence) if profile_confidence is not None else 1.0

    raw: Dict[str, float] = {
        name: scalar_similarity(getattr(suggestion, name), getattr(target, name), value_range)
        for name, value_range in FEATURE_RANGES.items()
    }
    raw["punctuation"] = cosine_similarity(
        suggestion.punctuation.as_vector(), target.punctuation.as_vector()
    )
    raw["lexical_signature"] = lexical_signature_similarity(
        suggestion.lexical_map(), target.lexical_map()
    )

    rows = [
        FeatureComparison(
            feature=name,
            raw=raw[name],
            dampened=dampen(raw[name], sensitivity),
            weight=weight,
        )
        for name, weight in STYLISTIC_WEIGHTS.items()
    ]
    return sorted(rows, key=lambda row: row.weighted_loss, reverse=True)


def compute_stylistic_score(
    suggestion: Fingerprint,
    target: Fingerprint,
    profile_confidence: Optional[float] = None,
) -> float:
    """Stylistic similarity of a suggestion to the target fingerprint.

    Args:
        suggestion: Fingerprint of the suggested text.
        target: Profile fingerprint, or the original's when no profile exists.
        profile_confidence: Profile confidence; None disables dampening.
    """
    rows = explain_stylistic(suggestion, target, profile_confidence)
    total_weight = sum(row.weight for row in rows)
    if total_weight == 0:
        return 1.0
    return sum(row.dampened * row.weight for row in rows) / total_weight


def _safe_ratio(a: float, b: float) -> float:
    if b == 0:
        return 1.0 if a == 0 else 0.0
    return a / b


def range_score(value: float, low: float, high: float) -> float:
    """1 inside [low, high], decaying linearly by the band width outside."""
    if low <= value <= high:
        return 1.0
    width = high - low
    if value < low:
        return max(0.0, 1.0 - (low - value) / width)
    return max(0.0, 1.0 - (value - high) / width)


def compute_scope_score(original: Fingerprint, suggestion: Fingerprint, mode: EditorialMode) -> float:
    """Mean of the paragraph, sentence and word ratio band scores."""
    bands = SCOPE_BANDS[mode]
    scores = [
        range_score(_safe_ratio(getattr(suggestion, name), getattr(original, name)), low, high)
        for name, (low, high) in bands.items()
    ]
    return sum(scores) / len(scores)


def semantic_length_penalty(original: str, suggestion: str) -> float:
    """Penalty for gross inflation or deflation of the word count."""
    original_words = count_words(original)
    ratio = count_words(suggestion) / original_words if original_words > 0 else 1.0

    if ratio > 1.5 or ratio < 0.5:
        return 0.7
    if ratio > 1.3 or ratio < 0.7:
        return 0.85
    return 1.0


def compute_semantic_score(original: str, suggestion: str, embedder: Embedder) -> Tuple[float, bool]:
    """Meaning preservation between the two texts.

    Embedding failures never propagate: the score falls back to the length
    penalty alone times ``EMBEDDING_FALLBACK_DISCOUNT``.

    Returns:
        (score, used_fallback)
    """
    penalty = semantic_length_penalty(original, suggestion)
    try:
        vectors = embedder.embed([original, suggestion])
    except EmbeddingError as e:
        logger.warning(
            f"Embedding failed, using heuristic semantic score: {e}",
            extra_data={"penalty": penalty},
        )
        return penalty * EMBEDDING_FALLBACK_DISCOUNT, True

    similarity = cosine_similarity(vectors[0], vectors[1])
    return max(0.0, min(1.0, similarity * penalty)), False


def combined_weights(mode: EditorialMode, profile_confidence: Optional[float] = None) -> Tuple[float, float, float]:
    """(semantic, stylistic, scope) weights, summing to 1."""
    semantic, stylistic, scope = MODE_WEIGHTS[mode]
    if profile_confidence is None:
        return semantic, stylistic, scope

    modulation = scoring_modulation(profile_confidence)
    semantic *= modulation.semantic
    stylistic *= modulation.stylistic
    scope *= modulation.scope
    total = semantic + stylistic + scope
    return semantic / total, stylistic / total, scope / total


def compute_combined_score(
    semantic: float,
    stylistic: float,
    scope: float,
    mode: EditorialMode,
    profile_confidence: Optional[float] = None,
) -> float:
    w_semantic, w_stylistic, w_scope = combined_weights(mode, profile_confidence)
    return semantic * w_semantic + stylistic * w_stylistic + scope * w_scope
