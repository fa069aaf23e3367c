"""Bounded exponential blending of a new sample into a profile fingerprint."""

from dataclasses import dataclass, replace
from typing import Dict, Optional

from .extractor import LEXICAL_SIGNATURE_SIZE
from .fingerprint import SCALAR_FEATURES, Fingerprint, LexicalEntry, PunctuationFrequencies

# No code path may produce an alpha outside [ALPHA_MIN, ALPHA_MAX].
ALPHA_MIN = 0.05
ALPHA_MAX = 0.25

# A sample more than this multiple of the average sample size is penalized.
WORD_COUNT_RATIO_CAP = 3.0
WORD_COUNT_RATIO_PENALTY = 0.6

STALENESS_THRESHOLD_SECONDS = 30 * 24 * 60 * 60
STALENESS_ALPHA_BOOST = 0.05


@dataclass
class AlphaDetails:
    """Which guards fired while computing the blend weight."""
    raw_alpha: float
    bounded_alpha: float
    word_count_ratio: float = 0.0
    word_count_penalty_applied: bool = False
    staleness_boost_applied: bool = False
    final_alpha: float = 0.0

    def to_dict(self) -> Dict:
        return {
            "raw_alpha": self.raw_alpha,
            "bounded_alpha": self.bounded_alpha,
            "word_count_ratio": self.word_count_ratio,
            "word_count_penalty_applied": self.word_count_penalty_applied,
            "staleness_boost_applied": self.staleness_boost_applied,
            "final_alpha": self.final_alpha,
        }


@dataclass
class BlendResult:
    blended: Fingerprint
    alpha: float
    details: AlphaDetails


def compute_alpha(
    sample_count: int,
    incoming_word_count: int,
    avg_sample_words: float,
    last_sample_at: Optional[float],
    now: float,
) -> AlphaDetails:
    """Compute the blend weight for one incoming sample.

    Args:
        sample_count: Samples in the profile before this contribution.
        incoming_word_count: Word count of the incoming sample.
        avg_sample_words: Average words per sample in the profile.
        last_sample_at: Epoch seconds of the latest prior sample, if known.
        now: Current epoch seconds.
    """
    raw_alpha = 1 / (sample_count + 1)
    alpha = max(ALPHA_MIN, min(ALPHA_MAX, raw_alpha))
    details = AlphaDetails(raw_alpha=raw_alpha, bounded_alpha=alpha)

    if avg_sample_words > 0 and incoming_word_count > 0:
        ratio = incoming_word_count / avg_sample_words
        details.word_count_ratio = ratio
        if ratio > WORD_COUNT_RATIO_CAP:
            alpha = max(ALPHA_MIN, alpha * WORD_COUNT_RATIO_PENALTY)
            details.word_count_penalty_applied = True

    if last_sample_at:
        elapsed = now - last_sample_at
        if elapsed > STALENESS_THRESHOLD_SECONDS:
            boost_fraction = min(1.0, elapsed / (STALENESS_THRESHOLD_SECONDS * 3))
            alpha = min(ALPHA_MAX, alpha + STALENESS_ALPHA_BOOST * boost_fraction)
            details.staleness_boost_applied = True

    assert ALPHA_MIN <= alpha <= ALPHA_MAX, f"alpha {alpha} escaped its bounds"
    details.final_alpha = alpha
    return details


def _blend_lexical_signature(existing: Fingerprint, incoming: Fingerprint, alpha: float) -> tuple:
    weights: Dict[str, float] = {}
    for entry in existing.lexical_signature:
        weights[entry.word] = entry.frequency * (1 - alpha)
    for entry in incoming.lexical_signature:
        weights[entry.word] = weights.get(entry.word, 0.0) + entry.frequency * alpha
    ranked = sorted(weights.items(), key=lambda item: item[1], reverse=True)
    return tuple(LexicalEntry(word=w, frequency=f) for w, f in ranked[:LEXICAL_SIGNATURE_SIZE])


def apply_alpha(existing: Fingerprint, incoming: Fingerprint, alpha: float) -> Fingerprint:
    """Blend two fingerprints with a fixed weight on the incoming one."""

    def mix(a: float, b: float) -> float:
        return a * (1 - alpha) + b * alpha

    punctuation = PunctuationFrequencies(**{
        name: mix(value, getattr(incoming.punctuation, name))
        for name, value in existing.punctuation.to_dict().items()
    })
    scalars = {
        name: mix(getattr(existing, name), getattr(incoming, name))
        for name in SCALAR_FEATURES
    }
    return replace(
        existing,
        punctuation=punctuation,
        lexical_signature=_blend_lexical_signature(existing, incoming, alpha),
        word_count=existing.word_count + incoming.word_count,
        sentence_count=existing.sentence_count + incoming.sentence_count,
        paragraph_count=existing.paragraph_count + incoming.paragraph_count,
        confidence=min(1.0, existing.confidence + incoming.confidence * alpha),
        **scalars,
    )


def blend_fingerprints(
    existing: Fingerprint,
    incoming: Fingerprint,
    sample_count: int,
    avg_sample_words: float,
    last_sample_at: Optional[float],
    now: float,
) -> BlendResult:
    """Blend a new sample fingerprint into an existing profile fingerprint.

    The existing profile always keeps at least ``1 - ALPHA_MAX`` of its
    weight, so one sample can never overwrite it. Word, sentence and
    paragraph counts accumulate; confidence accumulates and saturates at 1.
    """
    details = compute_alpha(sample_count, incoming.word_count, avg_sample_words, last_sample_at, now)
    blended = apply_alpha(existing, incoming, details.final_alpha)
    return BlendResult(blended=blended, alpha=details.final_alpha, details=details)
