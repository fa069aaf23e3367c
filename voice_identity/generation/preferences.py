"""Bounded preference signals learned from Apply/Reject feedback.

When an author applies or rejects a suggestion, the style delta between
the original and the suggested text becomes a handful of small signals
("prefers shorter sentences", "prefers fewer hedges"). Signals never
touch the voice profile. Aggregated with exponential decay, they add a
low-priority hint to the generation prompt; the voice score stays the
hard constraint.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..models import EditorialMode, PreferenceSource, TenantContext
from ..storage.records import PreferenceSignal
from ..style.extractor import extract_fingerprint

MAX_SIGNAL_MAGNITUDE = 0.05
DECAY_HALF_LIFE_SECONDS = 30 * 24 * 60 * 60
RECENT_WINDOW_SECONDS = 7 * 24 * 60 * 60
MIN_WORDS_FOR_PREFERENCE = 20
MIN_CONFIDENCE_FOR_HINTS = 0.3
HINT_THRESHOLD = 0.2

# Positive values mean: shorter sentences, fewer words, fewer hedges,
# more contractions, simpler text, more varied punctuation.
PREFERENCE_DIMENSIONS = (
    "sentence_length",
    "tightness",
    "hedging",
    "contractions",
    "complexity",
    "punctuation",
)

PREFERENCE_HINTS = {
    "sentence_length": (
        "Slightly prefer shorter sentences when two options are equally good.",
        "Slightly prefer longer, more flowing sentences when two options are equally good.",
    ),
    "hedging": (
        "Slightly prefer fewer hedging phrases (e.g. 'perhaps', 'maybe') when two options are equally good.",
        "Slightly prefer retaining hedging and qualifiers when two options are equally good.",
    ),
    "contractions": (
        "Slightly prefer contractions when two options are equally good.",
        "Slightly prefer avoiding contractions when two options are equally good.",
    ),
    "tightness": (
        "Slightly prefer tighter, more concise phrasing when two options are equally good.",
        "Slightly prefer more expansive phrasing when two options are equally good.",
    ),
}


@dataclass
class SignalDelta:
    """One extracted signal before it is attributed to a tenant."""
    dimension: str
    value: float
    magnitude: float


@dataclass
class AggregatedPreferences:
    values: Dict[str, float]
    confidence: float
    signal_count: int = 0

    def to_dict(self) -> Dict:
        return {**self.values, "confidence": self.confidence, "signal_count": self.signal_count}


def _clamp(value: float, low: float = -1.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _bounded(raw: float, scale: float = 0.5) -> float:
    return min(MAX_SIGNAL_MAGNITUDE, abs(raw) * MAX_SIGNAL_MAGNITUDE * scale)


def extract_preference_signals(
    original_text: str,
    applied_text: str,
    source: PreferenceSource,
) -> List[SignalDelta]:
    """Turn the style delta between two texts into bounded signals.

    On apply (or a partial hunk apply) a dimension the suggestion moved
    along gets a positive value; on reject the sign flips. Texts under
    ``MIN_WORDS_FOR_PREFERENCE`` words yield nothing.
    """
    original = extract_fingerprint(original_text)
    applied = extract_fingerprint(applied_text)
    if original.word_count < MIN_WORDS_FOR_PREFERENCE or applied.word_count < MIN_WORDS_FOR_PREFERENCE:
        return []

    sign = -1.0 if source == PreferenceSource.REJECT else 1.0
    signals = []

    sentence_delta = original.avg_sentence_length - applied.avg_sentence_length
    if abs(sentence_delta) > 1:
        raw = _clamp(sentence_delta / 10)
        signals.append(SignalDelta("sentence_length", sign * raw, _bounded(raw)))

    word_ratio = applied.word_count / max(1, original.word_count)
    if abs(word_ratio - 1) > 0.05:
        raw = 1 - word_ratio
        signals.append(SignalDelta("tightness", sign * _clamp(raw * 5), _bounded(raw, scale=1.0)))

    hedge_delta = original.hedging_frequency - applied.hedging_frequency
    if abs(hedge_delta) > 0.02:
        raw = _clamp(hedge_delta * 20)
        signals.append(SignalDelta("hedging", sign * raw, _bounded(raw)))

    contraction_delta = applied.contraction_frequency - original.contraction_frequency
    if abs(contraction_delta) > 0.005:
        raw = _clamp(contraction_delta * 50)
        signals.append(SignalDelta("contractions", sign * raw, _bounded(raw)))

    readability_delta = original.readability_score - applied.readability_score
    if abs(readability_delta) > 0.5:
        raw = _clamp(readability_delta / 5)
        signals.append(SignalDelta("complexity", sign * raw, _bounded(raw)))

    return signals


def build_signal_records(
    deltas: Sequence[SignalDelta],
    tenant: TenantContext,
    mode: EditorialMode,
    source: PreferenceSource,
    now: float,
) -> List[PreferenceSignal]:
    return [
        PreferenceSignal(
            user_id=tenant.user_id,
            org_id=tenant.org_id,
            document_id=tenant.document_id,
            mode=mode,
            source=source,
            dimension=d.dimension,
            value=d.value,
            magnitude=d.magnitude,
            created_at=now,
        )
        for d in deltas
    ]


def aggregate_signals(signals: Sequence[PreferenceSignal], now: float) -> AggregatedPreferences:
    """Decay-weighted mean per dimension, clamped to [-1, 1].

    A signal's weight is its magnitude halved every 30 days. Confidence
    grows with the total signal count and with the count from the last
    seven days.
    """
    totals = {key: 0.0 for key in PREFERENCE_DIMENSIONS}
    weights = {key: 0.0 for key in PREFERENCE_DIMENSIONS}

    for signal in signals:
        if signal.dimension not in totals:
            continue
        age = max(0.0, now - signal.created_at)
        weight = signal.magnitude * 0.5 ** (age / DECAY_HALF_LIFE_SECONDS)
        totals[signal.dimension] += signal.value * weight
        weights[signal.dimension] += weight

    values = {
        key: _clamp(totals[key] / weights[key]) if weights[key] > 0 else 0.0
        for key in PREFERENCE_DIMENSIONS
    }
    recent = sum(1 for s in signals if now - s.created_at < RECENT_WINDOW_SECONDS)
    confidence = min(1.0, (len(signals) / 10) * 0.5 + (recent / 5) * 0.5)
    return AggregatedPreferences(values=values, confidence=confidence, signal_count=len(signals))


def build_preference_suffix(
    preferences: AggregatedPreferences,
    min_confidence: float = MIN_CONFIDENCE_FOR_HINTS,
) -> str:
    """Prompt hint for the stronger preferences, or "" when there is nothing to say."""
    if preferences.confidence < min_confidence:
        return ""

    parts = []
    for dimension, (positive, negative) in PREFERENCE_HINTS.items():
        value = preferences.values.get(dimension, 0.0)
        if abs(value) > HINT_THRESHOLD:
            parts.append(positive if value > 0 else negative)
    if not parts:
        return ""

    return (
        "SUBTLE PREFERENCE HINTS (apply only when two options are equally good; "
        "voice preservation is the hard constraint):\n" + " ".join(parts)
    )


def augment_prompt(base_prompt: str, scratchpad: Optional[str] = None, preference_suffix: str = "") -> str:
    """Append the author's scratchpad notes and preference hints to a mode prompt."""
    prompt = base_prompt
    if scratchpad and scratchpad.strip():
        prompt += (
            "\n\nAUTHOR'S STYLE NOTES (follow these where they do not conflict with the rules above):\n"
            + scratchpad.strip()
        )
    if preference_suffix:
        prompt += f"\n\n{preference_suffix}"
    return prompt
