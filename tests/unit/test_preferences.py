"""Tests for preference signal extraction, aggregation and prompt hints."""

import pytest

from voice_identity.generation.preferences import (
    DECAY_HALF_LIFE_SECONDS,
    MAX_SIGNAL_MAGNITUDE,
    AggregatedPreferences,
    aggregate_signals,
    augment_prompt,
    build_preference_suffix,
    build_signal_records,
    extract_preference_signals,
)
from voice_identity.models import EditorialMode, PreferenceSource, TenantContext
from voice_identity.storage import PreferenceSignal
from tests.conftest import ORIGINAL_TEXT, SHORT_TEXT, TRIMMED_TEXT

NOW = 1_700_000_000.0
DAY = 24 * 60 * 60


def make_signal(value, created_at=NOW, dimension="tightness", magnitude=MAX_SIGNAL_MAGNITUDE):
    return PreferenceSignal(
        user_id="author-1",
        mode=EditorialMode.LINE,
        source=PreferenceSource.APPLY,
        dimension=dimension,
        value=value,
        magnitude=magnitude,
        created_at=created_at,
    )


def by_dimension(signals):
    return {s.dimension: s for s in signals}


class TestExtraction:
    """Signals from the delta between an original and a suggestion."""

    def test_apply_of_shorter_text(self):
        signals = by_dimension(extract_preference_signals(ORIGINAL_TEXT, TRIMMED_TEXT, PreferenceSource.APPLY))

        assert signals["tightness"].value > 0
        for signal in signals.values():
            assert -1.0 <= signal.value <= 1.0
            assert 0 < signal.magnitude <= MAX_SIGNAL_MAGNITUDE

    def test_reject_flips_sign(self):
        applied = by_dimension(extract_preference_signals(ORIGINAL_TEXT, TRIMMED_TEXT, PreferenceSource.APPLY))
        rejected = by_dimension(extract_preference_signals(ORIGINAL_TEXT, TRIMMED_TEXT, PreferenceSource.REJECT))

        assert set(applied) == set(rejected)
        for dimension, signal in applied.items():
            assert rejected[dimension].value == pytest.approx(-signal.value)
            assert rejected[dimension].magnitude == signal.magnitude

    def test_hunk_apply_counts_as_apply(self):
        applied = extract_preference_signals(ORIGINAL_TEXT, TRIMMED_TEXT, PreferenceSource.APPLY)
        hunk = extract_preference_signals(ORIGINAL_TEXT, TRIMMED_TEXT, PreferenceSource.HUNK_APPLY)
        assert applied == hunk

    def test_short_texts_yield_nothing(self):
        assert extract_preference_signals(ORIGINAL_TEXT, SHORT_TEXT, PreferenceSource.APPLY) == []
        assert extract_preference_signals(SHORT_TEXT, ORIGINAL_TEXT, PreferenceSource.APPLY) == []

    def test_identical_texts_yield_nothing(self):
        assert extract_preference_signals(ORIGINAL_TEXT, ORIGINAL_TEXT, PreferenceSource.APPLY) == []

    def test_records_carry_tenant(self):
        deltas = extract_preference_signals(ORIGINAL_TEXT, TRIMMED_TEXT, PreferenceSource.APPLY)
        tenant = TenantContext(user_id="author-1", org_id="org-1", document_id="doc-1")
        records = build_signal_records(deltas, tenant, EditorialMode.COPY, PreferenceSource.APPLY, NOW)

        assert len(records) == len(deltas)
        assert all(r.org_id == "org-1" and r.document_id == "doc-1" for r in records)
        assert all(r.mode == EditorialMode.COPY and r.created_at == NOW for r in records)


class TestAggregation:

    def test_empty(self):
        preferences = aggregate_signals([], NOW)
        assert preferences.confidence == 0.0
        assert all(v == 0.0 for v in preferences.values.values())

    def test_older_signals_decay(self):
        old = make_signal(-1.0, created_at=NOW - 2 * DECAY_HALF_LIFE_SECONDS)
        preferences = aggregate_signals([make_signal(1.0), old], NOW)
        # Weights 1 and 1/4: (1 - 0.25) / 1.25
        assert preferences.values["tightness"] == pytest.approx(0.6)
        assert preferences.values["hedging"] == 0.0

    def test_unknown_dimension_ignored(self):
        preferences = aggregate_signals([make_signal(1.0, dimension="volume")], NOW)
        assert "volume" not in preferences.values

    def test_confidence_grows_with_count_and_recency(self):
        recent = [make_signal(0.5) for _ in range(2)]
        stale = [make_signal(0.5, created_at=NOW - 30 * DAY) for _ in range(2)]

        assert aggregate_signals(recent, NOW).confidence == pytest.approx(0.3)
        assert aggregate_signals(stale, NOW).confidence == pytest.approx(0.1)
        assert aggregate_signals([make_signal(0.5) for _ in range(20)], NOW).confidence == 1.0

    def test_to_dict(self):
        data = aggregate_signals([make_signal(1.0)], NOW).to_dict()
        assert data["tightness"] == 1.0
        assert data["signal_count"] == 1


class TestPromptHints:

    def test_low_confidence_adds_nothing(self):
        preferences = AggregatedPreferences(values={"sentence_length": 0.9}, confidence=0.2)
        assert build_preference_suffix(preferences) == ""

    def test_strong_preferences_become_hints(self):
        preferences = AggregatedPreferences(
            values={"sentence_length": 0.5, "hedging": -0.5, "tightness": 0.1, "complexity": 0.9},
            confidence=0.6,
        )
        suffix = build_preference_suffix(preferences)

        assert suffix.startswith("SUBTLE PREFERENCE HINTS")
        assert "shorter sentences" in suffix
        assert "retaining hedging" in suffix
        assert "concise" not in suffix

    def test_weak_preferences_add_nothing(self):
        preferences = AggregatedPreferences(values={"tightness": 0.1}, confidence=1.0)
        assert build_preference_suffix(preferences) == ""

    def test_augment_prompt_order(self):
        prompt = augment_prompt("BASE", "  Use the Oxford comma.  ", "HINTS")
        assert prompt.index("BASE") < prompt.index("Use the Oxford comma.") < prompt.index("HINTS")
        assert "Use the Oxford comma.  " not in prompt

    def test_augment_prompt_without_extras(self):
        assert augment_prompt("BASE") == "BASE"
        assert augment_prompt("BASE", "   ") == "BASE"
