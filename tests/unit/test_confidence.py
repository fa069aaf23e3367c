"""Tests for the profile confidence model."""

import math

import pytest

from voice_identity.models import ConfidenceBand
from voice_identity.style.confidence import (
    DiversityInputs,
    classify_band,
    compute_confidence,
    diversity_score,
    feature_sensitivity,
    scoring_modulation,
    temporal_spread,
    threshold_modulation,
)

HOUR = 60 * 60
DAY = 24 * HOUR


class TestClassifyBand:

    @pytest.mark.parametrize("confidence,band", [
        (0.0, ConfidenceBand.LOW),
        (0.39, ConfidenceBand.LOW),
        (0.4, ConfidenceBand.MEDIUM),
        (0.69, ConfidenceBand.MEDIUM),
        (0.7, ConfidenceBand.HIGH),
        (1.0, ConfidenceBand.HIGH),
    ])
    def test_band_boundaries(self, confidence, band):
        assert classify_band(confidence) == band


class TestComputeConfidence:
    """Tests for the overall confidence score."""

    def test_empty_profile(self):
        result = compute_confidence(0, 0, DiversityInputs(), None, None)
        assert result.overall == 0.0
        assert result.band == ConfidenceBand.LOW

    def test_volume_without_repetition_stays_low(self):
        """Many words from a single sample are capped by sample confidence."""
        result = compute_confidence(50_000, 1, DiversityInputs(sample_count=1), None, None)
        assert result.components.word_confidence > 0.99
        assert result.overall <= result.components.sample_confidence
        assert result.band == ConfidenceBand.LOW

    def test_components(self):
        diversity = DiversityInputs(
            sample_count=4,
            unique_source_ids=5,
            source_type_counts={"published_post": 2, "manual_revision": 2},
        )
        result = compute_confidence(2000, 5, diversity, 0.0, 7 * DAY)
        components = result.components

        assert components.word_confidence == pytest.approx(1 - math.exp(-1))
        assert components.sample_confidence == pytest.approx(1 - math.exp(-1))
        assert components.diversity_score == pytest.approx(0.85)
        assert components.temporal_spread == pytest.approx(0.5)
        expected = (1 - math.exp(-1)) * (0.6 + 0.4 * 0.85) * (0.8 + 0.2 * 0.5)
        assert result.overall == pytest.approx(expected)

    def test_well_established_profile_is_high(self):
        diversity = DiversityInputs(
            sample_count=40,
            unique_source_ids=40,
            source_type_counts={"published_post": 10, "manual_revision": 10, "initial_draft": 10, "baseline_sample": 10},
        )
        result = compute_confidence(40_000, 40, diversity, 0.0, 60 * DAY)
        assert result.band == ConfidenceBand.HIGH
        assert result.overall <= 1.0

    def test_to_dict(self):
        result = compute_confidence(1000, 3, DiversityInputs(sample_count=3), None, None)
        data = result.to_dict()
        assert data["band"] == result.band.value
        assert set(data["components"]) == {
            "word_confidence", "sample_confidence", "diversity_score", "temporal_spread",
        }


class TestDiversityScore:

    def test_single_sample_has_no_diversity(self):
        assert diversity_score(DiversityInputs(sample_count=1, unique_source_ids=1,
                                               source_type_counts={"published_post": 1})) == 0.0

    def test_single_source_type_has_no_evenness(self):
        inputs = DiversityInputs(sample_count=5, unique_source_ids=5, source_type_counts={"published_post": 5})
        assert diversity_score(inputs) == pytest.approx(0.25 * 0.3 + 0.4)


class TestTemporalSpread:

    def test_unknown_timestamps(self):
        assert temporal_spread(None, 100.0) == 0.0

    def test_below_minimum(self):
        assert temporal_spread(0.0, HOUR / 2) == 0.0

    def test_linear_to_two_weeks(self):
        assert temporal_spread(0.0, 7 * DAY) == pytest.approx(0.5)
        assert temporal_spread(0.0, 30 * DAY) == 1.0


class TestModulation:
    """Modulation multipliers interpolate through the medium band."""

    def test_low_band_values(self):
        mod = threshold_modulation(0.1)
        assert mod.stylistic_relaxation == pytest.approx(0.75)
        assert mod.semantic_tightening == pytest.approx(1.08)
        assert mod.stylistic_warning_relaxation == pytest.approx(0.80)
        assert mod.drift_sensitivity == pytest.approx(1.06)

    def test_high_band_is_neutral(self):
        for confidence in (0.7, 0.85, 1.0):
            mod = threshold_modulation(confidence)
            assert mod.stylistic_relaxation == pytest.approx(1.0)
            assert mod.semantic_tightening == pytest.approx(1.0)
            scoring = scoring_modulation(confidence)
            assert (scoring.semantic, scoring.stylistic, scoring.scope) == pytest.approx((1.0, 1.0, 1.0))

    def test_medium_band_interpolates(self):
        mod = threshold_modulation(0.55)
        assert mod.stylistic_relaxation == pytest.approx(0.875)
        assert mod.semantic_tightening == pytest.approx(1.04)

    def test_continuous_at_band_boundaries(self):
        epsilon = 1e-9
        for boundary in (0.4, 0.7):
            below = threshold_modulation(boundary - epsilon)
            above = threshold_modulation(boundary + epsilon)
            assert below.stylistic_relaxation == pytest.approx(above.stylistic_relaxation, abs=1e-6)
            assert below.semantic_tightening == pytest.approx(above.semantic_tightening, abs=1e-6)

    def test_scoring_modulation_low_band(self):
        scoring = scoring_modulation(0.0)
        assert scoring.semantic == pytest.approx(1.25)
        assert scoring.stylistic == pytest.approx(0.70)
        assert scoring.scope == pytest.approx(1.05)

    def test_feature_sensitivity_range(self):
        assert feature_sensitivity(0.0) == pytest.approx(0.6)
        assert feature_sensitivity(1.0) == pytest.approx(1.0)
        assert 0.6 < feature_sensitivity(0.55) < 1.0
