"""Tests for tiered enforcement classification."""

import pytest

from voice_identity.enforcement import (
    ENFORCEMENT_THRESHOLDS,
    classify,
    determine_outcome,
    enforcement_temperature,
    get_effective_thresholds,
    get_enforcement_thresholds,
    requires_enforcement,
)
from voice_identity.enforcement.classifier import DRIFT_CEILING_CAP, SEMANTIC_FLOOR_CAP
from voice_identity.models import EditorialMode, EnforcementClass, EnforcementOutcome


class TestThresholds:
    """Tests for base and effective thresholds."""

    def test_line_mode_floors(self):
        t = get_enforcement_thresholds("line")
        assert (t.pass_floor, t.semantic_pass_floor, t.warning_floor, t.semantic_warning_floor, t.drift_ceiling) == \
            (0.78, 0.82, 0.65, 0.72, 0.70)

    def test_copy_mode_is_strictest(self):
        copy = ENFORCEMENT_THRESHOLDS[EditorialMode.COPY]
        developmental = ENFORCEMENT_THRESHOLDS[EditorialMode.DEVELOPMENTAL]
        assert copy.pass_floor > developmental.pass_floor
        assert copy.drift_ceiling > developmental.drift_ceiling

    def test_no_confidence_uses_base(self):
        effective = get_effective_thresholds(EditorialMode.LINE)
        assert effective.thresholds == ENFORCEMENT_THRESHOLDS[EditorialMode.LINE]
        assert effective.modulation is None

    def test_high_confidence_matches_base(self):
        effective = get_effective_thresholds(EditorialMode.LINE, 0.95).thresholds
        base = ENFORCEMENT_THRESHOLDS[EditorialMode.LINE]
        assert effective.pass_floor == pytest.approx(base.pass_floor)
        assert effective.semantic_pass_floor == pytest.approx(base.semantic_pass_floor)
        assert effective.drift_ceiling == pytest.approx(base.drift_ceiling)

    def test_low_confidence_relaxes_style_and_tightens_meaning(self):
        effective = get_effective_thresholds(EditorialMode.LINE, 0.1).thresholds
        assert effective.pass_floor == pytest.approx(0.78 * 0.75)
        assert effective.warning_floor == pytest.approx(0.65 * 0.80)
        assert effective.semantic_pass_floor == pytest.approx(0.82 * 1.08)
        assert effective.drift_ceiling == pytest.approx(0.70 * 1.06)

    @pytest.mark.parametrize("mode", list(EditorialMode))
    def test_caps(self, mode):
        for confidence in (0.0, 0.2, 0.5, 0.8):
            t = get_effective_thresholds(mode, confidence).thresholds
            assert t.semantic_pass_floor <= SEMANTIC_FLOOR_CAP
            assert t.semantic_warning_floor <= SEMANTIC_FLOOR_CAP
            assert t.drift_ceiling <= DRIFT_CEILING_CAP

    def test_to_dict_includes_modulation(self):
        data = get_effective_thresholds(EditorialMode.COPY, 0.3).to_dict()
        assert data["modulation"]["stylistic_relaxation"] == pytest.approx(0.75)
        assert get_effective_thresholds(EditorialMode.COPY).to_dict()["modulation"] is None


class TestClassify:
    """Tests for the class precedence."""

    def test_drift_takes_precedence(self):
        assert classify(0.99, 0.5, "line") == EnforcementClass.DRIFT

    def test_pass_at_floors(self):
        assert classify(0.78, 0.82, "line") == EnforcementClass.PASS

    def test_semantic_below_pass_floor_is_soft_warning(self):
        assert classify(0.90, 0.80, "line") == EnforcementClass.SOFT_WARNING

    def test_combined_between_floors_is_soft_warning(self):
        assert classify(0.70, 0.90, "line") == EnforcementClass.SOFT_WARNING

    def test_failure_below_warning_floor(self):
        assert classify(0.60, 0.75, "line") == EnforcementClass.FAILURE

    def test_confidence_changes_class(self):
        """A young profile passes a candidate with weaker style match."""
        assert classify(0.70, 0.90, "line") == EnforcementClass.SOFT_WARNING
        assert classify(0.70, 0.90, "line", profile_confidence=0.1) == EnforcementClass.PASS

    def test_exactly_one_class(self):
        for combined in (0.0, 0.3, 0.6, 0.7, 0.8, 1.0):
            for semantic in (0.0, 0.5, 0.7, 0.8, 0.9, 1.0):
                assert classify(combined, semantic, "copy") in set(EnforcementClass)


class TestOutcome:

    def test_requires_enforcement(self):
        assert not requires_enforcement(EnforcementClass.PASS)
        for cls in (EnforcementClass.SOFT_WARNING, EnforcementClass.FAILURE, EnforcementClass.DRIFT):
            assert requires_enforcement(cls)

    @pytest.mark.parametrize("initial,retry,outcome", [
        (EnforcementClass.PASS, EnforcementClass.PASS, EnforcementOutcome.PASS),
        (EnforcementClass.SOFT_WARNING, EnforcementClass.PASS, EnforcementOutcome.SOFT_WARNING_RESOLVED),
        (EnforcementClass.FAILURE, EnforcementClass.PASS, EnforcementOutcome.FAILURE_RESOLVED),
        (EnforcementClass.DRIFT, EnforcementClass.PASS, EnforcementOutcome.DRIFT_RESOLVED),
        (EnforcementClass.DRIFT, EnforcementClass.FAILURE, EnforcementOutcome.ORIGINAL_RETURNED),
        (EnforcementClass.SOFT_WARNING, EnforcementClass.SOFT_WARNING, EnforcementOutcome.ORIGINAL_RETURNED),
    ])
    def test_determine_outcome(self, initial, retry, outcome):
        assert determine_outcome(initial, retry) == outcome

    def test_enforcement_temperature(self):
        assert enforcement_temperature(0.7, EnforcementClass.SOFT_WARNING) == pytest.approx(0.6)
        assert enforcement_temperature(0.15, EnforcementClass.SOFT_WARNING) == pytest.approx(0.1)
        assert enforcement_temperature(0.9, EnforcementClass.FAILURE) == 0.1
        assert enforcement_temperature(0.9, EnforcementClass.DRIFT) == 0.1
        assert enforcement_temperature(0.7, EnforcementClass.PASS) == 0.7
