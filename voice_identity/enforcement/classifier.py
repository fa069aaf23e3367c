"""Tiered enforcement classification of scored candidates.

A candidate lands in exactly one class, checked in this order:

1. drift: semantic below the drift ceiling, whatever the other scores
2. pass: combined and semantic both at or above their pass floors
3. failure: combined below the warning floor
4. soft_warning: everything else

With a profile confidence the floors are modulated: stylistic floors relax
and semantic floors tighten for young profiles.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from ..models import EditorialMode, EnforcementClass, EnforcementOutcome, parse_mode
from ..style.confidence import ThresholdModulation, threshold_modulation

SEMANTIC_FLOOR_CAP = 0.98
DRIFT_CEILING_CAP = 0.95


@dataclass(frozen=True)
class EnforcementThresholds:
    pass_floor: float
    semantic_pass_floor: float
    warning_floor: float
    semantic_warning_floor: float
    drift_ceiling: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "pass_floor": self.pass_floor,
            "semantic_pass_floor": self.semantic_pass_floor,
            "warning_floor": self.warning_floor,
            "semantic_warning_floor": self.semantic_warning_floor,
            "drift_ceiling": self.drift_ceiling,
        }


ENFORCEMENT_THRESHOLDS: Dict[EditorialMode, EnforcementThresholds] = {
    EditorialMode.LINE: EnforcementThresholds(
        pass_floor=0.78,
        semantic_pass_floor=0.82,
        warning_floor=0.65,
        semantic_warning_floor=0.72,
        drift_ceiling=0.70,
    ),
    EditorialMode.DEVELOPMENTAL: EnforcementThresholds(
        pass_floor=0.74,
        semantic_pass_floor=0.78,
        warning_floor=0.58,
        semantic_warning_floor=0.68,
        drift_ceiling=0.65,
    ),
    EditorialMode.COPY: EnforcementThresholds(
        pass_floor=0.82,
        semantic_pass_floor=0.85,
        warning_floor=0.68,
        semantic_warning_floor=0.75,
        drift_ceiling=0.72,
    ),
}


@dataclass(frozen=True)
class EffectiveThresholds:
    """Floors actually applied to a candidate, for the audit trail."""
    thresholds: EnforcementThresholds
    modulation: Optional[ThresholdModulation] = None

    def to_dict(self) -> Dict:
        data = self.thresholds.to_dict()
        data["modulation"] = self.modulation.to_dict() if self.modulation else None
        return data


def get_enforcement_thresholds(mode) -> EnforcementThresholds:
    return ENFORCEMENT_THRESHOLDS[parse_mode(mode)]


def get_effective_thresholds(mode, profile_confidence: Optional[float] = None) -> EffectiveThresholds:
    """Base floors for the mode, modulated by profile confidence when given."""
    base = get_enforcement_thresholds(mode)
    if profile_confidence is None:
        return EffectiveThresholds(thresholds=base)

    mod = threshold_modulation(profile_confidence)
    return EffectiveThresholds(
        thresholds=EnforcementThresholds(
            pass_floor=base.pass_floor * mod.stylistic_relaxation,
            semantic_pass_floor=min(SEMANTIC_FLOOR_CAP, base.semantic_pass_floor * mod.semantic_tightening),
            warning_floor=base.warning_floor * mod.stylistic_warning_relaxation,
            semantic_warning_floor=min(SEMANTIC_FLOOR_CAP, base.semantic_warning_floor * mod.semantic_tightening),
            drift_ceiling=min(DRIFT_CEILING_CAP, base.drift_ceiling * mod.drift_sensitivity),
        ),
        modulation=mod,
    )


def classify(
    combined: float,
    semantic: float,
    mode,
    profile_confidence: Optional[float] = None,
) -> EnforcementClass:
    """Classify a candidate from its combined and semantic scores."""
    t = get_effective_thresholds(mode, profile_confidence).thresholds

    if semantic < t.drift_ceiling:
        return EnforcementClass.DRIFT
    if combined >= t.pass_floor and semantic >= t.semantic_pass_floor:
        return EnforcementClass.PASS
    if combined < t.warning_floor:
        return EnforcementClass.FAILURE
    return EnforcementClass.SOFT_WARNING


def requires_enforcement(enforcement_class: EnforcementClass) -> bool:
    return enforcement_class != EnforcementClass.PASS


_RESOLVED = {
    EnforcementClass.SOFT_WARNING: EnforcementOutcome.SOFT_WARNING_RESOLVED,
    EnforcementClass.FAILURE: EnforcementOutcome.FAILURE_RESOLVED,
    EnforcementClass.DRIFT: EnforcementOutcome.DRIFT_RESOLVED,
}


def determine_outcome(initial_class: EnforcementClass, retry_best_class: EnforcementClass) -> EnforcementOutcome:
    """Terminal outcome of a run after the enforcement retry."""
    if initial_class == EnforcementClass.PASS:
        return EnforcementOutcome.PASS
    if retry_best_class == EnforcementClass.PASS:
        return _RESOLVED[initial_class]
    return EnforcementOutcome.ORIGINAL_RETURNED


def enforcement_temperature(base_temperature: float, enforcement_class: EnforcementClass) -> float:
    """Lower sampling temperature for more conservative retries."""
    if enforcement_class == EnforcementClass.SOFT_WARNING:
        return max(0.1, base_temperature - 0.1)
    if enforcement_class in (EnforcementClass.FAILURE, EnforcementClass.DRIFT):
        return 0.1
    return base_temperature
