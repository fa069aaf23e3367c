"""Enforcement classification and corrective prompting."""

from .classifier import (
    ENFORCEMENT_THRESHOLDS,
    EffectiveThresholds,
    EnforcementThresholds,
    classify,
    determine_outcome,
    enforcement_temperature,
    get_effective_thresholds,
    get_enforcement_thresholds,
    requires_enforcement,
)
from .prompts import (
    build_drift_enforcement,
    build_enforcement_system_prompt,
    build_failure_enforcement,
    build_soft_warning_enforcement,
)

__all__ = [
    "ENFORCEMENT_THRESHOLDS",
    "EffectiveThresholds",
    "EnforcementThresholds",
    "classify",
    "determine_outcome",
    "enforcement_temperature",
    "get_effective_thresholds",
    "get_enforcement_thresholds",
    "requires_enforcement",
    "build_drift_enforcement",
    "build_enforcement_system_prompt",
    "build_failure_enforcement",
    "build_soft_warning_enforcement",
]
