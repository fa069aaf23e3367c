"""Shared enums and small value types for the voice identity engine."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple


class EditorialMode(Enum):
    """Editorial scope of a refinement request."""
    DEVELOPMENTAL = "developmental"
    LINE = "line"
    COPY = "copy"


class EnforcementClass(Enum):
    """Classifier verdict for a scored candidate."""
    PASS = "pass"
    SOFT_WARNING = "soft_warning"
    FAILURE = "failure"
    DRIFT = "drift"


class EnforcementOutcome(Enum):
    """Terminal outcome of a refinement run."""
    PASS = "pass"
    SOFT_WARNING_RESOLVED = "soft_warning_resolved"
    FAILURE_RESOLVED = "failure_resolved"
    DRIFT_RESOLVED = "drift_resolved"
    ORIGINAL_RETURNED = "original_returned"


class ConfidenceBand(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ProfileStatus(Enum):
    BUILDING = "building"
    ACTIVE = "active"


class SourceType(Enum):
    """Where a profile sample came from."""
    PUBLISHED_POST = "published_post"
    MANUAL_REVISION = "manual_revision"
    INITIAL_DRAFT = "initial_draft"
    BASELINE_SAMPLE = "baseline_sample"


class GenerationPhase(Enum):
    INITIAL = "initial"
    ENFORCEMENT_RETRY = "enforcement_retry"


class CorrectionType(Enum):
    CONSTRAINT_BOOST = "constraint_boost"
    MINIMAL_EDIT = "minimal_edit"
    PASSTHROUGH = "passthrough"


class RunStatus(Enum):
    ACTIVE = "active"
    SUPERSEDED = "superseded"


class PreferenceSource(Enum):
    """How the author reacted to a suggestion."""
    APPLY = "apply"
    REJECT = "reject"
    HUNK_APPLY = "hunk_apply"


class DriftAlertType(Enum):
    SIMILARITY_DROP = "similarity_drop"
    VARIANCE_SPIKE = "variance_spike"


class DriftSeverity(Enum):
    MEDIUM = "medium"
    HIGH = "high"


def parse_mode(mode) -> EditorialMode:
    """Accept an EditorialMode or its string value.

    Raises:
        ValueError: If the mode is unknown.
    """
    if isinstance(mode, EditorialMode):
        return mode
    try:
        return EditorialMode(mode)
    except ValueError:
        valid = ", ".join(m.value for m in EditorialMode)
        raise ValueError(f"Unknown editorial mode: {mode}. Valid modes: {valid}")


@dataclass(frozen=True)
class VoiceScores:
    """The three sub-scores and their combination, each in [0, 1]."""
    semantic: float
    stylistic: float
    scope: float
    combined: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "semantic": self.semantic,
            "stylistic": self.stylistic,
            "scope": self.scope,
            "combined": self.combined,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "VoiceScores":
        return cls(
            semantic=data["semantic"],
            stylistic=data["stylistic"],
            scope=data["scope"],
            combined=data["combined"],
        )


@dataclass(frozen=True)
class VoiceThresholds:
    """Per-mode minimum scores used for the evaluation pass flag."""
    semantic: float
    stylistic: float
    scope: float
    combined: float

    def passes(self, scores: VoiceScores) -> bool:
        return (
            scores.semantic >= self.semantic
            and scores.stylistic >= self.stylistic
            and scores.scope >= self.scope
            and scores.combined >= self.combined
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "semantic": self.semantic,
            "stylistic": self.stylistic,
            "scope": self.scope,
            "combined": self.combined,
        }


VOICE_THRESHOLDS: Dict[EditorialMode, VoiceThresholds] = {
    EditorialMode.COPY: VoiceThresholds(semantic=0.80, stylistic=0.65, scope=0.70, combined=0.72),
    EditorialMode.LINE: VoiceThresholds(semantic=0.75, stylistic=0.60, scope=0.60, combined=0.68),
    EditorialMode.DEVELOPMENTAL: VoiceThresholds(semantic=0.70, stylistic=0.55, scope=0.50, combined=0.62),
}


@dataclass(frozen=True)
class TenantContext:
    """Who a request is made for.

    ``org_id`` scopes the profile to a tenant; ``document_id`` scopes run
    superseding to one document.
    """
    user_id: str
    org_id: Optional[str] = None
    document_id: Optional[str] = None

    def profile_lookup_order(self) -> List[Tuple[str, Optional[str]]]:
        """Profile scopes to try, most specific first."""
        if self.org_id:
            return [(self.user_id, self.org_id), (self.user_id, None)]
        return [(self.user_id, None)]
