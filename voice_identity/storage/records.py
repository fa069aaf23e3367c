"""Persisted records: profiles, samples, evaluations, runs, candidates, metrics, alerts, preference signals."""

from dataclasses import dataclass, field
from typing import Dict, Optional

from ..models import (
    CorrectionType,
    DriftAlertType,
    DriftSeverity,
    EditorialMode,
    EnforcementClass,
    EnforcementOutcome,
    GenerationPhase,
    PreferenceSource,
    ProfileStatus,
    RunStatus,
    SourceType,
    VoiceScores,
    VoiceThresholds,
)
from ..style.fingerprint import Fingerprint


@dataclass
class VoiceProfile:
    """An author's accumulated fingerprint for one (user, org) scope."""
    user_id: str
    fingerprint: Fingerprint
    org_id: Optional[str] = None
    id: Optional[str] = None
    status: ProfileStatus = ProfileStatus.BUILDING
    sample_count: int = 0
    total_word_count: int = 0
    average_sample_word_count: float = 0.0
    confidence: float = 0.0
    confidence_band: str = "low"
    confidence_components: Dict[str, float] = field(default_factory=dict)
    source_type_counts: Dict[str, int] = field(default_factory=dict)
    unique_source_ids: int = 0
    first_sample_at: Optional[float] = None
    last_sample_at: Optional[float] = None
    created_at: Optional[float] = None
    updated_at: Optional[float] = None

    @property
    def is_active(self) -> bool:
        return self.status == ProfileStatus.ACTIVE

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "org_id": self.org_id,
            "fingerprint": self.fingerprint.to_dict(),
            "status": self.status.value,
            "sample_count": self.sample_count,
            "total_word_count": self.total_word_count,
            "average_sample_word_count": self.average_sample_word_count,
            "confidence": self.confidence,
            "confidence_band": self.confidence_band,
            "confidence_components": self.confidence_components,
            "source_type_counts": self.source_type_counts,
            "unique_source_ids": self.unique_source_ids,
            "first_sample_at": self.first_sample_at,
            "last_sample_at": self.last_sample_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "VoiceProfile":
        return cls(
            id=data.get("id"),
            user_id=data["user_id"],
            org_id=data.get("org_id"),
            fingerprint=Fingerprint.from_dict(data["fingerprint"]),
            status=ProfileStatus(data.get("status", "building")),
            sample_count=data.get("sample_count", 0),
            total_word_count=data.get("total_word_count", 0),
            average_sample_word_count=data.get("average_sample_word_count", 0.0),
            confidence=data.get("confidence", 0.0),
            confidence_band=data.get("confidence_band", "low"),
            confidence_components=data.get("confidence_components", {}),
            source_type_counts=data.get("source_type_counts", {}),
            unique_source_ids=data.get("unique_source_ids", 0),
            first_sample_at=data.get("first_sample_at"),
            last_sample_at=data.get("last_sample_at"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass
class ProfileSample:
    """Audit record of one contribution to a profile."""
    profile_id: str
    source_type: SourceType
    word_count: int
    alpha: float
    fingerprint: Fingerprint
    source_id: Optional[str] = None
    alpha_details: Optional[Dict] = None
    created_at: Optional[float] = None

    def to_dict(self) -> Dict:
        return {
            "profile_id": self.profile_id,
            "source_type": self.source_type.value,
            "source_id": self.source_id,
            "word_count": self.word_count,
            "alpha": self.alpha,
            "alpha_details": self.alpha_details,
            "fingerprint": self.fingerprint.to_dict(),
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "ProfileSample":
        return cls(
            profile_id=data["profile_id"],
            source_type=SourceType(data["source_type"]),
            source_id=data.get("source_id"),
            word_count=data["word_count"],
            alpha=data["alpha"],
            alpha_details=data.get("alpha_details"),
            fingerprint=Fingerprint.from_dict(data["fingerprint"]),
            created_at=data.get("created_at"),
        )


@dataclass
class Evaluation:
    """One original/suggestion comparison.

    Written once. Correction fields may be patched once afterwards.
    """
    user_id: str
    mode: EditorialMode
    original_fingerprint: Fingerprint
    suggestion_fingerprint: Fingerprint
    profile_fingerprint: Optional[Fingerprint]
    profile_status: str  # none, building, active
    scores: VoiceScores
    thresholds: VoiceThresholds
    passed: bool
    enforced: bool
    org_id: Optional[str] = None
    document_id: Optional[str] = None
    id: Optional[str] = None
    profile_confidence: Optional[float] = None
    profile_confidence_band: Optional[str] = None
    semantic_fallback: bool = False
    provider: str = ""
    model: str = ""
    prompt_version: str = ""
    original_preview: str = ""
    suggestion_preview: str = ""
    created_at: Optional[float] = None
    correction_attempted: bool = False
    correction_type: Optional[CorrectionType] = None
    correction_improved: Optional[bool] = None
    final_combined_score: Optional[float] = None

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "org_id": self.org_id,
            "document_id": self.document_id,
            "mode": self.mode.value,
            "original_fingerprint": self.original_fingerprint.to_dict(),
            "suggestion_fingerprint": self.suggestion_fingerprint.to_dict(),
            "profile_fingerprint": self.profile_fingerprint.to_dict() if self.profile_fingerprint else None,
            "profile_status": self.profile_status,
            "profile_confidence": self.profile_confidence,
            "profile_confidence_band": self.profile_confidence_band,
            "scores": self.scores.to_dict(),
            "thresholds": self.thresholds.to_dict(),
            "passed": self.passed,
            "enforced": self.enforced,
            "semantic_fallback": self.semantic_fallback,
            "provider": self.provider,
            "model": self.model,
            "prompt_version": self.prompt_version,
            "created_at": self.created_at,
            "correction_attempted": self.correction_attempted,
            "correction_type": self.correction_type.value if self.correction_type else None,
            "correction_improved": self.correction_improved,
            "final_combined_score": self.final_combined_score,
        }


@dataclass
class Candidate:
    """One generated suggestion inside a run."""
    index: int
    variation_key: str
    text: str
    scores: VoiceScores
    selection_score: float
    enforcement_class: EnforcementClass
    phase: GenerationPhase
    passed: bool = False
    selected: bool = False
    shown: bool = False
    is_fallback: bool = False
    thresholds: Dict[str, float] = field(default_factory=dict)
    evaluation_id: Optional[str] = None
    run_id: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "run_id": self.run_id,
            "index": self.index,
            "variation_key": self.variation_key,
            "text": self.text,
            "scores": self.scores.to_dict(),
            "selection_score": self.selection_score,
            "enforcement_class": self.enforcement_class.value,
            "phase": self.phase.value,
            "passed": self.passed,
            "selected": self.selected,
            "shown": self.shown,
            "is_fallback": self.is_fallback,
            "thresholds": self.thresholds,
            "evaluation_id": self.evaluation_id,
        }


@dataclass
class Run:
    """One refinement request and its outcome."""
    user_id: str
    mode: EditorialMode
    original_text: str
    candidate_count: int
    selected_index: int
    best_passing_index: Optional[int]
    all_passed: bool
    fallback_used: bool
    enforcement_class: EnforcementClass
    outcome: EnforcementOutcome
    retry_attempted: bool
    returned_original: bool
    initial_best_combined: float
    initial_best_semantic: float
    final_best_combined: float
    final_best_semantic: float
    org_id: Optional[str] = None
    document_id: Optional[str] = None
    id: Optional[str] = None
    status: RunStatus = RunStatus.ACTIVE
    provider: str = ""
    model: str = ""
    prompt_version: str = ""
    variation_seed: int = 0
    nudge: Optional[str] = None
    scratchpad: Optional[str] = None
    generation_count: int = 1
    created_at: Optional[float] = None

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "org_id": self.org_id,
            "document_id": self.document_id,
            "mode": self.mode.value,
            "status": self.status.value,
            "candidate_count": self.candidate_count,
            "selected_index": self.selected_index,
            "best_passing_index": self.best_passing_index,
            "all_passed": self.all_passed,
            "fallback_used": self.fallback_used,
            "enforcement_class": self.enforcement_class.value,
            "outcome": self.outcome.value,
            "retry_attempted": self.retry_attempted,
            "returned_original": self.returned_original,
            "initial_best_combined": self.initial_best_combined,
            "initial_best_semantic": self.initial_best_semantic,
            "final_best_combined": self.final_best_combined,
            "final_best_semantic": self.final_best_semantic,
            "provider": self.provider,
            "model": self.model,
            "prompt_version": self.prompt_version,
            "variation_seed": self.variation_seed,
            "nudge": self.nudge,
            "scratchpad": self.scratchpad,
            "generation_count": self.generation_count,
            "created_at": self.created_at,
        }


@dataclass
class RunMetrics:
    """Scores of a run's winner, as seen by the drift monitor."""
    user_id: str
    run_id: str
    stylistic: float
    semantic: float
    combined: float
    confidence: Optional[float]
    provider: str
    model: str
    prompt_version: str
    created_at: float


@dataclass
class PreferenceSignal:
    """A bounded nudge along one style dimension, learned from Apply/Reject."""
    user_id: str
    mode: EditorialMode
    source: PreferenceSource
    dimension: str
    value: float  # -1 to 1
    magnitude: float
    created_at: float
    org_id: Optional[str] = None
    document_id: Optional[str] = None
    id: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "org_id": self.org_id,
            "document_id": self.document_id,
            "mode": self.mode.value,
            "source": self.source.value,
            "dimension": self.dimension,
            "value": self.value,
            "magnitude": self.magnitude,
            "created_at": self.created_at,
        }


@dataclass
class DriftAlert:
    user_id: str
    alert_type: DriftAlertType
    severity: DriftSeverity
    model: str
    prompt_version: str
    avg_before: float
    avg_after: float
    variance_before: float
    variance_after: float
    run_count: int
    id: Optional[str] = None
    created_at: Optional[float] = None

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "alert_type": self.alert_type.value,
            "severity": self.severity.value,
            "model": self.model,
            "prompt_version": self.prompt_version,
            "avg_before": self.avg_before,
            "avg_after": self.avg_after,
            "variance_before": self.variance_before,
            "variance_after": self.variance_after,
            "run_count": self.run_count,
            "created_at": self.created_at,
        }
