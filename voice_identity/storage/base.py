"""Persistence collaborator interface."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from .records import (
    Candidate,
    DriftAlert,
    Evaluation,
    PreferenceSignal,
    ProfileSample,
    Run,
    RunMetrics,
    VoiceProfile,
)
from ..models import CorrectionType, EditorialMode


class VoiceStore(ABC):
    """Storage for profiles, evaluations, runs, metrics, alerts and preference signals.

    Evaluations, runs, candidates, metrics, alerts and signals are append-only.
    Profiles are read-modify-write; callers serialize writes per profile.
    Implementations must make ``create_run`` (supersede then insert) atomic.
    """

    # Profiles

    @abstractmethod
    def get_profile(self, user_id: str, org_id: Optional[str] = None) -> Optional[VoiceProfile]:
        """Exact-scope profile lookup."""
        pass

    def find_profile(self, lookup_order: Sequence[Tuple[str, Optional[str]]]) -> Optional[VoiceProfile]:
        """First existing profile in the given scope order."""
        for user_id, org_id in lookup_order:
            profile = self.get_profile(user_id, org_id)
            if profile is not None:
                return profile
        return None

    @abstractmethod
    def insert_profile(self, profile: VoiceProfile) -> str:
        pass

    @abstractmethod
    def update_profile(self, profile: VoiceProfile) -> None:
        """Replace the stored state of an existing profile."""
        pass

    @abstractmethod
    def add_sample(self, sample: ProfileSample) -> None:
        pass

    @abstractmethod
    def list_samples(self, profile_id: str) -> List[ProfileSample]:
        pass

    # Evaluations

    @abstractmethod
    def record_evaluation(self, evaluation: Evaluation) -> str:
        pass

    @abstractmethod
    def get_evaluation(self, evaluation_id: str) -> Optional[Evaluation]:
        pass

    @abstractmethod
    def record_correction(
        self,
        evaluation_id: str,
        correction_type: CorrectionType,
        improved: bool,
        final_combined_score: Optional[float],
    ) -> None:
        """Patch correction metadata onto an evaluation, at most once.

        Raises:
            KeyError: If the evaluation doesn't exist.
            ValueError: If a correction was already recorded.
        """
        pass

    # Runs and candidates

    @abstractmethod
    def create_run(
        self,
        run: Run,
        candidates: Sequence[Candidate],
        supersedes: Optional[str] = None,
    ) -> str:
        """Supersede active runs for the same (document, mode) and insert this one.

        ``supersedes`` names a run this one regenerates; it is superseded
        in the same step whether or not the run carries a document.
        """
        pass

    @abstractmethod
    def get_run(self, run_id: str) -> Optional[Run]:
        pass

    @abstractmethod
    def get_candidates(self, run_id: str) -> List[Candidate]:
        pass

    @abstractmethod
    def show_candidate(self, run_id: str, index: int) -> None:
        """Move the selection to a candidate and mark it shown."""
        pass

    # Drift

    @abstractmethod
    def record_run_metrics(self, metrics: RunMetrics) -> None:
        pass

    @abstractmethod
    def recent_run_metrics(self, user_id: str, limit: int) -> List[RunMetrics]:
        """Most recent metrics for a user, newest first."""
        pass

    @abstractmethod
    def create_drift_alert(self, alert: DriftAlert) -> str:
        pass

    @abstractmethod
    def list_drift_alerts(self, user_id: Optional[str] = None) -> List[DriftAlert]:
        pass

    # Preference signals

    @abstractmethod
    def record_preference_signals(self, signals: Sequence[PreferenceSignal]) -> List[str]:
        pass

    @abstractmethod
    def list_preference_signals(
        self,
        user_id: str,
        org_id: Optional[str] = None,
        mode: Optional[EditorialMode] = None,
    ) -> List[PreferenceSignal]:
        """Signals for one (user, org) scope, newest first, optionally for one mode."""
        pass
