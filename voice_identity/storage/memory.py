"""In-process store, with an optional JSON sidecar for profiles."""

import copy
import json
import os
import threading
import uuid
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from .base import VoiceStore
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
from ..models import CorrectionType, EditorialMode, RunStatus
from ..utils.logging import get_logger

logger = get_logger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


class InMemoryStore(VoiceStore):
    """Thread-safe store keeping every record in memory.

    Records are copied on the way in and out so callers never share
    mutable state with the store.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._profiles: Dict[str, VoiceProfile] = {}
        self._samples: Dict[str, List[ProfileSample]] = defaultdict(list)
        self._evaluations: Dict[str, Evaluation] = {}
        self._runs: Dict[str, Run] = {}
        self._candidates: Dict[str, List[Candidate]] = {}
        self._metrics: List[RunMetrics] = []
        self._alerts: List[DriftAlert] = []
        self._preference_signals: List[PreferenceSignal] = []

    # Profiles

    def get_profile(self, user_id: str, org_id: Optional[str] = None) -> Optional[VoiceProfile]:
        with self._lock:
            for profile in self._profiles.values():
                if profile.user_id == user_id and profile.org_id == org_id:
                    return copy.deepcopy(profile)
        return None

    def insert_profile(self, profile: VoiceProfile) -> str:
        with self._lock:
            if self.get_profile(profile.user_id, profile.org_id) is not None:
                raise ValueError(f"Profile already exists for {profile.user_id}/{profile.org_id}")
            stored = copy.deepcopy(profile)
            stored.id = stored.id or _new_id()
            self._profiles[stored.id] = stored
            self._after_profile_write()
            return stored.id

    def update_profile(self, profile: VoiceProfile) -> None:
        with self._lock:
            if profile.id not in self._profiles:
                raise KeyError(f"Profile not found: {profile.id}")
            self._profiles[profile.id] = copy.deepcopy(profile)
            self._after_profile_write()

    def add_sample(self, sample: ProfileSample) -> None:
        with self._lock:
            self._samples[sample.profile_id].append(copy.deepcopy(sample))
            self._after_profile_write()

    def list_samples(self, profile_id: str) -> List[ProfileSample]:
        with self._lock:
            return copy.deepcopy(self._samples.get(profile_id, []))

    def _after_profile_write(self) -> None:
        """Hook for subclasses that persist profiles."""
        pass

    # Evaluations

    def record_evaluation(self, evaluation: Evaluation) -> str:
        with self._lock:
            stored = copy.deepcopy(evaluation)
            stored.id = _new_id()
            self._evaluations[stored.id] = stored
            return stored.id

    def get_evaluation(self, evaluation_id: str) -> Optional[Evaluation]:
        with self._lock:
            evaluation = self._evaluations.get(evaluation_id)
            return copy.deepcopy(evaluation) if evaluation else None

    def record_correction(
        self,
        evaluation_id: str,
        correction_type: CorrectionType,
        improved: bool,
        final_combined_score: Optional[float],
    ) -> None:
        with self._lock:
            evaluation = self._evaluations.get(evaluation_id)
            if evaluation is None:
                raise KeyError(f"Evaluation not found: {evaluation_id}")
            if evaluation.correction_attempted:
                raise ValueError(f"Correction already recorded for evaluation {evaluation_id}")
            evaluation.correction_attempted = True
            evaluation.correction_type = correction_type
            evaluation.correction_improved = improved
            evaluation.final_combined_score = final_combined_score

    # Runs and candidates

    def create_run(
        self,
        run: Run,
        candidates: Sequence[Candidate],
        supersedes: Optional[str] = None,
    ) -> str:
        with self._lock:
            if supersedes is not None:
                source = self._runs.get(supersedes)
                if source is None:
                    raise KeyError(f"Run not found: {supersedes}")
                source.status = RunStatus.SUPERSEDED
            if run.document_id is not None:
                for existing in self._runs.values():
                    if (
                        existing.status == RunStatus.ACTIVE
                        and existing.document_id == run.document_id
                        and existing.mode == run.mode
                    ):
                        existing.status = RunStatus.SUPERSEDED

            stored = copy.deepcopy(run)
            stored.id = _new_id()
            self._runs[stored.id] = stored

            stored_candidates = copy.deepcopy(list(candidates))
            for candidate in stored_candidates:
                candidate.run_id = stored.id
            self._candidates[stored.id] = stored_candidates
            return stored.id

    def get_run(self, run_id: str) -> Optional[Run]:
        with self._lock:
            run = self._runs.get(run_id)
            return copy.deepcopy(run) if run else None

    def get_candidates(self, run_id: str) -> List[Candidate]:
        with self._lock:
            return copy.deepcopy(self._candidates.get(run_id, []))

    def show_candidate(self, run_id: str, index: int) -> None:
        with self._lock:
            run = self._runs.get(run_id)
            if run is None:
                raise KeyError(f"Run not found: {run_id}")
            found = False
            for candidate in self._candidates[run_id]:
                candidate.selected = candidate.index == index
                if candidate.index == index:
                    candidate.shown = True
                    found = True
            if not found:
                raise KeyError(f"Candidate {index} not found in run {run_id}")
            run.selected_index = index

    # Drift

    def record_run_metrics(self, metrics: RunMetrics) -> None:
        with self._lock:
            self._metrics.append(copy.deepcopy(metrics))

    def recent_run_metrics(self, user_id: str, limit: int) -> List[RunMetrics]:
        with self._lock:
            matching = [m for m in self._metrics if m.user_id == user_id]
        matching.sort(key=lambda m: m.created_at, reverse=True)
        return copy.deepcopy(matching[:limit])

    def create_drift_alert(self, alert: DriftAlert) -> str:
        with self._lock:
            stored = copy.deepcopy(alert)
            stored.id = _new_id()
            self._alerts.append(stored)
            return stored.id

    def list_drift_alerts(self, user_id: Optional[str] = None) -> List[DriftAlert]:
        with self._lock:
            return copy.deepcopy([a for a in self._alerts if user_id is None or a.user_id == user_id])

    # Preference signals

    def record_preference_signals(self, signals: Sequence[PreferenceSignal]) -> List[str]:
        with self._lock:
            ids = []
            for signal in signals:
                stored = copy.deepcopy(signal)
                stored.id = _new_id()
                self._preference_signals.append(stored)
                ids.append(stored.id)
            return ids

    def list_preference_signals(
        self,
        user_id: str,
        org_id: Optional[str] = None,
        mode: Optional[EditorialMode] = None,
    ) -> List[PreferenceSignal]:
        with self._lock:
            matching = [
                s for s in self._preference_signals
                if s.user_id == user_id
                and s.org_id == org_id
                and (mode is None or s.mode == mode)
            ]
        matching.sort(key=lambda s: s.created_at, reverse=True)
        return copy.deepcopy(matching)


class JSONProfileStore(InMemoryStore):
    """In-memory store whose profiles and samples persist to a JSON sidecar.

    Runs, evaluations and metrics stay in memory. The profile file is
    human readable and survives across CLI invocations.
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = path
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._load()

    def _load(self) -> None:
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Failed to load profile store {self.path}: {e}. Starting empty.")
            return

        for profile_data in data.get("profiles", []):
            profile = VoiceProfile.from_dict(profile_data)
            self._profiles[profile.id] = profile
        for sample_data in data.get("samples", []):
            sample = ProfileSample.from_dict(sample_data)
            self._samples[sample.profile_id].append(sample)
        logger.info(f"Loaded {len(self._profiles)} profiles from {self.path}")

    def _after_profile_write(self) -> None:
        data = {
            "profiles": [p.to_dict() for p in self._profiles.values()],
            "samples": [s.to_dict() for samples in self._samples.values() for s in samples],
        }
        with open(self.path, 'w') as f:
            json.dump(data, f, indent=2)
