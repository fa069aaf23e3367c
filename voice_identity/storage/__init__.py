"""Persistence for profiles, evaluations, runs and drift data."""

from .base import VoiceStore
from .memory import InMemoryStore, JSONProfileStore
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

__all__ = [
    "VoiceStore",
    "InMemoryStore",
    "JSONProfileStore",
    "Candidate",
    "DriftAlert",
    "Evaluation",
    "PreferenceSignal",
    "ProfileSample",
    "Run",
    "RunMetrics",
    "VoiceProfile",
]
