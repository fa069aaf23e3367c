"""Voice profile lifecycle."""

from .service import ProfileService, ContributionResult, MIN_SAMPLES_FOR_ACTIVE

__all__ = ["ProfileService", "ContributionResult", "MIN_SAMPLES_FOR_ACTIVE"]
