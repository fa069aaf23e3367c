"""Voice profile contribution and lookup."""

import threading
import time
from collections import defaultdict
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional

from ..models import ProfileStatus, SourceType, TenantContext
from ..storage.base import VoiceStore
from ..storage.records import ProfileSample, VoiceProfile
from ..style.blender import blend_fingerprints
from ..style.confidence import DiversityInputs, compute_confidence
from ..style.extractor import MIN_WORDS_FOR_FINGERPRINT, extract_fingerprint
from ..style.fingerprint import Fingerprint
from ..utils.logging import get_logger

logger = get_logger(__name__)

MIN_SAMPLES_FOR_ACTIVE = 3


@dataclass
class ContributionResult:
    skipped: bool
    reason: Optional[str] = None
    profile_id: Optional[str] = None
    alpha: Optional[float] = None
    word_count: int = 0
    status: Optional[ProfileStatus] = None

    def to_dict(self) -> Dict:
        return {
            "skipped": self.skipped,
            "reason": self.reason,
            "profile_id": self.profile_id,
            "alpha": self.alpha,
            "word_count": self.word_count,
            "status": self.status.value if self.status else None,
        }


class ProfileService:
    """Creates and evolves voice profiles one sample at a time.

    Writes are serialized per user: all of a user's profile scopes share one
    lock, so a profile is never blended by two contributions at once.
    """

    def __init__(
        self,
        store: VoiceStore,
        clock: Callable[[], float] = time.time,
        min_samples_for_active: int = MIN_SAMPLES_FOR_ACTIVE,
    ):
        self.store = store
        self.clock = clock
        self.min_samples_for_active = min_samples_for_active
        self._locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._locks_guard = threading.Lock()

    def _lock_for(self, user_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks[user_id]

    def lookup(self, tenant: TenantContext) -> Optional[VoiceProfile]:
        """Tenant-scoped profile if present, else the user's global profile."""
        return self.store.find_profile(tenant.profile_lookup_order())

    def contribute(
        self,
        tenant: TenantContext,
        text: str,
        source_type: SourceType,
        source_id: Optional[str] = None,
    ) -> ContributionResult:
        """Add a writing sample to the author's profile.

        Samples shorter than the minimum fingerprint size are skipped. The
        first sample creates the profile; later samples are blended in.
        """
        fingerprint = extract_fingerprint(text)
        if fingerprint.word_count < MIN_WORDS_FOR_FINGERPRINT:
            logger.debug(
                f"Skipping profile sample with {fingerprint.word_count} words",
                extra_data={"user_id": tenant.user_id},
            )
            return ContributionResult(skipped=True, reason="text_too_short", word_count=fingerprint.word_count)

        with self._lock_for(tenant.user_id):
            now = self.clock()
            profile = self.lookup(tenant)
            if profile is None:
                profile = self._create_profile(tenant, fingerprint, source_type, source_id, now)
                alpha = 1.0
                alpha_details = None
            else:
                result = blend_fingerprints(
                    profile.fingerprint,
                    fingerprint,
                    profile.sample_count,
                    profile.average_sample_word_count,
                    profile.last_sample_at,
                    now,
                )
                alpha = result.alpha
                alpha_details = result.details.to_dict()
                profile = self._update_profile(profile, result.blended, fingerprint.word_count, source_type, source_id, now)

            self.store.add_sample(ProfileSample(
                profile_id=profile.id,
                source_type=source_type,
                source_id=source_id,
                word_count=fingerprint.word_count,
                alpha=alpha,
                alpha_details=alpha_details,
                fingerprint=fingerprint,
                created_at=now,
            ))

        logger.info(
            f"Profile {profile.id} now has {profile.sample_count} samples ({profile.status.value})",
            extra_data={"alpha": alpha, "confidence": round(profile.confidence, 3)},
        )
        return ContributionResult(
            skipped=False,
            profile_id=profile.id,
            alpha=alpha,
            word_count=fingerprint.word_count,
            status=profile.status,
        )

    def _create_profile(
        self,
        tenant: TenantContext,
        fingerprint: Fingerprint,
        source_type: SourceType,
        source_id: Optional[str],
        now: float,
    ) -> VoiceProfile:
        unique_source_ids = 1 if source_id else 0
        source_type_counts = {t.value: 0 for t in SourceType}
        source_type_counts[source_type.value] = 1
        confidence = compute_confidence(
            fingerprint.word_count,
            1,
            DiversityInputs(
                sample_count=1,
                unique_source_ids=unique_source_ids,
                source_type_counts=source_type_counts,
            ),
            now,
            now,
        )
        profile = VoiceProfile(
            user_id=tenant.user_id,
            org_id=tenant.org_id,
            fingerprint=fingerprint,
            status=ProfileStatus.ACTIVE if self.min_samples_for_active <= 1 else ProfileStatus.BUILDING,
            sample_count=1,
            total_word_count=fingerprint.word_count,
            average_sample_word_count=float(fingerprint.word_count),
            confidence=confidence.overall,
            confidence_band=confidence.band.value,
            confidence_components=confidence.components.to_dict(),
            source_type_counts=source_type_counts,
            unique_source_ids=unique_source_ids,
            first_sample_at=now,
            last_sample_at=now,
            created_at=now,
            updated_at=now,
        )
        profile.id = self.store.insert_profile(profile)
        return profile

    def _update_profile(
        self,
        profile: VoiceProfile,
        blended: Fingerprint,
        word_count: int,
        source_type: SourceType,
        source_id: Optional[str],
        now: float,
    ) -> VoiceProfile:
        sample_count = profile.sample_count + 1
        total_words = profile.total_word_count + word_count

        source_type_counts = dict(profile.source_type_counts)
        source_type_counts[source_type.value] = source_type_counts.get(source_type.value, 0) + 1

        source_ids = {s.source_id for s in self.store.list_samples(profile.id) if s.source_id}
        if source_id:
            source_ids.add(source_id)

        oldest = profile.first_sample_at or profile.created_at or now
        confidence = compute_confidence(
            total_words,
            sample_count,
            DiversityInputs(
                sample_count=sample_count,
                unique_source_ids=len(source_ids),
                source_type_counts=source_type_counts,
            ),
            oldest,
            now,
        )

        updated = replace(
            profile,
            fingerprint=blended,
            sample_count=sample_count,
            total_word_count=total_words,
            average_sample_word_count=total_words / sample_count,
            status=ProfileStatus.ACTIVE if sample_count >= self.min_samples_for_active else ProfileStatus.BUILDING,
            confidence=confidence.overall,
            confidence_band=confidence.band.value,
            confidence_components=confidence.components.to_dict(),
            source_type_counts=source_type_counts,
            unique_source_ids=len(source_ids),
            first_sample_at=oldest,
            last_sample_at=now,
            updated_at=now,
        )
        self.store.update_profile(updated)
        return updated
