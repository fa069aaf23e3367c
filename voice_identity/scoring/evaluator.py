"""Voice evaluation of one suggestion against its original."""

import time
from typing import Callable, Optional

from .embeddings import Embedder
from .similarity import (
    compute_combined_score,
    compute_scope_score,
    compute_semantic_score,
    compute_stylistic_score,
)
from ..models import VOICE_THRESHOLDS, TenantContext, VoiceScores, parse_mode
from ..storage.base import VoiceStore
from ..storage.records import Evaluation, VoiceProfile
from ..style.extractor import MIN_WORDS_FOR_FINGERPRINT, extract_fingerprint
from ..utils.logging import get_logger

logger = get_logger(__name__)

PREVIEW_CHARS = 500

_NO_PROFILE = object()


class VoiceEvaluator:
    """Scores suggestions and records every evaluation.

    Enforcement is active only when the author's profile is ``active`` and
    the original is long enough to fingerprint reliably.
    """

    def __init__(
        self,
        store: VoiceStore,
        embedder: Embedder,
        min_words_for_enforcement: int = MIN_WORDS_FOR_FINGERPRINT,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.embedder = embedder
        self.min_words_for_enforcement = min_words_for_enforcement
        self.clock = clock

    def evaluate(
        self,
        original: str,
        suggestion: str,
        mode,
        tenant: TenantContext,
        profile=_NO_PROFILE,
        provider: str = "",
        model: str = "",
        prompt_version: str = "",
    ) -> Evaluation:
        """Evaluate a suggestion.

        Args:
            original: The author's text.
            suggestion: The generated rewrite.
            mode: Editorial mode (enum or string value).
            tenant: Whose profile to score against.
            profile: Profile already resolved by the caller. Looked up
                through the two-tier order when omitted; pass None to score
                without a profile.
            provider: Generation provider name, for the audit record.
            model: Generation model name, for the audit record.
            prompt_version: Base prompt version, for the audit record.

        Returns:
            The evaluation, with ``id`` set when it was recorded.
        """
        mode = parse_mode(mode)
        if profile is _NO_PROFILE:
            profile = self.store.find_profile(tenant.profile_lookup_order())

        original_fp = extract_fingerprint(original)
        suggestion_fp = extract_fingerprint(suggestion)

        profile_fp = profile.fingerprint if profile else None
        profile_confidence = profile.confidence if profile else None
        enforced = bool(
            profile
            and profile.is_active
            and original_fp.word_count >= self.min_words_for_enforcement
        )

        semantic, used_fallback = compute_semantic_score(original, suggestion, self.embedder)
        stylistic = compute_stylistic_score(suggestion_fp, profile_fp or original_fp, profile_confidence)
        scope = compute_scope_score(original_fp, suggestion_fp, mode)
        combined = compute_combined_score(semantic, stylistic, scope, mode, profile_confidence)
        scores = VoiceScores(semantic=semantic, stylistic=stylistic, scope=scope, combined=combined)

        thresholds = VOICE_THRESHOLDS[mode]
        evaluation = Evaluation(
            user_id=tenant.user_id,
            org_id=tenant.org_id,
            document_id=tenant.document_id,
            mode=mode,
            original_fingerprint=original_fp,
            suggestion_fingerprint=suggestion_fp,
            profile_fingerprint=profile_fp,
            profile_status=_profile_status(profile),
            profile_confidence=profile_confidence,
            profile_confidence_band=profile.confidence_band if profile else None,
            scores=scores,
            thresholds=thresholds,
            passed=thresholds.passes(scores) if enforced else True,
            enforced=enforced,
            semantic_fallback=used_fallback,
            provider=provider,
            model=model,
            prompt_version=prompt_version,
            original_preview=original[:PREVIEW_CHARS],
            suggestion_preview=suggestion[:PREVIEW_CHARS],
            created_at=self.clock(),
        )

        try:
            evaluation.id = self.store.record_evaluation(evaluation)
        except Exception as e:
            logger.warning(f"Failed to record evaluation: {e}", extra_data={"user_id": tenant.user_id})

        logger.debug(
            f"Evaluated suggestion in {mode.value} mode",
            extra_data={**scores.to_dict(), "enforced": enforced, "fallback": used_fallback},
        )
        return evaluation


def _profile_status(profile: Optional[VoiceProfile]) -> str:
    return profile.status.value if profile else "none"
