"""Voice identity engine: the surface consumed by the editor layer.

Wires the profile service, evaluator, orchestrator and drift monitor
around one store and exposes ``refine``, ``try_again`` and
``record_feedback``.
"""

import time
from typing import Callable, Optional

from .config import Config
from .generation.orchestrator import RefinementOrchestrator, RefinementResult
from .generation.preferences import (
    AggregatedPreferences,
    aggregate_signals,
    build_signal_records,
    extract_preference_signals,
)
from .llm.provider import create_generation_provider
from .models import PreferenceSource, SourceType, TenantContext, parse_mode
from .monitoring.drift import DriftMonitor
from .profiles.service import ContributionResult, ProfileService
from .scoring.embeddings import Embedder, create_embedder_from_config
from .scoring.evaluator import VoiceEvaluator
from .storage.base import VoiceStore
from .storage.memory import InMemoryStore
from .storage.records import Evaluation
from .utils.logging import get_logger

logger = get_logger(__name__)


class VoiceEngine:
    """Facade over the voice identity components."""

    def __init__(
        self,
        provider,
        embedder: Embedder,
        store: Optional[VoiceStore] = None,
        config: Optional[Config] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or Config()
        self.clock = clock
        self.store = store or InMemoryStore()
        engine_config = self.config.engine

        self.profiles = ProfileService(
            self.store,
            clock=clock,
            min_samples_for_active=engine_config.min_samples_for_enforcement,
        )
        self.evaluator = VoiceEvaluator(
            self.store,
            embedder,
            min_words_for_enforcement=engine_config.min_words_for_enforcement,
            clock=clock,
        )
        self.drift_monitor = DriftMonitor(
            self.store,
            self.config.drift,
            clock=clock,
            background=engine_config.background_drift_checks,
        )
        self.orchestrator = RefinementOrchestrator(
            provider,
            self.evaluator,
            self.store,
            drift_monitor=self.drift_monitor,
            config=engine_config,
            clock=clock,
        )

    @classmethod
    def from_config(cls, config: Config, store: Optional[VoiceStore] = None) -> "VoiceEngine":
        """Build an engine with the configured generation provider and embedder."""
        provider = create_generation_provider(config.llm)
        embedder = create_embedder_from_config(config.embeddings)
        return cls(provider, embedder, store=store, config=config)

    def refine(
        self,
        text: str,
        mode,
        tenant: TenantContext,
        nudge: Optional[str] = None,
        variation_seed: int = 0,
        scratchpad: Optional[str] = None,
    ) -> RefinementResult:
        return self.orchestrator.refine(
            text, mode, tenant, nudge=nudge, variation_seed=variation_seed, scratchpad=scratchpad,
        )

    def try_again(self, run_id: str, user_id: str) -> RefinementResult:
        return self.orchestrator.try_again(run_id, user_id)

    def evaluate(self, original: str, suggestion: str, mode, tenant: TenantContext) -> Evaluation:
        return self.evaluator.evaluate(original, suggestion, mode, tenant)

    def contribute(
        self,
        tenant: TenantContext,
        text: str,
        source_type: SourceType = SourceType.PUBLISHED_POST,
        source_id: Optional[str] = None,
        best_effort: bool = False,
    ) -> Optional[ContributionResult]:
        """Add a writing sample to the author's profile.

        With ``best_effort`` a failing contribution is logged and None is
        returned, so it never interrupts the surrounding flow.
        """
        if not best_effort:
            return self.profiles.contribute(tenant, text, source_type, source_id)
        try:
            return self.profiles.contribute(tenant, text, source_type, source_id)
        except Exception as e:
            logger.warning(f"Profile contribution failed: {e}", extra_data={"user_id": tenant.user_id})
            return None

    def record_feedback(
        self,
        tenant: TenantContext,
        mode,
        source,
        original_text: str,
        applied_text: str,
    ) -> int:
        """Record preference signals from an Apply or Reject of a suggestion.

        The voice profile is left untouched. Returns the number of signals
        stored; texts too short to compare store none.
        """
        mode = parse_mode(mode)
        source = PreferenceSource(source)
        deltas = extract_preference_signals(original_text, applied_text, source)
        if not deltas:
            return 0
        self.store.record_preference_signals(
            build_signal_records(deltas, tenant, mode, source, self.clock())
        )
        logger.info(
            f"Recorded {len(deltas)} preference signals from {source.value}",
            extra_data={"user_id": tenant.user_id, "mode": mode.value},
        )
        return len(deltas)

    def preferences(self, tenant: TenantContext, mode=None) -> AggregatedPreferences:
        mode = parse_mode(mode) if mode is not None else None
        signals = self.store.list_preference_signals(tenant.user_id, tenant.org_id, mode)
        return aggregate_signals(signals, self.clock())

    def close(self) -> None:
        self.drift_monitor.close()
