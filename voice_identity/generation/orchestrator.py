"""Multi-candidate refinement with a single enforcement retry.

A refinement request runs through these phases:

1. Generate two initial candidates from complementary variations.
2. Score and classify both; the better one by selection score decides
   the initial enforcement class.
3. If that class is not ``pass`` and enforcement is active, generate two
   corrective candidates exactly once.
4. If nothing in the pool passes after the retry, return the author's
   original text.
5. Persist the run with every candidate, record run metrics and schedule
   a drift check.

Each pair is generated and scored concurrently. Both members of a pair
finish before classification starts.
"""

import contextvars
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .modes import get_mode_config, prompt_version
from .nudges import apply_nudge, validate_nudge
from .preferences import aggregate_signals, augment_prompt, build_preference_suffix
from .selection import rank, select_best, select_final, selection_score
from .variations import Variation, get_variation_pair
from ..config import EngineConfig
from ..enforcement.classifier import (
    EffectiveThresholds,
    classify,
    determine_outcome,
    enforcement_temperature,
    get_effective_thresholds,
    requires_enforcement,
)
from ..enforcement.prompts import build_enforcement_system_prompt
from ..errors import (
    GenerationError,
    RunAccessError,
    RunNotFoundError,
    RunSupersededError,
    TryAgainLimitError,
)
from ..llm.provider import LLMError
from ..models import (
    CorrectionType,
    EditorialMode,
    EnforcementClass,
    EnforcementOutcome,
    GenerationPhase,
    RunStatus,
    TenantContext,
    parse_mode,
)
from ..monitoring.drift import DriftMonitor
from ..scoring.evaluator import VoiceEvaluator
from ..storage.base import VoiceStore
from ..storage.records import Candidate, Evaluation, Run, RunMetrics
from ..utils.logging import get_logger, set_request_id

logger = get_logger(__name__)

CANDIDATES_PER_ROUND = 2
MAX_CANDIDATES = 2 * CANDIDATES_PER_ROUND

CORRECTION_TYPES = {
    EnforcementClass.SOFT_WARNING: CorrectionType.CONSTRAINT_BOOST,
    EnforcementClass.DRIFT: CorrectionType.CONSTRAINT_BOOST,
    EnforcementClass.FAILURE: CorrectionType.MINIMAL_EDIT,
}


@dataclass
class CandidateMetadata:
    run_id: str
    candidate_index: int  # -1 when the original text is returned
    has_alternate: bool
    total_candidates: int
    fallback_used: bool
    returned_original: bool
    retry_attempted: bool
    variation_seed: int
    evaluation: Optional[Dict] = None

    def to_dict(self) -> Dict:
        data = {
            "run_id": self.run_id,
            "candidate_index": self.candidate_index,
            "has_alternate": self.has_alternate,
            "total_candidates": self.total_candidates,
            "fallback_used": self.fallback_used,
            "returned_original": self.returned_original,
            "retry_attempted": self.retry_attempted,
            "variation_seed": self.variation_seed,
        }
        if self.evaluation is not None:
            data["evaluation"] = self.evaluation
        return data


@dataclass
class RefinementResult:
    original_text: str
    suggested_text: str
    mode: EditorialMode
    enforcement_class: EnforcementClass
    enforcement_outcome: EnforcementOutcome
    candidate_metadata: CandidateMetadata
    provider: str = ""
    model: str = ""
    prompt_version: str = ""

    def to_dict(self) -> Dict:
        return {
            "original_text": self.original_text,
            "suggested_text": self.suggested_text,
            "mode": self.mode.value,
            "enforcement_class": self.enforcement_class.value,
            "enforcement_outcome": self.enforcement_outcome.value,
            "candidate_metadata": self.candidate_metadata.to_dict(),
            "provider": self.provider,
            "model": self.model,
            "prompt_version": self.prompt_version,
        }


@dataclass
class ScoredCandidate:
    """A generated candidate while the run is in flight."""
    index: int
    variation_key: str
    text: str
    evaluation: Evaluation
    selection_score: float
    enforcement_class: EnforcementClass
    phase: GenerationPhase
    thresholds: EffectiveThresholds

    @property
    def passed(self) -> bool:
        return self.enforcement_class == EnforcementClass.PASS


class RefinementOrchestrator:
    """Drives generation, scoring, enforcement and selection for one request.

    The provider is any object with ``generate(system_prompt, user_prompt,
    temperature)`` plus ``provider_name`` and ``model`` attributes.
    """

    def __init__(
        self,
        provider,
        evaluator: VoiceEvaluator,
        store: VoiceStore,
        drift_monitor: Optional[DriftMonitor] = None,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.provider = provider
        self.evaluator = evaluator
        self.store = store
        self.drift_monitor = drift_monitor
        self.config = config or EngineConfig()
        self.clock = clock

    def refine(
        self,
        text: str,
        mode,
        tenant: TenantContext,
        nudge: Optional[str] = None,
        variation_seed: int = 0,
        scratchpad: Optional[str] = None,
    ) -> RefinementResult:
        """Refine a text in the given editorial mode.

        ``scratchpad`` holds the author's free-form style notes. It is kept
        on the run so a regeneration from ``try_again`` sees the same notes.

        Raises:
            ValueError: If the text is empty, or the mode or nudge is unknown.
            GenerationError: If a candidate could not be generated.
        """
        return self._refine(
            text, mode, tenant, nudge, variation_seed, generation_count=1, scratchpad=scratchpad,
        )

    def try_again(self, run_id: str, user_id: str) -> RefinementResult:
        """Show another candidate from a run, regenerating only when none is left.

        Raises:
            RunNotFoundError: If the run doesn't exist.
            RunAccessError: If the run belongs to another user.
            RunSupersededError: If a newer run replaced this one.
            TryAgainLimitError: If the run chain used up its fresh generations.
            GenerationError: If regeneration failed.
        """
        set_request_id()
        run = self.store.get_run(run_id)
        if run is None:
            raise RunNotFoundError(f"Run not found: {run_id}")
        if run.user_id != user_id:
            raise RunAccessError(f"Run {run_id} does not belong to user {user_id}")
        if run.status == RunStatus.SUPERSEDED:
            raise RunSupersededError("This run has been superseded. Start a new refinement.")

        if not run.returned_original:
            candidates = self.store.get_candidates(run_id)
            unshown = rank([c for c in candidates if c.passed and not c.shown])
            if unshown:
                chosen = unshown[0]
                self.store.show_candidate(run_id, chosen.index)
                logger.info(
                    f"Swapped run {run_id} to candidate {chosen.index}",
                    extra_data={"remaining": len(unshown) - 1},
                )
                return RefinementResult(
                    original_text=run.original_text,
                    suggested_text=chosen.text,
                    mode=run.mode,
                    enforcement_class=run.enforcement_class,
                    enforcement_outcome=run.outcome,
                    candidate_metadata=CandidateMetadata(
                        run_id=run_id,
                        candidate_index=chosen.index,
                        has_alternate=len(unshown) > 1,
                        total_candidates=len(candidates),
                        fallback_used=chosen.is_fallback,
                        returned_original=False,
                        retry_attempted=run.retry_attempted,
                        variation_seed=run.variation_seed,
                        evaluation=self._stored_debug_detail(chosen) if self.config.debug else None,
                    ),
                    provider=run.provider,
                    model=run.model,
                    prompt_version=run.prompt_version,
                )

        if run.generation_count >= self.config.max_fresh_generations:
            raise TryAgainLimitError(
                f"Run {run_id} has used all {self.config.max_fresh_generations} fresh generations"
            )

        logger.info(f"No unshown passing candidate in run {run_id}, regenerating")
        return self._refine(
            run.original_text,
            run.mode,
            TenantContext(user_id=run.user_id, org_id=run.org_id, document_id=run.document_id),
            run.nudge,
            run.variation_seed + 1,
            generation_count=run.generation_count + 1,
            scratchpad=run.scratchpad,
            supersedes=run_id,
        )

    def _refine(
        self,
        text: str,
        mode,
        tenant: TenantContext,
        nudge: Optional[str],
        variation_seed: int,
        generation_count: int,
        scratchpad: Optional[str] = None,
        supersedes: Optional[str] = None,
    ) -> RefinementResult:
        set_request_id()
        if not text or not text.strip():
            raise ValueError("Text to refine must not be empty")
        mode = parse_mode(mode)
        validate_nudge(nudge)

        mode_prompt = get_mode_config(mode).system_prompt
        version = prompt_version(mode_prompt)
        signals = self.store.list_preference_signals(tenant.user_id, tenant.org_id, mode)
        preference_suffix = build_preference_suffix(aggregate_signals(signals, self.clock()))
        base_prompt = apply_nudge(augment_prompt(mode_prompt, scratchpad, preference_suffix), nudge)
        variation_a, variation_b = get_variation_pair(mode, variation_seed)
        variations = (variation_a, variation_b)
        profile = self.store.find_profile(tenant.profile_lookup_order())
        base_temperature = self.config.generation_temperature

        logger.info(
            f"Refining {len(text.split())} words in {mode.value} mode",
            extra_data={
                "user_id": tenant.user_id,
                "seed": variation_seed,
                "preference_hints": bool(preference_suffix),
            },
        )

        candidates = self._generate_round(
            [(v.key, _with_variation(base_prompt, v)) for v in variations],
            text, mode, tenant, profile, version, base_temperature,
            GenerationPhase.INITIAL, start_index=0,
        )

        best_initial = rank(candidates)[0]
        initial_class = best_initial.enforcement_class
        enforced = best_initial.evaluation.enforced
        logger.info(
            f"Initial best candidate classified {initial_class.value}",
            extra_data={"enforced": enforced, **best_initial.evaluation.scores.to_dict()},
        )

        retry_attempted = False
        returned_original = False
        if requires_enforcement(initial_class) and enforced:
            retry_attempted = True
            temperature = enforcement_temperature(base_temperature, initial_class)
            profile_fingerprint = best_initial.evaluation.profile_fingerprint
            logger.info(
                f"Enforcement retry for {initial_class.value}",
                extra_data={"temperature": temperature},
            )
            candidates.extend(self._generate_round(
                [
                    (
                        v.enforced_key,
                        build_enforcement_system_prompt(
                            _with_variation(base_prompt, v), initial_class, mode, profile_fingerprint
                        ),
                    )
                    for v in variations
                ],
                text, mode, tenant, profile, version, temperature,
                GenerationPhase.ENFORCEMENT_RETRY, start_index=len(candidates),
            ))
            returned_original = not any(c.passed for c in candidates)

        assert len(candidates) in (CANDIDATES_PER_ROUND, MAX_CANDIDATES), \
            f"Run produced {len(candidates)} candidates"

        winner, fallback_used = select_final(candidates)
        if not enforced:
            outcome = EnforcementOutcome.PASS
        elif returned_original:
            outcome = EnforcementOutcome.ORIGINAL_RETURNED
        else:
            outcome = determine_outcome(initial_class, winner.enforcement_class)

        best_passing = select_best(candidates)
        run = Run(
            user_id=tenant.user_id,
            org_id=tenant.org_id,
            document_id=tenant.document_id,
            mode=mode,
            original_text=text,
            candidate_count=len(candidates),
            selected_index=winner.index,
            best_passing_index=best_passing.index if best_passing else None,
            all_passed=all(c.passed for c in candidates),
            fallback_used=fallback_used,
            enforcement_class=initial_class,
            outcome=outcome,
            retry_attempted=retry_attempted,
            returned_original=returned_original,
            initial_best_combined=best_initial.evaluation.scores.combined,
            initial_best_semantic=best_initial.evaluation.scores.semantic,
            final_best_combined=winner.evaluation.scores.combined,
            final_best_semantic=winner.evaluation.scores.semantic,
            provider=self.provider.provider_name,
            model=self.provider.model,
            prompt_version=version,
            variation_seed=variation_seed,
            nudge=nudge,
            scratchpad=scratchpad,
            generation_count=generation_count,
            created_at=self.clock(),
        )
        records = [
            _to_record(c, winner, fallback_used, returned_original)
            for c in candidates
        ]
        run_id = self.store.create_run(run, records, supersedes=supersedes)

        if retry_attempted:
            self._record_correction(best_initial, initial_class, winner)
        self._record_metrics(run_id, tenant, winner, version)

        logger.info(
            f"Run {run_id} finished with outcome {outcome.value}",
            extra_data={
                "selected_index": winner.index,
                "candidates": len(candidates),
                "returned_original": returned_original,
            },
        )

        alternates = [c for c in candidates if c.passed and c is not winner]
        return RefinementResult(
            original_text=text,
            suggested_text=text if returned_original else winner.text,
            mode=mode,
            enforcement_class=initial_class,
            enforcement_outcome=outcome,
            candidate_metadata=CandidateMetadata(
                run_id=run_id,
                candidate_index=-1 if returned_original else winner.index,
                has_alternate=bool(alternates) and not returned_original,
                total_candidates=len(candidates),
                fallback_used=fallback_used,
                returned_original=returned_original,
                retry_attempted=retry_attempted,
                variation_seed=variation_seed,
                evaluation=self._debug_detail(winner) if self.config.debug else None,
            ),
            provider=self.provider.provider_name,
            model=self.provider.model,
            prompt_version=version,
        )

    def _generate_round(
        self,
        prompts: Sequence[Tuple[str, str]],
        text: str,
        mode: EditorialMode,
        tenant: TenantContext,
        profile,
        version: str,
        temperature: float,
        phase: GenerationPhase,
        start_index: int,
    ) -> List[ScoredCandidate]:
        """Generate and score one pair concurrently, then classify it."""
        with ThreadPoolExecutor(max_workers=CANDIDATES_PER_ROUND) as executor:
            futures = [
                executor.submit(
                    contextvars.copy_context().run,
                    self._generate_and_evaluate,
                    key, system_prompt, text, mode, tenant, profile, version, temperature,
                )
                for key, system_prompt in prompts
            ]
            results = [future.result() for future in futures]

        scored = []
        for offset, ((key, _), (suggestion, evaluation)) in enumerate(zip(prompts, results)):
            confidence = evaluation.profile_confidence
            scores = evaluation.scores
            scored.append(ScoredCandidate(
                index=start_index + offset,
                variation_key=key,
                text=suggestion,
                evaluation=evaluation,
                selection_score=selection_score(scores),
                enforcement_class=classify(scores.combined, scores.semantic, mode, confidence),
                phase=phase,
                thresholds=get_effective_thresholds(mode, confidence),
            ))
        return scored

    def _generate_and_evaluate(
        self,
        variation_key: str,
        system_prompt: str,
        text: str,
        mode: EditorialMode,
        tenant: TenantContext,
        profile,
        version: str,
        temperature: float,
    ) -> Tuple[str, Evaluation]:
        try:
            suggestion = self.provider.generate(system_prompt, text, temperature)
        except LLMError as e:
            raise GenerationError(f"Generation failed for {variation_key}: {e}", variation_key) from e
        if not suggestion or not suggestion.strip():
            raise GenerationError(f"Generation returned no text for {variation_key}", variation_key)

        evaluation = self.evaluator.evaluate(
            text,
            suggestion,
            mode,
            tenant,
            profile=profile,
            provider=self.provider.provider_name,
            model=self.provider.model,
            prompt_version=version,
        )
        return suggestion, evaluation

    def _record_correction(
        self,
        best_initial: ScoredCandidate,
        initial_class: EnforcementClass,
        winner: ScoredCandidate,
    ) -> None:
        evaluation_id = best_initial.evaluation.id
        if evaluation_id is None:
            return
        try:
            self.store.record_correction(
                evaluation_id,
                CORRECTION_TYPES[initial_class],
                improved=winner.passed,
                final_combined_score=winner.evaluation.scores.combined,
            )
        except (KeyError, ValueError) as e:
            logger.warning(f"Failed to record correction: {e}", extra_data={"evaluation_id": evaluation_id})

    def _record_metrics(self, run_id: str, tenant: TenantContext, winner: ScoredCandidate, version: str) -> None:
        if self.drift_monitor is None:
            return
        scores = winner.evaluation.scores
        self.drift_monitor.record(RunMetrics(
            user_id=tenant.user_id,
            run_id=run_id,
            stylistic=scores.stylistic,
            semantic=scores.semantic,
            combined=scores.combined,
            confidence=winner.evaluation.profile_confidence,
            provider=self.provider.provider_name,
            model=self.provider.model,
            prompt_version=version,
            created_at=self.clock(),
        ))
        self.drift_monitor.schedule_check(tenant.user_id)

    @staticmethod
    def _debug_detail(candidate: ScoredCandidate) -> Dict:
        evaluation = candidate.evaluation
        return {
            "scores": evaluation.scores.to_dict(),
            "selection_score": candidate.selection_score,
            "enforcement_class": candidate.enforcement_class.value,
            "passed": candidate.passed,
            "enforced": evaluation.enforced,
            "profile_status": evaluation.profile_status,
            "profile_confidence": evaluation.profile_confidence,
            "semantic_fallback": evaluation.semantic_fallback,
            "thresholds": candidate.thresholds.to_dict(),
        }

    @staticmethod
    def _stored_debug_detail(candidate: Candidate) -> Dict:
        return {
            "scores": candidate.scores.to_dict(),
            "selection_score": candidate.selection_score,
            "enforcement_class": candidate.enforcement_class.value,
            "passed": candidate.passed,
            "thresholds": candidate.thresholds,
        }


def _with_variation(base_prompt: str, variation: Variation) -> str:
    return f"{base_prompt}\n\n{variation.suffix}"


def _to_record(
    candidate: ScoredCandidate,
    winner: ScoredCandidate,
    fallback_used: bool,
    returned_original: bool,
) -> Candidate:
    is_winner = candidate is winner
    return Candidate(
        index=candidate.index,
        variation_key=candidate.variation_key,
        text=candidate.text,
        scores=candidate.evaluation.scores,
        selection_score=candidate.selection_score,
        enforcement_class=candidate.enforcement_class,
        phase=candidate.phase,
        passed=candidate.passed,
        selected=is_winner,
        shown=is_winner and not returned_original,
        is_fallback=is_winner and fallback_used,
        thresholds=candidate.thresholds.to_dict(),
        evaluation_id=candidate.evaluation.id,
    )
