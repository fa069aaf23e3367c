"""End-to-end tests through the engine facade with the real evaluator."""

import pytest

from voice_identity import (
    EnforcementClass,
    EnforcementOutcome,
    PreferenceSource,
    SourceType,
    TenantContext,
    VoiceEngine,
)
from voice_identity.config import Config, EngineConfig, LLMConfig, LLMProviderConfig
from voice_identity.llm.openai_compat import OpenAICompatibleProvider
from voice_identity.scoring import SentenceTransformerEmbedder
from voice_identity.storage import InMemoryStore
from tests.conftest import DRIFTED_TEXT, LIGHT_EDIT_TEXT, ORIGINAL_TEXT, SHORT_TEXT, TRIMMED_TEXT
from tests.mocks.mock_llm_provider import MockLLMProvider


class ReadOnlyProfileStore(InMemoryStore):
    def insert_profile(self, profile):
        raise RuntimeError("profiles table is read-only")


def make_engine(provider, embedder, store, clock):
    config = Config(engine=EngineConfig(background_drift_checks=False))
    return VoiceEngine(provider, embedder, store=store, config=config, clock=clock)


def build_profile(engine, tenant, clock):
    for i in range(3):
        engine.contribute(tenant, ORIGINAL_TEXT, SourceType.PUBLISHED_POST, f"post-{i}")
        clock.advance(60)


class TestRefine:
    """Refinement against an active profile."""

    def test_light_edit_is_suggested(self, embedder, store, tenant, clock):
        engine = make_engine(MockLLMProvider(default=LIGHT_EDIT_TEXT), embedder, store, clock)
        build_profile(engine, tenant, clock)

        result = engine.refine(ORIGINAL_TEXT, "line", tenant)

        assert result.suggested_text == LIGHT_EDIT_TEXT
        assert result.enforcement_class == EnforcementClass.PASS
        assert result.enforcement_outcome == EnforcementOutcome.PASS
        assert not result.candidate_metadata.retry_attempted
        assert result.candidate_metadata.has_alternate
        assert result.provider == "mock"

    def test_drift_returns_original(self, embedder, store, tenant, clock):
        provider = MockLLMProvider(default=DRIFTED_TEXT)
        engine = make_engine(provider, embedder, store, clock)
        build_profile(engine, tenant, clock)

        result = engine.refine(ORIGINAL_TEXT, "line", tenant)

        assert provider.call_count == 4
        assert result.suggested_text == ORIGINAL_TEXT
        assert result.enforcement_class == EnforcementClass.DRIFT
        assert result.enforcement_outcome == EnforcementOutcome.ORIGINAL_RETURNED
        assert result.candidate_metadata.returned_original
        assert len(provider.prompts_containing("MEANING PRESERVATION")) == 2

    def test_drift_without_profile_is_not_enforced(self, embedder, store, tenant, clock):
        provider = MockLLMProvider(default=DRIFTED_TEXT)
        engine = make_engine(provider, embedder, store, clock)

        result = engine.refine(ORIGINAL_TEXT, "line", tenant)

        assert provider.call_count == 2
        assert result.suggested_text == DRIFTED_TEXT
        assert result.enforcement_outcome == EnforcementOutcome.PASS
        assert result.candidate_metadata.fallback_used

    def test_try_again_then_metrics(self, embedder, store, tenant, clock):
        engine = make_engine(MockLLMProvider(default=LIGHT_EDIT_TEXT), embedder, store, clock)
        build_profile(engine, tenant, clock)

        first = engine.refine(ORIGINAL_TEXT, "line", tenant)
        second = engine.try_again(first.candidate_metadata.run_id, tenant.user_id)

        assert second.candidate_metadata.run_id == first.candidate_metadata.run_id
        assert second.candidate_metadata.candidate_index != first.candidate_metadata.candidate_index
        assert engine.drift_monitor.rolling_stats(tenant.user_id)["run_count"] == 1
        engine.close()


class TestFeedback:
    """Apply/Reject feedback becomes preference signals, never profile changes."""

    def test_apply_records_signals(self, embedder, store, tenant, clock):
        engine = make_engine(MockLLMProvider(), embedder, store, clock)
        build_profile(engine, tenant, clock)
        before = store.get_profile(tenant.user_id)

        recorded = engine.record_feedback(tenant, "line", "apply", ORIGINAL_TEXT, TRIMMED_TEXT)

        signals = store.list_preference_signals(tenant.user_id)
        assert recorded == len(signals) > 0
        assert all(s.source == PreferenceSource.APPLY for s in signals)
        assert all(s.created_at == clock.now for s in signals)
        assert engine.preferences(tenant, "line").values["tightness"] > 0
        assert engine.preferences(tenant, "copy").signal_count == 0

        after = store.get_profile(tenant.user_id)
        assert after.sample_count == before.sample_count
        assert after.fingerprint.to_dict() == before.fingerprint.to_dict()

    def test_short_text_records_nothing(self, embedder, store, tenant, clock):
        engine = make_engine(MockLLMProvider(), embedder, store, clock)
        assert engine.record_feedback(tenant, "line", PreferenceSource.REJECT, ORIGINAL_TEXT, SHORT_TEXT) == 0
        assert store.list_preference_signals(tenant.user_id) == []

    def test_unknown_source(self, embedder, store, tenant, clock):
        engine = make_engine(MockLLMProvider(), embedder, store, clock)
        with pytest.raises(ValueError):
            engine.record_feedback(tenant, "line", "shrug", ORIGINAL_TEXT, TRIMMED_TEXT)


class TestEvaluate:

    def test_evaluate_records(self, embedder, store, tenant, clock):
        engine = make_engine(MockLLMProvider(), embedder, store, clock)
        evaluation = engine.evaluate(ORIGINAL_TEXT, LIGHT_EDIT_TEXT, "copy", tenant)
        assert store.get_evaluation(evaluation.id) is not None
        assert evaluation.profile_status == "none"


class TestContribute:

    def test_contribute(self, embedder, store, tenant, clock):
        engine = make_engine(MockLLMProvider(), embedder, store, clock)
        result = engine.contribute(tenant, ORIGINAL_TEXT)
        assert result.profile_id == store.get_profile(tenant.user_id).id

    def test_short_sample_is_skipped_not_failed(self, embedder, store, tenant, clock):
        engine = make_engine(MockLLMProvider(), embedder, store, clock)
        assert engine.contribute(tenant, SHORT_TEXT, best_effort=True).skipped

    def test_best_effort_swallows_failures(self, embedder, clock):
        engine = make_engine(MockLLMProvider(), embedder, ReadOnlyProfileStore(), clock)
        tenant = TenantContext(user_id="author-1")

        assert engine.contribute(tenant, ORIGINAL_TEXT, best_effort=True) is None
        with pytest.raises(RuntimeError):
            engine.contribute(tenant, ORIGINAL_TEXT)


class TestFromConfig:

    def test_wires_configured_collaborators(self):
        config = Config(llm=LLMConfig(providers={
            "openai": LLMProviderConfig(api_key="sk-test", model="gpt-4o-mini"),
        }))
        engine = VoiceEngine.from_config(config)

        assert isinstance(engine.orchestrator.provider, OpenAICompatibleProvider)
        assert isinstance(engine.evaluator.embedder, SentenceTransformerEmbedder)
        assert isinstance(engine.store, InMemoryStore)
        engine.close()
