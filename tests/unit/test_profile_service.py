"""Tests for profile contribution and two-tier lookup."""

import threading

import pytest

from voice_identity.models import ProfileStatus, SourceType, TenantContext
from voice_identity.profiles import ProfileService
from voice_identity.style import ALPHA_MAX, ALPHA_MIN, extract_fingerprint
from tests.conftest import DRIFTED_TEXT, ORIGINAL_TEXT, SHORT_TEXT

DAY = 24 * 60 * 60


class TestContribute:
    """Tests for adding samples to a profile."""

    def test_short_sample_is_skipped(self, profile_service, store, tenant):
        result = profile_service.contribute(tenant, SHORT_TEXT, SourceType.PUBLISHED_POST)
        assert result.skipped
        assert result.reason == "text_too_short"
        assert result.word_count == len(SHORT_TEXT.split())
        assert store.get_profile(tenant.user_id) is None

    def test_first_sample_creates_building_profile(self, profile_service, store, tenant, clock):
        result = profile_service.contribute(tenant, ORIGINAL_TEXT, SourceType.BASELINE_SAMPLE, "draft-1")
        profile = store.get_profile(tenant.user_id)

        assert not result.skipped
        assert result.alpha == 1.0
        assert result.status == ProfileStatus.BUILDING
        assert profile.id == result.profile_id
        assert profile.sample_count == 1
        assert profile.fingerprint == extract_fingerprint(ORIGINAL_TEXT)
        assert profile.source_type_counts["baseline_sample"] == 1
        assert profile.unique_source_ids == 1
        assert profile.first_sample_at == clock.now

    def test_third_sample_activates(self, profile_service, tenant):
        statuses = [
            profile_service.contribute(tenant, ORIGINAL_TEXT, SourceType.PUBLISHED_POST).status
            for _ in range(3)
        ]
        assert statuses == [ProfileStatus.BUILDING, ProfileStatus.BUILDING, ProfileStatus.ACTIVE]

    def test_later_samples_are_bounded(self, profile_service, tenant):
        profile_service.contribute(tenant, ORIGINAL_TEXT, SourceType.PUBLISHED_POST)
        for _ in range(5):
            result = profile_service.contribute(tenant, ORIGINAL_TEXT, SourceType.PUBLISHED_POST)
            assert ALPHA_MIN <= result.alpha <= ALPHA_MAX

    def test_counts_accumulate(self, profile_service, store, tenant, clock):
        profile_service.contribute(tenant, ORIGINAL_TEXT, SourceType.PUBLISHED_POST, "post-1")
        clock.advance(3 * DAY)
        profile_service.contribute(tenant, ORIGINAL_TEXT, SourceType.MANUAL_REVISION, "post-2")
        profile = store.get_profile(tenant.user_id)
        words = extract_fingerprint(ORIGINAL_TEXT).word_count

        assert profile.sample_count == 2
        assert profile.total_word_count == 2 * words
        assert profile.fingerprint.word_count == 2 * words
        assert profile.average_sample_word_count == pytest.approx(words)
        assert profile.unique_source_ids == 2
        assert profile.source_type_counts["manual_revision"] == 1
        assert profile.last_sample_at - profile.first_sample_at == 3 * DAY

    def test_confidence_grows(self, profile_service, store, tenant, clock):
        confidences = []
        for i in range(4):
            profile_service.contribute(tenant, ORIGINAL_TEXT, SourceType.PUBLISHED_POST, f"post-{i}")
            confidences.append(store.get_profile(tenant.user_id).confidence)
            clock.advance(DAY)
        assert confidences == sorted(confidences)
        assert confidences[-1] > confidences[0]

    def test_sample_audit_records(self, profile_service, store, tenant):
        profile_service.contribute(tenant, ORIGINAL_TEXT, SourceType.PUBLISHED_POST, "post-1")
        result = profile_service.contribute(tenant, ORIGINAL_TEXT, SourceType.INITIAL_DRAFT, "post-2")
        samples = store.list_samples(result.profile_id)

        assert [s.source_id for s in samples] == ["post-1", "post-2"]
        assert samples[0].alpha_details is None
        assert samples[1].alpha_details["final_alpha"] == samples[1].alpha

    def test_profile_moves_gradually(self, profile_service, store, tenant):
        for _ in range(3):
            profile_service.contribute(tenant, ORIGINAL_TEXT, SourceType.PUBLISHED_POST)
        before = store.get_profile(tenant.user_id).fingerprint

        other = (DRIFTED_TEXT + " ") * 10
        profile_service.contribute(tenant, other, SourceType.PUBLISHED_POST)
        after = store.get_profile(tenant.user_id).fingerprint
        incoming = extract_fingerprint(other)

        shift = abs(after.avg_sentence_length - before.avg_sentence_length)
        assert shift <= ALPHA_MAX * abs(incoming.avg_sentence_length - before.avg_sentence_length) + 1e-9

    def test_concurrent_contributions_are_serialized(self, profile_service, store, tenant):
        threads = [
            threading.Thread(
                target=profile_service.contribute,
                args=(tenant, ORIGINAL_TEXT, SourceType.PUBLISHED_POST),
            )
            for _ in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        profile = store.get_profile(tenant.user_id)
        assert profile.sample_count == 8
        assert len(store.list_samples(profile.id)) == 8


class TestLookup:
    """Tests for tenant-scoped then global lookup."""

    def test_org_profile_preferred(self, store, clock):
        service = ProfileService(store, clock=clock)
        org_tenant = TenantContext(user_id="author-1", org_id="org-1")
        service.contribute(org_tenant, ORIGINAL_TEXT, SourceType.PUBLISHED_POST)
        service.contribute(TenantContext(user_id="author-1"), DRIFTED_TEXT * 6, SourceType.PUBLISHED_POST)

        assert service.lookup(org_tenant).org_id == "org-1"
        assert service.lookup(TenantContext(user_id="author-1")).org_id is None

    def test_falls_back_to_global(self, profile_service):
        profile_service.contribute(TenantContext(user_id="author-1"), ORIGINAL_TEXT, SourceType.PUBLISHED_POST)
        found = profile_service.lookup(TenantContext(user_id="author-1", org_id="org-2"))
        assert found is not None
        assert found.org_id is None

    def test_contribution_uses_lookup_order(self, profile_service, store):
        profile_service.contribute(TenantContext(user_id="author-1"), ORIGINAL_TEXT, SourceType.PUBLISHED_POST)
        profile_service.contribute(TenantContext(user_id="author-1", org_id="org-2"), ORIGINAL_TEXT,
                                   SourceType.PUBLISHED_POST)
        assert store.get_profile("author-1").sample_count == 2
        assert store.get_profile("author-1", "org-2") is None

    def test_missing_profile(self, profile_service):
        assert profile_service.lookup(TenantContext(user_id="nobody")) is None
