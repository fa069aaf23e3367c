"""Shared fixtures for the voice identity tests."""

import pytest

from voice_identity.models import SourceType, TenantContext
from voice_identity.profiles import ProfileService
from voice_identity.scoring import VoiceEvaluator
from voice_identity.storage import InMemoryStore
from tests.mocks.mock_embedder import MockEmbedder

ORIGINAL_TEXT = (
    "I think the hardest part of writing isn't the first draft. It's the second one, "
    "when you have to decide what stays and what goes. Most of my early posts were too long; "
    "I kept every tangent because I'd worked hard to find it.\n\n"
    "These days I cut more than I keep. That's not a rule, exactly. It's more like a habit "
    "I picked up after reading my old work and wincing. Maybe that's just what getting older "
    "as a writer looks like? I'm still not sure, but the posts feel lighter now."
)

# Same shape as ORIGINAL_TEXT with a couple of words changed.
LIGHT_EDIT_TEXT = (
    "I think the hardest part of writing isn't the first draft. It's the second one, "
    "when you have to choose what stays and what goes. Most of my early posts were too long; "
    "I kept every tangent because I'd worked hard to find it.\n\n"
    "These days I cut more than I keep. That's not a rule, exactly. It's more like a habit "
    "I picked up after rereading my old work and wincing. Maybe that's just what getting older "
    "as a writer looks like? I'm still not sure, but the posts feel lighter now."
)

# Same content cut to about a third of the words.
TRIMMED_TEXT = (
    "The hardest part of writing is the second draft, when you decide what stays and what goes. "
    "My early posts kept every tangent. These days I cut more than I keep, and the posts feel lighter now."
)

DRIFTED_TEXT = "Writing is easy. Publish everything you draft and never look back."

SHORT_TEXT = "Too short to fingerprint reliably."


class FakeClock:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def tenant():
    return TenantContext(user_id="author-1", document_id="doc-1")


@pytest.fixture
def embedder():
    """Embedder that treats the light edit as meaning-identical and the drift as unrelated."""
    return MockEmbedder(vectors={
        ORIGINAL_TEXT: [1.0, 0.0, 0.0],
        LIGHT_EDIT_TEXT: [1.0, 0.0, 0.0],
        DRIFTED_TEXT: [0.0, 1.0, 0.0],
    })


@pytest.fixture
def evaluator(store, embedder, clock):
    return VoiceEvaluator(store, embedder, clock=clock)


@pytest.fixture
def profile_service(store, clock):
    return ProfileService(store, clock=clock)


@pytest.fixture
def active_profile(profile_service, tenant, clock):
    """Active profile built from three samples of the original text."""
    for i in range(3):
        profile_service.contribute(tenant, ORIGINAL_TEXT, SourceType.PUBLISHED_POST, f"post-{i}")
        clock.advance(60)
    return profile_service.lookup(tenant)
