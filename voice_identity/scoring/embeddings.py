"""Embedding collaborators used by the semantic sub-score."""

from abc import ABC, abstractmethod
from typing import List, Sequence

import numpy as np
import requests

from ..config import EmbeddingConfig
from ..utils.logging import get_logger

logger = get_logger(__name__)

# Inputs are truncated to this many characters before embedding.
MAX_EMBEDDING_CHARS = 30000


class EmbeddingError(Exception):
    """Raised when the embedding collaborator cannot produce vectors."""
    pass


class Embedder(ABC):
    """Maps texts to vectors. Implementations may block on I/O."""

    @abstractmethod
    def embed(self, texts: Sequence[str]) -> List[List[float]]:
        """Embed each text, preserving input order.

        Raises:
            EmbeddingError: If the vectors cannot be produced.
        """
        pass


class SentenceTransformerEmbedder(Embedder):
    """Local embeddings through a sentence-transformers model.

    The model is loaded on first use and reused afterwards.
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2"):
        self.model_name = model_name
        self._model = None

    @property
    def model(self):
        if self._model is None:
            from sentence_transformers import SentenceTransformer
            logger.info(f"Loading embedding model {self.model_name}")
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def embed(self, texts: Sequence[str]) -> List[List[float]]:
        try:
            vectors = self.model.encode([t[:MAX_EMBEDDING_CHARS] for t in texts])
        except Exception as e:
            raise EmbeddingError(f"sentence-transformers encode failed: {e}") from e
        return [list(map(float, v)) for v in vectors]


class HTTPEmbedder(Embedder):
    """OpenAI-compatible ``/embeddings`` endpoint."""

    def __init__(self, config: EmbeddingConfig):
        if not config.api_key:
            raise ValueError("An api_key is required for HTTP embeddings")
        self.config = config

    def embed(self, texts: Sequence[str]) -> List[List[float]]:
        url = f"{self.config.base_url.rstrip('/')}/embeddings"
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
        }
        payload = {
            "model": self.config.model,
            "input": [t[:MAX_EMBEDDING_CHARS] for t in texts],
        }
        try:
            response = requests.post(url, headers=headers, json=payload, timeout=self.config.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.HTTPError as e:
            raise EmbeddingError(
                f"Embeddings API error ({e.response.status_code}): {e.response.text}"
            ) from e
        except requests.exceptions.RequestException as e:
            raise EmbeddingError(f"Embeddings API request failed: {e}") from e
        except ValueError as e:
            raise EmbeddingError(f"Embeddings API returned invalid JSON: {e}") from e

        try:
            items = sorted(data.get("data", []), key=lambda d: d.get("index", 0))
            vectors = [[float(x) for x in item["embedding"]] for item in items]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise EmbeddingError(f"Unexpected embeddings response format: {e}") from e
        if len(vectors) != len(texts):
            raise EmbeddingError(f"Expected {len(texts)} embeddings, got {len(vectors)}")
        return vectors


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity, 0 for mismatched, empty or zero vectors."""
    if len(a) != len(b) or len(a) == 0:
        return 0.0
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    denom = np.linalg.norm(va) * np.linalg.norm(vb)
    if denom == 0:
        return 0.0
    return float(np.dot(va, vb) / denom)


def create_embedder_from_config(config: EmbeddingConfig) -> Embedder:
    """Create the configured embedder.

    Raises:
        ValueError: If the provider name is unknown.
    """
    if config.provider == "sentence_transformers":
        return SentenceTransformerEmbedder(config.model)
    if config.provider == "openai":
        return HTTPEmbedder(config)
    raise ValueError(
        f"Unknown embedding provider: {config.provider}. Available: sentence_transformers, openai"
    )
