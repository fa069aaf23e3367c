"""Similarity scoring between originals and suggestions."""

from .embeddings import (
    Embedder,
    EmbeddingError,
    SentenceTransformerEmbedder,
    HTTPEmbedder,
    cosine_similarity,
    create_embedder_from_config,
)
from .similarity import (
    compute_semantic_score,
    compute_stylistic_score,
    compute_scope_score,
    compute_combined_score,
    semantic_length_penalty,
    explain_stylistic,
    FeatureComparison,
)
from .evaluator import VoiceEvaluator

__all__ = [
    "Embedder",
    "EmbeddingError",
    "SentenceTransformerEmbedder",
    "HTTPEmbedder",
    "cosine_similarity",
    "create_embedder_from_config",
    "compute_semantic_score",
    "compute_stylistic_score",
    "compute_scope_score",
    "compute_combined_score",
    "semantic_length_penalty",
    "explain_stylistic",
    "FeatureComparison",
    "VoiceEvaluator",
]
