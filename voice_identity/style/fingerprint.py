"""Fingerprint data model."""

from dataclasses import dataclass, field, fields
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class PunctuationFrequencies:
    """Punctuation marks per 1,000 words."""
    comma: float = 0.0
    period: float = 0.0
    semicolon: float = 0.0
    colon: float = 0.0
    exclamation: float = 0.0
    question: float = 0.0
    dash: float = 0.0
    ellipsis: float = 0.0
    parenthetical: float = 0.0

    def as_vector(self) -> List[float]:
        """Values in field order, for cosine comparison."""
        return [getattr(self, f.name) for f in fields(self)]

    def to_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict) -> "PunctuationFrequencies":
        return cls(**{f.name: data.get(f.name, 0.0) for f in fields(cls)})


@dataclass(frozen=True)
class LexicalEntry:
    word: str
    frequency: float


# Scalar features blended with the exponential decay. Counts and
# confidence accumulate instead and are handled separately.
SCALAR_FEATURES: Tuple[str, ...] = (
    "avg_sentence_length",
    "sentence_length_variance",
    "sentence_length_std_dev",
    "avg_paragraph_length",
    "paragraph_length_variance",
    "adjective_adverb_density",
    "hedging_frequency",
    "stopword_density",
    "contraction_frequency",
    "question_ratio",
    "exclamation_ratio",
    "repetition_index",
    "vocabulary_richness",
    "avg_word_length",
    "readability_score",
    "complexity_score",
)


@dataclass(frozen=True)
class Fingerprint:
    """Deterministic linguistic feature vector of a text sample.

    Instances are never mutated. A profile update produces a new
    Fingerprint from the old one and the incoming sample.
    """
    avg_sentence_length: float = 0.0
    sentence_length_variance: float = 0.0
    sentence_length_std_dev: float = 0.0
    avg_paragraph_length: float = 0.0  # sentences per paragraph
    paragraph_length_variance: float = 0.0
    punctuation: PunctuationFrequencies = field(default_factory=PunctuationFrequencies)
    adjective_adverb_density: float = 0.0
    hedging_frequency: float = 0.0  # hedges per sentence
    stopword_density: float = 0.0
    contraction_frequency: float = 0.0
    question_ratio: float = 0.0
    exclamation_ratio: float = 0.0
    repetition_index: float = 0.0
    vocabulary_richness: float = 0.0
    avg_word_length: float = 0.0
    readability_score: float = 0.0
    complexity_score: float = 0.0
    lexical_signature: Tuple[LexicalEntry, ...] = ()
    word_count: int = 0
    sentence_count: int = 0
    paragraph_count: int = 0
    confidence: float = 0.0

    def lexical_map(self) -> Dict[str, float]:
        return {entry.word: entry.frequency for entry in self.lexical_signature}

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        data = {name: getattr(self, name) for name in SCALAR_FEATURES}
        data.update({
            "punctuation": self.punctuation.to_dict(),
            "lexical_signature": [[e.word, e.frequency] for e in self.lexical_signature],
            "word_count": self.word_count,
            "sentence_count": self.sentence_count,
            "paragraph_count": self.paragraph_count,
            "confidence": self.confidence,
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "Fingerprint":
        """Create from dictionary."""
        return cls(
            punctuation=PunctuationFrequencies.from_dict(data.get("punctuation", {})),
            lexical_signature=tuple(
                LexicalEntry(word=w, frequency=f) for w, f in data.get("lexical_signature", [])
            ),
            word_count=data.get("word_count", 0),
            sentence_count=data.get("sentence_count", 0),
            paragraph_count=data.get("paragraph_count", 0),
            confidence=data.get("confidence", 0.0),
            **{name: data.get(name, 0.0) for name in SCALAR_FEATURES},
        )
