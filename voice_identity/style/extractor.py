"""Deterministic fingerprint extraction.

Pure computation: no I/O, no randomness, no clock. Every density metric is
normalized per word, per sentence, or per 1,000 words so fingerprints of
texts with different lengths stay comparable.
"""

import math
import re
from collections import Counter
from typing import List

import numpy as np

from .fingerprint import Fingerprint, LexicalEntry, PunctuationFrequencies
from ..utils.text import count_syllables, split_paragraphs, split_sentences, tokenize

LEXICAL_SIGNATURE_SIZE = 30

# Below this many words a fingerprint is produced but is unreliable.
MIN_WORDS_FOR_FINGERPRINT = 50

CONFIDENCE_HALF_LIFE = 300

STOPWORDS = frozenset("""
a about above after again against all am an and any are aren't as at be
because been before being below between both but by can't cannot could
couldn't did didn't do does doesn't doing don't down during each few for
from further get got had hadn't has hasn't have haven't having he he'd
he'll he's her here here's hers herself him himself his how how's i i'd
i'll i'm i've if in into is isn't it it's its itself just let's me might
more most mustn't my myself no nor not of off on once only or other ought
our ours ourselves out over own really same shan't she she'd she'll she's
should shouldn't so some still such than that that's the their theirs them
themselves then there there's these they they'd they'll they're they've
this those through to too under until up us very was wasn't we we'd we'll
we're we've were weren't what what's when when's where where's which while
who who's whom why why's will with won't would wouldn't you you'd you'll
you're you've your yours yourself yourselves
""".split())

FUNCTION_WORDS = frozenset("""
the a an and but or nor for yet so in on at to from by with about into
through during before after above below between under over of up down out
off then than that this these those which who whom whose what where when
how why if because since while although though unless until whether not
no never always also just only even still already very quite rather really
too much more most less least well almost enough perhaps maybe however
therefore thus hence nevertheless meanwhile otherwise instead indeed
certainly probably possibly actually apparently basically essentially
generally particularly specifically i you he she it we they me him her us
them my your his its our their myself yourself himself herself itself
ourselves themselves is are was were be been being have has had having do
does did doing will would shall should may might can could must need ought
""".split())

HEDGING_PHRASES = (
    "i think", "i believe", "i feel", "i guess", "i suppose",
    "in my opinion", "it seems", "it appears", "it looks like",
    "kind of", "sort of", "somewhat", "relatively",
    "perhaps", "maybe", "possibly", "probably", "arguably",
    "might be", "could be", "may be", "seems to be",
    "to some extent", "in some ways", "more or less",
    "a bit", "a little", "slightly", "fairly", "rather",
    "tend to", "seems like", "appears to",
    "not entirely", "not necessarily", "not always",
)

ADJECTIVE_SUFFIXES = (
    "able", "ible", "al", "ial", "ful", "ic", "ical", "ish",
    "ive", "less", "ous", "ious", "eous",
)

COMMON_ADJECTIVES = frozenset("""
good bad big small large great little old new young long short high low
early late hard soft hot cold fast slow full empty dark light clear strong
weak deep wide thin thick flat sharp smooth rough clean dirty simple complex
easy difficult sure certain real true false right wrong whole entire main
key major minor common rare strange weird obvious subtle specific broad
narrow
""".split())

COMMON_ADVERBS = frozenset("""
very really quite rather fairly pretty just only even still already always
never often sometimes usually rarely seldom here there now then today
tomorrow yesterday soon later again also too well badly hard fast far near
long enough
""".split())

CONTRACTION_PATTERN = re.compile(r"\b\w+'(?:t|s|re|ve|ll|d|m)\b", re.IGNORECASE)

PUNCTUATION_PATTERNS = {
    "comma": re.compile(r","),
    "period": re.compile(r"\."),
    "semicolon": re.compile(r";"),
    "colon": re.compile(r":"),
    "exclamation": re.compile(r"!"),
    "question": re.compile(r"\?"),
    "dash": re.compile(r"[—–-]{1,2}"),
    "ellipsis": re.compile(r"\.{3}|…"),
    "parenthetical": re.compile(r"[()]"),
}


def _variance(values: List[int]) -> float:
    """Population variance, zero for fewer than two values."""
    if len(values) < 2:
        return 0.0
    return float(np.var(values))


def is_adjective(word: str) -> bool:
    if word in COMMON_ADJECTIVES:
        return True
    return any(word.endswith(s) and len(word) > len(s) + 2 for s in ADJECTIVE_SUFFIXES)


def is_adverb(word: str) -> bool:
    if word in COMMON_ADVERBS:
        return True
    return word.endswith("ly") and len(word) > 4


def extraction_confidence(word_count: int) -> float:
    """Reliability of a fingerprint given its word count."""
    if word_count < MIN_WORDS_FOR_FINGERPRINT:
        return (word_count / MIN_WORDS_FOR_FINGERPRINT) * 0.5
    return 1.0 - math.exp(-word_count / CONFIDENCE_HALF_LIFE)


def _count_hedges(lower_text: str) -> int:
    return sum(lower_text.count(phrase) for phrase in HEDGING_PHRASES)


def _lexical_signature(words: List[str]) -> tuple:
    word_count = len(words)
    counts = Counter(w for w in words if w in FUNCTION_WORDS)
    # Stable sort keeps first-seen order among equal counts.
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return tuple(
        LexicalEntry(word=word, frequency=count / word_count)
        for word, count in ranked[:LEXICAL_SIGNATURE_SIZE]
    )


def extract_fingerprint(text: str) -> Fingerprint:
    """Extract the linguistic fingerprint of a text.

    Texts shorter than ``MIN_WORDS_FOR_FINGERPRINT`` words still yield a
    fingerprint, with a proportionally discounted confidence.

    Args:
        text: Any text, possibly empty.

    Returns:
        A new immutable Fingerprint.
    """
    paragraphs = split_paragraphs(text)
    sentences = split_sentences(text)
    words = tokenize(text)
    word_count = len(words)
    sentence_count = max(len(sentences), 1)
    paragraph_count = max(len(paragraphs), 1)

    sentence_lengths = [len(tokenize(s)) for s in sentences]
    avg_sentence_length = sum(sentence_lengths) / sentence_count
    sentence_variance = _variance(sentence_lengths)

    paragraph_lengths = [len(split_sentences(p)) for p in paragraphs]
    avg_paragraph_length = sum(paragraph_lengths) / paragraph_count

    per_1k = 1000 / word_count if word_count else 0.0
    punctuation = PunctuationFrequencies(**{
        name: len(pattern.findall(text)) * per_1k
        for name, pattern in PUNCTUATION_PATTERNS.items()
    })

    def per_word(count: int) -> float:
        return count / word_count if word_count else 0.0

    adj_adv = sum(1 for w in words if is_adjective(w) or is_adverb(w))
    stopwords = sum(1 for w in words if w in STOPWORDS)
    contractions = len(CONTRACTION_PATTERN.findall(text))

    questions = sum(1 for s in sentences if s.endswith("?"))
    exclamations = sum(1 for s in sentences if s.endswith("!"))

    bigrams = list(zip(words, words[1:]))
    repetition_index = 1 - len(set(bigrams)) / len(bigrams) if bigrams else 0.0

    avg_syllables = per_word(sum(count_syllables(w) for w in words))

    return Fingerprint(
        avg_sentence_length=avg_sentence_length,
        sentence_length_variance=sentence_variance,
        sentence_length_std_dev=math.sqrt(sentence_variance),
        avg_paragraph_length=avg_paragraph_length,
        paragraph_length_variance=_variance(paragraph_lengths),
        punctuation=punctuation,
        adjective_adverb_density=per_word(adj_adv),
        hedging_frequency=_count_hedges(text.lower()) / sentence_count,
        stopword_density=per_word(stopwords),
        contraction_frequency=per_word(contractions),
        question_ratio=questions / sentence_count,
        exclamation_ratio=exclamations / sentence_count,
        repetition_index=repetition_index,
        vocabulary_richness=per_word(len(set(words))),
        avg_word_length=per_word(sum(len(w) for w in words)),
        readability_score=0.39 * avg_sentence_length + 11.8 * avg_syllables - 15.59,
        complexity_score=avg_syllables,
        lexical_signature=_lexical_signature(words),
        word_count=word_count,
        sentence_count=sentence_count,
        paragraph_count=paragraph_count,
        confidence=extraction_confidence(word_count),
    )
