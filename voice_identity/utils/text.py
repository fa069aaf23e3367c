"""Text segmentation helpers shared by the extractor and the scorers."""

import re
from typing import List

_TERMINAL = ".!?…"
_SENTENCE_BREAK = re.compile(r"([.!?…])(\s+|\Z)")
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_NON_WORD = re.compile(r"[^\w\s'-]")
_VOWEL_GROUPS = re.compile(r"[aeiouy]+")
_NON_ALPHA = re.compile(r"[^a-z]")

# Pieces shorter than this that lack terminal punctuation belong to the
# sentence before them ("e.g." style abbreviations, stray fragments).
MIN_SENTENCE_FRAGMENT = 15


def split_sentences(text: str) -> List[str]:
    """Split text on terminal punctuation.

    Every newline is also treated as a boundary. A piece is merged back into
    the previous sentence when that sentence is shorter than
    ``MIN_SENTENCE_FRAGMENT`` characters and does not end in terminal
    punctuation.
    """
    marked = _SENTENCE_BREAK.sub(lambda m: m.group(1) + "\n", text)
    pieces = [p.strip() for p in marked.split("\n")]
    pieces = [p for p in pieces if p]

    merged: List[str] = []
    for piece in pieces:
        if merged and len(merged[-1]) < MIN_SENTENCE_FRAGMENT and merged[-1][-1] not in _TERMINAL:
            merged[-1] = f"{merged[-1]} {piece}"
        else:
            merged.append(piece)
    return merged


def split_paragraphs(text: str) -> List[str]:
    """Split text on blank lines, dropping empty paragraphs."""
    return [p.strip() for p in _PARAGRAPH_BREAK.split(text) if p.strip()]


def tokenize(text: str) -> List[str]:
    """Lowercase word tokens, keeping apostrophes and hyphens inside words."""
    return _NON_WORD.sub(" ", text.lower()).split()


def count_words(text: str) -> int:
    """Whitespace word count."""
    return len(text.split())


def count_syllables(word: str) -> int:
    """Approximate English syllable count from vowel groups."""
    word = _NON_ALPHA.sub("", word.lower())
    if len(word) <= 2:
        return 1

    count = len(_VOWEL_GROUPS.findall(word))
    if word.endswith("e") and not word.endswith("le") and count > 1:
        count -= 1
    if word.endswith("ed") and len(word) > 3 and count > 1:
        count -= 1
    return max(1, count)
