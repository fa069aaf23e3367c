"""Unit tests for text segmentation helpers."""

from voice_identity.utils.text import (
    count_syllables,
    count_words,
    split_paragraphs,
    split_sentences,
    tokenize,
)


class TestSplitSentences:
    """Test sentence splitting."""

    def test_splits_on_terminal_punctuation(self):
        sentences = split_sentences("First one here. Second one here! Third one here?")
        assert sentences == ["First one here.", "Second one here!", "Third one here?"]

    def test_newlines_are_boundaries(self):
        sentences = split_sentences("A sentence without a period\nAnother sentence that ends.")
        assert sentences == ["A sentence without a period", "Another sentence that ends."]

    def test_short_unterminated_fragment_is_merged(self):
        """A heading-like fragment joins the sentence after it."""
        sentences = split_sentences("Title\nThis is the body of the post.")
        assert sentences == ["Title This is the body of the post."]

    def test_empty_text(self):
        assert split_sentences("") == []
        assert split_sentences("   \n  ") == []


class TestSplitParagraphs:
    """Test paragraph splitting."""

    def test_blank_lines_separate_paragraphs(self):
        text = "First paragraph.\n\nSecond paragraph.\n   \nThird."
        assert split_paragraphs(text) == ["First paragraph.", "Second paragraph.", "Third."]

    def test_single_newline_does_not_split(self):
        assert len(split_paragraphs("Line one.\nLine two.")) == 1


class TestTokenize:
    """Test word tokenization."""

    def test_lowercases_and_strips_punctuation(self):
        assert tokenize("Hello, World!") == ["hello", "world"]

    def test_keeps_apostrophes_and_hyphens(self):
        assert tokenize("Don't over-think it.") == ["don't", "over-think", "it"]

    def test_count_words_uses_whitespace(self):
        assert count_words("one two  three\nfour") == 4
        assert count_words("") == 0


class TestCountSyllables:
    """Test syllable approximation."""

    def test_short_words_have_one_syllable(self):
        assert count_syllables("a") == 1
        assert count_syllables("it") == 1

    def test_silent_e(self):
        assert count_syllables("make") == 1
        assert count_syllables("table") == 2

    def test_past_tense_ending(self):
        assert count_syllables("jumped") == 1

    def test_multi_syllable(self):
        assert count_syllables("writing") == 2
        assert count_syllables("vocabulary") >= 4
