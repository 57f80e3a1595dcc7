"""Unit tests for the word segmenter."""

import pytest

from jpreader.models.pos import PartOfSpeech, TokenCategory
from jpreader.services.segmenter import Word, is_legal, segment, segment_line
from tests.conftest import BENTOU_TOKENS, TOKEN_TABLE, tok, word_texts

P = PartOfSpeech


class TestIsLegal:
    """Test cases for is_legal()."""

    def test_punctuation_always_legal(self):
        """Test punctuation may follow anything."""
        buffer = [tok("猫", P.NOUN), tok("。", P.PUNCT)]
        assert is_legal(tok("」", P.PUNCT), buffer)
        assert is_legal(tok("」", P.PUNCT), [])

    def test_term_legal_in_empty_buffer(self):
        """Test a term may start a word."""
        assert is_legal(tok("猫", P.NOUN), [])

    def test_term_legal_after_leading_punctuation(self):
        """Test a term may follow punctuation that opens a word."""
        assert is_legal(tok("猫", P.NOUN), [tok("「", P.PUNCT)])

    def test_second_term_illegal(self):
        """Test a word holds at most one term."""
        buffer = [tok("猫", P.NOUN), tok("が", P.PART)]
        assert not is_legal(tok("走る", P.VERB), buffer)

    def test_filler_legal_after_term(self):
        """Test filler tokens attach to a term."""
        assert is_legal(tok("が", P.PART), [tok("猫", P.NOUN)])

    def test_unknown_legal_after_term(self):
        """Test unknown tokens attach to a term."""
        assert is_legal(tok("ー", P.UNKNOWN), [tok("だ", P.AUX)])

    def test_filler_illegal_after_closing_punctuation(self):
        """Test nothing but punctuation follows a closed word."""
        buffer = [tok("だ", P.AUX), tok("。", P.PUNCT)]
        assert not is_legal(tok("が", P.PART), buffer)
        assert not is_legal(tok("ー", P.UNKNOWN), buffer)
        assert not is_legal(tok("猫", P.NOUN), buffer)

    def test_filler_legal_after_punctuation_only(self):
        """Test punctuation alone does not close a word."""
        assert is_legal(tok("が", P.PART), [tok("「", P.PUNCT), tok("『", P.PUNCT)])


class TestSegment:
    """Test cases for segment()."""

    def test_quoted_bento_line(self):
        """Test the quoted bento line splits after the first noun."""
        words = segment(BENTOU_TOKENS)
        assert word_texts(words) == ["『愛妻", "弁当だー？』"]

    def test_empty_line(self):
        """Test a line without tokens has no words."""
        assert segment([]) == []

    def test_term_with_particle_then_verb(self):
        """Test each term starts its own word."""
        words = segment(TOKEN_TABLE["猫が走る。"])
        assert word_texts(words) == ["猫が", "走る。"]

    def test_only_punctuation(self):
        """Test a line of punctuation is one word."""
        words = segment([tok("「", P.PUNCT), tok("」", P.PUNCT)])
        assert word_texts(words) == ["「」"]

    def test_filler_after_closed_word_starts_new_word(self):
        """Test filler after closing punctuation starts a new word."""
        tokens = [tok("はい", P.INTJ), tok("、", P.PUNCT), tok("ええ", P.INTJ)]
        assert word_texts(segment(tokens)) == ["はい、", "ええ"]

    def test_fillers_only(self):
        """Test consecutive fillers share a word."""
        tokens = [tok("それ", P.PRON), tok("は", P.PART), tok("ね", P.PART)]
        assert word_texts(segment(tokens)) == ["それはね"]

    @pytest.mark.parametrize("text", sorted(TOKEN_TABLE))
    def test_concatenation_reproduces_tokens(self, text):
        """Test the words partition the tokens in order."""
        tokens = TOKEN_TABLE[text]
        words = segment(tokens)
        flattened = [token for word in words for token in word.tokens]
        assert flattened == tokens
        assert all(len(word) > 0 for word in words)

    @pytest.mark.parametrize("text", sorted(TOKEN_TABLE))
    def test_at_most_one_term_per_word(self, text):
        """Test no word holds two terms."""
        for word in segment(TOKEN_TABLE[text]):
            terms = [
                token
                for token in word.tokens
                if token.part_of_speech.category is TokenCategory.TERM
            ]
            assert len(terms) <= 1

    def test_deterministic(self):
        """Test segmenting twice gives equal words."""
        assert segment(BENTOU_TOKENS) == segment(list(BENTOU_TOKENS))


class TestWord:
    """Test cases for Word."""

    def test_text_concatenates_tokens(self):
        """Test text is the concatenated token text."""
        word = Word((tok("走っ", P.VERB, lemma="走る"), tok("た", P.AUX)))
        assert word.text == "走った"
        assert len(word) == 2

    def test_empty_word(self):
        """Test the empty word has no text."""
        assert Word().text == ""
        assert len(Word()) == 0


class TestSegmentLine:
    """Test cases for segment_line()."""

    def test_segments_stored_line(self, sample_document):
        """Test a stored line segments like its tokenizer output."""
        line = sample_document.lines[0]
        assert word_texts(segment_line(line)) == ["『愛妻", "弁当だー？』"]
