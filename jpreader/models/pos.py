"""Part-of-speech tags and their segmentation categories."""

from __future__ import annotations

from enum import StrEnum
from typing import Final


class TokenCategory(StrEnum):
    """The four token classes the word segmenter distinguishes."""

    PUNCTUATION = "punctuation"
    TERM = "term"
    UNKNOWN = "unknown"
    FILLER = "filler"


class PartOfSpeech(StrEnum):
    """Part-of-speech tags assigned by the morphological tokenizer."""

    EMPTY = "EMPTY"
    PRON = "PRON"
    ADV = "ADV"
    AUX = "AUX"
    PART = "PART"
    VERB = "VERB"
    NOUN = "NOUN"
    ADJ = "ADJ"
    ADJNOUN = "ADJNOUN"
    INTJ = "INTJ"
    SUFF = "SUFF"
    CONJ = "CONJ"
    PREF = "PREF"
    WHITE = "WHITE"
    SUPPLEMENTARY = "SUPPLEMENTARY"
    PUNCT = "PUNCT"
    ADN = "ADN"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_tag(cls, tag: str) -> PartOfSpeech:
        """
        Convert a dictionary part-of-speech tag to a :class:`PartOfSpeech`.

        The tokenizer reports the top-level tag of the Japanese dictionary
        (e.g. ``名詞`` for nouns).  Tags that are not listed in
        :data:`TAG_MAP` become :attr:`UNKNOWN`.

        Args:
            tag: The dictionary tag

        Returns:
            The matching part of speech

        """
        return TAG_MAP.get(tag, cls.UNKNOWN)

    @property
    def category(self) -> TokenCategory:
        """
        The segmentation category of this tag.
        """
        if self is PartOfSpeech.PUNCT:
            return TokenCategory.PUNCTUATION
        if self in TERM_TAGS:
            return TokenCategory.TERM
        if self is PartOfSpeech.UNKNOWN:
            return TokenCategory.UNKNOWN
        return TokenCategory.FILLER


#: Tags that carry content; a word holds at most one of these.
TERM_TAGS: Final[frozenset[PartOfSpeech]] = frozenset(
    {
        PartOfSpeech.VERB,
        PartOfSpeech.NOUN,
        PartOfSpeech.ADJ,
        PartOfSpeech.ADJNOUN,
    }
)

#: Dictionary tag to part of speech.
TAG_MAP: Final[dict[str, PartOfSpeech]] = {
    "*": PartOfSpeech.EMPTY,
    "代名詞": PartOfSpeech.PRON,
    "副詞": PartOfSpeech.ADV,
    "助動詞": PartOfSpeech.AUX,
    "助詞": PartOfSpeech.PART,
    "動詞": PartOfSpeech.VERB,
    "名詞": PartOfSpeech.NOUN,
    "形容詞": PartOfSpeech.ADJ,
    "形状詞": PartOfSpeech.ADJNOUN,
    "感動詞": PartOfSpeech.INTJ,
    "接尾辞": PartOfSpeech.SUFF,
    "接続詞": PartOfSpeech.CONJ,
    "接頭辞": PartOfSpeech.PREF,
    "空白": PartOfSpeech.WHITE,
    "補助記号": PartOfSpeech.SUPPLEMENTARY,
    "記号": PartOfSpeech.PUNCT,
    "連体詞": PartOfSpeech.ADN,
}
