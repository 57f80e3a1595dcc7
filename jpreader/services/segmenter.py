"""Word segmenter: groups a line's tokens into display words."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from jpreader.models.pos import TokenCategory

if TYPE_CHECKING:
    from collections.abc import Sequence

    from jpreader.models.line import Line
    from jpreader.models.pos import PartOfSpeech


class SegmentToken(Protocol):
    """A tagged token, as stored in a line or produced by the tokenizer."""

    lemma: str
    text: str
    part_of_speech: PartOfSpeech


@dataclass(frozen=True)
class Word:
    """
    A contiguous run of a line's tokens shown to the reader as one unit.

    Words are never stored; they are recomputed from a line on demand.
    """

    #: The tokens of the word, in line order.
    tokens: tuple[SegmentToken, ...] = field(default_factory=tuple)

    @property
    def text(self) -> str:
        """
        The display text: the concatenated text of the tokens.
        """
        return "".join(token.text for token in self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)


def _category(token: SegmentToken) -> TokenCategory:
    return token.part_of_speech.category


def _contains_term(buffer: Sequence[SegmentToken]) -> bool:
    return any(_category(token) is TokenCategory.TERM for token in buffer)


def _contains_all(buffer: Sequence[SegmentToken]) -> bool:
    """
    Whether ``buffer`` has content and has been closed off by punctuation.

    True iff the last token is punctuation and the buffer holds at least one
    term, filler or unknown token.
    """
    if not buffer:
        return False
    if _category(buffer[-1]) is not TokenCategory.PUNCTUATION:
        return False
    return any(_category(token) is not TokenCategory.PUNCTUATION for token in buffer)


def is_legal(token: SegmentToken, buffer: Sequence[SegmentToken]) -> bool:
    """
    Whether ``token`` may be appended to the word being built in ``buffer``.

    - Punctuation may always be appended.
    - A term may be appended if the buffer holds no term yet and has not
      been closed off by punctuation.
    - Filler and unknown tokens may be appended if the buffer has not been
      closed off by punctuation.

    Args:
        token: The candidate token
        buffer: The tokens of the word being built

    Returns:
        True if the token belongs to the same word

    """
    category = _category(token)
    if category is TokenCategory.PUNCTUATION:
        return True
    if category is TokenCategory.TERM:
        return not _contains_term(buffer) and not _contains_all(buffer)
    return not _contains_all(buffer)


def segment(tokens: Sequence[SegmentToken]) -> list[Word]:
    """
    Partition a line's tokens into words.

    Each word holds at most one term, any number of filler and unknown
    tokens, and leading and/or trailing punctuation.  Concatenating the words
    reproduces the tokens exactly, in order.

    Args:
        tokens: The tokens of a line, in order

    Returns:
        The words of the line, in order

    """
    words: list[Word] = []
    stored: list[SegmentToken] = []
    for token in tokens:
        if not is_legal(token, stored):
            if stored:
                words.append(Word(tuple(stored)))
            stored = []
        stored.append(token)
    if stored:
        words.append(Word(tuple(stored)))
    return words


def segment_line(line: Line) -> list[Word]:
    """
    Partition a stored line into words.

    Args:
        line: The line to segment

    Returns:
        The words of the line, in order

    """
    return segment(line.tokens)
