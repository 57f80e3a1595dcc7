"""Boundary types for the external morphological tokenizer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from jpreader.models.pos import PartOfSpeech


@dataclass(frozen=True)
class TokenData:
    """A token as produced by the tokenizer."""

    #: The dictionary form of the token.
    lemma: str
    #: The surface text of the token.
    text: str
    #: The part of speech of the token.
    part_of_speech: PartOfSpeech


class Tokenizer(Protocol):
    """
    A deterministic morphological tokenizer.

    Identical input must produce identical output.  Any exception raised by
    :meth:`tokenize` aborts the import it happens in.
    """

    def tokenize(self, text: str) -> Sequence[TokenData]:
        """
        Split ``text`` into ordered, tagged tokens.

        Args:
            text: One cleaned line of text

        Returns:
            The tokens of ``text`` in order

        """
        ...
