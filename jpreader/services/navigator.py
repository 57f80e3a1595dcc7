"""Position navigator: moves through the words of a document."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from jpreader.exc import DoesNotExist
from jpreader.models.state import Position
from jpreader.services.segmenter import segment_line

if TYPE_CHECKING:
    from jpreader.models.document import Document
    from jpreader.services.segmenter import Word

logger = logging.getLogger(__name__)


class Navigator:
    """
    Computes word positions over a document.

    Segmentation is a pure function of a line's tokens and documents never
    change after import, so the words of each line may be memoized.

    Keyword Args:
        cache: Whether to memoize the words of each line

    """

    def __init__(self, cache: bool = True) -> None:
        #: Whether the words of each line are memoized.
        self.cache = cache
        #: Memoized words, keyed by ``(document ID, line index)``.
        self._words: dict[tuple[int, int], list[Word]] = {}

    def words(self, document: Document, line: int) -> list[Word]:
        """
        Get the words of one line of a document.

        Args:
            document: The document
            line: The line index

        Raises:
            DoesNotExist: If the document has no such line

        Returns:
            The words of the line, in order

        """
        if not 0 <= line < len(document.lines):
            raise DoesNotExist("Line", f"{document.id}:{line}")
        if not self.cache:
            return segment_line(document.lines[line])
        key = (document.id, line)
        if key not in self._words:
            self._words[key] = segment_line(document.lines[line])
        return self._words[key]

    def clear(self) -> None:
        """Forget every memoized line."""
        self._words.clear()

    def first_position(self, document: Document) -> Position | None:
        """
        Get the first word position of a document.

        Args:
            document: The document

        Returns:
            The position of the first word, or None if the document has no
            words at all

        """
        return self._first_from_line(document, 0)

    def advance(self, document: Document, position: Position) -> Position | None:
        """
        Get the position after ``position``.

        Moves to the next word of the same line, or else to the first word of
        the next line that has any words.

        Args:
            document: The document
            position: The current position

        Returns:
            The next position, or None at the end of the document

        """
        words = self.words(document, position.line)
        if position.index + 1 < len(words):
            return Position(line=position.line, index=position.index + 1)
        return self._first_from_line(document, position.line + 1)

    def word_at(self, document: Document, position: Position) -> Word:
        """
        Resolve a position to its word.

        Args:
            document: The document
            position: The position

        Raises:
            DoesNotExist: If the position is outside the document

        Returns:
            The word at ``position``

        """
        words = self.words(document, position.line)
        if not 0 <= position.index < len(words):
            raise DoesNotExist("Word", f"{document.id}:{position.line}:{position.index}")
        return words[position.index]

    def _first_from_line(self, document: Document, line: int) -> Position | None:
        """
        Get the first word position at or after ``line``.  Lines without
        words are skipped.
        """
        for line_index in range(line, len(document.lines)):
            if self.words(document, line_index):
                return Position(line=line_index, index=0)
            logger.debug(f"Skipping empty line {line_index} of document {document.id}")
        return None
