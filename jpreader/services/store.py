"""
Reader store: the per-history operation log with linear undo and redo.

Every decision the reader takes on a word appends an entry to the open
history's log, updates the vocabulary ledger and moves the current pointer,
all in one transaction.  Undo and redo move the pointer along the log and
reverse or replay the ledger update.  Taking a new decision after undoing
discards the entries past the pointer.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from jpreader.db import SessionLocal, configure_session
from jpreader.exc import (
    DoesNotExist,
    EofReached,
    NoOpenFile,
    RedoEmpty,
    StorageFailure,
    UndoEmpty,
)
from jpreader.models.document import Document
from jpreader.models.history import History
from jpreader.models.history_token import HistoryToken
from jpreader.models.state import CurrentState, State
from jpreader.services.navigator import Navigator
from jpreader.services.segmenter import Word
from jpreader.services.statistics import StatisticsView

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.orm import Session

    from jpreader.models.state import Action
    from jpreader.services.statistics import SortKey, Statistics, TokenFilter
    from jpreader.settings import Settings

logger = logging.getLogger(__name__)


class ReaderStatus(StrEnum):
    """What the reader is showing."""

    #: No document is open.
    EMPTY = "empty"
    #: The reader has advanced past the last word of the document.
    EOF = "eof"
    #: The reader is on a word.
    ACTIVE = "active"


@dataclass(frozen=True)
class ReaderView:
    """
    The current line split around the current word.
    """

    #: The words of the current line before the current word.
    already_read_words: tuple[Word, ...] = ()
    #: The current word; empty unless the status is ``ACTIVE``.
    current_word: Word = field(default_factory=Word)
    #: The words of the current line after the current word.
    remaining_words: tuple[Word, ...] = ()
    #: What the reader is showing.
    status: ReaderStatus = ReaderStatus.EMPTY

    @classmethod
    def empty(cls) -> ReaderView:
        return cls(status=ReaderStatus.EMPTY)

    @classmethod
    def eof(cls) -> ReaderView:
        return cls(status=ReaderStatus.EOF)


class ReaderStore:
    """
    Owns the reading progress of one open document.

    The store exclusively owns its session.  Public operations are
    serialized by a re-entrant lock, and each mutating operation is one
    transaction: on any error it is rolled back and the current state is
    unchanged.

    Args:
        session: SQLAlchemy session

    Keyword Args:
        navigator: The position navigator.  If None, one is created that
            memoizes segmentation unless ``settings`` disables it.
        settings: The user preferences

    """

    def __init__(
        self,
        session: Session,
        navigator: Navigator | None = None,
        settings: Settings | None = None,
    ) -> None:
        #: The SQLAlchemy session.
        self.session = session
        #: The user preferences.
        self.settings = settings
        if navigator is None:
            navigator = Navigator(
                cache=settings.cache_segmentation if settings is not None else True
            )
        #: The position navigator.
        self.navigator = navigator
        #: The open document, or None.
        self.document: Document | None = None
        self._lock = threading.RLock()

    @classmethod
    def from_settings(cls, settings: Settings) -> ReaderStore:
        """
        Open the database named by ``settings`` and create a store on it.

        Args:
            settings: The user preferences

        Returns:
            A new :class:`ReaderStore` with its own session

        """
        configure_session(settings.db_path)
        return cls(SessionLocal(), settings=settings)

    # ===============================
    # Opening
    # ===============================

    @property
    def is_open(self) -> bool:
        return self.document is not None

    @property
    def history(self) -> History | None:
        """
        The active history of the open document.
        """
        if self.document is None:
            return None
        return History.current(self.session, self.document.id)

    @property
    def current_state(self) -> State | None:
        """
        The current entry of the active history's log.
        """
        history = self.history
        if history is None:
            return None
        return CurrentState.get_state(self.session, history.id)

    def open(self, document_id: int) -> ReaderView:
        """
        Open a document, resuming its active history.

        A document that has no history yet gets a new one.

        Args:
            document_id: Document ID

        Raises:
            DoesNotExist: If the document does not exist
            StorageFailure: If the database fails

        Returns:
            The view of the current state

        """
        with self._lock:
            document = Document.get(self.session, document_id)
            if document is None:
                raise DoesNotExist("Document", document_id)
            with self._transaction("open"):
                if History.current(self.session, document.id) is None:
                    History.start(
                        self.session,
                        document_id=document.id,
                        initial_position=self.navigator.first_position(document),
                    )
            self.document = document
            logger.info(f"Opened document {document.name!r}")
            return self.view()

    def open_by_name(self, name: str) -> ReaderView:
        """
        Open a document by name.

        Args:
            name: Document name

        Raises:
            DoesNotExist: If no document has that name

        Returns:
            The view of the current state

        """
        document = Document.get_by_name(self.session, name)
        if document is None:
            raise DoesNotExist("Document", name)
        return self.open(document.id)

    def close(self) -> None:
        """Close the open document, if any."""
        with self._lock:
            if self.document is not None:
                logger.info(f"Closed document {self.document.name!r}")
            self.document = None
            self.navigator.clear()

    # ===============================
    # Transitions
    # ===============================

    def next(self, action: Action) -> ReaderView:
        """
        Take ``action`` on the current word and advance to the next one.

        The word's tokens are recorded in the ledger and ``action`` is
        stored on the entry being left.  Any entries past the current one
        (the redo branch) are discarded.

        Args:
            action: The decision on the current word

        Raises:
            NoOpenFile: If no document is open
            EofReached: If the reader is at the end of the document
            StorageFailure: If the database fails

        Returns:
            The view of the new current state

        """
        with self._lock:
            with self._transaction("next"):
                document, history, state = self._require_open()
                position = state.position
                if position is None:
                    raise EofReached

                word = self.navigator.word_at(document, position)
                HistoryToken.record(
                    self.session, history.id, word.tokens, action.is_unknown
                )
                state.action = action
                discarded = State.delete_after(
                    self.session, history.id, state.operation_num
                )
                new_state = State.create(
                    self.session,
                    history_id=history.id,
                    operation_num=state.operation_num + 1,
                    position=self.navigator.advance(document, position),
                )
                CurrentState.set_state(self.session, new_state)
                logger.debug(
                    f"next({action}) on {word.text!r}: operation "
                    f"{new_state.operation_num} at {new_state.position}, "
                    f"discarded {discarded} redo entries"
                )
            return self.view()

    def undo(self) -> ReaderView:
        """
        Step back to the previous entry, reversing its ledger update.

        The entry being left is kept so it can be redone.

        Raises:
            NoOpenFile: If no document is open
            UndoEmpty: If the current entry is the first one
            StorageFailure: If the database fails

        Returns:
            The view of the new current state

        """
        with self._lock:
            with self._transaction("undo"):
                document, history, state = self._require_open()
                if state.operation_num == 0:
                    raise UndoEmpty

                prev = State.get_at(self.session, history.id, state.operation_num - 1)
                if prev is None or prev.position is None:
                    raise DoesNotExist("State", f"{history.id}:{state.operation_num - 1}")

                word = self.navigator.word_at(document, prev.position)
                HistoryToken.reverse(
                    self.session,
                    history.id,
                    word.tokens,
                    prev.action is not None and prev.action.is_unknown,
                )
                CurrentState.set_state(self.session, prev)
                logger.debug(f"undo to operation {prev.operation_num}")
            return self.view()

    def redo(self) -> ReaderView:
        """
        Step forward to the next entry, replaying the current entry's action.

        Raises:
            NoOpenFile: If no document is open
            RedoEmpty: If the current entry is the last one
            StorageFailure: If the database fails

        Returns:
            The view of the new current state

        """
        with self._lock:
            with self._transaction("redo"):
                document, history, state = self._require_open()
                following = State.get_at(
                    self.session, history.id, state.operation_num + 1
                )
                if following is None:
                    raise RedoEmpty
                if state.position is None:
                    raise DoesNotExist("State", f"{history.id}:{state.operation_num}")

                word = self.navigator.word_at(document, state.position)
                HistoryToken.record(
                    self.session,
                    history.id,
                    word.tokens,
                    state.action is not None and state.action.is_unknown,
                )
                CurrentState.set_state(self.session, following)
                logger.debug(f"redo to operation {following.operation_num}")
            return self.view()

    def reset(self) -> ReaderView:
        """
        Start the open document over with a fresh history.

        The log and ledger of the active history are deleted and the history
        is ended.  With no document open this does nothing.

        Raises:
            StorageFailure: If the database fails

        Returns:
            The view of the new initial state

        """
        with self._lock:
            if self.document is None:
                return ReaderView.empty()
            with self._transaction("reset"):
                document, history, _ = self._require_open()
                State.delete_for_history(self.session, history.id)
                HistoryToken.delete_for_history(self.session, history.id)
                history.end(self.session)
                History.start(
                    self.session,
                    document_id=document.id,
                    initial_position=self.navigator.first_position(document),
                )
            logger.info(f"Reset document {document.name!r}; ended history {history.id}")
            return self.view()

    # ===============================
    # Queries
    # ===============================

    def view(self) -> ReaderView:
        """
        Derive what the reader shows from the current state.

        Returns:
            An empty view with no document open, an EOF view at the end of
            the document, or else the current line split around the current
            word

        """
        with self._lock:
            if self.document is None:
                return ReaderView.empty()
            document, _, state = self._require_open()
            position = state.position
            if position is None:
                return ReaderView.eof()
            words = self.navigator.words(document, position.line)
            return ReaderView(
                already_read_words=tuple(words[: position.index]),
                current_word=words[position.index],
                remaining_words=tuple(words[position.index + 1 :]),
                status=ReaderStatus.ACTIVE,
            )

    def can_undo(self) -> bool:
        with self._lock:
            state = self.current_state
            return state is not None and state.operation_num > 0

    def can_redo(self) -> bool:
        with self._lock:
            state = self.current_state
            if state is None:
                return False
            following = State.get_at(
                self.session, state.history_id, state.operation_num + 1
            )
            return following is not None

    def statistics(
        self,
        token_filter: TokenFilter | None = None,
        sort: SortKey | None = None,
        reverse: bool | None = None,
    ) -> Statistics:
        """
        Get the statistics of the active history.

        Keyword Args:
            token_filter: Which tokens to list; defaults to the preference
            sort: How to order the tokens; defaults to the preference
            reverse: Sort descending; defaults to the preference

        Raises:
            NoOpenFile: If no document is open

        Returns:
            The statistics of the active history

        """
        with self._lock:
            _, history, _ = self._require_open()
            return StatisticsView(self.session, self.settings).statistics(
                history.id, token_filter=token_filter, sort=sort, reverse=reverse
            )

    # ===============================
    # Helpers
    # ===============================

    def _require_open(self) -> tuple[Document, History, State]:
        if self.document is None:
            raise NoOpenFile
        history = History.current(self.session, self.document.id)
        if history is None:
            raise DoesNotExist("History", f"document {self.document.id}")
        state = CurrentState.get_state(self.session, history.id)
        if state is None:
            raise DoesNotExist("State", f"history {history.id}")
        return self.document, history, state

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[None]:
        """
        Commit the work of ``operation``, or roll all of it back.

        Database errors are wrapped in :class:`StorageFailure`; anything else
        is re-raised as is.
        """
        try:
            yield
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception(f"Rolled back {operation} after a database error")
            raise StorageFailure(operation, e) from e
        except Exception:
            self.session.rollback()
            raise
