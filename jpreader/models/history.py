"""History model."""

from __future__ import annotations

import builtins
import logging
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from jpreader.db import Base
from jpreader.models.state import CurrentState, State
from jpreader.utils import utc_now

if TYPE_CHECKING:
    from jpreader.models.document import Document
    from jpreader.models.state import Position

logger = logging.getLogger(__name__)


class History(Base):
    """
    Represents one reading pass over a document.

    A document accumulates a new history every time the reader resets it; the
    previous one is ended (its ``end_date`` is set) and kept.
    """

    __tablename__ = "histories"

    #: The history ID.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    #: The document ID.
    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False
    )
    #: The date and time the reading pass started.
    start_date: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )
    #: The date and time the reading pass was ended by a reset.
    end_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Relationships
    document: Mapped[Document] = relationship("Document")

    @property
    def is_ended(self) -> bool:
        """
        Whether this reading pass was ended by a reset.
        """
        return self.end_date is not None

    @classmethod
    def get(cls, session: Session, history_id: int) -> History | None:
        """
        Get a history by ID.
        """
        return session.get(cls, history_id)

    @classmethod
    def list(cls, session: Session, document_id: int) -> builtins.list[History]:
        """
        Get every history of a document, oldest first.
        """
        return builtins.list(
            session.scalars(
                select(cls).where(cls.document_id == document_id).order_by(cls.id)
            ).all()
        )

    @classmethod
    def current(cls, session: Session, document_id: int) -> History | None:
        """
        Get the active history of a document.

        Args:
            session: SQLAlchemy session
            document_id: Document ID

        Returns:
            History or None if the document has never been opened

        """
        pointer = session.get(CurrentHistory, document_id)
        return pointer.history if pointer is not None else None

    @classmethod
    def start(
        cls, session: Session, document_id: int, initial_position: Position | None
    ) -> History:
        """
        Start a new reading pass over a document.

        The new history gets its initial log entry (operation number 0, no
        action) at ``initial_position`` and becomes the document's current
        history.  The caller commits.

        Args:
            session: SQLAlchemy session
            document_id: Document ID
            initial_position: The first word position of the document, or
                None if the document holds no words

        Returns:
            The new :class:`~jpreader.models.history.History`

        """
        history = cls(document_id=document_id, start_date=utc_now())
        session.add(history)
        session.flush()  # Get the ID

        state = State.create(
            session,
            history_id=history.id,
            operation_num=0,
            position=initial_position,
        )
        CurrentState.set_state(session, state)
        CurrentHistory.set_history(session, history)

        logger.info(f"Started history {history.id} for document {document_id}")
        return history

    def end(self, session: Session) -> None:
        """
        End this reading pass now.

        Args:
            session: SQLAlchemy session

        """
        self.end_date = utc_now()
        session.add(self)


class CurrentHistory(Base):
    """The active history of a document."""

    __tablename__ = "current_history"

    #: The document ID.
    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("documents.id", ondelete="CASCADE"), primary_key=True
    )
    #: The history ID.
    history_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("histories.id", ondelete="CASCADE"), nullable=False
    )

    # Relationships
    history: Mapped[History] = relationship("History")

    @classmethod
    def set_history(cls, session: Session, history: History) -> None:
        """
        Make ``history`` the active history of its document.

        Args:
            session: SQLAlchemy session
            history: The history to activate

        """
        pointer = session.get(cls, history.document_id)
        if pointer is None:
            pointer = cls(document_id=history.document_id, history_id=history.id)
            session.add(pointer)
        else:
            pointer.history_id = history.id
            pointer.history = history
        session.flush()
