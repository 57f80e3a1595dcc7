"""Reader state (operation log) models."""

from __future__ import annotations

import builtins
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Enum,
    ForeignKey,
    Integer,
    UniqueConstraint,
    delete,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from jpreader.db import Base

if TYPE_CHECKING:
    from jpreader.models.history import History


class Action(StrEnum):
    """The decision the reader takes on a word."""

    MARK_KNOWN = "known"
    MARK_UNKNOWN = "unknown"

    @property
    def is_unknown(self) -> bool:
        """
        Whether this decision marks the word as unknown.
        """
        return self is Action.MARK_UNKNOWN


@dataclass(frozen=True, order=True)
class Position:
    """
    A word position in a document.

    Positions order by line, then by word index within the line.  The end of
    the document is represented by ``None`` rather than a :class:`Position`.
    """

    #: The line index.
    line: int
    #: The word index within the line.
    index: int


class State(Base):
    """
    Represents one entry of a history's operation log.

    Entries are numbered contiguously from 0 by ``operation_num``.  The
    ``action`` of an entry is the decision that was taken to advance away
    from its position; it is None until the reader leaves the entry.
    """

    __tablename__ = "states"
    __table_args__ = (
        UniqueConstraint(
            "history_id", "operation_num", name="uq_states_history_operation"
        ),
        CheckConstraint("operation_num >= 0", name="ck_states_operation_num"),
        CheckConstraint(
            '(line IS NULL) = ("index" IS NULL)', name="ck_states_position"
        ),
    )

    #: The state ID.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    #: The history ID.
    history_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("histories.id", ondelete="CASCADE"), nullable=False
    )
    #: The line of the position, or None at the end of the document.
    line: Mapped[int | None] = mapped_column(Integer, nullable=True)
    #: The word index of the position, or None at the end of the document.
    index: Mapped[int | None] = mapped_column(Integer, nullable=True, name="index")
    #: The number of this entry in the operation log.
    operation_num: Mapped[int] = mapped_column(Integer, nullable=False)
    #: The decision taken to leave this entry.
    action: Mapped[Action | None] = mapped_column(
        Enum(
            Action,
            native_enum=False,
            create_constraint=True,
            length=16,
            name="ck_states_action",
        ),
        nullable=True,
    )

    # Relationships
    history: Mapped[History] = relationship("History")

    def __repr__(self) -> str:
        return (
            f"State(history_id={self.history_id}, "
            f"operation_num={self.operation_num}, position={self.position}, "
            f"action={self.action})"
        )

    @property
    def position(self) -> Position | None:
        """
        The position of this entry, or None at the end of the document.
        """
        if self.line is None or self.index is None:
            return None
        return Position(line=self.line, index=self.index)

    @property
    def is_eof(self) -> bool:
        """
        Whether this entry is at the end of the document.
        """
        return self.position is None

    @classmethod
    def create(
        cls,
        session: Session,
        history_id: int,
        operation_num: int,
        position: Position | None,
    ) -> State:
        """
        Append an entry to the operation log.

        Args:
            session: SQLAlchemy session
            history_id: History ID
            operation_num: The number of the new entry
            position: The position of the new entry, or None for EOF

        Returns:
            The new :class:`~jpreader.models.state.State`

        """
        state = cls(
            history_id=history_id,
            operation_num=operation_num,
            line=position.line if position is not None else None,
            index=position.index if position is not None else None,
            action=None,
        )
        session.add(state)
        session.flush()  # Get the ID
        return state

    @classmethod
    def get(cls, session: Session, state_id: int) -> State | None:
        """
        Get a state by ID.
        """
        return session.get(cls, state_id)

    @classmethod
    def get_at(
        cls, session: Session, history_id: int, operation_num: int
    ) -> State | None:
        """
        Get the entry of a history's log with the given operation number.

        Args:
            session: SQLAlchemy session
            history_id: History ID
            operation_num: Operation number

        Returns:
            State or None if the log has no such entry

        """
        return session.scalar(
            select(cls).where(
                cls.history_id == history_id, cls.operation_num == operation_num
            )
        )

    @classmethod
    def list(cls, session: Session, history_id: int) -> builtins.list[State]:
        """
        Get a history's whole operation log, ordered by operation number.
        """
        return builtins.list(
            session.scalars(
                select(cls)
                .where(cls.history_id == history_id)
                .order_by(cls.operation_num)
            ).all()
        )

    @classmethod
    def delete_after(cls, session: Session, history_id: int, operation_num: int) -> int:
        """
        Delete every entry of a history's log past ``operation_num``.

        This discards the redo branch when a new decision is taken from a
        state that is not the tip of the log.

        Args:
            session: SQLAlchemy session
            history_id: History ID
            operation_num: The last operation number to keep

        Returns:
            The number of deleted entries

        """
        result = session.execute(
            delete(cls).where(
                cls.history_id == history_id, cls.operation_num > operation_num
            )
        )
        return result.rowcount

    @classmethod
    def delete_for_history(cls, session: Session, history_id: int) -> None:
        """
        Delete a history's whole operation log and its current pointer.
        """
        session.execute(delete(CurrentState).where(CurrentState.history_id == history_id))
        session.execute(delete(cls).where(cls.history_id == history_id))


class CurrentState(Base):
    """The entry of a history's operation log that is currently displayed."""

    __tablename__ = "current_state"

    #: The history ID.
    history_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("histories.id", ondelete="CASCADE"), primary_key=True
    )
    #: The state ID.
    state_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("states.id", ondelete="CASCADE"), nullable=False
    )

    # Relationships
    state: Mapped[State] = relationship("State")

    @classmethod
    def get_state(cls, session: Session, history_id: int) -> State | None:
        """
        Get the current entry of a history's log.

        Args:
            session: SQLAlchemy session
            history_id: History ID

        Returns:
            State or None if the history has no current pointer

        """
        pointer = session.get(cls, history_id)
        return pointer.state if pointer is not None else None

    @classmethod
    def set_state(cls, session: Session, state: State) -> None:
        """
        Move a history's current pointer to ``state``.

        Args:
            session: SQLAlchemy session
            state: The entry to point at

        """
        pointer = session.get(cls, state.history_id)
        if pointer is None:
            pointer = cls(history_id=state.history_id, state_id=state.id)
            session.add(pointer)
        else:
            pointer.state_id = state.id
            pointer.state = state
        session.flush()
