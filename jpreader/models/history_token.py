"""History token (vocabulary ledger) model."""

from __future__ import annotations

import builtins
import logging
from typing import TYPE_CHECKING, Protocol

from sqlalchemy import CheckConstraint, ForeignKey, Integer, delete, func, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from jpreader.db import Base
from jpreader.models.token import Token

if TYPE_CHECKING:
    from collections.abc import Iterable

    from jpreader.models.pos import PartOfSpeech

logger = logging.getLogger(__name__)


class LedgerToken(Protocol):
    """Anything that identifies a dictionary entry."""

    lemma: str
    part_of_speech: PartOfSpeech


class HistoryToken(Base):
    """
    Represents the reader's record of one dictionary entry during one history.

    ``total_seen`` counts how often the entry was part of a word the reader
    advanced past, ``total_unknown`` how often that word was marked unknown.
    A row exists only while ``total_seen`` is at least 1; a missing row means
    the entry has not been seen in the history.
    """

    __tablename__ = "history_tokens"
    __table_args__ = (
        CheckConstraint("total_seen >= 0", name="ck_history_tokens_total_seen"),
        CheckConstraint(
            "total_unknown >= 0 AND total_unknown <= total_seen",
            name="ck_history_tokens_total_unknown",
        ),
    )

    #: The history ID.
    history_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("histories.id", ondelete="CASCADE"), primary_key=True
    )
    #: The dictionary token ID.
    token_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tokens.id", ondelete="CASCADE"), primary_key=True
    )
    #: The number of times the token was seen.
    total_seen: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    #: The number of times the token was marked unknown.
    total_unknown: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Relationships
    token: Mapped[Token] = relationship("Token")

    def __repr__(self) -> str:
        return (
            f"HistoryToken(history_id={self.history_id}, token_id={self.token_id}, "
            f"total_seen={self.total_seen}, total_unknown={self.total_unknown})"
        )

    @classmethod
    def get(cls, session: Session, history_id: int, token_id: int) -> HistoryToken | None:
        """
        Get the ledger row of a token in a history.

        Args:
            session: SQLAlchemy session
            history_id: History ID
            token_id: Dictionary token ID

        Returns:
            HistoryToken or None if the token has not been seen in the history

        """
        return session.get(cls, (history_id, token_id))

    @classmethod
    def list(cls, session: Session, history_id: int) -> builtins.list[HistoryToken]:
        """
        Get every ledger row of a history, with their dictionary entries.
        """
        return builtins.list(
            session.scalars(
                select(cls)
                .join(cls.token)
                .where(cls.history_id == history_id)
                .order_by(Token.lemma, Token.part_of_speech)
            ).all()
        )

    @classmethod
    def totals(cls, session: Session, history_id: int) -> tuple[int, int]:
        """
        Sum the counters of a history.

        Args:
            session: SQLAlchemy session
            history_id: History ID

        Returns:
            A ``(total_seen, total_unknown)`` tuple

        """
        row = session.execute(
            select(
                func.coalesce(func.sum(cls.total_seen), 0),
                func.coalesce(func.sum(cls.total_unknown), 0),
            ).where(cls.history_id == history_id)
        ).one()
        return int(row[0]), int(row[1])

    @classmethod
    def record(
        cls,
        session: Session,
        history_id: int,
        tokens: Iterable[LedgerToken],
        is_unknown: bool,
    ) -> None:
        """
        Record that the reader advanced past a word made of ``tokens``.

        Each token's dictionary entry is created on first sighting, and its
        ledger row is created or incremented.  The caller commits.

        Args:
            session: SQLAlchemy session
            history_id: History ID
            tokens: The tokens of the word
            is_unknown: Whether the word was marked unknown

        """
        for token in tokens:
            entry = Token.get_or_create(session, token.lemma, token.part_of_speech)
            row = cls.get(session, history_id, entry.id)
            if row is None:
                row = cls(
                    history_id=history_id,
                    token_id=entry.id,
                    total_seen=0,
                    total_unknown=0,
                )
                session.add(row)
            row.total_seen += 1
            if is_unknown:
                row.total_unknown += 1
            # A word may hold the same entry twice
            session.flush()

    @classmethod
    def reverse(
        cls,
        session: Session,
        history_id: int,
        tokens: Iterable[LedgerToken],
        is_unknown: bool,
    ) -> None:
        """
        Reverse a previous :meth:`record` of the same word and decision.

        Rows whose ``total_seen`` drops below 1 are deleted.  A token without a
        dictionary entry or a ledger row is logged and skipped instead of
        failing the whole reversal.  The caller commits.

        Args:
            session: SQLAlchemy session
            history_id: History ID
            tokens: The tokens of the word
            is_unknown: Whether the word had been marked unknown

        """
        for token in tokens:
            entry = Token.lookup(session, token.lemma, token.part_of_speech)
            row = cls.get(session, history_id, entry.id) if entry is not None else None
            if row is None:
                logger.warning(
                    f"No ledger row for {token.lemma!r} ({token.part_of_speech}) "
                    f"in history {history_id}; skipping reversal"
                )
                continue

            row.total_seen -= 1
            if is_unknown:
                row.total_unknown -= 1

            if row.total_seen < 1:
                session.delete(row)
            elif not 0 <= row.total_unknown <= row.total_seen:
                logger.warning(
                    f"Ledger row {row!r} is inconsistent after reversal; clamping"
                )
                row.total_unknown = max(0, min(row.total_unknown, row.total_seen))
            session.flush()

    @classmethod
    def delete_for_history(cls, session: Session, history_id: int) -> None:
        """
        Delete every ledger row of a history.
        """
        session.execute(delete(cls).where(cls.history_id == history_id))
