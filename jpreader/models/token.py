"""Token dictionary model."""

from __future__ import annotations

import builtins

from sqlalchemy import Enum, Integer, String, UniqueConstraint, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from jpreader.db import Base
from jpreader.models.pos import PartOfSpeech


class Token(Base):
    """
    Represents a dictionary entry: one lemma with one part of speech.

    Entries are global (shared by every document and history) and are created
    the first time the reader sees them.
    """

    __tablename__ = "tokens"
    __table_args__ = (
        UniqueConstraint("lemma", "part_of_speech", name="uq_tokens_lemma_pos"),
    )

    #: The token ID.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    #: The dictionary form.
    lemma: Mapped[str] = mapped_column(String, nullable=False)
    #: The part of speech.
    part_of_speech: Mapped[PartOfSpeech] = mapped_column(
        Enum(
            PartOfSpeech,
            native_enum=False,
            create_constraint=True,
            length=16,
            name="ck_tokens_part_of_speech",
        ),
        nullable=False,
    )

    @classmethod
    def get(cls, session: Session, token_id: int) -> Token | None:
        """
        Get a token by ID.
        """
        return session.get(cls, token_id)

    @classmethod
    def lookup(
        cls, session: Session, lemma: str, part_of_speech: PartOfSpeech
    ) -> Token | None:
        """
        Get a token by lemma and part of speech.

        Args:
            session: SQLAlchemy session
            lemma: The dictionary form
            part_of_speech: The part of speech

        Returns:
            Token or None if it has never been seen

        """
        return session.scalar(
            select(cls).where(cls.lemma == lemma, cls.part_of_speech == part_of_speech)
        )

    @classmethod
    def get_or_create(
        cls, session: Session, lemma: str, part_of_speech: PartOfSpeech
    ) -> Token:
        """
        Get a token by lemma and part of speech, creating it if needed.

        Args:
            session: SQLAlchemy session
            lemma: The dictionary form
            part_of_speech: The part of speech

        Returns:
            The existing or new :class:`~jpreader.models.token.Token`

        """
        token = cls.lookup(session, lemma, part_of_speech)
        if token is None:
            token = cls(lemma=lemma, part_of_speech=part_of_speech)
            session.add(token)
            session.flush()  # Get the ID
        return token

    @classmethod
    def list(cls, session: Session) -> builtins.list[Token]:
        """
        Get every dictionary entry, ordered by lemma.
        """
        return builtins.list(
            session.scalars(select(cls).order_by(cls.lemma, cls.part_of_speech)).all()
        )
