"""Line token model."""

from __future__ import annotations

import builtins
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, Integer, String, UniqueConstraint, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from jpreader.db import Base
from jpreader.models.pos import PartOfSpeech, TokenCategory

if TYPE_CHECKING:
    from collections.abc import Sequence

    from jpreader.models.line import Line
    from jpreader.services.tokenizer import TokenData


class LineToken(Base):
    """Represents one tokenizer token at a fixed place in a line."""

    __tablename__ = "line_tokens"
    __table_args__ = (
        UniqueConstraint("line_id", "order_index", name="uq_line_tokens_line_order"),
    )

    #: The line token ID.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    #: The line ID.
    line_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lines.id", ondelete="CASCADE"), nullable=False
    )
    #: The order index of the token in the line.
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)
    #: The surface text of the token.
    text: Mapped[str] = mapped_column(String, nullable=False)
    #: The dictionary form of the token.
    lemma: Mapped[str] = mapped_column(String, nullable=False)
    #: The part of speech of the token.
    part_of_speech: Mapped[PartOfSpeech] = mapped_column(
        Enum(
            PartOfSpeech,
            native_enum=False,
            create_constraint=True,
            length=16,
            name="ck_line_tokens_part_of_speech",
        ),
        nullable=False,
    )

    # Relationships
    line: Mapped[Line] = relationship("Line", back_populates="tokens")

    def __repr__(self) -> str:
        return (
            f"LineToken(order_index={self.order_index}, text={self.text!r}, "
            f"part_of_speech={self.part_of_speech.value})"
        )

    @property
    def category(self) -> TokenCategory:
        """
        The segmentation category of this token.
        """
        return self.part_of_speech.category

    @classmethod
    def list(cls, session: Session, line_id: int) -> builtins.list[LineToken]:
        """
        Get all tokens by line ID, ordered by order index.

        Args:
            session: SQLAlchemy session
            line_id: Line ID

        Returns:
            List of tokens ordered by order index

        """
        return builtins.list(
            session.scalars(
                select(cls).where(cls.line_id == line_id).order_by(cls.order_index)
            ).all()
        )

    @classmethod
    def create_from_tokens(
        cls, session: Session, line_id: int, tokens: Sequence[TokenData]
    ) -> builtins.list[LineToken]:
        """
        Create the tokens of a line from tokenizer output.

        Args:
            session: SQLAlchemy session
            line_id: Line ID
            tokens: The tokenizer output for the line, in order

        Returns:
            List of :class:`~jpreader.models.line_token.LineToken` objects

        """
        line_tokens = [
            cls(
                line_id=line_id,
                order_index=order_index,
                text=token.text,
                lemma=token.lemma,
                part_of_speech=token.part_of_speech,
            )
            for order_index, token in enumerate(tokens)
        ]
        session.add_all(line_tokens)
        session.flush()
        return line_tokens
