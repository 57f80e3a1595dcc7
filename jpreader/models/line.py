"""Line model."""

from __future__ import annotations

import builtins
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from jpreader.db import Base
from jpreader.models.line_token import LineToken

if TYPE_CHECKING:
    from collections.abc import Sequence

    from jpreader.models.document import Document
    from jpreader.services.tokenizer import TokenData


class Line(Base):
    """
    Represents one line of an imported document.

    A line has these characteristics:
    - A document ID
    - A line index, its position in the document
    - The original sentence text
    - An ordered list of tokens

    Lines are created once at import and never change afterwards.
    """

    __tablename__ = "lines"
    __table_args__ = (
        UniqueConstraint("document_id", "line_index", name="uq_lines_document_index"),
    )

    #: The line ID.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    #: The document ID.
    document_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False
    )
    #: The position of the line in the document, starting at 0.
    line_index: Mapped[int] = mapped_column(Integer, nullable=False)
    #: The original sentence text.
    sentence: Mapped[str] = mapped_column(String, nullable=False)

    # Relationships
    document: Mapped[Document] = relationship("Document", back_populates="lines")
    tokens: Mapped[builtins.list[LineToken]] = relationship(
        "LineToken",
        back_populates="line",
        cascade="all, delete-orphan",
        order_by="LineToken.order_index",
        lazy="selectin",
    )

    @classmethod
    def get(cls, session: Session, line_id: int) -> Line | None:
        """
        Get a line by ID.
        """
        return session.get(cls, line_id)

    @classmethod
    def list(cls, session: Session, document_id: int) -> builtins.list[Line]:
        """
        Get all lines of a document, ordered by line index.
        """
        return builtins.list(
            session.scalars(
                select(cls)
                .where(cls.document_id == document_id)
                .order_by(cls.line_index)
            ).all()
        )

    @classmethod
    def create(
        cls,
        session: Session,
        document_id: int,
        line_index: int,
        sentence: str,
        tokens: Sequence[TokenData],
    ) -> Line:
        """
        Create a line and its tokens.

        Args:
            session: SQLAlchemy session
            document_id: Document ID
            line_index: Position of the line in the document
            sentence: The cleaned line text
            tokens: The tokenizer output for ``sentence``

        Returns:
            The new :class:`~jpreader.models.line.Line` object

        """
        line = cls(document_id=document_id, line_index=line_index, sentence=sentence)
        session.add(line)
        session.flush()  # Get the ID

        line.tokens = LineToken.create_from_tokens(
            session=session, line_id=line.id, tokens=tokens
        )
        return line
