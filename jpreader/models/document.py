"""Document model."""

from __future__ import annotations

import builtins
import logging
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship, selectinload

from jpreader.db import Base
from jpreader.exc import FileAlreadyImported, TokenizationFailure
from jpreader.models.line import Line
from jpreader.utils import utc_now

if TYPE_CHECKING:
    from jpreader.services.tokenizer import TokenData, Tokenizer

logger = logging.getLogger(__name__)


class Document(Base):
    """
    Represents an imported document.

    A document is identified by its unique name and owns an ordered list of
    lines.  It is immutable once imported.
    """

    __tablename__ = "documents"

    #: The document ID.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    #: The document name.
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    #: The date and time the document was imported.
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, nullable=False
    )

    # Relationships
    lines: Mapped[builtins.list[Line]] = relationship(
        "Line",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="Line.line_index",
    )

    @classmethod
    def get(cls, session: Session, document_id: int) -> Document | None:
        """
        Get a document by ID, with its lines and their tokens loaded.

        Args:
            session: SQLAlchemy session
            document_id: Document ID

        Returns:
            Document or None if not found

        """
        return session.scalar(
            select(cls)
            .where(cls.id == document_id)
            .options(selectinload(cls.lines).selectinload(Line.tokens))
        )

    @classmethod
    def get_by_name(cls, session: Session, name: str) -> Document | None:
        """
        Get a document by name.

        Args:
            session: SQLAlchemy session
            name: Document name

        Returns:
            Document or None if not found

        """
        return session.scalar(select(cls).where(cls.name == name))

    @classmethod
    def list(cls, session: Session) -> builtins.list[Document]:
        """
        Get all documents, in import order.
        """
        return builtins.list(session.scalars(select(cls).order_by(cls.id)).all())

    @classmethod
    def create(
        cls, session: Session, name: str, text: str, tokenizer: Tokenizer
    ) -> Document:
        """
        Create a new document from raw text.

        Every line is tokenized before anything is written, so a tokenizer
        failure leaves the session untouched.  The caller commits.

        Args:
            session: SQLAlchemy session
            name: Document name
            text: Raw document text
            tokenizer: The morphological tokenizer

        Raises:
            FileAlreadyImported: If a document with ``name`` exists
            TokenizationFailure: If the tokenizer fails on any line

        Returns:
            The new :class:`~jpreader.models.document.Document` object

        """
        if cls.get_by_name(session, name) is not None:
            raise FileAlreadyImported(name)

        tokenized: builtins.list[tuple[str, builtins.list[TokenData]]] = []
        for sentence in cls.split_lines(text):
            try:
                tokens = builtins.list(tokenizer.tokenize(sentence))
            except Exception as e:
                logger.exception(f"Tokenizer failed while importing {name!r}")
                raise TokenizationFailure(sentence, e) from e
            tokenized.append((sentence, tokens))

        document = cls(name=name)
        session.add(document)
        session.flush()  # Get the ID

        for line_index, (sentence, tokens) in enumerate(tokenized):
            Line.create(
                session=session,
                document_id=document.id,
                line_index=line_index,
                sentence=sentence,
                tokens=tokens,
            )
        # Lines were attached by foreign key; reload the collection on access
        session.expire(document, ["lines"])

        logger.info(f"Imported document {name!r} with {len(tokenized)} lines")
        return document

    @classmethod
    def split_lines(cls, text: str) -> builtins.list[str]:
        """
        Split raw text into cleaned lines.

        All whitespace is removed from each line, since Japanese text does not
        use it between words, and lines that end up empty are dropped.

        Args:
            text: Raw document text

        Returns:
            List of cleaned line strings

        """
        cleaned = ("".join(line.split()) for line in text.splitlines())
        return [line for line in cleaned if line]
