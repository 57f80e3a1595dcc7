"""Document import service."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from jpreader.models.document import Document
from jpreader.models.history import History
from jpreader.services.navigator import Navigator

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from jpreader.services.tokenizer import Tokenizer

logger = logging.getLogger(__name__)


class DocumentImporter:
    """Imports raw text as a tokenized document and starts its first history."""

    def __init__(self, session: Session, tokenizer: Tokenizer) -> None:
        """
        Initialize importer.

        Args:
            session: SQLAlchemy session
            tokenizer: The morphological tokenizer

        """
        #: The SQLAlchemy session.
        self.session = session
        #: The morphological tokenizer.
        self.tokenizer = tokenizer
        #: Navigator used to find the first word of an imported document.
        self.navigator = Navigator(cache=False)

    def import_text(self, name: str, text: str) -> Document:
        """
        Import ``text`` as a new document called ``name``.

        Nothing is written if the name is taken or the tokenizer fails.

        Args:
            name: Document name
            text: Raw document text

        Raises:
            FileAlreadyImported: If a document with ``name`` exists
            TokenizationFailure: If the tokenizer fails on any line

        Returns:
            The new :class:`~jpreader.models.document.Document`

        """
        try:
            document = Document.create(self.session, name, text, self.tokenizer)
            History.start(
                self.session,
                document_id=document.id,
                initial_position=self.navigator.first_position(document),
            )
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return document

    def import_file(self, path: Path, name: str | None = None) -> Document:
        """
        Import a UTF-8 text file.

        Args:
            path: Path to the text file

        Keyword Args:
            name: Document name; defaults to the file name

        Raises:
            FileAlreadyImported: If a document with the name exists
            TokenizationFailure: If the tokenizer fails on any line

        Returns:
            The new :class:`~jpreader.models.document.Document`

        """
        path = Path(path)
        text = path.read_text(encoding="utf-8")
        logger.info(f"Importing {path}")
        return self.import_text(name if name is not None else path.name, text)
