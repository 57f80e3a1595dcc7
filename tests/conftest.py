"""Shared pytest fixtures and test helpers for jpreader tests."""

import os
import tempfile
from pathlib import Path

import pytest
from PySide6.QtCore import QSettings
from sqlalchemy.orm import sessionmaker

from jpreader.db import create_engine_with_path, init_db
from jpreader.models.history_token import HistoryToken
from jpreader.models.pos import PartOfSpeech
from jpreader.services.importer import DocumentImporter
from jpreader.services.tokenizer import TokenData
from jpreader.settings import Settings

P = PartOfSpeech


def tok(text, part_of_speech, lemma=None):
    """Build a :class:`TokenData` whose lemma defaults to its text."""
    return TokenData(
        lemma=lemma if lemma is not None else text,
        text=text,
        part_of_speech=part_of_speech,
    )


#: A quoted line, segmenting to 『愛妻 and 弁当だー？』.
BENTOU_LINE = "『愛妻弁当だー？』"
BENTOU_TOKENS = [
    tok("『", P.PUNCT),
    tok("愛妻", P.NOUN),
    tok("弁当", P.NOUN),
    tok("だ", P.AUX),
    tok("ー", P.UNKNOWN),
    tok("？", P.PUNCT),
    tok("』", P.PUNCT),
]

#: Tokenizer output for every line used by the tests.
TOKEN_TABLE = {
    BENTOU_LINE: BENTOU_TOKENS,
    # 猫が / 走る。
    "猫が走る。": [
        tok("猫", P.NOUN),
        tok("が", P.PART),
        tok("走る", P.VERB),
        tok("。", P.PUNCT),
    ],
    # 犬も / 走った。
    "犬も走った。": [
        tok("犬", P.NOUN),
        tok("も", P.PART),
        tok("走っ", P.VERB, lemma="走る"),
        tok("た", P.AUX),
        tok("。", P.PUNCT),
    ],
    # A line the tokenizer yields nothing for
    "〓": [],
}

#: Three lines with two words each.
SAMPLE_TEXT = f"{BENTOU_LINE}\n\n猫が走る。\n 犬も 走った。\n"


class FakeTokenizer:
    """Dictionary-backed tokenizer; fails on any line it does not know."""

    def __init__(self, table=None):
        self.table = table if table is not None else TOKEN_TABLE
        self.calls = []

    def tokenize(self, text):
        self.calls.append(text)
        if text not in self.table:
            msg = f"No tokens for {text!r}"
            raise ValueError(msg)
        return list(self.table[text])


@pytest.fixture
def db_session():
    """Create a temporary database and session for testing."""
    temp_db = tempfile.NamedTemporaryFile(mode="w", delete=False, suffix=".db")
    temp_db.close()
    db_path = Path(temp_db.name)

    engine = create_engine_with_path(db_path)
    init_db(engine)
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()

    yield session

    session.close()
    engine.dispose()
    for suffix in ("", "-wal", "-shm"):
        path = Path(f"{temp_db.name}{suffix}")
        if path.exists():
            os.unlink(path)


@pytest.fixture
def tokenizer():
    """Create a fake tokenizer that knows every sample line."""
    return FakeTokenizer()


@pytest.fixture
def sample_document(db_session, tokenizer):
    """Import the three-line sample document."""
    return create_test_document(db_session, text=SAMPLE_TEXT, tokenizer=tokenizer)


@pytest.fixture
def settings(tmp_path):
    """Create settings backed by an INI file in a temporary directory."""
    qsettings = QSettings(str(tmp_path / "jpreader.ini"), QSettings.Format.IniFormat)
    return Settings(qsettings)


# Test helper functions (not fixtures, but available for import)


def create_test_document(session, name=None, text=SAMPLE_TEXT, tokenizer=None):
    """
    Helper to import a document with defaults.

    Args:
        session: SQLAlchemy session
        name: Document name (if None, generates unique name)
        text: Raw document text
        tokenizer: Tokenizer (if None, a :class:`FakeTokenizer`)

    Returns:
        Imported Document instance
    """
    if name is None:
        name = f"Test Document {id(session)}-{len(text)}"
    if tokenizer is None:
        tokenizer = FakeTokenizer()
    return DocumentImporter(session, tokenizer).import_text(name, text)


def word_texts(words):
    """Helper to get the display text of each word."""
    return [word.text for word in words]


def ledger(session, history_id):
    """
    Helper to read a history's ledger as a plain dictionary.

    Returns:
        ``{(lemma, part_of_speech): (total_seen, total_unknown)}``
    """
    return {
        (row.token.lemma, row.token.part_of_speech): (row.total_seen, row.total_unknown)
        for row in HistoryToken.list(session, history_id)
    }
