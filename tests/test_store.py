"""Unit tests for ReaderStore."""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from jpreader.exc import (
    DoesNotExist,
    EofReached,
    NoOpenFile,
    ReaderError,
    RedoEmpty,
    StorageFailure,
    UndoEmpty,
)
from jpreader.models.document import Document
from jpreader.models.history import History
from jpreader.models.history_token import HistoryToken
from jpreader.models.pos import PartOfSpeech
from jpreader.models.state import Action, CurrentState, Position, State
from jpreader.services.store import ReaderStatus, ReaderStore, ReaderView
from tests.conftest import (
    BENTOU_LINE,
    FakeTokenizer,
    create_test_document,
    ledger,
    word_texts,
)

P = PartOfSpeech
KNOWN = Action.MARK_KNOWN
UNKNOWN = Action.MARK_UNKNOWN


@pytest.fixture
def store(db_session, sample_document):
    """Create a store with the sample document open."""
    store = ReaderStore(db_session)
    store.open(sample_document.id)
    return store


@pytest.fixture
def bentou_store(db_session):
    """Create a store with the one-line bento document open."""
    document = create_test_document(db_session, name="bentou", text=BENTOU_LINE)
    store = ReaderStore(db_session)
    store.open(document.id)
    return store


def storage_error():
    return OperationalError(
        "INSERT INTO history_tokens", {}, Exception("disk I/O error")
    )


class TestOpen:
    """Test cases for opening and closing documents."""

    def test_closed_store(self, db_session):
        """Test a new store has nothing open."""
        store = ReaderStore(db_session)
        assert not store.is_open
        assert store.document is None
        assert store.history is None
        assert store.current_state is None
        assert store.view() == ReaderView.empty()

    def test_open_shows_first_word(self, store, sample_document):
        """Test opening shows the first word of the first line."""
        view = store.view()
        assert store.is_open
        assert store.document.id == sample_document.id
        assert view.status is ReaderStatus.ACTIVE
        assert word_texts(view.already_read_words) == []
        assert view.current_word.text == "『愛妻"
        assert word_texts(view.remaining_words) == ["弁当だー？』"]

    def test_open_initial_state(self, store):
        """Test a new history starts at operation 0 with no action."""
        state = store.current_state
        assert state.operation_num == 0
        assert state.action is None
        assert state.position == Position(0, 0)

    def test_open_creates_missing_history(self, db_session):
        """Test opening a document without a history starts one."""
        document = Document.create(db_session, "raw", "猫が走る。", FakeTokenizer())
        db_session.commit()
        assert History.current(db_session, document.id) is None

        store = ReaderStore(db_session)
        view = store.open(document.id)

        assert store.history is not None
        assert view.current_word.text == "猫が"

    def test_open_resumes_progress(self, db_session, store, sample_document):
        """Test a second store resumes where the first left off."""
        store.next(KNOWN)
        store.next(KNOWN)

        other = ReaderStore(db_session)
        view = other.open(sample_document.id)

        assert other.current_state.operation_num == 2
        assert view.current_word.text == "猫が"

    def test_open_by_name(self, db_session, sample_document):
        """Test opening a document by name."""
        store = ReaderStore(db_session)
        store.open_by_name(sample_document.name)
        assert store.document.id == sample_document.id

    def test_open_missing_document(self, db_session):
        """Test opening an unknown document raises DoesNotExist."""
        store = ReaderStore(db_session)
        with pytest.raises(DoesNotExist):
            store.open(12345)
        with pytest.raises(DoesNotExist):
            store.open_by_name("missing")
        assert not store.is_open

    def test_open_document_without_words(self, db_session):
        """Test a document without words opens at EOF."""
        document = create_test_document(db_session, name="blank", text="〓")
        store = ReaderStore(db_session)
        assert store.open(document.id).status is ReaderStatus.EOF

    def test_close(self, store):
        """Test closing forgets the document."""
        store.close()
        assert not store.is_open
        assert store.view().status is ReaderStatus.EMPTY


class TestNext:
    """Test cases for ReaderStore.next()."""

    def test_records_word_and_advances(self, db_session, store):
        """Test next records the current word and moves on."""
        view = store.next(KNOWN)

        assert word_texts(view.already_read_words) == ["『愛妻"]
        assert view.current_word.text == "弁当だー？』"
        assert view.remaining_words == ()
        assert ledger(db_session, store.history.id) == {
            ("『", P.PUNCT): (1, 0),
            ("愛妻", P.NOUN): (1, 0),
        }

    def test_marks_unknown(self, db_session, store):
        """Test an unknown mark counts every token of the word."""
        store.next(UNKNOWN)
        assert ledger(db_session, store.history.id) == {
            ("『", P.PUNCT): (1, 1),
            ("愛妻", P.NOUN): (1, 1),
        }

    def test_action_stored_on_left_state(self, db_session, store):
        """Test the action is stored on the entry being left."""
        store.next(UNKNOWN)
        states = State.list(db_session, store.history.id)

        assert [state.operation_num for state in states] == [0, 1]
        assert states[0].action is UNKNOWN
        assert states[1].action is None
        assert store.current_state.id == states[1].id

    def test_crosses_lines(self, store):
        """Test advancing past the last word of a line."""
        store.next(KNOWN)
        view = store.next(KNOWN)
        assert view.current_word.text == "猫が"
        assert store.current_state.position == Position(1, 0)

    def test_reaches_eof(self, store):
        """Test advancing past the last word reaches EOF."""
        for _ in range(6):
            view = store.next(KNOWN)
        assert view.status is ReaderStatus.EOF
        assert view.current_word.text == ""
        assert store.current_state.is_eof

    def test_eof_raises(self, store):
        """Test next at EOF raises EofReached and changes nothing."""
        for _ in range(6):
            store.next(KNOWN)
        before = ledger(store.session, store.history.id)

        with pytest.raises(EofReached):
            store.next(KNOWN)

        assert store.current_state.operation_num == 6
        assert ledger(store.session, store.history.id) == before

    def test_repeated_lemma_accumulates(self, db_session, store):
        """Test the same dictionary entry in two words counts twice."""
        for _ in range(6):
            store.next(KNOWN)
        rows = ledger(db_session, store.history.id)
        assert rows[("走る", P.VERB)] == (2, 0)
        assert rows[("。", P.PUNCT)] == (2, 0)

    def test_requires_open_document(self, db_session):
        """Test next without a document raises NoOpenFile."""
        with pytest.raises(NoOpenFile):
            ReaderStore(db_session).next(KNOWN)


class TestUndo:
    """Test cases for ReaderStore.undo()."""

    def test_undo_empty(self, store):
        """Test undo at the first entry raises UndoEmpty."""
        with pytest.raises(UndoEmpty):
            store.undo()
        assert store.current_state.operation_num == 0

    def test_returns_to_previous_word(self, store):
        """Test undo shows the previous word again."""
        store.next(KNOWN)
        view = store.undo()
        assert view.current_word.text == "『愛妻"
        assert store.current_state.operation_num == 0

    def test_floor_deletes_rows(self, db_session, store):
        """Test undoing a first sighting removes its ledger rows."""
        store.next(KNOWN)
        store.undo()
        assert HistoryToken.list(db_session, store.history.id) == []

    def test_keeps_undone_entry(self, db_session, store):
        """Test undo keeps the entry it leaves for redo."""
        store.next(KNOWN)
        store.undo()
        assert len(State.list(db_session, store.history.id)) == 2
        assert store.can_redo()

    def test_undo_from_eof(self, store):
        """Test undo from EOF returns to the last word."""
        for _ in range(6):
            store.next(KNOWN)
        view = store.undo()
        assert view.status is ReaderStatus.ACTIVE
        assert view.current_word.text == "走った。"

    def test_inverse_law(self, db_session, store):
        """Test undoing every next restores the initial state and ledger."""
        actions = [KNOWN, UNKNOWN, KNOWN, KNOWN, UNKNOWN, UNKNOWN]
        for action in actions:
            store.next(action)
        for _ in actions:
            store.undo()

        assert store.current_state.operation_num == 0
        assert store.current_state.position == Position(0, 0)
        assert ledger(db_session, store.history.id) == {}

    def test_inverse_law_from_midway(self, db_session, store):
        """Test undo restores pre-existing rows to their previous values."""
        store.next(UNKNOWN)
        store.next(KNOWN)
        store.next(KNOWN)
        before = ledger(db_session, store.history.id)

        for action in [UNKNOWN, KNOWN, UNKNOWN]:
            store.next(action)
        for _ in range(3):
            store.undo()

        assert store.current_state.operation_num == 3
        assert ledger(db_session, store.history.id) == before

    def test_requires_open_document(self, db_session):
        """Test undo without a document raises NoOpenFile."""
        with pytest.raises(NoOpenFile):
            ReaderStore(db_session).undo()


class TestRedo:
    """Test cases for ReaderStore.redo()."""

    def test_redo_empty(self, store):
        """Test redo at the tip raises RedoEmpty."""
        with pytest.raises(RedoEmpty):
            store.redo()

    def test_replays_action(self, db_session, store):
        """Test redo replays the undone action."""
        store.next(UNKNOWN)
        after_next = ledger(db_session, store.history.id)
        store.undo()

        view = store.redo()

        assert view.current_word.text == "弁当だー？』"
        assert store.current_state.operation_num == 1
        assert ledger(db_session, store.history.id) == after_next

    def test_redo_all(self, db_session, store):
        """Test redoing every undo restores the final state and ledger."""
        actions = [KNOWN, UNKNOWN, KNOWN, UNKNOWN, KNOWN, KNOWN]
        for action in actions:
            store.next(action)
        final = ledger(db_session, store.history.id)
        for _ in actions:
            store.undo()
        for _ in actions:
            store.redo()

        assert store.view().status is ReaderStatus.EOF
        assert ledger(db_session, store.history.id) == final
        with pytest.raises(RedoEmpty):
            store.redo()

    def test_new_action_cuts_branch(self, db_session, store):
        """Test next after undo discards the redo branch."""
        store.next(KNOWN)
        store.next(KNOWN)
        store.undo()
        store.next(UNKNOWN)

        with pytest.raises(RedoEmpty):
            store.redo()

        states = State.list(db_session, store.history.id)
        assert [state.operation_num for state in states] == [0, 1, 2]
        assert states[1].action is UNKNOWN
        rows = ledger(db_session, store.history.id)
        assert rows[("愛妻", P.NOUN)] == (1, 0)
        assert rows[("弁当", P.NOUN)] == (1, 1)

    def test_requires_open_document(self, db_session):
        """Test redo without a document raises NoOpenFile."""
        with pytest.raises(NoOpenFile):
            ReaderStore(db_session).redo()


class TestBentoScenario:
    """End-to-end run over the one-line bento document."""

    def test_scenario(self, db_session, bentou_store):
        """Test next, undo, next and redo over the bento line."""
        store = bentou_store
        history_id = store.history.id

        view = store.next(KNOWN)
        assert ledger(db_session, history_id) == {
            ("『", P.PUNCT): (1, 0),
            ("愛妻", P.NOUN): (1, 0),
        }
        assert store.current_state.position == Position(0, 1)
        assert view.current_word.text == "弁当だー？』"

        store.undo()
        assert store.current_state.position == Position(0, 0)
        assert ledger(db_session, history_id) == {}

        store.next(UNKNOWN)
        with pytest.raises(RedoEmpty):
            store.redo()
        assert ledger(db_session, history_id) == {
            ("『", P.PUNCT): (1, 1),
            ("愛妻", P.NOUN): (1, 1),
        }

    def test_eof_after_two_words(self, bentou_store):
        """Test the one-line document ends after its two words."""
        bentou_store.next(KNOWN)
        assert bentou_store.next(UNKNOWN).status is ReaderStatus.EOF


class TestReset:
    """Test cases for ReaderStore.reset()."""

    def test_reset_without_document(self, db_session):
        """Test reset with nothing open returns an empty view."""
        assert ReaderStore(db_session).reset() == ReaderView.empty()

    def test_starts_new_history(self, db_session, store, sample_document):
        """Test reset ends the history and starts a new one."""
        old = store.history
        store.next(UNKNOWN)
        store.next(KNOWN)

        view = store.reset()

        assert view.current_word.text == "『愛妻"
        assert store.history.id != old.id
        assert store.current_state.operation_num == 0
        assert not store.can_undo()
        histories = History.list(db_session, sample_document.id)
        assert [history.id for history in histories] == [old.id, store.history.id]
        assert histories[0].is_ended
        assert not histories[1].is_ended

    def test_deletes_log_and_ledger(self, db_session, store):
        """Test reset deletes the old history's log and ledger."""
        old_id = store.history.id
        store.next(UNKNOWN)

        store.reset()

        assert State.list(db_session, old_id) == []
        assert CurrentState.get_state(db_session, old_id) is None
        assert HistoryToken.list(db_session, old_id) == []
        assert ledger(db_session, store.history.id) == {}


class TestTransactions:
    """Test cases for transaction boundaries."""

    def test_storage_failure_rolls_back(self, db_session, store):
        """Test a database error leaves nothing behind."""
        with patch.object(CurrentState, "set_state", side_effect=storage_error()):
            with pytest.raises(StorageFailure) as exc_info:
                store.next(UNKNOWN)

        assert exc_info.value.operation == "next"
        assert isinstance(exc_info.value.error, OperationalError)
        states = State.list(db_session, store.history.id)
        assert len(states) == 1
        assert states[0].action is None
        assert ledger(db_session, store.history.id) == {}
        assert store.view().current_word.text == "『愛妻"

    def test_storage_failure_during_undo(self, db_session, store):
        """Test a failed undo keeps the ledger and pointer."""
        store.next(KNOWN)
        before = ledger(db_session, store.history.id)

        with patch.object(HistoryToken, "reverse", side_effect=storage_error()):
            with pytest.raises(StorageFailure):
                store.undo()

        assert store.current_state.operation_num == 1
        assert ledger(db_session, store.history.id) == before

    def test_other_errors_roll_back_and_propagate(self, db_session, store):
        """Test non-database errors roll back and are re-raised as is."""
        with patch.object(
            store.navigator, "advance", side_effect=RuntimeError("boom")
        ):
            with pytest.raises(RuntimeError):
                store.next(KNOWN)

        assert ledger(db_session, store.history.id) == {}
        assert store.current_state.operation_num == 0

    def test_reader_errors_share_base(self, store):
        """Test expected reader conditions derive from ReaderError."""
        with pytest.raises(ReaderError):
            store.undo()


class TestQueries:
    """Test cases for the store's queries."""

    def test_can_undo_and_redo(self, store):
        """Test can_undo and can_redo follow the pointer."""
        assert not store.can_undo()
        assert not store.can_redo()
        store.next(KNOWN)
        assert store.can_undo()
        assert not store.can_redo()
        store.undo()
        assert store.can_redo()

    def test_closed_store_cannot_undo(self, db_session):
        """Test a closed store can neither undo nor redo."""
        store = ReaderStore(db_session)
        assert not store.can_undo()
        assert not store.can_redo()

    def test_statistics(self, store, sample_document):
        """Test statistics cover the open history."""
        store.next(KNOWN)
        store.next(UNKNOWN)

        statistics = store.statistics()

        assert statistics.document_name == sample_document.name
        assert statistics.total_seen == 7
        assert statistics.total_unknown == 5
        assert statistics.percent_known == 29

    def test_statistics_requires_open_document(self, db_session):
        """Test statistics without a document raises NoOpenFile."""
        with pytest.raises(NoOpenFile):
            ReaderStore(db_session).statistics()


class TestSettings:
    """Test cases for settings-driven construction."""

    def test_cache_flag(self, db_session, settings):
        """Test the segmentation cache follows the settings."""
        settings.cache_segmentation = False
        assert ReaderStore(db_session, settings=settings).navigator.cache is False
        settings.cache_segmentation = True
        assert ReaderStore(db_session, settings=settings).navigator.cache is True

    def test_default_cache(self, db_session):
        """Test the segmentation cache is on without settings."""
        assert ReaderStore(db_session).navigator.cache is True

    def test_from_settings(self, settings, tmp_path):
        """Test from_settings opens the configured database."""
        settings.db_path = tmp_path / "data" / "reader.db"
        store = ReaderStore.from_settings(settings)
        try:
            assert (tmp_path / "data" / "reader.db").exists()
            assert store.settings is settings
            assert Document.list(store.session) == []
        finally:
            store.session.close()
            store.session.get_bind().dispose()
