"""Unit tests for the session manager and token stores."""
import threading

import pytest

from trip_journal.errors import JournalError, StorageError
from trip_journal.schemas.auth import Token
from trip_journal.session import DEFAULT_TOKEN_KEY, SessionManager
from trip_journal.storage import FileStore, MemoryStore


def test_starts_logged_out(session_manager):
    """A fresh manager over an empty store has no token."""
    assert session_manager.current() is None
    assert session_manager.is_authenticated is False


def test_save_sets_current_and_persists(session_manager, store, token):
    """Saving a token makes it current and writes it to the store."""
    session_manager.save(token)

    assert session_manager.current() == token
    assert session_manager.is_authenticated is True
    assert Token.model_validate_json(store.load(DEFAULT_TOKEN_KEY)) == token


def test_clear_removes_token_everywhere(session_manager, store, token):
    """Clearing drops the in-memory token and the persisted copy."""
    session_manager.save(token)
    session_manager.clear()

    assert session_manager.current() is None
    assert store.load(DEFAULT_TOKEN_KEY) is None


def test_clear_when_logged_out_is_harmless(session_manager):
    """Clearing without a token still leaves the session logged out."""
    session_manager.clear()
    assert session_manager.current() is None


def test_persisted_token_survives_reload(store, token):
    """A new manager over the same store recovers the last saved token."""
    SessionManager(store).save(token)

    reloaded = SessionManager(store)

    assert reloaded.current() == token


def test_load_returns_last_saved_token(session_manager, token):
    """``load`` reads back whatever ``save`` persisted most recently."""
    session_manager.save(Token(access_token="old", token_type="bearer"))
    session_manager.save(token)

    assert session_manager.load() == token


@pytest.mark.parametrize("raw", [b"not json", b'{"access_token": 1}', b"\xff\xfe"])
def test_load_ignores_undecodable_value(raw):
    """Garbage in the store means "no token", not an error."""
    manager = SessionManager(MemoryStore({DEFAULT_TOKEN_KEY: raw}))

    assert manager.current() is None
    assert manager.load() is None


def test_autoload_can_be_disabled(store, token):
    """With ``autoload=False`` the persisted token is read only on demand."""
    SessionManager(store).save(token)

    manager = SessionManager(store, autoload=False)
    assert manager.current() is None
    assert manager.load() == token
    assert manager.current() == token


def test_custom_key(store, token):
    """Tokens are stored under the configured key."""
    SessionManager(store, key="tests.token").save(token)

    assert store.load("tests.token") is not None
    assert store.load(DEFAULT_TOKEN_KEY) is None


def test_subscribe_emits_current_state_immediately(session_manager, token):
    """Subscribers get the current state on subscription."""
    seen = []
    session_manager.subscribe(seen.append)
    assert seen == [False]

    session_manager.save(token)
    other = []
    session_manager.subscribe(other.append)
    assert other == [True]


def test_subscribe_follows_save_and_clear(session_manager, token):
    """Every save and clear is broadcast in order."""
    seen = []
    session_manager.subscribe(seen.append)

    session_manager.save(token)
    session_manager.clear()
    session_manager.save(token)

    assert seen == [False, True, False, True]


def test_unsubscribe_stops_notifications(session_manager, token):
    """The function returned by ``subscribe`` removes the callback."""
    seen = []
    unsubscribe = session_manager.subscribe(seen.append)
    unsubscribe()
    unsubscribe()

    session_manager.save(token)

    assert seen == [False]


def test_load_notifies_only_on_change(store, token):
    """Reloading an unchanged state does not emit."""
    manager = SessionManager(store, autoload=False)
    seen = []
    manager.subscribe(seen.append)

    manager.load()
    assert seen == [False]

    store.save(DEFAULT_TOKEN_KEY, token.model_dump_json().encode("utf-8"))
    manager.load()
    assert seen == [False, True]


def test_concurrent_writers_never_expose_partial_token(session_manager):
    """Readers only ever see a whole token or none while writers race."""
    tokens = [Token(access_token=f"token-{i}", token_type=f"type-{i}") for i in range(20)]
    errors = []
    stop = threading.Event()

    def writer(token):
        for _ in range(50):
            session_manager.save(token)
            session_manager.clear()

    def reader():
        while not stop.is_set():
            current = session_manager.current()
            if current is None:
                continue
            if current.access_token.split("-")[1] != current.token_type.split("-")[1]:
                errors.append(current)

    readers = [threading.Thread(target=reader) for _ in range(4)]
    writers = [threading.Thread(target=writer, args=(t,)) for t in tokens]
    for thread in readers + writers:
        thread.start()
    for thread in writers:
        thread.join()
    stop.set()
    for thread in readers:
        thread.join()

    assert errors == []
    session_manager.clear()
    assert session_manager.is_authenticated is False


def test_file_store_round_trip(tmp_path):
    """Values written by one FileStore are read by another."""
    path = tmp_path / "nested" / "credentials.json"
    FileStore(path).save("key", b"\x00\x01payload")

    assert FileStore(path).load("key") == b"\x00\x01payload"


def test_file_store_missing_file_and_key(tmp_path):
    """Absent file or key both read as ``None``."""
    store = FileStore(tmp_path / "missing.json")
    assert store.load("key") is None

    store.save("other", b"x")
    assert store.load("key") is None


def test_file_store_remove(tmp_path):
    """Removing a key deletes only that key."""
    store = FileStore(tmp_path / "credentials.json")
    store.save("a", b"1")
    store.save("b", b"2")

    store.remove("a")
    store.remove("never-there")

    assert store.load("a") is None
    assert store.load("b") == b"2"


def test_file_store_tolerates_corrupt_file(tmp_path):
    """A corrupt file reads as empty and is replaced on the next write."""
    path = tmp_path / "credentials.json"
    path.write_text("{not json", encoding="utf-8")
    store = FileStore(path)

    assert store.load("key") is None
    store.save("key", b"value")
    assert store.load("key") == b"value"


def test_session_manager_over_file_store(tmp_path, token):
    """The token persists across managers backed by the same file."""
    path = tmp_path / "credentials.json"
    SessionManager(FileStore(path)).save(token)

    assert SessionManager(FileStore(path)).current() == token


class FailingStore(MemoryStore):
    """A store whose writes fail, as with a full or read-only disk."""

    def save(self, key, value):
        raise OSError("No space left on device")

    def remove(self, key):
        raise OSError("Read-only file system")


def test_failed_save_leaves_session_unchanged(token):
    """A token that cannot be persisted never becomes current."""
    manager = SessionManager(FailingStore())
    seen = []
    manager.subscribe(seen.append)

    with pytest.raises(StorageError) as exc_info:
        manager.save(token)

    assert isinstance(exc_info.value, JournalError)
    assert "No space left on device" in exc_info.value.detail
    assert manager.current() is None
    assert manager.is_authenticated is False
    assert seen == [False]


def test_failed_clear_keeps_current_token(token):
    """If the persisted token cannot be removed the session stays logged in."""
    store = FailingStore({DEFAULT_TOKEN_KEY: token.model_dump_json().encode("utf-8")})
    manager = SessionManager(store)
    seen = []
    manager.subscribe(seen.append)

    with pytest.raises(StorageError):
        manager.clear()

    assert manager.current() == token
    assert seen == [True]
