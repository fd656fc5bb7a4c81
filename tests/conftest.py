"""Test configuration for pytest."""

import json
from typing import Any, Callable, Optional

import pytest
import requests

from trip_journal.client import JournalAPI
from trip_journal.schemas.auth import Token
from trip_journal.session import SessionManager
from trip_journal.storage import MemoryStore

BASE_URL = "http://testserver"


def make_response(
    status_code: int = 200, body: Any = None, url: str = BASE_URL
) -> requests.Response:
    """Build a real ``requests.Response`` carrying ``body``.

    ``body`` may be raw bytes/str (sent as-is), any JSON-compatible
    value (serialized) or ``None`` for an empty body.
    """
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response.encoding = "utf-8"
    if body is None:
        response._content = b""
    elif isinstance(body, bytes):
        response._content = body
    elif isinstance(body, str):
        response._content = body.encode("utf-8")
    else:
        response._content = json.dumps(body).encode("utf-8")
    return response


@pytest.fixture
def token() -> Token:
    return Token(access_token="abc123", token_type="bearer")


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def session_manager(store: MemoryStore) -> SessionManager:
    return SessionManager(store)


@pytest.fixture
def transport(mocker):
    """A ``requests.Session`` stand-in; configure ``transport.request``."""
    return mocker.Mock(spec=requests.Session)


@pytest.fixture
def respond(transport) -> Callable[..., requests.Response]:
    """Make the next transport call return the given status and body."""

    def _respond(status_code: int = 200, body: Optional[Any] = None) -> requests.Response:
        response = make_response(status_code, body)
        transport.request.return_value = response
        return response

    return _respond


@pytest.fixture
def api(session_manager: SessionManager, transport) -> JournalAPI:
    return JournalAPI(base_url=BASE_URL, session_manager=session_manager, session=transport)


@pytest.fixture
def logged_in_api(api: JournalAPI, token: Token) -> JournalAPI:
    api.session_manager.save(token)
    return api


@pytest.fixture
def response_factory() -> Callable[..., requests.Response]:
    return make_response
