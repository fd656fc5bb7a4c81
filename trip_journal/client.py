"""Trip journal API client.

This module defines :class:`JournalAPI`, the only component that knows
the server's wire format.  Every operation goes through the same three
steps:

1. build a request (``Accept: application/json`` always, a JSON or form
   body when there is one, and ``Authorization: Bearer <token>`` when
   the endpoint needs it and the session holds a token);
2. dispatch it over a ``requests.Session``;
3. interpret the response, turning every failure into one of the
   exceptions in :mod:`trip_journal.errors`.

Two interpretation paths exist.  Authentication, event and media
operations read error bodies: a ``{"detail": ...}`` envelope is passed
through verbatim and anything else gets a message chosen by status
code.  Trip operations only look at the status and report any non-2xx
answer as a bare :class:`~trip_journal.errors.TransportError`, unless
the client was created with ``unify_trip_errors=True``.

The client never retries and never swallows a failure; each one is
logged and raised to the caller.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, List, Optional, Tuple, Type, TypeVar
from urllib.parse import urlencode

import requests
from pydantic import BaseModel

from .core.config import Settings
from .errors import APIError, DecodeError, SynthesizedHTTPError, TransportError, message_for_status
from .schemas.auth import APIErrorBody, Credentials, Token
from .schemas.event import Event, EventCreate, EventUpdate
from .schemas.media import Media, MediaCreate
from .schemas.trip import Trip, TripCreate, TripUpdate
from .schemas.wire import from_wire, to_wire
from .session import SessionManager
from .storage import FileStore


logger = logging.getLogger(__name__)

T = TypeVar("T")

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class JournalAPI:
    """Client for the trip journal API.

    The client owns a :class:`SessionManager` (injected or created) and
    consults it on every authorised request.  Successful ``register``
    and ``log_in`` calls store the returned token in it; ``log_out``
    clears it.
    """

    def __init__(
        self,
        *,
        base_url: str = "http://localhost:8000",
        session_manager: Optional[SessionManager] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        unify_trip_errors: bool = False,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL for the API, e.g. ``http://localhost:8000``.
            session_manager: Token owner.  Defaults to an in-memory
                session that starts logged out.
            session: Optional requests session used as the transport.
                If not supplied a session will be created automatically.
            timeout: Seconds to wait for the server.  ``None`` leaves the
                transport default in place.
            unify_trip_errors: Give trip operations the same error
                translation as event and media operations.
        """
        self.base_url = base_url.rstrip("/")
        self.session_manager = session_manager if session_manager is not None else SessionManager()
        self.session = session or requests.Session()
        self.timeout = timeout
        self.unify_trip_errors = unify_trip_errors

    @classmethod
    def from_settings(
        cls, config: Settings, *, session: Optional[requests.Session] = None
    ) -> "JournalAPI":
        """Build a client whose token is persisted in ``config.token_file``."""
        manager = SessionManager(FileStore(config.token_file), key=config.token_key)
        return cls(
            base_url=config.base_url,
            session_manager=manager,
            session=session,
            timeout=config.timeout,
            unify_trip_errors=config.unify_trip_errors,
        )

    # ------------------------------------------------------------------
    # Authentication state
    # ------------------------------------------------------------------
    @property
    def is_authenticated(self) -> bool:
        return self.session_manager.is_authenticated

    def subscribe(self, callback: Callable[[bool], None]) -> Callable[[], None]:
        """Observe the authenticated state; see :meth:`SessionManager.subscribe`."""
        return self.session_manager.subscribe(callback)

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _build_request(
        self,
        path: str,
        method: str = "GET",
        body: Optional[bytes] = None,
        *,
        requires_auth: bool = True,
        content_type: str = JSON_CONTENT_TYPE,
    ) -> requests.Request:
        """Construct an outgoing request.

        A missing token on an authorised endpoint is not an error here;
        the header is simply left out and the server's 401 is
        translated like any other failure.
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        headers = {"Accept": JSON_CONTENT_TYPE}
        if body is not None:
            headers["Content-Type"] = content_type
        if requires_auth:
            token = self.session_manager.current()
            if token is not None:
                headers["Authorization"] = f"Bearer {token.access_token}"
        return requests.Request(method=method, url=url, headers=headers, data=body)

    def _send(self, request: requests.Request) -> requests.Response:
        """Dispatch ``request``; a missing response becomes ``TransportError``."""
        logger.debug("Sending %s request to %s", request.method, request.url)
        try:
            response = self.session.request(
                method=request.method,
                url=request.url,
                headers=request.headers,
                data=request.data,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error(
                "%s %s failed before a response arrived: %s", request.method, request.url, exc
            )
            raise TransportError(str(exc) or "The server could not be reached.") from exc
        logger.debug("%s %s -> %s", request.method, request.url, response.status_code)
        return response

    def _decode(
        self, schema: Type[T], response: requests.Response
    ) -> Tuple[Optional[T], Optional[str]]:
        """Decode the response body as ``schema``.

        Returns:
            A tuple ``(value, error)``.  On success ``error`` is ``None``;
            otherwise ``value`` is ``None`` and ``error`` describes why
            the body did not match.
        """
        try:
            payload = response.json()
        except ValueError as exc:
            return None, f"body is not JSON ({exc})"
        value, error = from_wire(schema, payload)
        if error is not None:
            return None, f"{error.error_count()} validation error(s): {error.errors()[0]['msg']}"
        return value, None

    def _check_response(self, response: requests.Response) -> None:
        """Raise the translated error for a non-2xx response."""
        status = response.status_code
        if 200 <= status <= 299:
            return
        error_body, _ = self._decode(APIErrorBody, response)
        if error_body is not None:
            logger.warning("API request failed (%s): %s", status, error_body.detail)
            raise APIError(error_body.detail, status_code=status)
        message = message_for_status(status)
        logger.warning("API request failed (%s) without an error body", status)
        raise SynthesizedHTTPError(message, status_code=status)

    def _check_status(self, response: requests.Response) -> None:
        """Status-only check used by trip operations."""
        status = response.status_code
        if 200 <= status <= 299:
            return
        logger.warning("API request failed (%s); response body not inspected", status)
        raise TransportError("The server returned an unexpected response.", status_code=status)

    def _call(
        self,
        method: str,
        path: str,
        *,
        payload: Optional[BaseModel] = None,
        result: Optional[Any] = None,
        status_only: bool = False,
    ) -> Any:
        """Run one authorised JSON operation end to end."""
        body = json.dumps(to_wire(payload)).encode("utf-8") if payload is not None else None
        response = self._send(self._build_request(path, method, body))
        if status_only and not self.unify_trip_errors:
            self._check_status(response)
        else:
            self._check_response(response)
        if result is None:
            return None
        return self._expect(result, response)

    def _expect(self, schema: Type[T], response: requests.Response) -> T:
        value, error = self._decode(schema, response)
        if error is not None:
            logger.error(
                "Could not decode %s response from %s: %s",
                response.status_code,
                response.url,
                error,
            )
            raise DecodeError(
                f"The server response could not be read: {error}", status_code=response.status_code
            )
        return value  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    def register(self, username: str, password: str) -> Token:
        """Create an account and start a session with the returned token."""
        credentials = Credentials(username=username, password=password)
        body = json.dumps(to_wire(credentials)).encode("utf-8")
        request = self._build_request("register", "POST", body, requires_auth=False)
        response = self._send(request)
        self._check_response(response)
        token = self._expect(Token, response)
        self.session_manager.save(token)
        return token

    def log_in(self, username: str, password: str) -> Token:
        """Exchange credentials for a token (OAuth2 password grant).

        The body is form encoded rather than JSON:
        ``grant_type=password&username=...&password=...``.
        """
        form = urlencode({"grant_type": "password", "username": username, "password": password})
        request = self._build_request(
            "token",
            "POST",
            form.encode("utf-8"),
            requires_auth=False,
            content_type=FORM_CONTENT_TYPE,
        )
        response = self._send(request)
        self._check_response(response)
        token = self._expect(Token, response)
        self.session_manager.save(token)
        return token

    def log_out(self) -> None:
        """End the session locally.  No request is sent to the server."""
        self.session_manager.clear()

    # ------------------------------------------------------------------
    # Trip operations
    # ------------------------------------------------------------------
    def create_trip(self, trip: TripCreate) -> Trip:
        return self._call("POST", "trips", payload=trip, result=Trip, status_only=True)

    def get_trips(self) -> List[Trip]:
        return self._call("GET", "trips", result=List[Trip], status_only=True)

    def get_trip(self, trip_id: int) -> Trip:
        return self._call("GET", f"trips/{trip_id}", result=Trip, status_only=True)

    def update_trip(self, trip_id: int, trip: TripUpdate) -> Trip:
        return self._call("PUT", f"trips/{trip_id}", payload=trip, result=Trip, status_only=True)

    def delete_trip(self, trip_id: int) -> None:
        self._call("DELETE", f"trips/{trip_id}", status_only=True)

    # ------------------------------------------------------------------
    # Event operations
    # ------------------------------------------------------------------
    def create_event(self, event: EventCreate) -> Event:
        return self._call("POST", "events", payload=event, result=Event)

    def update_event(self, event_id: int, event: EventUpdate) -> Event:
        return self._call("PUT", f"events/{event_id}", payload=event, result=Event)

    def delete_event(self, event_id: int) -> None:
        self._call("DELETE", f"events/{event_id}")

    # ------------------------------------------------------------------
    # Media operations
    # ------------------------------------------------------------------
    def create_media(self, media: MediaCreate) -> Media:
        """Upload a media item; ``media.data`` is sent as base64 text."""
        return self._call("POST", "media", payload=media, result=Media)

    def delete_media(self, media_id: int) -> None:
        self._call("DELETE", f"media/{media_id}")
