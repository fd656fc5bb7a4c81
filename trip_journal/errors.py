"""
Exceptions raised by the trip journal client.

Every failure carries a human-readable ``detail`` that is also the
exception's string form, so callers can show ``str(exc)`` directly.

``TransportError``
    No HTTP response was obtained, or a trip operation received a
    non-2xx status (trip operations do not inspect error bodies).
``APIError``
    The server answered with a non-2xx status and a ``{"detail": ...}``
    body; the message is passed through verbatim.
``SynthesizedHTTPError``
    The server answered with a non-2xx status and a body that is not
    an error envelope; the message is chosen from the status code.
``DecodeError``
    The server answered successfully but the body does not match the
    expected payload.
``StorageError``
    The session token could not be written to or removed from its
    store; the session is left unchanged.
"""

from typing import Optional


class JournalError(Exception):
    """Base class for all client failures."""

    def __init__(self, detail: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"{type(self).__name__}(detail={self.detail!r}, status_code={self.status_code!r})"


class TransportError(JournalError):
    pass


class APIError(JournalError):
    pass


class SynthesizedHTTPError(APIError):
    pass


class DecodeError(JournalError):
    pass


class StorageError(JournalError):
    pass


def message_for_status(status_code: int) -> str:
    """Return the user-facing message for a status without an error body."""
    if status_code == 400:
        return "Bad request. Please check your input."
    if status_code == 401:
        return "Invalid credentials. Please check your username and password."
    if status_code == 404:
        return "Resource not found."
    if status_code == 422:
        return "Invalid data format. Please check your input."
    if 500 <= status_code <= 599:
        return "Server error. Please try again later."
    return "An unexpected error occurred. Please try again."
