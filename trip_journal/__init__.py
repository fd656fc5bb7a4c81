"""Client for the trip journal API.

Typical use::

    from trip_journal import JournalAPI, TripCreate

    api = JournalAPI(base_url="http://localhost:8000")
    api.log_in("alice", "s3cret")
    trips = api.get_trips()
"""

from .client import JournalAPI
from .errors import (
    APIError,
    DecodeError,
    JournalError,
    StorageError,
    SynthesizedHTTPError,
    TransportError,
)
from .schemas import (
    Event,
    EventCreate,
    EventUpdate,
    Location,
    Media,
    MediaCreate,
    Token,
    Trip,
    TripCreate,
    TripUpdate,
)
from .session import SessionManager
from .storage import FileStore, KeyValueStore, MemoryStore

__all__ = [
    "APIError",
    "DecodeError",
    "Event",
    "EventCreate",
    "EventUpdate",
    "FileStore",
    "JournalAPI",
    "JournalError",
    "KeyValueStore",
    "Location",
    "Media",
    "MediaCreate",
    "MemoryStore",
    "SessionManager",
    "StorageError",
    "SynthesizedHTTPError",
    "Token",
    "TransportError",
    "Trip",
    "TripCreate",
    "TripUpdate",
]
