"""Request and response models for the trip journal API."""

from .auth import APIErrorBody, Credentials, Token
from .event import Event, EventCreate, EventUpdate, Location
from .media import Media, MediaCreate
from .trip import Trip, TripCreate, TripUpdate

__all__ = [
    "APIErrorBody",
    "Credentials",
    "Event",
    "EventCreate",
    "EventUpdate",
    "Location",
    "Media",
    "MediaCreate",
    "Token",
    "Trip",
    "TripCreate",
    "TripUpdate",
]
