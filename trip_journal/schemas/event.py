"""
Pydantic models for event data.

An event belongs to a trip and may carry a location and any number of
media items.  ``EventCreate`` names its trip; ``EventUpdate`` does not,
since an event cannot move between trips.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from .media import Media
from .wire import Timestamp, wire_config


class Location(BaseModel):
    latitude: float
    longitude: float
    address: Optional[str] = None

    model_config = wire_config("Location")


class EventBase(BaseModel):
    name: str = Field(..., examples=["Tram 28"])
    note: Optional[str] = None
    date: Timestamp
    location: Optional[Location] = None
    transition_from_previous: Optional[str] = Field(None, examples=["Walked along the river"])


class EventCreate(EventBase):
    """Schema for creating an event."""

    trip_id: int

    model_config = wire_config("EventCreate")


class EventUpdate(EventBase):
    """Schema for updating an event."""

    model_config = wire_config("EventUpdate")


class Event(EventBase):
    """Schema for reading an event from the API."""

    id: int
    media: List[Media] = Field(default_factory=list)

    model_config = wire_config("Event")
