"""
Pydantic models for trip data.

``TripCreate`` and ``TripUpdate`` are request bodies; ``Trip`` is the
read model returned by the server and carries the server-assigned
``id`` together with the trip's events.
"""

from typing import List

from pydantic import BaseModel, Field

from .event import Event
from .wire import Timestamp, wire_config


class TripBase(BaseModel):
    name: str = Field(..., examples=["Lisbon"])
    start_date: Timestamp
    end_date: Timestamp


class TripCreate(TripBase):
    """Schema for creating a trip."""

    model_config = wire_config("TripCreate")


class TripUpdate(TripBase):
    """Schema for updating a trip.  The server replaces every field."""

    model_config = wire_config("TripUpdate")


class Trip(TripBase):
    """Schema for reading a trip from the API."""

    id: int
    events: List[Event] = Field(default_factory=list)

    model_config = wire_config("Trip")
