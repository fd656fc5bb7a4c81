"""
Pydantic models for media attached to events.

``MediaCreate.data`` holds raw bytes.  On the wire the field is named
``base64_data`` and carries the standard, padded base64 text of those
bytes; the conversion happens only when the model is serialized to
JSON.
"""

import base64
from typing import Optional

from pydantic import BaseModel, field_serializer

from .wire import wire_config


class MediaCreate(BaseModel):
    """Schema for uploading a media item."""

    event_id: int
    data: bytes
    caption: Optional[str] = None

    model_config = wire_config("MediaCreate")

    @field_serializer("data", when_used="json")
    def encode_data(self, value: bytes) -> str:
        return base64.b64encode(value).decode("ascii")


class Media(BaseModel):
    """Schema for reading a media item from the API."""

    id: int
    caption: Optional[str] = None
    url: Optional[str] = None

    model_config = wire_config("Media")
