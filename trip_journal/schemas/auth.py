"""
Pydantic models for authentication.

``Token`` is what ``/register`` and ``/token`` return and what the
session manager persists.  ``APIErrorBody`` is the server's error
envelope, used only to sniff failed responses for a ``detail``.
"""

from pydantic import BaseModel, ConfigDict, Field


class Token(BaseModel):
    """Bearer credential issued by the server."""

    access_token: str = Field(..., examples=["eyJhbGciOiJIUzI1NiJ9..."])
    token_type: str = Field(..., examples=["bearer"])

    model_config = ConfigDict(frozen=True, extra="ignore")


class Credentials(BaseModel):
    """Body of ``POST /register``."""

    username: str
    password: str


class APIErrorBody(BaseModel):
    detail: str
