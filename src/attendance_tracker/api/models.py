"""Pydantic request models for the HTTP API."""

from pydantic import BaseModel, Field


class PhotoPayload(BaseModel):
    """Optional photo attached to a check-in or check-out."""

    photo: str | None = None


class TimezonePayload(BaseModel):
    """IANA timezone name, e.g. Europe/Berlin."""

    timezone: str = Field(min_length=1, max_length=64)
