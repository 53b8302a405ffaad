"""
Pydantic schemas for naps.

``NapWrite`` is what clients send on create and update; ``NapRead`` is
what the API returns.  The ``owner`` field holds the login of the user
the nap belongs to.  On writes it is only honoured for administrators;
for everybody else the service replaces it with the caller's login.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, computed_field, model_validator


class NapBase(BaseModel):
    start_time: datetime = Field(..., description="When the nap started")
    end_time: Optional[datetime] = Field(None, description="When the nap ended; empty while ongoing")
    rating: Optional[int] = Field(None, ge=0, le=10, description="How restful the nap was, 0-10")
    notes: Optional[str] = Field(None, max_length=2000)
    owner: Optional[str] = Field(None, description="Login of the owning user")

    @model_validator(mode="after")
    def check_end_after_start(self) -> "NapBase":
        if self.end_time is None:
            return self
        if (self.start_time.tzinfo is None) != (self.end_time.tzinfo is None):
            raise ValueError("start_time and end_time must both be timezone-aware or both naive")
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class NapWrite(NapBase):
    """Schema for creating or updating a nap.

    ``id`` must be empty on create.  On update an empty ``id`` makes the
    request behave exactly like a create.
    """

    id: Optional[int] = None


class NapRead(NapBase):
    """Schema for reading a nap from the API."""

    id: int
    owner: str

    model_config = {
        "from_attributes": True,
    }

    @computed_field
    @property
    def duration_hours(self) -> Optional[float]:
        if self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds() / 3600


@dataclass(frozen=True)
class ResolvedNap:
    """A nap payload whose owner has been settled and can be persisted.

    ``nap.owner`` is the owner's login and ``owner_id`` the matching
    ``users.id``.
    """

    nap: NapWrite
    owner_id: int
