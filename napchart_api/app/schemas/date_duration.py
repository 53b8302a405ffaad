"""
Pydantic schemas for the read-only nap aggregates.

Both shapes are computed by SQL views from the naps table and are never
accepted as input.
"""

from datetime import date

from pydantic import BaseModel, Field


class DateDurationRead(BaseModel):
    """Total nap time of one user on one calendar day."""

    id: str = Field(..., description="'<login>:<YYYY-MM-DD>'")
    local_date: date
    total_duration: float = Field(..., ge=0, description="Hours slept that day")
    login: str

    model_config = {
        "from_attributes": True,
    }


class DurationRatingRead(BaseModel):
    """Average rating of one user's naps of a given length."""

    id: str = Field(..., description="'<login>:<hours>'")
    duration: int = Field(..., ge=0, description="Nap length rounded to whole hours")
    average_rating: float
    login: str

    model_config = {
        "from_attributes": True,
    }
