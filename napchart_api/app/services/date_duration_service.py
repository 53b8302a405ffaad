"""
Business logic for the nap aggregates shown on the dashboard.

Both listings are always scoped to the caller's own login.  Unlike
naps there is no administrator override here: an admin sees their own
summaries only.
"""

from typing import Optional

from ..core.pagination import Page, PageRequest
from ..core.security import Principal, require_principal
from ..repositories.date_duration_repository import (
    DateDurationRepository,
    DurationRatingRepository,
)
from ..schemas.date_duration import DateDurationRead, DurationRatingRead


class DateDurationService:
    """Read access to per-day durations and duration ratings."""

    def __init__(
        self,
        durations: Optional[DateDurationRepository] = None,
        ratings: Optional[DurationRatingRepository] = None,
    ) -> None:
        self.durations = durations or DateDurationRepository()
        self.ratings = ratings or DurationRatingRepository()

    async def list_for_current_user(
        self,
        principal: Optional[Principal],
        page_request: PageRequest,
    ) -> Page[DateDurationRead]:
        principal = require_principal(principal)
        return self.durations.find_by_login(principal.login, page_request)

    async def list_ratings_for_current_user(
        self,
        principal: Optional[Principal],
        page_request: PageRequest,
    ) -> Page[DurationRatingRead]:
        principal = require_principal(principal)
        return self.ratings.find_by_login(principal.login, page_request)
