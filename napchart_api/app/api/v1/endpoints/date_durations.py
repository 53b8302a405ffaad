"""
API endpoints for the dashboard aggregates.

``/date-durations/user`` returns the caller's total nap time per day
and ``/duration-ratings/user`` the caller's average rating per nap
length.  Both are read-only and always limited to the caller.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from napchart_api.app.core.config import settings
from napchart_api.app.core.errors import NapChartError, to_http_exception
from napchart_api.app.core.pagination import PageRequest, page_request, pagination_headers
from napchart_api.app.core.security import Principal, get_current_principal
from napchart_api.app.schemas.date_duration import DateDurationRead, DurationRatingRead
from napchart_api.app.services.date_duration_service import DateDurationService


logger = logging.getLogger(__name__)

router = APIRouter()


def get_date_duration_service() -> DateDurationService:
    return DateDurationService()


@router.get(
    "/date-durations/user",
    response_model=List[DateDurationRead],
    summary="List the caller's daily nap totals",
)
async def list_date_durations(
    response: Response,
    pageable: PageRequest = Depends(page_request),
    principal: Optional[Principal] = Depends(get_current_principal),
    service: DateDurationService = Depends(get_date_duration_service),
) -> List[DateDurationRead]:
    logger.debug("REST request to get a page of DateDurations")
    try:
        page = await service.list_for_current_user(principal, pageable)
    except NapChartError as e:
        raise to_http_exception(e)
    response.headers.update(pagination_headers(page, f"{settings.api_prefix}/date-durations/user"))
    return page.content


@router.get(
    "/duration-ratings/user",
    response_model=List[DurationRatingRead],
    summary="List the caller's average rating per nap length",
)
async def list_duration_ratings(
    response: Response,
    pageable: PageRequest = Depends(page_request),
    principal: Optional[Principal] = Depends(get_current_principal),
    service: DateDurationService = Depends(get_date_duration_service),
) -> List[DurationRatingRead]:
    logger.debug("REST request to get a page of DurationRatings")
    try:
        page = await service.list_ratings_for_current_user(principal, pageable)
    except NapChartError as e:
        raise to_http_exception(e)
    response.headers.update(pagination_headers(page, f"{settings.api_prefix}/duration-ratings/user"))
    return page.content
