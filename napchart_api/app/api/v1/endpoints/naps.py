"""
API endpoints for naps.

Every route resolves the caller with ``get_current_principal`` and
hands it to ``NapService`` together with the request data.  Ownership
rules live in the service; this module only translates results into
HTTP responses (status codes, ``Location``, alert and pagination
headers) and service errors into ``HTTPException``.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status

from napchart_api.app.core.config import settings
from napchart_api.app.core.errors import NapChartError, to_http_exception
from napchart_api.app.core.pagination import (
    PageRequest,
    entity_alert_headers,
    page_request,
    pagination_headers,
)
from napchart_api.app.core.security import Principal, get_current_principal
from napchart_api.app.schemas.nap import NapRead, NapWrite
from napchart_api.app.services.nap_service import NapService


logger = logging.getLogger(__name__)

ENTITY_NAME = "nap"

router = APIRouter()


def get_nap_service() -> NapService:
    return NapService()


@router.post(
    "",
    response_model=NapRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a nap",
)
async def create_nap(
    nap: NapWrite,
    response: Response,
    principal: Optional[Principal] = Depends(get_current_principal),
    service: NapService = Depends(get_nap_service),
) -> NapRead:
    """Create a new nap.

    Returns 201 with the stored nap and a ``Location`` header, or 400
    if the nap already has an id.
    """
    logger.debug("REST request to save Nap : %s", nap)
    try:
        result = await service.create(nap, principal)
    except NapChartError as e:
        raise to_http_exception(e)
    response.headers["Location"] = f"{settings.api_prefix}/naps/{result.id}"
    response.headers.update(entity_alert_headers(ENTITY_NAME, "created", str(result.id)))
    return result


@router.put(
    "",
    response_model=NapRead,
    summary="Update a nap",
)
async def update_nap(
    nap: NapWrite,
    response: Response,
    principal: Optional[Principal] = Depends(get_current_principal),
    service: NapService = Depends(get_nap_service),
) -> NapRead:
    """Update an existing nap.

    A body without ``id`` creates the nap instead and answers 201, just
    like ``POST``.
    """
    logger.debug("REST request to update Nap : %s", nap)
    try:
        result = await service.update(nap, principal)
    except NapChartError as e:
        raise to_http_exception(e)
    if nap.id is None:
        response.status_code = status.HTTP_201_CREATED
        response.headers["Location"] = f"{settings.api_prefix}/naps/{result.id}"
        response.headers.update(entity_alert_headers(ENTITY_NAME, "created", str(result.id)))
    else:
        response.headers.update(entity_alert_headers(ENTITY_NAME, "updated", str(result.id)))
    return result


@router.get(
    "",
    response_model=List[NapRead],
    summary="List naps",
)
async def list_naps(
    response: Response,
    pageable: PageRequest = Depends(page_request),
    principal: Optional[Principal] = Depends(get_current_principal),
    service: NapService = Depends(get_nap_service),
) -> List[NapRead]:
    """Return a page of naps.

    Administrators see every nap; other users only their own.
    """
    logger.debug("REST request to get a page of Naps")
    try:
        page = await service.list(principal, pageable)
    except NapChartError as e:
        raise to_http_exception(e)
    response.headers.update(pagination_headers(page, f"{settings.api_prefix}/naps"))
    return page.content


@router.get(
    "/user",
    response_model=List[NapRead],
    summary="List the caller's naps",
)
async def list_user_naps(
    response: Response,
    pageable: PageRequest = Depends(page_request),
    principal: Optional[Principal] = Depends(get_current_principal),
    service: NapService = Depends(get_nap_service),
) -> List[NapRead]:
    logger.debug("REST request to get a page of the current user's Naps")
    try:
        page = await service.list_own(principal, pageable)
    except NapChartError as e:
        raise to_http_exception(e)
    response.headers.update(pagination_headers(page, f"{settings.api_prefix}/naps/user"))
    return page.content


@router.get(
    "/{nap_id}",
    response_model=NapRead,
    summary="Get a nap",
)
async def get_nap(
    nap_id: int,
    principal: Optional[Principal] = Depends(get_current_principal),
    service: NapService = Depends(get_nap_service),
) -> NapRead:
    """Retrieve a nap by id.  Non-admin users can only access their own."""
    logger.debug("REST request to get Nap : %s", nap_id)
    try:
        return await service.get(nap_id, principal)
    except NapChartError as e:
        raise to_http_exception(e)


@router.delete(
    "/{nap_id}",
    summary="Delete a nap",
)
async def delete_nap(
    nap_id: int,
    principal: Optional[Principal] = Depends(get_current_principal),
    service: NapService = Depends(get_nap_service),
) -> Response:
    """Delete a nap.  Answers 404 if it does not exist (any more)."""
    logger.debug("REST request to delete Nap : %s", nap_id)
    try:
        await service.delete(nap_id, principal)
    except NapChartError as e:
        raise to_http_exception(e)
    return Response(
        status_code=status.HTTP_200_OK,
        headers=entity_alert_headers(ENTITY_NAME, "deleted", str(nap_id)),
    )
