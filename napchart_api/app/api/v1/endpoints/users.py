"""
User endpoints for API v1.

Administrators register users and list them; any authenticated caller
can ask who the API thinks they are via ``/account``.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status

from napchart_api.app.core.config import settings
from napchart_api.app.core.errors import NapChartError, to_http_exception
from napchart_api.app.core.pagination import PageRequest, page_request, pagination_headers
from napchart_api.app.core.security import Principal, get_current_principal
from napchart_api.app.schemas.user import AccountRead, UserCreate, UserRead
from napchart_api.app.services.user_service import UserService


router = APIRouter()


def get_user_service() -> UserService:
    return UserService()


@router.post("/users", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register_user(
    user: UserCreate,
    principal: Optional[Principal] = Depends(get_current_principal),
    service: UserService = Depends(get_user_service),
) -> UserRead:
    """Register a new user.  Administrators only."""
    try:
        return await service.create_user(user, principal)
    except NapChartError as e:
        raise to_http_exception(e)


@router.get("/users", response_model=List[UserRead])
async def list_users(
    response: Response,
    pageable: PageRequest = Depends(page_request),
    principal: Optional[Principal] = Depends(get_current_principal),
    service: UserService = Depends(get_user_service),
) -> List[UserRead]:
    """Return a page of users.  Administrators only."""
    try:
        page = await service.list_users(principal, pageable)
    except NapChartError as e:
        raise to_http_exception(e)
    response.headers.update(pagination_headers(page, f"{settings.api_prefix}/users"))
    return page.content


@router.get("/account", response_model=AccountRead)
async def get_account(
    principal: Optional[Principal] = Depends(get_current_principal),
    service: UserService = Depends(get_user_service),
) -> AccountRead:
    try:
        return await service.get_account(principal)
    except NapChartError as e:
        raise to_http_exception(e)
