"""
Top-level router for version 1 of the API.

This router aggregates the domain routers under a unified prefix.
When new endpoints are added or when new domains are introduced,
update this file to include their routers.
"""

from fastapi import APIRouter

from .endpoints import date_durations, naps, users

router = APIRouter()

router.include_router(naps.router, prefix="/naps", tags=["naps"])
# These routers declare full paths (``/date-durations/user``,
# ``/users``, ``/account``) so they are included without a prefix.
router.include_router(date_durations.router, tags=["date-durations"])
router.include_router(users.router, tags=["users"])
