"""
Pydantic models for user data.

Users are created by administrators and identified by their login,
which is also the ``sub`` claim of their access tokens.  Passwords are
not handled here; tokens are issued outside the API.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..core.security import Role


class UserBase(BaseModel):
    login: str = Field(..., min_length=1, max_length=50, pattern=r"^[A-Za-z0-9_.@-]+$")
    email: Optional[str] = Field(None, max_length=254)


class UserCreate(UserBase):
    """Schema for registering a user.  Regular users get ``ROLE_USER`` only."""

    authorities: List[Role] = Field(default_factory=lambda: [Role.USER])


class UserRead(UserBase):
    """Schema for reading a user from the API."""

    id: int
    activated: bool = True
    authorities: List[Role] = Field(default_factory=list)

    model_config = {
        "from_attributes": True,
    }


class AccountRead(BaseModel):
    """The caller as seen by the API: login plus authorities from the token."""

    login: str
    authorities: List[Role]
