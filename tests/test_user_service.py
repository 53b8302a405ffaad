"""Tests for napchart_api.app.services.user_service and the user directory."""

import pytest

from napchart_api.app.core.errors import ForbiddenError, InvalidRequestError, UnauthenticatedError
from napchart_api.app.core.pagination import PageRequest
from napchart_api.app.core.security import Role
from napchart_api.app.repositories.user_repository import UserRepository
from napchart_api.app.schemas.user import UserCreate
from napchart_api.app.services.user_service import UserService


@pytest.fixture
def service(users):
    return UserService()


class TestUserRepository:
    def test_find_by_login(self, users):
        admin = UserRepository().find_by_login("admin1")
        assert admin is not None
        assert admin.id == users["admin1"].id
        assert set(admin.authorities) == {Role.ADMIN, Role.USER}

    def test_find_by_login_not_found(self, users):
        assert UserRepository().find_by_login("nobody") is None

    def test_default_authority_is_user(self, users):
        assert UserRepository().find_by_login("alice").authorities == [Role.USER]


class TestCreateUser:
    @pytest.mark.asyncio
    async def test_admin_registers_user(self, service, admin):
        user = await service.create_user(UserCreate(login="carol"), admin)
        assert user.login == "carol"
        assert user.authorities == [Role.USER]
        assert UserRepository().find_by_login("carol").id == user.id

    @pytest.mark.asyncio
    async def test_duplicate_login(self, service, admin):
        with pytest.raises(InvalidRequestError):
            await service.create_user(UserCreate(login="alice"), admin)

    @pytest.mark.asyncio
    async def test_regular_user_forbidden(self, service, alice):
        with pytest.raises(ForbiddenError):
            await service.create_user(UserCreate(login="carol"), alice)

    @pytest.mark.asyncio
    async def test_unauthenticated(self, service):
        with pytest.raises(UnauthenticatedError):
            await service.create_user(UserCreate(login="carol"), None)


class TestListUsers:
    @pytest.mark.asyncio
    async def test_admin_lists_users(self, service, admin):
        page = await service.list_users(admin, PageRequest(sort=(("login", "ASC"),)))
        assert page.total == 3
        assert [u.login for u in page.content] == ["admin1", "alice", "bob"]

    @pytest.mark.asyncio
    async def test_regular_user_forbidden(self, service, bob):
        with pytest.raises(ForbiddenError):
            await service.list_users(bob, PageRequest())


class TestAccount:
    @pytest.mark.asyncio
    async def test_account_reflects_token(self, service, admin):
        account = await service.get_account(admin)
        assert account.login == "admin1"
        assert account.authorities == [Role.ADMIN, Role.USER]
