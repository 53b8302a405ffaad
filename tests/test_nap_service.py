"""Tests for napchart_api.app.services.nap_service — ownership rules on naps."""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from napchart_api.app.core.errors import (
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
    OwnerResolutionError,
    UnauthenticatedError,
)
from napchart_api.app.core.pagination import PageRequest
from napchart_api.app.core.security import Principal, Role
from napchart_api.app.services.nap_service import NapService, resolve_owner

from .conftest import make_nap


@pytest.fixture
def service(users):
    return NapService()


# ---------------------------------------------------------------------------
# resolve_owner
# ---------------------------------------------------------------------------


class TestResolveOwner:
    def test_returns_copy_owned_by_user(self, users):
        payload = make_nap(owner="bob")
        resolved = resolve_owner(payload, users["alice"])
        assert resolved.nap.owner == "alice"
        assert resolved.owner_id == users["alice"].id
        assert payload.owner == "bob"


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


class TestCreate:
    @pytest.mark.asyncio
    async def test_non_admin_owner_is_forced_to_caller(self, service, alice):
        payload = make_nap(owner="bob", rating=3)
        nap = await service.create(payload, alice)
        assert nap.id is not None
        assert nap.owner == "alice"
        assert nap.rating == 3
        assert payload.owner == "bob"

    @pytest.mark.asyncio
    async def test_non_admin_without_owner_gets_caller(self, service, bob):
        nap = await service.create(make_nap(), bob)
        assert nap.owner == "bob"

    @pytest.mark.asyncio
    async def test_admin_supplied_owner_is_kept(self, service, admin):
        nap = await service.create(make_nap(owner="bob"), admin)
        assert nap.owner == "bob"

    @pytest.mark.asyncio
    async def test_admin_without_owner_owns_the_nap(self, service, admin):
        nap = await service.create(make_nap(), admin)
        assert nap.owner == "admin1"

    @pytest.mark.asyncio
    async def test_admin_unknown_owner_rejected(self, service, admin):
        with pytest.raises(InvalidRequestError):
            await service.create(make_nap(owner="nobody"), admin)

    @pytest.mark.asyncio
    async def test_created_nap_is_retrievable(self, service, alice):
        nap = await service.create(make_nap(), alice)
        fetched = await service.get(nap.id, alice)
        assert fetched == nap
        page = await service.list_own(alice, PageRequest())
        assert [n.id for n in page.content] == [nap.id]

    @pytest.mark.asyncio
    async def test_client_supplied_id_rejected(self, service, alice):
        with pytest.raises(InvalidRequestError):
            await service.create(make_nap(id=42), alice)

    @pytest.mark.asyncio
    async def test_unauthenticated(self, service):
        with pytest.raises(UnauthenticatedError):
            await service.create(make_nap(), None)

    @pytest.mark.asyncio
    async def test_unknown_login_cannot_own(self, service):
        ghost = Principal(login="ghost", roles=frozenset({Role.USER}))
        with pytest.raises(OwnerResolutionError):
            await service.create(make_nap(), ghost)


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------


class TestUpdate:
    @pytest.mark.asyncio
    async def test_without_id_behaves_like_create(self, service, alice):
        nap = await service.update(make_nap(owner="bob"), alice)
        assert nap.id is not None
        assert nap.owner == "alice"

    @pytest.mark.asyncio
    async def test_overwrites_fields_and_keeps_id(self, service, alice):
        created = await service.create(make_nap(), alice)
        changed = make_nap(id=created.id, rating=10, notes="great", end_time=datetime(2024, 1, 1, 15, 0))
        updated = await service.update(changed, alice)
        assert updated.id == created.id
        assert updated.rating == 10
        assert updated.notes == "great"
        assert updated.duration_hours == pytest.approx(2.0)

    @pytest.mark.asyncio
    async def test_non_admin_cannot_take_over_foreign_nap(self, service, alice, bob):
        bobs = await service.create(make_nap(), bob)
        with pytest.raises(ForbiddenError):
            await service.update(make_nap(id=bobs.id, owner="alice"), alice)
        assert (await service.get(bobs.id, bob)).owner == "bob"

    @pytest.mark.asyncio
    async def test_admin_updates_without_owner_keep_owner(self, service, admin, bob):
        bobs = await service.create(make_nap(), bob)
        updated = await service.update(make_nap(id=bobs.id, rating=1), admin)
        assert updated.owner == "bob"
        assert updated.rating == 1

    @pytest.mark.asyncio
    async def test_admin_cannot_reassign_owner(self, service, admin, bob):
        bobs = await service.create(make_nap(), bob)
        with pytest.raises(InvalidRequestError):
            await service.update(make_nap(id=bobs.id, owner="alice"), admin)

    @pytest.mark.asyncio
    async def test_missing_id(self, service, alice):
        with pytest.raises(NotFoundError):
            await service.update(make_nap(id=999), alice)

    @pytest.mark.asyncio
    async def test_unauthenticated(self, service):
        with pytest.raises(UnauthenticatedError):
            await service.update(make_nap(), None)


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


class TestList:
    @pytest_asyncio.fixture
    async def seeded(self, service, alice, bob):
        mine = [await service.create(make_nap(), alice) for _ in range(3)]
        theirs = [await service.create(make_nap(), bob) for _ in range(2)]
        return mine, theirs

    @pytest.mark.asyncio
    async def test_non_admin_sees_only_own(self, service, seeded, alice):
        mine, _ = seeded
        page = await service.list(alice, PageRequest())
        assert page.total == 3
        assert {n.owner for n in page.content} == {"alice"}
        assert [n.id for n in page.content] == [n.id for n in mine]

    @pytest.mark.asyncio
    async def test_admin_sees_all(self, service, seeded, admin):
        page = await service.list(admin, PageRequest())
        assert page.total == 5
        assert {n.owner for n in page.content} == {"alice", "bob"}

    @pytest.mark.asyncio
    async def test_list_own_ignores_admin_role(self, service, seeded, admin):
        page = await service.list_own(admin, PageRequest())
        assert page.total == 0
        assert page.content == []

    @pytest.mark.asyncio
    async def test_paging_and_sorting(self, service, seeded, admin):
        page = await service.list(admin, PageRequest(page=1, size=2, sort=(("id", "DESC"),)))
        assert page.total == 5
        assert page.total_pages == 3
        ids = [n.id for n in page.content]
        assert ids == sorted(ids, reverse=True)
        assert len(ids) == 2

    @pytest.mark.asyncio
    async def test_start_time_sorts_by_instant_across_offsets(self, service, alice):
        later = await service.create(
            make_nap(
                start_time=datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc),
                end_time=datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
            ),
            alice,
        )
        plus_five = timezone(timedelta(hours=5))
        earlier = await service.create(
            make_nap(
                start_time=datetime(2024, 1, 1, 10, 0, tzinfo=plus_five),
                end_time=datetime(2024, 1, 1, 11, 0, tzinfo=plus_five),
            ),
            alice,
        )
        page = await service.list(alice, PageRequest(sort=(("start_time", "ASC"),)))
        assert [n.id for n in page.content] == [earlier.id, later.id]

    @pytest.mark.asyncio
    async def test_unauthenticated(self, service):
        with pytest.raises(UnauthenticatedError):
            await service.list(None, PageRequest())


# ---------------------------------------------------------------------------
# get / delete
# ---------------------------------------------------------------------------


class TestGet:
    @pytest.mark.asyncio
    async def test_foreign_nap_is_forbidden(self, service, alice, bob):
        bobs = await service.create(make_nap(), bob)
        with pytest.raises(ForbiddenError):
            await service.get(bobs.id, alice)

    @pytest.mark.asyncio
    async def test_admin_reads_any_nap(self, service, admin, bob):
        bobs = await service.create(make_nap(), bob)
        assert (await service.get(bobs.id, admin)).owner == "bob"

    @pytest.mark.asyncio
    async def test_missing(self, service, alice):
        with pytest.raises(NotFoundError):
            await service.get(99, alice)

    @pytest.mark.asyncio
    async def test_unauthenticated(self, service, bob):
        bobs = await service.create(make_nap(), bob)
        with pytest.raises(UnauthenticatedError):
            await service.get(bobs.id, None)


class TestDelete:
    @pytest.mark.asyncio
    async def test_second_delete_is_not_found(self, service, alice):
        nap = await service.create(make_nap(), alice)
        await service.delete(nap.id, alice)
        with pytest.raises(NotFoundError):
            await service.delete(nap.id, alice)

    @pytest.mark.asyncio
    async def test_foreign_nap_is_forbidden(self, service, alice, bob):
        bobs = await service.create(make_nap(), bob)
        with pytest.raises(ForbiddenError):
            await service.delete(bobs.id, alice)
        assert (await service.get(bobs.id, bob)).id == bobs.id

    @pytest.mark.asyncio
    async def test_admin_deletes_any_nap(self, service, admin, bob):
        bobs = await service.create(make_nap(), bob)
        await service.delete(bobs.id, admin)
        with pytest.raises(NotFoundError):
            await service.get(bobs.id, admin)

    @pytest.mark.asyncio
    async def test_existence_checked_before_authentication(self, service):
        with pytest.raises(NotFoundError):
            await service.delete(12345, None)

    @pytest.mark.asyncio
    async def test_unauthenticated(self, service, bob):
        bobs = await service.create(make_nap(), bob)
        with pytest.raises(UnauthenticatedError):
            await service.delete(bobs.id, None)
