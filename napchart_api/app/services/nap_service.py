"""
Business logic for naps.

``NapService`` guards every nap operation with the ownership rule: a
regular user may only create, read, update, delete and list their own
naps, while an administrator may act on anybody's.

Ownership on writes is never taken from the payload for regular users.
The owner is always the user record that the caller's login resolves
to, whatever the request body says.  Administrators may name any
existing user as the owner, which lets them record naps on somebody
else's behalf.  Once a nap exists its owner cannot be changed.

Errors are reported with the exceptions from ``core.errors``; the REST
handlers map them to status codes.  Repository failures propagate
untouched.
"""

import logging
from typing import Optional

from ..core.errors import (
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
    OwnerResolutionError,
)
from ..core.pagination import Page, PageRequest
from ..core.security import Principal, can_access, require_principal
from ..repositories.nap_repository import NapRepository
from ..repositories.user_repository import UserRepository
from ..schemas.nap import NapRead, NapWrite, ResolvedNap
from ..schemas.user import UserRead


logger = logging.getLogger(__name__)


def resolve_owner(payload: NapWrite, owner: UserRead) -> ResolvedNap:
    """Return a copy of ``payload`` owned by ``owner``.

    The payload itself is left unchanged.
    """
    return ResolvedNap(
        nap=payload.model_copy(update={"owner": owner.login}),
        owner_id=owner.id,
    )


class NapService:
    """Ownership-checked access to naps."""

    def __init__(
        self,
        naps: Optional[NapRepository] = None,
        users: Optional[UserRepository] = None,
    ) -> None:
        self.naps = naps or NapRepository()
        self.users = users or UserRepository()

    def _owner_for(
        self,
        payload: NapWrite,
        principal: Principal,
        default_login: Optional[str] = None,
    ) -> UserRead:
        """Find the user who will own ``payload``.

        Regular users always own what they write.  Administrators get
        the owner named in the payload, falling back to
        ``default_login`` and then to themselves.
        """
        if principal.is_admin:
            login = payload.owner or default_login or principal.login
            owner = self.users.find_by_login(login)
            if owner is None:
                if login == principal.login:
                    raise OwnerResolutionError("Couldn't find user for given login")
                raise InvalidRequestError(f"Unknown owner '{login}'")
            return owner
        owner = self.users.find_by_login(principal.login)
        if owner is None:
            raise OwnerResolutionError("Couldn't find user for given login")
        return owner

    def _insert(self, resolved: ResolvedNap, principal: Principal) -> NapRead:
        if resolved.nap.id is not None:
            raise InvalidRequestError("A new nap cannot already have an ID")
        nap = self.naps.save(resolved)
        logger.info("User %s created nap %s owned by %s", principal.login, nap.id, nap.owner)
        return nap

    async def create(self, nap: NapWrite, principal: Optional[Principal]) -> NapRead:
        """Persist a new nap and return it with its assigned id.

        Raises
        ------
        UnauthenticatedError
            If there is no principal.
        OwnerResolutionError
            If the principal's login has no user record.
        InvalidRequestError
            If the payload already carries an id, or an admin names an
            unknown owner.
        """
        principal = require_principal(principal)
        resolved = resolve_owner(nap, self._owner_for(nap, principal))
        return self._insert(resolved, principal)

    async def update(self, nap: NapWrite, principal: Optional[Principal]) -> NapRead:
        """Overwrite an existing nap, or create it when the payload has no id.

        The no-id case is handled exactly like :meth:`create`.  With an
        id the nap must exist, the caller must own it (or be an admin)
        and the owner must stay the same.
        """
        principal = require_principal(principal)
        if nap.id is None:
            resolved = resolve_owner(nap, self._owner_for(nap, principal))
            return self._insert(resolved, principal)

        existing = self.naps.find_by_id(nap.id)
        if existing is None:
            raise NotFoundError(f"Nap {nap.id} not found")
        if not can_access(principal, existing.owner):
            logger.warning("User %s tried to update nap %s of %s", principal.login, nap.id, existing.owner)
            raise ForbiddenError("User does not own this Nap")
        resolved = resolve_owner(nap, self._owner_for(nap, principal, default_login=existing.owner))
        if resolved.nap.owner != existing.owner:
            raise InvalidRequestError("The owner of a nap cannot be changed")
        updated = self.naps.save(resolved)
        logger.info("User %s updated nap %s", principal.login, updated.id)
        return updated

    async def list(self, principal: Optional[Principal], page_request: PageRequest) -> Page[NapRead]:
        """Admins get a page over all naps, everybody else over their own."""
        principal = require_principal(principal)
        if principal.is_admin:
            return self.naps.find_all(page_request)
        return self.naps.find_by_owner(principal.login, page_request)

    async def list_own(self, principal: Optional[Principal], page_request: PageRequest) -> Page[NapRead]:
        """Page over the caller's own naps, whatever their role."""
        principal = require_principal(principal)
        return self.naps.find_by_owner(principal.login, page_request)

    async def get(self, nap_id: int, principal: Optional[Principal]) -> NapRead:
        nap = self.naps.find_by_id(nap_id)
        if nap is None:
            raise NotFoundError(f"Nap {nap_id} not found")
        principal = require_principal(principal)
        if not can_access(principal, nap.owner):
            logger.warning("User %s tried to read nap %s of %s", principal.login, nap_id, nap.owner)
            raise ForbiddenError("User does not own this Nap")
        return nap

    async def delete(self, nap_id: int, principal: Optional[Principal]) -> None:
        """Delete a nap.

        The nap is looked up before the caller is checked, so a missing
        id is reported as ``NotFoundError`` even for anonymous callers.
        Deleting the same id twice fails the second time.
        """
        nap = self.naps.find_by_id(nap_id)
        if nap is None:
            raise NotFoundError(f"Nap {nap_id} not found")
        principal = require_principal(principal)
        if not can_access(principal, nap.owner):
            logger.warning("User %s tried to delete nap %s of %s", principal.login, nap_id, nap.owner)
            raise ForbiddenError("User does not own this Nap")
        if not self.naps.delete_by_id(nap_id):
            raise NotFoundError(f"Nap {nap_id} not found")
        logger.info("User %s deleted nap %s", principal.login, nap_id)
