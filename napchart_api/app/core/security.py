"""
Security helpers: JWT tokens, principals and the ownership predicate.

This module implements a lightweight JSON Web Token (JWT) mechanism
using HMAC-SHA256 signatures and base64url encoding.  Tokens carry the
user's login in ``sub`` and a comma-separated list of authorities in
``auth``, plus an expiration timestamp (``exp``).  The secret key from
the application settings is used to sign and verify the token.

Tokens are stateless: the principal is built from the claims alone and
the user directory is not consulted here.  Whether the login still maps
to a user record is decided by the services that need the user row.
"""

import base64
import enum
import hashlib
import hmac
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .errors import UnauthenticatedError


logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    """Closed set of authorities a principal can hold."""

    ADMIN = "ROLE_ADMIN"
    USER = "ROLE_USER"

    @classmethod
    def parse_many(cls, names: Iterable[str]) -> FrozenSet["Role"]:
        """Convert role names to ``Role`` members, dropping unknown names."""
        known = {role.value: role for role in cls}
        return frozenset(known[name.strip()] for name in names if name.strip() in known)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of a request."""

    login: str
    roles: FrozenSet[Role] = field(default_factory=frozenset)

    def is_in_role(self, role: Role) -> bool:
        return role in self.roles

    @property
    def is_admin(self) -> bool:
        return Role.ADMIN in self.roles


def can_access(principal: Principal, owner_login: str) -> bool:
    """Return True if ``principal`` may read or modify a record owned by ``owner_login``.

    Admins may access every record; everybody else only their own.
    """
    return principal.is_admin or principal.login == owner_login


def require_principal(principal: Optional[Principal]) -> Principal:
    """Return ``principal`` or raise ``UnauthenticatedError`` if there is none."""
    if principal is None:
        raise UnauthenticatedError("No user to authenticate against")
    return principal


def _b64_url_encode(data: bytes) -> str:
    """Base64-url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64-url encoded string, adding padding if necessary."""
    padding = '=' * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    """Compute HMAC-SHA256 signature of a message using the given secret."""
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def create_access_token(
    login: str,
    roles: Iterable[Role],
    expires_delta: Optional[int] = None,
) -> str:
    """Create a signed JWT token for ``login`` holding ``roles``.

    Parameters
    ----------
    login : str
        Login of the user; stored in the ``sub`` claim.
    roles : Iterable[Role]
        Authorities to embed in the ``auth`` claim.
    expires_delta : Optional[int]
        Lifetime of the token in seconds.  Defaults to
        ``settings.access_token_expire_minutes * 60``.

    Returns
    -------
    str
        A token of the form ``header.payload.signature``.
    """
    exp_seconds = expires_delta or settings.access_token_expire_minutes * 60
    claims = {
        "sub": login,
        "auth": ",".join(sorted(Role(r).value for r in roles)),
        "exp": int(time.time()) + exp_seconds,
    }
    header = {"alg": settings.algorithm, "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(',', ':')).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(claims, separators=(',', ':')).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature_b64 = _b64_url_encode(_sign(signing_input, settings.secret_key))
    return f"{header_b64}.{payload_b64}.{signature_b64}"


def decode_access_token(token: str) -> Optional[Dict[str, object]]:
    """Verify and decode a JWT token.

    Returns the claims dictionary if the signature is valid and the
    token has not expired, otherwise ``None``.
    """
    parts = token.split('.')
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    try:
        header = json.loads(_b64_url_decode(header_b64).decode("utf-8"))
        actual_sig = _b64_url_decode(signature_b64)
        data = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
    except ValueError:
        return None
    if not isinstance(header, dict) or header.get("alg") != settings.algorithm:
        return None
    # Constant-time comparison
    if not hmac.compare_digest(_sign(signing_input, settings.secret_key), actual_sig):
        return None
    if not isinstance(data, dict) or not data.get("sub"):
        return None
    if data.get("exp") is None or int(data["exp"]) < int(time.time()):
        return None
    return data


security = HTTPBearer(auto_error=False)


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[Principal]:
    """Dependency that resolves the caller of the current request.

    Returns ``None`` when the request carries no ``Authorization``
    header; the services decide what an anonymous caller may do.  A
    token that is present but invalid or expired is rejected with
    HTTP 401 straight away.
    """
    if credentials is None:
        return None
    payload = decode_access_token(credentials.credentials)
    if not payload:
        logger.warning("Rejected invalid or expired bearer token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    auth_claim = payload.get("auth") or ""
    return Principal(
        login=str(payload["sub"]),
        roles=Role.parse_many(str(auth_claim).split(",")),
    )
