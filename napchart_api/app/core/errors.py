"""
Domain errors raised by the service layer.

Services never build HTTP responses themselves.  They raise one of the
exceptions below and the REST handlers translate it into an
``HTTPException`` with :func:`to_http_exception`.  All of them derive
from ``ValueError`` so callers that only care about "the request was
refused" can catch a single type.  Database errors are not wrapped and
propagate as-is.
"""

from fastapi import HTTPException, status


class NapChartError(ValueError):
    """Base class for refusals produced by the access services."""

    status_code: int = status.HTTP_400_BAD_REQUEST


class UnauthenticatedError(NapChartError):
    """No principal could be resolved for the request."""

    status_code = status.HTTP_401_UNAUTHORIZED


class OwnerResolutionError(NapChartError):
    """The principal's login does not map to a known user record."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(NapChartError):
    """The principal has no rights over the target record."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(NapChartError):
    """The target identifier does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class InvalidRequestError(NapChartError):
    """Malformed caller input, e.g. a client-assigned id on create."""

    status_code = status.HTTP_400_BAD_REQUEST


def to_http_exception(exc: NapChartError) -> HTTPException:
    """Map a domain error to the ``HTTPException`` a handler should raise."""
    headers = None
    if isinstance(exc, UnauthenticatedError):
        headers = {"WWW-Authenticate": "Bearer"}
    return HTTPException(status_code=exc.status_code, detail=str(exc), headers=headers)
