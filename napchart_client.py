"""NapChart API client.

This module defines a small client wrapper around the NapChart REST
API.  It uses the ``requests`` library internally and exposes
high-level methods for the nap and dashboard endpoints:

* :meth:`NapChartAPI.list_naps` – the naps visible to the caller.
* :meth:`NapChartAPI.list_my_naps` – only the caller's own naps.
* :meth:`NapChartAPI.get_nap`, :meth:`create_nap`, :meth:`update_nap`,
  :meth:`delete_nap` – single nap operations.
* :meth:`NapChartAPI.list_date_durations` and
  :meth:`list_duration_ratings` – the dashboard aggregates.

Every method returns a tuple ``(data, error)``.  On success ``error``
is ``None``; on failure ``data`` is ``None`` and ``error`` is a
dictionary with ``status_code`` and ``message``.  List methods can
follow the ``Link: <...>; rel="next"`` header to fetch every page.

The client supports authentication via an access token which is sent
in the ``Authorization`` header.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Error = Dict[str, Any]


class NapChartAPI:
    """Client for interacting with the NapChart API."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: Optional[str] = None,
        api_prefix: str = "/api",
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Scheme and host of the API, e.g. ``https://naps.example.com``.
            api_key: Optional access token.  If set, an ``Authorization``
                header with the value ``Bearer <api_key>`` is included in
                all requests.
            api_prefix: Path prefix the API is mounted under.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Per-request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.api_prefix = "/" + api_prefix.strip("/") if api_prefix.strip("/") else ""
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _url(self, path: str) -> str:
        # Link headers returned by the API already carry the prefix.
        if path.startswith(("http://", "https://")):
            return path
        if self.api_prefix and path.startswith(self.api_prefix + "/"):
            return f"{self.base_url}{path}"
        return f"{self.base_url}{self.api_prefix}{path}"

    def _send(
        self,
        method: str,
        path: str,
        *,
        params: Dict[str, Any] | None = None,
        json_body: Any | None = None,
    ) -> Tuple[Optional[requests.Response], Optional[Error]]:
        """Perform an HTTP request and return ``(response, error)``."""
        url = self._url(path)
        headers: Dict[str, str] = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    message = err_json.get("detail") or err_json.get("message") or str(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Dict[str, Any] | None = None,
        json_body: Any | None = None,
    ) -> Tuple[Optional[Any], Optional[Error]]:
        """Perform an HTTP request and return the parsed JSON body."""
        response, error = self._send(method, path, params=params, json_body=json_body)
        if error is not None:
            return None, error
        if response.content:
            return response.json(), None
        return None, None

    def _list(
        self,
        path: str,
        *,
        page: int = 0,
        size: int = 20,
        sort: Optional[List[str]] = None,
        all_pages: bool = False,
    ) -> Tuple[Optional[List[Dict[str, Any]]], Optional[Error]]:
        """Fetch one page, or every page from ``page`` on when ``all_pages`` is set."""
        params: Dict[str, Any] = {"page": page, "size": size}
        if sort:
            params["sort"] = sort
        items: List[Dict[str, Any]] = []
        next_path: Optional[str] = path
        while next_path:
            response, error = self._send("GET", next_path, params=params)
            if error is not None:
                return None, error
            items.extend(response.json() or [])
            if not all_pages:
                break
            next_link = response.links.get("next")
            next_path = next_link["url"] if next_link else None
            # The next link carries its own page/size query string.
            params = {"sort": sort} if sort else None
        return items, None

    # ------------------------------------------------------------------
    # Nap operations
    # ------------------------------------------------------------------
    def list_naps(self, **kwargs: Any) -> Tuple[Optional[List[Dict[str, Any]]], Optional[Error]]:
        """Naps visible to the caller: all of them for admins, else their own."""
        return self._list("/naps", **kwargs)

    def list_my_naps(self, **kwargs: Any) -> Tuple[Optional[List[Dict[str, Any]]], Optional[Error]]:
        return self._list("/naps/user", **kwargs)

    def get_nap(self, nap_id: int) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        return self._request("GET", f"/naps/{nap_id}")

    def create_nap(self, nap: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        """Create a nap.  ``nap`` must not contain an ``id``."""
        return self._request("POST", "/naps", json_body=nap)

    def update_nap(self, nap: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        """Update a nap; a payload without ``id`` creates a new one."""
        return self._request("PUT", "/naps", json_body=nap)

    def delete_nap(self, nap_id: int) -> Tuple[bool, Optional[Error]]:
        _, error = self._send("DELETE", f"/naps/{nap_id}")
        return error is None, error

    # ------------------------------------------------------------------
    # Dashboard aggregates
    # ------------------------------------------------------------------
    def list_date_durations(self, **kwargs: Any) -> Tuple[Optional[List[Dict[str, Any]]], Optional[Error]]:
        return self._list("/date-durations/user", **kwargs)

    def list_duration_ratings(self, **kwargs: Any) -> Tuple[Optional[List[Dict[str, Any]]], Optional[Error]]:
        return self._list("/duration-ratings/user", **kwargs)

    def get_account(self) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        return self._request("GET", "/account")
