"""Synchronous API client for the blog backend.

``BlogClient`` wraps an ``httpx.Client`` whose ``base_url`` points at the
server (FastAPI's ``TestClient`` works as well). Responses are unwrapped from
the ``{success, message, data}`` envelope; error envelopes raise
``ApiClientError``.
"""

import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from blog_api.client.session import AuthSession

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


class ApiClientError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str, details: Optional[List[Any]] = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.details = details


def _error_message(response: httpx.Response) -> ApiClientError:
    try:
        body = response.json()
    except ValueError:
        return ApiClientError(response.status_code, response.text or "An unexpected error occurred")

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return ApiClientError(response.status_code, error["message"], error.get("details"))
    if isinstance(body, dict) and body.get("message"):
        return ApiClientError(response.status_code, body["message"])
    return ApiClientError(response.status_code, "An unexpected error occurred")


class BlogClient:
    """Typed wrappers around the blog API endpoints."""

    def __init__(self, http: httpx.Client, session: Optional[AuthSession] = None):
        self.http = http
        self.session = session or AuthSession()

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{API_PREFIX}{path}"
        if params:
            params = {key: value for key, value in params.items() if value is not None}

        start = time.perf_counter()
        response = self.http.request(
            method, url, json=json, params=params, headers=self.session.auth_headers
        )
        duration_ms = (time.perf_counter() - start) * 1000
        logger.debug(f"{method} {url} -> {response.status_code} ({duration_ms:.0f}ms)")

        if response.status_code == 401:
            self.session.invalidate()
        if response.status_code == 403:
            logger.warning(f"Access denied: {method} {url}")
        if response.status_code == 429:
            logger.warning(f"Rate limited: {method} {url}")
        if response.is_error:
            raise _error_message(response)
        return response.json()

    def _data(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        return self._request(method, path, **kwargs).get("data") or {}

    # ----- Auth -----
    def register(
        self,
        username: str,
        email: str,
        password: str,
        profile: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        payload = {"username": username, "email": email, "password": password}
        if profile:
            payload["profile"] = profile
        data = self._data("POST", "/auth/register", json=payload)
        self.session.set(data["token"], data["user"])
        return data["user"]

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._data("POST", "/auth/login", json={"email": email, "password": password})
        self.session.set(data["token"], data["user"])
        return data["user"]

    def logout(self) -> None:
        try:
            if self.session.token:
                self._request("POST", "/auth/logout")
        finally:
            self.session.invalidate()

    def current_user(self) -> Optional[Dict[str, Any]]:
        """The signed-in user, fetched from ``/auth/me`` on first use."""
        if self.session.needs_user:
            data = self._data("GET", "/auth/me")
            self.session.user = data["user"]
        return self.session.user

    def update_profile(self, profile: Dict[str, Any]) -> Dict[str, Any]:
        data = self._data("PUT", "/auth/profile", json={"profile": profile})
        self.session.user = data["user"]
        return data["user"]

    # ----- Posts -----
    def get_posts(self, **params) -> Dict[str, Any]:
        """List posts; keyword arguments are sent as query parameters."""
        return self._data("GET", "/posts", params=params)

    def get_post(self, post_id: int) -> Dict[str, Any]:
        return self._data("GET", f"/posts/{post_id}")["post"]

    def create_post(self, **fields) -> Dict[str, Any]:
        return self._data("POST", "/posts", json=fields)["post"]

    def update_post(self, post_id: int, **fields) -> Dict[str, Any]:
        return self._data("PUT", f"/posts/{post_id}", json=fields)["post"]

    def delete_post(self, post_id: int) -> None:
        self._request("DELETE", f"/posts/{post_id}")

    def toggle_like(self, post_id: int) -> Dict[str, Any]:
        return self._data("POST", f"/posts/{post_id}/like")

    def submit_post(self, post_id: int) -> Dict[str, Any]:
        return self._data("POST", f"/posts/{post_id}/submit")["post"]

    def approve_post(self, post_id: int) -> Dict[str, Any]:
        return self._data("POST", f"/posts/{post_id}/approve")["post"]

    def reject_post(self, post_id: int, reason: str) -> Dict[str, Any]:
        return self._data("POST", f"/posts/{post_id}/reject", json={"reason": reason})["post"]

    def get_pending_posts(self, **params) -> Dict[str, Any]:
        return self._data("GET", "/posts/pending/approval", params=params)

    def get_my_posts(self, **params) -> Dict[str, Any]:
        return self._data("GET", "/posts/my-posts", params=params)

    # ----- Categories -----
    def get_categories(self) -> List[Dict[str, Any]]:
        return self._data("GET", "/categories")["categories"]
