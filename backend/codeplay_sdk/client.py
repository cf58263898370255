import json
import logging
import os
from typing import Any, Dict, List, Optional

import requests

from .storage import LocalStorage

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:5001/api"
DEFAULT_TIMEOUT_SECONDS = 30

AUTH_TOKEN_KEY = "authToken"
REFRESH_TOKEN_KEY = "refreshToken"
USER_KEY = "user"


class ApiError(Exception):
    def __init__(self, status_code: Optional[int], message: str, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.payload = payload

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.status_code}: {self.message}"


class Client:
    """
    Client for the Codeplay API.
    Credentials returned by the auth endpoints are kept in ``storage`` and sent
    as a bearer token on every request.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        storage: Optional[LocalStorage] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.storage = storage if storage is not None else LocalStorage(path=None)
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_env(cls, base_url_env: str = "VITE_API_URL", **kwargs) -> "Client":
        base_url = os.getenv(base_url_env) or DEFAULT_API_URL
        return cls(base_url=base_url, **kwargs)

    # -- credentials -------------------------------------------------------

    @property
    def token(self) -> Optional[str]:
        return self.storage.get_item(AUTH_TOKEN_KEY)

    @property
    def refresh_token(self) -> Optional[str]:
        return self.storage.get_item(REFRESH_TOKEN_KEY)

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        raw = self.storage.get_item(USER_KEY)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            return None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def _store_credentials(self, data: Dict[str, Any]) -> None:
        access_token = data.get("accessToken")
        if access_token:
            self.storage.set_item(AUTH_TOKEN_KEY, access_token)
        refresh_token = data.get("refreshToken")
        if refresh_token:
            self.storage.set_item(REFRESH_TOKEN_KEY, refresh_token)
        if data.get("user") is not None:
            self.storage.set_item(USER_KEY, json.dumps(data["user"]))

    def clear_credentials(self) -> None:
        for key in (AUTH_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY):
            self.storage.remove_item(key)

    logout = clear_credentials

    def _clear_session(self) -> None:
        for key in (AUTH_TOKEN_KEY, USER_KEY):
            self.storage.remove_item(key)

    # -- transport ---------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, json_body: Any = None, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method,
                url,
                json=json_body,
                params={k: v for k, v in (params or {}).items() if v is not None} or None,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("Request %s %s failed: %s", method, url, exc)
            raise ApiError(None, f"Network error: {exc}") from exc

        if response.status_code == 401:
            # The refresh token stays; refresh() can still restore the session.
            self._clear_session()

        try:
            payload = response.json() if response.content else None
        except ValueError:
            payload = None

        if not response.ok:
            message = None
            if isinstance(payload, dict):
                message = payload.get("detail") or payload.get("error") or payload.get("message")
            raise ApiError(response.status_code, str(message or response.reason or "Request failed"), payload)

        return payload

    # -- auth --------------------------------------------------------------

    def register(self, email: str, password: str, name: Optional[str] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {"email": email, "password": password}
        if name is not None:
            body["name"] = name
        data = self._request("POST", "/auth/register", json_body=body)
        self._store_credentials(data)
        return data

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/auth/login", json_body={"email": email, "password": password})
        self._store_credentials(data)
        return data

    def verify(self) -> Dict[str, Any]:
        return self._request("GET", "/auth/verify")

    def me(self) -> Dict[str, Any]:
        data = self._request("GET", "/auth/me")
        self.storage.set_item(USER_KEY, json.dumps(data))
        return data

    def refresh(self) -> Dict[str, Any]:
        if not self.refresh_token:
            raise ApiError(None, "No refresh token stored")
        data = self._request("POST", "/auth/refresh", json_body={"refreshToken": self.refresh_token})
        self._store_credentials(data)
        return data

    def oauth_urls(self) -> Dict[str, Optional[str]]:
        return self._request("GET", "/auth/oauth-urls")

    def oauth_login(self, provider: str, code: str) -> Dict[str, Any]:
        data = self._request("POST", f"/auth/oauth/{provider}", json_body={"code": code})
        self._store_credentials(data)
        return data

    # -- projects ----------------------------------------------------------

    def list_projects(
        self,
        page: int = 1,
        limit: int = 10,
        template: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Dict[str, Any]:
        return self._request(
            "GET",
            "/projects",
            params={"page": page, "limit": limit, "template": template, "search": search},
        )

    def get_project(self, project_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/projects/{project_id}")

    def create_project(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/projects", json_body=data)

    def update_project(self, project_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/projects/{project_id}", json_body=data)

    def save_project_files(self, project_id: str, content: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/projects/{project_id}/files", json_body={"content": content})

    def delete_project(self, project_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/projects/{project_id}")

    def clone_project(self, project_id: str, title: Optional[str] = None) -> Dict[str, Any]:
        body = {"title": title} if title else {}
        return self._request("POST", f"/projects/{project_id}/clone", json_body=body)

    def toggle_star(self, project_id: str) -> Dict[str, Any]:
        return self._request("POST", f"/projects/{project_id}/star")

    def list_templates(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/templates")
