"""Low-level HTTP client for Keycloak Admin API.

Handles authentication, token management, and HTTP operations.
"""
from __future__ import annotations
from typing import Optional, Dict, Any
from datetime import datetime, timedelta

import requests

from .exceptions import KeycloakAPIError

REQUEST_TIMEOUT = 5


class KeycloakClient:
    """HTTP client for Keycloak Admin API with automatic token management.

    Features:
    - Automatic token refresh when expired
    - Centralized error handling

    Usage:
        client = KeycloakClient("http://keycloak:8080")
        client.authenticate_admin("admin", "password")
        response = client.get("/admin/realms/smart-freelance/users")
    """

    def __init__(self, base_url: str):
        """Initialize Keycloak client.

        Args:
            base_url: Keycloak base URL (e.g. http://keycloak:8080)
        """
        self.base_url = base_url.rstrip("/")
        self._token: Optional[str] = None
        self._token_expires_at: Optional[datetime] = None
        self._auth_params: Dict[str, Any] = {}

    @classmethod
    def from_config(cls, cfg) -> "KeycloakClient":
        """Build a client authenticated with the admin credentials in AppConfig."""
        client = cls(cfg.keycloak_url)
        client.authenticate_admin(
            cfg.keycloak_admin,
            cfg.keycloak_admin_password,
            realm=cfg.keycloak_admin_realm,
            client_id=cfg.keycloak_admin_client_id,
            client_secret=cfg.keycloak_admin_client_secret or None,
        )
        return client

    def authenticate_admin(
        self,
        username: str,
        password: str,
        realm: str = "master",
        client_id: str = "admin-cli",
        client_secret: Optional[str] = None,
    ) -> str:
        """Authenticate as admin user and store credentials for auto-refresh.

        Args:
            username: Admin username
            password: Admin password
            realm: Authentication realm (default: master)
            client_id: Client used for the password grant
            client_secret: Optional secret for confidential admin clients

        Returns:
            Access token
        """
        self._auth_params = {
            "username": username,
            "password": password,
            "realm": realm,
            "client_id": client_id,
            "client_secret": client_secret,
        }
        token = self._get_admin_token(**self._auth_params)
        self._token = token
        # Conservative expiry: assume 60 seconds for safety
        self._token_expires_at = datetime.now() + timedelta(seconds=60)
        return token

    def _ensure_authenticated(self) -> None:
        """Ensure we have a valid token, refreshing if necessary."""
        if not self._token or not self._token_expires_at:
            raise KeycloakAPIError(401, "Not authenticated - call authenticate_admin first", "")

        # Refresh if token expired or expiring soon (within 10 seconds)
        if datetime.now() >= self._token_expires_at - timedelta(seconds=10):
            self._token = self._get_admin_token(**self._auth_params)
            self._token_expires_at = datetime.now() + timedelta(seconds=60)

    def _headers(self, kwargs: dict) -> dict:
        headers = kwargs.pop("headers", {})
        headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def get(self, path: str, params: Optional[Dict] = None, **kwargs) -> requests.Response:
        """Execute GET request with automatic authentication.

        Args:
            path: API endpoint path (e.g., "/admin/realms/demo/users")
            params: Query parameters
            **kwargs: Additional arguments for requests.get

        Returns:
            Response object

        Raises:
            KeycloakAPIError: On HTTP error
        """
        self._ensure_authenticated()
        headers = self._headers(kwargs)
        resp = requests.get(f"{self.base_url}{path}", params=params, headers=headers, timeout=REQUEST_TIMEOUT, **kwargs)
        self._handle_error(resp)
        return resp

    def post(self, path: str, json: Optional[Any] = None, data: Optional[Dict] = None, **kwargs) -> requests.Response:
        """Execute POST request with automatic authentication.

        Raises:
            KeycloakAPIError: On HTTP error
        """
        self._ensure_authenticated()
        headers = self._headers(kwargs)
        resp = requests.post(
            f"{self.base_url}{path}", json=json, data=data, headers=headers, timeout=REQUEST_TIMEOUT, **kwargs
        )
        self._handle_error(resp)
        return resp

    def put(self, path: str, json: Optional[Any] = None, **kwargs) -> requests.Response:
        """Execute PUT request with automatic authentication.

        Raises:
            KeycloakAPIError: On HTTP error
        """
        self._ensure_authenticated()
        headers = self._headers(kwargs)
        resp = requests.put(f"{self.base_url}{path}", json=json, headers=headers, timeout=REQUEST_TIMEOUT, **kwargs)
        self._handle_error(resp)
        return resp

    def delete(self, path: str, **kwargs) -> requests.Response:
        """Execute DELETE request with automatic authentication.

        Raises:
            KeycloakAPIError: On HTTP error
        """
        self._ensure_authenticated()
        headers = self._headers(kwargs)
        resp = requests.delete(f"{self.base_url}{path}", headers=headers, timeout=REQUEST_TIMEOUT, **kwargs)
        self._handle_error(resp)
        return resp

    def _get_admin_token(
        self,
        username: str,
        password: str,
        realm: str = "master",
        client_id: str = "admin-cli",
        client_secret: Optional[str] = None,
    ) -> str:
        """Obtain an admin token via direct access grant."""
        url = f"{self.base_url}/realms/{realm}/protocol/openid-connect/token"
        data = {
            "grant_type": "password",
            "client_id": client_id,
            "username": username,
            "password": password,
        }
        if client_secret:
            data["client_secret"] = client_secret
        resp = requests.post(url, data=data, timeout=REQUEST_TIMEOUT)
        if resp.status_code != 200:
            raise KeycloakAPIError(resp.status_code, resp.text, url)
        return resp.json()["access_token"]

    def _handle_error(self, resp: requests.Response) -> None:
        """Centralized error handling for HTTP responses.

        Raises:
            KeycloakAPIError: If response status indicates error
        """
        if resp.status_code >= 400:
            raise KeycloakAPIError(resp.status_code, resp.text, resp.url)
