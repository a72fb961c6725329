"""HTTP client for a Profile Store running in a separate service."""
from __future__ import annotations
import logging
from typing import Optional

import requests

from app.core.errors import UpstreamError
from app.core.keycloak import REQUEST_TIMEOUT
from app.core.profiles.models import ProfileCreate

logger = logging.getLogger(__name__)


class ProfileServiceClient:
    """Creates profiles through POST <profile_service_url>/api/users."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None):
        self.base_url = base_url.strip().rstrip("/")
        self.session = session or requests.Session()

    def create(self, request: ProfileCreate) -> dict:
        """Create the profile remotely.

        Returns:
            Profile JSON returned by the profile service, or {} when the
            2xx answer carries no readable JSON body (the profile exists)

        Raises:
            UpstreamError: On transport error or non-2xx answer
        """
        url = f"{self.base_url}/api/users"
        try:
            resp = self.session.post(url, json=request.to_dict(), timeout=REQUEST_TIMEOUT)
        except requests.RequestException as exc:
            raise UpstreamError("Profile service unreachable", detail=str(exc)) from exc
        if not 200 <= resp.status_code < 300:
            logger.warning("Profile service create failed: %s - %s", resp.status_code, resp.text)
            raise UpstreamError(f"Profile service returned {resp.status_code}", detail=resp.text)
        try:
            return resp.json()
        except ValueError:
            logger.info("Profile service answered %s without a JSON body", resp.status_code)
            return {}
