"""Best-effort forwarding of committed Profile Store changes to the IdP sync endpoints.

Each call is a single attempt. Failures are logged and swallowed: the local
change has already been committed and is never rolled back.
"""
from __future__ import annotations
import logging
from typing import Optional
from urllib.parse import quote

import requests

from app.core import audit
from app.core.keycloak import REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

SERVICE_SECRET_HEADER = "X-Service-Secret"
SYNC_USERS_PATH = "/api/auth/admin/users/by-email/"


def _raise_for_non_2xx(resp: requests.Response) -> None:
    """Treat anything outside 2xx as a failed sync call, redirects included."""
    if not 200 <= resp.status_code < 300:
        raise requests.HTTPError(f"{resp.status_code} from {resp.url}", response=resp)


class SyncPropagator:
    """Calls PUT/DELETE <base>/api/auth/admin/users/by-email/{email}.

    No-op when the sync base URL or shared secret is not configured.
    """

    def __init__(self, cfg, session: Optional[requests.Session] = None):
        self.base_url = (cfg.sync_service_url or "").strip().rstrip("/")
        self.secret = cfg.sync_service_secret or ""
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.base_url) and bool(self.secret.strip())

    def _url(self, email: str) -> str:
        return f"{self.base_url}{SYNC_USERS_PATH}{quote(email, safe='')}"

    def _headers(self) -> dict:
        return {SERVICE_SECRET_HEADER: self.secret, "Content-Type": "application/json"}

    def propagate_update(
        self,
        old_email: Optional[str],
        first_name: Optional[str],
        last_name: Optional[str],
        new_email: Optional[str],
        role: Optional[str],
    ) -> bool:
        """Forward a profile update to the IdP, keyed by the pre-update email.

        Returns:
            True if the sync service accepted the call, False otherwise
            (including when propagation is not configured)
        """
        if not self.configured or not old_email or not old_email.strip():
            return False

        body = {
            "firstName": first_name if first_name is not None else "",
            "lastName": last_name if last_name is not None else "",
            "email": new_email if new_email is not None else "",
            "role": role if role is not None else "",
        }
        try:
            resp = self.session.put(
                self._url(old_email),
                json=body,
                headers=self._headers(),
                timeout=REQUEST_TIMEOUT,
                allow_redirects=False,
            )
            _raise_for_non_2xx(resp)
        except requests.RequestException as exc:
            logger.warning("Failed to sync update to IdP for %s: %s", old_email, exc)
            audit.safe_log_event("sync_update", old_email, details={"error": str(exc)}, success=False)
            return False

        logger.info("Synced update to IdP for email: %s", old_email)
        audit.safe_log_event("sync_update", old_email, details={"new_email": body["email"], "role": body["role"]})
        return True

    def propagate_delete(self, email: Optional[str]) -> bool:
        """Forward a profile deletion to the IdP.

        Returns:
            True if the sync service accepted the call, False otherwise
        """
        if not self.configured or not email or not email.strip():
            return False

        try:
            resp = self.session.delete(
                self._url(email), headers=self._headers(), timeout=REQUEST_TIMEOUT, allow_redirects=False
            )
            _raise_for_non_2xx(resp)
        except requests.RequestException as exc:
            logger.warning("IdP delete failed for %s: %s", email, exc)
            audit.safe_log_event("sync_delete", email, details={"error": str(exc)}, success=False)
            return False

        logger.info("Synced delete to IdP for email: %s", email)
        audit.safe_log_event("sync_delete", email)
        return True
