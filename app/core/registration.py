"""Registration saga: create a user in the IdP and in the Profile Store.

The two stores share no transaction. The IdP user is created first; if any
later step fails, the IdP user is deleted again (compensation) and the
original failure is reported to the caller.

Flow:
    validate ──> IdP existence check ──> IdP create ──┬──> assign role ──> profile create ──> Created(id)
                                                       └── on failure: delete IdP user, Failed(original error)
"""
from __future__ import annotations
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Union

import requests

from app.core import audit
from app.core.errors import ConflictError, UpstreamError, ValidationError
from app.core.keycloak import KeycloakError
from app.core.profiles.models import ProfileCreate
from app.core.roles import normalize_and_validate

logger = logging.getLogger(__name__)

# Errors raised by the IdP gateway on transport or HTTP failure
_IDP_ERRORS = (KeycloakError, requests.RequestException)


@dataclass
class RegistrationRequest:
    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Any) -> "RegistrationRequest":
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")
        return cls(
            email=payload.get("email"),
            password=payload.get("password"),
            first_name=payload.get("firstName"),
            last_name=payload.get("lastName"),
            role=payload.get("role"),
        )


@dataclass(frozen=True)
class Created:
    """Both records exist; user_id is the IdP-assigned identifier."""
    user_id: str


@dataclass(frozen=True)
class Failed:
    """Registration failed; reason is the original exception."""
    reason: BaseException


RegistrationOutcome = Union[Created, Failed]


class RegistrationSaga:
    """Orchestrates IdP user creation, role assignment and profile creation."""

    def __init__(self, identity_provider, profiles):
        """
        Args:
            identity_provider: IdP gateway (see app.core.keycloak.gateway.IdentityProvider)
            profiles: Anything with create(ProfileCreate): the local ProfileService
                or a ProfileServiceClient for a remote Profile Store
        """
        self.idp = identity_provider
        self.profiles = profiles

    def register(self, request: RegistrationRequest) -> RegistrationOutcome:
        """Run the saga once. No step is retried."""
        try:
            return Created(self._run(request))
        except Exception as exc:
            return Failed(exc)

    def register_or_raise(self, request: RegistrationRequest) -> str:
        """Run the saga and return the IdP user id, raising the original failure."""
        outcome = self.register(request)
        if isinstance(outcome, Failed):
            raise outcome.reason
        return outcome.user_id

    def _run(self, request: RegistrationRequest) -> str:
        role = normalize_and_validate(request.role)
        email = (request.email or "").strip()
        if not email:
            raise ValidationError("Email is required.")

        try:
            existing = self.idp.find_user_by_email(email)
        except _IDP_ERRORS as exc:
            raise UpstreamError("Identity provider unavailable", detail=str(exc)) from exc
        if existing is not None:
            raise ConflictError(f"User with email already exists: {email}")

        try:
            user_id = self.idp.create_user(email, request.password or "", request.first_name, request.last_name)
        except _IDP_ERRORS as exc:
            detail = getattr(exc, "message", None) or str(exc)
            logger.warning("IdP create user failed for %s: %s", email, detail)
            raise UpstreamError(f"Failed to create user in identity provider: {detail}", detail=detail) from exc

        with self._compensating(user_id, email):
            try:
                self.idp.assign_realm_role(user_id, role.value)
            except _IDP_ERRORS as exc:
                raise UpstreamError(f"Failed to assign role {role.value}", detail=str(exc)) from exc
            logger.info("Created IdP user %s with role %s", email, role.value)

            self.profiles.create(ProfileCreate(
                email=email,
                password=request.password,
                first_name=request.first_name,
                last_name=request.last_name,
                role=role.value,
            ))

        audit.safe_log_event("register", email, details={"user_id": user_id, "role": role.value})
        return user_id

    @contextmanager
    def _compensating(self, user_id: str, email: str) -> Iterator[None]:
        """Delete the IdP user if the enclosed steps do not complete.

        The original error is always re-raised. A failed deletion is logged
        on its own and leaves an orphaned IdP user behind.
        """
        try:
            yield
        except BaseException as original:
            try:
                self.idp.delete_user(user_id)
            except Exception as rollback_exc:
                logger.error("Failed to rollback IdP user %s: %s", email, rollback_exc)
                audit.safe_log_event(
                    "register_orphaned", email,
                    details={"user_id": user_id, "cause": str(original), "error": str(rollback_exc)},
                    success=False,
                )
            else:
                logger.warning("Rolled back IdP user %s after profile store failure: %s", email, original)
                audit.safe_log_event("register_rollback", email, details={"user_id": user_id, "cause": str(original)})
            raise
