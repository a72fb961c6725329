"""Profile Lifecycle: create, update and delete profiles in the Profile Store.

Updates and deletes are propagated to the IdP after the local commit through
the SyncPropagator; a failed propagation never undoes the local change.
"""
from __future__ import annotations
import logging
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from app.core import audit
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.roles import normalize_and_validate

from .models import ProfileCreate, ProfileRecord, ProfileUpdate
from .repository import ProfileRepository

logger = logging.getLogger(__name__)


class ProfileService:
    """Profile Store operations invoked by the API and the registration saga."""

    def __init__(self, repository: ProfileRepository, propagator, default_password: str = "changeme"):
        """
        Args:
            repository: Profile storage
            propagator: SyncPropagator forwarding committed changes to the IdP
            default_password: Hashed in place of a missing password on create
        """
        self.repository = repository
        self.propagator = propagator
        self.default_password = default_password

    def list_all(self) -> list[ProfileRecord]:
        return self.repository.list()

    def get(self, profile_id: int) -> ProfileRecord:
        record = self.repository.get(profile_id)
        if record is None:
            raise NotFoundError(f"User not found with id: {profile_id}")
        return record

    def get_by_email(self, email: str) -> ProfileRecord:
        record = self.repository.find_by_email(email)
        if record is None:
            raise NotFoundError(f"User not found with email: {email}")
        return record

    def create(self, request: ProfileCreate) -> ProfileRecord:
        """Create a profile, or return the existing one for the same email.

        Creation is idempotent by email so concurrent registrations that both
        reach this step do not fail here.

        Raises:
            ValidationError: If email is blank or role is invalid
        """
        email = (request.email or "").strip()
        if not email:
            raise ValidationError("Email is required.")

        existing = self.repository.find_by_email(email)
        if existing is not None:
            logger.info("Profile for %s already exists (id=%s); returning it", email, existing.id)
            return existing

        role = normalize_and_validate(request.role) if request.role else None
        password = request.password if request.password and request.password.strip() else self.default_password

        record = ProfileRecord(
            id=None,
            email=email,
            password_hash=generate_password_hash(password),
            first_name=request.first_name,
            last_name=request.last_name,
            role=role,
            phone=request.phone,
            avatar_url=request.avatar_url,
            is_active=request.is_active if request.is_active is not None else True,
        )
        saved = self.repository.add(record)
        logger.info("Created profile %s for %s", saved.id, saved.email)
        return saved

    def update(self, profile_id: int, request: ProfileUpdate) -> ProfileRecord:
        """Apply the non-None fields of the request, then propagate to the IdP.

        Raises:
            NotFoundError: If the profile does not exist
            ConflictError: If the new email belongs to another profile
            ValidationError: If the role is invalid
        """
        record = self.get(profile_id)
        old_email = record.email

        if request.email is not None and request.email != record.email:
            holder = self.repository.find_by_email(request.email)
            if holder is not None and holder.id != record.id:
                raise ConflictError(f"User already exists with email: {request.email}")

        if request.email is not None:
            if not request.email.strip():
                raise ValidationError("Email must not be blank.")
            record.email = request.email.strip()
        if request.password is not None and request.password.strip():
            record.password_hash = generate_password_hash(request.password)
        if request.first_name is not None:
            record.first_name = request.first_name
        if request.last_name is not None:
            record.last_name = request.last_name
        if request.role is not None:
            record.role = normalize_and_validate(request.role)
        if request.phone is not None:
            record.phone = request.phone
        if request.avatar_url is not None:
            record.avatar_url = request.avatar_url
        if request.is_active is not None:
            record.is_active = request.is_active

        saved = self.repository.save(record)
        logger.info("Updated profile %s (%s)", saved.id, saved.email)
        audit.safe_log_event("profile_update", saved.email, details={"profile_id": saved.id, "old_email": old_email})

        self.propagator.propagate_update(
            old_email,
            saved.first_name,
            saved.last_name,
            saved.email,
            saved.role.value if saved.role else None,
        )
        return saved

    def delete(self, profile_id: int) -> None:
        """Delete a profile and propagate the removal. Unknown ids are a no-op."""
        record = self.repository.get(profile_id)
        if record is None:
            logger.debug("Delete of unknown profile %s ignored", profile_id)
            return
        self.repository.delete(profile_id)
        logger.info("Deleted profile %s (%s)", profile_id, record.email)
        audit.safe_log_event("profile_delete", record.email, details={"profile_id": profile_id})
        self.propagator.propagate_delete(record.email)

    @staticmethod
    def verify_password(record: ProfileRecord, password: Optional[str]) -> bool:
        """Check a plaintext password against the stored hash."""
        if not password:
            return False
        return check_password_hash(record.password_hash, password)
