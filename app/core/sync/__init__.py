"""Cross-store synchronization between the Profile Store and the IdP."""
from .identity_sync import IdentitySyncService
from .profile_client import ProfileServiceClient
from .propagator import SERVICE_SECRET_HEADER, SyncPropagator

__all__ = [
    "IdentitySyncService",
    "ProfileServiceClient",
    "SyncPropagator",
    "SERVICE_SECRET_HEADER",
]
