"""Profile Store: records, storage and lifecycle operations."""
from .models import ProfileCreate, ProfileRecord, ProfileUpdate
from .repository import InMemoryProfileRepository, ProfileRepository
from .service import ProfileService

__all__ = [
    "ProfileCreate",
    "ProfileRecord",
    "ProfileUpdate",
    "ProfileRepository",
    "InMemoryProfileRepository",
    "ProfileService",
]
