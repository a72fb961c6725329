"""Profile Store records and request payloads."""
from __future__ import annotations
import datetime
from dataclasses import dataclass, fields
from typing import Any, Optional

from app.core.errors import ValidationError
from app.core.roles import Role

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"

# JSON (camelCase) key -> attribute name
_JSON_FIELDS = {
    "email": "email",
    "password": "password",
    "firstName": "first_name",
    "lastName": "last_name",
    "role": "role",
    "phone": "phone",
    "avatarUrl": "avatar_url",
    "isActive": "is_active",
}


def _from_json(cls, payload: Any):
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    values = {attr: payload.get(key) for key, attr in _JSON_FIELDS.items() if key in payload}
    is_active = values.get("is_active")
    if is_active is not None and not isinstance(is_active, bool):
        raise ValidationError("isActive must be a boolean")
    for attr in ("email", "password", "first_name", "last_name", "role", "phone", "avatar_url"):
        value = values.get(attr)
        if value is not None and not isinstance(value, str):
            raise ValidationError(f"{attr} must be a string")
    return cls(**values)


@dataclass
class ProfileCreate:
    """Payload for creating a profile (also what the registration saga sends)."""
    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: Optional[bool] = None

    @classmethod
    def from_dict(cls, payload: Any) -> "ProfileCreate":
        return _from_json(cls, payload)

    def to_dict(self) -> dict:
        """camelCase JSON body, dropping unset fields."""
        result = {}
        for key, attr in _JSON_FIELDS.items():
            value = getattr(self, attr)
            if value is not None:
                result[key] = value
        return result


@dataclass
class ProfileUpdate:
    """Partial update: only non-None fields are applied."""
    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: Optional[bool] = None

    @classmethod
    def from_dict(cls, payload: Any) -> "ProfileUpdate":
        return _from_json(cls, payload)


@dataclass
class ProfileRecord:
    """A user as stored in the Profile Store."""
    id: Optional[int]
    email: str
    password_hash: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[Role] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None

    def copy(self) -> "ProfileRecord":
        return ProfileRecord(**{f.name: getattr(self, f.name) for f in fields(self)})

    def to_dict(self) -> dict:
        """API representation. The password hash is never exposed."""
        return {
            "id": self.id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "role": self.role.value if self.role else None,
            "phone": self.phone or "",
            "avatarUrl": self.avatar_url or "",
            "isActive": self.is_active if self.is_active is not None else True,
            "createdAt": self.created_at.strftime(TIMESTAMP_FORMAT) if self.created_at else "",
            "updatedAt": self.updated_at.strftime(TIMESTAMP_FORMAT) if self.updated_at else "",
        }
