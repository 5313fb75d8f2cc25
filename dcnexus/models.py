"""Domain models for the DC Nexus user registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping


@dataclass(frozen=True)
class UserRecord:
    """Represents a user account persisted in the users file."""

    id: int
    full_name: str
    email: str
    password: str
    created_at: str

    @staticmethod
    def from_dict(data: Mapping[str, object]) -> "UserRecord":
        """Create a :class:`UserRecord` from a stored JSON object."""
        required_fields = {"id", "fullName", "email", "password", "createdAt"}
        missing = required_fields - data.keys()
        if missing:
            raise ValueError(f"Missing required user fields: {', '.join(sorted(missing))}")

        return UserRecord(
            id=int(data["id"]),  # type: ignore[arg-type]
            full_name=str(data["fullName"]),
            email=str(data["email"]),
            password=str(data["password"]),
            created_at=str(data["createdAt"]),
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "fullName": self.full_name,
            "email": self.email,
            "password": self.password,
            "createdAt": self.created_at,
        }

    def public_view(self) -> Dict[str, object]:
        """Return the fields that are safe to hand back to a caller."""
        return {"id": self.id, "fullName": self.full_name, "email": self.email}


__all__ = ["UserRecord"]
