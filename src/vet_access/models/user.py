"""
User model for the vet-access package.

A user row is the durable identity behind a ``Principal``. The role is fixed
at registration; there is no role migration.
"""

import enum
from typing import List, Optional, Union

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from ..exceptions import BusinessRuleException
from .base import BaseModel, enum_type


class UserRole(enum.Enum):
    """Closed set of roles on the platform."""

    OWNER = "owner"
    VETERINARIAN = "veterinarian"
    ADMIN = "admin"

    @classmethod
    def from_string(cls, value: Union[str, "UserRole"]) -> "UserRole":
        """
        Parse a role, accepting the legacy spellings used by older clients.

        Args:
            value: Role value such as "owner", "pet_owner", "vet" or a UserRole

        Returns:
            The matching UserRole

        Raises:
            ValueError: If the value does not name a known role
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        role = _ROLE_ALIASES.get(normalized)
        if role is None:
            raise ValueError(f"Unknown user role: {value!r}")
        return role


_ROLE_ALIASES = {
    "owner": UserRole.OWNER,
    "pet_owner": UserRole.OWNER,
    "veterinarian": UserRole.VETERINARIAN,
    "vet": UserRole.VETERINARIAN,
    "admin": UserRole.ADMIN,
}


class User(BaseModel):
    """
    Registered account: pet owner, veterinarian or administrator.

    Veterinarians additionally carry clinic, license and specialization
    details, which are part of their profile-completeness check.
    """

    __tablename__ = "users"

    def __init__(self, **kwargs):
        """Initialize User, defaulting the role to owner."""
        if "role" not in kwargs:
            kwargs["role"] = UserRole.OWNER
        super().__init__(**kwargs)

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="User's email address",
    )

    first_name: Mapped[str] = mapped_column(
        String(100), nullable=False, comment="User's first name"
    )

    last_name: Mapped[str] = mapped_column(
        String(100), nullable=False, comment="User's last name"
    )

    role: Mapped[UserRole] = mapped_column(
        enum_type(UserRole),
        nullable=False,
        default=UserRole.OWNER,
        index=True,
        comment="User's role in the platform, immutable after registration",
    )

    phone_number: Mapped[Optional[str]] = mapped_column(
        String(20), nullable=True, comment="User's phone number"
    )

    # Veterinarian profile
    clinic_name: Mapped[Optional[str]] = mapped_column(
        String(200), nullable=True, comment="Clinic the veterinarian works at"
    )

    license_number: Mapped[Optional[str]] = mapped_column(
        String(50), nullable=True, comment="Veterinary license number"
    )

    specialization: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True, comment="Veterinary specialization"
    )

    __table_args__ = (Index("idx_users_name_search", "first_name", "last_name"),)

    @validates("role")
    def _validate_role(self, key: str, value: Union[str, UserRole]) -> UserRole:
        """Normalise role values and refuse to change an assigned role."""
        role = UserRole.from_string(value)
        current = self.__dict__.get("role")
        if current is not None and current != role:
            raise BusinessRuleException(
                "User role cannot be changed after registration",
                rule_name="immutable_role",
                context={"current_role": current.value, "requested_role": role.value},
            )
        return role

    def __repr__(self) -> str:
        """String representation of the User model."""
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"

    @property
    def full_name(self) -> str:
        """Get the user's full name."""
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def display_name(self) -> str:
        """Get a display-friendly name for the user."""
        return self.full_name or self.email.split("@")[0]

    @property
    def is_active(self) -> bool:
        """Check if the user account is active."""
        return not self.is_deleted

    def is_owner(self) -> bool:
        """Check if user is a pet owner."""
        return self.role == UserRole.OWNER

    def is_veterinarian(self) -> bool:
        """Check if user is a veterinarian."""
        return self.role == UserRole.VETERINARIAN

    def is_admin(self) -> bool:
        """Check if user is a platform administrator."""
        return self.role == UserRole.ADMIN

    def missing_profile_fields(self) -> List[str]:
        """
        List the profile fields that still need a value.

        Returns:
            Field names, empty when the profile is complete
        """
        required = ["first_name", "last_name", "email", "phone_number"]
        if self.is_veterinarian():
            required += ["clinic_name", "license_number", "specialization"]
        return [name for name in required if not getattr(self, name)]

    @property
    def has_complete_profile(self) -> bool:
        """Check if the user has completed their profile."""
        return not self.missing_profile_fields()
