"""
Pet access grant model for the vet-access package.

A PetAccess row is one delegation from a pet's owner to a veterinarian,
scoped to a single pet. Rows are never deleted: revocation flips
``is_revoked`` and stamps ``revoked_at``/``revoked_by_id``, leaving the row
for audit. At most one non-revoked row may exist per (pet, veterinarian).
"""

import enum
import uuid
from dataclasses import asdict, dataclass, fields
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..utils.datetime_utils import get_current_utc
from .base import BaseModel, enum_type


class AccessLevel(enum.Enum):
    """Coarse, informational access tier of a grant."""

    READ = "read"
    WRITE = "write"


@dataclass(frozen=True)
class GrantPermissions:
    """
    Fixed set of independently togglable permissions carried by a grant.

    The owner-facing defaults allow viewing medical history and owner
    contact details only.
    """

    view_medical_history: bool = True
    add_medical_records: bool = False
    edit_medical_records: bool = False
    delete_medical_records: bool = False
    add_prescriptions: bool = False
    schedule_appointments: bool = False
    edit_pet_info: bool = False
    view_owner_info: bool = True

    @classmethod
    def field_names(cls) -> tuple:
        """Names of every permission flag, in declaration order."""
        return tuple(f.name for f in fields(cls))

    @classmethod
    def none(cls) -> "GrantPermissions":
        """Permissions with every flag switched off."""
        return cls(**{name: False for name in cls.field_names()})

    @classmethod
    def all(cls) -> "GrantPermissions":
        """Permissions with every flag switched on."""
        return cls(**{name: True for name in cls.field_names()})

    @classmethod
    def from_mapping(cls, values: Mapping[str, bool]) -> "GrantPermissions":
        """
        Build permissions from a mapping; flags not present are off.

        Raises:
            ValueError: If the mapping names an unknown permission
        """
        unknown = set(values) - set(cls.field_names())
        if unknown:
            raise ValueError(f"Unknown permissions: {', '.join(sorted(unknown))}")
        return cls(**{name: bool(values.get(name, False)) for name in cls.field_names()})

    def allows(self, permission: str) -> bool:
        """Check a single permission flag by name."""
        if permission not in self.field_names():
            raise ValueError(f"Unknown permission: {permission}")
        return bool(getattr(self, permission))

    def to_dict(self) -> Dict[str, bool]:
        """Return the flags as a plain dictionary."""
        return asdict(self)


class PetAccess(BaseModel):
    """
    Delegated access of one veterinarian to one pet.

    The permission flags are stored as individual boolean columns and exposed
    as a single ``GrantPermissions`` value through ``permissions``.
    """

    __tablename__ = "pet_access"

    def __init__(self, **kwargs: Any) -> None:
        """Initialize PetAccess, expanding a ``permissions`` value into columns."""
        permissions = kwargs.pop("permissions", None) or GrantPermissions()
        if "access_level" not in kwargs:
            kwargs["access_level"] = AccessLevel.READ
        kwargs.setdefault("is_revoked", False)
        kwargs.setdefault("granted_at", get_current_utc())
        super().__init__(**kwargs)
        self.permissions = permissions

    pet_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("pets.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="Pet the access applies to",
    )

    veterinarian_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="Veterinarian receiving access",
    )

    granted_by_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="Owner who granted access; the only user allowed to revoke it",
    )

    access_level: Mapped[AccessLevel] = mapped_column(
        enum_type(AccessLevel),
        nullable=False,
        default=AccessLevel.READ,
        comment="Informational access tier",
    )

    # Permission flags
    view_medical_history: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    add_medical_records: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    edit_medical_records: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    delete_medical_records: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    add_prescriptions: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    schedule_appointments: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    edit_pet_info: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    view_owner_info: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Revocation
    is_revoked: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
        index=True,
    )

    revoked_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    revoked_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"), nullable=True
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True, comment="Free-text notes, not authoritative"
    )

    granted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=get_current_utc,
    )

    __table_args__ = (
        # One active grant per pet/veterinarian pair; revoked rows do not count
        Index(
            "uq_pet_access_active_pair",
            "pet_id",
            "veterinarian_id",
            unique=True,
            postgresql_where=text("is_revoked = false"),
            sqlite_where=text("is_revoked = 0"),
        ),
        Index("idx_pet_access_vet_active", "veterinarian_id", "is_revoked"),
        Index("idx_pet_access_grantor_active", "granted_by_id", "is_revoked"),
    )

    pet = relationship("Pet", lazy="raise")
    veterinarian = relationship("User", foreign_keys=[veterinarian_id], lazy="raise")
    granted_by = relationship("User", foreign_keys=[granted_by_id], lazy="raise")

    def __repr__(self) -> str:
        """String representation of the PetAccess model."""
        return (
            f"<PetAccess(id={self.id}, pet_id={self.pet_id}, "
            f"veterinarian_id={self.veterinarian_id}, revoked={self.is_revoked})>"
        )

    @property
    def is_active(self) -> bool:
        """A grant is active until it is revoked."""
        return not self.is_revoked

    @property
    def permissions(self) -> GrantPermissions:
        """Current permission flags as a single value."""
        return GrantPermissions(
            **{name: bool(getattr(self, name)) for name in GrantPermissions.field_names()}
        )

    @permissions.setter
    def permissions(self, value: GrantPermissions) -> None:
        for name in GrantPermissions.field_names():
            setattr(self, name, getattr(value, name))

    def has_permission(self, permission: str) -> bool:
        """Check a permission flag; revoked grants allow nothing."""
        return self.is_active and self.permissions.allows(permission)

    def mark_revoked(self, revoked_by: uuid.UUID) -> None:
        """
        Revoke the grant in memory.

        Raises:
            ValueError: If the grant is already revoked
        """
        if self.is_revoked:
            raise ValueError("Grant is already revoked")
        self.is_revoked = True
        self.revoked_at = get_current_utc()
        self.revoked_by_id = revoked_by
        self.updated_by = revoked_by
