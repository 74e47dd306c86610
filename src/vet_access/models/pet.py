"""
Pet model for the vet-access package.

A pet is owned by exactly one owner. Its descriptive attributes are irrelevant
to authorization; only ``owner_id`` feeds the authorization engine.
"""

import enum
import uuid
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..database.types import JSONType
from ..utils.datetime_utils import calculate_pet_age
from .base import BaseModel, enum_type


class PetSpecies(enum.Enum):
    """Enumeration of pet species supported by the platform."""

    DOG = "dog"
    CAT = "cat"
    BIRD = "bird"
    RABBIT = "rabbit"
    HAMSTER = "hamster"
    GUINEA_PIG = "guinea_pig"
    FERRET = "ferret"
    REPTILE = "reptile"
    FISH = "fish"
    OTHER = "other"


class PetGender(enum.Enum):
    """Enumeration of pet genders."""

    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"


class Pet(BaseModel):
    """
    Pet registered by an owner, with the medical metadata shown on its profile.
    """

    __tablename__ = "pets"

    def __init__(self, **kwargs: Any) -> None:
        """Initialize Pet with default values."""
        if "gender" not in kwargs:
            kwargs["gender"] = PetGender.UNKNOWN
        if "allergies" not in kwargs:
            kwargs["allergies"] = []
        if "chronic_conditions" not in kwargs:
            kwargs["chronic_conditions"] = []
        super().__init__(**kwargs)

    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="UUID of the pet's owner",
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False, comment="Pet's name")

    species: Mapped[PetSpecies] = mapped_column(
        enum_type(PetSpecies), nullable=False, index=True, comment="Pet's species"
    )

    breed: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True, comment="Pet's breed"
    )

    gender: Mapped[PetGender] = mapped_column(
        enum_type(PetGender),
        nullable=False,
        default=PetGender.UNKNOWN,
        comment="Pet's gender",
    )

    birth_date: Mapped[Optional[date]] = mapped_column(
        Date, nullable=True, comment="Pet's birth date"
    )

    weight_kg: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(5, 2), nullable=True, comment="Pet's weight in kilograms"
    )

    color: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True, comment="Coat or skin color"
    )

    photo_url: Mapped[Optional[str]] = mapped_column(
        String(500), nullable=True, comment="URL to pet's profile photo"
    )

    allergies: Mapped[Optional[List[str]]] = mapped_column(
        JSONType, nullable=True, comment="Known allergies"
    )

    chronic_conditions: Mapped[Optional[List[str]]] = mapped_column(
        JSONType, nullable=True, comment="Chronic conditions"
    )

    emergency_contact: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSONType, nullable=True, comment="Emergency contact information"
    )

    __table_args__ = (
        CheckConstraint(
            "weight_kg IS NULL OR weight_kg > 0", name="ck_pets_weight_positive"
        ),
        Index("idx_pets_owner_name", "owner_id", "name"),
    )

    owner = relationship("User", lazy="raise")

    def __repr__(self) -> str:
        """String representation of the Pet model."""
        return f"<Pet(id={self.id}, name='{self.name}', owner_id={self.owner_id})>"

    @property
    def is_active(self) -> bool:
        """Check if the pet has not been deleted."""
        return not self.is_deleted

    @property
    def age_in_years(self) -> Optional[int]:
        """Calculate pet's age in whole years."""
        if self.birth_date is None:
            return None
        return max(0, calculate_pet_age(self.birth_date)["years"])

    def is_owned_by(self, user_id: uuid.UUID) -> bool:
        """Check whether ``user_id`` is this pet's owner."""
        return self.owner_id == user_id
