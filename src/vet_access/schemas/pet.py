"""
Pet Pydantic schemas for API validation and serialization.

This module contains Pydantic schemas for Pet model validation,
including create, update, and response schemas.
"""

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models.pet import PetGender, PetSpecies


class EmergencyContactSchema(BaseModel):
    """Schema for emergency contact information."""

    model_config = ConfigDict(from_attributes=True)

    name: str = Field(..., description="Emergency contact name")
    phone: str = Field(..., description="Emergency contact phone number")
    relationship: Optional[str] = Field(None, description="Relationship to pet owner")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate contact name."""
        if not v or not v.strip():
            raise ValueError("Emergency contact name is required")
        return v.strip()

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        """Validate phone number."""
        if not v or not v.strip():
            raise ValueError("Emergency contact phone is required")

        digits_only = re.sub(r"\D", "", v)
        if len(digits_only) < 10 or len(digits_only) > 15:
            raise ValueError("Phone number must be between 10 and 15 digits")

        return v.strip()


def _clean_string_list(values: Optional[List[str]]) -> Optional[List[str]]:
    if values is None:
        return values
    return [item.strip() for item in values if item and item.strip()]


class PetCreate(BaseModel):
    """Schema for registering a new pet. The owner comes from the principal."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
    )

    name: str = Field(..., description="Pet's name", min_length=1, max_length=100)
    species: PetSpecies = Field(..., description="Pet's species")
    breed: Optional[str] = Field(None, description="Pet's breed", max_length=100)
    birth_date: date = Field(..., description="Pet's birth date")
    gender: PetGender = Field(..., description="Pet's gender")
    weight_kg: Optional[Decimal] = Field(
        None, description="Weight in kilograms", gt=0, max_digits=5, decimal_places=2
    )
    color: Optional[str] = Field(None, description="Coat or skin color", max_length=100)
    photo_url: Optional[str] = Field(None, description="Profile photo URL", max_length=500)
    allergies: List[str] = Field(default_factory=list, description="Known allergies")
    chronic_conditions: List[str] = Field(
        default_factory=list, description="Chronic conditions"
    )
    emergency_contact: Optional[EmergencyContactSchema] = Field(
        None, description="Emergency contact"
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate pet name."""
        if not v or not v.strip():
            raise ValueError("Pet name cannot be empty")
        return v.strip()

    @field_validator("birth_date")
    @classmethod
    def validate_birth_date(cls, v: date) -> date:
        """Validate birth date is not in the future."""
        if v > date.today():
            raise ValueError("Birth date cannot be in the future")
        return v

    @field_validator("allergies", "chronic_conditions")
    @classmethod
    def validate_string_lists(cls, v: List[str]) -> List[str]:
        return _clean_string_list(v) or []

    def to_model_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for constructing a ``Pet``."""
        data = self.model_dump(exclude={"emergency_contact"})
        if self.emergency_contact is not None:
            data["emergency_contact"] = self.emergency_contact.model_dump()
        return data


class PetUpdate(BaseModel):
    """
    Schema for updating pet information.

    Only the fields declared here may be changed; anything else in the payload
    (``owner_id``, ``id``...) is rejected.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
    )

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    species: Optional[PetSpecies] = None
    breed: Optional[str] = Field(None, max_length=100)
    birth_date: Optional[date] = None
    gender: Optional[PetGender] = None
    weight_kg: Optional[Decimal] = Field(None, gt=0, max_digits=5, decimal_places=2)
    color: Optional[str] = Field(None, max_length=100)
    photo_url: Optional[str] = Field(None, max_length=500)
    allergies: Optional[List[str]] = None
    chronic_conditions: Optional[List[str]] = None
    emergency_contact: Optional[EmergencyContactSchema] = None

    @field_validator("birth_date")
    @classmethod
    def validate_birth_date(cls, v: Optional[date]) -> Optional[date]:
        if v is not None and v > date.today():
            raise ValueError("Birth date cannot be in the future")
        return v

    @field_validator("allergies", "chronic_conditions")
    @classmethod
    def validate_string_lists(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_string_list(v)

    @model_validator(mode="after")
    def validate_at_least_one_field(self) -> "PetUpdate":
        """Ensure at least one field is provided for update."""
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        return self

    def changes(self) -> Dict[str, Any]:
        """Fields explicitly supplied by the caller."""
        data = self.model_dump(exclude_unset=True, exclude={"emergency_contact"})
        if "emergency_contact" in self.model_fields_set:
            data["emergency_contact"] = (
                self.emergency_contact.model_dump()
                if self.emergency_contact is not None
                else None
            )
        return data


class PetResponse(BaseModel):
    """Schema for pet API responses."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: UUID
    owner_id: UUID
    name: str
    species: PetSpecies
    breed: Optional[str] = None
    birth_date: Optional[date] = None
    gender: PetGender
    weight_kg: Optional[Decimal] = None
    color: Optional[str] = None
    photo_url: Optional[str] = None
    allergies: Optional[List[str]] = None
    chronic_conditions: Optional[List[str]] = None
    emergency_contact: Optional[Dict[str, Any]] = None
    age_in_years: Optional[int] = None
    created_at: datetime
    updated_at: datetime
