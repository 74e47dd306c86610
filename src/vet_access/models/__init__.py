"""
Database models for the vet-access package.

This module contains SQLAlchemy models for users, pets, medical records and
the pet access grants that delegate record access to veterinarians.
"""

from .base import Base, BaseModel
from .medical_record import MedicalRecord, MedicalRecordType
from .pet import Pet, PetGender, PetSpecies
from .pet_access import AccessLevel, GrantPermissions, PetAccess
from .user import User, UserRole

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "UserRole",
    "Pet",
    "PetSpecies",
    "PetGender",
    "MedicalRecord",
    "MedicalRecordType",
    "PetAccess",
    "AccessLevel",
    "GrantPermissions",
]
