"""
Pydantic schemas for API validation and serialization.
"""

from .medical_record import (
    AttachmentSchema,
    MedicalRecordCreate,
    MedicalRecordResponse,
    MedicalRecordUpdate,
    is_allowed_attachment_type,
)
from .pet import EmergencyContactSchema, PetCreate, PetResponse, PetUpdate
from .pet_access import (
    GrantGroupResponse,
    OwnerContact,
    PatientResponse,
    PetAccessGrantRequest,
    PetAccessPermissionsSchema,
    PetAccessResponse,
    PetSummary,
    VeterinarianSummary,
    parse_grant_request,
)

__all__ = [
    # Pet schemas
    "EmergencyContactSchema",
    "PetCreate",
    "PetUpdate",
    "PetResponse",
    # Medical record schemas
    "AttachmentSchema",
    "MedicalRecordCreate",
    "MedicalRecordUpdate",
    "MedicalRecordResponse",
    "is_allowed_attachment_type",
    # Access grant schemas
    "PetAccessPermissionsSchema",
    "PetAccessGrantRequest",
    "PetAccessResponse",
    "parse_grant_request",
    "PetSummary",
    "VeterinarianSummary",
    "GrantGroupResponse",
    "OwnerContact",
    "PatientResponse",
]
