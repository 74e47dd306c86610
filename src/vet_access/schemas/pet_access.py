"""
Pet access Pydantic schemas for API validation and serialization.

Permission payloads use the camelCase keys of the public API
(``viewMedicalHistory``...) and are strict: unknown keys and non-boolean
values are rejected so that a malformed payload surfaces as a 400 rather than
silently granting or withholding access.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError
from pydantic.alias_generators import to_camel

from ..exceptions import SchemaValidationException, format_validation_errors
from ..models.pet import Pet
from ..models.pet_access import AccessLevel, GrantPermissions, PetAccess
from ..models.user import User


class PetAccessPermissionsSchema(BaseModel):
    """Wire representation of ``GrantPermissions``."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        from_attributes=True,
    )

    view_medical_history: StrictBool = Field(
        False, description="Read gate for medical records"
    )
    add_medical_records: StrictBool = Field(
        False, description="Write gate for record creation"
    )
    edit_medical_records: StrictBool = Field(
        False, description="Gate for record updates"
    )
    delete_medical_records: StrictBool = Field(
        False, description="Gate for record deletion"
    )
    add_prescriptions: StrictBool = Field(False, description="May add prescriptions")
    schedule_appointments: StrictBool = Field(
        False, description="May schedule appointments"
    )
    edit_pet_info: StrictBool = Field(False, description="May edit the pet profile")
    view_owner_info: StrictBool = Field(
        False, description="May view the pet profile and owner contact details"
    )

    def to_permissions(self) -> GrantPermissions:
        """
        Convert to the domain permission value.

        Only flags present in the payload are granted; an omitted flag is off.
        """
        return GrantPermissions.from_mapping(
            {name: getattr(self, name) for name in self.model_fields_set}
        )

    @classmethod
    def from_permissions(
        cls, permissions: GrantPermissions
    ) -> "PetAccessPermissionsSchema":
        """Build the wire schema from the domain permission value."""
        return cls(**permissions.to_dict())


class PetAccessGrantRequest(BaseModel):
    """Request body for granting a veterinarian access to a pet."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        use_enum_values=False,
    )

    pet_id: UUID = Field(..., description="Pet to share")
    veterinarian_id: UUID = Field(..., description="Veterinarian receiving access")
    access_level: AccessLevel = Field(
        AccessLevel.READ, description="Informational access tier"
    )
    permissions: Optional[PetAccessPermissionsSchema] = Field(
        None, description="Permission flags; defaults apply only when the object is omitted"
    )
    notes: Optional[str] = Field(None, max_length=2000, description="Free-text notes")

    def resolved_permissions(self) -> GrantPermissions:
        """Permissions to store, falling back to the defaults."""
        if self.permissions is None:
            return GrantPermissions()
        return self.permissions.to_permissions()


def parse_grant_request(payload: Dict[str, Any]) -> PetAccessGrantRequest:
    """
    Validate a raw grant payload.

    Raises:
        SchemaValidationException: If the payload is malformed (HTTP 400)
    """
    try:
        return PetAccessGrantRequest.model_validate(payload)
    except ValidationError as e:
        raise SchemaValidationException(
            "Invalid access grant payload",
            schema_name="PetAccessGrantRequest",
            validation_errors=format_validation_errors(e.errors()),
        )


class PetAccessResponse(BaseModel):
    """Serialized access grant."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: UUID
    pet_id: UUID
    veterinarian_id: UUID
    granted_by_id: UUID
    access_level: AccessLevel
    permissions: PetAccessPermissionsSchema
    is_revoked: bool
    revoked_at: Optional[datetime] = None
    revoked_by_id: Optional[UUID] = None
    notes: Optional[str] = None
    granted_at: datetime

    @classmethod
    def from_grant(cls, grant: PetAccess) -> "PetAccessResponse":
        """Serialize a PetAccess row."""
        return cls(
            id=grant.id,
            pet_id=grant.pet_id,
            veterinarian_id=grant.veterinarian_id,
            granted_by_id=grant.granted_by_id,
            access_level=grant.access_level,
            permissions=PetAccessPermissionsSchema.from_permissions(grant.permissions),
            is_revoked=grant.is_revoked,
            revoked_at=grant.revoked_at,
            revoked_by_id=grant.revoked_by_id,
            notes=grant.notes,
            granted_at=grant.granted_at,
        )


class PetSummary(BaseModel):
    """Minimal pet view used inside grant listings."""

    id: UUID
    name: str
    species: str
    breed: Optional[str] = None

    @classmethod
    def from_pet(cls, pet: Pet) -> "PetSummary":
        return cls(id=pet.id, name=pet.name, species=pet.species.value, breed=pet.breed)


class VeterinarianSummary(BaseModel):
    """Public veterinarian directory entry."""

    id: UUID
    full_name: str
    email: str
    clinic_name: Optional[str] = None
    license_number: Optional[str] = None
    specialization: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "VeterinarianSummary":
        return cls(
            id=user.id,
            full_name=user.full_name,
            email=user.email,
            clinic_name=user.clinic_name,
            license_number=user.license_number,
            specialization=user.specialization,
        )


class GrantGroupResponse(BaseModel):
    """
    One veterinarian on the owner's sharing dashboard.

    Several grants to the same veterinarian collapse into one entry listing
    each shared pet; the underlying grants remain separate rows.
    """

    veterinarian: VeterinarianSummary
    grant_ids: List[UUID] = Field(default_factory=list)
    pets: List[PetSummary] = Field(default_factory=list)
    first_granted_at: datetime


class OwnerContact(BaseModel):
    """Owner details exposed to a veterinarian holding ``view_owner_info``."""

    id: UUID
    full_name: str
    email: str
    phone_number: Optional[str] = None


class PatientResponse(BaseModel):
    """Pet as it appears on a veterinarian's patient list."""

    pet_id: UUID
    grant_id: UUID
    name: str
    species: str
    breed: Optional[str] = None
    access_level: AccessLevel
    permissions: PetAccessPermissionsSchema
    owner: Optional[OwnerContact] = None
    granted_at: datetime
