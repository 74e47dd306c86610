"""
Medical record Pydantic schemas.

Attachments are metadata only: the file itself lives in external storage and
is referenced by URL. Accepted file types are PDF documents and images.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..models.medical_record import MedicalRecordType

PDF_MIME_TYPE = "application/pdf"


def is_allowed_attachment_type(file_type: str) -> bool:
    """Check whether a MIME type is a PDF or an image."""
    normalized = file_type.strip().lower()
    return normalized == PDF_MIME_TYPE or normalized.startswith("image/")


class AttachmentSchema(BaseModel):
    """Schema for one attachment reference."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    filename: str = Field(..., min_length=1, max_length=255)
    file_url: str = Field(..., min_length=1, max_length=1000)
    file_type: str = Field(..., description="MIME type of the attached file")

    @field_validator("file_type")
    @classmethod
    def validate_file_type(cls, v: str) -> str:
        """Only PDF documents and images may be attached."""
        if not is_allowed_attachment_type(v):
            raise ValueError("Attachment must be a PDF or an image")
        return v.lower()

    def to_metadata(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=False)


class MedicalRecordCreate(BaseModel):
    """Schema for filing a new medical record against a pet."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    record_type: MedicalRecordType = Field(MedicalRecordType.OTHER)
    record_date: Optional[datetime] = Field(
        None, description="Date of the medical event; defaults to now"
    )
    veterinarian_id: Optional[UUID] = Field(
        None, description="Attending veterinarian when filed by an owner"
    )
    notes: Optional[str] = Field(None, max_length=10000)
    attachments: List[AttachmentSchema] = Field(default_factory=list)


class MedicalRecordUpdate(BaseModel):
    """Schema for updating a medical record. Unset fields are left untouched."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    record_type: Optional[MedicalRecordType] = None
    record_date: Optional[datetime] = None
    veterinarian_id: Optional[UUID] = None
    notes: Optional[str] = Field(None, max_length=10000)
    attachments: Optional[List[AttachmentSchema]] = None

    @model_validator(mode="after")
    def validate_at_least_one_field(self) -> "MedicalRecordUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        return self


class MedicalRecordResponse(BaseModel):
    """Schema for medical record API responses."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: UUID
    pet_id: UUID
    record_type: MedicalRecordType
    record_date: datetime
    veterinarian_id: Optional[UUID] = None
    notes: Optional[str] = None
    attachments: List[Dict[str, Any]] = Field(default_factory=list)
    created_by: Optional[UUID] = None
    updated_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime
