"""
Medical record model for the vet-access package.

Records belong to one pet. Files themselves live in external storage; a record
only keeps attachment metadata ({filename, file_url, file_type}).
"""

import enum
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..database.types import JSONType
from ..utils.datetime_utils import get_current_utc
from .base import BaseModel, enum_type


class MedicalRecordType(enum.Enum):
    """Kinds of medical record an owner or veterinarian can file."""

    CHECKUP = "checkup"
    VACCINATION = "vaccination"
    MEDICATION = "medication"
    SURGERY = "surgery"
    LAB_RESULT = "lab_result"
    OTHER = "other"


class MedicalRecord(BaseModel):
    """Medical record of a pet with its attachment metadata."""

    __tablename__ = "medical_records"

    def __init__(self, **kwargs: Any) -> None:
        """Initialize MedicalRecord with default values."""
        if "record_type" not in kwargs:
            kwargs["record_type"] = MedicalRecordType.OTHER
        if "record_date" not in kwargs:
            kwargs["record_date"] = get_current_utc()
        if "attachments" not in kwargs:
            kwargs["attachments"] = []
        super().__init__(**kwargs)

    pet_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("pets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="UUID of the pet this record belongs to",
    )

    record_type: Mapped[MedicalRecordType] = mapped_column(
        enum_type(MedicalRecordType),
        nullable=False,
        default=MedicalRecordType.OTHER,
        comment="Kind of medical record",
    )

    record_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=get_current_utc,
        comment="Date of the medical event",
    )

    veterinarian_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Veterinarian responsible for the record",
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True, comment="Free-text clinical notes"
    )

    attachments: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSONType,
        nullable=False,
        default=list,
        comment="Attachment metadata: filename, file_url, file_type",
    )

    __table_args__ = (Index("idx_medical_records_pet_date", "pet_id", "record_date"),)

    pet = relationship("Pet", lazy="raise")
    veterinarian = relationship("User", lazy="raise")

    def __repr__(self) -> str:
        """String representation of the MedicalRecord model."""
        return (
            f"<MedicalRecord(id={self.id}, pet_id={self.pet_id}, "
            f"type='{self.record_type.value}')>"
        )

    @property
    def attachment_count(self) -> int:
        """Number of attached files."""
        return len(self.attachments or [])

    def replace_attachments(self, attachments: List[Dict[str, Any]]) -> None:
        """Replace the attachment list; an empty list leaves it unchanged."""
        if attachments:
            self.attachments = [dict(item) for item in attachments]
