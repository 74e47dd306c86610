"""
Medical record service.

Every operation authorizes against the record's pet before touching data.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..access.actions import PetAction
from ..access.engine import AuthorizationEngine
from ..access.principal import Principal
from ..exceptions import BusinessRuleException, MedicalRecordNotFoundException
from ..models.medical_record import MedicalRecord
from ..schemas.medical_record import MedicalRecordCreate, MedicalRecordUpdate

logger = logging.getLogger(__name__)


class MedicalRecordService:
    """List, file, edit and delete medical records of a pet."""

    def __init__(self, engine: Optional[AuthorizationEngine] = None):
        self.engine = engine or AuthorizationEngine()

    async def get_record(
        self, session: AsyncSession, record_id: uuid.UUID
    ) -> MedicalRecord:
        """
        Load an active record without authorization.

        Raises:
            MedicalRecordNotFoundException: If missing or deleted (HTTP 404)
        """
        record = await session.get(MedicalRecord, record_id)
        if record is None or record.is_deleted:
            raise MedicalRecordNotFoundException(resource_id=record_id)
        return record

    async def list_records(
        self, session: AsyncSession, principal: Principal, pet_id: uuid.UUID
    ) -> List[MedicalRecord]:
        """List a pet's records, most recent first."""
        await self.engine.require(
            session, principal, PetAction.VIEW_MEDICAL_RECORDS, pet_id
        )
        stmt = (
            select(MedicalRecord)
            .where(
                MedicalRecord.pet_id == pet_id,
                MedicalRecord.create_query_filter_active(),
            )
            .order_by(MedicalRecord.record_date.desc(), MedicalRecord.created_at.desc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def create_record(
        self,
        session: AsyncSession,
        principal: Principal,
        pet_id: uuid.UUID,
        data: MedicalRecordCreate,
    ) -> MedicalRecord:
        """
        File a record against a pet.

        A veterinarian filing a record is recorded as its veterinarian.

        Raises:
            BusinessRuleException: If no attachment is supplied (HTTP 400)
        """
        await self.engine.require(
            session, principal, PetAction.CREATE_MEDICAL_RECORD, pet_id
        )

        if not data.attachments:
            raise BusinessRuleException(
                "At least one attachment (PDF or image) is required",
                rule_name="attachment_required",
            )

        veterinarian_id = (
            principal.id if principal.is_veterinarian else data.veterinarian_id
        )
        kwargs = {}
        if data.record_date is not None:
            kwargs["record_date"] = data.record_date

        record = MedicalRecord(
            pet_id=pet_id,
            record_type=data.record_type,
            veterinarian_id=veterinarian_id,
            notes=data.notes,
            attachments=[item.to_metadata() for item in data.attachments],
            created_by=principal.id,
            updated_by=principal.id,
            **kwargs,
        )
        session.add(record)
        await session.flush()
        logger.info(
            f"Created medical record {record.id} for pet {pet_id}",
            extra={"principal_id": str(principal.id)},
        )
        return record

    async def update_record(
        self,
        session: AsyncSession,
        principal: Principal,
        record_id: uuid.UUID,
        data: MedicalRecordUpdate,
    ) -> MedicalRecord:
        """
        Update a record. Requires ``edit_medical_records`` for veterinarians.

        An empty attachment list leaves the attachments unchanged.
        """
        record = await self.get_record(session, record_id)
        await self.engine.require(
            session, principal, PetAction.UPDATE_MEDICAL_RECORD, record.pet_id
        )

        changed = data.model_fields_set
        if "record_type" in changed and data.record_type is not None:
            record.record_type = data.record_type
        if "record_date" in changed and data.record_date is not None:
            record.record_date = data.record_date
        if "notes" in changed:
            record.notes = data.notes
        if principal.is_veterinarian:
            record.veterinarian_id = principal.id
        elif "veterinarian_id" in changed:
            record.veterinarian_id = data.veterinarian_id
        if data.attachments:
            record.replace_attachments([item.to_metadata() for item in data.attachments])

        record.updated_by = principal.id
        await session.flush()
        return record

    async def delete_record(
        self, session: AsyncSession, principal: Principal, record_id: uuid.UUID
    ) -> None:
        """Soft-delete a record."""
        record = await self.get_record(session, record_id)
        await self.engine.require(
            session, principal, PetAction.DELETE_MEDICAL_RECORD, record.pet_id
        )
        record.soft_delete(principal.id)
        await session.flush()
        logger.info(f"Deleted medical record {record_id}")
