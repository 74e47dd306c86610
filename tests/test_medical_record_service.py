"""
Tests for MedicalRecordService.
"""

import uuid
from datetime import datetime

import pytest

from vet_access.access import GrantStore
from vet_access.exceptions import (
    AccessDeniedException,
    BusinessRuleException,
    MedicalRecordNotFoundException,
    PetNotFoundException,
)
from vet_access.models import GrantPermissions, MedicalRecordType
from vet_access.schemas import AttachmentSchema, MedicalRecordCreate, MedicalRecordUpdate
from vet_access.services import MedicalRecordService

from .conftest import GrantFactory, MedicalRecordFactory, principal_for

XRAY = AttachmentSchema(
    filename="xray.png", file_url="https://files.example.com/xray.png", file_type="image/png"
)
LAB_REPORT = AttachmentSchema(
    filename="labs.pdf", file_url="https://files.example.com/labs.pdf", file_type="application/pdf"
)

WRITE_PERMISSIONS = GrantPermissions.from_mapping(
    {
        "view_medical_history": True,
        "add_medical_records": True,
        "edit_medical_records": True,
    }
)


@pytest.fixture
def service():
    return MedicalRecordService()


class TestListRecords:
    @pytest.mark.asyncio
    async def test_owner_lists_newest_first(self, async_session, service, pet, owner):
        await MedicalRecordFactory.create(async_session, pet, record_date=datetime(2023, 3, 1))
        await MedicalRecordFactory.create(async_session, pet, record_date=datetime(2024, 3, 1))
        deleted = await MedicalRecordFactory.create(async_session, pet)
        deleted.soft_delete(owner.id)
        await async_session.flush()

        records = await service.list_records(async_session, principal_for(owner), pet.id)

        assert len(records) == 2
        assert records[0].record_date.year == 2024

    @pytest.mark.asyncio
    async def test_vet_with_default_grant_can_list(self, async_session, service, pet, vet_a):
        await MedicalRecordFactory.create(async_session, pet)
        await GrantFactory.create(async_session, pet, vet_a)

        records = await service.list_records(async_session, principal_for(vet_a), pet.id)

        assert len(records) == 1

    @pytest.mark.asyncio
    async def test_vet_without_view_permission(self, async_session, service, pet, vet_a):
        await GrantFactory.create(async_session, pet, vet_a, GrantPermissions.none())

        with pytest.raises(AccessDeniedException):
            await service.list_records(async_session, principal_for(vet_a), pet.id)

    @pytest.mark.asyncio
    async def test_admin_cannot_list(self, async_session, service, pet, admin):
        with pytest.raises(AccessDeniedException):
            await service.list_records(async_session, principal_for(admin), pet.id)

    @pytest.mark.asyncio
    async def test_unknown_pet(self, async_session, service, owner):
        with pytest.raises(PetNotFoundException):
            await service.list_records(async_session, principal_for(owner), uuid.uuid4())


class TestCreateRecord:
    @pytest.mark.asyncio
    async def test_vet_creates_record_and_is_attributed(self, async_session, service, pet, vet_a):
        await GrantFactory.create(async_session, pet, vet_a, WRITE_PERMISSIONS)
        data = MedicalRecordCreate(
            record_type=MedicalRecordType.VACCINATION,
            notes="Rabies booster",
            attachments=[LAB_REPORT],
        )

        record = await service.create_record(async_session, principal_for(vet_a), pet.id, data)

        assert record.pet_id == pet.id
        assert record.veterinarian_id == vet_a.id
        assert record.created_by == vet_a.id
        assert record.attachments == [
            {
                "filename": "labs.pdf",
                "file_url": "https://files.example.com/labs.pdf",
                "file_type": "application/pdf",
            }
        ]

    @pytest.mark.asyncio
    async def test_owner_names_attending_vet(self, async_session, service, pet, owner, vet_a):
        data = MedicalRecordCreate(veterinarian_id=vet_a.id, attachments=[XRAY])

        record = await service.create_record(async_session, principal_for(owner), pet.id, data)

        assert record.veterinarian_id == vet_a.id
        assert record.record_type == MedicalRecordType.OTHER

    @pytest.mark.asyncio
    async def test_attachment_required(self, async_session, service, pet, owner):
        with pytest.raises(BusinessRuleException) as exc_info:
            await service.create_record(
                async_session, principal_for(owner), pet.id, MedicalRecordCreate()
            )

        assert exc_info.value.details["rule_name"] == "attachment_required"

    @pytest.mark.asyncio
    async def test_authorization_precedes_validation(self, async_session, service, pet, vet_b):
        with pytest.raises(AccessDeniedException):
            await service.create_record(
                async_session, principal_for(vet_b), pet.id, MedicalRecordCreate()
            )

    @pytest.mark.asyncio
    async def test_read_only_vet_cannot_create(self, async_session, service, pet, vet_a):
        await GrantFactory.create(async_session, pet, vet_a)

        with pytest.raises(AccessDeniedException):
            await service.create_record(
                async_session,
                principal_for(vet_a),
                pet.id,
                MedicalRecordCreate(attachments=[XRAY]),
            )


class TestUpdateRecord:
    @pytest.mark.asyncio
    async def test_owner_updates_notes(self, async_session, service, pet, owner):
        record = await MedicalRecordFactory.create(async_session, pet)

        updated = await service.update_record(
            async_session, principal_for(owner), record.id, MedicalRecordUpdate(notes="Revised")
        )

        assert updated.notes == "Revised"
        assert updated.attachment_count == 1

    @pytest.mark.asyncio
    async def test_update_gated_on_edit_permission_only(self, async_session, service, pet, vet_a):
        record = await MedicalRecordFactory.create(async_session, pet)
        await GrantFactory.create(
            async_session,
            pet,
            vet_a,
            GrantPermissions.from_mapping({"edit_medical_records": True}),
        )

        updated = await service.update_record(
            async_session, principal_for(vet_a), record.id, MedicalRecordUpdate(notes="Vet edit")
        )

        assert updated.notes == "Vet edit"
        assert updated.veterinarian_id == vet_a.id

    @pytest.mark.asyncio
    async def test_add_permission_does_not_allow_update(self, async_session, service, pet, vet_a):
        record = await MedicalRecordFactory.create(async_session, pet)
        await GrantFactory.create(
            async_session,
            pet,
            vet_a,
            GrantPermissions.from_mapping({"add_medical_records": True}),
        )

        with pytest.raises(AccessDeniedException):
            await service.update_record(
                async_session, principal_for(vet_a), record.id, MedicalRecordUpdate(notes="x")
            )

    @pytest.mark.asyncio
    async def test_empty_attachment_list_keeps_existing(self, async_session, service, pet, owner):
        record = await MedicalRecordFactory.create(async_session, pet)

        updated = await service.update_record(
            async_session,
            principal_for(owner),
            record.id,
            MedicalRecordUpdate(attachments=[]),
        )

        assert updated.attachments[0]["filename"] == "checkup.pdf"

    @pytest.mark.asyncio
    async def test_attachments_replaced(self, async_session, service, pet, owner):
        record = await MedicalRecordFactory.create(async_session, pet)

        updated = await service.update_record(
            async_session,
            principal_for(owner),
            record.id,
            MedicalRecordUpdate(attachments=[XRAY, LAB_REPORT]),
        )

        assert [a["filename"] for a in updated.attachments] == ["xray.png", "labs.pdf"]

    @pytest.mark.asyncio
    async def test_unknown_record(self, async_session, service, owner):
        with pytest.raises(MedicalRecordNotFoundException):
            await service.update_record(
                async_session, principal_for(owner), uuid.uuid4(), MedicalRecordUpdate(notes="x")
            )


class TestDeleteRecord:
    @pytest.mark.asyncio
    async def test_vet_needs_delete_permission(self, async_session, service, pet, vet_a):
        record = await MedicalRecordFactory.create(async_session, pet)
        await GrantFactory.create(async_session, pet, vet_a, WRITE_PERMISSIONS)

        with pytest.raises(AccessDeniedException):
            await service.delete_record(async_session, principal_for(vet_a), record.id)

    @pytest.mark.asyncio
    async def test_vet_with_delete_permission(self, async_session, service, pet, vet_a):
        record = await MedicalRecordFactory.create(async_session, pet)
        await GrantFactory.create(
            async_session,
            pet,
            vet_a,
            GrantPermissions.from_mapping({"delete_medical_records": True}),
        )

        await service.delete_record(async_session, principal_for(vet_a), record.id)

        assert record.is_deleted is True
        with pytest.raises(MedicalRecordNotFoundException):
            await service.get_record(async_session, record.id)

    @pytest.mark.asyncio
    async def test_record_authorship_grants_nothing(self, async_session, service, pet, owner, vet_a):
        """A vet who wrote a record loses access to it once the grant is revoked."""
        grant = await GrantFactory.create(async_session, pet, vet_a, GrantPermissions.all())
        record = await service.create_record(
            async_session,
            principal_for(vet_a),
            pet.id,
            MedicalRecordCreate(attachments=[XRAY]),
        )

        await GrantStore().revoke_grant(async_session, grant.id, owner.id)

        with pytest.raises(AccessDeniedException):
            await service.delete_record(async_session, principal_for(vet_a), record.id)
