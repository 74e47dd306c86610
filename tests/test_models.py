"""
Tests for the SQLAlchemy models.

Covers role handling on users, the pet and medical record helpers, and the
permission value carried by access grants.
"""

import uuid
from datetime import date

import pytest
from sqlalchemy import text

from vet_access.exceptions import BusinessRuleException
from vet_access.models import (
    AccessLevel,
    GrantPermissions,
    MedicalRecord,
    MedicalRecordType,
    Pet,
    PetAccess,
    PetGender,
    User,
    UserRole,
)

from .conftest import PetFactory, UserFactory


class TestUserModel:
    """Test cases for the User model."""

    def test_user_defaults_to_owner(self):
        user = User(email="owner@example.com", first_name="Jane", last_name="Doe")

        assert user.role is UserRole.OWNER
        assert user.is_owner()
        assert user.full_name == "Jane Doe"

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("pet_owner", UserRole.OWNER),
            ("OWNER", UserRole.OWNER),
            ("vet", UserRole.VETERINARIAN),
            ("veterinarian", UserRole.VETERINARIAN),
            (" admin ", UserRole.ADMIN),
        ],
    )
    def test_role_aliases(self, raw, expected):
        assert UserRole.from_string(raw) is expected
        assert User(email="a@example.com", first_name="A", last_name="B", role=raw).role is expected

    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError):
            User(email="a@example.com", first_name="A", last_name="B", role="clinic_admin")

    def test_role_is_immutable(self):
        user = UserFactory.build()

        with pytest.raises(BusinessRuleException) as exc_info:
            user.role = UserRole.VETERINARIAN

        assert exc_info.value.details["rule_name"] == "immutable_role"
        assert user.role is UserRole.OWNER

    def test_reassigning_same_role_is_allowed(self):
        user = UserFactory.build_veterinarian()

        user.role = "vet"

        assert user.role is UserRole.VETERINARIAN

    @pytest.mark.asyncio
    async def test_role_is_immutable_after_load(self, async_session, vet_a):
        async_session.expunge(vet_a)
        loaded = await async_session.get(User, vet_a.id)

        with pytest.raises(BusinessRuleException):
            loaded.role = UserRole.ADMIN

    def test_missing_profile_fields_for_owner(self):
        user = UserFactory.build(phone_number=None)

        assert user.missing_profile_fields() == ["phone_number"]
        assert user.has_complete_profile is False

    def test_missing_profile_fields_for_veterinarian(self):
        user = UserFactory.build_veterinarian(clinic_name=None, license_number="")

        assert user.missing_profile_fields() == ["clinic_name", "license_number"]

    def test_complete_veterinarian_profile(self):
        assert UserFactory.build_veterinarian().has_complete_profile is True


class TestPetModel:
    """Test cases for the Pet model."""

    def test_pet_defaults(self):
        pet = Pet(owner_id=uuid.uuid4(), name="Max", species="dog")

        assert pet.gender is PetGender.UNKNOWN
        assert pet.allergies == []
        assert pet.chronic_conditions == []
        assert pet.age_in_years is None

    def test_age_in_years(self):
        pet = PetFactory.build(birth_date=date(date.today().year - 3, 1, 1))

        assert pet.age_in_years == 3

    def test_is_owned_by(self):
        owner_id = uuid.uuid4()
        pet = PetFactory.build(owner_id=owner_id)

        assert pet.is_owned_by(owner_id)
        assert not pet.is_owned_by(uuid.uuid4())

    def test_soft_delete(self):
        actor = uuid.uuid4()
        pet = PetFactory.build()

        pet.soft_delete(actor)

        assert pet.is_deleted is True
        assert pet.deleted_at is not None
        assert pet.updated_by == actor
        assert pet.to_dict() == {}

    def test_to_dict_serializes_values(self):
        pet = PetFactory.build(name="Max")
        pet.is_deleted = False

        data = pet.to_dict()

        assert data["name"] == "Max"
        assert data["species"] == "dog"
        assert data["owner_id"] == str(pet.owner_id)

    def test_update_fields_rejects_unknown(self):
        pet = PetFactory.build()

        with pytest.raises(AttributeError):
            pet.update_fields(nickname="Maxi")

    @pytest.mark.asyncio
    async def test_enum_values_are_stored(self, async_session, pet):
        result = await async_session.execute(text("SELECT species FROM pets"))

        assert result.scalar_one() == "dog"


class TestMedicalRecordModel:
    def test_defaults(self):
        record = MedicalRecord(pet_id=uuid.uuid4())

        assert record.record_type is MedicalRecordType.OTHER
        assert record.attachments == []
        assert record.record_date is not None
        assert record.attachment_count == 0

    def test_replace_attachments_ignores_empty(self):
        record = MedicalRecord(
            pet_id=uuid.uuid4(),
            attachments=[{"filename": "a.pdf", "file_url": "u", "file_type": "application/pdf"}],
        )

        record.replace_attachments([])

        assert record.attachment_count == 1

        record.replace_attachments(
            [{"filename": "b.png", "file_url": "v", "file_type": "image/png"}]
        )
        assert record.attachments[0]["filename"] == "b.png"


class TestGrantPermissions:
    """Test cases for the GrantPermissions value."""

    def test_defaults(self):
        permissions = GrantPermissions()

        assert permissions.view_medical_history is True
        assert permissions.view_owner_info is True
        assert [
            name for name in GrantPermissions.field_names() if getattr(permissions, name)
        ] == ["view_medical_history", "view_owner_info"]

    def test_none_and_all(self):
        assert not any(GrantPermissions.none().to_dict().values())
        assert all(GrantPermissions.all().to_dict().values())

    def test_from_mapping_unset_flags_are_off(self):
        permissions = GrantPermissions.from_mapping({"add_prescriptions": True})

        assert permissions.add_prescriptions is True
        assert permissions.view_medical_history is False

    def test_from_mapping_rejects_unknown(self):
        with pytest.raises(ValueError):
            GrantPermissions.from_mapping({"prescribe_anything": True})

    def test_allows_rejects_unknown(self):
        with pytest.raises(ValueError):
            GrantPermissions().allows("fly")

    def test_value_is_immutable(self):
        with pytest.raises(AttributeError):
            GrantPermissions().add_medical_records = True


class TestPetAccessModel:
    """Test cases for the PetAccess model."""

    def _grant(self, **kwargs):
        defaults = {
            "pet_id": uuid.uuid4(),
            "veterinarian_id": uuid.uuid4(),
            "granted_by_id": uuid.uuid4(),
        }
        defaults.update(kwargs)
        return PetAccess(**defaults)

    def test_defaults(self):
        grant = self._grant()

        assert grant.access_level is AccessLevel.READ
        assert grant.is_revoked is False
        assert grant.is_active is True
        assert grant.granted_at is not None
        assert grant.permissions == GrantPermissions()

    def test_permissions_expand_to_columns(self):
        grant = self._grant(permissions=GrantPermissions.from_mapping({"edit_pet_info": True}))

        assert grant.edit_pet_info is True
        assert grant.view_medical_history is False
        assert grant.has_permission("edit_pet_info")

    def test_revoked_grant_allows_nothing(self):
        grant = self._grant(permissions=GrantPermissions.all())
        actor = uuid.uuid4()

        grant.mark_revoked(actor)

        assert grant.revoked_by_id == actor
        assert not any(grant.has_permission(name) for name in GrantPermissions.field_names())

    def test_mark_revoked_twice(self):
        grant = self._grant()
        grant.mark_revoked(uuid.uuid4())

        with pytest.raises(ValueError):
            grant.mark_revoked(uuid.uuid4())

    def test_partial_unique_index_declared(self):
        index = next(
            i for i in PetAccess.__table__.indexes if i.name == "uq_pet_access_active_pair"
        )

        assert index.unique is True
        assert [c.name for c in index.columns] == ["pet_id", "veterinarian_id"]
