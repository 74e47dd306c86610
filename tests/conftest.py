"""
Pytest configuration and fixtures for vet-access tests.

This module provides common fixtures and configuration for all tests
in the vet-access package, including database setup, factory classes,
and principal helpers.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from vet_access.access import GrantStore, Principal, PrincipalResolver
from vet_access.database.connection import create_engine
from vet_access.database.session import SessionManager
from vet_access.models import (
    AccessLevel,
    GrantPermissions,
    MedicalRecord,
    MedicalRecordType,
    Pet,
    PetAccess,
    PetGender,
    PetSpecies,
    User,
    UserRole,
)
from vet_access.models.base import Base
from vet_access.utils.config import AccessControlConfig, set_access_config


@pytest.fixture(autouse=True)
def access_config():
    """
    Pin the access-control configuration to its defaults for every test so
    that VET_ACCESS_* variables in the environment cannot leak in.
    """
    config = AccessControlConfig()
    set_access_config(config)
    yield config
    set_access_config(None)


@pytest_asyncio.fixture
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """
    Create a SQLite database file per test with the full schema.

    A file (rather than :memory:) keeps the schema visible to every
    connection the NullPool hands out.
    """
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'vet_access_test.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session_manager(test_engine: AsyncEngine) -> SessionManager:
    """Create a session manager for testing."""
    return SessionManager(test_engine)


@pytest_asyncio.fixture
async def async_session(
    test_session_manager: SessionManager,
) -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session; the database is discarded after the test."""
    async with test_session_manager.get_session() as session:
        yield session


def principal_for(user: User) -> Principal:
    """Build the principal for a stored user."""
    return PrincipalResolver.from_user(user)


# Factory classes for creating test entities
class UserFactory:
    """Factory for creating test User instances."""

    @staticmethod
    def build(**kwargs) -> User:
        """Build an owner with a complete profile without saving to database."""
        defaults = {
            "email": f"test_{uuid.uuid4().hex[:8]}@example.com",
            "first_name": "Test",
            "last_name": "Owner",
            "role": UserRole.OWNER,
            "phone_number": "+1234567890",
        }
        defaults.update(kwargs)
        return User(**defaults)

    @staticmethod
    async def create(session: AsyncSession, **kwargs) -> User:
        """Create and save a User instance to the database."""
        user = UserFactory.build(**kwargs)
        session.add(user)
        await session.flush()
        return user

    @staticmethod
    def build_veterinarian(**kwargs) -> User:
        """Build a User instance with veterinarian role and complete profile."""
        defaults = {
            "role": UserRole.VETERINARIAN,
            "first_name": "Dr. Test",
            "last_name": "Veterinarian",
            "clinic_name": "Test Animal Clinic",
            "license_number": f"VET{uuid.uuid4().hex[:8].upper()}",
            "specialization": "General Practice",
        }
        defaults.update(kwargs)
        return UserFactory.build(**defaults)

    @staticmethod
    async def create_veterinarian(session: AsyncSession, **kwargs) -> User:
        """Create and save a veterinarian User instance."""
        user = UserFactory.build_veterinarian(**kwargs)
        session.add(user)
        await session.flush()
        return user

    @staticmethod
    async def create_admin(session: AsyncSession, **kwargs) -> User:
        """Create and save a User instance with admin role."""
        defaults = {"role": UserRole.ADMIN, "first_name": "Admin", "last_name": "User"}
        defaults.update(kwargs)
        return await UserFactory.create(session, **defaults)


class PetFactory:
    """Factory for creating test Pet instances."""

    @staticmethod
    def build(owner_id: Optional[uuid.UUID] = None, **kwargs) -> Pet:
        """Build a Pet instance without saving to database."""
        if owner_id is None:
            owner_id = uuid.uuid4()

        defaults = {
            "owner_id": owner_id,
            "name": f"TestPet_{uuid.uuid4().hex[:8]}",
            "species": PetSpecies.DOG,
            "breed": "Golden Retriever",
            "gender": PetGender.MALE,
            "birth_date": date(2020, 1, 1),
            "weight_kg": Decimal("25.5"),
        }
        defaults.update(kwargs)
        return Pet(**defaults)

    @staticmethod
    async def create(
        session: AsyncSession, owner: Optional[User] = None, **kwargs
    ) -> Pet:
        """Create and save a Pet instance to the database."""
        if owner is None:
            owner = await UserFactory.create(session)

        pet = PetFactory.build(owner_id=owner.id, **kwargs)
        session.add(pet)
        await session.flush()
        return pet


class GrantFactory:
    """Factory for creating grants through the grant store."""

    @staticmethod
    async def create(
        session: AsyncSession,
        pet: Pet,
        veterinarian: User,
        permissions: Optional[GrantPermissions] = None,
        access_level: AccessLevel = AccessLevel.READ,
        **kwargs,
    ) -> PetAccess:
        """Create an active grant from the pet's owner to ``veterinarian``."""
        return await GrantStore().create_grant(
            session,
            pet_id=pet.id,
            veterinarian_id=veterinarian.id,
            granted_by_id=pet.owner_id,
            access_level=access_level,
            permissions=permissions,
            **kwargs,
        )


class MedicalRecordFactory:
    """Factory for creating test MedicalRecord instances."""

    @staticmethod
    async def create(session: AsyncSession, pet: Pet, **kwargs) -> MedicalRecord:
        """Create and save a MedicalRecord instance to the database."""
        defaults = {
            "pet_id": pet.id,
            "record_type": MedicalRecordType.CHECKUP,
            "record_date": datetime(2024, 1, 15, 10, 0),
            "notes": "Annual wellness exam",
            "attachments": [
                {
                    "filename": "checkup.pdf",
                    "file_url": "https://files.example.com/checkup.pdf",
                    "file_type": "application/pdf",
                }
            ],
            "created_by": pet.owner_id,
        }
        defaults.update(kwargs)
        record = MedicalRecord(**defaults)
        session.add(record)
        await session.flush()
        return record


# Convenience fixtures for common scenarios
@pytest_asyncio.fixture
async def owner(async_session: AsyncSession) -> User:
    """Pet owner with a complete profile."""
    return await UserFactory.create(async_session, first_name="Olivia")


@pytest_asyncio.fixture
async def other_owner(async_session: AsyncSession) -> User:
    """A second, unrelated pet owner."""
    return await UserFactory.create(async_session, first_name="Oscar")


@pytest_asyncio.fixture
async def vet_a(async_session: AsyncSession) -> User:
    return await UserFactory.create_veterinarian(async_session, last_name="Alvarez")


@pytest_asyncio.fixture
async def vet_b(async_session: AsyncSession) -> User:
    return await UserFactory.create_veterinarian(async_session, last_name="Brooks")


@pytest_asyncio.fixture
async def admin(async_session: AsyncSession) -> User:
    return await UserFactory.create_admin(async_session)


@pytest_asyncio.fixture
async def pet(async_session: AsyncSession, owner: User) -> Pet:
    """Max the dog, owned by ``owner``."""
    return await PetFactory.create(async_session, owner=owner, name="Max")


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: tests that exercise the database through SQLite"
    )
