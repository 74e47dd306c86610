#!/usr/bin/env python3
"""
Basic usage examples for the vet-access package.

Walks through the owner/veterinarian sharing workflow: registering users and
a pet, granting a veterinarian access, filing records through the
authorization engine, and revoking access again.

Runs against SQLite by default; set DATABASE_URL to use PostgreSQL.
"""

import asyncio
import os
from datetime import date

from vet_access import (
    MedicalRecordService,
    PetAction,
    PetService,
    Principal,
    SharingService,
    User,
    UserRole,
    VetAccessException,
    authorize,
    create_engine,
    create_error_response,
)
from vet_access.database import initialize_session_manager
from vet_access.models import Base, PetSpecies, PetGender
from vet_access.schemas import (
    MedicalRecordCreate,
    PetAccessResponse,
    PetCreate,
    parse_grant_request,
)


async def setup_database():
    """Set up database connection and schema for examples."""
    database_url = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///vet_access_example.db")
    engine = create_engine(database_url, echo=False)
    session_manager = initialize_session_manager(engine)
    await session_manager.initialize_database(Base.metadata)
    return session_manager


async def create_users(session_manager):
    """Example: Registering an owner and two veterinarians."""
    print("\n=== Creating Users Example ===")

    async with session_manager.get_transaction() as session:
        owner = User(
            email="olivia@example.com",
            first_name="Olivia",
            last_name="Owner",
            phone_number="+1-555-0100",
            role=UserRole.OWNER,
        )
        vet_a = User(
            email="vet.a@example.com",
            first_name="Alex",
            last_name="Alvarez",
            phone_number="+1-555-0101",
            role="vet",  # legacy spelling, normalised to veterinarian
            clinic_name="Downtown Animal Clinic",
            license_number="VET-1001",
            specialization="General practice",
        )
        vet_b = User(
            email="vet.b@example.com",
            first_name="Blair",
            last_name="Brooks",
            phone_number="+1-555-0102",
            role=UserRole.VETERINARIAN,
            clinic_name="Uptown Pet Hospital",
            license_number="VET-1002",
            specialization="Surgery",
        )
        session.add_all([owner, vet_a, vet_b])
        await session.flush()
        print(f"✓ Created {owner.full_name} ({owner.role.value})")
        print(f"✓ Created {vet_a.full_name} ({vet_a.role.value})")
        print(f"✓ Created {vet_b.full_name} ({vet_b.role.value})")

    return (
        Principal.of(owner.id, owner.role),
        Principal.of(vet_a.id, vet_a.role),
        Principal.of(vet_b.id, vet_b.role),
    )


async def sharing_workflow_example(session_manager, owner, vet_a, vet_b):
    """Example: Granting, using and revoking veterinarian access."""
    print("\n=== Sharing Workflow Example ===")

    pets = PetService()
    records = MedicalRecordService()
    sharing = SharingService()

    async with session_manager.get_transaction() as session:
        max_pet = await pets.create_pet(
            session,
            owner,
            PetCreate(
                name="Max",
                species=PetSpecies.DOG,
                breed="Beagle",
                birth_date=date(2020, 5, 1),
                gender=PetGender.MALE,
            ),
        )
        print(f"✓ Registered pet {max_pet.name}")

        request = parse_grant_request(
            {
                "petId": str(max_pet.id),
                "veterinarianId": str(vet_a.id),
                "accessLevel": "write",
                "permissions": {
                    "viewMedicalHistory": True,
                    "addMedicalRecords": True,
                    "editMedicalRecords": True,
                    "deleteMedicalRecords": False,
                    "addPrescriptions": True,
                    "scheduleAppointments": True,
                },
            }
        )
        grant = await sharing.grant_access(session, owner, request)
        print(f"✓ Granted access: {PetAccessResponse.from_grant(grant).model_dump_json(by_alias=True)}")

        record = await records.create_record(
            session,
            vet_a,
            max_pet.id,
            MedicalRecordCreate.model_validate(
                {
                    "recordType": "checkup",
                    "notes": "Annual wellness exam",
                    "attachments": [
                        {
                            "filename": "checkup.pdf",
                            "fileUrl": "https://files.example.com/checkup.pdf",
                            "fileType": "application/pdf",
                        }
                    ],
                }
            ),
        )
        print(f"✓ Vet A filed record {record.id}")

        decision = await authorize(session, vet_a, PetAction.DELETE_MEDICAL_RECORD, max_pet.id)
        print(f"✓ Vet A may delete records: {decision.allowed} ({decision.reason.value})")

        try:
            await sharing.revoke_access(session, vet_b, grant.id)
        except VetAccessException as e:
            print(f"✓ Vet B cannot revoke: {create_error_response(e)['error']['code']}")

        await sharing.revoke_access(session, owner, grant.id)
        decision = await authorize(session, vet_a, PetAction.CREATE_MEDICAL_RECORD, max_pet.id)
        print(f"✓ After revocation Vet A may add records: {decision.allowed}")


async def main():
    """Run all examples."""
    print("Vet Access Package - Basic Usage Examples")
    print("=" * 50)

    session_manager = await setup_database()
    try:
        owner, vet_a, vet_b = await create_users(session_manager)
        await sharing_workflow_example(session_manager, owner, vet_a, vet_b)
    finally:
        await session_manager.cleanup_database(Base.metadata, drop_all=True)

    print("\n" + "=" * 50)
    print("All examples completed successfully!")


if __name__ == "__main__":
    asyncio.run(main())
