#!/usr/bin/env python3
"""
Grant, revoke and inspect veterinarian access from the command line.

Operator tooling for support and seeding: grants are created on behalf of
the pet's owner, so the usual owner, role and uniqueness rules still apply.

Examples:
    grant_vet_access.py grant --vet-email vet@example.com --pet-id <uuid> \\
        --access-level write --allow add_medical_records --allow edit_medical_records
    grant_vet_access.py revoke --grant-id <uuid>
    grant_vet_access.py list --vet-email vet@example.com
"""

import argparse
import asyncio
import json
import logging
import sys
import uuid
from typing import List, Optional

from sqlalchemy import select

from vet_access.access import GrantStore
from vet_access.database import close_engine, create_engine, initialize_session_manager
from vet_access.exceptions import (
    VetAccessException,
    create_error_response,
    log_exception_context,
)
from vet_access.models import AccessLevel, GrantPermissions, Pet, User, UserRole
from vet_access.utils.config import EnvironmentConfig, LoggingConfigurator


def build_permissions(allowed: Optional[List[str]], deny_defaults: bool) -> GrantPermissions:
    """Permissions from ``--allow`` flags, on top of the defaults unless denied."""
    base = GrantPermissions.none() if deny_defaults else GrantPermissions()
    values = base.to_dict()
    for name in allowed or []:
        values[name] = True
    return GrantPermissions.from_mapping(values)


async def find_veterinarian(session, email: str) -> User:
    result = await session.execute(
        select(User).where(User.email == email, User.create_query_filter_active())
    )
    vet = result.scalars().first()
    if vet is None:
        raise SystemExit(f"❌ No user with email {email}")
    if vet.role is not UserRole.VETERINARIAN:
        raise SystemExit(f"❌ {email} is not a veterinarian")
    return vet


async def grant(session_manager, args: argparse.Namespace) -> None:
    store = GrantStore()
    async with session_manager.get_transaction() as session:
        vet = await find_veterinarian(session, args.vet_email)
        pet = await session.get(Pet, args.pet_id)
        if pet is None or pet.is_deleted:
            raise SystemExit(f"❌ Pet {args.pet_id} not found")

        access = await store.create_grant(
            session,
            pet_id=pet.id,
            veterinarian_id=vet.id,
            granted_by_id=pet.owner_id,
            access_level=AccessLevel(args.access_level),
            permissions=build_permissions(args.allow, args.no_defaults),
            notes=args.notes,
        )
        print(f"✅ Granted {vet.display_name} access to {pet.name} (grant {access.id})")


async def revoke(session_manager, args: argparse.Namespace) -> None:
    store = GrantStore()
    async with session_manager.get_transaction() as session:
        access = await store.get_grant(session, args.grant_id)
        if access is None:
            raise SystemExit(f"❌ Grant {args.grant_id} not found")
        await store.revoke_grant(session, access.id, access.granted_by_id)
        print(f"✅ Revoked grant {access.id}")


async def list_grants(session_manager, args: argparse.Namespace) -> None:
    store = GrantStore()
    async with session_manager.get_session() as session:
        vet = await find_veterinarian(session, args.vet_email)
        grants = await store.list_active_grants_for_veterinarian(session, vet.id)
        if not grants:
            print(f"{vet.display_name} has no active grants")
            return
        for access in grants:
            enabled = [
                name for name, value in access.permissions.to_dict().items() if value
            ]
            print(
                f"{access.id}  {access.pet.name:<20} {access.access_level.value:<6} "
                f"{', '.join(enabled)}"
            )


async def run(args: argparse.Namespace) -> None:
    engine = create_engine(args.database_url)
    session_manager = initialize_session_manager(engine)
    try:
        if args.command == "grant":
            await grant(session_manager, args)
        elif args.command == "revoke":
            await revoke(session_manager, args)
        elif args.command == "list":
            await list_grants(session_manager, args)
    finally:
        await close_engine(engine)


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="Manage veterinarian pet access")
    parser.add_argument(
        "--database-url",
        default=EnvironmentConfig.get_str("DATABASE_URL"),
        help="Database URL (defaults to $DATABASE_URL)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    grant_parser = subparsers.add_parser("grant", help="Grant a veterinarian access to a pet")
    grant_parser.add_argument("--vet-email", required=True, help="Veterinarian's email")
    grant_parser.add_argument("--pet-id", required=True, type=uuid.UUID, help="Pet UUID")
    grant_parser.add_argument(
        "--access-level",
        choices=[level.value for level in AccessLevel],
        default=AccessLevel.READ.value,
        help="Informational access tier",
    )
    grant_parser.add_argument(
        "--allow",
        action="append",
        choices=GrantPermissions.field_names(),
        help="Permission to switch on (repeatable)",
    )
    grant_parser.add_argument(
        "--no-defaults",
        action="store_true",
        help="Start from no permissions instead of the defaults",
    )
    grant_parser.add_argument("--notes", help="Free-text notes")

    revoke_parser = subparsers.add_parser("revoke", help="Revoke a grant as its grantor")
    revoke_parser.add_argument("--grant-id", required=True, type=uuid.UUID, help="Grant UUID")

    list_parser = subparsers.add_parser("list", help="List a veterinarian's active grants")
    list_parser.add_argument("--vet-email", required=True, help="Veterinarian's email")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    if not args.database_url:
        parser.error("--database-url or DATABASE_URL is required")

    LoggingConfigurator.configure_basic_logging(
        level="DEBUG" if args.verbose else "INFO"
    )

    try:
        asyncio.run(run(args))
    except VetAccessException as e:
        log_exception_context(e, {"command": args.command}, level=logging.DEBUG)
        response = create_error_response(e, include_debug=args.verbose)
        print(f"❌ {e.message} ({response['error']['code']}, HTTP {response['status']})")
        if args.verbose:
            print(json.dumps(response, indent=2, default=str))
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n❌ Operation cancelled by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
