"""
Vet Access Package

Delegated, revocable, per-pet access control for a veterinary record-sharing
platform. Pet owners register pets and medical records; veterinarians receive
time-stamped permission grants scoped to a single pet, and every record
operation passes an authorization check against those grants.

This package includes:

- SQLAlchemy models for users, pets, medical records and access grants
- The access-control core: principals, grant store and authorization engine
- Resource services that authorize before every read or mutation
- Pydantic schemas for request/response validation and serialization
- Async database utilities and an Alembic migration

Quick Start:
    >>> from vet_access import PetAction, Principal, authorize, get_transaction
    >>> async with get_transaction() as session:
    ...     decision = await authorize(
    ...         session, principal, PetAction.VIEW_MEDICAL_RECORDS, pet_id
    ...     )
    ...     decision.raise_for_denial()

Requirements:
    - Python 3.11+
    - PostgreSQL 13+
    - SQLAlchemy 2.0+
    - Pydantic 2.5+
"""

__version__ = "0.1.0"
__author__ = "Vet Clinic Platform Team"
__email__ = "dev@vetclinic.com"
__license__ = "MIT"

from . import access, database, exceptions, models, schemas, services, utils

# Convenience imports for common usage patterns
from .access import (
    AccessDecision,
    AuthorizationEngine,
    DenialReason,
    GrantStore,
    PetAction,
    Principal,
    PrincipalResolver,
    authorize,
    create_grant,
    find_active_grant,
    list_active_grants_for_veterinarian,
    list_active_grants_granted_by,
    revoke_grant,
)
from .database import create_engine, get_session, get_transaction
from .exceptions import VetAccessException, create_error_response
from .models import GrantPermissions, MedicalRecord, Pet, PetAccess, User, UserRole
from .services import MedicalRecordService, PetService, SharingService

__all__ = [
    # Version and metadata
    "__version__",
    "__author__",
    "__email__",
    "__license__",
    # Core modules
    "access",
    "database",
    "exceptions",
    "models",
    "schemas",
    "services",
    "utils",
    # Access control
    "Principal",
    "PrincipalResolver",
    "PetAction",
    "AccessDecision",
    "DenialReason",
    "AuthorizationEngine",
    "GrantStore",
    "authorize",
    "create_grant",
    "revoke_grant",
    "find_active_grant",
    "list_active_grants_for_veterinarian",
    "list_active_grants_granted_by",
    # Services
    "PetService",
    "MedicalRecordService",
    "SharingService",
    # Convenience imports
    "get_session",
    "get_transaction",
    "create_engine",
    "VetAccessException",
    "create_error_response",
    "User",
    "UserRole",
    "Pet",
    "MedicalRecord",
    "PetAccess",
    "GrantPermissions",
]
