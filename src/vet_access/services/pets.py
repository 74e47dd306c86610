"""
Pet service: registration, profile access and deletion.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..access.actions import PetAction
from ..access.engine import AuthorizationEngine
from ..access.grant_store import GrantStore
from ..access.principal import Principal
from ..exceptions import (
    AccessDeniedException,
    ForbiddenException,
    PetNotFoundException,
    PrincipalNotFoundException,
    ProfileIncompleteException,
)
from ..models.medical_record import MedicalRecord
from ..models.pet import Pet
from ..models.user import User
from ..schemas.pet import PetCreate, PetUpdate
from ..utils.config import AccessControlConfig, get_access_config
from ..utils.datetime_utils import get_current_utc

logger = logging.getLogger(__name__)


class PetService:
    """Owner-facing pet operations, each gated by the authorization engine."""

    def __init__(
        self,
        engine: Optional[AuthorizationEngine] = None,
        grant_store: Optional[GrantStore] = None,
        config: Optional[AccessControlConfig] = None,
    ):
        self.grant_store = grant_store or GrantStore()
        self.engine = engine or AuthorizationEngine(self.grant_store)
        self._config = config

    @property
    def config(self) -> AccessControlConfig:
        return self._config or get_access_config()

    async def create_pet(
        self, session: AsyncSession, principal: Principal, data: PetCreate
    ) -> Pet:
        """
        Register a pet owned by ``principal``.

        Raises:
            ForbiddenException: If the principal is not a pet owner
            ProfileIncompleteException: If the owner's profile is incomplete
        """
        if not principal.is_owner:
            raise ForbiddenException("Only pet owners can register pets")

        if self.config.require_complete_profile:
            owner = await session.get(User, principal.id)
            if owner is None:
                raise PrincipalNotFoundException(resource_id=principal.id)
            missing = owner.missing_profile_fields()
            if missing:
                raise ProfileIncompleteException(
                    "Please complete your profile before adding pets",
                    missing_fields=missing,
                )

        pet = Pet(
            owner_id=principal.id,
            created_by=principal.id,
            updated_by=principal.id,
            **data.to_model_kwargs(),
        )
        session.add(pet)
        await session.flush()
        logger.info(f"Registered pet {pet.id} for owner {principal.id}")
        return pet

    async def get_pet(
        self, session: AsyncSession, principal: Principal, pet_id: uuid.UUID
    ) -> Pet:
        """Get a pet profile."""
        await self.engine.require(session, principal, PetAction.VIEW_PET_PROFILE, pet_id)
        return await session.get(Pet, pet_id)

    async def list_pets_for_owner(
        self, session: AsyncSession, principal: Principal
    ) -> List[Pet]:
        """List the principal's own pets by name."""
        stmt = (
            select(Pet)
            .where(Pet.owner_id == principal.id, Pet.create_query_filter_active())
            .order_by(Pet.name)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def update_pet(
        self,
        session: AsyncSession,
        principal: Principal,
        pet_id: uuid.UUID,
        data: PetUpdate,
    ) -> Pet:
        """Update the whitelisted profile fields of a pet."""
        await self.engine.require(session, principal, PetAction.EDIT_PET_PROFILE, pet_id)
        pet = await session.get(Pet, pet_id)
        pet.update_fields(**data.changes())
        pet.updated_by = principal.id
        await session.flush()
        return pet

    async def delete_pet(
        self, session: AsyncSession, principal: Principal, pet_id: uuid.UUID
    ) -> int:
        """
        Soft-delete a pet with its medical records and revoke every active
        grant on it. Only the owner may delete; no grant permission covers it.

        Returns:
            Number of grants revoked

        Raises:
            PetNotFoundException: If the pet does not exist (HTTP 404)
            AccessDeniedException: If the principal is not the owner (HTTP 403)
        """
        pet = await session.get(Pet, pet_id)
        if pet is None or pet.is_deleted:
            raise PetNotFoundException(resource_id=pet_id)
        if not (principal.is_owner and pet.is_owned_by(principal.id)):
            logger.info(
                f"Denied deletion of pet {pet_id} for user {principal.id}",
                extra={"principal_id": str(principal.id), "pet_id": str(pet_id)},
            )
            raise AccessDeniedException()

        now = get_current_utc()
        await session.execute(
            update(MedicalRecord)
            .where(
                MedicalRecord.pet_id == pet_id,
                MedicalRecord.create_query_filter_active(),
            )
            .values(
                is_deleted=True,
                deleted_at=now,
                updated_by=principal.id,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        revoked = await self.grant_store.revoke_active_grants_for_pet(
            session, pet_id, principal.id
        )
        pet.soft_delete(principal.id)
        await session.flush()
        logger.info(f"Deleted pet {pet_id}, revoked {revoked} grant(s)")
        return revoked
