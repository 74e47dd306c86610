"""
Sharing workflows between owners and veterinarians.

Owners grant and revoke per-pet access and see who they share with;
veterinarians see their patients; owners browse the veterinarian directory.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..access.grant_store import GrantStore
from ..access.principal import Principal
from ..exceptions import (
    ForbiddenException,
    GrantAlreadyRevokedException,
    PrincipalNotFoundException,
    ProfileIncompleteException,
)
from ..models.pet_access import PetAccess
from ..models.user import User, UserRole
from ..schemas.pet_access import (
    GrantGroupResponse,
    OwnerContact,
    PatientResponse,
    PetAccessGrantRequest,
    PetAccessPermissionsSchema,
    PetSummary,
    VeterinarianSummary,
)
from ..utils.config import AccessControlConfig, get_access_config

logger = logging.getLogger(__name__)


class SharingService:
    """Grant lifecycle and listings on top of ``GrantStore``."""

    def __init__(
        self,
        grant_store: Optional[GrantStore] = None,
        config: Optional[AccessControlConfig] = None,
    ):
        self.grant_store = grant_store or GrantStore()
        self._config = config

    @property
    def config(self) -> AccessControlConfig:
        return self._config or get_access_config()

    async def grant_access(
        self,
        session: AsyncSession,
        principal: Principal,
        request: PetAccessGrantRequest,
    ) -> PetAccess:
        """
        Grant a veterinarian access to one of the principal's pets.

        Raises:
            ProfileIncompleteException: If the owner's profile is incomplete
            plus everything ``GrantStore.create_grant`` raises
        """
        if self.config.require_complete_profile:
            await self._require_complete_profile(
                session, principal, "Please complete your profile before granting access"
            )

        return await self.grant_store.create_grant(
            session,
            pet_id=request.pet_id,
            veterinarian_id=request.veterinarian_id,
            granted_by_id=principal.id,
            access_level=request.access_level,
            permissions=request.resolved_permissions(),
            notes=request.notes,
        )

    async def revoke_access(
        self, session: AsyncSession, principal: Principal, grant_id: uuid.UUID
    ) -> PetAccess:
        """
        Revoke a grant created by the principal.

        With ``double_revoke_is_success`` configured, revoking an already
        revoked grant returns it unchanged instead of raising.
        """
        try:
            return await self.grant_store.revoke_grant(
                session,
                grant_id,
                principal.id,
                allow_admin=self.config.admin_can_revoke,
            )
        except GrantAlreadyRevokedException:
            if not self.config.double_revoke_is_success:
                raise
            logger.debug(f"Grant {grant_id} was already revoked")
            return await self.grant_store.get_grant(session, grant_id)

    async def list_my_grants(
        self, session: AsyncSession, principal: Principal
    ) -> List[GrantGroupResponse]:
        """Active grants made by the principal, grouped by veterinarian."""
        grants = await self.grant_store.list_active_grants_granted_by(
            session, principal.id
        )
        return [
            GrantGroupResponse(
                veterinarian=VeterinarianSummary.from_user(group.veterinarian),
                grant_ids=group.grant_ids,
                pets=[PetSummary.from_pet(pet) for pet in group.pets],
                first_granted_at=group.first_granted_at,
            )
            for group in self.grant_store.group_grants_by_veterinarian(grants)
        ]

    async def list_patients(
        self, session: AsyncSession, principal: Principal
    ) -> List[PatientResponse]:
        """
        Pets the veterinarian currently has access to.

        Owner contact details are included only where the grant allows
        ``view_owner_info``.
        """
        if not principal.is_veterinarian:
            raise ForbiddenException("Only veterinarians have patients")

        grants = await self.grant_store.list_active_grants_for_veterinarian(
            session, principal.id
        )
        patients = []
        for grant in grants:
            pet = grant.pet
            owner = None
            if grant.view_owner_info:
                owner = OwnerContact(
                    id=pet.owner.id,
                    full_name=pet.owner.full_name,
                    email=pet.owner.email,
                    phone_number=pet.owner.phone_number,
                )
            patients.append(
                PatientResponse(
                    pet_id=pet.id,
                    grant_id=grant.id,
                    name=pet.name,
                    species=pet.species.value,
                    breed=pet.breed,
                    access_level=grant.access_level,
                    permissions=PetAccessPermissionsSchema.from_permissions(
                        grant.permissions
                    ),
                    owner=owner,
                    granted_at=grant.granted_at,
                )
            )
        return patients

    async def list_veterinarians(self, session: AsyncSession) -> List[VeterinarianSummary]:
        """Directory of active veterinarians, by name."""
        stmt = (
            select(User)
            .where(
                User.role == UserRole.VETERINARIAN,
                User.create_query_filter_active(),
            )
            .order_by(User.last_name, User.first_name)
        )
        result = await session.execute(stmt)
        return [VeterinarianSummary.from_user(user) for user in result.scalars().all()]

    async def _require_complete_profile(
        self, session: AsyncSession, principal: Principal, message: str
    ) -> None:
        user = await session.get(User, principal.id)
        if user is None:
            raise PrincipalNotFoundException(resource_id=principal.id)
        missing = user.missing_profile_fields()
        if missing:
            raise ProfileIncompleteException(message, missing_fields=missing)
