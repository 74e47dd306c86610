"""
Durable storage of pet access grants.

The store owns the grant lifecycle: creation (with the owner, role and
uniqueness checks) and monotonic revocation. Every method works on the
caller's ``AsyncSession`` and never commits; transaction boundaries belong to
``SessionManager.get_transaction``.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..exceptions import (
    ForbiddenException,
    GrantAlreadyRevokedException,
    GrantConflictException,
    GrantNotFoundException,
    InvalidRoleException,
    PetNotFoundException,
    PrincipalNotFoundException,
)
from ..models.pet import Pet
from ..models.pet_access import AccessLevel, GrantPermissions, PetAccess
from ..models.user import User, UserRole
from ..utils.datetime_utils import ensure_utc, get_current_utc

logger = logging.getLogger(__name__)


@dataclass
class VeterinarianGrantGroup:
    """Active grants from one owner to one veterinarian, for display."""

    veterinarian: User
    grants: List[PetAccess] = field(default_factory=list)

    @property
    def grant_ids(self) -> List[uuid.UUID]:
        return [grant.id for grant in self.grants]

    @property
    def pets(self) -> List[Pet]:
        return [grant.pet for grant in self.grants]

    @property
    def first_granted_at(self) -> datetime:
        return min(ensure_utc(grant.granted_at) for grant in self.grants)


class GrantStore:
    """Create, revoke and query ``PetAccess`` rows."""

    async def get_grant(
        self, session: AsyncSession, grant_id: uuid.UUID
    ) -> Optional[PetAccess]:
        """Get a grant by id, active or revoked."""
        return await session.get(PetAccess, grant_id)

    async def find_active_grant(
        self, session: AsyncSession, pet_id: uuid.UUID, veterinarian_id: uuid.UUID
    ) -> Optional[PetAccess]:
        """Get the non-revoked grant for a pet/veterinarian pair, if any."""
        stmt = select(PetAccess).where(
            PetAccess.pet_id == pet_id,
            PetAccess.veterinarian_id == veterinarian_id,
            PetAccess.is_revoked.is_(False),
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def create_grant(
        self,
        session: AsyncSession,
        pet_id: uuid.UUID,
        veterinarian_id: uuid.UUID,
        granted_by_id: uuid.UUID,
        access_level: AccessLevel = AccessLevel.READ,
        permissions: Optional[GrantPermissions] = None,
        notes: Optional[str] = None,
    ) -> PetAccess:
        """
        Grant a veterinarian access to a pet.

        Args:
            session: Database session
            pet_id: Pet to share
            veterinarian_id: User receiving access; must be a veterinarian
            granted_by_id: Acting user; must own the pet
            access_level: Informational access tier, as an enum or its value
            permissions: Permission flags, defaults when omitted
            notes: Free-text notes

        Returns:
            The new, active grant

        Raises:
            PetNotFoundException: If the pet does not exist (HTTP 404)
            ForbiddenException: If the grantor does not own the pet (HTTP 403)
            PrincipalNotFoundException: If the veterinarian does not exist (HTTP 404)
            InvalidRoleException: If the target is not a veterinarian (HTTP 400)
            GrantConflictException: If an active grant already exists (HTTP 409)
        """
        access_level = AccessLevel(access_level)

        pet = await session.get(Pet, pet_id)
        if pet is None or pet.is_deleted:
            raise PetNotFoundException(resource_id=pet_id)

        if pet.owner_id != granted_by_id:
            raise ForbiddenException("You can only grant access to your own pets")

        veterinarian = await session.get(User, veterinarian_id)
        if veterinarian is None or veterinarian.is_deleted:
            raise PrincipalNotFoundException(
                "Veterinarian not found", resource_id=veterinarian_id
            )

        if veterinarian.role is not UserRole.VETERINARIAN:
            raise InvalidRoleException(
                user_id=veterinarian_id, role=veterinarian.role.value
            )

        grant = PetAccess(
            pet_id=pet_id,
            veterinarian_id=veterinarian_id,
            granted_by_id=granted_by_id,
            access_level=access_level,
            permissions=permissions or GrantPermissions(),
            notes=notes,
            created_by=granted_by_id,
            updated_by=granted_by_id,
        )

        # Check-then-insert inside a savepoint; the partial unique index
        # catches a concurrent insert that passed the check.
        try:
            async with session.begin_nested():
                existing = await self.find_active_grant(session, pet_id, veterinarian_id)
                if existing is not None:
                    raise GrantConflictException(
                        pet_id=pet_id, veterinarian_id=veterinarian_id
                    )
                session.add(grant)
                await session.flush()
        except IntegrityError as e:
            logger.info(
                "Concurrent grant creation lost the uniqueness race",
                extra={"pet_id": str(pet_id), "veterinarian_id": str(veterinarian_id)},
            )
            raise GrantConflictException(
                pet_id=pet_id, veterinarian_id=veterinarian_id
            ) from e

        logger.info(
            f"Granted veterinarian {veterinarian_id} access to pet {pet_id}",
            extra={
                "grant_id": str(grant.id),
                "granted_by_id": str(granted_by_id),
                "access_level": access_level.value,
            },
        )
        return grant

    async def revoke_grant(
        self,
        session: AsyncSession,
        grant_id: uuid.UUID,
        requesting_principal_id: uuid.UUID,
        allow_admin: bool = False,
    ) -> PetAccess:
        """
        Revoke a grant. Only the grantor may revoke, unless ``allow_admin``
        lets a platform admin do so as well.

        Standing is checked before revocation state, so a third party cannot
        learn whether a grant was already revoked.

        Raises:
            GrantNotFoundException: If the grant does not exist (HTTP 404)
            ForbiddenException: If the requester may not revoke it (HTTP 403)
            GrantAlreadyRevokedException: If the grant is not active (HTTP 409)
        """
        grant = await self.get_grant(session, grant_id)
        if grant is None:
            raise GrantNotFoundException(resource_id=grant_id)

        if grant.granted_by_id != requesting_principal_id:
            if not (allow_admin and await self._is_admin(session, requesting_principal_id)):
                logger.warning(
                    f"User {requesting_principal_id} attempted to revoke grant {grant_id}",
                    extra={"grant_id": str(grant_id)},
                )
                raise ForbiddenException("You can only revoke access you granted")

        if grant.is_revoked:
            raise GrantAlreadyRevokedException(grant_id=grant_id)

        now = get_current_utc()
        stmt = (
            update(PetAccess)
            .where(PetAccess.id == grant_id, PetAccess.is_revoked.is_(False))
            .values(
                is_revoked=True,
                revoked_at=now,
                revoked_by_id=requesting_principal_id,
                updated_by=requesting_principal_id,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        if result.rowcount != 1:
            # Another request revoked it between our read and the update
            raise GrantAlreadyRevokedException(grant_id=grant_id)

        await session.refresh(grant)
        logger.info(
            f"Revoked grant {grant_id}",
            extra={
                "grant_id": str(grant_id),
                "pet_id": str(grant.pet_id),
                "veterinarian_id": str(grant.veterinarian_id),
                "revoked_by_id": str(requesting_principal_id),
            },
        )
        return grant

    async def list_active_grants_for_veterinarian(
        self, session: AsyncSession, veterinarian_id: uuid.UUID
    ) -> List[PetAccess]:
        """
        Active grants held by a veterinarian, newest first.

        Each grant comes with its pet and the pet's owner loaded.
        """
        stmt = (
            select(PetAccess)
            .join(Pet, PetAccess.pet_id == Pet.id)
            .where(
                PetAccess.veterinarian_id == veterinarian_id,
                PetAccess.is_revoked.is_(False),
                Pet.create_query_filter_active(),
            )
            .options(selectinload(PetAccess.pet).selectinload(Pet.owner))
            .order_by(PetAccess.granted_at.desc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def list_active_grants_granted_by(
        self, session: AsyncSession, owner_id: uuid.UUID
    ) -> List[PetAccess]:
        """
        Active grants created by an owner, oldest first.

        Each grant comes with its pet and veterinarian loaded.
        """
        stmt = (
            select(PetAccess)
            .join(Pet, PetAccess.pet_id == Pet.id)
            .where(
                PetAccess.granted_by_id == owner_id,
                PetAccess.is_revoked.is_(False),
                Pet.create_query_filter_active(),
            )
            .options(
                selectinload(PetAccess.pet),
                selectinload(PetAccess.veterinarian),
            )
            .order_by(PetAccess.granted_at)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def revoke_active_grants_for_pet(
        self, session: AsyncSession, pet_id: uuid.UUID, revoked_by_id: uuid.UUID
    ) -> int:
        """
        Revoke every active grant on a pet (used when the pet is deleted).

        Returns:
            Number of grants revoked
        """
        now = get_current_utc()
        stmt = (
            update(PetAccess)
            .where(PetAccess.pet_id == pet_id, PetAccess.is_revoked.is_(False))
            .values(
                is_revoked=True,
                revoked_at=now,
                revoked_by_id=revoked_by_id,
                updated_by=revoked_by_id,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        if result.rowcount:
            logger.info(
                f"Revoked {result.rowcount} grant(s) on deleted pet {pet_id}",
                extra={"pet_id": str(pet_id)},
            )
        return result.rowcount

    @staticmethod
    def group_grants_by_veterinarian(
        grants: Sequence[PetAccess],
    ) -> List[VeterinarianGrantGroup]:
        """
        Group grants by veterinarian, keeping first-seen order.

        Grants must have ``veterinarian`` and ``pet`` loaded. Grouping is only
        a view; each grant stays its own row and is revoked individually.
        """
        groups: Dict[uuid.UUID, VeterinarianGrantGroup] = {}
        for grant in grants:
            group = groups.get(grant.veterinarian_id)
            if group is None:
                group = VeterinarianGrantGroup(veterinarian=grant.veterinarian)
                groups[grant.veterinarian_id] = group
            group.grants.append(grant)
        return list(groups.values())

    @staticmethod
    async def _is_admin(session: AsyncSession, user_id: uuid.UUID) -> bool:
        user = await session.get(User, user_id)
        return user is not None and user.role is UserRole.ADMIN


# Default store used by the module-level helpers
_default_store = GrantStore()


async def create_grant(session: AsyncSession, *args, **kwargs) -> PetAccess:
    """Create a grant with the default store."""
    return await _default_store.create_grant(session, *args, **kwargs)


async def revoke_grant(session: AsyncSession, *args, **kwargs) -> PetAccess:
    """Revoke a grant with the default store."""
    return await _default_store.revoke_grant(session, *args, **kwargs)


async def find_active_grant(
    session: AsyncSession, pet_id: uuid.UUID, veterinarian_id: uuid.UUID
) -> Optional[PetAccess]:
    return await _default_store.find_active_grant(session, pet_id, veterinarian_id)


async def list_active_grants_for_veterinarian(
    session: AsyncSession, veterinarian_id: uuid.UUID
) -> List[PetAccess]:
    return await _default_store.list_active_grants_for_veterinarian(
        session, veterinarian_id
    )


async def list_active_grants_granted_by(
    session: AsyncSession, owner_id: uuid.UUID
) -> List[PetAccess]:
    return await _default_store.list_active_grants_granted_by(session, owner_id)
