"""
Authorization engine.

Decides whether a principal may perform a pet-scoped action:

1. The pet must exist and not be deleted, else NOT_FOUND.
2. The pet's owner may do everything on it.
3. A veterinarian needs an active grant on the pet (NO_GRANT otherwise)
   carrying the permission mapped to the action (PERMISSION_MISSING).
4. Everyone else, administrators included, is FORBIDDEN.

Role alone never allows anything and record authorship is never consulted.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..models.pet import Pet
from .actions import PetAction, required_permission
from .decisions import AccessDecision, DenialReason
from .grant_store import GrantStore
from .principal import Principal

logger = logging.getLogger(__name__)


class AuthorizationEngine:
    """Evaluates pet-scoped authorization requests against stored grants."""

    def __init__(self, grant_store: Optional[GrantStore] = None):
        self.grant_store = grant_store or GrantStore()

    async def authorize(
        self,
        session: AsyncSession,
        principal: Principal,
        action: PetAction,
        pet_id: uuid.UUID,
    ) -> AccessDecision:
        """
        Decide whether ``principal`` may perform ``action`` on a pet.

        Never raises for a denial; the decision carries the reason.
        """
        decision = await self._evaluate(session, principal, action, pet_id)
        if not decision.allowed:
            logger.info(
                f"Denied {action.value} on pet {pet_id} for user {principal.id}",
                extra={
                    "principal_id": str(principal.id),
                    "role": principal.role.value,
                    "action": action.value,
                    "pet_id": str(pet_id),
                    "reason": decision.reason.value,
                },
            )
        return decision

    async def require(
        self,
        session: AsyncSession,
        principal: Principal,
        action: PetAction,
        pet_id: uuid.UUID,
    ) -> AccessDecision:
        """
        Authorize and raise on denial.

        Raises:
            PetNotFoundException: If the pet does not exist (HTTP 404)
            AccessDeniedException: For any other denial (HTTP 403)
        """
        decision = await self.authorize(session, principal, action, pet_id)
        decision.raise_for_denial()
        return decision

    async def _evaluate(
        self,
        session: AsyncSession,
        principal: Principal,
        action: PetAction,
        pet_id: uuid.UUID,
    ) -> AccessDecision:
        pet = await session.get(Pet, pet_id)
        if pet is None or pet.is_deleted:
            return AccessDecision.deny(action, pet_id, DenialReason.NOT_FOUND)

        if principal.is_owner and pet.is_owned_by(principal.id):
            return AccessDecision.allow(action, pet_id)

        if principal.is_veterinarian:
            grant = await self.grant_store.find_active_grant(
                session, pet_id, principal.id
            )
            if grant is None:
                return AccessDecision.deny(action, pet_id, DenialReason.NO_GRANT)
            if not grant.has_permission(required_permission(action)):
                return AccessDecision.deny(
                    action, pet_id, DenialReason.PERMISSION_MISSING
                )
            return AccessDecision.allow(action, pet_id)

        return AccessDecision.deny(action, pet_id, DenialReason.FORBIDDEN)


_default_engine = AuthorizationEngine()


async def authorize(
    session: AsyncSession,
    principal: Principal,
    action: PetAction,
    pet_id: uuid.UUID,
) -> AccessDecision:
    """Authorize with the default engine."""
    return await _default_engine.authorize(session, principal, action, pet_id)
