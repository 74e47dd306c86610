"""
Principal resolution.

A ``Principal`` is the authenticated actor an authorization decision is made
for. It is an immutable (id, role) pair; the full ``User`` row is only needed
to build it.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import PrincipalNotFoundException
from ..models.user import User, UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """Authenticated actor: user id plus its fixed role."""

    id: uuid.UUID
    role: UserRole

    @classmethod
    def of(cls, user_id: uuid.UUID, role: Union[str, UserRole]) -> "Principal":
        """Build a principal, normalising legacy role strings."""
        return cls(id=user_id, role=UserRole.from_string(role))

    @property
    def is_owner(self) -> bool:
        return self.role is UserRole.OWNER

    @property
    def is_veterinarian(self) -> bool:
        return self.role is UserRole.VETERINARIAN

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN


class PrincipalResolver:
    """Looks up users and turns them into principals."""

    @staticmethod
    def from_user(user: User) -> Principal:
        """Build a principal from a loaded user row."""
        return Principal(id=user.id, role=user.role)

    async def get_user(
        self, session: AsyncSession, user_id: uuid.UUID
    ) -> Optional[User]:
        """Load an active user by id."""
        user = await session.get(User, user_id)
        if user is None or user.is_deleted:
            return None
        return user

    async def get_principal(
        self, session: AsyncSession, user_id: uuid.UUID
    ) -> Optional[Principal]:
        """Resolve a principal, returning None for unknown users."""
        user = await self.get_user(session, user_id)
        return self.from_user(user) if user is not None else None

    async def resolve(self, session: AsyncSession, user_id: uuid.UUID) -> Principal:
        """
        Resolve a principal.

        Raises:
            PrincipalNotFoundException: If the user does not exist (HTTP 404)
        """
        principal = await self.get_principal(session, user_id)
        if principal is None:
            logger.debug(f"Principal {user_id} not found")
            raise PrincipalNotFoundException(resource_id=user_id)
        return principal
