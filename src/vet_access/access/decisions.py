"""
Authorization decision values.
"""

import enum
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..exceptions import AccessDeniedException, PetNotFoundException
from .actions import PetAction


class DenialReason(enum.Enum):
    """Why an authorization request was refused."""

    NOT_FOUND = "not_found"
    NO_GRANT = "no_grant"
    PERMISSION_MISSING = "permission_missing"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class AccessDecision:
    """
    Outcome of ``AuthorizationEngine.authorize``.

    A denial is a value, not an exception. ``reason`` is set exactly when
    ``allowed`` is False.
    """

    allowed: bool
    action: PetAction
    pet_id: uuid.UUID
    reason: Optional[DenialReason] = None

    def __post_init__(self) -> None:
        if self.allowed == (self.reason is not None):
            raise ValueError("A decision carries a reason exactly when it is a denial")

    @classmethod
    def allow(cls, action: PetAction, pet_id: uuid.UUID) -> "AccessDecision":
        return cls(allowed=True, action=action, pet_id=pet_id)

    @classmethod
    def deny(
        cls, action: PetAction, pet_id: uuid.UUID, reason: DenialReason
    ) -> "AccessDecision":
        return cls(allowed=False, action=action, pet_id=pet_id, reason=reason)

    def __bool__(self) -> bool:
        return self.allowed

    def raise_for_denial(self) -> None:
        """
        Raise the caller-facing exception for a denial; no-op when allowed.

        Raises:
            PetNotFoundException: For NOT_FOUND (HTTP 404)
            AccessDeniedException: For every other reason (HTTP 403)
        """
        if self.allowed:
            return
        if self.reason is DenialReason.NOT_FOUND:
            raise PetNotFoundException(resource_id=self.pet_id)
        raise AccessDeniedException()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for logging."""
        return {
            "allowed": self.allowed,
            "action": self.action.value,
            "pet_id": str(self.pet_id),
            "reason": self.reason.value if self.reason else None,
        }
