"""
Access-control core: principals, grants and authorization decisions.
"""

from .actions import ACTION_PERMISSIONS, PetAction, required_permission
from .decisions import AccessDecision, DenialReason
from .engine import AuthorizationEngine, authorize
from .grant_store import (
    GrantStore,
    VeterinarianGrantGroup,
    create_grant,
    find_active_grant,
    list_active_grants_for_veterinarian,
    list_active_grants_granted_by,
    revoke_grant,
)
from .principal import Principal, PrincipalResolver

__all__ = [
    "Principal",
    "PrincipalResolver",
    "PetAction",
    "ACTION_PERMISSIONS",
    "required_permission",
    "AccessDecision",
    "DenialReason",
    "AuthorizationEngine",
    "authorize",
    "GrantStore",
    "VeterinarianGrantGroup",
    "create_grant",
    "revoke_grant",
    "find_active_grant",
    "list_active_grants_for_veterinarian",
    "list_active_grants_granted_by",
]
