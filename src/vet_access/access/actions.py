"""
Pet-scoped actions and the grant permission each one requires.
"""

import enum
from typing import Dict

from ..models.pet_access import GrantPermissions


class PetAction(enum.Enum):
    """Operations on a pet or its records that pass through authorization."""

    VIEW_MEDICAL_RECORDS = "view_medical_records"
    CREATE_MEDICAL_RECORD = "create_medical_record"
    UPDATE_MEDICAL_RECORD = "update_medical_record"
    DELETE_MEDICAL_RECORD = "delete_medical_record"
    VIEW_PET_PROFILE = "view_pet_profile"
    EDIT_PET_PROFILE = "edit_pet_profile"


# Permission a veterinarian's grant must carry for each action.
ACTION_PERMISSIONS: Dict[PetAction, str] = {
    PetAction.VIEW_MEDICAL_RECORDS: "view_medical_history",
    PetAction.CREATE_MEDICAL_RECORD: "add_medical_records",
    PetAction.UPDATE_MEDICAL_RECORD: "edit_medical_records",
    PetAction.DELETE_MEDICAL_RECORD: "delete_medical_records",
    PetAction.VIEW_PET_PROFILE: "view_owner_info",
    PetAction.EDIT_PET_PROFILE: "edit_pet_info",
}

if set(ACTION_PERMISSIONS) != set(PetAction):
    raise RuntimeError("Every PetAction needs a required permission")
if not set(ACTION_PERMISSIONS.values()) <= set(GrantPermissions.field_names()):
    raise RuntimeError("Action permissions must name GrantPermissions fields")


def required_permission(action: PetAction) -> str:
    """Return the grant permission required for ``action``."""
    return ACTION_PERMISSIONS[action]
