"""
Resource services. Each operation takes an explicit ``Principal`` and is
authorized before it reads or mutates anything.
"""

from .medical_records import MedicalRecordService
from .pets import PetService
from .sharing import SharingService

__all__ = ["PetService", "MedicalRecordService", "SharingService"]
