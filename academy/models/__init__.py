"""Models Package - Export all models for easy imports"""

from academy.models.base import BaseModel
from academy.models.enums import FeeStatus, RejectedReason, ProgressStatus, DisciplineType
from academy.models.student import Student
from academy.models.fee import Fee
from academy.models.progression import BeltLevel, DisciplineLevel, StudentProgress, PromotionHistory


__all__ = [
    # Base classes
    "BaseModel",

    # Enums
    "FeeStatus",
    "RejectedReason",
    "ProgressStatus",
    "DisciplineType",

    # Students
    "Student",

    # Fees
    "Fee",

    # Progression
    "BeltLevel",
    "DisciplineLevel",
    "StudentProgress",
    "PromotionHistory",
]
