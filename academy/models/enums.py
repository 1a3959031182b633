"""Centralized Enum Definitions"""

import enum


# Fees
class FeeStatus(str, enum.Enum):
    """Payment status of one monthly fee record"""
    PAID = "paid"
    PARTIAL = "partial"
    UNPAID = "unpaid"


class RejectedReason(str, enum.Enum):
    """Why a payment entry was refused before persistence"""
    EXCEEDS_MONTHLY_FEE = "exceeds_monthly_fee"


# Progression
class ProgressStatus(str, enum.Enum):
    """Coach assessment status of a student at a belt/level"""
    NEEDS_WORK = "needs_work"
    READY = "ready"
    PASSED = "passed"
    DEFERRED = "deferred"


class DisciplineType(str, enum.Enum):
    """How a discipline measures progression"""
    BELT = "belt"
    LEVEL = "level"
