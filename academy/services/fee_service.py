"""Fee Service - persistence around the fee ledger rules"""

from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from academy.config import settings
from academy.core.exceptions import PaymentRejected, RecordNotFound
from academy.core.logging import get_logger
from academy.models.fee import Fee
from academy.models.student import Student
from academy.schemas.fees import FeeLedgerRow, FeeRecord, FeeSummary, FeeUpsert
from academy.services.fee_ledger import (
    build_ledger_row,
    compute_balance,
    compute_status,
    find_carry_forward,
    summarize_fees,
    validate_payment,
)

logger = get_logger(__name__)


class FeeService:
    """Service layer for fee records"""

    @staticmethod
    async def list_fee_records(
        db: AsyncSession,
        student_id: Optional[UUID] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> List[FeeRecord]:
        """Fee records, newest period first."""
        query = select(Fee).order_by(Fee.year.desc(), Fee.month.desc())
        if student_id:
            query = query.where(Fee.student_id == student_id)
        if year:
            query = query.where(Fee.year == year)
        if month:
            query = query.where(Fee.month == month)

        result = await db.execute(query)
        return [FeeRecord.model_validate(fee) for fee in result.scalars().all()]

    @staticmethod
    async def get_fee_by_id(db: AsyncSession, fee_id: UUID) -> Optional[Fee]:
        result = await db.execute(select(Fee).where(Fee.id == fee_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_fee_for_period(
        db: AsyncSession,
        student_id: UUID,
        year: int,
        month: int,
    ) -> Optional[Fee]:
        result = await db.execute(
            select(Fee).where(
                Fee.student_id == student_id,
                Fee.year == year,
                Fee.month == month,
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_carry_forward(
        db: AsyncSession,
        student_id: UUID,
        year: int,
        month: int,
    ) -> Decimal:
        records = await FeeService.list_fee_records(db, student_id=student_id)
        return find_carry_forward(records, student_id, year, month)

    @staticmethod
    async def get_ledger_row(
        db: AsyncSession,
        student_id: UUID,
        year: int,
        month: int,
    ) -> FeeLedgerRow:
        """Editable fee row for a period, pre-filled from the student's default fee."""
        student = await db.get(Student, student_id)
        if student is None:
            raise RecordNotFound("Student", student_id)
        default_fee = student.default_monthly_fee
        if default_fee is None:
            default_fee = settings.DEFAULT_MONTHLY_FEE

        records = await FeeService.list_fee_records(db, student_id=student_id)
        return build_ledger_row(records, student_id, year, month, default_fee)

    @staticmethod
    async def upsert_fee_record(db: AsyncSession, data: FeeUpsert) -> FeeRecord:
        """
        Record a payment for one student and period.

        balance_due and status are always recomputed here. A payment above
        the monthly fee is rejected before anything is written.

        Raises:
            PaymentRejected: paid_amount exceeds monthly_fee
            RecordNotFound: data.id does not match a stored fee
        """
        try:
            validate_payment(data.monthly_fee, data.paid_amount)
        except PaymentRejected as exc:
            logger.warning(
                "Payment rejected",
                extra={
                    "student_id": str(data.student_id),
                    "period": f"{data.year}-{data.month:02d}",
                    "reason": exc.reason.value,
                },
            )
            raise

        if data.id:
            fee = await FeeService.get_fee_by_id(db, data.id)
            if fee is None:
                raise RecordNotFound("Fee", data.id)
        else:
            # Same period for the same student is updated, never duplicated
            fee = await FeeService.get_fee_for_period(db, data.student_id, data.year, data.month)

        created = fee is None
        if created:
            fee = Fee(student_id=data.student_id, year=data.year, month=data.month)
            db.add(fee)

        fee.monthly_fee = data.monthly_fee
        fee.paid_amount = data.paid_amount
        fee.balance_due = compute_balance(data.monthly_fee, data.paid_amount)
        fee.status = compute_status(data.monthly_fee, data.paid_amount)
        fee.notes = data.notes

        await db.commit()
        await db.refresh(fee)

        logger.info(
            "Fee record created" if created else "Fee record updated",
            extra={
                "student_id": str(fee.student_id),
                "period": f"{fee.year}-{fee.month:02d}",
                "status": fee.status.value,
            },
        )
        return FeeRecord.model_validate(fee)

    @staticmethod
    async def get_summary(
        db: AsyncSession,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> FeeSummary:
        records = await FeeService.list_fee_records(db, year=year, month=month)
        return summarize_fees(records)
