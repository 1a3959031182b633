"""Fee endpoints - monthly ledger for the admin dashboard"""

from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from academy.api import deps
from academy.schemas.fees import FeeUpsert
from academy.schemas.responses import SuccessResponse
from academy.services.fee_service import FeeService

router = APIRouter()


@router.get("", response_model=SuccessResponse)
async def list_fees(
    student_id: Optional[UUID] = None,
    year: Optional[int] = Query(None, ge=1970, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """List fee records, newest period first."""
    fees = await FeeService.list_fee_records(db, student_id=student_id, year=year, month=month)
    return SuccessResponse(data=fees)


@router.get("/summary", response_model=SuccessResponse)
async def fee_summary(
    year: Optional[int] = Query(None, ge=1970, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Collected / pending / overdue totals."""
    summary = await FeeService.get_summary(db, year=year, month=month)
    return SuccessResponse(data=summary)


@router.get("/ledger", response_model=SuccessResponse)
async def ledger_row(
    student_id: UUID,
    year: int = Query(..., ge=1970, le=2100),
    month: int = Query(..., ge=1, le=12),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Editable row for a student and period, with the balance carried from earlier months."""
    row = await FeeService.get_ledger_row(db, student_id, year, month)
    return SuccessResponse(data=row)


@router.put("", response_model=SuccessResponse)
async def upsert_fee(
    fee_in: FeeUpsert,
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Record a payment. Rejected with 400 when paid_amount exceeds monthly_fee."""
    fee = await FeeService.upsert_fee_record(db, fee_in)
    return SuccessResponse(data=fee, message="Fee record saved")
