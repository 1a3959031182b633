"""Fee ledger rules - pure functions over validated fee records.

Nothing here touches the database; FeeService loads records, hands them to
these functions and persists whatever they derive.
"""

from decimal import Decimal
from typing import Iterable, Optional, Union
from uuid import UUID

from academy.core.exceptions import PaymentRejected
from academy.models.enums import FeeStatus, RejectedReason
from academy.schemas.fees import FeeLedgerRow, FeeRecord, FeeSummary

Amount = Union[Decimal, int, float, str, None]

ZERO = Decimal("0")


def to_amount(value: Amount) -> Decimal:
    """Coerce a stored or computed amount to Decimal, treating missing as 0."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def compute_status(monthly_fee: Amount, paid_amount: Amount) -> FeeStatus:
    fee = to_amount(monthly_fee)
    paid = to_amount(paid_amount)
    if paid >= fee:
        return FeeStatus.PAID
    if paid > 0:
        return FeeStatus.PARTIAL
    return FeeStatus.UNPAID


def compute_balance(monthly_fee: Amount, paid_amount: Amount) -> Decimal:
    return max(to_amount(monthly_fee) - to_amount(paid_amount), ZERO)


def validate_payment(monthly_fee: Amount, paid_amount: Amount) -> None:
    """
    Reject a payment larger than the fee it settles.

    Raises:
        PaymentRejected: with RejectedReason.EXCEEDS_MONTHLY_FEE
    """
    fee = to_amount(monthly_fee)
    paid = to_amount(paid_amount)
    if paid > fee:
        raise PaymentRejected(
            RejectedReason.EXCEEDS_MONTHLY_FEE,
            f"Paid amount {paid} exceeds the monthly fee of {fee}.",
        )


def find_carry_forward(
    records: Iterable[FeeRecord],
    student_id: UUID,
    target_year: int,
    target_month: int,
) -> Decimal:
    """
    Unpaid balance carried into (target_year, target_month).

    Looks at the student's most recent record strictly before the target
    period; a settled or missing record carries nothing forward.
    """
    target = (target_year, target_month)
    prior = [
        r for r in records
        if r.student_id == student_id and (r.year, r.month) < target
    ]
    if not prior:
        return ZERO
    latest = max(prior, key=lambda r: (r.year, r.month))
    if latest.status == FeeStatus.PAID:
        return ZERO
    return to_amount(latest.balance_due)


def summarize_fees(records: Iterable[FeeRecord]) -> FeeSummary:
    summary = FeeSummary()
    for record in records:
        if record.status == FeeStatus.PAID:
            summary.collected += to_amount(record.paid_amount)
            summary.paid_count += 1
        elif record.status == FeeStatus.PARTIAL:
            summary.pending += to_amount(record.balance_due)
            summary.partial_count += 1
        else:
            summary.overdue += to_amount(record.balance_due)
            summary.overdue_count += 1
    return summary


def build_ledger_row(
    records: Iterable[FeeRecord],
    student_id: UUID,
    year: int,
    month: int,
    default_monthly_fee: Amount,
) -> FeeLedgerRow:
    """
    Row shown in the fee editor for one student and period.

    Uses the stored record for the period when there is one, otherwise a
    blank entry at the student's default fee.
    """
    records = list(records)
    current: Optional[FeeRecord] = next(
        (r for r in records if r.student_id == student_id and r.period == (year, month)),
        None,
    )
    carry_forward = find_carry_forward(records, student_id, year, month)

    if current is not None:
        monthly_fee = to_amount(current.monthly_fee)
        paid_amount = to_amount(current.paid_amount)
        notes = current.notes
    else:
        monthly_fee = to_amount(default_monthly_fee)
        paid_amount = ZERO
        notes = None

    balance_due = compute_balance(monthly_fee, paid_amount)
    return FeeLedgerRow(
        student_id=student_id,
        year=year,
        month=month,
        fee_id=current.id if current is not None else None,
        monthly_fee=monthly_fee,
        paid_amount=paid_amount,
        balance_due=balance_due,
        status=compute_status(monthly_fee, paid_amount),
        carry_forward=carry_forward,
        total_due=balance_due + carry_forward,
        notes=notes,
    )
