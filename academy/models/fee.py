"""Fees Model"""

from sqlalchemy import Column, ForeignKey, Integer, Numeric, Text, UniqueConstraint, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID, ENUM
from sqlalchemy.orm import relationship

from academy.models.base import BaseModel
from academy.models.enums import FeeStatus


class Fee(BaseModel):
    """
    One student's fee obligation for one (year, month) period.
    balance_due and status are derived and always written by FeeService.
    """
    __tablename__ = "fees"
    __table_args__ = (
        UniqueConstraint("student_id", "year", "month", name="uq_fees_student_period"),
        CheckConstraint("month BETWEEN 1 AND 12", name="ck_fees_month"),
        CheckConstraint("paid_amount <= monthly_fee", name="ck_fees_paid_le_fee"),
    )

    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    monthly_fee = Column(Numeric(10, 2), nullable=False, default=0)
    paid_amount = Column(Numeric(10, 2), nullable=False, default=0)
    balance_due = Column(Numeric(10, 2), nullable=False, default=0)
    status = Column(
        ENUM(FeeStatus, name="fee_status", values_callable=lambda x: [e.value for e in x]),
        default=FeeStatus.UNPAID,
        nullable=False,
        index=True,
    )
    notes = Column(Text, nullable=True)

    # Relationships
    student = relationship("Student", back_populates="fees")

    def __repr__(self) -> str:
        return f"<Fee {self.year}-{self.month:02d} {self.paid_amount}/{self.monthly_fee} - {self.status}>"
