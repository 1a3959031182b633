"""Belt/level ladders and student progression models"""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID, ENUM, JSONB
from sqlalchemy.orm import relationship

from academy.models.base import BaseModel
from academy.models.enums import ProgressStatus
from academy.utils.time import get_utc_now


class BeltLevel(BaseModel):
    """
    One rank on a belt ladder.
    discipline NULL (or "general") means the shared ladder used by every program.
    next_level_id chains a rank to its successor for promotions.
    """
    __tablename__ = "belt_levels"

    discipline = Column(String(100), nullable=True, index=True)
    rank = Column(Integer, nullable=False)
    color = Column(String(50), nullable=False)
    level_name = Column(String(100), nullable=True)
    next_level_id = Column(UUID(as_uuid=True), ForeignKey("belt_levels.id", ondelete="SET NULL"), nullable=True)
    requirements = Column(JSONB, nullable=True)
    min_age = Column(Integer, nullable=True)
    min_sessions = Column(Integer, nullable=True)

    next_level = relationship("BeltLevel", remote_side="BeltLevel.id")

    def __repr__(self) -> str:
        return f"<BeltLevel {self.color} (rank {self.rank})>"


class DisciplineLevel(BaseModel):
    """Named stage of a level-based discipline (Boxing, MMA, Fitness, ...)."""
    __tablename__ = "discipline_levels"

    discipline = Column(String(100), nullable=False, index=True)
    level_name = Column(String(100), nullable=False)
    level_order = Column(Integer, nullable=False)
    description = Column(Text, nullable=True)
    requirements = Column(JSONB, nullable=True)

    def __repr__(self) -> str:
        return f"<DisciplineLevel {self.discipline}:{self.level_name}>"


class StudentProgress(BaseModel):
    """A student's assignment to a belt/level together with the coach's assessment."""
    __tablename__ = "student_progress"
    __table_args__ = (
        CheckConstraint("stripe_count >= 0", name="ck_student_progress_stripes"),
    )

    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    belt_level_id = Column(UUID(as_uuid=True), ForeignKey("belt_levels.id", ondelete="RESTRICT"), nullable=False, index=True)
    status = Column(
        ENUM(ProgressStatus, name="progress_status", values_callable=lambda x: [e.value for e in x]),
        default=ProgressStatus.NEEDS_WORK,
        nullable=False,
        index=True,
    )
    stripe_count = Column(Integer, nullable=False, default=0)
    coach_notes = Column(Text, nullable=True)
    assessment_date = Column(Date, nullable=True)
    assessed_by = Column(UUID(as_uuid=True), nullable=True)
    evidence_media_urls = Column(JSONB, nullable=False, default=list)

    # Relationships
    student = relationship("Student", back_populates="progress")
    belt_level = relationship("BeltLevel")

    def __repr__(self) -> str:
        return f"<StudentProgress {self.student_id} @ {self.belt_level_id} - {self.status}>"


class PromotionHistory(BaseModel):
    """Append-only log of belt promotions."""
    __tablename__ = "promotion_history"

    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    from_belt_id = Column(UUID(as_uuid=True), ForeignKey("belt_levels.id", ondelete="SET NULL"), nullable=True)
    to_belt_id = Column(UUID(as_uuid=True), ForeignKey("belt_levels.id", ondelete="RESTRICT"), nullable=False)
    promoted_by = Column(UUID(as_uuid=True), nullable=True)
    promoted_at = Column(DateTime, default=get_utc_now, nullable=False, index=True)
    notes = Column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<PromotionHistory {self.student_id}: {self.from_belt_id} -> {self.to_belt_id}>"
