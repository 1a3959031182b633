from typing import Any, List, Optional
from uuid import UUID
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from academy.models.enums import DisciplineType, ProgressStatus


class DisciplineConfig(BaseModel):
    name: str
    type: DisciplineType
    has_stripes: bool = False
    description: str = ""
    belts: List[str] = []
    levels: List[str] = []

    model_config = ConfigDict(frozen=True)


class DisciplineClassification(BaseModel):
    """Result of mapping a student's program onto a discipline."""
    program: str
    key: str
    type: DisciplineType
    config: DisciplineConfig
    is_fallback: bool = False


class BeltLevelRecord(BaseModel):
    id: UUID
    discipline: Optional[str] = None
    rank: int
    color: str
    level_name: Optional[str] = None
    next_level_id: Optional[UUID] = None
    requirements: Optional[Any] = None
    min_age: Optional[int] = None
    min_sessions: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class DisciplineLevelRecord(BaseModel):
    id: UUID
    discipline: str
    level_name: str
    level_order: int
    description: Optional[str] = None
    requirements: Optional[Any] = None

    model_config = ConfigDict(from_attributes=True)


class LevelOption(BaseModel):
    """Select-box entry for a belt or level."""
    label: str
    value: UUID
    discipline: Optional[str] = None
    order: int
    color: Optional[str] = None


class LevelFilterResult(BaseModel):
    classification: DisciplineClassification
    levels: List[BeltLevelRecord]
    is_fallback: bool = False
    notice: Optional[str] = None


class ProgressRecord(BaseModel):
    id: Optional[UUID] = None
    student_id: UUID
    belt_level_id: UUID
    status: ProgressStatus = ProgressStatus.NEEDS_WORK
    stripe_count: int = Field(0, ge=0)
    coach_notes: Optional[str] = None
    assessment_date: Optional[date] = None
    assessed_by: Optional[UUID] = None
    evidence_media_urls: List[str] = []
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProgressBoardRow(ProgressRecord):
    """Progress record joined with the student and belt it refers to."""
    student_name: Optional[str] = None
    program: Optional[str] = None
    belt_color: Optional[str] = None
    belt_rank: Optional[int] = None


class ProgressAssign(BaseModel):
    student_id: UUID
    belt_level_id: UUID
    status: ProgressStatus = ProgressStatus.NEEDS_WORK
    stripe_count: int = Field(0, ge=0)
    coach_notes: Optional[str] = None
    assessment_date: Optional[date] = None


class ProgressUpdate(BaseModel):
    """Partial update; only fields present in the payload are changed."""
    status: Optional[ProgressStatus] = None
    coach_notes: Optional[str] = None
    assessment_date: Optional[date] = None
    stripe_count: Optional[int] = Field(None, ge=0)
    assessed_by: Optional[UUID] = None


class ProgressionFilters(BaseModel):
    search: Optional[str] = None
    program: Optional[str] = None
    coach_id: Optional[UUID] = None
    belt_level_id: Optional[UUID] = None
    statuses: List[ProgressStatus] = []


class PromotionRequest(BaseModel):
    promoted_by: Optional[UUID] = None
    notes: Optional[str] = None
    assessment_date: Optional[date] = None


class PromotionHistoryRecord(BaseModel):
    id: Optional[UUID] = None
    student_id: UUID
    from_belt_id: Optional[UUID] = None
    to_belt_id: UUID
    promoted_by: Optional[UUID] = None
    promoted_at: Optional[datetime] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PromotionResult(BaseModel):
    previous: ProgressRecord
    current: ProgressRecord
    history: PromotionHistoryRecord
