"""Progression Service - belt/level assignment, assessment and promotion"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from academy.config import settings
from academy.core.exceptions import PromotionUnavailable, RecordNotFound, StripeCountOutOfRange
from academy.core.logging import get_logger
from academy.models.enums import ProgressStatus
from academy.models.progression import BeltLevel, DisciplineLevel, PromotionHistory, StudentProgress
from academy.models.student import Student
from academy.schemas.progression import (
    BeltLevelRecord,
    DisciplineLevelRecord,
    LevelFilterResult,
    ProgressAssign,
    ProgressBoardRow,
    ProgressionFilters,
    ProgressRecord,
    ProgressUpdate,
    PromotionHistoryRecord,
    PromotionRequest,
    PromotionResult,
)
from academy.services.discipline import DisciplineRegistry
from academy.services.progression_rules import (
    StatusTransitions,
    filter_progress_records,
    ready_for_testing,
)
from academy.utils.time import get_utc_now

logger = get_logger(__name__)


class ProgressionService:
    """Service layer for belt levels and student progress"""

    @staticmethod
    async def list_belt_levels(db: AsyncSession) -> List[BeltLevelRecord]:
        result = await db.execute(select(BeltLevel).order_by(BeltLevel.rank))
        return [BeltLevelRecord.model_validate(level) for level in result.scalars().all()]

    @staticmethod
    async def get_belt_level(db: AsyncSession, belt_level_id: UUID) -> Optional[BeltLevel]:
        result = await db.execute(select(BeltLevel).where(BeltLevel.id == belt_level_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def list_discipline_levels(db: AsyncSession) -> List[DisciplineLevelRecord]:
        result = await db.execute(
            select(DisciplineLevel).order_by(DisciplineLevel.discipline, DisciplineLevel.level_order)
        )
        return [DisciplineLevelRecord.model_validate(level) for level in result.scalars().all()]

    @staticmethod
    async def get_applicable_levels(
        db: AsyncSession,
        program: Optional[str],
        registry: DisciplineRegistry,
    ) -> LevelFilterResult:
        levels = await ProgressionService.list_belt_levels(db)
        result = registry.filter_applicable_levels(levels, program)
        if result.is_fallback:
            logger.info("No levels match program, using full set", extra={"program": program})
        return result

    @staticmethod
    async def get_progress_by_id(db: AsyncSession, progress_id: UUID) -> Optional[StudentProgress]:
        result = await db.execute(select(StudentProgress).where(StudentProgress.id == progress_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def list_progress_records(
        db: AsyncSession,
        filters: Optional[ProgressionFilters] = None,
    ) -> List[ProgressBoardRow]:
        """Progress board rows, most recently updated first."""
        result = await db.execute(
            select(StudentProgress)
            .options(selectinload(StudentProgress.student), selectinload(StudentProgress.belt_level))
            .order_by(StudentProgress.updated_at.desc())
        )
        rows = []
        for progress in result.scalars().all():
            row = ProgressBoardRow.model_validate(progress)
            if progress.student is not None:
                row.student_name = progress.student.name
                row.program = progress.student.program
            if progress.belt_level is not None:
                row.belt_color = progress.belt_level.color
                row.belt_rank = progress.belt_level.rank
            rows.append(row)
        return filter_progress_records(rows, filters or ProgressionFilters())

    @staticmethod
    async def list_ready_for_testing(
        db: AsyncSession,
        threshold: int = settings.READY_STRIPE_THRESHOLD,
        registry: Optional[DisciplineRegistry] = None,
    ) -> List[ProgressBoardRow]:
        """Stripe counts only make a student ready in belt-based programs."""
        records = await ProgressionService.list_progress_records(db)
        return ready_for_testing(records, threshold, registry or DisciplineRegistry.default())

    @staticmethod
    async def get_active_progress(db: AsyncSession, student_id: UUID) -> Optional[StudentProgress]:
        """The student's current record; passed records are kept as history."""
        result = await db.execute(
            select(StudentProgress)
            .where(
                StudentProgress.student_id == student_id,
                StudentProgress.status != ProgressStatus.PASSED,
            )
            .order_by(StudentProgress.updated_at.desc())
            .limit(1)
        )
        return result.scalars().first()

    @staticmethod
    async def assign_student_to_level(
        db: AsyncSession,
        data: ProgressAssign,
        registry: Optional[DisciplineRegistry] = None,
        max_stripes: int = settings.MAX_STRIPES,
    ) -> ProgressRecord:
        """
        Put a student on a belt/level.

        A student with an active record is moved to the new level and the
        previous assessment is cleared; otherwise a record is created.
        Discipline filtering is advisory: a level outside the student's
        program is accepted and only logged.
        """
        if data.stripe_count > max_stripes:
            raise StripeCountOutOfRange(data.stripe_count, max_stripes)

        if registry is not None:
            student = await db.get(Student, data.student_id)
            level = await ProgressionService.get_belt_level(db, data.belt_level_id)
            if student is not None and level is not None:
                applicable = registry.filter_applicable_levels(
                    [BeltLevelRecord.model_validate(level)], student.program
                )
                if applicable.is_fallback:
                    logger.warning(
                        "Assigning level outside student's discipline",
                        extra={
                            "student_id": str(data.student_id),
                            "program": student.program,
                            "belt_level_id": str(data.belt_level_id),
                        },
                    )

        progress = await ProgressionService.get_active_progress(db, data.student_id)
        created = progress is None
        if created:
            progress = StudentProgress(student_id=data.student_id, evidence_media_urls=[])
            db.add(progress)

        progress.belt_level_id = data.belt_level_id
        progress.status = data.status
        progress.stripe_count = data.stripe_count
        progress.coach_notes = data.coach_notes
        progress.assessment_date = data.assessment_date

        await db.commit()
        await db.refresh(progress)

        logger.info(
            "Student assigned to level" if created else "Student moved to level",
            extra={"student_id": str(data.student_id), "belt_level_id": str(data.belt_level_id)},
        )
        return ProgressRecord.model_validate(progress)

    @staticmethod
    async def update_progress(
        db: AsyncSession,
        progress_id: UUID,
        data: ProgressUpdate,
        transitions: Optional[StatusTransitions] = None,
        max_stripes: int = settings.MAX_STRIPES,
    ) -> ProgressRecord:
        """
        Apply a partial update; fields absent from the payload keep their values.

        Setting status to passed does not promote the student, see
        promote_student.
        """
        progress = await ProgressionService.get_progress_by_id(db, progress_id)
        if progress is None:
            raise RecordNotFound("Progress record", progress_id)

        changes = data.model_dump(exclude_unset=True)
        # status and stripe_count are NOT NULL; an explicit null leaves them alone
        for field in ("status", "stripe_count"):
            if field in changes and changes[field] is None:
                del changes[field]

        if "status" in changes:
            (transitions or StatusTransitions()).ensure_transition(progress.status, changes["status"])
        if "stripe_count" in changes and changes["stripe_count"] > max_stripes:
            raise StripeCountOutOfRange(changes["stripe_count"], max_stripes)

        for field, value in changes.items():
            setattr(progress, field, value)

        await db.commit()
        await db.refresh(progress)

        logger.info(
            "Progress updated",
            extra={"progress_id": str(progress_id), "fields": sorted(changes)},
        )
        return ProgressRecord.model_validate(progress)

    @staticmethod
    async def add_evidence(db: AsyncSession, progress_id: UUID, media_url: str) -> ProgressRecord:
        progress = await ProgressionService.get_progress_by_id(db, progress_id)
        if progress is None:
            raise RecordNotFound("Progress record", progress_id)

        # Reassign so the JSONB column is flagged dirty
        progress.evidence_media_urls = [*(progress.evidence_media_urls or []), media_url]
        await db.commit()
        await db.refresh(progress)
        return ProgressRecord.model_validate(progress)

    @staticmethod
    async def promote_student(
        db: AsyncSession,
        progress_id: UUID,
        data: PromotionRequest,
    ) -> PromotionResult:
        """
        Coach-triggered promotion to the successor level.

        Marks the current record passed, opens a needs_work record at
        next_level_id and appends a promotion history entry.

        Raises:
            RecordNotFound: unknown progress record or belt level
            PromotionUnavailable: the current level has no successor
        """
        progress = await ProgressionService.get_progress_by_id(db, progress_id)
        if progress is None:
            raise RecordNotFound("Progress record", progress_id)

        if progress.status == ProgressStatus.PASSED:
            raise PromotionUnavailable("This progress record has already been promoted")

        level = await ProgressionService.get_belt_level(db, progress.belt_level_id)
        if level is None:
            raise RecordNotFound("Belt level", progress.belt_level_id)
        if level.next_level_id is None:
            raise PromotionUnavailable(f"{level.color} (rank {level.rank}) has no next level to promote to")

        progress.status = ProgressStatus.PASSED
        if data.assessment_date is not None:
            progress.assessment_date = data.assessment_date
        if data.promoted_by is not None:
            progress.assessed_by = data.promoted_by

        successor = StudentProgress(
            student_id=progress.student_id,
            belt_level_id=level.next_level_id,
            status=ProgressStatus.NEEDS_WORK,
            stripe_count=0,
            evidence_media_urls=[],
        )
        history = PromotionHistory(
            student_id=progress.student_id,
            from_belt_id=level.id,
            to_belt_id=level.next_level_id,
            promoted_by=data.promoted_by,
            promoted_at=get_utc_now(),
            notes=data.notes,
        )
        db.add(successor)
        db.add(history)
        await db.commit()
        for obj in (progress, successor, history):
            await db.refresh(obj)

        logger.info(
            "Student promoted",
            extra={
                "student_id": str(progress.student_id),
                "from_belt_id": str(level.id),
                "to_belt_id": str(level.next_level_id),
            },
        )
        return PromotionResult(
            previous=ProgressRecord.model_validate(progress),
            current=ProgressRecord.model_validate(successor),
            history=PromotionHistoryRecord.model_validate(history),
        )

    @staticmethod
    async def list_promotion_history(db: AsyncSession, limit: int = 50) -> List[PromotionHistoryRecord]:
        result = await db.execute(
            select(PromotionHistory).order_by(PromotionHistory.promoted_at.desc()).limit(limit)
        )
        return [PromotionHistoryRecord.model_validate(entry) for entry in result.scalars().all()]
