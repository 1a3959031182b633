"""Progression endpoints - belt/level assignment and the coach board"""

from typing import Any, List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from academy.api import deps
from academy.config import settings
from academy.models.enums import ProgressStatus
from academy.schemas.progression import (
    ProgressAssign,
    ProgressionFilters,
    ProgressUpdate,
    PromotionRequest,
)
from academy.schemas.responses import SuccessResponse
from academy.services.discipline import DisciplineRegistry
from academy.services.progression_rules import (
    StatusTransitions,
    belt_options,
    group_levels_by_discipline,
    level_options,
)
from academy.services.progression_service import ProgressionService

router = APIRouter()


@router.get("/classify", response_model=SuccessResponse)
async def classify_program(
    program: str = "",
    registry: DisciplineRegistry = Depends(deps.get_discipline_registry),
) -> Any:
    """Discipline type and configuration for a program name."""
    return SuccessResponse(data=registry.classify(program))


@router.get("/disciplines", response_model=SuccessResponse)
async def list_disciplines(
    registry: DisciplineRegistry = Depends(deps.get_discipline_registry),
) -> Any:
    return SuccessResponse(data=registry.configured_programs())


@router.get("/levels", response_model=SuccessResponse)
async def applicable_levels(
    program: Optional[str] = None,
    db: AsyncSession = Depends(deps.get_db),
    registry: DisciplineRegistry = Depends(deps.get_discipline_registry),
) -> Any:
    """Belt levels applicable to a program. Falls back to every level with a notice."""
    result = await ProgressionService.get_applicable_levels(db, program, registry)
    return SuccessResponse(
        data={
            "classification": result.classification,
            "levels": result.levels,
            "options": belt_options(result.levels),
            "is_fallback": result.is_fallback,
        },
        message=result.notice or "Operation successful",
    )


@router.get("/discipline-levels", response_model=SuccessResponse)
async def discipline_levels(db: AsyncSession = Depends(deps.get_db)) -> Any:
    """Level ladders of level-based disciplines, grouped by discipline."""
    levels = await ProgressionService.list_discipline_levels(db)
    return SuccessResponse(
        data={
            "by_discipline": group_levels_by_discipline(levels),
            "options": level_options(levels),
        }
    )


@router.get("", response_model=SuccessResponse)
async def list_progress(
    search: Optional[str] = None,
    program: Optional[str] = None,
    coach_id: Optional[UUID] = None,
    belt_level_id: Optional[UUID] = None,
    statuses: List[ProgressStatus] = Query(default=[]),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Progress board, optionally filtered."""
    filters = ProgressionFilters(
        search=search,
        program=program,
        coach_id=coach_id,
        belt_level_id=belt_level_id,
        statuses=statuses,
    )
    records = await ProgressionService.list_progress_records(db, filters)
    return SuccessResponse(data=records)


@router.get("/ready", response_model=SuccessResponse)
async def ready_for_testing(
    threshold: int = Query(settings.READY_STRIPE_THRESHOLD, ge=0),
    db: AsyncSession = Depends(deps.get_db),
    registry: DisciplineRegistry = Depends(deps.get_discipline_registry),
) -> Any:
    """Students marked ready, or with enough stripes to be considered ready."""
    records = await ProgressionService.list_ready_for_testing(db, threshold, registry)
    return SuccessResponse(data=records)


@router.get("/history", response_model=SuccessResponse)
async def promotion_history(
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    history = await ProgressionService.list_promotion_history(db, limit)
    return SuccessResponse(data=history)


@router.post("", response_model=SuccessResponse)
async def assign_student(
    body: ProgressAssign,
    db: AsyncSession = Depends(deps.get_db),
    registry: DisciplineRegistry = Depends(deps.get_discipline_registry),
) -> Any:
    """Assign a student to a belt/level."""
    record = await ProgressionService.assign_student_to_level(db, body, registry)
    return SuccessResponse(data=record, message="Student assigned")


@router.patch("/{progress_id}", response_model=SuccessResponse)
async def update_progress(
    progress_id: UUID,
    body: ProgressUpdate,
    db: AsyncSession = Depends(deps.get_db),
    transitions: StatusTransitions = Depends(deps.get_status_transitions),
) -> Any:
    """Partially update status, notes, assessment date or stripes."""
    record = await ProgressionService.update_progress(db, progress_id, body, transitions)
    return SuccessResponse(data=record, message="Progress updated")


@router.post("/{progress_id}/evidence", response_model=SuccessResponse)
async def add_evidence(
    progress_id: UUID,
    media_url: str = Body(..., embed=True),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    record = await ProgressionService.add_evidence(db, progress_id, media_url)
    return SuccessResponse(data=record, message="Evidence added")


@router.post("/{progress_id}/promote", response_model=SuccessResponse)
async def promote_student(
    progress_id: UUID,
    body: PromotionRequest,
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """Mark the record passed and open a record at the next level."""
    result = await ProgressionService.promote_student(db, progress_id, body)
    return SuccessResponse(data=result, message="Student promoted")
