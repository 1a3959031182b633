"""Unit tests for ProgressionService with a mocked session."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from academy.core.exceptions import InvalidTransition, PromotionUnavailable, RecordNotFound, StripeCountOutOfRange
from academy.models.enums import ProgressStatus
from academy.models.progression import BeltLevel, PromotionHistory, StudentProgress
from academy.models.student import Student
from academy.schemas.progression import ProgressAssign, ProgressionFilters, ProgressUpdate, PromotionRequest
from academy.services.discipline import DisciplineRegistry
from academy.services.progression_rules import StatusTransitions
from academy.services.progression_service import ProgressionService

GET_PROGRESS = "academy.services.progression_service.ProgressionService.get_progress_by_id"
GET_LEVEL = "academy.services.progression_service.ProgressionService.get_belt_level"
GET_ACTIVE = "academy.services.progression_service.ProgressionService.get_active_progress"


def _progress(**kwargs):
    defaults = dict(
        id=uuid4(),
        student_id=uuid4(),
        belt_level_id=uuid4(),
        status=ProgressStatus.NEEDS_WORK,
        stripe_count=1,
        coach_notes="Keep elbows in",
        evidence_media_urls=[],
    )
    defaults.update(kwargs)
    return StudentProgress(**defaults)


@pytest.mark.asyncio
async def test_assign_student_defaults_to_needs_work(db):
    data = ProgressAssign(student_id=uuid4(), belt_level_id=uuid4())

    with patch(GET_ACTIVE, new_callable=AsyncMock) as mock_active:
        mock_active.return_value = None
        record = await ProgressionService.assign_student_to_level(db, data)

    added = db.add.call_args.args[0]
    assert isinstance(added, StudentProgress)
    assert db.commit.called
    assert record.status == ProgressStatus.NEEDS_WORK
    assert record.stripe_count == 0
    assert record.evidence_media_urls == []


@pytest.mark.asyncio
async def test_assign_outside_discipline_is_allowed(db):
    student = Student(id=uuid4(), name="Ravi", program="Boxing")
    level = BeltLevel(id=uuid4(), discipline="karate", rank=3, color="Green")
    db.get.return_value = student
    data = ProgressAssign(student_id=student.id, belt_level_id=level.id, status=ProgressStatus.READY)

    with patch(GET_LEVEL, new_callable=AsyncMock) as mock_level, \
            patch(GET_ACTIVE, new_callable=AsyncMock) as mock_active:
        mock_level.return_value = level
        mock_active.return_value = None
        with patch("academy.services.progression_service.logger") as mock_logger:
            record = await ProgressionService.assign_student_to_level(db, data, DisciplineRegistry.default())

    assert record.status == ProgressStatus.READY
    assert db.commit.called
    assert mock_logger.warning.called


@pytest.mark.asyncio
async def test_update_changes_only_supplied_fields(db):
    progress = _progress()
    with patch(GET_PROGRESS, new_callable=AsyncMock) as mock_get:
        mock_get.return_value = progress
        record = await ProgressionService.update_progress(
            db, progress.id, ProgressUpdate(status=ProgressStatus.READY)
        )

    assert record.status == ProgressStatus.READY
    assert record.coach_notes == "Keep elbows in"
    assert record.stripe_count == 1
    assert db.commit.called


@pytest.mark.asyncio
async def test_update_can_clear_notes_and_set_stripes(db):
    progress = _progress()
    with patch(GET_PROGRESS, new_callable=AsyncMock) as mock_get:
        mock_get.return_value = progress
        record = await ProgressionService.update_progress(
            db, progress.id, ProgressUpdate(coach_notes=None, stripe_count=4, assessment_date=date(2025, 6, 1))
        )

    assert record.coach_notes is None
    assert record.stripe_count == 4
    assert record.assessment_date == date(2025, 6, 1)
    assert record.status == ProgressStatus.NEEDS_WORK


@pytest.mark.asyncio
async def test_update_passed_does_not_promote(db):
    progress = _progress()
    with patch(GET_PROGRESS, new_callable=AsyncMock) as mock_get:
        mock_get.return_value = progress
        await ProgressionService.update_progress(db, progress.id, ProgressUpdate(status=ProgressStatus.PASSED))

    assert not db.add.called


@pytest.mark.asyncio
async def test_update_respects_transition_table(db):
    progress = _progress(status=ProgressStatus.PASSED)
    transitions = StatusTransitions({ProgressStatus.PASSED: set()})
    with patch(GET_PROGRESS, new_callable=AsyncMock) as mock_get:
        mock_get.return_value = progress
        with pytest.raises(InvalidTransition):
            await ProgressionService.update_progress(
                db, progress.id, ProgressUpdate(status=ProgressStatus.READY), transitions
            )

    assert not db.commit.called


@pytest.mark.asyncio
async def test_update_rejects_too_many_stripes(db):
    progress = _progress()
    with patch(GET_PROGRESS, new_callable=AsyncMock) as mock_get:
        mock_get.return_value = progress
        with pytest.raises(StripeCountOutOfRange):
            await ProgressionService.update_progress(
                db, progress.id, ProgressUpdate(stripe_count=5), max_stripes=4
            )


@pytest.mark.asyncio
async def test_update_unknown_record(db):
    with patch(GET_PROGRESS, new_callable=AsyncMock) as mock_get:
        mock_get.return_value = None
        with pytest.raises(RecordNotFound):
            await ProgressionService.update_progress(db, uuid4(), ProgressUpdate(status=ProgressStatus.READY))


@pytest.mark.asyncio
async def test_add_evidence_appends(db):
    progress = _progress(evidence_media_urls=["a.jpg"])
    with patch(GET_PROGRESS, new_callable=AsyncMock) as mock_get:
        mock_get.return_value = progress
        record = await ProgressionService.add_evidence(db, progress.id, "b.jpg")

    assert record.evidence_media_urls == ["a.jpg", "b.jpg"]


@pytest.mark.asyncio
async def test_promote_opens_record_at_next_level(db):
    next_id = uuid4()
    level = BeltLevel(id=uuid4(), rank=1, color="White", next_level_id=next_id)
    progress = _progress(belt_level_id=level.id, status=ProgressStatus.READY, stripe_count=4)
    coach = uuid4()

    with patch(GET_PROGRESS, new_callable=AsyncMock) as mock_get:
        mock_get.return_value = progress
        with patch(GET_LEVEL, new_callable=AsyncMock) as mock_level:
            mock_level.return_value = level
            result = await ProgressionService.promote_student(
                db, progress.id, PromotionRequest(promoted_by=coach, notes="Clean grading")
            )

    added = [call.args[0] for call in db.add.call_args_list]
    assert any(isinstance(obj, PromotionHistory) for obj in added)
    assert result.previous.status == ProgressStatus.PASSED
    assert result.previous.assessed_by == coach
    assert result.current.belt_level_id == next_id
    assert result.current.status == ProgressStatus.NEEDS_WORK
    assert result.current.stripe_count == 0
    assert result.history.from_belt_id == level.id
    assert result.history.to_belt_id == next_id
    assert result.history.notes == "Clean grading"


@pytest.mark.asyncio
async def test_promote_without_successor(db):
    level = BeltLevel(id=uuid4(), rank=6, color="Black", next_level_id=None)
    progress = _progress(belt_level_id=level.id)

    with patch(GET_PROGRESS, new_callable=AsyncMock) as mock_get:
        mock_get.return_value = progress
        with patch(GET_LEVEL, new_callable=AsyncMock) as mock_level:
            mock_level.return_value = level
            with pytest.raises(PromotionUnavailable):
                await ProgressionService.promote_student(db, progress.id, PromotionRequest())

    assert progress.status == ProgressStatus.NEEDS_WORK
    assert not db.commit.called


@pytest.mark.asyncio
async def test_list_progress_records_joins_student_and_belt(db):
    student = Student(id=uuid4(), name="Asha", program="BJJ")
    level = BeltLevel(id=uuid4(), rank=2, color="Blue")
    ready = _progress(student_id=student.id, belt_level_id=level.id, stripe_count=4)
    ready.student = student
    ready.belt_level = level
    other = _progress()
    result = MagicMock()
    result.scalars.return_value.all.return_value = [ready, other]
    db.execute.return_value = result

    rows = await ProgressionService.list_progress_records(db, ProgressionFilters(program="BJJ"))

    assert len(rows) == 1
    assert rows[0].student_name == "Asha"
    assert rows[0].belt_color == "Blue"
    assert rows[0].belt_rank == 2


@pytest.mark.asyncio
async def test_list_ready_for_testing_uses_stripe_threshold(db):
    needs_work_with_stripes = _progress(stripe_count=4)
    needs_work = _progress(stripe_count=2)
    result = MagicMock()
    result.scalars.return_value.all.return_value = [needs_work_with_stripes, needs_work]
    db.execute.return_value = result

    rows = await ProgressionService.list_ready_for_testing(db, threshold=4)

    assert [row.id for row in rows] == [needs_work_with_stripes.id]
    assert rows[0].status == ProgressStatus.NEEDS_WORK


@pytest.mark.asyncio
async def test_assign_rejects_too_many_stripes(db):
    data = ProgressAssign(student_id=uuid4(), belt_level_id=uuid4(), stripe_count=99)

    with pytest.raises(StripeCountOutOfRange) as exc_info:
        await ProgressionService.assign_student_to_level(db, data, max_stripes=4)

    assert exc_info.value.stripe_count == 99
    assert not db.add.called
    assert not db.commit.called


@pytest.mark.asyncio
async def test_reassign_moves_existing_record(db):
    current = _progress(status=ProgressStatus.READY, stripe_count=3, assessment_date=date(2025, 5, 1))
    new_level = uuid4()
    data = ProgressAssign(student_id=current.student_id, belt_level_id=new_level)

    with patch(GET_ACTIVE, new_callable=AsyncMock) as mock_active:
        mock_active.return_value = current
        record = await ProgressionService.assign_student_to_level(db, data)

    mock_active.assert_awaited_once_with(db, current.student_id)
    assert not db.add.called
    assert db.commit.called
    assert record.id == current.id
    assert record.belt_level_id == new_level
    assert record.status == ProgressStatus.NEEDS_WORK
    assert record.stripe_count == 0
    assert record.coach_notes is None
    assert record.assessment_date is None


@pytest.mark.asyncio
async def test_promote_twice_is_rejected(db):
    level = BeltLevel(id=uuid4(), rank=1, color="White", next_level_id=uuid4())
    progress = _progress(belt_level_id=level.id, status=ProgressStatus.PASSED)

    with patch(GET_PROGRESS, new_callable=AsyncMock) as mock_get:
        mock_get.return_value = progress
        with patch(GET_LEVEL, new_callable=AsyncMock) as mock_level:
            mock_level.return_value = level
            with pytest.raises(PromotionUnavailable):
                await ProgressionService.promote_student(db, progress.id, PromotionRequest())

    assert not db.add.called
    assert not db.commit.called
