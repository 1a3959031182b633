"""Unit tests for progress transitions, readiness and board filtering."""

from uuid import uuid4

import pytest

from academy.core.exceptions import InvalidTransition
from academy.models.enums import ProgressStatus
from academy.schemas.progression import DisciplineLevelRecord, ProgressBoardRow, ProgressionFilters
from academy.services.discipline import DisciplineRegistry
from academy.services.progression_rules import (
    StatusTransitions,
    belt_options,
    filter_progress_records,
    group_levels_by_discipline,
    is_ready_for_testing,
    level_options,
    ready_for_testing,
)


def _row(status=ProgressStatus.NEEDS_WORK, stripe_count=0, **kwargs):
    return ProgressBoardRow(
        id=uuid4(),
        student_id=kwargs.pop("student_id", uuid4()),
        belt_level_id=kwargs.pop("belt_level_id", uuid4()),
        status=status,
        stripe_count=stripe_count,
        **kwargs,
    )


def test_default_transitions_allow_every_move():
    transitions = StatusTransitions()
    for current in ProgressStatus:
        for target in ProgressStatus:
            assert transitions.can_transition(current, target)
            transitions.ensure_transition(current, target)


def test_restricted_table_blocks_moves():
    transitions = StatusTransitions({
        ProgressStatus.NEEDS_WORK: {ProgressStatus.READY},
        ProgressStatus.READY: {ProgressStatus.PASSED, ProgressStatus.DEFERRED},
    })
    assert transitions.can_transition(ProgressStatus.NEEDS_WORK, ProgressStatus.READY)
    assert not transitions.can_transition(ProgressStatus.NEEDS_WORK, ProgressStatus.PASSED)
    assert transitions.allowed_from(ProgressStatus.PASSED) == frozenset()
    with pytest.raises(InvalidTransition) as exc_info:
        transitions.ensure_transition(ProgressStatus.PASSED, ProgressStatus.READY)
    assert exc_info.value.current == ProgressStatus.PASSED


def test_ready_status_is_ready():
    assert is_ready_for_testing(_row(ProgressStatus.READY))


def test_stripe_threshold_counts_as_ready_without_changing_status():
    record = _row(ProgressStatus.NEEDS_WORK, stripe_count=4)
    assert is_ready_for_testing(record)
    assert record.status == ProgressStatus.NEEDS_WORK


def test_below_threshold_is_not_ready():
    assert not is_ready_for_testing(_row(stripe_count=3))
    assert is_ready_for_testing(_row(stripe_count=3), threshold=3)


def test_ready_for_testing_filters_list():
    records = [
        _row(ProgressStatus.READY),
        _row(stripe_count=4),
        _row(ProgressStatus.DEFERRED, stripe_count=1),
    ]
    assert ready_for_testing(records) == records[:2]


def test_filter_by_status_and_program():
    records = [
        _row(ProgressStatus.READY, program="BJJ"),
        _row(ProgressStatus.PASSED, program="BJJ"),
        _row(ProgressStatus.READY, program="Karate"),
    ]
    filters = ProgressionFilters(statuses=[ProgressStatus.READY], program="BJJ")
    assert filter_progress_records(records, filters) == records[:1]


def test_filter_by_belt_and_coach():
    belt_id, coach_id = uuid4(), uuid4()
    records = [
        _row(belt_level_id=belt_id, assessed_by=coach_id),
        _row(belt_level_id=belt_id),
        _row(assessed_by=coach_id),
    ]
    filters = ProgressionFilters(belt_level_id=belt_id, coach_id=coach_id)
    assert filter_progress_records(records, filters) == records[:1]


def test_search_matches_name_belt_and_notes():
    records = [
        _row(student_name="Asha Nair", belt_color="Blue", belt_rank=2),
        _row(student_name="Ravi", coach_notes="Work on guard passing"),
    ]
    assert filter_progress_records(records, ProgressionFilters(search="asha")) == records[:1]
    assert filter_progress_records(records, ProgressionFilters(search="GUARD")) == records[1:]
    assert filter_progress_records(records, ProgressionFilters(search="needs_work")) == records


def test_empty_filters_keep_everything():
    records = [_row(status) for status in ProgressStatus]
    assert filter_progress_records(records, ProgressionFilters()) == records


def test_belt_options(make_level):
    options = belt_options([make_level("White", 1), make_level("Blue", 2, "bjj")])
    assert [o.label for o in options] == ["White (Rank 1)", "Blue (Rank 2)"]
    assert options[1].discipline == "bjj"


def test_discipline_level_grouping_and_options():
    levels = [
        DisciplineLevelRecord(id=uuid4(), discipline="Boxing", level_name="Advanced", level_order=3),
        DisciplineLevelRecord(id=uuid4(), discipline="MMA", level_name="Foundation", level_order=1),
        DisciplineLevelRecord(id=uuid4(), discipline="Boxing", level_name="Beginner", level_order=1),
    ]
    grouped = group_levels_by_discipline(levels)
    assert list(grouped) == ["Boxing", "MMA"]
    assert [lvl.level_name for lvl in grouped["Boxing"]] == ["Beginner", "Advanced"]
    assert level_options(levels)[0].label == "Advanced (Boxing)"


def test_program_filter_ignores_case_and_spacing():
    records = [_row(program="BJJ"), _row(program="Karate")]
    assert filter_progress_records(records, ProgressionFilters(program=" bjj ")) == records[:1]


def test_stripes_do_not_make_level_programs_ready():
    registry = DisciplineRegistry.default()
    boxer = _row(stripe_count=4, program="Boxing")
    grappler = _row(stripe_count=4, program="Grappling")
    unassigned = _row(stripe_count=4)

    assert not is_ready_for_testing(boxer, registry=registry)
    assert is_ready_for_testing(grappler, registry=registry)
    assert is_ready_for_testing(unassigned, registry=registry)
    assert is_ready_for_testing(_row(ProgressStatus.READY, program="Boxing"), registry=registry)
    assert ready_for_testing([boxer, grappler], registry=registry) == [grappler]
