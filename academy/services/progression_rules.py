"""Progress status transitions, readiness and board filtering"""

from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional

from academy.core.exceptions import InvalidTransition
from academy.models.enums import DisciplineType, ProgressStatus
from academy.schemas.progression import (
    BeltLevelRecord,
    DisciplineLevelRecord,
    LevelOption,
    ProgressBoardRow,
    ProgressionFilters,
    ProgressRecord,
)
from academy.services.discipline import DisciplineRegistry, normalize_program

READY_STRIPE_THRESHOLD = 4

ALL_STATUSES: FrozenSet[ProgressStatus] = frozenset(ProgressStatus)

# Coaches may move a record between any two statuses. Tighten here.
DEFAULT_TRANSITIONS: Dict[ProgressStatus, FrozenSet[ProgressStatus]] = {
    status: ALL_STATUSES for status in ProgressStatus
}


class StatusTransitions:
    """Table of allowed status moves, keyed by the current status."""

    def __init__(self, table: Optional[Mapping[ProgressStatus, Iterable[ProgressStatus]]] = None):
        source = DEFAULT_TRANSITIONS if table is None else table
        self._table = {current: frozenset(targets) for current, targets in source.items()}

    def allowed_from(self, current: ProgressStatus) -> FrozenSet[ProgressStatus]:
        return self._table.get(current, frozenset())

    def can_transition(self, current: ProgressStatus, target: ProgressStatus) -> bool:
        return target in self.allowed_from(current)

    def ensure_transition(self, current: ProgressStatus, target: ProgressStatus) -> None:
        if not self.can_transition(current, target):
            raise InvalidTransition(current, target)


def is_ready_for_testing(
    record: ProgressRecord,
    threshold: int = READY_STRIPE_THRESHOLD,
    registry: Optional[DisciplineRegistry] = None,
) -> bool:
    """
    Whether a student shows up in the "ready for testing" view.

    Reaching the stripe threshold counts as ready without changing the
    stored status. With a registry, stripes only count for belt-based
    programs; a record without a program resolves to the general belt ladder.
    """
    if record.status == ProgressStatus.READY:
        return True
    if registry is not None:
        program = getattr(record, "program", None)
        if registry.classify(program).type != DisciplineType.BELT:
            return False
    return record.stripe_count >= threshold


def ready_for_testing(
    records: Iterable[ProgressRecord],
    threshold: int = READY_STRIPE_THRESHOLD,
    registry: Optional[DisciplineRegistry] = None,
) -> list:
    return [record for record in records if is_ready_for_testing(record, threshold, registry)]


def filter_progress_records(
    records: Iterable[ProgressBoardRow],
    filters: ProgressionFilters,
) -> List[ProgressBoardRow]:
    search = (filters.search or "").strip().lower()
    allowed = set(filters.statuses) if filters.statuses else ALL_STATUSES

    out = []
    for record in records:
        if record.status not in allowed:
            continue
        if filters.program and normalize_program(record.program) != normalize_program(filters.program):
            continue
        if filters.belt_level_id and record.belt_level_id != filters.belt_level_id:
            continue
        if filters.coach_id and record.assessed_by != filters.coach_id:
            continue
        if search:
            haystack = " ".join([
                record.student_name or "",
                record.program or "",
                record.belt_color or "",
                str(record.belt_rank) if record.belt_rank is not None else "",
                record.status.value,
                record.coach_notes or "",
            ]).lower()
            if search not in haystack:
                continue
        out.append(record)
    return out


def belt_options(levels: Iterable[BeltLevelRecord]) -> List[LevelOption]:
    return [
        LevelOption(
            label=f"{level.color} (Rank {level.rank})",
            value=level.id,
            discipline=level.discipline,
            order=level.rank,
            color=level.color,
        )
        for level in levels
    ]


def level_options(levels: Iterable[DisciplineLevelRecord]) -> List[LevelOption]:
    return [
        LevelOption(
            label=f"{level.level_name} ({level.discipline})",
            value=level.id,
            discipline=level.discipline,
            order=level.level_order,
        )
        for level in levels
    ]


def group_levels_by_discipline(levels: Iterable[DisciplineLevelRecord]) -> Dict[str, List[DisciplineLevelRecord]]:
    grouped: Dict[str, List[DisciplineLevelRecord]] = {}
    for level in sorted(levels, key=lambda lvl: (lvl.discipline, lvl.level_order)):
        grouped.setdefault(level.discipline, []).append(level)
    return grouped
