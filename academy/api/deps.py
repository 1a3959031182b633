"""API Dependencies"""

from functools import lru_cache

from academy.database import get_db
from academy.services.discipline import DisciplineRegistry
from academy.services.progression_rules import StatusTransitions

__all__ = ["get_db", "get_discipline_registry", "get_status_transitions"]


@lru_cache
def get_discipline_registry() -> DisciplineRegistry:
    """Program -> discipline table; override in tests via app.dependency_overrides."""
    return DisciplineRegistry.default()


@lru_cache
def get_status_transitions() -> StatusTransitions:
    return StatusTransitions()
