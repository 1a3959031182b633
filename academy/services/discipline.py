"""Program -> discipline classification and applicable belt/level filtering"""

from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from academy.models.enums import DisciplineType
from academy.schemas.progression import (
    BeltLevelRecord,
    DisciplineClassification,
    DisciplineConfig,
    LevelFilterResult,
)

GENERAL_KEY = "general"

# Used for any program the registry does not know.
GENERAL_DISCIPLINE = DisciplineConfig(
    name="General",
    type=DisciplineType.BELT,
    has_stripes=False,
    description="Shared belt ladder for programs without their own configuration",
)

DEFAULT_DISCIPLINES: Dict[str, DisciplineConfig] = {
    "Taekwondo": DisciplineConfig(
        name="Taekwondo",
        type=DisciplineType.BELT,
        description="Korean martial art with belt progression",
        belts=["White", "Yellow", "Green", "Blue", "Red", "Black"],
    ),
    "Karate": DisciplineConfig(
        name="Karate",
        type=DisciplineType.BELT,
        description="Japanese martial art with belt progression",
        belts=["White", "Yellow", "Orange", "Green", "Blue", "Brown", "Black"],
    ),
    "Grappling": DisciplineConfig(
        name="Grappling (BJJ)",
        type=DisciplineType.BELT,
        has_stripes=True,
        description="Brazilian Jiu-Jitsu following the IBJJF belt system",
        belts=["White", "Blue", "Purple", "Brown", "Black"],
    ),
    "BJJ": DisciplineConfig(
        name="Brazilian Jiu-Jitsu",
        type=DisciplineType.BELT,
        has_stripes=True,
        description="IBJJF standard belt system with stripes",
        belts=["White", "Blue", "Purple", "Brown", "Black"],
    ),
    "Boxing": DisciplineConfig(
        name="Boxing",
        type=DisciplineType.LEVEL,
        description="No belts - performance-based progression",
        levels=["Beginner", "Intermediate", "Advanced", "Competition"],
    ),
    "MMA": DisciplineConfig(
        name="Mixed Martial Arts",
        type=DisciplineType.LEVEL,
        description="No belts - experience/fight readiness levels",
        levels=["Foundation", "Intermediate", "Advanced", "Fighter"],
    ),
    "Self-Defense": DisciplineConfig(
        name="Self-Defense",
        type=DisciplineType.LEVEL,
        description="Skill-based progression",
        levels=["Awareness", "Basic Defense", "Advanced Defense", "Instructor"],
    ),
    "Fitness": DisciplineConfig(
        name="Fitness Training",
        type=DisciplineType.LEVEL,
        description="Milestone-based progression",
        levels=["Starter", "Active", "Fit", "Elite"],
    ),
    "Fat Loss": DisciplineConfig(
        name="Fat Loss Program",
        type=DisciplineType.LEVEL,
        description="Program phase progression",
        levels=["Week 1-4", "Week 5-8", "Week 9-12", "Maintenance"],
    ),
    "Kalaripayattu": DisciplineConfig(
        name="Kalaripayattu",
        type=DisciplineType.LEVEL,
        description="Traditional Indian martial art - varies by school",
        levels=["Meythari", "Kolthari", "Ankathari", "Verumkai", "Gurukkal"],
    ),
}

DEFAULT_SYNONYMS: Tuple[Tuple[str, str], ...] = (("grappling", "bjj"),)


def normalize_program(program: Optional[str]) -> str:
    return (program or "").strip().lower()


def _is_general(discipline: Optional[str]) -> bool:
    return normalize_program(discipline) in ("", GENERAL_KEY)


class DisciplineRegistry:
    """
    Injectable program -> discipline table.

    Keys are matched case-insensitively. Synonym pairs are symmetric, so a
    level tagged "bjj" also applies to a "Grappling" student.
    """

    def __init__(
        self,
        disciplines: Mapping[str, DisciplineConfig],
        synonyms: Iterable[Tuple[str, str]] = (),
        fallback: DisciplineConfig = GENERAL_DISCIPLINE,
    ):
        self._disciplines = {normalize_program(k): v for k, v in disciplines.items()}
        self._synonyms: Dict[str, Set[str]] = {}
        for left, right in synonyms:
            left, right = normalize_program(left), normalize_program(right)
            self._synonyms.setdefault(left, set()).add(right)
            self._synonyms.setdefault(right, set()).add(left)
        self.fallback = fallback

    @classmethod
    def default(cls) -> "DisciplineRegistry":
        return cls(DEFAULT_DISCIPLINES, DEFAULT_SYNONYMS)

    def synonyms_of(self, program: Optional[str]) -> Set[str]:
        return set(self._synonyms.get(normalize_program(program), ()))

    def classify(self, program: Optional[str]) -> DisciplineClassification:
        key = normalize_program(program)
        config = self._disciplines.get(key)
        if config is None:
            config = next(
                (self._disciplines[alias] for alias in sorted(self.synonyms_of(key)) if alias in self._disciplines),
                None,
            )
        if config is None:
            return DisciplineClassification(
                program=program or "",
                key=GENERAL_KEY,
                type=self.fallback.type,
                config=self.fallback,
                is_fallback=True,
            )
        return DisciplineClassification(
            program=program or "",
            key=key,
            type=config.type,
            config=config,
        )

    def filter_applicable_levels(
        self,
        all_levels: Iterable[BeltLevelRecord],
        program: Optional[str],
    ) -> LevelFilterResult:
        """
        Belt/level options that apply to a program, ordered by rank.

        Belt disciplines get their own tagged ladder plus the general one;
        level disciplines only see general levels. When nothing matches, the
        whole set is returned with a notice instead of blocking assignment.
        """
        all_levels = list(all_levels)
        classification = self.classify(program)
        key = normalize_program(program)

        if classification.type == DisciplineType.BELT:
            accepted = {key} | self.synonyms_of(key)
            matched = [
                level for level in all_levels
                if _is_general(level.discipline) or normalize_program(level.discipline) in accepted
            ]
        else:
            matched = [level for level in all_levels if _is_general(level.discipline)]

        if matched:
            return LevelFilterResult(
                classification=classification,
                levels=sorted(matched, key=lambda level: level.rank),
            )

        label = program or "this program"
        return LevelFilterResult(
            classification=classification,
            levels=sorted(all_levels, key=lambda level: level.rank),
            is_fallback=True,
            notice=f"No belt levels are configured for {label}; showing all levels.",
        )

    def configured_programs(self) -> List[str]:
        return sorted(config.name for config in self._disciplines.values())
