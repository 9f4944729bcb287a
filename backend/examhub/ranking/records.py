"""Value types consumed and produced by the ranking engine."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Union

GROUP_A_CLASSES = range(6, 9)
GROUP_B_CLASSES = range(9, 13)


class CompetitionGroup(str, Enum):
    """Cohort a candidate competes in, fixed at registration."""

    A = "A"
    B = "B"


class RankScope(str, Enum):
    """Partition a ranking is computed within."""

    GLOBAL = "global"
    GROUP = "group"
    SCHOOL = "school"


@dataclass(frozen=True, order=True)
class RawClass:
    """Group key used when a record carries no competition group."""

    value: int


GroupKey = Union[CompetitionGroup, RawClass]


def parse_competition_group(value: str | None) -> CompetitionGroup | None:
    """Stored group code to enum; empty or unrecognised codes give None."""
    if not value:
        return None
    try:
        return CompetitionGroup(value.strip().upper())
    except ValueError:
        return None


def competition_group_for_class(class_level: int) -> CompetitionGroup | None:
    """Classes 6-8 compete in group A, 9-12 in group B."""
    if class_level in GROUP_A_CLASSES:
        return CompetitionGroup.A
    if class_level in GROUP_B_CLASSES:
        return CompetitionGroup.B
    return None


def group_label(key: GroupKey) -> str | int:
    """JSON-facing value of a group key ("A", "B" or the raw class number)."""
    return key.value


@dataclass(frozen=True)
class SubjectScores:
    """The five subject marks, each in [0, 100]."""

    gk: int
    science: int
    mathematics: int
    logical_reasoning: int
    current_affairs: int

    def values(self) -> tuple[int, int, int, int, int]:
        return (
            self.gk,
            self.science,
            self.mathematics,
            self.logical_reasoning,
            self.current_affairs,
        )

    def as_dict(self) -> dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def merged(self, **updates: int | None) -> SubjectScores:
        """Return a copy with every non-None update applied over the current marks."""
        known = {f.name for f in fields(self)}
        unknown = set(updates) - known
        if unknown:
            raise TypeError(f"Unknown subject(s): {', '.join(sorted(unknown))}")
        return replace(self, **{k: v for k, v in updates.items() if v is not None})


@dataclass(frozen=True)
class ResultRecord:
    """One candidate's result joined with registration, school and district attributes."""

    registration_id: int
    exam_year_id: int
    scores: SubjectScores
    total: int
    percentage: float
    full_name: str
    class_level: int
    competition_group: CompetitionGroup | None
    school_id: int
    district_id: int
    school_name: str = ""
    district_name: str = ""
    school_roll_no: str = ""
    medium: str | None = None
    result_id: int | None = None

    @property
    def group_key(self) -> GroupKey:
        if self.competition_group is not None:
            return self.competition_group
        return RawClass(self.class_level)


@dataclass(frozen=True)
class RankedResult:
    """A record with its position inside a scope."""

    record: ResultRecord
    rank: int
    scope: RankScope


@dataclass(frozen=True)
class GroupToppers:
    """Toppers of a single group, in rank order."""

    group: GroupKey
    toppers: tuple[RankedResult, ...]
