"""Schemas for results, leaderboards and toppers."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from examhub.ranking.records import CompetitionGroup, RankedResult, ResultRecord, group_label
from examhub.ranking.scoring import ResultStatus, result_status

Mark = Annotated[int, Field(ge=0, le=100)]


# ============================================================================
# Write Schemas
# ============================================================================


class ResultCreate(BaseModel):
    """POST /results."""

    registration_id: int = Field(..., gt=0, description="Registration the marks belong to")
    gk: Mark
    science: Mark
    mathematics: Mark
    logical_reasoning: Mark
    current_affairs: Mark


class ResultUpdate(BaseModel):
    """PATCH /results/{id}. Only subject marks are editable."""

    model_config = ConfigDict(extra="forbid")

    gk: int | None = Field(default=None, ge=0, le=100)
    science: int | None = Field(default=None, ge=0, le=100)
    mathematics: int | None = Field(default=None, ge=0, le=100)
    logical_reasoning: int | None = Field(default=None, ge=0, le=100)
    current_affairs: int | None = Field(default=None, ge=0, le=100)


class ResultResponse(BaseModel):
    """Stored result row."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    exam_year_id: int
    registration_id: int
    gk: int
    science: int
    mathematics: int
    logical_reasoning: int
    current_affairs: int
    total: int
    percentage: float
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ============================================================================
# Read Schemas
# ============================================================================


class SubjectMarks(BaseModel):
    gk: int
    science: int
    mathematics: int
    logical_reasoning: int
    current_affairs: int


class StudentSummary(BaseModel):
    """Candidate identity shown next to a score."""

    full_name: str
    class_level: int
    group: CompetitionGroup | None = None
    school_name: str
    district_name: str
    school_roll_no: str
    medium: str = "Both"

    @classmethod
    def from_record(cls, record: ResultRecord) -> StudentSummary:
        return cls(
            full_name=record.full_name,
            class_level=record.class_level,
            group=record.competition_group,
            school_name=record.school_name,
            district_name=record.district_name,
            school_roll_no=record.school_roll_no,
            medium=record.medium or "Both",
        )


class TopperEntry(BaseModel):
    """A topper within a scope."""

    registration_id: int
    rank: int
    scope: str
    student: StudentSummary
    total: int
    percentage: float

    @classmethod
    def from_ranked(cls, ranked: RankedResult) -> TopperEntry:
        record = ranked.record
        return cls(
            registration_id=record.registration_id,
            rank=ranked.rank,
            scope=ranked.scope.value,
            student=StudentSummary.from_record(record),
            total=record.total,
            percentage=round(record.percentage, 2),
        )


class LeaderboardEntry(TopperEntry):
    """Full leaderboard row with marks and pass/fail status."""

    result_id: int | None = None
    marks: SubjectMarks
    result_status: ResultStatus

    @classmethod
    def from_ranked(cls, ranked: RankedResult) -> LeaderboardEntry:
        record = ranked.record
        return cls(
            registration_id=record.registration_id,
            rank=ranked.rank,
            scope=ranked.scope.value,
            student=StudentSummary.from_record(record),
            total=record.total,
            percentage=round(record.percentage, 2),
            result_id=record.result_id,
            marks=SubjectMarks(**record.scores.as_dict()),
            result_status=result_status(record.total),
        )


class GroupToppersResponse(BaseModel):
    """Toppers of one group."""

    group: str | int
    toppers: list[TopperEntry]


class SchoolInfo(BaseModel):
    id: int
    name: str
    district_id: int
    district_name: str
    medium: str = "Both"

    @classmethod
    def from_school(cls, school) -> SchoolInfo:
        return cls(
            id=school.id,
            name=school.name,
            district_id=school.district_id,
            district_name=school.district.name,
            medium=school.medium or "Both",
        )


class SchoolResultsResponse(BaseModel):
    """GET /public/results/by-school."""

    exam_year: int
    school: SchoolInfo
    results: list[LeaderboardEntry]


def group_toppers_response(group, ranked: list[RankedResult]) -> GroupToppersResponse:
    return GroupToppersResponse(
        group=group_label(group),
        toppers=[TopperEntry.from_ranked(r) for r in ranked],
    )
