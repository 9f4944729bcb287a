"""Results API: score entry and staff leaderboards.

Authentication and role checks are applied by the deployment in front of
this router.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from examhub.common.pagination import PaginatedResponse, PaginationParams, pagination_params
from examhub.db.session import get_db
from examhub.ranking import RankScope, SubjectScores, rank_results, toppers
from examhub.ranking.records import CompetitionGroup, RankedResult
from examhub.results.service import (
    create_result,
    delete_result,
    fetch_result_records,
    get_active_school,
    get_exam_year,
    get_result,
    update_result,
)
from examhub.schemas.results import (
    LeaderboardEntry,
    ResultCreate,
    ResultResponse,
    ResultUpdate,
    TopperEntry,
)

router = APIRouter(prefix="/results", tags=["Results"])

MAX_TOPPERS_LIMIT = 100


# ============================================================================
# Leaderboards
# ============================================================================


@router.get(
    "",
    response_model=PaginatedResponse[LeaderboardEntry],
    summary="Full leaderboard",
    description=(
        "All results of an exam year in leaderboard order with global ranks. "
        "Filters narrow the listing but never change the ranks."
    ),
)
def list_results(
    db: Annotated[Session, Depends(get_db)],
    pagination: Annotated[PaginationParams, Depends(pagination_params)],
    exam_year_id: int = Query(..., ge=1),
    district_id: int | None = Query(None, ge=1),
    school_id: int | None = Query(None, ge=1),
    group: CompetitionGroup | None = Query(None),
    class_level: int | None = Query(None, ge=6, le=12),
) -> PaginatedResponse[LeaderboardEntry]:
    exam_year = get_exam_year(db, exam_year_id=exam_year_id)
    records = fetch_result_records(db, exam_year.id)
    ranked = rank_results(records, RankScope.GLOBAL, tiebreak_gk=True)

    def keep(entry: RankedResult) -> bool:
        r = entry.record
        return (
            (district_id is None or r.district_id == district_id)
            and (school_id is None or r.school_id == school_id)
            and (group is None or r.competition_group == group)
            and (class_level is None or r.class_level == class_level)
        )

    filtered = [entry for entry in ranked if keep(entry)]
    page = [LeaderboardEntry.from_ranked(entry) for entry in pagination.slice(filtered)]
    return PaginatedResponse[LeaderboardEntry].build(page, pagination, total=len(filtered))


@router.get(
    "/toppers/global",
    response_model=list[TopperEntry],
    summary="Exam year toppers",
    description="Top `limit` candidates of the exam year (or of one group), ties at the cutoff included.",
)
def global_toppers(
    db: Annotated[Session, Depends(get_db)],
    exam_year_id: int = Query(..., ge=1),
    group: CompetitionGroup | None = Query(None),
    limit: int = Query(3, ge=1, le=MAX_TOPPERS_LIMIT),
) -> list[TopperEntry]:
    exam_year = get_exam_year(db, exam_year_id=exam_year_id)
    records = fetch_result_records(db, exam_year.id, group=group)
    scope = RankScope.GROUP if group else RankScope.GLOBAL
    return [TopperEntry.from_ranked(r) for r in toppers(records, limit, scope)]


@router.get(
    "/toppers/school",
    response_model=list[TopperEntry],
    summary="School toppers",
    description="Top `limit` candidates of one school, ranked within the school only.",
)
def school_toppers(
    db: Annotated[Session, Depends(get_db)],
    exam_year_id: int = Query(..., ge=1),
    school_id: int = Query(..., ge=1),
    group: CompetitionGroup | None = Query(None),
    limit: int = Query(3, ge=1, le=MAX_TOPPERS_LIMIT),
) -> list[TopperEntry]:
    exam_year = get_exam_year(db, exam_year_id=exam_year_id)
    school = get_active_school(db, school_id)
    records = fetch_result_records(db, exam_year.id, school_id=school.id, group=group)
    return [TopperEntry.from_ranked(r) for r in toppers(records, limit, RankScope.SCHOOL)]


# ============================================================================
# Score entry
# ============================================================================


@router.post(
    "",
    response_model=ResultResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enter result",
    description="Create the result of a registration. Total and percentage are computed server-side.",
)
def create_result_endpoint(
    request: ResultCreate,
    db: Annotated[Session, Depends(get_db)],
) -> ResultResponse:
    scores = SubjectScores(**request.model_dump(exclude={"registration_id"}))
    result = create_result(db, request.registration_id, scores)
    return ResultResponse.model_validate(result)


@router.get("/{result_id}", response_model=ResultResponse, summary="Get result")
def get_result_endpoint(
    result_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> ResultResponse:
    return ResultResponse.model_validate(get_result(db, result_id))


@router.patch(
    "/{result_id}",
    response_model=ResultResponse,
    summary="Update marks",
    description="Update any subset of the marks; total and percentage are recomputed from the merged marks.",
)
def update_result_endpoint(
    result_id: int,
    request: ResultUpdate,
    db: Annotated[Session, Depends(get_db)],
) -> ResultResponse:
    result = update_result(db, result_id, request.model_dump(exclude_unset=True))
    return ResultResponse.model_validate(result)


@router.delete(
    "/{result_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete result",
)
def delete_result_endpoint(
    result_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    delete_result(db, result_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
