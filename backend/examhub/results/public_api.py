"""Public API: reference lists, group toppers, school results, roll-number lookup, hall of fame."""

from __future__ import annotations

import logging
from typing import Annotated, NoReturn

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from examhub.core.app_exceptions import raise_app_error, raise_not_found
from examhub.core.config import settings
from examhub.db.session import get_db
from examhub.ranking import RankScope, group_toppers, rank_results, school_leaderboard, toppers
from examhub.ranking.records import CompetitionGroup
from examhub.results.service import (
    fetch_result_records,
    find_active_school_by_name,
    find_registration_by_roll,
    get_active_exam_year,
    get_active_school,
    get_exam_year,
    list_active_districts,
    list_active_schools,
    list_exam_years,
)
from examhub.schemas.reference import DistrictRef, ExamYearResponse
from examhub.schemas.results import (
    GroupToppersResponse,
    LeaderboardEntry,
    SchoolInfo,
    SchoolResultsResponse,
    TopperEntry,
    group_toppers_response,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/public", tags=["Public Results"])


def _results_not_published(exam_year: int) -> NoReturn:
    logger.info("No results published", extra={"exam_year": exam_year})
    raise_not_found(
        "RESULTS_NOT_PUBLISHED",
        "No results found for this exam year",
        {"exam_year": exam_year},
    )


# ============================================================================
# Reference lists
# ============================================================================


@router.get(
    "/exam-years",
    response_model=list[ExamYearResponse],
    summary="Exam years",
    description="Every exam year, latest first.",
)
def exam_years(db: Annotated[Session, Depends(get_db)]) -> list[ExamYearResponse]:
    return [ExamYearResponse.model_validate(y) for y in list_exam_years(db)]


@router.get(
    "/exam-year/active",
    response_model=ExamYearResponse,
    summary="Active exam year",
    description="The latest exam year with status `active`.",
)
def active_exam_year(db: Annotated[Session, Depends(get_db)]) -> ExamYearResponse:
    return ExamYearResponse.model_validate(get_active_exam_year(db))


@router.get("/refs/districts", response_model=list[DistrictRef], summary="Active districts")
def districts(db: Annotated[Session, Depends(get_db)]) -> list[DistrictRef]:
    return [DistrictRef.model_validate(d) for d in list_active_districts(db)]


@router.get(
    "/refs/schools",
    response_model=list[SchoolInfo],
    summary="Active schools",
    description="Active schools of active districts, optionally within one district.",
)
def schools(
    db: Annotated[Session, Depends(get_db)],
    district_id: int | None = Query(None, ge=1),
) -> list[SchoolInfo]:
    return [SchoolInfo.from_school(s) for s in list_active_schools(db, district_id)]


# ============================================================================
# Results
# ============================================================================


@router.get(
    "/results/top3-by-group",
    response_model=list[GroupToppersResponse],
    summary="Toppers per competition group",
    description="Toppers of every group, ties at the cutoff included, groups in display order.",
)
def top_by_group(
    db: Annotated[Session, Depends(get_db)],
    exam_year: int = Query(..., description="Calendar year of the exam, e.g. 2025"),
    limit: int | None = Query(None, ge=1, le=50),
) -> list[GroupToppersResponse]:
    year = get_exam_year(db, year=exam_year)
    records = fetch_result_records(db, year.id)
    if not records:
        _results_not_published(exam_year)

    n = limit or settings.PUBLIC_TOPPERS_LIMIT
    return [group_toppers_response(g.group, list(g.toppers)) for g in group_toppers(records, n)]


@router.get(
    "/results/by-school",
    response_model=SchoolResultsResponse,
    summary="Results of one school",
    description="Identify the school by `school_id` or by `district_name` and `school_name`.",
)
def results_by_school(
    db: Annotated[Session, Depends(get_db)],
    exam_year: int = Query(...),
    school_id: int | None = Query(None, ge=1),
    district_name: str | None = Query(None, min_length=1, max_length=100),
    school_name: str | None = Query(None, min_length=1, max_length=200),
) -> SchoolResultsResponse:
    if school_id is None and not (district_name and school_name):
        raise_app_error(
            status.HTTP_400_BAD_REQUEST,
            "BAD_REQUEST",
            "Either school_id OR both district_name and school_name are required",
        )

    year = get_exam_year(db, year=exam_year)
    if school_id is not None:
        school = get_active_school(db, school_id)
    else:
        school = find_active_school_by_name(db, district_name, school_name)

    records = fetch_result_records(db, year.id, school_id=school.id)
    ranked = school_leaderboard(records, school.id)

    return SchoolResultsResponse(
        exam_year=year.year,
        school=SchoolInfo.from_school(school),
        results=[LeaderboardEntry.from_ranked(r) for r in ranked],
    )


@router.get(
    "/result-lookup",
    response_model=LeaderboardEntry,
    summary="Look up one candidate's result",
)
def result_lookup(
    db: Annotated[Session, Depends(get_db)],
    exam_year: int = Query(...),
    district_name: str = Query(..., min_length=1, max_length=100),
    school_name: str = Query(..., min_length=1, max_length=200),
    school_roll_no: str = Query(..., min_length=1, max_length=50),
) -> LeaderboardEntry:
    year = get_exam_year(db, year=exam_year)
    school = find_active_school_by_name(db, district_name, school_name)
    registration = find_registration_by_roll(db, year.id, school.id, school_roll_no)

    # Global rank needs the whole exam year
    ranked = rank_results(fetch_result_records(db, year.id), RankScope.GLOBAL, tiebreak_gk=True)
    for entry in ranked:
        if entry.record.registration_id == registration.id:
            return LeaderboardEntry.from_ranked(entry)

    logger.info("Result not published", extra={"registration_id": registration.id})
    raise_not_found(
        "RESULTS_NOT_PUBLISHED",
        "Result not published yet",
        {"registration_id": registration.id},
    )


@router.get(
    "/hall-of-fame",
    response_model=list[TopperEntry],
    summary="Hall of fame",
    description="Exam year toppers, optionally within one competition group.",
)
def hall_of_fame(
    db: Annotated[Session, Depends(get_db)],
    exam_year: int = Query(...),
    group: CompetitionGroup | None = Query(None),
) -> list[TopperEntry]:
    year = get_exam_year(db, year=exam_year)
    records = fetch_result_records(db, year.id, group=group)
    scope = RankScope.GROUP if group else RankScope.GLOBAL
    return [
        TopperEntry.from_ranked(r)
        for r in toppers(records, settings.PUBLIC_TOPPERS_LIMIT, scope)
    ]
