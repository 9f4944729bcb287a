"""Result store: filter resolution, reference reads, joined result rows and result writes.

Reads return ``ResultRecord`` snapshots for the ranking engine. Writes always
go through ``compute_score`` so stored totals never drift from the marks.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from examhub.core.app_exceptions import AppError, conflict_error, raise_not_found
from examhub.models import (
    District,
    ExamYear,
    ExamYearStatus,
    RecordStatus,
    Registration,
    Result,
    School,
)
from examhub.ranking.records import CompetitionGroup, ResultRecord, SubjectScores, parse_competition_group
from examhub.ranking.scoring import compute_score

logger = logging.getLogger(__name__)


# ============================================================================
# Filter resolution
# ============================================================================


def get_exam_year(
    db: Session,
    *,
    exam_year_id: int | None = None,
    year: int | None = None,
) -> ExamYear:
    """Resolve an exam year by primary key or by calendar year."""
    query = db.query(ExamYear)
    if exam_year_id is not None:
        query = query.filter(ExamYear.id == exam_year_id)
    elif year is not None:
        query = query.filter(ExamYear.year == year)
    else:
        raise ValueError("exam_year_id or year is required")

    exam_year = query.first()
    if not exam_year:
        raise_not_found(
            "EXAM_YEAR_NOT_FOUND",
            "Exam year not found",
            {"exam_year_id": exam_year_id, "year": year},
        )
    return exam_year


def get_active_school(db: Session, school_id: int) -> School:
    school = (
        db.query(School)
        .filter(School.id == school_id, School.status == RecordStatus.ACTIVE.value)
        .first()
    )
    if not school:
        raise_not_found("SCHOOL_NOT_FOUND", "School not found", {"school_id": school_id})
    return school


def find_active_school_by_name(db: Session, district_name: str, school_name: str) -> School:
    """Case-insensitive lookup of an active school inside an active district."""
    district = (
        db.query(District)
        .filter(
            func.lower(District.name) == district_name.strip().lower(),
            District.status == RecordStatus.ACTIVE.value,
        )
        .first()
    )
    if not district:
        raise_not_found("DISTRICT_NOT_FOUND", "District not found", {"district_name": district_name})

    school = (
        db.query(School)
        .filter(
            func.lower(School.name) == school_name.strip().lower(),
            School.district_id == district.id,
            School.status == RecordStatus.ACTIVE.value,
        )
        .first()
    )
    if not school:
        raise_not_found(
            "SCHOOL_NOT_FOUND",
            "School not found in specified district",
            {"district_name": district_name, "school_name": school_name},
        )
    return school


def find_registration_by_roll(
    db: Session,
    exam_year_id: int,
    school_id: int,
    school_roll_no: str,
) -> Registration:
    registration = (
        db.query(Registration)
        .filter(
            Registration.exam_year_id == exam_year_id,
            Registration.school_id == school_id,
            func.lower(Registration.school_roll_no) == school_roll_no.strip().lower(),
        )
        .first()
    )
    if not registration:
        raise_not_found(
            "REGISTRATION_NOT_FOUND",
            "Registration not found for given roll number",
            {"school_roll_no": school_roll_no},
        )
    return registration


# ============================================================================
# Reference data (read-only)
# ============================================================================


def list_exam_years(db: Session) -> list[ExamYear]:
    """All exam years, latest first."""
    return db.query(ExamYear).order_by(ExamYear.year.desc()).all()


def get_active_exam_year(db: Session) -> ExamYear:
    """The latest exam year with status ``active``."""
    exam_year = (
        db.query(ExamYear)
        .filter(ExamYear.status == ExamYearStatus.ACTIVE.value)
        .order_by(ExamYear.year.desc())
        .first()
    )
    if not exam_year:
        raise_not_found("EXAM_YEAR_NOT_FOUND", "No active exam year found")
    return exam_year


def list_active_districts(db: Session) -> list[District]:
    return (
        db.query(District)
        .filter(District.status == RecordStatus.ACTIVE.value)
        .order_by(District.name)
        .all()
    )


def list_active_schools(db: Session, district_id: int | None = None) -> list[School]:
    """Active schools of active districts, ordered by district name then school name."""
    query = (
        db.query(School)
        .join(District, School.district_id == District.id)
        .filter(
            School.status == RecordStatus.ACTIVE.value,
            District.status == RecordStatus.ACTIVE.value,
        )
    )
    if district_id is not None:
        query = query.filter(School.district_id == district_id)
    return query.order_by(District.name, School.name).all()


# ============================================================================
# Reads
# ============================================================================


def _to_record(result: Result, registration: Registration, school: School, district: District) -> ResultRecord:
    group = parse_competition_group(registration.group_type)
    # Unrecognised codes fall back to the raw class group
    if registration.group_type and group is None:
        logger.warning(
            "Unknown competition group, ranking by class",
            extra={"registration_id": registration.id, "group_type": registration.group_type},
        )
    return ResultRecord(
        registration_id=registration.id,
        exam_year_id=result.exam_year_id,
        scores=result.scores,
        total=result.total,
        percentage=result.percentage,
        full_name=registration.full_name,
        class_level=registration.class_level,
        competition_group=group,
        school_id=school.id,
        district_id=district.id,
        school_name=school.name,
        district_name=district.name,
        school_roll_no=registration.school_roll_no,
        medium=registration.medium or school.medium,
        result_id=result.id,
    )


def fetch_result_records(
    db: Session,
    exam_year_id: int,
    *,
    group: CompetitionGroup | None = None,
    school_id: int | None = None,
    district_id: int | None = None,
    class_level: int | None = None,
    registration_id: int | None = None,
) -> list[ResultRecord]:
    """Load results of one exam year joined with candidate, school and district."""
    query = (
        db.query(Result, Registration, School, District)
        .join(Registration, Result.registration_id == Registration.id)
        .join(School, Registration.school_id == School.id)
        .join(District, Registration.district_id == District.id)
        .filter(Result.exam_year_id == exam_year_id)
    )
    if group is not None:
        query = query.filter(Registration.group_type == group.value)
    if school_id is not None:
        query = query.filter(Registration.school_id == school_id)
    if district_id is not None:
        query = query.filter(Registration.district_id == district_id)
    if class_level is not None:
        query = query.filter(Registration.class_level == class_level)
    if registration_id is not None:
        query = query.filter(Registration.id == registration_id)

    return [_to_record(*row) for row in query.all()]


# ============================================================================
# Writes
# ============================================================================


def get_result(db: Session, result_id: int) -> Result:
    result = db.get(Result, result_id)
    if not result:
        raise_not_found("RESULT_NOT_FOUND", "Result not found", {"result_id": result_id})
    return result


def _result_exists(registration_id: int, result_id: int | None = None) -> AppError:
    details = {"registration_id": registration_id}
    if result_id is not None:
        details["result_id"] = result_id
    return conflict_error("RESULT_EXISTS", "Result already exists for this registration", details)


def create_result(db: Session, registration_id: int, scores: SubjectScores) -> Result:
    """Create the single result of a registration."""
    registration = db.get(Registration, registration_id)
    if not registration:
        raise_not_found(
            "REGISTRATION_NOT_FOUND",
            "Registration not found",
            {"registration_id": registration_id},
        )

    existing = db.query(Result.id).filter(Result.registration_id == registration_id).first()
    if existing:
        raise _result_exists(registration_id, existing[0])

    total, percentage = compute_score(scores)
    result = Result(exam_year_id=registration.exam_year_id, registration_id=registration.id)
    result.apply_scores(scores, total, percentage)

    try:
        db.add(result)
        db.commit()
        db.refresh(result)
    except IntegrityError as e:
        db.rollback()
        # Lost a race with a concurrent insert
        raise _result_exists(registration_id) from e

    logger.info(
        "Result created",
        extra={"result_id": result.id, "registration_id": registration_id, "total": total},
    )
    return result


def update_result(db: Session, result_id: int, updates: dict[str, Any]) -> Result:
    """
    Apply new marks over the stored ones and recompute total and percentage.

    Missing or None entries keep their stored value.
    """
    result = get_result(db, result_id)
    scores = result.scores.merged(**updates)
    total, percentage = compute_score(scores)
    result.apply_scores(scores, total, percentage)

    db.commit()
    db.refresh(result)

    logger.info(
        "Result updated",
        extra={"result_id": result_id, "fields": sorted(updates), "total": total},
    )
    return result


def delete_result(db: Session, result_id: int) -> None:
    result = get_result(db, result_id)
    db.delete(result)
    db.commit()
    logger.info("Result deleted", extra={"result_id": result_id})
