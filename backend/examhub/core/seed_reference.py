"""Seed reference data (district, school, exam year) for development."""

from sqlalchemy.orm import Session

from examhub.core.config import settings
from examhub.core.logging import get_logger
from examhub.db.session import session_scope
from examhub.models import District, ExamYear, ExamYearStatus, RecordStatus, School, SchoolMedium

logger = get_logger(__name__)

DEFAULT_DISTRICT = "Sivasagar"
DEFAULT_SCHOOL = "Takenstar Partner School"
DEFAULT_EXAM_YEAR = 2025


def ensure_reference_data(db: Session) -> dict[str, int]:
    """Create the default district, school and exam year if missing. Idempotent."""
    district = db.query(District).filter(District.name == DEFAULT_DISTRICT).first()
    if not district:
        district = District(name=DEFAULT_DISTRICT, status=RecordStatus.ACTIVE.value)
        db.add(district)
        db.flush()
        logger.info("Created district", extra={"district": DEFAULT_DISTRICT})

    school = (
        db.query(School)
        .filter(School.name == DEFAULT_SCHOOL, School.district_id == district.id)
        .first()
    )
    if not school:
        school = School(
            name=DEFAULT_SCHOOL,
            district_id=district.id,
            medium=SchoolMedium.BOTH.value,
            status=RecordStatus.ACTIVE.value,
        )
        db.add(school)
        db.flush()
        logger.info("Created school", extra={"school": DEFAULT_SCHOOL})

    exam_year = db.query(ExamYear).filter(ExamYear.year == DEFAULT_EXAM_YEAR).first()
    if not exam_year:
        exam_year = ExamYear(year=DEFAULT_EXAM_YEAR, status=ExamYearStatus.ACTIVE.value)
        db.add(exam_year)
        db.flush()
        logger.info("Created exam year", extra={"year": DEFAULT_EXAM_YEAR})

    db.commit()
    return {"district_id": district.id, "school_id": school.id, "exam_year_id": exam_year.id}


def seed_reference_data() -> None:
    """Seed reference data if enabled in dev environment."""
    if settings.ENV != "dev" or not settings.SEED_REFERENCE_DATA:
        logger.info("Reference data seeding skipped (ENV != dev or SEED_REFERENCE_DATA=false)")
        return

    try:
        with session_scope() as db:
            ids = ensure_reference_data(db)
    except Exception:
        logger.error("Error seeding reference data", exc_info=True)
        raise
    logger.info("Reference data ready", extra=ids)
