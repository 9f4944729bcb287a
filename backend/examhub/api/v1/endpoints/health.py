"""Liveness and readiness checks."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from examhub.core.errors import get_request_id
from examhub.db.session import get_db
from examhub.models import ExamYear

router = APIRouter(tags=["Health"])

CheckStatus = Literal["ok", "degraded", "down"]


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"


class ReadinessCheck(BaseModel):
    status: CheckStatus
    message: str | None = None


class ReadinessResponse(BaseModel):
    """Overall status is the worst of the individual checks."""

    status: CheckStatus
    checks: dict[str, ReadinessCheck]
    request_id: str


_SEVERITY = {"ok": 0, "degraded": 1, "down": 2}


def _check_database(db: Session) -> ReadinessCheck:
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        return ReadinessCheck(status="down", message=str(e))
    return ReadinessCheck(status="ok")


def _check_exam_years(db: Session) -> ReadinessCheck:
    # No exam year means every leaderboard request will 404
    try:
        count = db.query(func.count(ExamYear.id)).scalar()
    except SQLAlchemyError as e:
        return ReadinessCheck(status="down", message=str(e))
    if not count:
        return ReadinessCheck(status="degraded", message="No exam years configured")
    return ReadinessCheck(status="ok")


@router.get("/health", response_model=HealthResponse, summary="Liveness check")
async def health_check() -> HealthResponse:
    return HealthResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Checks database connectivity and that at least one exam year exists.",
)
def readiness_check(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> ReadinessResponse:
    checks = {"db": _check_database(db)}
    if checks["db"].status == "ok":
        checks["exam_years"] = _check_exam_years(db)

    overall = max((c.status for c in checks.values()), key=_SEVERITY.__getitem__)
    return ReadinessResponse(status=overall, checks=checks, request_id=get_request_id(request))
