"""Database models."""

# Import all models here so metadata.create_all sees every table
from examhub.models.reference import (
    District,
    ExamYear,
    ExamYearStatus,
    RecordStatus,
    School,
    SchoolMedium,
)
from examhub.models.registration import Registration
from examhub.models.result import Result

__all__ = [
    "District",
    "ExamYear",
    "ExamYearStatus",
    "RecordStatus",
    "Registration",
    "Result",
    "School",
    "SchoolMedium",
]
