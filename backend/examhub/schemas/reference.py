"""Schemas for the public reference lists (exam years and districts)."""

from pydantic import BaseModel, ConfigDict

from examhub.models import ExamYearStatus


class ExamYearResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    year: int
    status: ExamYearStatus


class DistrictRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
