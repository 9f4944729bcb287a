"""Reference data models: exam years, districts and schools."""

from enum import Enum

from sqlalchemy import Column, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from examhub.db.base import Base


class ExamYearStatus(str, Enum):
    """Exam year status."""

    ACTIVE = "active"
    ARCHIVED = "archived"


class RecordStatus(str, Enum):
    """Status shared by districts and schools."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class SchoolMedium(str, Enum):
    """Language of instruction."""

    ASSAMESE = "Assamese"
    ENGLISH = "English"
    BOTH = "Both"


class ExamYear(Base):
    """One exam sitting; every ranking is scoped to a single exam year."""

    __tablename__ = "exam_years"

    id = Column(Integer, primary_key=True, autoincrement=True)
    year = Column(Integer, nullable=False, unique=True)
    status = Column(String(16), nullable=False, default=ExamYearStatus.ACTIVE.value)


class District(Base):
    """District model."""

    __tablename__ = "districts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    status = Column(String(16), nullable=False, default=RecordStatus.ACTIVE.value)

    schools = relationship("School", back_populates="district")


class School(Base):
    """School model."""

    __tablename__ = "schools"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    district_id = Column(Integer, ForeignKey("districts.id", ondelete="RESTRICT"), nullable=False)
    medium = Column(String(16), nullable=True)
    status = Column(String(16), nullable=False, default=RecordStatus.ACTIVE.value)

    district = relationship("District", back_populates="schools")

    __table_args__ = (
        UniqueConstraint("district_id", "name", name="uq_school_district_name"),
        Index("ix_schools_district_id", "district_id"),
    )
