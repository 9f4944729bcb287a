"""Candidate registration model."""

from sqlalchemy import Column, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from examhub.db.base import Base
from examhub.ranking.records import competition_group_for_class


class Registration(Base):
    """A candidate registered for one exam year.

    ``group_type`` is derived from ``class_level`` when the row is created and
    is not touched afterwards. Older rows may have it unset.
    """

    __tablename__ = "registrations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    exam_year_id = Column(Integer, ForeignKey("exam_years.id", ondelete="CASCADE"), nullable=False)
    district_id = Column(Integer, ForeignKey("districts.id"), nullable=False)
    school_id = Column(Integer, ForeignKey("schools.id"), nullable=False)
    full_name = Column(String(100), nullable=False)
    class_level = Column(Integer, nullable=False)  # 6..12
    group_type = Column(String(1), nullable=True)  # "A" | "B"
    school_roll_no = Column(String(50), nullable=False)
    medium = Column(String(16), nullable=True)

    exam_year = relationship("ExamYear")
    district = relationship("District")
    school = relationship("School")
    result = relationship("Result", back_populates="registration", uselist=False)

    __table_args__ = (
        UniqueConstraint(
            "exam_year_id", "school_id", "school_roll_no", name="uq_registration_year_school_roll"
        ),
        Index("ix_registrations_exam_year_id", "exam_year_id"),
        Index("ix_registrations_school_id", "school_id"),
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if self.group_type is None and self.class_level is not None:
            group = competition_group_for_class(self.class_level)
            self.group_type = group.value if group else None
