"""Exam result model."""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from examhub.db.base import Base
from examhub.ranking.records import SubjectScores


class Result(Base):
    """Per-registration subject scores.

    ``total`` and ``percentage`` are always written from ``compute_score`` and
    never accepted from clients.
    """

    __tablename__ = "results"

    id = Column(Integer, primary_key=True, autoincrement=True)
    exam_year_id = Column(Integer, ForeignKey("exam_years.id", ondelete="CASCADE"), nullable=False)
    registration_id = Column(
        Integer, ForeignKey("registrations.id", ondelete="CASCADE"), nullable=False
    )
    gk = Column(Integer, nullable=False)
    science = Column(Integer, nullable=False)
    mathematics = Column(Integer, nullable=False)
    logical_reasoning = Column(Integer, nullable=False)
    current_affairs = Column(Integer, nullable=False)
    total = Column(Integer, nullable=False)
    percentage = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    registration = relationship("Registration", back_populates="result")

    __table_args__ = (
        UniqueConstraint("registration_id", name="uq_result_registration"),
        Index("ix_results_exam_year_id", "exam_year_id"),
    )

    @property
    def scores(self) -> SubjectScores:
        return SubjectScores(
            gk=self.gk,
            science=self.science,
            mathematics=self.mathematics,
            logical_reasoning=self.logical_reasoning,
            current_affairs=self.current_affairs,
        )

    def apply_scores(self, scores: SubjectScores, total: int, percentage: float) -> None:
        self.gk = scores.gk
        self.science = scores.science
        self.mathematics = scores.mathematics
        self.logical_reasoning = scores.logical_reasoning
        self.current_affairs = scores.current_affairs
        self.total = total
        self.percentage = percentage
