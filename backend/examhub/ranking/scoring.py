"""Score formula shared by result creation, result update and drift checks."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable

from examhub.ranking.records import ResultRecord, SubjectScores

logger = logging.getLogger(__name__)

SUBJECT_MAX = 100
MAX_TOTAL = 500
PASS_MARK = 250


class ResultStatus(str, Enum):
    """Display status derived from the total."""

    PASS = "PASS"
    FAIL = "FAIL"


def compute_score(scores: SubjectScores) -> tuple[int, float]:
    """
    Compute (total, percentage) from the five subject marks.

    Range checks on the marks belong to the caller. The percentage is rounded
    to two decimals and is always a function of the total alone.
    """
    total = sum(scores.values())
    percentage = round(total / MAX_TOTAL * 100, 2)
    return total, percentage


def result_status(total: int) -> ResultStatus:
    """PASS at or above the pass mark, FAIL below it."""
    return ResultStatus.PASS if total >= PASS_MARK else ResultStatus.FAIL


def has_score_drift(record: ResultRecord) -> bool:
    """True when the stored total or percentage disagrees with the marks."""
    total, percentage = compute_score(record.scores)
    return record.total != total or record.percentage != percentage


def find_score_drift(records: Iterable[ResultRecord]) -> list[ResultRecord]:
    """
    Return the records whose stored total/percentage differ from recomputation.

    Reports only; nothing is corrected.
    """
    drifted = [r for r in records if has_score_drift(r)]
    if drifted:
        logger.warning(
            "Stored scores disagree with recomputation",
            extra={
                "count": len(drifted),
                "registration_ids": [r.registration_id for r in drifted[:20]],
            },
        )
    return drifted
