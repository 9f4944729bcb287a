"""Exam leaderboard ranking: scoring formula, ordering, tie-inclusive toppers."""

from examhub.ranking.ranker import (
    group_toppers,
    partition_by_group,
    partition_by_school,
    rank_results,
    school_leaderboard,
    sort_descending,
    top_n,
    toppers,
)
from examhub.ranking.records import (
    CompetitionGroup,
    GroupKey,
    GroupToppers,
    RankedResult,
    RankScope,
    RawClass,
    ResultRecord,
    SubjectScores,
)
from examhub.ranking.scoring import compute_score, find_score_drift, result_status

__all__ = [
    "CompetitionGroup",
    "GroupKey",
    "GroupToppers",
    "RankScope",
    "RankedResult",
    "RawClass",
    "ResultRecord",
    "SubjectScores",
    "compute_score",
    "find_score_drift",
    "group_toppers",
    "partition_by_group",
    "partition_by_school",
    "rank_results",
    "result_status",
    "school_leaderboard",
    "sort_descending",
    "top_n",
    "toppers",
]
