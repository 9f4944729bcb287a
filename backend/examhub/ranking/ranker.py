"""Leaderboard ranker. Deterministic ordering, competition ranks, tie-inclusive cutoffs.

Ordering: total desc, mathematics desc, science desc, then (full leaderboard
only) general knowledge desc, then full name asc and registration id asc so
that equal scores still come out in a reproducible order.

Ranks follow standard competition ranking over the comparison key (the name
and id are not part of it): 1, 2, 2, 4.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Sequence

from examhub.ranking.records import (
    CompetitionGroup,
    GroupKey,
    GroupToppers,
    RankedResult,
    RankScope,
    RawClass,
    ResultRecord,
)

ComparisonKey = tuple[int, ...]


def comparison_key(record: ResultRecord, *, tiebreak_gk: bool = False) -> ComparisonKey:
    """Score tuple that decides order and ties."""
    scores = record.scores
    if tiebreak_gk:
        return (record.total, scores.mathematics, scores.science, scores.gk)
    return (record.total, scores.mathematics, scores.science)


def sort_descending(
    results: Iterable[ResultRecord],
    *,
    tiebreak_gk: bool = False,
) -> list[ResultRecord]:
    """Return a new list in leaderboard order. The input is left untouched."""

    def sort_key(record: ResultRecord):
        key = comparison_key(record, tiebreak_gk=tiebreak_gk)
        return (tuple(-v for v in key), record.full_name, record.registration_id)

    return sorted(results, key=sort_key)


def assign_ranks(
    ordered: Sequence[ResultRecord],
    scope: RankScope,
    *,
    tiebreak_gk: bool = False,
) -> list[RankedResult]:
    """Attach competition ranks to an already ordered sequence."""
    ranked: list[RankedResult] = []
    previous: ComparisonKey | None = None
    rank = 0
    for position, record in enumerate(ordered, start=1):
        key = comparison_key(record, tiebreak_gk=tiebreak_gk)
        if key != previous:
            rank = position
            previous = key
        ranked.append(RankedResult(record=record, rank=rank, scope=scope))
    return ranked


def rank_results(
    results: Iterable[ResultRecord],
    scope: RankScope,
    *,
    tiebreak_gk: bool = False,
) -> list[RankedResult]:
    """Sort and rank a whole scope."""
    ordered = sort_descending(results, tiebreak_gk=tiebreak_gk)
    return assign_ranks(ordered, scope, tiebreak_gk=tiebreak_gk)


def _cutoff_length(keys: Sequence[Hashable], n: int) -> int:
    """
    Number of leading entries kept by a top-n cut over ``keys``.

    The first n are always kept; after that, entries are kept while their key
    equals the key at position n-1.
    """
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    if len(keys) <= n:
        return len(keys)
    cutoff = keys[n - 1]
    end = n
    while end < len(keys) and keys[end] == cutoff:
        end += 1
    return end


def top_n(results: Iterable[ResultRecord], n: int) -> list[ResultRecord]:
    """
    Top n results, extended with every result tied with the n-th.

    Example: n=3 over totals [480, 470, 460, 460, 460, 440] keeps five
    entries and drops the 440.
    """
    ordered = sort_descending(results)
    end = _cutoff_length([comparison_key(r) for r in ordered], n)
    return ordered[:end]


def toppers(
    results: Iterable[ResultRecord],
    n: int,
    scope: RankScope,
) -> list[RankedResult]:
    """Like ``top_n`` but with ranks computed over the whole scope."""
    ranked = rank_results(results, scope)
    end = _cutoff_length([r.rank for r in ranked], n)
    return ranked[:end]


def partition_by_group(results: Iterable[ResultRecord]) -> dict[GroupKey, list[ResultRecord]]:
    """Split results by competition group, falling back to the raw class."""
    groups: dict[GroupKey, list[ResultRecord]] = {}
    for record in results:
        groups.setdefault(record.group_key, []).append(record)
    return groups


def group_sort_value(key: GroupKey) -> int:
    """Raw classes sort by number, competition groups by character code."""
    if isinstance(key, RawClass):
        return key.value
    if isinstance(key, CompetitionGroup):
        return ord(key.value[0])
    raise TypeError(f"Unsupported group key: {key!r}")


def ordered_group_keys(keys: Iterable[GroupKey]) -> list[GroupKey]:
    return sorted(keys, key=group_sort_value)


def partition_by_school(results: Iterable[ResultRecord], school_id: int) -> list[ResultRecord]:
    return [r for r in results if r.school_id == school_id]


def group_toppers(results: Iterable[ResultRecord], n: int) -> list[GroupToppers]:
    """Toppers per group, groups in display order."""
    groups = partition_by_group(results)
    return [
        GroupToppers(group=key, toppers=tuple(toppers(groups[key], n, RankScope.GROUP)))
        for key in ordered_group_keys(groups)
    ]


def school_leaderboard(results: Iterable[ResultRecord], school_id: int) -> list[RankedResult]:
    """Full ranked list for one school, ranks independent of the global ones."""
    return rank_results(partition_by_school(results, school_id), RankScope.SCHOOL)
