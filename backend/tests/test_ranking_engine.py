"""Tests for the leaderboard ranking engine: score formula, ordering, ties, group partitions."""

import logging
from dataclasses import replace

import pytest

from examhub.ranking import (
    CompetitionGroup,
    RankScope,
    RawClass,
    SubjectScores,
    compute_score,
    find_score_drift,
    group_toppers,
    partition_by_group,
    partition_by_school,
    rank_results,
    result_status,
    school_leaderboard,
    sort_descending,
    top_n,
    toppers,
)
from examhub.ranking.ranker import comparison_key, ordered_group_keys
from examhub.ranking.records import group_label, parse_competition_group
from examhub.ranking.scoring import ResultStatus, has_score_drift
from tests.helpers.records import make_record, record_with_total


def _totals(records):
    return [r.total for r in records]


# ============================================================================
# Score formula
# ============================================================================


def test_compute_score_sums_subjects_and_rounds_percentage():
    """90 + 85 + 95 + 80 + 70 = 420, which is 84% of 500."""
    scores = SubjectScores(gk=90, science=85, mathematics=95, logical_reasoning=80, current_affairs=70)
    total, percentage = compute_score(scores)
    assert total == 420
    assert percentage == 84.0


def test_compute_score_rounds_to_two_decimals():
    scores = SubjectScores(gk=1, science=0, mathematics=0, logical_reasoning=0, current_affairs=0)
    assert compute_score(scores) == (1, 0.2)
    scores = SubjectScores(gk=100, science=100, mathematics=100, logical_reasoning=100, current_affairs=100)
    assert compute_score(scores) == (500, 100.0)


def test_compute_score_does_not_clamp_out_of_range_marks():
    """Range checks belong to the write path; the formula reports what it is given."""
    scores = SubjectScores(gk=150, science=100, mathematics=100, logical_reasoning=100, current_affairs=100)
    assert compute_score(scores) == (550, 110.0)

    scores = SubjectScores(gk=-10, science=0, mathematics=0, logical_reasoning=0, current_affairs=0)
    assert compute_score(scores) == (-10, -2.0)


def test_result_status_boundary():
    assert result_status(249) == ResultStatus.FAIL
    assert result_status(250) == ResultStatus.PASS
    assert result_status(0) == ResultStatus.FAIL
    assert result_status(500) == ResultStatus.PASS


def test_merged_scores_recompute_from_full_set():
    """Changing mathematics 70 -> 100 recomputes from the merged marks, not by delta."""
    stored = SubjectScores(gk=90, science=85, mathematics=70, logical_reasoning=80, current_affairs=70)
    assert compute_score(stored) == (395, 79.0)

    merged = stored.merged(mathematics=100, science=None)
    assert merged.science == 85
    assert merged.mathematics == 100
    assert compute_score(merged) == (425, 85.0)
    # Original is frozen and unchanged
    assert stored.mathematics == 70


def test_merged_rejects_unknown_subject():
    stored = SubjectScores(gk=1, science=1, mathematics=1, logical_reasoning=1, current_affairs=1)
    with pytest.raises(TypeError, match="physics"):
        stored.merged(physics=10)


def test_score_drift_is_reported_not_corrected(caplog):
    good = make_record("Asha")
    drifted = replace(make_record("Bikash"), total=399)

    with caplog.at_level(logging.WARNING, logger="examhub.ranking.scoring"):
        found = find_score_drift([good, drifted])

    assert found == [drifted]
    assert drifted.total == 399
    assert not has_score_drift(good)
    assert any("disagree" in rec.getMessage() for rec in caplog.records)


def test_score_drift_flags_percentage_mismatch():
    record = replace(make_record("Asha"), percentage=79.99)
    assert has_score_drift(record)


# ============================================================================
# Ordering
# ============================================================================


def test_sort_descending_by_total_then_mathematics_then_science():
    low = make_record("Low", 60, 60, 60, 60, 60)  # 300
    math_high = make_record("MathHigh", 80, 70, 100, 70, 80)  # 400, math 100
    math_low_sci_high = make_record("SciHigh", 80, 100, 90, 60, 70)  # 400, math 90, sci 100
    math_low_sci_low = make_record("SciLow", 90, 90, 90, 60, 70)  # 400, math 90, sci 90

    ordered = sort_descending([low, math_low_sci_low, math_high, math_low_sci_high])

    assert [r.full_name for r in ordered] == ["MathHigh", "SciHigh", "SciLow", "Low"]


def test_sort_descending_breaks_full_ties_by_name_then_registration_id():
    b = make_record("Bina", registration_id=1)
    a2 = make_record("Anu", registration_id=7)
    a1 = make_record("Anu", registration_id=3)

    ordered = sort_descending([b, a2, a1])

    assert [(r.full_name, r.registration_id) for r in ordered] == [
        ("Anu", 3),
        ("Anu", 7),
        ("Bina", 1),
    ]


def test_gk_tiebreak_only_on_full_leaderboard():
    # Same total, mathematics and science; only gk differs
    gk_low = make_record("Anu", 70, 80, 80, 90, 80)
    gk_high = make_record("Bina", 90, 80, 80, 70, 80)

    plain = rank_results([gk_high, gk_low], RankScope.GLOBAL)
    assert [r.record.full_name for r in plain] == ["Anu", "Bina"]
    assert [r.rank for r in plain] == [1, 1]

    full = rank_results([gk_low, gk_high], RankScope.GLOBAL, tiebreak_gk=True)
    assert [r.record.full_name for r in full] == ["Bina", "Anu"]
    assert [r.rank for r in full] == [1, 2]


def test_sort_does_not_mutate_input():
    records = [record_with_total("C", 300), record_with_total("A", 450), record_with_total("B", 400)]
    snapshot = list(records)

    sort_descending(records)
    top_n(records, 1)
    rank_results(records, RankScope.GLOBAL)

    assert records == snapshot


def test_comparison_key_shape():
    record = make_record("Asha", 90, 85, 95, 80, 70)
    assert comparison_key(record) == (420, 95, 85)
    assert comparison_key(record, tiebreak_gk=True) == (420, 95, 85, 90)


# ============================================================================
# Ranks
# ============================================================================


def test_competition_ranks_skip_after_ties():
    records = [record_with_total(name, total) for name, total in
               [("A", 480), ("B", 470), ("C", 470), ("D", 460)]]

    ranked = rank_results(records, RankScope.GLOBAL)

    assert [r.rank for r in ranked] == [1, 2, 2, 4]
    assert all(r.scope == RankScope.GLOBAL for r in ranked)


def test_ranks_ignore_name_tiebreak():
    records = [record_with_total("Zed", 400), record_with_total("Amy", 400)]
    ranked = rank_results(records, RankScope.SCHOOL)
    assert [r.record.full_name for r in ranked] == ["Amy", "Zed"]
    assert [r.rank for r in ranked] == [1, 1]


# ============================================================================
# Top-N with ties
# ============================================================================


def test_top_n_includes_everyone_tied_at_cutoff():
    """Totals [500, 450, 450, 450, 400], n=2 keeps the 500 and all three 450s."""
    records = [record_with_total(f"C{i}", t) for i, t in enumerate([500, 450, 450, 450, 400])]

    top = top_n(records, 2)

    assert _totals(top) == [500, 450, 450, 450]


def test_top_n_worked_example():
    records = [
        record_with_total(f"C{i}", t) for i, t in enumerate([480, 470, 460, 460, 460, 440])
    ]

    top = top_n(records, 3)

    assert len(top) == 5
    assert 440 not in _totals(top)


def test_top_n_cutoff_uses_full_key_not_total():
    # Same total as the 3rd entry but weaker mathematics: not tied, so excluded
    first = record_with_total("First", 480)
    second = record_with_total("Second", 470)
    third = make_record("Third", 80, 90, 100, 90, 100)  # 460, math 100
    weaker = make_record("Weaker", 100, 90, 80, 90, 100)  # 460, math 80

    top = top_n([weaker, third, second, first], 3)

    assert [r.full_name for r in top] == ["First", "Second", "Third"]


def test_top_n_with_fewer_results_than_n_returns_all():
    records = [record_with_total("A", 300), record_with_total("B", 200)]
    assert _totals(top_n(records, 10)) == [300, 200]


@pytest.mark.parametrize("n", [0, -1])
def test_top_n_rejects_non_positive_n(n):
    with pytest.raises(ValueError):
        top_n([record_with_total("A", 300)], n)
    with pytest.raises(ValueError):
        toppers([record_with_total("A", 300)], n, RankScope.GLOBAL)


def test_empty_input_gives_empty_output():
    assert top_n([], 3) == []
    assert toppers([], 3, RankScope.GLOBAL) == []
    assert rank_results([], RankScope.GLOBAL) == []
    assert group_toppers([], 3) == []
    assert school_leaderboard([], 1) == []


def test_toppers_carry_ranks_and_keep_ties():
    records = [record_with_total(f"C{i}", t) for i, t in enumerate([500, 450, 450, 450, 400])]

    top = toppers(records, 2, RankScope.GROUP)

    assert [r.rank for r in top] == [1, 2, 2, 2]
    assert all(r.scope == RankScope.GROUP for r in top)


# ============================================================================
# Partitions
# ============================================================================


def test_partition_falls_back_to_raw_class_when_group_missing():
    classified = make_record("A1", class_level=7)
    unclassified = make_record("U1", class_level=7, group=None)

    groups = partition_by_group([classified, unclassified])

    assert groups[CompetitionGroup.A] == [classified]
    assert groups[RawClass(7)] == [unclassified]


def test_group_keys_ordered_raw_classes_then_letters():
    keys = [CompetitionGroup.B, RawClass(10), CompetitionGroup.A, RawClass(7)]
    assert ordered_group_keys(keys) == [RawClass(7), RawClass(10), CompetitionGroup.A, CompetitionGroup.B]


@pytest.mark.parametrize(
    ("stored", "expected"),
    [("A", CompetitionGroup.A), ("b", CompetitionGroup.B), ("X", None), ("", None), (None, None)],
)
def test_parse_competition_group(stored, expected):
    assert parse_competition_group(stored) == expected


def test_group_label_values():
    assert group_label(CompetitionGroup.A) == "A"
    assert group_label(RawClass(11)) == 11


def test_group_toppers_per_group_in_display_order():
    records = [
        record_with_total("B-top", 480, class_level=10),
        record_with_total("B-second", 470, class_level=11),
        record_with_total("A-top", 490, class_level=6),
        record_with_total("A-tie-1", 400, class_level=7),
        record_with_total("A-tie-2", 400, class_level=8),
        record_with_total("A-low", 300, class_level=8),
        record_with_total("Raw", 350, class_level=9, group=None),
    ]

    result = group_toppers(records, 2)

    assert [g.group for g in result] == [RawClass(9), CompetitionGroup.A, CompetitionGroup.B]
    by_group = {g.group: g for g in result}
    assert [t.record.full_name for t in by_group[CompetitionGroup.A].toppers] == [
        "A-top",
        "A-tie-1",
        "A-tie-2",
    ]
    assert [t.rank for t in by_group[CompetitionGroup.A].toppers] == [1, 2, 2]
    assert [t.record.full_name for t in by_group[CompetitionGroup.B].toppers] == ["B-top", "B-second"]
    assert [t.record.full_name for t in by_group[RawClass(9)].toppers] == ["Raw"]


def test_school_leaderboard_ranks_within_school_only():
    records = [
        record_with_total("Other-top", 500, school_id=2),
        record_with_total("Home-1", 450, school_id=1),
        record_with_total("Home-2", 400, school_id=1),
    ]

    ranked = school_leaderboard(records, 1)

    assert [(r.record.full_name, r.rank) for r in ranked] == [("Home-1", 1), ("Home-2", 2)]
    assert all(r.scope == RankScope.SCHOOL for r in ranked)
    assert partition_by_school(records, 3) == []
