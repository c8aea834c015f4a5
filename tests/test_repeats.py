"""
Tests for the Repeat Group Matcher.

The matcher is a greedy heuristic, not a stack parser: begins are walked
from last to first and each takes the highest-indexed unconsumed end that
comes after it. These tests pin that behavior down exactly.
"""

import pytest
from hfcgen.errors import MalformedInstrument
from hfcgen.model import RepeatGroupInterval, SurveyRow
from hfcgen.repeats import find_markers, match_repeat_groups, pair_markers


def _rows(layout):
    """Build SurveyRows from {order: raw_type}; other orders are integers."""
    last = max(layout)
    rows = []
    for order in range(1, last + 1):
        raw_type = layout.get(order, "integer")
        rows.append(SurveyRow(
            order=order,
            raw_type=raw_type,
            name=f"r{order}",
            label_display=f"Row {order}",
            label_variable=f"Row {order} label",
        ))
    return rows


class TestPairMarkers:
    """The pairing rule on bare orders."""

    def test_sibling_blocks(self):
        """Begins [2, 5], ends [4, 9] pair as (5, 9) then (2, 4)."""
        assert pair_markers([2, 5], [4, 9]) == [(5, 9), (2, 4)]

    def test_pairs_do_not_cross_for_siblings(self):
        pairs = sorted(pair_markers([2, 5], [4, 9]))
        for (b1, e1), (b2, e2) in zip(pairs, pairs[1:]):
            assert e1 < b2 or e2 < e1

    def test_single_group(self):
        assert pair_markers([3], [7]) == [(3, 7)]

    def test_nested_markers_use_highest_end_first(self):
        """Begins [2, 3], ends [8, 9]: the later begin takes the last end."""
        assert pair_markers([2, 3], [8, 9]) == [(3, 9), (2, 8)]

    def test_three_siblings(self):
        assert pair_markers([1, 4, 7], [3, 6, 9]) == [(7, 9), (4, 6), (1, 3)]

    def test_no_markers(self):
        assert pair_markers([], []) == []

    def test_count_mismatch_is_fatal(self):
        with pytest.raises(MalformedInstrument):
            pair_markers([2, 5], [4])

    def test_begin_without_later_end_is_skipped(self):
        """Out-of-order markers resolve without error; the stray begin is ignored."""
        assert pair_markers([5], [3]) == []


class TestMatchRepeatGroups:
    """Intervals built from survey rows."""

    def test_interval_fields_from_begin_row(self):
        groups = match_repeat_groups(_rows({2: "begin_repeat", 9: "end_repeat"}))
        assert groups == [RepeatGroupInterval(
            start_order=2, end_order=9, dataset_name="Row 2 label", dataset_key="r2",
        )]

    def test_sorted_by_start(self):
        groups = match_repeat_groups(_rows({
            2: "begin_repeat", 4: "end_repeat", 5: "begin_repeat", 9: "end_repeat",
        }))
        assert [(g.start_order, g.end_order) for g in groups] == [(2, 4), (5, 9)]

    def test_xlsform_spelling(self):
        groups = match_repeat_groups(_rows({1: "begin repeat", 3: "end repeat"}))
        assert [(g.start_order, g.end_order) for g in groups] == [(1, 3)]

    def test_groups_are_not_repeats(self):
        groups = match_repeat_groups(_rows({1: "begin_group", 3: "end_group"}))
        assert groups == []

    def test_mismatched_counts_raise(self):
        with pytest.raises(MalformedInstrument):
            match_repeat_groups(_rows({1: "begin_repeat", 3: "begin_repeat", 5: "end_repeat"}))

    def test_end_after_begin(self):
        groups = match_repeat_groups(_rows({
            1: "begin_repeat", 2: "begin_repeat", 6: "end_repeat", 8: "end_repeat",
        }))
        assert all(g.end_order > g.start_order for g in groups)


class TestFindMarkers:
    """Marker extraction."""

    def test_ascending_order(self):
        rows = list(reversed(_rows({2: "begin_repeat", 4: "end_repeat"})))
        begins, ends = find_markers(rows)
        assert [r.order for r in begins] == [2]
        assert [r.order for r in ends] == [4]
