"""
Repeat Group Matcher.

Pairs "begin repeat" markers with "end repeat" markers and returns the
resulting intervals.

This is NOT a stack-based parser. The pairing rule is:

    B = begin-marker orders, ascending
    E = end-marker orders, ascending
    len(B) must equal len(E), else the instrument is malformed

    for i from last to first:
        scan every unconsumed E[j] in ascending j, remembering the last
        one with E[j] > B[i]
        pair B[i] with the remembered E[j] and consume it

Walking the begins backwards and keeping the highest surviving end gives
non-crossing pairs for sibling blocks, the layout form-authoring tools
produce. Interleaved or otherwise odd structures are resolved by the same
rule and are not rejected.

Example:
    B = [2, 5], E = [4, 9]
    B[1]=5 -> candidates {9}    -> (5, 9)
    B[0]=2 -> candidates {4}    -> (2, 4)
"""

import logging
from typing import Iterable, List, Optional, Tuple

from hfcgen.errors import MalformedInstrument
from hfcgen.model import RepeatGroupInterval, SurveyRow
from hfcgen.sanitize import collapse_type

logger = logging.getLogger(__name__)

BEGIN_REPEAT = "begin_repeat"
END_REPEAT = "end_repeat"


def find_markers(rows: Iterable[SurveyRow]) -> Tuple[List[SurveyRow], List[SurveyRow]]:
    """Split out begin and end repeat marker rows, each in ascending order."""
    begins: List[SurveyRow] = []
    ends: List[SurveyRow] = []
    for row in sorted(rows, key=lambda r: r.order):
        marker = collapse_type(row.raw_type)
        if marker == BEGIN_REPEAT:
            begins.append(row)
        elif marker == END_REPEAT:
            ends.append(row)
    return begins, ends


def pair_markers(begin_orders: List[int], end_orders: List[int]) -> List[Tuple[int, int]]:
    """
    Apply the pairing rule to bare marker orders.

    Args:
        begin_orders: Begin-marker orders, ascending
        end_orders: End-marker orders, ascending

    Returns:
        (begin_order, end_order) pairs in the order they were matched
        (last begin first)

    Raises:
        MalformedInstrument: If the marker counts differ
    """
    if len(begin_orders) != len(end_orders):
        raise MalformedInstrument(
            f"found {len(begin_orders)} begin_repeat and {len(end_orders)} end_repeat markers"
        )

    consumed = [False] * len(end_orders)
    pairs: List[Tuple[int, int]] = []

    for i in range(len(begin_orders) - 1, -1, -1):
        begin = begin_orders[i]
        best: Optional[int] = None
        for j, end in enumerate(end_orders):
            if not consumed[j] and end > begin:
                best = j
        if best is None:
            logger.warning(f"begin_repeat at row {begin} has no end_repeat after it; ignored")
            continue
        consumed[best] = True
        pairs.append((begin, end_orders[best]))

    return pairs


def match_repeat_groups(rows: Iterable[SurveyRow]) -> List[RepeatGroupInterval]:
    """
    Build repeat group intervals from the full (unfiltered) survey rows.

    Args:
        rows: All numbered survey rows, markers included

    Returns:
        Intervals ascending by start_order

    Raises:
        MalformedInstrument: If begin/end marker counts differ
    """
    begins, ends = find_markers(rows)
    by_order = {row.order: row for row in begins}

    pairs = pair_markers([b.order for b in begins], [e.order for e in ends])

    intervals = []
    for begin_order, end_order in pairs:
        begin_row = by_order[begin_order]
        intervals.append(RepeatGroupInterval(
            start_order=begin_order,
            end_order=end_order,
            dataset_name=begin_row.label_variable,
            dataset_key=begin_row.name,
        ))
        logger.debug(f"repeat {begin_row.name!r} spans rows {begin_order}-{end_order}")

    return sorted(intervals, key=lambda g: g.start_order)


__all__ = ["find_markers", "pair_markers", "match_repeat_groups"]
