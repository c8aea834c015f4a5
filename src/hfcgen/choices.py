"""
Choice Table Loader.

Turns choices-sheet rows into a ChoiceTable of value labels.

Loading is best-effort: instruments routinely carry partial or legacy
label lists, so rows that cannot become a value label are skipped rather
than rejected.
    - any empty field -> skipped
    - code not made only of digits -> skipped (manual/non-standard label)
"""

import logging
from typing import Dict, Iterable, List, Sequence

from hfcgen.model import ChoiceEntry, ChoiceTable
from hfcgen.sanitize import is_digit_code, normalize_list_name, sanitize_choice_label

logger = logging.getLogger(__name__)


def _cell(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def load_choices(rows: Iterable[Sequence[str]]) -> ChoiceTable:
    """
    Build a ChoiceTable from raw (list_name, code, label) rows.

    Args:
        rows: Choice rows in sheet order

    Returns:
        ChoiceTable keyed by normalized list name
    """
    lists: Dict[str, List[ChoiceEntry]] = {}
    skipped = 0

    for row in rows:
        cells = [_cell(v) for v in row] + ["", "", ""]
        list_name, code_raw, label_raw = cells[:3]

        if not list_name or not code_raw or not label_raw:
            skipped += 1
            continue
        if not is_digit_code(code_raw):
            logger.debug(f"skipping non-standard code {code_raw!r} in list {list_name!r}")
            skipped += 1
            continue

        label = sanitize_choice_label(label_raw)
        key = normalize_list_name(list_name)
        lists.setdefault(key, []).append(ChoiceEntry(list_name=key, code=int(code_raw), label=label))

    if skipped:
        logger.debug(f"choices: kept {sum(len(v) for v in lists.values())} rows, skipped {skipped}")

    return ChoiceTable(lists={key: tuple(entries) for key, entries in lists.items()})


__all__ = ["load_choices"]
