"""
Question Table Loader and Type Classifier.

Converts survey-sheet rows into classified QuestionRecords.

Two steps:
    1. prepare_survey_rows: drop unnamed rows, number the rest (1-based,
       no gaps), sanitize labels and apply the Stata-label fallback.
    2. load_questions: classify every row and keep only the relevant ones.

Classification (first matching rule wins):
    text                          -> STRING
    select_one <list>             -> SELECT_ONE
    select_multiple <list>        -> SELECT_MULTIPLE
    geopoint                      -> GEOPOINT
    date, today                   -> DATE
    start, end, submissiondate    -> DATETIME
    anything else                 -> NUMERIC

The NOT_RELEVANT override is applied afterwards and always wins: group and
repeat markers, text audits, device ids, images, notes and preloaded
(pulldata) calculations never reach the model.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from hfcgen.model import QuestionRecord, QuestionType, SurveyRow
from hfcgen.sanitize import collapse_type, normalize_list_name, normalize_name, sanitize_label

logger = logging.getLogger(__name__)

PRELOAD_PREFIX = "pulldata"
NOTE_TYPE = "note"

DATE_TYPES = {"date", "today"}
DATETIME_TYPES = {"start", "end", "submissiondate"}

# Compared against collapse_type(raw_type), so "text audit" is "text_audit"
# and "begin repeat" is "begin_repeat".
NOT_RELEVANT_TYPES = {
    "begin_group",
    "end_group",
    "begin_repeat",
    "end_repeat",
    "text_audit",
    "deviceid",
    "image",
}

KNOWN_NUMERIC_TYPES = {"integer", "decimal", "range", "calculate", "calculate_here"}


def _cell(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def split_type(raw_type: str) -> Tuple[str, Optional[str]]:
    """
    Split a type cell into its tag and reference.

    Examples:
        "select_one yesno" -> ("select_one", "yesno")
        "integer"          -> ("integer", None)
    """
    tokens = (raw_type or "").split()
    if not tokens:
        return "", None
    ref = normalize_list_name(" ".join(tokens[1:])) if len(tokens) > 1 else None
    return tokens[0], ref


def prepare_survey_rows(rows: Iterable[Sequence[str]]) -> List[SurveyRow]:
    """
    Number and sanitize raw survey rows.

    Rows whose name is empty are dropped BEFORE numbering, so orders run
    1..n without gaps.

    Args:
        rows: (type, name, label, label_variable, calculation) tuples;
              trailing cells may be omitted

    Returns:
        SurveyRows in sheet order
    """
    prepared: List[SurveyRow] = []
    for row in rows:
        cells = [_cell(v) for v in row] + [""] * 5
        raw_type, name_raw, label_raw, label_var_raw, calculation = cells[:5]

        name = normalize_name(name_raw)
        if not name:
            continue

        label_display = sanitize_label(label_raw)
        label_variable = sanitize_label(label_var_raw)
        if not label_variable:
            label_variable = label_display

        prepared.append(SurveyRow(
            order=len(prepared) + 1,
            raw_type=raw_type,
            name=name,
            label_display=label_display,
            label_variable=label_variable,
            calculation=calculation,
        ))
    return prepared


def is_preloaded(calculation: str) -> bool:
    return (calculation or "").startswith(PRELOAD_PREFIX)


def classify_type(raw_type: str) -> QuestionType:
    """Syntactic classification only, without the NOT_RELEVANT override."""
    raw = (raw_type or "").strip()
    tag, _ = split_type(raw)

    if raw == "text":
        return QuestionType.STRING
    if tag == "select_one":
        return QuestionType.SELECT_ONE
    if tag == "select_multiple":
        return QuestionType.SELECT_MULTIPLE
    if raw == "geopoint":
        return QuestionType.GEOPOINT
    if raw in DATE_TYPES:
        return QuestionType.DATE
    if raw in DATETIME_TYPES:
        return QuestionType.DATETIME
    return QuestionType.NUMERIC


def is_not_relevant(raw_type: str, is_note: bool, preloaded: bool) -> bool:
    return collapse_type(raw_type) in NOT_RELEVANT_TYPES or is_note or preloaded


def classify_row(row: SurveyRow) -> QuestionRecord:
    """
    Classify a single survey row.

    The syntactic type is computed first and then overridden to
    NOT_RELEVANT, because notes and preloads are independent of the
    type token.
    """
    raw = row.raw_type.strip()
    tag, ref = split_type(raw)
    note = raw == NOTE_TYPE
    preloaded = is_preloaded(row.calculation)

    question_type = classify_type(raw)
    if is_not_relevant(raw, note, preloaded):
        question_type = QuestionType.NOT_RELEVANT
    elif question_type == QuestionType.NUMERIC and tag not in KNOWN_NUMERIC_TYPES:
        logger.warning(f"unrecognized type {raw!r} for {row.name!r} treated as numeric")

    return QuestionRecord(
        name=row.name,
        order=row.order,
        raw_type=row.raw_type,
        type_tag=tag,
        type_ref=ref,
        label_display=row.label_display,
        label_variable=row.label_variable,
        is_note=note,
        is_preloaded=preloaded,
        question_type=question_type,
    )


def load_questions(rows: Iterable[SurveyRow]) -> List[QuestionRecord]:
    """
    Classify survey rows and drop everything NOT_RELEVANT.

    Args:
        rows: Output of prepare_survey_rows

    Returns:
        Relevant QuestionRecords in sheet order, dataset unset
    """
    questions = []
    for row in rows:
        record = classify_row(row)
        if record.question_type != QuestionType.NOT_RELEVANT:
            questions.append(record)
    return questions


__all__ = [
    "split_type",
    "prepare_survey_rows",
    "is_preloaded",
    "classify_type",
    "classify_row",
    "load_questions",
]
