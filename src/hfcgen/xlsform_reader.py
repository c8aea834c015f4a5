"""
XLSForm reader.

Reads the survey and choices sheets with pandas and yields the raw rows
the loaders expect. Every cell is read as a string; blank cells become "".

Column resolution happens once per sheet:
    survey:  type, name               required
             label                    "label", else first "label:<lang>"
             label_variable           "label:stata" / "label::stata", optional
             calculation              optional
    choices: list_name, name|value, label   required
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pandas as pd

from hfcgen.errors import MissingRequiredColumn
from hfcgen.model import RawChoiceRow, RawSurveyRow

logger = logging.getLogger(__name__)

STATA_LABEL_COLUMNS = ("label:stata", "label::stata")
_LANG_LABEL_RE = re.compile(r"^label::?(.+)$")


def read_sheets(path: Path) -> Dict[str, pd.DataFrame]:
    """
    Read every sheet of a workbook as strings.

    Raises:
        FileNotFoundError: If the workbook does not exist
    """
    if not path.exists():
        raise FileNotFoundError(f"instrument not found: {path}")
    sheets: Dict[str, pd.DataFrame] = {}
    with pd.ExcelFile(path) as xls:
        for name in xls.sheet_names:
            df = xls.parse(name, dtype=str, keep_default_na=False)
            sheets[str(name).strip().lower()] = df.fillna("")
    return sheets


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df.columns = [str(c).strip().lower() for c in df.columns]
    return df


def _label_column(columns: List[str]) -> Optional[str]:
    if "label" in columns:
        return "label"
    for column in columns:
        match = _LANG_LABEL_RE.match(column)
        if match and column not in STATA_LABEL_COLUMNS:
            return column
    return None


def _stata_label_column(columns: List[str]) -> Optional[str]:
    for column in STATA_LABEL_COLUMNS:
        if column in columns:
            return column
    return None


def _require(columns: List[str], required: Tuple[str, ...], sheet: str) -> None:
    missing = [c for c in required if c not in columns]
    if missing:
        raise MissingRequiredColumn(f"sheet '{sheet}' missing columns: {missing}")


def _column_values(df: pd.DataFrame, column: Optional[str]) -> List[str]:
    if column is None:
        return [""] * len(df)
    return [str(v) for v in df[column].tolist()]


def survey_rows_from_frame(df: pd.DataFrame, sheet: str = "survey") -> List[RawSurveyRow]:
    """
    Convert a survey-sheet DataFrame into RawSurveyRows.

    Raises:
        MissingRequiredColumn: If "type" or "name" is absent
    """
    df = _normalize_columns(df)
    columns = list(df.columns)
    _require(columns, ("type", "name"), sheet)

    label_col = _label_column(columns)
    stata_col = _stata_label_column(columns)
    if stata_col is None:
        logger.debug(f"sheet '{sheet}' has no Stata label column; using display labels")

    return [
        RawSurveyRow(type=t, name=n, label=lab, label_variable=var, calculation=calc)
        for t, n, lab, var, calc in zip(
            _column_values(df, "type"),
            _column_values(df, "name"),
            _column_values(df, label_col),
            _column_values(df, stata_col),
            _column_values(df, "calculation" if "calculation" in columns else None),
        )
    ]


def choice_rows_from_frame(df: pd.DataFrame, sheet: str = "choices") -> List[RawChoiceRow]:
    """
    Convert a choices-sheet DataFrame into RawChoiceRows.

    Raises:
        MissingRequiredColumn: If list_name, name/value or label is absent
    """
    df = _normalize_columns(df)
    columns = list(df.columns)
    code_col = "name" if "name" in columns else "value"
    _require(columns, ("list_name", code_col), sheet)

    label_col = _label_column(columns)
    if label_col is None:
        raise MissingRequiredColumn(f"sheet '{sheet}' missing columns: ['label']")

    return [
        RawChoiceRow(list_name=ln, name=code, label=lab)
        for ln, code, lab in zip(
            _column_values(df, "list_name"),
            _column_values(df, code_col),
            _column_values(df, label_col),
        )
    ]


def read_instrument(
    path: Path,
    survey_sheet: str = "survey",
    choices_sheet: str = "choices",
) -> Tuple[List[RawChoiceRow], List[RawSurveyRow]]:
    """
    Read an XLSForm workbook.

    Args:
        path: Workbook path
        survey_sheet: Name of the question sheet
        choices_sheet: Name of the value-label sheet

    Returns:
        (choice_rows, survey_rows)

    Raises:
        FileNotFoundError: Workbook missing
        MissingRequiredColumn: Survey sheet missing, or a required column absent
    """
    sheets = read_sheets(Path(path))

    survey_key = survey_sheet.strip().lower()
    if survey_key not in sheets:
        raise MissingRequiredColumn(f"workbook {path} has no '{survey_sheet}' sheet")
    survey_rows = survey_rows_from_frame(sheets[survey_key], sheet=survey_sheet)

    choices_key = choices_sheet.strip().lower()
    if choices_key in sheets:
        choice_rows = choice_rows_from_frame(sheets[choices_key], sheet=choices_sheet)
    else:
        logger.warning(f"workbook {path} has no '{choices_sheet}' sheet; no value labels")
        choice_rows = []

    return choice_rows, survey_rows


__all__ = [
    "read_sheets",
    "survey_rows_from_frame",
    "choice_rows_from_frame",
    "read_instrument",
]
