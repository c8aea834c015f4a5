import pandas as pd
import pytest

from hfcgen.examples import build_household_choices, build_household_survey
from hfcgen.log import reset_logging


@pytest.fixture(autouse=True)
def _fresh_logging():
    """Each test starts with an unconfigured "hfcgen" logger."""
    reset_logging()
    yield
    reset_logging()


def _write_workbook(path, sheets):
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for name, df in sheets.items():
            df.to_excel(writer, sheet_name=name, index=False)
    return path


@pytest.fixture
def write_workbook():
    """Return a helper that writes {sheet_name: DataFrame} to an .xlsx file."""
    return _write_workbook


@pytest.fixture
def household_xlsx(tmp_path):
    """The example household instrument as an XLSForm workbook."""
    survey = pd.DataFrame(
        [tuple(row) for row in build_household_survey()],
        columns=["type", "name", "label::English (en)", "label:stata", "calculation"],
    )
    choices = pd.DataFrame(
        [tuple(row) for row in build_household_choices()],
        columns=["list_name", "name", "label::English (en)"],
    )
    return _write_workbook(tmp_path / "household.xlsx", {"survey": survey, "choices": choices})
