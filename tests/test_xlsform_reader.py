"""
Tests for the XLSForm reader.

Workbooks are written to tmp_path with pandas/openpyxl and read back.
"""

import pandas as pd
import pytest
from hfcgen.builder import build_instrument_model
from hfcgen.errors import MissingRequiredColumn
from hfcgen.examples import build_household_instrument
from hfcgen.xlsform_reader import choice_rows_from_frame, read_instrument, read_sheets, survey_rows_from_frame


class TestSurveyColumns:
    """Column resolution on the survey sheet."""

    def test_language_and_stata_labels(self):
        df = pd.DataFrame({
            "Type": ["integer"],
            "Name": ["age"],
            "label:Stata": ["Age in years"],
            "label::English (en)": ["How old are you?"],
        })
        rows = survey_rows_from_frame(df)
        assert rows[0].label == "How old are you?"
        assert rows[0].label_variable == "Age in years"
        assert rows[0].calculation == ""

    def test_plain_label_preferred(self):
        df = pd.DataFrame({
            "type": ["text"], "name": ["n"], "label::French": ["Nom"], "label": ["Name"],
        })
        assert survey_rows_from_frame(df)[0].label == "Name"

    def test_no_label_column(self):
        df = pd.DataFrame({"type": ["text"], "name": ["n"]})
        row = survey_rows_from_frame(df)[0]
        assert row.label == ""
        assert row.label_variable == ""

    def test_missing_type_column(self):
        df = pd.DataFrame({"name": ["n"], "label": ["Name"]})
        with pytest.raises(MissingRequiredColumn, match="type"):
            survey_rows_from_frame(df)


class TestChoiceColumns:
    """Column resolution on the choices sheet."""

    def test_value_column(self):
        df = pd.DataFrame({"list_name": ["sex"], "value": ["1"], "label": ["Male"]})
        assert choice_rows_from_frame(df)[0] == ("sex", "1", "Male")

    def test_missing_label(self):
        df = pd.DataFrame({"list_name": ["sex"], "name": ["1"]})
        with pytest.raises(MissingRequiredColumn, match="label"):
            choice_rows_from_frame(df)


class TestReadInstrument:
    """Whole-workbook reading."""

    def test_household_workbook_matches_example(self, household_xlsx):
        from_file = build_instrument_model(*read_instrument(household_xlsx), name="household")
        in_memory = build_instrument_model(*build_household_instrument(), name="household")
        assert from_file == in_memory

    def test_sheet_names_case_insensitive(self, tmp_path, write_workbook):
        path = write_workbook(tmp_path / "f.xlsx", {
            "Survey": pd.DataFrame({"type": ["text"], "name": ["n"], "label": ["Name"]}),
            "Choices": pd.DataFrame({"list_name": ["l"], "name": ["1"], "label": ["One"]}),
        })
        choice_rows, survey_rows = read_instrument(path)
        assert len(survey_rows) == 1
        assert len(choice_rows) == 1

    def test_missing_choices_sheet(self, tmp_path, caplog, write_workbook):
        path = write_workbook(tmp_path / "f.xlsx", {
            "survey": pd.DataFrame({"type": ["text"], "name": ["n"], "label": ["Name"]}),
        })
        with caplog.at_level("WARNING", logger="hfcgen.xlsform_reader"):
            choice_rows, survey_rows = read_instrument(path)
        assert choice_rows == []
        assert "no 'choices' sheet" in caplog.text

    def test_missing_survey_sheet(self, tmp_path, write_workbook):
        path = write_workbook(tmp_path / "f.xlsx", {
            "choices": pd.DataFrame({"list_name": ["l"], "name": ["1"], "label": ["One"]}),
        })
        with pytest.raises(MissingRequiredColumn, match="survey"):
            read_instrument(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_instrument(tmp_path / "missing.xlsx")

    def test_workbook_closed_when_parse_fails(self, household_xlsx, monkeypatch):
        """The workbook handle is released even if a sheet cannot be parsed."""
        closed = []
        original_close = pd.ExcelFile.close

        def record_close(self):
            closed.append(True)
            original_close(self)

        def broken_parse(self, *args, **kwargs):
            raise ValueError("unreadable sheet")

        monkeypatch.setattr(pd.ExcelFile, "close", record_close)
        monkeypatch.setattr(pd.ExcelFile, "parse", broken_parse)
        with pytest.raises(ValueError):
            read_sheets(household_xlsx)
        assert closed
