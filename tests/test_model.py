"""
Tests for Instrument Model objects.

These tests verify:
    - Immutability
    - Retrieval methods
    - Derived properties
"""

import dataclasses

import pytest
from hfcgen.builder import build_instrument_model
from hfcgen.examples import build_household_instrument
from hfcgen.model import (
    ChoiceEntry,
    ChoiceTable,
    DatasetVariables,
    InstrumentModel,
    QuestionRecord,
    QuestionType,
    RawSurveyRow,
    RepeatGroupInterval,
)


def _select(name="consent", type_ref="yes_no or_other", question_type=QuestionType.SELECT_ONE):
    return QuestionRecord(
        name=name, order=1, raw_type=f"select_one {type_ref}", type_tag="select_one",
        type_ref=type_ref, label_display="", label_variable="", is_note=False,
        is_preloaded=False, question_type=question_type,
    )


class TestQuestionRecord:
    """QuestionRecord behavior."""

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            _select().name = "other"

    def test_with_dataset_returns_copy(self):
        record = _select()
        assigned = record.with_dataset("survey")
        assert assigned.dataset == "survey"
        assert record.dataset is None

    def test_choice_list_ignores_or_other(self):
        assert _select().choice_list == "yes_no"

    def test_choice_list_only_for_selects(self):
        assert _select(question_type=QuestionType.NUMERIC).choice_list is None


class TestChoiceTable:
    """Lookups."""

    def test_lookups(self):
        table = ChoiceTable(lists={"sex": (ChoiceEntry("sex", 1, "Male"), ChoiceEntry("sex", 2, "Female"))})
        assert "sex" in table
        assert len(table) == 1
        assert table.codes("sex") == [1, 2]
        assert table.codes("missing") == []


class TestRepeatGroupInterval:
    """Containment and width."""

    def test_contains_inclusive(self):
        group = RepeatGroupInterval(start_order=2, end_order=9, dataset_name="A", dataset_key="a")
        assert group.contains(2) and group.contains(9) and group.contains(5)
        assert not group.contains(1) and not group.contains(10)
        assert group.width == 7


class TestDatasetVariables:
    """Per-dataset grouping."""

    def test_all_variables_follow_type_order(self):
        ds = DatasetVariables(key="survey", name="survey", variables={
            QuestionType.NUMERIC: ("age",),
            QuestionType.STRING: ("name",),
        })
        assert ds.all_variables == ("name", "age")
        assert ds.of_type(QuestionType.DATE) == ()


class TestInstrumentModel:
    """Retrieval helpers."""

    def test_get_question_and_group(self):
        group = RepeatGroupInterval(start_order=2, end_order=5, dataset_name="A", dataset_key="a")
        question = _select().with_dataset("a")
        model = InstrumentModel(questions=(question,), groups=(group,))
        assert model.get_question("consent") is question
        assert model.get_question("missing") is None
        assert model.get_group("a") is group
        assert model.get_group("b") is None
        assert model.questions_in("a") == [question]


class TestRawRows:
    """Raw row tuples."""

    def test_survey_row_defaults(self):
        row = RawSurveyRow("text", "name", "Name")
        assert row.label_variable == ""
        assert row.calculation == ""
        assert tuple(row) == ("text", "name", "Name", "", "")


class TestReadOnlyMappings:
    """Mapping fields of a built model cannot be changed in place."""

    def test_built_model_mappings_are_read_only(self):
        model = build_instrument_model(*build_household_instrument())
        with pytest.raises(TypeError):
            model.datasets["bogus"] = None
        with pytest.raises(TypeError):
            model.choices.lists["x"] = ()
        with pytest.raises(TypeError):
            model.datasets["survey"].variables[QuestionType.DATE] = ()

    def test_source_dict_is_copied(self):
        lists = {"sex": (ChoiceEntry("sex", 1, "Male"),)}
        table = ChoiceTable(lists=lists)
        lists["other"] = ()
        assert "other" not in table
