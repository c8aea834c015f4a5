"""
Core Instrument Model Objects

Defines the data structures produced while parsing an XLSForm instrument.

These are pure data classes representing:
    - Choice entries and choice tables (value labels)
    - Survey rows (numbered sheet rows, before classification)
    - Question records (classified, dataset-assigned questions)
    - Repeat group intervals
    - The Instrument Model (root container)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about Stata or spreadsheets
        - Are immutable once built
        - Are fully serializable
        - Represent structure, not behavior
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, NamedTuple, Optional, Tuple

ROOT_DATASET = "survey"


def _freeze(obj, attr: str) -> None:
    """Replace a dict field of a frozen dataclass with a read-only view of a copy."""
    object.__setattr__(obj, attr, MappingProxyType(dict(getattr(obj, attr))))


class RawChoiceRow(NamedTuple):
    """One row of the choices sheet, as read."""
    list_name: str
    name: str
    label: str


class RawSurveyRow(NamedTuple):
    """One row of the survey sheet, as read. Absent cells are empty strings."""
    type: str
    name: str
    label: str
    label_variable: str = ""
    calculation: str = ""


class QuestionType(Enum):
    """Analysis category of a question."""
    STRING = "string"
    SELECT_ONE = "select_one"
    SELECT_MULTIPLE = "select_multiple"
    NUMERIC = "numeric"
    DATE = "date"
    DATETIME = "datetime"
    GEOPOINT = "geopoint"
    NOT_RELEVANT = "not_relevant"


@dataclass(frozen=True)
class ChoiceEntry:
    """
    A single value label.

    Properties:
        list_name: Choice list identifier (whitespace stripped)
        code: Non-negative integer code
        label: Sanitized label text
    """

    list_name: str
    code: int
    label: str


@dataclass(frozen=True)
class ChoiceTable:
    """
    All value labels of an instrument, grouped by list name.

    Entries keep sheet order inside each list.
    """

    lists: Mapping[str, Tuple[ChoiceEntry, ...]] = field(default_factory=dict)

    def __post_init__(self):
        _freeze(self, "lists")

    def get(self, list_name: str) -> Tuple[ChoiceEntry, ...]:
        return self.lists.get(list_name, ())

    def codes(self, list_name: str) -> List[int]:
        return [entry.code for entry in self.get(list_name)]

    def __contains__(self, list_name: str) -> bool:
        return list_name in self.lists

    def __len__(self) -> int:
        return len(self.lists)


@dataclass(frozen=True)
class SurveyRow:
    """
    A numbered survey-sheet row, before classification.

    Both the question classifier and the repeat matcher read these, so
    marker rows and questions share one numbering space.

    Properties:
        order:
            1-based position among rows with a non-empty name

        raw_type:
            The untouched "type" cell

        name:
            Lowercased identifier with periods stripped

        label_display / label_variable:
            Sanitized labels; label_variable already falls back to
            label_display when no Stata label was given

        calculation:
            Raw calculation expression (only checked for preloads)
    """

    order: int
    raw_type: str
    name: str
    label_display: str = ""
    label_variable: str = ""
    calculation: str = ""


@dataclass(frozen=True)
class QuestionRecord:
    """
    A classified question.

    Properties:
        name:
            Normalized variable name (unique in a finished model)

        order:
            Stable 1-based sort key, shared with SurveyRow

        raw_type / type_tag / type_ref:
            Full type cell, its first token and the remaining tokens
            Example: "select_one yesno" -> "select_one", "yesno"

        label_display / label_variable:
            Sanitized labels

        is_note / is_preloaded:
            Flags that force NOT_RELEVANT classification

        question_type:
            Analysis category (see QuestionType)

        dataset:
            Key of the dataset holding this question's answers.
            None until the dataset assigner runs; never None in a
            finished InstrumentModel.
    """

    name: str
    order: int
    raw_type: str
    type_tag: str
    type_ref: Optional[str]
    label_display: str
    label_variable: str
    is_note: bool
    is_preloaded: bool
    question_type: QuestionType
    dataset: Optional[str] = None

    def with_dataset(self, dataset: str) -> "QuestionRecord":
        return replace(self, dataset=dataset)

    @property
    def choice_list(self) -> Optional[str]:
        """Choice list referenced by a select question ("or_other" suffix ignored)."""
        if self.question_type not in (QuestionType.SELECT_ONE, QuestionType.SELECT_MULTIPLE):
            return None
        if not self.type_ref:
            return None
        return self.type_ref.split()[0]


@dataclass(frozen=True)
class RepeatGroupInterval:
    """
    The span of a repeat group in sheet order (both ends inclusive).

    INVARIANT:
        end_order > start_order

    Properties:
        start_order: Order of the begin marker
        end_order: Order of the matched end marker
        dataset_name: Sanitized variable label of the begin marker
        dataset_key: Name of the begin marker
    """

    start_order: int
    end_order: int
    dataset_name: str
    dataset_key: str

    def contains(self, order: int) -> bool:
        return self.start_order <= order <= self.end_order

    @property
    def width(self) -> int:
        return self.end_order - self.start_order


@dataclass(frozen=True)
class DatasetVariables:
    """Variables of one dataset, grouped by question type in sheet order."""

    key: str
    name: str
    variables: Mapping[QuestionType, Tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self):
        _freeze(self, "variables")

    def of_type(self, question_type: QuestionType) -> Tuple[str, ...]:
        return self.variables.get(question_type, ())

    @property
    def all_variables(self) -> Tuple[str, ...]:
        names: List[str] = []
        for question_type in QuestionType:
            names.extend(self.of_type(question_type))
        return tuple(names)


@dataclass(frozen=True)
class InstrumentModel:
    """
    Root container for a parsed instrument.

    This is THE artifact handed to backends. Everything a backend needs
    MUST be derivable from this object alone.

    Properties:
        questions:
            Relevant questions in sheet order, each with a dataset

        groups:
            Repeat group intervals, ascending by start_order

        choices:
            Value labels

        datasets:
            Dataset key -> DatasetVariables. Root dataset first, then one
            entry per repeat group.
            Mapping fields here and in ChoiceTable/DatasetVariables are
            read-only views.

        name:
            Instrument identifier (usually the source file stem)

    INVARIANTS:
        - Every question's dataset is ROOT_DATASET or exactly one group key
        - Question names are unique
    """

    questions: Tuple[QuestionRecord, ...] = ()
    groups: Tuple[RepeatGroupInterval, ...] = ()
    choices: ChoiceTable = field(default_factory=ChoiceTable)
    datasets: Mapping[str, DatasetVariables] = field(default_factory=dict)
    name: str = "instrument"

    def __post_init__(self):
        _freeze(self, "datasets")

    def get_question(self, name: str) -> Optional[QuestionRecord]:
        """
        Retrieve a question by name.

        Args:
            name: Normalized question name

        Returns:
            QuestionRecord or None if not found
        """
        for question in self.questions:
            if question.name == name:
                return question
        return None

    def get_group(self, dataset_key: str) -> Optional[RepeatGroupInterval]:
        for group in self.groups:
            if group.dataset_key == dataset_key:
                return group
        return None

    def questions_in(self, dataset_key: str) -> List[QuestionRecord]:
        return [q for q in self.questions if q.dataset == dataset_key]


__all__ = [
    "ROOT_DATASET",
    "RawChoiceRow",
    "RawSurveyRow",
    "QuestionType",
    "ChoiceEntry",
    "ChoiceTable",
    "SurveyRow",
    "QuestionRecord",
    "RepeatGroupInterval",
    "DatasetVariables",
    "InstrumentModel",
]
