"""
Instrument Analyzer: inventory and early warnings for a built model.

Reports:
    - Question counts per type and per dataset
    - Select questions whose choice list is missing
    - Choice lists no question uses
    - Repeat groups without relevant questions

IMPORTANT: This is read-only. It never modifies the model.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Set

from hfcgen.model import InstrumentModel


@dataclass
class InstrumentReport:
    """Inventory of an instrument model."""

    instrument_name: str
    total_questions: int = 0
    total_groups: int = 0
    total_choice_lists: int = 0

    questions_by_type: Dict[str, int] = field(default_factory=dict)
    questions_by_dataset: Dict[str, int] = field(default_factory=dict)

    missing_choice_lists: Dict[str, str] = field(default_factory=dict)  # question -> list
    unused_choice_lists: Set[str] = field(default_factory=set)
    empty_groups: List[str] = field(default_factory=list)

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        if msg not in self.warnings:
            self.warnings.append(msg)

    def summary_lines(self) -> List[str]:
        lines = [
            f"instrument={self.instrument_name} questions={self.total_questions} "
            f"groups={self.total_groups} choice_lists={self.total_choice_lists}",
        ]
        for key, count in self.questions_by_dataset.items():
            lines.append(f"dataset {key}: {count} questions")
        for type_name, count in sorted(self.questions_by_type.items()):
            lines.append(f"type {type_name}: {count}")
        return lines


def analyze_instrument(model: InstrumentModel) -> InstrumentReport:
    """
    Inventory a model and flag likely authoring mistakes.

    Returns an InstrumentReport with counts and warnings.
    """
    report = InstrumentReport(instrument_name=model.name)
    report.total_questions = len(model.questions)
    report.total_groups = len(model.groups)
    report.total_choice_lists = len(model.choices)

    type_counts = Counter(q.question_type.value for q in model.questions)
    report.questions_by_type = dict(type_counts)
    report.questions_by_dataset = {
        key: len(dataset.all_variables) for key, dataset in model.datasets.items()
    }

    used_lists: Set[str] = set()
    for question in model.questions:
        list_name = question.choice_list
        if list_name is None:
            continue
        used_lists.add(list_name)
        if list_name not in model.choices:
            report.missing_choice_lists[question.name] = list_name

    report.unused_choice_lists = set(model.choices.lists) - used_lists

    for group in model.groups:
        if report.questions_by_dataset.get(group.dataset_key, 0) == 0:
            report.empty_groups.append(group.dataset_key)

    if report.missing_choice_lists:
        pairs = ", ".join(f"{q} ({lst})" for q, lst in sorted(report.missing_choice_lists.items()))
        report.add_warning(f"Select questions without a numeric choice list: {pairs}")

    if report.unused_choice_lists:
        report.add_warning(f"Unused choice lists: {', '.join(sorted(report.unused_choice_lists))}")

    if report.empty_groups:
        report.add_warning(f"Repeat groups without checkable questions: {', '.join(report.empty_groups)}")

    return report


__all__ = ["InstrumentReport", "analyze_instrument"]
