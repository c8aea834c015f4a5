"""
Serialization helpers for Instrument Model objects.

Provides lossless JSON/YAML round-trip via an intermediate dict
representation. The structure is kept flat and explicit so a dumped model
can be diffed between instrument versions.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import yaml

from hfcgen.model import (
    ChoiceEntry,
    ChoiceTable,
    DatasetVariables,
    InstrumentModel,
    QuestionRecord,
    QuestionType,
    RepeatGroupInterval,
)


def choices_to_dict(table: ChoiceTable) -> Dict[str, Any]:
    return {
        list_name: [{"code": e.code, "label": e.label} for e in entries]
        for list_name, entries in table.lists.items()
    }


def choices_from_dict(d: Dict[str, Any]) -> ChoiceTable:
    return ChoiceTable(lists={
        list_name: tuple(ChoiceEntry(list_name=list_name, code=e["code"], label=e["label"]) for e in entries)
        for list_name, entries in (d or {}).items()
    })


def question_to_dict(q: QuestionRecord) -> Dict[str, Any]:
    return {
        "name": q.name,
        "order": q.order,
        "raw_type": q.raw_type,
        "type_tag": q.type_tag,
        "type_ref": q.type_ref,
        "label_display": q.label_display,
        "label_variable": q.label_variable,
        "is_note": q.is_note,
        "is_preloaded": q.is_preloaded,
        "question_type": q.question_type.value,
        "dataset": q.dataset,
    }


def question_from_dict(d: Dict[str, Any]) -> QuestionRecord:
    return QuestionRecord(
        name=d["name"],
        order=d["order"],
        raw_type=d.get("raw_type", ""),
        type_tag=d.get("type_tag", ""),
        type_ref=d.get("type_ref"),
        label_display=d.get("label_display", ""),
        label_variable=d.get("label_variable", ""),
        is_note=d.get("is_note", False),
        is_preloaded=d.get("is_preloaded", False),
        question_type=QuestionType(d["question_type"]),
        dataset=d.get("dataset"),
    )


def group_to_dict(g: RepeatGroupInterval) -> Dict[str, Any]:
    return {
        "start_order": g.start_order,
        "end_order": g.end_order,
        "dataset_name": g.dataset_name,
        "dataset_key": g.dataset_key,
    }


def group_from_dict(d: Dict[str, Any]) -> RepeatGroupInterval:
    return RepeatGroupInterval(
        start_order=d["start_order"],
        end_order=d["end_order"],
        dataset_name=d.get("dataset_name", ""),
        dataset_key=d["dataset_key"],
    )


def dataset_to_dict(ds: DatasetVariables) -> Dict[str, Any]:
    return {
        "key": ds.key,
        "name": ds.name,
        "variables": {qt.value: list(names) for qt, names in ds.variables.items()},
    }


def dataset_from_dict(d: Dict[str, Any]) -> DatasetVariables:
    return DatasetVariables(
        key=d["key"],
        name=d.get("name", d["key"]),
        variables={QuestionType(qt): tuple(names) for qt, names in d.get("variables", {}).items()},
    )


def model_to_dict(m: InstrumentModel) -> Dict[str, Any]:
    return {
        "name": m.name,
        "questions": [question_to_dict(q) for q in m.questions],
        "groups": [group_to_dict(g) for g in m.groups],
        "choices": choices_to_dict(m.choices),
        "datasets": [dataset_to_dict(ds) for ds in m.datasets.values()],
    }


def model_from_dict(d: Dict[str, Any]) -> InstrumentModel:
    datasets = [dataset_from_dict(ds) for ds in d.get("datasets", [])]
    return InstrumentModel(
        questions=tuple(question_from_dict(q) for q in d.get("questions", [])),
        groups=tuple(group_from_dict(g) for g in d.get("groups", [])),
        choices=choices_from_dict(d.get("choices", {})),
        datasets={ds.key: ds for ds in datasets},
        name=d.get("name", "instrument"),
    )


def model_to_json(m: InstrumentModel) -> str:
    return json.dumps(model_to_dict(m), sort_keys=True)


def model_from_json(s: str) -> InstrumentModel:
    return model_from_dict(json.loads(s))


def model_to_yaml(m: InstrumentModel) -> str:
    return yaml.safe_dump(model_to_dict(m), sort_keys=False, allow_unicode=True)


def model_from_yaml(s: str) -> InstrumentModel:
    return model_from_dict(yaml.safe_load(s))


def dump_model(m: InstrumentModel, path: Path) -> Path:
    """Write the model as JSON (.json) or YAML (anything else)."""
    path = Path(path)
    text = model_to_json(m) if path.suffix.lower() == ".json" else model_to_yaml(m)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
