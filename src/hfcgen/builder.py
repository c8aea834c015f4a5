"""
Instrument Model builder.

Runs the loaders in their fixed order and returns a finished model:

    load choices -> prepare/load questions -> match repeat groups
        -> assign datasets -> group by dataset -> InstrumentModel

Any InstrumentError stops the pipeline; a partial model is never
returned.
"""

import logging
from typing import Iterable, Sequence

from hfcgen.choices import load_choices
from hfcgen.datasets import assign_datasets, group_by_dataset
from hfcgen.errors import MalformedInstrument
from hfcgen.model import ROOT_DATASET, InstrumentModel, RepeatGroupInterval
from hfcgen.questions import load_questions, prepare_survey_rows
from hfcgen.repeats import match_repeat_groups

logger = logging.getLogger(__name__)


def _check_group_keys(groups: Sequence[RepeatGroupInterval]) -> None:
    seen = {ROOT_DATASET}
    for group in groups:
        if group.dataset_key in seen:
            raise MalformedInstrument(
                f"repeat group name {group.dataset_key!r} at row {group.start_order} is not unique"
            )
        seen.add(group.dataset_key)


def build_instrument_model(
    choice_rows: Iterable[Sequence[str]],
    survey_rows: Iterable[Sequence[str]],
    name: str = "instrument",
) -> InstrumentModel:
    """
    Build an InstrumentModel from raw sheet rows.

    Args:
        choice_rows: (list_name, name, label) rows of the choices sheet
        survey_rows: (type, name, label, label_variable, calculation) rows
                     of the survey sheet
        name: Instrument identifier carried into the model

    Returns:
        Finished, immutable InstrumentModel

    Raises:
        MalformedInstrument: Unbalanced or duplicated repeat markers
        AmbiguousDataset: A question without a single innermost group
    """
    choices = load_choices(choice_rows)
    rows = prepare_survey_rows(survey_rows)
    questions = load_questions(rows)
    groups = match_repeat_groups(rows)
    _check_group_keys(groups)

    assigned = assign_datasets(questions, groups)
    datasets = group_by_dataset(assigned, groups)

    logger.debug(
        f"model {name!r}: {len(assigned)} questions, {len(groups)} repeat groups, "
        f"{len(choices)} choice lists"
    )

    return InstrumentModel(
        questions=tuple(assigned),
        groups=tuple(groups),
        choices=choices,
        datasets=datasets,
        name=name,
    )


__all__ = ["build_instrument_model"]
