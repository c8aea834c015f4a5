"""
Dataset Assigner.

Decides which dataset (survey root or a repeat group) each question's
answers live in, removes duplicate declarations, and groups the result by
dataset and question type for the backends.

Innermost group:
    Of all intervals containing a question's order, the narrowest one
    (smallest end_order - start_order) wins. If several intervals share
    that width there is no single innermost group and AmbiguousDataset is
    raised rather than guessing.
"""

import logging
from typing import Dict, Iterable, List, Sequence

from hfcgen.errors import AmbiguousDataset
from hfcgen.model import (
    ROOT_DATASET,
    DatasetVariables,
    QuestionRecord,
    QuestionType,
    RepeatGroupInterval,
)

logger = logging.getLogger(__name__)


def innermost_dataset(order: int, groups: Sequence[RepeatGroupInterval]) -> str:
    """
    Dataset key for a sheet position.

    Args:
        order: Question order
        groups: All repeat group intervals

    Returns:
        Key of the innermost enclosing group, or ROOT_DATASET

    Raises:
        AmbiguousDataset: If two enclosing groups tie for innermost
    """
    enclosing = [g for g in groups if g.contains(order)]
    if not enclosing:
        return ROOT_DATASET

    narrowest = min(g.width for g in enclosing)
    candidates = [g for g in enclosing if g.width == narrowest]
    if len(candidates) > 1:
        keys = ", ".join(g.dataset_key for g in candidates)
        raise AmbiguousDataset(f"row {order} lies in repeat groups {keys} with no innermost one")
    return candidates[0].dataset_key


def deduplicate(questions: Iterable[QuestionRecord]) -> List[QuestionRecord]:
    """Keep the first record (by order) of every name."""
    seen = set()
    kept = []
    for question in sorted(questions, key=lambda q: q.order):
        if question.name in seen:
            logger.debug(f"dropping duplicate {question.name!r} at row {question.order}")
            continue
        seen.add(question.name)
        kept.append(question)
    return kept


def assign_datasets(
    questions: Iterable[QuestionRecord],
    groups: Sequence[RepeatGroupInterval],
) -> List[QuestionRecord]:
    """
    Set the dataset of every question and drop duplicate names.

    Args:
        questions: Classified, relevant questions
        groups: Repeat group intervals

    Returns:
        New QuestionRecords in ascending order, each with a dataset

    Raises:
        AmbiguousDataset: See innermost_dataset
    """
    assigned = [q.with_dataset(innermost_dataset(q.order, groups)) for q in questions]
    return deduplicate(assigned)


def group_by_dataset(
    questions: Iterable[QuestionRecord],
    groups: Sequence[RepeatGroupInterval],
) -> Dict[str, DatasetVariables]:
    """
    Group question names by (dataset, question type).

    The root dataset comes first, followed by every repeat group in
    start order, including groups without relevant questions.
    """
    buckets: Dict[str, Dict[QuestionType, List[str]]] = {ROOT_DATASET: {}}
    names = {ROOT_DATASET: ROOT_DATASET}
    for group in sorted(groups, key=lambda g: g.start_order):
        buckets[group.dataset_key] = {}
        names[group.dataset_key] = group.dataset_name or group.dataset_key

    for question in sorted(questions, key=lambda q: q.order):
        bucket = buckets[question.dataset]
        bucket.setdefault(question.question_type, []).append(question.name)

    return {
        key: DatasetVariables(
            key=key,
            name=names[key],
            variables={qt: tuple(vs) for qt, vs in bucket.items()},
        )
        for key, bucket in buckets.items()
    }


__all__ = ["innermost_dataset", "deduplicate", "assign_datasets", "group_by_dataset"]
