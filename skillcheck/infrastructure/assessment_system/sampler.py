from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List, Mapping, Sequence

from skillcheck.application.errors import InsufficientQuestionsError, ValidationError
from .choices import QUESTION_TYPE_ORDER
from .sources import RandomSource

logger = logging.getLogger(__name__)


def _type_rank(question_type: str):
    if question_type in QUESTION_TYPE_ORDER:
        return (QUESTION_TYPE_ORDER.index(question_type), question_type)
    return (len(QUESTION_TYPE_ORDER), question_type)


def fisher_yates_shuffle(items: list, rand: RandomSource) -> list:
    """In-place shuffle walking from the last index down to 1."""
    for i in range(len(items) - 1, 0, -1):
        j = rand.randint(0, i)
        items[i], items[j] = items[j], items[i]
    return items


class QuestionSampler:
    """
    Type-aware selection without replacement from a question pool.

    Every requested type is checked against the pool before any shuffling, so
    a short pool fails without consuming the random source. The output lists
    conventional types before long-form ones; within a type, shuffle order is
    kept.
    """

    def __init__(self, rand: RandomSource):
        self._rand = rand

    def sample(self, pool: Sequence, type_counts: Mapping[str, int]) -> List:
        partitions: Dict[str, list] = defaultdict(list)
        for question in pool:
            partitions[question.type].append(question)

        requested = sorted(
            ((t, int(c)) for t, c in type_counts.items() if int(c) != 0),
            key=lambda item: _type_rank(item[0]),
        )

        for question_type, count in requested:
            if count < 0:
                raise ValidationError(
                    f"Invalid count {count} for question type '{question_type}'",
                    service="Sampler",
                    operation="sample",
                )
            available = len(partitions.get(question_type, []))
            if available < count:
                logger.warning(
                    f"Insufficient '{question_type}' questions: requested={count}, available={available}"
                )
                raise InsufficientQuestionsError(
                    question_type, count, available, service="Sampler", operation="sample"
                )

        selected: List = []
        for question_type, count in requested:
            # Shuffle a copy; the caller's pool is left untouched
            partition = fisher_yates_shuffle(list(partitions[question_type]), self._rand)
            selected.extend(partition[:count])

        logger.debug(f"Sampled {len(selected)} questions for distribution {dict(requested)}")
        return selected
