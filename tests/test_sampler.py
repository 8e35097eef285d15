from collections import Counter
from types import SimpleNamespace

import pytest

from skillcheck.application.errors import InsufficientQuestionsError, ValidationError
from skillcheck.infrastructure.assessment_system.sampler import QuestionSampler, fisher_yates_shuffle
from skillcheck.infrastructure.assessment_system.sources import NumpyRandomSource

from conftest import ScriptedRandom


def _pool(mcq=5, coding=2):
    pool = [SimpleNamespace(id=i, type="mcq") for i in range(1, mcq + 1)]
    pool += [SimpleNamespace(id=100 + i, type="coding") for i in range(1, coding + 1)]
    return pool


def test_shuffle_walks_from_last_index_down_to_one():
    rand = ScriptedRandom()
    items = ["a", "b", "c", "d"]

    fisher_yates_shuffle(items, rand)

    assert rand.calls == [(0, 3), (0, 2), (0, 1)]
    # j=0 at every step
    assert items == ["b", "c", "d", "a"]


def test_shuffle_with_j_equal_i_keeps_order():
    rand = ScriptedRandom(script=[3, 2, 1])
    items = [1, 2, 3, 4]

    assert fisher_yates_shuffle(items, rand) == [1, 2, 3, 4]


def test_sample_matches_requested_counts_without_duplicates():
    sampler = QuestionSampler(NumpyRandomSource(7))

    selected = sampler.sample(_pool(), {"mcq": 3, "coding": 2})

    assert len(selected) == 5
    assert Counter(q.type for q in selected) == {"mcq": 3, "coding": 2}
    assert len({q.id for q in selected}) == 5


def test_sample_places_mcq_before_coding():
    sampler = QuestionSampler(NumpyRandomSource(3))
    pool = list(reversed(_pool()))

    selected = sampler.sample(pool, {"coding": 1, "mcq": 3})

    assert [q.type for q in selected] == ["mcq", "mcq", "mcq", "coding"]


def test_sample_is_deterministic_for_same_random_sequence():
    first = QuestionSampler(NumpyRandomSource(42)).sample(_pool(), {"mcq": 4, "coding": 1})
    second = QuestionSampler(NumpyRandomSource(42)).sample(_pool(), {"mcq": 4, "coding": 1})

    assert [q.id for q in first] == [q.id for q in second]


def test_sample_does_not_mutate_pool():
    pool = _pool()
    before = [q.id for q in pool]

    QuestionSampler(ScriptedRandom()).sample(pool, {"mcq": 2})

    assert [q.id for q in pool] == before


def test_sample_fails_without_consuming_randomness_when_pool_is_short():
    rand = ScriptedRandom()
    sampler = QuestionSampler(rand)

    with pytest.raises(InsufficientQuestionsError) as exc:
        sampler.sample(_pool(mcq=5, coding=1), {"mcq": 2, "coding": 2})

    assert exc.value.question_type == "coding"
    assert exc.value.requested == 2
    assert exc.value.available == 1
    assert rand.calls == []


def test_sample_fails_for_type_missing_from_pool():
    with pytest.raises(InsufficientQuestionsError):
        QuestionSampler(ScriptedRandom()).sample(_pool(), {"essay": 1})


def test_sample_rejects_negative_counts():
    with pytest.raises(ValidationError):
        QuestionSampler(ScriptedRandom()).sample(_pool(), {"mcq": -1})


def test_sample_whole_partition_when_count_equals_available():
    selected = QuestionSampler(NumpyRandomSource(1)).sample(_pool(), {"mcq": 5, "coding": 2})

    assert sorted(q.id for q in selected) == sorted(q.id for q in _pool())


def test_numpy_random_source_is_inclusive():
    rand = NumpyRandomSource(0)
    values = {rand.randint(0, 2) for _ in range(200)}

    assert values == {0, 1, 2}
