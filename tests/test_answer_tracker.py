from datetime import timedelta

import pytest

from skillcheck.application.errors import BadRequestError, ConflictError, NotFoundError, ValidationError
from skillcheck.infrastructure.assessment_system.choices import CodingOutcome, parse_choices
from skillcheck.infrastructure.assessment_system.time_window import EXPIRED
from skillcheck.infrastructure.db.models import AttemptDetail, AttemptStatus
from skillcheck.infrastructure.services.answer_tracker_service import AnswerTrackerService
from skillcheck.infrastructure.services.attempt_lifecycle_service import AttemptLifecycleService

from conftest import WINDOW_END


@pytest.fixture
def started(db, clock, sampler, question_bank, make_assessment, make_candidate_session):
    assessment = make_assessment({"mcq": 3, "coding": 1})
    session = make_candidate_session()
    attempt, details = AttemptLifecycleService(db, clock, sampler).start(assessment.id, session.id)
    return attempt, details, session


@pytest.fixture
def tracker(db, clock):
    return AnswerTrackerService(db, clock)


def _reload(db, detail_id):
    db.expire_all()
    return db.query(AttemptDetail).filter(AttemptDetail.id == detail_id).one()


def _wrong_choice_id(question):
    return next(c.id for c in parse_choices(question.choices) if c.id != question.answer_id)


def test_correct_choice_scores_question_weight(db, tracker, started):
    _, details, _ = started
    detail = details[0]
    question = detail.question

    result = tracker.update_answer(detail.id, question.answer_id)

    assert result.id == detail.id
    assert result.attempted is True
    stored = _reload(db, detail.id)
    assert stored.is_correct is True
    assert stored.score == question.score
    assert stored.submission_choice_id == question.answer_id
    assert stored.change_count == 1


def test_other_valid_choice_scores_zero(db, tracker, started):
    _, details, _ = started
    detail = details[0]

    tracker.update_answer(detail.id, _wrong_choice_id(detail.question))

    stored = _reload(db, detail.id)
    assert stored.is_attempted is True
    assert stored.is_correct is False
    assert stored.score == 0


def test_invalid_choice_is_rejected_and_prior_answer_kept(db, tracker, started):
    _, details, _ = started
    detail = details[1]
    answer_id = detail.question.answer_id
    tracker.update_answer(detail.id, answer_id)

    with pytest.raises(BadRequestError) as exc:
        tracker.update_answer(detail.id, "not-a-choice")

    assert str(exc.value) == "Invalid option"
    stored = _reload(db, detail.id)
    assert stored.submission_choice_id == answer_id
    assert stored.is_correct is True
    assert stored.change_count == 1


def test_clearing_twice_resets_and_counts_each_revision(db, tracker, started):
    _, details, _ = started
    detail = details[0]
    tracker.update_answer(detail.id, detail.question.answer_id)

    first = tracker.update_answer(detail.id, "")
    second = tracker.update_answer(detail.id, None)

    assert first.attempted is False and second.attempted is False
    stored = _reload(db, detail.id)
    assert stored.score == 0
    assert stored.is_correct is False
    assert stored.submission_choice_id is None
    assert stored.change_count == 3


def test_repeating_the_same_choice_is_idempotent_apart_from_revision(db, tracker, started):
    _, details, _ = started
    detail = details[2]
    answer_id = detail.question.answer_id

    tracker.update_answer(detail.id, answer_id)
    tracker.update_answer(detail.id, answer_id)

    stored = _reload(db, detail.id)
    assert stored.is_correct is True
    assert stored.score == detail.question.score
    assert stored.change_count == 2


def test_coding_outcome_tier(db, tracker, started):
    _, details, _ = started
    coding = details[-1]
    choices = parse_choices(coding.question.choices)
    fully = next(c for c in choices if c.text == CodingOutcome.FULLY_SOLVED)
    mostly = next(c for c in choices if c.text == CodingOutcome.MOSTLY_SOLVED)

    tracker.update_answer(coding.id, fully.id)
    assert _reload(db, coding.id).score == 12

    tracker.update_answer(coding.id, mostly.id)
    stored = _reload(db, coding.id)
    assert stored.is_correct is False
    assert stored.score == 0


def test_edit_after_window_closes_is_rejected(db, clock, tracker, started):
    _, details, _ = started
    detail = details[0]
    clock.current = WINDOW_END + timedelta(seconds=1)

    with pytest.raises(ValidationError) as exc:
        tracker.update_answer(detail.id, detail.question.answer_id)

    assert str(exc.value) == EXPIRED
    assert _reload(db, detail.id).change_count == 0


def test_edit_on_completed_attempt_is_rejected(db, tracker, started):
    attempt, details, _ = started
    attempt.status = AttemptStatus.COMPLETED.value
    db.commit()

    with pytest.raises(ConflictError):
        tracker.update_answer(details[0].id, "")


def test_unknown_detail_and_foreign_candidate(tracker, started, make_candidate_session):
    _, details, _ = started
    stranger = make_candidate_session()

    with pytest.raises(NotFoundError):
        tracker.update_answer(424242, "")
    with pytest.raises(NotFoundError):
        tracker.update_answer(details[0].id, "", candidate_id=stranger.candidate_id)
