import logging
import math
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from skillcheck.application.errors import (
    AppError,
    BadRequestError,
    ConflictError,
    InternalError,
    NotFoundError,
)
from skillcheck.infrastructure.assessment_system.sources import Clock
from skillcheck.infrastructure.assessment_system.time_window import validate_time_window
from skillcheck.infrastructure.db.models import AttemptDetail, AttemptStatus, Submission
from skillcheck.infrastructure.repositories.assessment_repository import AssessmentRepository
from skillcheck.infrastructure.repositories.attempt_repository import AttemptRepository
from skillcheck.infrastructure.repositories.submission_repository import SubmissionRepository

logger = logging.getLogger(__name__)

ALREADY_SUBMITTED = "Attempt has already been submitted"


def aggregate_details(details: Iterable[AttemptDetail]) -> dict:
    """Totals over an attempt's details; the score is rounded once, at the end."""
    total = 0.0
    attempted = 0
    correct = 0
    for detail in details:
        if detail.is_attempted:
            attempted += 1
        if detail.is_correct:
            correct += 1
            total += float(detail.score or 0)
    return {
        "total_score": int(math.floor(total + 0.5)),
        "attempted_questions": attempted,
        "correct_answers": correct,
    }


class SubmissionService:
    """Grades a finished attempt and seals it into a single Submission row."""

    def __init__(self, db: Session, clock: Clock):
        self.db = db
        self.clock = clock
        self.assessments = AssessmentRepository(db)
        self.attempts = AttemptRepository(db)
        self.submissions = SubmissionRepository(db)

    def complete(self, attempt, candidate, session, completion_time: Optional[datetime]) -> Submission:
        if attempt is None or candidate is None or session is None or completion_time is None:
            logger.error("complete() called without attempt, candidate, session or completion time")
            raise InternalError(
                "Missing required arguments for completion", service="Submission", operation="complete"
            )

        attempt_id = attempt.id
        try:
            # Reload under lock; a racing completion sees the committed status
            fresh = self.attempts.get_by_id(attempt_id, for_update=True)
            if not fresh:
                raise NotFoundError("Attempt not found", attempt_id=attempt_id)
            if fresh.candidate_id != candidate.id:
                raise BadRequestError("Attempt does not belong to this candidate", attempt_id=attempt_id)
            if fresh.status == AttemptStatus.COMPLETED.value:
                logger.warning(f"Attempt {attempt_id} completion rejected: already submitted")
                raise ConflictError(ALREADY_SUBMITTED, attempt_id=attempt_id)

            assessment = self.assessments.get_by_id(fresh.assessment_id)
            now = self.clock.now()
            end_time = completion_time
            if now > assessment.end_date:
                # A late submission still seals the attempt, ending it at the deadline
                logger.warning(f"Attempt {attempt_id} submitted after assessment {assessment.id} closed")
                end_time = min(completion_time, assessment.end_date)
            else:
                validate_time_window(assessment, now, operation="complete")

            fresh.status = AttemptStatus.COMPLETED.value
            fresh.end_time = end_time

            duration = int((fresh.end_time - fresh.start_time).total_seconds() * 1000)
            if duration < 0:
                raise InternalError(
                    "Attempt ends before it starts",
                    service="Submission",
                    operation="complete",
                    attempt_id=attempt_id,
                )

            totals = aggregate_details(self.attempts.get_details(attempt_id))
            submission = self.submissions.add(
                Submission(
                    attempt_id=attempt_id,
                    candidate_id=candidate.id,
                    session_id=session.id,
                    duration=duration,
                    submitted_at=self.clock.now(),
                    **totals,
                )
            )

            self.db.commit()
            self.db.refresh(submission)
            logger.info(
                f"Attempt {attempt_id} submitted: score={submission.total_score}, "
                f"attempted={submission.attempted_questions}, correct={submission.correct_answers}"
            )
            return submission
        except AppError:
            self.db.rollback()
            raise
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Duplicate submission for attempt {attempt_id}: {e}")
            raise ConflictError(ALREADY_SUBMITTED, attempt_id=attempt_id) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error completing attempt {attempt_id}: {e}", exc_info=True)
            raise InternalError(
                "Error in completing assessment", service="Submission", operation="complete"
            ) from e
        except Exception as e:
            self.db.rollback()
            logger.error(f"Unexpected error completing attempt {attempt_id}: {e}", exc_info=True)
            raise InternalError(
                "Error in completing assessment", service="Submission", operation="complete", cause=repr(e)
            ) from e

    def get_submission(self, attempt_id: int, candidate_id: Optional[int] = None) -> Submission:
        try:
            submission = self.submissions.get_by_attempt(attempt_id)
        except SQLAlchemyError as e:
            logger.error(f"Database error fetching submission for attempt {attempt_id}: {e}", exc_info=True)
            raise InternalError(
                "Error in fetching submission", service="Submission", operation="get_submission"
            ) from e
        if not submission or (candidate_id is not None and submission.candidate_id != candidate_id):
            raise NotFoundError("Submission not found", attempt_id=attempt_id)
        return submission
