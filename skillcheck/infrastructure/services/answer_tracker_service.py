import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from skillcheck.application.errors import (
    AppError,
    BadRequestError,
    ConflictError,
    InternalError,
    NotFoundError,
)
from skillcheck.infrastructure.assessment_system.choices import parse_choices
from skillcheck.infrastructure.assessment_system.sources import Clock
from skillcheck.infrastructure.assessment_system.time_window import validate_time_window
from skillcheck.infrastructure.db.models import AttemptDetail, AttemptStatus
from skillcheck.infrastructure.repositories.attempt_repository import AttemptRepository

logger = logging.getLogger(__name__)


@dataclass
class AnswerUpdateResult:
    id: int
    attempted: bool


class AnswerTrackerService:
    def __init__(self, db: Session, clock: Clock):
        self.db = db
        self.clock = clock
        self.attempts = AttemptRepository(db)

    def update_answer(
        self, detail_id: int, choice_id: Optional[str], candidate_id: Optional[int] = None
    ) -> AnswerUpdateResult:
        """
        Record the candidate's current choice for one question.

        An empty ``choice_id`` clears the answer. Correctness and score are
        recomputed from the question on every call; ``change_count`` is bumped
        on every call, clears included.
        """
        try:
            detail = self.attempts.get_detail(detail_id)
            if not detail or (candidate_id is not None and detail.attempt.candidate_id != candidate_id):
                raise NotFoundError("Attempt detail not found", detail_id=detail_id)

            attempt = detail.attempt
            if attempt.status == AttemptStatus.COMPLETED.value:
                raise ConflictError("Attempt has already been submitted", attempt_id=attempt.id)
            validate_time_window(attempt.assessment, self.clock.now(), operation="update_answer")

            question = detail.question
            if not choice_id:
                detail.is_attempted = False
                detail.is_correct = False
                detail.submission_choice_id = None
                detail.score = 0
            else:
                match = next((c for c in parse_choices(question.choices) if c.id == choice_id), None)
                if match is None:
                    logger.warning(f"Invalid option {choice_id} for detail {detail_id}")
                    raise BadRequestError("Invalid option", detail_id=detail_id, choice_id=choice_id)

                is_correct = match.id == question.answer_id
                detail.is_attempted = True
                detail.is_correct = is_correct
                detail.submission_choice_id = match.id
                detail.score = question.score if is_correct else 0

            # Incremented in SQL so concurrent edits on one row never lose a revision
            detail.change_count = AttemptDetail.change_count + 1

            self.db.commit()
            self.db.refresh(detail)
            logger.info(
                f"Saved answer for detail {detail.id}: attempted={detail.is_attempted}, "
                f"revision={detail.change_count}"
            )
            return AnswerUpdateResult(id=detail.id, attempted=detail.is_attempted)
        except AppError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error updating answer for detail {detail_id}: {e}", exc_info=True)
            raise InternalError(
                "Error in updating answer", service="AnswerTracker", operation="update_answer"
            ) from e
        except Exception as e:
            self.db.rollback()
            logger.error(f"Unexpected error updating answer for detail {detail_id}: {e}", exc_info=True)
            raise InternalError(
                "Error in updating answer", service="AnswerTracker", operation="update_answer", cause=repr(e)
            ) from e
