import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from skillcheck.application.errors import AppError, ConflictError, InternalError, NotFoundError
from skillcheck.infrastructure.assessment_system.proctoring import (
    ProctoringData,
    ProctoringEvent,
    ProctoringUpdate,
    apply_event,
    evaluate_integrity,
    merge_proctoring,
)
from skillcheck.infrastructure.db.models import AssessmentAttempt, AttemptStatus
from skillcheck.infrastructure.repositories.attempt_repository import AttemptRepository

logger = logging.getLogger(__name__)


class ProctoringService:
    """Stores proctoring counters and the integrity verdict derived from them."""

    def __init__(self, db: Session):
        self.db = db
        self.attempts = AttemptRepository(db)

    def update_proctoring(
        self, attempt_id: int, update: ProctoringUpdate, candidate_id: Optional[int] = None
    ) -> AssessmentAttempt:
        return self._apply(
            attempt_id, candidate_id, lambda data: merge_proctoring(data, update), "update_proctoring"
        )

    def record_event(
        self, attempt_id: int, event: ProctoringEvent, candidate_id: Optional[int] = None
    ) -> AssessmentAttempt:
        return self._apply(attempt_id, candidate_id, lambda data: apply_event(data, event), "record_event")

    def _apply(self, attempt_id, candidate_id, change, operation) -> AssessmentAttempt:
        try:
            attempt = self.attempts.get_by_id(attempt_id)
            if not attempt or (candidate_id is not None and attempt.candidate_id != candidate_id):
                raise NotFoundError("Attempt not found", attempt_id=attempt_id)
            if attempt.status == AttemptStatus.COMPLETED.value:
                raise ConflictError("Attempt has already been submitted", attempt_id=attempt_id)

            data = change(ProctoringData.model_validate(attempt.proctoring or {}))
            verdict = evaluate_integrity(data)

            # JSON column: assign a new dict so the change is detected
            attempt.proctoring = data.model_dump()
            attempt.integrity = verdict.value
            self.db.commit()
            self.db.refresh(attempt)

            logger.info(f"Attempt {attempt_id} proctoring updated: integrity={verdict.value}")
            return attempt
        except AppError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error in {operation} for attempt {attempt_id}: {e}", exc_info=True)
            raise InternalError(
                "Error in updating proctoring", service="Proctoring", operation=operation
            ) from e
        except Exception as e:
            self.db.rollback()
            logger.error(f"Unexpected error in {operation} for attempt {attempt_id}: {e}", exc_info=True)
            raise InternalError(
                "Error in updating proctoring", service="Proctoring", operation=operation, cause=repr(e)
            ) from e
