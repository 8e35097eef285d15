import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from skillcheck.application.errors import (
    AppError,
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from skillcheck.infrastructure.assessment_system.proctoring import ProctoringData
from skillcheck.infrastructure.assessment_system.sampler import QuestionSampler
from skillcheck.infrastructure.assessment_system.sources import Clock
from skillcheck.infrastructure.assessment_system.time_window import validate_time_window
from skillcheck.infrastructure.db.models import AssessmentAttempt, AttemptDetail, AttemptStatus
from skillcheck.infrastructure.repositories.assessment_repository import AssessmentRepository
from skillcheck.infrastructure.repositories.attempt_repository import AttemptRepository
from skillcheck.infrastructure.repositories.question_repository import QuestionRepository
from skillcheck.infrastructure.repositories.session_repository import SessionRepository

logger = logging.getLogger(__name__)

RESUME_EXISTING = "Existing attempt for the assessment is in progress. Resume the attempt to proceed"
OTHER_IN_PROGRESS = "Another assessment attempt is in progress. Complete it before starting a new one"


class AttemptLifecycleService:
    """
    Creates, inspects and closes assessment attempts.

    ``start`` runs its checks and writes inside one transaction: the attempt
    row and every detail row are committed together or not at all. A second
    concurrent start for the same candidate trips the partial unique index on
    active attempts and surfaces as ``ConflictError``.
    """

    def __init__(self, db: Session, clock: Clock, sampler: QuestionSampler):
        self.db = db
        self.clock = clock
        self.sampler = sampler

        self.assessments = AssessmentRepository(db)
        self.sessions = SessionRepository(db)
        self.questions = QuestionRepository(db)
        self.attempts = AttemptRepository(db)

    # --------------------------------------------------
    # Start
    # --------------------------------------------------
    def start(self, assessment_id: int, session_id: int) -> Tuple[AssessmentAttempt, List[AttemptDetail]]:
        logger.info(f"Starting assessment {assessment_id} for session {session_id}")
        try:
            assessment = self.assessments.get_by_id(assessment_id)
            if not assessment:
                raise NotFoundError("Assessment not found", assessment_id=assessment_id)

            now = self.clock.now()
            validate_time_window(assessment, now, operation="start")

            session = self.sessions.get_by_id(session_id)
            if not session:
                raise ValidationError("Session not found", session_id=session_id)
            if session.expires_at < now:
                raise ValidationError("Session expired", session_id=session_id)

            candidate_id = session.candidate_id
            existing = self.attempts.find_active(candidate_id, assessment.id, since=assessment.start_date)
            if existing:
                logger.warning(
                    f"Candidate {candidate_id} already has attempt {existing.id} open for assessment {assessment.id}"
                )
                raise ConflictError(RESUME_EXISTING, attempt_id=existing.id)

            other = self.attempts.find_active_for_candidate(candidate_id)
            if other:
                logger.warning(
                    f"Candidate {candidate_id} has attempt {other.id} open for assessment {other.assessment_id}"
                )
                raise ConflictError(OTHER_IN_PROGRESS, attempt_id=other.id)

            if self.attempts.count_completed(candidate_id, assessment.id) >= assessment.max_attempts:
                raise ValidationError("Maximum attempts reached", assessment_id=assessment.id)

            distribution = assessment.question_distribution or {}
            if sum(int(c) for c in distribution.values()) != assessment.total_questions:
                raise ValidationError(
                    "Assessment question distribution does not match its question count",
                    assessment_id=assessment.id,
                )

            selected = self.sampler.sample(self.questions.get_pool(assessment.id), distribution)

            attempt = self.attempts.add(
                AssessmentAttempt(
                    candidate_id=candidate_id,
                    session_id=session.id,
                    assessment_id=assessment.id,
                    start_time=now,
                    status=AttemptStatus.IN_PROGRESS.value,
                    proctoring=ProctoringData().model_dump(),
                )
            )
            details = self.attempts.add_details(
                [
                    AttemptDetail(attempt_id=attempt.id, question_id=question.id, order=index)
                    for index, question in enumerate(selected, start=1)
                ]
            )

            self.db.commit()
            self.db.refresh(attempt)
            logger.info(
                f"Attempt {attempt.id} created for candidate {candidate_id} with {len(details)} questions"
            )
            return attempt, details
        except AppError:
            self.db.rollback()
            raise
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Concurrent start rejected for assessment {assessment_id}: {e}")
            raise ConflictError(RESUME_EXISTING, assessment_id=assessment_id) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error starting assessment {assessment_id}: {e}", exc_info=True)
            raise InternalError(
                "Error in starting assessment", service="Assessment", operation="start", cause=repr(e)
            ) from e
        except Exception as e:
            # Random source or other non-database failure
            self.db.rollback()
            logger.error(f"Unexpected error starting assessment {assessment_id}: {e}", exc_info=True)
            raise InternalError(
                "Error in starting assessment", service="Assessment", operation="start", cause=repr(e)
            ) from e

    # --------------------------------------------------
    # Lookups
    # --------------------------------------------------
    def get_active(self, assessment_id: int, candidate_id: int) -> AssessmentAttempt:
        attempt = self._read(
            lambda: self.attempts.find_active(candidate_id, assessment_id), operation="get_active"
        )
        if not attempt:
            raise NotFoundError("No active attempt for this assessment", assessment_id=assessment_id)
        return attempt

    def get_active_for_candidate(self, candidate_id: int) -> AssessmentAttempt:
        attempt = self._read(
            lambda: self.attempts.find_active_for_candidate(candidate_id),
            operation="get_active_for_candidate",
        )
        if not attempt:
            raise NotFoundError("No active attempt", candidate_id=candidate_id)
        return attempt

    def get_attempt(self, attempt_id: int, candidate_id: Optional[int] = None) -> AssessmentAttempt:
        attempt = self._read(lambda: self.attempts.get_by_id(attempt_id), operation="get_attempt")
        # Other candidates' attempts are reported as absent
        if not attempt or (candidate_id is not None and attempt.candidate_id != candidate_id):
            raise NotFoundError("Attempt not found", attempt_id=attempt_id)
        return attempt

    def _read(self, fn, operation: str):
        try:
            return fn()
        except SQLAlchemyError as e:
            logger.error(f"Database error in {operation}: {e}", exc_info=True)
            raise InternalError("Error reading attempts", service="Assessment", operation=operation) from e
