import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from skillcheck.application.errors import AppError
from skillcheck.infrastructure.db.models import CandidateSession
from skillcheck.infrastructure.repositories.assessment_repository import AssessmentRepository
from skillcheck.infrastructure.services.attempt_lifecycle_service import AttemptLifecycleService
from skillcheck.presentation.dependencies import (
    get_clock,
    get_current_session,
    get_db,
    get_lifecycle_service,
    to_http_exception,
)
from skillcheck.presentation.schemas.assessment_schema import AssessmentOut
from skillcheck.presentation.schemas.attempt_schema import AttemptWithDetailsOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assessments", tags=["Assessments"])


@router.get("", response_model=List[AssessmentOut])
def list_assessments(
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
    session: CandidateSession = Depends(get_current_session),
):
    """Assessments that have not yet closed."""
    logger.info(f"Candidate {session.candidate_id} listing assessments")
    return AssessmentRepository(db).list_upcoming(clock.now())


@router.post(
    "/{assessment_id}/start",
    response_model=AttemptWithDetailsOut,
    status_code=status.HTTP_201_CREATED,
)
def start_assessment(
    assessment_id: int,
    session: CandidateSession = Depends(get_current_session),
    service: AttemptLifecycleService = Depends(get_lifecycle_service),
):
    """
    Starts a new attempt and samples its questions. Fails with 409 when the
    candidate already has an attempt in progress.
    """
    try:
        logger.info(f"Candidate {session.candidate_id} starting assessment {assessment_id}")
        attempt, _ = service.start(assessment_id, session.id)
        return AttemptWithDetailsOut.model_validate(attempt)
    except AppError as e:
        if e.status_code >= 500:
            logger.error(f"Error starting assessment {assessment_id}: {e.context}")
        else:
            logger.warning(f"Start rejected for assessment {assessment_id}: {e}")
        raise to_http_exception(e)
