import logging

from fastapi import APIRouter, Depends, status

from skillcheck.application.errors import AppError
from skillcheck.infrastructure.assessment_system.proctoring import ProctoringUpdate
from skillcheck.infrastructure.db.models import CandidateSession
from skillcheck.infrastructure.services.answer_tracker_service import AnswerTrackerService
from skillcheck.infrastructure.services.attempt_lifecycle_service import AttemptLifecycleService
from skillcheck.infrastructure.services.proctoring_service import ProctoringService
from skillcheck.infrastructure.services.submission_service import SubmissionService
from skillcheck.presentation.dependencies import (
    get_answer_service,
    get_clock,
    get_current_session,
    get_lifecycle_service,
    get_proctoring_service,
    get_submission_service,
    to_http_exception,
)
from skillcheck.presentation.schemas.attempt_schema import (
    AnswerRequest,
    AnswerResult,
    AttemptOut,
    AttemptWithDetailsOut,
    ProctoringEventRequest,
    SubmissionOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attempts", tags=["Attempts"])


def _fail(e: AppError, what: str):
    if e.status_code >= 500:
        logger.error(f"Error {what}: {e.context}")
    else:
        logger.warning(f"Rejected {what}: {e}")
    return to_http_exception(e)


# --------------------------------------------------
# 1. Active attempt lookup
# --------------------------------------------------
@router.get("/active", response_model=AttemptOut)
def get_active_attempt(
    session: CandidateSession = Depends(get_current_session),
    service: AttemptLifecycleService = Depends(get_lifecycle_service),
):
    try:
        return service.get_active_for_candidate(session.candidate_id)
    except AppError as e:
        raise _fail(e, f"active attempt lookup for candidate {session.candidate_id}")


# --------------------------------------------------
# 2. Attempt with its questions
# --------------------------------------------------
@router.get("/{attempt_id}", response_model=AttemptWithDetailsOut)
def get_attempt(
    attempt_id: int,
    session: CandidateSession = Depends(get_current_session),
    service: AttemptLifecycleService = Depends(get_lifecycle_service),
):
    try:
        attempt = service.get_attempt(attempt_id, session.candidate_id)
        return AttemptWithDetailsOut.model_validate(attempt)
    except AppError as e:
        raise _fail(e, f"fetching attempt {attempt_id}")


# --------------------------------------------------
# 3. Save / clear an answer
# --------------------------------------------------
@router.put("/details/{detail_id}/answer", response_model=AnswerResult)
def save_answer(
    detail_id: int,
    answer: AnswerRequest,
    session: CandidateSession = Depends(get_current_session),
    service: AnswerTrackerService = Depends(get_answer_service),
):
    try:
        result = service.update_answer(detail_id, answer.choice_id, candidate_id=session.candidate_id)
        return AnswerResult(id=result.id, attempted=result.attempted)
    except AppError as e:
        raise _fail(e, f"saving answer for detail {detail_id}")


# --------------------------------------------------
# 4. Proctoring
# --------------------------------------------------
@router.put("/{attempt_id}/proctoring", response_model=AttemptOut)
def update_proctoring(
    attempt_id: int,
    update: ProctoringUpdate,
    session: CandidateSession = Depends(get_current_session),
    service: ProctoringService = Depends(get_proctoring_service),
):
    try:
        return service.update_proctoring(attempt_id, update, candidate_id=session.candidate_id)
    except AppError as e:
        raise _fail(e, f"proctoring update for attempt {attempt_id}")


@router.post("/{attempt_id}/proctoring/events", response_model=AttemptOut)
def record_proctoring_event(
    attempt_id: int,
    request: ProctoringEventRequest,
    session: CandidateSession = Depends(get_current_session),
    service: ProctoringService = Depends(get_proctoring_service),
):
    try:
        return service.record_event(attempt_id, request.event, candidate_id=session.candidate_id)
    except AppError as e:
        raise _fail(e, f"proctoring event for attempt {attempt_id}")


# --------------------------------------------------
# 5. Final submission
# --------------------------------------------------
@router.post("/{attempt_id}/complete", response_model=SubmissionOut, status_code=status.HTTP_201_CREATED)
def complete_attempt(
    attempt_id: int,
    session: CandidateSession = Depends(get_current_session),
    clock=Depends(get_clock),
    lifecycle: AttemptLifecycleService = Depends(get_lifecycle_service),
    service: SubmissionService = Depends(get_submission_service),
):
    try:
        attempt = lifecycle.get_attempt(attempt_id, session.candidate_id)
        logger.info(f"Candidate {session.candidate_id} submitting attempt {attempt_id}")
        return service.complete(attempt, session.candidate, session, clock.now())
    except AppError as e:
        raise _fail(e, f"completing attempt {attempt_id}")


@router.get("/{attempt_id}/submission", response_model=SubmissionOut)
def get_submission(
    attempt_id: int,
    session: CandidateSession = Depends(get_current_session),
    service: SubmissionService = Depends(get_submission_service),
):
    try:
        return service.get_submission(attempt_id, session.candidate_id)
    except AppError as e:
        raise _fail(e, f"fetching submission for attempt {attempt_id}")
