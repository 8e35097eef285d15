import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from skillcheck.application.errors import AppError
from skillcheck.infrastructure.assessment_system.sampler import QuestionSampler
from skillcheck.infrastructure.assessment_system.sources import NumpyRandomSource, SystemClock
from skillcheck.infrastructure.config import ADMIN_TOKEN, RANDOM_SEED
from skillcheck.infrastructure.db.models import CandidateSession
from skillcheck.infrastructure.db.session import SessionLocal
from skillcheck.infrastructure.repositories.session_repository import SessionRepository
from skillcheck.infrastructure.services.answer_tracker_service import AnswerTrackerService
from skillcheck.infrastructure.services.attempt_lifecycle_service import AttemptLifecycleService
from skillcheck.infrastructure.services.proctoring_service import ProctoringService
from skillcheck.infrastructure.services.submission_service import SubmissionService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

_random_source = NumpyRandomSource(RANDOM_SEED)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_clock():
    return SystemClock()


def get_random_source():
    return _random_source


def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
) -> CandidateSession:
    """Resolve the bearer token to a stored, unexpired candidate session."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    session = SessionRepository(db).get_by_token(credentials.credentials)
    if not session:
        logger.warning("Session lookup failed for presented token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session not found")
    if session.expires_at < clock.now():
        logger.warning(f"Session {session.id} expired at {session.expires_at}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session expired")
    return session


def admin_required(x_admin_token: Optional[str] = Header(default=None)) -> bool:
    if not ADMIN_TOKEN or x_admin_token != ADMIN_TOKEN:
        logger.warning("Access denied for admin route")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrative privileges required",
        )
    return True


def to_http_exception(exc: AppError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.public_message())


# --------------------------------------------------
# Service factories
# --------------------------------------------------
def get_lifecycle_service(
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
    rand=Depends(get_random_source),
) -> AttemptLifecycleService:
    return AttemptLifecycleService(db, clock, QuestionSampler(rand))


def get_answer_service(db: Session = Depends(get_db), clock=Depends(get_clock)) -> AnswerTrackerService:
    return AnswerTrackerService(db, clock)


def get_proctoring_service(db: Session = Depends(get_db)) -> ProctoringService:
    return ProctoringService(db)


def get_submission_service(db: Session = Depends(get_db), clock=Depends(get_clock)) -> SubmissionService:
    return SubmissionService(db, clock)
