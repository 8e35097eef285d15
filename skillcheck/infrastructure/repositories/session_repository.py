from typing import Optional
from sqlalchemy.orm import Session
from ..db.models import CandidateSession


class SessionRepository:
    """Read side of the session provider: id/token -> candidate + expiry."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, session_id: int) -> Optional[CandidateSession]:
        return self.db.query(CandidateSession).filter(CandidateSession.id == session_id).first()

    def get_by_token(self, token: str) -> Optional[CandidateSession]:
        return self.db.query(CandidateSession).filter(CandidateSession.token == token).first()
