from typing import Optional
from sqlalchemy.orm import Session
from ..db.models import Submission


class SubmissionRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_attempt(self, attempt_id: int) -> Optional[Submission]:
        return self.db.query(Submission).filter(Submission.attempt_id == attempt_id).first()

    def add(self, submission: Submission) -> Submission:
        self.db.add(submission)
        self.db.flush()
        return submission
