from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from skillcheck.infrastructure.assessment_system.proctoring import (
    ProctoringData,
    ProctoringEvent,
)
from .question_schema import QuestionCandidateOut


class AttemptDetailOut(BaseModel):
    id: int
    order: int
    is_attempted: bool
    change_count: int
    submission_choice_id: Optional[str] = None
    question: QuestionCandidateOut

    class Config:
        from_attributes = True


class AttemptOut(BaseModel):
    id: int
    assessment_id: int
    candidate_id: int
    session_id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    status: str
    proctoring: ProctoringData
    integrity: Optional[str] = None

    class Config:
        from_attributes = True


class AttemptWithDetailsOut(AttemptOut):
    details: List[AttemptDetailOut]


class AnswerRequest(BaseModel):
    # None or "" clears the answer
    choice_id: Optional[str] = None


class AnswerResult(BaseModel):
    id: int
    attempted: bool


class ProctoringEventRequest(BaseModel):
    event: ProctoringEvent


class SubmissionOut(BaseModel):
    id: int
    attempt_id: int
    candidate_id: int
    total_score: int
    attempted_questions: int
    correct_answers: int
    duration: int
    submitted_at: datetime

    class Config:
        from_attributes = True
