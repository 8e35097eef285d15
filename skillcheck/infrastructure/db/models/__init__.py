from .candidate_model import Candidate, CandidateSession
from .question_model import Question
from .assessment_model import Assessment
from .attempt_model import AssessmentAttempt, AttemptStatus, ACTIVE_STATUSES
from .attempt_detail_model import AttemptDetail
from .submission_model import Submission

__all__ = [
    "Candidate",
    "CandidateSession",
    "Question",
    "Assessment",
    "AssessmentAttempt",
    "AttemptStatus",
    "ACTIVE_STATUSES",
    "AttemptDetail",
    "Submission",
]
