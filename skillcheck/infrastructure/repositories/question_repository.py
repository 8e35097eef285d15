from typing import List, Optional
import logging
from sqlalchemy import or_
from sqlalchemy.orm import Session
from ..db.models import Question, AttemptDetail, AssessmentAttempt, ACTIVE_STATUSES

logger = logging.getLogger(__name__)


class QuestionRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, question_id: int) -> Optional[Question]:
        logger.debug(f"Fetching question by id={question_id}")
        question = self.db.query(Question).filter(Question.id == question_id).first()
        if not question:
            logger.warning(f"Question not found: id={question_id}")
        return question

    def get_pool(self, assessment_id: int) -> List[Question]:
        """
        Questions eligible for an assessment: the shared bank plus any scoped
        to this assessment. Ordered by id so sampling is reproducible.
        """
        questions = (
            self.db.query(Question)
            .filter(or_(Question.assessment_id.is_(None), Question.assessment_id == assessment_id))
            .order_by(Question.id)
            .all()
        )
        logger.info(f"Loaded pool of {len(questions)} questions for assessment_id={assessment_id}")
        return questions

    def is_in_active_attempt(self, question_id: int) -> bool:
        hit = (
            self.db.query(AttemptDetail.id)
            .join(AssessmentAttempt, AttemptDetail.attempt_id == AssessmentAttempt.id)
            .filter(
                AttemptDetail.question_id == question_id,
                AssessmentAttempt.status.in_(ACTIVE_STATUSES),
            )
            .first()
        )
        return hit is not None

    def save(self, question: Question) -> Question:
        self.db.add(question)
        self.db.flush()
        return question
