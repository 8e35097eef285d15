from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Boolean, Float
from sqlalchemy.orm import relationship
from ..base import Base


class AttemptDetail(Base):
    __tablename__ = "assessment_attempt_details"

    id = Column(Integer, primary_key=True, index=True)
    attempt_id = Column(
        Integer, ForeignKey("assessment_attempts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_id = Column(Integer, ForeignKey("questions.id"), nullable=False)
    order = Column(Integer, nullable=False, default=0)
    is_attempted = Column(Boolean, nullable=False, default=False)
    is_correct = Column(Boolean, nullable=False, default=False)
    change_count = Column(Integer, nullable=False, default=0)
    submission_choice_id = Column(String, nullable=True)  # one of question.choices ids
    score = Column(Float, nullable=False, default=0)
    # Reserved for manual grading
    reviewer_feedback = Column(Text, nullable=True)
    graded_at = Column(DateTime, nullable=True)

    attempt = relationship("AssessmentAttempt", back_populates="details")
    question = relationship("Question")
