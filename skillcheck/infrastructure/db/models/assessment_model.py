from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.orm import relationship
from ..base import Base


class Assessment(Base):
    __tablename__ = "assessments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    max_attempts = Column(Integer, nullable=False, default=1)
    total_questions = Column(Integer, nullable=False, default=0)
    # {"mcq": 3, "coding": 1}; counts sum to total_questions
    question_distribution = Column(JSON, nullable=False, default=dict)

    # Relationships
    questions = relationship("Question", back_populates="assessment")
    attempts = relationship("AssessmentAttempt", back_populates="assessment")
