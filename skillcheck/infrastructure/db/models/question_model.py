from sqlalchemy import Column, Integer, String, Text, ForeignKey, JSON, Float
from sqlalchemy.orm import relationship
from ..base import Base


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    description = Column(Text, nullable=False)
    hint = Column(Text, nullable=True)
    type = Column(String(20), nullable=False, index=True)  # "mcq" or "coding"
    choices = Column(JSON, nullable=False, default=list)  # list of tagged choices
    answer_id = Column(String, nullable=False)  # id of the correct choice
    score = Column(Float, nullable=False, default=0)
    snippet = Column(JSON, nullable=True)  # {"code": ..., "language": ...}
    # Null means the question belongs to the shared bank
    assessment_id = Column(Integer, ForeignKey("assessments.id"), nullable=True)

    assessment = relationship("Assessment", back_populates="questions")
