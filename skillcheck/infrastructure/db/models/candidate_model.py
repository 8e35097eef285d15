from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from ..base import Base


class Candidate(Base):
    __tablename__ = "candidates"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=True)
    email = Column(String, unique=True, nullable=False, index=True)
    roll_number = Column(String, unique=True, nullable=True)

    # Relationships
    sessions = relationship("CandidateSession", back_populates="candidate", cascade="all, delete-orphan")
    attempts = relationship("AssessmentAttempt", back_populates="candidate")


class CandidateSession(Base):
    """Login session issued by the auth service; consumed read-only here."""

    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, index=True)
    token = Column(String, unique=True, nullable=False, index=True)
    candidate_id = Column(Integer, ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False)
    logged_in_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=False)

    candidate = relationship("Candidate", back_populates="sessions")
