import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Index, text
from sqlalchemy.orm import relationship
from ..base import Base


class AttemptStatus(str, enum.Enum):
    DRAFT = "Draft"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"


ACTIVE_STATUSES = (AttemptStatus.DRAFT.value, AttemptStatus.IN_PROGRESS.value)


class AssessmentAttempt(Base):
    __tablename__ = "assessment_attempts"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(Integer, ForeignKey("candidates.id"), nullable=False, index=True)
    session_id = Column(Integer, ForeignKey("sessions.id"), nullable=False)
    assessment_id = Column(Integer, ForeignKey("assessments.id"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=True)
    status = Column(String(20), nullable=False, default=AttemptStatus.DRAFT.value)
    proctoring = Column(JSON, nullable=False, default=dict)
    integrity = Column(String(30), nullable=True)  # good / bad / permission-declined

    # Relationships
    candidate = relationship("Candidate", back_populates="attempts")
    session = relationship("CandidateSession")
    assessment = relationship("Assessment", back_populates="attempts")
    details = relationship(
        "AttemptDetail",
        back_populates="attempt",
        cascade="all, delete-orphan",
        order_by="AttemptDetail.order",
    )
    submission = relationship("Submission", back_populates="attempt", uselist=False)

    __table_args__ = (
        # One non-terminal attempt per candidate; closes the check-then-create race
        Index(
            "uq_active_attempt_per_candidate",
            "candidate_id",
            unique=True,
            sqlite_where=text("status != 'Completed'"),
            postgresql_where=text("status != 'Completed'"),
        ),
    )
