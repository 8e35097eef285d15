from datetime import datetime
from typing import List, Optional
import logging
from sqlalchemy.orm import Session, joinedload
from ..db.models import AssessmentAttempt, AttemptDetail, AttemptStatus, ACTIVE_STATUSES

logger = logging.getLogger(__name__)


class AttemptRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, attempt_id: int, for_update: bool = False) -> Optional[AssessmentAttempt]:
        query = self.db.query(AssessmentAttempt).filter(AssessmentAttempt.id == attempt_id)
        if for_update:
            query = query.with_for_update().populate_existing()
        attempt = query.first()
        if not attempt:
            logger.warning(f"Attempt not found: id={attempt_id}")
        return attempt

    def find_active(
        self, candidate_id: int, assessment_id: int, since: Optional[datetime] = None
    ) -> Optional[AssessmentAttempt]:
        query = self.db.query(AssessmentAttempt).filter(
            AssessmentAttempt.candidate_id == candidate_id,
            AssessmentAttempt.assessment_id == assessment_id,
            AssessmentAttempt.status.in_(ACTIVE_STATUSES),
            AssessmentAttempt.end_time.is_(None),
        )
        if since is not None:
            query = query.filter(AssessmentAttempt.start_time >= since)
        return query.first()

    def find_active_for_candidate(self, candidate_id: int) -> Optional[AssessmentAttempt]:
        return (
            self.db.query(AssessmentAttempt)
            .filter(
                AssessmentAttempt.candidate_id == candidate_id,
                AssessmentAttempt.status.in_(ACTIVE_STATUSES),
                AssessmentAttempt.end_time.is_(None),
            )
            .first()
        )

    def count_completed(self, candidate_id: int, assessment_id: int) -> int:
        return (
            self.db.query(AssessmentAttempt)
            .filter(
                AssessmentAttempt.candidate_id == candidate_id,
                AssessmentAttempt.assessment_id == assessment_id,
                AssessmentAttempt.status == AttemptStatus.COMPLETED.value,
            )
            .count()
        )

    def add(self, attempt: AssessmentAttempt) -> AssessmentAttempt:
        self.db.add(attempt)
        self.db.flush()  # get attempt.id; trips the active-attempt index
        return attempt

    def add_details(self, details: List[AttemptDetail]) -> List[AttemptDetail]:
        self.db.add_all(details)
        self.db.flush()
        return details

    def get_detail(self, detail_id: int) -> Optional[AttemptDetail]:
        """Detail with its question and the parent attempt's assessment."""
        detail = (
            self.db.query(AttemptDetail)
            .options(
                joinedload(AttemptDetail.question),
                joinedload(AttemptDetail.attempt).joinedload(AssessmentAttempt.assessment),
            )
            .filter(AttemptDetail.id == detail_id)
            .first()
        )
        if not detail:
            logger.warning(f"Attempt detail not found: id={detail_id}")
        return detail

    def get_details(self, attempt_id: int) -> List[AttemptDetail]:
        return (
            self.db.query(AttemptDetail)
            .filter(AttemptDetail.attempt_id == attempt_id)
            .order_by(AttemptDetail.order)
            .all()
        )
