from datetime import datetime
from typing import List, Optional
import logging
from sqlalchemy.orm import Session
from ..db.models import Assessment

logger = logging.getLogger(__name__)


class AssessmentRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, assessment_id: int) -> Optional[Assessment]:
        assessment = self.db.query(Assessment).filter(Assessment.id == assessment_id).first()
        if not assessment:
            logger.warning(f"Assessment not found: id={assessment_id}")
        return assessment

    def get_by_name(self, name: str) -> Optional[Assessment]:
        return self.db.query(Assessment).filter(Assessment.name == name).first()

    def list_upcoming(self, now: datetime) -> List[Assessment]:
        return (
            self.db.query(Assessment)
            .filter(Assessment.end_date >= now)
            .order_by(Assessment.start_date)
            .all()
        )

    def save(self, assessment: Assessment) -> Assessment:
        self.db.add(assessment)
        self.db.flush()
        return assessment
