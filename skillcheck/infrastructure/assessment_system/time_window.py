from datetime import datetime

from skillcheck.application.errors import ValidationError

NOT_STARTED = "Assessment has not started yet"
EXPIRED = "Assessment has expired"


def validate_time_window(assessment, now: datetime, operation: str = "") -> None:
    """Raise unless ``now`` lies within [start_date, end_date] (both inclusive)."""
    if now < assessment.start_date:
        raise ValidationError(NOT_STARTED, assessment_id=assessment.id, operation=operation)
    if now > assessment.end_date:
        raise ValidationError(EXPIRED, assessment_id=assessment.id, operation=operation)
