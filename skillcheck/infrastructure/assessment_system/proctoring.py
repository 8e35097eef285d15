from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from skillcheck.infrastructure.config import PROCTORING_VIOLATION_LIMIT


class AssessmentIntegrity(str, Enum):
    GOOD = "good"
    BAD = "bad"
    PERMISSION_DECLINED = "permission-declined"


class ProctoringEvent(str, Enum):
    FULL_SCREEN_ENTER = "fullscreen-enter"
    FULL_SCREEN_EXIT = "fullscreen-exit"
    VISIBILITY_ENTER = "visibility-enter"
    VISIBILITY_EXIT = "visibility-exit"


class ProctoringData(BaseModel):
    is_full_screen_access_provided: bool = False
    is_assessment_consent_provided: bool = False
    full_screen_exits: int = Field(default=0, ge=0)
    visibility_changes: int = Field(default=0, ge=0)


class ProctoringUpdate(BaseModel):
    """Partial counters sent by the client; unset fields keep their stored value."""

    is_full_screen_access_provided: Optional[bool] = None
    is_assessment_consent_provided: Optional[bool] = None
    full_screen_exits: Optional[int] = Field(default=None, ge=0)
    visibility_changes: Optional[int] = Field(default=None, ge=0)


def merge_proctoring(current: ProctoringData, update: ProctoringUpdate) -> ProctoringData:
    changes = update.model_dump(exclude_none=True)
    # Violation counters only ever grow
    for counter in ("full_screen_exits", "visibility_changes"):
        if counter in changes:
            changes[counter] = max(getattr(current, counter), changes[counter])
    return current.model_copy(update=changes)


def apply_event(current: ProctoringData, event: ProctoringEvent) -> ProctoringData:
    # Only leaving full screen or the tab counts as a violation
    if event == ProctoringEvent.FULL_SCREEN_EXIT:
        return current.model_copy(update={"full_screen_exits": current.full_screen_exits + 1})
    if event == ProctoringEvent.VISIBILITY_EXIT:
        return current.model_copy(update={"visibility_changes": current.visibility_changes + 1})
    return current


def evaluate_integrity(
    data: ProctoringData, limit: int = PROCTORING_VIOLATION_LIMIT
) -> AssessmentIntegrity:
    """
    Consent failure always wins over threshold breaches, then any missing
    full-screen permission or counter at/over ``limit`` marks the attempt bad.
    """
    if not data.is_assessment_consent_provided:
        return AssessmentIntegrity.PERMISSION_DECLINED
    if (
        not data.is_full_screen_access_provided
        or data.visibility_changes >= limit
        or data.full_screen_exits >= limit
    ):
        return AssessmentIntegrity.BAD
    return AssessmentIntegrity.GOOD
