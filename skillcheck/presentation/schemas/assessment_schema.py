from datetime import datetime
from typing import Dict

from pydantic import BaseModel, Field


class AssessmentCreate(BaseModel):
    name: str = Field(min_length=1)
    start_date: datetime
    end_date: datetime
    max_attempts: int = Field(default=1, ge=1)
    total_questions: int = Field(ge=1)
    question_distribution: Dict[str, int]


class AssessmentOut(BaseModel):
    id: int
    name: str
    start_date: datetime
    end_date: datetime
    max_attempts: int
    total_questions: int
    question_distribution: Dict[str, int]

    class Config:
        from_attributes = True
