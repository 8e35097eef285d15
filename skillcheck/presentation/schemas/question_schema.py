# question_schema.py
from pydantic import BaseModel, Field
from typing import List, Optional

from skillcheck.infrastructure.assessment_system.choices import Choice, QuestionType


class SnippetSchema(BaseModel):
    code: str
    language: str


class QuestionCreate(BaseModel):
    description: str = Field(min_length=1)
    hint: Optional[str] = None
    type: QuestionType
    # Option texts for mcq; coding questions get the fixed outcome tiers
    choices: List[str] = []
    answer_index: Optional[int] = None
    score: Optional[float] = Field(default=None, ge=0)
    snippet: Optional[SnippetSchema] = None
    assessment_id: Optional[int] = None


class QuestionOut(BaseModel):
    id: int
    description: str
    hint: Optional[str] = None
    type: QuestionType
    choices: List[Choice]
    answer_id: str
    score: float
    snippet: Optional[SnippetSchema] = None
    assessment_id: Optional[int] = None

    class Config:
        from_attributes = True


class QuestionCandidateOut(BaseModel):
    """Question as shown during an attempt: no answer key."""

    id: int
    description: str
    hint: Optional[str] = None
    type: QuestionType
    choices: List[Choice]
    score: float
    snippet: Optional[SnippetSchema] = None

    class Config:
        from_attributes = True
