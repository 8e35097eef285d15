"""
Question types and the two choice variants they carry.

An ``mcq`` question has four plain options. A ``coding`` question has three
fixed outcome tiers, each with its own weight. Both are stored as JSON on the
question row and parsed back into the tagged union below.
"""
from enum import Enum
from typing import Annotated, Dict, List, Literal, Union
from uuid import uuid4

from pydantic import BaseModel, Field, TypeAdapter

from skillcheck.infrastructure.config import CODING_FULL_SCORE, MCQ_SCORE


class QuestionType(str, Enum):
    MCQ = "mcq"
    CODING = "coding"


# Presentation order: conventional types first, long-form types last
QUESTION_TYPE_ORDER: List[str] = [QuestionType.MCQ.value, QuestionType.CODING.value]

QUESTION_SCORE_BY_TYPE: Dict[str, float] = {
    QuestionType.MCQ.value: MCQ_SCORE,
    QuestionType.CODING.value: CODING_FULL_SCORE,
}

MCQ_CHOICE_COUNT = 4


class CodingOutcome(str, Enum):
    FULLY_SOLVED = "Fully Solved"
    MOSTLY_SOLVED = "Mostly Solved (minor issues)"
    NOT_SOLVED = "Not Solved"


CODING_OUTCOME_SCORES: Dict[CodingOutcome, float] = {
    CodingOutcome.FULLY_SOLVED: CODING_FULL_SCORE,
    CodingOutcome.MOSTLY_SOLVED: 2,
    CodingOutcome.NOT_SOLVED: 0,
}


class MCQChoice(BaseModel):
    kind: Literal["mcq"] = "mcq"
    id: str
    text: str


class CodingChoice(BaseModel):
    kind: Literal["coding"] = "coding"
    id: str
    text: CodingOutcome
    score: float


Choice = Annotated[Union[MCQChoice, CodingChoice], Field(discriminator="kind")]

_choice_list = TypeAdapter(List[Choice])


def new_choice_id() -> str:
    return uuid4().hex


def parse_choices(raw) -> List[Union[MCQChoice, CodingChoice]]:
    return _choice_list.validate_python(raw or [])


def dump_choices(choices) -> list:
    return [c.model_dump(mode="json") for c in choices]


def build_coding_choices() -> List[CodingChoice]:
    """Fresh set of the three outcome tiers, ordered best to worst."""
    return [
        CodingChoice(id=new_choice_id(), text=outcome, score=score)
        for outcome, score in CODING_OUTCOME_SCORES.items()
    ]
