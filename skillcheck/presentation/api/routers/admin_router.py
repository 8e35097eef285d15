import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from skillcheck.application.admin.question_bank_usecase import (
    create_assessment,
    create_question,
    update_question,
)
from skillcheck.application.errors import AppError
from skillcheck.presentation.dependencies import admin_required, get_db, to_http_exception
from skillcheck.presentation.schemas.assessment_schema import AssessmentCreate, AssessmentOut
from skillcheck.presentation.schemas.question_schema import QuestionCreate, QuestionOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/questions", response_model=QuestionOut, status_code=status.HTTP_201_CREATED)
def add_question(question: QuestionCreate, db: Session = Depends(get_db), admin: bool = Depends(admin_required)):
    try:
        result = create_question(db, question)
        logger.info(f"Question created successfully with ID: {result.id}")
        return result
    except AppError as e:
        logger.warning(f"Question creation rejected: {e}")
        raise to_http_exception(e)


@router.put("/questions/{question_id}", response_model=QuestionOut)
def modify_question(
    question_id: int,
    question: QuestionCreate,
    db: Session = Depends(get_db),
    admin: bool = Depends(admin_required),
):
    try:
        return update_question(db, question_id, question)
    except AppError as e:
        logger.warning(f"Question {question_id} update rejected: {e}")
        raise to_http_exception(e)


@router.post("/assessments", response_model=AssessmentOut, status_code=status.HTTP_201_CREATED)
def add_assessment(data: AssessmentCreate, db: Session = Depends(get_db), admin: bool = Depends(admin_required)):
    try:
        return create_assessment(db, data)
    except AppError as e:
        logger.warning(f"Assessment creation rejected: {e}")
        raise to_http_exception(e)
