import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from skillcheck.application.errors import (
    AppError,
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from skillcheck.infrastructure.assessment_system.choices import (
    MCQ_CHOICE_COUNT,
    QUESTION_SCORE_BY_TYPE,
    MCQChoice,
    QuestionType,
    build_coding_choices,
    dump_choices,
    new_choice_id,
)
from skillcheck.infrastructure.db.models import Assessment, Question
from skillcheck.infrastructure.repositories.assessment_repository import AssessmentRepository
from skillcheck.infrastructure.repositories.question_repository import QuestionRepository
from skillcheck.presentation.schemas.assessment_schema import AssessmentCreate
from skillcheck.presentation.schemas.question_schema import QuestionCreate

logger = logging.getLogger(__name__)


def _build_choices(data: QuestionCreate):
    """Returns (choices, answer_id) honouring the per-type shape rules."""
    if data.type == QuestionType.MCQ:
        texts = [t.strip() for t in data.choices]
        if len(texts) != MCQ_CHOICE_COUNT:
            raise ValidationError(f"MCQ must have exactly {MCQ_CHOICE_COUNT} choices")
        if any(not t for t in texts):
            raise ValidationError("MCQ choices must not be empty")
        if data.answer_index is None or not 0 <= data.answer_index < MCQ_CHOICE_COUNT:
            raise ValidationError(f"answer_index must be between 0 and {MCQ_CHOICE_COUNT - 1}")
        choices = [MCQChoice(id=new_choice_id(), text=t) for t in texts]
        return choices, choices[data.answer_index].id

    if data.choices:
        raise ValidationError("Coding questions use the fixed outcome choices")
    choices = build_coding_choices()
    # Best tier first
    return choices, choices[0].id


def _apply(question: Question, data: QuestionCreate) -> Question:
    choices, answer_id = _build_choices(data)
    question.description = data.description.strip()
    question.hint = data.hint.strip() if data.hint else None
    question.type = data.type.value
    question.choices = dump_choices(choices)
    question.answer_id = answer_id
    question.score = data.score if data.score is not None else QUESTION_SCORE_BY_TYPE[data.type.value]
    question.snippet = data.snippet.model_dump() if data.snippet else None
    question.assessment_id = data.assessment_id
    return question


def create_question(db: Session, data: QuestionCreate) -> Question:
    try:
        logger.info(f"Creating {data.type.value} question")
        repo = QuestionRepository(db)
        if data.assessment_id is not None and not AssessmentRepository(db).get_by_id(data.assessment_id):
            raise NotFoundError("Assessment not found", assessment_id=data.assessment_id)
        question = repo.save(_apply(Question(), data))
        db.commit()
        db.refresh(question)
        logger.info(f"Created question {question.id}")
        return question
    except AppError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        logger.error(f"Database error during question creation: {e}", exc_info=True)
        db.rollback()
        raise InternalError("Error in creating question", operation="create_question") from e


def update_question(db: Session, question_id: int, data: QuestionCreate) -> Question:
    """Replace a question; refused while any open attempt has sampled it."""
    try:
        repo = QuestionRepository(db)
        question = repo.get_by_id(question_id)
        if not question:
            raise NotFoundError("Question not found", question_id=question_id)
        if repo.is_in_active_attempt(question_id):
            logger.warning(f"Refusing to edit question {question_id}: in use by an active attempt")
            raise ConflictError("Question is in use by an active attempt", question_id=question_id)
        if data.assessment_id is not None and not AssessmentRepository(db).get_by_id(data.assessment_id):
            raise NotFoundError("Assessment not found", assessment_id=data.assessment_id)

        repo.save(_apply(question, data))
        db.commit()
        db.refresh(question)
        logger.info(f"Updated question {question_id}")
        return question
    except AppError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        logger.error(f"Database error updating question {question_id}: {e}", exc_info=True)
        db.rollback()
        raise InternalError("Error in updating question", operation="update_question") from e


def _naive_utc(value: datetime) -> datetime:
    # Stored timestamps are naive UTC
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def create_assessment(db: Session, data: AssessmentCreate) -> Assessment:
    try:
        start_date, end_date = _naive_utc(data.start_date), _naive_utc(data.end_date)
        if start_date >= end_date:
            raise ValidationError("start_date must be before end_date")

        known = {t.value for t in QuestionType}
        unknown = set(data.question_distribution) - known
        if unknown:
            raise ValidationError(f"Unknown question types: {sorted(unknown)}")
        if any(c < 0 for c in data.question_distribution.values()):
            raise ValidationError("Question counts must not be negative")
        if sum(data.question_distribution.values()) != data.total_questions:
            raise ValidationError("Question distribution must sum to total_questions")

        repo = AssessmentRepository(db)
        if repo.get_by_name(data.name):
            raise ConflictError(f"Assessment '{data.name}' already exists")

        assessment = Assessment(
            name=data.name,
            start_date=start_date,
            end_date=end_date,
            max_attempts=data.max_attempts,
            total_questions=data.total_questions,
            question_distribution=dict(data.question_distribution),
        )
        repo.save(assessment)
        db.commit()
        db.refresh(assessment)
        logger.info(f"Created assessment {assessment.name} (ID: {assessment.id})")
        return assessment
    except AppError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(f"Assessment '{data.name}' already exists") from e
    except SQLAlchemyError as e:
        logger.error(f"Database error creating assessment: {e}", exc_info=True)
        db.rollback()
        raise InternalError("Error in creating assessment", operation="create_assessment") from e
