"""
Error kinds raised by the assessment core.

Every core operation either returns a result or raises one of these. The web
layer maps ``status_code`` onto the HTTP response; ``context`` carries the
service/operation that failed for the logs.
"""
from typing import Any, Dict, Optional

from skillcheck.infrastructure.assessment_system.sources import utc_now


class AppError(Exception):
    status_code = 500
    kind = "internal"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = {
            "code": self.status_code,
            "kind": self.kind,
            "timestamp": utc_now().isoformat(),
            **context,
        }

    def add_context(self, **context: Any) -> "AppError":
        self.context.update(context)
        return self

    def public_message(self) -> str:
        return self.message

    def __str__(self) -> str:
        return self.message


class NotFoundError(AppError):
    status_code = 404
    kind = "not_found"


class ValidationError(AppError):
    status_code = 422
    kind = "validation"


class InsufficientQuestionsError(ValidationError):
    def __init__(self, question_type: str, requested: int, available: int, **context: Any):
        super().__init__(
            f"Not enough '{question_type}' questions: requested {requested}, available {available}",
            question_type=question_type,
            requested=requested,
            available=available,
            **context,
        )
        self.question_type = question_type
        self.requested = requested
        self.available = available


class BadRequestError(AppError):
    status_code = 400
    kind = "bad_request"


class ConflictError(AppError):
    status_code = 409
    kind = "conflict"


class InternalError(AppError):
    status_code = 500
    kind = "internal"

    def __init__(self, message: str, *, operation: Optional[str] = None, **context: Any):
        super().__init__(message, operation=operation, **context)
        self.operation = operation

    def public_message(self) -> str:
        # Detail is logged, never returned to clients
        return "An internal server error occurred."
