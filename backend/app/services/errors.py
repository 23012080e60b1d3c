"""Workflow error taxonomy.

Every failure the workflow can report maps to one stable ``code`` so a client
can tell "someone else's proposal was accepted" (``invalid_state``) apart from
"you already proposed" (``duplicate_submission``) or "you are not eligible"
(``forbidden``). All of them are terminal for the call; nothing is retried here.
"""
from fastapi import status


class WorkflowError(Exception):
    code = "workflow_error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(WorkflowError):
    code = "validation_error"
    status_code = 422

    def __init__(self, detail: str, fields: dict[str, str] | None = None):
        super().__init__(detail)
        self.fields = fields or {}


class InsufficientBalance(WorkflowError):
    code = "insufficient_balance"
    status_code = status.HTTP_402_PAYMENT_REQUIRED


class NotFound(WorkflowError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class Forbidden(WorkflowError):
    code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class InvalidState(WorkflowError):
    code = "invalid_state"
    status_code = status.HTTP_409_CONFLICT


class InvalidTransition(InvalidState):
    """No edge of the lifecycle table matches the request's current status."""

    code = "invalid_transition"


class DuplicateSubmission(WorkflowError):
    code = "duplicate_submission"
    status_code = status.HTTP_409_CONFLICT


class LedgerUnavailable(WorkflowError):
    code = "ledger_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
