# ---------------------------------
# TYPED EXCEPTIONS
# ---------------------------------


class WorkflowError(Exception):
    """Base class for errors surfaced to callers of the approval workflow."""

    code = "workflow_error"
    status_code = 400
    retryable = False


class NotFound(WorkflowError):
    """No row with the given id."""

    code = "not_found"
    status_code = 404

    def __init__(self, request_id: str):
        self.request_id = request_id
        super().__init__(f"Approval request '{request_id}' was not found.")


class Forbidden(WorkflowError):
    """Caller is not the authorized actor for this operation."""

    code = "forbidden"
    status_code = 403


class InvalidState(WorkflowError):
    """Transition attempted from a non-pending state."""

    code = "invalid_state"
    status_code = 409


class RequestValidationError(WorkflowError):
    """Malformed input: missing title, bad e-mail, negative amount."""

    code = "validation_error"
    status_code = 422


class LockTimeout(WorkflowError):
    """The exclusive section was not acquired in time. Safe to retry."""

    code = "lock_timeout"
    status_code = 503
    retryable = True

    def __init__(self, name: str, timeout: float):
        self.name = name
        self.timeout = timeout
        super().__init__(
            f"Could not acquire lock '{name}' within {timeout:g}s. Please retry."
        )


class StoreUnavailable(WorkflowError):
    """Backing table is missing or unreadable."""

    code = "store_unavailable"
    status_code = 503
