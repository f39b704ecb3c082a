"""
Error types raised by the service and request layers.

Each error carries the problem-details fields it is rendered with, so the
exception handlers never need to know about individual error classes.
"""

PROBLEM_TYPE_BASE = "https://example.com/probs"


class TaskTrackError(Exception):
    """Base class for errors that map directly to an HTTP problem response."""
    status_code = 500
    problem_type = f"{PROBLEM_TYPE_BASE}/internal-server-error"
    title = "Internal Server Error"
    default_detail = "An unexpected error occurred on the server."

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class BadRequestError(TaskTrackError):
    status_code = 400
    problem_type = f"{PROBLEM_TYPE_BASE}/bad-request"
    title = "Bad Request"
    default_detail = "The request is invalid."


class UnauthorizedError(TaskTrackError):
    status_code = 401
    problem_type = f"{PROBLEM_TYPE_BASE}/unauthorized"
    title = "Unauthorized"
    default_detail = "A user ID must be provided via the X-User-Id header."


class NotFoundError(TaskTrackError):
    status_code = 404
    problem_type = f"{PROBLEM_TYPE_BASE}/not-found"
    title = "Not Found"
    default_detail = "The requested resource was not found."


class ConflictError(TaskTrackError):
    status_code = 409
    problem_type = f"{PROBLEM_TYPE_BASE}/conflict"
    title = "Conflict"
    default_detail = "A resource with the same properties already exists."


class InvalidTransitionError(BadRequestError):
    """Raised when a status change is not an edge of the task lifecycle."""

    def __init__(self, current_status: str, requested_status: str):
        self.current_status = str(getattr(current_status, "value", current_status))
        self.requested_status = str(getattr(requested_status, "value", requested_status))
        super().__init__(
            f"Invalid status transition from '{self.current_status}' to '{self.requested_status}'."
        )
