"""Error taxonomy shared by services and the web layer.

Each error carries the HTTP status it maps to; the message is what the
client sees in the ``{"error": ...}`` body.
"""


class TaskTrackError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TaskTrackError):
    status_code = 400


class NotFoundError(TaskTrackError):
    status_code = 404


class ConflictError(TaskTrackError):
    status_code = 409


class InternalError(TaskTrackError):
    status_code = 500


class ReorderError(InternalError):
    """A reorder batch failed and was rolled back."""
