"""Domain errors raised by the controllers.

Each error carries the HTTP status the routing layer answers with, so the
exception handler in ``uboard.main`` can render it without knowing the type.
"""


class UBoardError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(UBoardError):
    """Missing or malformed required field."""

    status_code = 400


class UploadDisabledError(UBoardError):
    """A file was attached while file storage is unavailable."""

    status_code = 400


class NothingToUndoError(UBoardError):
    """Downvote or checkout with no matching row to remove."""

    status_code = 400


class UnauthorizedError(UBoardError):
    """The actor does not own the resource."""

    status_code = 401


class NotFoundError(UBoardError):
    status_code = 404


class CapacityExceededError(UBoardError):
    """Check-in would push an event over its capacity."""

    status_code = 409


class StoreFailure(UBoardError):
    """The database call behind a controller operation raised."""

    status_code = 500
