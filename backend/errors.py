from typing import Optional


class ApiError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500
    as_text = False

    def __init__(self, message: str, *, as_text: Optional[bool] = None):
        super().__init__(message)
        self.message = message
        if as_text is not None:
            self.as_text = as_text


class BadRequest(ApiError):
    status_code = 400


class Unauthorized(ApiError):
    status_code = 401


class Forbidden(ApiError):
    status_code = 403


class NotFound(ApiError):
    status_code = 404


class Conflict(ApiError):
    status_code = 409
    as_text = True
