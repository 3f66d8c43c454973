"""Error taxonomy shared by the interview routes and services."""
from typing import Any, Optional


class InterviewError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message, "code": self.code}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(InterviewError):
    """Missing or malformed request fields."""
    status_code = 400
    code = "VALIDATION_ERROR"


class NotFound(InterviewError):
    """The interview id does not match a live server-side session."""
    status_code = 404
    code = "NOT_FOUND"


class UnsupportedMedia(InterviewError):
    status_code = 400
    code = "UNSUPPORTED_MEDIA"


class InternalError(InterviewError):
    status_code = 500
    code = "INTERNAL_ERROR"


class PayloadTooLarge(InterviewError):
    status_code = 413
    code = "PAYLOAD_TOO_LARGE"
