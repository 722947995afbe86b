"""
Error taxonomy shared by services and routes.

Services raise these; a single exception handler in `wagerdesk.main`
renders them as `{"error": message}` with the matching status code.
Messages are meant for end users and never carry internal exception text.
"""
from typing import Any, Optional


class WagerDeskError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[Any] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class Unauthorized(WagerDeskError):
    """No valid session on the request."""
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(WagerDeskError):
    """Resource exists but belongs to another user."""
    status_code = 403
    default_message = "Forbidden"


class NotFound(WagerDeskError):
    status_code = 404
    default_message = "Not found"


class ValidationFailed(WagerDeskError):
    """Missing or malformed input fields."""
    status_code = 400
    default_message = "Missing required fields"


class UpstreamFailure(WagerDeskError):
    """The chat-completion endpoint returned non-2xx or could not be reached."""
    status_code = 502
    default_message = "Upstream service failure"


class ParseFailure(WagerDeskError):
    """Model output did not match any recognised JSON shape.

    Raised inside the recommendation parser and always converted to a
    fallback recommendation before it can reach a caller.
    """
    status_code = 500
    default_message = "Unrecognised model response"
