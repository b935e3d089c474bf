"""Exception types for the Photo Studio.

Every failure of a request to the inference service is expressed as an
:class:`InferenceError` subclass.  The ``user_message`` of each error is
intended to be displayed directly to the user, and ``status_code`` is the
HTTP status the API layer reports for it.

Error Taxonomy
--------------
ServiceReportedError
    The service answered successfully but its body carried an ``error``
    message.  Surfaced verbatim.
RateLimitError / QuotaExceededError
    The service rejected the request with 429 / 402.
TransportError
    Any other failure: non-2xx status, network error, malformed body.
EmptyResultError
    A successful response without an image.
"""


class StudioError(Exception):
    """Base class for all Photo Studio errors."""

    pass


class SessionError(StudioError):
    """User-friendly session error.

    Raised when a session mutation would break an invariant, such as adding
    a sixth character or removing the last one.  The message is intended to
    be displayed directly to the user.
    """

    pass


class InferenceError(StudioError):
    """A single inference request failed."""

    kind = "unknown"
    status_code = 502
    default_message = "Failed to generate image"

    def __init__(self, message: str | None = None) -> None:
        self.user_message = message or self.default_message
        super().__init__(self.user_message)


class ServiceReportedError(InferenceError):
    kind = "service"


class RateLimitError(InferenceError):
    kind = "rate_limit"
    status_code = 429
    default_message = "Rate limit exceeded. Please try again in a moment."


class QuotaExceededError(InferenceError):
    kind = "quota"
    status_code = 402
    default_message = "Usage credits exhausted. Please add credits."


class TransportError(InferenceError):
    kind = "transport"


class EmptyResultError(InferenceError):
    kind = "empty"
    default_message = "No image was returned. Try adjusting your prompt."
