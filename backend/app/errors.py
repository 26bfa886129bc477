"""Error types raised by the chat service.

Every ``ChatError`` is rendered by the exception handler in ``app.main`` as a
JSON body with an ``error`` field and the error's status code.
"""


class ChatError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


MISSING_FIELDS = "Session ID and message are required"
INVALID_JSON = "Request body must be valid JSON"


class ValidationError(ChatError):
    """A required request field is missing or empty."""

    status_code = 400


class NotFoundError(ChatError):
    """The requested chat session does not exist (never created, deleted or expired)."""

    status_code = 404


class InternalError(ChatError):
    """Unexpected failure; details are only exposed in development."""

    status_code = 500


class ProviderError(Exception):
    """The Gemini call failed (network, quota, malformed input, missing key).

    Never rendered directly: the gateway converts it into the offline
    fallback reply or a terminal stream error event.
    """
