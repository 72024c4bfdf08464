"""Error kinds raised by the relay and mapped to HTTP responses in main."""


class ChatRelayError(Exception):
    """Base error. `error` is the public message, the exception text is the detail."""

    status_code = 500
    error = "Internal server error"
    include_details = True

    def __init__(self, details: str = "", error: str | None = None):
        super().__init__(details or self.error)
        self.details = details
        if error is not None:
            self.error = error


class AuthError(ChatRelayError):
    status_code = 401
    error = "Unauthorized"
    include_details = False


class NotFoundError(ChatRelayError):
    status_code = 404
    error = "Conversation not found"
    include_details = False


class ValidationError(ChatRelayError):
    status_code = 400
    error = "Missing required parameter: prompt"
    include_details = False


class StoreError(ChatRelayError):
    error = "Failed to access conversation store"


class InferenceError(ChatRelayError):
    error = "Failed to generate response. Please try again."

    @property
    def is_credential_error(self) -> bool:
        return "API_KEY" in self.details


class InternalError(ChatRelayError):
    pass
