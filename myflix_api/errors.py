class ApiError(Exception):
    """
    Base class for failures that end a request with a structured response.

    Attributes:
        status_code (int): HTTP status sent back to the client.
        message (str): Human readable error text.
    """

    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self):
        """
        Build the JSON body for this error.

        Returns:
            dict: Payload with an ``error`` key.
        """
        return {"error": self.message}


class ValidationError(ApiError):
    """Input failed field validation before reaching storage."""

    status_code = 422
    default_message = "Validation failed"

    def __init__(self, errors: list[dict], message: str | None = None):
        self.errors = errors
        super().__init__(message)

    def to_payload(self):
        return {"error": self.message, "errors": self.errors}


class Conflict(ApiError):
    status_code = 409
    default_message = "Resource already exists"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class Forbidden(ApiError):
    status_code = 403
    default_message = "Permission denied"


class Unauthenticated(ApiError):
    status_code = 401
    default_message = "Unauthorized"


class InvalidCredentials(Unauthenticated):
    default_message = "Invalid credentials"


class InternalError(ApiError):
    """Storage or other unexpected failure, with the underlying message attached."""

    status_code = 500

    def __init__(self, message: str | None = None, details: str | None = None):
        self.details = details
        super().__init__(message)

    def to_payload(self):
        payload = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload
