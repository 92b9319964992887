"""
Request client exceptions.

Every failure that reaches a caller is an ApiError carrying a human-readable
message and, when a response was received, the original status code.
"""

from typing import Any

import httpx

SERVICE_UNAVAILABLE_MESSAGE = "Service temporarily unavailable. Please try again in a moment."
GENERIC_ERROR_MESSAGE = "An unexpected error occurred."

STATUS_MESSAGES: dict[int, str] = {
    401: "Unauthorized. Please log in again.",
    403: "Access forbidden. You don't have permission to perform this action.",
    404: "Resource not found.",
    500: "Internal server error. Please try again later.",
}


class ApiError(Exception):
    """Base exception for request client errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        data: Any = None,
    ):
        self.message = message
        self.status_code = status_code
        self.data = data
        super().__init__(message)


class CircuitOpenError(ApiError):
    """Circuit breaker is open, request blocked before reaching the network."""

    def __init__(self, breaker_name: str, reset_after_seconds: float):
        self.breaker_name = breaker_name
        self.reset_after_seconds = reset_after_seconds
        super().__init__(SERVICE_UNAVAILABLE_MESSAGE)


class NetworkError(ApiError):
    """No response was received (DNS, connection refused, reset...)."""

    pass


class RequestTimeoutError(NetworkError):
    """Request timed out."""

    def __init__(self, url: str, timeout: float):
        self.url = url
        self.timeout = timeout
        super().__init__(f"Request to '{url}' timed out after {timeout}s")


class HttpStatusError(ApiError):
    """The backend answered with a non-success status."""

    @classmethod
    def from_response(cls, response: httpx.Response) -> "HttpStatusError":
        data = parse_body(response)
        return cls(
            message_for_status(response.status_code, data),
            status_code=response.status_code,
            data=data,
        )


class RetriesExhaustedError(HttpStatusError):
    """A retryable status persisted after every allowed retry."""

    @classmethod
    def from_response(cls, response: httpx.Response) -> "RetriesExhaustedError":
        return cls(
            SERVICE_UNAVAILABLE_MESSAGE,
            status_code=response.status_code,
            data=parse_body(response),
        )


class AuthenticationRequiredError(ApiError):
    """Session could not be refreshed; the user has to log in again."""

    def __init__(self, message: str = STATUS_MESSAGES[401]):
        super().__init__(message, status_code=401)


def parse_body(response: httpx.Response) -> Any:
    """Decode a response body as JSON, falling back to text."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def message_for_status(status_code: int, data: Any = None) -> str:
    """Pick the body's ``message`` field, else a fixed string for the status."""
    if isinstance(data, dict):
        message = data.get("message")
        if isinstance(message, str) and message:
            return message
        # Validation errors arrive as a list of messages
        if isinstance(message, list) and message:
            return "; ".join(str(m) for m in message)
    return STATUS_MESSAGES.get(status_code, f"Request failed with status {status_code}")


def handle_api_error(error: BaseException) -> str:
    """Turn any exception into a message suitable for showing to a user."""
    if isinstance(error, (CircuitOpenError, RetriesExhaustedError)):
        return SERVICE_UNAVAILABLE_MESSAGE
    if isinstance(error, ApiError):
        return error.message or GENERIC_ERROR_MESSAGE
    return str(error) or GENERIC_ERROR_MESSAGE
