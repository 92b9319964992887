"""
Request client infrastructure - resilience patterns for backend API calls.

Provides:
- CircuitBreaker: Fails fast while the backend is down
- RetryPolicy: Exponential backoff with jitter for transient statuses
- AuthRefresher: Renews an expired session and replays the call once
- ApiCallHistory: Best-effort record of every request attempt
- ApiClient: Unified client combining all patterns
"""

from saaspe.services.errors import (
    ApiError,
    AuthenticationRequiredError,
    CircuitOpenError,
    HttpStatusError,
    NetworkError,
    RequestTimeoutError,
    RetriesExhaustedError,
    handle_api_error,
)
from saaspe.services.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitState,
)
from saaspe.services.retry import RetryPolicy
from saaspe.services.auth import AuthRefresher
from saaspe.services.tracker import ApiCallEntry, ApiCallHistory, CallObserver
from saaspe.services.client import (
    ApiClient,
    ApiResponse,
    RequestContext,
    RequestPhase,
    close_api_client,
    get_api_client,
)

__all__ = [
    # Errors
    "ApiError",
    "AuthenticationRequiredError",
    "CircuitOpenError",
    "HttpStatusError",
    "NetworkError",
    "RequestTimeoutError",
    "RetriesExhaustedError",
    "handle_api_error",
    # Circuit Breaker
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitState",
    # Retry
    "RetryPolicy",
    # Auth
    "AuthRefresher",
    # Tracking
    "ApiCallEntry",
    "ApiCallHistory",
    "CallObserver",
    # Client
    "ApiClient",
    "ApiResponse",
    "RequestContext",
    "RequestPhase",
    "close_api_client",
    "get_api_client",
]
