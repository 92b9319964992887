"""
ApiClient - Async HTTP client for the SaaSPE backend with resilience patterns.

Combines:
- CircuitBreaker to fail fast while the backend is down
- RetryPolicy for exponential backoff on transient statuses
- AuthRefresher to renew an expired session once and replay the call
- CallObserver for best-effort diagnostics of every attempt

Each request runs through a small state machine:

    INITIAL -> (RETRYING | REFRESHING -> REPLAYING)* -> DONE

with at most one refresh per request and at most ``max_retries`` retries.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any, Awaitable, Callable

import httpx
from loguru import logger

from saaspe.services.auth import AuthRefresher, SessionExpiredHook
from saaspe.services.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitState,
)
from saaspe.services.errors import (
    CircuitOpenError,
    HttpStatusError,
    NetworkError,
    RequestTimeoutError,
    RetriesExhaustedError,
    parse_body,
)
from saaspe.services.retry import RetryPolicy
from saaspe.services.tracker import ApiCallHistory, CallObserver, safe_track_call
from saaspe.settings import Settings, global_settings


class RequestPhase(str, Enum):
    """Where a request is in its retry/refresh lifecycle."""

    INITIAL = "INITIAL"
    RETRYING = "RETRYING"
    REFRESHING = "REFRESHING"
    REPLAYING = "REPLAYING"
    DONE = "DONE"


@dataclass
class RequestContext:
    """Per-call state. Never shared between calls."""

    method: str
    url: str
    params: dict[str, Any] | None = None
    json_data: Any = None
    files: Any = None
    data: Any = None
    content: bytes | None = None
    headers: dict[str, str] = field(default_factory=dict)
    attempt: int = 0  # retries performed so far
    refresh_attempted: bool = False
    phase: RequestPhase = RequestPhase.INITIAL

    @property
    def sends_json(self) -> bool:
        """JSON body, or no body at all."""
        if self.json_data is not None:
            return True
        return self.files is None and self.data is None and self.content is None


@dataclass
class ApiResponse:
    """Successful response from the backend."""

    status_code: int
    data: Any
    headers: dict[str, str]


class ApiClient:
    """
    Resilient client bound to one backend base URL.

    Usage:
        async with ApiClient("https://api.example.com") as client:
            response = await client.get("/api/v1/clients", params={"page": 1})
            clients = response.data

    Raises from every request method:
        CircuitOpenError: Breaker is open, nothing was sent
        NetworkError: No response (RequestTimeoutError on timeout)
        RetriesExhaustedError: Retryable status persisted past max_retries
        AuthenticationRequiredError: Session could not be refreshed
        HttpStatusError: Any other non-success response
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        breaker: CircuitBreaker | None = None,
        retry_policy: RetryPolicy | None = None,
        refresher: AuthRefresher | None = None,
        observer: CallObserver | None = None,
        cookies: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.base_url = base_url
        self._timeout = timeout
        self.breaker = breaker or CircuitBreaker(base_url)
        self.retry_policy = retry_policy or RetryPolicy()
        self.refresher = refresher or AuthRefresher()
        self.observer = observer
        self._cookies = cookies
        self._transport = transport
        self._sleep = sleep

        # HTTP client (lazy initialization)
        self._http_client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        on_session_expired: SessionExpiredHook | None = None,
        **kwargs: Any,
    ) -> "ApiClient":
        """Build a client with every component configured from settings."""
        settings = settings or global_settings
        breaker = CircuitBreaker(
            settings.api_base_url,
            CircuitBreakerConfig(
                failure_threshold=settings.circuit_failure_threshold,
                reset_timeout=timedelta(seconds=settings.circuit_reset_timeout),
            ),
        )
        retry_policy = RetryPolicy(
            max_retries=settings.api_max_retries,
            base_delay=settings.api_retry_base_delay,
            max_delay=settings.api_retry_max_delay,
            jitter=settings.api_retry_jitter,
        )
        refresher = AuthRefresher(
            refresh_path=settings.api_refresh_path,
            on_session_expired=on_session_expired,
        )
        kwargs.setdefault("observer", ApiCallHistory(settings.api_call_history_size))
        return cls(
            settings.api_base_url,
            timeout=settings.api_timeout,
            breaker=breaker,
            retry_policy=retry_policy,
            refresher=refresher,
            **kwargs,
        )

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self._timeout),
                cookies=self._cookies,
                transport=self._transport,
                follow_redirects=True,
            )
        return self._http_client

    @property
    def cookies(self) -> httpx.Cookies | None:
        """Session cookie jar, once the HTTP client exists."""
        return self._http_client.cookies if self._http_client else None

    async def request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        json_data: Any = None,
        files: Any = None,
        data: Any = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> ApiResponse:
        """
        Make an HTTP request through the resilience pipeline.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Path relative to the base URL
            params: Query parameters
            json_data: JSON body
            files: Multipart files; the transport sets the content type
            data: Form fields, urlencoded or alongside ``files``
            content: Raw binary body; no content type is forced
            headers: Additional headers

        Returns:
            ApiResponse with the decoded body
        """
        ctx = RequestContext(
            method=method.upper(),
            url=url,
            params=params,
            json_data=json_data,
            files=files,
            data=data,
            content=content,
            headers=dict(headers or {}),
        )

        while True:
            response = await self._send(ctx)

            if response.is_success:
                ctx.phase = RequestPhase.DONE
                return ApiResponse(
                    status_code=response.status_code,
                    data=parse_body(response),
                    headers=dict(response.headers),
                )

            status = response.status_code

            if status == 401 and not ctx.refresh_attempted:
                ctx.refresh_attempted = True
                ctx.phase = RequestPhase.REFRESHING
                http_client = await self._get_http_client()
                await self.refresher.refresh(http_client)
                ctx.phase = RequestPhase.REPLAYING
                logger.debug(f"Replaying {ctx.method} {ctx.url} after session refresh")
                continue

            if self.retry_policy.should_retry(status, ctx.attempt):
                ctx.attempt += 1
                ctx.phase = RequestPhase.RETRYING
                delay = self.retry_policy.get_delay(ctx.attempt)
                logger.debug(
                    f"Retrying {ctx.method} {ctx.url} "
                    f"({ctx.attempt}/{self.retry_policy.max_retries}) "
                    f"after {delay:.2f}s: HTTP {status}"
                )
                await self._sleep(delay)
                continue

            ctx.phase = RequestPhase.DONE
            if self.retry_policy.is_retryable(status):
                raise RetriesExhaustedError.from_response(response)
            raise HttpStatusError.from_response(response)

    async def _send(self, ctx: RequestContext) -> httpx.Response:
        """One attempt: breaker gate, network call, outcome bookkeeping."""
        if not self.breaker.allow_request():
            safe_track_call(self.observer, ctx.method, ctx.url, None, True)
            raise CircuitOpenError(
                self.breaker.name,
                self.breaker.get_time_until_reset() or 0,
            )

        client = await self._get_http_client()
        try:
            response = await client.request(
                ctx.method,
                ctx.url,
                params=ctx.params,
                json=ctx.json_data,
                files=ctx.files,
                data=ctx.data,
                content=ctx.content,
                headers=self._build_headers(ctx),
            )
        except httpx.TimeoutException as e:
            self._on_no_response(ctx)
            raise RequestTimeoutError(ctx.url, self._timeout) from e
        except httpx.RequestError as e:
            self._on_no_response(ctx)
            raise NetworkError(str(e) or type(e).__name__) from e
        except BaseException:
            # Cancelled, or the request could not be built
            self.breaker.release_probe()
            raise

        # 4xx means the backend is up and answering
        if response.status_code >= 500:
            self.breaker.record_failure()
        else:
            self.breaker.record_success()

        safe_track_call(
            self.observer,
            ctx.method,
            ctx.url,
            response.status_code,
            response.status_code >= 400,
        )
        return response

    def _on_no_response(self, ctx: RequestContext) -> None:
        # Network errors are neither breaker failures nor successes
        self.breaker.release_probe()
        safe_track_call(self.observer, ctx.method, ctx.url, None, True)

    @staticmethod
    def _build_headers(ctx: RequestContext) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if ctx.sends_json:
            headers["Content-Type"] = "application/json"
        headers.update(ctx.headers)
        return headers

    async def get(self, url: str, **kwargs: Any) -> ApiResponse:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> ApiResponse:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> ApiResponse:
        return await self.request("PUT", url, **kwargs)

    async def patch(self, url: str, **kwargs: Any) -> ApiResponse:
        return await self.request("PATCH", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> ApiResponse:
        return await self.request("DELETE", url, **kwargs)

    async def clear_session(self) -> None:
        """Forget session cookies locally."""
        if self._http_client:
            self._http_client.cookies.clear()

    async def close(self) -> None:
        """Close the HTTP client and cleanup resources."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
        logger.debug("ApiClient closed")

    async def __aenter__(self) -> "ApiClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    # Health and status methods

    def get_circuit_breaker_state(self) -> CircuitState:
        """Current breaker state, for debugging."""
        return self.breaker.state

    def get_health_status(self) -> dict[str, Any]:
        """Get breaker status and recent call history."""
        status: dict[str, Any] = {"circuit_breaker": self.breaker.get_status()}
        if isinstance(self.observer, ApiCallHistory):
            status["recent_calls"] = [
                entry.to_dict() for entry in self.observer.get_recent()
            ]
        return status


# Global client instance
_global_client: ApiClient | None = None


def get_api_client() -> ApiClient:
    """Get the global API client instance."""
    global _global_client
    if _global_client is None:
        _global_client = ApiClient.from_settings()
    return _global_client


async def close_api_client() -> None:
    """Close the global API client."""
    global _global_client
    if _global_client:
        await _global_client.close()
        _global_client = None
