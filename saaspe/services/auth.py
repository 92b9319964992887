"""
AuthRefresher - Renews expired session cookies.

The refresh token lives in an httpOnly cookie, so the refresh call carries
no credentials in its body. A successful refresh sets new session cookies
on the shared cookie jar; the response body is not inspected.

Concurrent callers that hit 401 at the same time share one in-flight
refresh call.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable

import httpx
from loguru import logger

from saaspe.services.errors import AuthenticationRequiredError

DEFAULT_REFRESH_PATH = "/api/v1/auth/refresh"

SessionExpiredHook = Callable[[], Awaitable[Any] | Any]


class AuthRefresher:
    """
    Performs the session refresh call.

    Usage:
        refresher = AuthRefresher(on_session_expired=redirect_to_login)
        await refresher.refresh(http_client)  # raises AuthenticationRequiredError
    """

    def __init__(
        self,
        refresh_path: str = DEFAULT_REFRESH_PATH,
        on_session_expired: SessionExpiredHook | None = None,
    ):
        self.refresh_path = refresh_path
        self._on_session_expired = on_session_expired
        self._in_flight: asyncio.Task[None] | None = None
        self.refresh_count = 0

    async def refresh(self, http_client: httpx.AsyncClient) -> None:
        """
        Refresh the session, joining a refresh already in flight.

        Raises:
            AuthenticationRequiredError: If the backend refused the refresh
        """
        if self._in_flight is None or self._in_flight.done():
            self._in_flight = asyncio.create_task(self._do_refresh(http_client))
            self._in_flight.add_done_callback(_consume_exception)
        else:
            logger.debug("Joining in-flight session refresh")
        await asyncio.shield(self._in_flight)

    async def _do_refresh(self, http_client: httpx.AsyncClient) -> None:
        self.refresh_count += 1
        try:
            response = await http_client.post(self.refresh_path, json={})
        except httpx.HTTPError as e:
            logger.warning(f"Session refresh failed: {type(e).__name__}: {e}")
            await self._expire_session(http_client)
            raise AuthenticationRequiredError() from e

        if not response.is_success:
            logger.warning(f"Session refresh rejected with HTTP {response.status_code}")
            await self._expire_session(http_client)
            raise AuthenticationRequiredError()

        logger.info("Session refreshed")

    async def _expire_session(self, http_client: httpx.AsyncClient) -> None:
        """Drop local session cookies and tell the application."""
        http_client.cookies.clear()
        if self._on_session_expired is None:
            return
        try:
            result = self._on_session_expired()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Session expired hook failed: {type(e).__name__}: {e}")


def _consume_exception(task: asyncio.Task[None]) -> None:
    # Waiters may all be gone by the time a refresh fails
    if not task.cancelled():
        task.exception()
