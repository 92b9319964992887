from collections import defaultdict
from typing import Any, Callable

import httpx
import pytest

from saaspe.services.auth import AuthRefresher
from saaspe.services.circuit_breaker import CircuitBreaker
from saaspe.services.client import ApiClient
from saaspe.services.retry import RetryPolicy
from saaspe.services.tracker import ApiCallHistory

BASE_URL = "http://api.test"
REFRESH_PATH = "/api/v1/auth/refresh"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Stands in for asyncio.sleep and remembers every delay."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class ScriptedBackend:
    """
    httpx handler answering each path from a queue of scripted outcomes.

    An outcome is a status code, a (status, json) tuple, an httpx.Response,
    or an exception to raise. The last outcome for a path repeats once the
    queue runs dry.
    """

    def __init__(self):
        self.scripts: dict[str, list[Any]] = {}
        self.calls: dict[str, int] = defaultdict(int)
        self.requests: list[httpx.Request] = []

    def script(self, path: str, *outcomes: Any) -> "ScriptedBackend":
        self.scripts[path] = list(outcomes)
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls[path] += 1
        self.requests.append(request)

        queue = self.scripts.get(path)
        if not queue:
            return httpx.Response(404, json={"message": f"No route {path}"})
        outcome = queue.pop(0) if len(queue) > 1 else queue[0]

        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, httpx.Response):
            return outcome
        if isinstance(outcome, tuple):
            status, body = outcome
            return httpx.Response(status, json=body)
        return httpx.Response(outcome, json={})


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def backend() -> ScriptedBackend:
    return ScriptedBackend()


@pytest.fixture
def history() -> ApiCallHistory:
    return ApiCallHistory(max_size=50)


@pytest.fixture
def make_client(
    backend: ScriptedBackend,
    clock: FakeClock,
    sleep: RecordingSleep,
    history: ApiCallHistory,
) -> Callable[..., ApiClient]:
    """Factory for an ApiClient wired to the scripted backend."""

    def _make(**kwargs: Any) -> ApiClient:
        kwargs.setdefault("breaker", CircuitBreaker("test", clock=clock))
        kwargs.setdefault("retry_policy", RetryPolicy(random_fn=lambda: 0.5))
        kwargs.setdefault("refresher", AuthRefresher(refresh_path=REFRESH_PATH))
        kwargs.setdefault("observer", history)
        client = ApiClient(
            BASE_URL,
            transport=httpx.MockTransport(backend),
            sleep=sleep,
            **kwargs,
        )
        return client

    return _make
