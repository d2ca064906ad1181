"""
Shared fixtures for docker-hub-readme-mcp tests.

Nothing here touches the network: Docker Hub and GitHub are replaced by an
httpx.MockTransport routed through HubStub, time by FakeClock and backoff
sleeps by RecordingSleep.
"""
import asyncio

import httpx
import pytest

from core.cache import MemoryCache
from core.config import Settings
from core.services import create_services

API_URL = "https://hub.test/v2"
GITHUB_API_URL = "https://github.test"


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Backoff sleep that returns immediately and remembers the delays (seconds)."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class HubStub:
    """Canned HTTP responses keyed by URL path.

    Each route is either a callable(request) -> httpx.Response or a list of
    responses / exceptions served in order, the last one repeating.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, path, *responses):
        self.routes[path] = list(responses)

    def add_handler(self, path, handler):
        self.routes[path] = handler

    def calls(self, path):
        return [r for r in self.requests if r.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"message": "not found"})
        if callable(route):
            return route(request)

        item = route.pop(0) if len(route) > 1 else route[0]
        if isinstance(item, Exception):
            raise item
        return item


def json_response(payload, status=200, headers=None):
    return httpx.Response(status, json=payload, headers=headers)


def repository_payload(**overrides):
    payload = {
        "user": "library",
        "name": "nginx",
        "namespace": "library",
        "description": "Official build of Nginx.",
        "full_description": "",
        "star_count": 20000,
        "pull_count": 1_000_000_000,
        "last_updated": "2026-10-01T12:00:00.000000Z",
        "categories": [{"name": "Web Servers", "slug": "web-servers"}],
    }
    payload.update(overrides)
    return payload


def tags_payload(names, next_url=None, images=None):
    return {
        "count": len(names),
        "next": next_url,
        "results": [
            {"name": name, "images": images if images is not None else []}
            for name in names
        ],
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def settings():
    return Settings(api_url=API_URL, github_api_url=GITHUB_API_URL)


@pytest.fixture
def cache(clock):
    cache = MemoryCache(ttl=60, max_size=1_000_000, cleanup_interval=300, clock=clock)
    yield cache
    cache.destroy()


@pytest.fixture
def hub():
    return HubStub()


@pytest.fixture
def http_client(hub):
    client = httpx.AsyncClient(transport=httpx.MockTransport(hub))
    yield client
    asyncio.run(client.aclose())


@pytest.fixture
def services(settings, http_client, clock, sleep):
    services = create_services(settings, http_client=http_client, clock=clock, sleep=sleep)
    yield services
    asyncio.run(services.aclose())
