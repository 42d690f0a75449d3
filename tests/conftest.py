"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - config: Client configuration with fixed local/hosted test URLs
    - auth: Fake auth provider that counts issued tokens
    - backend: Scriptable backend served through httpx.MockTransport
    - controller: AppController wired to the fake auth and backend
    - devserver_app: Fresh in-memory development backend
"""

import json
from collections.abc import AsyncGenerator, Awaitable, Callable

import httpx
import pytest
from fastapi import FastAPI

from docbridge.config import ClientConfig
from docbridge.devserver.app import create_app
from docbridge.models.schemas import Endpoint, Identity
from docbridge.orchestration.controller import AppController

LOCAL_URL = "http://local.test"
HOSTED_URL = "http://hosted.test"

Handler = Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]]


class FakeAuthProvider:
    """Auth provider double that records every token it issues."""

    def __init__(self, identity: Identity | None = None) -> None:
        self.identity = identity
        self.listeners: list = []
        self.issued: list[str] = []
        self.fail = False

    def current_identity(self) -> Identity | None:
        return self.identity

    def add_listener(self, callback) -> None:
        self.listeners.append(callback)

    async def fetch_token(self, identity: Identity) -> str:
        if self.fail:
            raise RuntimeError("auth provider unreachable")
        token = f"{identity.uid}.token{len(self.issued) + 1}"
        self.issued.append(token)
        return token

    def emit(self, identity: Identity | None) -> None:
        self.identity = identity
        for listener in list(self.listeners):
            listener(identity)


class RecordingBackend:
    """Backend double: routes by (method, host, path) and records requests."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str | None, str], Handler] = {}

    def on(self, method: str, path: str, handler: Handler, host: str | None = None) -> None:
        self._routes[(method, host, path)] = handler

    def json(
        self, method: str, path: str, payload: dict, status: int = 200, host: str | None = None
    ) -> None:
        self.on(method, path, lambda request: httpx.Response(status, json=payload), host=host)

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self._routes.get((request.method, request.url.host, request.url.path))
        if route is None:
            route = self._routes.get((request.method, None, request.url.path))
        if route is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        response = route(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    def body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


@pytest.fixture
def config() -> ClientConfig:
    """Return client configuration pointing at the test hosts."""
    return ClientConfig(
        local_base_url=LOCAL_URL,
        hosted_base_url=HOSTED_URL,
        default_endpoint=Endpoint.LOCAL,
        accepted_extensions=[".pdf", ".docx", ".xlsx"],
    )


@pytest.fixture
def alice() -> Identity:
    return Identity(uid="alice", email="alice@example.com")


@pytest.fixture
def auth(alice: Identity) -> FakeAuthProvider:
    """Return a fake auth provider already signed in as alice."""
    return FakeAuthProvider(identity=alice)


@pytest.fixture
def signed_out_auth() -> FakeAuthProvider:
    return FakeAuthProvider()


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
async def controller(
    auth: FakeAuthProvider, config: ClientConfig, backend: RecordingBackend
) -> AsyncGenerator[AppController]:
    """Create a controller over the fake auth provider and backend.

    Yields:
        AppController that is closed after the test.
    """
    app_controller = AppController(auth, config=config, transport=backend.transport)
    yield app_controller
    await app_controller.aclose()


@pytest.fixture
def devserver_app() -> FastAPI:
    """Return a development backend with empty storage."""
    return create_app()


@pytest.fixture
async def devserver_client(devserver_app: FastAPI) -> AsyncGenerator[httpx.AsyncClient]:
    """Create async HTTP client for the development backend.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = httpx.ASGITransport(app=devserver_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
