"""Shared fixtures: HTML fixture pages, a fake transport and an aiohttp server."""

import asyncio
import threading
import time
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from aiohttp import web

from fennec.client import FennecClient
from fennec.config import ClientConfig
from tests.utils import FakeTransport, SleepRecorder, find_free_port

FIXTURES = Path(__file__).parent / "fixtures"


def read_fixture(theme: str, name: str) -> str:
    """Read ``tests/fixtures/<theme>/<name>.html``."""
    return (FIXTURES / theme / f"{name}.html").read_text(encoding="utf-8")


@pytest.fixture
def fixture_html() -> Callable[[str, str], str]:
    """Loader for the saved HTML pages under tests/fixtures/."""
    return read_fixture


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def make_client(
    fake_transport: FakeTransport, sleeper: SleepRecorder
) -> Callable[..., FennecClient]:
    """Factory for clients wired to the fake transport and sleep recorder."""

    def build(**config: object) -> FennecClient:
        settings = {"cookies": "a=1; b=2", "transport": fake_transport, **config}
        return FennecClient(ClientConfig(**settings), sleep=sleeper)

    return build


# =============================================================================
# aiohttp test server
# =============================================================================


class AioHttpTestServer:
    """Wrapper to run aiohttp server in a background thread."""

    def __init__(self, app: web.Application, port: int) -> None:
        self.app = app
        self.port = port
        self.host = "127.0.0.1"
        self._loop: asyncio.AbstractEventLoop | None = None
        self._runner: web.AppRunner | None = None
        self._thread: threading.Thread | None = None

    @property
    def url(self) -> str:
        """Get the base URL of the server."""
        return f"http://{self.host}:{self.port}"

    def start(self) -> None:
        """Start the server in a background thread."""
        self._thread = threading.Thread(target=self._run_server, daemon=True)
        self._thread.start()
        # Give the server time to start
        time.sleep(0.1)

    def _run_server(self) -> None:
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)

        async def start() -> None:
            self._runner = web.AppRunner(self.app)
            await self._runner.setup()
            site = web.TCPSite(self._runner, self.host, self.port)
            await site.start()

        self._loop.run_until_complete(start())
        self._loop.run_forever()

    def stop(self) -> None:
        """Stop the server and clean up resources."""
        if self._loop and self._runner:
            runner = self._runner
            future = asyncio.run_coroutine_threadsafe(runner.cleanup(), self._loop)
            future.result(timeout=2.0)

        if self._loop:
            self._loop.call_soon_threadsafe(self._loop.stop)

        if self._thread:
            self._thread.join(timeout=2.0)


async def echo_handler(request: web.Request) -> web.Response:
    """Describe the request back as a tiny HTML page."""
    form = await request.post()
    items = ",".join(form.getall("items[]", []))
    fields = ";".join(f"{key}={value}" for key, value in form.items())
    return web.Response(
        text=(
            "<html><body>"
            f'<p id="method">{request.method}</p>'
            f'<p id="cookie">{request.headers.get("Cookie", "")}</p>'
            f'<p id="items">{items}</p>'
            f'<p id="fields">{fields}</p>'
            "</body></html>"
        ),
        content_type="text/html",
    )


async def status_handler(request: web.Request) -> web.Response:
    return web.Response(
        status=int(request.match_info["status"]),
        text="<html><body><h1>Nope</h1></body></html>",
        content_type="text/html",
    )


def create_app() -> web.Application:
    app = web.Application()
    app.router.add_route("*", "/echo/", echo_handler)
    app.router.add_get("/status/{status}/", status_handler)
    return app


@pytest.fixture
def echo_server() -> Generator[AioHttpTestServer, None, None]:
    """Start an aiohttp server that echoes requests back as HTML.

    Yields:
        AioHttpTestServer instance with the echo app running.
    """
    server = AioHttpTestServer(create_app(), find_free_port())
    server.start()
    yield server
    server.stop()
