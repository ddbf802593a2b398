"""Test utilities shared by the fennec test suite.

This module provides the fake transport, a sleep recorder standing in for
asyncio.sleep, and helpers for draining paginators.
"""

import socket
from collections.abc import AsyncIterator
from contextlib import closing
from typing import Any

from fennec.common.request_manager import SITE_ROOT
from fennec.data_types import TransportOptions, TransportResponse


class FakeTransport:
    """Transport serving canned responses and recording every request.

    Responses registered for a path are served in order; the last one is
    repeated once the others are used up. Unknown paths get a 404.

    Example:
        transport = FakeTransport().add("/view/1/", "<html>...</html>")
        client = FennecClient(ClientConfig(transport=transport))
    """

    def __init__(self) -> None:
        self.responses: dict[str, list[TransportResponse]] = {}
        self.calls: list[tuple[str, TransportOptions]] = []

    def add(self, path: str, body: str, status: int = 200) -> "FakeTransport":
        url = path if path.startswith("http") else f"{SITE_ROOT}{path}"
        self.responses.setdefault(url, []).append(
            TransportResponse(status_code=status, body=body)
        )
        return self

    @property
    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]

    async def issue(
        self, url: str, options: TransportOptions
    ) -> TransportResponse:
        self.calls.append((url, options))
        queued = self.responses.get(url)
        if not queued:
            return TransportResponse(status_code=404, body="")
        if len(queued) > 1:
            return queued.pop(0)
        return queued[0]


class SleepRecorder:
    """Stands in for asyncio.sleep and records the requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


async def collect_batches(batches: AsyncIterator[list[Any]]) -> list[list[Any]]:
    """Drain a paginator, keeping the batch boundaries."""
    return [batch async for batch in batches]


def find_free_port() -> int:
    """Find a free port on localhost.

    Returns:
        An available port number.
    """
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]
