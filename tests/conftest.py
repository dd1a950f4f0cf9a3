"""Test configuration and fixtures for the Meower client tests."""
import asyncio
from json import dumps, loads
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlparse

import pytest
import pytest_asyncio
import requests
from websockets.protocol import State

from meower.cloudlink import Socket
from meower.session import ApiSession

from support import API_URL, SOCKET_URL


@dataclass
class Call:
    method: str
    url: str
    path: str
    headers: dict
    json: Any = None
    params: Optional[dict] = None
    files: Optional[dict] = None


class FakeHttp:
    """Stands in for requests.Session. Routes are keyed by method and url path."""

    def __init__(self):
        self.routes = {}
        self.calls: list[Call] = []

    def route(self, method, path, body=None, status=200):
        self.routes[(method.upper(), path)] = (status, body)

    def request(self, method, url, headers=None, timeout=None, json=None, params=None, files=None):
        path = urlparse(url).path
        self.calls.append(Call(method, url, path, dict(headers or {}), json, params, files))

        status, body = self.routes.get((method, path), (404, {"error": True, "type": "notFound"}))
        resp = requests.Response()
        resp.status_code = status
        resp.encoding = "utf-8"
        resp._content = b"" if body is None else dumps(body).encode()
        return resp


class FakeTransport:
    """In-memory websocket: frames fed by the test come out of async iteration."""

    def __init__(self, url):
        self.url = url
        self.state = State.OPEN
        self.sent = []
        self._inbox = asyncio.Queue()

    def feed(self, packet):
        self._inbox.put_nowait(packet if isinstance(packet, str) else dumps(packet))

    def fail(self, exc):
        self._inbox.put_nowait(exc)

    def server_close(self):
        self.state = State.CLOSED
        self._inbox.put_nowait(None)

    async def send(self, data):
        if self.state != State.OPEN:
            raise ConnectionResetError("transport is closed")
        self.sent.append(loads(data))

    async def close(self):
        self.state = State.CLOSED
        self._inbox.put_nowait(None)

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self._inbox.get()
        if item is None:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item


class FakeServer:
    """A transport factory that remembers every transport it opened."""

    def __init__(self):
        self.transports: list[FakeTransport] = []
        self.greeting = []

    async def connect(self, url):
        transport = FakeTransport(url)
        for packet in self.greeting:
            transport.feed(packet)
        self.transports.append(transport)
        return transport

    @property
    def transport(self) -> FakeTransport:
        return self.transports[-1]


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def session(http):
    return ApiSession(API_URL, token="token", http=http)


@pytest.fixture
def server():
    return FakeServer()


@pytest_asyncio.fixture
async def socket(session, server):
    sock = await Socket.connect(SOCKET_URL, session, transport_factory=server.connect)
    yield sock
    await sock.disconnect()
