from json import dumps
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import urlencode
from uuid import uuid4
import asyncio, logging

import websockets
from websockets.exceptions import WebSocketException
from websockets.protocol import State

from meower.cloudlink.packets import handle_frame
from meower.cloudlink.types import (
    PROTOCOL_VERSION,
    CloudlinkPacket,
    SocketState,
    event_aliases,
    ok_statuscodes
)
from meower.errors import SocketConnectionError, StatusCodeError
from meower.events import EventEmitter
from meower.session import ApiSession
from meower.utils import full_stack, log


TransportFactory = Callable[[str], Awaitable[Any]]


class Socket(EventEmitter):
    """
    A connection to the Meower cloudlink server.

    Events: socket_open, socket_close, socket_error, packet, auth, create_post, edit_post,
    delete_post, inbox_message, typing, ulist, reaction_add, reaction_remove, create_chat,
    update_chat, delete_chat, update_relationship.
    """

    aliases = event_aliases

    def __init__(
        self,
        socket_url: str,
        session: ApiSession,
        transport_factory: Optional[TransportFactory] = None,
        ping_interval: float = 30
    ):
        super().__init__()

        self.socket_url = socket_url.rstrip("/")
        self.session = session
        self.transport_factory = transport_factory if transport_factory is not None else websockets.connect
        self.ping_interval = ping_interval

        self.state = SocketState.DISCONNECTED
        self.websocket = None
        self.ulist: list[str] = []

        self._receiver: Optional[asyncio.Task] = None
        self._heartbeat: Optional[asyncio.Task] = None
        self._listeners: dict[str, asyncio.Future] = {}

    @classmethod
    async def connect(
        cls,
        socket_url: str,
        session: ApiSession,
        transport_factory: Optional[TransportFactory] = None,
        ping_interval: float = 30
    ) -> "Socket":
        """Open a connection. Raises SocketConnectionError if the transport never opens."""

        socket = cls(socket_url, session, transport_factory=transport_factory, ping_interval=ping_interval)
        await socket._open()
        return socket

    @property
    def api_token(self) -> Optional[str]:
        return self.session.token

    @api_token.setter
    def api_token(self, token: str):
        self.session.token = token

    @property
    def url(self) -> str:
        return f"{self.socket_url}/?{urlencode({'v': PROTOCOL_VERSION, 'token': self.api_token or ''})}"

    @property
    def is_open(self) -> bool:
        return (
            self.state == SocketState.OPEN and
            self.websocket is not None and
            getattr(self.websocket, "state", None) == State.OPEN
        )

    async def _open(self):
        self.state = SocketState.CONNECTING
        try:
            websocket = await self.transport_factory(self.url)
        except (OSError, WebSocketException, asyncio.TimeoutError) as e:
            self.state = SocketState.CLOSED
            raise SocketConnectionError(f"failed to connect to {self.socket_url}", repr(e)) from e

        self.websocket = websocket
        self.state = SocketState.OPEN
        self._receiver = asyncio.ensure_future(self._receive_loop(websocket))
        self._heartbeat = asyncio.ensure_future(self._heartbeat_loop(websocket))

        log(f"Connected to {self.socket_url}")
        self.emit("socket_open")

    async def _receive_loop(self, websocket):
        try:
            async for message in websocket:
                handle_frame(self, message)
        except (OSError, WebSocketException) as e:
            log(f"Socket error: {e!r}", logging.WARNING)
            self.emit("socket_error", e)
        except Exception as e:
            log(f"Receive loop failed:\n{full_stack()}", logging.ERROR)
            self.emit("socket_error", e)
            await websocket.close()
        finally:
            self._closed(websocket)

    def _closed(self, websocket):
        # A reconnect may already have replaced this transport
        if websocket is not self.websocket or self.state == SocketState.CLOSED:
            return

        self.state = SocketState.CLOSED
        self._stop_heartbeat()
        log(f"Disconnected from {self.socket_url}")
        self.emit("socket_close")

    async def _heartbeat_loop(self, websocket):
        while True:
            await asyncio.sleep(self.ping_interval)
            if websocket is not self.websocket or not self.is_open:
                continue
            try:
                await self.send({"cmd": "ping", "val": ""})
            except (OSError, WebSocketException) as e:
                log(f"Failed to send ping: {e!r}", logging.DEBUG)

    def _stop_heartbeat(self):
        if self._heartbeat is not None:
            self._heartbeat.cancel()
            self._heartbeat = None

    async def send(self, packet: CloudlinkPacket):
        """Send a packet. Transport errors propagate; nothing is queued while disconnected."""

        if self.websocket is None:
            raise SocketConnectionError("socket is not connected")
        await self.websocket.send(dumps(packet))

    async def request(self, cmd: str, val: Any = "", timeout: Optional[float] = None) -> CloudlinkPacket:
        """Send a packet with a listener ID and wait for the packet that answers it."""

        listener = uuid4().hex
        future = asyncio.get_running_loop().create_future()
        self._listeners[listener] = future
        try:
            await self.send({"cmd": cmd, "val": val, "listener": listener})
            packet = await asyncio.wait_for(future, timeout)
        finally:
            self._listeners.pop(listener, None)

        if packet.get("cmd") == "statuscode" and packet.get("val") not in ok_statuscodes:
            raise StatusCodeError(packet.get("val"), packet)
        return packet

    def resolve_listener(self, packet: CloudlinkPacket):
        future = self._listeners.pop(packet["listener"], None)
        if future is not None and not future.done():
            future.set_result(packet)

    async def disconnect(self):
        if self.websocket is None or self.state == SocketState.CLOSED:
            return

        websocket = self.websocket
        self.state = SocketState.CLOSING
        self._stop_heartbeat()
        await websocket.close()

        if self._receiver is not None:
            self._receiver.cancel()
            await asyncio.gather(self._receiver, return_exceptions=True)
            self._receiver = None

        # No-op if the receive loop already saw the close
        self._closed(websocket)

    async def reconnect(self):
        """Tear down the current transport and open a new one with the stored url and token."""

        await self.disconnect()
        log(f"Reconnecting to {self.socket_url}")
        await self._open()
