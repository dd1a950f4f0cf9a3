from typing import Any, Optional
import asyncio, logging

import requests

from meower.cloudlink import Socket
from meower.cloudlink.client import TransportFactory
from meower.config import Settings, load_settings
from meower.entities import HOME, LIVECHAT, Chat
from meower.errors import ShapeError
from meower.rest_api import RestApi
from meower.uploads import Uploads
from meower.utils import log


class Client:
    """
    A logged in Meower session: the REST API, the cloudlink socket and the uploads server.

    Build one with Client.login or Client.signup.
    """

    def __init__(self, api: RestApi, socket: Socket, uploads: Uploads):
        self.api = api
        self.socket = socket
        self.uploads = uploads

        self._wire_cache()

    def _wire_cache(self):
        @self.socket.on("auth")
        def cache_auth_chats(payload: dict[str, Any]):
            cached = 0
            for chat in payload.get("chats", []):
                try:
                    self.api.cache_chat(chat)
                except ShapeError:
                    continue
                cached += 1
            log(f"Cached {cached} chat(s) from auth", logging.DEBUG)

        @self.socket.on("create_chat")
        def cache_new_chat(chat: Chat):
            self.api.cache_chat(chat.raw)

        # Partial updates can't be merged safely, so the next get_chat refetches
        @self.socket.on("update_chat")
        def evict_updated_chat(val: dict[str, Any]):
            self._evict_chat(val["_id"])

        @self.socket.on("delete_chat")
        def evict_deleted_chat(val: dict[str, Any]):
            self._evict_chat(val["chat_id"])

    def _evict_chat(self, chat_id: str):
        # home and livechat never need a network round trip
        if chat_id in (HOME["_id"], LIVECHAT["_id"]):
            return
        self.api.chat_cache.pop(chat_id, None)

    @staticmethod
    def _settings(settings: Optional[Settings], **overrides: Optional[str]) -> Settings:
        settings = settings if settings is not None else load_settings()
        return settings.model_copy(update={k: v for k, v in overrides.items() if v is not None})

    @classmethod
    async def _connect(
        cls,
        api: RestApi,
        settings: Settings,
        transport_factory: Optional[TransportFactory],
        wait_for_auth: bool,
        auth_timeout: Optional[float]
    ) -> "Client":
        socket = await Socket.connect(
            settings.socket_url,
            api.session,
            transport_factory=transport_factory,
            ping_interval=settings.ping_interval
        )

        # Registered before the receive loop gets a chance to run
        client = cls(api, socket, Uploads(settings.uploads_url, api.session))
        if wait_for_auth:
            auth = socket.wait_for("auth")
            await asyncio.wait_for(auth, auth_timeout)

        return client

    @classmethod
    async def login(
        cls,
        username: str,
        password: str,
        api_url: Optional[str] = None,
        socket_url: Optional[str] = None,
        uploads_url: Optional[str] = None,
        http: Optional[requests.Session] = None,
        transport_factory: Optional[TransportFactory] = None,
        settings: Optional[Settings] = None,
        auth_timeout: Optional[float] = None
    ) -> "Client":
        """
        Login, connect to the socket and wait for the server's auth packet.

        The password may also be an existing token. Urls that aren't given come from the
        environment (see meower.config).
        """

        settings = cls._settings(settings, api_url=api_url, socket_url=socket_url, uploads_url=uploads_url)
        api = await RestApi.login(username, password, settings.api_url, http=http, timeout=settings.http_timeout)
        return await cls._connect(api, settings, transport_factory, True, auth_timeout)

    @classmethod
    async def signup(
        cls,
        username: str,
        password: str,
        captcha: str,
        api_url: Optional[str] = None,
        socket_url: Optional[str] = None,
        uploads_url: Optional[str] = None,
        http: Optional[requests.Session] = None,
        transport_factory: Optional[TransportFactory] = None,
        settings: Optional[Settings] = None
    ) -> "Client":
        """Create an account and connect to the socket with the token from the signup response."""

        settings = cls._settings(settings, api_url=api_url, socket_url=socket_url, uploads_url=uploads_url)
        api = await RestApi.signup(
            username,
            password,
            captcha,
            settings.api_url,
            http=http,
            timeout=settings.http_timeout
        )
        return await cls._connect(api, settings, transport_factory, False, None)

    async def close(self):
        await self.socket.disconnect()
