from copy import deepcopy
from typing import Any, Optional
import logging

import requests

from meower.entities import Chat, Post, User, HOME, LIVECHAT
from meower.errors import ApiError
from meower.models import (
    ApiChat,
    ApiRecord,
    ChatBody,
    Credentials,
    Statistics,
    parse_record
)
from meower.session import ApiSession
from meower.utils import log


class RestApi:
    """
    Access to the Meower REST API.

    Keeps three identity caches (chats, posts and users by id) holding raw records. Getters
    consult them before going to the network; wrappers handed out never share state with them.
    """

    def __init__(self, session: ApiSession, account: dict[str, Any]):
        self.session = session
        self.api_user = User(session, account)

        self.chat_cache: dict[str, dict[str, Any]] = {}
        self.post_cache: dict[str, dict[str, Any]] = {}
        self.user_cache: dict[str, dict[str, Any]] = {}

        # home and livechat always exist
        self.chat_cache["home"] = deepcopy(HOME)
        self.chat_cache["livechat"] = deepcopy(LIVECHAT)

    @property
    def api_url(self) -> str:
        return self.session.api_url

    @property
    def api_token(self) -> Optional[str]:
        return self.session.token

    def cache_chat(self, record: ApiRecord | dict[str, Any]) -> str:
        """Validate a chat record and store a copy of it. Returns the chat ID."""

        chat = parse_record(ApiChat, record, "data is not a chat")
        self.chat_cache[chat.id] = chat.dump()
        return chat.id

    async def get_chat(self, chat_id: str) -> Chat:
        cached = self.chat_cache.get(chat_id)
        if cached:
            return Chat(self.session, deepcopy(cached))

        data = await self.session.call("get", f"/chats/{chat_id}", "failed to get chat")
        chat = Chat(self.session, data)
        self.chat_cache[chat_id] = chat.raw.dump()
        return chat

    async def get_chats(self) -> list[Chat]:
        chats = await self.session.autoget("/chats", "failed to fetch chats")

        # Sentinel chats are always appended, even if the server already sent them
        chats.append(deepcopy(self.chat_cache.get("home", HOME)))
        chats.append(deepcopy(self.chat_cache.get("livechat", LIVECHAT)))

        return [Chat(self.session, chat) for chat in chats]

    async def create_chat(
        self,
        nickname: str,
        icon: Optional[str] = None,
        icon_color: Optional[str] = None,
        allow_pinning: bool = False
    ) -> Chat:
        body = ChatBody(nickname=nickname, icon=icon, icon_color=icon_color, allow_pinning=allow_pinning)
        data = await self.session.call(
            "post",
            "/chats",
            "failed to create chat",
            json=body.model_dump(exclude_none=True)
        )
        chat = Chat(self.session, data)
        self.chat_cache[chat.id] = chat.raw.dump()
        return chat

    async def get_post(self, post_id: str) -> Post:
        cached = self.post_cache.get(post_id)
        if cached:
            return Post(self.session, deepcopy(cached))

        data = await self.session.call("get", "/posts", "failed to get post", params={"id": post_id})
        post = Post(self.session, data)
        self.post_cache[post_id] = post.raw.dump()
        return post

    async def get_user(self, username: str) -> User:
        cached = self.user_cache.get(username)
        if cached:
            return User(self.session, deepcopy(cached))

        data = await self.session.call("get", f"/users/{username}", "failed to get user")
        user = User(self.session, data)
        self.user_cache[username] = user.raw.dump()
        return user

    async def get_home(self, page: int = 1) -> list[Post]:
        return await (await self.get_chat("home")).get_messages(page)

    async def get_inbox(self, page: int = 1) -> list[Post]:
        posts = await self.session.autoget("/inbox", "failed to fetch inbox", params={"page": page})
        return [Post(self.session, post) for post in posts]

    async def search_users(self, query: str, page: int = 1) -> list[User]:
        users = await self.session.autoget("/search/users/", "failed to search users", params={"q": query, "page": page})
        return [User(self.session, user) for user in users]

    async def get_statistics(self) -> Statistics:
        data = await self.session.call("get", "/statistics", "failed to get statistics")
        try:
            return Statistics.model_validate(data)
        except ValueError as e:
            raise ApiError("failed to get statistics", data) from e

    @classmethod
    async def _authenticate(cls, session: ApiSession, endpoint: str, credentials: Credentials, error_message: str) -> "RestApi":
        data = await session.call(
            "post",
            endpoint,
            error_message,
            json=credentials.model_dump(exclude_none=True),
            auth=False
        )
        if not isinstance(data, dict) or not isinstance(data.get("token"), str):
            raise ApiError(error_message, data)

        session.token = data["token"]
        rest = cls(session, data.get("account"))
        log(f"Authenticated as {rest.api_user.username}", logging.DEBUG)
        return rest

    @classmethod
    async def login(
        cls,
        username: str,
        password: str,
        api_url: str,
        http: Optional[requests.Session] = None,
        timeout: float = 10
    ) -> "RestApi":
        """Login with a username and a password (or an existing token)."""

        return await cls._authenticate(
            ApiSession(api_url, http=http, timeout=timeout),
            "/auth/login",
            Credentials(username=username, password=password),
            "failed to login"
        )

    @classmethod
    async def signup(
        cls,
        username: str,
        password: str,
        captcha: str,
        api_url: str,
        http: Optional[requests.Session] = None,
        timeout: float = 10
    ) -> "RestApi":
        return await cls._authenticate(
            ApiSession(api_url, http=http, timeout=timeout),
            "/signup",
            Credentials(username=username, password=password, captcha=captcha),
            "failed to signup"
        )
