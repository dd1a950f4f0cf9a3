from enum import IntEnum
from typing import Optional, Union

from meower.entities.posts import Post, messages_endpoint
from meower.errors import NotSupported
from meower.models import ApiChat, ChatBody, PostBody, parse_record
from meower.session import ApiSession


class ChatType(IntEnum):
    CHAT = 0
    DM = 1


def sentinel_chat(chat_id: str) -> dict:
    return {
        "_id": chat_id,
        "allow_pinning": False,
        "created": 0,
        "deleted": False,
        "icon": "",
        "icon_color": "",
        "last_active": 0,
        "members": [],
        "nickname": chat_id,
        "owner": "",
        "type": ChatType.CHAT.value
    }


HOME = sentinel_chat("home")
LIVECHAT = sentinel_chat("livechat")


class Chat:
    def __init__(self, session: ApiSession, data: Union[dict, ApiChat]):
        self._session = session
        self._raw: ApiChat = parse_record(ApiChat, data, "data is not a chat")
        self._assign_data()

    def _assign_data(self):
        self.id = self._raw.id
        self.allow_pinning = self._raw.allow_pinning
        self.created = self._raw.created
        self.deleted = self._raw.deleted
        self.icon = self._raw.icon
        self.icon_color = self._raw.icon_color
        self.last_active = self._raw.last_active
        self.members = self._raw.members
        self.nickname = self._raw.nickname
        self.owner = self._raw.owner
        self.type = self._raw.type

    def _snapshot(self, data: dict):
        self._raw = parse_record(ApiChat, data, "response is not a chat")
        self._assign_data()

    @property
    def raw(self) -> ApiChat:
        return self._raw

    def __repr__(self):
        return f"<Chat {self.id} ({self.nickname})>"

    async def leave(self):
        await self._session.call("delete", f"/chats/{self.id}", "failed to leave chat")

    async def update(
        self,
        nickname: Optional[str] = None,
        icon: Optional[str] = None,
        icon_color: Optional[str] = None,
        allow_pinning: Optional[bool] = None
    ):
        # Unset options keep their current value
        body = ChatBody(
            nickname=(nickname if nickname is not None else self.nickname),
            icon=(icon if icon is not None else self.icon),
            icon_color=(icon_color if icon_color is not None else self.icon_color),
            allow_pinning=(allow_pinning if allow_pinning is not None else self.allow_pinning)
        )
        data = await self._session.call(
            "patch",
            f"/chats/{self.id}",
            "failed to update chat",
            json=body.model_dump(exclude_none=True)
        )
        self._snapshot(data)

    async def add_member(self, username: str):
        data = await self._session.call("put", f"/chats/{self.id}/members/{username}", "failed to add member")
        self._snapshot(data)

    async def remove_member(self, username: str):
        data = await self._session.call("delete", f"/chats/{self.id}/members/{username}", "failed to remove member")
        self._snapshot(data)

    async def transfer_ownership(self, username: str):
        data = await self._session.call(
            "post",
            f"/chats/{self.id}/members/{username}/transfer",
            "failed to transfer chat ownership"
        )
        self._snapshot(data)

    async def send_typing_indicator(self):
        if self.id == "home":
            endpoint = "/home/typing"
        else:
            endpoint = f"/chats/{self.id}/typing"
        await self._session.call("post", endpoint, "failed to send typing indicator")

    async def send_message(self, content: Union[str, PostBody]) -> Post:
        body = PostBody(content=content) if isinstance(content, str) else content
        data = await self._session.call(
            "post",
            messages_endpoint(self.id),
            "failed to send message",
            json=body.model_dump(exclude_none=True)
        )
        return Post(self._session, data)

    async def search(self, query: str, page: int = 1) -> list[Post]:
        if self.id != "home":
            raise NotSupported("search is only available in home")

        posts = await self._session.autoget("/search/home/", "failed to search", params={"q": query, "page": page})
        return [Post(self._session, post) for post in posts]

    async def get_messages(self, page: int = 1) -> list[Post]:
        posts = await self._session.autoget(messages_endpoint(self.id), "failed to fetch messages", params={"page": page})
        return [Post(self._session, post) for post in posts]

    async def get_pins(self, page: int = 1) -> list[Post]:
        posts = await self._session.autoget(f"/chats/{self.id}/pins", "failed to fetch pinned posts", params={"page": page})
        return [Post(self._session, post) for post in posts]
