from enum import IntEnum
from typing import Optional, Union
from urllib.parse import quote

from meower.models import ApiPost, ApiReaction, PostBody, ReportBody, parse_record
from meower.session import ApiSession


class PostType(IntEnum):
    NORMAL = 1  # home and chats
    INBOX = 2


def messages_endpoint(chat_id: str) -> str:
    # Home has its own top-level endpoint
    if chat_id == "home":
        return "/home"
    return f"/posts/{chat_id}"


class Post:
    def __init__(self, session: ApiSession, data: Union[dict, ApiPost]):
        self._session = session
        self._raw: ApiPost = parse_record(ApiPost, data, "data is not a post")
        self._assign_data()

    def _assign_data(self):
        self.id = self._raw.id
        self.pinned = self._raw.pinned
        self.deleted = self._raw.isDeleted
        self.content = self._raw.p
        self.chat_id = self._raw.post_origin
        self.timestamp = self._raw.t.e
        self.type = self._raw.type
        self.username = self._raw.u
        self.attachments = self._raw.attachments
        self.replies = [Post(self._session, reply) for reply in self._raw.reply_to if reply is not None]
        self.stickers = self._raw.stickers
        self.reactions = self._raw.reactions

    def _snapshot(self, data: dict):
        # Validate before touching any state
        self._raw = parse_record(ApiPost, data, "response is not a post")
        self._assign_data()

    @property
    def raw(self) -> ApiPost:
        return self._raw

    def __repr__(self):
        return f"<Post {self.id} by {self.username} in {self.chat_id}>"

    async def delete(self):
        await self._session.call("delete", "/posts", "failed to delete post", params={"id": self.id})

    async def pin(self):
        data = await self._session.call("post", f"/posts/{self.id}/pin", "failed to pin post")
        self._snapshot(data)

    async def unpin(self):
        data = await self._session.call("delete", f"/posts/{self.id}/pin", "failed to unpin post")
        self._snapshot(data)

    async def report(self, reason: str = "No reason provided", comment: str = ""):
        body = ReportBody(reason=reason, comment=comment)
        await self._session.call("post", f"/posts/{self.id}/report", "failed to report post", json=body.model_dump())

    async def update(
        self,
        content: Optional[str] = None,
        attachments: Optional[list[str]] = None,
        nonce: Optional[str] = None
    ):
        body = PostBody(
            content=(content if content is not None else self.content),
            attachments=(attachments if attachments is not None else [a.id for a in self.attachments]),
            nonce=nonce
        )
        data = await self._session.call(
            "patch",
            "/posts",
            "failed to update post",
            params={"id": self.id},
            json=body.model_dump(exclude_none=True, include={"content", "attachments", "nonce"})
        )
        self._snapshot(data)

    async def reply(self, content: Union[str, PostBody]) -> "Post":
        body = PostBody(content=content) if isinstance(content, str) else content.model_copy()
        body.reply_to = [self.id] + [i for i in (body.reply_to or []) if i != self.id]

        data = await self._session.call(
            "post",
            messages_endpoint(self.chat_id),
            "failed to send reply",
            json=body.model_dump(exclude_none=True)
        )
        return Post(self._session, data)

    def _find_reaction(self, emoji: str) -> int:
        for i, reaction in enumerate(self.reactions):
            if reaction.emoji == emoji:
                return i
        return -1

    async def react(self, emoji: str):
        await self._session.call(
            "post",
            f"/posts/{self.id}/reactions/{quote(emoji, safe='')}",
            "failed to add reaction"
        )

        # The endpoint returns no post, so update the local reactions
        index = self._find_reaction(emoji)
        if index == -1:
            self.reactions.append(ApiReaction(emoji=emoji, count=1, user_reacted=True))
        else:
            self.reactions[index].count += 1
            self.reactions[index].user_reacted = True

    async def remove_reaction(self, emoji: str):
        await self._session.call(
            "delete",
            f"/posts/{self.id}/reactions/{quote(emoji, safe='')}/@me",
            "failed to remove reaction"
        )

        index = self._find_reaction(emoji)
        if index == -1:
            return
        self.reactions[index].count -= 1
        self.reactions[index].user_reacted = False
